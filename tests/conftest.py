"""
Test configuration for the insurance contract client.

Ensures the project root is on sys.path so tests can import
`insurance_client.*` modules, and the tests directory so they can import
the in-memory fakes.
"""
import os
import sys


TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(TESTS_DIR)
for path in (PROJECT_ROOT, TESTS_DIR):
    if path not in sys.path:
        sys.path.insert(0, path)

import pytest

from insurance_client.core.activity_log import ActivityLog
from insurance_client.core.session import Session
from insurance_client.services.identity_service import IdentityResolver
from fakes import ADMIN, HOLDER, FakeInsuranceContract, FakeWallet, make_session


@pytest.fixture
def contract() -> FakeInsuranceContract:
    return FakeInsuranceContract()


@pytest.fixture
def activity_log() -> ActivityLog:
    return ActivityLog()


@pytest.fixture
def holder_session(contract) -> Session:
    """A session already connected as HOLDER."""
    session = make_session(contract, FakeWallet([HOLDER]))
    IdentityResolver().connect(session)
    return session


@pytest.fixture
def admin_session(contract) -> Session:
    """A session connected as ADMIN with a successful authority probe."""
    resolver = IdentityResolver()
    session = make_session(contract, FakeWallet([ADMIN]))
    identity = resolver.connect(session)
    resolver.authorize_admin(session, identity)
    return session
