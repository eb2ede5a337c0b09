import pytest

from insurance_client.core.activity_log import Severity
from insurance_client.core.config import Settings
from insurance_client.core.identity import AuthorizationStatus
from insurance_client.core.session import DISCONNECTED_LABEL, Session
from insurance_client.services.blockchain import create_session
from insurance_client.services.command_dispatcher import (
    CommandDispatcher,
    ConnectionStatus,
    ListingStatus,
)
from insurance_client.services.transaction_service import OutcomeStatus
from fakes import ADMIN, HOLDER, OTHER, FakeInsuranceContract, FakeWallet, ReconnectingContract, make_session


def _dispatcher(contract, wallet, activity_log):
    return CommandDispatcher(make_session(contract, wallet), activity_log, Settings())


def test_connect_sets_label_and_logs(contract, activity_log):
    dispatcher = _dispatcher(contract, FakeWallet([HOLDER]), activity_log)

    outcome = dispatcher.dispatch("connect")

    assert outcome.connected
    assert outcome.label == "Connected"
    assert dispatcher.session.connection_label == "Connected"
    assert outcome.identity.address == HOLDER
    assert activity_log.entries[0].message == "Wallet connected successfully!"


def test_connect_without_provider(contract, activity_log):
    dispatcher = _dispatcher(contract, None, activity_log)

    outcome = dispatcher.dispatch("connect")

    assert outcome.status is ConnectionStatus.PROVIDER_UNAVAILABLE
    assert outcome.label == "Wallet Not Found"
    assert activity_log.entries[0].severity is Severity.ERROR


def test_connect_declined_restores_label(contract, activity_log):
    dispatcher = _dispatcher(contract, FakeWallet(reject=True), activity_log)

    outcome = dispatcher.dispatch("connect")

    assert outcome.status is ConnectionStatus.USER_REJECTED
    assert outcome.label == DISCONNECTED_LABEL
    assert not dispatcher.session.is_connected


def test_connect_unexpected_error_is_reported(activity_log):
    def broken_factory(_wallet):
        raise RuntimeError("bad abi")

    dispatcher = CommandDispatcher(Session(wallet=FakeWallet(), contract_factory=broken_factory), activity_log)

    outcome = dispatcher.dispatch("connect")

    assert outcome.status is ConnectionStatus.FAILED
    assert "bad abi" in outcome.message


def test_connect_without_contract_address(activity_log):
    session = create_session(Settings())
    session.wallet = FakeWallet([HOLDER])
    dispatcher = CommandDispatcher(session, activity_log)

    outcome = dispatcher.dispatch("connect")

    assert outcome.status is ConnectionStatus.MISCONFIGURED
    assert outcome.label == "Contract Not Configured"
    assert "CONTRACT_ADDRESS" in outcome.message
    assert not dispatcher.session.is_connected


@pytest.mark.parametrize(
    "failure, status",
    [("reject", ConnectionStatus.USER_REJECTED), ("unreachable", ConnectionStatus.PROVIDER_UNAVAILABLE)],
)
def test_failed_reconnect_drops_previous_admin(contract, activity_log, failure, status):
    wallet = FakeWallet([ADMIN])
    dispatcher = _dispatcher(contract, wallet, activity_log)
    assert dispatcher.dispatch("connect_admin").authorization.authorized

    setattr(wallet, failure, True)
    outcome = dispatcher.dispatch("connect_admin")

    assert outcome.status is status
    assert not dispatcher.session.is_connected
    assert not dispatcher.session.is_admin
    assert dispatcher.session.authorization is None
    funded = dispatcher.dispatch("fund", amount="1")
    assert funded.status is OutcomeStatus.NOT_CONNECTED
    assert contract.transactions == []


def test_connect_admin_authorized(contract, activity_log):
    dispatcher = _dispatcher(contract, FakeWallet([ADMIN]), activity_log)

    outcome = dispatcher.dispatch("connect_admin")

    assert outcome.authorization.authorized
    assert outcome.label == "Admin: 0xaaaa...aaaa"
    assert activity_log.entries[0].message == "Admin connected successfully!"
    assert dispatcher.session.is_admin


def test_connect_admin_wrong_account(contract, activity_log):
    dispatcher = _dispatcher(contract, FakeWallet([HOLDER]), activity_log)

    outcome = dispatcher.dispatch("connect_admin")

    assert outcome.authorization.status is AuthorizationStatus.ACCESS_DENIED
    assert outcome.label == "Access Denied"
    assert activity_log.entries[0].severity is Severity.ERROR


def test_connect_admin_incompatible_contract_has_distinct_label(activity_log):
    dispatcher = _dispatcher(FakeInsuranceContract(accessors=()), FakeWallet([ADMIN]), activity_log)

    outcome = dispatcher.dispatch("connect_admin")

    assert outcome.authorization.status is AuthorizationStatus.CONTRACT_INCOMPATIBLE
    assert outcome.label == "Invalid Contract"
    assert outcome.message != "Access Denied"
    assert not dispatcher.session.is_admin


def test_connect_admin_reports_account_switch_during_check(activity_log):
    contract = ReconnectingContract()
    wallet = FakeWallet([ADMIN])
    dispatcher = CommandDispatcher(make_session(contract, wallet), activity_log, Settings())

    def switch_to_holder():
        wallet.accounts = [HOLDER]
        dispatcher.dispatch("connect")

    contract.on_authority_read = switch_to_holder
    outcome = dispatcher.dispatch("connect_admin")

    assert outcome.status is ConnectionStatus.FAILED
    assert outcome.authorization is None
    assert dispatcher.session.connection_label == "Connected"
    assert dispatcher.session.identity.address == HOLDER
    assert not dispatcher.session.is_admin
    assert dispatcher.dispatch("fund", amount="1").status is OutcomeStatus.UNAUTHORIZED


def test_admin_flow_end_to_end(contract, activity_log):
    dispatcher = _dispatcher(contract, FakeWallet([ADMIN]), activity_log)
    dispatcher.dispatch("connect_admin")

    issued = dispatcher.dispatch("issue_policy", holder=HOLDER, premium="1.5", coverage="10", duration="30")
    contract.add_claim(0, HOLDER)
    approved = dispatcher.dispatch("approve_claim", claim_id="0")
    paid = dispatcher.dispatch("pay_claim", claim_id="0")
    funded = dispatcher.dispatch("fund", amount="5")

    assert [o.status for o in (issued, approved, paid, funded)] == [OutcomeStatus.CONFIRMED] * 4
    listing = dispatcher.dispatch("refresh_admin_claims")
    assert listing.status is ListingStatus.OK
    assert listing.claims[0].status.value == "Paid"


def test_admin_claims_require_admin_rights(contract, activity_log):
    contract.add_policy(HOLDER)
    contract.add_claim(0, HOLDER)
    dispatcher = _dispatcher(contract, FakeWallet([HOLDER]), activity_log)

    dispatcher.dispatch("connect")
    listing = dispatcher.dispatch("refresh_admin_claims")
    assert listing.status is ListingStatus.UNAUTHORIZED
    assert listing.claims == []
    assert activity_log.entries[0].severity is Severity.ERROR

    dispatcher.dispatch("connect_admin")
    listing = dispatcher.dispatch("refresh_admin_claims")
    assert listing.status is ListingStatus.UNAUTHORIZED
    assert listing.error.startswith("Access denied")


def test_refresh_requires_connection(contract, activity_log):
    dispatcher = _dispatcher(contract, FakeWallet(), activity_log)

    outcome = dispatcher.dispatch("refresh")

    assert outcome.status is ListingStatus.NOT_CONNECTED
    assert activity_log.entries[0].message == "Please connect your wallet first."


def test_refresh_lists_policies_and_claims(contract, activity_log):
    contract.add_policy(HOLDER)
    contract.add_policy(OTHER)
    contract.add_claim(0, HOLDER)
    dispatcher = _dispatcher(contract, FakeWallet([HOLDER]), activity_log)
    dispatcher.dispatch("connect")

    outcome = dispatcher.dispatch("refresh")

    assert outcome.status is ListingStatus.OK
    assert [p.policy_id for p in outcome.policies] == [0]
    assert [c.claim_id for c in outcome.claims] == [0]
    messages = [entry.message for entry in activity_log.entries[:2]]
    assert messages == ["Policies and Claims refreshed successfully.", "Fetching latest policies and claims..."]


def test_refresh_failure_is_logged(contract, activity_log):
    contract.fail_read("nextPolicyId")
    dispatcher = _dispatcher(contract, FakeWallet([HOLDER]), activity_log)
    dispatcher.dispatch("connect")

    outcome = dispatcher.dispatch("refresh")

    assert outcome.status is ListingStatus.FAILED
    assert outcome.policies == []
    assert activity_log.entries[0].message.startswith("Error fetching data: ")


def test_listing_commands(contract, activity_log):
    contract.add_policy(HOLDER)
    dispatcher = _dispatcher(contract, FakeWallet([HOLDER]), activity_log)

    assert dispatcher.dispatch("list_policies").status is ListingStatus.NOT_CONNECTED
    dispatcher.dispatch("connect")
    assert len(dispatcher.dispatch("list_policies").policies) == 1
    assert dispatcher.dispatch("list_claims").claims == []


def test_unknown_command(contract, activity_log):
    dispatcher = _dispatcher(contract, FakeWallet(), activity_log)
    with pytest.raises(KeyError):
        dispatcher.dispatch("self_destruct")
    assert "pay_premium" in dispatcher.commands
