import pytest

from insurance_client.core.config import DEFAULT_ABI_PATH, Settings


_ENV_NAMES = (
    "PROVIDER_URL",
    "CONTRACT_ADDRESS",
    "CONTRACT_ABI_PATH",
    "AUTHORITY_ACCESSORS",
    "FUND_METHOD",
    "BASE_UNIT_DECIMALS",
    "CURRENCY_SYMBOL",
    "AGGREGATION_INCLUSIVE_BOUND",
    "RECEIPT_TIMEOUT",
    "REQUEST_TIMEOUT",
    "HOLDER_GAS_LIMIT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()
    assert settings.provider_url is None
    assert settings.contract_address is None
    assert settings.abi_path == DEFAULT_ABI_PATH
    assert settings.authority_accessors == ("insurer", "owner")
    assert settings.fund_method == "fundContract"
    assert settings.base_unit_decimals == 18
    assert settings.aggregation_inclusive_bound is True
    assert settings.holder_gas_limit == 300_000
    assert settings.log_level == "INFO"


def test_overrides(monkeypatch):
    monkeypatch.setenv("PROVIDER_URL", "http://127.0.0.1:8545")
    monkeypatch.setenv("AUTHORITY_ACCESSORS", "owner, insurer")
    monkeypatch.setenv("AGGREGATION_INCLUSIVE_BOUND", "false")
    monkeypatch.setenv("HOLDER_GAS_LIMIT", "")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("CURRENCY_SYMBOL", "MATIC")

    settings = Settings.from_env()

    assert settings.provider_url == "http://127.0.0.1:8545"
    assert settings.authority_accessors == ("owner", "insurer")
    assert settings.aggregation_inclusive_bound is False
    assert settings.holder_gas_limit is None
    assert settings.log_level == "DEBUG"
    assert settings.currency_symbol == "MATIC"


def test_accessors_must_be_a_pair(monkeypatch):
    monkeypatch.setenv("AUTHORITY_ACCESSORS", "insurer")
    with pytest.raises(ValueError):
        Settings.from_env()
