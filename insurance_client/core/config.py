"""
Runtime configuration, read from environment variables.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_ABI_PATH = os.path.join(PACKAGE_DIR, "contracts", "insurance_abi.json")

DEFAULT_AUTHORITY_ACCESSORS: Tuple[str, str] = ("insurer", "owner")
DEFAULT_RECEIPT_TIMEOUT = 120.0
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_HOLDER_GAS_LIMIT = 300_000


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_accessors(name: str) -> Tuple[str, str]:
    raw = os.getenv(name)
    if not raw:
        return DEFAULT_AUTHORITY_ACCESSORS
    names = [part.strip() for part in raw.split(",") if part.strip()]
    if len(names) != 2:
        raise ValueError(f"{name} must name exactly two accessors, e.g. 'insurer,owner'")
    return names[0], names[1]


@dataclass(frozen=True)
class Settings:
    """Settings for one client process."""

    provider_url: Optional[str] = None
    contract_address: Optional[str] = None
    abi_path: str = DEFAULT_ABI_PATH
    authority_accessors: Tuple[str, str] = field(default=DEFAULT_AUTHORITY_ACCESSORS)
    fund_method: str = "fundContract"
    base_unit_decimals: int = 18
    currency_symbol: str = "ETH"
    # Whether aggregation reads slot `nextId` itself. Contracts that keep a
    # placeholder at the counter position rely on it.
    aggregation_inclusive_bound: bool = True
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    holder_gas_limit: Optional[int] = DEFAULT_HOLDER_GAS_LIMIT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        gas_raw = os.getenv("HOLDER_GAS_LIMIT")
        holder_gas_limit: Optional[int] = DEFAULT_HOLDER_GAS_LIMIT
        if gas_raw is not None:
            holder_gas_limit = int(gas_raw) if gas_raw.strip() else None

        return cls(
            provider_url=os.getenv("PROVIDER_URL") or None,
            contract_address=os.getenv("CONTRACT_ADDRESS") or None,
            abi_path=os.getenv("CONTRACT_ABI_PATH") or DEFAULT_ABI_PATH,
            authority_accessors=_env_accessors("AUTHORITY_ACCESSORS"),
            fund_method=os.getenv("FUND_METHOD", "fundContract"),
            base_unit_decimals=int(os.getenv("BASE_UNIT_DECIMALS", "18")),
            currency_symbol=os.getenv("CURRENCY_SYMBOL", "ETH"),
            aggregation_inclusive_bound=_env_bool("AGGREGATION_INCLUSIVE_BOUND", True),
            receipt_timeout=float(os.getenv("RECEIPT_TIMEOUT", str(DEFAULT_RECEIPT_TIMEOUT))),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))),
            holder_gas_limit=holder_gas_limit,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


__all__ = ["Settings", "DEFAULT_ABI_PATH", "DEFAULT_AUTHORITY_ACCESSORS"]
