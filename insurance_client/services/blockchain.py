"""
web3.py adapters for the wallet provider and the insurance contract.

These are the only classes that talk to the chain. Everything above them
works with plain Python values: checksum address strings, ints, bools and
dicts of decoded event arguments.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from web3 import Web3
from web3.logs import DISCARD

from insurance_client.core.config import Settings
from insurance_client.core.errors import (
    ContractNotConfigured,
    ProviderUnavailable,
    TransactionReverted,
    UserRejected,
)
from insurance_client.core.session import Session


logger = logging.getLogger(__name__)

# EIP-1193 / JSON-RPC error codes.
USER_REJECTED_CODE = 4001
METHOD_NOT_FOUND_CODE = -32601


def load_contract_abi(path: str) -> List[Dict[str, Any]]:
    """
    Load a contract ABI from a JSON file.

    Accepts either a bare ABI list or a build artifact with an "abi" key.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a contract ABI")
    return data


@dataclass(frozen=True)
class Settlement:
    """A mined transaction and the events the contract emitted in it."""

    tx_hash: str
    block_number: Optional[int] = None
    events: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def event(self, name: str) -> Optional[Dict[str, Any]]:
        return self.events.get(name)


class Web3WalletProvider:
    """Account access through a JSON-RPC endpoint that manages keys."""

    def __init__(self, web3: Web3) -> None:
        self.web3 = web3

    @classmethod
    def from_url(cls, provider_url: str, *, request_timeout: float) -> "Web3WalletProvider":
        provider = Web3.HTTPProvider(provider_url, request_kwargs={"timeout": request_timeout})
        return cls(Web3(provider))

    def request_accounts(self) -> List[str]:
        """
        Ask the provider for account access.

        Raises:
            ProviderUnavailable: If the endpoint cannot be reached or answers
                with an error other than a user rejection.
            UserRejected: If the account request is declined.
        """
        if not self.web3.is_connected():
            raise ProviderUnavailable("Wallet provider is not reachable")

        try:
            response = self.web3.provider.make_request("eth_requestAccounts", [])
        except Exception as exc:
            raise ProviderUnavailable(f"Wallet provider request failed: {exc}") from exc

        error = response.get("error") if isinstance(response, dict) else None
        if error:
            code = error.get("code") if isinstance(error, dict) else None
            message = error.get("message") if isinstance(error, dict) else str(error)
            if code == USER_REJECTED_CODE:
                raise UserRejected(message or "User rejected the request")
            if code != METHOD_NOT_FOUND_CODE:
                raise ProviderUnavailable(f"Wallet provider error: {message}")
            # Plain nodes do not implement eth_requestAccounts.
            logger.debug("eth_requestAccounts unsupported, falling back to eth_accounts")
            try:
                accounts = list(self.web3.eth.accounts)
            except Exception as exc:
                raise ProviderUnavailable(f"Wallet provider request failed: {exc}") from exc
        else:
            accounts = list(response.get("result") or [])

        return [Web3.to_checksum_address(account) for account in accounts]


class InsuranceContract:
    """Thin wrapper over a web3.py `Contract` for the insurance ABI."""

    def __init__(
        self,
        web3: Web3,
        address: str,
        abi: List[Dict[str, Any]],
        *,
        receipt_timeout: float,
    ) -> None:
        self.web3 = web3
        self.address = Web3.to_checksum_address(address)
        self._contract = web3.eth.contract(address=self.address, abi=abi)
        self._receipt_timeout = receipt_timeout
        self._event_names = [item["name"] for item in abi if item.get("type") == "event"]
        self._outputs = {
            item["name"]: item.get("outputs", [])
            for item in abi
            if item.get("type") == "function"
        }

    def call(self, method: str, *args: Any) -> Any:
        """Read-only call; multi-value returns come back keyed by output name."""
        result = getattr(self._contract.functions, method)(*args).call()
        return self._name_outputs(method, result)

    def transact(
        self,
        method: str,
        *args: Any,
        sender: str,
        value: Optional[int] = None,
        gas: Optional[int] = None,
    ) -> Settlement:
        """
        Send a state-changing call from `sender` and wait for its receipt.

        Raises:
            TransactionReverted: If the receipt reports a failed status.
        """
        tx_params: Dict[str, Any] = {"from": Web3.to_checksum_address(sender)}
        if value is not None:
            tx_params["value"] = value
        if gas is not None:
            tx_params["gas"] = gas

        tx_hash = getattr(self._contract.functions, method)(*args).transact(tx_params)
        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info("Submitted %s in %s, awaiting receipt", method, tx_hash_hex)

        receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
        if receipt.get("status") == 0:
            raise TransactionReverted(f"Transaction {tx_hash_hex} reverted")

        return Settlement(
            tx_hash=tx_hash_hex,
            block_number=receipt.get("blockNumber"),
            events=self._decode_events(receipt),
        )

    def _name_outputs(self, method: str, result: Any) -> Any:
        outputs = self._outputs.get(method) or []
        if (
            len(outputs) > 1
            and isinstance(result, (list, tuple))
            and all(output.get("name") for output in outputs)
        ):
            return {output["name"]: value for output, value in zip(outputs, result)}
        return result

    def _decode_events(self, receipt: Any) -> Dict[str, Dict[str, Any]]:
        events: Dict[str, Dict[str, Any]] = {}
        for name in self._event_names:
            try:
                processed = getattr(self._contract.events, name)().process_receipt(receipt, errors=DISCARD)
            except Exception as exc:
                logger.warning("Failed to decode %s event: %s", name, exc)
                continue
            if processed:
                events[name] = dict(processed[0]["args"])
        return events


def create_session(settings: Settings) -> Session:
    """
    Build the application's session from settings.

    Without `PROVIDER_URL` the session has no wallet and every connect attempt
    reports `ProviderUnavailable`. Without `CONTRACT_ADDRESS` it reports
    `ContractNotConfigured` once an account has been granted.
    """
    wallet: Optional[Web3WalletProvider] = None
    if settings.provider_url:
        wallet = Web3WalletProvider.from_url(
            settings.provider_url,
            request_timeout=settings.request_timeout,
        )

    def contract_factory(provider: Web3WalletProvider) -> InsuranceContract:
        if not settings.contract_address:
            raise ContractNotConfigured("CONTRACT_ADDRESS is not configured")
        return InsuranceContract(
            provider.web3,
            settings.contract_address,
            load_contract_abi(settings.abi_path),
            receipt_timeout=settings.receipt_timeout,
        )

    return Session(wallet=wallet, contract_factory=contract_factory)


__all__ = [
    "USER_REJECTED_CODE",
    "METHOD_NOT_FOUND_CODE",
    "load_contract_abi",
    "Settlement",
    "Web3WalletProvider",
    "InsuranceContract",
    "create_session",
]
