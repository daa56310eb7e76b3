from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, TypeVar

import structlog
from web3 import Web3

logger = structlog.get_logger(__name__)

T = TypeVar("T")

NATIVE_SYMBOL: Final[str] = "FRAX"
FAUCET_URL: Final[str] = "https://faucet.fraxtal.io"
ALTERNATE_RPC_URL: Final[str] = "https://fraxtal-testnet-rpc.publicnode.com"


class NetworkUnavailableError(RuntimeError):
    """Raised when a JSON-RPC read against the Fraxtal endpoint fails."""


@dataclass(frozen=True)
class NetworkStatus:
    chain_id: int
    block_number: int
    gas_price_wei: str  # decimal string, wei values overflow JSON numbers
    wallet_configured: bool
    wallet_address: str | None = None
    wallet_balance: str | None = None


class FraxtalProvider:
    """
    Read-only access to the Fraxtal testnet over JSON-RPC.

    Each read is a single RPC call with no retry. Failures surface as
    NetworkUnavailableError so callers never see a fabricated chain state.

    Attributes:
        w3 (Web3): Web3 client bound to the configured RPC URL
        account (LocalAccount | None): Wallet derived from the configured
            private key, if any
    """

    def __init__(
        self,
        rpc_url: str,
        chain_id: int,
        explorer_url: str = "",
        private_key: str = "",
        timeout: float = 15.0,
        w3: Web3 | None = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.configured_chain_id = chain_id
        self.explorer_url = explorer_url.rstrip("/")
        self.w3 = w3 or Web3(
            Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout})
        )
        self.account = self.w3.eth.account.from_key(private_key) if private_key else None
        self.logger = logger.bind(service="fraxtal")

    @property
    def address(self) -> str | None:
        return self.account.address if self.account else None

    def _read(self, method: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except Exception as e:
            self.logger.warning("rpc_call_failed", method=method, error=str(e))
            msg = f"{method} failed against {self.rpc_url}: {e}"
            raise NetworkUnavailableError(msg) from e

    def chain_id(self) -> int:
        return int(self._read("eth_chainId", lambda: self.w3.eth.chain_id))

    def block_number(self) -> int:
        return int(self._read("eth_blockNumber", lambda: self.w3.eth.block_number))

    def gas_price_wei(self) -> int:
        return int(self._read("eth_gasPrice", lambda: self.w3.eth.gas_price))

    def balance_wei(self, address: str) -> int:
        return int(
            self._read(
                "eth_getBalance",
                lambda: self.w3.eth.get_balance(Web3.to_checksum_address(address)),
            )
        )

    def network_status(self) -> NetworkStatus:
        """
        Read chain id, head block and gas price, plus the wallet balance when
        a wallet is configured.

        A failed balance read only omits the balance; any other failed read
        fails the whole status.

        Raises:
            NetworkUnavailableError: If a chain read fails
        """
        chain_id = self.chain_id()
        block_number = self.block_number()
        gas_price = self.gas_price_wei()

        if chain_id != self.configured_chain_id:
            self.logger.warning(
                "chain_id_mismatch",
                configured=self.configured_chain_id,
                reported=chain_id,
            )

        balance = None
        if self.address:
            try:
                wei = self.balance_wei(self.address)
                balance = f"{Web3.from_wei(wei, 'ether')} {NATIVE_SYMBOL}"
            except NetworkUnavailableError:
                balance = None

        return NetworkStatus(
            chain_id=chain_id,
            block_number=block_number,
            gas_price_wei=str(gas_price),
            wallet_configured=self.account is not None,
            wallet_address=self.address,
            wallet_balance=balance,
        )

    def explorer_link(self, kind: str, value: str) -> str:
        if kind not in ("address", "tx", "token"):
            return self.explorer_url
        return f"{self.explorer_url}/{kind}/{value}"
