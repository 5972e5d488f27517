"""Transaction signing, broadcast and confirmation."""

import asyncio
from typing import Any

from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, TransactionNotFound

from ..errors import ReceiptNotFoundError, TransactionFailedError


class TransactionSender:
    """Signs and broadcasts transactions from one local account.

    Nonces are allocated under a lock so that transactions issued from
    concurrent tasks never reuse a nonce. Only broadcast is serialised;
    confirmations can be awaited concurrently.
    """

    def __init__(self, w3: AsyncWeb3, account: LocalAccount):
        self.w3 = w3
        self.account = account
        self._lock = asyncio.Lock()
        self._nonce: int | None = None

    @property
    def address(self) -> str:
        return self.account.address

    async def send(self, call: Any) -> str:
        """Build, sign and broadcast a contract function call.

        Args:
            call: A bound contract function (``contract.functions.x(...)``)

        Returns:
            The transaction hash as a 0x-prefixed hex string
        """
        async with self._lock:
            if self._nonce is None:
                self._nonce = await self.w3.eth.get_transaction_count(self.address, "pending")
            tx = await call.build_transaction({"from": self.address, "nonce": self._nonce})
            signed = self.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
            self._nonce += 1
        return Web3.to_hex(tx_hash)


async def wait_for_receipt(w3: AsyncWeb3, tx_hash: str, timeout: float = 120.0) -> Any:
    """Wait until a transaction is mined; raise if it reverted."""
    try:
        receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    except TimeExhausted as e:
        raise ReceiptNotFoundError(tx_hash, f"not mined after {timeout:.0f}s") from e
    if receipt["status"] != 1:
        raise TransactionFailedError(tx_hash)
    return receipt


async def fetch_receipt(w3: AsyncWeb3, tx_hash: str) -> Any:
    """Receipt of an already mined transaction."""
    try:
        return await w3.eth.get_transaction_receipt(tx_hash)
    except TransactionNotFound as e:
        raise ReceiptNotFoundError(tx_hash) from e
