"""RPC connection management."""

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3

from ..config import Settings, get_settings
from ..errors import ConfigurationError


def get_web3(rpc_url: str | None = None) -> AsyncWeb3:
    """Get an async web3 instance for the configured node."""
    settings = get_settings()
    return AsyncWeb3(AsyncHTTPProvider(rpc_url or settings.rpc_url))


async def check_connection(w3: AsyncWeb3 | None = None) -> bool:
    """Check if the RPC node is reachable."""
    owned = w3 is None
    w3 = w3 or get_web3()
    try:
        return await w3.is_connected()
    finally:
        if owned:
            await w3.provider.disconnect()


def get_account(settings: Settings | None = None) -> LocalAccount:
    """Signing account from the configured private key."""
    settings = settings or get_settings()
    if not settings.private_key:
        raise ConfigurationError("IPREG_PRIVATE_KEY is not set")
    try:
        return Account.from_key(settings.private_key)
    except ValueError as e:
        raise ConfigurationError(f"IPREG_PRIVATE_KEY is not a valid key: {e}") from e
