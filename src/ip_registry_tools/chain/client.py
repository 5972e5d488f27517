"""Protocol contracts bound to one RPC node and deployment."""

from functools import cached_property
from typing import Any, Sequence

from rich.console import Console
from web3 import AsyncWeb3, Web3

from ..config import Settings, get_settings
from ..errors import ConfigurationError, RegistryNotFoundError
from ..models.params import FranchiseLicensingConfig, LicenseTerms, RelationParams
from .abi import MULTICALL, TRANSFER, load_abi
from .connection import get_account, get_web3
from .deployment import FRANCHISE_REGISTRY, LICENSING_MODULE, RELATIONSHIP_MODULE, Deployment, load_deployment
from .events import EventDecoder
from .transactions import TransactionSender, fetch_receipt, wait_for_receipt


class ProtocolClient:
    """Reads from and writes to the protocol contracts.

    Usage:
        async with await ProtocolClient.connect() as client:
            address = await client.ip_asset_registry_address(1)
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        deployment: Deployment,
        sender: TransactionSender | None = None,
        receipt_timeout: float = 120.0,
        console: Console | None = None,
    ):
        self.w3 = w3
        self.deployment = deployment
        self.sender = sender
        self.receipt_timeout = receipt_timeout
        self.console = console or Console()

    @classmethod
    async def connect(
        cls,
        settings: Settings | None = None,
        signer: bool = True,
        console: Console | None = None,
    ) -> "ProtocolClient":
        """Connect to the configured node and load its deployment.

        Args:
            settings: Settings to use (cached settings if not provided)
            signer: Whether write operations are needed (requires a private key)
            console: Console for progress output
        """
        settings = settings or get_settings()
        w3 = get_web3(settings.rpc_url)
        chain_id = await w3.eth.chain_id
        deployment = load_deployment(chain_id, settings)
        sender = TransactionSender(w3, get_account(settings)) if signer else None
        return cls(w3, deployment, sender, settings.receipt_timeout, console)

    async def close(self) -> None:
        await self.w3.provider.disconnect()

    async def __aenter__(self) -> "ProtocolClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def chain_id(self) -> int:
        return self.deployment.chain_id

    @property
    def signer_address(self) -> str:
        if self.sender is None:
            raise ConfigurationError("No signing account configured")
        return self.sender.address

    # ------------------------------------------------------------------
    # Contracts
    # ------------------------------------------------------------------

    def _contract(self, name: str, address: str) -> Any:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=load_abi(name))

    @cached_property
    def franchise_registry(self) -> Any:
        return self._contract("FranchiseRegistry", self.deployment.address(FRANCHISE_REGISTRY))

    @cached_property
    def relationship_module(self) -> Any:
        return self._contract("RelationshipModule", self.deployment.address(RELATIONSHIP_MODULE))

    @cached_property
    def licensing_module(self) -> Any:
        return self._contract("LicensingModule", self.deployment.address(LICENSING_MODULE))

    def ip_asset_registry(self, address: str) -> Any:
        return self._contract("IPAssetRegistry", address)

    def decoder(self, *names: str, registry_address: str | None = None) -> EventDecoder:
        """Event decoder over every protocol contract, limited to the given events.

        Module events are only accepted from the deployed modules. IP asset
        events are only accepted from ``registry_address`` when it is given.
        Token transfers are accepted from any contract, since licenses are
        minted by a registry that is not part of the deployment file.
        """
        if registry_address is not None:
            registry = self.ip_asset_registry(registry_address)
        else:
            registry = self.w3.eth.contract(abi=load_abi("IPAssetRegistry"))
        return EventDecoder(
            self.franchise_registry,
            registry,
            self.relationship_module,
            self.licensing_module,
            self.w3.eth.contract(abi=[TRANSFER]),
            only=names or None,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def ip_asset_registry_address(self, franchise_id: int) -> str:
        """Address of the IP asset registry created for a franchise."""
        address = await self.franchise_registry.functions.IPAssetRegistryForId(franchise_id).call()
        if int(address, 16) == 0:
            raise RegistryNotFoundError(franchise_id)
        return Web3.to_checksum_address(address)

    async def read_ip_asset(self, registry_address: str, ip_asset_id: int) -> tuple:
        return await self.ip_asset_registry(registry_address).functions.readIPAsset(ip_asset_id).call()

    async def relationship_id(self, name: str) -> str:
        """bytes32 id of a relationship kind, as 0x-prefixed hex."""
        value = await self.relationship_module.functions.getRelationshipId(name).call()
        return Web3.to_hex(value)

    async def get_receipt(self, tx_hash: str) -> Any:
        return await fetch_receipt(self.w3, tx_hash)

    # ------------------------------------------------------------------
    # Call encoding
    # ------------------------------------------------------------------

    def encode_create_ip_asset(
        self,
        registry_address: str,
        block_type: int,
        name: str,
        description: str,
        media_url: str,
        receiver: str,
        parent_id: int = 0,
    ) -> str:
        return self.ip_asset_registry(registry_address).encode_abi(
            "createIPAsset",
            args=[block_type, name, description, media_url, Web3.to_checksum_address(receiver), parent_id],
        )

    def encode_relate(self, params: RelationParams, data: bytes = b"") -> str:
        return self.relationship_module.encode_abi("relate", args=[params.as_tuple(), data])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def send(self, call: Any) -> str:
        if self.sender is None:
            raise ConfigurationError("No signing account configured")
        return await self.sender.send(call)

    async def wait(self, tx_hash: str) -> Any:
        return await wait_for_receipt(self.w3, tx_hash, self.receipt_timeout)

    async def transact(self, call: Any) -> Any:
        """Send a call and wait for it to be mined."""
        tx_hash = await self.send(call)
        self.console.print(f"tx: {tx_hash}")
        self.console.print("[dim]Waiting for tx to be mined...[/dim]")
        return await self.wait(tx_hash)

    async def multicall(self, target: str, calls: Sequence[str]) -> str:
        """Submit encoded calls to a contract's multicall; returns the tx hash."""
        contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(target),
            abi=[MULTICALL],
        )
        return await self.send(contract.functions.multicall(list(calls)))

    async def register_franchise(self, name: str, symbol: str, description: str, token_uri: str) -> Any:
        call = self.franchise_registry.functions.registerFranchise((name, symbol, description, token_uri))
        return await self.transact(call)

    async def create_ip_asset(
        self,
        registry_address: str,
        block_type: int,
        name: str,
        description: str,
        media_url: str,
        receiver: str,
        parent_id: int = 0,
    ) -> Any:
        call = self.ip_asset_registry(registry_address).functions.createIPAsset(
            block_type, name, description, media_url, Web3.to_checksum_address(receiver), parent_id
        )
        return await self.transact(call)

    async def create_license(
        self,
        franchise_id: int,
        ip_asset_id: int,
        commercial: bool,
        license_uri: str,
        terms: LicenseTerms,
    ) -> Any:
        media_id = Web3.keccak(text=terms.name)
        call = self.franchise_registry.functions.createLicense(
            franchise_id, ip_asset_id, commercial, media_id, license_uri, terms.as_tuple()
        )
        return await self.transact(call)

    async def relate(self, params: RelationParams, data: bytes = b"") -> Any:
        call = self.relationship_module.functions.relate(params.as_tuple(), data)
        return await self.transact(call)

    async def configure_franchise_licensing(self, franchise_id: int, config: FranchiseLicensingConfig) -> Any:
        call = self.licensing_module.functions.configureFranchiseLicensing(franchise_id, config.as_tuple())
        return await self.transact(call)

