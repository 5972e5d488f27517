"""Single IP asset creation and lookup."""

from pydantic import BaseModel

from ..chain.client import ProtocolClient
from ..chain.events import first_event
from ..models.dataset import BlockType
from ..models.events import DecodedEvent, IPAssetWritten


class IPAssetData(BaseModel):
    """IP asset as stored by the registry."""

    id: int
    block_type: BlockType
    name: str
    description: str
    media_url: str

    @classmethod
    def from_call(cls, ip_asset_id: int, value: tuple) -> "IPAssetData":
        block_type, name, description, media_url = value
        return cls(
            id=ip_asset_id,
            block_type=block_type,
            name=name,
            description=description,
            media_url=media_url,
        )


async def create_ip_asset(
    client: ProtocolClient,
    franchise_id: int,
    ip_asset_type: str,
    name: str,
    description: str,
    media_url: str,
    receiver: str | None = None,
) -> tuple[IPAssetWritten, list[DecodedEvent]]:
    """Create one IP asset in the franchise's registry.

    The block type is validated before anything is sent.
    """
    block_type = BlockType.parse(ip_asset_type)
    address = await client.ip_asset_registry_address(franchise_id)
    client.console.print(f"Registry: {address}")
    client.console.print(f"Creating IP asset: {block_type.name} {name!r}")

    receipt = await client.create_ip_asset(
        address,
        int(block_type),
        name,
        description,
        media_url,
        receiver or client.signer_address,
    )
    events = client.decoder(registry_address=address)(receipt)
    return first_event(events, IPAssetWritten), events


async def read_ip_asset(client: ProtocolClient, franchise_id: int, ip_asset_id: int) -> IPAssetData:
    address = await client.ip_asset_registry_address(franchise_id)
    value = await client.read_ip_asset(address, ip_asset_id)
    return IPAssetData.from_call(ip_asset_id, value)
