"""Single relationship creation."""

from hexbytes import HexBytes
from web3 import Web3

from ..chain.client import ProtocolClient
from ..chain.events import first_event
from ..models.events import DecodedEvent, RelationSet
from ..models.params import RelationParams


async def create_relationship(
    client: ProtocolClient,
    source_contract: str,
    source_id: int,
    dest_contract: str,
    dest_id: int,
    name: str,
    ttl: int = 0,
    data: str = "0x",
) -> tuple[RelationSet, list[DecodedEvent]]:
    """Relate two assets with the relationship kind ``name``."""
    relationship_id = await client.relationship_id(name)
    client.console.print(f"Relationship id: {relationship_id}")

    params = RelationParams(
        source_contract=Web3.to_checksum_address(source_contract),
        source_id=source_id,
        dest_contract=Web3.to_checksum_address(dest_contract),
        dest_id=dest_id,
        relationship_id=relationship_id,
        ttl=ttl,
    )
    if data != "0x":
        client.console.print(f"data: {data}")

    receipt = await client.relate(params, bytes(HexBytes(data)))
    events = client.decoder()(receipt)
    return first_event(events, RelationSet), events
