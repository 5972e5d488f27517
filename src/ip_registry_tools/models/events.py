"""Typed views of the events emitted by the protocol contracts."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError
from web3 import Web3

from ..errors import EventDecodeError


def _checksum(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        value = Web3.to_hex(value)
    return Web3.to_checksum_address(value)


def _hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    if isinstance(value, str):
        return value.lower()
    return value


Address = Annotated[str, BeforeValidator(_checksum)]
HexString = Annotated[str, BeforeValidator(_hex)]


class ContractEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Emitting contract
    address: Address | None = None


class IPAssetWritten(ContractEvent):
    """An IP asset was created (or rewritten) in a registry."""

    event: Literal["IPAssetWritten"] = "IPAssetWritten"
    ip_asset_id: int = Field(alias="IPAssetId")
    block_type: int = Field(alias="blockType")
    name: str
    description: str = ""
    media_url: str = Field(default="", alias="mediaUrl")


class RelationSet(ContractEvent):
    """A relationship between two assets was set."""

    event: Literal["RelationSet"] = "RelationSet"
    source_contract: Address = Field(alias="sourceContract")
    source_id: int = Field(alias="sourceId")
    dest_contract: Address = Field(alias="destContract")
    dest_id: int = Field(alias="destId")
    relationship_id: HexString = Field(alias="relationshipId")
    end_time: int = Field(default=0, alias="endTime")


class FranchiseRegistered(ContractEvent):
    event: Literal["FranchiseRegistered"] = "FranchiseRegistered"
    owner: Address
    id: int
    ip_asset_registry: Address = Field(alias="ipAssetRegistryForId")
    name: str
    symbol: str
    token_uri: str = Field(default="", alias="tokenURI")


class FranchiseConfigSet(ContractEvent):
    event: Literal["FranchiseConfigSet"] = "FranchiseConfigSet"
    id: int


class Transfer(ContractEvent):
    event: Literal["Transfer"] = "Transfer"
    sender: Address = Field(alias="from")
    receiver: Address = Field(alias="to")
    token_id: int = Field(alias="tokenId")


DecodedEvent = Annotated[
    Union[IPAssetWritten, RelationSet, FranchiseRegistered, FranchiseConfigSet, Transfer],
    Field(discriminator="event"),
]

_adapter: TypeAdapter = TypeAdapter(DecodedEvent)

KNOWN_EVENTS = frozenset(
    ["IPAssetWritten", "RelationSet", "FranchiseRegistered", "FranchiseConfigSet", "Transfer"]
)


def parse_event(name: str, args: dict[str, Any]) -> DecodedEvent:
    """Validate raw decoded event arguments into their typed model."""
    if name not in KNOWN_EVENTS:
        raise EventDecodeError(f"Unsupported event: {name}")
    try:
        return _adapter.validate_python({**args, "event": name})
    except ValidationError as e:
        raise EventDecodeError(f"Malformed {name} event: {e}") from e
