"""Franchise registration and licensing configuration."""

from ..chain.client import ProtocolClient
from ..chain.events import first_event
from ..models.events import DecodedEvent, FranchiseConfigSet, FranchiseRegistered
from ..models.params import FranchiseLicensingConfig


async def create_franchise(
    client: ProtocolClient,
    name: str,
    symbol: str,
    description: str,
    token_uri: str,
) -> tuple[FranchiseRegistered, list[DecodedEvent]]:
    """Mint a franchise NFT, which also deploys its IP asset registry.

    Returns:
        The FranchiseRegistered event (franchise id and registry address) and
        every decoded event of the receipt
    """
    receipt = await client.register_franchise(name, symbol, description, token_uri)
    events = client.decoder()(receipt)
    return first_event(events, FranchiseRegistered), events


async def configure_franchise_licensing(
    client: ProtocolClient,
    franchise_id: int,
    config: FranchiseLicensingConfig,
) -> tuple[FranchiseConfigSet, list[DecodedEvent]]:
    receipt = await client.configure_franchise_licensing(franchise_id, config)
    events = client.decoder()(receipt)
    return first_event(events, FranchiseConfigSet), events


def parse_flag(value: str) -> bool:
    """Boolean task argument; only the literal "true" is true."""
    return value.strip().lower() == "true"
