"""License creation."""

from ..chain.client import ProtocolClient
from ..chain.events import first_event
from ..models.events import DecodedEvent, Transfer
from ..models.params import ZERO_ADDRESS, LicenseTerms


async def create_license(
    client: ProtocolClient,
    franchise_id: int,
    ip_asset_id: int,
    commercial: bool,
    license_uri: str,
    terms: LicenseTerms,
) -> tuple[int, list[DecodedEvent]]:
    """Mint a license NFT for an IP asset.

    Returns:
        The license id (token id of the license NFT minted in the tx) and
        all decoded events
    """
    receipt = await client.create_license(franchise_id, ip_asset_id, commercial, license_uri, terms)
    events = client.decoder()(receipt)
    minted = first_event(events, Transfer, sender=ZERO_ADDRESS)
    return minted.token_id, events
