"""Call parameters passed to the protocol contracts."""

from dataclasses import dataclass

from hexbytes import HexBytes

ZERO_ADDRESS = "0x" + "00" * 20


@dataclass(frozen=True)
class RelationParams:
    """Arguments of ``RelationshipModule.relate``."""

    source_contract: str
    source_id: int
    dest_contract: str
    dest_id: int
    relationship_id: str
    ttl: int = 0

    def as_tuple(self) -> tuple:
        return (
            self.source_contract,
            self.source_id,
            self.dest_contract,
            self.dest_id,
            HexBytes(self.relationship_id),
            self.ttl,
        )

    def key(self) -> tuple[str, int, str, int, str]:
        """Identity of the relationship, as reported back in RelationSet."""
        return (
            self.source_contract.lower(),
            self.source_id,
            self.dest_contract.lower(),
            self.dest_id,
            self.relationship_id.lower(),
        )


@dataclass(frozen=True)
class LicenseTerms:
    """Off-chain terms attached to a license."""

    image_uri: str = ""
    usage: str = ""
    duration: str = ""
    rights: str = ""
    name: str = ""

    def as_tuple(self) -> tuple:
        return (self.image_uri, self.usage, self.duration, self.rights, self.name)


@dataclass(frozen=True)
class IPAssetConfig:
    can_sublicense: bool
    franchise_root_license_id: int

    def as_tuple(self) -> tuple:
        return (self.can_sublicense, self.franchise_root_license_id)


@dataclass(frozen=True)
class FranchiseLicensingConfig:
    """Arguments of ``LicensingModule.configureFranchiseLicensing``.

    Terms processors are left unset (zero address, empty data).
    """

    non_commercial: IPAssetConfig
    commercial: IPAssetConfig
    root_ip_asset_has_commercial_rights: bool
    revoker: str
    commercial_license_uri: str

    def as_tuple(self) -> tuple:
        no_processor = (ZERO_ADDRESS, b"")
        return (
            self.non_commercial.as_tuple(),
            no_processor,
            self.commercial.as_tuple(),
            no_processor,
            self.root_ip_asset_has_commercial_rights,
            self.revoker,
            self.commercial_license_uri,
        )
