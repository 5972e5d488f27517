"""Data models for datasets, contract parameters and events."""

from ip_registry_tools.models.dataset import BlockType, Dataset, Record, RelationshipSpec, SAME_CONTRACT
from ip_registry_tools.models.events import (
    DecodedEvent,
    FranchiseConfigSet,
    FranchiseRegistered,
    IPAssetWritten,
    RelationSet,
    Transfer,
    parse_event,
)
from ip_registry_tools.models.params import FranchiseLicensingConfig, IPAssetConfig, LicenseTerms, RelationParams

__all__ = [
    "BlockType",
    "Dataset",
    "Record",
    "RelationshipSpec",
    "SAME_CONTRACT",
    "DecodedEvent",
    "FranchiseConfigSet",
    "FranchiseRegistered",
    "IPAssetWritten",
    "RelationSet",
    "Transfer",
    "parse_event",
    "FranchiseLicensingConfig",
    "IPAssetConfig",
    "LicenseTerms",
    "RelationParams",
]
