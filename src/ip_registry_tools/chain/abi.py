"""ABI fragments of the protocol contracts.

Only the functions and events used by the CLI are listed. When ``abi_dir``
is configured, full ABIs are read from compiled artifacts instead.
"""

import json
from typing import Any

from ..config import get_settings


def _param(name: str, type_: str, *, indexed: bool | None = None, components: list | None = None) -> dict:
    param: dict[str, Any] = {"name": name, "type": type_}
    if components is not None:
        param["components"] = components
    if indexed is not None:
        param["indexed"] = indexed
    return param


def _function(name: str, inputs: list, outputs: list | None = None, mutability: str = "nonpayable") -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs or [],
        "stateMutability": mutability,
    }


def _event(name: str, inputs: list) -> dict:
    return {"type": "event", "name": name, "inputs": inputs, "anonymous": False}


MULTICALL = _function(
    "multicall",
    [_param("data", "bytes[]")],
    [_param("results", "bytes[]")],
)

IP_ASSET_CONFIG = [
    _param("canSublicense", "bool"),
    _param("franchiseRootLicenseId", "uint256"),
]

TERMS_PROCESSOR_CONFIG = [
    _param("processor", "address"),
    _param("processorData", "bytes"),
]

FRANCHISE_CONFIG = [
    _param("nonCommercialConfig", "tuple", components=IP_ASSET_CONFIG),
    _param("nonCommercialTerms", "tuple", components=TERMS_PROCESSOR_CONFIG),
    _param("commercialConfig", "tuple", components=IP_ASSET_CONFIG),
    _param("commercialTerms", "tuple", components=TERMS_PROCESSOR_CONFIG),
    _param("rootIpAssetHasCommercialRights", "bool"),
    _param("revoker", "address"),
    _param("commercialLicenseUri", "string"),
]

TRANSFER = _event(
    "Transfer",
    [
        _param("from", "address", indexed=True),
        _param("to", "address", indexed=True),
        _param("tokenId", "uint256", indexed=True),
    ],
)

FRANCHISE_REGISTRY_ABI = [
    _function(
        "registerFranchise",
        [
            _param(
                "params",
                "tuple",
                components=[
                    _param("name", "string"),
                    _param("symbol", "string"),
                    _param("description", "string"),
                    _param("tokenURI", "string"),
                ],
            )
        ],
        [_param("", "uint256"), _param("", "address")],
    ),
    _function(
        "IPAssetRegistryForId",
        [_param("franchiseId", "uint256")],
        [_param("", "address")],
        "view",
    ),
    _function(
        "createLicense",
        [
            _param("franchiseId", "uint256"),
            _param("ipAssetId", "uint256"),
            _param("commercial", "bool"),
            _param("mediaId", "bytes32"),
            _param("licenseURI", "string"),
            _param(
                "terms",
                "tuple",
                components=[
                    _param("imageURI", "string"),
                    _param("usage", "string"),
                    _param("duration", "string"),
                    _param("rights", "string"),
                    _param("name", "string"),
                ],
            ),
        ],
        [_param("", "uint256")],
    ),
    _event(
        "FranchiseRegistered",
        [
            _param("owner", "address", indexed=False),
            _param("id", "uint256", indexed=False),
            _param("ipAssetRegistryForId", "address", indexed=False),
            _param("name", "string", indexed=False),
            _param("symbol", "string", indexed=False),
            _param("tokenURI", "string", indexed=False),
        ],
    ),
    TRANSFER,
]

IP_ASSET_REGISTRY_ABI = [
    _function(
        "createIPAsset",
        [
            _param("ipAssetType", "uint8"),
            _param("name", "string"),
            _param("description", "string"),
            _param("mediaUrl", "string"),
            _param("to", "address"),
            _param("parentIpAssetId", "uint256"),
        ],
        [_param("", "uint256")],
    ),
    _function(
        "readIPAsset",
        [_param("ipAssetId", "uint256")],
        [
            _param(
                "",
                "tuple",
                components=[
                    _param("blockType", "uint8"),
                    _param("name", "string"),
                    _param("description", "string"),
                    _param("mediaUrl", "string"),
                ],
            )
        ],
        "view",
    ),
    MULTICALL,
    _event(
        "IPAssetWritten",
        [
            _param("IPAssetId", "uint256", indexed=True),
            _param("blockType", "uint8", indexed=True),
            _param("name", "string", indexed=False),
            _param("description", "string", indexed=False),
            _param("mediaUrl", "string", indexed=False),
        ],
    ),
    TRANSFER,
]

RELATION_PARAMS = [
    _param("sourceContract", "address"),
    _param("sourceId", "uint256"),
    _param("destContract", "address"),
    _param("destId", "uint256"),
    _param("relationshipId", "bytes32"),
    _param("ttl", "uint256"),
]

RELATIONSHIP_MODULE_ABI = [
    _function(
        "getRelationshipId",
        [_param("name", "string")],
        [_param("", "bytes32")],
        "view",
    ),
    _function(
        "relate",
        [
            _param("params", "tuple", components=RELATION_PARAMS),
            _param("data", "bytes"),
        ],
    ),
    MULTICALL,
    _event(
        "RelationSet",
        [
            _param("sourceContract", "address", indexed=True),
            _param("sourceId", "uint256", indexed=True),
            _param("destContract", "address", indexed=True),
            _param("destId", "uint256", indexed=False),
            _param("relationshipId", "bytes32", indexed=False),
            _param("endTime", "uint256", indexed=False),
        ],
    ),
]

LICENSING_MODULE_ABI = [
    _function(
        "configureFranchiseLicensing",
        [
            _param("franchiseId", "uint256"),
            _param("config", "tuple", components=FRANCHISE_CONFIG),
        ],
    ),
    _event(
        "FranchiseConfigSet",
        [
            _param("id", "uint256", indexed=True),
            _param("config", "tuple", indexed=False, components=FRANCHISE_CONFIG),
        ],
    ),
]

BUILTIN_ABIS = {
    "FranchiseRegistry": FRANCHISE_REGISTRY_ABI,
    "IPAssetRegistry": IP_ASSET_REGISTRY_ABI,
    "RelationshipModule": RELATIONSHIP_MODULE_ABI,
    "LicensingModule": LICENSING_MODULE_ABI,
}


def load_abi(contract_name: str) -> list[dict]:
    """ABI for a contract, from compiled artifacts when available."""
    settings = get_settings()
    if settings.abi_dir is not None:
        artifact = settings.abi_dir / f"{contract_name}.sol" / f"{contract_name}.json"
        if artifact.exists():
            with open(artifact, "r", encoding="utf-8") as f:
                return json.load(f)["abi"]
    return BUILTIN_ABIS[contract_name]
