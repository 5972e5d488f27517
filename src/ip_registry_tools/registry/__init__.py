"""One-shot protocol operations: franchises, IP assets, licenses, relationships."""

from .franchise import configure_franchise_licensing, create_franchise, parse_flag
from .ip_assets import IPAssetData, create_ip_asset, read_ip_asset
from .licensing import create_license
from .relationships import create_relationship

__all__ = [
    "configure_franchise_licensing",
    "create_franchise",
    "parse_flag",
    "IPAssetData",
    "create_ip_asset",
    "read_ip_asset",
    "create_license",
    "create_relationship",
]
