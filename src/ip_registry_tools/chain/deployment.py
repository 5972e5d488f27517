"""Deployed contract addresses, read from the deployment files."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from ..config import Settings, get_settings
from ..errors import DeploymentError

FRANCHISE_REGISTRY = "franchiseRegistry-proxy"
RELATIONSHIP_MODULE = "protocolRelationshipModule-proxy"
LICENSING_MODULE = "licensingModule-proxy"


@dataclass
class Deployment:
    """Addresses of the protocol contracts on one chain."""

    chain_id: int
    source: Path
    addresses: dict[str, str] = field(default_factory=dict)

    def address(self, key: str) -> str:
        try:
            return self.addresses[key]
        except KeyError:
            raise DeploymentError(
                f"{key} not found in {self.source} for chain {self.chain_id}"
            ) from None


def load_deployment(chain_id: int, settings: Settings | None = None) -> Deployment:
    """Load the deployment for a chain id.

    The local chain reads deployment-local.json, every other chain reads
    deployment-public.json; both are keyed by chain id.
    """
    settings = settings or get_settings()
    path = settings.deployment_file(chain_id)
    if not path.exists():
        raise DeploymentError(f"Deployment file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        deployments = json.load(f)

    addresses = deployments.get(str(chain_id))
    if addresses is None:
        raise DeploymentError(f"No deployment for chain {chain_id} in {path}")

    return Deployment(chain_id=chain_id, source=path, addresses=dict(addresses))
