"""Configuration management for IP Registry Tools."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IPREG_",
    )

    # RPC node
    rpc_url: str = Field(default="http://127.0.0.1:8545")
    private_key: str = Field(default="", description="Hex key of the signing account")

    # Deployments
    deployment_dir: Path = Field(default=Path("."))
    local_chain_id: int = Field(default=31337, description="Chain id that reads the local deployment file")
    abi_dir: Path | None = Field(default=None, description="Compiled artifacts (<Name>.sol/<Name>.json)")

    # Upload settings
    chunk_size: int = Field(default=100, description="Calls per multicall transaction")
    receipt_timeout: float = Field(default=120.0, description="Seconds to wait for a receipt")

    @property
    def local_deployment_file(self) -> Path:
        return self.deployment_dir / "deployment-local.json"

    @property
    def public_deployment_file(self) -> Path:
        return self.deployment_dir / "deployment-public.json"

    def deployment_file(self, chain_id: int) -> Path:
        """Deployment file holding addresses for the given chain."""
        if chain_id == self.local_chain_id:
            return self.local_deployment_file
        return self.public_deployment_file


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
