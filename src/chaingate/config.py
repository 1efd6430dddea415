"""
Operator configuration for the chaingate CLI.

Settings come from ~/.chaingate/.env (loaded with python-dotenv) and the
process environment. Library functions never read these; they take every
value as an explicit argument.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .anamnesis.ipfs import DEFAULT_IPFS_HOST, DEFAULT_IPFS_PORT, DEFAULT_IPFS_PROTOCOL, IpfsClient
from .pneuma.endpoints import INFURA, get_provider_url

# Default config directory
CHAINGATE_DIR = Path.home() / ".chaingate"
CHAINGATE_ENV = CHAINGATE_DIR / ".env"


@dataclass(frozen=True)
class GatewaySettings:
    provider: str = INFURA
    api_key: Optional[str] = None
    chain_id: int = 1
    explicit_rpc_url: Optional[str] = None
    ipfs_host: str = DEFAULT_IPFS_HOST
    ipfs_port: int = DEFAULT_IPFS_PORT
    ipfs_protocol: str = DEFAULT_IPFS_PROTOCOL
    ipfs_project_id: Optional[str] = None
    ipfs_project_secret: Optional[str] = None

    def rpc_url(self) -> str:
        """
        The RPC URL to use: CHAINGATE_RPC_URL if set, otherwise the URL
        resolved from provider, API key and chain id.

        Raises:
            ValueError: If neither an explicit URL nor an API key is configured
        """
        if self.explicit_rpc_url:
            return self.explicit_rpc_url
        if not self.api_key:
            raise ValueError(
                f"No RPC endpoint configured. Set CHAINGATE_RPC_URL or "
                f"CHAINGATE_API_KEY in {CHAINGATE_ENV}"
            )
        return get_provider_url(self.provider, self.api_key, self.chain_id)

    def ipfs_client(self) -> IpfsClient:
        auth = None
        if self.ipfs_project_id and self.ipfs_project_secret:
            auth = (self.ipfs_project_id, self.ipfs_project_secret)
        return IpfsClient(
            host=self.ipfs_host,
            port=self.ipfs_port,
            protocol=self.ipfs_protocol,
            auth=auth,
        )


def load_settings(env_path: Optional[Path] = None) -> GatewaySettings:
    """
    Load settings from a .env file and the environment.

    Args:
        env_path: Path to .env file (default: ~/.chaingate/.env)

    Returns:
        GatewaySettings
    """
    env_path = env_path or CHAINGATE_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

    env = os.environ
    return GatewaySettings(
        provider=env.get("CHAINGATE_PROVIDER", INFURA).lower(),
        api_key=env.get("CHAINGATE_API_KEY") or None,
        chain_id=int(env.get("CHAINGATE_CHAIN_ID", "1")),
        explicit_rpc_url=env.get("CHAINGATE_RPC_URL") or None,
        ipfs_host=env.get("CHAINGATE_IPFS_HOST", DEFAULT_IPFS_HOST),
        ipfs_port=int(env.get("CHAINGATE_IPFS_PORT", str(DEFAULT_IPFS_PORT))),
        ipfs_protocol=env.get("CHAINGATE_IPFS_PROTOCOL", DEFAULT_IPFS_PROTOCOL),
        ipfs_project_id=env.get("CHAINGATE_IPFS_PROJECT_ID") or None,
        ipfs_project_secret=env.get("CHAINGATE_IPFS_PROJECT_SECRET") or None,
    )
