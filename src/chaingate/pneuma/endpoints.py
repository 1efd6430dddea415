"""
Endpoint Resolver - Map (provider, API key, chain id) to a JSON-RPC URL.

Pure string substitution; no network access.
"""

from __future__ import annotations

from ..errors import UnsupportedNetwork, UnsupportedProvider

INFURA = "infura"
ALCHEMY = "alchemy"
QUICKNODE = "quicknode"

NETWORKS: dict[int, str] = {
    1: "mainnet",
    3: "ropsten",
    4: "rinkeby",
    5: "goerli",
    42: "kovan",
    56: "bsc",
    97: "bsc-testnet",
    100: "xdai",
    137: "matic",
    80001: "mumbai",
}

_URL_TEMPLATES: dict[str, str] = {
    INFURA: "https://{network}.infura.io/v3/{api_key}",
    ALCHEMY: "https://{network}.alchemyapi.io/v2/{api_key}",
    QUICKNODE: "https://{network}.quiknode.pro/{api_key}/",
}

PROVIDERS = tuple(_URL_TEMPLATES)


def get_network_name(chain_id: int) -> str:
    try:
        return NETWORKS[chain_id]
    except (KeyError, TypeError):
        raise UnsupportedNetwork(chain_id) from None


def get_provider_url(provider: str, api_key: str, chain_id: int) -> str:
    """
    Resolve the JSON-RPC URL for a provider and network.

    Args:
        provider: One of "infura", "alchemy", "quicknode"
        api_key: Provider API key (inserted verbatim)
        chain_id: Network chain id

    Returns:
        Fully qualified https URL

    Raises:
        UnsupportedNetwork: If chain_id is not in NETWORKS
        UnsupportedProvider: If provider is not recognised
    """
    network = get_network_name(chain_id)
    template = _URL_TEMPLATES.get(provider)
    if template is None:
        raise UnsupportedProvider(provider)
    return template.format(network=network, api_key=api_key)
