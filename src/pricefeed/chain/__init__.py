"""Chain client layer -- Sui JSON-RPC integration via httpx."""

from pricefeed.chain.client import ChainClient, parse_pool_state
from pricefeed.chain.sui_client import SuiClient

__all__ = ["ChainClient", "SuiClient", "parse_pool_state"]
