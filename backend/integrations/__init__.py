"""
Integrations Module
External service integrations for Tensai agents
"""

from .morpho_api import MorphoApiClient
from .sushi_swap import SushiSwapClient

__all__ = ["MorphoApiClient", "SushiSwapClient"]
