"""
Tensai Protocol Integrations
"""
from .morpho_blue import MarketConfig, MarketParams, MorphoBlue

__all__ = ['MarketConfig', 'MarketParams', 'MorphoBlue']
