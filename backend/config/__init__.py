# Config package
from config.contracts import (
    ERC20_ABI,
    MorphoConfig,
    SushiSwapConfig,
    default_morpho_config,
    default_sushi_swap_config,
)
from config.networks import (
    Network,
    NetworkRegistry,
    default_network_registry,
)
from config.settings import Settings, load_settings
