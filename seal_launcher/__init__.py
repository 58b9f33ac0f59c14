"""Query resolution and ranking engine for a keyboard launcher."""
from seal_launcher.config import SealConfig, get_config
from seal_launcher.engine import SealEngine

__version__ = "1.0.0"

__all__ = ["SealConfig", "SealEngine", "get_config"]
