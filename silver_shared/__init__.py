"""Silver shared utilities package."""

from silver_shared.config import BaseServiceSettings
from silver_shared.logging import setup_logging

__all__ = ["setup_logging", "BaseServiceSettings"]
