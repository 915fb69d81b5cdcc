from .client import GIOPlatformClient

__all__ = ["GIOPlatformClient"]
