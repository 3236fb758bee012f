"""Core application modules."""
from .config import settings, Settings, InnerTubeConfig

__all__ = ["settings", "Settings", "InnerTubeConfig"]
