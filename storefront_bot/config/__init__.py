"""
Runtime configuration loaded from env: load_settings().
"""
from storefront_bot.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
