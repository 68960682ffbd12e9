from .settings import Settings, get_settings, load_settings, settings_from_env

__all__ = [
    "Settings",
    "get_settings",
    "load_settings",
    "settings_from_env",
]
