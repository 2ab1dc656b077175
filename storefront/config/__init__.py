from .settings import Settings, load_settings, settings

__all__ = ["settings", "Settings", "load_settings"]
