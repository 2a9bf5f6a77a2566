"""Configuration loading and built-in defaults."""

__all__ = ["ConfigController", "DEFAULTS", "DEFAULT_REFERENCE_HEIGHTS_M", "DEFAULT_THREAT_CLASSES"]


def __getattr__(name: str):
    if name in __all__:
        import importlib

        return getattr(importlib.import_module("config.controller"), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
