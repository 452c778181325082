"""CLI package for interacting with the sensor hub service."""

from importlib import import_module
from types import ModuleType


def __getattr__(name: str) -> ModuleType:
    if name in {"app", "export"}:
        return import_module(f"cli.{name}")
    raise AttributeError(name)

__all__ = []
