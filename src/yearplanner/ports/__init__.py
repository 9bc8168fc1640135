"""Ports - interfaces/protocols for external dependencies."""

from .storage import ItemStore

__all__ = [
    "ItemStore",
]
