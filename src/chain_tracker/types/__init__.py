"""Shared pydantic base models."""

from .base import CamelModel, LedgerEntity, StrictBaseModel

__all__ = [
    "CamelModel",
    "LedgerEntity",
    "StrictBaseModel",
]
