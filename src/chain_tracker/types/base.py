"""Reusable base models for view-state snapshots and ledger entities."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `block_height` in a Python model will be
    represented as `blockHeight` when it is serialized to JSON.

    The display surface speaks camelCase, so every model that crosses that
    boundary derives from this one.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump the model as a JSON-compatible dict keyed by camelCase aliases."""
        return self.model_dump(mode="json", by_alias=True)


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
    }

    def replace(self: Self, **changes: Any) -> Self:
        """
        Return a copy with the given fields replaced.

        The original instance is left untouched, so holders of the old
        snapshot keep seeing the old values.
        """
        return self.model_copy(update=changes)


class LedgerEntity(BaseModel):
    """
    An immutable entity decoded from a ledger RPC payload.

    Only the identifying fields are declared by subclasses. Everything else
    the node returns is kept as an extra so it reaches the display unchanged.
    """

    model_config = ConfigDict(
        extra="allow",
        frozen=True,
        populate_by_name=True,
    )
