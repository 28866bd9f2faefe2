"""
Base models for FactGraph.
"""

from pydantic import BaseModel as PydanticBaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseModel(PydanticBaseModel):
    """
    Base model for all FactGraph data structures.

    Fields are snake_case in Python and camelCase on the wire; both spellings
    are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        validate_by_name=True,
        validate_by_alias=True,
        validate_assignment=True,
        use_enum_values=True,
        extra="forbid",
    )

    def to_wire(self) -> dict:
        """Dump to a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class FrozenModel(BaseModel):
    """Base for immutable values such as canonical graph elements."""

    model_config = ConfigDict(frozen=True)
