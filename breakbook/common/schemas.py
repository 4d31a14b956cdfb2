"""Shared Pydantic v2 building blocks for request/response bodies."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire.

    Snake_case names are accepted on input too, and ORM objects can be
    validated directly (``from_attributes``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Day counts travel as JSON numbers rather than Decimal strings
Days = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]
