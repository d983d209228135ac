from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from invoiceai.utils.money import format_money

# Two-place decimal string on the wire, e.g. "600.00"
Money = Annotated[Decimal, PlainSerializer(format_money, return_type=str, when_used="json")]


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase JSON, readable from ORM objects."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )
