"""
Pydantic base models shared by every CityFix model.

Stored report records use camelCase keys (createdAt, pinCode, ...), so all
models expose camelCase aliases while Python code uses snake_case names.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CityFixModel(BaseModel):
    """
    Base model for records, derived intelligence and API payloads.
    Accepts both snake_case field names and camelCase aliases.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"
