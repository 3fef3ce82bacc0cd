"""Shared pydantic base for API schemas.

The dashboard consumes camelCase JSON, so response models expose camelCase
aliases while Python code keeps snake_case attribute names.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase and accepting either form on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
