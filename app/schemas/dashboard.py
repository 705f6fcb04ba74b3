"""Schemas for role-specific dashboard statistics (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _Stats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdminStats(_Stats):
    total_users: int
    total_stores: int
    total_ratings: int
    average_rating: float


class OwnerStats(_Stats):
    my_stores: int
    my_ratings: int
    my_average_rating: float


class UserStats(_Stats):
    my_ratings: int
    my_average_rating: float
