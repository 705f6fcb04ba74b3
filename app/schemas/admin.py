"""Schemas for admin cascading deletion results and responses."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.users import Role


class _CamelModel(BaseModel):
    """Serializes snake_case fields as camelCase; accepts either on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeletedUser(BaseModel):
    """Public fields of a user captured before deletion."""

    id: int
    name: str
    email: str
    role: Role


class UserDeletionSummary(_CamelModel):
    """Row counts removed by each cascade step; zero when a step does not apply."""

    ratings_authored_deleted: int = Field(default=0, ge=0)
    stores_deleted: int = Field(default=0, ge=0)
    ratings_on_owned_stores_deleted: int = Field(default=0, ge=0)


class UserDeletionResult(_CamelModel):
    """Outcome of a committed user deletion."""

    deleted_user: DeletedUser
    summary: UserDeletionSummary


class DeleteUserResponse(UserDeletionResult):
    """Response for DELETE /admin/users/{id}."""

    message: str = "User deleted successfully"


class DeletedStore(BaseModel):
    """Public fields of a store captured before deletion."""

    id: int
    name: str
    email: str


class StoreDeletionSummary(_CamelModel):
    """Ratings removed along with the store."""

    ratings_deleted: int = Field(default=0, ge=0)


class StoreDeletionResult(_CamelModel):
    """Outcome of a committed store deletion."""

    deleted_store: DeletedStore
    summary: StoreDeletionSummary


class DeleteStoreResponse(StoreDeletionResult):
    """Response for DELETE /admin/stores/{id}."""

    message: str = "Store deleted successfully"
