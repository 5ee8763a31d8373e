"""User schemas."""

from pydantic import BaseModel

from civicdesk.models.enums import UserRole


class UserSummary(BaseModel):
    id: int
    email: str
    full_name: str
    role: UserRole

    model_config = {"from_attributes": True}
