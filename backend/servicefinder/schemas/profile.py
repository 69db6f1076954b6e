import uuid
from datetime import date

from pydantic import BaseModel


class ProviderDetails(BaseModel):
    skills: list[str]
    locations: list[str]
    availability: str | None = None
    rating: float
    rating_display: str | None = None


class ProfileRead(BaseModel):
    id: uuid.UUID
    email: str
    role: str
    role_label: str
    contact_number: str | None = None
    place: str | None = None
    member_since: date | None = None
    provider: ProviderDetails | None = None
