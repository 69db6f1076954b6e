import uuid

from pydantic import BaseModel, Field


class ProviderRecord(BaseModel):
    """A provider listing joined with its owner's contact fields.

    Read-only snapshot of the directory at fetch time.
    """

    user_id: uuid.UUID
    email: str
    contact_number: str | None = None
    skills: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    rating: float = 0.0
    availability: str | None = None

    model_config = {"frozen": True}


class SearchResponse(BaseModel):
    query: str
    location: str
    count: int
    providers: list[dict]
    message: str | None = None
