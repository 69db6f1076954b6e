import uuid

from sqlalchemy import Float, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from servicefinder.models.base import Base, TimestampMixin, generate_uuid


class ServiceProvider(TimestampMixin, Base):
    """Provider listing. Skills and locations keep the order they were entered in."""

    __tablename__ = "service_providers"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=generate_uuid)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id"), unique=True, nullable=False, index=True
    )
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    locations: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    availability: Mapped[str | None] = mapped_column(String(255), nullable=True)
