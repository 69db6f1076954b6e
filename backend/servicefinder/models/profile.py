import enum
import uuid

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from servicefinder.models.base import Base, TimestampMixin


class AccountRole(str, enum.Enum):
    service_provider = "service_provider"
    service_seeker = "service_seeker"


class Profile(TimestampMixin, Base):
    """Directory-facing account row. Shares its primary key with users."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[AccountRole] = mapped_column(
        Enum(AccountRole, native_enum=False), nullable=False
    )
    contact_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # Seekers only
    place: Mapped[str | None] = mapped_column(String(255), nullable=True)
