"""Provider directory: where the search pipeline reads provider records from.

Every backend is read-only from the pipeline's point of view and returns
providers inner-joined with their owner's profile (email, contact number).
Backend failures surface as ProviderFetchError.
"""

import uuid
from abc import ABC, abstractmethod

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.core.errors import ProviderFetchError
from servicefinder.models.profile import Profile
from servicefinder.models.provider import ServiceProvider
from servicefinder.schemas.provider import ProviderRecord


class ProviderDirectory(ABC):
    """Abstract read API over the provider and profile tables."""

    @abstractmethod
    async def list_providers(self) -> list[ProviderRecord]:
        """Every provider that has a profile, in backend order."""
        ...

    @abstractmethod
    async def get_provider(self, user_id: uuid.UUID) -> ProviderRecord | None:
        """One provider by owning user id, or None."""
        ...


def to_record(provider: ServiceProvider, profile: Profile) -> ProviderRecord:
    """Join a provider row with its profile row."""
    return ProviderRecord(
        user_id=provider.user_id,
        email=profile.email,
        contact_number=profile.contact_number,
        skills=list(provider.skills or []),
        locations=list(provider.locations or []),
        rating=provider.rating or 0.0,
        availability=provider.availability,
    )


class SqlProviderDirectory(ProviderDirectory):
    """Directory backed by the service's own database."""

    def __init__(self, db: AsyncSession):
        self._db = db

    def _joined(self):
        return select(ServiceProvider, Profile).join(
            Profile, Profile.id == ServiceProvider.user_id
        )

    async def list_providers(self) -> list[ProviderRecord]:
        stmt = self._joined().order_by(ServiceProvider.created_at.asc())
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            raise ProviderFetchError(f"provider read failed: {exc}") from exc
        return [to_record(provider, profile) for provider, profile in result.all()]

    async def get_provider(self, user_id: uuid.UUID) -> ProviderRecord | None:
        stmt = self._joined().where(ServiceProvider.user_id == user_id)
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            raise ProviderFetchError(f"provider read failed: {exc}") from exc
        row = result.first()
        if row is None:
            return None
        provider, profile = row
        return to_record(provider, profile)


class InMemoryProviderDirectory(ProviderDirectory):
    """Fixed list of records. For tests and local fixtures.

    Set ``fail_with`` to make every read raise ProviderFetchError.
    """

    def __init__(self, records: list[ProviderRecord] | None = None):
        self._records: list[ProviderRecord] = list(records or [])
        self.fail_with: str | None = None
        self.reads = 0

    async def list_providers(self) -> list[ProviderRecord]:
        self.reads += 1
        if self.fail_with is not None:
            raise ProviderFetchError(self.fail_with)
        return list(self._records)

    async def get_provider(self, user_id: uuid.UUID) -> ProviderRecord | None:
        self.reads += 1
        if self.fail_with is not None:
            raise ProviderFetchError(self.fail_with)
        for record in self._records:
            if record.user_id == user_id:
                return record
        return None
