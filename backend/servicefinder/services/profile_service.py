"""Profile service: read an account's profile and, for providers, its listing."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.models.profile import AccountRole, Profile
from servicefinder.models.provider import ServiceProvider


async def get_profile(
    db: AsyncSession,
    user_id: uuid.UUID,
) -> tuple[Profile, ServiceProvider | None] | None:
    """Return (profile, provider listing or None), or None if there is no profile."""
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        return None

    if profile.role != AccountRole.service_provider:
        return profile, None

    result = await db.execute(
        select(ServiceProvider).where(ServiceProvider.user_id == user_id)
    )
    return profile, result.scalar_one_or_none()
