"""Profile route: the signed-in account's own profile."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.core.auth import get_current_user
from servicefinder.dependencies import get_db
from servicefinder.derived_views.directory import profile_view
from servicefinder.models.user import User
from servicefinder.schemas.profile import ProfileRead
from servicefinder.services import profile_service

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileRead)
async def my_profile(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    found = await profile_service.get_profile(db, current_user.id)
    if found is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    profile, provider = found
    return profile_view(profile, provider)
