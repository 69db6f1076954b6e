"""Provider routes: directory listing, skill search with location filter, detail."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.dependencies import get_db
from servicefinder.derived_views.directory import provider_card_view
from servicefinder.schemas.provider import ProviderRecord, SearchResponse
from servicefinder.services import search_service
from servicefinder.services.provider_directory import SqlProviderDirectory

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("", response_model=list[ProviderRecord])
async def list_providers(db: AsyncSession = Depends(get_db)):
    return await SqlProviderDirectory(db).list_providers()


@router.get("/search", response_model=SearchResponse)
async def search_providers(
    request: Request,
    q: str = Query("", max_length=200),
    location: str = Query("", max_length=200),
    db: AsyncSession = Depends(get_db),
):
    records = await search_service.search(SqlProviderDirectory(db), q)
    displayed = search_service.filter_by_location(records, location)
    request.state.result_count = len(displayed)
    return SearchResponse(
        query=q,
        location=location,
        count=len(displayed),
        providers=[provider_card_view(r) for r in displayed],
        message=None if displayed else search_service.NO_RESULTS_MESSAGE,
    )


@router.get("/{user_id}")
async def get_provider(
    user_id: str,
    db: AsyncSession = Depends(get_db),
):
    try:
        uid = uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Provider not found")

    record = await SqlProviderDirectory(db).get_provider(uid)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Provider not found")
    return provider_card_view(record)
