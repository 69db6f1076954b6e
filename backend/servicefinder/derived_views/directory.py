"""Derived views for provider cards, provider detail and the profile page."""

from servicefinder.models.profile import AccountRole, Profile
from servicefinder.models.provider import ServiceProvider
from servicefinder.schemas.profile import ProfileRead, ProviderDetails
from servicefinder.schemas.provider import ProviderRecord

ROLE_LABELS: dict[AccountRole, str] = {
    AccountRole.service_provider: "Service Provider",
    AccountRole.service_seeker: "Service Seeker",
}


def format_rating(rating: float | None) -> str | None:
    """One decimal place, or None for unrated (0) providers."""
    if not rating or rating <= 0:
        return None
    return f"{rating:.1f}"


def provider_card_view(record: ProviderRecord) -> dict:
    """A provider as shown in search results and on the detail page."""
    return {
        "user_id": str(record.user_id),
        "email": record.email,
        "contact_number": record.contact_number,
        "skills": list(record.skills),
        "locations": list(record.locations),
        "rating": record.rating,
        "rating_display": format_rating(record.rating),
        "availability": record.availability,
        "role_label": ROLE_LABELS[AccountRole.service_provider],
    }


def profile_view(profile: Profile, provider: ServiceProvider | None) -> ProfileRead:
    details = None
    if provider is not None:
        details = ProviderDetails(
            skills=list(provider.skills or []),
            locations=list(provider.locations or []),
            availability=provider.availability,
            rating=provider.rating or 0.0,
            rating_display=format_rating(provider.rating),
        )
    return ProfileRead(
        id=profile.id,
        email=profile.email,
        role=profile.role.value,
        role_label=ROLE_LABELS[profile.role],
        contact_number=profile.contact_number,
        place=profile.place if profile.role == AccountRole.service_seeker else None,
        member_since=profile.created_at.date() if profile.created_at else None,
        provider=details,
    )
