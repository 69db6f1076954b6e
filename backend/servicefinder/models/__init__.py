# Import all models so Base.metadata is populated before create_all.
from servicefinder.models.user import User  # noqa: F401
from servicefinder.models.audit import AuditLogEvent  # noqa: F401
from servicefinder.models.session import Session  # noqa: F401
from servicefinder.models.profile import AccountRole, Profile  # noqa: F401
from servicefinder.models.provider import ServiceProvider  # noqa: F401
