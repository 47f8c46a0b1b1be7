# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .user_org import UserOrg  # noqa: F401
from .client import Client, Location  # noqa: F401
from .service_plan import ServicePlan  # noqa: F401
from .subscription import Subscription  # noqa: F401
from .job import Job  # noqa: F401
from .activity_log import ActivityLog  # noqa: F401
