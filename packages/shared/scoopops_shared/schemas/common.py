from enum import Enum
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CANCELED = "CANCELED"
    PAST_DUE = "PAST_DUE"


class JobStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"
    CANCELED = "CANCELED"


# Valid state transitions for a job
JOB_TRANSITIONS: dict[JobStatus, list[JobStatus]] = {
    JobStatus.SCHEDULED: [JobStatus.IN_PROGRESS, JobStatus.SKIPPED, JobStatus.CANCELED],
    JobStatus.IN_PROGRESS: [JobStatus.COMPLETED],
    JobStatus.COMPLETED: [],
    JobStatus.SKIPPED: [],
    JobStatus.CANCELED: [],
}

TERMINAL_JOB_STATUSES = frozenset(
    status for status, targets in JOB_TRANSITIONS.items() if not targets
)

# Jobs that still represent an upcoming visit
PENDING_JOB_STATUSES = frozenset({JobStatus.SCHEDULED, JobStatus.IN_PROGRESS})


class Frequency(str, Enum):
    ONETIME = "ONETIME"
    DAILY = "DAILY"
    SIX_TIMES_WEEKLY = "SIX_TIMES_WEEKLY"
    FIVE_TIMES_WEEKLY = "FIVE_TIMES_WEEKLY"
    FOUR_TIMES_WEEKLY = "FOUR_TIMES_WEEKLY"
    THREE_TIMES_WEEKLY = "THREE_TIMES_WEEKLY"
    TWICE_WEEKLY = "TWICE_WEEKLY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    SEMIMONTHLY = "SEMIMONTHLY"
    EVERY_THREE_WEEKS = "EVERY_THREE_WEEKS"
    EVERY_FOUR_WEEKS = "EVERY_FOUR_WEEKS"
    MONTHLY = "MONTHLY"


class DayOfWeek(str, Enum):
    SUNDAY = "SUNDAY"
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"

    @property
    def index(self) -> int:
        """0 = Sunday ... 6 = Saturday."""
        return list(DayOfWeek).index(self)

    @classmethod
    def from_index(cls, index: int) -> "DayOfWeek":
        return list(cls)[index]


class Role(str, Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    OFFICE = "OFFICE"
    CREW_LEAD = "CREW_LEAD"
    FIELD_TECH = "FIELD_TECH"
    ACCOUNTANT = "ACCOUNTANT"
    CLIENT = "CLIENT"


class CamelModel(BaseModel):
    """Base for API bodies: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

