# Recurring service scheduling: cadence lookup, date generation, job sync.
from .errors import (  # noqa: F401
    InvalidScheduleParameters,
    PersistenceError,
    SchedulingError,
    UnsupportedFrequency,
)
from .frequency import FrequencyDefinition, FrequencyResolver, default_resolver  # noqa: F401
from .generator import Horizon, ScheduleGenerator, ServiceSchedule, default_generator  # noqa: F401
from .persistence import DateRange, JobStore, SqlJobStore  # noqa: F401
from .synchronizer import (  # noqa: F401
    ALL_STATUSES,
    OCCUPYING_STATUSES,
    JobSynchronizer,
    SubscriptionSnapshot,
)
