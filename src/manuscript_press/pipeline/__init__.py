"""Publishing pipeline: phases, events, resilience helpers and the orchestrator."""

from .costs import compute_costs
from .events import (
    EventChannel,
    EventRecorder,
    LoggingEventChannel,
    NullEventChannel,
    QueueEventChannel,
)
from .orchestrator import Orchestrator
from .phases import PUBLISHING_PHASES, PhaseDescriptor
from .resilience import (
    CancellationToken,
    calculate_backoff,
    call_with_retry,
    gather_settled,
    is_transient,
    run_with_deadline,
)

__all__ = [
    "Orchestrator",
    "PUBLISHING_PHASES",
    "PhaseDescriptor",
    "EventChannel",
    "EventRecorder",
    "QueueEventChannel",
    "LoggingEventChannel",
    "NullEventChannel",
    "CancellationToken",
    "calculate_backoff",
    "call_with_retry",
    "gather_settled",
    "is_transient",
    "run_with_deadline",
    "compute_costs",
]
