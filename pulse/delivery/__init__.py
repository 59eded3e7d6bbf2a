from .dispatcher import DeliveryState, Dispatcher, DispatcherMetrics
from .queue import DeliveryAttempt, EventQueue, RetrySchedule
from .retry import RetryPolicy

__all__ = [
    "DeliveryAttempt",
    "DeliveryState",
    "Dispatcher",
    "DispatcherMetrics",
    "EventQueue",
    "RetryPolicy",
    "RetrySchedule",
]
