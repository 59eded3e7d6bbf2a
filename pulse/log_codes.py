"""
Log codes for the delivery pipeline.
"""

CLIENT = "client"
CLIENT_INITIALIZED = f"{CLIENT}.initialized"
CLIENT_SHUTDOWN = f"{CLIENT}.shutdown"
CLIENT_CAPTURE_FAILED = f"{CLIENT}.capture_failed"

# Queue
QUEUE = "queue"
QUEUE_FULL = f"{QUEUE}.full"

# Dispatcher
DISPATCHER = "dispatcher"
DISPATCHER_STARTED = f"{DISPATCHER}.started"
DISPATCHER_STOPPED = f"{DISPATCHER}.stopped"
EVENT_DELIVERED = f"{DISPATCHER}.event_delivered"
EVENT_SAMPLED_OUT = f"{DISPATCHER}.event_sampled_out"
EVENT_RETRY_SCHEDULED = f"{DISPATCHER}.event_retry_scheduled"
EVENT_DROPPED = f"{DISPATCHER}.event_dropped"
DRAIN_DISCARDED = f"{DISPATCHER}.drain_discarded"

# Hooks
HOOK = "hook"
HOOK_INSTALLED = f"{HOOK}.installed"
HOOK_UNINSTALLED = f"{HOOK}.uninstalled"
