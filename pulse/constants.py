# -*- coding: utf-8 -*-
import os

SDK_NAME = "pulse.python"

DEFAULT_HOST = "pulse.drcode.ai"
STORE_ENDPOINT_TEMPLATE = "https://{host}/api/{project_id}/store/"
SENTRY_PROTOCOL_VERSION = 7

ENV_HOST = "PULSE_HOST"
ENV_RELEASE = "PULSE_RELEASE"
ENV_REQUEST_TIMEOUT = "PULSE_REQUEST_TIMEOUT"

# Delivery
DEFAULT_QUEUE_SIZE = 1000
REQUEST_TIMEOUT = float(os.getenv(ENV_REQUEST_TIMEOUT, 5))
DEFAULT_SHUTDOWN_TIMEOUT = 2.0
WORKER_POLL_INTERVAL = 0.1

# Retry
RETRY_MAX_ATTEMPTS = 5
RETRY_BASE_DELAY = 0.5
RETRY_MAX_DELAY = 30.0

# Events
MAX_CHAIN_DEPTH = 10
MAX_STACK_FRAMES = 100
UNSERIALIZABLE_PLACEHOLDER = "<unserializable {type_name}>"
UNKNOWN_PANIC_MESSAGE = "Unknown panic"
