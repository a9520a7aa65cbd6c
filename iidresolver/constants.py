"""iidresolver constants and fixed values.

This module centralizes the plugin identifiers, AWS filter values
and client defaults shared across the resolver.
"""

import re

# Plugin identity
PLUGIN_NAME = "aws_iid"
SELECTOR_TYPE = PLUGIN_NAME

# Agent ID layout: /spire/agent/aws_iid/<account>/<region>/<instance>
AGENT_PATH_PREFIX = "/spire/agent/"
AGENT_ID_PATH_PATTERN = re.compile(r'^/spire/agent/aws_iid/([^/]+)/([^/]+)/([^/]+)$')
SPIFFE_SCHEME = "spiffe"

# Only live instances yield selectors
INSTANCE_STATES = ("pending", "running")
INSTANCE_STATE_FILTER = "instance-state-name"

# Environment fallbacks for credentials
ENV_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"

# Client timeouts
DEFAULT_CONNECT_TIMEOUT = 10  # seconds
DEFAULT_READ_TIMEOUT = 30  # seconds

# How often a blocked remote call re-checks its request for cancellation
CANCEL_POLL_INTERVAL = 0.05  # seconds
