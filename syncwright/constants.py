"""Syncwright SDK constants."""

# Poll cadence shared by every bounded wait (seconds).
DEFAULT_POLL_INTERVAL_S = 0.25

# General-purpose wait budget for elements and the busy indicator.
DEFAULT_TIMEOUT_S = 30.0

# Short probes used for branch decisions ("is this prompt present?").
DEFAULT_PROBE_TIMEOUT_S = 2.0

# Budget for the main application page after login / pass-through navigation.
DEFAULT_MAIN_PAGE_TIMEOUT_S = 60.0

# Per-round verification window when setting input values.
DEFAULT_VERIFY_TIMEOUT_S = 9.0

# Rounds for retry-with-verification and one-time-code attempts.
DEFAULT_RETRY_ATTEMPTS = 3

# Pause between login steps while the identity provider re-renders.
DEFAULT_THINK_TIME_S = 1.0

# Extra pause before handing control to a redirect delegate.
DEFAULT_REDIRECT_WAIT_S = 3.0

# Static placeholder rendered by the application in empty fields.
EMPTY_VALUE_PLACEHOLDER = "---"

# Environment variable prefix for configuration.
ENV_PREFIX = "SYNCWRIGHT_"
