"""Internal constants shared across the library."""

PLUGIN_ID = "signalk-charlotte"
PLUGIN_NAME = "SignalK to Charlotte"
PLUGIN_DESCRIPTION = "Stream data from SignalK to the Charlotte cloud"

SERVER_URL = "wss://community.nakedsailor.blog/api.beta/boat/"

# Seconds between connection health checks.
RETRY_PERIOD_SECONDS = 3.0

# Milliseconds between delta pushes requested from the sensor bus.
DEFAULT_PERIOD_MS = 100

# Upper bound on frames handed to the socket but not yet written.
MAX_PENDING_SENDS = 64

SELF_CONTEXT_PREFIX = "vessels."

# Wire field reserved for the update timestamp.
TIME_FIELD = "time"
