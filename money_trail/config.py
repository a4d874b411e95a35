"""Central configuration -- all settings driven by environment variables.

Scripts call ``load_dotenv()`` before importing this module, so a local
``.env`` file can override any of the defaults below.
"""

import os

# ---------------------------------------------------------------------------
# Path finding
# ---------------------------------------------------------------------------
# Hop budget used when the caller does not supply one (explorer default).

DEFAULT_MAX_HOPS = int(os.environ.get("MONEY_TRAIL_DEFAULT_MAX_HOPS", "3"))

# ---------------------------------------------------------------------------
# Force layout
# ---------------------------------------------------------------------------
# Charge is negative for repulsion. Distances and radii are in canvas pixels.

CHARGE_STRENGTH = float(os.environ.get("MONEY_TRAIL_CHARGE_STRENGTH", "-400"))
LINK_DISTANCE = float(os.environ.get("MONEY_TRAIL_LINK_DISTANCE", "100"))
COLLISION_RADIUS = float(os.environ.get("MONEY_TRAIL_COLLISION_RADIUS", "30"))

# Scheduling cadence for the layout controller. Steps run at roughly one
# animation frame; snapshots are throttled to ~30 per second.
STEP_INTERVAL_MS = float(os.environ.get("MONEY_TRAIL_STEP_INTERVAL_MS", "16"))
SNAPSHOT_INTERVAL_MS = float(os.environ.get("MONEY_TRAIL_SNAPSHOT_INTERVAL_MS", "33"))

# ---------------------------------------------------------------------------
# Network data provider
# ---------------------------------------------------------------------------
# NETWORK_PROVIDER selects the backend:
#   "json"  - read {nodes, links} from NETWORK_JSON_PATH (default)
#   "http"  - GET NETWORK_API_URL + NETWORK_API_ENDPOINT

NETWORK_PROVIDER = os.environ.get("NETWORK_PROVIDER", "json")
NETWORK_JSON_PATH = os.environ.get("NETWORK_JSON_PATH", "data/network.json")
NETWORK_API_URL = os.environ.get("NETWORK_API_URL", "")
NETWORK_API_ENDPOINT = os.environ.get("NETWORK_API_ENDPOINT", "/network")
NETWORK_API_KEY = os.environ.get("NETWORK_API_KEY", "")
NETWORK_API_TIMEOUT = float(os.environ.get("NETWORK_API_TIMEOUT", "30"))
NETWORK_API_MAX_RETRIES = int(os.environ.get("NETWORK_API_MAX_RETRIES", "3"))
