"""Settings, read once from environment variables at import."""

import os

from status_overview.env_utils import env_bool, get_env

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Jenkins remote API
JENKINS_URL: str = os.getenv("JENKINS_URL", "")
JENKINS_USER: str = os.getenv("JENKINS_USER", "")
JENKINS_API_TOKEN: str = get_env("JENKINS_API_TOKEN", "")
JENKINS_VERIFY_SSL: bool = env_bool("JENKINS_VERIFY_SSL", True)
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

# Snapshots are evicted after this many idle seconds.
SNAPSHOT_TTL_SECONDS: float = float(os.getenv("SNAPSHOT_TTL_SECONDS", "180"))

# Access tokens; the admin token implies read access.
STATUS_READ_TOKEN: str = get_env("STATUS_READ_TOKEN", "")
ADMIN_TOKEN: str = get_env("ADMIN_TOKEN", "")

OVERVIEW_CONFIG_PATH: str = os.getenv("OVERVIEW_CONFIG_PATH", "/data/status_overview.json")
