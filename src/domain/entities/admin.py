"""Application-wide admin configuration.

The admin config is an opaque JSON object owned by the web application; the
storage layer only serializes it under a fixed key.
"""

from typing import Any

ADMIN_CONFIG_KEY = "admin_config"

type AdminConfig = dict[str, Any]
