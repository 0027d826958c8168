"""
Container health check for the report API.

Exits 0 when ``/health`` answers with a 2xx/3xx status. With
``HEALTHCHECK_REQUIRE_WAREHOUSE=true`` the warehouse must also be reported
reachable.
"""

from __future__ import annotations

import json
import os
from urllib.error import URLError
from urllib.request import urlopen


def main() -> int:
    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    require_warehouse = os.getenv("HEALTHCHECK_REQUIRE_WAREHOUSE", "false").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }
    url = f"http://127.0.0.1:{port}{path}"

    try:
        with urlopen(url, timeout=2) as response:
            if not 200 <= response.status < 400:
                return 1
            if not require_warehouse:
                return 0
            payload = json.loads(response.read().decode("utf-8"))
    except (URLError, TimeoutError, ValueError):
        return 1
    return 0 if payload.get("warehouse") == "reachable" else 1


if __name__ == "__main__":
    raise SystemExit(main())
