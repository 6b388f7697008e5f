"""Root conftest: loads .env.test before any module imports."""
from __future__ import annotations

import os
from pathlib import Path

# Settings are read at import time; pin the knobs tests rely on.
_TEST_DEFAULTS = {
    "LOCAL_USER_ID": "me",
    "VIEWER_TIMEZONE": "UTC",
    "SEED_DEMO_DATA": "false",
}

_env_test = Path(__file__).resolve().parent / ".env.test"
if _env_test.exists():
    for line in _env_test.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())

for key, value in _TEST_DEFAULTS.items():
    os.environ.setdefault(key, value)
