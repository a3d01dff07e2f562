"""Global pytest configuration."""

import os

# Tests seed their own catalogs; keep the app's demo seed out of the way
os.environ.setdefault("SEED_DEMO_CATALOG", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
