"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach the real sample API
os.environ.setdefault("API_BASE_URL", "http://datasource.test/api")
os.environ.setdefault("LOG_FORMAT", "text")
