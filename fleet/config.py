"""
Application settings.

`create_app` loads one of these classes, then lets FLEET_* environment
variables override single keys, e.g. FLEET_DATA_PATH=/var/lib/fleet/data.pkl
or FLEET_PLACEHOLDER_LOOKAHEAD_DAYS=14.
"""
import os

from fleet.models.store import DEFAULT_DATA_PATH


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    DATA_PATH = str(DEFAULT_DATA_PATH)
    TIMEZONE = "Europe/Amsterdam"
    PLACEHOLDER_LOOKAHEAD_DAYS = 7
    UPCOMING_LIMIT = 5
    LOG_LEVEL = "INFO"


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    DATA_PATH = None  # memory only
    LOG_LEVEL = "WARNING"
