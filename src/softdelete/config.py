"""
Service Configuration

Environment-driven settings for the people service.
"""

import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./softdelete.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8013"))
