"""Application configuration and settings."""
import os
from dotenv import load_dotenv

# Load environment variables from .env (if present)
load_dotenv()

# Database configuration
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./catalog.db")

# Session tokens
TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "2"))
if TOKEN_TTL_HOURS <= 0:
    raise ValueError("TOKEN_TTL_HOURS must be a positive number of hours.")

# Optional bootstrap administrator, created on startup if both are set
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
if bool(ADMIN_USERNAME) != bool(ADMIN_PASSWORD):
    raise ValueError(
        "ADMIN_USERNAME and ADMIN_PASSWORD must be set together. "
        "Please set both in your .env file or environment variables, or neither."
    )

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")
