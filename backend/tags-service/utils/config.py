"""Configuration management for the Tags Service.

This module centralizes all configuration settings including the database URL,
logging level, and search limits.

Architecture:
    Configuration is separated from dependencies to follow separation of concerns.
    All environment variables and configuration logic is centralized here.
"""

import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tags.db")

# Echo SQL statements (useful when debugging merge/copy queries)
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() in ("1", "true", "yes")

# Service identification
SERVICE_NAME = os.getenv("SERVICE_NAME", "tags-service")

# Search (query facade) limits
SEARCH_DEFAULT_LIMIT = int(os.getenv("SEARCH_DEFAULT_LIMIT", "25"))
SEARCH_MAX_LIMIT = int(os.getenv("SEARCH_MAX_LIMIT", "100"))

# Logging configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# HTTP server
SERVICE_HOST = os.getenv("SERVICE_HOST", "0.0.0.0")
SERVICE_PORT = int(os.getenv("SERVICE_PORT", "8003"))
