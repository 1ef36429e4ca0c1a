"""Runtime wiring: logging setup and settings assembly."""

from .logging import configure_logging
from .settings import load_settings, parse_scheme, session_profile

__all__ = ["configure_logging", "load_settings", "parse_scheme", "session_profile"]
