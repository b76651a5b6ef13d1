"""Configuration settings for ognwatch application."""

from __future__ import annotations

import logging
import os
import sys

# Application version
VERSION = "0.3.0"


def _get_env(key: str, default: str) -> str:
    """Get environment variable with default."""
    return os.environ.get(f'OGNWATCH_{key}', default)


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as integer with default."""
    try:
        return int(os.environ.get(f'OGNWATCH_{key}', str(default)))
    except ValueError:
        return default


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float with default."""
    try:
        return float(os.environ.get(f'OGNWATCH_{key}', str(default)))
    except ValueError:
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as boolean with default."""
    val = os.environ.get(f'OGNWATCH_{key}', '').lower()
    if val in ('true', '1', 'yes', 'on'):
        return True
    if val in ('false', '0', 'no', 'off'):
        return False
    return default


# Logging configuration
_log_level_str = _get_env('LOG_LEVEL', 'WARNING').upper()
LOG_LEVEL = getattr(logging, _log_level_str, logging.WARNING)
LOG_FORMAT = _get_env('LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

# Server settings
HOST = _get_env('HOST', '0.0.0.0')
PORT = _get_env_int('PORT', 5060)
DEBUG = _get_env_bool('DEBUG', False)

# APRS-IS connection
APRS_HOST = _get_env('APRS_HOST', 'aprs.glidernet.org')
APRS_PORT = _get_env_int('APRS_PORT', 14580)
APRS_USER = _get_env('APRS_USER', 'N0CALL')
APRS_PASSCODE = _get_env('APRS_PASSCODE', '-1')
APRS_FILTER = _get_env('APRS_FILTER', '')

# Timeouts
SOCKET_TIMEOUT = _get_env_float('SOCKET_TIMEOUT', 5.0)
RECONNECT_DELAY = _get_env_float('RECONNECT_DELAY', 2.0)
KEEPALIVE_INTERVAL = _get_env_float('KEEPALIVE_INTERVAL', 240.0)


def configure_logging() -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format=LOG_FORMAT,
        stream=sys.stderr
    )
    # Suppress Flask development server warning
    logging.getLogger('werkzeug').setLevel(LOG_LEVEL)
