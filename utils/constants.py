"""
OGNWATCH - Constants and Magic Numbers

Fixed protocol values and tuning numbers used throughout the application.
"""

from __future__ import annotations

# =============================================================================
# APRS-IS SERVER
# =============================================================================

# OGN APRS-IS server pool
APRS_SERVER_HOST = 'aprs.glidernet.org'

# Full feed, no filtering (no authentication needed)
APRS_FULL_FEED_PORT = 10152

# Port on which server-side filters are supported
APRS_FILTER_PORT = 14580

# Receive-only login (passcode -1 is never verified)
DEFAULT_APRS_USER = 'N0CALL'
DEFAULT_APRS_PASSCODE = '-1'

# Name reported in the 'vers' part of the login command
APP_NAME = 'ognwatch'

# Maximum APRS-IS login name length (callsign plus SSID)
MAX_CALLSIGN_LENGTH = 9


# =============================================================================
# SOCKET SETTINGS
# =============================================================================

# Bytes per recv() call
SOCKET_BUFFER_SIZE = 4096

# Line terminator for commands sent to the server
APRS_LINE_TERMINATOR = '\r\n'


# =============================================================================
# SSE (Server-Sent Events) SETTINGS
# =============================================================================

# Keepalive interval for SSE streams (seconds)
SSE_KEEPALIVE_INTERVAL = 30.0

# Queue get timeout for SSE generators (seconds)
SSE_QUEUE_TIMEOUT = 1.0


# =============================================================================
# QUEUE LIMITS
# =============================================================================

# Decoded beacons waiting for an SSE consumer
QUEUE_MAX_SIZE = 1000


# =============================================================================
# THREAD SETTINGS
# =============================================================================

# Reader thread join timeout on stop (seconds)
READER_JOIN_TIMEOUT = 5.0


# =============================================================================
# RANGE FILTER LIMITS
# =============================================================================

MIN_FILTER_RADIUS_KM = 1
MAX_FILTER_RADIUS_KM = 5000
