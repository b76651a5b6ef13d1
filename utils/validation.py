"""Input validation utilities for API endpoints."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from .constants import MAX_CALLSIGN_LENGTH, MAX_FILTER_RADIUS_KM, MIN_FILTER_RADIUS_KM


def validate_latitude(lat: Any) -> float:
    """Validate and return latitude value."""
    try:
        lat_float = float(lat)
        if not -90 <= lat_float <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {lat_float}")
        return lat_float
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid latitude: {lat}") from e


def validate_longitude(lon: Any) -> float:
    """Validate and return longitude value."""
    try:
        lon_float = float(lon)
        if not -180 <= lon_float <= 180:
            raise ValueError(f"Longitude must be between -180 and 180, got {lon_float}")
        return lon_float
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid longitude: {lon}") from e


def validate_radius_km(radius: Any) -> int:
    """Validate and return a range filter radius in kilometres."""
    try:
        radius_int = int(radius)
        if not MIN_FILTER_RADIUS_KM <= radius_int <= MAX_FILTER_RADIUS_KM:
            raise ValueError(
                f"Radius must be between {MIN_FILTER_RADIUS_KM} and {MAX_FILTER_RADIUS_KM} km, got {radius_int}"
            )
        return radius_int
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid radius: {radius}") from e


def validate_host(host: Any) -> str:
    """Validate and return APRS-IS server hostname or IP address."""
    if not host or not isinstance(host, str):
        raise ValueError("Server host is required")
    host = host.strip()
    if not host:
        raise ValueError("Server host cannot be empty")
    # Allow alphanumeric, dots, hyphens (valid for hostnames and IPs)
    if not re.match(r'^[a-zA-Z0-9][a-zA-Z0-9.\-]*$', host):
        raise ValueError(f"Invalid server host: {host}")
    if len(host) > 253:
        raise ValueError("Server host too long")
    return host


def validate_port(port: Any) -> int:
    """Validate and return a TCP port."""
    try:
        port_int = int(port)
        if not 1 <= port_int <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {port_int}")
        return port_int
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid port: {port}") from e


def validate_callsign(callsign: Any) -> str:
    """Validate and return an APRS-IS login callsign (e.g. N0CALL, DL1ABC-9)."""
    if not callsign or not isinstance(callsign, str):
        raise ValueError("Callsign is required")
    callsign = callsign.strip().upper()
    if len(callsign) > MAX_CALLSIGN_LENGTH:
        raise ValueError(f"Callsign must be at most {MAX_CALLSIGN_LENGTH} characters, got {callsign}")
    if not re.match(r'^[A-Z0-9]+(-[A-Z0-9]{1,2})?$', callsign):
        raise ValueError(f"Invalid callsign: {callsign}")
    return callsign


def validate_passcode(passcode: Any) -> str:
    """Validate and return an APRS-IS passcode (-1 for receive-only)."""
    try:
        code = int(str(passcode).strip())
        if not -1 <= code <= 32767:
            raise ValueError(f"Passcode must be between -1 and 32767, got {code}")
        return str(code)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid passcode: {passcode}") from e


def validate_filter(expression: Any) -> str:
    """Validate and return an APRS-IS server-side filter expression."""
    if not expression or not isinstance(expression, str):
        raise ValueError("Filter expression is required")
    expression = expression.strip()
    if not expression:
        raise ValueError("Filter expression cannot be empty")
    # A line break would let the caller inject extra commands
    if not re.fullmatch(r'[\x20-\x7e]+', expression):
        raise ValueError(f"Invalid filter expression: {expression!r}")
    return expression


def validate_reference_date(value: Any) -> date:
    """Validate and return an ISO date (YYYY-MM-DD)."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid date: {value}") from e
