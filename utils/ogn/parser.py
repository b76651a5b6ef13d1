"""
OGN beacon line decoder.

Decodes one line of APRS-IS traffic from the Open Glider Network into a
typed outcome. Beacon format:

    SENDER>TOCALL,...,METHOD,RECEIVER:/HHMMSSh DDMM.mmN / DDDMM.mmW S TTT/SSS/A=AAAAAA [extensions]

Example:
    OGN82149C>OGNTRK,qAS,OxfBarton:/130208h5145.95N/00111.50W'232/000/A=000295 id3782149C -4.3rot +000fpm gps3x5

Server control lines start with '#'. The login response has the shape
'# logresp <user> verified, server <name>'.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Optional

from .models import (
    Body,
    Coordinate,
    DecodeError,
    DecodeOutcome,
    DecodeStage,
    Decoded,
    Header,
    Ignored,
    LoginResult,
    Malformed,
    Transmission,
)

CONTROL_PREFIX = '#'
HEADER_SEPARATOR = ':'

LOGIN_RESPONSE_RE = re.compile(r'^# logresp (\S+) (verified|unverified)\b')

TIMESTAMP_RE = re.compile(r'(?<![0-9A-Za-z])([0-9A-Za-z]{6})h')

# Latitude, symbol table, longitude, symbol code
POSITION_RE = re.compile(
    r'(?P<lat>\d+(?:\.\d*)?)(?P<lat_dir>[NS])'
    r'(?P<table>.)'
    r'(?P<lon>\d+(?:\.\d*)?)(?P<lon_dir>[EW])'
    r'(?P<symbol>.)'
)

# Course/Speed directly after the symbol code: CCC/SSS/
KINEMATICS_RE = re.compile(r'(?P<track>\d{3})/(?P<speed>\d{3})/')

ALTITUDE_RE = re.compile(r'A=(-\d{5}|\d{6})')

# Name -> (pattern, converter). Absent tokens decode to None.
EXTENSION_FIELDS: dict[str, tuple[re.Pattern, Callable[[str], Any]]] = {
    'id': (re.compile(r'\bid([0-9A-Za-z]{8})\b'), str),
    'climb_rate': (re.compile(r'(?<!\S)([+-]?[0-9.]+)fpm(?!\S)'), float),
    'ground_turning_rate': (re.compile(r'(?<!\S)([+-]?[0-9.]+)rot(?!\S)'), float),
    'gps_accuracy': (re.compile(r'\bgps(\d+x\d+)\b'), str),
    'flight_level': (re.compile(r'(?<!\S)FL([0-9.]+)(?!\S)'), float),
    'signal_strength': (re.compile(r'(?<!\S)([+-]?[0-9.]+)dB(?!\S)'), float),
    'error_count': (re.compile(r'(?<!\S)(\d+)e(?!\S)'), int),
    'frequency_offset': (re.compile(r'(?<!\S)([+-]?[0-9.]+)kHz(?!\S)'), float),
}


# =============================================================================
# Control lines
# =============================================================================

def parse_login_answer(line: str) -> bool:
    """Return True only for a '# logresp <user> verified' server response."""
    match = LOGIN_RESPONSE_RE.match(line)
    return bool(match) and match.group(2) == 'verified'


def classify_control_line(line: str) -> Optional[DecodeOutcome]:
    """
    Classify a server control line.

    Returns:
        LoginResult for a login response, Ignored for any other control
        line, or None when the line is not a control line at all.
    """
    if not line.startswith(CONTROL_PREFIX):
        return None

    match = LOGIN_RESPONSE_RE.match(line)
    if match:
        return LoginResult(verified=match.group(2) == 'verified')
    return Ignored(line=line)


# =============================================================================
# Header
# =============================================================================

def parse_header(header: str) -> Header:
    """
    Decode 'SENDER>TOCALL,...,METHOD,RECEIVER'.

    Only the last two comma-separated tokens after '>' carry meaning; any
    number of routing tokens may precede them.

    Raises:
        DecodeError: If the header does not have that shape
    """
    sender, sep, path = header.partition('>')
    if not sep:
        raise DecodeError(DecodeStage.HEADER, "missing '>' after sender")

    tokens = path.split(',')
    if len(tokens) < 2:
        raise DecodeError(DecodeStage.HEADER, f"expected at least two path tokens, got {path!r}")

    method, receiver = tokens[-2], tokens[-1]
    if not sender:
        raise DecodeError(DecodeStage.HEADER, 'empty sender')
    if not method:
        raise DecodeError(DecodeStage.HEADER, 'empty transmission method')
    if not receiver:
        raise DecodeError(DecodeStage.HEADER, 'empty receiver')

    return Header(sender_id=sender, receiver=receiver, transmission_method=method)


# =============================================================================
# Body
# =============================================================================

def parse_timestamp(data: str, reference_date: date) -> datetime:
    """Decode the HHMMSSh time of day and anchor it on ``reference_date`` (UTC)."""
    match = TIMESTAMP_RE.search(data)
    if not match:
        raise DecodeError(DecodeStage.TIMESTAMP, 'no HHMMSSh token')

    token = match.group(1)
    if not token.isdigit():
        raise DecodeError(DecodeStage.TIMESTAMP, f'non-numeric time {token!r}')

    hour, minute, second = int(token[0:2]), int(token[2:4]), int(token[4:6])
    if hour > 23 or minute > 59 or second > 59:
        raise DecodeError(DecodeStage.TIMESTAMP, f'time out of range {token!r}')

    return datetime.combine(reference_date, time(hour, minute, second), tzinfo=timezone.utc)


def convert_coordinate(token: str) -> float:
    """
    Convert a degrees + decimal minutes token to a single decimal value.

    The decimal point is dropped and the digits are read as hundredths of a
    minute, then divided by 10000, so '5145.95' -> 51.4595 and
    '00111.50' -> 1.115. The scale is fixed: '5145.9' -> 5.1459.
    """
    whole, _, fraction = token.partition('.')
    return int(whole + fraction) / 10000


def parse_position(data: str) -> tuple[Coordinate, int]:
    """
    Decode the position block.

    Returns:
        The coordinate and the offset just past the symbol code
    """
    match = POSITION_RE.search(data)
    if not match:
        raise DecodeError(DecodeStage.POSITION, 'no DDMM.mmN/DDDMM.mmW position')

    position = Coordinate(
        latitude=convert_coordinate(match.group('lat')),
        longitude=convert_coordinate(match.group('lon')),
    )
    return position, match.end()


def parse_kinematics(data: str, offset: int) -> tuple[int, float]:
    """Decode 'CCC/SSS/' (ground track in degrees, ground speed) at ``offset``."""
    match = KINEMATICS_RE.match(data, offset)
    if not match:
        raise DecodeError(DecodeStage.KINEMATICS, 'no CCC/SSS/ course and speed after symbol')

    track = int(match.group('track'))
    if track >= 360:
        raise DecodeError(DecodeStage.KINEMATICS, f'ground track out of range: {track}')

    return track, float(match.group('speed'))


def parse_altitude(data: str) -> float:
    """Decode 'A=AAAAAA'. No unit conversion is applied."""
    match = ALTITUDE_RE.search(data)
    if not match:
        raise DecodeError(DecodeStage.ALTITUDE, 'no A=AAAAAA altitude')
    return float(int(match.group(1)))


def parse_extensions(data: str) -> dict[str, Any]:
    """
    Decode the optional OGN extension tokens.

    Every field is looked up independently; a missing token yields None.

    Raises:
        DecodeError: If a numeric token is present but not a number
    """
    fields: dict[str, Any] = {}
    for name, (pattern, convert) in EXTENSION_FIELDS.items():
        match = pattern.search(data)
        if not match:
            fields[name] = None
            continue
        try:
            fields[name] = convert(match.group(1))
        except ValueError as e:
            raise DecodeError(
                DecodeStage.EXTENSION_NUMERIC,
                f'bad {name} value {match.group(1)!r}'
            ) from e
    return fields


def parse_body(data: str, reference_date: date) -> Body:
    """Decode the payload that follows the header separator."""
    timestamp = parse_timestamp(data, reference_date)
    position, offset = parse_position(data)
    ground_track, ground_speed = parse_kinematics(data, offset)
    altitude = parse_altitude(data)

    return Body(
        timestamp=timestamp,
        position=position,
        ground_speed=ground_speed,
        ground_track=ground_track,
        altitude=altitude,
        **parse_extensions(data),
    )


# =============================================================================
# Whole line
# =============================================================================

def parse_transmission(line: str, reference_date: date) -> Transmission:
    """
    Decode a beacon line into a Transmission.

    Raises:
        DecodeError: On the first stage that rejects the line
    """
    header_text, sep, body_text = line.partition(HEADER_SEPARATOR)
    if not sep:
        raise DecodeError(DecodeStage.HEADER, f"missing '{HEADER_SEPARATOR}' separator")

    header = parse_header(header_text)
    body = parse_body(body_text, reference_date)
    return Transmission(header=header, body=body)


def decode_line(line: str, reference_date: date) -> DecodeOutcome:
    """
    Decode one line of server traffic.

    Args:
        line: Raw line without its line terminator
        reference_date: UTC date the HHMMSS timestamp belongs to

    Returns:
        Decoded, LoginResult, Ignored or Malformed. Never raises for bad input.
    """
    control = classify_control_line(line)
    if control is not None:
        return control

    try:
        return Decoded(transmission=parse_transmission(line, reference_date))
    except DecodeError as e:
        return Malformed(stage=e.stage, reason=e.reason, line=line)
