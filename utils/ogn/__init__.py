"""
OGN - Open Glider Network beacon decoding

Decodes APRS-IS beacon lines from the Open Glider Network into typed
records, and provides the APRS-IS client that feeds them.
"""

from __future__ import annotations

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

from .parser import (
    classify_control_line,
    decode_line,
    parse_body,
    parse_extensions,
    parse_header,
    parse_login_answer,
    parse_transmission,
)

from .client import (
    LoginData,
    OgnClient,
    OgnClientError,
    OgnLoginError,
    ServerPort,
    range_filter,
)

__all__ = [
    # Records
    'Body',
    'Coordinate',
    'DecodeError',
    'DecodeOutcome',
    'DecodeStage',
    'Decoded',
    'Header',
    'Ignored',
    'LoginResult',
    'Malformed',
    'Transmission',
    # Decoder
    'classify_control_line',
    'decode_line',
    'parse_body',
    'parse_extensions',
    'parse_header',
    'parse_login_answer',
    'parse_transmission',
    # Client
    'LoginData',
    'OgnClient',
    'OgnClientError',
    'OgnLoginError',
    'ServerPort',
    'range_filter',
]
