"""
Typed records produced by the OGN beacon decoder.

Every record is frozen: a decode call builds it in one step and nothing
mutates it afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional, Union


class DecodeStage(Enum):
    """Decoder stage at which a beacon line was rejected."""
    HEADER = 'header'
    TIMESTAMP = 'timestamp'
    POSITION = 'position'
    KINEMATICS = 'kinematics'
    ALTITUDE = 'altitude'
    EXTENSION_NUMERIC = 'extension_numeric'


class Coordinate(NamedTuple):
    """Latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Header:
    """Routing prefix of a beacon line."""
    sender_id: str
    receiver: str
    transmission_method: str

    def to_dict(self) -> dict:
        return {
            'sender_id': self.sender_id,
            'receiver': self.receiver,
            'transmission_method': self.transmission_method,
        }


@dataclass(frozen=True)
class Body:
    """Position, kinematics and optional OGN extension fields of a beacon."""
    timestamp: datetime
    position: Coordinate
    ground_speed: float
    ground_track: int
    altitude: float
    ground_turning_rate: Optional[float] = None
    climb_rate: Optional[float] = None
    gps_accuracy: Optional[str] = None
    id: Optional[str] = None
    flight_level: Optional[float] = None
    signal_strength: Optional[float] = None
    error_count: Optional[int] = None
    frequency_offset: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            'timestamp': self.timestamp.isoformat(),
            'lat': self.position.latitude,
            'lon': self.position.longitude,
            'ground_speed': self.ground_speed,
            'ground_track': self.ground_track,
            'altitude': self.altitude,
            'ground_turning_rate': self.ground_turning_rate,
            'climb_rate': self.climb_rate,
            'gps_accuracy': self.gps_accuracy,
            'id': self.id,
            'flight_level': self.flight_level,
            'signal_strength': self.signal_strength,
            'error_count': self.error_count,
            'frequency_offset': self.frequency_offset,
        }


@dataclass(frozen=True)
class Transmission:
    """A fully decoded beacon line."""
    header: Header
    body: Body

    def to_dict(self) -> dict:
        return {
            'header': self.header.to_dict(),
            'body': self.body.to_dict(),
        }


# =============================================================================
# Decode outcomes
# =============================================================================

@dataclass(frozen=True)
class Decoded:
    """Beacon line decoded into a transmission."""
    transmission: Transmission

    def to_dict(self) -> dict:
        return {'outcome': 'decoded', **self.transmission.to_dict()}


@dataclass(frozen=True)
class LoginResult:
    """Server login response; ``verified`` is the authentication result."""
    verified: bool

    def to_dict(self) -> dict:
        return {'outcome': 'login', 'verified': self.verified}


@dataclass(frozen=True)
class Ignored:
    """Control traffic (heartbeats, banners) that carries no beacon."""
    line: str

    def to_dict(self) -> dict:
        return {'outcome': 'ignored', 'line': self.line}


@dataclass(frozen=True)
class Malformed:
    """Line that failed to decode at ``stage``."""
    stage: DecodeStage
    reason: str
    line: str

    def to_dict(self) -> dict:
        return {
            'outcome': 'malformed',
            'stage': self.stage.value,
            'reason': self.reason,
            'line': self.line,
        }


DecodeOutcome = Union[Decoded, LoginResult, Ignored, Malformed]


class DecodeError(ValueError):
    """Exception raised when a decode stage rejects its input."""

    def __init__(self, stage: DecodeStage, reason: str):
        super().__init__(f"{stage.value}: {reason}")
        self.stage = stage
        self.reason = reason
