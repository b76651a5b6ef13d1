# Utility modules for OGNWATCH
from .logging import (
    get_logger,
    app_logger,
    ogn_logger,
    client_logger,
)
from .validation import (
    validate_latitude,
    validate_longitude,
    validate_radius_km,
    validate_host,
    validate_port,
    validate_callsign,
    validate_passcode,
    validate_filter,
    validate_reference_date,
)
from .sse import format_sse, clear_queue
