"""Named loggers for ognwatch."""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ognwatch namespace."""
    if not name.startswith('ognwatch'):
        name = f'ognwatch.{name}'
    return logging.getLogger(name)


app_logger = get_logger('ognwatch.app')
ogn_logger = get_logger('ognwatch.ogn')
client_logger = get_logger('ognwatch.client')
