#!/usr/bin/env python3
"""
OGNWATCH - Open Glider Network beacon monitor

Usage:
    python ognwatch.py [--port 5060] [--host 0.0.0.0] [--debug]
"""

from app import main


if __name__ == '__main__':
    main()
