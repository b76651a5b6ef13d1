"""
OGNWATCH - Open Glider Network beacon monitor

Flask application and shared state.
"""

from __future__ import annotations

import queue
import threading

from flask import Flask, jsonify, Response

from utils.constants import QUEUE_MAX_SIZE
from utils.logging import app_logger as logger


# Create Flask app
app = Flask(__name__)

# ============================================
# SHARED FEED STATE
# ============================================

# APRS-IS client (utils.ogn.OgnClient) and decoded beacon queue
ogn_client = None
ogn_queue = queue.Queue(maxsize=QUEUE_MAX_SIZE)
ogn_lock = threading.Lock()


# ============================================
# MAIN ROUTES
# ============================================

@app.route('/health')
def health() -> Response:
    import config

    return jsonify({
        'status': 'ok',
        'version': config.VERSION,
        'feed_running': bool(ogn_client and ogn_client.is_running),
    })


def create_app() -> Flask:
    """Register blueprints and return the application."""
    from routes import register_blueprints

    if 'ogn' not in app.blueprints:
        register_blueprints(app)
        logger.debug(f"Registered blueprints: {', '.join(app.blueprints)}")
    return app


def main() -> None:
    """Main entry point."""
    import argparse
    import config

    parser = argparse.ArgumentParser(
        description='OGNWATCH - Open Glider Network beacon monitor',
        epilog='Environment variables: OGNWATCH_HOST, OGNWATCH_PORT, OGNWATCH_DEBUG, OGNWATCH_LOG_LEVEL, '
               'OGNWATCH_APRS_HOST, OGNWATCH_APRS_PORT, OGNWATCH_APRS_USER, OGNWATCH_APRS_FILTER'
    )
    parser.add_argument(
        '-p', '--port',
        type=int,
        default=config.PORT,
        help=f'Port to run server on (default: {config.PORT})'
    )
    parser.add_argument(
        '-H', '--host',
        default=config.HOST,
        help=f'Host to bind to (default: {config.HOST})'
    )
    parser.add_argument(
        '-d', '--debug',
        action='store_true',
        default=config.DEBUG,
        help='Enable debug mode'
    )
    args = parser.parse_args()

    config.configure_logging()

    print("=" * 50)
    print("  OGNWATCH // Open Glider Network")
    print("=" * 50)
    print()

    create_app()

    print(f"Open http://localhost:{args.port}/ogn/status in your browser")
    print()
    print("Press Ctrl+C to stop")
    print()

    logger.info(f"Starting OGNWATCH {config.VERSION} on {args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug, threaded=True)
