"""OGN beacon decoding and live APRS-IS feed routes."""

from __future__ import annotations

import queue
import time
from datetime import datetime, timezone
from typing import Generator

from flask import Blueprint, jsonify, request, Response

import app as app_module
import config
from utils.logging import ogn_logger as logger
from utils.sse import format_sse, clear_queue
from utils.validation import (
    validate_callsign,
    validate_filter,
    validate_host,
    validate_passcode,
    validate_port,
    validate_reference_date,
)
from utils.constants import SSE_KEEPALIVE_INTERVAL, SSE_QUEUE_TIMEOUT
from utils.ogn import (
    Decoded,
    LoginData,
    Malformed,
    OgnClient,
    OgnClientError,
    OgnLoginError,
    ServerPort,
    decode_line,
    range_filter,
)

ogn_bp = Blueprint('ogn', __name__, url_prefix='/ogn')

# Statistics
ogn_beacon_count = 0
ogn_malformed_count = 0
ogn_last_beacon_time = None


def handle_line(line: str) -> None:
    """Decode one line from the live feed and queue decoded beacons."""
    global ogn_beacon_count, ogn_malformed_count, ogn_last_beacon_time

    outcome = decode_line(line, datetime.now(timezone.utc).date())

    if isinstance(outcome, Decoded):
        ogn_beacon_count += 1
        ogn_last_beacon_time = time.time()
        try:
            app_module.ogn_queue.put_nowait({'type': 'beacon', **outcome.transmission.to_dict()})
        except queue.Full:
            logger.debug("Beacon queue full, dropping beacon")
    elif isinstance(outcome, Malformed):
        ogn_malformed_count += 1
        logger.debug(f"Skipping malformed line at {outcome.stage.value}: {outcome.reason} | {line}")


@ogn_bp.route('/decode', methods=['POST'])
def decode() -> Response:
    """Decode a single line posted as JSON {'line': ..., 'date': 'YYYY-MM-DD'}."""
    data = request.json or {}

    line = data.get('line')
    if not isinstance(line, str) or not line:
        return jsonify({'status': 'error', 'message': 'line is required'}), 400

    try:
        if data.get('date'):
            reference_date = validate_reference_date(data['date'])
        else:
            reference_date = datetime.now(timezone.utc).date()
    except ValueError as e:
        return jsonify({'status': 'error', 'message': str(e)}), 400

    outcome = decode_line(line.rstrip('\r\n'), reference_date)
    return jsonify({'status': 'success', **outcome.to_dict()})


@ogn_bp.route('/status')
def ogn_status() -> Response:
    """Get live feed status."""
    client = app_module.ogn_client

    return jsonify({
        'running': bool(client and client.is_running),
        'connected': bool(client and client.is_connected),
        'logged_in': bool(client and client.is_logged_in),
        'server': f"{client.host}:{int(client.port)}" if client else None,
        'lines_received': client.lines_received if client else 0,
        'beacon_count': ogn_beacon_count,
        'malformed_count': ogn_malformed_count,
        'last_beacon_time': ogn_last_beacon_time,
        'queue_size': app_module.ogn_queue.qsize(),
    })


@ogn_bp.route('/start', methods=['POST'])
def start_ogn() -> Response:
    """Connect to APRS-IS, log in and start streaming beacons."""
    global ogn_beacon_count, ogn_malformed_count, ogn_last_beacon_time

    with app_module.ogn_lock:
        if app_module.ogn_client and app_module.ogn_client.is_running:
            return jsonify({
                'status': 'error',
                'message': 'OGN feed already running'
            }), 409

        data = request.json or {}

        # Validate inputs
        try:
            host = validate_host(data.get('host', config.APRS_HOST))
            port = ServerPort(validate_port(data.get('port', config.APRS_PORT)))
            user = validate_callsign(data.get('user', config.APRS_USER))
            passcode = validate_passcode(data.get('passcode', config.APRS_PASSCODE))
            if all(key in data for key in ('lat', 'lon', 'radius')):
                filter_expr = range_filter(data['lat'], data['lon'], data['radius'])
            elif data.get('filter') or config.APRS_FILTER:
                filter_expr = validate_filter(data.get('filter') or config.APRS_FILTER)
            else:
                filter_expr = None
        except ValueError as e:
            return jsonify({'status': 'error', 'message': str(e)}), 400

        if filter_expr and port != ServerPort.FILTER:
            return jsonify({
                'status': 'error',
                'message': f'Filters require port {int(ServerPort.FILTER)}'
            }), 400

        clear_queue(app_module.ogn_queue)
        ogn_beacon_count = 0
        ogn_malformed_count = 0
        ogn_last_beacon_time = None

        client = OgnClient(
            host=host,
            port=port,
            callback=handle_line,
            timeout=config.SOCKET_TIMEOUT,
            reconnect_delay=config.RECONNECT_DELAY,
            keepalive_interval=config.KEEPALIVE_INTERVAL,
        )

        try:
            client.connect()
            client.login(LoginData(user_name=user, pass_code=passcode))
            if filter_expr:
                client.set_filter(filter_expr)
            client.start()
        except OgnLoginError as e:
            client.close()
            return jsonify({'status': 'error', 'message': str(e)}), 401
        except (OSError, OgnClientError) as e:
            client.close()
            logger.error(f"Failed to start OGN feed: {e}")
            return jsonify({'status': 'error', 'message': str(e)}), 502

        app_module.ogn_client = client

    logger.info(f"OGN feed started on {host}:{int(port)} (filter: {filter_expr})")
    return jsonify({
        'status': 'success',
        'message': 'OGN feed started',
        'server': f"{host}:{int(port)}",
        'filter': filter_expr,
    })


@ogn_bp.route('/stop', methods=['POST'])
def stop_ogn() -> Response:
    """Stop the live feed."""
    with app_module.ogn_lock:
        if app_module.ogn_client:
            app_module.ogn_client.stop()
            app_module.ogn_client = None

    return jsonify({'status': 'stopped'})


@ogn_bp.route('/stream')
def stream_ogn() -> Response:
    """SSE stream for decoded OGN beacons."""
    def generate() -> Generator[str, None, None]:
        last_keepalive = time.time()

        while True:
            try:
                msg = app_module.ogn_queue.get(timeout=SSE_QUEUE_TIMEOUT)
                last_keepalive = time.time()
                yield format_sse(msg)
            except queue.Empty:
                now = time.time()
                if now - last_keepalive >= SSE_KEEPALIVE_INTERVAL:
                    yield format_sse({'type': 'keepalive'})
                    last_keepalive = now

    response = Response(generate(), mimetype='text/event-stream')
    response.headers['Cache-Control'] = 'no-cache'
    response.headers['X-Accel-Buffering'] = 'no'
    return response
