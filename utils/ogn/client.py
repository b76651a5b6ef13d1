"""
APRS-IS client for the Open Glider Network.

Connects to an APRS-IS server, performs the login handshake, applies
server-side filters and hands every received line to a callback from a
single background reader thread.
"""

from __future__ import annotations

import socket
import threading
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Optional

from config import VERSION
from utils.constants import (
    APP_NAME,
    APRS_FILTER_PORT,
    APRS_FULL_FEED_PORT,
    APRS_LINE_TERMINATOR,
    APRS_SERVER_HOST,
    DEFAULT_APRS_PASSCODE,
    DEFAULT_APRS_USER,
    READER_JOIN_TIMEOUT,
    SOCKET_BUFFER_SIZE,
)
from utils.logging import client_logger as logger
from utils.validation import validate_latitude, validate_longitude, validate_radius_km

from .parser import parse_login_answer


class ServerPort(IntEnum):
    """APRS-IS server ports."""
    FULL_FEED = APRS_FULL_FEED_PORT  # No filtering, no authentication needed
    FILTER = APRS_FILTER_PORT        # Server-side filtering supported


class OgnClientError(RuntimeError):
    """Exception raised when the client is used in a state that forbids it."""
    pass


class OgnLoginError(OgnClientError):
    """Exception raised when the server does not verify the login."""

    def __init__(self, message: str, answer: str = ''):
        super().__init__(message)
        self.answer = answer


@dataclass
class LoginData:
    """APRS-IS login credentials."""
    user_name: str = DEFAULT_APRS_USER
    pass_code: str = DEFAULT_APRS_PASSCODE
    app_name: str = APP_NAME
    app_version: str = VERSION

    def command(self) -> str:
        """Build the 'user ... pass ... vers ...' login line."""
        return f"user {self.user_name} pass {self.pass_code} vers {self.app_name} {self.app_version}"


def range_filter(lat: float, lon: float, radius_km: int) -> str:
    """Build an 'r/lat/lon/dist' range filter expression."""
    lat = validate_latitude(lat)
    lon = validate_longitude(lon)
    radius_km = validate_radius_km(radius_km)
    return f"r/{lat:g}/{lon:g}/{radius_km}"


class OgnClient:
    """Line-oriented APRS-IS client."""

    def __init__(
        self,
        host: str = APRS_SERVER_HOST,
        port: ServerPort = ServerPort.FILTER,
        callback: Optional[Callable[[str], None]] = None,
        timeout: float = 5.0,
        reconnect_delay: float = 2.0,
        keepalive_interval: float = 240.0,
    ):
        """
        Initialize client. No connection is opened until connect().

        Args:
            host: APRS-IS server hostname
            port: Full feed or filter port
            callback: Called with every line read by the reader thread
            timeout: Socket timeout in seconds
            reconnect_delay: Pause before reconnecting after a connection error
            keepalive_interval: Seconds between '#keepalive' lines
        """
        self.host = host
        self.port = ServerPort(port)
        self.callback = callback
        self.timeout = timeout
        self.reconnect_delay = reconnect_delay
        self.keepalive_interval = keepalive_interval

        self._sock: Optional[socket.socket] = None
        self._buffer = b''
        self._write_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._logged_in = False
        self._login_data: Optional[LoginData] = None
        self._filter: Optional[str] = None
        self._last_keepalive = 0.0

        self.server_banner: Optional[str] = None
        self.lines_received = 0

        logger.info(f"Created APRS-IS client for {host}:{int(self.port)}")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_connected(self) -> bool:
        return self._sock is not None

    @property
    def is_logged_in(self) -> bool:
        return self._logged_in

    @property
    def is_running(self) -> bool:
        return self._running and self._thread is not None and self._thread.is_alive()

    @property
    def user(self) -> Optional[str]:
        if self._logged_in and self._login_data:
            return self._login_data.user_name
        return None

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """
        Open the connection and read the server banner.

        Raises:
            OSError: If the server cannot be reached
        """
        target = f"{self.host}:{int(self.port)}"
        logger.info(f"Connecting to {target}...")
        try:
            self._sock = socket.create_connection((self.host, int(self.port)), timeout=self.timeout)
        except OSError as e:
            logger.error(f"Connection to {target} failed: {e}")
            raise

        self._buffer = b''
        self._logged_in = False
        self.server_banner = self.read_line()
        logger.info(f"Connected: {self.server_banner}")

    def close(self) -> None:
        """Close the socket, if open."""
        sock, self._sock = self._sock, None
        self._logged_in = False
        self._buffer = b''
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                logger.debug(f"Error closing socket: {e}")

    def login(self, login_data: Optional[LoginData] = None) -> None:
        """
        Send the login command and check the '# logresp' answer.

        Raises:
            OgnClientError: If not connected
            OgnLoginError: If the server does not verify the credentials
        """
        login_data = login_data or LoginData()
        logger.info(f"Logging in as {login_data.user_name}")

        self.send_message(login_data.command())
        answer = self.read_line()
        logger.debug(f"Login answer: {answer}")

        self._logged_in = parse_login_answer(answer)
        if not self._logged_in:
            logger.error(f"Login as {login_data.user_name} was not verified")
            raise OgnLoginError(
                f"Could not log in with the given credentials for {login_data.user_name}",
                answer=answer,
            )

        self._login_data = login_data
        logger.info("Logged in successfully")

    def set_filter(self, expression: str) -> None:
        """
        Apply a server-side filter, e.g. 'r/47/7/100'.

        Raises:
            OgnClientError: On the full feed port, which ignores filters
        """
        if self.port != ServerPort.FILTER:
            logger.error("Connected to full feed port, cannot set a filter")
            raise OgnClientError("Cannot set a filter on the full feed port")

        logger.debug(f"Applying filter: '{expression}'")
        self.send_message(f"#filter {expression}")
        self._filter = expression

    def send_keepalive(self) -> None:
        """Send a '#keepalive' comment line so the server keeps the session open."""
        self.send_message('#keepalive')
        self._last_keepalive = time.time()

    def send_message(self, message: str) -> None:
        """
        Send one line to the server.

        Raises:
            OgnClientError: If not connected
        """
        sock = self._sock
        if sock is None:
            logger.error("Not connected, cannot send message")
            raise OgnClientError("Not connected, cannot send message")

        logger.debug(f"Sending message: '{message}'")
        with self._write_lock:
            sock.sendall((message + APRS_LINE_TERMINATOR).encode('utf-8'))

    def read_line(self) -> str:
        """
        Read one line, without its terminator.

        Raises:
            OgnClientError: If not connected
            ConnectionError: If the server closed the connection
            socket.timeout: If no complete line arrived in time
        """
        sock = self._sock
        if sock is None:
            raise OgnClientError("Not connected, cannot read")

        while b'\n' not in self._buffer:
            data = sock.recv(SOCKET_BUFFER_SIZE)
            if not data:
                raise ConnectionError("Server closed the connection")
            self._buffer += data

        raw, self._buffer = self._buffer.split(b'\n', 1)
        line = raw.decode('utf-8', errors='replace').rstrip('\r')
        logger.debug(f"Read message: {line}")
        return line

    # ------------------------------------------------------------------
    # Reader thread
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Start the reader thread, connecting first if needed.

        Raises:
            OgnClientError: If the reader is already running
        """
        if self.is_running:
            raise OgnClientError("Reader thread already running")

        if not self.is_connected:
            logger.info("Currently not connected, trying to connect...")
            self.connect()

        self._running = True
        self._last_keepalive = time.time()
        self._thread = threading.Thread(target=self._run, name='ogn-reader', daemon=True)
        self._thread.start()
        logger.info("Reader thread started")

    def stop(self) -> None:
        """Stop the reader thread and close the connection."""
        self._running = False
        self.close()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=READER_JOIN_TIMEOUT)
        logger.info("APRS-IS client stopped")

    def _reconnect(self) -> None:
        """Reconnect and restore login and filter."""
        self.connect()
        if self._login_data is not None:
            self.login(self._login_data)
        if self._filter is not None:
            self.set_filter(self._filter)

    def _run(self) -> None:
        while self._running:
            try:
                if not self.is_connected:
                    self._reconnect()

                if time.time() - self._last_keepalive >= self.keepalive_interval:
                    self.send_keepalive()

                line = self.read_line()
            except socket.timeout:
                continue
            except (OSError, OgnClientError) as e:
                if not self._running:
                    break
                logger.warning(f"APRS-IS connection error: {e}, reconnecting...")
                self.close()
                time.sleep(self.reconnect_delay)
                continue

            self.lines_received += 1
            if self.callback is None:
                continue
            try:
                self.callback(line)
            except Exception:
                logger.exception(f"Callback failed for line: {line}")

        logger.info("Reader thread stopped")
