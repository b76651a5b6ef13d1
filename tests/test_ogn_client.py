"""
Tests for the APRS-IS client.

Tests cover:
- Login command and handshake
- Filter handling per server port
- Line reading from a chunked socket
- Reader thread dispatch and reconnect
"""

import socket
import threading
import time
from unittest.mock import MagicMock

import pytest

from utils.ogn.client import (
    LoginData,
    OgnClient,
    OgnClientError,
    OgnLoginError,
    ServerPort,
    range_filter,
)


BANNER = b"# aprsc 2.1.14-g5e22b37 GLIDERN2 37.187.40.234:14580\r\n"
LOGIN_OK = b"# logresp DL1ABC verified, server GLIDERN2\r\n"
LOGIN_FAILED = b"# logresp DL1ABC unverified, server GLIDERN2\r\n"
BEACON = (
    b"OGN82149C>OGNTRK,qAS,OxfBarton:/130208h5145.95N/00111.50W'232/000/A=000295 "
    b"id3782149C -4.3rot +000fpm gps3x5\r\n"
)


def make_socket(chunks):
    """Mock socket returning ``chunks`` from recv(), then timing out."""
    pending = list(chunks)
    sock = MagicMock()

    def recv(size):
        if pending:
            return pending.pop(0)
        time.sleep(0.01)
        raise socket.timeout()

    sock.recv.side_effect = recv
    return sock


@pytest.fixture
def create_connection(mocker):
    return mocker.patch('utils.ogn.client.socket.create_connection')


@pytest.fixture
def credentials():
    return LoginData(user_name='DL1ABC', pass_code='12345', app_name='ognwatch', app_version='0.3.0')


# =============================================================================
# LoginData / filters
# =============================================================================

class TestLoginData:
    """Tests for login credentials."""

    def test_command(self, credentials):
        assert credentials.command() == "user DL1ABC pass 12345 vers ognwatch 0.3.0"

    def test_receive_only_defaults(self):
        data = LoginData()
        assert data.user_name == 'N0CALL'
        assert data.pass_code == '-1'
        assert data.command().startswith("user N0CALL pass -1 vers ognwatch ")


class TestRangeFilter:
    """Tests for range filter construction."""

    def test_range_filter(self):
        assert range_filter(47, 7, 100) == "r/47/7/100"
        assert range_filter('51.5', '-1.25', '50') == "r/51.5/-1.25/50"

    @pytest.mark.parametrize("lat, lon, radius", [(91, 7, 100), (47, 181, 100), (47, 7, 0)])
    def test_range_filter_rejects_bad_values(self, lat, lon, radius):
        with pytest.raises(ValueError):
            range_filter(lat, lon, radius)


# =============================================================================
# Connection and handshake
# =============================================================================

class TestOgnClient:
    """Tests for connection, login and filters."""

    def test_init_does_not_connect(self, create_connection):
        client = OgnClient('aprs.example.org', ServerPort.FILTER)
        assert client.is_connected is False
        assert client.is_logged_in is False
        create_connection.assert_not_called()

    def test_connect_reads_banner(self, create_connection):
        create_connection.return_value = make_socket([BANNER])

        client = OgnClient('aprs.example.org', ServerPort.FILTER, timeout=3.0)
        client.connect()

        create_connection.assert_called_once_with(('aprs.example.org', 14580), timeout=3.0)
        assert client.is_connected is True
        assert client.server_banner.startswith("# aprsc")

    def test_connect_failure_propagates(self, create_connection):
        create_connection.side_effect = ConnectionRefusedError("refused")

        client = OgnClient('aprs.example.org')
        with pytest.raises(OSError):
            client.connect()
        assert client.is_connected is False

    def test_login_verified(self, create_connection, credentials):
        sock = make_socket([BANNER, LOGIN_OK])
        create_connection.return_value = sock

        client = OgnClient('aprs.example.org')
        client.connect()
        client.login(credentials)

        sock.sendall.assert_called_once_with(b"user DL1ABC pass 12345 vers ognwatch 0.3.0\r\n")
        assert client.is_logged_in is True
        assert client.user == 'DL1ABC'

    def test_login_unverified(self, create_connection, credentials):
        create_connection.return_value = make_socket([BANNER, LOGIN_FAILED])

        client = OgnClient('aprs.example.org')
        client.connect()
        with pytest.raises(OgnLoginError) as excinfo:
            client.login(credentials)

        assert "unverified" in excinfo.value.answer
        assert client.is_logged_in is False
        assert client.user is None

    def test_login_requires_connection(self, credentials):
        client = OgnClient('aprs.example.org')
        with pytest.raises(OgnClientError):
            client.login(credentials)

    def test_set_filter(self, create_connection):
        sock = make_socket([BANNER])
        create_connection.return_value = sock

        client = OgnClient('aprs.example.org', ServerPort.FILTER)
        client.connect()
        client.set_filter("r/47/7/100")

        sock.sendall.assert_called_once_with(b"#filter r/47/7/100\r\n")

    def test_set_filter_on_full_feed(self, create_connection):
        sock = make_socket([BANNER])
        create_connection.return_value = sock

        client = OgnClient('aprs.example.org', ServerPort.FULL_FEED)
        client.connect()
        with pytest.raises(OgnClientError):
            client.set_filter("r/47/7/100")
        sock.sendall.assert_not_called()

    def test_read_line_across_chunks(self, create_connection):
        create_connection.return_value = make_socket([BANNER, BEACON[:20], BEACON[20:] + b"#keep"])

        client = OgnClient('aprs.example.org')
        client.connect()

        assert client.read_line() == BEACON.decode().rstrip('\r\n')

    def test_read_line_closed_by_server(self, create_connection):
        create_connection.return_value = make_socket([BANNER, b""])

        client = OgnClient('aprs.example.org')
        client.connect()
        with pytest.raises(ConnectionError):
            client.read_line()

    def test_close(self, create_connection):
        sock = make_socket([BANNER])
        create_connection.return_value = sock

        client = OgnClient('aprs.example.org')
        client.connect()
        client.close()

        sock.close.assert_called_once()
        assert client.is_connected is False


# =============================================================================
# Reader thread
# =============================================================================

class TestReaderThread:
    """Tests for the background reader."""

    def test_dispatches_lines_to_callback(self, create_connection):
        create_connection.return_value = make_socket([BANNER, BEACON])
        received = []
        done = threading.Event()

        def callback(line):
            received.append(line)
            done.set()

        client = OgnClient('aprs.example.org', callback=callback)
        client.start()
        try:
            assert done.wait(timeout=2.0)
            assert client.is_running is True
        finally:
            client.stop()

        assert received == [BEACON.decode().rstrip('\r\n')]
        assert client.lines_received == 1
        assert client.is_running is False

    def test_start_twice(self, create_connection):
        create_connection.return_value = make_socket([BANNER])

        client = OgnClient('aprs.example.org')
        client.start()
        try:
            with pytest.raises(OgnClientError):
                client.start()
        finally:
            client.stop()

    def test_callback_error_does_not_stop_reader(self, create_connection):
        create_connection.return_value = make_socket([BANNER, b"first\r\nsecond\r\n"])
        received = []
        done = threading.Event()

        def callback(line):
            received.append(line)
            if line == 'first':
                raise RuntimeError("boom")
            done.set()

        client = OgnClient('aprs.example.org', callback=callback)
        client.start()
        try:
            assert done.wait(timeout=2.0)
        finally:
            client.stop()

        assert received == ['first', 'second']

    def test_reconnects_and_logs_in_again(self, create_connection, credentials):
        first = make_socket([BANNER, LOGIN_OK, b""])
        second = make_socket([BANNER, LOGIN_OK, BEACON])
        create_connection.side_effect = [first, second]
        done = threading.Event()

        client = OgnClient('aprs.example.org', callback=lambda line: done.set(), reconnect_delay=0)
        client.connect()
        client.login(credentials)
        client.start()
        try:
            assert done.wait(timeout=2.0)
        finally:
            client.stop()

        assert create_connection.call_count == 2
        second.sendall.assert_any_call(b"user DL1ABC pass 12345 vers ognwatch 0.3.0\r\n")

    def test_sends_keepalive(self, create_connection):
        sock = make_socket([BANNER])
        create_connection.return_value = sock

        client = OgnClient('aprs.example.org', keepalive_interval=0)
        client.start()
        try:
            deadline = time.time() + 2.0
            while not sock.sendall.called and time.time() < deadline:
                time.sleep(0.01)
        finally:
            client.stop()

        sock.sendall.assert_any_call(b"#keepalive\r\n")
