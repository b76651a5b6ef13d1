"""Tests for configuration and the application shell."""

import importlib
import logging

import pytest


@pytest.fixture
def reload_config(monkeypatch):
    """Reload config after changing OGNWATCH_* variables."""
    import config

    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(f'OGNWATCH_{key}', value)
        return importlib.reload(config)

    yield _reload
    monkeypatch.undo()
    importlib.reload(config)


class TestConfig:
    """Tests for environment-driven configuration."""

    def test_defaults(self, reload_config):
        config = reload_config()
        assert config.APRS_HOST == 'aprs.glidernet.org'
        assert config.APRS_PORT == 14580
        assert config.APRS_USER == 'N0CALL'
        assert config.APRS_PASSCODE == '-1'

    def test_env_overrides(self, reload_config):
        config = reload_config(APRS_PORT='10152', DEBUG='yes', LOG_LEVEL='debug', RECONNECT_DELAY='0.5')
        assert config.APRS_PORT == 10152
        assert config.DEBUG is True
        assert config.LOG_LEVEL == logging.DEBUG
        assert config.RECONNECT_DELAY == 0.5

    def test_bad_values_fall_back(self, reload_config):
        config = reload_config(PORT='http', LOG_LEVEL='loud', SOCKET_TIMEOUT='soon')
        assert config.PORT == 5060
        assert config.LOG_LEVEL == logging.WARNING
        assert config.SOCKET_TIMEOUT == 5.0


class TestApp:
    """Tests for the Flask application."""

    def test_create_app_registers_blueprint(self):
        from app import create_app

        app = create_app()
        assert 'ogn' in app.blueprints
        # Safe to call twice
        assert create_app() is app

    def test_health(self):
        from app import create_app

        client = create_app().test_client()
        data = client.get('/health').get_json()

        assert data['status'] == 'ok'
        assert data['feed_running'] is False

    def test_main_logs_startup(self, mocker, caplog):
        import app as app_module

        mocker.patch('sys.argv', ['ognwatch', '-p', '5099', '-H', '127.0.0.1'])
        mocker.patch('config.configure_logging')
        mock_run = mocker.patch.object(app_module.app, 'run')
        caplog.set_level(logging.INFO, logger='ognwatch.app')

        app_module.main()

        mock_run.assert_called_once_with(host='127.0.0.1', port=5099, debug=False, threaded=True)
        assert 'Starting OGNWATCH' in caplog.text
        assert '127.0.0.1:5099' in caplog.text


class TestSse:
    """Tests for SSE helpers."""

    def test_format_sse(self):
        from utils.sse import format_sse

        assert format_sse({'type': 'keepalive'}) == 'data: {"type": "keepalive"}\n\n'

    def test_clear_queue(self):
        import queue
        from utils.sse import clear_queue

        q = queue.Queue()
        q.put(1)
        q.put(2)
        assert clear_queue(q) == 2
        assert q.empty()
