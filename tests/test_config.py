import json

import pytest

from bitstamp_api.config import ClientConfig, ExchangeConfig, LoggingConfig, StreamConfig
from bitstamp_api.logging_setup import logger, setup_logging, setup_logging_from_config


def test_defaults():
    config = ClientConfig.default()
    assert config.exchange.rest_host == "www.bitstamp.net"
    assert config.exchange.scheme == "https"
    assert config.exchange.ws_url == "wss://ws.bitstamp.net"
    assert config.stream.stale_timeout_seconds == 20.0
    assert config.logging.log_level == "INFO"


def test_from_yaml_with_env_interpolation(tmp_path, monkeypatch):
    monkeypatch.setenv("BTS_LOG_DIR", str(tmp_path / "logs"))
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "exchange:\n"
        "  rest_host: sandbox.bitstamp.test\n"
        "  timeout: 5\n"
        "stream:\n"
        "  stale_timeout_seconds: 30\n"
        "logging:\n"
        "  log_file: \"${BTS_LOG_DIR}/bitstamp.log\"\n"
    )

    config = ClientConfig.from_yaml(str(config_file))

    assert config.exchange.rest_host == "sandbox.bitstamp.test"
    assert config.exchange.timeout == 5
    assert config.exchange.scheme == "https"
    assert config.stream.stale_timeout_seconds == 30.0
    assert config.logging.log_file == f"{tmp_path / 'logs'}/bitstamp.log"


def test_yaml_round_trip(tmp_path):
    original = ClientConfig(
        exchange=ExchangeConfig(rest_host="h", scheme="http", ws_url="ws://h/", timeout=7),
        stream=StreamConfig(stale_timeout_seconds=12.5),
        logging=LoggingConfig(log_file="x.log", log_level="DEBUG"),
    )
    path = tmp_path / "out" / "config.yaml"
    original.to_yaml(str(path))

    assert ClientConfig.from_yaml(str(path)) == original


def test_missing_config_file_raises():
    with pytest.raises(FileNotFoundError):
        ClientConfig.from_yaml("/nonexistent/config.yaml")


def test_empty_config_file_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert ClientConfig.from_yaml(str(path)) == ClientConfig.default()


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "bitstamp.log"
    setup_logging(log_file=str(log_file), level="DEBUG", enable_console=False)
    logger.info("hello from the client")
    logger.remove()

    assert "hello from the client" in log_file.read_text()


def test_json_log_file(tmp_path):
    log_file = tmp_path / "bitstamp.jsonl"
    setup_logging(log_file=str(log_file), level="INFO", enable_console=False, json_file=True)
    logger.warning("stream went stale")
    logger.remove()

    record = json.loads(log_file.read_text().splitlines()[0])
    assert record["record"]["message"] == "stream went stale"
    assert record["record"]["level"]["name"] == "WARNING"


def test_setup_logging_from_config_respects_level(tmp_path):
    log_file = tmp_path / "quiet.log"
    setup_logging_from_config(LoggingConfig(log_file=str(log_file), log_level="ERROR"), enable_console=False)
    logger.info("hidden")
    logger.error("shown")
    logger.remove()

    text = log_file.read_text()
    assert "shown" in text
    assert "hidden" not in text
