"""Configuration loader for the Bitstamp client.

Supports YAML format with environment variable interpolation.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class ExchangeConfig:
    """Bitstamp endpoint settings."""
    rest_host: str = "www.bitstamp.net"
    scheme: str = "https"
    ws_url: str = "wss://ws.bitstamp.net"
    timeout: int = 10


@dataclass
class StreamConfig:
    """Event-stream settings."""
    stale_timeout_seconds: float = 20.0  # max silence before the stream is dead


@dataclass
class LoggingConfig:
    log_file: str = "bitstamp.log"
    log_level: str = "INFO"


@dataclass
class ClientConfig:
    """Complete client configuration."""
    exchange: ExchangeConfig = field(default_factory=ExchangeConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def default(cls) -> "ClientConfig":
        return cls()

    @classmethod
    def from_yaml(cls, config_path: str) -> "ClientConfig":
        """Load configuration from YAML file with env var interpolation.

        Args:
            config_path: Path to YAML config file

        Returns:
            ClientConfig instance

        Example YAML:
            exchange:
              rest_host: www.bitstamp.net
              timeout: 10
            stream:
              stale_timeout_seconds: 20
            logging:
              log_file: "${LOG_DIR}/bitstamp.log"
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with config_file.open("r") as f:
            raw = f.read()

        # Interpolate environment variables: ${VAR_NAME}
        for key, value in os.environ.items():
            raw = raw.replace(f"${{{key}}}", value)

        data = yaml.safe_load(raw) or {}

        stream = data.get("stream", {})
        if "stale_timeout_seconds" in stream:
            stream = dict(stream, stale_timeout_seconds=float(stream["stale_timeout_seconds"]))

        return cls(
            exchange=ExchangeConfig(**data.get("exchange", {})),
            stream=StreamConfig(**stream),
            logging=LoggingConfig(**data.get("logging", {})),
        )

    def to_yaml(self, output_path: str) -> None:
        """Save configuration to YAML file."""
        data = {
            "exchange": {
                "rest_host": self.exchange.rest_host,
                "scheme": self.exchange.scheme,
                "ws_url": self.exchange.ws_url,
                "timeout": self.exchange.timeout,
            },
            "stream": {
                "stale_timeout_seconds": self.stream.stale_timeout_seconds,
            },
            "logging": {
                "log_file": self.logging.log_file,
                "log_level": self.logging.log_level,
            },
        }

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with output_file.open("w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
