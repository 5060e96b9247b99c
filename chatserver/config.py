"""
Server configuration module.

Settings come from the environment, with command-line flags applied on top
by the entry point.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from chatserver.core.commands import DEFAULT_NICK_PATTERN

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_ENVIRONMENT = "development"
DEFAULT_OUTBOUND_QUEUE_SIZE = 256
DEFAULT_LOG_LEVEL = "INFO"
STATIC_DIR = Path(__file__).parent / "public"
POWERED_BY = "chatserver"


class ServerConfig:
    """Server configuration class."""

    def __init__(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT,
                 environment: str = DEFAULT_ENVIRONMENT,
                 nick_pattern: str = DEFAULT_NICK_PATTERN,
                 outbound_queue_size: int = DEFAULT_OUTBOUND_QUEUE_SIZE,
                 static_dir: Path = STATIC_DIR,
                 log_level: str = DEFAULT_LOG_LEVEL):
        self.host = host
        self.port = port
        self.environment = environment

        # Chat settings
        self.nick_pattern = nick_pattern
        self.outbound_queue_size = outbound_queue_size

        # HTTP settings
        self.static_dir = Path(static_dir)
        self.powered_by = POWERED_BY

        # Logging configuration
        self.log_level = log_level.upper()

    @property
    def debug(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ServerConfig':
        """
        Build a configuration from environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed
        """
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("HOST", DEFAULT_HOST),
            port=int(env.get("PORT", DEFAULT_PORT)),
            environment=env.get("CHAT_ENV", DEFAULT_ENVIRONMENT),
            nick_pattern=env.get("CHAT_NICK_PATTERN", DEFAULT_NICK_PATTERN),
            outbound_queue_size=int(env.get("CHAT_OUTBOUND_QUEUE_SIZE", DEFAULT_OUTBOUND_QUEUE_SIZE)),
            static_dir=Path(env.get("CHAT_STATIC_DIR", STATIC_DIR)),
            log_level=env.get("LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )

    def __repr__(self) -> str:
        return (f"ServerConfig(host={self.host!r}, port={self.port!r}, "
                f"environment={self.environment!r})")
