"""
Configuration management for ForgeX SDK

Loads settings from environment variables and .env file.
Includes logging configuration with rotating file output.

Provider API keys read here are only consumed by Credentials.from_env(),
which example scripts use. ForgeXClient itself takes credentials explicitly.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # forgex_sdk package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


@dataclass
class RpcConfig:
    """Solana connection configuration"""
    network: str = field(default_factory=lambda: _get_env("SOLANA_NETWORK", "mainnet-beta"))
    url: str = field(default_factory=lambda: _get_env("SOLANA_RPC_URL", ""))
    commitment: str = field(default_factory=lambda: _get_env("SOLANA_COMMITMENT", "confirmed"))


@dataclass
class HttpConfig:
    """
    Shared HTTP transport configuration

    max_retries counts attempts, so the default of 1 means a single round
    trip per call.
    """
    timeout_seconds: float = field(default_factory=lambda: _get_env_float("FORGEX_HTTP_TIMEOUT", 30.0))
    max_retries: int = field(default_factory=lambda: _get_env_int("FORGEX_HTTP_MAX_RETRIES", 1))
    retry_delay_seconds: float = field(default_factory=lambda: _get_env_float("FORGEX_HTTP_RETRY_DELAY", 1.0))
    user_agent: str = field(default_factory=lambda: _get_env("FORGEX_USER_AGENT", "forgex-sdk/0.3.0"))


@dataclass
class ApiKeysConfig:
    """Per-provider API keys"""
    jupiter: Optional[str] = field(default_factory=lambda: _get_env("JUPITER_API_KEY", None))
    tensor: Optional[str] = field(default_factory=lambda: _get_env("TENSOR_API_KEY", None))
    helius: Optional[str] = field(default_factory=lambda: _get_env("HELIUS_API_KEY", None))
    birdeye: Optional[str] = field(default_factory=lambda: _get_env("BIRDEYE_API_KEY", None))
    shyft: Optional[str] = field(default_factory=lambda: _get_env("SHYFT_API_KEY", None))
    crossmint: Optional[str] = field(default_factory=lambda: _get_env("CROSSMINT_API_KEY", None))
    squads: Optional[str] = field(default_factory=lambda: _get_env("SQUADS_API_KEY", None))
    meteora: Optional[str] = field(default_factory=lambda: _get_env("METEORA_API_KEY", None))
    sanctum: Optional[str] = field(default_factory=lambda: _get_env("SANCTUM_API_KEY", None))
    marginfi: Optional[str] = field(default_factory=lambda: _get_env("MARGINFI_API_KEY", None))

    def as_dict(self) -> Dict[str, str]:
        """Keys that are set, by provider name"""
        return {name: value for name, value in vars(self).items() if value}


@dataclass
class SignerConfig:
    """Keypair configuration for keypair-only providers"""
    keypair_path: str = field(default_factory=lambda: _get_env("SOLANA_KEYPAIR_PATH", ""))
    private_key: Optional[str] = field(default_factory=lambda: _get_env("SOLANA_PRIVATE_KEY", None))


@dataclass
class LoggingConfig:
    """
    Logging configuration

    Supports file logging with rotation and console output.
    """
    log_file: Optional[str] = field(default_factory=lambda: _get_env("FORGEX_LOG_FILE", None))
    log_level: str = field(default_factory=lambda: _get_env("FORGEX_LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "FORGEX_LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("FORGEX_LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("FORGEX_LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("FORGEX_LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Usage:
        from forgex_sdk.config import config

        print(config.rpc.network)
        print(config.http.timeout_seconds)
    """
    rpc: RpcConfig = field(default_factory=RpcConfig)
    http: HttpConfig = field(default_factory=HttpConfig)
    api_keys: ApiKeysConfig = field(default_factory=ApiKeysConfig)
    signer: SignerConfig = field(default_factory=SignerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "forgex_sdk",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure

    Returns:
        Configured logger instance

    Example:
        # .env:
        #   FORGEX_LOG_FILE=logs/forgex.log
        #   FORGEX_LOG_LEVEL=DEBUG

        from forgex_sdk.config import setup_logging
        logger = setup_logging()
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close before removing to release file handles on reload
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    for name in [
        f"{logger_name}.infra",
        f"{logger_name}.modules",
        f"{logger_name}.protocols",
    ]:
        logging.getLogger(name).setLevel(log_config.level)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger
