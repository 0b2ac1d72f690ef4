"""
Plugin configuration

Every setting is read from the environment (a .env next to the package
is loaded first) when the Config is built. Sections:

    subgraph   - Uniswap V3 subgraph endpoint, retries and result cache
    uniswap    - RPC endpoint, default chain and EIP-1559 fee settings
    evm        - deadlines and fixed gas limits per call type
    tx         - confirmation timeout and approval policy
    crossmint  - smart wallet API (scripts/create_smart_wallet.py)
    logging    - log file, level and rotation
"""

import os
import logging
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).parent


def _load_env_file():
    env_file = PACKAGE_DIR.parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)


_load_env_file()


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def _env(key: str, default: Any = "", cast: Callable[[str], Any] = str) -> Any:
    """Environment value converted with cast; malformed values fall back to default"""
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring {key}={raw!r}: expected {cast.__name__}, using {default!r}")
        return default


def _setting(key: str, default: Any = "", cast: Callable[[str], Any] = str):
    """Dataclass field read from the environment at construction time"""
    return field(default_factory=lambda: _env(key, default, cast))


@dataclass
class SubgraphConfig:
    """Uniswap V3 subgraph client"""
    url: str = _setting("UNISWAP_SUBGRAPH_URL", "https://api.thegraph.com/subgraphs/name/uniswap/uniswap-v3-base")
    # Bearer token for The Graph gateway
    api_key: Optional[str] = _setting("SUBGRAPH_API_KEY", None)
    timeout: float = _setting("SUBGRAPH_TIMEOUT", 30.0, float)
    max_retries: int = _setting("SUBGRAPH_MAX_RETRIES", 3, int)
    retry_delay: float = _setting("SUBGRAPH_RETRY_DELAY", 1.0, float)
    cache_ttl_seconds: float = _setting("SUBGRAPH_CACHE_TTL_SECONDS", 300, float)
    cache_max_size: int = _setting("SUBGRAPH_CACHE_MAX_SIZE", 1000, int)


@dataclass
class UniswapConfig:
    """Chain access for the bundled web3 wallet client"""
    rpc_url: str = _setting("EVM_RPC_URL", "")
    timeout: float = _setting("UNISWAP_TIMEOUT", 30.0, float)
    # Used by add_liquidity when the wallet reports no chain
    default_chain_id: int = _setting("UNISWAP_DEFAULT_CHAIN_ID", 84532, int)
    gas_limit_multiplier: float = _setting("UNISWAP_GAS_LIMIT_MULTIPLIER", 1.2, float)
    priority_fee_gwei: float = _setting("UNISWAP_PRIORITY_FEE_GWEI", 0.1, float)
    # maxFeePerGas = baseFee * multiplier + priority fee
    base_fee_multiplier: float = _setting("UNISWAP_BASE_FEE_MULTIPLIER", 2.0, float)


@dataclass
class EVMConfig:
    """Deadlines and gas limits"""
    tx_deadline_seconds: int = _setting("EVM_TX_DEADLINE_SECONDS", 1200, int)
    lp_gas_limit: int = _setting("EVM_LP_GAS_LIMIT", 500_000, int)
    swap_gas_limit: int = _setting("EVM_SWAP_GAS_LIMIT", 300_000, int)
    approve_gas_limit: int = _setting("EVM_APPROVE_GAS_LIMIT", 100_000, int)


@dataclass
class TxConfig:
    """Transaction confirmation settings"""
    confirmation_timeout: int = _setting("TX_CONFIRMATION_TIMEOUT", 120, int)
    # Approve the exact amount instead of MaxUint256
    exact_approvals: bool = _setting("TX_EXACT_APPROVALS", False, _parse_bool)


@dataclass
class CrossmintConfig:
    """Crossmint wallets API"""
    base_url: str = _setting("CROSSMINT_BASE_URL", "https://staging.crossmint.com")
    api_key: Optional[str] = _setting("CROSSMINT_STAGING_API_KEY", None)
    timeout: float = _setting("CROSSMINT_TIMEOUT", 30.0, float)


def _default_log_file() -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return str(PACKAGE_DIR / "log" / f"uniswap_plugin_{timestamp}.log")


@dataclass
class LoggingConfig:
    """
    Logging output

    Environment variables:
        LOG_FILE: Log file path (empty string disables file output)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: logging.Formatter format string
        LOG_CONSOLE: Also log to stderr (default: true)
        LOG_MAX_BYTES / LOG_BACKUP_COUNT: Rotation (default: 10MB x 5)
    """
    log_file: str = field(default_factory=lambda: _env("LOG_FILE", _default_log_file()))
    log_level: str = _setting("LOG_LEVEL", "INFO")
    log_format: str = _setting("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    console_output: bool = _setting("LOG_CONSOLE", True, _parse_bool)
    max_bytes: int = _setting("LOG_MAX_BYTES", 10 * 1024 * 1024, int)
    backup_count: int = _setting("LOG_BACKUP_COUNT", 5, int)

    @property
    def level(self) -> int:
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Usage:
        from uniswap_plugin.config import config

        print(config.subgraph.url)
        print(config.evm.tx_deadline_seconds)
    """
    subgraph: SubgraphConfig = field(default_factory=SubgraphConfig)
    uniswap: UniswapConfig = field(default_factory=UniswapConfig)
    evm: EVMConfig = field(default_factory=EVMConfig)
    tx: TxConfig = field(default_factory=TxConfig)
    crossmint: CrossmintConfig = field(default_factory=CrossmintConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def reload(cls) -> "Config":
        """Re-read .env and the environment"""
        _load_env_file()
        return cls()


config = Config()


def get_config() -> Config:
    return config


def reload_config() -> Config:
    """
    Re-read the environment into the global config

    Sections are replaced on the existing object so modules holding a
    reference to it see the new values.
    """
    fresh = Config.reload()
    for section in fields(Config):
        setattr(config, section.name, getattr(fresh, section.name))
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "uniswap_plugin",
) -> logging.Logger:
    """
    Attach file and console handlers to the package logger.

    Calling it again replaces the handlers, so it is safe after
    reload_config(). Module loggers (uniswap_plugin.*) propagate here.
    """
    log_config = log_config or config.logging
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    if log_config.log_file:
        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_config.log_file:
        logger.info(f"Logging to {log_config.log_file} at {log_config.log_level}")

    return logger
