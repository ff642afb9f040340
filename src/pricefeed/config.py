"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PoolConfig(BaseModel):
    """A monitored liquidity pool. Read-only after startup."""

    model_config = ConfigDict(frozen=True)

    address: str
    name: str  # token symbol, stored upper-cased
    token_a_decimals: int = Field(ge=0, le=30)
    token_b_decimals: int = Field(ge=0, le=30)


# Cetus pools monitored by default (token A is USDC).
DEFAULT_POOLS: list[PoolConfig] = [
    PoolConfig(
        address="0x79b48d6da07fe618e13dfc68a3192151cd1b0947c73c8f14f7b1162848cad09a",
        name="WATER",
        token_a_decimals=6,
        token_b_decimals=9,
    ),
    PoolConfig(
        address="0x821412a926b922a96c05f96054f9fa40fbb03d53b87ea865c3d717b58bcb5a46",
        name="COAL",
        token_a_decimals=6,
        token_b_decimals=9,
    ),
    PoolConfig(
        address="0x674ec30e2e15ecfc3efd01b61a07c254ee68fabdb9af49422cf72461b8191230",
        name="CRYSTAL",
        token_a_decimals=6,
        token_b_decimals=9,
    ),
]


class SuiSettings(BaseSettings):
    """Sui JSON-RPC connection settings."""

    model_config = SettingsConfigDict(env_prefix="SUI_")

    rpc_url: str = "https://fullnode.mainnet.sui.io:443"
    request_timeout: float = 10.0  # seconds, enforced by the httpx client


class CollectorSettings(BaseSettings):
    """Price collection loop parameters."""

    model_config = SettingsConfigDict(env_prefix="COLLECTOR_")

    enabled: bool = True
    interval_seconds: float = Field(default=60.0, gt=0)  # start-to-start period
    pool_delay_seconds: float = 1.0  # pause between pools within a round
    fetch_timeout_seconds: float = 15.0  # hard bound on a single pool fetch


class StoreSettings(BaseSettings):
    """Sample store location."""

    model_config = SettingsConfigDict(env_prefix="STORE_")

    db_path: str = "data/prices.db"


class ApiSettings(BaseSettings):
    """HTTP API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    default_interval: str = "1h"
    default_limit: int = 100
    cors_origins: list[str] = ["*"]


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings.

    The pool list is read from the POOLS environment variable as a JSON array
    of objects, e.g. ``[{"address": "0x..", "name": "WATER",
    "token_a_decimals": 6, "token_b_decimals": 9}]``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    pools: list[PoolConfig] = DEFAULT_POOLS
    sui: SuiSettings = SuiSettings()
    collector: CollectorSettings = CollectorSettings()
    store: StoreSettings = StoreSettings()
    api: ApiSettings = ApiSettings()
