"""
Engine configuration.

EngineConfig is a pydantic model populated from environment variables
(STOCK_LEDGER_*, LOG_LEVEL) on top of the defaults below. Invalid values
fail fast with pydantic.ValidationError.
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

_ENV_FIELDS = {
    "data_dir": "STOCK_LEDGER_DATA_DIR",
    "default_initial_balance": "STOCK_LEDGER_INITIAL_BALANCE",
    "price_step_pct": "STOCK_LEDGER_PRICE_STEP_PCT",
    "min_price": "STOCK_LEDGER_MIN_PRICE",
    "random_seed": "STOCK_LEDGER_SEED",
    "max_login_attempts": "STOCK_LEDGER_MAX_LOGIN_ATTEMPTS",
    "log_level": "LOG_LEVEL",
}


class EngineConfig(BaseModel):
    data_dir: Path = Field(default=Path("data"), description="Directory of the JSON store")
    default_initial_balance: Decimal = Field(
        default=Decimal("10000.00"), ge=0, description="Balance of newly registered accounts"
    )
    price_step_pct: float = Field(
        default=0.05, gt=0, lt=1, description="Bound of the random walk step (0.05 = ±5%)"
    )
    min_price: Decimal = Field(default=Decimal("0.01"), gt=0, description="Price floor")
    random_seed: Optional[int] = Field(default=None, description="Seed of the price random walk")
    max_login_attempts: int = Field(default=5, ge=1, description="Login/register retries")
    log_level: str = Field(default="INFO", description="Root log level")

    model_config = {"frozen": True}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "EngineConfig":
        """
        Build a config from environment variables.

        Explicit keyword overrides (e.g. from command-line flags) win over the
        environment; None overrides are ignored.
        """
        environ = os.environ if environ is None else environ
        values = {
            field: environ[var]
            for field, var in _ENV_FIELDS.items()
            if environ.get(var, "").strip() != ""
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
