# src/veridata/core/config.py

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

logger = logging.getLogger(__name__)


def _section(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return dict(value or {})


class AdminConfig(BaseModel):
    principal: str = "admin"
    # Rewards are paid from the admin account unless a treasury is named
    treasury: Optional[str] = None

    @field_validator("principal")
    @classmethod
    def validate_principal(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("admin principal must not be empty")
        return v.strip()

    @property
    def treasury_account(self) -> str:
        return self.treasury or self.principal


class RewardConfig(BaseModel):
    base_reward: int = Field(default=100, ge=0)
    per_tier_bonus: int = Field(default=10, ge=0)
    tier_size: int = Field(default=10, gt=0)
    reputation_increment: int = Field(default=10, ge=0)


class LedgerConfig(BaseModel):
    backend: str = "memory"  # 'memory' | 'http'
    initial_treasury_supply: int = Field(default=1_000_000, ge=0)
    base_url: str = "http://localhost:8545"
    api_key: SecretStr = Field(default=SecretStr(""))
    timeout: float = Field(default=10.0, gt=0)

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "http"):
            raise ValueError("ledger backend must be 'memory' or 'http'")
        return v


class AuditConfig(BaseModel):
    export_path: Optional[str] = None


class VeriDataConfig(BaseModel):
    """
    Main configuration model for VeriData.
    """

    admin: AdminConfig = Field(default_factory=AdminConfig)
    rewards: RewardConfig = Field(default_factory=RewardConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)

    @model_validator(mode="before")
    @classmethod
    def load_overrides_from_env(cls, data: Any) -> Dict[str, Any]:
        """Override config values with environment variables if present."""
        if not isinstance(data, dict):
            data = {}
        data = dict(data)

        admin = _section(data.get("admin"))
        if "VERIDATA_ADMIN" in os.environ:
            admin["principal"] = os.environ["VERIDATA_ADMIN"]
        if "VERIDATA_TREASURY" in os.environ:
            admin["treasury"] = os.environ["VERIDATA_TREASURY"]
        data["admin"] = admin

        ledger = _section(data.get("ledger"))
        if "VERIDATA_LEDGER_BACKEND" in os.environ:
            ledger["backend"] = os.environ["VERIDATA_LEDGER_BACKEND"]
        if "VERIDATA_LEDGER_URL" in os.environ:
            ledger["base_url"] = os.environ["VERIDATA_LEDGER_URL"]
        if "VERIDATA_LEDGER_API_KEY" in os.environ:
            ledger["api_key"] = os.environ["VERIDATA_LEDGER_API_KEY"]
        if "VERIDATA_INITIAL_SUPPLY" in os.environ:
            ledger["initial_treasury_supply"] = int(os.environ["VERIDATA_INITIAL_SUPPLY"])
        data["ledger"] = ledger

        return data


def load_config(config_path: Optional[Union[str, Path]] = None) -> VeriDataConfig:
    """
    Load VeriData configuration from YAML file.

    Args:
        config_path: Path to config.yaml (default: ./config/config.yaml)

    Returns:
        Validated VeriDataConfig instance.
    """
    if config_path is None:
        config_path = Path("config") / "config.yaml"
    else:
        config_path = Path(config_path)

    config_data = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {config_path}")
        except yaml.YAMLError as e:
            logger.warning(f"Failed to parse config file {config_path}: {e}")
    else:
        logger.info(f"Config file not found at {config_path}, using defaults")

    # Env vars override file
    config = VeriDataConfig(**config_data)

    logger.debug("VeriData configuration loaded with settings:")
    logger.debug(f"  Admin principal: {config.admin.principal}")
    logger.debug(f"  Treasury: {config.admin.treasury_account}")
    logger.debug(f"  Ledger backend: {config.ledger.backend}")
    logger.debug(
        f"  Rewards: base={config.rewards.base_reward}, "
        f"bonus={config.rewards.per_tier_bonus}/tier of {config.rewards.tier_size}"
    )

    return config
