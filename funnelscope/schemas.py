"""
Account Configuration Schemas
=============================

Pydantic models for the multi-source account configuration.

An account has one vertical shared by every source and a list of
per-source entries (entity to diagnose, client options). String option
values beginning with "$" reference environment variables and are
resolved by load_account_config().

Related files:
- funnelscope/orchestrator/runner.py: consumes AccountConfig
- funnelscope/platforms/registry.py: client factories receive PlatformAccountConfig
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .models import ENTITY_LEVELS
from .utils.env import load_env_file, require_env

logger = logging.getLogger(__name__)

Vertical = Literal["commerce", "leadgen", "brand"]


class PlatformAccountConfig(BaseModel):
    """One ad source inside an account."""

    platform: str = Field(
        ...,
        description="Source name, e.g. 'meta', 'google', 'tiktok'",
        examples=["meta"],
    )
    enabled: bool = Field(True, description="Include this source in diagnostics")
    entity_id: str = Field(..., description="Ad account / campaign / ad set ID to diagnose")
    entity_level: str = Field("account", description="One of account, campaign, adset, ad")
    qualified_lead_action_type: Optional[str] = Field(
        None,
        description="Meta leadgen only: action type that marks a qualified lead",
    )
    target_roas: Optional[float] = Field(
        None,
        gt=0,
        description="Commerce only: ROAS target the ROAS advisor compares against",
    )
    options: Dict[str, str] = Field(
        default_factory=dict,
        description="Client options (credentials etc.); '$NAME' values are read from the environment",
    )

    @field_validator("platform")
    @classmethod
    def _normalize_platform(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("entity_level")
    @classmethod
    def _check_entity_level(cls, v: str) -> str:
        if v not in ENTITY_LEVELS:
            raise ValueError(f"entity_level must be one of {', '.join(ENTITY_LEVELS)}")
        return v


class AccountConfig(BaseModel):
    """Top-level multi-source account configuration."""

    name: str = Field(..., description="Human-readable account name")
    vertical: Vertical = Field(..., description="Vertical shared by every source")
    platforms: List[PlatformAccountConfig] = Field(..., min_length=1)
    period_days: int = Field(7, ge=1, le=90, description="Days per comparison period (7 = WoW)")
    reference_date: Optional[date] = Field(
        None,
        description="Last day of the current period; defaults to yesterday",
    )
    enable_historical: bool = Field(False, description="Fetch trailing periods for trend advisors")
    historical_periods: int = Field(4, ge=1, le=12)
    enable_structural: bool = Field(False, description="Fetch sub-entity breakdowns when supported")

    @property
    def enabled_platforms(self) -> List[PlatformAccountConfig]:
        return [p for p in self.platforms if p.enabled]


def _resolve_env_references(platform: str, options: Dict[str, str]) -> Dict[str, str]:
    resolved = {}
    for key, value in options.items():
        if not value.startswith("$"):
            resolved[key] = value
            continue
        resolved[key] = require_env(value[1:], purpose=f'{platform} option "{key}"')
    return resolved


def load_account_config(
    path: Union[str, Path],
    env_file: Optional[Union[str, Path]] = None,
) -> AccountConfig:
    """
    Load an AccountConfig from a JSON file.

    A .env file (env_file, or the nearest one from the working directory)
    is loaded first so `$NAME` options can live there; variables already in
    the environment win.

    Raises:
        ConfigurationError: unreadable file, invalid JSON, schema violation
            or an unset environment variable reference
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read account config {path}: {e}") from e

    try:
        config = AccountConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid account config {path}: {e}") from e

    load_env_file(env_file)
    for platform_config in config.platforms:
        platform_config.options = _resolve_env_references(platform_config.platform, platform_config.options)

    logger.info(
        "[CONFIG] Loaded account '%s' (%s) with %d sources",
        config.name, config.vertical, len(config.platforms),
    )
    return config
