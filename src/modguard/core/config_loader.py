# src/modguard/core/config_loader.py

import logging
import os
from dataclasses import fields
from typing import Any, Dict, Optional

import yaml

from modguard.core.config_types import (
    DEFAULT_CONTEXT_ALLOWLIST,
    DEFAULT_GENERAL_ALLOWLIST,
    AllowlistTable,
    ModerationConfig,
    OracleConfig,
)
from modguard.core.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/moderation.yml"


def _pick(section: Dict[str, Any], cls) -> Dict[str, Any]:
    """Keep only the keys the dataclass knows about."""
    names = {f.name for f in fields(cls)}
    unknown = set(section) - names
    if unknown:
        logger.warning("[config] Ignoring unknown keys for %s: %s", cls.__name__, sorted(unknown))
    return {k: v for k, v in section.items() if k in names}


def _build_allowlist(section: Dict[str, Any]) -> AllowlistTable:
    general = section.get("general", DEFAULT_GENERAL_ALLOWLIST)
    context_specific = section.get("context_specific", DEFAULT_CONTEXT_ALLOWLIST)
    if not isinstance(context_specific, dict):
        raise ConfigError("allowlist.context_specific must be a mapping of label -> contexts")
    for label, contexts in context_specific.items():
        if isinstance(contexts, str) or not isinstance(contexts, (list, tuple)):
            raise ConfigError(f"allowlist.context_specific['{label}'] must be a list")
    return AllowlistTable.from_mapping(general or [], context_specific)


def load_config(path: Optional[str] = None) -> ModerationConfig:
    """
    Build the immutable ModerationConfig.

    Order of precedence: environment variables, then the YAML file, then the
    dataclass defaults. A missing file is not an error.
    """
    filepath = path or os.environ.get("MODGUARD_CONFIG", DEFAULT_CONFIG_PATH)

    try:
        with open(filepath, "r") as f:
            yml = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("[config] Configuration file not found at %s. Using defaults.", filepath)
        yml = {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {filepath}: {e}") from e

    if not isinstance(yml, dict):
        raise ConfigError(f"{filepath} must contain a mapping at the top level")

    scoring = _pick(yml.get("scoring", {}) or {}, ModerationConfig)
    scoring.pop("oracle", None)
    scoring.pop("allowlist", None)

    oracle_section = dict(yml.get("oracle", {}) or {})
    if os.environ.get("VECTOR_URL"):
        oracle_section["url"] = os.environ["VECTOR_URL"]
    if os.environ.get("VECTOR_TOKEN"):
        oracle_section["token"] = os.environ["VECTOR_TOKEN"]
    if os.environ.get("MODGUARD_ORACLE"):
        oracle_section["provider"] = os.environ["MODGUARD_ORACLE"]

    try:
        oracle = OracleConfig(**_pick(oracle_section, OracleConfig))
        allowlist = _build_allowlist(yml.get("allowlist", {}) or {})
        config = ModerationConfig(oracle=oracle, allowlist=allowlist, **scoring)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration in {filepath}: {e}") from e

    logger.info(
        "[config] Loaded (provider=%s, word_threshold=%.2f, semantic_threshold=%.2f)",
        config.oracle.provider,
        config.word_threshold,
        config.semantic_threshold,
    )
    return config
