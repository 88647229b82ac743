"""
luastyle Configuration

Loads rule configuration from a YAML file and validates it against the rule
registry. Validation happens once, before any file is linted; the resulting
LintConfig is immutable for the rest of the run.

File shape:

    default_enabled: true
    rules:
      quoting:
        enabled: true
        severity: warning
        parameters:
          quoteStyle: single
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from luastyle.errors import ConfigError
from luastyle.reporting import Severity
from luastyle.rules import RULES, Rule


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LUASTYLE_CONFIG"

# Checked in order when no explicit path or environment override is given.
CONFIG_SEARCH_PATHS = [
    Path(".luastyle.yaml"),
    Path.home() / ".luastyle" / "config.yaml",
]

TOP_LEVEL_KEYS = frozenset({"default_enabled", "rules"})
RULE_KEYS = frozenset({"enabled", "severity", "parameters"})


@dataclass(frozen=True)
class RuleSettings:
    """Effective settings for one rule."""
    enabled: bool
    severity: Severity
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LintConfig:
    """Validated configuration for a run."""
    rules: Dict[str, RuleSettings]
    source: Optional[str] = None

    def settings(self, rule_id: str) -> RuleSettings:
        return self.rules[rule_id]

    def is_enabled(self, rule_id: str) -> bool:
        return self.rules[rule_id].enabled

    @property
    def enabled_rules(self) -> list[str]:
        """Enabled rule ids in registry order."""
        return [rid for rid in RULES if self.rules[rid].enabled]


def _defaults_for(rule: Rule) -> Dict[str, Any]:
    return {p.name: p.default for p in rule.parameters}


def _parse_severity(value: Any, where: str) -> Severity:
    try:
        return Severity(value)
    except ValueError:
        allowed = "|".join(s.value for s in Severity)
        raise ConfigError(f"{where}.severity must be one of {allowed}, got {value!r}") from None


def config_from_mapping(raw: Any, source: Optional[str] = None) -> LintConfig:
    """Validate a raw configuration mapping and fill in defaults."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("configuration must be a mapping", source)

    unknown = sorted(set(raw) - TOP_LEVEL_KEYS)
    if unknown:
        raise ConfigError(f"unknown top-level key(s): {', '.join(map(str, unknown))}", source)

    default_enabled = raw.get("default_enabled", True)
    if not isinstance(default_enabled, bool):
        raise ConfigError("default_enabled must be a boolean", source)

    raw_rules = raw.get("rules") or {}
    if not isinstance(raw_rules, dict):
        raise ConfigError("rules must be a mapping of rule id to settings", source)

    for rule_id in raw_rules:
        if rule_id not in RULES:
            raise ConfigError(f"unknown rule '{rule_id}'", source)

    settings: Dict[str, RuleSettings] = {}
    try:
        for rule_id, rule in RULES.items():
            where = f"rules.{rule_id}"
            entry = raw_rules.get(rule_id)
            if entry is None:
                entry = {}
            elif isinstance(entry, bool):
                entry = {"enabled": entry}
            elif not isinstance(entry, dict):
                raise ConfigError(f"{where} must be a mapping or a boolean")

            unknown = sorted(set(entry) - RULE_KEYS)
            if unknown:
                raise ConfigError(f"{where}: unknown key(s): {', '.join(map(str, unknown))}")

            enabled = entry.get("enabled", default_enabled)
            if not isinstance(enabled, bool):
                raise ConfigError(f"{where}.enabled must be a boolean")

            severity = rule.severity
            if "severity" in entry:
                severity = _parse_severity(entry["severity"], where)

            params = _defaults_for(rule)
            raw_params = entry.get("parameters") or {}
            if not isinstance(raw_params, dict):
                raise ConfigError(f"{where}.parameters must be a mapping")
            specs = {p.name: p for p in rule.parameters}
            for name, value in raw_params.items():
                if name not in specs:
                    raise ConfigError(f"{where}: unknown parameter '{name}'")
                params[name] = specs[name].validate(value, f"{where}.parameters")

            settings[rule_id] = RuleSettings(enabled=enabled, severity=severity, parameters=params)
    except ConfigError as e:
        if source and e.source is None:
            raise ConfigError(str(e), source) from None
        raise

    return LintConfig(rules=settings, source=source)


def default_config() -> LintConfig:
    """Every rule enabled with its default parameters."""
    return config_from_mapping({})


def find_config_file(explicit: Optional[Path] = None) -> Optional[Path]:
    """Locate the configuration file to use, if any."""
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"configuration file not found: {explicit}")
        return explicit

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if not path.is_file():
            raise ConfigError(f"{CONFIG_ENV_VAR} points to a missing file: {path}")
        return path

    for candidate in CONFIG_SEARCH_PATHS:
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Path] = None) -> LintConfig:
    """Load and validate configuration; defaults when no file is found."""
    config_path = find_config_file(path)
    if config_path is None:
        logger.debug("No configuration file found; using defaults")
        return default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", str(config_path)) from e
    except OSError as e:
        raise ConfigError(f"cannot read configuration: {e}", str(config_path)) from e

    logger.debug(f"Loaded configuration from {config_path}")
    return config_from_mapping(raw, source=str(config_path))
