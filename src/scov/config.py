"""Configuration parsing from ``.scov.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

CONFIG_FILENAME = ".scov.yml"

COVERAGE_OPTIONS = (
    "showCoveredCodeOnly",
    "showUncoveredCodeOnly",
    "showBothCoveredAndUncoveredCode",
)

_TRUTHY = {"1", "true", "yes", "on"}


def _resolve_env_vars(value: str) -> str:
    """Expand ``${VAR}`` placeholders from the environment.

    Unset variables expand to an empty string and are logged as a warning.
    """

    def _lookup(match: re.Match[str]) -> str:
        name = match[1]
        if name not in os.environ:
            logger.warning("%s references unset environment variable %s", CONFIG_FILENAME, name)
            return ""
        return os.environ[name]

    return _ENV_VAR_RE.sub(_lookup, value)


def _resolve_value(value: Any) -> Any:
    if isinstance(value, str):
        return _resolve_env_vars(value)
    if isinstance(value, dict):
        return _resolve_dict(value)
    if isinstance(value, list):
        return [_resolve_value(item) for item in value]
    return value


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Expand placeholders in every string of a parsed YAML mapping, at any depth."""
    return {key: _resolve_value(value) for key, value in data.items()}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


@dataclass
class CoverageConfig:
    """Where result sets live and which lines consumers should show."""

    directory: str = "coverage"
    """Directory (relative to the project root) holding the result-set JSON."""

    show_counts: bool = False
    """Surface per-line and per-branch hit counts in annotations."""

    options: str = "showBothCoveredAndUncoveredCode"
    """Which classified lines to display (see ``COVERAGE_OPTIONS``)."""

    @property
    def shows_covered(self) -> bool:
        return self.options in {"showCoveredCodeOnly", "showBothCoveredAndUncoveredCode"}

    @property
    def shows_uncovered(self) -> bool:
        return self.options in {"showUncoveredCodeOnly", "showBothCoveredAndUncoveredCode"}


@dataclass
class DisplayConfig:
    """Thresholds for the status summary icon."""

    good_threshold: float = 90.0
    """Percentages above this are shown as passing."""

    warn_threshold: float = 80.0
    """Percentages above this (and not above ``good_threshold``) are a warning."""


@dataclass
class WatchConfig:
    """Refresh loop settings."""

    interval: float = 2.0
    """Seconds between result-set checks."""


@dataclass
class ScovConfig:
    """Top-level scov configuration."""

    root: str
    """Project root directory."""

    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML (after env var resolution)."""

    @property
    def coverage_path(self) -> Path:
        """Absolute path of the coverage directory."""
        return Path(self.root) / self.coverage.directory


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        return {}
    return section


def _parse_coverage_config(raw: dict[str, Any]) -> CoverageConfig:
    """Parse coverage configuration from raw YAML."""
    coverage_raw = _section(raw, "coverage")

    show_counts_env = os.environ.get("SCOV_SHOW_COUNTS")
    show_counts = coverage_raw.get("show_counts", show_counts_env or False)

    return CoverageConfig(
        directory=str(
            coverage_raw.get("directory", os.environ.get("SCOV_COVERAGE_DIR", "coverage"))
        ),
        show_counts=_as_bool(show_counts),
        options=str(coverage_raw.get("options", "showBothCoveredAndUncoveredCode")),
    )


def _parse_display_config(raw: dict[str, Any]) -> DisplayConfig:
    """Parse display thresholds from raw YAML."""
    display_raw = _section(raw, "display")

    return DisplayConfig(
        good_threshold=float(display_raw.get("good_threshold", 90.0)),
        warn_threshold=float(display_raw.get("warn_threshold", 80.0)),
    )


def _parse_watch_config(raw: dict[str, Any]) -> WatchConfig:
    """Parse refresh loop settings from raw YAML."""
    watch_raw = _section(raw, "watch")

    return WatchConfig(interval=float(watch_raw.get("interval", 2.0)))


def load_config(root: str | Path) -> ScovConfig:
    """Load and parse ``.scov.yml`` from *root*.

    Falls back to defaults and environment variables when the file is
    missing or incomplete.
    """
    root_path = Path(root).resolve()
    scov_yml = root_path / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if scov_yml.is_file():
        text = scov_yml.read_text(encoding="utf-8")
        parsed = yaml.safe_load(text)
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        else:
            logger.warning("Ignoring %s: top level is not a mapping", scov_yml)

    return ScovConfig(
        root=str(root_path),
        coverage=_parse_coverage_config(raw),
        display=_parse_display_config(raw),
        watch=_parse_watch_config(raw),
        raw=raw,
    )


def _validate_coverage_config(coverage: CoverageConfig) -> list[str]:
    """Validate coverage settings."""
    errors: list[str] = []

    if not coverage.directory:
        errors.append("coverage.directory must not be empty")

    if coverage.options not in COVERAGE_OPTIONS:
        errors.append(
            f"coverage.options must be one of {', '.join(COVERAGE_OPTIONS)} "
            f"(got: {coverage.options})"
        )

    return errors


def _validate_display_config(display: DisplayConfig) -> list[str]:
    """Validate summary thresholds."""
    max_percentage = 100.0
    errors: list[str] = []

    if not 0.0 <= display.good_threshold <= max_percentage:
        errors.append(
            f"display.good_threshold must be between 0 and 100 "
            f"(got: {display.good_threshold})"
        )

    if not 0.0 <= display.warn_threshold <= max_percentage:
        errors.append(
            f"display.warn_threshold must be between 0 and 100 "
            f"(got: {display.warn_threshold})"
        )

    if display.warn_threshold > display.good_threshold:
        errors.append(
            f"display.warn_threshold must not exceed display.good_threshold "
            f"(got: {display.warn_threshold} > {display.good_threshold})"
        )

    return errors


def validate_config(config: ScovConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.root:
        errors.append("root is required")

    errors.extend(_validate_coverage_config(config.coverage))
    errors.extend(_validate_display_config(config.display))

    if config.watch.interval <= 0:
        errors.append(f"watch.interval must be positive (got: {config.watch.interval})")

    return errors
