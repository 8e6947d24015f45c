"""Configuration loading — httparchive.yaml, env vars, .env file, CLI overrides."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError

from httparchive.decoder import DEFAULT_ENCODING
from httparchive.models.config import ReportConfig

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Global settings resolved from .env + env vars + config file."""

    log_level: str = "WARNING"
    encoding: str = DEFAULT_ENCODING
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def load(cls, config_yaml: Path | str = "httparchive.yaml") -> Settings:
        """Load settings from .env file, environment variables, and httparchive.yaml."""
        # Load .env file (does not override existing env vars)
        load_dotenv(find_dotenv(usecwd=True))

        settings = cls(
            log_level=normalize_log_level(
                os.environ.get("HTTPARCHIVE_LOG_LEVEL", "WARNING")
            ),
            encoding=os.environ.get("HTTPARCHIVE_ENCODING", DEFAULT_ENCODING),
        )

        width = os.environ.get("HTTPARCHIVE_RESOURCE_WIDTH")
        if width:
            try:
                settings.report = ReportConfig(resource_width=int(width))
            except (ValueError, ValidationError):
                logger.warning(
                    "Ignoring HTTPARCHIVE_RESOURCE_WIDTH=%r, expected a positive integer", width
                )

        config_path = Path(config_yaml)
        if config_path.exists():
            overrides = load_config_file(config_path)
            if "report" in overrides:
                overrides["report"] = settings.report.model_copy(update=overrides["report"])
            settings = settings.model_copy(update=overrides)

        return settings


def normalize_log_level(level: str) -> str:
    name = level.strip().upper()
    if name not in LOG_LEVELS:
        logger.warning("Unknown log level '%s', using WARNING", level)
        return "WARNING"
    return name


def load_config_file(path: Path) -> dict[str, Any]:
    """Parse httparchive.yaml into a dict of Settings overrides."""
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning("Failed to parse %s: %s, using defaults", path, e)
        return {}

    if not raw:
        return {}
    if not isinstance(raw, dict):
        logger.warning("Ignoring %s, expected a mapping at the top level", path)
        return {}

    overrides: dict[str, Any] = {}
    if isinstance(raw.get("log_level"), str):
        overrides["log_level"] = normalize_log_level(raw["log_level"])
    if isinstance(raw.get("encoding"), str):
        overrides["encoding"] = raw["encoding"]

    report_raw = raw.get("report", {})
    if not isinstance(report_raw, dict):
        logger.warning("Skipping invalid 'report' section in %s", path)
        return overrides

    report: dict[str, Any] = {}
    width = report_raw.get("resource_width")
    if width is not None:
        if isinstance(width, int) and not isinstance(width, bool) and width > 0:
            report["resource_width"] = width
        else:
            logger.warning("Skipping report.resource_width=%r, expected a positive integer", width)
    if isinstance(report_raw.get("show_summary"), bool):
        report["show_summary"] = report_raw["show_summary"]
    if report:
        overrides["report"] = report

    return overrides
