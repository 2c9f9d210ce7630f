"""
Engine configuration.

Settings come from a JSON file or from environment variables (a .env file
in the working directory is loaded first):

    STARCOORDS_CATALOG           Path to the default star-system catalog
    STARCOORDS_DEFAULT_ACCEL_G   Acceleration used when none is given (g)
    STARCOORDS_TOLERANCE_KM      Position comparison tolerance (km)
    STARCOORDS_LOG_LEVEL         Logging level name (DEBUG, INFO, ...)
    STARCOORDS_LOG_FILE          Optional log file path
"""

from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .errors import ValidationError

ENV_PREFIX = "STARCOORDS_"


@dataclass
class EngineConfig:
    """Configuration for the starcoords tools."""
    catalog_path: Optional[Path] = None
    default_acceleration_g: float = 1.0
    position_tolerance_km: float = 1e-6
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    def __post_init__(self) -> None:
        """Normalize and validate values."""
        if self.catalog_path is not None:
            self.catalog_path = Path(self.catalog_path)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)

        self.default_acceleration_g = _positive_float(
            "default_acceleration_g", self.default_acceleration_g
        )
        self.position_tolerance_km = _positive_float(
            "position_tolerance_km", self.position_tolerance_km
        )

        level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValidationError(f"Unknown log level: {self.log_level!r}")
        self.log_level = level

    @property
    def log_level_value(self) -> int:
        """Numeric logging level."""
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EngineConfig:
        """Create configuration from a dictionary."""
        return cls(
            catalog_path=data.get("catalog_path"),
            default_acceleration_g=data.get("default_acceleration_g", 1.0),
            position_tolerance_km=data.get("position_tolerance_km", 1e-6),
            log_level=data.get("log_level", "WARNING"),
            log_file=data.get("log_file"),
        )

    @classmethod
    def from_json(cls, path: str) -> EngineConfig:
        """Load configuration from a JSON file."""
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Engine config not found: {path}")

        with open(config_path) as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> EngineConfig:
        """
        Load configuration from environment variables.

        Args:
            dotenv_path: Explicit .env file (default: search from the working directory)
        """
        load_dotenv(dotenv_path)

        data: Dict[str, Any] = {}
        catalog = os.getenv(ENV_PREFIX + "CATALOG")
        if catalog:
            data["catalog_path"] = catalog
        accel = os.getenv(ENV_PREFIX + "DEFAULT_ACCEL_G")
        if accel:
            data["default_acceleration_g"] = _parse_float("DEFAULT_ACCEL_G", accel)
        tolerance = os.getenv(ENV_PREFIX + "TOLERANCE_KM")
        if tolerance:
            data["position_tolerance_km"] = _parse_float("TOLERANCE_KM", tolerance)
        level = os.getenv(ENV_PREFIX + "LOG_LEVEL")
        if level:
            data["log_level"] = level
        log_file = os.getenv(ENV_PREFIX + "LOG_FILE")
        if log_file:
            data["log_file"] = log_file

        return cls.from_dict(data)


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None


def _positive_float(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{name} must be positive, got {value}")
    return float(value)
