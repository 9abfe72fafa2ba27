"""YAML configuration loader with validation."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Optional, Any

import yaml

KMS_MIN_DELETION_WINDOW = 7
KMS_MAX_DELETION_WINDOW = 30


@dataclass
class KMSSettings:
    """KMS key sweeper settings."""
    deletion_window_in_days: int = KMS_MIN_DELETION_WINDOW


@dataclass
class Config:
    """awssweep configuration."""
    regions: List[str] = field(default_factory=list)
    sweepers: List[str] = field(default_factory=lambda: ["all"])
    max_workers: int = 10
    dry_run: bool = False
    profile: Optional[str] = None
    max_pool_connections: int = 20
    retry_mode: str = "standard"
    retry_max_attempts: int = 3
    kms: KMSSettings = field(default_factory=KMSSettings)
    json_logs: bool = False
    verbosity: int = 0

    def validate(self) -> "Config":
        for name in ("max_workers", "max_pool_connections", "retry_max_attempts", "verbosity"):
            _require_int(name, getattr(self, name))
        _require_int("kms.deletion_window_in_days", self.kms.deletion_window_in_days)
        for name in ("dry_run", "json_logs"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false, got {getattr(self, name)!r}")
        if self.max_workers <= 0:
            raise ValueError(f"max_workers must be a positive integer, got {self.max_workers!r}")
        if self.max_pool_connections < self.max_workers:
            # at least one pooled connection per worker
            self.max_pool_connections = self.max_workers
        window = self.kms.deletion_window_in_days
        if not KMS_MIN_DELETION_WINDOW <= window <= KMS_MAX_DELETION_WINDOW:
            raise ValueError(
                f"kms.deletion_window_in_days must be between {KMS_MIN_DELETION_WINDOW} "
                f"and {KMS_MAX_DELETION_WINDOW}, got {window}"
            )
        return self


def _require_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")


def load_config(path: Optional[str] = None) -> Config:
    """Load config from YAML file or return defaults.

    Args:
        path: Path to YAML config file. If None, returns default config.

    Returns:
        Config instance

    Raises:
        FileNotFoundError: If specified path doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If a setting has the wrong type or is out of range
    """
    if path is None:
        return Config()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return _parse_config(data).validate()


def _as_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return list(value)


def _parse_config(data: Dict[str, Any]) -> Config:
    """Parse config dict into Config dataclass."""
    if not isinstance(data, dict):
        raise ValueError(f"config must be a mapping, got {type(data).__name__}")
    kms_data = data.get("kms", {}) or {}
    if not isinstance(kms_data, dict):
        raise ValueError(f"kms must be a mapping, got {type(kms_data).__name__}")
    kms = KMSSettings(
        deletion_window_in_days=kms_data.get("deletion_window_in_days", KMS_MIN_DELETION_WINDOW),
    )

    return Config(
        regions=_as_list(data.get("regions")),
        sweepers=_as_list(data.get("sweepers", ["all"])) or ["all"],
        max_workers=data.get("max_workers", 10),
        dry_run=data.get("dry_run", False),
        profile=data.get("profile"),
        max_pool_connections=data.get("max_pool_connections", 20),
        retry_mode=data.get("retry_mode", "standard"),
        retry_max_attempts=data.get("retry_max_attempts", 3),
        kms=kms,
        json_logs=data.get("json_logs", False),
        verbosity=data.get("verbosity", 0),
    )
