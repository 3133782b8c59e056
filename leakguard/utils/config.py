"""
Configuration management for LeakGuard
Handles scan settings and the location of the findings store
"""
import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

# Environment variables override values from the config file
ENV_PREFIX = "LEAKGUARD_"


@dataclass
class LeakGuardConfig:
    """LeakGuard configuration"""
    findings_path: str = str(Path.home() / ".leakguard" / "findings.json")
    patterns_file: Optional[str] = None
    request_timeout: int = 10
    max_concurrent: int = 5
    max_candidates_per_kind: int = 20
    resolve_source_maps: bool = True
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LeakGuardConfig':
        """Create from dictionary, ignoring unknown keys"""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


def coerce_value(value: str, current: Any) -> Any:
    """Convert a string from the environment or the command line to the type of the current value"""
    if isinstance(current, bool):
        return value.strip().lower() in ("1", "true", "yes", "on")
    if isinstance(current, int):
        return int(value)
    return value


class ConfigManager:
    """Manages LeakGuard configuration"""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager

        Args:
            config_path: Path to config file (defaults to ~/.leakguard/config.json)
        """
        if config_path is None:
            config_path = Path.home() / ".leakguard" / "config.json"

        self.config_path = Path(config_path)
        self._config: Optional[LeakGuardConfig] = None

    def load(self) -> LeakGuardConfig:
        """Load configuration from file, then apply environment overrides"""
        if self._config is not None:
            return self._config

        config = LeakGuardConfig()
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    config = LeakGuardConfig.from_dict(json.load(f))
            except (json.JSONDecodeError, TypeError):
                # If config is corrupted, start fresh
                config = LeakGuardConfig()

        for f in fields(LeakGuardConfig):
            env_value = os.getenv(ENV_PREFIX + f.name.upper())
            if env_value is not None:
                try:
                    setattr(config, f.name, coerce_value(env_value, getattr(config, f.name)))
                except ValueError:
                    continue

        self._config = config
        return self._config

    def save(self, config: Optional[LeakGuardConfig] = None) -> None:
        """
        Save configuration to file

        Args:
            config: Configuration to save (uses current if None)
        """
        if config is not None:
            self._config = config

        if self._config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self._config.to_dict(), f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        config = self.load()
        return getattr(config, key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        config = self.load()
        if hasattr(config, key):
            setattr(config, key, value)
            self.save(config)
        else:
            raise KeyError(f"Invalid config key: {key}")

    def clear(self) -> None:
        """Clear all configuration"""
        self._config = LeakGuardConfig()
        self.save()

    def detector_options(self) -> Dict[str, Any]:
        """Keyword arguments shared by every detector (besides the timeout)"""
        config = self.load()
        return {
            "max_concurrent": config.max_concurrent,
            "max_candidates_per_kind": config.max_candidates_per_kind,
            "resolve_source_maps": config.resolve_source_maps,
        }
