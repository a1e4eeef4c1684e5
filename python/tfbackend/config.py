"""
Backend configuration.

A BackendConfig is built once at startup (from the environment or a YAML
file, then CLI overrides) and passed into create_app(); nothing reads
configuration from module globals.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")

# field name -> environment variable
ENV_VARS = {
    "data_dir": "DATA_DIR",
    "host": "HOST",
    "port": "PORT",
    "auth_username": "AUTH_USERNAME",
    "auth_password": "AUTH_PASSWORD",
    "log_level": "LOG_LEVEL",
}


@dataclass
class BackendConfig:
    """tfbackend server configuration."""

    # Storage root; states/ and locks/ live beneath it
    data_dir: str = "./data"

    # Service parameters
    host: str = "0.0.0.0"
    port: int = 9944

    # Basic auth, enabled only when both are set
    auth_username: Optional[str] = None
    auth_password: Optional[str] = None

    log_level: str = "info"

    @property
    def auth_enabled(self) -> bool:
        return bool(self.auth_username) and bool(self.auth_password)

    @property
    def states_dir(self) -> Path:
        return Path(self.data_dir) / "states"

    @property
    def locks_dir(self) -> Path:
        return Path(self.data_dir) / "locks"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BackendConfig":
        """Load configuration from environment variables. Empty values count as unset."""
        environ = os.environ if environ is None else environ
        values = {}
        for name, var in ENV_VARS.items():
            value = environ.get(var, "")
            if value == "":
                continue
            if name == "port":
                try:
                    values[name] = int(value)
                except ValueError:
                    raise ValueError(f"{var} must be an integer, got {value!r}")
            else:
                values[name] = value
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str) -> "BackendConfig":
        """Load configuration from a YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")
        return cls(**data)

    def with_overrides(self, **overrides) -> "BackendConfig":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> None:
        """Validate configuration."""
        if not self.data_dir:
            raise ValueError("data_dir is required")
        if not isinstance(self.port, int) or self.port < 1 or self.port > 65535:
            raise ValueError("port must be between 1 and 65535")
        if self.log_level.lower() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")

    def ensure_data_dir(self) -> Path:
        """Create the storage root if needed and return it."""
        root = Path(self.data_dir)
        root.mkdir(parents=True, exist_ok=True)
        return root
