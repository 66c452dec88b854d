# Lanes board — configuration
# Override via lanes.yaml, LANES_* environment variables, or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

CONFIG_PATH = Path(__file__).parent.parent / "lanes.yaml"


class ConfigError(Exception):
    """Raised when an explicitly requested config file is unusable."""
    pass


@dataclass
class Config:
    """Runtime configuration for the board server."""

    # Storage
    db_path: str = "~/.local/share/lanes/board.db"

    # HTTP
    host: str = "127.0.0.1"   # use 0.0.0.0 to expose on the network
    port: int = 3000

    # Logging
    log_level: str = "INFO"

    def resolve_paths(self):
        """Expand ~ in paths."""
        self.db_path = str(Path(self.db_path).expanduser())

    def apply_env(self):
        """LANES_DB / LANES_LOG_LEVEL win over the file."""
        db = os.environ.get("LANES_DB")
        if db:
            self.db_path = db
        level = os.environ.get("LANES_LOG_LEVEL")
        if level:
            self.log_level = level.upper()

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """
        Load config from a YAML file, falling back to defaults.

        An explicit path that does not exist raises ConfigError; the
        default file is optional.
        """
        cfg_path = Path(path) if path else CONFIG_PATH
        if path and not cfg_path.exists():
            raise ConfigError(f"Config file not found: {cfg_path}")

        known = {f.name for f in fields(cls)}
        cfg = cls()
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                if isinstance(data, dict):
                    cfg = cls(**{k: v for k, v in data.items() if k in known and v is not None})
            except (OSError, yaml.YAMLError, TypeError):
                cfg = cls()
        cfg.apply_env()
        cfg.db_path = str(cfg.db_path)
        cfg.host = str(cfg.host)
        cfg.log_level = str(cfg.log_level).upper()
        try:
            cfg.port = int(cfg.port)
        except (TypeError, ValueError):
            cfg.port = cls.port
        cfg.resolve_paths()
        return cfg
