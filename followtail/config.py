"""Configuration loading from CLI args, env vars, and optional YAML file."""

import argparse
import logging
import os
import sys
from dataclasses import dataclass, fields

import yaml

from followtail.tailer import DEFAULT_BUFFER_SIZE, DEFAULT_DELAY

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    path: str = ""
    delay: float = DEFAULT_DELAY
    from_end: bool = False
    buffer_size: int = DEFAULT_BUFFER_SIZE
    metrics_interval: float = 0.0
    log_level: str = "INFO"

    def __post_init__(self):
        if self.delay <= 0:
            raise ValueError(f"delay must be positive, got {self.delay}")
        if self.buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {self.buffer_size}")
        if self.metrics_interval < 0:
            raise ValueError(f"metrics_interval must not be negative, got {self.metrics_interval}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")


# Field name -> converter, shared by the YAML, env and CLI layers.
_CONVERTERS = {
    "path": str,
    "delay": float,
    "from_end": _parse_bool,
    "buffer_size": int,
    "metrics_interval": float,
    "log_level": lambda v: str(v).upper(),
}

_ENV_VARS = {
    "path": "TAIL_FILE",
    "delay": "TAIL_DELAY",
    "from_end": "TAIL_FROM_END",
    "buffer_size": "TAIL_BUFFER_SIZE",
    "metrics_interval": "METRICS_INTERVAL",
    "log_level": "LOG_LEVEL",
}


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path.

    Raises ValueError if the file is not valid YAML or is not a mapping.
    """
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a mapping, got {type(data).__name__}")
    logger.info("Loaded YAML config from %s", path)
    return data


def build_cli_parser() -> argparse.ArgumentParser:
    # Defaults are None so that only flags actually given override env/YAML.
    parser = argparse.ArgumentParser(description="Follow a file like tail -f")
    parser.add_argument("path", nargs="?", default=None, help="File to follow")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--delay", type=float, default=None,
                        help=f"Seconds between polls (default: {DEFAULT_DELAY})")
    parser.add_argument("--from-end", dest="from_end", action="store_true", default=None,
                        help="Start at the end of the file instead of the beginning")
    parser.add_argument("--buffer-size", type=int, default=None,
                        help=f"Read buffer size in bytes (default: {DEFAULT_BUFFER_SIZE})")
    parser.add_argument("--metrics-interval", type=float, default=None,
                        help="Seconds between metrics log lines (0 disables)")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    return parser


def load_config(argv: list[str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars <- CLI args (highest priority)."""
    if argv is None:
        argv = sys.argv[1:]
    args = build_cli_parser().parse_args(argv)

    kwargs: dict = {}
    known = {f.name for f in fields(Config)}

    for key, value in load_yaml_config(args.config).items():
        if key not in known:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        kwargs[key] = _CONVERTERS[key](value)

    for key, env_var in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is not None:
            kwargs[key] = _CONVERTERS[key](value)

    for key in known:
        value = getattr(args, key)
        if value is not None:
            kwargs[key] = _CONVERTERS[key](value)

    if not kwargs.get("path"):
        raise ValueError("no file to follow: pass a path, set TAIL_FILE, or set 'path' in the config file")

    return Config(**kwargs)
