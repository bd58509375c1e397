"""
Run Configuration — Resolve the parameters of one invocation.

Sources, highest precedence first:
    1. CLI arguments
    2. YAML config file (--config or REPOMIRROR_CONFIG)
    3. REPOMIRROR_* environment variables (a .env file is loaded at startup)
    4. Built-in defaults

Minimal config file:
    projects_dir: ~/Projects
    backup_dir: ~/backup/git-repositories
    jobs: 4

Environment variables:
    REPOMIRROR_PROJECTS_DIR, REPOMIRROR_BACKUP_DIR, REPOMIRROR_LOG_FILE,
    REPOMIRROR_REMOTE_NAME, REPOMIRROR_PROTOCOL_PREFIX,
    REPOMIRROR_JOBS, REPOMIRROR_TIMEOUT, REPOMIRROR_NAMESPACED
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError

logger = logging.getLogger(__name__)

MODE_LOCAL = "local"
MODE_REMOTE = "remote"

ENV_PREFIX = "REPOMIRROR_"
CONFIG_ENV_VAR = "REPOMIRROR_CONFIG"

DEFAULT_PROJECTS_DIR = "~/Projects"
DEFAULT_BACKUP_DIR = "~/backup/git-repositories"
DEFAULT_LOG_FILE = "~/backup-repos.log"
DEFAULT_REMOTE_NAME = "mirror"
DEFAULT_PROTOCOL_PREFIX = "git@"

_PATH_FIELDS = ("projects_dir", "backup_dir", "log_file")
_TRUE_VALUES = ("true", "1", "yes")


@dataclass(frozen=True)
class RunConfig:
    """The resolved parameters governing one run."""

    mode: str
    projects_dir: Path
    backup_dir: Optional[Path] = None
    log_file: Optional[Path] = None
    host: Optional[str] = None
    user: Optional[str] = None
    remote_name: str = DEFAULT_REMOTE_NAME
    protocol_prefix: str = DEFAULT_PROTOCOL_PREFIX
    jobs: int = 1
    timeout: Optional[float] = None  # seconds, for clone/fetch/push
    namespaced: bool = False

    @property
    def is_remote(self) -> bool:
        return self.mode == MODE_REMOTE

    @property
    def exclude_dirs(self) -> tuple:
        """Directories the locator must never enumerate."""
        if self.backup_dir is None:
            return ()
        return (self.backup_dir,)


def _expand(value: Any) -> Path:
    return Path(os.path.expanduser(str(value)))


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw env/YAML value to the field's type."""
    if value is None:
        return None
    try:
        if name in _PATH_FIELDS:
            return _expand(value)
        if name == "jobs":
            jobs = int(value)
            if jobs < 1:
                raise ValueError("must be >= 1")
            return jobs
        if name == "timeout":
            timeout = float(value)
            return timeout if timeout > 0 else None
        if name == "namespaced":
            if isinstance(value, bool):
                return value
            return str(value).lower() in _TRUE_VALUES
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r} ({e})")
    return str(value)


def settings_from_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Read REPOMIRROR_* variables into a partial settings dict."""
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    for f in fields(RunConfig):
        if f.name in ("mode", "host", "user"):
            continue
        raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
        if raw is None or raw == "":
            continue
        values[f.name] = _coerce(f.name, raw)

    if values:
        logger.debug(f"[config] From environment: {sorted(values)}")
    return values


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load a YAML config file into a partial settings dict."""
    if not path.exists():
        raise ConfigError(f"Config file does not exist: {path}")

    with path.open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}", detail=str(e))

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    known = {f.name for f in fields(RunConfig)} - {"mode"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown key(s) in {path}: {', '.join(unknown)}")

    logger.info(f"[config] Loaded {path}")
    return {name: _coerce(name, value) for name, value in data.items()}


def load_run_config(
    mode: str,
    config_file: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
    **overrides: Any,
) -> RunConfig:
    """
    Build the RunConfig for a run.

    Args:
        mode: MODE_LOCAL or MODE_REMOTE
        config_file: Optional YAML file. Falls back to REPOMIRROR_CONFIG.
        environ: Environment mapping (defaults to os.environ)
        overrides: CLI values; None means "not given"

    Returns:
        Fully resolved RunConfig
    """
    env = os.environ if environ is None else environ

    values: Dict[str, Any] = {
        "projects_dir": _expand(DEFAULT_PROJECTS_DIR),
    }
    if mode == MODE_LOCAL:
        values["backup_dir"] = _expand(DEFAULT_BACKUP_DIR)
        values["log_file"] = _expand(DEFAULT_LOG_FILE)

    values.update(settings_from_env(env))

    if config_file is None and env.get(CONFIG_ENV_VAR):
        config_file = Path(env[CONFIG_ENV_VAR])
    if config_file is not None:
        values.update(load_config_file(_expand(config_file)))

    for name, value in overrides.items():
        if value is not None:
            values[name] = _coerce(name, value)

    if mode == MODE_REMOTE:
        # A remote run never writes a local mirror or log
        values.pop("backup_dir", None)
        values.pop("log_file", None)

    config = RunConfig(mode=mode, **values)
    logger.debug(f"[config] Resolved: {config}")
    return config

