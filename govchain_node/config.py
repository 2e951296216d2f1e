# govchain_node/config.py
import copy
import logging
import os
from typing import Any, Dict

import yaml

log = logging.getLogger(__name__)

CONFIG_FILENAME = "govchain_config.yaml"

# -------- Defaults --------
_DEFAULT: Dict[str, Any] = {
    "node": {
        # Principal that becomes owner + first admin on an empty ledger
        "deployer": "ST1DEPLOYER",
        "genesis_height": 0,
    },
    "persistence": {
        "enabled": True,
        "data_dir": "data",
        "filename": "govchain_state.json",
        "keep_backups": 2,
    },
    "voting": {"min_duration": 144, "max_duration": 4320},
    "counter": {
        "increment_requires_permission": True,
        "decrement_requires_permission": True,
    },
    "message_board": {"moderation_enabled": True, "public_posting": False},
    "logging": {"level": "INFO"},
    "server": {"host": "127.0.0.1", "port": 8000},
}


def _bool(val: str) -> bool:
    return val.strip().lower() in ("1", "true", "yes", "on")


# -------- ENV overrides --------
_ENV_MAP = {
    ("node", "deployer"): ("GOVCHAIN_DEPLOYER", str),
    ("node", "genesis_height"): ("GOVCHAIN_GENESIS_HEIGHT", int),
    ("persistence", "enabled"): ("GOVCHAIN_PERSIST", _bool),
    ("persistence", "data_dir"): ("GOVCHAIN_DATA_DIR", str),
    ("logging", "level"): ("GOVCHAIN_LOG_LEVEL", str),
    ("server", "host"): ("GOVCHAIN_HOST", str),
    ("server", "port"): ("GOVCHAIN_PORT", int),
}


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for (section, key), (env_name, cast) in _ENV_MAP.items():
        val = os.getenv(env_name)
        if val is None:
            continue
        try:
            casted = cast(val)
        except ValueError:
            log.warning("Ignoring %s=%r: not a valid %s", env_name, val, getattr(cast, "__name__", cast))
            continue
        cfg.setdefault(section, {})
        cfg[section][key] = casted
    return cfg


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(_DEFAULT)


def load_config(repo_root: str = ".") -> Dict[str, Any]:
    """
    Loads the YAML config from repo_root/govchain_config.yaml.
    Falls back to defaults if the file doesn't exist or can't be parsed,
    then applies ENV overrides.
    """
    path = os.path.join(repo_root, CONFIG_FILENAME)
    cfg = default_config()

    if os.path.exists(path):
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            log.warning("Could not read %s; using defaults", path, exc_info=True)
            data = {}
        if isinstance(data, dict):
            cfg = _deep_merge(cfg, data)

    return _apply_env_overrides(cfg)


# -------- Small helpers used by the node --------
def get_deployer(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("node", {}).get("deployer") or _DEFAULT["node"]["deployer"])


def get_genesis_height(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("node", {}).get("genesis_height", 0))


def persistence_enabled(cfg: Dict[str, Any]) -> bool:
    return bool(cfg.get("persistence", {}).get("enabled", True))


def get_data_dir(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("persistence", {}).get("data_dir", "data"))


def get_log_level(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("logging", {}).get("level", "INFO")).upper()


def get_bind_host(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("server", {}).get("host", "127.0.0.1"))


def get_bind_port(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("server", {}).get("port", 8000))
