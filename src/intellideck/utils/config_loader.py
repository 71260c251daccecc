from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml
from pydantic import BaseModel

DEFAULT_CONFIG_PATH = "config/intellideck.yaml"


def load_config(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    config_path = Path(path)
    if not config_path.exists():
        return {}
    with config_path.open('r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        return {}
    return data


def get_config_value(config: Dict[str, Any], keys: Iterable[str], default: Any = None) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


def resolve_value(arg_value: Any, config: Dict[str, Any], keys: Iterable[str], default: Any) -> Any:
    if arg_value is not None:
        return arg_value
    cfg_value = get_config_value(config, keys, default=None)
    return default if cfg_value is None else cfg_value


class Settings(BaseModel):
    gemini_api_key: Optional[str] = None
    cards_model: str = "gemini-2.5-pro"
    distractor_model: str = "gemini-2.5-flash"
    library_dir: str = "library"
    best_time_path: str = "data/best_time.json"
    best_time_key: str = "intellideck-match-best-time"
    match_pair_count: int = 6
    mismatch_flash_ms: int = 500
    write_correct_delay_ms: int = 1200
    write_incorrect_delay_ms: int = 2500
    seed: Optional[int] = None


# field -> (environment variable, YAML key path)
_SOURCES = {
    "gemini_api_key": ("GEMINI_API_KEY", ("ai", "api_key")),
    "cards_model": ("INTELLIDECK_CARDS_MODEL", ("ai", "cards_model")),
    "distractor_model": ("INTELLIDECK_DISTRACTOR_MODEL", ("ai", "distractor_model")),
    "library_dir": ("INTELLIDECK_LIBRARY_DIR", ("storage", "library_dir")),
    "best_time_path": ("INTELLIDECK_BEST_TIME_PATH", ("storage", "best_time_path")),
    "best_time_key": (None, ("storage", "best_time_key")),
    "match_pair_count": (None, ("study", "match", "pair_count")),
    "mismatch_flash_ms": (None, ("study", "match", "mismatch_flash_ms")),
    "write_correct_delay_ms": (None, ("study", "write", "correct_delay_ms")),
    "write_incorrect_delay_ms": (None, ("study", "write", "incorrect_delay_ms")),
    "seed": ("INTELLIDECK_SEED", ("study", "seed")),
}


def load_settings(path: Optional[str] = None, **overrides: Any) -> Settings:
    """
    Build Settings from keyword overrides, then environment, then the YAML file.

    Args:
        path: YAML config path; defaults to $INTELLIDECK_CONFIG or config/intellideck.yaml
        overrides: Explicit values that win over every other source

    Returns:
        Validated Settings
    """
    config = load_config(path or os.getenv("INTELLIDECK_CONFIG", DEFAULT_CONFIG_PATH))
    defaults = Settings()
    values: Dict[str, Any] = {}
    for field, (env_name, keys) in _SOURCES.items():
        arg_value = overrides.get(field)
        if arg_value is None and env_name:
            arg_value = os.getenv(env_name) or None
        values[field] = resolve_value(arg_value, config, keys, getattr(defaults, field))
    return Settings(**values)
