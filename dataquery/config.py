from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


PLACEHOLDER_API_KEYS = frozenset({"provide_API_key", "upload_API_key"})


class ConfigError(ValueError):
    """Raised when required environment configuration is invalid."""


def _first_env(*keys: str, default: str | None = None) -> str | None:
    for key in keys:
        value = os.getenv(key)
        if value is not None and value != "":
            return value
    return default


def _int_env(keys: tuple[str, ...], default: int) -> int:
    raw = _first_env(*keys)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {keys[0]} must be an integer.") from exc


def _float_env(keys: tuple[str, ...], default: float) -> float:
    raw = _first_env(*keys)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"Environment variable {keys[0]} must be a number.") from exc


@dataclass(slots=True)
class Settings:
    llm_api_key: str
    llm_base_url: str
    llm_model: str
    temperature: float
    max_tokens: int
    history_path: str
    max_chart_points: int
    sample_rows: int

    @property
    def is_configured(self) -> bool:
        key = (self.llm_api_key or "").strip()
        return bool(key) and key not in PLACEHOLDER_API_KEYS

    @classmethod
    def load(cls, env_file: str | Path | None = None) -> "Settings":
        if env_file is not None:
            load_dotenv(dotenv_path=env_file)

        return cls(
            llm_api_key=_first_env("LLM_API_KEY", "OPENAI_API_KEY", default="") or "",
            llm_base_url=_first_env("LLM_BASE_URL", "OPENAI_BASE_URL", default="") or "",
            llm_model=_first_env("LLM_MODEL", "OPENAI_MODEL", default="gpt-4o-mini") or "gpt-4o-mini",
            temperature=_float_env(("LLM_TEMPERATURE",), default=0.2),
            max_tokens=_int_env(("LLM_MAX_TOKENS",), default=1024),
            history_path=_first_env("DATAQUERY_HISTORY_PATH", default=".dataquery/history.json")
            or ".dataquery/history.json",
            max_chart_points=_int_env(("DATAQUERY_MAX_POINTS",), default=8),
            sample_rows=_int_env(("DATAQUERY_SAMPLE_ROWS",), default=5),
        )
