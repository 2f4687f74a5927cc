"""Configuration for the Vogue AI stylist service."""

from dataclasses import dataclass, fields
from pathlib import Path
import os
from typing import Any, Dict, Mapping, Optional

DEFAULT_TEXT_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_COUNTRY_STYLE = "Parisian Chic"
DEFAULT_GEOCODE_URL = "https://api.bigdatacloud.net/data/reverse-geocode-client"
DEFAULT_CONFIG_DIR = "config/environments"


@dataclass
class StylistConfig:
    """Runtime settings for the stylist service.

    Provider calls are bounded by ``request_timeout_seconds`` (outfit text and
    photo analysis) and ``image_timeout_seconds`` (illustration). Nothing is
    retried.
    """

    api_key: Optional[str] = None
    text_model: str = DEFAULT_TEXT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    image_aspect_ratio: str = "3:4"
    default_country_style: str = DEFAULT_COUNTRY_STYLE
    request_timeout_seconds: float = 60.0
    image_timeout_seconds: float = 120.0
    geocode_url: str = DEFAULT_GEOCODE_URL
    geocode_timeout_seconds: float = 5.0
    session_event_limit: int = 50
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "StylistConfig":
        """Read settings from an optional environment file, then the process environment.

        The file is ``$APP_CONFIG_PATH`` or ``<STYLIST_CONFIG_DIR>/<APP_ENV>.yaml``.
        Each setting may be overridden by the upper-cased environment variable
        of the same name, so the Gemini key can be injected by the runtime.
        ``GOOGLE_API_KEY`` is accepted when ``GEMINI_API_KEY`` is absent.
        """

        env_name = os.getenv("APP_ENV")
        file_values = cls._load_yaml_config(cls._config_file(env_name))

        def lookup(key: str) -> Optional[str]:
            value = os.getenv(key.upper(), file_values.get(key))
            return value if value not in (None, "") else None

        values: Dict[str, Any] = {}
        for spec in fields(cls):
            if spec.name in ("api_key", "environment"):
                continue
            raw = lookup(spec.name)
            if raw is None:
                continue
            values[spec.name] = _coerce(spec.default, raw)

        return cls(
            api_key=lookup("gemini_api_key") or lookup("google_api_key"),
            environment=env_name,
            **values,
        )

    @staticmethod
    def _config_file(env_name: Optional[str]) -> Optional[Path]:
        explicit = os.getenv("APP_CONFIG_PATH")
        if explicit:
            return Path(explicit)
        if env_name:
            return Path(os.getenv("STYLIST_CONFIG_DIR", DEFAULT_CONFIG_DIR)) / f"{env_name}.yaml"
        return None

    @staticmethod
    def _load_yaml_config(path: Optional[Path]) -> Mapping[str, str]:
        """Read flat ``key: value`` lines; comments and blank lines are skipped."""

        if path is None or not path.exists():
            return {}
        parsed: Dict[str, str] = {}
        for line in path.read_text().splitlines():
            key, sep, value = line.partition(":")
            key = key.strip()
            if not sep or not key or key.startswith("#"):
                continue
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                value = value[1:-1]
            parsed[key] = value
        return parsed


def _coerce(default: Any, raw: str) -> Any:
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


__all__ = [
    "DEFAULT_COUNTRY_STYLE",
    "DEFAULT_GEOCODE_URL",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_TEXT_MODEL",
    "StylistConfig",
]
