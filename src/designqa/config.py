"""Runtime settings for the design QA inspector.

Values come from, in increasing precedence: built-in defaults, an optional
JSON settings file and ``DESIGNQA_*`` environment variables (a ``.env`` file
is honoured through python-dotenv). Command line flags override all of them.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .presets import MERGE_MODES, PRESETS

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "DESIGNQA_SETTINGS"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    preset: str = "balanced"
    locale: str = "en"
    display_width: Optional[float] = None
    log_level: str = "INFO"
    merge_mode: Optional[str] = None
    openai_api_key: Optional[str] = None
    vision_model: str = "gpt-4o"


def _validated_choice(value: Optional[str], allowed, default):
    return value if value in allowed else default


def _parse_width(value: object) -> Optional[float]:
    if value in (None, ""):
        return None
    try:
        width = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid display width %r", value)
        return None
    return width if width > 0 else None


def _normalize(settings: Settings) -> Settings:
    defaults = Settings()
    return replace(
        settings,
        preset=_validated_choice(str(settings.preset).lower(), PRESETS, defaults.preset),
        log_level=_validated_choice(str(settings.log_level).upper(), LOG_LEVELS, defaults.log_level),
        locale=str(settings.locale or defaults.locale),
        vision_model=str(settings.vision_model or defaults.vision_model),
        merge_mode=_validated_choice(settings.merge_mode, MERGE_MODES, None),
        display_width=_parse_width(settings.display_width),
    )


def load_settings_file(path: str | Path) -> dict:
    """Read a JSON settings file, keeping only known keys.

    A missing or unreadable file yields an empty mapping.
    """

    known = {field.name for field in fields(Settings)}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            loaded = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Could not read settings file %s: %s", path, exc)
        return {}
    if not isinstance(loaded, dict):
        logger.warning("Settings file %s does not contain an object", path)
        return {}
    unknown = set(loaded) - known
    if unknown:
        logger.debug("Ignoring unknown settings: %s", ", ".join(sorted(unknown)))
    return {key: value for key, value in loaded.items() if key in known}


def _from_environ(environ: Mapping[str, str]) -> dict:
    mapping = {
        "DESIGNQA_PRESET": "preset",
        "DESIGNQA_LOCALE": "locale",
        "DESIGNQA_DISPLAY_WIDTH": "display_width",
        "DESIGNQA_LOG_LEVEL": "log_level",
        "DESIGNQA_MERGE_MODE": "merge_mode",
        "DESIGNQA_VISION_MODEL": "vision_model",
        "OPENAI_API_KEY": "openai_api_key",
    }
    return {key: environ[name] for name, key in mapping.items() if environ.get(name)}


def load_settings(
    settings_path: str | Path | None = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    use_dotenv: bool = True,
) -> Settings:
    if environ is None:
        if use_dotenv:
            load_dotenv()
        environ = os.environ
    values: dict = {}
    path = settings_path or environ.get(SETTINGS_ENV_VAR)
    if path:
        values.update(load_settings_file(path))
    values.update(_from_environ(environ))
    return _normalize(Settings(**values))


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
