from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
import os
from pathlib import Path
from typing import Any

from ttml_lyrics.importers.plain_text import ChannelMode, GroupingMode, TextImportConfig

logger = logging.getLogger(__name__)


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "ttml-lyrics"
    return Path.home() / ".config" / "ttml-lyrics"


def _config_file(config_dir: Path | None = None) -> Path:
    return (config_dir or _config_dir()) / "config.json"


@dataclass(frozen=True)
class AppConfig:
    config_dir: Path

    # Export
    lang: str  # fallback xml:lang when the lyric has no "language" metadata
    pretty: bool

    # lrclib
    api_max_retries: int
    api_backoff_base_s: float
    api_timeout_s: float

    # Plain text import
    text_import: TextImportConfig


def load_config() -> AppConfig:
    config_dir = _config_dir()
    data = _read_config(config_dir)
    return AppConfig(
        config_dir=config_dir,
        lang=_load_lang(data),
        pretty=os.getenv("TTML_LYRICS_PRETTY", "0") not in ("0", "false", "False", ""),
        api_max_retries=int(os.getenv("TTML_LYRICS_API_MAX_RETRIES", "3")),
        api_backoff_base_s=float(os.getenv("TTML_LYRICS_API_BACKOFF_BASE", "1.0")),
        api_timeout_s=float(os.getenv("TTML_LYRICS_API_TIMEOUT", "10.0")),
        text_import=_text_import_from(data.get("text_import")),
    )


def _read_config(config_dir: Path) -> dict[str, Any]:
    cfg_path = _config_file(config_dir)
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _write_config(updates: dict[str, Any], config_dir: Path | None = None) -> None:
    cfg_path = _config_file(config_dir)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data = _read_config(cfg_path.parent)
    data.update(updates)
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def _load_lang(data: dict[str, Any]) -> str:
    # Priority: config.json → TTML_LYRICS_LANG → "en"
    raw = data.get("lang")
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    env_lang = os.getenv("TTML_LYRICS_LANG")
    if env_lang and env_lang.strip():
        return env_lang.strip()
    return "en"


def save_config_lang(lang: str) -> None:
    _write_config({"lang": lang})


def _text_import_from(raw: Any) -> TextImportConfig:
    """Each field falls back to its default when missing or invalid."""
    defaults = TextImportConfig()
    if not isinstance(raw, dict):
        return defaults

    values: dict[str, Any] = {}
    for f in fields(TextImportConfig):
        if f.name not in raw:
            continue
        default = getattr(defaults, f.name)
        value = raw[f.name]
        if isinstance(default, ChannelMode):
            try:
                values[f.name] = ChannelMode(value)
            except ValueError:
                logger.warning("Unknown channel mode %r, using %s", value, default.value)
        elif isinstance(default, GroupingMode):
            try:
                values[f.name] = GroupingMode(value)
            except ValueError:
                logger.warning("Unknown grouping mode %r, using %s", value, default.value)
        elif isinstance(value, type(default)):
            values[f.name] = value
    return TextImportConfig(**values)


def load_text_import_config(config_dir: Path | None = None) -> TextImportConfig:
    return _text_import_from(_read_config(config_dir or _config_dir()).get("text_import"))


def save_text_import_config(cfg: TextImportConfig, config_dir: Path | None = None) -> None:
    data = asdict(cfg)
    data["channel_mode"] = cfg.channel_mode.value
    data["grouping_mode"] = cfg.grouping_mode.value
    _write_config({"text_import": data}, config_dir)
