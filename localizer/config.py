"""Runtime configuration — defaults, then _settings.json, then environment."""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .file_manager import EXCLUDE_DIRS

log = logging.getLogger(__name__)

TOOL_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SETTINGS_FILE = os.path.join(TOOL_ROOT, "_settings.json")

# Tried in order after whatever the models endpoint reports
DEFAULT_AI_MODELS = [
    ("v1beta", "gemini-1.5-pro-latest"),
    ("v1beta", "gemini-1.5-flash-latest"),
    ("v1beta", "gemini-1.5-pro"),
    ("v1beta", "gemini-1.5-flash"),
    ("v1beta", "gemini-pro"),
    ("v1", "gemini-1.5-pro"),
    ("v1", "gemini-1.5-flash"),
]


@dataclass
class LocalizerConfig:
    """Settings for one localizer run."""
    project_root: str = ""
    tool_root: str = TOOL_ROOT
    cached_words_path: str = ""     # Persisted AI translations (second dictionary tier)
    missing_words_path: str = ""    # Transient hand-off file for the AI step
    ai_enabled: bool = True
    api_keys: list = field(default_factory=list)
    ai_models: list = field(default_factory=lambda: list(DEFAULT_AI_MODELS))
    ai_timeout: int = 120           # Seconds per AI request
    exclude_dirs: tuple = EXCLUDE_DIRS

    def __post_init__(self):
        if not self.project_root:
            self.project_root = os.path.dirname(self.tool_root)
        if not self.cached_words_path:
            self.cached_words_path = os.path.join(self.tool_root, "cached_words.json")
        if not self.missing_words_path:
            self.missing_words_path = os.path.join(self.tool_root, "missing_words.json")


def _parse_keys(raw: str) -> list:
    return [k.strip() for k in raw.split(",") if k.strip()]


def _apply_settings(config: LocalizerConfig, cfg: dict):
    if "project_root" in cfg:
        config.project_root = cfg["project_root"]
    if "cached_words_path" in cfg:
        config.cached_words_path = cfg["cached_words_path"]
    if "missing_words_path" in cfg:
        config.missing_words_path = cfg["missing_words_path"]
    if "ai_enabled" in cfg:
        config.ai_enabled = bool(cfg["ai_enabled"])
    if "api_keys" in cfg and isinstance(cfg["api_keys"], list):
        config.api_keys = [str(k) for k in cfg["api_keys"] if k]
    if "ai_models" in cfg and isinstance(cfg["ai_models"], list):
        # [["v1beta", "gemini-1.5-flash"], ...]
        config.ai_models = [tuple(m) for m in cfg["ai_models"]
                            if isinstance(m, (list, tuple)) and len(m) == 2]
    if isinstance(cfg.get("ai_timeout"), (int, float)) and cfg["ai_timeout"] > 0:
        config.ai_timeout = cfg["ai_timeout"]
    if "exclude_dirs" in cfg and isinstance(cfg["exclude_dirs"], list):
        config.exclude_dirs = tuple(cfg["exclude_dirs"])


def load_config(settings_path: Optional[str] = None,
                project_root: Optional[str] = None) -> LocalizerConfig:
    """Build the run configuration.

    A missing or malformed settings file leaves the defaults in place.
    API keys from the environment (GEMINI_API_KEYS, comma-separated, or
    GEMINI_API_KEY) take precedence over keys in the settings file.
    """
    config = LocalizerConfig()
    path = settings_path or SETTINGS_FILE
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except FileNotFoundError:
        cfg = {}
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable settings file %s: %s", path, e)
        cfg = {}
    if isinstance(cfg, dict):
        _apply_settings(config, cfg)

    load_dotenv(os.path.join(config.tool_root, ".env"))
    env_keys = _parse_keys(os.environ.get("GEMINI_API_KEYS", ""))
    if not env_keys and os.environ.get("GEMINI_API_KEY"):
        env_keys = [os.environ["GEMINI_API_KEY"].strip()]
    if env_keys:
        config.api_keys = env_keys

    if project_root:
        config.project_root = project_root
    config.project_root = os.path.abspath(config.project_root)
    config.tool_root = os.path.abspath(config.tool_root)
    return config
