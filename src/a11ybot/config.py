"""YAML config loader — reads a11ybot.yml into AuditConfig."""

import os
from pathlib import Path

import yaml

from a11ybot.schemas.config import AuditConfig

ENV_BROWSER_ARGS = "A11YBOT_BROWSER_ARGS"
ENV_EXECUTABLE_PATH = "A11YBOT_EXECUTABLE_PATH"


def load_config(path: str | Path | None = None) -> AuditConfig:
    """Load and validate a config file, then apply environment overrides.

    With no path, defaults are used.  Raises ``FileNotFoundError`` if the
    path doesn't exist and ``pydantic.ValidationError`` if the YAML content
    is invalid.
    """
    raw: dict = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        loaded = yaml.safe_load(path.read_text())
        # An empty file loads as None; treat it as "all defaults".
        if loaded is not None:
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file must be a YAML mapping, got {type(loaded).__name__}")
            raw = loaded

    # YAML loads lists with only commented-out items as None; drop them so the
    # defaults apply instead of failing validation.
    for key in ("axe_tags", "recognized_roles"):
        if key in raw and raw[key] is None:
            del raw[key]

    _apply_env_overrides(raw)
    return AuditConfig(**raw)


def _apply_env_overrides(raw: dict) -> None:
    browser = raw.get("browser") or {}
    if args := os.environ.get(ENV_BROWSER_ARGS):
        browser["args"] = args.split()
    if exe := os.environ.get(ENV_EXECUTABLE_PATH):
        browser["executable_path"] = exe
    if browser:
        raw["browser"] = browser
