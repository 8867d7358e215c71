"""Utilities for loading and writing configuration files."""

from __future__ import annotations

import importlib.resources
import os
import tomllib
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from imagespecs.constants import CONFIG_HEADERS, CONFIG_MAX_BYTES, CONFIG_TIMEOUT, CONFIG_USER_AGENT
from imagespecs.errors import ConfigLoadError

TOML_CONFIG = ".imagespecs.toml"
ENV_CONFIG_PATH = "IMAGESPECS_CONFIG_PATH"
HEADER_SEPARATOR = ":"


def load_default_config_text() -> str:
    """Return the bundled default configuration text, comments included."""
    try:
        cfg_path = importlib.resources.files("imagespecs.resources").joinpath("default_config.toml")
        with cfg_path.open("r", encoding="utf-8") as f:  # type: ignore[attr-defined]
            return f.read()
    except OSError as err:  # pragma: no cover - packaging problem
        msg = f"Error loading default configuration: {err}"
        raise ConfigLoadError(msg) from err


def load_default_config() -> dict[str, Any]:
    """Return the bundled default configuration as a Python dict."""
    return tomllib.loads(load_default_config_text())


def write_default_config(target_dir: Path, *, force: bool = False) -> Path:
    """Write the bundled defaults to ``target_dir/.imagespecs.toml``.

    Raises:
        ConfigLoadError: if the file exists and ``force`` is not set.
    """
    toml_path = target_dir / TOML_CONFIG
    if toml_path.exists() and not force:
        msg = f"{toml_path} already exists (use --force to overwrite)"
        raise ConfigLoadError(msg)
    toml_path.write_text(load_default_config_text(), encoding="utf-8")
    return toml_path


def _parse_toml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Error reading {path}: {e}"
        raise ConfigLoadError(msg) from e
    try:
        return tomlkit.loads(raw).unwrap()
    except TOMLKitError as e:
        msg = f"Error parsing {path.name}: {e}"
        raise ConfigLoadError(msg) from e


def _load_with_extends(path: Path, *, _visited: set[Path] | None = None) -> dict[str, Any]:
    """Load a TOML file supporting an optional 'extends' key for inheritance.

    Later files override earlier ones; header tables are merged key by key.
    Relative paths in 'extends' are resolved relative to the parent of ``path``.
    """
    if _visited is None:
        _visited = set()
    real = path.resolve()
    if real in _visited:
        return {}
    _visited.add(real)

    data = _parse_toml(path)

    ext = data.get("extends")
    if isinstance(ext, str):
        ext_list = [ext]
    elif isinstance(ext, list):
        ext_list = [e for e in ext if isinstance(e, str)]
    else:
        ext_list = []

    base_cfg: dict[str, Any] = {}
    for entry in ext_list:
        ext_path = Path(entry).expanduser()
        if not ext_path.is_absolute():
            ext_path = (path.parent / ext_path).resolve()
        if not ext_path.exists():
            msg = f"{path.name} extends missing file: {entry}"
            raise ConfigLoadError(msg)
        base_cfg = merge_config(base_cfg, _load_with_extends(ext_path, _visited=_visited))

    return merge_config(base_cfg, {k: v for k, v in data.items() if k != "extends"})


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from a TOML file (supports 'extends')."""
    return _load_with_extends(path)


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated by ``override``; the headers table is merged, not replaced."""
    merged = dict(base)
    for key, value in override.items():
        if key == CONFIG_HEADERS and isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def _xdg_config_path() -> Path:
    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    xdg_dir = Path(xdg_home) if xdg_home else Path.home() / ".config"
    return xdg_dir / "imagespecs" / "config.toml"


def _pyproject_cfg(pyproject_path: Path) -> dict[str, Any]:
    if not pyproject_path.exists():
        return {}
    tool = _parse_toml(pyproject_path).get("tool", {})
    if isinstance(tool, dict):
        own = tool.get("imagespecs")
        if isinstance(own, dict):
            return own
    return {}


def validate_config(cfg: dict[str, Any]) -> dict[str, Any]:
    """Check the value types of known keys; unknown keys are left alone."""
    timeout = cfg.get(CONFIG_TIMEOUT)
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        msg = f"'{CONFIG_TIMEOUT}' must be a positive number, got {timeout!r}"
        raise ConfigLoadError(msg)
    max_bytes = cfg.get(CONFIG_MAX_BYTES)
    if max_bytes is not None and (isinstance(max_bytes, bool) or not isinstance(max_bytes, int) or max_bytes <= 0):
        msg = f"'{CONFIG_MAX_BYTES}' must be a positive integer, got {max_bytes!r}"
        raise ConfigLoadError(msg)
    user_agent = cfg.get(CONFIG_USER_AGENT)
    if user_agent is not None and not isinstance(user_agent, str):
        msg = f"'{CONFIG_USER_AGENT}' must be a string, got {user_agent!r}"
        raise ConfigLoadError(msg)
    headers = cfg.get(CONFIG_HEADERS)
    if headers is not None and (
        not isinstance(headers, dict) or not all(isinstance(v, str) for v in headers.values())
    ):
        msg = f"'{CONFIG_HEADERS}' must be a table of strings"
        raise ConfigLoadError(msg)
    return cfg


def read_config(
    *,
    base_path: Path,
    ignore_default: bool = False,
    explicit_config: Path | None = None,
) -> dict[str, Any]:
    """Read configuration merging multiple sources with clear precedence.

    Precedence (low -> high):
      1. bundled defaults (unless ``ignore_default``)
      2. XDG config: $XDG_CONFIG_HOME/imagespecs/config.toml (or ~/.config/imagespecs/config.toml)
      3. ``base_path/.imagespecs.toml``
      4. [tool.imagespecs] table in ``base_path/pyproject.toml``
      5. $IMAGESPECS_CONFIG_PATH (if set)
      6. ``explicit_config`` (from --config)
    """
    cfg: dict[str, Any] = {} if ignore_default else load_default_config()

    for p in (_xdg_config_path(), base_path / TOML_CONFIG):
        if p.exists():
            cfg = merge_config(cfg, load_toml_config(p))

    cfg = merge_config(cfg, _pyproject_cfg(base_path / "pyproject.toml"))

    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        p = Path(env_path)
        if p.exists():
            cfg = merge_config(cfg, load_toml_config(p))

    if explicit_config:
        if not explicit_config.exists():
            msg = f"Explicit config file not found: {explicit_config}"
            raise ConfigLoadError(msg)
        cfg = merge_config(cfg, load_toml_config(explicit_config))

    return validate_config(cfg)


def parse_header(text: str) -> tuple[str, str]:
    """Split a ``NAME:VALUE`` command-line header.

    Raises:
        ValueError: if there is no separator or the name is empty.
    """
    name, sep, value = text.partition(HEADER_SEPARATOR)
    name = name.strip()
    if not sep or not name:
        msg = f"expected NAME:VALUE, got {text!r}"
        raise ValueError(msg)
    return name, value.strip()


def apply_runtime_overrides(
    cfg: dict[str, Any],
    *,
    timeout: float | None = None,
    max_bytes: int | None = None,
    user_agent: str | None = None,
    headers: tuple[tuple[str, str], ...] = (),
) -> dict[str, Any]:
    """Apply one-off command-line values on top of the loaded config."""
    overrides: dict[str, Any] = {}
    if timeout is not None:
        overrides[CONFIG_TIMEOUT] = timeout
    if max_bytes is not None:
        overrides[CONFIG_MAX_BYTES] = max_bytes
    if user_agent is not None:
        overrides[CONFIG_USER_AGENT] = user_agent
    if headers:
        overrides[CONFIG_HEADERS] = dict(headers)
    return validate_config(merge_config(cfg, overrides))


def load_and_adjust_config(
    *,
    base_path: Path,
    explicit_config: Path | None,
    ignore_default: bool = False,
    timeout: float | None = None,
    max_bytes: int | None = None,
    user_agent: str | None = None,
    headers: tuple[tuple[str, str], ...] = (),
) -> dict[str, Any]:
    """Read config and apply command-line overrides."""
    base = read_config(base_path=base_path, ignore_default=ignore_default, explicit_config=explicit_config)
    return apply_runtime_overrides(
        base,
        timeout=timeout,
        max_bytes=max_bytes,
        user_agent=user_agent,
        headers=headers,
    )
