"""
Resolution of ``ConfigOverride.sdvextension`` into absolute paths.
"""

from __future__ import annotations

import json
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from .console import warn as console_warn
from .errors import ConfigFileError, LaunchError, MissingWorkspaceError

CONFIG_FILE_NAME = "ConfigOverride.sdvextension"
IGNORE_FILE_NAME = "IgnoreFiles.sdvextension"

DEFAULT_ZIP_PATH = "ZippedMods"
DEFAULT_MOD_FOLDER_PATH = "Mods"
WINDOWS_SMAPI = "StardewModdingAPI.exe"
UNIX_SMAPI = "StardewModdingAPI"

RECOGNISED_KEYS = ("ZipPath", "ModFolderPath", "SMAPIPath", "ModVersion")

_LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")

Warn = Callable[[ConfigFileError], None]


@dataclass(frozen=True)
class InvocationContext:
    """Everything an invocation needs to know about its surroundings."""
    workspace_root: Optional[Path]
    platform: str = sys.platform
    game_path: str = ""

    @property
    def is_windows(self) -> bool:
        return self.platform.lower().startswith("win")

    def require_root(self) -> Path:
        if self.workspace_root is None:
            raise MissingWorkspaceError("No workspace folder given")
        try:
            root = Path(self.workspace_root).resolve()
        except (OSError, RuntimeError) as e:
            raise MissingWorkspaceError(
                f"Could not resolve workspace root '{self.workspace_root}': {e}"
            )
        if not root.is_dir():
            raise MissingWorkspaceError(f"Workspace root '{root}' is not a directory")
        return root


@dataclass(frozen=True)
class ResolvedConfig:
    archive_output_dir: Path
    install_root_dir: Path
    launcher_path: Path
    mod_version: str
    raw_install_subpath: str
    explicit_keys: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class LaunchCommand:
    executable: Path
    arguments: str
    working_dir: Path
    shell_text: str


def sanitize_json(content: str) -> str:
    """Strip ``//`` and ``/* */`` comments plus trailing commas."""
    content = _LINE_COMMENT.sub("", content)
    content = _BLOCK_COMMENT.sub("", content)
    return _TRAILING_COMMA.sub(r"\1", content)


def parse_document(content: str, name: str) -> Any:
    try:
        return json.loads(sanitize_json(content))
    except ValueError as e:
        raise ConfigFileError(f"{name} has invalid JSON: {e}")


def parse_override_document(content: str, warn: Warn = console_warn) -> Dict[str, str]:
    """Parse override text into a flat string mapping.

    Raises :class:`ConfigFileError` when the document is not a JSON object.
    Values that are not strings are reported through *warn* and dropped.
    """
    data = parse_document(content, CONFIG_FILE_NAME)
    if not isinstance(data, dict):
        raise ConfigFileError(f"{CONFIG_FILE_NAME} must contain a JSON object")

    mapping: Dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, str):
            mapping[key] = value
        else:
            warn(ConfigFileError(f"{CONFIG_FILE_NAME}: '{key}' is not a string, ignored"))
    return mapping


def read_document(path: Path, warn: Warn = console_warn) -> Optional[str]:
    """Return the text of *path*, or ``None`` if it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        warn(ConfigFileError(f"Could not read '{path}': {e}"))
        return None


def default_launcher_name(ctx: InvocationContext) -> str:
    return WINDOWS_SMAPI if ctx.is_windows else UNIX_SMAPI


def strip_leading_separators(value: str) -> str:
    return value.lstrip("/\\")


def _under_game_path(game_path: str, value: str) -> Path:
    return Path(os.path.abspath(os.path.join(game_path, strip_leading_separators(value))))


def resolve_config(
    content: Optional[str],
    ctx: InvocationContext,
    warn: Warn = console_warn,
) -> ResolvedConfig:
    """Merge override *content* with platform defaults.

    ``None`` content means the document is absent. Malformed content is
    reported through *warn* and every default applies.
    """
    overrides: Dict[str, str] = {}
    if content is not None:
        try:
            overrides = parse_override_document(content, warn)
        except ConfigFileError as e:
            warn(ConfigFileError(f"{e}. Using defaults."))

    def value(key: str, default: str) -> str:
        return overrides.get(key, "").strip() or default

    explicit = frozenset(k for k in RECOGNISED_KEYS if overrides.get(k, "").strip())
    mod_folder = value("ModFolderPath", DEFAULT_MOD_FOLDER_PATH)

    return ResolvedConfig(
        archive_output_dir=_under_game_path(ctx.game_path, value("ZipPath", DEFAULT_ZIP_PATH)),
        install_root_dir=_under_game_path(ctx.game_path, mod_folder),
        launcher_path=_under_game_path(
            ctx.game_path, value("SMAPIPath", default_launcher_name(ctx))
        ),
        mod_version=value("ModVersion", ""),
        raw_install_subpath=strip_leading_separators(mod_folder),
        explicit_keys=explicit,
    )


def load_config(ctx: InvocationContext, warn: Warn = console_warn) -> ResolvedConfig:
    """Resolve the config of the workspace in *ctx*."""
    root = ctx.require_root()
    return resolve_config(read_document(root / CONFIG_FILE_NAME, warn), ctx, warn)


def build_launch_command(
    config: ResolvedConfig,
    ctx: InvocationContext,
    check: bool = False,
) -> LaunchCommand:
    """Construct the SMAPI command line; starting it is up to the caller.

    ``--mods-path`` is only passed when the launcher was not overridden.
    With *check*, a launcher that does not exist raises :class:`LaunchError`.
    """
    default_name = default_launcher_name(ctx)
    overridden = (
        "SMAPIPath" in config.explicit_keys
        and config.launcher_path.name != default_name
    )

    executable = config.launcher_path
    arguments: List[str] = []
    if not overridden:
        arguments = ["--mods-path", f'"{config.raw_install_subpath}"']
    if check and not executable.is_file():
        raise LaunchError(f"SMAPI executable '{executable}' does not exist")

    args = " ".join(arguments)
    quoted = f'"{executable}"' + (f" {args}" if args else "")
    shell_text = f"& {quoted}" if ctx.is_windows else quoted
    return LaunchCommand(
        executable=executable,
        arguments=args,
        working_dir=executable.parent,
        shell_text=shell_text,
    )
