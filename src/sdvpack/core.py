"""
Core logic for sdvpack: scan, filter, zip, and mirror a mod workspace.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .config import (
    IGNORE_FILE_NAME,
    InvocationContext,
    ResolvedConfig,
    Warn,
    load_config,
    parse_document,
    read_document,
)
from .console import info, warn as console_warn
from .errors import ArchiveError, ConfigFileError, DeployError, ScanError
from .patterns import compile_patterns, is_ignored

ARCHIVE_EXTENSION = ".zip"


@dataclass(frozen=True)
class Entry:
    relative_path: str
    is_directory: bool


@dataclass(frozen=True)
class PackResult:
    archive_path: Path
    size_bytes: int
    entries: Tuple[Entry, ...]


@dataclass(frozen=True)
class DeployResult:
    target_dir: Path
    items_copied: int
    config: ResolvedConfig


# Workspace scanning
def scan_workspace(root: Path) -> List[Entry]:
    """Enumerate *root* depth-first, each directory before its children.

    Sibling order is whatever the OS listing returns. Directory paths end
    with ``/``. Symbolic links and special files are skipped.
    """
    collected: List[Entry] = []

    def _walk(directory: Path, prefix: str) -> None:
        try:
            with os.scandir(directory) as it:
                children = list(it)
        except OSError as e:
            raise ScanError(f"Could not scan directory '{directory}': {e}", directory)

        for child in children:
            rel = f"{prefix}{child.name}"
            try:
                is_dir = child.is_dir(follow_symlinks=False)
                is_file = not is_dir and child.is_file(follow_symlinks=False)
            except OSError as e:
                raise ScanError(f"Could not inspect '{child.path}': {e}", child.path)
            if is_dir:
                collected.append(Entry(rel + "/", True))
                _walk(Path(child.path), rel + "/")
            elif is_file:
                collected.append(Entry(rel, False))

    _walk(root, "")
    return collected


# Filtering
def parse_ignore_document(content: str) -> List[str]:
    data = parse_document(content, IGNORE_FILE_NAME)
    if not isinstance(data, list) or not all(isinstance(p, str) for p in data):
        raise ConfigFileError(f"{IGNORE_FILE_NAME} must contain a JSON list of strings")
    return data


def filter_entries(
    entries: Iterable[Entry],
    ignore_content: Optional[str],
    warn: Warn = console_warn,
) -> List[Entry]:
    """Drop every entry whose relative path matches an ignore pattern.

    ``None`` or empty content means there is no ignore document. A malformed
    one is reported through *warn* and excludes nothing.
    """
    patterns: List[str] = []
    if ignore_content:
        try:
            patterns = parse_ignore_document(ignore_content)
        except ConfigFileError as e:
            warn(ConfigFileError(f"{e}. Nothing will be ignored."))

    spec = compile_patterns(patterns)
    return [e for e in entries if not is_ignored(spec, e.relative_path)]


def collect_entries(
    root: Path, warn: Warn = console_warn, verbose: bool = False
) -> List[Entry]:
    """Scan *root* and filter it through its ``IgnoreFiles.sdvextension``."""
    info(f"Scanning {root} …", verbose)
    all_entries = scan_workspace(root)
    kept = filter_entries(all_entries, read_document(root / IGNORE_FILE_NAME, warn), warn)
    info(f"{len(all_entries)} entries found, {len(kept)} kept after filtering.", verbose)
    return kept


# Zip builder
def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def archive_name(workspace_root: Path, mod_version: str) -> str:
    suffix = f"_{mod_version}" if mod_version else ""
    return f"{workspace_root.name}{suffix}{ARCHIVE_EXTENSION}"


def build_archive(
    entries: Iterable[Entry],
    workspace_root: Path,
    output_dir: Path,
    mod_version: str = "",
    verbose: bool = False,
) -> Tuple[Path, int]:
    """Zip *entries* into *output_dir* and return the archive path and size.

    The archive is written to a temporary file next to its destination and
    only renamed onto the final name once it is closed and synced.
    """
    out_path = output_dir / archive_name(workspace_root, mod_version)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveError(f"Could not create directory '{output_dir}': {e}")

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{out_path.name}.", suffix=".part", dir=output_dir
        )
    except OSError as e:
        raise ArchiveError(f"Could not create '{out_path}': {e}")
    tmp_path = Path(tmp_name)
    written = 0

    try:
        with os.fdopen(fd, "wb") as out_fh:
            with zipfile.ZipFile(
                out_fh, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
            ) as archive:
                for entry in entries:
                    source = workspace_root / entry.relative_path
                    try:
                        archive.write(source, arcname=entry.relative_path)
                        written += 1
                    except (OSError, ValueError) as e:
                        raise ArchiveError(
                            f"Could not add '{entry.relative_path}' to '{out_path}': {e}"
                        )
            out_fh.flush()
            os.fsync(out_fh.fileno())
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, out_path)
    except ArchiveError:
        tmp_path.unlink(missing_ok=True)
        raise
    except (OSError, zipfile.BadZipFile) as e:
        tmp_path.unlink(missing_ok=True)
        raise ArchiveError(f"Could not finalize '{out_path}': {e}")

    size = out_path.stat().st_size
    info(f"Wrote {written} entries to {out_path}", verbose)
    return out_path, size


# Mirror copier
def mirror_entries(
    entries: Iterable[Entry],
    workspace_root: Path,
    target_root: Path,
    verbose: bool = False,
) -> int:
    """Replicate *entries* under *target_root*, overwriting existing files."""
    try:
        target_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DeployError(f"Could not create directory '{target_root}': {e}")

    copied = 0
    for entry in entries:
        source = workspace_root / entry.relative_path
        dest = target_root / entry.relative_path
        try:
            if entry.is_directory:
                dest.mkdir(parents=True, exist_ok=True)
            else:
                dest.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(source, dest)
        except OSError as e:
            raise DeployError(f"Failed to deploy '{entry.relative_path}': {e}", entry.relative_path)
        copied += 1

    info(f"Copied {copied} items into {target_root}", verbose)
    return copied


# Pipelines
def pack(
    ctx: InvocationContext,
    warn: Warn = console_warn,
    verbose: bool = False,
    config: Optional[ResolvedConfig] = None,
) -> PackResult:
    """Zip the workspace of *ctx* into its resolved ``ZipPath``."""
    root = ctx.require_root()
    entries = collect_entries(root, warn, verbose)
    if config is None:
        config = load_config(ctx, warn)
    path, size = build_archive(
        entries, root, config.archive_output_dir, config.mod_version, verbose
    )
    return PackResult(archive_path=path, size_bytes=size, entries=tuple(entries))


def deploy(
    ctx: InvocationContext,
    warn: Warn = console_warn,
    verbose: bool = False,
    config: Optional[ResolvedConfig] = None,
) -> DeployResult:
    """Mirror the workspace of *ctx* into ``<ModFolderPath>/<workspace name>``."""
    root = ctx.require_root()
    if config is None:
        config = load_config(ctx, warn)
    entries = collect_entries(root, warn, verbose)
    target = config.install_root_dir / root.name
    info(f"Deploying to {target} …", verbose)
    count = mirror_entries(entries, root, target, verbose)
    return DeployResult(target_dir=target, items_copied=count, config=config)


def pack_and_deploy(
    ctx: InvocationContext, warn: Warn = console_warn, verbose: bool = False
) -> Tuple[PackResult, DeployResult]:
    """Pack, then deploy. A pack failure propagates before deploy starts."""
    config = load_config(ctx, warn)
    packed = pack(ctx, warn, verbose, config)
    deployed = deploy(ctx, warn, verbose, config)
    return packed, deployed
