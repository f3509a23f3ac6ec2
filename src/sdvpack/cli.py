"""
CLI entrypoint for sdvpack package.
"""
import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import InvocationContext, ResolvedConfig, build_launch_command, load_config
from .console import error, info, success, warn
from .core import collect_entries, deploy, pack, pack_and_deploy
from .errors import (
    ArchiveError,
    DeployError,
    LaunchError,
    MissingWorkspaceError,
    ScanError,
)


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sdvpack",
        description="Zip a Stardew Valley mod workspace and/or deploy it to the Mods folder.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--root", type=Path, default=Path("."), help="Mod workspace dir")
    p.add_argument(
        "--game-path",
        default=os.environ.get("STARDEW_VALLEY_PATH", ""),
        help="Stardew Valley install dir (default: $STARDEW_VALLEY_PATH)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    sub = p.add_subparsers(dest="command", required=True)
    sub.add_parser("pack", help="Zip the workspace into ZipPath")
    for name, text in (
        ("deploy", "Copy the workspace into ModFolderPath"),
        ("pack-deploy", "Pack, then deploy"),
    ):
        sp = sub.add_parser(name, help=text)
        sp.add_argument(
            "--launch",
            action="store_true",
            help="Print the SMAPI launch command after deploying",
        )
    sub.add_parser("files", help="List the entries that would be packed")
    sub.add_parser("launch", help="Print the SMAPI launch command")
    return p.parse_args(argv)


def _print_launch(ctx: InvocationContext, config: Optional[ResolvedConfig] = None) -> None:
    if config is None:
        config = load_config(ctx)
    command = build_launch_command(config, ctx, check=True)
    print(f"cd \"{command.working_dir}\"")
    print(command.shell_text)


def main(argv=None) -> None:
    try:
        ns = _parse_args(argv)
        ctx = InvocationContext(
            workspace_root=ns.root,
            game_path=ns.game_path,
        )

        deployed = None
        try:
            if ns.command == "pack":
                result = pack(ctx, verbose=ns.verbose)
                success(f"ZIP created: {result.archive_path} ({result.size_bytes} total bytes)")
            elif ns.command == "deploy":
                deployed = deploy(ctx, verbose=ns.verbose)
                success(f"Deployed {deployed.items_copied} items to {deployed.target_dir}")
            elif ns.command == "pack-deploy":
                packed, deployed = pack_and_deploy(ctx, verbose=ns.verbose)
                success(f"ZIP created: {packed.archive_path} ({packed.size_bytes} total bytes)")
                success(f"Deployed {deployed.items_copied} items to {deployed.target_dir}")
            elif ns.command == "files":
                for entry in collect_entries(ctx.require_root(), verbose=ns.verbose):
                    print(entry.relative_path)
            elif ns.command == "launch":
                _print_launch(ctx)
        except (MissingWorkspaceError, ScanError, ArchiveError, DeployError, LaunchError) as e:
            error(e)
            sys.exit(1)

        if getattr(ns, "launch", False):
            info("Launch SMAPI with:", ns.verbose)
            try:
                _print_launch(ctx, deployed.config if deployed else None)
            except LaunchError as e:
                # deploy already succeeded
                warn(e)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
