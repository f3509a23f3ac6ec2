"""
Console reporting helpers shared by the pipeline and the CLI.
"""

from __future__ import annotations

import sys
from typing import Optional

from colorama import Fore, Style, init as colorama_init

colorama_init()

PREFIX = "[sdvpack]"


def _paint(msg: str, colour: Optional[str]) -> str:
    if colour is None:
        return msg
    return colour + msg + Style.RESET_ALL


def info(msg: str, verbose: bool = True) -> None:
    if verbose:
        print(f"{PREFIX} {msg}")


def success(msg: str, verbose: bool = True) -> None:
    if verbose:
        print(_paint(f"{PREFIX} {msg}", Fore.GREEN))


def warn(problem: object) -> None:
    """Report a recoverable problem on stderr and carry on."""
    print(_paint(f"Warning: {problem}", Fore.YELLOW), file=sys.stderr)


def error(problem: object) -> None:
    print(_paint(f"Error: {problem}", Fore.RED), file=sys.stderr)
