"""
CLI utility helpers — consoles, target resolution, and error reporting.
"""

from __future__ import annotations

import importlib
from typing import Any, NoReturn

import typer
from rich.console import Console

from cadence.core.errors import CadenceError, ConfigError

console = Console()
err_console = Console(stderr=True)


def resolve_target(target: str) -> Any:
    """Import ``package.module:attr`` and return the attribute.

    The attribute may be a dotted path inside the module (``mod:Outer.Inner``).
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise ConfigError(f"expected module:attr, got {target!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"cannot import module {module_name!r}", cause=e) from e
    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigError(f"{module_name!r} has no attribute {attr_path!r}", cause=e) from e
    return obj


def fail(error: CadenceError | str) -> NoReturn:
    """Print an error and exit with status 1."""
    if isinstance(error, CadenceError):
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {error}")
    raise typer.Exit(code=1)
