"""Error boundary handling for CLI commands.

Well-known exceptions are shown as a one-line ``Error: ...`` message on
stderr with exit code 1 instead of a stack trace.
"""

import functools
from collections.abc import Callable
from typing import Any, TypeVar

import click

from parca.errors import ParcaError

T = TypeVar("T", bound=Callable[..., Any])


def cli_error_boundary(func: T) -> T:
    """Decorator that catches well-known exceptions and displays clean error messages.

    Catches:
        - ParcaError: Resolution, integrity, manifest and transport failures
        - FileExistsError: File/directory conflicts
        - FileNotFoundError: Missing configuration or content
        - ValueError: Invalid input or configuration
        - PermissionError: Permission denied errors

    All other exceptions bubble up normally with full stack traces.

    Example:
        @click.command()
        @cli_error_boundary
        def my_command():
            ...
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (ParcaError, FileExistsError, FileNotFoundError, ValueError, PermissionError) as e:
            click.echo(click.style("Error: ", fg="red") + str(e), err=True)
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]
