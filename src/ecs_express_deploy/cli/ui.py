"""Shared Rich console for the CLI."""

from rich.console import Console

console = Console(stderr=True)
