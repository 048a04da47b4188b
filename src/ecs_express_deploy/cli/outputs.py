"""Output values written back to the host environment."""

import os
import uuid
from pathlib import Path

import click

GITHUB_OUTPUT_ENV = "GITHUB_OUTPUT"


class OutputWriter:
    """Write ``name=value`` outputs to the GitHub Actions output file or stdout."""

    def __init__(self, path: str | None = None) -> None:
        self.path = Path(path) if path else None

    @classmethod
    def from_env(cls) -> "OutputWriter":
        return cls(os.environ.get(GITHUB_OUTPUT_ENV) or None)

    def __call__(self, name: str, value: str) -> None:
        if self.path is None:
            click.echo(f"{name}={value}")
            return
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(_format_output(name, value))


def _format_output(name: str, value: str) -> str:
    if "\n" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
