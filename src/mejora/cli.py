# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command line entry point for mejora."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from . import logging as log
from .baseline import BaselineStore
from .checks.custom import load_plugin_runner
from .checks.registry import CheckRegistry
from .config import load_config
from .console import detect_tty
from .environment import detect_ci
from .errors import MejoraError
from .reporting import format_json_output, format_text_output
from .runner import EXIT_ERROR, RunOptions, Runner

FORCE_OPTION = Annotated[
    bool,
    typer.Option("--force", "-f", help="Accept the current state even when regressions are found."),
]
JSON_OPTION = Annotated[
    bool,
    typer.Option("--json", help="Emit machine-readable JSON instead of text."),
]
ONLY_OPTION = Annotated[
    str | None,
    typer.Option("--only", metavar="REGEX", help="Run only checks whose identifier matches."),
]
SKIP_OPTION = Annotated[
    str | None,
    typer.Option("--skip", metavar="REGEX", help="Skip checks whose identifier matches."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Configuration file (mejora.toml or pyproject.toml)."),
]
ROOT_OPTION = Annotated[
    Path | None,
    typer.Option("--root", "-r", help="Project root. Defaults to the current directory."),
]

app = typer.Typer(
    name="mejora",
    help="Track lint and type-check findings against an accepted baseline.",
    add_completion=False,
    no_args_is_help=False,
)


@app.command()
def run(
    force: FORCE_OPTION = False,
    json_output: JSON_OPTION = False,
    only: ONLY_OPTION = None,
    skip: SKIP_OPTION = None,
    config: CONFIG_OPTION = None,
    root: ROOT_OPTION = None,
) -> None:
    """Run the configured checks and fail when new issues appear."""

    project_root = (root or Path.cwd()).resolve()
    try:
        settings = load_config(project_root, config)
        registry = CheckRegistry.with_builtins(load_plugin_runner(reference) for reference in settings.runners)
        store = BaselineStore(settings.baseline, in_ci=detect_ci(), root=project_root)
        result = Runner(registry, store, root=project_root, jobs=settings.jobs).run(
            settings,
            RunOptions(force=force, only=only, skip=skip),
        )
    except (MejoraError, OSError) as exc:
        log.fail(str(exc))
        raise typer.Exit(code=EXIT_ERROR) from exc

    if json_output:
        typer.echo(format_json_output(result))
    else:
        typer.echo(format_text_output(result, use_color=detect_tty()))
    raise typer.Exit(code=result.exit_code)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
