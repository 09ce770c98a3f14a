"""
techdocs command-line interface.

Commands:
    build - Build the project's documentation (default when no command is given)
    init  - Create a starter project
    clean - Remove build products
    help  - Show commands and supported formats

Examples:\n

    techdocs                              # Build using techdocs.conf

    techdocs build --format pdf           # Override FORMAT

    techdocs -C docs build --verbose      # Build the project in docs/

    techdocs init my-docs                 # Create a starter project

    techdocs clean --all                  # Remove output, temp files and logs
"""

from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from techdocs.contexts.configuring.config import FORMAT_DESCRIPTIONS, SUPPORTED_FORMATS, load_config
from techdocs.contexts.publishing.publisher import clean_project
from techdocs.exceptions import TechDocsError
from techdocs.pipeline import build
from techdocs.scaffold import init_project
from techdocs.utils.logger import configure_console_logging


def display_path(path: Path, project_dir: Path) -> str:
    """Return path relative to the project for cleaner display."""
    try:
        return str(path.resolve().relative_to(project_dir.resolve()))
    except ValueError:
        return str(path)


def _fail(error: Exception) -> None:
    typer.secho(f"Error: {error}\n", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


app = typer.Typer(
    help="Build documentation from Markdown sources with pandoc and xelatex",
    add_completion=False,
    invoke_without_command=True,
)


def _run_build(
    project_dir: Path,
    output_format: Optional[str] = None,
    output_dir: Optional[Path] = None,
    keep_temp: bool = False,
    verbose: bool = False,
) -> None:
    overrides = {}
    if output_format:
        overrides["FORMAT"] = output_format
    if output_dir:
        overrides["OUTPUT_DIR"] = str(output_dir.resolve())
    if keep_temp:
        overrides["KEEP_TEMP_FILES"] = True

    configure_console_logging(verbose)

    try:
        result = build(project_dir, overrides=overrides, verbose=verbose)
    except TechDocsError as e:
        _fail(e)

    typer.echo("")
    typer.secho(f"✓ Built {result.format} output", fg=typer.colors.GREEN, bold=True)
    for artifact in result.artifacts:
        typer.echo(f"  {display_path(artifact, project_dir)}")
    if result.log_file:
        typer.echo(f"  Log: {display_path(result.log_file, project_dir)}")
    typer.echo("")


@app.callback()
def main(
    ctx: typer.Context,
    project_dir: Annotated[
        Path,
        typer.Option(
            "--project-dir",
            "-C",
            help="Project directory holding techdocs.conf",
            file_okay=False,
        ),
    ] = Path("."),
):
    """Build the project when no command is provided."""
    ctx.obj = {"project_dir": project_dir}
    if ctx.invoked_subcommand is None:
        _run_build(project_dir)


@app.command("build")
def build_command(
    ctx: typer.Context,
    output_format: Annotated[
        Optional[str],
        typer.Option(
            "--format",
            "-f",
            help=f"Override FORMAT ({', '.join(SUPPORTED_FORMATS)})",
        ),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            "-o",
            help="Override OUTPUT_DIR",
            file_okay=False,
        ),
    ] = None,
    keep_temp: Annotated[
        bool,
        typer.Option(
            "--keep-temp",
            "-k",
            help="Keep rendered templates and intermediate files",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show debug messages and full tool output",
        ),
    ] = False,
):
    """
    Build the documentation.

    Examples:\n

        $ techdocs build                     # Build using techdocs.conf

        $ techdocs build -f htmlsinglepage   # One self-contained HTML file

        $ techdocs build -f pdf -k           # Keep the generated .tex for debugging
    """
    _run_build(
        ctx.obj["project_dir"],
        output_format=output_format,
        output_dir=output_dir,
        keep_temp=keep_temp,
        verbose=verbose,
    )


@app.command("init")
def init_command(
    ctx: typer.Context,
    directory: Annotated[
        Optional[Path],
        typer.Argument(help="Directory for the new project (default: project directory)"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing files"),
    ] = False,
):
    """
    Create a starter project: techdocs.conf, master.md and two chapters.

    Examples:\n

        $ techdocs init                      # In the current directory

        $ techdocs init my-docs              # In a new directory
    """
    target = directory or ctx.obj["project_dir"]
    configure_console_logging()

    try:
        written = init_project(target, force=force)
    except TechDocsError as e:
        _fail(e)

    typer.secho(f"\n✓ Created project in {target}", fg=typer.colors.GREEN, bold=True)
    for path in written:
        typer.echo(f"  {display_path(path, target)}")
    typer.echo("\nEdit techdocs.conf, then run 'techdocs build'.\n")


@app.command("clean")
def clean_command(
    ctx: typer.Context,
    remove_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Also remove build logs"),
    ] = False,
):
    """
    Remove the output directory, temporary files and rendered templates.
    """
    project_dir = ctx.obj["project_dir"]
    configure_console_logging()

    try:
        config = load_config(project_dir)
        removed = clean_project(config, remove_logs=remove_all)
    except TechDocsError as e:
        _fail(e)

    if removed:
        typer.secho(f"\n✓ Removed {len(removed)} path(s)", fg=typer.colors.GREEN, bold=True)
        for path in removed:
            typer.echo(f"  {display_path(path, config.project_dir)}")
        typer.echo("")
    else:
        typer.echo("Nothing to clean.")


@app.command("help")
def help_command(ctx: typer.Context):
    """
    Show commands and supported output formats.
    """
    typer.echo(ctx.parent.get_help())
    typer.echo("\nSupported formats (FORMAT in techdocs.conf):")
    for name, description in FORMAT_DESCRIPTIONS.items():
        typer.echo(f"  {name:<16} {description}")


if __name__ == "__main__":
    app()
