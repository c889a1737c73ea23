"""Command-line interface for MoodTagger.

Provides commands for:
- analyze: Rate the mood of one audio file and tag it
- batch: Analyze every audio file in a directory
- read: Show mood tags stored in a file
- restore: Restore a file from its backup
- config: Create or show the configuration file
- features: Show the extracted audio features of a file
"""

import logging
import signal
import threading
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn, TimeRemainingColumn
from rich.table import Table

from .config import AppConfig, default_config_path
from .core.errors import ConfigError, MoodTaggerError

app = typer.Typer(
    name="moodtagger",
    help="Rate the mood of music files with a language model and store it as tags",
    rich_markup_mode="markdown",
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_path: Optional[Path]) -> AppConfig:
    """Load an explicit config strictly, or the default one (created if missing)."""
    if config_path is not None:
        return AppConfig.load(config_path)
    return AppConfig.create_default_if_missing(default_config_path())


def _fail(error: Exception, verbose: bool) -> None:
    err_console.print(f"[red]Error: {error}[/red]")
    if verbose:
        err_console.print_exception()
    raise typer.Exit(1)


ConfigOption = typer.Option(None, "-c", "--config", help="Path to the configuration file")
VerboseOption = typer.Option(False, "-v", "--verbose", help="Verbose output")
TestOption = typer.Option(False, "-t", "--test", help="Test mode (don't write tags)")
NoBackupOption = typer.Option(False, "-n", "--no-backup", help="Don't create backups")


@app.command()
def analyze(
    file: Path = typer.Argument(..., help="Audio file to analyze"),
    config_path: Optional[Path] = ConfigOption,
    test: bool = TestOption,
    no_backup: bool = NoBackupOption,
    verbose: bool = VerboseOption,
    reanalyze: bool = typer.Option(False, "--reanalyze", help="Analyze even if already tagged"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
):
    """Analyze a single audio file.

    **Examples:**

        moodtagger analyze track.mp3

        moodtagger analyze track.mp3 --test --json
    """
    from .analyzer import MoodAnalyzer

    _setup_logging(verbose)
    try:
        config = _load_config(config_path).with_overrides(
            verbose_output=verbose,
            write_tags=not test,
            create_backups=not no_backup,
            reanalyze=reanalyze,
        )
        if not json_output:
            console.print(f"[blue]Analyzing file:[/blue] {file}")
        with MoodAnalyzer(config) as analyzer:
            analysis = analyzer.analyze_file(str(file))
    except MoodTaggerError as e:
        _fail(e, verbose)

    if json_output:
        console.print_json(data=analysis.to_dict())
    else:
        console.print()
        console.print(analysis.summary())


@app.command()
def batch(
    directory: Path = typer.Argument(..., help="Directory of audio files"),
    recursive: bool = typer.Option(False, "-r", "--recursive", help="Process subdirectories"),
    config_path: Optional[Path] = ConfigOption,
    test: bool = TestOption,
    no_backup: bool = NoBackupOption,
    verbose: bool = VerboseOption,
    workers: Optional[int] = typer.Option(
        None, "-w", "--workers", min=1, help="Files analyzed concurrently (default: from config)"
    ),
):
    """Process a directory of audio files. Ctrl+C stops after the files in flight."""
    from .analyzer import MoodAnalyzer

    _setup_logging(verbose)
    try:
        overrides = dict(
            verbose_output=verbose,
            write_tags=not test,
            create_backups=not no_backup,
            recursive=recursive,
        )
        if workers is not None:
            overrides["max_workers"] = workers
        config = _load_config(config_path).with_overrides(**overrides)
    except ConfigError as e:
        _fail(e, verbose)

    console.print(f"[blue]Processing directory:[/blue] {directory}")
    console.print(f"  Recursive: {config.recursive}")
    console.print(f"  Test mode: {not config.write_tags}")
    console.print(f"  Workers: {config.max_workers}\n")

    cancel = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        def _request_cancel(signum, frame):
            console.print("[yellow]Cancelling...[/yellow]")
            cancel.set()

        previous_handler = signal.signal(signal.SIGINT, _request_cancel)

    try:
        with MoodAnalyzer(config) as analyzer:
            files = analyzer.find_audio_files(str(directory))
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("{task.completed}/{task.total}"),
                TimeElapsedColumn(),
                TimeRemainingColumn(),
                console=console,
            ) as bar:
                task = bar.add_task("Analyzing", total=len(files))

                def _report(progress):
                    bar.update(
                        task,
                        completed=progress.processed,
                        description=f"Analyzing (failed: {progress.failed})",
                    )

                result = analyzer.batch_process(files, progress=_report, cancel=cancel)
    except MoodTaggerError as e:
        _fail(e, verbose)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    console.print(f"\n[green]Completed: {result.succeeded} files processed[/green]")
    if result.degraded:
        console.print(f"  [yellow]{len(result.degraded)} analyzed with default features[/yellow]")
    if result.cancelled:
        console.print(f"  [yellow]Cancelled, {len(result.skipped)} files skipped[/yellow]")
    if result.failures:
        table = Table(title="Failed Files")
        table.add_column("File", style="cyan")
        table.add_column("Error", style="red")
        for path, message in result.failures.items():
            table.add_row(Path(path).name, message)
        console.print(table)
        raise typer.Exit(1)


@app.command()
def read(
    file: Path = typer.Argument(..., help="Audio file to read"),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Read mood tags from an audio file."""
    from .tags import TagStore

    _setup_logging(verbose)
    try:
        config = _load_config(config_path)
        analysis = TagStore(config).read(str(file))
    except MoodTaggerError as e:
        _fail(e, verbose)

    if analysis is None or not analysis.model_used:
        console.print("No mood tags found in file.")
        raise typer.Exit(1)
    console.print(analysis.summary())


@app.command()
def restore(
    file: Path = typer.Argument(..., help="Audio file to restore"),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Restore an audio file from its backup."""
    from .tags import TagStore

    _setup_logging(verbose)
    console.print(f"Restoring backup for: {file}")
    try:
        restored = TagStore(_load_config(config_path)).restore_backup(str(file))
    except MoodTaggerError as e:
        _fail(e, verbose)

    if not restored:
        console.print(f"[yellow]No backup found for {file}[/yellow]")
        raise typer.Exit(1)
    console.print("[green]Backup restored successfully.[/green]")


@app.command("config")
def config_command(
    create: bool = typer.Option(False, "--create", help="Create default configuration"),
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Manage the configuration file."""
    path = config_path or default_config_path()

    if create:
        AppConfig().save(path)
        console.print(f"Created default configuration at: {path}")
    elif show:
        try:
            config = AppConfig.load(path)
        except ConfigError as e:
            _fail(e, verbose)
        console.print_json(data=config.to_dict())
    else:
        console.print("Please specify --create or --show")
        raise typer.Exit(1)


@app.command()
def features(
    file: Path = typer.Argument(..., help="Audio file to inspect"),
    config_path: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
    json_output: bool = typer.Option(False, "--json", help="Output the full feature vector as JSON"),
):
    """Show the audio features extracted from a file, without mood inference."""
    from .input import read_metadata
    from .pipeline import FeaturePipeline

    _setup_logging(verbose)
    try:
        config = _load_config(config_path)
        metadata = read_metadata(str(file))
        result = FeaturePipeline(config).extract(str(file), metadata)
    except MoodTaggerError as e:
        _fail(e, verbose)

    if json_output:
        data = result.vector.to_dict()
        data["status"] = result.status.value
        data["tempo_source"] = result.tempo_source
        data["warnings"] = list(result.warnings)
        if result.reason:
            data["reason"] = result.reason
        console.print_json(data=data)
        return

    if result.is_degraded:
        console.print(f"[yellow]Using default features: {result.reason}[/yellow]")
    for message in result.warnings:
        console.print(f"[yellow]{message}[/yellow]")

    table = Table(title=f"Audio Features: {file.name}")
    table.add_column("Feature", style="cyan")
    table.add_column("Value", style="green")
    for name, value in result.vector.scalars().items():
        table.add_row(name, f"{value:.4f}")
    table.add_row("tempo source", result.tempo_source)
    for key, value in result.vector.metadata.items():
        table.add_row(key.lower(), value)
    console.print(table)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
