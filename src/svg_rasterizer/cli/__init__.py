from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from ..config import AppConfig, load_config
from ..core import ConversionService
from ..errors import ConversionError
from ..models import ConversionJob, ConversionResult, InputMode, Phase, ProgressState, SizeMode

console = Console()

app = typer.Typer(help="Batch SVG to PNG rasterizer")


def _load_config(path: Path | None) -> AppConfig:
    return load_config(path)


def _fail(exc: ConversionError) -> typer.Exit:
    console.print(f"[red]Error[/red]: {exc.code.value} - {exc}", soft_wrap=True)
    return typer.Exit(1)


@app.command()
def inspect(
    file: Path,
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Print the intrinsic size of one SVG document."""
    service = ConversionService(_load_config(config))
    try:
        size = service.inspect(file)
    except ConversionError as exc:
        raise _fail(exc) from exc
    console.print(f"{file}: {size}", soft_wrap=True)


@app.command()
def scan(
    folder: Path,
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Summarise the sizes of the SVG documents in a folder."""
    service = ConversionService(_load_config(config))
    try:
        summary = service.scan_folder(folder)
    except ConversionError as exc:
        raise _fail(exc) from exc
    console.print(f"Documents: {summary.total}")
    if summary.all_same:
        base = summary.base_size or "-"
        console.print(f"All the same size: {base}")
        return
    table = Table(title="Distinct sizes")
    table.add_column("Size")
    for size in summary.unique_sizes:
        table.add_row(str(size))
    console.print(table)


@app.command()
def count(
    folder: Path,
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    service = ConversionService(_load_config(config))
    try:
        total = service.count_documents(folder)
    except ConversionError as exc:
        raise _fail(exc) from exc
    console.print(str(total))


@app.command()
def convert(
    path: list[Path],
    out_dir: Path | None = typer.Option(
        None, "--out-dir", help="Output directory (defaults to beside each source)"
    ),
    scale: float = typer.Option(1.0, "--scale", help="Scale factor for scale mode"),
    width: int | None = typer.Option(None, "--width", help="Exact output width"),
    height: int | None = typer.Option(None, "--height", help="Exact output height"),
    crop: bool = typer.Option(False, "--crop", help="Cover and center-crop when the aspect differs"),
    background: str | None = typer.Option(None, "--background", help="Flatten onto #RRGGBB"),
    workers: int | None = typer.Option(None, "--workers", min=1, help="Parallel workers"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Convert files, or every document in one folder, to PNG."""
    if (width is None) != (height is None):
        raise typer.BadParameter("--width and --height must be given together.")
    cfg = _load_config(config)
    service = ConversionService(cfg)
    input_mode = InputMode.FOLDER if len(path) == 1 and path[0].is_dir() else InputMode.FILE
    exact = width is not None and height is not None
    job = ConversionJob.create(
        input_mode,
        path,
        output_dir=out_dir,
        size_mode=SizeMode.EXACT if exact else SizeMode.SCALE,
        scale_factor=scale,
        width=width,
        height=height,
        crop=crop,
        background=background,
    )

    with Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task_id = progress.add_task("Scanning", total=None)

        def _on_progress(state: ProgressState) -> None:
            description = "Converting" if state.phase is Phase.CONVERTING else state.phase.value.title()
            progress.update(task_id, description=description, total=state.total, completed=state.current)

        def _on_item(result: ConversionResult) -> None:
            if result.ok:
                progress.console.print(
                    f"[green]ok[/green] {result.source_path} -> {result.destination_path} "
                    f"({result.out_width}x{result.out_height})",
                    soft_wrap=True,
                )
                return
            kind = result.error_kind.value if result.error_kind else "-"
            progress.console.print(
                f"[red]failed[/red] {result.source_path}: {kind} - {result.error_message}",
                soft_wrap=True,
            )

        try:
            summary = service.start_conversion(
                job,
                on_progress=_on_progress,
                on_item=_on_item,
                workers=workers,
            )
        except ConversionError as exc:
            raise _fail(exc) from exc

    console.print(
        f"Run {summary.run_id}: {summary.total} documents, "
        f"{summary.ok} converted, {summary.failed} failed, {summary.skipped} skipped.",
        soft_wrap=True,
    )
    if summary.failed:
        raise typer.Exit(2)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    """Run the local HTTP API."""
    import uvicorn

    from ..api import create_app

    cfg = _load_config(config)
    cfg.runtime.enable_local_api = True
    api = create_app(cfg)
    uvicorn.run(api, host=host or cfg.api.host, port=port or cfg.api.port)


if __name__ == "__main__":
    app()
