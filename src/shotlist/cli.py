"""CLI entry point for the shotlist tools.

Provides commands:
  - extract: Generate a shotlist (people + search terms) from a script
  - run: Full workflow -- extract, search Getty, curate, export CSV and ZIP
  - config: Manage API credentials in the system keyring
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import keyring
import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from shotlist.config import CREDENTIALS, SERVICE_NAME, load_pipeline_config
from shotlist.constants import COLLECTION_CODES, DEFAULT_CSV_FILENAME, DEFAULT_ZIP_FILENAME
from shotlist.exceptions import ShotlistError
from shotlist.export.csv_export import count_rows
from shotlist.models import FilterConfig, MediaKind

if TYPE_CHECKING:
    from shotlist.config import PipelineConfig
    from shotlist.workflow.controller import WorkflowController

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Shotlist - turn a script into curated Getty Images editorial media",
    rich_markup_mode="rich",
)
console = Console()

config_app = typer.Typer(help="Manage API credentials (Gemini, Getty)")
app.add_typer(config_app, name="config")

SELECT_MODES = ("interactive", "all", "videos", "photos", "none")


@app.callback()
def app_callback(
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Write debug logs to ~/.shotlist/debug.log"),
    ] = False,
) -> None:
    """Configure logging for all commands."""
    if debug:
        debug_dir = Path.home() / ".shotlist"
        debug_dir.mkdir(exist_ok=True)
        fh = logging.FileHandler(debug_dir / "debug.log")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        pkg_logger = logging.getLogger("shotlist")
        pkg_logger.setLevel(logging.DEBUG)
        pkg_logger.addHandler(fh)


def _read_script(script_file: Path) -> str:
    if not script_file.exists():
        console.print(f"[red]Error:[/red] Script not found: {script_file}")
        raise typer.Exit(code=1)
    return script_file.read_text(encoding="utf-8")


def _load_credentials():
    from shotlist.config import load_credentials

    try:
        return load_credentials()
    except RuntimeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


def build_filter(
    config: PipelineConfig,
    collections: list[str] | None,
    no_collections: bool,
    pmcarc: bool | None,
) -> FilterConfig:
    """Merge CLI filter options over the configured defaults."""
    filter_config = config.default_filter()
    if no_collections:
        filter_config.set_all_collections(False)
    elif collections:
        unknown = [name for name in collections if name not in COLLECTION_CODES]
        if unknown:
            raise typer.BadParameter(
                f"Unknown collection(s): {', '.join(unknown)}. "
                f"Choose from: {', '.join(COLLECTION_CODES)}"
            )
        filter_config = FilterConfig.only(*collections, use_pmcarc=filter_config.use_pmcarc)
    if pmcarc is not None:
        filter_config.use_pmcarc = pmcarc
    return filter_config


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def _shotlist_table(people) -> Table:
    table = Table(title="Shotlist", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Search Term")
    for i, person in enumerate(people, start=1):
        table.add_row(str(i), person.name, person.search_term)
    return table


def _results_table(controller: WorkflowController, person_index: int) -> Table:
    result = controller.results[person_index]
    table = Table(title=f"{person_index + 1}. {result.person.name}")
    table.add_column("", width=3)
    table.add_column("Kind")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Getty ID", style="cyan")
    table.add_column("Title", overflow="fold")
    table.add_column("Created", style="dim")
    for kind in (MediaKind.VIDEO, MediaKind.PHOTO):
        for n, media in enumerate(result.items_of(kind), start=1):
            mark = "[green]x[/green]" if controller.is_selected(person_index, media.id) else ""
            table.add_row(mark, kind.value, str(n), media.id, media.title, media.date_created[:10])
        if not result.items_of(kind):
            table.add_row("", kind.value, "", "", f"[dim]No {kind.plural} found[/dim]", "")
    return table


def _print_results(controller: WorkflowController) -> None:
    for index in range(len(controller.results)):
        console.print(_results_table(controller, index))
    ledger = controller.ledger
    console.print(
        f"[bold]Selected:[/bold] {ledger.count(MediaKind.VIDEO)} videos, "
        f"{ledger.count(MediaKind.PHOTO)} photos"
    )


def _curate(controller: WorkflowController, mode: str) -> None:
    """Apply the --select mode, prompting when interactive."""
    from shotlist.workflow.commands import HELP_TEXT, apply_command

    if mode in ("all", "videos"):
        controller.select_all_global(MediaKind.VIDEO)
    if mode in ("all", "photos"):
        controller.select_all_global(MediaKind.PHOTO)
    if mode != "interactive":
        return

    _print_results(controller)
    console.print(f"[dim]{HELP_TEXT}[/dim]")
    while True:
        command = Prompt.ask("[bold cyan]select[/bold cyan]").strip()
        if command in ("done", "q", ""):
            break
        if command == "l":
            _print_results(controller)
            continue
        try:
            console.print(apply_command(controller, command))
        except ValueError as e:
            console.print(f"[yellow]{e}[/yellow]")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def extract(
    script_file: Annotated[
        Path,
        typer.Argument(help="Path to the script text file", dir_okay=False),
    ],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the shotlist as JSON"),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Path to shotlist_config.json"),
    ] = None,
) -> None:
    """Generate a shotlist (people mentioned + Getty search terms) from a script."""
    from google import genai

    from shotlist.config import get_credential
    from shotlist.extraction.extractor import ShotlistExtractor

    script = _read_script(script_file)
    config = load_pipeline_config(config_path)
    try:
        api_key = get_credential("gemini")
    except RuntimeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    extractor = ShotlistExtractor(genai.Client(api_key=api_key), model=config.gemini_model)

    try:
        with console.status("Generating shotlist..."):
            people = asyncio.run(extractor.extract(script))
    except ShotlistError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    if as_json:
        payload = [{"name": p.name, "searchTerm": p.search_term} for p in people]
        console.print_json(json.dumps(payload))
    else:
        console.print(_shotlist_table(people))


@app.command()
def run(
    script_file: Annotated[
        Path,
        typer.Argument(help="Path to the script text file", dir_okay=False),
    ],
    csv_path: Annotated[
        Path,
        typer.Option("--csv", help="Where to write the metadata CSV"),
    ] = Path(DEFAULT_CSV_FILENAME),
    zip_path: Annotated[
        Path,
        typer.Option("--zip", help="Where to write the media ZIP"),
    ] = Path(DEFAULT_ZIP_FILENAME),
    no_zip: Annotated[
        bool,
        typer.Option("--no-zip", help="Skip downloading media"),
    ] = False,
    collections: Annotated[
        list[str] | None,
        typer.Option(
            "--collection",
            "-c",
            help=f"Restrict to collection (repeatable): {', '.join(COLLECTION_CODES)}",
        ),
    ] = None,
    no_collections: Annotated[
        bool,
        typer.Option("--no-collections", help="Search all collections (unrestricted)"),
    ] = False,
    pmcarc: Annotated[
        bool | None,
        typer.Option("--pmcarc/--no-pmcarc", help="Append the PMCARC marker to phrases"),
    ] = None,
    select: Annotated[
        str,
        typer.Option("--select", "-s", help=f"Selection mode: {', '.join(SELECT_MODES)}"),
    ] = "interactive",
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Path to shotlist_config.json"),
    ] = None,
) -> None:
    """Run the full workflow: shotlist, Getty search, curation, CSV + ZIP export."""
    if select not in SELECT_MODES:
        console.print(f"[red]--select must be one of: {', '.join(SELECT_MODES)}[/red]")
        raise typer.Exit(code=1)

    script = _read_script(script_file)
    config = load_pipeline_config(config_path)
    filter_config = build_filter(config, collections, no_collections, pmcarc)
    credentials = _load_credentials()

    console.print(
        Panel(
            f"Script: {script_file}\n"
            f"Collections: [cyan]{filter_config.collection_codes or 'all (unrestricted)'}[/cyan]\n"
            f"PMCARC phrase: {'on' if filter_config.use_pmcarc else 'off'}\n"
            f"Selection: {select}",
            title="Shotlist Run",
            border_style="cyan",
        )
    )

    try:
        asyncio.run(
            _run_workflow(
                script, config, credentials, filter_config, select,
                csv_path, None if no_zip else zip_path,
            )
        )
    except ShotlistError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


async def _run_workflow(
    script: str,
    config: PipelineConfig,
    credentials,
    filter_config: FilterConfig,
    select: str,
    csv_path: Path,
    zip_path: Path | None,
) -> None:
    import httpx
    from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

    from shotlist.workflow.controller import WorkflowController

    timeout = httpx.Timeout(config.http_timeout, read=config.download_timeout)
    async with httpx.AsyncClient(timeout=timeout) as http:
        controller = WorkflowController.from_config(http, credentials, config)
        controller.filter_config = filter_config

        await controller.authenticate()
        controller.submit_script(script)

        with console.status("Generating shotlist..."):
            people = await controller.generate_shotlist()
        console.print(_shotlist_table(people))

        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
        )
        with progress:
            task = progress.add_task("[green]Searching Getty", total=len(people))
            await controller.search_provider(
                on_progress=lambda done, total, person: progress.update(
                    task, completed=done, description=f"[green]Searched {person.name}"
                )
            )

        _curate(controller, select)

        if not controller.ledger:
            console.print("[yellow]No items selected. Nothing to export.[/yellow]")
            return

        csv_text = controller.compile_export()
        csv_path.write_text(csv_text, encoding="utf-8")
        rows = count_rows(csv_text)
        console.print(f"[green]Exported {rows} row(s) to:[/green] {csv_path}")

        if zip_path is None:
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
        ) as dl_progress:
            dl_task = dl_progress.add_task(
                "[green]Downloading",
                total=len({item.archive_path for item in controller.ledger}),
            )
            bundle = await controller.build_bundle(
                on_item=lambda item, ok: dl_progress.advance(dl_task)
            )
        zip_path.write_bytes(bundle.archive)
        console.print(
            f"[green]Wrote {len(bundle.packaged)} file(s) to:[/green] {zip_path}"
        )
        for failure in bundle.failed:
            console.print(f"[yellow]Skipped:[/yellow] {failure}")


# ---------------------------------------------------------------------------
# Config commands
# ---------------------------------------------------------------------------


def _credential_key(name: str) -> str:
    if name not in CREDENTIALS:
        console.print(
            f"[red]Error:[/red] Unknown credential '{name}'. "
            f"Choose from: {', '.join(CREDENTIALS)}"
        )
        raise typer.Exit(code=1)
    return CREDENTIALS[name][0]


@config_app.command("set-key")
def set_key(
    name: Annotated[str, typer.Argument(help=f"One of: {', '.join(CREDENTIALS)}")],
    value: Annotated[str, typer.Argument(help="Secret value to store")],
) -> None:
    """Store a credential in the system keyring (service: shotlist)."""
    key_name = _credential_key(name)
    if not value or value.strip() == "":
        console.print("[red]Error:[/red] Value cannot be empty")
        raise typer.Exit(code=1)

    try:
        keyring.set_password(SERVICE_NAME, key_name, value)
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to store {name}: {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] {name} stored in system keyring (service: {SERVICE_NAME})")


@config_app.command("get-key")
def get_key(
    name: Annotated[str, typer.Argument(help=f"One of: {', '.join(CREDENTIALS)}")],
) -> None:
    """Display a stored credential (masked)."""
    key_name = _credential_key(name)
    value = keyring.get_password(SERVICE_NAME, key_name)
    if not value:
        console.print(
            f"[yellow]No {name} found in keyring.[/yellow]\n"
            f"Set it with: [bold]shotlist config set-key {name} VALUE[/bold]"
        )
        raise typer.Exit(code=1)

    if len(value) > 8:
        masked = value[:8] + "*" * (len(value) - 8)
    else:
        masked = value[:2] + "*" * max(1, len(value) - 2)
    console.print(f"[green]{name}:[/green] {masked}")


@config_app.command("remove-key")
def remove_key(
    name: Annotated[str, typer.Argument(help=f"One of: {', '.join(CREDENTIALS)}")],
) -> None:
    """Delete a stored credential from the system keyring."""
    key_name = _credential_key(name)
    if not keyring.get_password(SERVICE_NAME, key_name):
        console.print(f"[yellow]Warning:[/yellow] No {name} found in keyring. Nothing to remove.")
        return
    try:
        keyring.delete_password(SERVICE_NAME, key_name)
    except Exception as e:
        console.print(f"[red]Error:[/red] Failed to remove {name}: {e}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] {name} removed from system keyring")
