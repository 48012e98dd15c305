import logging
from pathlib import Path

import typer
from typer import Typer, Option, Argument
from typing import Annotated
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from .bot import run_bot
from .config import load_settings
from .converter import DEFAULT_ENGINE, build_converter
from .errors import PrescriptionBotError
from .models import Prescription
from .renderer import RecordRenderer
from .validity import calculate_validity
from . import workflow as workflow_module

app = Typer(help="Telegram bot that turns prescription JSON into PDF documents.")
console = Console()


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )
    # httpx logs each polling request URL at INFO, and the URL contains the bot token
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.command()
def run(
    env_file: Annotated[
        Path | None,
        Option("--env-file", "-e", help="Path to a .env file with the bot configuration."),
    ] = None,
    engine: Annotated[
        str | None,
        Option("--engine", help="PDF engine: weasyprint or wkhtmltopdf."),
    ] = None,
    debug: Annotated[
        bool | None,
        Option("--debug/--no-debug", help="Enable verbose logging."),
    ] = None,
) -> None:
    """Start the bot and process incoming messages until interrupted."""
    try:
        settings = load_settings(env_file, engine=engine, debug=debug)
        configure_logging(settings.debug)
        workflow_module.configure(
            renderer=RecordRenderer(),
            converter=build_converter(
                settings.engine,
                wkhtmltopdf_binary=settings.wkhtmltopdf_binary,
                timeout=settings.conversion_timeout,
            ),
        )
    except PrescriptionBotError as e:
        console.print(f"[bold red]Startup failed:[/] {escape(str(e))}")
        raise typer.Exit(code=1)

    wf = workflow_module.PrescriptionWorkflow(timeout=settings.processing_timeout)
    run_bot(settings, wf)


@app.command()
def render(
    payload: Annotated[
        Path,
        Argument(help="JSON file with the prescription payload.", exists=True, dir_okay=False),
    ],
    output: Annotated[
        Path | None,
        Option("--output", "-o", help="Where to write the result."),
    ] = None,
    html: Annotated[
        bool,
        Option("--html", help="Write the rendered HTML instead of a PDF."),
    ] = False,
    engine: Annotated[
        str,
        Option("--engine", help="PDF engine: weasyprint or wkhtmltopdf."),
    ] = DEFAULT_ENGINE,
) -> None:
    """Render a prescription payload file without going through Telegram."""
    text = payload.read_text(encoding="utf-8")
    try:
        prescription = Prescription.from_message(text)
        prescription = prescription.with_validity(
            calculate_validity(prescription.date, prescription.exp_period)
        )
        markup = RecordRenderer().render(prescription)
        if html:
            target = output or payload.with_suffix(".html")
            target.write_text(markup, encoding="utf-8")
        else:
            target = output or payload.with_suffix(".pdf")
            target.write_bytes(build_converter(engine).convert(markup))
    except PrescriptionBotError as e:
        console.print(f"[bold red]Could not render {payload}:[/] {escape(str(e))}")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"Valid until: {prescription.valid_until}\nWritten to: {target}",
            title_align="left",
            title=escape(prescription.medicine) or "Prescription",
            border_style="bold green",
        )
    )
