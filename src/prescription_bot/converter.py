"""
HTML to PDF conversion backends.

Two engines are available: WeasyPrint, rendering in-process, and the
``wkhtmltopdf`` executable driven through stdin/stdout pipes. Neither writes
to a shared output file, so conversions never collide on disk.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol

from .errors import ConfigError, ConversionError

logger = logging.getLogger(__name__)

DEFAULT_ENGINE = "weasyprint"
ENGINES: tuple[str, ...] = ("weasyprint", "wkhtmltopdf")


class DocumentConverter(Protocol):
    """Turn HTML markup into PDF bytes."""

    def convert(self, markup: str) -> bytes: ...


class WeasyPrintConverter:
    """Convert markup in memory with WeasyPrint."""

    def __init__(self, *, base_url: str | None = None) -> None:
        self.base_url = base_url

    def convert(self, markup: str) -> bytes:
        # Lazy import so the bot can start without Pango when using wkhtmltopdf
        try:
            from weasyprint import HTML
        except (ImportError, OSError) as e:
            raise ConversionError(f"WeasyPrint is not available: {e}") from e
        try:
            document = HTML(string=markup, base_url=self.base_url).write_pdf()
        except Exception as e:
            raise ConversionError(f"WeasyPrint failed to render the document: {e}") from e
        if not document:
            raise ConversionError("WeasyPrint produced an empty document")
        return document


class WkhtmltopdfConverter:
    """Convert markup by piping it through the wkhtmltopdf executable."""

    def __init__(self, *, binary: str = "wkhtmltopdf", timeout: float = 60.0) -> None:
        self.binary = binary
        self.timeout = timeout

    def command(self) -> list[str]:
        return [self.binary, "--quiet", "--encoding", "utf-8", "-", "-"]

    def convert(self, markup: str) -> bytes:
        try:
            result = subprocess.run(
                self.command(),
                input=markup.encode("utf-8"),
                capture_output=True,
                check=False,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ConversionError(f"wkhtmltopdf executable not found: {self.binary}") from e
        except OSError as e:
            raise ConversionError(f"Could not start wkhtmltopdf ({self.binary}): {e}") from e
        except subprocess.TimeoutExpired as e:
            raise ConversionError(f"wkhtmltopdf timed out after {self.timeout}s") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise ConversionError(f"wkhtmltopdf exited with code {result.returncode}: {stderr}")
        if not result.stdout:
            raise ConversionError("wkhtmltopdf produced an empty document")
        return result.stdout


def build_converter(
    engine: str = DEFAULT_ENGINE,
    *,
    wkhtmltopdf_binary: str = "wkhtmltopdf",
    timeout: float = 60.0,
) -> DocumentConverter:
    """Return the converter registered under *engine*."""
    name = engine.strip().lower()
    if name == "weasyprint":
        converter: DocumentConverter = WeasyPrintConverter()
    elif name == "wkhtmltopdf":
        converter = WkhtmltopdfConverter(binary=wkhtmltopdf_binary, timeout=timeout)
    else:
        raise ConfigError(
            f"Unknown conversion engine {engine!r}; expected one of: {', '.join(ENGINES)}"
        )
    logger.debug("Using %s conversion engine", name)
    return converter
