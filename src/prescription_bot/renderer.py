"""
HTML rendering of prescription records.

The layout is a single Jinja2 template shipped inside the package. It is
compiled once per renderer and every field value goes through HTML
autoescaping, since all of them come straight from chat messages.
"""

from __future__ import annotations

import jinja2

from .errors import TemplateError
from .models import Prescription

TEMPLATE_NAME = "prescription.html"

COMMERCIAL_LABEL = "Коммерческий"
SUBSIDIZED_LABEL = "Льготный"
NON_SUBSIDIZED_LABEL = "Нельготный"

DISCOUNT_LABELS: dict[str, str] = {
    "2": COMMERCIAL_LABEL,
    "1": SUBSIDIZED_LABEL,
}


def not_null(value: str) -> bool:
    """Return True when a field carries a real value."""
    return value != "" and value != "null"


def discount_label(code: str) -> str:
    """Map a discount code to its status label; unknown codes are non-subsidized."""
    return DISCOUNT_LABELS.get(code, NON_SUBSIDIZED_LABEL)


class RecordRenderer:
    """Render prescriptions into HTML markup ready for PDF conversion."""

    def __init__(
        self,
        *,
        loader: jinja2.BaseLoader | None = None,
        template_name: str = TEMPLATE_NAME,
    ) -> None:
        self._env = jinja2.Environment(
            loader=loader or jinja2.PackageLoader("prescription_bot", "templates"),
            autoescape=True,
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
        )
        self._env.globals["not_null"] = not_null
        self._env.globals["discount_label"] = discount_label
        try:
            self._template = self._env.get_template(template_name)
        except jinja2.TemplateError as e:
            raise TemplateError(f"Could not load template {template_name!r}: {e}") from e

    def render(self, prescription: Prescription) -> str:
        try:
            return self._template.render(rx=prescription)
        except jinja2.TemplateError as e:
            raise TemplateError(f"Could not render prescription: {e}") from e
