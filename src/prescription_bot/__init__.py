"""
Prescription Bot - turns prescription JSON sent over Telegram into PDF documents.

The bot decodes a JSON record from a chat message, computes its validity end
date, renders it into a fixed HTML layout with Jinja2 and converts the markup
into a PDF that is sent back to the chat.

Example usage:
    >>> from prescription_bot import dispatch
    >>> result = await dispatch('{"Date": "01.01.2024", "ExpPeriod": "30 days"}')
    >>> result.outcome
    'document'
"""

from .errors import (
    PrescriptionBotError,
    ConfigError,
    DecodeError,
    ValidityError,
    DateParseError,
    PeriodFormatError,
    TemplateError,
    ConversionError,
    TransportSendError,
)
from .models import Prescription
from .validity import calculate_validity
from .renderer import RecordRenderer, discount_label, not_null
from .converter import DocumentConverter, WeasyPrintConverter, WkhtmltopdfConverter, build_converter
from .workflow import (
    workflow as default_workflow,
    PrescriptionWorkflow,
    MessageEvent,
    DispatchEndEvent,
    dispatch,
)

__all__ = [
    # Errors
    "PrescriptionBotError",
    "ConfigError",
    "DecodeError",
    "ValidityError",
    "DateParseError",
    "PeriodFormatError",
    "TemplateError",
    "ConversionError",
    "TransportSendError",
    # Domain
    "Prescription",
    "calculate_validity",
    "RecordRenderer",
    "discount_label",
    "not_null",
    # Conversion
    "DocumentConverter",
    "WeasyPrintConverter",
    "WkhtmltopdfConverter",
    "build_converter",
    # Workflow
    "default_workflow",
    "PrescriptionWorkflow",
    "MessageEvent",
    "DispatchEndEvent",
    "dispatch",
]
