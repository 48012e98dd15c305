"""
Exception hierarchy for the prescription bot.

Every failure that can happen while processing one message is a subclass of
``PrescriptionBotError`` so the transport layer can tell expected per-message
failures apart from programming errors.
"""


class PrescriptionBotError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(PrescriptionBotError):
    """Raised when the process configuration is missing or invalid."""


class DecodeError(PrescriptionBotError):
    """Raised when an inbound message is not a valid prescription payload."""


class ValidityError(PrescriptionBotError):
    """Raised when the validity end date cannot be computed."""


class DateParseError(ValidityError):
    """Raised when the issue date does not match DD.MM.YYYY."""


class PeriodFormatError(ValidityError):
    """Raised when the expiration period has no leading day count."""


class TemplateError(PrescriptionBotError):
    """Raised when the document template cannot be loaded or rendered."""


class ConversionError(PrescriptionBotError):
    """Raised when the markup cannot be converted into a PDF document."""


class TransportSendError(PrescriptionBotError):
    """Raised when a reply or document cannot be delivered to the chat."""
