import asyncio
import logging
import time
import uuid
from typing import Annotated, Literal, TypeAlias

from workflows import Workflow, Context, step
from workflows.events import StartEvent, StopEvent, Event
from workflows.resource import Resource
from pydantic import BaseModel

from .converter import DocumentConverter, build_converter
from .errors import ConversionError, DecodeError, TemplateError, ValidityError
from .messages import GREETING_TEXT, INVALID_FORMAT_TEXT, PROCESSING_FAILED_TEXT, START_COMMAND
from .models import Prescription
from .renderer import RecordRenderer
from .validity import calculate_validity

logger = logging.getLogger(__name__)

Outcome: TypeAlias = Literal["greeting", "invalid_format", "failed", "document"]

DEFAULT_TIMEOUT = 120.0

_RENDERER: RecordRenderer | None = None
_CONVERTER: DocumentConverter | None = None


class DispatchState(BaseModel):
    started_at: float | None = None


class MessageEvent(StartEvent):
    text: str


class RecordDecodedEvent(Event):
    prescription: Prescription


class ValidityComputedEvent(Event):
    prescription: Prescription


class MarkupRenderedEvent(Event):
    markup: str


class DispatchEndEvent(StopEvent):
    outcome: Outcome
    reply: str | None = None
    document: bytes | None = None
    filename: str | None = None
    started_at: float | None = None
    error: str | None = None


def configure(
    *,
    renderer: RecordRenderer | None = None,
    converter: DocumentConverter | None = None,
) -> None:
    """Install the renderer and converter shared by every workflow run."""
    global _RENDERER, _CONVERTER
    if renderer is not None:
        _RENDERER = renderer
    if converter is not None:
        _CONVERTER = converter


def reset() -> None:
    global _RENDERER, _CONVERTER
    _RENDERER = None
    _CONVERTER = None


def get_renderer(*args, **kwargs) -> RecordRenderer:
    global _RENDERER
    if _RENDERER is None:
        _RENDERER = RecordRenderer()
    return _RENDERER


def get_converter(*args, **kwargs) -> DocumentConverter:
    global _CONVERTER
    if _CONVERTER is None:
        _CONVERTER = build_converter()
    return _CONVERTER


def document_filename() -> str:
    return f"prescription_{uuid.uuid4().hex[:12]}.pdf"


def _failed(stage: str, error: Exception) -> DispatchEndEvent:
    logger.error("Could not %s: %s", stage, error)
    return DispatchEndEvent(outcome="failed", reply=PROCESSING_FAILED_TEXT, error=str(error))


class PrescriptionWorkflow(Workflow):
    @step
    async def decode_message(
        self, ev: MessageEvent, ctx: Context[DispatchState]
    ) -> DispatchEndEvent | RecordDecodedEvent:
        if ev.text == START_COMMAND:
            return DispatchEndEvent(outcome="greeting", reply=GREETING_TEXT)
        try:
            prescription = Prescription.from_message(ev.text)
        except DecodeError as e:
            logger.info("Rejected message: %s", e)
            return DispatchEndEvent(
                outcome="invalid_format", reply=INVALID_FORMAT_TEXT, error=str(e)
            )
        async with ctx.store.edit_state() as state:
            state.started_at = time.perf_counter()
        res = RecordDecodedEvent(prescription=prescription)
        ctx.write_event_to_stream(res)
        return res

    @step
    async def compute_validity(
        self, ev: RecordDecodedEvent, ctx: Context[DispatchState]
    ) -> DispatchEndEvent | ValidityComputedEvent:
        prescription = ev.prescription
        try:
            valid_until = calculate_validity(prescription.date, prescription.exp_period)
        except ValidityError as e:
            return _failed("compute prescription validity", e)
        res = ValidityComputedEvent(prescription=prescription.with_validity(valid_until))
        ctx.write_event_to_stream(res)
        return res

    @step
    async def render_markup(
        self,
        ev: ValidityComputedEvent,
        ctx: Context[DispatchState],
        renderer: Annotated[RecordRenderer, Resource(get_renderer, cache=False)],
    ) -> DispatchEndEvent | MarkupRenderedEvent:
        try:
            markup = renderer.render(ev.prescription)
        except TemplateError as e:
            return _failed("render prescription", e)
        res = MarkupRenderedEvent(markup=markup)
        ctx.write_event_to_stream(res)
        return res

    @step
    async def convert_document(
        self,
        ev: MarkupRenderedEvent,
        ctx: Context[DispatchState],
        converter: Annotated[DocumentConverter, Resource(get_converter, cache=False)],
    ) -> DispatchEndEvent:
        try:
            document = await asyncio.to_thread(converter.convert, ev.markup)
        except ConversionError as e:
            return _failed("convert prescription to PDF", e)
        state = await ctx.store.get_state()
        return DispatchEndEvent(
            outcome="document",
            document=document,
            filename=document_filename(),
            started_at=state.started_at,
        )


async def dispatch(text: str, wf: PrescriptionWorkflow | None = None) -> DispatchEndEvent:
    """Run one inbound message through the workflow and return its terminal event."""
    handler = (wf or workflow).run(start_event=MessageEvent(text=text))
    return await handler


workflow = PrescriptionWorkflow(timeout=DEFAULT_TIMEOUT)
