"""
Telegram transport for the prescription workflow.

Every new message is run through the dispatch workflow and answered with a
text reply, or with the generated PDF followed by a processing-time notice.
Updates are handled one at a time.
"""

from __future__ import annotations

import logging
import time
from io import BytesIO

from telegram import InputFile, Message, Update
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters
from workflows.errors import WorkflowTimeoutError

from .config import Settings
from .errors import TransportSendError
from .messages import PROCESSING_FAILED_TEXT, timing_text
from .workflow import DispatchEndEvent, PrescriptionWorkflow, dispatch

logger = logging.getLogger(__name__)


class PrescriptionBot:
    def __init__(self, workflow: PrescriptionWorkflow) -> None:
        self._workflow = workflow

    async def handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        if message is None:
            return
        try:
            result = await dispatch(message.text or "", self._workflow)
        except WorkflowTimeoutError as e:
            logger.error("Processing timed out for chat %s: %s", message.chat_id, e)
            await self._reply_quietly(message, PROCESSING_FAILED_TEXT)
            return

        if result.outcome == "document":
            await self._deliver_document(message, result)
        elif result.reply is not None:
            await self._reply_quietly(message, result.reply)

    async def _deliver_document(self, message: Message, result: DispatchEndEvent) -> None:
        try:
            await self.send_document(
                message, result.document or b"", result.filename or "prescription.pdf"
            )
        except TransportSendError as e:
            logger.error("%s", e)
            return
        started_at = result.started_at if result.started_at is not None else time.perf_counter()
        elapsed = time.perf_counter() - started_at
        logger.info("Processing took %.3fs", elapsed)
        await self._reply_quietly(message, timing_text(elapsed))

    async def send_document(self, message: Message, document: bytes, filename: str) -> None:
        try:
            sent = await message.reply_document(
                document=InputFile(BytesIO(document), filename=filename)
            )
        except TelegramError as e:
            raise TransportSendError(f"Error sending document to chat {message.chat_id}: {e}") from e
        file_id = sent.document.file_id if sent.document is not None else None
        logger.info("Document sent successfully: %s", file_id)

    async def send_text(self, message: Message, text: str) -> None:
        try:
            await message.reply_text(text)
        except TelegramError as e:
            raise TransportSendError(f"Error sending message to chat {message.chat_id}: {e}") from e

    async def _reply_quietly(self, message: Message, text: str) -> None:
        try:
            await self.send_text(message, text)
        except TransportSendError as e:
            logger.error("%s", e)

    def build_application(self, settings: Settings) -> Application:
        application = Application.builder().token(settings.token).build()
        application.add_handler(
            MessageHandler(filters.UpdateType.MESSAGE, self.handle_message)
        )
        return application


def run_bot(settings: Settings, workflow: PrescriptionWorkflow) -> None:
    """Poll Telegram for updates until the process is stopped."""
    application = PrescriptionBot(workflow).build_application(settings)
    logger.info("Prescription bot started (polling, timeout=%ss)", settings.poll_timeout)
    application.run_polling(
        allowed_updates=[Update.MESSAGE],
        timeout=settings.poll_timeout,
    )
