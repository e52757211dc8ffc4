"""Wizard controller - owns the state, runs the remote calls, applies the results.

Each remote call runs under a request slot (letter, email, chat). Starting a
request bumps the slot's sequence number and cancels the slot's in-flight
task; a response is applied only if its sequence number is still the
latest one, so a slow, superseded response can never overwrite newer content.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from cover_letter_tailor.clients.llm_client import LLMClient
from cover_letter_tailor.config import AppConfig
from cover_letter_tailor.errors import GenerationError, InvalidTransitionError
from cover_letter_tailor.export.letter_pdf import pdf_filename, render_letter_pdf
from cover_letter_tailor.models.resume import ResumeFile
from cover_letter_tailor.parsers.resume_loader import resume_from_upload
from cover_letter_tailor.pipeline.chat_refiner import ChatRefiner
from cover_letter_tailor.pipeline.email_writer import EmailWriter
from cover_letter_tailor.pipeline.letter_writer import LetterWriter
from cover_letter_tailor.wizard.state import (
    BackToLetter,
    ChatFailed,
    ChatMessageSent,
    ChatReplyReceived,
    EmailGenerated,
    FullReset,
    JobDescriptionChanged,
    LetterGenerated,
    ResetForNewJob,
    ResumeCleared,
    ResumeSelected,
    WizardState,
    active_document,
    can_generate_email,
    can_generate_letter,
    transition,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Slot(str, Enum):
    LETTER = "letter"
    EMAIL = "email"
    CHAT = "chat"


class _Superseded(Exception):
    """A newer request on the same slot replaced this one."""


class RequestSequencer:
    """Monotonic per-slot request numbers plus the task currently in flight."""

    def __init__(self):
        self._latest: dict[Slot, int] = {slot: 0 for slot in Slot}
        self._tasks: dict[Slot, asyncio.Task] = {}

    def begin(self, slot: Slot) -> int:
        self.invalidate(slot)
        return self._latest[slot]

    def attach(self, slot: Slot, task: asyncio.Task) -> None:
        self._tasks[slot] = task

    def is_current(self, slot: Slot, seq: int) -> bool:
        return self._latest[slot] == seq

    def latest(self, slot: Slot) -> int:
        return self._latest[slot]

    def invalidate(self, *slots: Slot) -> None:
        """Supersede whatever is in flight on ``slots``."""
        for slot in slots:
            self._latest[slot] += 1
            task = self._tasks.pop(slot, None)
            if task is not None and not task.done():
                logger.debug("Cancelling superseded %s request", slot.value)
                task.cancel()


class WizardController:
    def __init__(
        self,
        letter_writer: LetterWriter,
        email_writer: EmailWriter,
        chat_refiner: ChatRefiner,
        state: WizardState | None = None,
    ):
        self.letter_writer = letter_writer
        self.email_writer = email_writer
        self.chat_refiner = chat_refiner
        self.state = state or WizardState()
        self.sequencer = RequestSequencer()
        self.busy: dict[Slot, bool] = {slot: False for slot in Slot}

    @property
    def is_busy(self) -> bool:
        return any(self.busy.values())

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        llm: LLMClient | None = None,
        state: WizardState | None = None,
    ) -> WizardController:
        if llm is None:
            llm = LLMClient(timeout=config.llm.timeout, max_retries=config.llm.max_retries)
        gen = config.generation
        return cls(
            letter_writer=LetterWriter(
                llm,
                model=config.llm.letter_model,
                temperature=gen.letter_temperature,
                web_search=gen.web_search,
                web_search_max_uses=gen.web_search_max_uses,
                max_tokens=config.llm.max_tokens,
            ),
            email_writer=EmailWriter(
                llm,
                model=config.llm.email_model,
                temperature=gen.email_temperature,
                max_tokens=config.llm.max_tokens,
            ),
            chat_refiner=ChatRefiner(
                llm,
                model=config.llm.chat_model,
                temperature=gen.chat_temperature,
                max_tokens=config.llm.max_tokens,
            ),
            state=state,
        )

    # --- Input step ---------------------------------------------------------

    def select_resume(self, name: str, mime_type: str | None, read: Callable[[], bytes]) -> ResumeFile:
        """Accept an uploaded resume. A non-PDF is rejected before ``read`` is called,
        leaving any previously selected resume in place."""
        resume = resume_from_upload(name, mime_type, read)
        self.set_resume(resume)
        return resume

    def set_resume(self, resume: ResumeFile) -> None:
        """Select ``resume``. A letter still in flight for the previous one is dropped."""
        self._supersede(Slot.LETTER)
        self.state = transition(self.state, ResumeSelected(resume))

    def clear_resume(self) -> None:
        self._supersede(Slot.LETTER)
        self.state = transition(self.state, ResumeCleared())

    def set_job_description(self, text: str) -> None:
        self.state = transition(self.state, JobDescriptionChanged(text))

    # --- Remote operations --------------------------------------------------

    async def generate_letter(self) -> bool:
        """Generate the cover letter and move to letter review.

        Returns False if the response was superseded and discarded.

        Raises:
            GenerationError: the call failed; the step does not change.
        """
        state = self.state
        if not can_generate_letter(state):
            raise InvalidTransitionError("A resume and a job description are required")
        try:
            result = await self._run(
                Slot.LETTER,
                lambda: self.letter_writer.write(state.resume, state.job_description),
            )
        except _Superseded:
            return False
        self._supersede(Slot.EMAIL, Slot.CHAT)
        self.state = transition(self.state, LetterGenerated(result.assessment, result.letter))
        return True

    async def generate_email(self) -> bool:
        """Generate the outreach email and move to email review."""
        state = self.state
        if not can_generate_email(state):
            raise InvalidTransitionError("Generate a cover letter first")
        try:
            email = await self._run(
                Slot.EMAIL,
                lambda: self.email_writer.write(state.resume, state.job_description, state.letter),
            )
        except _Superseded:
            return False
        self._supersede(Slot.CHAT)
        self.state = transition(self.state, EmailGenerated(email))
        return True

    async def send_chat(self, message: str) -> bool:
        """Send one chat turn against the active document.

        The user message is appended right away. A failed call appends a
        fallback assistant message instead of raising.
        """
        message = message.strip()
        if not message:
            return False
        before = self.state
        document = active_document(before)
        if document is None:
            raise InvalidTransitionError("Chat is only available while reviewing a document")
        self.state = transition(before, ChatMessageSent(message))
        try:
            reply = await self._run(
                Slot.CHAT,
                lambda: self.chat_refiner.reply(
                    step=before.step,
                    resume=before.resume,
                    job_description=before.job_description,
                    document=document,
                    transcript=before.chat,
                    message=message,
                ),
            )
        except _Superseded:
            return False
        except GenerationError:
            self.state = transition(self.state, ChatFailed())
            return True
        self.state = transition(
            self.state, ChatReplyReceived(reply.reply, reply.updated_content)
        )
        return True

    # --- Navigation ---------------------------------------------------------

    def go_back(self) -> None:
        self._supersede(Slot.CHAT)
        self.state = transition(self.state, BackToLetter())

    def reset_for_new_job(self) -> None:
        self._supersede(*Slot)
        self.state = transition(self.state, ResetForNewJob())

    def full_reset(self) -> None:
        self._supersede(*Slot)
        self.state = transition(self.state, FullReset())

    # --- Export -------------------------------------------------------------

    def download_pdf(self) -> tuple[str, bytes]:
        """Render the current letter; returns (filename, pdf bytes)."""
        if not self.state.letter:
            raise InvalidTransitionError("There is no cover letter to export")
        company = self.state.assessment.company_name if self.state.assessment else ""
        return pdf_filename(company), render_letter_pdf(self.state.letter)

    # --- Internals ----------------------------------------------------------

    async def _run(self, slot: Slot, call: Callable[[], Awaitable[T]]) -> T:
        seq = self.sequencer.begin(slot)
        task = asyncio.ensure_future(call())
        self.sequencer.attach(slot, task)
        self.busy[slot] = True
        try:
            result = await task
        except asyncio.CancelledError:
            if self.sequencer.is_current(slot, seq):
                raise
            logger.debug("%s request #%d was cancelled by a newer request", slot.value, seq)
            raise _Superseded() from None
        except Exception:
            if not self.sequencer.is_current(slot, seq):
                logger.debug("Ignoring failure of superseded %s request #%d", slot.value, seq)
                raise _Superseded() from None
            raise
        finally:
            if self.sequencer.is_current(slot, seq):
                self.busy[slot] = False
        if not self.sequencer.is_current(slot, seq):
            logger.debug("Discarding stale %s response #%d", slot.value, seq)
            raise _Superseded()
        return result

    def _supersede(self, *slots: Slot) -> None:
        """Drop in-flight requests on ``slots``; their late results are discarded."""
        self.sequencer.invalidate(*slots)
        for slot in slots:
            self.busy[slot] = False
