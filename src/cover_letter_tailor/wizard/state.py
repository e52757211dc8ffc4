"""Wizard state and its pure transition function.

The wizard moves Input -> LetterReview -> EmailReview, with a back edge from
EmailReview to LetterReview. ``transition(state, event)`` never mutates its
input; every rule about what gets cleared lives here.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum

from cover_letter_tailor.errors import InvalidTransitionError
from cover_letter_tailor.models.assessment import MatchAssessment
from cover_letter_tailor.models.chat import ChatMessage, ChatRole
from cover_letter_tailor.models.resume import ResumeFile

CHAT_FAILURE_MESSAGE = "Sorry, I ran into a problem while processing that. Please try again."


class WizardStep(IntEnum):
    INPUT = 1
    LETTER_REVIEW = 2
    EMAIL_REVIEW = 3


@dataclass(frozen=True)
class WizardState:
    step: WizardStep = WizardStep.INPUT
    resume: ResumeFile | None = None
    job_description: str = ""
    assessment: MatchAssessment | None = None
    letter: str = ""
    email: str = ""
    chat: tuple[ChatMessage, ...] = field(default_factory=tuple)


# --- Events -----------------------------------------------------------------


@dataclass(frozen=True)
class ResumeSelected:
    resume: ResumeFile


@dataclass(frozen=True)
class ResumeCleared:
    pass


@dataclass(frozen=True)
class JobDescriptionChanged:
    text: str


@dataclass(frozen=True)
class LetterGenerated:
    assessment: MatchAssessment
    letter: str


@dataclass(frozen=True)
class EmailGenerated:
    email: str


@dataclass(frozen=True)
class BackToLetter:
    pass


@dataclass(frozen=True)
class ChatMessageSent:
    text: str


@dataclass(frozen=True)
class ChatReplyReceived:
    reply: str
    updated_content: str | None = None


@dataclass(frozen=True)
class ChatFailed:
    pass


@dataclass(frozen=True)
class ResetForNewJob:
    pass


@dataclass(frozen=True)
class FullReset:
    pass


Event = (
    ResumeSelected
    | ResumeCleared
    | JobDescriptionChanged
    | LetterGenerated
    | EmailGenerated
    | BackToLetter
    | ChatMessageSent
    | ChatReplyReceived
    | ChatFailed
    | ResetForNewJob
    | FullReset
)

_REVIEW_STEPS = (WizardStep.LETTER_REVIEW, WizardStep.EMAIL_REVIEW)


# --- Queries ----------------------------------------------------------------


def active_document(state: WizardState) -> str | None:
    """Text the chat acts on in the current step, or None in Input."""
    if state.step == WizardStep.LETTER_REVIEW:
        return state.letter
    if state.step == WizardStep.EMAIL_REVIEW:
        return state.email
    return None


def can_generate_letter(state: WizardState) -> bool:
    return state.resume is not None and bool(state.job_description.strip())


def can_generate_email(state: WizardState) -> bool:
    return (
        state.step in _REVIEW_STEPS
        and state.resume is not None
        and bool(state.job_description)
    )


# --- Transitions ------------------------------------------------------------


def transition(state: WizardState, event: Event) -> WizardState:
    """Return the state that follows ``event``.

    Raises:
        InvalidTransitionError: if the current step does not accept ``event``.
    """
    if isinstance(event, ResumeSelected):
        return replace(state, resume=event.resume)

    if isinstance(event, ResumeCleared):
        return replace(state, resume=None)

    if isinstance(event, JobDescriptionChanged):
        _require(state, (WizardStep.INPUT,), event)
        return replace(state, job_description=event.text)

    if isinstance(event, LetterGenerated):
        if state.resume is None:
            raise InvalidTransitionError("Cannot accept a cover letter without a resume")
        return replace(
            state,
            step=WizardStep.LETTER_REVIEW,
            assessment=event.assessment,
            letter=event.letter,
            email="",
            chat=(),
        )

    if isinstance(event, EmailGenerated):
        _require(state, _REVIEW_STEPS, event)
        return replace(state, step=WizardStep.EMAIL_REVIEW, email=event.email, chat=())

    if isinstance(event, BackToLetter):
        _require(state, (WizardStep.EMAIL_REVIEW,), event)
        return replace(state, step=WizardStep.LETTER_REVIEW, chat=())

    if isinstance(event, ChatMessageSent):
        _require(state, _REVIEW_STEPS, event)
        return _append_chat(state, ChatMessage(role=ChatRole.USER, text=event.text))

    if isinstance(event, ChatReplyReceived):
        _require(state, _REVIEW_STEPS, event)
        has_update = bool(event.updated_content and event.updated_content.strip())
        reply = ChatMessage(role=ChatRole.ASSISTANT, text=event.reply, is_update=has_update)
        state = _append_chat(state, reply)
        if not has_update:
            return state
        if state.step == WizardStep.LETTER_REVIEW:
            return replace(state, letter=event.updated_content)
        return replace(state, email=event.updated_content)

    if isinstance(event, ChatFailed):
        _require(state, _REVIEW_STEPS, event)
        return _append_chat(
            state, ChatMessage(role=ChatRole.ASSISTANT, text=CHAT_FAILURE_MESSAGE)
        )

    if isinstance(event, ResetForNewJob):
        return WizardState(resume=state.resume)

    if isinstance(event, FullReset):
        return WizardState()

    raise InvalidTransitionError(f"Unknown event: {event!r}")


def _require(state: WizardState, steps: tuple[WizardStep, ...], event: object) -> None:
    if state.step not in steps:
        raise InvalidTransitionError(
            f"{type(event).__name__} is not allowed in step {state.step.name}"
        )


def _append_chat(state: WizardState, message: ChatMessage) -> WizardState:
    return replace(state, chat=state.chat + (message,))
