"""Chat refinement agent - answers edit requests with an optional full rewrite."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from cover_letter_tailor.clients.llm_client import DEFAULT_MODEL, LLMClient
from cover_letter_tailor.errors import GenerationError, InvalidTransitionError
from cover_letter_tailor.models.chat import ChatMessage, ChatReply
from cover_letter_tailor.models.resume import ResumeFile
from cover_letter_tailor.wizard.state import WizardStep

logger = logging.getLogger(__name__)

DOCUMENT_LABELS = {
    WizardStep.LETTER_REVIEW: "cover letter",
    WizardStep.EMAIL_REVIEW: "email to the hiring manager",
}

SYSTEM_PROMPT = """\
You are a helpful career writing assistant. The user is refining the
{document} shown below and asks you for changes or advice.

Rules:
1. If the user asks for a change, rewrite the WHOLE {document} with the change
   applied and put it in "updatedContent". Keep everything they did not ask to
   change, including blank lines between blocks.
2. If the user only asks a question, answer it and set "updatedContent" to null.
3. "reply" is a short conversational answer (1-3 sentences). Never paste the
   full document into "reply".
4. Use only facts found in the resume or the job description.

Respond ONLY with JSON:
{{"reply": "...", "updatedContent": "... or null"}}"""

PROMPT_TEMPLATE = """\
JOB DESCRIPTION:
{job_description}

CURRENT {document_upper}:
---
{document_text}
---

CONVERSATION SO FAR:
{transcript}

USER REQUEST:
{message}"""


class ChatRefiner:
    """Turns one user utterance into a reply and, optionally, a replacement document."""

    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        *,
        temperature: float = 0.4,
        max_tokens: int = 4096,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def reply(
        self,
        step: WizardStep,
        resume: ResumeFile | None,
        job_description: str,
        document: str,
        transcript: Sequence[ChatMessage],
        message: str,
    ) -> ChatReply:
        """Ask the model to act on ``message`` against the active document.

        Raises:
            InvalidTransitionError: if ``step`` has no document to refine.
            GenerationError: if the call fails or returns no usable JSON.
        """
        label = DOCUMENT_LABELS.get(step)
        if label is None:
            raise InvalidTransitionError(f"Chat is not available in step {step.name}")

        prompt = PROMPT_TEMPLATE.format(
            job_description=job_description,
            document_upper=label.upper(),
            document_text=document,
            transcript=_format_transcript(transcript),
            message=message,
        )
        try:
            data = await self.llm.generate_json(
                prompt=prompt,
                system=SYSTEM_PROMPT.format(document=label),
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                documents=[resume] if resume is not None else [],
            )
            result = ChatReply(
                reply=data.get("reply") or "",
                updated_content=data.get("updatedContent") or None,
            )
        except Exception as exc:
            logger.exception("Chat refinement LLM call failed")
            raise GenerationError("Failed to refine content.") from exc

        if not result.has_update:
            result = ChatReply(reply=result.reply, updated_content=None)
        if not result.reply:
            result = ChatReply(
                reply="Done, I've updated it." if result.has_update else "I have nothing to add to that.",
                updated_content=result.updated_content,
            )
        return result


def _format_transcript(transcript: Sequence[ChatMessage]) -> str:
    if not transcript:
        return "(no previous messages)"
    return "\n".join(f"{m.role.value.upper()}: {m.text}" for m in transcript)
