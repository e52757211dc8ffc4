"""Outreach email writer - a short plain-text note to the hiring manager."""

from __future__ import annotations

import logging

from cover_letter_tailor.clients.llm_client import DEFAULT_MODEL, LLMClient
from cover_letter_tailor.errors import GenerationError
from cover_letter_tailor.models.resume import ResumeFile

logger = logging.getLogger(__name__)

EMAIL_FALLBACK = "Failed to generate email message."

SYSTEM_PROMPT = "You are an experienced content writer."

PROMPT_TEMPLATE = """\
OBJECTIVE: Write a personalized email/message to the hiring manager.

CONTEXT:
- Job Description: {job_description}
- The candidate has already written a cover letter.{letter_context}

GUIDELINES:
- Word count: STRICTLY around 70 words. Short and punchy.
- Tone: refined, humanized, professional but approachable. Use simple words.
- Perspective: first person ("I").
- STRICTLY NO underscores ("___"). Use natural language.
- Purpose: to introduce the candidate and attach the resume/cover letter.
- Mention the company name if detected in the job description.
- Output only the message text."""


class EmailWriter:
    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def write(
        self,
        resume: ResumeFile,
        job_description: str,
        cover_letter: str = "",
    ) -> str:
        """Write the outreach email. The raw text response is used as-is."""
        letter_context = ""
        if cover_letter.strip():
            letter_context = f"\n- Cover letter:\n{cover_letter.strip()}"
        prompt = PROMPT_TEMPLATE.format(
            job_description=job_description,
            letter_context=letter_context,
        )
        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                documents=[resume],
            )
        except Exception as exc:
            logger.error("Error generating email", exc_info=True)
            raise GenerationError("Failed to generate email message.") from exc
        return response.text.strip() or EMAIL_FALLBACK
