"""Cover letter writer - fit analysis plus a tailored letter in one call."""

from __future__ import annotations

import logging

from cover_letter_tailor.clients.llm_client import DEFAULT_MODEL, LLMClient
from cover_letter_tailor.errors import GenerationError
from cover_letter_tailor.models.assessment import LetterResult, MatchAssessment
from cover_letter_tailor.models.resume import ResumeFile
from cover_letter_tailor.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

LETTER_FALLBACK = "Failed to generate cover letter."

SYSTEM_PROMPT = """\
You are an expert career coach and professional writer.

Respond ONLY with a JSON object in exactly this shape:
{
  "companyName": "The identified company name.",
  "matchPercentage": 0,
  "matchReason": "A short explanation (max 20 words) for the match score.",
  "strengths": ["Where the resume clearly meets the role"],
  "weaknesses": ["Requirements the resume does not show"],
  "coverLetterText": "The full formatted cover letter text with newlines."
}

matchPercentage is an integer from 0 to 100 indicating how well the resume
matches the job description. Keep strengths and weaknesses to 3-5 short items
each."""

PROMPT_TEMPLATE = """\
INPUT:
1. RESUME (PDF attached)
2. JOB DESCRIPTION (text below)

JOB DESCRIPTION:
{job_description}

TASK:
1. IDENTIFY COMPANY: Search the web if needed to identify the exact company name from the description.
2. JOB MATCH ANALYSIS: Analyze the RESUME against the JOB DESCRIPTION. Calculate a matchPercentage (0-100) based on skills and experience, give a matchReason (max 20 words), and list strengths and weaknesses.
3. RESEARCH: Briefly research the company values to align the letter.
4. WRITE COVER LETTER: Create a tailored cover letter.

STRICT CONSTRAINTS:
- Word count for the body: STRICTLY around 115 words. Concise and impactful.
- Separate every block below with one blank line.
- Structure:
  To,
  The Hiring Manager
  [Company Name]

  Application for [Job Title]

  [Paragraph 1: Intro, education/experience summary (~40 words)]

  [Paragraph 2: Current role, specific skills/achievements aligned to the job (~50 words)]

  Key Skills I bring: [Comma separated list of the top 3-4 relevant skills]

  Looking forward to connecting and discussing this further. Thank you for your time.

  Warm regards,
  [Candidate Name]
  [Candidate Mobile Number]
- Tone: professional, confident, yet human. First person ("I")."""


class LetterWriter:
    def __init__(
        self,
        llm: LLMClient,
        model: str = DEFAULT_MODEL,
        *,
        temperature: float = 0.5,
        web_search: bool = True,
        web_search_max_uses: int = 3,
        max_tokens: int = 4096,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.web_search = web_search
        self.web_search_max_uses = web_search_max_uses
        self.max_tokens = max_tokens

    async def write(self, resume: ResumeFile, job_description: str) -> LetterResult:
        """Analyze fit and write a cover letter.

        Raises:
            GenerationError: if the call fails or the response is not a usable
                JSON object.
        """
        prompt = PROMPT_TEMPLATE.format(job_description=job_description)
        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=SYSTEM_PROMPT,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                documents=[resume],
                web_search=self.web_search,
                web_search_max_uses=self.web_search_max_uses,
            )
            data = extract_json(response.text)
            assessment = MatchAssessment(
                company_name=data.get("companyName") or "",
                match_percentage=data.get("matchPercentage") or 0,
                match_reason=data.get("matchReason") or "Analysis unavailable",
                strengths=data.get("strengths") or [],
                weaknesses=data.get("weaknesses") or [],
                sources=response.sources,
            )
        except Exception as exc:
            logger.error("Error generating cover letter", exc_info=True)
            raise GenerationError("Failed to generate cover letter. Please try again.") from exc

        letter = data.get("coverLetterText") or LETTER_FALLBACK
        logger.info(
            "Cover letter generated: company=%r match=%d%% sources=%d",
            assessment.company_name,
            assessment.match_percentage,
            len(assessment.sources),
        )
        return LetterResult(assessment=assessment, letter=letter)
