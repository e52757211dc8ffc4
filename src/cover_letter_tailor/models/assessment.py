"""Pydantic models for cover letter generation output."""

from __future__ import annotations

from pydantic import BaseModel


class Source(BaseModel):
    title: str
    uri: str


class MatchAssessment(BaseModel):
    company_name: str = ""
    match_percentage: int = 0  # 0-100 as stated in the prompt, not enforced
    match_reason: str = "Analysis unavailable"
    strengths: list[str] = []
    weaknesses: list[str] = []
    sources: list[Source] = []


class LetterResult(BaseModel):
    assessment: MatchAssessment
    letter: str
