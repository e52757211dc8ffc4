"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from cover_letter_tailor.clients.llm_client import LLMClient, LLMResponse
from cover_letter_tailor.models.assessment import MatchAssessment, Source
from cover_letter_tailor.models.resume import ResumeFile

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


@pytest.fixture
def sample_resume() -> ResumeFile:
    return ResumeFile.from_bytes("jane_doe_resume.pdf", "application/pdf", PDF_BYTES)


@pytest.fixture
def sample_jd_text() -> str:
    return """Senior Backend Engineer - Acme, Inc.

About the role:
- Design and build high-throughput REST APIs in Python
- Own PostgreSQL schemas and query performance
- Mentor engineers and lead design reviews

Requirements:
- 5+ years of backend development
- Python, FastAPI or Django, PostgreSQL, Redis
- Experience running services on Kubernetes

Nice to have:
- Kafka or other event streaming
"""


@pytest.fixture
def sample_letter() -> str:
    return """To,
The Hiring Manager
Acme, Inc.

Application for Senior Backend Engineer

I am a backend engineer with six years of experience building Python services
and a degree in Computer Science. I enjoy turning messy requirements into
reliable, well-tested systems.

At Globex I lead a team of four building REST APIs on FastAPI and PostgreSQL that
serve two million requests a day. I cut p95 latency by 40% through query tuning
and Redis caching, and moved our deployments to Kubernetes.

Key Skills I bring: Python, PostgreSQL, Redis, Kubernetes

Looking forward to connecting and discussing this further. Thank you for your time.

Warm regards,
Jane Doe
+1 555 0100"""


@pytest.fixture
def sample_assessment() -> MatchAssessment:
    return MatchAssessment(
        company_name="Acme, Inc.",
        match_percentage=82,
        match_reason="Strong Python and PostgreSQL background; limited Kafka exposure.",
        strengths=["Python APIs at scale", "PostgreSQL tuning"],
        weaknesses=["No Kafka experience"],
        sources=[Source(title="Acme careers", uri="https://acme.example.com/careers")],
    )


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={})
    return client
