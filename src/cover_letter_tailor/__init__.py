"""Tailored cover letters and outreach emails from a resume and a job posting."""

__version__ = "0.1.0"
