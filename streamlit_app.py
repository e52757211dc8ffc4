"""Streamlit Web UI for cover-letter-tailor.

Three-step wizard:
  1) Input         - PDF resume + pasted job description
  2) Letter review - match score, cover letter, PDF download, chat edits
  3) Email review  - hiring manager message, chat edits
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets -> os.environ so the Anthropic client can read it
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except Exception:
        logger.debug("ANTHROPIC_API_KEY not found in st.secrets")

from cover_letter_tailor.config import load_config
from cover_letter_tailor.errors import GenerationError, UnsupportedFileTypeError
from cover_letter_tailor.models.chat import ChatRole
from cover_letter_tailor.wizard.controller import WizardController
from cover_letter_tailor.wizard.state import (
    WizardState,
    WizardStep,
    can_generate_letter,
)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Cover Letter Tailor",
    page_icon=":memo:",
    layout="centered",
)

if "wizard" not in st.session_state:
    st.session_state.wizard = WizardState()
# Bumped whenever the resume is dropped so the uploader widget starts empty
if "upload_nonce" not in st.session_state:
    st.session_state.upload_nonce = 0
# True while a remote call runs; generation buttons and chat input are disabled
if "busy" not in st.session_state:
    st.session_state.busy = False

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _controller() -> WizardController:
    """Build a controller around the session's wizard state.

    Clients are created per action so each asyncio.run gets a fresh HTTP pool.
    """
    return WizardController.from_config(load_config(), state=st.session_state.wizard)


def _run_async(controller: WizardController, action) -> None:
    st.session_state.busy = True
    try:
        asyncio.run(action)
    finally:
        st.session_state.busy = controller.is_busy


def _commit(controller: WizardController, rerun: bool = True) -> None:
    st.session_state.wizard = controller.state
    if rerun:
        st.rerun()


def _match_style(percentage: int) -> str:
    if percentage >= 80:
        return "green"
    if percentage >= 50:
        return "orange"
    return "red"


def _render_chat(placeholder: str) -> None:
    state: WizardState = st.session_state.wizard
    st.divider()
    st.subheader("Refine with AI")
    for msg in state.chat:
        with st.chat_message("user" if msg.role == ChatRole.USER else "assistant"):
            st.markdown(msg.text)
            if msg.is_update:
                st.caption(":green[Updated content]")

    prompt = st.chat_input(placeholder, disabled=st.session_state.busy)
    if prompt:
        controller = _controller()
        with st.spinner("Thinking..."):
            _run_async(controller, controller.send_chat(prompt))
        _commit(controller)


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("Cover Letter Tailor")
    st.caption("Tailored cover letters and outreach emails")
    _resume = st.session_state.wizard.resume
    if _resume:
        st.markdown(f"**Resume active:** {_resume.display_name}")
        if st.button("Reset resume", help="Start over with a different resume"):
            controller = _controller()
            controller.full_reset()
            st.session_state.upload_nonce += 1
            _commit(controller)


# ---------------------------------------------------------------------------
# Step 1: Input
# ---------------------------------------------------------------------------


def _step_input():
    state: WizardState = st.session_state.wizard
    st.header("Let's start with the basics")
    st.markdown("Upload your resume and paste the job details.")

    st.markdown("**1. Your Resume**")
    if state.resume:
        col_name, col_remove = st.columns([4, 1])
        with col_name:
            st.info(f"{state.resume.name} - ready for analysis")
        with col_remove:
            if st.button("Remove"):
                controller = _controller()
                controller.clear_resume()
                st.session_state.upload_nonce += 1
                _commit(controller)
    else:
        uploaded = st.file_uploader(
            "Upload your resume",
            type=["pdf"],
            help="PDF format supported",
            key=f"resume_upload_{st.session_state.upload_nonce}",
        )
        if uploaded is not None:
            controller = _controller()
            try:
                controller.select_resume(uploaded.name, uploaded.type, uploaded.getvalue)
            except UnsupportedFileTypeError:
                st.error("Currently only PDF resumes are supported for best analysis.")
            else:
                _commit(controller)

    st.markdown("**2. Job Description**")
    st.caption("We'll automatically detect the company name, analyze your fit, and research it.")
    jd_text = st.text_area(
        "Job description",
        value=state.job_description,
        height=200,
        placeholder="Paste the job title and description here...",
        label_visibility="collapsed",
    )
    if jd_text != state.job_description:
        controller = _controller()
        controller.set_job_description(jd_text)
        _commit(controller, rerun=False)

    can_run = can_generate_letter(st.session_state.wizard)
    if st.button(
        "Generate Cover Letter",
        type="primary",
        disabled=not can_run or st.session_state.busy,
        use_container_width=True,
    ):
        controller = _controller()
        with st.spinner("Analyzing fit & writing..."):
            try:
                _run_async(controller, controller.generate_letter())
            except GenerationError:
                logger.exception("Cover letter generation failed")
                st.error("Something went wrong generating the cover letter.")
                return
        _commit(controller)


# ---------------------------------------------------------------------------
# Step 2: Letter review
# ---------------------------------------------------------------------------


def _step_letter():
    state: WizardState = st.session_state.wizard
    assessment = state.assessment

    col_title, col_new = st.columns([4, 1])
    with col_title:
        st.header("Your Application")
        if assessment and assessment.company_name:
            st.caption(assessment.company_name)
    with col_new:
        if st.button("New Job"):
            controller = _controller()
            controller.reset_for_new_job()
            _commit(controller)

    if assessment:
        color = _match_style(assessment.match_percentage)
        with st.container(border=True):
            st.markdown(f"### :{color}[{assessment.match_percentage}%] Match Score")
            st.write(assessment.match_reason)
            if assessment.strengths or assessment.weaknesses:
                col_s, col_w = st.columns(2)
                with col_s:
                    st.markdown("**Strengths**")
                    for item in assessment.strengths:
                        st.markdown(f"- {item}")
                with col_w:
                    st.markdown("**Gaps**")
                    for item in assessment.weaknesses:
                        st.markdown(f"- {item}")

    with st.container(border=True):
        st.text(state.letter)

    if assessment and assessment.sources:
        st.caption("INFORMATION SOURCED FROM")
        st.markdown("  ".join(f"[{s.title}]({s.uri})" for s in assessment.sources))

    col_pdf, col_email = st.columns(2)
    with col_pdf:
        try:
            filename, pdf_bytes = _controller().download_pdf()
            st.download_button(
                label="Download PDF",
                data=pdf_bytes,
                file_name=filename,
                mime="application/pdf",
                use_container_width=True,
            )
        except Exception:
            logger.exception("PDF generation failed")
            st.warning("PDF generation failed")
    with col_email:
        if st.button(
            "Draft Email",
            type="primary",
            disabled=st.session_state.busy,
            use_container_width=True,
        ):
            controller = _controller()
            with st.spinner("Drafting message..."):
                try:
                    _run_async(controller, controller.generate_email())
                except GenerationError:
                    logger.exception("Email generation failed")
                    st.error("Something went wrong generating the email.")
                    return
            _commit(controller)

    with st.expander("Copy text"):
        st.code(state.letter, language=None)

    _render_chat("Ask AI to refine details, tone, or specific sections...")


# ---------------------------------------------------------------------------
# Step 3: Email review
# ---------------------------------------------------------------------------


def _step_email():
    state: WizardState = st.session_state.wizard

    if st.button("< Back to cover letter"):
        controller = _controller()
        controller.go_back()
        _commit(controller)

    st.header("Hiring Manager Message")
    with st.container(border=True):
        st.text(state.email)

    st.code(state.email, language=None)

    if st.button("Start New Application", use_container_width=True):
        controller = _controller()
        controller.reset_for_new_job()
        _commit(controller)

    _render_chat("Ask AI to shorten, change tone, or mention something specific...")


# ---------------------------------------------------------------------------
# Main router
# ---------------------------------------------------------------------------

_step = st.session_state.wizard.step
if _step == WizardStep.INPUT:
    _step_input()
elif _step == WizardStep.LETTER_REVIEW:
    _step_letter()
else:
    _step_email()
