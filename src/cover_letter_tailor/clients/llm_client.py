"""Claude API wrapper with async support, PDF attachments and web-search citations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import anthropic
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from cover_letter_tailor.models.assessment import Source
from cover_letter_tailor.models.resume import ResumeFile
from cover_letter_tailor.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
WEB_SEARCH_TOOL = "web_search_20250305"


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int
    sources: list[Source] = field(default_factory=list)


class LLMClient:
    """Async Claude API client.

    ``max_retries`` counts extra attempts after the first; the default of 0
    means a failed call is surfaced immediately.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        max_retries: int = 0,
    ):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self.max_retries = max_retries
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    async def _call_api(self, **kwargs) -> anthropic.types.Message:
        """Make the actual API call, retrying with exponential backoff if configured."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(min=1, max=10),
            reraise=True,
        ):
            with attempt:
                return await self.client.messages.create(**kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 4096,
        documents: tuple[ResumeFile, ...] | list[ResumeFile] = (),
        web_search: bool = False,
        web_search_max_uses: int = 3,
    ) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage.

        Args:
            prompt: User turn text.
            system: Optional system prompt.
            model: Claude model name.
            temperature: Sampling temperature.
            max_tokens: Output token cap.
            documents: Files attached ahead of the prompt as base64 document blocks.
            web_search: Enable the server-side web search tool. Citations from
                the answer are returned as ``LLMResponse.sources``.
            web_search_max_uses: Search budget for one call.
        """
        content: list[dict] = [_document_block(doc) for doc in documents]
        content.append({"type": "text", "text": prompt})
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": content}],
        }
        if system:
            kwargs["system"] = system
        if web_search:
            kwargs["tools"] = [
                {"type": WEB_SEARCH_TOOL, "name": "web_search", "max_uses": web_search_max_uses}
            ]

        logger.debug(
            "LLM call: model=%s documents=%d web_search=%s", model, len(content) - 1, web_search
        )
        try:
            message = await self._call_api(**kwargs)
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))

        text_blocks = [b for b in message.content if getattr(b, "type", None) == "text"]
        return LLMResponse(
            text="".join(b.text for b in text_blocks),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            sources=_collect_sources(text_blocks),
        )

    async def generate_json(self, prompt: str, **kwargs) -> dict:
        """Send a prompt and parse a JSON object from the response."""
        response = await self.generate(prompt, **kwargs)
        return extract_json(response.text)

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary


def _document_block(doc: ResumeFile) -> dict:
    return {
        "type": "document",
        "source": {
            "type": "base64",
            "media_type": doc.mime_type,
            "data": doc.data,
        },
    }


def _collect_sources(text_blocks: list) -> list[Source]:
    """Gather web citations from text blocks, first occurrence of each URI wins."""
    sources: list[Source] = []
    seen: set[str] = set()
    for block in text_blocks:
        for citation in getattr(block, "citations", None) or []:
            uri = getattr(citation, "url", None)
            if not uri or uri in seen:
                continue
            seen.add(uri)
            sources.append(Source(title=getattr(citation, "title", None) or "Source", uri=uri))
    return sources
