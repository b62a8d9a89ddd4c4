"""Model boundary and the Classifier Invoker.

Public API:
    - :class:`TextModel`: the single opaque call ``complete(instructions, prompt) -> text``.
    - :class:`OpenAIResponsesModel`: default ``TextModel`` backed by the OpenAI
      Responses API.
    - :class:`ClassifierInvoker`: one model call per chunk, returning the raw,
      untrusted response as a :data:`~expense_ai.models.RawModelResponse`.
    - :func:`decode_response_text` and :func:`is_retryable`.

No client is created and no environment is read at import time.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import openai
from openai import OpenAI

from . import prompting
from .categories import CATEGORY_TAXONOMY, Category
from .models import ArrayOfUnknown, RawModelResponse, Transaction, Unparsed

_MODEL: str = "gpt-5"

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```$", re.DOTALL)


@runtime_checkable
class TextModel(Protocol):
    """A generative text model treated as an untrusted text function."""

    def complete(self, instructions: str, prompt: str) -> str: ...


def _extract_response_text(resp: Any) -> str:
    """Locate the text output of an OpenAI Responses SDK result.

    - Prefer ``resp.output_text``; fall back to ``resp.output[0].content[0].text``.
    - Raise ``ValueError`` if no text can be located.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        try:
            first = resp.output[0] if getattr(resp, "output", None) else None
            content = getattr(first, "content", None)
            if content and len(content) > 0:
                txt_obj = getattr(content[0], "text", None)
                if isinstance(txt_obj, str):
                    text = txt_obj
                else:
                    # Some SDK versions wrap text in an object with ``value``.
                    maybe_val = getattr(txt_obj, "value", None)
                    if isinstance(maybe_val, str):
                        text = maybe_val
        except (AttributeError, IndexError, TypeError):
            text = None
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")
    return text


class OpenAIResponsesModel:
    """``TextModel`` that calls ``client.responses.create``.

    The SDK's built-in retries are disabled; retry policy belongs to the chunk
    aggregator. The client is created lazily on first use.
    """

    def __init__(
        self,
        *,
        model: str = _MODEL,
        timeout: float | None = None,
        client: Any | None = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            kwargs: dict[str, Any] = {"max_retries": 0}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout
            self._client = OpenAI(**kwargs)
        return self._client

    def complete(self, instructions: str, prompt: str) -> str:
        resp = self._get_client().responses.create(
            model=self.model,
            instructions=instructions,
            input=prompt,
        )
        return _extract_response_text(resp)


def decode_response_text(text: str) -> RawModelResponse:
    """Decode model text into the raw response variant.

    A surrounding Markdown code fence is stripped first. Text that is not JSON,
    or JSON that is not an array, becomes :class:`Unparsed`; a JSON array
    becomes :class:`ArrayOfUnknown`. Never raises.
    """

    body = text.strip()
    m = _FENCE_RE.match(body)
    if m:
        body = m.group(1).strip()
    try:
        decoded = json.loads(body)
    except (json.JSONDecodeError, RecursionError):
        return Unparsed(text=text)
    if not isinstance(decoded, list):
        return Unparsed(text=text)
    return ArrayOfUnknown(items=tuple(decoded))


def is_retryable(exc: BaseException) -> bool:
    """Return True only for HTTP 429/5xx and connection/timeout failures.

    Parsing and validation errors are terminal and must not be retried.
    """

    if isinstance(exc, openai.APIConnectionError):
        return True
    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


class ClassifierInvoker:
    """Issue one model call per chunk with the fixed instruction contract.

    ``invoke`` raises whatever the model boundary raises (transport, quota,
    timeout, missing output); it never inspects the shape of the returned JSON
    beyond decoding it.
    """

    def __init__(
        self,
        model: TextModel | None = None,
        *,
        taxonomy: Sequence[Category] = CATEGORY_TAXONOMY,
    ) -> None:
        self.model: TextModel = model if model is not None else OpenAIResponsesModel()
        self.taxonomy = tuple(taxonomy)
        self._instructions = prompting.build_system_instructions()

    def build_prompt(self, chunk: Sequence[Transaction]) -> str:
        return prompting.build_user_content(chunk, taxonomy=self.taxonomy)

    def invoke(self, chunk: Sequence[Transaction]) -> RawModelResponse:
        text = self.model.complete(self._instructions, self.build_prompt(chunk))
        if not isinstance(text, str):
            return Unparsed(text=repr(text))
        return decode_response_text(text)


__all__ = [
    "ClassifierInvoker",
    "OpenAIResponsesModel",
    "TextModel",
    "decode_response_text",
    "is_retryable",
]
