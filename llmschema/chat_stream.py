"""Chunks of a streamed chat completion and their JSON decoding."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from llmschema.chat import (
    ChatMessageRole,
    ContentFilterResults,
    FinishReason,
    FunctionCall,
    PromptAnnotation,
    PromptFilterResult,
    ToolCall,
    Usage,
    _enum_or_str,
    _int,
    _list,
    _mapping,
    _str,
)


def _float(data: Any, key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _finish_reason_from(data: Any) -> str:
    value = data.get("finish_reason")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field 'finish_reason' must be a string, got {type(value).__name__}")
    if not value:
        return ""
    return _enum_or_str(FinishReason, value)


def _int_list(data: Any, key: str) -> list[int]:
    values = _list(data, key)
    if any(isinstance(v, bool) or not isinstance(v, int) for v in values):
        raise ValueError(f"field {key!r} must be a list of integers")
    return list(values)


@dataclass
class ChatCompletionStreamChoiceDelta:
    """The part of a message carried by one stream chunk."""

    content: str = ""
    role: str = ""
    function_call: FunctionCall | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    refusal: str = ""

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.content:
            result["content"] = self.content
        if self.role:
            result["role"] = getattr(self.role, "value", self.role)
        if self.function_call is not None:
            result["function_call"] = self.function_call.to_dict()
        if self.tool_calls:
            result["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.refusal:
            result["refusal"] = self.refusal
        return result

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionStreamChoiceDelta:
        data = _mapping(data, "stream delta")
        function_call = data.get("function_call")
        return cls(
            content=_str(data, "content"),
            role=_enum_or_str(ChatMessageRole, _str(data, "role")),
            function_call=None if function_call is None else FunctionCall.from_dict(function_call),
            tool_calls=[ToolCall.from_dict(call) for call in _list(data, "tool_calls")],
            refusal=_str(data, "refusal"),
        )


@dataclass
class ChatCompletionTokenLogprobTopLogprob:
    """One of the most likely tokens at a position."""

    token: str = ""
    bytes: list[int] = field(default_factory=list)
    logprob: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionTokenLogprobTopLogprob:
        data = _mapping(data, "top log probability")
        return cls(token=_str(data, "token"), bytes=_int_list(data, "bytes"), logprob=_float(data, "logprob"))


@dataclass
class ChatCompletionTokenLogprob:
    """Log probability of one streamed token."""

    token: str = ""
    bytes: list[int] = field(default_factory=list)
    logprob: float = 0.0
    top_logprobs: list[ChatCompletionTokenLogprobTopLogprob] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionTokenLogprob:
        data = _mapping(data, "token log probability")
        return cls(
            token=_str(data, "token"),
            bytes=_int_list(data, "bytes"),
            logprob=_float(data, "logprob"),
            top_logprobs=[ChatCompletionTokenLogprobTopLogprob.from_dict(t) for t in _list(data, "top_logprobs")],
        )


@dataclass
class ChatCompletionStreamChoiceLogprobs:
    """Log probabilities of the content and refusal tokens in one chunk."""

    content: list[ChatCompletionTokenLogprob] = field(default_factory=list)
    refusal: list[ChatCompletionTokenLogprob] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionStreamChoiceLogprobs:
        data = _mapping(data, "stream log probabilities")
        return cls(
            content=[ChatCompletionTokenLogprob.from_dict(item) for item in _list(data, "content")],
            refusal=[ChatCompletionTokenLogprob.from_dict(item) for item in _list(data, "refusal")],
        )


@dataclass
class ChatCompletionStreamChoice:
    """One choice inside a stream chunk."""

    index: int = 0
    delta: ChatCompletionStreamChoiceDelta = field(default_factory=ChatCompletionStreamChoiceDelta)
    logprobs: ChatCompletionStreamChoiceLogprobs | None = None
    finish_reason: str = ""
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionStreamChoice:
        data = _mapping(data, "stream choice")
        logprobs = data.get("logprobs")
        return cls(
            index=_int(data, "index"),
            delta=ChatCompletionStreamChoiceDelta.from_dict(data.get("delta")),
            logprobs=None if logprobs is None else ChatCompletionStreamChoiceLogprobs.from_dict(logprobs),
            finish_reason=_finish_reason_from(data),
            content_filter_results=ContentFilterResults.from_dict(data.get("content_filter_results")),
        )


@dataclass
class ChatCompletionStreamResponse:
    """One chunk of a streamed chat completion.

    ``usage`` is set only on the final chunk when usage reporting was requested.
    """

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionStreamChoice] = field(default_factory=list)
    system_fingerprint: str = ""
    prompt_annotations: list[PromptAnnotation] = field(default_factory=list)
    prompt_filter_results: list[PromptFilterResult] = field(default_factory=list)
    usage: Usage | None = None

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionStreamResponse:
        data = _mapping(data, "stream response")
        usage = data.get("usage")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created=_int(data, "created"),
            model=_str(data, "model"),
            choices=[ChatCompletionStreamChoice.from_dict(c) for c in _list(data, "choices")],
            system_fingerprint=_str(data, "system_fingerprint"),
            prompt_annotations=[PromptAnnotation.from_dict(p) for p in _list(data, "prompt_annotations")],
            prompt_filter_results=[PromptFilterResult.from_dict(p) for p in _list(data, "prompt_filter_results")],
            usage=None if usage is None else Usage.from_dict(usage),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> ChatCompletionStreamResponse:
        """Decode one chunk from the JSON payload of a ``data:`` line."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return cls.from_dict(data)