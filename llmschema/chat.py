"""Chat completion request and response models and their JSON encoding."""

from __future__ import annotations

import base64
import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class ChatMessageRole(str, Enum):
    """Roles a chat message can carry."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"
    TOOL = "tool"
    DEVELOPER = "developer"


class ContentFieldsMisusedError(ValueError):
    """Raised when a message sets both text content and multi-part content."""

    def __init__(self) -> None:
        super().__init__("can't use both Content and MultiContent properties simultaneously")


def _encode(value: Any) -> Any:
    """Turn a model value into plain JSON-compatible data."""
    if isinstance(value, Enum):
        return value.value
    if callable(getattr(value, "to_dict", None)):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _encode(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _encode(item) for key, item in value.items()}
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


def _dumps(data: Any) -> str:
    """Compact JSON with HTML-sensitive characters escaped."""
    text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    for char in "<>&\u2028\u2029":
        text = text.replace(char, f"\\u{ord(char):04x}")
    return text


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"cannot decode {what} from {type(data).__name__}")
    return data


def _get(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    """Read a typed field; a missing or null field gives the default."""
    value = data.get(key)
    if value is None:
        return default
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise ValueError(f"field {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value


def _str(data: Mapping[str, Any], key: str) -> str:
    return _get(data, key, str, "")


def _int(data: Mapping[str, Any], key: str, default: int | None = 0) -> Any:
    return _get(data, key, int, default)


def _list(data: Mapping[str, Any], key: str) -> list[Any]:
    return _get(data, key, list, [])


def _opt(data: Mapping[str, Any], key: str, decode: Any) -> Any:
    value = data.get(key)
    return None if value is None else decode(value)


def _decode_bytes(value: Any) -> bytes | None:
    if value is None:
        return None
    if isinstance(value, str):
        return base64.b64decode(value)
    if isinstance(value, list):
        return bytes(value)
    raise ValueError(f"cannot decode bytes from {type(value).__name__}")


def _enum_or_str(enum_type: type[Enum], value: str) -> Any:
    try:
        return enum_type(value)
    except ValueError:
        return value


def _omit_empty(pairs: dict[str, Any]) -> dict[str, Any]:
    return {key: _encode(value) for key, value in pairs.items() if value}


@dataclass
class ContentFilterSeverity:
    """A filter category that reports a severity (hate, self-harm, sexual, violence)."""

    filtered: bool = False
    severity: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"filtered": self.filtered, **_omit_empty({"severity": self.severity})}

    @classmethod
    def from_dict(cls, data: Any) -> ContentFilterSeverity:
        data = _mapping(data, "content filter severity")
        return cls(_get(data, "filtered", bool, False), _str(data, "severity"))


@dataclass
class ContentFilterDetection:
    """A filter category that reports detection (jailbreak, profanity)."""

    filtered: bool = False
    detected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"filtered": self.filtered, "detected": self.detected}

    @classmethod
    def from_dict(cls, data: Any) -> ContentFilterDetection:
        data = _mapping(data, "content filter detection")
        return cls(_get(data, "filtered", bool, False), _get(data, "detected", bool, False))


@dataclass
class ContentFilterResults:
    """Results of all content filter categories."""

    hate: ContentFilterSeverity = field(default_factory=ContentFilterSeverity)
    self_harm: ContentFilterSeverity = field(default_factory=ContentFilterSeverity)
    sexual: ContentFilterSeverity = field(default_factory=ContentFilterSeverity)
    violence: ContentFilterSeverity = field(default_factory=ContentFilterSeverity)
    jailbreak: ContentFilterDetection = field(default_factory=ContentFilterDetection)
    profanity: ContentFilterDetection = field(default_factory=ContentFilterDetection)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name).to_dict() for f in dataclasses.fields(self)}

    @classmethod
    def from_dict(cls, data: Any) -> ContentFilterResults:
        data = _mapping(data, "content filter results")
        severity = {k: ContentFilterSeverity.from_dict(data.get(k)) for k in ("hate", "self_harm", "sexual", "violence")}
        detection = {k: ContentFilterDetection.from_dict(data.get(k)) for k in ("jailbreak", "profanity")}
        return cls(**severity, **detection)


@dataclass
class PromptAnnotation:
    """Content filter results for one prompt."""

    prompt_index: int = 0
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    @classmethod
    def from_dict(cls, data: Any) -> PromptAnnotation:
        data = _mapping(data, "prompt annotation")
        return cls(_int(data, "prompt_index"), ContentFilterResults.from_dict(data.get("content_filter_results")))


@dataclass
class PromptFilterResult:
    """Content filter results for one prompt, indexed."""

    index: int = 0
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    @classmethod
    def from_dict(cls, data: Any) -> PromptFilterResult:
        data = _mapping(data, "prompt filter result")
        return cls(_int(data, "index"), ContentFilterResults.from_dict(data.get("content_filter_results")))


class ImageURLDetail(str, Enum):
    HIGH = "high"
    LOW = "low"
    AUTO = "auto"


@dataclass
class ChatMessageImageURL:
    """An image reference inside a multi-part message."""

    url: str = ""
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _omit_empty({"url": self.url, "detail": self.detail})

    @classmethod
    def from_dict(cls, data: Any) -> ChatMessageImageURL:
        data = _mapping(data, "image url")
        return cls(_str(data, "url"), _enum_or_str(ImageURLDetail, _str(data, "detail")))


class ChatMessagePartType(str, Enum):
    TEXT = "text"
    IMAGE_URL = "image_url"


@dataclass
class ChatMessagePart:
    """One part of a multi-part message: text or an image."""

    type: str = ""
    text: str = ""
    image_url: ChatMessageImageURL | None = None

    def to_dict(self) -> dict[str, Any]:
        result = _omit_empty({"type": self.type, "text": self.text})
        if self.image_url is not None:
            result["image_url"] = self.image_url.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Any) -> ChatMessagePart:
        data = _mapping(data, "message part")
        return cls(
            _enum_or_str(ChatMessagePartType, _str(data, "type")),
            _str(data, "text"),
            _opt(data, "image_url", ChatMessageImageURL.from_dict),
        )


@dataclass
class FunctionCall:
    """A function call with its arguments as a JSON string."""

    name: str = ""
    arguments: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _omit_empty({"name": self.name, "arguments": self.arguments})

    @classmethod
    def from_dict(cls, data: Any) -> FunctionCall:
        data = _mapping(data, "function call")
        return cls(_str(data, "name"), _str(data, "arguments"))


class ToolType(str, Enum):
    FUNCTION = "function"


@dataclass
class ToolCall:
    """A tool call produced by the model. ``index`` is set only in stream chunks."""

    id: str = ""
    type: str = ToolType.FUNCTION
    function: FunctionCall = field(default_factory=FunctionCall)
    index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {} if self.index is None else {"index": self.index}
        result.update(_omit_empty({"id": self.id}))
        result["type"] = _encode(self.type)
        result["function"] = self.function.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Any) -> ToolCall:
        data = _mapping(data, "tool call")
        return cls(
            id=_str(data, "id"),
            type=_enum_or_str(ToolType, _str(data, "type")),
            function=FunctionCall.from_dict(data.get("function")),
            index=_int(data, "index", None),
        )


@dataclass
class ChatMessage_Fields:
    pass


@dataclass
class ChatCompletionMessage:
    """A chat message; content is either plain text or a list of parts."""

    role: str = ""
    content: str = ""
    refusal: str = ""
    multi_content: list[ChatMessagePart] | None = None
    name: str = ""
    function_call: FunctionCall | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        if self.content and self.multi_content is not None:
            raise ContentFieldsMisusedError()
        result: dict[str, Any] = {"role": _encode(self.role)}
        result.update(_omit_empty({"content": self.multi_content or self.content, "refusal": self.refusal, "name": self.name}))
        if self.function_call is not None:
            result["function_call"] = self.function_call.to_dict()
        result.update(_omit_empty({"tool_calls": self.tool_calls, "tool_call_id": self.tool_call_id}))
        return result

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionMessage:
        if not isinstance(data, Mapping):
            raise ValueError(f"cannot decode chat message from {type(data).__name__}")
        raw = data.get("content")
        if raw is not None and not isinstance(raw, (str, list)):
            raise ValueError(f"message content must be a string or a list, got {type(raw).__name__}")
        return cls(
            role=_enum_or_str(ChatMessageRole, _str(data, "role")),
            content=raw if isinstance(raw, str) else "",
            refusal=_str(data, "refusal"),
            multi_content=[ChatMessagePart.from_dict(p) for p in raw] if isinstance(raw, list) else None,
            name=_str(data, "name"),
            function_call=_opt(data, "function_call", FunctionCall.from_dict),
            tool_calls=[ToolCall.from_dict(call) for call in _list(data, "tool_calls")],
            tool_call_id=_str(data, "tool_call_id"),
        )


class ChatCompletionResponseFormatType(str, Enum):
    JSON_OBJECT = "json_object"
    JSON_SCHEMA = "json_schema"
    TEXT = "text"


@dataclass
class ChatCompletionResponseFormatJSONSchema:
    """A named JSON schema the model output must follow."""

    name: str = ""
    description: str = ""
    schema: Any = None
    strict: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            **_omit_empty({"description": self.description}),
            "schema": _encode(self.schema),
            "strict": self.strict,
        }


@dataclass
class ChatCompletionResponseFormat:
    """The requested format of the model output."""

    type: str = ""
    json_schema: ChatCompletionResponseFormatJSONSchema | None = None

    def to_dict(self) -> dict[str, Any]:
        result = _omit_empty({"type": self.type})
        if self.json_schema is not None:
            result["json_schema"] = self.json_schema.to_dict()
        return result


def _response_format_from_dict(data: Any) -> ChatCompletionResponseFormat:
    data = _mapping(data, "response format")

    def schema(value: Any) -> ChatCompletionResponseFormatJSONSchema:
        value = _mapping(value, "json schema")
        return ChatCompletionResponseFormatJSONSchema(
            _str(value, "name"), _str(value, "description"), value.get("schema"), _get(value, "strict", bool, False)
        )

    return ChatCompletionResponseFormat(
        _enum_or_str(ChatCompletionResponseFormatType, _str(data, "type")), _opt(data, "json_schema", schema)
    )


@dataclass
class StreamOptions:
    """Streaming options; ``include_usage`` adds a final usage chunk."""

    include_usage: bool = False

    def to_dict(self) -> dict[str, Any]:
        return _omit_empty({"include_usage": self.include_usage})


@dataclass
class FunctionDefinition:
    """A callable function offered to the model. ``parameters`` is a JSON schema."""

    name: str = ""
    description: str = ""
    strict: bool = False
    parameters: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            **_omit_empty({"description": self.description, "strict": self.strict}),
            "parameters": _encode(self.parameters),
        }

    @classmethod
    def from_dict(cls, data: Any) -> FunctionDefinition:
        data = _mapping(data, "function definition")
        return cls(_str(data, "name"), _str(data, "description"), _get(data, "strict", bool, False), data.get("parameters"))


@dataclass
class Tool:
    """A tool offered to the model."""

    type: str = ToolType.FUNCTION
    function: FunctionDefinition | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": _encode(self.type)}
        if self.function is not None:
            result["function"] = self.function.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Tool:
        data = _mapping(data, "tool")
        return cls(_enum_or_str(ToolType, _str(data, "type")), _opt(data, "function", FunctionDefinition.from_dict))


@dataclass
class ToolFunction:
    name: str = ""


@dataclass
class ToolChoice:
    """Forces the model to call a specific tool."""

    type: str = ToolType.FUNCTION
    function: ToolFunction = field(default_factory=ToolFunction)

    def to_dict(self) -> dict[str, Any]:
        return {"type": _encode(self.type), "function": {"name": self.function.name}}


@dataclass
class TopLogProbs:
    token: str = ""
    logprob: float = 0.0
    bytes: bytes | None = None

    @classmethod
    def from_dict(cls, data: Any) -> TopLogProbs:
        data = _mapping(data, "top log probability")
        return cls(_str(data, "token"), _get(data, "logprob", float, 0.0), _decode_bytes(data.get("bytes")))


@dataclass
class LogProb:
    """Probability information for one token."""

    token: str = ""
    logprob: float = 0.0
    bytes: bytes | None = None
    top_logprobs: list[TopLogProbs] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> LogProb:
        data = _mapping(data, "log probability")
        return cls(
            _str(data, "token"),
            _get(data, "logprob", float, 0.0),
            _decode_bytes(data.get("bytes")),
            [TopLogProbs.from_dict(item) for item in _list(data, "top_logprobs")],
        )


@dataclass
class LogProbs:
    """Log probability information for the message content tokens."""

    content: list[LogProb] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> LogProbs:
        data = _mapping(data, "log probabilities")
        return cls([LogProb.from_dict(item) for item in _list(data, "content")])


def _token_prob_to_dict(prob: TopLogProbs | LogProb) -> dict[str, Any]:
    result = {"token": prob.token, "logprob": prob.logprob, **_omit_empty({"bytes": prob.bytes})}
    if isinstance(prob, LogProb):
        result["top_logprobs"] = [_token_prob_to_dict(top) for top in prob.top_logprobs]
    return result


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    FUNCTION_CALL = "function_call"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    NULL = "null"

    def to_json(self) -> str:
        return finish_reason_json(self)


def _finish_reason_value(reason: Any) -> str | None:
    value = reason.value if isinstance(reason, Enum) else reason
    return None if value in (None, "", FinishReason.NULL.value) else str(value)


def finish_reason_json(reason: Any) -> str:
    """JSON text for a finish reason: ``null`` for empty or "null", else a quoted string."""
    return json.dumps(_finish_reason_value(reason), ensure_ascii=False)


@dataclass
class Usage:
    """Token usage of a request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> Usage:
        data = _mapping(data, "usage")
        return cls(*(_int(data, f.name) for f in dataclasses.fields(cls)))


@dataclass
class ChatCompletionChoice:
    """One generated choice of a chat completion."""

    index: int = 0
    message: ChatCompletionMessage = field(default_factory=ChatCompletionMessage)
    finish_reason: str = ""
    logprobs: LogProbs | None = None
    content_filter_results: ContentFilterResults = field(default_factory=ContentFilterResults)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "index": self.index,
            "message": self.message.to_dict(),
            "finish_reason": _finish_reason_value(self.finish_reason),
        }
        if self.logprobs is not None:
            result["logprobs"] = {"content": [_token_prob_to_dict(p) for p in self.logprobs.content]}
        result["content_filter_results"] = self.content_filter_results.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionChoice:
        data = _mapping(data, "chat completion choice")
        return cls(
            index=_int(data, "index"),
            message=ChatCompletionMessage.from_dict(data.get("message") or {}),
            finish_reason=_enum_or_str(FinishReason, _str(data, "finish_reason")),
            logprobs=_opt(data, "logprobs", LogProbs.from_dict),
            content_filter_results=ContentFilterResults.from_dict(data.get("content_filter_results")),
        )


# Fields left out of the request JSON only when unset (None), not when zero.
_NULLABLE_REQUEST_FIELDS = frozenset(
    {"response_format", "seed", "function_call", "tool_choice", "stream_options", "parallel_tool_calls"}
)


@dataclass
class ChatCompletionRequest:
    """Parameters of a chat completion request.

    Zero values are left out of the JSON, except ``model`` and ``messages``,
    which are always written (``messages`` as null when unset).
    """

    model: str = ""
    messages: list[ChatCompletionMessage] | None = None
    max_tokens: int = 0
    max_completion_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    n: int = 0
    stream: bool = False
    stop: list[str] = field(default_factory=list)
    presence_penalty: float = 0.0
    response_format: ChatCompletionResponseFormat | None = None
    seed: int | None = None
    frequency_penalty: float = 0.0
    logit_bias: dict[str, int] = field(default_factory=dict)
    logprobs: bool = False
    top_logprobs: int = 0
    user: str = ""
    functions: list[FunctionDefinition] = field(default_factory=list)
    function_call: Any = None
    tools: list[Tool] = field(default_factory=list)
    tool_choice: Any = None
    stream_options: StreamOptions | None = None
    parallel_tool_calls: Any = None
    store: bool = False
    reasoning_effort: str = ""
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"model": self.model, "messages": _encode(self.messages)}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name in result:
                continue
            if value is not None if f.name in _NULLABLE_REQUEST_FIELDS else bool(value):
                result[f.name] = _encode(value)
        return result

    def to_json(self) -> str:
        return _dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionRequest:
        data = _mapping(data, "chat completion request")
        floats = ("temperature", "top_p", "presence_penalty", "frequency_penalty")
        ints = ("max_tokens", "max_completion_tokens", "n", "top_logprobs")
        bools = ("stream", "logprobs", "store")
        return cls(
            model=_str(data, "model"),
            messages=_opt(data, "messages", lambda _: [ChatCompletionMessage.from_dict(m) for m in _list(data, "messages")]),
            stop=list(_list(data, "stop")),
            response_format=_opt(data, "response_format", _response_format_from_dict),
            seed=_int(data, "seed", None),
            logit_bias=dict(_mapping(data.get("logit_bias"), "logit bias")),
            user=_str(data, "user"),
            functions=[FunctionDefinition.from_dict(f) for f in _list(data, "functions")],
            function_call=data.get("function_call"),
            tools=[Tool.from_dict(t) for t in _list(data, "tools")],
            tool_choice=data.get("tool_choice"),
            stream_options=_opt(
                data,
                "stream_options",
                lambda v: StreamOptions(_get(_mapping(v, "stream options"), "include_usage", bool, False)),
            ),
            parallel_tool_calls=data.get("parallel_tool_calls"),
            reasoning_effort=_str(data, "reasoning_effort"),
            metadata=dict(_mapping(data.get("metadata"), "metadata")),
            **{key: _get(data, key, float, 0.0) for key in floats},
            **{key: _int(data, key) for key in ints},
            **{key: _get(data, key, bool, False) for key in bools},
        )


@dataclass
class ChatCompletionResponse:
    """A chat completion returned by the API."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionChoice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    system_fingerprint: str = ""
    prompt_filter_results: list[PromptFilterResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> ChatCompletionResponse:
        data = _mapping(data, "chat completion response")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created=_int(data, "created"),
            model=_str(data, "model"),
            choices=[ChatCompletionChoice.from_dict(c) for c in _list(data, "choices")],
            usage=Usage.from_dict(data.get("usage")),
            system_fingerprint=_str(data, "system_fingerprint"),
            prompt_filter_results=[PromptFilterResult.from_dict(p) for p in _list(data, "prompt_filter_results")],
        )


def messages_to_json(messages: list[ChatCompletionMessage]) -> str:
    """Encode a list of messages as compact JSON."""
    return _dumps([message.to_dict() for message in messages])


def messages_from_json(text: str | bytes) -> list[ChatCompletionMessage]:
    """Decode a JSON array of messages."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array of messages, got {type(data).__name__}")
    return [ChatCompletionMessage.from_dict(item) for item in data]