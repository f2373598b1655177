"""Batch job models and the JSON Lines encoding of batch input files."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urlencode

from llmschema.chat import (
    ChatCompletionRequest,
    _dumps,
    _encode,
    _enum_or_str,
    _int,
    _list,
    _mapping,
    _str,
)

BATCHES_SUFFIX = "/batches"
DEFAULT_COMPLETION_WINDOW = "24h"
DEFAULT_BATCH_FILE_NAME = "@batchinput.jsonl"


def _opt_int(data: Any, key: str) -> int | None:
    """An integer field that may be absent or null."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _bool(data: Any, key: str) -> bool:
    """A boolean field; absent or null reads as false."""
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {value!r}")
    return value


class BatchEndpoint(str, Enum):
    CHAT_COMPLETIONS = "/v1/chat/completions"
    COMPLETIONS = "/v1/completions"
    EMBEDDINGS = "/v1/embeddings"


@dataclass
class BatchLineItem:
    """One request line of a batch input file.

    ``body`` is a request model with ``to_dict()`` or a mapping of its JSON fields.
    """

    custom_id: str = ""
    body: Any = None
    method: str = "POST"
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "custom_id": self.custom_id,
            "body": _encode(self.body),
            "method": self.method,
            "url": _encode(self.url),
        }

    def marshal_batch_line_item(self) -> bytes:
        """The compact JSON encoding of this line."""
        return _dumps(self.to_dict()).encode("utf-8")


@dataclass
class BatchChatCompletionRequest(BatchLineItem):
    body: ChatCompletionRequest = field(default_factory=ChatCompletionRequest)
    url: str = BatchEndpoint.CHAT_COMPLETIONS


@dataclass
class BatchCompletionRequest(BatchLineItem):
    body: Any = field(default_factory=dict)
    url: str = BatchEndpoint.COMPLETIONS


@dataclass
class BatchEmbeddingRequest(BatchLineItem):
    body: Any = field(default_factory=dict)
    url: str = BatchEndpoint.EMBEDDINGS


@dataclass
class BatchErrorItem:
    code: str = ""
    message: str = ""
    param: str | None = None
    line: int | None = None


@dataclass
class BatchErrors:
    object: str = ""
    data: list[BatchErrorItem] = field(default_factory=list)


@dataclass
class BatchRequestCounts:
    total: int = 0
    completed: int = 0
    failed: int = 0


def _errors_from(data: Any) -> BatchErrors | None:
    if data is None:
        return None
    data = _mapping(data, "batch errors")
    items = []
    for raw in _list(data, "data"):
        item = _mapping(raw, "batch error")
        items.append(
            BatchErrorItem(
                code=_str(item, "code"),
                message=_str(item, "message"),
                param=None if item.get("param") is None else _str(item, "param"),
                line=_opt_int(item, "line"),
            )
        )
    return BatchErrors(object=_str(data, "object"), data=items)


@dataclass
class Batch:
    """A batch job as reported by the API."""

    id: str = ""
    object: str = ""
    endpoint: str = ""
    errors: BatchErrors | None = None
    input_file_id: str = ""
    completion_window: str = ""
    status: str = ""
    output_file_id: str | None = None
    error_file_id: str | None = None
    created_at: int = 0
    in_progress_at: int | None = None
    expires_at: int | None = None
    finalizing_at: int | None = None
    completed_at: int | None = None
    failed_at: int | None = None
    expired_at: int | None = None
    cancelling_at: int | None = None
    cancelled_at: int | None = None
    request_counts: BatchRequestCounts = field(default_factory=BatchRequestCounts)
    metadata: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Batch:
        data = _mapping(data, "batch")
        counts = _mapping(data.get("request_counts") or {}, "request counts")
        metadata = data.get("metadata")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            endpoint=_enum_or_str(BatchEndpoint, _str(data, "endpoint")),
            errors=_errors_from(data.get("errors")),
            input_file_id=_str(data, "input_file_id"),
            completion_window=_str(data, "completion_window"),
            status=_str(data, "status"),
            output_file_id=None if data.get("output_file_id") is None else _str(data, "output_file_id"),
            error_file_id=None if data.get("error_file_id") is None else _str(data, "error_file_id"),
            created_at=_int(data, "created_at"),
            in_progress_at=_opt_int(data, "in_progress_at"),
            expires_at=_opt_int(data, "expires_at"),
            finalizing_at=_opt_int(data, "finalizing_at"),
            completed_at=_opt_int(data, "completed_at"),
            failed_at=_opt_int(data, "failed_at"),
            expired_at=_opt_int(data, "expired_at"),
            cancelling_at=_opt_int(data, "cancelling_at"),
            cancelled_at=_opt_int(data, "cancelled_at"),
            request_counts=BatchRequestCounts(
                total=_int(counts, "total"),
                completed=_int(counts, "completed"),
                failed=_int(counts, "failed"),
            ),
            metadata=None if metadata is None else dict(_mapping(metadata, "metadata")),
        )


@dataclass
class CreateBatchRequest:
    """Parameters for creating a batch; an empty completion window becomes "24h"."""

    input_file_id: str = ""
    endpoint: str = ""
    completion_window: str = DEFAULT_COMPLETION_WINDOW
    metadata: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if not self.completion_window:
            self.completion_window = DEFAULT_COMPLETION_WINDOW

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_file_id": self.input_file_id,
            "endpoint": _encode(self.endpoint),
            "completion_window": self.completion_window,
            "metadata": None if self.metadata is None else _encode(self.metadata),
        }


@dataclass
class UploadBatchFileRequest:
    """The lines of a batch input file and the name to upload it under."""

    file_name: str = DEFAULT_BATCH_FILE_NAME
    lines: list[BatchLineItem] = field(default_factory=list)

    def add_chat_completion(self, custom_id: str, body: ChatCompletionRequest) -> None:
        self.lines.append(BatchChatCompletionRequest(custom_id=custom_id, body=body))

    def add_completion(self, custom_id: str, body: Any) -> None:
        self.lines.append(BatchCompletionRequest(custom_id=custom_id, body=body))

    def add_embedding(self, custom_id: str, body: Any) -> None:
        self.lines.append(BatchEmbeddingRequest(custom_id=custom_id, body=body))

    def marshal_jsonl(self) -> bytes:
        """The lines as JSON Lines, separated by newlines with none at the end."""
        return b"\n".join(line.marshal_batch_line_item() for line in self.lines)


@dataclass
class CreateBatchWithUploadFileRequest(UploadBatchFileRequest):
    """A batch whose input file is uploaded first."""

    endpoint: str = ""
    completion_window: str = ""
    metadata: dict[str, Any] | None = None

    def create_batch_request(self, input_file_id: str) -> CreateBatchRequest:
        """The batch creation request once the input file has been uploaded."""
        return CreateBatchRequest(
            input_file_id=input_file_id,
            endpoint=self.endpoint,
            completion_window=self.completion_window,
            metadata=self.metadata,
        )


@dataclass
class ListBatchResponse:
    """A page of batches."""

    object: str = ""
    data: list[Batch] = field(default_factory=list)
    first_id: str = ""
    last_id: str = ""
    has_more: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> ListBatchResponse:
        data = _mapping(data, "batch list")
        return cls(
            object=_str(data, "object"),
            data=[Batch.from_dict(item) for item in _list(data, "data")],
            first_id=_str(data, "first_id"),
            last_id=_str(data, "last_id"),
            has_more=_bool(data, "has_more"),
        )


def list_batch_query(after: str | None = None, limit: int | None = None) -> str:
    """The query string for listing batches: empty, or ``?`` and the parameters sorted by name."""
    params = {"after": after, "limit": None if limit is None else str(limit)}
    present = sorted((key, value) for key, value in params.items() if value is not None)
    return "?" + urlencode(present) if present else ""