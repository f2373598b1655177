"""Audio transcription and translation requests, responses and their multipart form encoding."""

from __future__ import annotations

import io
import os
import secrets
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO

from llmschema.chat import _encode, _int, _list, _mapping, _str

WHISPER_1 = "whisper-1"


def _float(data: Any, key: str) -> float:
    value = data.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _bool(data: Any, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {type(value).__name__}")
    return value


class AudioResponseFormat(str, Enum):
    """Response formats; JSON is used when none is given."""

    JSON = "json"
    TEXT = "text"
    SRT = "srt"
    VERBOSE_JSON = "verbose_json"
    VTT = "vtt"


class TranscriptionTimestampGranularity(str, Enum):
    WORD = "word"
    SEGMENT = "segment"


class AudioFormError(Exception):
    """Raised when the multipart form of an audio request cannot be built."""


@dataclass
class AudioRequest:
    """Parameters of a transcription or translation request.

    ``file_path`` names an existing file, or, when ``reader`` is given, the
    file name under which the reader's contents are sent.
    """

    model: str = ""
    file_path: str = ""
    reader: Any = None
    prompt: str = ""
    temperature: float = 0.0
    language: str = ""
    format: str = ""
    timestamp_granularities: list[str] = field(default_factory=list)

    def has_json_response(self) -> bool:
        """Whether the API answers this request with JSON."""
        return self.format in ("", AudioResponseFormat.JSON, AudioResponseFormat.VERBOSE_JSON)


@dataclass
class AudioSegment:
    id: int = 0
    seek: int = 0
    start: float = 0.0
    end: float = 0.0
    text: str = ""
    tokens: list[int] = field(default_factory=list)
    temperature: float = 0.0
    avg_logprob: float = 0.0
    compression_ratio: float = 0.0
    no_speech_prob: float = 0.0
    transient: bool = False

    @classmethod
    def _from_dict(cls, data: Any) -> AudioSegment:
        data = _mapping(data, "audio segment")
        return cls(
            id=_int(data, "id"),
            seek=_int(data, "seek"),
            start=_float(data, "start"),
            end=_float(data, "end"),
            text=_str(data, "text"),
            tokens=[int(token) for token in _list(data, "tokens")],
            temperature=_float(data, "temperature"),
            avg_logprob=_float(data, "avg_logprob"),
            compression_ratio=_float(data, "compression_ratio"),
            no_speech_prob=_float(data, "no_speech_prob"),
            transient=_bool(data, "transient"),
        )


@dataclass
class AudioWord:
    word: str = ""
    start: float = 0.0
    end: float = 0.0

    @classmethod
    def _from_dict(cls, data: Any) -> AudioWord:
        data = _mapping(data, "audio word")
        return cls(word=_str(data, "word"), start=_float(data, "start"), end=_float(data, "end"))


@dataclass
class AudioResponse:
    """The result of a transcription or translation."""

    task: str = ""
    language: str = ""
    duration: float = 0.0
    segments: list[AudioSegment] = field(default_factory=list)
    words: list[AudioWord] = field(default_factory=list)
    text: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> AudioResponse:
        data = _mapping(data, "audio response")
        return cls(
            task=_str(data, "task"),
            language=_str(data, "language"),
            duration=_float(data, "duration"),
            segments=[AudioSegment._from_dict(item) for item in _list(data, "segments")],
            words=[AudioWord._from_dict(item) for item in _list(data, "words")],
            text=_str(data, "text"),
        )

    @classmethod
    def from_text(cls, text: str) -> AudioResponse:
        """A response for the plain-text formats, which carry only the text."""
        return cls(text=text)


_BOUNDARY_CHARS = frozenset(string.ascii_letters + string.digits + "'()+_,-./:=? ")
_TSPECIALS = frozenset('()<>@,;:\\"/[]?= ')


def _escape_quotes(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class MultipartFormBuilder:
    """Builds a multipart/form-data body in memory."""

    def __init__(self, boundary: str | None = None) -> None:
        if boundary is None:
            boundary = secrets.token_hex(30)
        if not 1 <= len(boundary) <= 70 or boundary.endswith(" ") or not set(boundary) <= _BOUNDARY_CHARS:
            raise ValueError(f"invalid multipart boundary: {boundary!r}")
        self.boundary = boundary
        self._buffer = io.BytesIO()
        self._has_parts = False
        self._closed = False

    def _start_part(self, headers: list[tuple[str, str]]) -> None:
        if self._closed:
            raise ValueError("multipart form is already closed")
        prefix = "\r\n--" if self._has_parts else "--"
        lines = [f"{prefix}{self.boundary}\r\n"]
        lines.extend(f"{key}: {value}\r\n" for key, value in sorted(headers))
        lines.append("\r\n")
        self._buffer.write("".join(lines).encode("utf-8"))
        self._has_parts = True

    def _write_file(self, fieldname: str, data: bytes | str, filename: str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        disposition = (
            f'form-data; name="{_escape_quotes(fieldname)}"; filename="{_escape_quotes(filename)}"'
        )
        self._start_part([("Content-Disposition", disposition), ("Content-Type", "application/octet-stream")])
        self._buffer.write(data)

    def create_form_file(self, fieldname: str, file: BinaryIO) -> None:
        """Add an open file as a file part, named after the file's base name."""
        self._write_file(fieldname, file.read(), os.path.basename(getattr(file, "name", "")))

    def create_form_file_reader(self, fieldname: str, reader: Any, filename: str) -> None:
        """Add the contents of a readable object as a file part under ``filename``."""
        self._write_file(fieldname, reader.read(), os.path.basename(filename))

    def write_field(self, fieldname: str, value: str) -> None:
        """Add a plain text field."""
        self._start_part([("Content-Disposition", f'form-data; name="{_escape_quotes(fieldname)}"')])
        self._buffer.write(value.encode("utf-8"))

    def close(self) -> None:
        """Write the closing boundary; no parts can be added afterwards."""
        if self._closed:
            raise ValueError("multipart form is already closed")
        prefix = "\r\n--" if self._has_parts else "--"
        self._buffer.write(f"{prefix}{self.boundary}--\r\n".encode("utf-8"))
        self._closed = True

    def content_type(self) -> str:
        """The Content-Type header value for this form."""
        boundary = self.boundary
        if set(boundary) & _TSPECIALS:
            boundary = f'"{_escape_quotes(boundary)}"'
        return f"multipart/form-data; boundary={boundary}"

    def getvalue(self) -> bytes:
        """The body written so far."""
        return self._buffer.getvalue()


def _write(builder: Any, fieldname: str, value: str, what: str) -> None:
    try:
        builder.write_field(fieldname, value)
    except Exception as err:
        raise AudioFormError(f"writing {what}: {err}") from err


def audio_multipart_form(request: AudioRequest, builder: Any) -> None:
    """Write the audio file and the request parameters into ``builder`` and close it."""
    create_file_field(request, builder)
    _write(builder, "model", request.model, "model name")
    if request.prompt:
        _write(builder, "prompt", request.prompt, "prompt")
    if request.format:
        _write(builder, "response_format", str(_encode(request.format)), "format")
    if request.temperature != 0:
        _write(builder, "temperature", f"{request.temperature:.2f}", "temperature")
    if request.language:
        _write(builder, "language", request.language, "language")
    for granularity in request.timestamp_granularities:
        _write(builder, "timestamp_granularities[]", str(_encode(granularity)), "timestamp_granularities[]")
    builder.close()


def create_file_field(request: AudioRequest, builder: Any) -> None:
    """Add the "file" part, from the request's reader or else from the file at its path."""
    if request.reader is not None:
        try:
            builder.create_form_file_reader("file", request.reader, request.file_path)
        except Exception as err:
            raise AudioFormError(f"creating form using reader: {err}") from err
        return

    try:
        audio_file = open(request.file_path, "rb")
    except OSError as err:
        raise AudioFormError(f"opening audio file: {err}") from err
    with audio_file:
        try:
            builder.create_form_file("file", audio_file)
        except Exception as err:
            raise AudioFormError(f"creating form file: {err}") from err