"""Assistant models, their JSON encoding and the paths and queries of the assistant endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote, urlencode

from llmschema.chat import (
    FunctionDefinition,
    _dumps,
    _encode,
    _enum_or_str,
    _int,
    _list,
    _mapping,
    _str,
)

ASSISTANTS_SUFFIX = "/assistants"
ASSISTANTS_FILES_SUFFIX = "/files"


def _bool(data: Any, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {type(value).__name__}")
    return value


class AssistantToolType(str, Enum):
    CODE_INTERPRETER = "code_interpreter"
    RETRIEVAL = "retrieval"
    FUNCTION = "function"
    FILE_SEARCH = "file_search"


@dataclass
class AssistantTool:
    """A tool enabled on an assistant."""

    type: str = ""
    function: FunctionDefinition | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": _encode(self.type)}
        if self.function is not None:
            result["function"] = self.function.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: Any) -> AssistantTool:
        data = _mapping(data, "assistant tool")
        function = data.get("function")
        return cls(
            type=_enum_or_str(AssistantToolType, _str(data, "type")),
            function=None if function is None else FunctionDefinition.from_dict(function),
        )


@dataclass
class AssistantToolFileSearch:
    vector_store_ids: list[str] = field(default_factory=list)


@dataclass
class AssistantToolCodeInterpreter:
    file_ids: list[str] = field(default_factory=list)


@dataclass
class AssistantToolResource:
    """Resources made available to an assistant's tools."""

    file_search: AssistantToolFileSearch | None = None
    code_interpreter: AssistantToolCodeInterpreter | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.file_search is not None:
            result["file_search"] = {"vector_store_ids": list(self.file_search.vector_store_ids)}
        if self.code_interpreter is not None:
            result["code_interpreter"] = {"file_ids": list(self.code_interpreter.file_ids)}
        return result

    @classmethod
    def from_dict(cls, data: Any) -> AssistantToolResource:
        data = _mapping(data, "assistant tool resource")
        file_search = data.get("file_search")
        code_interpreter = data.get("code_interpreter")
        return cls(
            file_search=None
            if file_search is None
            else AssistantToolFileSearch(
                vector_store_ids=list(_list(_mapping(file_search, "file search"), "vector_store_ids"))
            ),
            code_interpreter=None
            if code_interpreter is None
            else AssistantToolCodeInterpreter(
                file_ids=list(_list(_mapping(code_interpreter, "code interpreter"), "file_ids"))
            ),
        )


def _opt_str(data: Any, key: str) -> str | None:
    return None if data.get(key) is None else _str(data, key)


def _opt_float(data: Any, key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field {key!r} must be a number, got {type(value).__name__}")
    return float(value)


def _tools_from(data: Any) -> list[AssistantTool] | None:
    if data.get("tools") is None:
        return None
    return [AssistantTool.from_dict(tool) for tool in _list(data, "tools")]


@dataclass
class Assistant:
    """An assistant as returned by the API. ``tools`` is None when the API sent none."""

    id: str = ""
    object: str = ""
    created_at: int = 0
    name: str | None = None
    description: str | None = None
    model: str = ""
    instructions: str | None = None
    tools: list[AssistantTool] | None = None
    tool_resources: AssistantToolResource | None = None
    file_ids: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    temperature: float | None = None
    top_p: float | None = None
    response_format: Any = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"id": self.id, "object": self.object, "created_at": self.created_at}
        if self.name is not None:
            result["name"] = self.name
        if self.description is not None:
            result["description"] = self.description
        result["model"] = self.model
        if self.instructions is not None:
            result["instructions"] = self.instructions
        result["tools"] = None if self.tools is None else [tool.to_dict() for tool in self.tools]
        if self.tool_resources is not None:
            result["tool_resources"] = self.tool_resources.to_dict()
        if self.file_ids:
            result["file_ids"] = list(self.file_ids)
        if self.metadata:
            result["metadata"] = _encode(self.metadata)
        if self.temperature is not None:
            result["temperature"] = self.temperature
        if self.top_p is not None:
            result["top_p"] = self.top_p
        if self.response_format is not None:
            result["response_format"] = _encode(self.response_format)
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Assistant:
        data = _mapping(data, "assistant")
        tool_resources = data.get("tool_resources")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created_at=_int(data, "created_at"),
            name=_opt_str(data, "name"),
            description=_opt_str(data, "description"),
            model=_str(data, "model"),
            instructions=_opt_str(data, "instructions"),
            tools=_tools_from(data),
            tool_resources=None if tool_resources is None else AssistantToolResource.from_dict(tool_resources),
            file_ids=list(_list(data, "file_ids")),
            metadata=dict(_mapping(data.get("metadata"), "metadata")),
            temperature=_opt_float(data, "temperature"),
            top_p=_opt_float(data, "top_p"),
            response_format=data.get("response_format"),
        )


@dataclass
class AssistantRequest:
    """Parameters for creating or modifying an assistant.

    ``tools`` set to None leaves the assistant's tools unchanged, an empty list
    removes them all, and a populated list replaces them.
    """

    model: str = ""
    name: str | None = None
    description: str | None = None
    instructions: str | None = None
    tools: list[AssistantTool] | None = None
    file_ids: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    tool_resources: AssistantToolResource | None = None
    response_format: Any = None
    temperature: float | None = None
    top_p: float | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.tools is not None:
            result["tools"] = [tool.to_dict() for tool in self.tools]
        result["model"] = self.model
        if self.name is not None:
            result["name"] = self.name
        if self.description is not None:
            result["description"] = self.description
        if self.instructions is not None:
            result["instructions"] = self.instructions
        if self.file_ids:
            result["file_ids"] = list(self.file_ids)
        if self.metadata:
            result["metadata"] = _encode(self.metadata)
        if self.tool_resources is not None:
            result["tool_resources"] = self.tool_resources.to_dict()
        if self.response_format is not None:
            result["response_format"] = _encode(self.response_format)
        if self.temperature is not None:
            result["temperature"] = self.temperature
        if self.top_p is not None:
            result["top_p"] = self.top_p
        return result

    def to_json(self) -> str:
        return _dumps(self.to_dict())


@dataclass
class AssistantsList:
    """A page of assistants."""

    assistants: list[Assistant] = field(default_factory=list)
    last_id: str | None = None
    first_id: str | None = None
    has_more: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> AssistantsList:
        data = _mapping(data, "assistants list")
        return cls(
            assistants=[Assistant.from_dict(item) for item in _list(data, "data")],
            last_id=_opt_str(data, "last_id"),
            first_id=_opt_str(data, "first_id"),
            has_more=_bool(data, "has_more"),
        )


@dataclass
class AssistantDeleteResponse:
    id: str = ""
    object: str = ""
    deleted: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> AssistantDeleteResponse:
        data = _mapping(data, "assistant delete response")
        return cls(id=_str(data, "id"), object=_str(data, "object"), deleted=_bool(data, "deleted"))


@dataclass
class AssistantFile:
    """A file attached to an assistant."""

    id: str = ""
    object: str = ""
    created_at: int = 0
    assistant_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> AssistantFile:
        data = _mapping(data, "assistant file")
        return cls(
            id=_str(data, "id"),
            object=_str(data, "object"),
            created_at=_int(data, "created_at"),
            assistant_id=_str(data, "assistant_id"),
        )


@dataclass
class AssistantFileRequest:
    file_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"file_id": self.file_id}


@dataclass
class AssistantFilesList:
    assistant_files: list[AssistantFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> AssistantFilesList:
        data = _mapping(data, "assistant files list")
        return cls(assistant_files=[AssistantFile.from_dict(item) for item in _list(data, "data")])


def list_query(
    limit: int | None = None,
    order: str | None = None,
    after: str | None = None,
    before: str | None = None,
) -> str:
    """The query string for a list call: empty, or ``?`` and the parameters sorted by name."""
    params = {"limit": None if limit is None else str(limit), "order": order, "after": after, "before": before}
    present = sorted((key, value) for key, value in params.items() if value is not None)
    return "?" + urlencode(present) if present else ""


def assistant_path(assistant_id: str) -> str:
    """The path of one assistant."""
    return f"{ASSISTANTS_SUFFIX}/{quote(assistant_id, safe='')}"


def assistant_files_path(assistant_id: str, file_id: str | None = None) -> str:
    """The path of an assistant's files, or of one of them when ``file_id`` is given."""
    path = assistant_path(assistant_id) + ASSISTANTS_FILES_SUFFIX
    if file_id is not None:
        path += f"/{quote(file_id, safe='')}"
    return path