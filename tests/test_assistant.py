import json

import pytest

from llmschema.assistant import (
    Assistant,
    AssistantDeleteResponse,
    AssistantFile,
    AssistantFileRequest,
    AssistantFilesList,
    AssistantRequest,
    AssistantsList,
    AssistantTool,
    AssistantToolCodeInterpreter,
    AssistantToolFileSearch,
    AssistantToolResource,
    AssistantToolType,
    assistant_files_path,
    assistant_path,
    list_query,
)

ASSISTANT_ID = "asst_abc123"
ASSISTANT_NAME = "Ambrogio"
ASSISTANT_DESCRIPTION = "Ambrogio is a friendly assistant."
ASSISTANT_INSTRUCTIONS = (
    "You are a personal math tutor. \n"
    "When asked a question, write and run Python code to answer the question."
)
FILE_ID = "file-wB6RM6wHdA49HfS2DJ9fEyrH"
MODEL = "gpt-4-turbo-preview"


def _echo(request: AssistantRequest) -> Assistant:
    """Mimic the server: decode the request and answer with an assistant built from it."""
    sent = json.loads(request.to_json())
    reply = {
        "id": ASSISTANT_ID,
        "object": "assistant",
        "created_at": 1234567890,
        "name": sent.get("name"),
        "model": sent.get("model"),
        "description": sent.get("description"),
        "instructions": sent.get("instructions"),
        "tools": sent.get("tools"),
    }
    return Assistant.from_dict(json.loads(json.dumps(reply)))


def _request(**kwargs) -> AssistantRequest:
    return AssistantRequest(
        model=MODEL,
        name=ASSISTANT_NAME,
        description=ASSISTANT_DESCRIPTION,
        instructions=ASSISTANT_INSTRUCTIONS,
        **kwargs,
    )


def test_modify_without_tools_leaves_tools_none():
    request = _request()
    assert "tools" not in request.to_dict()
    assistant = _echo(request)
    assert assistant.tools is None
    assert assistant.name == ASSISTANT_NAME
    assert assistant.instructions == ASSISTANT_INSTRUCTIONS


def test_modify_with_tools():
    assistant = _echo(_request(tools=[AssistantTool(type=AssistantToolType.FUNCTION)]))
    assert assistant.tools is not None
    assert len(assistant.tools) == 1
    assert assistant.tools[0].type == AssistantToolType.FUNCTION


def test_modify_with_empty_tools_sends_empty_list():
    request = _request(tools=[])
    assert request.to_dict()["tools"] == []
    assistant = _echo(request)
    assert assistant.tools == []


def test_request_json_layout():
    request = AssistantRequest(model=MODEL, name=ASSISTANT_NAME, tools=[AssistantTool(type="function")])
    assert request.to_json() == '{"tools":[{"type":"function"}],"model":"gpt-4-turbo-preview","name":"Ambrogio"}'
    assert AssistantRequest(model=MODEL).to_json() == '{"model":"gpt-4-turbo-preview"}'


def test_assistant_round_trip():
    assistant = Assistant(
        id=ASSISTANT_ID,
        object="assistant",
        created_at=1234567890,
        name=ASSISTANT_NAME,
        model=MODEL,
        description=ASSISTANT_DESCRIPTION,
        instructions=ASSISTANT_INSTRUCTIONS,
        tool_resources=AssistantToolResource(
            file_search=AssistantToolFileSearch(vector_store_ids=["vs_1"]),
            code_interpreter=AssistantToolCodeInterpreter(file_ids=[FILE_ID]),
        ),
        metadata={"k": "v"},
        temperature=0.5,
    )
    encoded = assistant.to_dict()
    assert encoded["tools"] is None
    assert encoded["tool_resources"] == {
        "file_search": {"vector_store_ids": ["vs_1"]},
        "code_interpreter": {"file_ids": [FILE_ID]},
    }
    assert Assistant.from_dict(json.loads(json.dumps(encoded))) == assistant


def test_assistants_list_decode():
    data = {
        "data": [{"id": ASSISTANT_ID, "object": "assistant", "created_at": 1234567890, "model": MODEL}],
        "last_id": ASSISTANT_ID,
        "first_id": ASSISTANT_ID,
        "has_more": False,
    }
    listing = AssistantsList.from_dict(data)
    assert [a.id for a in listing.assistants] == [ASSISTANT_ID]
    assert listing.first_id == ASSISTANT_ID
    assert listing.last_id == ASSISTANT_ID
    assert listing.has_more is False


def test_delete_response_decode():
    text = '{"id": "asst_abc123", "object": "assistant.deleted", "deleted": true}'
    response = AssistantDeleteResponse.from_dict(json.loads(text))
    assert response == AssistantDeleteResponse(id=ASSISTANT_ID, object="assistant.deleted", deleted=True)


def test_assistant_file_and_list_decode():
    item = {"id": FILE_ID, "object": "assistant.file", "created_at": 1234567890, "assistant_id": ASSISTANT_ID}
    assert AssistantFile.from_dict(item) == AssistantFile(
        id=FILE_ID, object="assistant.file", created_at=1234567890, assistant_id=ASSISTANT_ID
    )
    files = AssistantFilesList.from_dict({"data": [item]})
    assert [f.id for f in files.assistant_files] == [FILE_ID]


def test_file_request_encode():
    assert AssistantFileRequest(file_id=FILE_ID).to_dict() == {"file_id": FILE_ID}


def test_list_query_sorted():
    assert list_query(20, "desc", "asst_abc122", "asst_abc124") == (
        "?after=asst_abc122&before=asst_abc124&limit=20&order=desc"
    )


def test_list_query_empty_and_partial():
    assert list_query(None, None, None, None) == ""
    assert list_query(limit=10) == "?limit=10"


def test_paths():
    assert assistant_path(ASSISTANT_ID) == "/assistants/asst_abc123"
    assert assistant_files_path(ASSISTANT_ID) == "/assistants/asst_abc123/files"
    assert assistant_files_path(ASSISTANT_ID, FILE_ID) == f"/assistants/asst_abc123/files/{FILE_ID}"


def test_bad_tools_rejected():
    with pytest.raises(ValueError):
        Assistant.from_dict({"tools": "nope"})