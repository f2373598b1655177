# llmschema

Plain-Python data models for OpenAI-compatible HTTP APIs. The package uses only
the standard library. It builds request bodies, multipart form data, URL paths
and query strings, and it decodes response payloads for:

- chat completions (`llmschema.chat`)
- streamed chat completion chunks (`llmschema.chat_stream`)
- assistants and assistant files (`llmschema.assistant`)
- audio transcription and translation (`llmschema.audio`)
- batch jobs and batch input files (`llmschema.batch`)

Every model is a dataclass. Request models have `to_dict()` and, where a JSON
body is sent, `to_json()`. Response models have a `from_dict()` classmethod
that takes decoded JSON. If a field has the wrong JSON type, decoding raises
`ValueError`.

## Installation

```
pip install llmschema
```

## Chat completions

```python
from llmschema.chat import (
    ChatCompletionMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessageRole,
)

request = ChatCompletionRequest(
    model="gpt-3.5-turbo",
    messages=[ChatCompletionMessage(role=ChatMessageRole.USER, content="Hello!")],
    max_tokens=5,
)
body = request.to_json()
# {"model":"gpt-3.5-turbo","messages":[{"role":"user","content":"Hello!"}],"max_tokens":5}

response = ChatCompletionResponse.from_dict(payload)   # payload: decoded JSON
print(response.choices[0].message.content)
```

`ChatCompletionRequest.to_dict()` always writes `model` and `messages`. It writes
`messages` as `null` when you leave it unset. Other fields appear only when they
are not zero or empty. `response_format`, `seed`, `function_call`, `tool_choice`,
`stream_options` and `parallel_tool_calls` are the exception: they are left out
only when they are `None`. `ChatCompletionRequest.from_dict()` reads a request
body back.

A message carries either `content` (text) or `multi_content` (a list of
`ChatMessagePart`, text or `ChatMessageImageURL`), never both. If you serialise a
message with both, it raises `ContentFieldsMisusedError`. When the message is
decoded, `content` is read as text if it is a string and as parts if it is a
list. `messages_to_json()` encodes a list of messages and `messages_from_json()`
decodes one.

Tools and functions are described with `Tool`, `FunctionDefinition`,
`ToolChoice` and `ToolCall`. Structured output is requested with
`ChatCompletionResponseFormat` and `ChatCompletionResponseFormatJSONSchema`.
`finish_reason_json()` and `FinishReason.to_json()` give `null` for an empty or
`"null"` finish reason and a quoted string otherwise.

## Streaming

Take the JSON payload of each `data:` line of a server-sent event stream and pass
it to `ChatCompletionStreamResponse.from_json()`. You get back one typed chunk.
Its `choices` hold a `ChatCompletionStreamChoiceDelta` with the new content,
refusal text, role or tool calls, and may also hold log probabilities. `usage` is
set only on a chunk that reports usage.

## Assistants

`AssistantRequest.to_json()` treats `tools` in three ways:

- `None` leaves `tools` out, so the assistant's tools stay as they are;
- an empty list sends `[]`, which removes all of them;
- a populated list sends the tools themselves, which replace the existing ones.

`Assistant`, `AssistantsList`, `AssistantDeleteResponse`, `AssistantFile` and
`AssistantFilesList` decode the responses. The helpers below build the endpoint
paths:

```python
from llmschema.assistant import assistant_files_path, assistant_path, list_query

assistant_path("asst_abc123")                    # "/assistants/asst_abc123"
assistant_files_path("asst_abc123", "file-1")    # "/assistants/asst_abc123/files/file-1"
list_query(limit=20, order="desc")               # "?limit=20&order=desc"
```

`list_query()` sorts its parameters by name. It returns an empty string when none
is given.

## Audio

```python
from llmschema.audio import WHISPER_1, AudioRequest, MultipartFormBuilder, audio_multipart_form

request = AudioRequest(model=WHISPER_1, file_path="recording.mp3")
builder = MultipartFormBuilder()
audio_multipart_form(request, builder)
body = builder.getvalue()
content_type = builder.content_type()
```

The file part is read from `request.reader` when one is given, and it is named
after `file_path`. Without a reader, the file at `file_path` is read. The form
also gets `model`, plus `prompt`, `response_format`, `temperature` (two
decimals), `language` and each `timestamp_granularities[]` entry when they are
set. The form is then closed. Any failure along the way raises `AudioFormError`.

`AudioRequest.has_json_response()` tells you which decoder to use:
`AudioResponse.from_dict()` for the JSON formats, and
`AudioResponse.from_text()` for `text`, `srt` and `vtt`.

## Batches

```python
from llmschema.batch import UploadBatchFileRequest

upload = UploadBatchFileRequest()
upload.add_chat_completion("req-1", request)
jsonl = upload.marshal_jsonl()   # bytes: one JSON object per line, no trailing newline
```

`add_completion()` and `add_embedding()` take a mapping of the body's JSON fields,
or any object with `to_dict()`. The upload file name defaults to
`"@batchinput.jsonl"`.

`CreateBatchRequest` sets the completion window to `"24h"` when it is empty.
`CreateBatchWithUploadFileRequest.create_batch_request(input_file_id)` makes that
request once its lines have been uploaded. `Batch` and `ListBatchResponse` decode
batch jobs. `list_batch_query()` builds the query string for listing them.

## What the package does not do

The package sends no requests. It has no HTTP client, no API key or
authentication handling, no base-URL or deployment configuration, no file upload
call and no reader for a live event stream. It also does not check whether a
model suits an endpoint, and it does not enforce the restrictions of reasoning
models. Pair the models with the HTTP client of your choice.

## Running the tests

```
pip install -e ".[test]"
pytest
```