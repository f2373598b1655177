import json

import pytest

from llmschema.chat import FinishReason, Usage
from llmschema.chat_stream import (
    ChatCompletionStreamChoiceDelta,
    ChatCompletionStreamChoiceLogprobs,
    ChatCompletionStreamResponse,
    ChatCompletionTokenLogprob,
    ChatCompletionTokenLogprobTopLogprob,
)

BASIC_CHUNKS = [
    '{"id":"1","object":"completion","created":1598069254,"model":"gpt-3.5-turbo",'
    '"system_fingerprint": "fp_d9767fc5b9","choices":[{"index":0,"delta":{"content":"response1"},'
    '"finish_reason":"max_tokens"}]}',
    '{"id":"2","object":"completion","created":1598069255,"model":"gpt-3.5-turbo",'
    '"system_fingerprint": "fp_d9767fc5b9","choices":[{"index":0,"delta":{"content":"response2"},'
    '"finish_reason":"max_tokens"}]}',
]

REFUSAL_CHUNKS = [
    '{"id":"1","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{"role":"assistant","content":"",'
    '"refusal":null},"finish_reason":null}]}',
    '{"id":"2","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{"refusal":"Hello"},"finish_reason":null}]}',
    '{"id":"3","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{"refusal":" World"},"finish_reason":null}]}',
    '{"id":"4","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{},"finish_reason":"stop"}]}',
]

LOGPROB_CHUNKS = [
    '{"id":"1","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{"role":"assistant","content":"",'
    '"refusal":null},"logprobs":{"content":[],"refusal":null},"finish_reason":null}]}',
    '{"id":"2","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{"content":"Hello"},"logprobs":'
    '{"content":[{"token":"Hello","logprob":-0.000020458236,"bytes":[72,101,108,108,111],"top_logprobs":[]}],'
    '"refusal":null},"finish_reason":null}]}',
    '{"id":"3","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{"content":" World"},"logprobs":'
    '{"content":[{"token":" World","logprob":-0.00055303273,"bytes":[32,87,111,114,108,100],"top_logprobs":[]}],'
    '"refusal":null},"finish_reason":null}]}',
    '{"id":"4","object":"chat.completion.chunk","created":1729585728,"model":"gpt-4o-mini-2024-07-18",'
    '"system_fingerprint":"fp_d9767fc5b9","choices":[{"index":0,"delta":{},"logprobs":null,"finish_reason":"stop"}]}',
]

USAGE_CHUNKS = [
    '{"id":"1","object":"completion","created":1598069254,"model":"gpt-3.5-turbo",'
    '"system_fingerprint": "fp_d9767fc5b9","choices":[{"index":0,"delta":{"content":"response1"},'
    '"finish_reason":"max_tokens"}],"usage":null}',
    '{"id":"3","object":"completion","created":1598069256,"model":"gpt-3.5-turbo",'
    '"system_fingerprint": "fp_d9767fc5b9","choices":[],'
    '"usage":{"prompt_tokens":1,"completion_tokens":1,"total_tokens":2}}',
]


def test_basic_chunks_decode():
    first, second = (ChatCompletionStreamResponse.from_json(c) for c in BASIC_CHUNKS)
    assert (first.id, first.object, first.created, first.model) == ("1", "completion", 1598069254, "gpt-3.5-turbo")
    assert first.system_fingerprint == "fp_d9767fc5b9"
    assert len(first.choices) == 1
    assert first.choices[0].index == 0
    assert first.choices[0].delta.content == "response1"
    assert first.choices[0].finish_reason == "max_tokens"
    assert second.id == "2"
    assert second.created == 1598069255
    assert second.choices[0].delta.content == "response2"
    assert first.usage is None


def test_refusal_chunks_decode():
    chunks = [ChatCompletionStreamResponse.from_json(c) for c in REFUSAL_CHUNKS]
    assert [c.id for c in chunks] == ["1", "2", "3", "4"]
    assert all(c.model == "gpt-4o-mini-2024-07-18" for c in chunks)
    assert chunks[0].choices[0].delta.role == "assistant"
    assert chunks[0].choices[0].delta.refusal == ""
    assert chunks[0].choices[0].finish_reason == ""
    assert [c.choices[0].delta.refusal for c in chunks[1:3]] == ["Hello", " World"]
    assert chunks[3].choices[0].finish_reason == FinishReason.STOP
    assert chunks[3].choices[0].delta == ChatCompletionStreamChoiceDelta()


def test_logprob_chunks_decode():
    chunks = [ChatCompletionStreamResponse.from_json(c) for c in LOGPROB_CHUNKS]
    assert chunks[0].choices[0].logprobs == ChatCompletionStreamChoiceLogprobs(content=[], refusal=[])
    assert chunks[1].choices[0].logprobs.content == [
        ChatCompletionTokenLogprob(
            token="Hello",
            logprob=-0.000020458236,
            bytes=[72, 101, 108, 108, 111],
            top_logprobs=[],
        )
    ]
    assert chunks[2].choices[0].logprobs.content[0].token == " World"
    assert chunks[2].choices[0].logprobs.content[0].logprob == -0.00055303273
    assert chunks[2].choices[0].logprobs.content[0].bytes == [32, 87, 111, 114, 108, 100]
    assert chunks[3].choices[0].logprobs is None
    assert chunks[3].choices[0].finish_reason == "stop"


def test_usage_chunk_decodes():
    first, last = (ChatCompletionStreamResponse.from_json(c) for c in USAGE_CHUNKS)
    assert first.usage is None
    assert last.choices == []
    assert last.usage == Usage(prompt_tokens=1, completion_tokens=1, total_tokens=2)


def test_reasoning_model_chunk():
    text = (
        '{"id":"1","object":"chat.completion.chunk","created":1729585728,"model":"o3-mini-2025-01-31",'
        '"system_fingerprint":"fp_mini","choices":[{"index":0,"delta":{"role":"assistant","content":""},'
        '"finish_reason":null}]}'
    )
    chunk = ChatCompletionStreamResponse.from_json(text.encode())
    assert chunk.model == "o3-mini-2025-01-31"
    assert chunk.system_fingerprint == "fp_mini"
    assert chunk.choices[0].delta.role == "assistant"


def test_top_logprob_decode():
    item = ChatCompletionTokenLogprobTopLogprob.from_dict({"token": "a", "bytes": [97], "logprob": -1.5})
    assert item == ChatCompletionTokenLogprobTopLogprob(token="a", bytes=[97], logprob=-1.5)


def test_delta_to_dict_omits_empty_fields():
    delta = ChatCompletionStreamChoiceDelta.from_dict({"role": "assistant", "content": "", "refusal": None})
    assert delta.to_dict() == {"role": "assistant"}
    round_trip = ChatCompletionStreamChoiceDelta.from_dict(json.loads(json.dumps(delta.to_dict())))
    assert round_trip == delta


def test_from_json_rejects_non_object():
    with pytest.raises(ValueError):
        ChatCompletionStreamResponse.from_json("[1, 2]")


def test_from_json_rejects_invalid_json():
    with pytest.raises(ValueError):
        ChatCompletionStreamResponse.from_json("{")


def test_bad_bytes_field_rejected():
    with pytest.raises(ValueError):
        ChatCompletionTokenLogprob.from_dict({"token": "x", "bytes": ["a"]})