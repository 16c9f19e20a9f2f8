import httpx
import pytest

from config import LlmRoute
from generation.validation import FeedbackPayload, QuestionBatch
from llm_gateway import LlmGatewayError, call
from llm_gateway.llm_gateway import _strip_code_fences

from conftest import FakeHttpClient, FakeResponse, completion


def _route() -> LlmRoute:
    return LlmRoute(
        name="test",
        base_url="http://example.com/v1",
        endpoint="/chat/completions",
        model="test-model",
        timeout_s=1.0,
        api_key="secret",
        options={"temperature": 0.3, "max_tokens": 50},
    )


def test_call_posts_chat_payload_and_parses_content():
    client = FakeHttpClient(completion('{"content_score": 8}'))
    result = call("Score this", FeedbackPayload, cfg=_route(), system_prompt="Be strict", client=client)

    assert result.content_score == 8
    sent = client.calls[0]
    assert sent["url"] == "http://example.com/v1/chat/completions"
    assert sent["headers"]["Authorization"] == "Bearer secret"
    assert sent["json"]["model"] == "test-model"
    assert sent["json"]["temperature"] == 0.3
    assert [m["role"] for m in sent["json"]["messages"]] == ["system", "user"]
    assert sent["timeout"] == 1.0


def test_code_fenced_bare_array_is_accepted():
    content = '```json\n[{"question": "A"}]\n```'
    batch = call("Generate", QuestionBatch, cfg=_route(), client=FakeHttpClient(completion(content)))
    assert batch.questions == [{"question": "A"}]


@pytest.mark.parametrize(
    "reply",
    [
        FakeResponse(500, {"error": "boom"}),
        FakeResponse(200, ValueError("not json")),
        FakeResponse(200, {"choices": []}),
        completion("definitely not json"),
        httpx.ReadTimeout("timed out"),
    ],
)
def test_failures_surface_as_gateway_error(reply):
    with pytest.raises(LlmGatewayError):
        call("Generate", QuestionBatch, cfg=_route(), client=FakeHttpClient(reply))


def test_single_attempt_only():
    client = FakeHttpClient(FakeResponse(503, {}), completion('{"questions": []}'))
    with pytest.raises(LlmGatewayError):
        call("Generate", QuestionBatch, cfg=_route(), client=client)
    assert len(client.calls) == 1


def test_strip_code_fences():
    assert _strip_code_fences("```\n{\"a\": 1}\n```") == '{"a": 1}'
    assert _strip_code_fences('{"a": 1}') == '{"a": 1}'
