"""Tests for the retry policy and the completion client."""

from types import SimpleNamespace

import httpx
import pytest

from conftest import fake_openai, status_error
from relationship_mapper import llm_client
from relationship_mapper.exceptions import LLMRequestError, RetryExhaustedError
from relationship_mapper.llm_client import (
    ErrorClass,
    LLMClient,
    classify_status,
    retry_decision,
)


@pytest.mark.parametrize("status,expected", [
    (429, ErrorClass.RATE_LIMITED),
    (500, ErrorClass.SERVER_ERROR),
    (503, ErrorClass.SERVER_ERROR),
    (400, ErrorClass.CLIENT_ERROR),
    (401, ErrorClass.CLIENT_ERROR),
    (None, ErrorClass.CLIENT_ERROR),
])
def test_classify_status(status, expected):
    assert classify_status(status) is expected


def test_rate_limit_backs_off_exponentially():
    assert retry_decision(ErrorClass.RATE_LIMITED, 1, 3).delay_seconds == 2
    assert retry_decision(ErrorClass.RATE_LIMITED, 2, 3).delay_seconds == 4
    assert retry_decision(ErrorClass.RATE_LIMITED, 2, 3).retry is True
    assert retry_decision(ErrorClass.RATE_LIMITED, 3, 3).retry is False


def test_server_error_waits_one_second():
    decision = retry_decision(ErrorClass.SERVER_ERROR, 1, 3)
    assert decision.retry is True
    assert decision.delay_seconds == 1
    assert retry_decision(ErrorClass.SERVER_ERROR, 3, 3).retry is False


def test_client_error_never_retries():
    assert retry_decision(ErrorClass.CLIENT_ERROR, 1, 3).retry is False


def test_complete_json_sends_json_mode_request(config, fake_sleep):
    provider = fake_openai(['{"relationships": []}'])
    client = LLMClient(config, client=provider, sleep=fake_sleep)

    text = client.complete_json("system", "user")

    assert text == '{"relationships": []}'
    call = provider.chat.completions.calls[0]
    assert call['response_format'] == {"type": "json_object"}
    assert call['model'] == config.model
    assert call['max_tokens'] == config.max_tokens
    assert [m['role'] for m in call['messages']] == ['system', 'user']


def test_retries_rate_limit_then_succeeds(config, fake_sleep, sleeps):
    provider = fake_openai([status_error(429), status_error(429), 'ok'])
    client = LLMClient(config, client=provider, sleep=fake_sleep)

    assert client.complete_json("s", "u") == 'ok'
    assert sleeps == [2.0, 4.0]


def test_retries_server_error_with_fixed_delay(config, fake_sleep, sleeps):
    provider = fake_openai([status_error(502), 'ok'])
    client = LLMClient(config, client=provider, sleep=fake_sleep)

    assert client.complete_json("s", "u") == 'ok'
    assert sleeps == [1.0]


def test_client_error_fails_immediately(config, fake_sleep, sleeps):
    provider = fake_openai([status_error(400), 'never reached'])
    client = LLMClient(config, client=provider, sleep=fake_sleep)

    with pytest.raises(LLMRequestError) as exc_info:
        client.complete_json("s", "u")

    assert exc_info.value.status_code == 400
    assert not isinstance(exc_info.value, RetryExhaustedError)
    assert len(provider.chat.completions.calls) == 1
    assert sleeps == []


def test_exhausting_retries_raises(config, fake_sleep):
    provider = fake_openai([status_error(500)] * 3)
    client = LLMClient(config, client=provider, sleep=fake_sleep)

    with pytest.raises(RetryExhaustedError):
        client.complete_json("s", "u")
    assert len(provider.chat.completions.calls) == config.max_retries


def test_anthropic_provider_uses_messages_api(config, fake_sleep):
    calls = []

    def create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(text='{"relationships": []}')])

    config.provider = 'anthropic'
    provider = SimpleNamespace(messages=SimpleNamespace(create=create))
    client = LLMClient(config, client=provider, sleep=fake_sleep)

    assert client.complete_json("sys", "user") == '{"relationships": []}'
    assert calls[0]['system'] == 'sys'
    assert calls[0]['messages'] == [{"role": "user", "content": "user"}]


@pytest.fixture
def mock_transport(monkeypatch):
    """Route the real SDK clients through an httpx mock that always answers with `status`."""
    state = {'status': 429, 'requests': []}

    def handler(request):
        state['requests'].append(request)
        return httpx.Response(state['status'], json={"error": {"message": "unavailable"}})

    transport = httpx.MockTransport(handler)
    real_openai, real_anthropic = llm_client.OpenAI, llm_client.Anthropic
    monkeypatch.setattr(
        llm_client, 'OpenAI',
        lambda **kwargs: real_openai(http_client=httpx.Client(transport=transport), **kwargs),
    )
    monkeypatch.setattr(
        llm_client, 'Anthropic',
        lambda **kwargs: real_anthropic(http_client=httpx.Client(transport=transport), **kwargs),
    )
    return state


def test_openai_sdk_sends_one_request_per_attempt(config, fake_sleep, sleeps, mock_transport):
    client = LLMClient(config, sleep=fake_sleep)

    with pytest.raises(RetryExhaustedError):
        client.complete_json("s", "u")

    assert len(mock_transport['requests']) == config.max_retries
    assert sleeps == [2.0, 4.0]


def test_anthropic_sdk_sends_one_request_per_attempt(config, fake_sleep, sleeps, mock_transport):
    mock_transport['status'] = 500
    config.provider = 'anthropic'
    config.model = 'claude-3-5-sonnet-latest'
    client = LLMClient(config, sleep=fake_sleep)

    with pytest.raises(RetryExhaustedError) as exc_info:
        client.complete_json("s", "u")

    assert exc_info.value.status_code == 500
    assert len(mock_transport['requests']) == config.max_retries
    assert sleeps == [1.0, 1.0]


def test_sdk_client_error_is_not_retried(config, fake_sleep, sleeps, mock_transport):
    mock_transport['status'] = 401
    client = LLMClient(config, sleep=fake_sleep)

    with pytest.raises(LLMRequestError) as exc_info:
        client.complete_json("s", "u")

    assert exc_info.value.status_code == 401
    assert len(mock_transport['requests']) == 1
    assert sleeps == []
