"""Shared fixtures: business factories and fake LLM providers."""

import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from relationship_mapper.config import AnalyzerConfig
from relationship_mapper.models import BusinessRecord, RelationshipEdge


def make_business(id, name=None, industry='Technology', **kwargs):
    return BusinessRecord(id=id, name=name or f"Biz {id}", industry=industry, **kwargs)


def make_edge(from_id, to_id, type='vendor', confidence=70, **kwargs):
    return RelationshipEdge(from_id=from_id, to_id=to_id, type=type, confidence=confidence, **kwargs)


def status_error(status_code: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request)
    return openai.APIStatusError(f"HTTP {status_code}", response=response, body=None)


def relationship(from_='Business A', to='Business B', type='vendor', confidence=75, **kwargs):
    rel = {'from': from_, 'to': to, 'type': type, 'confidence': confidence}
    rel.update(kwargs)
    return rel


def ai_reply(*relationships, mutual_benefit=True) -> str:
    return json.dumps({'relationships': list(relationships), 'mutual_benefit': mutual_benefit})


class FakeCompletions:
    """Stands in for `client.chat.completions`; replays queued replies or raises queued errors."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        message = SimpleNamespace(content=outcome)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_openai(outcomes):
    completions = FakeCompletions(outcomes)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class ScriptedClient:
    """Stands in for LLMClient in analyzer tests: one reply (or exception) per call."""

    def __init__(self, replies=None, default=None):
        self.replies = list(replies or [])
        self.default = default if default is not None else ai_reply()
        self.prompts = []

    def complete_json(self, system_prompt, user_prompt):
        self.prompts.append(user_prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def config():
    return AnalyzerConfig(api_key='test-key', max_retries=3, rate_limit_delay_ms=0)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append
