"""
Pytest configuration and shared fixtures.
"""
import os
import sys
import time

import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from lingovault.ir import WordItem  # noqa: E402


@pytest.fixture
def sample_inputs():
    """Pasted inputs in the shapes users actually paste."""
    return {
        "csv": "english,chinese,example\ncat,猫,A cat sat.",
        "csv_quoted": 'english,chinese\n"hello, ""world""" ,你好',
        "tsv": "english\tchinese\nrun\t跑\nwalk\t走",
        "text": "run\tv.\t跑",
        "json": '[{"w":"apple","m":"苹果"}]',
        "jsonl": '{"w": "apple", "m": "苹果"}\n{"w": "pear", "m": "梨"}\n{"w": "plum", "m": ',
    }


@pytest.fixture
def make_word():
    """Factory for WordItem with a stable created_at."""
    def _make(english, chinese="", **kwargs):
        kwargs.setdefault("created_at", 1_700_000_000_000)
        return WordItem(english=english, chinese=chinese, **kwargs)
    return _make


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Skip tenacity's exponential back-off sleeps."""
    monkeypatch.setattr(time, "sleep", lambda _seconds: None)


@pytest.fixture
def mock_openai_response():
    """Mock OpenAI API response structure."""
    class MockUsage:
        def __init__(self):
            self.prompt_tokens = 100
            self.completion_tokens = 50
            self.total_tokens = 150

    class MockMessage:
        def __init__(self, content):
            self.content = content

    class MockChoice:
        def __init__(self, content):
            self.message = MockMessage(content)

    class MockResponse:
        def __init__(self, content='{"result": "success"}'):
            self.choices = [MockChoice(content)]
            self.usage = MockUsage()

    return MockResponse


@pytest.fixture
def missing_api_key(monkeypatch):
    """Blank OPENAI_API_KEY with the settings and client singletons cleared."""
    import lingovault.config as config_module
    from lingovault.llm import reset_llm_client

    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setattr(config_module, "_settings_instance", None)
    reset_llm_client()
    yield
    reset_llm_client()
