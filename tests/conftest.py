"""Shared fixtures for agent-context tests.

No test downloads a tiktoken encoding: encoder contexts are built with a
fake loader whose encoder yields one token per whitespace-separated word.
"""

import asyncio
import os

import pytest

from agent_context.config import set_config
from agent_context.core.token_management import (
    EncoderContext,
    TokenCounter,
    reset_default_encoder_context,
)


class FakeEncoding:
    """Stands in for a tiktoken Encoding: one token per word."""

    name = "fake_words"

    def encode(self, text, **kwargs):
        return text.split()


def _load_fake_encoding(name):
    return FakeEncoding()


@pytest.fixture
def fake_loader():
    """Loader returning a fresh word-splitting fake encoding."""
    return _load_fake_encoding


@pytest.fixture(autouse=True)
def _reset_globals():
    """Keep global config and the shared encoder context test-local."""
    set_config(None)
    reset_default_encoder_context()
    yield
    set_config(None)
    reset_default_encoder_context()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run without AGENT_CONTEXT_* variables or config files."""
    for key in list(os.environ):
        if key.startswith("AGENT_CONTEXT_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "home")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def encoder_context():
    """An encoder context that has not been warmed up."""
    return EncoderContext("fake_words", loader=_load_fake_encoding)


@pytest.fixture
def token_counter(encoder_context):
    """A ready counter over the fake encoder (3 tokens framing per message)."""
    asyncio.run(encoder_context.warm_up())
    return TokenCounter(encoder_context)
