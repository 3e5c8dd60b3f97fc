"""Shared fixtures for CLI command tests."""

import json

import pytest
import tiktoken
from click.testing import CliRunner


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def cli_env(clean_env, monkeypatch, fake_loader):
    """Isolate config lookup and replace the tiktoken download with a fake."""
    monkeypatch.setattr(tiktoken, "get_encoding", fake_loader)
    return clean_env


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document to a file and return its path as a string."""

    def _write(data, name="input.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return str(path)

    return _write


@pytest.fixture
def conversation():
    return [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "first question here"},
        {"role": "assistant", "content": "first answer"},
        {"role": "user", "content": "second question"},
    ]
