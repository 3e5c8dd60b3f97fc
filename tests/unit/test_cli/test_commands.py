"""Unit tests for the agent-context CLI commands."""

import json

from agent_context.cli.main import cli

# =============================================================================
# Test: count
# =============================================================================


class TestCountCommand:
    """Tests for per-message token counts."""

    def test_counts_each_message(self, cli_runner, write_json, conversation):
        """Test count reports per-message and total token costs."""
        result = cli_runner.invoke(cli, ["count", write_json(conversation)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["success"] is True
        assert [m["tokens"] for m in data["data"]["messages"]] == [5, 6, 5, 5]
        assert data["data"]["total_tokens"] == 21
        assert data["data"]["tokens_per_message"] == 3

    def test_accepts_messages_key(self, cli_runner, write_json, conversation):
        """Test count accepts an object with a messages key."""
        result = cli_runner.invoke(cli, ["count", write_json({"messages": conversation})])
        assert json.loads(result.output)["data"]["total_tokens"] == 21

    def test_invalid_json(self, cli_runner, tmp_path):
        """Test invalid JSON returns an INVALID_JSON error envelope."""
        path = tmp_path / "broken.json"
        path.write_text("[{")

        result = cli_runner.invoke(cli, ["count", str(path)])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["success"] is False
        assert data["data"]["error_code"] == "INVALID_JSON"

    def test_invalid_message(self, cli_runner, write_json):
        """Test an invalid message returns a validation error."""
        result = cli_runner.invoke(cli, ["count", write_json([{"role": "narrator", "content": "x"}])])

        assert result.exit_code == 1
        assert json.loads(result.output)["data"]["error_code"] == "VALIDATION_ERROR"

    def test_not_a_list(self, cli_runner, write_json):
        """Test a non-list document is rejected."""
        result = cli_runner.invoke(cli, ["count", write_json({"role": "user"})])
        assert result.exit_code == 1

    def test_config_file_sets_overhead(self, cli_runner, write_json, conversation, tmp_path):
        """Test --config file sets the per-message overhead."""
        config = tmp_path / "custom.toml"
        config.write_text("[context]\ntokens_per_message = 0\n")

        result = cli_runner.invoke(cli, ["--config", str(config), "count", write_json(conversation)])

        assert json.loads(result.output)["data"]["total_tokens"] == 9


# =============================================================================
# Test: prune
# =============================================================================


class TestPruneCommand:
    """Tests for budgeted selection from the command line."""

    def test_prunes_oldest(self, cli_runner, write_json, conversation):
        """Test prune drops the oldest messages first."""
        result = cli_runner.invoke(cli, ["prune", write_json(conversation), "--max-tokens", "11"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)["data"]
        assert data["retained"] == 2
        assert data["pruned"] == 2
        assert data["remaining_context_tokens"] == 1
        assert data["context"][0] == {"role": "assistant", "content": "first answer"}

    def test_start_type(self, cli_runner, write_json, conversation):
        """Test --start-type is applied to the retained window."""
        result = cli_runner.invoke(
            cli, ["prune", write_json(conversation), "--max-tokens", "11", "--start-type", "user"]
        )
        data = json.loads(result.output)["data"]
        assert data["retained"] == 1
        assert data["first_retained_index"] == 3

    def test_budget_from_environment(self, cli_runner, write_json, conversation, monkeypatch):
        """Test the budget can come from the environment."""
        monkeypatch.setenv("AGENT_CONTEXT_MAX_TOKENS", "1000")
        result = cli_runner.invoke(cli, ["prune", write_json(conversation)])
        data = json.loads(result.output)["data"]
        assert data["max_tokens"] == 1000
        assert data["pruned"] == 0

    def test_missing_budget(self, cli_runner, write_json, conversation):
        """Test prune without any budget fails with remediation."""
        result = cli_runner.invoke(cli, ["prune", write_json(conversation)])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert "budget" in data["error"]

    def test_thinking_flag(self, cli_runner, write_json):
        """Test --thinking keeps the reasoning chain together."""
        history = [
            {"role": "user", "content": "q"},
            {
                "role": "assistant",
                "content": [
                    {"type": "thinking", "thinking": "plan"},
                    {"type": "tool_call", "tool_call": {"id": "t", "name": "f"}},
                ],
            },
            {"role": "tool", "content": "result", "tool_call_id": "t"},
        ]
        result = cli_runner.invoke(cli, ["prune", write_json(history), "--max-tokens", "100", "--thinking"])
        assert json.loads(result.output)["data"]["thinking_start_index"] == 1


# =============================================================================
# Test: annotate
# =============================================================================


class TestAnnotateCommand:
    """Tests for cache breakpoint annotation."""

    def test_default_dialect_is_inline(self, cli_runner, write_json, conversation):
        """Test annotate defaults to inline cache_control markers."""
        result = cli_runner.invoke(cli, ["annotate", write_json(conversation)])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)["data"]
        assert data["dialect"] == "anthropic"
        assert data["messages"][3]["content"] == [
            {"type": "text", "text": "second question", "cache_control": {"type": "ephemeral"}}
        ]
        assert data["messages"][0] == {"role": "system", "content": "be brief"}

    def test_bedrock_dialect(self, cli_runner, write_json, conversation):
        """Test --dialect bedrock inserts cachePoint blocks."""
        result = cli_runner.invoke(cli, ["annotate", write_json(conversation), "--dialect", "bedrock"])

        data = json.loads(result.output)["data"]
        assert data["messages"][1]["content"] == [
            {"type": "text", "text": "first question here"},
            {"cachePoint": {"type": "default"}},
        ]

    def test_dialect_from_provider(self, cli_runner, write_json, conversation, monkeypatch):
        """Test the dialect defaults from the configured provider."""
        monkeypatch.setenv("AGENT_CONTEXT_PROVIDER", "bedrock")
        result = cli_runner.invoke(cli, ["annotate", write_json(conversation)])
        assert json.loads(result.output)["data"]["dialect"] == "bedrock"


# =============================================================================
# Test: usage
# =============================================================================


class TestUsageCommand:
    """Tests for usage normalization."""

    def test_single_report(self, cli_runner, write_json):
        """Test usage normalizes a single report."""
        result = cli_runner.invoke(cli, ["usage", write_json({"input_tokens": 5})])

        data = json.loads(result.output)["data"]
        assert data["turns"] == 1
        assert data["totals"] == {"input_tokens": 5, "output_tokens": 0, "total_tokens": 5}

    def test_list_of_reports(self, cli_runner, write_json):
        """Test usage sums a list of reports."""
        reports = [
            {"input_tokens": 100, "output_tokens": 20, "input_token_details": {"cache_read": 50}},
            {"input_tokens": 10, "output_tokens": "oops"},
        ]
        result = cli_runner.invoke(cli, ["usage", write_json(reports)])

        data = json.loads(result.output)["data"]
        assert data["reports"][0]["total_tokens"] == 170
        assert data["totals"]["total_tokens"] == 180

    def test_rejects_non_objects(self, cli_runner, write_json):
        """Test usage rejects entries that are not objects."""
        result = cli_runner.invoke(cli, ["usage", write_json([1, 2])])
        assert result.exit_code == 1
