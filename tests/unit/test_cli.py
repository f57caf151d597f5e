"""
Unit tests for prow_cli.

Runs the prowjob commands through click's CliRunner against job record files
written to a temporary directory.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from prow_cli.cli import cli
from prow_cli.config import DEFAULT_LOG_LEVEL, get_log_level

PRESUBMIT = {
    "apiVersion": "prow.k8s.io/v1",
    "kind": "ProwJob",
    "metadata": {"name": "4c6d8a2e"},
    "spec": {
        "type": "presubmit",
        "agent": "kubernetes",
        "job": "pull-test-infra-bazel",
        "refs": {
            "org": "kubernetes",
            "repo": "test-infra",
            "base_ref": "main",
            "base_sha": "abc123",
            "pulls": [
                {"number": 42, "author": "alice", "sha": "def456"},
                {"number": 7, "author": "bob", "sha": "111aaa"},
            ],
        },
        "run_after_success": [{"job": "post-deploy"}],
    },
    "status": {
        "startTime": "2024-01-15T10:30:00Z",
        "completionTime": "2024-01-15T10:35:20Z",
        "state": "success",
        "url": "https://prow.example.com/view/4c6d8a2e",
    },
}

PERIODIC = {
    "spec": {"type": "periodic", "agent": "kubernetes", "job": "ci-periodic"},
    "status": {"startTime": "2024-01-15T11:00:00Z", "state": "pending"},
}


@pytest.fixture
def runner():
    """Create a CLI runner."""
    return CliRunner()


@pytest.fixture
def write_file(tmp_path):
    """Write a JSON document (or raw text) to a file and return its path."""

    def write(name, content):
        path = tmp_path / name
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)

    return write


class TestShow:
    """Test suite for 'prowjob show'."""

    def test_show_details(self, runner, write_file):
        """Test that show prints the job summary."""
        path = write_file("job.json", PRESUBMIT)

        result = runner.invoke(cli, ["show", path])

        assert result.exit_code == 0
        assert "pull-test-infra-bazel" in result.output
        assert "presubmit" in result.output
        assert "kubernetes" in result.output
        assert "main:abc123,42:def456,7:111aaa" in result.output
        assert "success" in result.output
        assert "Complete:   yes" in result.output
        assert "post-deploy" in result.output

    def test_show_incomplete_job(self, runner, write_file):
        """Test that a job without completion time is shown as not complete."""
        path = write_file("job.json", PERIODIC)

        result = runner.invoke(cli, ["show", path])

        assert result.exit_code == 0
        assert "Complete:   no" in result.output
        assert "Refs:       -" in result.output

    def test_show_json_is_canonical(self, runner, write_file):
        """Test that --json prints the re-encoded record."""
        path = write_file("job.json", PRESUBMIT)

        result = runner.invoke(cli, ["show", path, "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == PRESUBMIT

    def test_show_from_stdin(self, runner):
        """Test that '-' reads the record from stdin."""
        result = runner.invoke(cli, ["show", "-"], input=json.dumps(PERIODIC))

        assert result.exit_code == 0
        assert "ci-periodic" in result.output

    def test_show_invalid_record(self, runner, write_file):
        """Test that decode errors are reported with the field path."""
        path = write_file("bad.json", {"status": {"state": "running"}})

        result = runner.invoke(cli, ["show", path])

        assert result.exit_code == 1
        assert "status.state" in result.output

    def test_show_list_document_rejected(self, runner, write_file):
        """Test that show refuses files holding several records."""
        path = write_file("list.json", {"items": [PRESUBMIT, PERIODIC]})

        result = runner.invoke(cli, ["show", path])

        assert result.exit_code == 1
        assert "prowjob list" in result.output

    def test_show_missing_file(self, runner, tmp_path):
        """Test that an unreadable file is an error."""
        result = runner.invoke(cli, ["show", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Cannot read" in result.output


class TestRefs:
    """Test suite for 'prowjob refs'."""

    def test_refs_rendering(self, runner, write_file):
        """Test that refs prints the rendered refs."""
        path = write_file("job.json", PRESUBMIT)

        result = runner.invoke(cli, ["refs", path])

        assert result.exit_code == 0
        assert result.output == "main:abc123,42:def456,7:111aaa\n"

    def test_refs_for_list(self, runner, write_file):
        """Test that each record gets one line, empty when it has no refs."""
        path = write_file("list.json", {"items": [PRESUBMIT, PERIODIC]})

        result = runner.invoke(cli, ["refs", path])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["main:abc123,42:def456,7:111aaa", ""]

    def test_empty_refs(self, runner, write_file):
        """Test that empty refs render as a single colon."""
        path = write_file("job.json", {"spec": {"refs": {}}})

        result = runner.invoke(cli, ["refs", path])

        assert result.output == ":\n"


class TestValidate:
    """Test suite for 'prowjob validate'."""

    def test_all_valid(self, runner, write_file):
        """Test that valid files pass."""
        first = write_file("a.json", PRESUBMIT)
        second = write_file("b.json", {"items": [PRESUBMIT, PERIODIC]})

        result = runner.invoke(cli, ["validate", first, second])

        assert result.exit_code == 0
        assert f"OK   {first} (1 record)" in result.output
        assert f"OK   {second} (2 records)" in result.output

    def test_invalid_file_fails(self, runner, write_file):
        """Test that any invalid file makes validate fail."""
        good = write_file("good.json", PRESUBMIT)
        bad = write_file("bad.json", {"spec": {"max_concurrency": -5}})

        result = runner.invoke(cli, ["validate", good, bad])

        assert result.exit_code == 1
        assert f"OK   {good}" in result.output
        assert f"FAIL {bad}: spec.max_concurrency" in result.output
        assert "1 of 2 file(s) invalid" in result.output

    def test_invalid_json(self, runner, write_file):
        """Test that malformed JSON is reported."""
        bad = write_file("bad.json", "{not json")

        result = runner.invoke(cli, ["validate", bad])

        assert result.exit_code == 1
        assert "invalid JSON" in result.output

    def test_invalid_utf8_does_not_stop_batch(self, runner, tmp_path, write_file):
        """Test that an undecodable file fails alone and later files are checked."""
        bad = tmp_path / "bad.json"
        bad.write_bytes(b'{"spec": {"job": "\xff"}}')
        good = write_file("good.json", PRESUBMIT)

        result = runner.invoke(cli, ["validate", str(bad), good])

        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert f"FAIL {bad}" in result.output
        assert f"OK   {good}" in result.output
        assert "1 of 2 file(s) invalid" in result.output

    def test_missing_file(self, runner, tmp_path):
        """Test that missing files are reported as failures."""
        missing = str(tmp_path / "missing.json")

        result = runner.invoke(cli, ["validate", missing])

        assert result.exit_code == 1
        assert f"FAIL {missing}" in result.output

    def test_requires_paths(self, runner):
        """Test that validate needs at least one path."""
        result = runner.invoke(cli, ["validate"])

        assert result.exit_code != 0


class TestList:
    """Test suite for 'prowjob list'."""

    def test_table(self, runner, write_file):
        """Test the table output."""
        path = write_file("list.json", {"items": [PRESUBMIT, PERIODIC]})

        result = runner.invoke(cli, ["list", path])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        presubmit_line = next(line for line in lines if "pull-test-infra-bazel" in line)
        periodic_line = next(line for line in lines if "ci-periodic" in line)
        assert "success" in presubmit_line
        assert "yes" in presubmit_line
        assert "main:abc123,42:def456,7:111aaa" in presubmit_line
        assert "pending" in periodic_line
        assert "no" in periodic_line

    def test_empty_list(self, runner, write_file):
        """Test that an empty list document prints a message."""
        path = write_file("list.json", {"items": []})

        result = runner.invoke(cli, ["list", path])

        assert result.exit_code == 0
        assert "No jobs found." in result.output

    def test_json(self, runner, write_file):
        """Test JSON output keeps record order."""
        path = write_file("list.json", {"items": [PRESUBMIT, PERIODIC]})

        result = runner.invoke(cli, ["list", path, "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [item["spec"]["job"] for item in data] == [
            "pull-test-infra-bazel",
            "ci-periodic",
        ]

    def test_item_error(self, runner, write_file):
        """Test that errors inside a list name the item."""
        path = write_file("list.json", {"items": [PRESUBMIT, {"spec": {"agent": "x"}}]})

        result = runner.invoke(cli, ["list", path])

        assert result.exit_code == 1
        assert "items[1].spec.agent" in result.output


class TestLogLevel:
    """Test suite for log level configuration."""

    def test_default(self, monkeypatch):
        """Test the default log level."""
        monkeypatch.delenv("PROWJOB_LOG_LEVEL", raising=False)

        assert get_log_level() == DEFAULT_LOG_LEVEL

    def test_from_environment(self, monkeypatch):
        """Test that PROWJOB_LOG_LEVEL is used."""
        monkeypatch.setenv("PROWJOB_LOG_LEVEL", "debug")

        assert get_log_level() == "DEBUG"

    def test_cli_overrides_environment(self, monkeypatch):
        """Test that the command-line option wins over the environment."""
        monkeypatch.setenv("PROWJOB_LOG_LEVEL", "DEBUG")

        assert get_log_level("error") == "ERROR"

    def test_invalid_environment_value(self, monkeypatch, caplog):
        """Test that an invalid value falls back to the default."""
        monkeypatch.setenv("PROWJOB_LOG_LEVEL", "chatty")

        with caplog.at_level(logging.WARNING, logger="prow_cli.config"):
            assert get_log_level() == DEFAULT_LOG_LEVEL

        assert "PROWJOB_LOG_LEVEL" in caplog.text

    def test_log_level_option(self, runner, write_file):
        """Test that --log-level is accepted before a command."""
        path = write_file("job.json", PERIODIC)

        result = runner.invoke(cli, ["--log-level", "DEBUG", "refs", path])

        assert result.exit_code == 0
