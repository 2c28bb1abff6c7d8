"""Tests for the daybook CLI."""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from daybook.cli import main
from daybook.config import Config
from daybook.core.dates import today_key
from daybook.core.merge import EngineInvariantViolation
from daybook.workflows import load_journal, save_journal

UTTERANCE = ["I", "walked", "the", "dog", "around", "the", "park"]


@pytest.fixture
def config(tmp_path):
    return Config(data_dir=str(tmp_path))


@pytest.fixture
def runner(config):
    with patch("daybook.cli.load_config", return_value=config):
        yield CliRunner()


@pytest.fixture
def today():
    return today_key()


class TestAdd:
    def test_into_empty_journal(self, runner, config, today):
        result = runner.invoke(main, ["add", "--no-llm", *UTTERANCE])
        assert result.exit_code == 0
        assert f"Added 1 entries under {today}" in result.output
        assert load_journal(config) == f"{today}\n- Walked the dog around the park"

    def test_reads_stdin(self, runner, config, today):
        result = runner.invoke(main, ["add", "--no-llm", "-"], input="I walked the dog around the park.\n")
        assert result.exit_code == 0
        assert load_journal(config) == f"{today}\n- Walked the dog around the park"

    def test_blank_utterance(self, runner, config):
        result = runner.invoke(main, ["add", "--no-llm", " "])
        assert "Nothing to record." in result.output
        assert load_journal(config) == ""

    def test_conflict_append(self, runner, config, today):
        save_journal(config, f"{today}\n- Old entry")
        result = runner.invoke(main, ["add", "--no-llm", *UTTERANCE], input="a\n")
        assert result.exit_code == 0
        assert "- Old entry" in result.output
        assert load_journal(config) == f"{today}\n- Old entry\n- Walked the dog around the park"

    def test_conflict_overwrite_confirmed(self, runner, config, today):
        save_journal(config, f"{today}\n- Old entry")
        result = runner.invoke(main, ["add", "--no-llm", *UTTERANCE], input="o\ny\n")
        assert result.exit_code == 0
        assert f"Replaced 1 entries under {today}" in result.output
        assert load_journal(config) == f"{today}\n- Walked the dog around the park"

    def test_conflict_overwrite_declined_appends(self, runner, config, today):
        save_journal(config, f"{today}\n- Old entry")
        result = runner.invoke(main, ["add", "--no-llm", *UTTERANCE], input="o\nn\n")
        assert result.exit_code == 0
        assert load_journal(config) == f"{today}\n- Old entry\n- Walked the dog around the park"

    def test_conflict_cancel(self, runner, config, today):
        save_journal(config, f"{today}\n- Old entry")
        result = runner.invoke(main, ["add", "--no-llm", *UTTERANCE], input="c\n")
        assert "Cancelled." in result.output
        assert load_journal(config) == f"{today}\n- Old entry"

    def test_overwrite_option_skips_prompt(self, runner, config, today):
        save_journal(config, f"{today}\n- Old entry")
        result = runner.invoke(main, ["add", "--no-llm", "-o", "today", *UTTERANCE])
        assert result.exit_code == 0
        assert load_journal(config) == f"{today}\n- Walked the dog around the park"

    def test_append_option_skips_prompt(self, runner, config, today):
        save_journal(config, f"{today}\n- Old entry")
        result = runner.invoke(main, ["add", "--no-llm", "--append", *UTTERANCE])
        assert result.exit_code == 0
        assert load_journal(config) == f"{today}\n- Old entry\n- Walked the dog around the park"

    def test_bad_overwrite_date(self, runner):
        result = runner.invoke(main, ["add", "--no-llm", "-o", "someday", *UTTERANCE])
        assert result.exit_code == 1
        assert "someday" in result.output

    def test_engine_failure_leaves_journal(self, runner, config, today):
        save_journal(config, f"{today}\n- Old entry")
        with patch("daybook.cli.commit_entry", side_effect=EngineInvariantViolation("boom")):
            result = runner.invoke(main, ["add", "--no-llm", "--append", *UTTERANCE])
        assert result.exit_code == 1
        assert "Journal left unchanged" in result.output
        assert load_journal(config) == f"{today}\n- Old entry"

    def test_strict_headers_reject_duplicates(self, runner, config, today):
        config.strict_headers = True
        save_journal(config, f"{today}\n- a\n{today}\n- b")
        result = runner.invoke(main, ["add", "--no-llm", "--append", *UTTERANCE])
        assert result.exit_code == 1
        assert "STRICT_HEADERS" in result.output


class TestAddUnparsedDates:
    @pytest.fixture
    def llm(self):
        llm = MagicMock()
        llm.generate.return_value = json.dumps(
            {"dateSections": [{"date": "the other day", "events": ["Swam laps"]}]}
        )
        with patch("daybook.cli.get_llm", return_value=llm):
            yield llm

    def test_skip(self, runner, config, llm):
        result = runner.invoke(main, ["add", "--unparsed", "skip", "The other day I swam laps"])
        assert "Skipped entries for unrecognized date 'the other day'" in result.output
        assert "Nothing to record." in result.output
        assert load_journal(config) == ""

    def test_today(self, runner, config, llm, today):
        result = runner.invoke(main, ["add", "--unparsed", "today", "The other day I swam laps"])
        assert result.exit_code == 0
        assert load_journal(config) == f"{today}\n- Swam laps"

    def test_ask_confirmed(self, runner, config, llm, today):
        result = runner.invoke(main, ["add", "The other day I swam laps"], input="y\n")
        assert result.exit_code == 0
        assert load_journal(config) == f"{today}\n- Swam laps"

    def test_option_overrides_config(self, runner, config, llm):
        config.unparsed_dates = "today"
        result = runner.invoke(main, ["add", "--unparsed", "skip", "The other day I swam laps"])
        assert "Skipped" in result.output
        assert load_journal(config) == ""

    def test_config_policy_used_without_option(self, runner, config, llm, today):
        config.unparsed_dates = "today"
        result = runner.invoke(main, ["add", "The other day I swam laps"])
        assert result.exit_code == 0
        assert load_journal(config) == f"{today}\n- Swam laps"

    def test_unknown_policy_rejected(self, runner, config, llm):
        result = runner.invoke(main, ["add", "--unparsed", "guess", "The other day I swam laps"])
        assert result.exit_code == 2
        assert load_journal(config) == ""

    def test_ask_with_yes_skips(self, runner, config, llm):
        result = runner.invoke(main, ["add", "-y", "The other day I swam laps"])
        assert "Skipped" in result.output
        assert load_journal(config) == ""

    def test_llm_failure_reported(self, runner, config, llm, today):
        llm.generate.side_effect = RuntimeError("OpenAI request failed: 500")
        result = runner.invoke(main, ["add", *UTTERANCE])
        assert result.exit_code == 0
        assert "used basic processing" in result.output
        assert load_journal(config) == f"{today}\n- Walked the dog around the park"


class TestShow:
    def test_empty(self, runner):
        result = runner.invoke(main, ["show"])
        assert "Journal is empty." in result.output

    def test_whole_journal(self, runner, config):
        save_journal(config, "9.21.2025\n- a\n9.20.2025\n- b")
        result = runner.invoke(main, ["show"])
        assert result.output == "9.21.2025\n- a\n9.20.2025\n- b\n"

    def test_single_date(self, runner, config):
        save_journal(config, "9.21.2025\n- a\n9.20.2025\n- b")
        result = runner.invoke(main, ["show", "--date", "9/20/2025"])
        assert result.output == "9.20.2025\n- b\n"

    def test_missing_date(self, runner, config):
        save_journal(config, "9.21.2025\n- a")
        result = runner.invoke(main, ["show", "-d", "1/1/2020"])
        assert "No entries for 1.1.2020." in result.output


class TestNormalize:
    def test_canonical_key(self, runner):
        result = runner.invoke(main, ["normalize", "09/05/2025"])
        assert result.output == "9.5.2025\n"

    def test_unparseable(self, runner):
        result = runner.invoke(main, ["normalize", "whenever"])
        assert result.exit_code == 1


class TestCheck:
    def test_counts(self, runner, config):
        save_journal(config, "notes\n9.21.2025\n- a\n- b\n9.20.2025\n- c")
        result = runner.invoke(main, ["check"])
        assert result.exit_code == 0
        assert "2 sections, 3 entries" in result.output
        assert "before the first date header" in result.output

    def test_duplicates(self, runner, config):
        save_journal(config, "9.21.2025\n- a\n9.21.2025\n- b")
        result = runner.invoke(main, ["check"])
        assert result.exit_code == 1
        assert "9.21.2025" in result.output


class TestExportAndClear:
    def test_export(self, runner, config, tmp_path):
        save_journal(config, "9.21.2025\n- a\n")
        target = tmp_path / "journal.txt"
        result = runner.invoke(main, ["export", str(target)])
        assert result.exit_code == 0
        assert target.read_text() == "9.21.2025\n- a\n"

    def test_clear(self, runner, config):
        save_journal(config, "9.21.2025\n- a")
        result = runner.invoke(main, ["clear", "--yes"])
        assert "Journal cleared." in result.output
        assert load_journal(config) == ""

    def test_clear_aborted(self, runner, config):
        save_journal(config, "9.21.2025\n- a")
        runner.invoke(main, ["clear"], input="n\n")
        assert load_journal(config) == "9.21.2025\n- a"
