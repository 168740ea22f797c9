# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from __future__ import annotations

from _pytest.logging import LogCaptureFixture
from bkspell.checker import SpellChecker, TREE_FILE
from bkspell.cli import SpellCLI
from bkspell.dictionary import Vocabulary
from pathlib import Path
from pytest import CaptureFixture
from unittest import mock

import io
import json
import pytest
import requests

WORDS = ["hello", "world", "hella", "hell", "help", "the", "quick", "brown", "fox"]


@pytest.fixture(name="base_args")
def fixture_base_args(tmp_path: Path) -> list[str]:
    dictionary = tmp_path / "dictionary.txt"
    dictionary.write_text("\n".join(WORDS) + "\n", encoding="utf-8")
    return [
        "--config",
        str(tmp_path / "bkspell.json"),
        "--dictionary",
        str(dictionary),
        "--cache-dir",
        str(tmp_path / "cache"),
    ]


def test_cli_help() -> None:
    with pytest.raises(SystemExit) as excinfo:
        SpellCLI().run(args=["--help"])
    assert excinfo.value.code == 0


def test_distance(capsys: CaptureFixture[str], tmp_path: Path) -> None:
    assert SpellCLI().run(args=["--config", str(tmp_path / "none.json"), "distance", "ab", "ba"]) is None
    assert capsys.readouterr().out == "1\n"


def test_suggest(base_args: list[str], capsys: CaptureFixture[str]) -> None:
    assert SpellCLI().run(args=base_args + ["suggest", "helo"]) == 0
    assert capsys.readouterr().out.split() == ["hell", "hello", "help"]


def test_suggest_json_with_tolerance(base_args: list[str], capsys: CaptureFixture[str]) -> None:
    assert SpellCLI().run(args=base_args + ["--tolerance", "0", "suggest", "--json", "hell"]) == 0
    assert json.loads(capsys.readouterr().out) == ["hell"]


def test_suggest_nothing_found(base_args: list[str], capsys: CaptureFixture[str]) -> None:
    assert SpellCLI().run(args=base_args + ["suggest", "zzzzzz"]) == 1
    assert capsys.readouterr().out == ""


def test_check_file(base_args: list[str], tmp_path: Path, capsys: CaptureFixture[str]) -> None:
    text = tmp_path / "text.txt"
    text.write_text("Teh quick fox\nsays helo\n", encoding="utf-8")

    assert SpellCLI().run(args=base_args + ["check", "--file", str(text), "--json"]) == 1
    result = json.loads(capsys.readouterr().out)
    assert [(item["line"], item["position"], item["word"]) for item in result] == [
        (1, 0, "teh"),
        (2, 0, "says"),
        (2, 1, "helo"),
    ]
    assert result[2]["suggestions"] == ["hell", "hello", "help"]


def test_check_table_output(base_args: list[str], tmp_path: Path, capsys: CaptureFixture[str]) -> None:
    text = tmp_path / "text.txt"
    text.write_text("helo world\n", encoding="utf-8")

    assert SpellCLI().run(args=base_args + ["check", "--file", str(text)]) == 1
    assert capsys.readouterr().out.splitlines() == [
        "LINE  POSITION  WORD",
        "====  ========  ====",
        "1     0         helo",
        "    suggestions = hell, hello, help",
    ]


def test_check_clean_stdin(base_args: list[str], capsys: CaptureFixture[str]) -> None:
    with mock.patch("sys.stdin", io.StringIO("Hello, world!\n")):
        assert SpellCLI().run(args=base_args + ["check"]) == 0
    assert capsys.readouterr().out == ""


def test_check_needs_input(base_args: list[str], caplog: LogCaptureFixture) -> None:
    with mock.patch("sys.stdin") as stdin:
        stdin.isatty.return_value = True
        assert SpellCLI().run(args=base_args + ["check"]) == 1
    assert "Provide a file with --file" in caplog.text


def test_check_missing_file(base_args: list[str], tmp_path: Path, caplog: LogCaptureFixture) -> None:
    assert SpellCLI().run(args=base_args + ["check", "--file", str(tmp_path / "missing.txt")]) == 1
    assert "command failed: UserError: Failed to read" in caplog.text


def test_check_interactive(base_args: list[str], tmp_path: Path, capsys: CaptureFixture[str]) -> None:
    text = tmp_path / "text.txt"
    text.write_text("Teh quick fox, helo!\nbrwon\n", encoding="utf-8")
    output = tmp_path / "fixed.txt"

    # "7" is not a suggestion number and is asked again
    answers = iter(["1", "7", "2", "bruin"])
    with mock.patch("builtins.input", side_effect=lambda: next(answers)):
        result = SpellCLI().run(
            args=base_args + ["check", "--file", str(text), "--interactive", "--output", str(output)]
        )
    assert result == 0
    assert output.read_text(encoding="utf-8") == "The quick fox, hello!\nbruin\n"
    err = capsys.readouterr().err
    assert "Unknown word: helo" in err
    assert "  2) hello" in err
    assert "No suggestion number 7" in err


def test_check_interactive_keeps_word_on_empty_answer(
    base_args: list[str], tmp_path: Path, capsys: CaptureFixture[str]
) -> None:
    text = tmp_path / "text.txt"
    text.write_text("helo there\n", encoding="utf-8")
    with mock.patch("builtins.input", return_value=""):
        assert SpellCLI().run(args=base_args + ["check", "--file", str(text), "--interactive"]) == 0
    assert capsys.readouterr().out == "helo there\n"


def test_check_interactive_needs_file(base_args: list[str], caplog: LogCaptureFixture) -> None:
    assert SpellCLI().run(args=base_args + ["check", "--interactive"]) == 1
    assert "give the text with --file" in caplog.text


def test_index_build_and_info(base_args: list[str], tmp_path: Path, capsys: CaptureFixture[str]) -> None:
    assert SpellCLI().run(args=base_args + ["index", "build"]) is None
    assert "9 words indexed" in capsys.readouterr().out
    assert (tmp_path / "cache" / TREE_FILE).exists()

    assert SpellCLI().run(args=base_args + ["index", "info", "--json"]) is None
    info = json.loads(capsys.readouterr().out)
    assert info["words"] == 9
    assert info["capacity"] == 9
    assert info["max_word_length"] == 5
    assert info["child_width"] == 11
    assert info["alphabet_length"] == 255
    assert info["fp_prob"] == 0.01
    assert info["hash_count"] == 7


def test_index_build_force(base_args: list[str]) -> None:
    assert SpellCLI().run(args=base_args + ["index", "build"]) is None
    with mock.patch.object(SpellChecker, "open", wraps=SpellChecker.open) as open_:
        cli = SpellCLI(checker_factory=open_)
        assert cli.run(args=base_args + ["index", "build", "--force"]) is None
    assert open_.call_args.kwargs["rebuild"] is True


def test_index_info_without_cache(base_args: list[str], caplog: LogCaptureFixture) -> None:
    assert SpellCLI().run(args=base_args + ["index", "info"]) == 1
    assert "command failed: DecodeError" in caplog.text


def test_settings_from_config_file(base_args: list[str], tmp_path: Path) -> None:
    (tmp_path / "bkspell.json").write_text(
        json.dumps({"alphabet_length": 128, "fp_prob": 0.05, "tolerance": 2}), encoding="utf-8"
    )
    factory = mock.Mock(return_value=SpellChecker.build(Vocabulary(WORDS)))
    assert SpellCLI(checker_factory=factory).run(args=base_args + ["suggest", "hel"]) == 0
    factory.assert_called_once_with(
        str(tmp_path / "dictionary.txt"),
        str(tmp_path / "cache"),
        alphabet_length=128,
        fp_prob=0.05,
        tolerance=2,
        rebuild=False,
    )


def test_command_line_overrides_config_file(base_args: list[str], tmp_path: Path) -> None:
    (tmp_path / "bkspell.json").write_text(json.dumps({"tolerance": 2}), encoding="utf-8")
    factory = mock.Mock(return_value=SpellChecker.build(Vocabulary(WORDS)))
    assert SpellCLI(checker_factory=factory).run(args=base_args + ["--tolerance", "1", "suggest", "hell"]) == 0
    assert factory.call_args.kwargs["tolerance"] == 1


@pytest.mark.parametrize(
    "extra_args,config,message",
    [
        (["--tolerance", "-1"], {}, "Tolerance must not be negative"),
        (["--fp-prob", "1.5"], {}, "between 0 and 1"),
        ([], {"tolerance": "many"}, "Invalid value 'many' for 'tolerance'"),
    ],
)
def test_invalid_settings(
    base_args: list[str], tmp_path: Path, caplog: LogCaptureFixture, extra_args: list[str], config: dict, message: str
) -> None:
    (tmp_path / "bkspell.json").write_text(json.dumps(config), encoding="utf-8")
    assert SpellCLI().run(args=base_args + extra_args + ["suggest", "hell"]) == 1
    assert message in caplog.text


def test_invalid_config_file(base_args: list[str], tmp_path: Path, caplog: LogCaptureFixture) -> None:
    (tmp_path / "bkspell.json").write_text("{not json", encoding="utf-8")
    assert SpellCLI().run(args=base_args + ["suggest", "hell"]) == 1
    assert "Invalid JSON in configuration file" in caplog.text


def test_dictionary_fetch(base_args: list[str], tmp_path: Path, capsys: CaptureFixture[str]) -> None:
    destination = tmp_path / "fetched.txt"
    with mock.patch("bkspell.cli.fetch_word_list", return_value=3) as fetch:
        assert (
            SpellCLI().run(
                args=base_args
                + ["--request-timeout", "5", "dictionary", "fetch", "https://example.com/w.txt", "-o", str(destination)]
            )
            is None
        )
    fetch.assert_called_once_with("https://example.com/w.txt", str(destination), timeout=5)
    assert capsys.readouterr().out == "Fetched 3 words into {}\n".format(destination)


def test_dictionary_fetch_defaults_to_dictionary_path(base_args: list[str], tmp_path: Path) -> None:
    with mock.patch("bkspell.cli.fetch_word_list", return_value=1) as fetch:
        SpellCLI().run(args=base_args + ["dictionary", "fetch", "https://example.com/w.txt"])
    assert fetch.call_args.args[1] == str(tmp_path / "dictionary.txt")


def test_dictionary_fetch_connection_error(base_args: list[str], caplog: LogCaptureFixture) -> None:
    with mock.patch("bkspell.cli.fetch_word_list", side_effect=requests.exceptions.ConnectionError("refused")):
        assert SpellCLI().run(args=base_args + ["dictionary", "fetch", "https://example.com/w.txt"]) == 1
    assert "command failed: ConnectionError: refused" in caplog.text
