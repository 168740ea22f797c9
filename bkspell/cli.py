# Copyright 2026, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
from __future__ import annotations

from . import argx, envdefault
from .checker import BLOOM_FILE, DEFAULT_FP_PROB, DEFAULT_TOLERANCE, SpellChecker, TREE_FILE
from .cliarg import arg
from .codec import load_bloom, load_tree
from .dictionary import DEFAULT_ALPHABET_LENGTH, fetch_word_list
from .distance import damerau_levenshtein
from argparse import ArgumentParser
from typing import Any, Callable, Protocol, Sequence

import os
import requests.exceptions
import sys

MISSPELLING_COLUMNS = [["line", "position", "word"], "suggestions"]
INDEX_INFO_COLUMNS = [
    ["words", "capacity", "max_word_length", "alphabet_length"],
    "child_width",
    "bloom_size",
    "hash_count",
    "fp_prob",
    "bits_set",
    "cache_dir",
]


class CheckerFactory(Protocol):
    def __call__(
        self,
        dictionary_path: str,
        cache_dir: str,
        *,
        alphabet_length: int,
        fp_prob: float,
        tolerance: int,
        rebuild: bool,
    ) -> SpellChecker:
        ...


class SpellCLI(argx.CommandLineTool):
    def __init__(self, checker_factory: CheckerFactory = SpellChecker.open):
        argx.CommandLineTool.__init__(self, "bkspell")
        self.checker_factory = checker_factory

    def add_args(self, parser: ArgumentParser) -> None:
        parser.add_argument(
            "--dictionary",
            help="Word list, one word per line [BKSPELL_DICTIONARY] (default: {!r})".format(envdefault.BKSPELL_DICTIONARY),
            metavar="FILE",
        )
        parser.add_argument(
            "--cache-dir",
            help="Directory for the built indexes [BKSPELL_CACHE_DIR] (default: {!r})".format(envdefault.BKSPELL_CACHE_DIR),
            metavar="DIR",
        )
        parser.add_argument(
            "--alphabet-length",
            type=int,
            help="Number of distinct character codes words may use (default: {})".format(DEFAULT_ALPHABET_LENGTH),
        )
        parser.add_argument(
            "--fp-prob",
            type=float,
            help="False positive probability of the word filter (default: {})".format(DEFAULT_FP_PROB),
        )
        parser.add_argument(
            "--tolerance",
            type=int,
            help="Maximum number of edits between a word and its suggestions (default: {})".format(DEFAULT_TOLERANCE),
        )
        parser.add_argument(
            "--request-timeout",
            type=int,
            default=None,
            help="Wait for up to N seconds for a download (default: infinite)",
        )

    def expected_errors(self) -> Sequence[type[BaseException]]:
        return [requests.exceptions.Timeout]

    def _setting(self, name: str, convert: Callable[[Any], Any], default: Any) -> Any:
        """Command line option, then config file value, then `default`"""
        value = getattr(self.args, name, None)
        if value is not None:
            return value
        value = self.config.get(name)
        if value is None:
            return default
        try:
            return convert(value)
        except (TypeError, ValueError) as ex:
            raise argx.UserError("Invalid value {!r} for {!r} in configuration file".format(value, name)) from ex

    @property
    def dictionary_path(self) -> str:
        return os.path.expanduser(self._setting("dictionary", str, envdefault.BKSPELL_DICTIONARY))

    @property
    def cache_dir(self) -> str:
        return os.path.expanduser(self._setting("cache_dir", str, envdefault.BKSPELL_CACHE_DIR))

    @property
    def tolerance(self) -> int:
        tolerance = self._setting("tolerance", int, DEFAULT_TOLERANCE)
        if tolerance < 0:
            raise argx.UserError("Tolerance must not be negative, got {}".format(tolerance))
        return tolerance

    def get_checker(self, rebuild: bool = False) -> SpellChecker:
        fp_prob = self._setting("fp_prob", float, DEFAULT_FP_PROB)
        if not 0 < fp_prob < 1:
            raise argx.UserError("False positive probability must be between 0 and 1, got {}".format(fp_prob))
        alphabet_length = self._setting("alphabet_length", int, DEFAULT_ALPHABET_LENGTH)
        return self.checker_factory(
            self.dictionary_path,
            self.cache_dir,
            alphabet_length=alphabet_length,
            fp_prob=fp_prob,
            tolerance=self.tolerance,
            rebuild=rebuild,
        )

    def read_input(self) -> str:
        if self.args.file:
            try:
                with open(self.args.file, encoding="utf-8", errors="replace") as fp:
                    return fp.read()
            except OSError as ex:
                raise argx.UserError(
                    "Failed to read {!r}: {}: {}".format(self.args.file, ex.__class__.__name__, ex)
                ) from ex
        if sys.stdin.isatty():
            raise argx.UserError("Provide a file with --file or pipe some text in")
        return sys.stdin.read()

    def write_output(self, text: str) -> None:
        if self.args.output:
            with open(self.args.output, "w", encoding="utf-8") as fp:
                fp.write(text)
        else:
            sys.stdout.write(text)

    def choose_correction(self, word: str, candidates: Sequence[str]) -> str | None:
        """Ask the user what to replace `word` with, None keeps the word as it is"""
        while True:
            print("Unknown word: {}".format(word), file=sys.stderr)
            for number, candidate in enumerate(candidates, start=1):
                print("  {}) {}".format(number, candidate), file=sys.stderr)
            print("Pick a number, type a replacement or press enter to keep the word: ", end="", file=sys.stderr)
            sys.stderr.flush()
            try:
                answer = input().strip()
            except EOFError:
                return None
            if not answer:
                return None
            if not answer.isdigit():
                return answer
            if 1 <= int(answer) <= len(candidates):
                return candidates[int(answer) - 1]
            print("No suggestion number {}".format(answer), file=sys.stderr)

    @arg.file
    @arg.output
    @arg("-i", "--interactive", help="Pick a correction for each unknown word", action="store_true", default=False)
    @arg.json
    def check(self) -> int:
        """Check the spelling of a text file or standard input"""
        if self.args.interactive and not self.args.file:
            raise argx.UserError("Interactive mode reads answers from standard input, give the text with --file")

        text = self.read_input()
        checker = self.get_checker()
        if self.args.interactive:
            self.write_output(checker.correct_text(text, self.choose_correction))
            return 0

        misspellings = [misspelling._asdict() for misspelling in checker.check_text(text)]
        if self.args.output:
            with open(self.args.output, "w", encoding="utf-8") as fp:
                self.print_response(misspellings, json=self.args.json, table_layout=MISSPELLING_COLUMNS, file=fp)
        else:
            self.print_response(misspellings, json=self.args.json, table_layout=MISSPELLING_COLUMNS)
        return 1 if misspellings else 0

    @arg.word
    @arg.json
    def suggest(self) -> int:
        """List dictionary words within the edit tolerance of a word"""
        checker = self.get_checker()
        suggestions = sorted(checker.suggest(self.args.word))
        self.print_response(suggestions, json=self.args.json)
        return 0 if suggestions else 1

    @arg("first", help="First word")
    @arg("second", help="Second word")
    def distance(self) -> None:
        """Show the Damerau-Levenshtein distance between two words"""
        print(damerau_levenshtein(self.args.first, self.args.second))

    @arg.force
    def index__build(self) -> None:
        """Build the dictionary indexes into the cache directory"""
        checker = self.get_checker(rebuild=self.args.force)
        print("{} words indexed in {}".format(len(checker.tree), self.cache_dir))

    @arg.json
    def index__info(self) -> None:
        """Show the parameters of the cached indexes"""
        cache_dir = self.cache_dir
        tree = load_tree(os.path.join(cache_dir, TREE_FILE))
        bloom = load_bloom(os.path.join(cache_dir, BLOOM_FILE))
        info = {
            "alphabet_length": tree.alphabet_length,
            "bits_set": bloom.bits_set(),
            "bloom_size": bloom.size,
            "cache_dir": cache_dir,
            "capacity": tree.capacity,
            "child_width": tree.width,
            "fp_prob": bloom.fp_prob,
            "hash_count": bloom.hash_count,
            "max_word_length": tree.max_word_length,
            "words": tree.size,
        }
        self.print_response(info, json=self.args.json, single_item=True, table_layout=INDEX_INFO_COLUMNS)

    @arg("url", help="Address of a word list with one word per line")
    @arg.output
    def dictionary__fetch(self) -> None:
        """Download a word list to use as the dictionary"""
        destination = self.args.output or self.dictionary_path
        count = fetch_word_list(self.args.url, destination, timeout=self.args.request_timeout)
        print("Fetched {} words into {}".format(count, destination))
