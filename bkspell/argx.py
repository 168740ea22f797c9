# Copyright 2015, Aiven, https://aiven.io/
#
# This file is under the Apache License, Version 2.0.
# See the file `LICENSE` for details.
"""Command line scaffolding where decorated methods become sub-commands"""
from __future__ import annotations

from .pretty import TableLayout
from argparse import Action, Namespace
from bkspell import envdefault, errors, pretty
from os import PathLike
from typing import Any, Callable, Iterator, NoReturn, Sequence, TextIO, TYPE_CHECKING, TypeVar, Union

import argparse
import errno
import functools
import json as jsonlib
import logging
import requests.exceptions
import sys

# Optional shell completions
try:
    import argcomplete  # type: ignore

    ARGCOMPLETE_INSTALLED = True
except ImportError:
    ARGCOMPLETE_INSTALLED = False

try:
    from .version import __version__
except ImportError:
    __version__ = "UNKNOWN"

COMMAND_ARGS_ATTR = "_command_args"
LOG_FORMAT = "%(levelname)s\t%(message)s"


class HelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Show option defaults, but only numbers and non-empty strings"""

    def _get_help_string(self, action: Action) -> str:
        help_text = action.help or ""
        if "%(default)" in help_text or not action.option_strings:
            return help_text
        default = action.default
        if isinstance(default, bool):
            return help_text
        if isinstance(default, (int, float)) or (isinstance(default, str) and default):
            help_text += " (default: %(default)s)"
        return help_text


class UserError(Exception):
    """User error"""


F = TypeVar("F", bound=Callable)


class Arg:
    """Declares an argument of a command method.

    Takes the same arguments as `argparse.ArgumentParser.add_argument`. Every
    decorated method of a `CommandLineTool` becomes a command and reads its
    parsed arguments from `self.args`. A bare `@arg()` declares a command
    without arguments.

    Example usage::

        class CLI(CommandLineTool):

            @arg("word")
            def lookup(self):
                '''Look up a word'''
                print(self.args.word)
    """

    def __call__(self, *args: Any, **kwargs: Any) -> Callable[[F], F]:
        def decorate(func: F) -> F:
            if not hasattr(func, COMMAND_ARGS_ATTR):
                setattr(func, COMMAND_ARGS_ATTR, [])
            if args or kwargs:
                # decorators are applied bottom up, keep the written order
                getattr(func, COMMAND_ARGS_ATTR).insert(0, (args, kwargs))
            return func

        return decorate

    if TYPE_CHECKING:

        def __getattr__(self, name: str) -> Callable:
            ...

        def __setattr__(self, name: str, value: Callable) -> None:
            ...


arg = Arg()


def name_to_cmd_parts(name: str) -> list[str]:
    """Command words for a method name, `index__build` is `index build`"""
    return [part.replace("_", "-") for part in name.split("__")]


class Config(dict):
    """Settings read from a JSON object file, empty when the file does not exist"""

    def __init__(self, file_path: Union[str, PathLike]):
        super().__init__()
        self.file_path = file_path
        try:
            with open(file_path, encoding="utf-8") as fp:
                loaded = jsonlib.load(fp)
        except OSError as ex:
            if ex.errno == errno.ENOENT:
                return
            raise UserError(
                "Failed to load configuration file {!r}: {}: {}".format(file_path, ex.__class__.__name__, ex)
            ) from ex
        except ValueError as ex:
            raise UserError("Invalid JSON in configuration file {!r}".format(file_path)) from ex

        if not isinstance(loaded, dict):
            raise UserError("Configuration file {!r} must contain a JSON object".format(file_path))
        self.update(loaded)


class CommandLineTool:
    config: Config

    def __init__(self, name: str) -> None:
        self.log = logging.getLogger(name)
        self.args = Namespace()
        self.parser = argparse.ArgumentParser(prog=name, formatter_class=HelpFormatter)
        self.parser.add_argument(
            "--config",
            help="config file location %(default)r",
            default=envdefault.BKSPELL_CLIENT_CONFIG,
        )
        self.parser.add_argument("--version", action="version", version="{} {}".format(name, __version__))
        self.subparsers = self.parser.add_subparsers(title="commands", dest="command", help="", metavar="")
        self._groups: dict[tuple[str, ...], argparse._SubParsersAction] = {(): self.subparsers}

    def add_args(self, parser: argparse.ArgumentParser) -> None:
        pass  # override in sub-class

    def expected_errors(self) -> Sequence[type[BaseException]]:
        return []  # override in sub-class

    def commands(self) -> Iterator[Callable]:
        """Yield every method tagged with @arg"""
        for name in dir(self):
            # looking up a property would evaluate it
            if isinstance(getattr(type(self), name, None), (property, functools.cached_property)):
                continue
            func = getattr(self, name, None)
            if callable(func) and hasattr(func, COMMAND_ARGS_ATTR):
                yield func

    def _group(self, path: tuple[str, ...]) -> argparse._SubParsersAction:
        if path not in self._groups:
            parser = self._group(path[:-1]).add_parser(
                path[-1],
                help=" ".join(path).title() + " commands",
                formatter_class=HelpFormatter,
            )
            self._groups[path] = parser.add_subparsers(title="commands", help="", metavar="")
        return self._groups[path]

    def add_command(self, func: Callable) -> None:
        assert func.__doc__, f"Missing docstring for {func.__qualname__}"

        *category, name = name_to_cmd_parts(func.__name__)
        group = self._group(tuple(category))
        parser = group.add_parser(name, help=func.__doc__, description=func.__doc__, formatter_class=HelpFormatter)
        parser.set_defaults(func=func)
        for args, kwargs in getattr(func, COMMAND_ARGS_ATTR):
            parser.add_argument(*args, **kwargs)

    def build_parser(self) -> argparse.ArgumentParser:
        self.add_args(self.parser)
        for func in self.commands():
            self.add_command(func)
        # help lists commands alphabetically whatever order they were added in
        for group in self._groups.values():
            group._choices_actions.sort(key=lambda action: action.dest)
        return self.parser

    def parse_args(self, args: Sequence[str]) -> None:
        parser = self.build_parser()
        if ARGCOMPLETE_INSTALLED:
            argcomplete.autocomplete(parser)
        self.args = parser.parse_args(args=args)

    def print_response(
        self,
        result: Any,
        json: bool = True,
        table_layout: TableLayout | None = None,
        single_item: bool = False,
        file: TextIO | None = None,
    ) -> None:
        """print command result as JSON or as a table"""
        if file is None:
            file = sys.stdout

        if json:
            print(jsonlib.dumps(result, indent=4, sort_keys=True, cls=pretty.CustomJsonEncoder), file=file)
        else:
            rows = [result] if single_item else result
            pretty.print_table(rows, table_layout=table_layout, file=file)

    def run(self, args: Sequence[str] | None = None) -> int | None:
        args = list(args or sys.argv[1:]) or ["--help"]
        self.parse_args(args)

        expected_errors: list[type[BaseException]] = [
            requests.exceptions.ConnectionError,
            UserError,
            errors.Error,
        ]
        expected_errors.extend(self.expected_errors())
        try:
            self.config = Config(self.args.config)
            func = getattr(self.args, "func", None)
            if func is None:
                # a command category was given without a command
                self.parser.parse_args(args + ["--help"])
                return 1
            return func()
        except tuple(expected_errors) as ex:
            # nicer output on "expected" errors
            err = "command failed: {0.__class__.__name__}: {0}".format(ex)
            self.log.error(err)
            return 1
        except OSError as ex:
            if ex.errno != errno.EPIPE:
                raise
            self.log.error("*** output truncated ***")
            return 13  # SIGPIPE value in case anyone cares
        except KeyboardInterrupt:
            self.log.error("*** terminated by keyboard ***")
            return 2  # SIGINT

    def main(self, args: Sequence[str] | None = None) -> NoReturn:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logging.getLogger("requests").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)
        sys.exit(self.run(args))
