# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Helpful classes extending 'argparse.ArgumentParser' class functionality.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import typing
import argparse
import argcomplete
from psfreqlibs.helperlibs import DamerauLevenshtein, Logging
from psfreqlibs.helperlibs.Exceptions import ErrorBadOption

if typing.TYPE_CHECKING:
    from typing import TypedDict, Iterable, Any, Sequence, Union

    # The objects options can be added to. Even though the argument group class is private, it is
    # documented and will unlikely to change.
    ArgContainerType = Union[argparse.ArgumentParser,
                             argparse._ArgumentGroup] # pylint: disable=protected-access

    class ArgKwargsTypedDict(TypedDict, total=False):
        """
        The type of the "kwargs" sub-dictionary of the 'ArgTypedDict' dictionary type. It defines
        the supported keyword arguments that are ultimately passed to the 'argparse.add_argument()'
        method.

        Attributes:
            dest: The 'argparse' attribute name where the command line argument will be stored.
            default: The default value for the argument.
            nargs: The number of command line arguments that should be consumed.
            metavar: The name of the argument in the help text.
            action: The 'argparse' action to use for the argument. For example, 'store_true' or
                    'OrderedArg'.
            help: A brief description of the argument.
        """

        dest: str
        default: str | int
        nargs: str | int
        metavar: str
        action: str | type[argparse.Action]
        help: str

    class ArgTypedDict(TypedDict, total=False):
        """
        A dictionary type the options definitions dictionary.

        Attributes:
            short: The short option name.
            long: The long option name.
            argcomplete: The 'argcomplete' class name to use for tab completion of the option.
            kwargs: Additional keyword arguments for 'argparse.add_argument()'.
        """

        short: str | None
        long: str
        argcomplete: str | None
        kwargs: ArgKwargsTypedDict

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

def add_options(parser: ArgContainerType, options: Iterable[ArgTypedDict]):
    """
    Add command line options to the given parser.

    Args:
        parser: The argument parser or argument group object to which options will be added.
        options: An iterable collection of option definition dictionaries.
    """

    for opt in options:
        args: tuple[str, ...]

        if opt["short"] is None:
            args = (opt["long"], )
        else:
            args = (opt["short"], opt["long"])

        arg = parser.add_argument(*args, **opt["kwargs"])
        if opt["argcomplete"]:
            setattr(arg, "completer", getattr(argcomplete.completers, opt["argcomplete"]))

class OrderedArg(argparse.Action):
    """
    Implement an argparse action to preserve the order of command-line arguments.

    This action appends '(dest, value)' pairs to the 'oargs' attribute of the namespace, in the
    order the arguments are parsed. Use this when the order of arguments matters. Arguments
    consuming no values (nargs=0) get the 'True' value.

    Example:
        parser.add_argument("--foo", action=OrderedArg)
        parser.add_argument("--bar", action=OrderedArg, nargs=0)
        args = parser.parse_args(["--bar", "--foo", "x"])
        print(args.oargs)  # [('bar', True), ('foo', 'x')]
    """

    def __call__(self,
                 parser: argparse.ArgumentParser,
                 namespace: argparse.Namespace,
                 values: str | Sequence[Any] | None,
                 option_string: str | None = None):
        """Append the ordered argument to the 'oargs' attribute."""

        oargs: list[tuple[str, Any]]
        if not getattr(namespace, "oargs", None):
            oargs = []
            setattr(namespace, "oargs", oargs)
        else:
            oargs = getattr(namespace, "oargs")

        if self.nargs == 0:
            values = True

        oargs.append((self.dest, values))

        # Also add the standard attribute for compatibility.
        setattr(namespace, self.dest, values)

class ArgsParser(argparse.ArgumentParser):
    """
    Enhance 'argparse.ArgumentParser' with standard options and improved usability.
      - Add the standard options, such as '-H' and '-q'.
      - Override 'error()' to raise 'ErrorBadOption' and provide typo suggestions.

    The '-H/--help' and '-V/--version' options do not exit the program. They are ordered arguments
    (see 'OrderedArg'), and the caller decides what to do with them. The arguments following the
    first of them are not validated.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        """
        We assume all tools using this module support the '-q', '-a' and '-d' options. This helper
        adds them to the 'parser' argument parser object.
        """

        kwargs["add_help"] = False
        super().__init__(*args, **kwargs)

        self.set_defaults(oargs=[])

        text = "Show this help message and exit."
        self.add_argument("-H", "--help", dest="help", action=OrderedArg, nargs=0, help=text)

        text = "Print the version number and exit."
        self.add_argument("-V", "--version", dest="version", action=OrderedArg, nargs=0,
                          help=text)

        text = "Be quiet (print only important messages like warnings and errors)."
        self.add_argument("-q", "--quiet", dest="quiet", action="store_true", help=text)

        text = "Be completely quiet, print nothing at all, not even errors."
        self.add_argument("-a", "--all-quiet", dest="all_quiet", action="store_true", help=text)

        text = "Print debugging information."
        self.add_argument("-d", "--debug", dest="debug", action="store_true", help=text)

        text = "Colorize the output (adds ANSI escape codes)."
        self.add_argument("--color", dest="color", action="store_true", help=text)

    def _suggest_option(self, message: str) -> str:
        """
        Return the option most similar to the first unrecognized argument in 'message', or an
        empty string if there is no similar option.
        """

        unrecognized = message.split("unrecognized arguments: ")[1].split()
        if not unrecognized:
            return ""

        offending = unrecognized[0].split("=")[0]
        suggestion = DamerauLevenshtein.closest_match(offending, self._option_string_actions)
        if not suggestion:
            return ""
        return suggestion

    def error(self, message: str):
        """
        Improve error messages from 'argparse.ArgumentParser'.

        Args:
            message: The original error message.

        Raises:
            ErrorBadOption: Always.
        """

        suggestion = ""
        if "unrecognized arguments: " in message:
            suggestion = self._suggest_option(message)

        if suggestion:
            message += f"\n\nThe most similar option is\n  {suggestion}"

        message += f"\nUse '{self.prog} -H' for help."

        # Raise an error instead of calling the superclass method, because it exits the program.
        raise ErrorBadOption(message)

    def _cut_at_stop_option(self, argv: list[str]) -> list[str] | None:
        """
        Return 'argv' cut off right after the first '-H/--help' or '-V/--version' option, or 'None'
        if there is no such option. Values of other options (e.g., '-m -H') are not options.
        """

        expect_value = False
        for idx, arg in enumerate(argv):
            if expect_value:
                expect_value = False
                continue

            if arg == "--":
                break

            action = self._option_string_actions.get(arg)
            if not action:
                continue

            if action.dest in ("help", "version"):
                return argv[:idx + 1]

            expect_value = action.nargs != 0

        return None

    def parse_args(self, args: Sequence[str] | None = None, # type: ignore[override]
                   namespace: argparse.Namespace | None = None) -> argparse.Namespace:
        """
        Parse the command line arguments. If parsing fails, but the '-H/--help' or '-V/--version'
        option precedes the offending argument, ignore everything after the option.
        """

        try:
            return super().parse_args(args, namespace)
        except ErrorBadOption:
            if args is None:
                args = sys.argv[1:]

            cut = self._cut_at_stop_option(list(args))
            if cut is None:
                raise

            _LOG.debug("Ignoring the arguments following '%s': %s", cut[-1], args[len(cut):])
            return super().parse_args(cut, namespace)
