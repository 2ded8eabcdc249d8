# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Authors: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>
#          Niklas Neronin <niklas.neronin@intel.com>

"""
psfreq - CPU frequency policy tool for Linux.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import typing
import argparse
import contextlib
from pathlib import Path
from typing import NamedTuple
import argcomplete
from psfreqlibs import CPUFreq, Plans, Policy, PowerSupply, _SysfsIO
from psfreqlibs.CPUFreqTypes import UserRequest
from psfreqlibs.helperlibs import ArgParse, EmulSysfs, Logging, Trivial
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNoRequest, ErrorPermissionDenied
from psfreqtool import _PsfreqDispatcher, _PsfreqPrinter

if typing.TYPE_CHECKING:
    from typing import Sequence
    from psfreqlibs.helperlibs.ArgParse import ArgTypedDict

_VERSION = "1.0.0"
TOOLNAME = "psfreq"

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq").configure(prefix=TOOLNAME)

class OutputConfig(NamedTuple):
    """
    The output configuration, built from the command line options.

    Attributes:
        level: The log level (see 'Logging').
        colored: Whether to colorize the output.
        yaml: Whether to print the '--get' output in YAML format.
    """

    level: int
    colored: bool
    yaml: bool

_ACTION_OPTIONS: list[ArgTypedDict] = [
    {
        "short": "-G",
        "long": "--get",
        "argcomplete": None,
        "kwargs": {
            "dest": "get",
            "action": ArgParse.OrderedArg,
            "nargs": 0,
            "help": "Print the current CPU frequency settings.",
        },
    },
    {
        "short": "-S",
        "long": "--set",
        "argcomplete": None,
        "kwargs": {
            "dest": "set",
            "action": ArgParse.OrderedArg,
            "nargs": 0,
            "help": "Change the CPU frequency settings. Requires superuser privileges.",
        },
    },
]

_GET_OPTIONS: list[ArgTypedDict] = [
    {
        "short": "-c",
        "long": "--current",
        "argcomplete": None,
        "kwargs": {
            "dest": "current",
            "action": ArgParse.OrderedArg,
            "nargs": 0,
            "help": "Print the current CPU frequency settings (default).",
        },
    },
    {
        "short": "-r",
        "long": "--real",
        "argcomplete": None,
        "kwargs": {
            "dest": "realtime",
            "action": ArgParse.OrderedArg,
            "nargs": 0,
            "help": "Print the realtime frequency of every CPU.",
        },
    },
]

_SET_OPTIONS: list[ArgTypedDict] = [
    {
        "short": "-p",
        "long": "--plan",
        "argcomplete": None,
        "kwargs": {
            "dest": "plan",
            "action": ArgParse.OrderedArg,
            "metavar": "PLAN",
            "help": """Apply a predefined power plan. The plan can be specified by its number or
                       a prefix of its name: """ +
                    "; ".join(f"{pinfo['code']} - {pname} ({pinfo['descr']})"
                              for pname, pinfo in Plans.PLANS.items()) +
                    """. The 'auto' plan is available only if the system reports the power source.
                       Options specified explicitly take precedence over the plan settings.""",
        },
    },
    {
        "short": "-g",
        "long": "--governor",
        "argcomplete": None,
        "kwargs": {
            "dest": "governor",
            "action": ArgParse.OrderedArg,
            "metavar": "GOVERNOR",
            "help": """Set the CPU frequency governor. A prefix of the governor name is enough,
                       the first available governor starting with the prefix is used.""",
        },
    },
    {
        "short": "-m",
        "long": "--max",
        "argcomplete": None,
        "kwargs": {
            "dest": "max",
            "action": ArgParse.OrderedArg,
            "metavar": "PERCENT",
            "help": """Set the maximum CPU frequency, in percent of the maximum frequency the CPU
                       supports. The value is adjusted to the range the CPU supports.""",
        },
    },
    {
        "short": "-n",
        "long": "--min",
        "argcomplete": None,
        "kwargs": {
            "dest": "min",
            "action": ArgParse.OrderedArg,
            "metavar": "PERCENT",
            "help": """Set the minimum CPU frequency, in percent of the maximum frequency the CPU
                       supports. The value is adjusted to the range the CPU supports, and it is
                       kept below the maximum frequency.""",
        },
    },
    {
        "short": "-t",
        "long": "--turbo",
        "argcomplete": None,
        "kwargs": {
            "dest": "turbo",
            "action": ArgParse.OrderedArg,
            "metavar": "VALUE",
            "help": """Set the turbo knob value, 0 or 1. Note, the meaning depends on the CPU
                       frequency driver: for 'intel_pstate' the knob is 'no_turbo', so 1 disables
                       turbo. For other drivers the knob is 'boost', so 1 enables turbo.""",
        },
    },
]

_DEBUG_OPTIONS: list[ArgTypedDict] = [
    {
        "short": "-D",
        "long": "--dataset",
        "argcomplete": "FilesCompleter",
        "kwargs": {
            "dest": "dataset",
            "help": """This option is for debugging and testing. It specifies the dataset to
                       emulate a host for running the command. The argument is a dataset YAML file
                       or a directory with an emulated sysfs tree. Superuser privileges are not
                       required for '--set' in this case.""",
        },
    },
    {
        "short": None,
        "long": "--yaml",
        "argcomplete": None,
        "kwargs": {
            "dest": "yaml",
            "action": "store_true",
            "help": "Print the '--get' output in YAML format.",
        },
    },
]

def build_arguments_parser() -> ArgParse.ArgsParser:
    """Build and return the the command-line arguments parser object."""

    text = f"{TOOLNAME} - CPU frequency policy tool for Linux."
    parser = ArgParse.ArgsParser(description=text, prog=TOOLNAME)

    group = parser.add_argument_group(title="actions")
    ArgParse.add_options(group, _ACTION_OPTIONS)

    group = parser.add_argument_group(title="'--get' options")
    ArgParse.add_options(group, _GET_OPTIONS)

    group = parser.add_argument_group(title="'--set' options")
    ArgParse.add_options(group, _SET_OPTIONS)

    group = parser.add_argument_group(title="other options")
    ArgParse.add_options(group, _DEBUG_OPTIONS)

    argcomplete.autocomplete(parser)

    return parser

def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: The command-line arguments, without the program name. Defaults to 'sys.argv[1:]'.

    Returns:
        The arguments namespace. The 'oargs' attribute contains the ordered options (see
        'ArgParse.OrderedArg'), and the 'help_text' attribute contains the help text.
    """

    parser = build_arguments_parser()
    args = parser.parse_args(argv)
    args.help_text = parser.format_help()

    return args

def get_output_config(args: argparse.Namespace) -> OutputConfig:
    """Build the output configuration from the command-line arguments."""

    if args.all_quiet:
        level = Logging.SILENT
    elif args.quiet:
        level = Logging.WARNING
    elif args.debug:
        level = Logging.DEBUG
    else:
        level = Logging.INFO

    return OutputConfig(level=level, colored=args.color, yaml=args.yaml)

def _set_command(request: UserRequest,
                 cpufreq: CPUFreq.CPUFreq,
                 psupply: PowerSupply.PowerSupply,
                 emulated: bool):
    """Implement the '--set' action."""

    if not emulated and not Trivial.is_root():
        raise ErrorPermissionDenied("Permissions error: changing CPU frequency settings requires "
                                    "superuser privileges")

    if request.is_empty():
        raise ErrorNoRequest("No requests: use '--plan', '--governor', '--min', '--max' or "
                             "'--turbo' to specify what to change")

    snapshot = cpufreq.get_snapshot()
    # A driver in a bad state rejects any request, plans included.
    Policy.check_sanity(snapshot)

    on_mains = None
    if psupply.is_supported():
        on_mains = psupply.on_mains
    Plans.apply_plan(request, snapshot, on_mains=on_mains)

    Policy.apply(cpufreq, snapshot, request)

def run(args: argparse.Namespace, sysfs_io: _SysfsIO.SysfsIO, emulated: bool = False) -> int:
    """
    Run the tool.

    Args:
        args: The command-line arguments.
        sysfs_io: The sysfs access object for the target system.
        emulated: Whether the target system is emulated.

    Returns:
        The program exit code.
    """

    outcfg = get_output_config(args)
    fmt: _PsfreqPrinter.FormatType = "yaml" if outcfg.yaml else "human"

    with contextlib.ExitStack() as stack:
        cpufreq = stack.enter_context(CPUFreq.CPUFreq(sysfs_io=sysfs_io))
        psupply = stack.enter_context(PowerSupply.PowerSupply(sysfs_io=sysfs_io))
        printer = stack.enter_context(_PsfreqPrinter.PsfreqPrinter(fmt=fmt,
                                                                   colored=outcfg.colored))

        request = UserRequest()
        dispatcher = _PsfreqDispatcher.PsfreqDispatcher(cpufreq.get_available_governors,
                                                        psupply.is_supported)
        stop = dispatcher.dispatch(args.oargs, request)

        if stop == "version":
            printer.print_version(TOOLNAME, _VERSION)
            return 0

        if stop == "help" or request.action is None:
            _LOG.info(args.help_text.rstrip())
            return 0

        if request.action == "set":
            _set_command(request, cpufreq, psupply, emulated)
            # Re-read the settings bypassing the cache, the kernel may have adjusted the values.
            sysfs_io = stack.enter_context(_SysfsIO.SysfsIO(basedir=sysfs_io.basedir,
                                                            enable_cache=False))
            cpufreq = stack.enter_context(CPUFreq.CPUFreq(sysfs_io=sysfs_io))
        elif request.display == "realtime":
            printer.print_realtime(cpufreq.get_realtime_freqs())
            return 0

        printer.print_settings(cpufreq.get_snapshot())

    return 0

def _get_basedir(stack: contextlib.ExitStack, dataset: str) -> Path:
    """Return the emulated root directory for the '--dataset' option value."""

    path = Path(dataset)
    if path.is_dir():
        return path

    emul = stack.enter_context(EmulSysfs.EmulSysfs(path))
    return emul.basedir

def main(argv: Sequence[str] | None = None) -> int:
    """
    Script entry point.

    Args:
        argv: The command-line arguments, without the program name. Defaults to 'sys.argv[1:]'.

    Returns:
        The program exit code. In case of an error, 'SystemExit' with exit code 1 is raised.
    """

    if argv is None:
        argv = sys.argv[1:]

    # Configure the logger before parsing the arguments, so that parsing errors respect the
    # verbosity options.
    _LOG.configure(prefix=TOOLNAME, level=Logging.get_level_from_argv(list(argv)),
                   colored="--color" in argv, info_stream=sys.stdout, error_stream=sys.stderr)

    try:
        args = parse_arguments(argv)

        outcfg = get_output_config(args)
        _LOG.configure(prefix=TOOLNAME, level=outcfg.level, colored=outcfg.colored,
                       info_stream=sys.stdout, error_stream=sys.stderr)

        with contextlib.ExitStack() as stack:
            basedir = None
            if args.dataset:
                basedir = _get_basedir(stack, args.dataset)

            sysfs_io = stack.enter_context(_SysfsIO.SysfsIO(basedir=basedir))
            return run(args, sysfs_io, emulated=basedir is not None)
    except KeyboardInterrupt:
        _LOG.info("\nInterrupted, exiting")
        return 1
    except Error as err:
        _LOG.error_out(err)

if __name__ == "__main__":
    sys.exit(main())
