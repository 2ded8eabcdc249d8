# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Authors: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>
#          Antti Laakso <antti.laakso@intel.com>

"""
This module provides API for printing the CPU frequency settings.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import typing
import colorama
from psfreqlibs.helperlibs import Logging, ClassHelpers, Human, YAML
from psfreqlibs.helperlibs.Exceptions import Error

if typing.TYPE_CHECKING:
    from typing import Any, IO, Literal, Sequence
    from psfreqlibs.CPUFreqTypes import HardwareSnapshot

    FormatType = Literal["human", "yaml"]

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

class PsfreqPrinter(ClassHelpers.SimpleCloseContext):
    """Print the CPU frequency settings and the realtime CPU frequencies."""

    def __init__(self, fobj: IO[str] | None = None, fmt: FormatType = "human",
                 colored: bool = False):
        """
        Initialize a class instance.

        Args:
            fobj: A file object to print the output to. By default, the output is printed with the
                  logger at the 'INFO' level, so it is suppressed by the '-q' and '-a' options.
            fmt: The output format: "human" or "yaml".
            colored: Whether to colorize the "human" format output.
        """

        if fmt not in ("human", "yaml"):
            raise Error(f"BUG: unsupported output format '{fmt}'")

        self._fobj = fobj
        self._fmt = fmt
        self._colored = colored

    def close(self):
        """Uninitialize the class object."""
        ClassHelpers.close(self, unref_attrs=("_fobj",))

    def _print(self, msg: str):
        """Print message 'msg'."""

        if self._fobj:
            self._fobj.write(msg + "\n")
        else:
            _LOG.info(msg)

    def _yaml_dump(self, info: dict[str, Any]):
        """Dump dictionary 'info' in YAML format."""

        fobj = self._fobj
        if not fobj:
            if _LOG.getEffectiveLevel() > Logging.INFO:
                return
            fobj = sys.stdout

        YAML.dump(info, fobj)

    def _color(self, color: str) -> str:
        """Return the colorama escape sequence 'color', or an empty string if colors are off."""

        if not self._colored:
            return ""
        return color

    def _fmt_line(self, name: str, value: str, width: int = 15) -> str:
        """
        Format a "pstate::NAME -> value" line. The name is padded to 'width' characters, and it
        may include color escape sequences if 'width' is 0.
        """

        white = self._color(colorama.Style.BRIGHT + colorama.Fore.WHITE)
        green = self._color(colorama.Style.BRIGHT + colorama.Fore.GREEN)
        cyan = self._color(colorama.Style.BRIGHT + colorama.Fore.CYAN)
        reset = self._color(colorama.Style.RESET_ALL)

        return f"{white}    pstate::{green}{name.ljust(width)}-> {cyan}{value}{reset}"

    def print_version(self, toolname: str, version: str):
        """Print the tool version."""

        blue = self._color(colorama.Style.BRIGHT + colorama.Fore.BLUE)
        magenta = self._color(colorama.Style.BRIGHT + colorama.Fore.MAGENTA)
        reset = self._color(colorama.Style.RESET_ALL)

        self._print(f"{blue}{toolname}  {magenta}{version}{reset}")

    @staticmethod
    def _fmt_khz(khz: int | None) -> str:
        """Format a frequency in kHz the way the "human" format shows it."""

        if khz is None:
            return "?KHz"
        return f"{khz}KHz"

    def _print_settings_human(self, snapshot: HardwareSnapshot):
        """Print the CPU frequency settings in the "human" format."""

        self._print(self._fmt_line("CPU_DRIVER", snapshot.driver or "unknown"))
        self._print(self._fmt_line("CPU_GOVERNOR", snapshot.governor or "unknown"))

        if snapshot.pstate:
            name = "NO_TURBO"
        else:
            name = "TURBO_BOOST"
        if snapshot.turbo_supported:
            state = "ON" if snapshot.turbo_enabled() else "OFF"
            self._print(self._fmt_line(name, f"{snapshot.turbo} : {state}"))
        else:
            self._print(self._fmt_line(name, "not supported"))

        for name, pct, khz in (("CPU_MIN", snapshot.cur_min, snapshot.scaling_min_khz),
                               ("CPU_MAX", snapshot.cur_max, snapshot.scaling_max_khz)):
            pct_str = "?" if pct is None else str(pct)
            self._print(self._fmt_line(name, f"{pct_str}% : {self._fmt_khz(khz)}"))

        if snapshot.info_min_khz is not None and snapshot.info_max_khz is not None:
            fmin = Human.num2si(snapshot.info_min_khz, unit="kHz", decp=2, sep=" ")
            fmax = Human.num2si(snapshot.info_max_khz, unit="kHz", decp=2, sep=" ")
            self._print(self._fmt_line("CPU_RANGE", f"{fmin} - {fmax}"))

    def _print_settings_yaml(self, snapshot: HardwareSnapshot):
        """Print the CPU frequency settings in the YAML format."""

        info: dict[str, Any] = {
            "driver": snapshot.driver,
            "governor": snapshot.governor,
            "governors": list(snapshot.governors),
            "turbo": {
                "supported": snapshot.turbo_supported,
                "enabled": snapshot.turbo_enabled(),
                "value": snapshot.turbo,
            },
            "min": {"percent": snapshot.cur_min, "khz": snapshot.scaling_min_khz},
            "max": {"percent": snapshot.cur_max, "khz": snapshot.scaling_max_khz},
            "range": {"min_khz": snapshot.info_min_khz, "max_khz": snapshot.info_max_khz},
            "cpus": snapshot.cpus_count,
        }
        self._yaml_dump(info)

    def print_settings(self, snapshot: HardwareSnapshot):
        """
        Print the CPU frequency settings.

        Args:
            snapshot: The CPU frequency driver state to print.
        """

        if self._fmt == "yaml":
            self._print_settings_yaml(snapshot)
        else:
            self._print_settings_human(snapshot)

    def print_realtime(self, freqs: Sequence[float]):
        """
        Print the current frequency of every CPU.

        Args:
            freqs: CPU frequencies in MHz, indexed by CPU number.
        """

        if self._fmt == "yaml":
            self._yaml_dump({"realtime_mhz": {cpu: freq for cpu, freq in enumerate(freqs)}})
            return

        magenta = self._color(colorama.Style.BRIGHT + colorama.Fore.MAGENTA)
        green = self._color(colorama.Style.BRIGHT + colorama.Fore.GREEN)

        numwidth = len(str(len(freqs) - 1))
        for cpu, freq in enumerate(freqs):
            pad = " " * (numwidth - len(str(cpu)))
            name = f"CPU[{magenta}{cpu}{green}]{pad}  "
            self._print(self._fmt_line(name, f"{freq:.2f} MHz", width=0))
