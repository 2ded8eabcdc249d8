# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Miscellaneous helper functions for converting data between human-readable and machine-readable
formats.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from psfreqlibs.helperlibs import Logging
from psfreqlibs.helperlibs.Exceptions import Error

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

# The units this module supports.
SUPPORTED_UNITS = {
    "Hz" : "hertz",
    "%"  : "percent",
}

_SIPFX_LARGE = ["k", "M", "G", "T"]
_SIPFX_SCALERS = {
    "T": 1000000000000,
    "G": 1000000000,
    "M": 1000000,
    "k": 1000,
}

def separate_si_prefix(unit: str) -> tuple[str | None, str]:
    """
    Split a SI-unit prefix from the base unit.

    Args:
        unit: The unit string which may contain a SI-unit prefix.

    Returns:
        A tuple containing the SI-unit prefix and the base unit. If 'unit' does not contain a
        SI-unit prefix, the first element of the tuple is None.

    Examples:
        >>> separate_si_prefix("kHz")
        ("k", "Hz")
        >>> separate_si_prefix("Hz")
        (None, "Hz")
    """

    if len(unit) < 2:
        return None, unit

    sipfx = unit[0]
    base_unit = unit[1:]

    if sipfx not in _SIPFX_SCALERS:
        return None, unit

    if base_unit not in SUPPORTED_UNITS:
        _LOG.warning("Unsupported unit '%s' was split into SI-prefix '%s' and base unit '%s'",
                     unit, sipfx, base_unit)

    return sipfx, base_unit

def num2si(value: int | float,
           unit: str | None = None,
           decp: int = 1,
           sep: str | None = None,
           strip_zeroes: bool = False) -> str:
    """
    Convert a number into a human-readable form using SI suffixes like "k" (Kilo), "M" (Mega), etc.

    Args:
        value: The number to convert.
        unit: The unit used with 'value', including any SI-prefixes.
        decp: Maximum number of decimal places the result should include.
        sep: The separator string to use between the resulting number and its unit.
        strip_zeroes: if True, strip trailing zeroes after the decimal point.

    Returns:
        str: The human-readable string representation of the number with its unit.

    Examples:
        >>> num2si(3400000, unit="kHz", decp=2)
        "3.40GHz"
        >>> num2si(800, unit="MHz", decp=0, sep=" ")
        "800 MHz"
        >>> num2si(2400, unit="MHz", decp=2, strip_zeroes=True)
        "2.4GHz"
    """

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise Error(f"Bad input '{value}': not a number")

    if unit is None:
        unit = ""

    if decp < 0:
        raise Error("BUG: decimal places number must be a positive integer")
    if decp > 8:
        raise Error("Specify at max. 8 decimal places")

    if sep is None:
        sep = ""
    if sep and not unit:
        raise Error("Specify the separator only if unit was specified")

    sipfx, base_unit = separate_si_prefix(unit)
    value = float(value)

    pfx = sipfx
    if abs(value) >= 1000:
        if sipfx:
            value *= _SIPFX_SCALERS[sipfx]
        pfx = None
        for pfx in _SIPFX_LARGE:
            value /= 1000.0
            if abs(value) < 1000:
                break

    result = f"{value:.{decp}f}"
    if strip_zeroes and "." in result:
        result = result.rstrip("0").rstrip(".")

    if pfx and float(result) != 0:
        result += sep + pfx + base_unit
    elif base_unit:
        result += sep + base_unit

    return result
