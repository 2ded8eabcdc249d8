# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Common trivial helpers.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import os
import typing
from psfreqlibs.helperlibs.Exceptions import Error, ErrorBadFormat

if typing.TYPE_CHECKING:
    from typing import Iterable

def is_root() -> bool:
    """
    Check if the current process has superuser (root) privileges.

    Returns:
        bool: True if the current process has superuser privileges, False otherwise.
    """

    try:
        return os.geteuid() == 0
    except OSError as err:
        errmsg = Error(str(err)).indent(2)
        raise Error(f"Failed to get process effective UID:\n{errmsg}") from None

def str_to_int(snum: str | int, base: int = 10, what: str = "") -> int:
    """
    Convert a string to an integer value.

    Args:
        snum: The value to convert to 'int'.
        base: Base of 'snum'. Defaults to 10, use 0 to auto-detect based on the prefix.
        what: A string describing the value to convert, for the possible error message.

    Returns:
        int: The converted integer value.

    Raises:
        ErrorBadFormat: If 'snum' cannot be converted to an integer.
    """

    try:
        return int(str(snum).strip(), base)
    except (ValueError, TypeError):
        if not what:
            what = "value"

        if base:
            errmsg = f"a base {base} integer"
        else:
            errmsg = "an integer"
        raise ErrorBadFormat(f"Bad {what} '{snum}': should be {errmsg}") from None

def str_to_float(snum: str | float, what: str = "") -> float:
    """
    Convert a string to a floating point number.

    Args:
        snum: The value to convert to 'float'.
        what: A string describing the value to convert, for the possible error message.

    Returns:
        float: The converted floating point value.

    Raises:
        ErrorBadFormat: If 'snum' cannot be converted to a floating point value.
    """

    try:
        return float(str(snum))
    except (ValueError, TypeError):
        if not what:
            what = "value"
        raise ErrorBadFormat(f"Bad {what} '{snum}': should be a floating point number") from None

def list_dedup(elts: Iterable) -> list:
    """
    Return a list of unique elements in 'elts', preserving the order.

    Args:
        elts: The list of elements.

    Returns:
        list: A list of unique elements.
    """

    return list(dict.fromkeys(elts))

def bound_value(value: int, minval: int, maxval: int) -> int:
    """
    Return 'value' limited to the '[minval, maxval]' range.

    Args:
        value: The value to limit.
        minval: The smallest allowed value.
        maxval: The largest allowed value.

    Returns:
        int: 'minval' if 'value' is smaller, 'maxval' if 'value' is larger, otherwise 'value'.
    """

    if minval > maxval:
        raise Error(f"BUG: bad range '[{minval},{maxval}]'")

    return max(minval, min(value, maxval))
