# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Exception types used in this project.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
from typing import Any, Match
import re

class Error(Exception):
    """The base class for all exceptions raised by this project."""

    def __init__(self, msg: str, *args: Any, **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for the message.
            **kwargs: Additional keyword arguments, stored as exception object attributes.
        """

        msg = str(msg)
        super().__init__(msg)

        for key, val in kwargs.items():
            setattr(self, key, val)

        if args:
            self.msg = msg % tuple(args)
        else:
            self.msg = msg

    def indent(self, indent: int | str, capitalize: bool = True) -> str:
        """
        Indent/prefix each line in the error message.

        Args:
            indent: Can be an integer or a string. If an integer, each line of the error message is
                    prefixed with the specified number of white spaces. If a string, each line is
                    prefixed with the specified string.
            capitalize: If True, ensures the message starts with a capital letter.

        Returns:
            str: The modified error message.
        """

        def capitalize_mobj(mobj: Match[str]):
            """Capitalize the indented/prefixed message."""

            return mobj.group(1) + mobj.group(2).capitalize()

        if isinstance(indent, int):
            pfx = " " * indent
        else:
            pfx = indent

        msg = pfx + self.msg.replace("\n", f"\n{pfx}")
        if capitalize:
            msg = re.sub(r"^(\s*)(\S)", capitalize_mobj, msg)

        return msg

    def __str__(self):
        """The string representation of the exception."""
        return self.msg

class ErrorNotFound(Error):
    """Something was not found."""

class ErrorNotSupported(Error):
    """Feature/option/etc is not supported."""

class ErrorPermissionDenied(Error):
    """The operation requires privileges the process does not have."""

class ErrorBadFormat(Error):
    """Bad format of something, e.g., file contents."""

class ErrorBadOption(Error):
    """Bad command line option: unknown option, missing or malformed option argument."""

class ErrorBadPlan(Error):
    """The power plan name or number does not match any known plan."""

class ErrorBadGovernor(Error):
    """The governor name does not match any governor available on the system."""

class ErrorNoRequest(Error):
    """A modification was requested, but nothing to modify was specified."""

class ErrorNotSane(Error):
    """The CPU frequency driver reports inconsistent values, modifications are not safe."""

class _ErrorIO(Error):
    """Base class for sysfs I/O errors."""

    def __init__(self, msg: str, *args: Any, path: Path | None = None, **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for the message.
            path: Path of the file the failed I/O operation was performed on.
            **kwargs: Additional keyword arguments.
        """

        self.path = path
        super().__init__(msg, *args, **kwargs)

class ErrorReadFailed(_ErrorIO):
    """Failed to read a sysfs or procfs file."""

class ErrorWriteFailed(_ErrorIO):
    """Failed to write to a sysfs file."""

class ErrorReadNotFound(ErrorReadFailed, ErrorNotFound):
    """Failed to read a file because it does not exist."""

class ErrorWriteNotFound(ErrorWriteFailed, ErrorNotFound):
    """Failed to write to a file because it does not exist."""
