# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Turn the command line options into a user request, in the order the options were specified.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from psfreqlibs import Plans
from psfreqlibs.helperlibs import Logging, Trivial
from psfreqlibs.helperlibs.Exceptions import Error, ErrorBadOption

if typing.TYPE_CHECKING:
    from typing import Any, Callable, Iterable, Literal, Sequence
    from psfreqlibs.CPUFreqTypes import UserRequest

    StopType = Literal["help", "version"]

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

# Option names for messages, indexed by the 'argparse' destination name.
_OPTNAMES = {
    "min": "-n/--min",
    "max": "-m/--max",
    "turbo": "-t/--turbo",
}

class PsfreqDispatcher:
    """
    Apply command line options to a user request.

    The available governors and the "auto" plan support are only queried if the corresponding
    options are used, so that '--help' or '--get' work even when reading them fails.
    """

    def __init__(self,
                 get_governors: Callable[[], Sequence[str]],
                 is_auto_supported: Callable[[], bool]):
        """
        Initialize a class instance.

        Args:
            get_governors: A callable returning the available governor names.
            is_auto_supported: A callable returning whether the "auto" plan is available.
        """

        self._get_governors = get_governors
        self._is_auto_supported = is_auto_supported

    def _parse_int(self, dest: str, value: str) -> int:
        """Parse integer option value 'value'."""

        try:
            return Trivial.str_to_int(value, what=f"{_OPTNAMES[dest]} option value")
        except Error as err:
            raise ErrorBadOption(str(err)) from err

    def _handle(self, request: UserRequest, dest: str, value: Any):
        """Apply option 'dest' with value 'value' to 'request'."""

        if dest == "get":
            request.action = "get"
        elif dest == "set":
            request.action = "set"
        elif dest == "current":
            request.display = "current"
        elif dest == "realtime":
            request.display = "realtime"
        elif dest == "plan":
            request.plan = Plans.resolve_plan(value, auto_supported=self._is_auto_supported())
        elif dest == "governor":
            request.governor = Plans.resolve_governor(value, self._get_governors())
        elif dest in ("min", "max", "turbo"):
            setattr(request, dest, self._parse_int(dest, value))
        else:
            raise Error(f"BUG: unknown option '{dest}'")

    def dispatch(self, oargs: Iterable[tuple[str, Any]], request: UserRequest) -> StopType | None:
        """
        Apply the options to the request. Stop at the first '--help' or '--version' option, the
        options following it are not processed.

        Args:
            oargs: The '(dest, value)' option pairs in command line order (see
                   'ArgParse.OrderedArg').
            request: The user request to modify.

        Returns:
            "help" or "version" if processing stopped at the corresponding option, 'None' otherwise.

        Raises:
            ErrorBadOption: If an option value is malformed.
            ErrorBadPlan: If the plan does not exist.
            ErrorBadGovernor: If the governor is not available.
        """

        for dest, value in oargs:
            if dest in ("help", "version"):
                _LOG.debug("Stopping options processing at '--%s'", dest)
                return dest

            self._handle(request, dest, value)

        _LOG.debug("User request: %r", request)
        return None
