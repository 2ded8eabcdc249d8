# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Provide the predefined power plans and the plan and governor name resolution.

A plan is a named bundle of governor, min/max frequency and turbo settings, which the user can
apply with a single token. The token is either the plan number or a prefix of the plan name.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from typing import TypedDict
from psfreqlibs.helperlibs import Logging
from psfreqlibs.helperlibs.Exceptions import ErrorBadPlan, ErrorBadGovernor

if typing.TYPE_CHECKING:
    from typing import Callable, Sequence
    from psfreqlibs.CPUFreqTypes import HardwareSnapshot, UserRequest, PlanNameType

class _PlanInfoTypedDict(TypedDict):
    """
    Type for the part of the plan description dictionary every plan has.

    Attributes:
        code: The plan number, an alternative to the plan name on the command line.
        descr: A one-line plan description for the help text.
    """

    code: str
    descr: str

class PlanTypedDict(_PlanInfoTypedDict, total=False):
    """
    Type for the plan description dictionary. The settings are missing for the "auto" plan, which
    resolves to another plan.

    Attributes:
        governor: The governor to use.
        min: The minimum CPU frequency, in percent.
        max: The maximum CPU frequency, in percent.
        turbo: Whether turbo should be enabled.
    """

    governor: str
    min: int
    max: int
    turbo: bool

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

# The plans, in the order they are matched against user input. The "auto" plan has no settings of
# its own, it resolves to another plan depending on the power source.
PLANS: dict[PlanNameType, PlanTypedDict] = {
    "powersave": {
        "code": "1",
        "governor": "powersave",
        "min": 0,
        "max": 0,
        "turbo": False,
        "descr": "Lowest frequencies, turbo off",
    },
    "performance": {
        "code": "2",
        "governor": "powersave",
        "min": 0,
        "max": 100,
        "turbo": False,
        "descr": "Full frequency range, turbo off",
    },
    "max-performance": {
        "code": "3",
        "governor": "performance",
        "min": 100,
        "max": 100,
        "turbo": True,
        "descr": "Highest frequencies, turbo on",
    },
    "auto": {
        "code": "0",
        "descr": "'performance' on mains power, 'powersave' on battery",
    },
}

def get_plan_names(auto_supported: bool) -> list[PlanNameType]:
    """
    Return names of the plans available on the system.

    Args:
        auto_supported: Whether the "auto" plan is available.

    Returns:
        List of plan names in the matching order.
    """

    return [name for name in PLANS if name != "auto" or auto_supported]

def resolve_plan(token: str, auto_supported: bool = False) -> PlanNameType:
    """
    Resolve a plan token into a plan name.

    Args:
        token: The plan number (e.g., "1") or a prefix of the plan name (e.g., "power"). The name
               match is case-sensitive.
        auto_supported: Whether the "auto" plan is available.

    Returns:
        Name of the first plan the token matches.

    Raises:
        ErrorBadPlan: If the token does not match any available plan.
    """

    names = get_plan_names(auto_supported)

    if token:
        for name in names:
            if token == PLANS[name]["code"] or name.startswith(token):
                _LOG.debug("Plan token '%s' resolved to plan '%s'", token, name)
                return name

    plans = ", ".join(f"{PLANS[name]['code']} ({name})" for name in names)
    raise ErrorBadPlan(f"Bad plan '{token}', use one of: {plans}")

def resolve_governor(token: str, governors: Sequence[str]) -> str:
    """
    Resolve a governor token into a governor name.

    The governors are checked in the order they are given, and the first one the token is a prefix
    of wins, even if a later governor name matches the token exactly. The order is the one the
    kernel reports.

    Args:
        token: Governor name or its prefix.
        governors: The available governor names.

    Returns:
        The first governor name 'token' is a prefix of.

    Raises:
        ErrorBadGovernor: If the token does not match any governor.
    """

    if token:
        for governor in governors:
            if governor.startswith(token):
                _LOG.debug("Governor token '%s' resolved to governor '%s'", token, governor)
                return governor

    if governors:
        raise ErrorBadGovernor(f"Bad governor '{token}', use one of: {', '.join(governors)}")
    raise ErrorBadGovernor(f"Bad governor '{token}': no governors are available")

def apply_plan(request: UserRequest,
               snapshot: HardwareSnapshot,
               on_mains: Callable[[], bool] | None = None):
    """
    Fill the unset fields of a user request from the template of the requested plan. Fields the
    user set explicitly are not changed. Do nothing if no plan was requested.

    Args:
        request: The user request to fill.
        snapshot: The CPU frequency driver state, used for resolving the plan governor and the
                  turbo knob polarity.
        on_mains: A callable returning whether the system runs on mains power. Required for the
                  "auto" plan.

    Raises:
        ErrorBadGovernor: If the plan governor is not available on the system.
    """

    if request.plan is None:
        return

    name = request.plan
    if name == "auto":
        if not on_mains:
            raise ErrorBadPlan("The 'auto' plan is not supported: the power source is unknown")
        if on_mains():
            name = "performance"
            source = "mains power"
        else:
            name = "powersave"
            source = "battery"
        _LOG.notice("Running on %s, using the '%s' plan", source, name)

    plan = PLANS[name]

    if request.min is None:
        request.min = plan["min"]
    if request.max is None:
        request.max = plan["max"]
    if request.turbo is None and snapshot.turbo_supported:
        request.turbo = snapshot.turbo_value(plan["turbo"])
    if not request.governor:
        request.governor = resolve_governor(plan["governor"], snapshot.governors)

    _LOG.debug("Request after applying plan '%s': %r", name, request)
