# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Turn a partial user request into the final CPU frequency settings and apply them.

The min/max limits are clamped into the range the hardware supports, the minimum is always kept
strictly below the maximum, and the limits are written in the order which never makes the driver
pass through a state where the minimum is above the maximum.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from psfreqlibs.CPUFreqTypes import AppliedValues
from psfreqlibs.helperlibs import Logging, Trivial
from psfreqlibs.helperlibs.Exceptions import ErrorNotSane

if typing.TYPE_CHECKING:
    from psfreqlibs.CPUFreq import CPUFreq
    from psfreqlibs.CPUFreqTypes import HardwareSnapshot, UserRequest, AttrNameType

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

def check_sanity(snapshot: HardwareSnapshot):
    """
    Verify that the CPU frequency driver state allows for changing the settings.

    Args:
        snapshot: The CPU frequency driver state.

    Raises:
        ErrorNotSane: If a frequency bound or limit is unknown, the bounds do not make a range, or
                      the current governor is unknown.
    """

    problems = []
    if snapshot.info_min is None or snapshot.info_max is None:
        problems.append("the supported CPU frequency range is unknown")
    elif snapshot.info_min >= snapshot.info_max:
        problems.append(f"bad supported CPU frequency range: {snapshot.info_min}% - "
                        f"{snapshot.info_max}%")
    if not snapshot.cur_min:
        problems.append("the minimum CPU frequency limit is unknown")
    if not snapshot.cur_max:
        problems.append("the maximum CPU frequency limit is unknown")
    if not snapshot.governor:
        problems.append("the CPU frequency governor is unknown")

    if problems:
        msg = "\n".join(f"  * {problem}" for problem in problems)
        raise ErrorNotSane(f"Environment was not sane, could not set any values:\n{msg}")

def resolve(snapshot: HardwareSnapshot, request: UserRequest) -> AppliedValues:
    """
    Compute the final CPU frequency settings without changing anything.

    Args:
        snapshot: The CPU frequency driver state.
        request: The user request. Unset fields keep the current settings.

    Returns:
        The values to write and the order to write them in.

    Raises:
        ErrorNotSane: If the driver state does not allow for changing the settings.
    """

    check_sanity(snapshot)

    # Checked by 'check_sanity()', these are for the type checker.
    assert snapshot.info_min is not None and snapshot.info_max is not None
    assert snapshot.cur_min is not None and snapshot.cur_max is not None

    new_min = request.min if request.min is not None else snapshot.cur_min
    new_min = Trivial.bound_value(new_min, snapshot.info_min, snapshot.info_max - 1)

    new_max = request.max if request.max is not None else snapshot.cur_max
    new_max = Trivial.bound_value(new_max, snapshot.info_min + 1, snapshot.info_max)

    if new_min >= new_max:
        _LOG.debug("Minimum %d%% is not below maximum %d%%, lowering it", new_min, new_max)
        new_min = new_max - 1

    order: list[AttrNameType]
    if snapshot.cur_min > new_max:
        order = ["min", "max"]
    else:
        order = ["max", "min"]

    new_turbo = None
    if snapshot.turbo_supported:
        new_turbo = request.turbo if request.turbo is not None else snapshot.turbo
        assert new_turbo is not None
        new_turbo = Trivial.bound_value(new_turbo, 0, 1)
        order.append("turbo")

    new_governor = request.governor if request.governor else snapshot.governor
    order.append("governor")

    values = AppliedValues(min=new_min, max=new_max, turbo=new_turbo, governor=new_governor,
                           order=tuple(order))
    _LOG.debug("Resolved %r into %s", request, values)
    return values

def apply(cpufreq: CPUFreq, snapshot: HardwareSnapshot, request: UserRequest) -> AppliedValues:
    """
    Compute the final CPU frequency settings and write them. A failed write is not rolled back,
    the exception propagates and the attributes written before it keep their new values.

    Args:
        cpufreq: The CPU frequency access object to write the settings with.
        snapshot: The CPU frequency driver state.
        request: The user request.

    Returns:
        The written values.

    Raises:
        ErrorNotSane: If the driver state does not allow for changing the settings. Nothing is
                      written in this case.
    """

    values = resolve(snapshot, request)

    for attr in values.order:
        if attr == "min":
            cpufreq.set_min(values.min)
        elif attr == "max":
            cpufreq.set_max(values.max)
        elif attr == "turbo":
            assert values.turbo is not None
            cpufreq.set_turbo(values.turbo)
        else:
            cpufreq.set_governor(values.governor)

    return values
