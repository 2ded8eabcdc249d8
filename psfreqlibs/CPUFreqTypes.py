# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Types for the CPU frequency modules: the hardware snapshot, the user request and the result of
applying the request.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from typing import NamedTuple, Literal, Optional, Tuple

ActionType = Literal["get", "set"]
DisplayType = Literal["current", "realtime"]
PlanNameType = Literal["auto", "powersave", "performance", "max-performance"]
AttrNameType = Literal["min", "max", "turbo", "governor"]

class HardwareSnapshot(NamedTuple):
    """
    The CPU frequency driver state, read once per invocation.

    Percentages are relative to the maximum CPU frequency ('cpuinfo_max_freq'). Values that could
    not be read are 'None' (or an empty string for the governor).

    Attributes:
        driver: Name of the CPU frequency driver (e.g., "intel_pstate").
        pstate: Whether the driver is 'intel_pstate'.
        info_min: Minimum frequency the hardware supports, in percent.
        info_max: Maximum frequency the hardware supports, in percent.
        cur_min: Currently configured minimum frequency, in percent.
        cur_max: Currently configured maximum frequency, in percent.
        governor: Current governor name.
        governors: Available governor names, in the order the kernel reports them.
        turbo: Raw value of the turbo knob, 'None' if turbo is not supported. Note, the polarity
               depends on the driver: 'intel_pstate/no_turbo' is 1 when turbo is off,
               'cpufreq/boost' is 1 when turbo is on.
        cpus_count: Number of CPUs.
        info_min_khz: Minimum frequency the hardware supports, in kHz.
        info_max_khz: Maximum frequency the hardware supports, in kHz.
        scaling_min_khz: Currently configured minimum frequency of CPU 0, in kHz.
        scaling_max_khz: Currently configured maximum frequency of CPU 0, in kHz.
    """

    driver: str
    pstate: bool
    info_min: Optional[int]
    info_max: Optional[int]
    cur_min: Optional[int]
    cur_max: Optional[int]
    governor: str
    governors: Tuple[str, ...]
    turbo: Optional[int]
    cpus_count: int
    info_min_khz: Optional[int] = None
    info_max_khz: Optional[int] = None
    scaling_min_khz: Optional[int] = None
    scaling_max_khz: Optional[int] = None

    @property
    def turbo_supported(self) -> bool:
        """Whether the driver exposes a turbo knob."""
        return self.turbo is not None

    def turbo_enabled(self) -> bool | None:
        """Return whether turbo is enabled, accounting for the driver polarity."""

        if self.turbo is None:
            return None
        if self.pstate:
            return self.turbo == 0
        return self.turbo == 1

    def turbo_value(self, enable: bool) -> int:
        """Return the raw turbo knob value which enables or disables turbo."""

        if self.pstate:
            return 0 if enable else 1
        return 1 if enable else 0

class UserRequest:
    """
    The user's intent, accumulated from the command line options. Unset fields are 'None'.

    Attributes:
        action: The requested action: "get", "set", or 'None' if no action was requested.
        display: What to display for the "get" action: "current" settings or "realtime"
                 frequencies.
        min: Requested minimum frequency, in percent.
        max: Requested maximum frequency, in percent.
        governor: Requested governor name (already resolved against the available governors).
        turbo: Requested raw turbo knob value.
        plan: Requested plan name.
    """

    def __init__(self):
        """Initialize an empty request."""

        self.action: ActionType | None = None
        self.display: DisplayType = "current"
        self.min: int | None = None
        self.max: int | None = None
        self.governor: str | None = None
        self.turbo: int | None = None
        self.plan: PlanNameType | None = None

    def is_empty(self) -> bool:
        """Return 'True' if nothing was requested to be modified."""

        return self.plan is None and self.min is None and self.max is None and \
               not self.governor and self.turbo is None

    def __repr__(self):
        """Return a string representation of the request, handy for debug messages."""

        return f"UserRequest(action={self.action}, display={self.display}, min={self.min}, " \
               f"max={self.max}, governor={self.governor}, turbo={self.turbo}, plan={self.plan})"

class AppliedValues(NamedTuple):
    """
    The values written to the CPU frequency driver.

    Attributes:
        min: The minimum frequency, in percent.
        max: The maximum frequency, in percent.
        turbo: The raw turbo knob value, 'None' if turbo is not supported and was not written.
        governor: The governor name.
        order: Attribute names in the order they were written.
    """

    min: int
    max: int
    turbo: Optional[int]
    governor: str
    order: Tuple[AttrNameType, ...]
