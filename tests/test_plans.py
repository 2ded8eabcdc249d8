#!/usr/bin/env python3
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""Test the power plans and the plan and governor name resolution."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

import pytest
from common import make_snapshot
from psfreqlibs import Plans
from psfreqlibs.helperlibs import Logging
from psfreqlibs.CPUFreqTypes import UserRequest
from psfreqlibs.helperlibs.Exceptions import ErrorBadPlan, ErrorBadGovernor

@pytest.mark.parametrize("token, plan", [
    ("1", "powersave"),
    ("power", "powersave"),
    ("p", "powersave"),
    ("2", "performance"),
    ("perf", "performance"),
    ("3", "max-performance"),
    ("max", "max-performance"),
])
def test_resolve_plan(token, plan):
    """Verify plan resolution by number and name prefix."""

    assert Plans.resolve_plan(token) == plan
    assert Plans.resolve_plan(token, auto_supported=True) == plan

@pytest.mark.parametrize("token", ["xyz", "", "4", "Power", "powersavex"])
def test_resolve_bad_plan(token):
    """Verify that bad plan tokens are rejected."""

    with pytest.raises(ErrorBadPlan):
        Plans.resolve_plan(token, auto_supported=True)

def test_resolve_auto_plan():
    """Verify that the "auto" plan is available only when supported."""

    assert Plans.resolve_plan("0", auto_supported=True) == "auto"
    assert Plans.resolve_plan("a", auto_supported=True) == "auto"

    for token in ("0", "auto"):
        with pytest.raises(ErrorBadPlan):
            Plans.resolve_plan(token, auto_supported=False)

def test_resolve_governor():
    """Verify first-match governor prefix resolution."""

    governors = ["powersave", "performance"]

    assert Plans.resolve_governor("pow", governors) == "powersave"
    assert Plans.resolve_governor("perf", governors) == "performance"
    # The first governor in the reported order wins.
    assert Plans.resolve_governor("p", governors) == "powersave"
    assert Plans.resolve_governor("p", ["performance", "powersave"]) == "performance"

    for token in ("zzz", "", "Powersave", "powersaved"):
        with pytest.raises(ErrorBadGovernor):
            Plans.resolve_governor(token, governors)

    with pytest.raises(ErrorBadGovernor):
        Plans.resolve_governor("powersave", [])

def _apply(plan, snapshot, on_mains=None, **fields):
    """Apply plan 'plan' to a user request with fields from 'fields' and return the request."""

    request = UserRequest()
    request.plan = plan
    for key, val in fields.items():
        setattr(request, key, val)

    Plans.apply_plan(request, snapshot, on_mains=on_mains)
    return request

def test_apply_plan_templates():
    """Verify that the plan templates fill the request, respecting the turbo knob polarity."""

    pstate = make_snapshot()
    boost = make_snapshot(driver="acpi-cpufreq", pstate=False, turbo=1,
                          governors=("ondemand", "powersave", "performance"))

    req = _apply("powersave", pstate)
    assert (req.min, req.max, req.turbo, req.governor) == (0, 0, 1, "powersave")
    req = _apply("powersave", boost)
    assert (req.min, req.max, req.turbo, req.governor) == (0, 0, 0, "powersave")

    req = _apply("performance", pstate)
    assert (req.min, req.max, req.turbo, req.governor) == (0, 100, 1, "powersave")

    req = _apply("max-performance", pstate)
    assert (req.min, req.max, req.turbo, req.governor) == (100, 100, 0, "performance")
    req = _apply("max-performance", boost)
    assert (req.min, req.max, req.turbo, req.governor) == (100, 100, 1, "performance")

def test_apply_plan_explicit_fields():
    """Verify that the explicitly requested fields take precedence over the plan template."""

    req = _apply("max-performance", make_snapshot(), min=30, turbo=1, governor="powersave")
    assert (req.min, req.max, req.turbo, req.governor) == (30, 100, 1, "powersave")

def test_apply_plan_no_turbo():
    """Verify that the plan does not request turbo when turbo is not supported."""

    req = _apply("max-performance", make_snapshot(turbo=None))
    assert req.turbo is None

def test_apply_auto_plan():
    """Verify that the "auto" plan depends on the power source."""

    snapshot = make_snapshot()

    req = _apply("auto", snapshot, on_mains=lambda: True)
    assert (req.min, req.max, req.turbo) == (0, 100, 1)

    req = _apply("auto", snapshot, on_mains=lambda: False)
    assert (req.min, req.max, req.turbo) == (0, 0, 1)

    with pytest.raises(ErrorBadPlan):
        _apply("auto", snapshot)

def test_auto_plan_notice(caplog):
    """Verify that the plan the "auto" plan resolved to is reported."""

    caplog.set_level(Logging.NOTICE, logger=f"{Logging.MAIN_LOGGER_NAME}.psfreq")

    _apply("auto", make_snapshot(), on_mains=lambda: False)
    assert "Running on battery, using the 'powersave' plan" in caplog.messages

    _apply("auto", make_snapshot(), on_mains=lambda: True)
    assert "Running on mains power, using the 'performance' plan" in caplog.messages

    notices = [rec for rec in caplog.records if rec.levelno == Logging.NOTICE]
    assert len(notices) == 2

def test_plan_table():
    """Verify that every plan but "auto" carries a complete template."""

    settings = {"governor", "min", "max", "turbo"}
    for name, plan in Plans.PLANS.items():
        assert {"code", "descr"} <= set(plan)
        if name == "auto":
            assert not settings & set(plan)
        else:
            assert settings <= set(plan)

    codes = [plan["code"] for plan in Plans.PLANS.values()]
    assert sorted(codes) == ["0", "1", "2", "3"]

def test_apply_plan_missing_governor():
    """Verify that a plan governor which is not available is rejected."""

    with pytest.raises(ErrorBadGovernor):
        _apply("max-performance", make_snapshot(governors=("powersave",)))

def test_no_plan():
    """Verify that the request is not modified if no plan was requested."""

    req = _apply(None, make_snapshot())
    assert req.is_empty()
