#!/usr/bin/env python3
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Authors: Antti Laakso <antti.laakso@linux.intel.com>
#          Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""Test 'psfreq' command-line options."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import yaml
import pytest
import common
from psfreqlibs import _SysfsIO
from psfreqlibs.helperlibs import Logging, Trivial
from psfreqlibs.helperlibs.Exceptions import ErrorNoRequest, ErrorBadOption, ErrorBadPlan
from psfreqlibs.helperlibs.Exceptions import ErrorBadGovernor, ErrorNotSane, ErrorNotSupported
from psfreqlibs.helperlibs.Exceptions import ErrorPermissionDenied
from psfreqtool import _Psfreq

_CPU = "/sys/devices/system/cpu"
_PSTATE = f"{_CPU}/intel_pstate"

@pytest.fixture(autouse=True)
def _restore_logger():
    """Restore the logger streams, which 'main()' binds to the captured output streams."""

    yield
    Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq").configure(
                      prefix=_Psfreq.TOOLNAME, level=Logging.INFO, info_stream=sys.stdout,
                      error_stream=sys.stderr)

@pytest.fixture(name="basedir")
def get_basedir(dataset, tmp_path):
    """Build the emulated tree of the dataset and yield its root directory."""

    yield common.build_emul(dataset, tmp_path)

def _get_cpus(basedir):
    """Return the list of CPU numbers of the emulated system."""

    path = basedir / _CPU.lstrip("/")
    return sorted(int(entry.name[3:]) for entry in path.iterdir()
                  if entry.name[3:].isdigit())

def _get_governors(basedir):
    """Return the available governors of the emulated system."""

    path = f"{_CPU}/cpu0/cpufreq/scaling_available_governors"
    return common.read_file(basedir, path).split()

def _read_limits(basedir):
    """Return the min/max limits of the emulated system, in percent."""

    if (basedir / _PSTATE.lstrip("/")).is_dir():
        return (int(common.read_file(basedir, f"{_PSTATE}/min_perf_pct")),
                int(common.read_file(basedir, f"{_PSTATE}/max_perf_pct")))

    info_max = int(common.read_file(basedir, f"{_CPU}/cpu0/cpufreq/cpuinfo_max_freq"))
    limits = []
    for limit in ("min", "max"):
        vals = set()
        for cpu in _get_cpus(basedir):
            path = f"{_CPU}/cpu{cpu}/cpufreq/scaling_{limit}_freq"
            vals.add(int(common.read_file(basedir, path)))
        # All CPUs must have the same limit.
        assert len(vals) == 1
        limits.append(vals.pop() * 100 // info_max)

    return tuple(limits)

def _read_governors(basedir):
    """Return the set of governors configured for the CPUs of the emulated system."""

    return {common.read_file(basedir, f"{_CPU}/cpu{cpu}/cpufreq/scaling_governor")
            for cpu in _get_cpus(basedir)}

def _read_info_min(basedir):
    """Return the minimum frequency the emulated CPU supports, in percent."""

    info_min = int(common.read_file(basedir, f"{_CPU}/cpu0/cpufreq/cpuinfo_min_freq"))
    info_max = int(common.read_file(basedir, f"{_CPU}/cpu0/cpufreq/cpuinfo_max_freq"))
    return info_min * 100 // info_max

def test_get(basedir):
    """Test the '--get' action and its options."""

    limits = _read_limits(basedir)
    governors = _read_governors(basedir)

    for cmdline in ("", "-G", "-G -c", "-G -r", "--get --real", "-H", "-V", "-G -H", "-S -V",
                    "-G --yaml", "-G -r --yaml", "-q -G", "-a -G", "-d -G", "--color -G"):
        assert common.run_psfreq(cmdline, basedir) == 0

    # Nothing may be changed by the '--get' action.
    assert _read_limits(basedir) == limits
    assert _read_governors(basedir) == governors

def test_set_limits(basedir):
    """Test setting the min/max frequency limits."""

    info_min = _read_info_min(basedir)

    common.run_psfreq("-S -m 90 -n 60", basedir)
    assert _read_limits(basedir) == (60, 90)

    # Lowering the maximum below the current minimum lowers the minimum as well.
    common.run_psfreq("-S -m 50", basedir)
    new_max = max(50, info_min + 1)
    assert _read_limits(basedir) == (new_max - 1, new_max)

    common.run_psfreq("-S --max 100 --min 70", basedir)
    assert _read_limits(basedir) == (70, 100)

    # Out of range values are clamped.
    common.run_psfreq("-S -m 1000 -n 0", basedir)
    assert _read_limits(basedir) == (info_min, 100)

    common.run_psfreq("-S -m 0", basedir)
    assert _read_limits(basedir) == (info_min, info_min + 1)

    # The minimum is always kept below the maximum.
    common.run_psfreq("-S -n 100", basedir)
    assert _read_limits(basedir) == (info_min, info_min + 1)

def test_set_governor(basedir):
    """Test setting the governor."""

    for governor in _get_governors(basedir):
        common.run_psfreq(f"-S -g {governor}", basedir)
        assert _read_governors(basedir) == {governor}

    common.run_psfreq("-S -g perf", basedir)
    assert _read_governors(basedir) == {"performance"}

    common.run_psfreq("-S -g xyz", basedir, exp_exc=ErrorBadGovernor)
    assert _read_governors(basedir) == {"performance"}

def test_set_turbo(basedir):
    """Test setting the turbo knob."""

    pstate_turbo = basedir / f"{_PSTATE}/no_turbo".lstrip("/")
    boost = basedir / f"{_CPU}/cpufreq/boost".lstrip("/")

    for val in (1, 0, 1):
        common.run_psfreq(f"-S -t {val}", basedir)
        if pstate_turbo.exists():
            assert common.read_file(basedir, f"{_PSTATE}/no_turbo") == str(val)
        elif boost.exists():
            assert common.read_file(basedir, f"{_CPU}/cpufreq/boost") == str(val)

    # Out of range values are clamped.
    common.run_psfreq("-S -t 5", basedir)
    if pstate_turbo.exists():
        assert common.read_file(basedir, f"{_PSTATE}/no_turbo") == "1"
    elif boost.exists():
        assert common.read_file(basedir, f"{_CPU}/cpufreq/boost") == "1"

def test_set_plans(basedir):
    """Test the power plans."""

    info_min = _read_info_min(basedir)

    common.run_psfreq("-S -p 3", basedir)
    assert _read_limits(basedir) == (99, 100)
    assert _read_governors(basedir) == {"performance"}

    common.run_psfreq("-S -p powersave", basedir)
    assert _read_limits(basedir) == (info_min, info_min + 1)
    assert _read_governors(basedir) == {"powersave"}

    common.run_psfreq("-S -p 2", basedir)
    assert _read_limits(basedir) == (info_min, 100)
    assert _read_governors(basedir) == {"powersave"}

    # The explicit options take precedence over the plan, regardless of the order.
    common.run_psfreq("-S -n 30 -p max -m 80", basedir)
    assert _read_limits(basedir) == (max(30, info_min), 80)
    assert _read_governors(basedir) == {"performance"}

    common.run_psfreq("-S -p 9", basedir, exp_exc=ErrorBadPlan)

def test_set_plans_turbo(tmp_path):
    """Test that plans take the turbo knob polarity into account."""

    basedir = common.build_emul("intel_pstate", tmp_path / "pstate")
    common.run_psfreq("-S -p 1", basedir)
    assert common.read_file(basedir, f"{_PSTATE}/no_turbo") == "1"
    common.run_psfreq("-S -p 3", basedir)
    assert common.read_file(basedir, f"{_PSTATE}/no_turbo") == "0"

    basedir = common.build_emul("acpi_cpufreq", tmp_path / "acpi")
    common.run_psfreq("-S -p 1", basedir)
    assert common.read_file(basedir, f"{_CPU}/cpufreq/boost") == "0"
    common.run_psfreq("-S -p 3", basedir)
    assert common.read_file(basedir, f"{_CPU}/cpufreq/boost") == "1"

def test_auto_plan(tmp_path):
    """Test the "auto" plan on mains power, on battery and without the power source info."""

    # On mains, the "auto" plan is the "performance" plan.
    basedir = common.build_emul("intel_pstate", tmp_path / "mains")
    common.run_psfreq("-S -p 0", basedir)
    assert _read_limits(basedir) == (20, 100)
    assert common.read_file(basedir, f"{_PSTATE}/no_turbo") == "0"

    # On battery, the "auto" plan is the "powersave" plan.
    basedir = common.build_emul("no_turbo", tmp_path / "battery")
    common.run_psfreq("-S -p auto", basedir)
    assert _read_limits(basedir) == (33, 34)
    assert _read_governors(basedir) == {"powersave"}

    basedir = common.build_emul("acpi_cpufreq", tmp_path / "unknown")
    common.run_psfreq("-S -p 0", basedir, exp_exc=ErrorBadPlan)
    common.run_psfreq("-S -p auto", basedir, exp_exc=ErrorBadPlan)

def test_auto_plan_notice(capsys):
    """Test that the plan the "auto" plan resolved to is reported, unless output is suppressed."""

    for dsname, source, plan in (("intel_pstate", "mains power", "performance"),
                                 ("no_turbo", "battery", "powersave")):
        dspath = str(common.get_dataset_path(dsname))

        assert _Psfreq.main(["-D", dspath, "-S", "-p", "auto"]) == 0
        err = capsys.readouterr().err
        assert f"{_Psfreq.TOOLNAME}: notice: Running on {source}, using the '{plan}' plan" in err

        for opt in ("-q", "-a"):
            assert _Psfreq.main([opt, "-D", dspath, "-S", "-p", "0"]) == 0
            assert capsys.readouterr().err == ""

def test_bad_requests(basedir):
    """Test the bad requests."""

    common.run_psfreq("-S", basedir, exp_exc=ErrorNoRequest)
    common.run_psfreq("-S -G", basedir)
    common.run_psfreq("-S -m abc", basedir, exp_exc=ErrorBadOption)
    common.run_psfreq("-S -t", basedir, exp_exc=ErrorBadOption)
    common.run_psfreq("--bad-option", basedir, exp_exc=ErrorBadOption)

    # Help and version stop processing, the options following them are ignored.
    common.run_psfreq("-S -H", basedir)
    common.run_psfreq("-V -S -m abc", basedir)

def test_not_sane(basedir):
    """Test that nothing is changed if the CPU frequency driver state is not sane."""

    limits = _read_limits(basedir)
    common.write_file(basedir, f"{_CPU}/cpu0/cpufreq/scaling_governor", "")

    common.run_psfreq("-S -m 50 -t 0 -g powersave", basedir, exp_exc=ErrorNotSane)
    assert _read_limits(basedir) == limits
    assert common.read_file(basedir, f"{_CPU}/cpu0/cpufreq/scaling_governor") == ""

    # Reading the settings still works.
    common.run_psfreq("-G", basedir)

    # The state is checked before the plan is applied, so the plan governor is not looked up.
    (basedir / f"{_CPU}/cpu0/cpufreq/scaling_available_governors".lstrip("/")).unlink()
    for plan in ("perf", "1", "max"):
        common.run_psfreq(f"-S -p {plan}", basedir, exp_exc=ErrorNotSane)
    assert _read_limits(basedir) == limits
    assert common.read_file(basedir, f"{_CPU}/cpu0/cpufreq/scaling_governor") == ""

def test_permission_denied(basedir, monkeypatch):
    """Test that changing the settings requires superuser privileges on a real system."""

    limits = _read_limits(basedir)
    governors = _read_governors(basedir)
    monkeypatch.setattr(Trivial, "is_root", lambda: False)

    for cmdline in ("-S -m 50 -n 30", "-S -p 3", "-S -g powersave"):
        args = _Psfreq.parse_arguments(cmdline.split())
        with _SysfsIO.SysfsIO(basedir=basedir) as sysfs_io:
            with pytest.raises(ErrorPermissionDenied):
                _Psfreq.run(args, sysfs_io, emulated=False)

    assert _read_limits(basedir) == limits
    assert _read_governors(basedir) == governors

    # Reading the settings does not require superuser privileges.
    args = _Psfreq.parse_arguments(["-G"])
    with _SysfsIO.SysfsIO(basedir=basedir) as sysfs_io:
        assert _Psfreq.run(args, sysfs_io, emulated=False) == 0

    monkeypatch.setattr(Trivial, "is_root", lambda: True)
    args = _Psfreq.parse_arguments(["-S", "-g", "powersave"])
    with _SysfsIO.SysfsIO(basedir=basedir) as sysfs_io:
        assert _Psfreq.run(args, sysfs_io, emulated=False) == 0
    assert _read_governors(basedir) == {"powersave"}

def test_main(dataset, capsys):
    """Test the 'main()' function, the exit codes and the output."""

    dspath = str(common.get_dataset_path(dataset))

    assert _Psfreq.main(["-D", dspath, "-G"]) == 0
    out = capsys.readouterr().out
    assert "pstate::CPU_DRIVER" in out
    assert "pstate::CPU_MAX" in out

    assert _Psfreq.main(["-D", dspath, "-G", "-r"]) == 0
    assert "CPU[0]" in capsys.readouterr().out

    assert _Psfreq.main(["-V"]) == 0
    assert f"{_Psfreq.TOOLNAME}  " in capsys.readouterr().out

    for argv in ([], ["-H"], ["-D", dspath], ["-H", "--bogus"], ["-H", "-m"],
                 ["-D", dspath, "-S", "--help", "-g"]):
        assert _Psfreq.main(argv) == 0
        captured = capsys.readouterr()
        assert "usage:" in captured.out
        assert captured.err == ""

    assert _Psfreq.main(["-V", "-x"]) == 0
    assert f"{_Psfreq.TOOLNAME}  " in capsys.readouterr().out

    assert _Psfreq.main(["-D", dspath, "-a", "-G"]) == 0
    assert capsys.readouterr().out == ""

    for argv in (["-D", dspath, "-S"], ["-D", dspath, "-S", "-g", "xyz"], ["--bad-option"],
                 ["-D", dspath + ".nonexistent", "-G"]):
        with pytest.raises(SystemExit) as excinfo:
            _Psfreq.main(argv)
        assert excinfo.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "error" in captured.err

    # The '-a' option suppresses the error messages too.
    for argv in (["-a", "-D", dspath, "-S"], ["-a", "--bad-option"]):
        with pytest.raises(SystemExit) as excinfo:
            _Psfreq.main(argv)
        assert excinfo.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""

def test_main_yaml(dataset, capsys):
    """Test the YAML output format."""

    dspath = str(common.get_dataset_path(dataset))

    assert _Psfreq.main(["-D", dspath, "-G", "--yaml"]) == 0
    info = yaml.safe_load(capsys.readouterr().out)
    assert info["driver"]
    assert info["governor"] in info["governors"]
    assert info["min"]["percent"] < info["max"]["percent"]
    assert info["range"]["min_khz"] < info["range"]["max_khz"]
    assert info["cpus"] > 0
    assert info["turbo"]["supported"] == (info["turbo"]["value"] is not None)

    assert _Psfreq.main(["-D", dspath, "-G", "-r", "--yaml"]) == 0
    info = yaml.safe_load(capsys.readouterr().out)
    assert info["realtime_mhz"]
    assert list(info["realtime_mhz"]) == list(range(len(info["realtime_mhz"])))
    assert all(freq > 0 for freq in info["realtime_mhz"].values())

def test_main_basedir(basedir, capsys):
    """Test the '--dataset' option with an emulated tree directory."""

    assert _Psfreq.main(["-D", str(basedir), "-S", "-g", "powersave"]) == 0
    assert _read_governors(basedir) == {"powersave"}
    assert "CPU_GOVERNOR   -> powersave" in capsys.readouterr().out

    # A directory without a sysfs tree.
    common.run_psfreq("-G", basedir / "sys/class", exp_exc=ErrorNotSupported)
