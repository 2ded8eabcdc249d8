#!/usr/bin/env python3
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Antti Laakso <antti.laakso@linux.intel.com>
#         Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""Common functions for psfreq tests."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from pathlib import Path
from psfreqlibs import _SysfsIO
from psfreqlibs.CPUFreqTypes import HardwareSnapshot
from psfreqlibs.helperlibs import EmulSysfs
from psfreqtool import _Psfreq

if typing.TYPE_CHECKING:
    from typing import Any

def get_dataset_path(dataset: str) -> Path:
    """
    Get the path to the dataset file.

    Args:
        dataset: Name of the dataset.

    Returns:
        Path to the dataset YAML file.
    """

    return Path(__file__).parent.resolve() / "data" / f"{dataset}.yaml"

def build_emul(dataset: str, basedir: Path) -> Path:
    """
    Build the emulated sysfs tree of a dataset.

    Args:
        dataset: Name of the dataset to emulate.
        basedir: The directory to build the emulated tree in.

    Returns:
        The root directory of the emulated tree.
    """

    with EmulSysfs.EmulSysfs(get_dataset_path(dataset), basedir=basedir) as emul:
        return emul.basedir

def read_file(basedir: Path, path: str) -> str:
    """Read emulated file 'path' and return its stripped contents."""

    with open(basedir / path.lstrip("/"), "r", encoding="utf-8") as fobj:
        return fobj.read().strip()

def write_file(basedir: Path, path: str, val: Any):
    """Change the contents of emulated file 'path'."""

    with open(basedir / path.lstrip("/"), "w", encoding="utf-8") as fobj:
        fobj.write(f"{val}\n")

def run_psfreq(arguments: str, basedir: Path, exp_exc: type[Exception] | None = None) -> int | None:
    """
    Run the 'psfreq' tool against an emulated system and verify the outcome.

    Args:
        arguments: The command-line arguments, e.g., '-S -m 50'.
        basedir: The root directory of the emulated system.
        exp_exc: The expected exception. By default, any exception is considered a failure.

    Returns:
        The tool exit code, or 'None' if the expected exception was raised.
    """

    try:
        args = _Psfreq.parse_arguments(arguments.split())
        with _SysfsIO.SysfsIO(basedir=basedir) as sysfs_io:
            ret = _Psfreq.run(args, sysfs_io, emulated=True)
    except Exception as err: # pylint: disable=broad-except
        if exp_exc is None:
            assert False, f"command 'psfreq {arguments}' raised the following exception:\n" \
                          f"- {type(err).__name__}({err})"

        if isinstance(err, exp_exc):
            return None

        assert False, f"command 'psfreq {arguments}' raised the following exception:\n" \
                      f"- {type(err).__name__}({err})\nbut it was expected to raise the " \
                      f"following exception:\n- {exp_exc.__name__}"

    if exp_exc is not None:
        assert False, f"command 'psfreq {arguments}' did not raise the following exception " \
                      f"type:\n- {exp_exc.__name__}"

    return ret

def make_snapshot(**kwargs: Any) -> HardwareSnapshot:
    """
    Build a hardware snapshot of a sane 'intel_pstate' system. Fields can be overridden with
    keyword arguments.
    """

    fields: dict[str, Any] = {
        "driver": "intel_pstate",
        "pstate": True,
        "info_min": 20,
        "info_max": 100,
        "cur_min": 20,
        "cur_max": 100,
        "governor": "powersave",
        "governors": ("performance", "powersave"),
        "turbo": 0,
        "cpus_count": 4,
    }
    fields.update(kwargs)
    return HardwareSnapshot(**fields)
