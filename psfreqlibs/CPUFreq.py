# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Authors: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>
#          Niklas Neronin <niklas.neronin@intel.com>

"""
Provide API for reading and changing CPU frequency settings via Linux sysfs.

Two flavors of CPU frequency drivers are supported:
  * 'intel_pstate': the min/max frequency limits are controlled via the global 'min_perf_pct' and
    'max_perf_pct' files, and turbo via the 'no_turbo' file.
  * all other drivers (e.g., 'acpi-cpufreq'): the min/max frequency limits are controlled via
    per-CPU 'scaling_min_freq' and 'scaling_max_freq' files, and turbo via the 'cpufreq/boost'
    file.

The governor is always controlled via per-CPU 'scaling_governor' files.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import re
from pathlib import Path
from psfreqlibs import _SysfsIO
from psfreqlibs.CPUFreqTypes import HardwareSnapshot
from psfreqlibs.helperlibs import Logging, ClassHelpers, Trivial
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNotSupported

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

_SYSFS_CPU = Path("/sys/devices/system/cpu")
_PROC_CPUINFO = Path("/proc/cpuinfo")

def _khz_to_pct(khz: int, info_max_khz: int) -> int:
    """
    Convert a frequency in kHz into a percentage of 'info_max_khz', rounding to the nearest
    integer.

    Note, limits are written as 'info_max_khz * pct // 100', which rounds down. Rounding down on
    read as well would report the percentage 1% less than requested for many 'info_max_khz' values.
    """

    return (khz * 100 + info_max_khz // 2) // info_max_khz

class CPUFreq(ClassHelpers.SimpleCloseContext):
    """
    Provide API for reading and changing CPU frequency settings via Linux sysfs.

    Public methods overview.

    1. Read the driver state.
        * 'get_snapshot()' - read the min/max limits, governor and turbo state.
        * 'get_available_governors()' - read the list of available governors.
        * 'get_realtime_freqs()' - read the current frequency of every CPU.
    2. Change the driver settings.
        * 'set_min()', 'set_max()' - set the min/max frequency limit in percent.
        * 'set_turbo()' - set the turbo knob value.
        * 'set_governor()' - set the governor for all CPUs.
    """

    def __init__(self, sysfs_io: _SysfsIO.SysfsIO | None = None):
        """
        Initialize a class instance.

        Args:
            sysfs_io: The sysfs access object. A new one accessing the real sysfs is created if not
                      provided.
        """

        self._close_sysfs_io = sysfs_io is None

        self._sysfs_io: _SysfsIO.SysfsIO
        if sysfs_io:
            self._sysfs_io = sysfs_io
        else:
            self._sysfs_io = _SysfsIO.SysfsIO()

        self._cpus: list[int] = []
        self._driver: str | None = None

    def close(self):
        """Uninitialize the class object."""

        ClassHelpers.close(self, close_attrs=("_sysfs_io",))

    def _get_cpufreq_path(self, cpu: int, fname: str) -> Path:
        """Return path to the 'fname' file in the 'cpufreq' sysfs directory of CPU 'cpu'."""
        return _SYSFS_CPU / f"cpu{cpu}" / "cpufreq" / fname

    def get_cpus(self) -> list[int]:
        """
        Return the sorted list of CPU numbers.

        Returns:
            List of numbers of CPUs that have a 'cpufreq' sysfs directory.

        Raises:
            ErrorNotSupported: If no CPU has the 'cpufreq' sysfs directory.
        """

        if self._cpus:
            return self._cpus

        for name in self._sysfs_io.lsdir(_SYSFS_CPU, regex=r"cpu[0-9]+"):
            cpu = int(name[3:])
            if self._sysfs_io.exists(_SYSFS_CPU / name / "cpufreq"):
                self._cpus.append(cpu)

        if not self._cpus:
            raise ErrorNotSupported(f"No CPU frequency scaling support found"
                                    f"{self._sysfs_io.hostmsg}:\n  No CPUs with a 'cpufreq' "
                                    f"directory in '{_SYSFS_CPU}'")

        self._cpus.sort()
        return self._cpus

    def get_driver(self) -> str:
        """
        Return the CPU frequency driver name, or an empty string if it is unknown.
        """

        if self._driver is not None:
            return self._driver

        cpu = self.get_cpus()[0]
        try:
            self._driver = self._sysfs_io.read(self._get_cpufreq_path(cpu, "scaling_driver"),
                                               what="CPU frequency driver name")
        except Error as err:
            _LOG.debug("Failed to detect the CPU frequency driver:\n%s", err.indent(2))
            self._driver = ""

        if not self._driver and self._sysfs_io.exists(_SYSFS_CPU / "intel_pstate"):
            self._driver = "intel_pstate"

        return self._driver

    def is_pstate(self) -> bool:
        """Return 'True' if the CPU frequency driver is 'intel_pstate'."""
        return self.get_driver() == "intel_pstate"

    def _get_turbo_path(self) -> Path:
        """Return path to the turbo knob of the CPU frequency driver."""

        if self.is_pstate():
            return _SYSFS_CPU / "intel_pstate" / "no_turbo"
        return _SYSFS_CPU / "cpufreq" / "boost"

    def _read_int_or_none(self, path: Path, what: str) -> int | None:
        """Read an integer from 'path', return 'None' if it cannot be read."""

        try:
            return self._sysfs_io.read_int(path, what=what)
        except Error as err:
            _LOG.debug("Failed to read %s:\n%s", what, err.indent(2))
            return None

    def get_available_governors(self) -> tuple[str, ...]:
        """
        Return names of available governors, in the order the kernel reports them. Return an empty
        tuple if the list cannot be read.
        """

        path = self._get_cpufreq_path(self.get_cpus()[0], "scaling_available_governors")
        try:
            governors = self._sysfs_io.read(path, what="available CPU frequency governors")
        except Error as err:
            _LOG.debug("Failed to read available governors:\n%s", err.indent(2))
            return ()

        return tuple(Trivial.list_dedup(governors.split()))

    def get_snapshot(self) -> HardwareSnapshot:
        """
        Read the CPU frequency driver state. Settings of CPU 0 are assumed to be representative of
        all CPUs. Values that cannot be read are 'None' in the returned snapshot (an empty string
        for the governor), so that the caller can decide whether the system is sane.

        Returns:
            The hardware snapshot.
        """

        cpus = self.get_cpus()
        cpu = cpus[0]
        pstate = self.is_pstate()

        info_min_khz = self._read_int_or_none(self._get_cpufreq_path(cpu, "cpuinfo_min_freq"),
                                              "minimum CPU frequency")
        info_max_khz = self._read_int_or_none(self._get_cpufreq_path(cpu, "cpuinfo_max_freq"),
                                              "maximum CPU frequency")
        scaling_min_khz = self._read_int_or_none(self._get_cpufreq_path(cpu, "scaling_min_freq"),
                                                 "minimum CPU frequency limit")
        scaling_max_khz = self._read_int_or_none(self._get_cpufreq_path(cpu, "scaling_max_freq"),
                                                 "maximum CPU frequency limit")

        info_min = info_max = None
        if info_min_khz is not None and info_max_khz:
            info_min = info_min_khz * 100 // info_max_khz
            info_max = 100

        cur_min = cur_max = None
        if pstate:
            cur_min = self._read_int_or_none(_SYSFS_CPU / "intel_pstate" / "min_perf_pct",
                                             "minimum performance percentage")
            cur_max = self._read_int_or_none(_SYSFS_CPU / "intel_pstate" / "max_perf_pct",
                                             "maximum performance percentage")
        elif info_max_khz:
            if scaling_min_khz is not None:
                cur_min = _khz_to_pct(scaling_min_khz, info_max_khz)
            if scaling_max_khz is not None:
                cur_max = _khz_to_pct(scaling_max_khz, info_max_khz)

        try:
            governor = self._sysfs_io.read(self._get_cpufreq_path(cpu, "scaling_governor"),
                                           what="CPU frequency governor")
        except Error as err:
            _LOG.debug("Failed to read the governor:\n%s", err.indent(2))
            governor = ""

        turbo = self._read_int_or_none(self._get_turbo_path(), "turbo knob")
        if turbo is not None and turbo not in (0, 1):
            _LOG.debug("Unexpected turbo knob value '%d', treating turbo as unsupported", turbo)
            turbo = None

        snapshot = HardwareSnapshot(driver=self.get_driver(), pstate=pstate,
                                    info_min=info_min, info_max=info_max,
                                    cur_min=cur_min, cur_max=cur_max,
                                    governor=governor, governors=self.get_available_governors(),
                                    turbo=turbo, cpus_count=len(cpus),
                                    info_min_khz=info_min_khz, info_max_khz=info_max_khz,
                                    scaling_min_khz=scaling_min_khz,
                                    scaling_max_khz=scaling_max_khz)
        _LOG.debug("CPU frequency driver state%s: %s", self._sysfs_io.hostmsg, snapshot)
        return snapshot

    def get_realtime_freqs(self) -> list[float]:
        """
        Read and return the current frequency of every CPU in MHz. The values are read from
        '/proc/cpuinfo', or from the 'scaling_cur_freq' sysfs files if '/proc/cpuinfo' does not
        provide them (e.g., on non-x86 systems). The values are never cached.

        Returns:
            List of CPU frequencies in MHz, one per CPU.
        """

        freqs: list[float] = []

        with _SysfsIO.SysfsIO(basedir=self._sysfs_io.basedir, enable_cache=False) as sysfs_io:
            try:
                cpuinfo = sysfs_io.read(_PROC_CPUINFO, what="CPU information")
            except Error as err:
                _LOG.debug("Failed to read '%s':\n%s", _PROC_CPUINFO, err.indent(2))
                cpuinfo = ""

            for line in cpuinfo.splitlines():
                mobj = re.match(r"^cpu MHz\s*:\s*(\S+)$", line.strip())
                if mobj:
                    freqs.append(Trivial.str_to_float(mobj.group(1), what="CPU frequency"))

            if freqs:
                return freqs

            for cpu in self.get_cpus():
                path = self._get_cpufreq_path(cpu, "scaling_cur_freq")
                khz = sysfs_io.read_int(path, what="current CPU frequency")
                freqs.append(khz / 1000)

        return freqs

    def _pct_to_khz(self, pct: int) -> int:
        """Convert a percentage of the maximum CPU frequency into kHz, rounding down."""

        info_max_khz = self._sysfs_io.read_int(self._get_cpufreq_path(self.get_cpus()[0],
                                                                      "cpuinfo_max_freq"),
                                               what="maximum CPU frequency")
        return info_max_khz * pct // 100

    def _set_limit(self, pct: int, limit: str):
        """Implement 'set_min()' and 'set_max()'."""

        if self.is_pstate():
            path = _SYSFS_CPU / "intel_pstate" / f"{limit}_perf_pct"
            self._sysfs_io.write_int(path, pct, what=f"{limit}imum performance percentage")
            return

        khz = self._pct_to_khz(pct)
        for cpu in self.get_cpus():
            path = self._get_cpufreq_path(cpu, f"scaling_{limit}_freq")
            self._sysfs_io.write_int(path, khz, what=f"{limit}imum CPU frequency limit")

    def set_min(self, pct: int):
        """
        Set the minimum CPU frequency limit for all CPUs.

        Args:
            pct: The limit in percent of the maximum CPU frequency.
        """

        _LOG.debug("Setting minimum CPU frequency to %d%%", pct)
        self._set_limit(pct, "min")

    def set_max(self, pct: int):
        """
        Set the maximum CPU frequency limit for all CPUs.

        Args:
            pct: The limit in percent of the maximum CPU frequency.
        """

        _LOG.debug("Setting maximum CPU frequency to %d%%", pct)
        self._set_limit(pct, "max")

    def set_turbo(self, val: int):
        """
        Write the turbo knob of the CPU frequency driver.

        Args:
            val: The raw knob value, 0 or 1. The meaning depends on the driver, see
                 'HardwareSnapshot.turbo'.
        """

        if val not in (0, 1):
            raise Error(f"BUG: bad turbo knob value '{val}'")

        _LOG.debug("Setting turbo knob to %d", val)
        self._sysfs_io.write_int(self._get_turbo_path(), val, what="turbo knob")

    def set_governor(self, governor: str):
        """
        Set the governor for all CPUs.

        Args:
            governor: Name of the governor to set.
        """

        _LOG.debug("Setting governor to '%s'", governor)
        for cpu in self.get_cpus():
            path = self._get_cpufreq_path(cpu, "scaling_governor")
            self._sysfs_io.write(path, governor, what="CPU frequency governor")
