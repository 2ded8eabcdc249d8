# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Provide API for detecting whether the system runs on mains (AC) power or on battery.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
from psfreqlibs import _SysfsIO
from psfreqlibs.helperlibs import Logging, ClassHelpers
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNotSupported

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

_SYSFS_POWER_SUPPLY = Path("/sys/class/power_supply")

class PowerSupply(ClassHelpers.SimpleCloseContext):
    """Detect the power source of the system via the 'power_supply' sysfs class."""

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

        self._mains: list[str] | None = None

    def close(self):
        """Uninitialize the class object."""

        ClassHelpers.close(self, close_attrs=("_sysfs_io",))

    def _get_mains(self) -> list[str]:
        """Return names of the mains power supplies."""

        if self._mains is not None:
            return self._mains

        self._mains = []
        for name in self._sysfs_io.lsdir(_SYSFS_POWER_SUPPLY):
            try:
                supply_type = self._sysfs_io.read(_SYSFS_POWER_SUPPLY / name / "type",
                                                  what="power supply type")
            except Error as err:
                _LOG.debug("Skipping power supply '%s':\n%s", name, err.indent(2))
                continue

            if supply_type == "Mains":
                self._mains.append(name)

        _LOG.debug("Mains power supplies%s: %s", self._sysfs_io.hostmsg, self._mains)
        return self._mains

    def is_supported(self) -> bool:
        """Return 'True' if the system reports the mains power supply status."""
        return bool(self._get_mains())

    def on_mains(self) -> bool:
        """
        Check whether the system is powered from mains.

        Returns:
            True if at least one mains power supply is online, False otherwise.

        Raises:
            ErrorNotSupported: If the system does not report the mains power supply status.
        """

        mains = self._get_mains()
        if not mains:
            raise ErrorNotSupported(f"No mains power supply information found"
                                    f"{self._sysfs_io.hostmsg}")

        for name in mains:
            online = self._sysfs_io.read_int(_SYSFS_POWER_SUPPLY / name / "online",
                                             what="power supply online status")
            if online == 1:
                return True

        return False
