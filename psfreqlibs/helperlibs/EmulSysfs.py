# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2022-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Authors: Antti Laakso <antti.laakso@linux.intel.com>
#          Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Build an emulated sysfs and procfs tree from a dataset for testing and debugging purposes.

A dataset is a YAML file describing the files of a real system. The top level keys are section
names, which are only used for grouping and for overriding sections of included datasets. Each
section may contain:
    - files: a mapping of absolute file paths to the file contents.
    - directories: a list of absolute paths of empty directories.

Example:
    include: common.yaml
    cpufreq:
      files:
        /sys/devices/system/cpu/cpu0/cpufreq/scaling_governor: powersave
      directories:
        - /sys/devices/system/cpu/cpu0/cpuidle

The tree is created in a temporary directory, which is removed when the object is closed.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import os
import shutil
import tempfile
import contextlib
from pathlib import Path
from typing import Any, TypedDict
from psfreqlibs.helperlibs import Logging, ClassHelpers, YAML
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNotFound, ErrorBadFormat

class _DatasetSectionTypedDict(TypedDict, total=False):
    """
    Typed dictionary describing a dataset section.

    Attributes:
        files: Emulated file paths and their contents.
        directories: Emulated empty directory paths.
    """

    files: dict[str, Any]
    directories: list[str]

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

class EmulSysfs(ClassHelpers.SimpleCloseContext):
    """
    Build an emulated sysfs and procfs tree from a dataset file. The 'basedir' attribute is the
    root directory of the emulated tree.
    """

    def __init__(self, dspath: str | Path, basedir: Path | None = None):
        """
        Initialize a class instance and build the emulated tree.

        Args:
            dspath: Path to the dataset YAML file.
            basedir: The directory to build the tree in. By default, a temporary directory is
                     created and removed on close.
        """

        self._dspath = Path(dspath)
        self._remove_basedir = basedir is None

        if not self._dspath.is_file():
            raise ErrorNotFound(f"Dataset file '{self._dspath}' does not exist")

        if basedir:
            self.basedir = basedir
        else:
            try:
                self.basedir = Path(tempfile.mkdtemp(prefix=f"emulsysfs_{os.getpid()}_"))
            except OSError as err:
                errmsg = Error(str(err)).indent(2)
                raise Error(f"Failed to create a temporary directory:\n{errmsg}") from err

        try:
            self._build()
        except BaseException:
            self.close()
            raise

    def close(self):
        """Remove the emulated tree if it was created in a temporary directory."""

        if getattr(self, "_remove_basedir", False):
            self._remove_basedir = False
            with contextlib.suppress(OSError):
                shutil.rmtree(self.basedir)

    def _get_real_path(self, path: str) -> Path:
        """Return the path of emulated file 'path' in the base directory."""

        if not path.startswith("/"):
            raise ErrorBadFormat(f"Bad path '{path}' in dataset '{self._dspath}': must be absolute")

        # Path("/tmp") / "/sys" is "/sys", hence the 'lstrip()'.
        return self.basedir / path.lstrip("/")

    def _mkdir(self, dirpath: Path):
        """Create directory 'dirpath' with its parents."""

        try:
            dirpath.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            errmsg = Error(str(err)).indent(2)
            raise Error(f"Failed to create emulated directory '{dirpath}':\n{errmsg}") from err

    def _process_files(self, files: dict[str, Any]):
        """Create emulated files."""

        for path, data in files.items():
            rpath = self._get_real_path(path)
            self._mkdir(rpath.parent)

            if data is None:
                data = ""
            elif isinstance(data, bool):
                data = int(data)

            try:
                with open(rpath, "w", encoding="utf-8") as fobj:
                    fobj.write(f"{data}\n")
            except OSError as err:
                errmsg = Error(str(err)).indent(2)
                raise Error(f"Failed to create emulated file '{rpath}':\n{errmsg}") from err

    def _build(self):
        """Build the emulated tree from the dataset."""

        dataset = YAML.load(self._dspath)

        for name, section in dataset.items():
            if not isinstance(section, dict):
                raise ErrorBadFormat(f"Bad section '{name}' in dataset '{self._dspath}': must be "
                                     f"a mapping")

            section: _DatasetSectionTypedDict
            for dirpath in section.get("directories", []):
                self._mkdir(self._get_real_path(dirpath))
            self._process_files(section.get("files", {}))

        _LOG.debug("Built emulated tree from dataset '%s' in '%s'", self._dspath, self.basedir)
