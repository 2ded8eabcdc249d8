# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2023-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Authors: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>
#          Antti Laakso <antti.laakso@linux.intel.com>
#          Niklas Neronin <niklas.neronin@intel.com>

"""
Provide API for reading and writing sysfs files. Implement caching.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import re
import contextlib
from pathlib import Path
from psfreqlibs.helperlibs import Logging, ClassHelpers, Trivial
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNotFound, ErrorBadFormat
from psfreqlibs.helperlibs.Exceptions import ErrorReadFailed, ErrorWriteFailed
from psfreqlibs.helperlibs.Exceptions import ErrorReadNotFound, ErrorWriteNotFound

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

def _snip(val: str) -> str:
    """Shorten a long value for an error message."""

    if len(val) > 24:
        return f"{val[:23]}...snip..."
    return val

class SysfsIO(ClassHelpers.SimpleCloseContext):
    """
    Provide API for reading and writing sysfs files. Implement caching.

    Public methods overview.

    1. Read / write to a file.
        * 'read()' - read a string.
        * 'read_int()' - read an integer.
        * 'write()' - write a string.
        * 'write_int()' - write an integer.
    2. Cache operations.
        * cache_get() - get data from the cache.
        * cache_add() - add data to the cache.
        * cache_remove() - remove data from the cache.
    3. Directory operations.
        * 'exists()' - check if a file or directory exists.
        * 'lsdir()' - list directory entries matching a regular expression.

    All paths are absolute paths of the target system (e.g., '/sys/devices/system/cpu'). They are
    resolved relative to the base directory, which is '/' for the real system, and a directory with
    an emulated sysfs tree in case of emulation.
    """

    def __init__(self, basedir: Path | None = None, enable_cache: bool = True):
        """
        Initialize a class instance.

        Args:
            basedir: The directory to treat as the root of the file system. The real root file
                     system is used if not provided.
            enable_cache: Enable caching if True, disable if False.
        """

        self._enable_cache = enable_cache

        if basedir is None:
            basedir = Path("/")
        self.basedir = basedir

        if str(basedir) == "/":
            self.hostmsg = ""
        else:
            self.hostmsg = f" (emulated root '{basedir}')"

        # The write-through data cache, indexed by the file path.
        self._cache: dict[Path, str] = {}

    def close(self):
        """Uninitialize the class object."""

        self._cache = {}

    def _resolve(self, path: Path) -> Path:
        """Return the real path of target system path 'path'."""

        if not path.is_absolute():
            raise Error(f"BUG: path '{path}' is not absolute")

        return self.basedir / path.relative_to("/")

    def cache_get(self, path: Path) -> str:
        """
        Retrieve the cached value for a given sysfs file path.

        Args:
            path: Path to the sysfs file whose cached value should be retrieved.

        Returns:
            The cached value as a string.

        Raises:
            ErrorNotFound: If caching is disabled or if there is no cached value for the specified
                           path.
        """

        if not self._enable_cache:
            raise ErrorNotFound("Caching is disabled")

        try:
            return self._cache[path]
        except KeyError:
            raise ErrorNotFound(f"sysfs file '{path}' is not cached") from None

    def cache_add(self, path: Path, val: str) -> str:
        """
        Add a value to the cache for a given sysfs file path.

        Args:
            path: Path of the sysfs file to cache.
            val: Value to cache.

        Returns:
            The cached value.
        """

        if self._enable_cache:
            self._cache[path] = val

        return val

    def cache_remove(self, path: Path):
        """
        Remove the cached value for the specified sysfs file path. Do nothing if caching is disabled
        or if there is no cached value for the specified path.

        Args:
            path: Path of the sysfs file whose cached value should be removed.
        """

        if self._enable_cache and path in self._cache:
            del self._cache[path]

    def exists(self, path: Path) -> bool:
        """
        Check if a file or directory exists.

        Args:
            path: The path to check.

        Returns:
            True if 'path' exists, False otherwise.
        """

        return self._resolve(path).exists()

    def lsdir(self, path: Path, regex: str = ".*") -> list[str]:
        """
        Return sorted names of the entries of directory 'path' matching regular expression 'regex'.
        Return an empty list if the directory does not exist.

        Args:
            path: The directory to list.
            regex: The regular expression the entry names have to fully match.

        Returns:
            List of matching directory entry names.
        """

        rpath = self._resolve(path)

        try:
            names = [entry.name for entry in rpath.iterdir()]
        except FileNotFoundError:
            _LOG.debug("Directory '%s' does not exist%s", path, self.hostmsg)
            return []
        except OSError as err:
            errmsg = Error(str(err)).indent(2)
            raise ErrorReadFailed(f"Failed to list directory '{path}'{self.hostmsg}:\n{errmsg}",
                                  path=path) from err

        pattern = re.compile(regex)
        return sorted(name for name in names if pattern.fullmatch(name))

    def read(self, path: Path, what: str = "", cache: bool = True) -> str:
        """
        Read the contents of a sysfs file at the specified path.

        Args:
            path: Path to the sysfs file to read.
            what: Optional short description of what is being read, included in exception messages.
            cache: Whether the cached value may be used and the read value cached. Use 'False' for
                   files with quickly changing contents.

        Returns:
            The contents of the file as a string, stripped from the surrounding white-spaces.

        Raises:
            ErrorReadNotFound: If the file does not exist.
            ErrorReadFailed: If the file cannot be read.
        """

        if cache:
            with contextlib.suppress(ErrorNotFound):
                return self.cache_get(path)

        if what:
            what = f" {what}"

        try:
            with open(self._resolve(path), "r", encoding="utf-8") as fobj:
                val = fobj.read().strip()
        except FileNotFoundError as err:
            errmsg = Error(str(err)).indent(2)
            raise ErrorReadNotFound(f"Failed to read{what} from '{path}'{self.hostmsg}:\n"
                                    f"{errmsg}", path=path) from err
        except OSError as err:
            errmsg = Error(str(err)).indent(2)
            raise ErrorReadFailed(f"Failed to read{what} from '{path}'{self.hostmsg}:\n{errmsg}",
                                  path=path) from err

        _LOG.debug("Read '%s' from%s sysfs file '%s'%s", _snip(val), what, path, self.hostmsg)

        if not cache:
            return val
        return self.cache_add(path, val)

    def read_int(self, path: Path, what: str = "") -> int:
        """
        Read a sysfs file and return its contents as an integer.

        Args:
            path: Path to the sysfs file to read.
            what: Optional short description of what is being read, included in exception messages.

        Returns:
            The integer value read from the file.

        Raises:
            ErrorReadNotFound: If the file does not exist.
            ErrorBadFormat: If the file contents cannot be parsed as an integer.
        """

        val = self.read(path, what=what)

        try:
            return Trivial.str_to_int(val, what=what)
        except Error as err:
            if what:
                what = f" {what}"
            raise ErrorBadFormat(f"Bad contents of{what} sysfs file '{path}'{self.hostmsg}\n"
                                 f"{err.indent(2)}") from err

    def write(self, path: Path, val: str, what: str = ""):
        """
        Write a value to a sysfs file and update the cache.

        Args:
            path: Path to the sysfs file to write to.
            val: Value to write to the file.
            what: Optional short description of what is being written, included in exception
                  messages.

        Raises:
            ErrorWriteNotFound: If the file does not exist.
            ErrorWriteFailed: If the kernel rejected the write.
        """

        if what:
            what = f" {what}"

        self.cache_remove(path)

        _LOG.debug("Writing value '%s' to%s sysfs file '%s'%s",
                   _snip(val), what, path, self.hostmsg)

        rpath = self._resolve(path)
        # Sysfs files are never created by writing.
        if not rpath.is_file():
            raise ErrorWriteNotFound(f"Failed to write value '{_snip(val)}' to{what} sysfs file "
                                     f"'{path}'{self.hostmsg}:\n  File does not exist", path=path)

        try:
            with open(rpath, "w", encoding="utf-8") as fobj:
                fobj.write(val)
        except OSError as err:
            errmsg = Error(str(err)).indent(2)
            raise ErrorWriteFailed(f"Failed to write value '{_snip(val)}' to{what} sysfs file "
                                   f"'{path}'{self.hostmsg}:\n{errmsg}", path=path) from err

        self.cache_add(path, val)

    def write_int(self, path: Path, val: str | int, what: str = ""):
        """
        Write an integer value to a sysfs file.

        Args:
            path: Path to the sysfs file to write to.
            val: Value to write to the file.
            what: Optional short description of what is being written, included in exception
                  messages.

        Raises:
            ErrorWriteNotFound: If the file does not exist.
            ErrorWriteFailed: If the kernel rejected the write.
        """

        int_val = Trivial.str_to_int(val, what=what)
        self.write(path, str(int_val), what=what)
