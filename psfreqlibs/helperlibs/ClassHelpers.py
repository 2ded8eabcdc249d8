# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Miscellaneous common helpers for class objects.
"""

from  __future__ import annotations # Remove when switching to Python 3.10+.

from typing import Any, Sequence
from psfreqlibs.helperlibs import Logging

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

class SimpleCloseContext:
    """
    Provide a simple context manager implementation for classes.

    This class can be subclassed to avoid duplicating the implementation of the '__enter__()' and
    '__exit__()' methods. It ensures that the 'close()' method is called automatically when exiting
    the runtime context.
    """

    def close(self):
        """Uninitialize the class object. Supposed to be implemented by the subclass."""

    def __enter__(self):
        """Enter the run-time context."""
        return self

    def __exit__(self, *_: Any):
        """Exit from the runtime context."""

        self.close()

def close(obj: Any, close_attrs: Sequence[str] = (), unref_attrs: Sequence[str] = ()):
    """
    Uninitialize a class object: close and drop references to its attributes.

    Attributes in 'close_attrs' are closed unless the object has the '_close_<name>' attribute
    (e.g., '_close_sysfs_io' for '_sysfs_io') set to False, which means the attribute was created
    outside of the object. Attributes in 'unref_attrs' are not closed, only set to 'None'.

    Args:
        obj: The object to uninitialize.
        close_attrs: Names of attributes to close and dereference.
        unref_attrs: Names of attributes to dereference without closing.
    """

    for name in close_attrs:
        attr = getattr(obj, name, None)
        if attr is None:
            continue

        if name.startswith("_"):
            flag = f"_close{name}"
        else:
            flag = f"_close_{name}"

        if getattr(obj, flag, True):
            _LOG.debug("Closing '%s.%s'", type(obj).__name__, name)
            attr.close()

        setattr(obj, name, None)

    for name in unref_attrs:
        if getattr(obj, name, None) is not None:
            setattr(obj, name, None)
