#!/usr/bin/python
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Author: Antti Laakso <antti.laakso@intel.com>

"""
The main entry point for the 'psfreq' tool, used when running the project directory or a zipapp
archive of it (e.g., 'python3 -m zipapp . -o psfreq.pyz').
"""

import sys
from psfreqtool._Psfreq import main

if __name__ == "__main__":
    sys.exit(main())
