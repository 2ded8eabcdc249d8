#!/usr/bin/env python
#
# Copyright (C) 2022-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Author: Antti Laakso <antti.laakso@linux.intel.com>
#         Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""This configuration file adds the custom '--dataset' option for the tests."""

from pathlib import Path
import pytest

def pytest_addoption(parser):
    """Add custom pytest options."""

    text = """This option specifies the dataset to use for emulation. By default, all datasets are
              used. Please, find the available datasets in the "data" subdirectory."""
    parser.addoption("--dataset", dest="dataset", default="all", help=text)

def get_datasets():
    """Find all dataset files in the 'tests/data' directory and yield the dataset names."""

    basepath = Path(__file__).parent.resolve() / "data"
    for path in sorted(basepath.iterdir()):
        # The "common" dataset contains data for all SUTs and does not represent a single host, so
        # skip it.
        if path.suffix != ".yaml" or path.stem == "common":
            continue

        yield path.stem

def pytest_generate_tests(metafunc):
    """Generate tests with custom options."""

    if "dataset" not in metafunc.fixturenames:
        return

    dataset = metafunc.config.getoption("dataset")
    if dataset == "all":
        params = list(get_datasets())
    else:
        params = [dataset]

    metafunc.parametrize("dataset", params)

def pytest_configure(config):
    """Verify the existence of requested dataset."""

    dataset = config.getoption("dataset")

    if dataset != "all":
        path = Path(__file__).parent.resolve() / "data" / f"{dataset}.yaml"

        if not path.exists():
            raise pytest.exit(f"Did not find dataset '{dataset}'.")

    print(f"Test parameters: dataset: '{dataset}'")
