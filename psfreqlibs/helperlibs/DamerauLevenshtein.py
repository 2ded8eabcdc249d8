# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2021 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Jan-Kristian Herring

"""
This module provides the Damerau-Levenshtein distance calculation helpers.
"""

def osa_distance(first, second):
    """Return the 'optimal string alignment distance' between strings 'first' and 'second'."""

    matrix = [[idx] for idx in range(len(first) + 1)]
    matrix[0] = list(range(len(second) + 1))

    for fdx in range(1, len(first) + 1):
        for sdx in range(1, len(second) + 1):
            # Cost 1 if we need an action to correct this part of the string.
            cost = 0 if first[fdx-1] == second[sdx-1] else 1

            matrix[fdx].append(min(matrix[fdx-1][sdx] + 1, # Deletion.
                                   matrix[fdx][sdx-1] + 1, # Insertion.
                                   matrix[fdx-1][sdx-1] + cost)) # Substitution.

            if fdx > 1 and sdx > 1 and first[fdx-1] == second[sdx-2] and \
               first[fdx-2] == second[sdx-1]: # Transposition.
                matrix[fdx][sdx] = min(matrix[fdx][sdx], matrix[fdx-2][sdx-2] + cost)

    return matrix[len(first)][len(second)]

def closest_match(string, strings, max_distance=2):
    """
    Return the string from 'strings' closest to 'string', or 'None' if none of them is within
    'max_distance' edits. The comparison is case-sensitive, because command line options are.
    """

    best = (max_distance + 1, None)
    for option in strings:
        score = osa_distance(string, option)
        if score < best[0]:
            best = (score, option)

    return best[1]
