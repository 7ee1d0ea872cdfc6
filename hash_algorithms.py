# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
Hash algorithms known to the benchmark.

The digest function is used as a black box: it must be deterministic and
safe to call concurrently from multiple threads.
"""

import hashlib
import struct

from collections import namedtuple

Algorithm = namedtuple("Algorithm", "name,digest_size,digest")


def sha224(data):
    return hashlib.sha224(data).digest()


ALGORITHMS = {
    "sha224": Algorithm("sha224", hashlib.sha224().digest_size, sha224),
}


def encode(i):
    """
    Return the hash input for iteration i.

    The input is i as little-endian unsigned 64 bit integer, so results are
    the same on every platform.
    """
    return struct.pack("<Q", i)
