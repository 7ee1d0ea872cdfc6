# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
SHA-224 kernel for numba's parallel CPU target.

prange splits the index range between numba worker threads; the compiled
code does not hold the GIL.
"""

import numpy as np

from numba import njit, prange

from sha224_kernel import DIGEST_SIZE, sha224_le64

_sha224 = njit(nogil=True)(sha224_le64)


@njit(parallel=True, nogil=True)
def sha224_kernel(count, base, out):
    """
    Compute sha224(le64(base + idx)) into out[idx * 28 : idx * 28 + 28] for
    idx in 0..count-1.
    """
    for idx in prange(count):
        w = np.empty(64, dtype=np.int64)
        _sha224(base + idx, w, out, idx * DIGEST_SIZE)
