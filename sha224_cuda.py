# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
SHA-224 CUDA kernel, one thread per input.
"""

from numba import cuda, int64

from sha224_kernel import DIGEST_SIZE, sha224_le64

_sha224 = cuda.jit(device=True)(sha224_le64)


@cuda.jit
def sha224_kernel(count, base, out):
    """
    Compute sha224(le64(base + idx)) into out[idx * 28 : idx * 28 + 28] for
    idx in 0..count-1.
    """
    idx = cuda.grid(1)
    if idx >= count:
        return
    w = cuda.local.array(64, dtype=int64)
    _sha224(base + idx, w, out, idx * DIGEST_SIZE)
