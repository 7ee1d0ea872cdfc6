# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
SHA-224 of a little-endian 64 bit integer.

sha224_le64() is plain Python written in the subset compiled by both numba
targets. sha224_cpu and sha224_cuda wrap it with njit and cuda.jit.

The 8 byte message always fits in a single 512 bit block:

    word 0-1    input bytes (little-endian value, read big-endian)
    word 2      0x80000000 (padding start)
    word 3-14   zero
    word 15     64 (message length in bits)

Arithmetic is done on int64 values masked to 32 bits, avoiding unsigned
typing surprises in numba.
"""

import numpy as np

DIGEST_SIZE = 28

MASK = 0xFFFFFFFF

H0 = np.array(
    [
        0xC1059ED8,
        0x367CD507,
        0x3070DD17,
        0xF70E5939,
        0xFFC00B31,
        0x68581511,
        0x64F98FA7,
        0xBEFA4FA4,
    ],
    dtype=np.int64,
)

K = np.array(
    [
        0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5,
        0x3956C25B, 0x59F111F1, 0x923F82A4, 0xAB1C5ED5,
        0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3,
        0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174,
        0xE49B69C1, 0xEFBE4786, 0x0FC19DC6, 0x240CA1CC,
        0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
        0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7,
        0xC6E00BF3, 0xD5A79147, 0x06CA6351, 0x14292967,
        0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13,
        0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85,
        0xA2BFE8A1, 0xA81A664B, 0xC24B8B70, 0xC76C51A3,
        0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
        0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5,
        0x391C0CB3, 0x4ED8AA4A, 0x5B9CCA4F, 0x682E6FF3,
        0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208,
        0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
    ],
    dtype=np.int64,
)


def sha224_le64(value, w, out, offset):
    """
    Write sha224(le64(value)) to out[offset:offset + 28].

    w is a 64 item int64 scratch array owned by the caller. Helpers are
    inlined by hand, since a device function cannot call njit functions and
    the other way around.
    """
    lo = value & MASK
    hi = (value >> 32) & MASK
    w[0] = (((lo & 0xFF) << 24) | (((lo >> 8) & 0xFF) << 16)
            | (((lo >> 16) & 0xFF) << 8) | ((lo >> 24) & 0xFF))
    w[1] = (((hi & 0xFF) << 24) | (((hi >> 8) & 0xFF) << 16)
            | (((hi >> 16) & 0xFF) << 8) | ((hi >> 24) & 0xFF))
    w[2] = 0x80000000
    for t in range(3, 15):
        w[t] = 0
    w[15] = 64

    for t in range(16, 64):
        x = w[t - 15]
        s0 = (((x >> 7) | (x << 25)) ^ ((x >> 18) | (x << 14))
              ^ (x >> 3)) & MASK
        x = w[t - 2]
        s1 = (((x >> 17) | (x << 15)) ^ ((x >> 19) | (x << 13))
              ^ (x >> 10)) & MASK
        w[t] = (w[t - 16] + s0 + w[t - 7] + s1) & MASK

    a = H0[0]
    b = H0[1]
    c = H0[2]
    d = H0[3]
    e = H0[4]
    f = H0[5]
    g = H0[6]
    h = H0[7]

    for t in range(64):
        s1 = (((e >> 6) | (e << 26)) ^ ((e >> 11) | (e << 21))
              ^ ((e >> 25) | (e << 7))) & MASK
        ch = (e & f) ^ ((e ^ MASK) & g)
        t1 = (h + s1 + ch + K[t] + w[t]) & MASK
        s0 = (((a >> 2) | (a << 30)) ^ ((a >> 13) | (a << 19))
              ^ ((a >> 22) | (a << 10))) & MASK
        maj = (a & b) ^ (a & c) ^ (b & c)
        t2 = (s0 + maj) & MASK
        h = g
        g = f
        f = e
        e = (d + t1) & MASK
        d = c
        c = b
        b = a
        a = (t1 + t2) & MASK

    # SHA-224 drops the last state word.
    w[0] = (H0[0] + a) & MASK
    w[1] = (H0[1] + b) & MASK
    w[2] = (H0[2] + c) & MASK
    w[3] = (H0[3] + d) & MASK
    w[4] = (H0[4] + e) & MASK
    w[5] = (H0[5] + f) & MASK
    w[6] = (H0[6] + g) & MASK

    for j in range(7):
        word = w[j]
        out[offset + 4 * j] = (word >> 24) & 0xFF
        out[offset + 4 * j + 1] = (word >> 16) & 0xFF
        out[offset + 4 * j + 2] = (word >> 8) & 0xFF
        out[offset + 4 * j + 3] = word & 0xFF
