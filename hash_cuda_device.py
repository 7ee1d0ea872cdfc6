# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
CUDA device queue.

Kernels and copies are enqueued on a single stream, so a copy always starts
after the kernel submitted before it. Set NUMBA_ENABLE_CUDASIM=1 to run on
the numba simulator when no GPU is available.
"""

import numpy as np

from numba import cuda

THREADS_PER_BLOCK = 256


class Event:
    """
    Completion of everything submitted to a stream so far.
    """

    def __init__(self, stream):
        self.stream = stream

    def wait(self):
        self.stream.synchronize()


class GpuQueue:

    def __init__(self, device_id=0, threads_per_block=THREADS_PER_BLOCK):
        cuda.select_device(device_id)
        self.threads_per_block = threads_per_block
        self.stream = cuda.stream()

    def malloc(self, nbytes):
        return cuda.device_array(nbytes, dtype=np.uint8, stream=self.stream)

    def hash_kernel(self, algorithm):
        if algorithm.name == "sha224":
            import sha224_cuda
            return sha224_cuda.sha224_kernel
        raise RuntimeError(f"No CUDA kernel for {algorithm.name}")

    def parallel_for(self, count, kernel, *args):
        blocks = (count + self.threads_per_block - 1) // self.threads_per_block
        if blocks:
            kernel[blocks, self.threads_per_block, self.stream](count, *args)
        return Event(self.stream)

    def memcpy(self, dst, src, depends_on=None):
        if depends_on is not None and depends_on.stream is not self.stream:
            depends_on.wait()
        host = np.frombuffer(dst, dtype=np.uint8)
        src.copy_to_host(host, stream=self.stream)
        return Event(self.stream)

    def close(self):
        self.stream.synchronize()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
