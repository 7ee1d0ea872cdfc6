# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
Compute devices for the accelerated runners.

A queue is the parallel task runtime used by the block engine. It exposes a
small SYCL like interface:

    buf = queue.malloc(nbytes)
    kernel = queue.hash_kernel(algorithm)
    ev = queue.parallel_for(count, kernel, base, buf)
    ev = queue.memcpy(dst, buf, depends_on=ev)
    ev.wait()

The engine never schedules work itself; it only launches kernels and waits
for the copy back.
"""

from concurrent.futures import ThreadPoolExecutor

import numba
import numpy as np


class Event:
    """
    Completion of work submitted to a CpuQueue.
    """

    def __init__(self, futures):
        self.futures = futures

    def wait(self):
        # Raises the first task failure.
        for f in self.futures:
            f.result()


class CpuQueue:
    """
    Run numba parallel kernels on the host CPUs.

    Work is submitted to a single queue thread, so a copy always runs after
    the kernel submitted before it. Inside a kernel, prange splits the index
    range between workers numba threads.
    """

    def __init__(self, workers=None):
        limit = numba.config.NUMBA_NUM_THREADS
        self.workers = min(workers or limit, limit)
        # numba thread count is per thread, set it in the queue thread.
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="cpu-queue",
            initializer=numba.set_num_threads,
            initargs=(self.workers,),
        )

    def malloc(self, nbytes):
        return np.zeros(nbytes, dtype=np.uint8)

    def hash_kernel(self, algorithm):
        if algorithm.name == "sha224":
            import sha224_cpu
            return sha224_cpu.sha224_kernel
        raise RuntimeError(f"No CPU kernel for {algorithm.name}")

    def parallel_for(self, count, kernel, *args):
        return Event([self._executor.submit(kernel, count, *args)])

    def memcpy(self, dst, src, depends_on=None):
        def copy():
            if depends_on is not None:
                depends_on.wait()
            np.frombuffer(dst, dtype=np.uint8)[:] = src

        return Event([self._executor.submit(copy)])

    def close(self):
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def open_queue(runner, **kwargs):
    if runner == "cpu":
        return CpuQueue(**kwargs)
    if runner == "gpu":
        # numba.cuda is only needed for the gpu runner.
        import hash_cuda_device
        return hash_cuda_device.GpuQueue(**kwargs)
    raise RuntimeError(f"Runner {runner!r} has no device")
