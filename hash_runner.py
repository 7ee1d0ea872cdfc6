# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
Block streaming execution engine.

A run computes digests for iterations 0..N-1 into an output buffer, where
slot i holds the digest of iteration i. Work is done in blocks of
hashes_per_block iterations. After a block is fully visible in the output
buffer, the sink is called once with the block:

    sink(Block(index, start, count))

A run with no iterations has no blocks, so the sink is never called.
"""

from collections import namedtuple

import hash_device
from hash_algorithms import encode

RUNNERS = ("serial", "cpu", "gpu")

Block = namedtuple("Block", "index,start,count")


class ExecutionPlan(namedtuple(
        "ExecutionPlan", "algorithm,runner,hashes_per_block,num_blocks")):
    __slots__ = ()

    @property
    def total_count(self):
        return self.hashes_per_block * self.num_blocks

    def blocks(self):
        if self.hashes_per_block == 0:
            return
        for i in range(self.num_blocks):
            yield Block(i, i * self.hashes_per_block, self.hashes_per_block)


class OutputBuffer:
    """
    Host storage for all digests of a run.
    """

    def __init__(self, count, digest_size):
        self.count = count
        self.digest_size = digest_size
        self.data = bytearray(count * digest_size)

    def __len__(self):
        return self.count

    def write(self, slot, digest):
        offset = slot * self.digest_size
        self.data[offset:offset + self.digest_size] = digest

    def view(self, start, count):
        """
        Return a writable view of count slots starting at start.
        """
        return memoryview(self.data)[
            start * self.digest_size:(start + count) * self.digest_size]

    def digest(self, slot):
        offset = slot * self.digest_size
        return bytes(self.data[offset:offset + self.digest_size])

    def close(self):
        self.data = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class ScratchArena:
    """
    Fixed size device buffers reused across blocks.

    A buffer must be acquired before launching work writing to it, and
    released only after waiting for the copy back. Breaking this order raises
    RuntimeError instead of silently reusing a buffer in flight.
    """

    def __init__(self, queue, nbytes, buffers=1):
        self.nbytes = nbytes
        self._free = [queue.malloc(nbytes) for _ in range(buffers)]
        self._busy = []

    def acquire(self):
        if not self._free:
            raise RuntimeError("No free scratch buffer")
        buf = self._free.pop()
        self._busy.append(buf)
        return buf

    def release(self, buf):
        for i, b in enumerate(self._busy):
            if b is buf:
                del self._busy[i]
                self._free.append(buf)
                return
        raise RuntimeError("Releasing scratch buffer not acquired")

    def close(self):
        if self._busy:
            raise RuntimeError(
                f"Closing arena with {len(self._busy)} buffers in flight")
        self._free = []

    def __enter__(self):
        return self

    def __exit__(self, t, v, tb):
        # Do not hide the original error with a busy buffer error.
        if t is None:
            self.close()


def run(plan, algorithm, output, sink):
    """
    Run plan with the selected runner.
    """
    if plan.runner == "serial":
        run_serial(plan, algorithm, output, sink)
    else:
        with hash_device.open_queue(plan.runner) as queue:
            run_accelerated(plan, algorithm, queue, output, sink)


def run_serial(plan, algorithm, output, sink):
    """
    Compute all digests in the calling thread.

    The sink is called whenever the last slot of a block was written. If the
    run ends with a partial block, it is flushed once after the loop.
    """
    n = plan.hashes_per_block
    total = plan.total_count
    start = 0

    for i in range(total):
        output.write(i, algorithm.digest(encode(i)))
        if (i + 1) % n == 0:
            sink(Block(i // n, start, i + 1 - start))
            start = i + 1

    if start < total:
        sink(Block(start // n, start, total - start))


def run_accelerated(plan, algorithm, queue, output, sink):
    """
    Compute digests block by block on queue.

    Each block is computed into a scratch buffer and copied to the output
    buffer. We wait for the copy before reusing the scratch buffer and before
    calling the sink.
    """
    n = plan.hashes_per_block
    if n == 0:
        return

    kernel = queue.hash_kernel(algorithm)

    with ScratchArena(queue, n * algorithm.digest_size) as arena:
        for block in plan.blocks():
            scratch = arena.acquire()
            hashes_ev = queue.parallel_for(n, kernel, block.start, scratch)
            copy_ev = queue.memcpy(
                output.view(block.start, n), scratch, depends_on=hashes_ev)
            copy_ev.wait()
            arena.release(scratch)
            sink(block)
