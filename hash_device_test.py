# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

import hashlib
import os
import struct
import subprocess
import sys
import time

import numba
import numpy as np
import pytest

import hash_device
from hash_algorithms import ALGORITHMS
from hash_device import CpuQueue

ROOT_DIR = os.path.dirname(__file__)


def test_workers_limited_by_numba_threads():
    limit = numba.config.NUMBA_NUM_THREADS
    with CpuQueue(workers=limit + 10) as queue:
        assert queue.workers == limit
    with CpuQueue() as queue:
        assert queue.workers == limit


def test_parallel_for_error():
    def kernel(count):
        raise ValueError("kernel failed")

    with CpuQueue(workers=1) as queue:
        ev = queue.parallel_for(5, kernel)
        with pytest.raises(ValueError):
            ev.wait()


def test_memcpy_after_kernel():
    def kernel(count, out):
        time.sleep(0.05)
        out[:count] = np.arange(1, count + 1, dtype=np.uint8)

    with CpuQueue(workers=1) as queue:
        src = queue.malloc(8)
        dst = bytearray(8)
        ev = queue.parallel_for(8, kernel, src)
        queue.memcpy(memoryview(dst), src, depends_on=ev).wait()

    assert dst == bytes(range(1, 9))


@pytest.mark.parametrize("count,base", [
    pytest.param(0, 0, id="empty"),
    pytest.param(1, 0, id="one"),
    pytest.param(100, 5, id="offset"),
    pytest.param(3, 2**40 + 7, id="high-word"),
])
def test_hash_kernel(count, base):
    sha224 = ALGORITHMS["sha224"]
    with CpuQueue() as queue:
        out = queue.malloc(count * sha224.digest_size)
        kernel = queue.hash_kernel(sha224)
        queue.parallel_for(count, kernel, base, out).wait()

    expected = b"".join(
        hashlib.sha224(struct.pack("<Q", i)).digest()
        for i in range(base, base + count))
    assert out.tobytes() == expected


def test_workers_run_concurrently():
    # Record which numba thread computed every index. Run in a child process
    # so we can start more numba threads than the host has cpus.
    code = (
        "import numba, numpy as np\n"
        "from hash_device import CpuQueue\n"
        "@numba.njit(parallel=True, nogil=True)\n"
        "def kernel(count, out):\n"
        "    for i in numba.prange(count):\n"
        "        out[i] = numba.get_thread_id()\n"
        "with CpuQueue(workers=4) as q:\n"
        "    out = np.full(10000, -1, dtype=np.int64)\n"
        "    q.parallel_for(len(out), kernel, out).wait()\n"
        "    print(q.workers, len(set(out.tolist())), out.min())\n"
    )
    cp = subprocess.run(
        [sys.executable, "-c", code],
        cwd=ROOT_DIR,
        env=dict(os.environ, NUMBA_NUM_THREADS="4"),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    assert cp.returncode == 0, cp.stderr.decode()
    workers, threads, lowest = map(int, cp.stdout.decode().split())
    assert workers == 4
    assert threads > 1
    assert lowest >= 0


def test_open_queue_cpu():
    with hash_device.open_queue("cpu", workers=1) as queue:
        assert isinstance(queue, CpuQueue)
        assert queue.workers == 1


def test_open_queue_serial():
    with pytest.raises(RuntimeError):
        hash_device.open_queue("serial")
