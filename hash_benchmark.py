#!/usr/bin/env python3
# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later

"""
Hash throughput benchmark.

Compute hashes_per_block * num_blocks digests of the iteration index and
report the time it took.

Usage:

    hash_benchmark.py [-p] HASHES_PER_BLOCK NUM_BLOCKS ALGORITHM RUNNER

With -p, every digest is printed to stderr as "- HEXDIGEST". The summary
is printed to stdout as key=value fields separated by a tab (shown as <TAB>):

    hashes_per_block=4<TAB>num_blocks=3<TAB>algo=sha224<TAB>runner=serial<TAB>elapsed=0.000051

"""

import re
import sys
import time

import hash_runner
from hash_algorithms import ALGORITHMS
from hash_runner import ExecutionPlan, OutputBuffer, RUNNERS

USAGE = """\
usage: {prog} [-p] <hashes_per_block> <num_blocks> <algorithm> <runner>
algorithms: {algorithms}
runners: {runners}
"""

SUMMARY = (
    "hashes_per_block={}\tnum_blocks={}\talgo={}\trunner={}\telapsed={:f}"
)

U64_MAX = 2**64 - 1

# Numbers accepted by strtoull(s, &end, 0): hex, octal or decimal.
NUMBER = re.compile(r"0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*")


class UsageError(Exception):
    """
    Wrong number of arguments.
    """


class ArgumentError(Exception):
    """
    Invalid argument value.
    """

    def __init__(self, index, expected):
        self.index = index
        self.expected = expected

    def __str__(self):
        return f"argument {self.index} should be {self.expected}"


def main(argv=None):
    if argv is None:
        argv = sys.argv
    prog = argv[0]

    try:
        plan, print_hashes = parse_args(argv[1:])
    except UsageError:
        print(usage(prog), end="")
        return 1
    except ArgumentError as e:
        print(f"{prog}: {e}", file=sys.stderr)
        return 1

    hashes_file = sys.stderr if print_hashes else None
    elapsed = run(plan, hashes_file=hashes_file)
    print(format_summary(plan, elapsed))
    return 0


def usage(prog):
    return USAGE.format(
        prog=prog,
        algorithms=" ".join(ALGORITHMS),
        runners=" ".join(RUNNERS),
    )


def parse_args(args):
    """
    Parse command line arguments (without the program name).

    Return tuple (plan, print_hashes).
    """
    print_hashes = False
    if args and args[0] == "-p":
        print_hashes = True
        args = args[1:]

    if len(args) != 4:
        raise UsageError

    hashes_per_block = parse_arg_u64(args, 1)
    num_blocks = parse_arg_u64(args, 2)
    algorithm = parse_arg_algorithm(args, 3)
    runner_name = parse_arg_runner(args, 4)

    plan = ExecutionPlan(algorithm, runner_name, hashes_per_block, num_blocks)
    return plan, print_hashes


def parse_arg_u64(args, i):
    value = parse_u64(args[i - 1])
    if value is None:
        raise ArgumentError(i, "a natural number")
    return value


def parse_arg_algorithm(args, i):
    if args[i - 1] not in ALGORITHMS:
        raise ArgumentError(i, "a known hash algorithm")
    return args[i - 1]


def parse_arg_runner(args, i):
    if args[i - 1] not in RUNNERS:
        raise ArgumentError(i, "a known runner")
    return args[i - 1]


def parse_u64(s):
    """
    Parse unsigned 64 bit integer, returning None if s is not a valid number
    or does not fit in 64 bits.
    """
    if NUMBER.fullmatch(s) is None:
        return None
    if s[:2] in ("0x", "0X"):
        value = int(s, 16)
    elif s.startswith("0"):
        value = int(s, 8)
    else:
        value = int(s, 10)
    if value > U64_MAX:
        return None
    return value


def run(plan, hashes_file=None):
    """
    Execute plan and return the elapsed time in seconds.

    If hashes_file is set, every digest is written to it when its block
    completes.
    """
    algorithm = ALGORITHMS[plan.algorithm]
    with OutputBuffer(plan.total_count, algorithm.digest_size) as output:
        if hashes_file:
            sink = HexSink(output, hashes_file)
        else:
            sink = discard
        return time_execution(
            lambda: hash_runner.run(plan, algorithm, output, sink))


def time_execution(func):
    """
    Return the runtime of func() in seconds.
    """
    start = time.perf_counter()
    func()
    return time.perf_counter() - start


def discard(block):
    pass


class HexSink:
    """
    Print the digests of a completed block, one per line.
    """

    def __init__(self, output, file):
        self.output = output
        self.file = file

    def __call__(self, block):
        for slot in range(block.start, block.start + block.count):
            hexdigest = hash_hex(self.output.data, slot,
                                 self.output.digest_size)
            print(f"- {hexdigest}", file=self.file)


def hash_hex(buf, slot, size):
    """
    Return the hash at slot in buf as lowercase hex.
    """
    offset = slot * size
    return bytes(buf[offset:offset + size]).hex()


def format_summary(plan, elapsed):
    return SUMMARY.format(
        plan.hashes_per_block,
        plan.num_blocks,
        plan.algorithm,
        plan.runner,
        elapsed,
    )


if __name__ == "__main__":
    sys.exit(main())
