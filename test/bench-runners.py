#!/usr/bin/env python3
# SPDX-FileCopyrightText: Red Hat Inc
# SPDX-License-Identifier: LGPL-2.1-or-later
"""
Show how block size affects throughput for every runner.

Small blocks are dominated by launch and copy back overhead in the
accelerated runners, so throughput should grow with the block size until the
device is saturated. The serial runner is shown for reference.
"""

import bench

args = bench.parse_args()

results = bench.results(
    f"hash-benchmark {args.algorithm} - block size",
    host_name=args.host_name,
)
results["grid"] = {"axis": "both"}

for runner in args.runner:
    print(f"\nhash_benchmark N {args.num_blocks} {args.algorithm} {runner}\n")

    runs = []
    results["data"].append({"name": runner, "runs": runs})

    for n in bench.block_sizes(args.max_block_size):
        r = bench.hash_benchmark(
            n,
            num_blocks=args.num_blocks,
            algorithm=args.algorithm,
            runner=runner,
            cool_down=args.cool_down,
        )
        runs.append(r)

if args.output:
    bench.write(results, args.output)
