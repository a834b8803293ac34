#!/usr/bin/env python3
"""Check TCP connections to several hosts at once.

Usage:
    python port_check_multi.py [--timeout SECONDS] host:port [host:port ...]
"""

import argparse
import asyncio
import re
import sys

from aio_adhoc import (
    RecvTimeoutError,
    goal,
    goal_results,
    pending_goals,
    run_with_timeout,
)

TARGET_RE = re.compile(r"^(.*):(\d+)$")


def parse_target(text: str):
    match = TARGET_RE.match(text)
    if not match:
        return None
    return match.group(1), int(match.group(2))


def connect(host: str, port: int, on_done, tasks: set) -> None:
    async def attempt() -> None:
        try:
            _, writer = await asyncio.open_connection(host, port)
        except OSError as exc:
            on_done(exc)
            return
        writer.close()
        on_done(None)

    task = asyncio.ensure_future(attempt())
    tasks.add(task)
    task.add_done_callback(tasks.discard)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Check tcp connection to several hosts at once."
    )
    parser.add_argument(
        "--timeout", type=float, default=1.0, help="seconds, may be fractional"
    )
    parser.add_argument("targets", nargs="+", metavar="host:port")
    args = parser.parse_args(argv)

    targets = []
    for text in args.targets:
        target = parse_target(text)
        if target is None:
            print(f"Expecting host:port, got {text!r}. See --help", file=sys.stderr)
            return 1
        targets.append(target)

    tasks: set = set()

    def body() -> None:
        for host, port in targets:
            connect(host, port, goal(f"{host}:{port}"), tasks)

    try:
        run_with_timeout(body, args.timeout)
    except RecvTimeoutError:
        pass

    results = goal_results()
    alive = sorted(name for name, values in results.items() if values[0] is None)
    failed = sorted(name for name, values in results.items() if values[0] is not None)
    offline = sorted(pending_goals())

    if alive:
        print("Connected:", " ".join(alive))
    if failed:
        print("Failed:", " ".join(failed))
    if offline:
        print("Timed out:", " ".join(offline))
    return 0


if __name__ == "__main__":
    sys.exit(main())
