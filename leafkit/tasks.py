"""Run failing-at-random tasks on worker threads and report their outcomes."""

from __future__ import annotations

import argparse
import random
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, TextIO, Union

from leafkit.printing import diagnostic

TASK_COUNT = 42


class TaskFailure(Exception):
    """A task failed; carries the worker thread and two pieces of information."""

    def __init__(self, thread_id: int, info1: str, info2: int) -> None:
        super().__init__(f"task failed in thread {thread_id}")
        self.thread_id = thread_id
        self.info1 = info1
        self.info2 = info2


@dataclass(frozen=True)
class TaskResult:
    """What a successful task produces."""


Outcome = Union[TaskResult, BaseException]


def task(rng: random.Random) -> TaskResult:
    """Succeed three times in four; otherwise raise :class:`TaskFailure`."""
    if rng.randrange(4) != 0:
        return TaskResult()
    raise TaskFailure(threading.get_ident(), "info", 42)


def run_tasks(count: int, rng: random.Random) -> list[Outcome]:
    """Run ``count`` tasks concurrently; return outcomes in launch order."""
    with ThreadPoolExecutor(max_workers=max(1, count)) as pool:
        futures = [pool.submit(task, rng) for _ in range(count)]
    outcomes: list[Outcome] = []
    for future in futures:
        error = future.exception()
        outcomes.append(error if error is not None else future.result())
    return outcomes


def report(outcomes: Sequence[Outcome], out: TextIO, err: TextIO) -> tuple[int, int]:
    """Print one line per outcome; return (successes, failures)."""
    successes = failures = 0
    for outcome in outcomes:
        if isinstance(outcome, TaskResult):
            successes += 1
            print("Success!", file=out)
            continue
        failures += 1
        if isinstance(outcome, TaskFailure):
            print(
                f"Error in thread {outcome.thread_id}! failure_info1: {outcome.info1}, "
                f"failure_info2: {outcome.info2}",
                file=err,
            )
        else:
            print(
                "Unknown failure detected\nCryptic diagnostic information follows\n"
                + diagnostic(outcome),
                file=err,
            )
    return successes, failures


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tasks and report how each one went."""
    parser = argparse.ArgumentParser(prog="leafkit-tasks")
    parser.add_argument("--count", type=int, default=TASK_COUNT)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)
    rng = random.Random(args.seed)
    report(run_tasks(args.count, rng), sys.stdout, sys.stderr)
    return 0