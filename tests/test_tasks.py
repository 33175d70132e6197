import io
import random
import threading

import pytest

from leafkit.tasks import TaskFailure, TaskResult, main, report, run_tasks, task


class _FixedRng:
    def __init__(self, value):
        self.value = value

    def randrange(self, n):
        return self.value


def test_task_succeeds():
    assert task(_FixedRng(3)) == TaskResult()


def test_task_fails_with_info():
    with pytest.raises(TaskFailure) as info:
        task(_FixedRng(0))
    assert info.value.info1 == "info"
    assert info.value.info2 == 42
    assert info.value.thread_id == threading.get_ident()


def test_run_tasks_all_succeed():
    outcomes = run_tasks(10, _FixedRng(1))
    assert outcomes == [TaskResult()] * 10


def test_run_tasks_all_fail_in_workers():
    outcomes = run_tasks(5, _FixedRng(0))
    assert len(outcomes) == 5
    assert all(isinstance(o, TaskFailure) for o in outcomes)
    assert all(o.thread_id != threading.get_ident() for o in outcomes)


def test_run_tasks_mixed_counts_are_consistent():
    outcomes = run_tasks(42, random.Random(7))
    out, err = io.StringIO(), io.StringIO()
    successes, failures = report(outcomes, out, err)
    assert successes + failures == 42
    assert out.getvalue().count("Success!") == successes
    assert err.getvalue().count("Error in thread") == failures


def test_report_formats_failure():
    out, err = io.StringIO(), io.StringIO()
    counts = report([TaskFailure(7, "info", 42)], out, err)
    assert counts == (0, 1)
    assert err.getvalue() == "Error in thread 7! failure_info1: info, failure_info2: 42\n"
    assert out.getvalue() == ""


def test_report_unknown_failure():
    out, err = io.StringIO(), io.StringIO()
    counts = report([ValueError("boom")], out, err)
    assert counts == (0, 1)
    text = err.getvalue()
    assert text.startswith("Unknown failure detected\nCryptic diagnostic information follows\n")
    assert "boom" in text


def test_main_runs(capsys):
    assert main(["--count", "8", "--seed", "1"]) == 0
    captured = capsys.readouterr()
    total = captured.out.count("Success!") + captured.err.count("Error in thread")
    assert total == 8