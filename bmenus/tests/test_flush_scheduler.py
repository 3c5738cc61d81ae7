"""Tests for the periodic flush thread."""

import threading

from bmenus.core.flush_scheduler import FlushScheduler


def test_runs_task_periodically():
    ran = threading.Event()
    calls = []

    def task():
        calls.append(1)
        if len(calls) >= 2:
            ran.set()

    scheduler = FlushScheduler(task)
    scheduler.start(0.01)
    try:
        assert ran.wait(5)
    finally:
        scheduler.stop()
    assert not scheduler.running


def test_task_errors_do_not_stop_schedule():
    ran = threading.Event()
    calls = []

    def task():
        calls.append(1)
        if len(calls) == 1:
            raise OSError("disk full")
        ran.set()

    scheduler = FlushScheduler(task)
    scheduler.start(0.01)
    try:
        assert ran.wait(5)
    finally:
        scheduler.stop()


def test_restart_replaces_schedule():
    scheduler = FlushScheduler(lambda: None)
    scheduler.start(60)
    first = scheduler._thread
    scheduler.start(30)
    try:
        assert scheduler.interval == 30
        assert scheduler._thread is not first
        assert not first.is_alive()
    finally:
        scheduler.stop()


def test_stop_before_start():
    FlushScheduler(lambda: None).stop()
