import asyncio

import pytest

from taskflow.client import ApiError
from taskflow.notifications import AsyncioScheduler, NotificationQueue, Severity


def _messages(queue):
    return [n.message for n in queue.active()]


def test_limit_evicts_oldest(queue):
    ids = [queue.show(f"m{i}", "info") for i in range(4)]

    assert len(queue) == 3
    assert [n.id for n in queue.active()] == ids[1:]


def test_saved_then_error_scenario(queue):
    first = queue.show("Saved", "success")
    queue.show("Saved", "success")
    queue.show("Saved", "success")
    error_id = queue.show("Error", "error")

    active = queue.active()
    assert len(active) == 3
    assert first not in [n.id for n in active]
    assert active[-1].id == error_id
    assert active[-1].severity == Severity.ERROR


def test_severity_does_not_protect_from_eviction(queue):
    error_id = queue.error("Broken")
    for _ in range(3):
        queue.success("Fine")

    assert error_id not in [n.id for n in queue.active()]
    assert _messages(queue) == ["Fine", "Fine", "Fine"]


def test_default_durations_per_severity(queue, scheduler):
    queue.success("ok")
    queue.warning("careful")
    queue.error("bad")

    scheduler.advance(4)
    assert _messages(queue) == ["careful", "bad"]
    scheduler.advance(1)
    assert _messages(queue) == ["bad"]
    scheduler.advance(1)
    assert _messages(queue) == []


def test_explicit_duration_overrides_default(queue, scheduler):
    queue.info("long", duration=10)
    scheduler.advance(9)
    assert _messages(queue) == ["long"]
    scheduler.advance(1)
    assert _messages(queue) == []


def test_dismiss_cancels_timer_and_is_idempotent(queue, scheduler):
    notification_id = queue.info("bye")
    notification = queue.active()[0]
    handle = scheduler.pending[0]

    queue.dismiss(notification_id)
    queue.dismiss(notification_id)
    queue.dismiss("notification-999")

    assert handle.cancelled
    assert notification.visible is False
    assert len(queue) == 0


def test_dismiss_after_expiry_is_noop(queue, scheduler):
    notification_id = queue.info("short")
    scheduler.advance(4)

    queue.dismiss(notification_id)

    assert len(queue) == 0


def test_evicted_timer_does_not_fire_later(queue, scheduler):
    for i in range(4):
        queue.info(f"m{i}")
    queue.dismiss_all()
    later = queue.info("fresh", duration=100)

    scheduler.advance(10)

    assert [n.id for n in queue.active()] == [later]
    assert all(handle.cancelled for handle in scheduler.pending if handle.when <= 10)


def test_dismiss_all(queue, scheduler):
    queue.info("a")
    queue.error("b")

    queue.dismiss_all()

    assert len(queue) == 0
    assert all(handle.cancelled for handle in scheduler.pending)


@pytest.mark.parametrize(
    "code, expected",
    [
        ("permission-denied", "You don't have permission to perform this action."),
        ("not-found", "The item you're trying to access no longer exists."),
        ("unauthenticated", "You need to sign in to perform this action."),
        ("invalid-argument", "Invalid data provided. Please check your input and try again."),
    ],
)
def test_handle_error_maps_codes(queue, code, expected):
    queue.handle_error(ApiError(code, "raw message"), "save task")

    notification = queue.active()[0]
    assert notification.message == expected
    assert notification.severity == Severity.ERROR


def test_handle_error_conflict_uses_shorter_duration(queue):
    queue.handle_error(ApiError("failed-precondition", "stale"), "move task")
    assert queue.active()[0].duration == 5.0


def test_handle_error_network_and_fallbacks(queue):
    queue.handle_error(ConnectionError("network unreachable"), "load boards")
    queue.handle_error(RuntimeError("disk full"), "save")
    queue.handle_error(RuntimeError(""), "delete board")

    assert _messages(queue) == [
        "Network error. Please check your connection and try again.",
        "disk full",
        "Failed to delete board",
    ]


def test_rejects_unknown_severity(queue):
    with pytest.raises(ValueError):
        queue.show("?", "fatal")


def test_asyncio_scheduler_expires_notifications():
    async def scenario():
        queue = NotificationQueue(limit=2, scheduler=AsyncioScheduler())
        queue.info("quick", duration=0.01)
        await asyncio.sleep(0.05)
        return len(queue)

    assert asyncio.run(scenario()) == 0
