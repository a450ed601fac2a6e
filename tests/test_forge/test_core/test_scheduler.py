from forge.core.scheduler import Scheduler


def test_call_fires_after_delay(scheduler):
    calls = []
    scheduler.call_later(0.5, calls.append, "done")

    scheduler.update(0.25)
    assert calls == []

    scheduler.update(0.25)
    assert calls == ["done"]
    assert scheduler.pending_count == 0


def test_cancelled_call_never_fires(scheduler):
    calls = []
    call = scheduler.call_later(0.1, calls.append, "x")
    call.cancel()

    scheduler.update(1.0)

    assert calls == []
    assert not call.pending
    assert not call.fired


def test_due_calls_run_in_due_order(scheduler):
    order = []
    scheduler.call_later(0.3, order.append, "late")
    scheduler.call_later(0.1, order.append, "early")
    scheduler.call_later(0.1, order.append, "early-second")

    scheduler.update(1.0)

    assert order == ["early", "early-second", "late"]


def test_callback_can_cancel_a_later_call(scheduler):
    order = []
    second = None

    def first():
        order.append("first")
        second.cancel()

    scheduler.call_later(0.1, first)
    second = scheduler.call_later(0.2, order.append, "second")

    scheduler.update(1.0)

    assert order == ["first"]


def test_cancel_all():
    scheduler = Scheduler()
    calls = []
    scheduler.call_later(0.1, calls.append, 1)
    scheduler.call_later(0.2, calls.append, 2)

    scheduler.cancel_all()
    scheduler.update(1.0)

    assert calls == []
    assert scheduler.pending_count == 0
    assert scheduler.time == 1.0
