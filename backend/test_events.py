from leadhive.events import Signal

def test_emit_reaches_every_listener_in_order():
    signal = Signal("test")
    calls = []
    signal.subscribe(lambda **p: calls.append(("a", p)))
    signal.subscribe(lambda **p: calls.append(("b", p)))

    signal.emit(entity="lead", action="created")

    assert calls == [("a", {"entity": "lead", "action": "created"}), ("b", {"entity": "lead", "action": "created"})]

def test_failing_listener_does_not_stop_others():
    signal = Signal("test")
    calls = []

    def broken(**payload):
        raise RuntimeError("boom")

    signal.subscribe(broken)
    signal.subscribe(lambda **p: calls.append(p))

    signal.emit(action="updated")
    assert calls == [{"action": "updated"}]

def test_late_subscribers_get_no_replay():
    signal = Signal("test")
    signal.emit(action="created")

    calls = []
    signal.subscribe(lambda **p: calls.append(p))
    assert calls == []

def test_unsubscribe():
    signal = Signal("test")
    calls = []

    def listener(**payload):
        calls.append(payload)

    signal.subscribe(listener)
    signal.subscribe(listener)
    assert len(signal.listeners) == 1

    signal.unsubscribe(listener)
    signal.emit(action="deleted")
    assert calls == []
