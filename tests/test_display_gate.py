from locator.core.display_gate import DisplayGate, GateState


def test_operations_queue_until_ready():
    loads = []
    ran = []
    gate = DisplayGate(loader=loads.append)

    gate.submit(lambda: ran.append("first"))
    gate.submit(lambda: ran.append("second"))

    assert gate.state is GateState.LOADING
    assert loads == [gate]
    assert ran == []
    assert gate.pending == 2

    gate.mark_ready()

    assert ran == ["first", "second"]
    assert gate.pending == 0


def test_ready_gate_runs_immediately():
    ran = []
    gate = DisplayGate()
    gate.mark_ready()
    gate.submit(lambda: ran.append("now"))
    assert ran == ["now"]


def test_loader_triggered_once():
    loads = []
    gate = DisplayGate(loader=loads.append)
    gate.begin_loading()
    gate.submit(lambda: None)
    gate.begin_loading()
    assert len(loads) == 1


def test_loader_may_become_ready_synchronously():
    ran = []
    gate = DisplayGate(loader=lambda g: g.mark_ready())
    gate.submit(lambda: ran.append("drawn"))
    assert gate.state is GateState.READY
    assert ran == ["drawn"]


def test_failing_operation_does_not_strand_the_queue(caplog):
    ran = []
    gate = DisplayGate()

    def broken():
        raise RuntimeError("marker layer missing")

    gate.submit(broken)
    gate.submit(lambda: ran.append("after"))

    with caplog.at_level("ERROR"):
        gate.mark_ready()

    assert ran == ["after"]
    assert gate.pending == 0
    assert "Queued display operation failed" in " ".join(caplog.messages)
