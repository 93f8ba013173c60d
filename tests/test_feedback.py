from timeleft.feedback import FeedbackBus, FeedbackEvent


def test_feedback_bus_pub_sub():
    test_bus = FeedbackBus()
    received_events: list[FeedbackEvent] = []

    def dummy_subscriber(event: FeedbackEvent):
        received_events.append(event)

    # Subscribe to the bus
    test_bus.subscribe(dummy_subscriber)

    # Emit an event
    test_bus.emit(kind="success", message="Tracking started", action="begin")

    assert len(received_events) == 1

    event = received_events[0]
    assert event.kind == "success"
    assert event.message == "Tracking started"
    assert event.action == "begin"

    # Verify auto-generated fields
    assert isinstance(event.event_id, str)
    assert event.timestamp is not None


def test_helpers_set_the_kind():
    test_bus = FeedbackBus()
    kinds: list[str] = []
    test_bus.subscribe(lambda e: kinds.append(e.kind))

    test_bus.info("a")
    test_bus.success("b")
    test_bus.error("c")

    assert kinds == ["info", "success", "error"]


def test_failing_subscriber_does_not_stop_the_others():
    test_bus = FeedbackBus()
    received: list[str] = []

    def broken(event: FeedbackEvent):
        raise RuntimeError("display gone")

    test_bus.subscribe(broken)
    test_bus.subscribe(lambda e: received.append(e.message))

    event = test_bus.error("Start date is in the future")

    assert received == ["Start date is in the future"]
    assert event.kind == "error"

