import threading
import time

from singcommon.canceler import Instance


def _counting():
    event = threading.Event()
    calls = []

    def cancel():
        calls.append(1)
        event.set()

    return event, calls, cancel


def test_fires_after_timeout():
    event, calls, cancel = _counting()
    instance = Instance(cancel, 0.05)
    assert event.wait(2.0) is True
    time.sleep(0.05)
    assert calls == [1]
    assert instance.update() is False


def test_update_after_fire_returns_false():
    event, _, cancel = _counting()
    instance = Instance(cancel, 0.02)
    assert event.wait(2.0) is True
    assert instance.update() is False


def test_update_keeps_alive():
    event, _, cancel = _counting()
    instance = Instance(cancel, 0.3)
    for _ in range(5):
        time.sleep(0.1)
        assert instance.update() is True
    assert event.is_set() is False
    instance.close()
    assert event.is_set() is True


def test_close_cancels_once():
    event, calls, cancel = _counting()
    instance = Instance(cancel, 10)
    instance.close()
    instance.close()
    time.sleep(0.05)
    assert event.is_set() is True
    assert calls == [1]
    assert instance.update() is False


def test_timeout_and_set_timeout():
    _, _, cancel = _counting()
    instance = Instance(cancel, 10)
    assert instance.timeout() == 10
    instance.set_timeout(20)
    assert instance.timeout() == 20
    instance.close()


def test_set_timeout_shortens_deadline():
    event, calls, cancel = _counting()
    instance = Instance(cancel, 10)
    instance.set_timeout(0.05)
    assert instance.timeout() == 0.05
    assert event.wait(2.0) is True
    assert calls == [1]
    assert instance.update() is False


def test_context_manager_closes():
    event, calls, cancel = _counting()
    with Instance(cancel, 10) as instance:
        assert instance.update() is True
    assert event.is_set() is True
    assert calls == [1]