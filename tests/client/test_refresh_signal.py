"""
Tests for the cross-view RefreshSignal.
"""

from clinic_cash.client.refresh import RefreshSignal


def test_starts_at_zero():
    assert RefreshSignal().version == 0


def test_bump_notifies_subscribers_with_new_version():
    signal = RefreshSignal()
    seen = []
    signal.subscribe(seen.append)

    signal.bump("expense created")
    signal.bump("visit registered")

    assert seen == [1, 2]
    assert signal.version == 2


def test_unsubscribe_stops_notifications():
    signal = RefreshSignal()
    seen = []
    unsubscribe = signal.subscribe(seen.append)

    signal.bump()
    unsubscribe()
    signal.bump()

    assert seen == [1]


def test_unsubscribe_twice_is_harmless():
    signal = RefreshSignal()
    unsubscribe = signal.subscribe(lambda version: None)

    unsubscribe()
    unsubscribe()


def test_failing_subscriber_does_not_block_others():
    signal = RefreshSignal()
    seen = []

    def broken(version):
        raise RuntimeError("view already closed")

    signal.subscribe(broken)
    signal.subscribe(seen.append)

    assert signal.bump() == 1
    assert seen == [1]


def test_reset_ends_the_session():
    signal = RefreshSignal()
    seen = []
    signal.subscribe(seen.append)
    signal.bump()

    signal.reset()
    signal.bump()

    assert signal.version == 1
    assert seen == [1]
