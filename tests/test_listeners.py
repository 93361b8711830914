import threading

from systemclipboard import FlavorEvent, StringSelection

TIMEOUT = 2.0


class RecordingListener:
    def __init__(self):
        self.events = []
        self.called = threading.Event()

    def __call__(self, event):
        self.events.append(event)
        self.called.set()


class Owner:
    def __init__(self):
        self.lost = []

    def lost_ownership(self, clipboard, contents):
        self.lost.append((clipboard, contents))


def test_listener_notified_when_flavors_change(board, native, image):
    listener = RecordingListener()
    board.add_flavor_listener(listener)

    board.copy_text("a")
    assert listener.called.wait(TIMEOUT)
    assert listener.events == [FlavorEvent(source=native)]

    board.copy_text("b")
    assert native.dispatcher.join(TIMEOUT)
    assert len(listener.events) == 1

    board.copy_image(image)
    assert native.dispatcher.join(TIMEOUT)
    assert len(listener.events) == 2


def test_removed_listener_is_not_notified(board, native):
    listener = RecordingListener()
    board.add_flavor_listener(listener)
    assert board.get_flavor_listeners() == (listener,)

    board.remove_flavor_listener(listener)
    board.copy_text("a")

    assert native.dispatcher.join(TIMEOUT)
    assert listener.events == []
    assert board.get_flavor_listeners() == ()


def test_none_listener_is_ignored(board):
    board.add_flavor_listener(None)
    board.remove_flavor_listener(None)

    assert board.get_flavor_listeners() == ()


def test_failing_listener_does_not_stop_delivery(board, native):
    def broken(event):
        raise RuntimeError("boom")

    listener = RecordingListener()
    board.add_flavor_listener(broken)
    board.add_flavor_listener(listener)

    board.copy_text("a")

    assert listener.called.wait(TIMEOUT)


def test_previous_owner_loses_ownership(board, native):
    owner = Owner()
    selection = StringSelection("owned")
    board.set_contents(selection, owner)

    board.copy_text("replacement")

    assert native.dispatcher.join(TIMEOUT)
    assert owner.lost == [(native, selection)]


def test_same_owner_keeps_ownership(board, native):
    owner = Owner()
    board.set_contents(StringSelection("one"), owner)
    board.set_contents(StringSelection("two"), owner)

    assert native.dispatcher.join(TIMEOUT)
    assert owner.lost == []
