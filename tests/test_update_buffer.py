from sporta.update_buffer import UpdateBuffer


def test_fifo_per_stream():
    buf = UpdateBuffer()
    buf.open("a")
    buf.push_update("a", {"n": 1})
    buf.push_update("a", {"n": 2})
    assert buf.pending("a") == 2
    assert buf.get_update("a") == {"n": 1}
    assert buf.get_update("a") == {"n": 2}
    assert buf.get_update("a") is None


def test_updates_for_unopened_streams_are_dropped():
    buf = UpdateBuffer()
    buf.push_update("ghost", {"n": 1})
    assert buf.get_update("ghost") is None
    assert buf.streams == 0


def test_oldest_update_dropped_when_full():
    buf = UpdateBuffer(max_pending=2)
    buf.open("a")
    for n in range(3):
        buf.push_update("a", n)
    assert [buf.get_update("a"), buf.get_update("a")] == [1, 2]


def test_close_discards_pending():
    buf = UpdateBuffer()
    buf.open("a")
    buf.push_update("a", 1)
    buf.close("a")
    buf.close("a")
    assert buf.pending("a") == 0
    assert buf.streams == 0


def test_pending_never_exceeds_the_bound():
    buf = UpdateBuffer(max_pending=3)
    buf.open("a")
    for n in range(1000):
        buf.push_update("a", n)
    assert buf.pending("a") == 3
    assert buf.get_update("a") == 997
