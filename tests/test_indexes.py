def test_create_index_if_needed_creates_missing_index(engine, transport):
    transport.queue(False, {"acknowledged": True})
    assert engine.create_index_if_needed() is True
    assert [(c["method"], c["url"]) for c in transport.calls] == [
        ("HEAD", "/gooseindex/"),
        ("PUT", "/gooseindex/"),
    ]


def test_create_index_if_needed_keeps_existing_index(engine, transport):
    transport.queue(True)
    assert engine.create_index_if_needed() is False
    assert len(transport.calls) == 1


def test_index_exists(engine, transport):
    transport.queue(True, False)
    assert engine.index_exists() is True
    assert engine.index_exists() is False


def test_open_close_delete(engine, transport):
    engine.open_index()
    engine.close_index()
    engine.delete_index()
    engine.create_index()
    assert [(c["method"], c["url"]) for c in transport.calls] == [
        ("POST", "/gooseindex/_open"),
        ("POST", "/gooseindex/_close"),
        ("DELETE", "/gooseindex/"),
        ("PUT", "/gooseindex/"),
    ]
