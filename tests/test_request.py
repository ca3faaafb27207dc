from __future__ import annotations

from adslot.request import AdRequest, request_factory


def test_new_requests_are_unique() -> None:
    a = AdRequest.new()
    b = AdRequest.new()
    assert a.request_id != b.request_id
    assert a.keywords == ()


def test_request_factory_stamps_fields_on_every_call() -> None:
    make = request_factory(keywords=("games", "puzzle"), extras={"npa": "1"})

    first = make()
    second = make()

    assert first.request_id != second.request_id
    assert first.keywords == ("games", "puzzle")
    assert dict(second.extras) == {"npa": "1"}
