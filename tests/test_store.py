import hashlib
import json

import pytest
from django.db.models import F

from tiddlers import store
from tiddlers.exceptions import BadTiddler, RevisionConflict, StalePrecondition, TiddlerNotFound
from tiddlers.fields import load_meta
from tiddlers.models import Tiddler, TiddlerHistory

pytestmark = pytest.mark.django_db


def put_json(title, data, **kwargs):
    return store.put(title, json.dumps(data), **kwargs)


def test_revisions_start_at_one_and_step_by_one():
    revisions = [put_json("Alpha", {"text": str(i)})[0] for i in range(3)]
    assert revisions == [1, 2, 3]
    assert store.delete("Alpha") == 4
    assert put_json("Alpha", {"text": "back"})[0] == 5


def test_put_then_get_round_trips_fields():
    put_json("Alpha", {"a": 1, "text": "x"})

    t = store.get("Alpha")
    meta = load_meta(t.meta)
    assert meta == {"a": 1, "bag": "bag", "revision": 1}
    assert t.text == "x"
    assert t.revision == 1


def test_unknown_fields_pass_through_and_server_fields_are_overwritten():
    put_json(
        "Beta",
        {
            "title": "Beta",
            "created": "20240101000000000",
            "custom": {"nested": [1, 2]},
            "bag": "elsewhere",
            "revision": 99,
            "tags": ["one", "two"],
        },
    )

    t = store.get("Beta")
    meta = load_meta(t.meta)
    assert meta["created"] == "20240101000000000"
    assert meta["custom"] == {"nested": [1, 2]}
    assert meta["bag"] == "bag"
    assert meta["revision"] == 1
    assert meta["tags"] == ["one", "two"]
    assert "text" not in meta
    assert t.tags == ["one", "two"]
    assert t.text == ""


def test_fingerprint_is_md5_of_raw_payload():
    payload = b'{"text": "hello", "tags": []}'
    revision, fingerprint = store.put("Gamma", payload)
    assert revision == 1
    assert fingerprint == hashlib.md5(payload).hexdigest()


def test_every_write_is_recorded_in_history():
    put_json("Alpha", {"text": "one"})
    put_json("Alpha", {"text": "two"})
    store.delete("Alpha")

    history = list(TiddlerHistory.objects.filter(title="Alpha").order_by("revision"))
    assert [h.revision for h in history] == [1, 2, 3]
    assert [h.text for h in history] == ["one", "two", ""]
    assert history[-1].meta == ""
    assert store.get("Alpha").revision == history[-1].revision


def test_delete_tombstones_without_removing_the_key():
    put_json("Alpha", {"text": "hello", "tags": ["x"]})

    assert store.delete("Alpha") == 2

    t = store.get("Alpha")
    assert t.is_tombstone
    assert t.meta == ""
    assert t.text == ""
    assert t.tags == []
    assert t.revision == 2


def test_get_and_delete_of_unknown_title():
    with pytest.raises(TiddlerNotFound):
        store.get("Nope")
    with pytest.raises(TiddlerNotFound):
        store.delete("Nope")
    assert not TiddlerHistory.objects.filter(title="Nope").exists()


@pytest.mark.parametrize(
    "payload",
    [
        b"{not json",
        b"[1, 2, 3]",
        b'"just a string"',
        b'{"tags": "x y"}',
        b'{"tags": ["x", 1]}',
        b'{"text": 5}',
        b'{"title": ["A"]}',
        b"\xff\xff\xff",
        b'{"x": NaN}',
        b'{"x": -Infinity}',
        b'{"x": 1e999}',
    ],
)
def test_malformed_payloads_are_rejected(payload):
    with pytest.raises(BadTiddler):
        store.put("Alpha", payload)
    assert not Tiddler.objects.filter(title="Alpha").exists()


def test_expected_revision_guards_the_write():
    with pytest.raises(StalePrecondition):
        put_json("Alpha", {"text": "x"}, expected_revision=3)

    assert put_json("Alpha", {"text": "x"}, expected_revision=0)[0] == 1
    assert put_json("Alpha", {"text": "y"}, expected_revision=1)[0] == 2

    with pytest.raises(StalePrecondition):
        put_json("Alpha", {"text": "z"}, expected_revision=1)
    with pytest.raises(StalePrecondition):
        store.delete("Alpha", expected_revision=1)
    assert store.get("Alpha").text == "y"


def test_lost_update_is_detected_and_rolled_back():
    put_json("Alpha", {"text": "first"})

    def racing_snapshot(revision):
        # Another writer lands between our read and our conditional write.
        Tiddler.objects.filter(title="Alpha").update(revision=F("revision") + 1)
        return "{}", "mine", []

    with pytest.raises(RevisionConflict):
        store._advance("Alpha", racing_snapshot, expected_revision=None, must_exist=False)

    t = store.get("Alpha")
    assert t.revision == 1
    assert t.text == "first"
    assert TiddlerHistory.objects.filter(title="Alpha").count() == 1


def test_duplicate_history_entry_aborts_the_whole_write():
    TiddlerHistory.objects.create(title="Orphan", revision=1, meta="{}", text="")

    with pytest.raises(RevisionConflict):
        put_json("Orphan", {"text": "x"})

    assert not Tiddler.objects.filter(title="Orphan").exists()


def test_etag_format():
    assert store.etag("A b/c", 3, "abc123") == '"bag/A+b%2Fc/3:abc123"'
