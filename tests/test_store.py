"""Tests for workspace lookup, listing, adding and removing."""

import json

import pytest

from conftest import snapshot, write_fake_age_file, write_plain_tokens
from slk_tokens.errors import (
    CorruptedStoreError,
    ErrorKind,
    WorkspaceNotFoundError,
    WorkspaceValidationError,
    WorkspaceValidationKind,
)
from slk_tokens.models import ProtectionMode, Workspace


def test_empty_store(make_store, config_dir):
    store = make_store()

    assert store.empty()
    assert store.all() == []
    assert store.names() == set()
    assert not store.exists("work")
    assert not config_dir.exists()


def test_add_then_lookup(make_store):
    store = make_store()

    added = store.add("work", "xoxb-abc")

    assert added == Workspace(name="work", token="xoxb-abc")
    assert store.lookup("work") == added
    assert store.exists("work")
    assert not store.empty()


def test_lookup_missing_workspace(make_store):
    store = make_store()
    store.add("work", "xoxb-abc")

    with pytest.raises(WorkspaceNotFoundError) as excinfo:
        store.lookup("home")

    assert excinfo.value.kind is ErrorKind.NOT_FOUND
    assert str(excinfo.value) == "Workspace 'home' not found"


def test_all_keeps_insertion_order(make_store):
    store = make_store()
    store.add("zeta", "xoxb-1")
    store.add("alpha", "xoxp-2")
    store.add("mid", "xoxc-3", cookie="xoxd-c")

    assert [w.name for w in store.all()] == ["zeta", "alpha", "mid"]
    assert store.names() == {"zeta", "alpha", "mid"}


def test_add_replaces_existing_workspace_in_place(make_store, config_dir):
    store = make_store()
    store.add("first", "xoxb-1")
    store.add("work", "xoxb-old")
    store.add("last", "xoxb-3")

    store.add("work", "xoxc-new", cookie="xoxd-cookie")

    assert [w.name for w in store.all()] == ["first", "work", "last"]
    assert store.lookup("work").cookie == "xoxd-cookie"
    assert json.loads((config_dir / "tokens.json").read_text())["work"] == {
        "token": "xoxc-new",
        "cookie": "xoxd-cookie",
    }


def test_add_trims_name(make_store):
    store = make_store()

    store.add("  work  ", "xoxb-abc")

    assert store.names() == {"work"}


@pytest.mark.parametrize(
    "name, token, cookie, kind",
    [
        ("", "xoxb-abc", None, WorkspaceValidationKind.EMPTY_NAME),
        ("   ", "xoxb-abc", None, WorkspaceValidationKind.EMPTY_NAME),
        ("../etc", "xoxb-abc", None, WorkspaceValidationKind.INVALID_NAME),
        ("work", "abc", None, WorkspaceValidationKind.INVALID_TOKEN_PREFIX),
        ("work", "xoxc-abc", None, WorkspaceValidationKind.MISSING_COOKIE),
        ("work", "xoxc-abc", "d\nSet-Cookie: x", WorkspaceValidationKind.UNSAFE_COOKIE),
    ],
)
def test_add_validates_before_touching_disk(make_store, config_dir, name, token, cookie, kind):
    store = make_store()

    with pytest.raises(WorkspaceValidationError) as excinfo:
        store.add(name, token, cookie)

    assert excinfo.value.validation_kind is kind
    assert excinfo.value.kind is ErrorKind.VALIDATION
    assert not config_dir.exists()


def test_invalid_add_leaves_existing_tokens_untouched(make_store, config_dir):
    store = make_store()
    store.add("work", "xoxb-abc")
    before = snapshot(config_dir)

    with pytest.raises(WorkspaceValidationError):
        store.add("work", "not-a-token")

    assert snapshot(config_dir) == before


def test_validation_error_does_not_echo_secrets(make_store):
    store = make_store()

    with pytest.raises(WorkspaceValidationError) as excinfo:
        store.add("work", "xoxc-secret-token", "line\nbreak-secret")

    assert "secret" not in str(excinfo.value)


def test_remove(make_store):
    store = make_store()
    store.add("work", "xoxb-abc")
    store.add("home", "xoxp-def")

    assert store.remove("work") is True
    assert store.names() == {"home"}


def test_remove_missing_writes_nothing(make_store, config_dir):
    store = make_store()
    store.add("work", "xoxb-abc")
    before = snapshot(config_dir)

    assert store.remove("home") is False
    assert snapshot(config_dir) == before


def test_remove_last_workspace_leaves_empty_map(make_store, config_dir):
    store = make_store()
    store.add("work", "xoxb-abc")

    store.remove("work")

    assert store.empty()
    assert json.loads((config_dir / "tokens.json").read_text()) == {}


def test_reads_changes_made_outside_the_store(make_store, config_dir):
    store = make_store()
    store.add("work", "xoxb-abc")

    write_plain_tokens(config_dir, {"other": {"token": "xoxp-1"}})

    assert store.names() == {"other"}


def test_encrypted_store_round_trip(make_store, make_key_pair, config_dir, age):
    store = make_store(ProtectionMode.encrypted(make_key_pair()))

    store.add("work", "xoxb-abc")
    store.add("home", "xoxc-def", cookie="xoxd-ghi")

    assert sorted(snapshot(config_dir)) == ["tokens.age"]
    assert store.lookup("home").headers()["Cookie"] == "d=xoxd-ghi"
    assert len(age.encrypt_calls) == 2


def test_headers_from_stored_workspace(make_store):
    store = make_store()
    store.add("work", "xoxb-abc")

    assert store.lookup("work").headers() == {
        "Authorization": "Bearer xoxb-abc",
        "Content-Type": "application/json; charset=utf-8",
    }


def test_prompt_hook_is_forwarded_to_encryptor(make_store):
    store = make_store()

    def hook(path):
        return None

    store.on_prompt_pub_key = hook

    assert store.encryptor.on_prompt_pub_key is hook
    assert store.on_prompt_pub_key is hook


def test_padded_name_finds_stored_workspace(make_store, config_dir):
    store = make_store()
    store.add(" work ", "xoxb-abc")

    assert store.exists(" work ")
    assert store.lookup(" work ").name == "work"
    assert store.remove(" work ") is True
    assert store.empty()
    assert json.loads((config_dir / "tokens.json").read_text()) == {}


@pytest.mark.parametrize("record", [{"token": "bogus-123"}, {"token": "xoxc-abc"}])
def test_invalid_stored_entry_is_corruption(make_store, config_dir, record):
    write_plain_tokens(config_dir, {"work": record})
    store = make_store()

    for read in (lambda: store.lookup("work"), store.all):
        with pytest.raises(CorruptedStoreError) as excinfo:
            read()
        assert excinfo.value.kind is ErrorKind.CORRUPTED_STORE
        assert excinfo.value.path == config_dir / "tokens.json"
        assert excinfo.value.encrypted is False
        assert record["token"] not in str(excinfo.value)


def test_invalid_encrypted_entry_is_corruption(make_store, make_key_pair, config_dir):
    key = make_key_pair()
    write_fake_age_file(config_dir / "tokens.age", key, json.dumps({"work": {"token": "bogus-123"}}))

    with pytest.raises(CorruptedStoreError) as excinfo:
        make_store(ProtectionMode.encrypted(key)).lookup("work")

    assert excinfo.value.encrypted is True
    assert excinfo.value.path == config_dir / "tokens.age"
