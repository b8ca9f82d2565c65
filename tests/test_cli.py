import json

import pytest
from typer.testing import CliRunner

from slangbucket import __version__, derive_alias, derive_id
from slangbucket import cli
from slangbucket.slangbucket import BucketStore

HELLO_ID = derive_id("hello")
HELLO_SLANG = derive_alias(HELLO_ID)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def fake_store(monkeypatch, client):
    monkeypatch.delenv("REDIS_ADDR", raising=False)
    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli, "_open_store", lambda settings: BucketStore(client))
    return client


@pytest.fixture
def hello_file(tmp_path):
    path = tmp_path / "hello.txt"
    path.write_text("hello", encoding="utf-8")
    return path


def test_version(runner):
    result = runner.invoke(cli.app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_create_then_context(runner, hello_file):
    created = runner.invoke(cli.app, ["create", str(hello_file), "--mime", "text/plain"])

    assert created.exit_code == 0, created.output
    assert json.loads(created.stdout) == {
        "id": HELLO_ID,
        "slang": [HELLO_SLANG],
        "rsa": None,
    }

    context = runner.invoke(cli.app, ["context", HELLO_SLANG])
    assert json.loads(context.stdout) == {
        "id": HELLO_ID,
        "data": "hello",
        "mime": "text/plain",
    }


def test_slang_lifecycle(runner, hello_file, fake_store):
    runner.invoke(cli.app, ["create", str(hello_file), "--rsa", "key"])

    added = runner.invoke(cli.app, ["add-slang", HELLO_ID, "foo"])
    assert json.loads(added.stdout)["slang"] == [HELLO_SLANG, "foo"]

    dropped = runner.invoke(cli.app, ["drop-slang", HELLO_ID, HELLO_SLANG])
    assert json.loads(dropped.stdout) == {"id": HELLO_ID, "slang": ["foo"], "rsa": "key"}

    meta = runner.invoke(cli.app, ["meta", "foo"])
    assert json.loads(meta.stdout)["id"] == HELLO_ID

    deleted = runner.invoke(cli.app, ["delete", HELLO_ID])
    assert deleted.exit_code == 0
    assert json.loads(deleted.stdout)["bucketContext"]["data"] == "hello"
    assert fake_store.snapshot() == {"strings": {}, "hashes": {}, "zsets": {}}


def test_errors_exit_with_one(runner):
    result = runner.invoke(cli.app, ["context", "nothing"])

    assert result.exit_code == 1
    assert "NO_SLANG" in result.output


def test_malformed_id_is_rejected(runner, fake_store):
    result = runner.invoke(cli.app, ["delete", "not-an-id"])

    assert result.exit_code == 2
    assert fake_store.calls == []


def test_invalid_redis_url(runner):
    result = runner.invoke(cli.app, ["--redis-url", "http://nope/", "context", "foo"])

    assert result.exit_code == 2


def test_non_utf8_file_is_rejected(runner, tmp_path, fake_store):
    binary = tmp_path / "blob.bin"
    binary.write_bytes(b"\xff\xfe\xfa\x00")

    result = runner.invoke(cli.app, ["create", str(binary)])

    assert result.exit_code == 2
    assert "not UTF-8" in result.output
    assert fake_store.calls == []
