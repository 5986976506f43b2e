"""Tests for the sync engine."""

import json
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from shopsync.auth import Credentials
from shopsync.exceptions import (
    ShopifyNetworkError,
    ShopifyNotFoundError,
    ShopifyPermissionError,
    SyncError,
)
from shopsync.output import OutputFormatter
from shopsync.api import ShopifyClient
from shopsync.resources import ThemeAssetsAdapter
from shopsync.resources.base import ResourceAdapter
from shopsync.sync import (
    NO_DELAY_RETRY_CONFIG,
    PullOptions,
    PushOptions,
    SyncEngine,
    write_metadata,
)

CREDENTIALS = Credentials(site="test-shop.myshopify.com", access_token="shpat_test")


class FakeAdapter(ResourceAdapter):
    """In-memory store of JSON resources that records every call."""

    resource_name = "items"
    file_extension = ".json"

    def __init__(self, remote=None, fail=None):
        super().__init__(client_factory=Mock())
        self.remote = remote if remote is not None else {}
        self.fail = fail or {}
        self.calls = []
        self._next_id = 100

    def _maybe_fail(self, op, handle):
        errors = self.fail.get((op, handle))
        if isinstance(errors, list):
            if errors:
                raise errors.pop(0)
        elif errors is not None:
            raise errors

    def list_remote(self, credentials):
        self.calls.append(("list",))
        resources = [dict(r) for r in self.remote.values()]
        self.remember_remote(resources)
        return resources

    def handle_of(self, resource):
        return resource["handle"]

    def extract_metadata(self, resource):
        return {"id": resource["id"], "handle": resource["handle"]}

    def download_one(self, credentials, resource, directory):
        self.calls.append(("download", resource["handle"]))
        self._maybe_fail("download", resource["handle"])
        file_path = self.resource_file_path(directory, resource)
        file_path.write_text(json.dumps({"value": resource["value"]}))
        return file_path

    def upload_one(self, credentials, local_file):
        remote_id = self.remote_id(local_file)
        self.calls.append(
            ("upload", local_file.handle, "update" if remote_id else "create")
        )
        self._maybe_fail("upload", local_file.handle)
        content = json.loads(local_file.file_path.read_text())
        if not remote_id:
            remote_id = self._next_id
            self._next_id += 1
        self.remote[local_file.handle] = {
            "id": remote_id,
            "handle": local_file.handle,
            "value": content["value"],
        }

    def delete_one(self, credentials, resource):
        self.calls.append(("delete", resource["handle"]))
        self._maybe_fail("delete", resource["handle"])
        if resource["handle"] not in self.remote:
            raise ShopifyNotFoundError("Resource not found (404)", status_code=404)
        del self.remote[resource["handle"]]


def remote_store(*handles):
    return {
        h: {"id": i, "handle": h, "value": f"remote-{h}"}
        for i, h in enumerate(handles, start=1)
    }


def write_local(directory, handle, value=None, metadata=None, raw=None):
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{handle}.json"
    path.write_text(raw if raw is not None else json.dumps({"value": value or handle}))
    if metadata is not None:
        write_metadata(path, metadata)
    return path


def local_handles(directory):
    return sorted(p.name for p in directory.iterdir())


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_output():
    """Create a mock output formatter."""
    output = Mock(spec=OutputFormatter)
    output.quiet = True
    output.json_output = False
    return output


@pytest.fixture
def sleep():
    return Mock()


def make_engine(adapter, output, sleep):
    return SyncEngine(adapter, output, retry_config=NO_DELAY_RETRY_CONFIG, sleep=sleep)


class TestSyncEngine:
    """Test SyncEngine construction."""

    def test_create_sync_engine(self, mock_output):
        adapter = FakeAdapter()
        engine = SyncEngine(adapter, mock_output)
        assert engine.adapter is adapter
        assert engine.output is mock_output
        assert engine.operations is not None


class TestPull:
    """Tests for SyncEngine.pull."""

    def test_pull_downloads_all_with_sidecars(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(remote_store("a", "c"))
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.pull(PullOptions(temp_dir, CREDENTIALS))

        target = temp_dir / "items"
        assert local_handles(target) == ["a.json", "a.json.meta", "c.json", "c.json.meta"]
        assert json.loads((target / "c.json").read_text()) == {"value": "remote-c"}
        assert report.transferred.processed == 2
        assert report.failed == 0
        assert report.location == str(target)

    def test_pull_dry_run_touches_nothing(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(remote_store("a", "c"))
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.pull(PullOptions(temp_dir, CREDENTIALS, dry_run=True))

        assert not (temp_dir / "items").exists()
        assert adapter.calls == [("list",)]
        assert report.dry_run is True
        assert len(report.plan.transfers) == 2
        assert report.transferred.processed == 0

    def test_pull_mirror_deletes_local_extras(self, temp_dir, mock_output, sleep):
        target = temp_dir / "items"
        write_local(target, "a", metadata={"id": 1})
        write_local(target, "b", metadata={"id": 2})
        adapter = FakeAdapter(remote_store("a", "c"))
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.pull(PullOptions(temp_dir, CREDENTIALS, mirror=True))

        assert local_handles(target) == ["a.json", "a.json.meta", "c.json", "c.json.meta"]
        assert report.plan.delete_keys == ["b.json"]
        assert report.deleted.processed == 1

    def test_pull_mirror_dry_run_lists_deletions(self, temp_dir, mock_output, sleep):
        target = temp_dir / "items"
        write_local(target, "b")
        adapter = FakeAdapter(remote_store("a"))
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.pull(
            PullOptions(temp_dir, CREDENTIALS, dry_run=True, mirror=True)
        )

        assert local_handles(target) == ["b.json"]
        assert report.to_dict()["planned"] == {
            "transfers": 1,
            "deletions": 1,
            "delete_list": ["b.json"],
        }

    def test_pull_max_items_truncates_in_order(self, temp_dir, mock_output, sleep):
        target = temp_dir / "items"
        write_local(target, "c")
        adapter = FakeAdapter(remote_store("a", "b", "c"))
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.pull(
            PullOptions(temp_dir, CREDENTIALS, max_items=2, mirror=True)
        )

        assert [r["handle"] for r in report.plan.transfers] == ["a", "b"]
        # The truncated list is the remote side for mirror purposes
        assert report.plan.delete_keys == ["c.json"]

    def test_pull_is_idempotent(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(remote_store("a", "c"))
        engine = make_engine(adapter, mock_output, sleep)

        engine.pull(PullOptions(temp_dir, CREDENTIALS, mirror=True))
        first = {
            p.name: p.read_bytes() for p in (temp_dir / "items").iterdir()
        }
        report = engine.pull(PullOptions(temp_dir, CREDENTIALS, mirror=True))
        second = {
            p.name: p.read_bytes() for p in (temp_dir / "items").iterdir()
        }

        assert first == second
        assert report.plan.deletions == []

    def test_pull_partial_failure(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(
            remote_store("a", "b", "c"),
            fail={("download", "b"): ShopifyPermissionError("Forbidden", 403)},
        )
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.pull(PullOptions(temp_dir, CREDENTIALS))

        assert report.transferred.processed == 2
        assert report.transferred.failed == 1
        assert report.errors == ["b: Forbidden"]
        assert local_handles(temp_dir / "items") == [
            "a.json",
            "a.json.meta",
            "c.json",
            "c.json.meta",
        ]
        # Every attempt of b was used before moving on
        assert adapter.calls.count(("download", "b")) == 3

    def test_pull_retries_transient_download(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(
            remote_store("a"),
            fail={("download", "a"): [ShopifyNetworkError("reset")]},
        )
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.pull(PullOptions(temp_dir, CREDENTIALS))

        assert report.transferred.processed == 1
        assert report.failed == 0
        assert sleep.call_count == 1

    def test_pull_list_failure_is_fatal(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(remote_store("a"))
        adapter.list_remote = Mock(side_effect=ShopifyNetworkError("down"))
        engine = make_engine(adapter, mock_output, sleep)

        with pytest.raises(ShopifyNetworkError, match="down"):
            engine.pull(PullOptions(temp_dir, CREDENTIALS))

        assert adapter.list_remote.call_count == 3
        assert not (temp_dir / "items").exists()

    def test_pull_output_directory_failure_is_fatal(
        self, temp_dir, mock_output, sleep
    ):
        (temp_dir / "items").write_text("not a directory")
        adapter = FakeAdapter(remote_store("a"))
        engine = make_engine(adapter, mock_output, sleep)

        with pytest.raises(SyncError, match="Cannot create output directory"):
            engine.pull(PullOptions(temp_dir, CREDENTIALS))

        assert ("download", "a") not in adapter.calls

    def test_pull_summary(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(remote_store("a"))
        engine = make_engine(adapter, mock_output, sleep)

        engine.pull(PullOptions(temp_dir, CREDENTIALS))

        mock_output.success.assert_called_once_with(
            f"Successfully pulled items to {temp_dir / 'items'} | Downloaded: 1"
        )


class TestPush:
    """Tests for SyncEngine.push."""

    @pytest.fixture
    def scenario(self, temp_dir):
        """Local a.json and b.json with sidecars; remote a and c."""
        source = temp_dir / "items"
        write_local(source, "a", "local-a", metadata={"id": 1, "handle": "a"})
        write_local(source, "b", "local-b", metadata={"id": 99, "handle": "b"})
        return FakeAdapter(remote_store("a", "c"))

    def test_push_mirror_scenario(self, temp_dir, scenario, mock_output, sleep):
        engine = make_engine(scenario, mock_output, sleep)

        report = engine.push(PushOptions(temp_dir, CREDENTIALS, mirror=True))

        assert scenario.calls == [
            ("list",),
            ("delete", "c"),
            ("upload", "a", "update"),
            ("upload", "b", "create"),
        ]
        assert sorted(scenario.remote) == ["a", "b"]
        assert scenario.remote["a"]["value"] == "local-a"
        assert report.transferred.processed == 2
        assert report.deleted.processed == 1
        mock_output.success.assert_called_once_with(
            "Successfully pushed items | Uploaded: 2 | Deleted: 1"
        )

    def test_push_mirror_dry_run_scenario(
        self, temp_dir, scenario, mock_output, sleep
    ):
        before = local_handles(temp_dir / "items")
        engine = make_engine(scenario, mock_output, sleep)

        report = engine.push(
            PushOptions(temp_dir, CREDENTIALS, dry_run=True, mirror=True)
        )

        assert scenario.calls == [("list",)]
        assert sorted(scenario.remote) == ["a", "c"]
        assert local_handles(temp_dir / "items") == before
        assert len(report.plan.transfers) == 2
        assert report.plan.delete_keys == ["c.json"]
        info_lines = [c.args[0] for c in mock_output.info.call_args_list]
        assert "Items to upload: 2" in info_lines
        assert "Items to delete: 1" in info_lines

    def test_push_without_mirror_keeps_remote_extras(
        self, temp_dir, scenario, mock_output, sleep
    ):
        engine = make_engine(scenario, mock_output, sleep)

        engine.push(PushOptions(temp_dir, CREDENTIALS))

        assert sorted(scenario.remote) == ["a", "b", "c"]
        assert not any(call[0] == "delete" for call in scenario.calls)

    def test_push_mirror_is_idempotent(self, temp_dir, scenario, mock_output, sleep):
        engine = make_engine(scenario, mock_output, sleep)

        engine.push(PushOptions(temp_dir, CREDENTIALS, mirror=True))
        after_first = {h: dict(r) for h, r in scenario.remote.items()}
        scenario.calls.clear()
        report = engine.push(PushOptions(temp_dir, CREDENTIALS, mirror=True))

        assert report.plan.deletions == []
        assert scenario.remote == after_first
        assert scenario.calls == [
            ("list",),
            ("upload", "a", "update"),
            ("upload", "b", "update"),
        ]

    def test_delete_precedes_upload(self, temp_dir, mock_output, sleep):
        """Test a replaced resource is removed before its successor is uploaded."""
        write_local(temp_dir / "items", "404-json")
        adapter = FakeAdapter(remote_store("404-liquid"))
        engine = make_engine(adapter, mock_output, sleep)

        engine.push(PushOptions(temp_dir, CREDENTIALS, mirror=True))

        assert adapter.calls.index(("delete", "404-liquid")) < adapter.calls.index(
            ("upload", "404-json", "create")
        )

    def test_partial_failure_isolation(self, temp_dir, mock_output, sleep):
        source = temp_dir / "items"
        write_local(source, "a")
        write_local(source, "b", raw="{not valid json")
        write_local(source, "c")
        adapter = FakeAdapter()
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.push(PushOptions(temp_dir, CREDENTIALS))

        assert report.transferred.processed == 2
        assert report.transferred.failed == 1
        assert report.errors[0].startswith("b: ")
        assert sorted(adapter.remote) == ["a", "c"]

    def test_delete_not_found_counts_as_success(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(remote_store("gone"))
        original_list = adapter.list_remote

        def list_then_vanish(credentials):
            resources = original_list(credentials)
            adapter.remote.clear()
            return resources

        adapter.list_remote = list_then_vanish
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.push(PushOptions(temp_dir, CREDENTIALS, mirror=True))

        assert report.deleted.processed == 1
        assert report.failed == 0
        assert adapter.calls.count(("delete", "gone")) == 1

    def test_delete_permission_error_is_item_failure(
        self, temp_dir, mock_output, sleep
    ):
        write_local(temp_dir / "items", "a")
        adapter = FakeAdapter(
            remote_store("locked"),
            fail={("delete", "locked"): ShopifyPermissionError("Forbidden", 403)},
        )
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.push(PushOptions(temp_dir, CREDENTIALS, mirror=True))

        assert report.deleted.failed == 1
        assert report.errors == ["locked: Forbidden"]
        assert "locked" in adapter.remote
        # Uploads still ran after the failed delete
        assert report.transferred.processed == 1

    def test_push_missing_directory(self, temp_dir, mock_output, sleep):
        adapter = FakeAdapter(remote_store("a"))
        engine = make_engine(adapter, mock_output, sleep)

        report = engine.push(PushOptions(temp_dir / "nowhere", CREDENTIALS))

        assert report.plan.transfers == []
        mock_output.warning.assert_any_call(
            f"Local directory does not exist: {temp_dir / 'nowhere' / 'items'}"
        )


class TestRoundTrip:
    """Pull followed by push reproduces the remote state."""

    def test_pull_then_push(self, temp_dir, mock_output, sleep):
        remote = remote_store("a", "b", "c")
        snapshot = {h: dict(r) for h, r in remote.items()}

        make_engine(FakeAdapter(remote), mock_output, sleep).pull(
            PullOptions(temp_dir, CREDENTIALS)
        )
        pusher = FakeAdapter(remote)
        report = make_engine(pusher, mock_output, sleep).push(
            PushOptions(temp_dir, CREDENTIALS, mirror=True)
        )

        assert remote == snapshot
        assert report.failed == 0
        assert [c for c in pusher.calls if c[0] == "upload"] == [
            ("upload", "a", "update"),
            ("upload", "b", "update"),
            ("upload", "c", "update"),
        ]

    def test_theme_pull_then_mirror_push_keeps_remote_assets(
        self, temp_dir, mock_output, sleep
    ):
        assets = {
            "layout/theme.liquid": "<html>{{ content_for_layout }}</html>",
            "blocks/hero.liquid": "<section>hero</section>",
            "extras/notes.txt": "not part of the theme tree",
        }
        client = Mock(spec=ShopifyClient)

        def get(endpoint, params=None, **kwargs):
            if endpoint == "themes.json":
                return {"themes": [{"id": 9, "name": "Dawn", "role": "main"}]}
            if params:
                key = params["asset[key]"]
                return {"asset": {"key": key, "value": assets[key]}}
            return {"assets": [{"key": key} for key in assets]}

        client.get.side_effect = get

        def adapter():
            return ThemeAssetsAdapter(published=True, client_factory=Mock(return_value=client))

        make_engine(adapter(), mock_output, sleep).pull(
            PullOptions(temp_dir, CREDENTIALS)
        )
        report = make_engine(adapter(), mock_output, sleep).push(
            PushOptions(temp_dir, CREDENTIALS, mirror=True)
        )

        theme_dir = temp_dir / "themes" / "published"
        assert (theme_dir / "blocks" / "hero.liquid").read_text() == assets[
            "blocks/hero.liquid"
        ]
        assert not (theme_dir / "extras").exists()
        client.delete.assert_not_called()
        assert report.plan.delete_keys == []
        assert report.failed == 0
        uploaded = sorted(c.kwargs["json"]["asset"]["key"] for c in client.put.call_args_list)
        assert uploaded == ["blocks/hero.liquid", "layout/theme.liquid"]
