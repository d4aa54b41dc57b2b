"""Tests for the Special:Export client."""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from conftest import build_export_xml, make_response, make_revisions
from wiki2git.errors import DownloadFailure
from wiki2git.export_api import EDIT_TOKEN, ExportClient, FetchCancelled

BASE_URL = "https://de.wikipedia.org/wiki/"


def make_client(session, batch_size=1000):
    return ExportClient(base_url=BASE_URL, batch_size=batch_size, session=session)


class TestExportClientInit:
    """Tests for ExportClient initialization."""

    def test_default_initialization(self, fake_session):
        """ExportClient should initialize with the documented defaults."""
        client = make_client(fake_session)
        assert client.export_url == "https://de.wikipedia.org/wiki/Special:Export"
        assert client.batch_size == 1000
        assert client.timeout == 300.0

    def test_session_gets_user_agent(self, fake_session):
        """ExportClient should identify itself."""
        make_client(fake_session)
        assert "wiki2git" in fake_session.headers["User-Agent"]

    def test_creates_session(self):
        """ExportClient should create a requests session when none is given."""
        client = ExportClient(base_url=BASE_URL)
        assert isinstance(client.session, requests.Session)


class TestFormData:
    """Tests for ExportClient.form_data."""

    def test_first_batch_has_no_offset(self, fake_session):
        data = make_client(fake_session).form_data("Berlin")
        assert data == {
            "pages": "Berlin",
            "wpEditToken": EDIT_TOKEN,
            "title": "Special:Export",
        }

    def test_offset_added(self, fake_session):
        data = make_client(fake_session).form_data("Berlin", "2001-01-01T00:00:00Z")
        assert data["offset"] == "2001-01-01T00:00:00Z"


class TestFetchHistory:
    """Tests for ExportClient.fetch_history."""

    def test_single_batch(self, fake_session, tmp_path):
        """A short first batch should end the loop after one request."""
        xml = build_export_xml("Berlin", make_revisions(42))
        fake_session.post.return_value = make_response(xml)

        revisions = make_client(fake_session).fetch_history("Berlin", tmp_path)

        assert len(revisions) == 42
        assert fake_session.post.call_count == 1
        assert (tmp_path / "Berlin0.xml").exists()
        assert not (tmp_path / "Berlin1.xml").exists()

    def test_posts_to_special_export(self, fake_session, tmp_path):
        xml = build_export_xml("Berlin", make_revisions(1))
        fake_session.post.return_value = make_response(xml)

        make_client(fake_session).fetch_history("Berlin", tmp_path)

        args, kwargs = fake_session.post.call_args
        assert args[0] == BASE_URL + "Special:Export"
        assert kwargs["data"]["pages"] == "Berlin"
        assert "offset" not in kwargs["data"]
        assert kwargs["timeout"] == 300.0
        assert kwargs["stream"] is True

    def test_pagination_uses_last_timestamp(self, fake_session, tmp_path):
        """A full batch should continue at its last revision's timestamp."""
        all_revisions = make_revisions(25)
        first = build_export_xml("Berlin", all_revisions[:10])
        second = build_export_xml("Berlin", all_revisions[10:20])
        third = build_export_xml("Berlin", all_revisions[20:])
        fake_session.post.side_effect = [make_response(first), make_response(second), make_response(third)]

        revisions = make_client(fake_session, batch_size=10).fetch_history("Berlin", tmp_path)

        assert [r.id for r in revisions] == [r["id"] for r in all_revisions]
        offsets = [c.kwargs["data"].get("offset") for c in fake_session.post.call_args_list]
        assert offsets == [None, all_revisions[9]["timestamp"], all_revisions[19]["timestamp"]]
        assert (tmp_path / "Berlin2.xml").exists()

    def test_pagination_terminates(self, fake_session, tmp_path):
        """An exact multiple of the batch size should need one extra empty batch."""
        all_revisions = make_revisions(20)
        fake_session.post.side_effect = [
            make_response(build_export_xml("Berlin", all_revisions[:10])),
            make_response(build_export_xml("Berlin", all_revisions[10:])),
            make_response(build_export_xml("Berlin", [])),
        ]

        revisions = make_client(fake_session, batch_size=10).fetch_history("Berlin", tmp_path)

        assert len(revisions) == 20
        assert fake_session.post.call_count == 3

    def test_cancel_checked_before_each_download(self, fake_session, tmp_path):
        """A stop request should prevent the next batch download."""
        all_revisions = make_revisions(25)
        fake_session.post.return_value = make_response(build_export_xml("Berlin", all_revisions[:10]))
        cancel = Mock()
        cancel.is_set.side_effect = [False, True]

        with pytest.raises(FetchCancelled) as exc_info:
            make_client(fake_session, batch_size=10).fetch_history("Berlin", tmp_path, cancel=cancel)

        assert exc_info.value.batch == 1
        assert fake_session.post.call_count == 1
        assert (tmp_path / "Berlin0.xml").exists()

    def test_cancel_ignored_for_cached_batches(self, fake_session, tmp_path):
        """Cached batches should be read even after a stop request."""
        (tmp_path / "Berlin0.xml").write_text(build_export_xml("Berlin", make_revisions(3)), encoding="utf-8")
        cancel = Mock()
        cancel.is_set.return_value = True

        revisions = make_client(fake_session).fetch_history("Berlin", tmp_path, cancel=cancel)

        assert len(revisions) == 3
        fake_session.post.assert_not_called()

    def test_cached_batches_skip_network(self, fake_session, tmp_path):
        """Existing cache files should be read without any request."""
        all_revisions = make_revisions(15)
        (tmp_path / "Berlin0.xml").write_text(build_export_xml("Berlin", all_revisions[:10]), encoding="utf-8")
        (tmp_path / "Berlin1.xml").write_text(build_export_xml("Berlin", all_revisions[10:]), encoding="utf-8")

        revisions = make_client(fake_session, batch_size=10).fetch_history("Berlin", tmp_path)

        assert len(revisions) == 15
        fake_session.post.assert_not_called()

    def test_cache_file_not_overwritten(self, fake_session, tmp_path):
        """A second run should leave cached files untouched."""
        xml = build_export_xml("Berlin", make_revisions(3))
        fake_session.post.return_value = make_response(xml)
        client = make_client(fake_session)

        client.fetch_history("Berlin", tmp_path)
        client.fetch_history("Berlin", tmp_path)

        assert fake_session.post.call_count == 1
        assert (tmp_path / "Berlin0.xml").read_text(encoding="utf-8") == xml

    def test_missing_article(self, fake_session, tmp_path):
        """An export without a page element should return None."""
        fake_session.post.return_value = make_response(build_export_xml(None, []))

        assert make_client(fake_session).fetch_history("Nowhere", tmp_path) is None

    def test_sanitized_cache_name(self, fake_session, tmp_path):
        fake_session.post.return_value = make_response(build_export_xml("AC/DC", make_revisions(1)))

        make_client(fake_session).fetch_history("AC/DC", tmp_path)

        assert (tmp_path / "AC_DC0.xml").exists()


class TestDownloadFailures:
    """Tests for failed downloads."""

    def test_non_200_raises(self, fake_session, tmp_path):
        """A non-success status should raise DownloadFailure with context."""
        fake_session.post.return_value = make_response("busy", status=503)

        with pytest.raises(DownloadFailure) as exc_info:
            make_client(fake_session).fetch_history("Berlin", tmp_path)

        assert exc_info.value.context["article"] == "Berlin"
        assert exc_info.value.context["batch"] == 0
        assert exc_info.value.context["status"] == 503
        assert not (tmp_path / "Berlin0.xml").exists()

    def test_transport_error_raises(self, fake_session, tmp_path):
        fake_session.post.side_effect = requests.ConnectionError("Network error")

        with pytest.raises(DownloadFailure):
            make_client(fake_session).fetch_history("Berlin", tmp_path)

    def test_interrupted_stream_leaves_no_cache(self, fake_session, tmp_path):
        """A stream that breaks off should not leave a partial cache file."""
        response = make_response("")
        response.iter_content.side_effect = requests.ConnectionError("reset")
        fake_session.post.return_value = response

        with pytest.raises(DownloadFailure):
            make_client(fake_session).fetch_history("Berlin", tmp_path)

        assert not (tmp_path / "Berlin0.xml").exists()
