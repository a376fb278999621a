"""Tests for PageApi, the HTTP client for page records."""

import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from page_builder.api import PageApi
from page_builder.errors import PageApiError
from page_builder.protocols import PageApiProtocol
from tests.unit.fakes import FakePageApi


@pytest.fixture
def api_with_mock_session(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[PageApi, MagicMock]:
    """Create a PageApi with a real token file and mocked requests.Session."""
    token_file = tmp_path / "token.txt"
    token_file.write_text("test-token\n")
    monkeypatch.setattr("page_builder.api.API_TOKEN_FILES", [token_file])
    monkeypatch.setattr("page_builder.api.API_CACHE_PREFIX", None)

    with patch("page_builder.api.requests.Session") as mock_session_cls:
        mock_session = MagicMock()
        mock_session.headers = {}
        mock_session_cls.return_value = mock_session
        api = PageApi(base_url="http://pages.test/api/")

    return api, mock_session


def _make_response(data: dict[str, Any]) -> MagicMock:
    response = MagicMock()
    response.json.return_value = data
    response.text = json.dumps(data)
    return response


def test_init_reads_token_from_first_found_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    token_file = tmp_path / "token.txt"
    token_file.write_text("my-secret-token\n")
    monkeypatch.setattr("page_builder.api.API_TOKEN_FILES", [tmp_path / "missing.txt", token_file])

    with patch("page_builder.api.requests.Session") as mock_session_cls:
        mock_session_cls.return_value.headers = {}
        api = PageApi()

    assert api.api_token == "my-secret-token"
    assert api.sess.headers["Authorization"] == "Bearer my-secret-token"


def test_init_raises_when_no_token_file_exists(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("page_builder.api.API_TOKEN_FILES", [tmp_path / "a.txt", tmp_path / "b.txt"])

    with pytest.raises(RuntimeError, match="Cannot find page API token"):
        PageApi()


def test_get_page_detail_returns_data(api_with_mock_session: tuple[PageApi, MagicMock]) -> None:
    api, mock_session = api_with_mock_session
    mock_session.get.return_value = _make_response({"code": 0, "data": {"id": 7, "name": "Landing"}})

    record = api.get_page_detail(7)

    assert record == {"id": 7, "name": "Landing"}
    assert mock_session.get.call_args[0][0] == "http://pages.test/api/page/detail/7"


def test_get_raises_on_api_error(api_with_mock_session: tuple[PageApi, MagicMock]) -> None:
    api, mock_session = api_with_mock_session
    mock_session.get.return_value = _make_response({"code": 401, "message": "bad token"})

    with pytest.raises(PageApiError, match="bad token"):
        api.get_page_detail(7)


def test_get_raises_on_http_error(api_with_mock_session: tuple[PageApi, MagicMock]) -> None:
    api, mock_session = api_with_mock_session
    mock_session.get.return_value.raise_for_status.side_effect = Exception("500")

    with pytest.raises(Exception, match="500"):
        api.get_page_detail(7)


def test_save_page_posts_page_data(api_with_mock_session: tuple[PageApi, MagicMock]) -> None:
    api, mock_session = api_with_mock_session
    mock_session.post.return_value = _make_response({"code": 0, "data": None})

    api.save_page(7, '{"elements": []}', name="Landing")

    url = mock_session.post.call_args[0][0]
    body = mock_session.post.call_args[1]["json"]
    assert url == "http://pages.test/api/page/update"
    assert body == {"id": 7, "pageData": '{"elements": []}', "name": "Landing"}


def test_cached_get_is_served_from_disk(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    token_file = tmp_path / "token.txt"
    token_file.write_text("t")
    monkeypatch.setattr("page_builder.api.API_TOKEN_FILES", [token_file])
    monkeypatch.setattr("page_builder.api.API_CACHE_PREFIX", str(tmp_path / "cache" / "c-"))

    with patch("page_builder.api.requests.Session") as mock_session_cls:
        mock_session = MagicMock()
        mock_session.headers = {}
        mock_session_cls.return_value = mock_session
        api = PageApi(from_cache=True)
    mock_session.get.return_value = _make_response({"code": 0, "data": {"id": 3}})

    first = api.get_page_detail(3)
    second = api.get_page_detail(3)

    assert first == second == {"id": 3}
    assert mock_session.get.call_count == 1
    assert (tmp_path / "cache" / "c-page--detail--3").exists()


def test_clients_satisfy_page_api_protocol(api_with_mock_session: tuple[PageApi, MagicMock]) -> None:
    api, _ = api_with_mock_session
    assert isinstance(api, PageApiProtocol)
    assert isinstance(FakePageApi(), PageApiProtocol)
