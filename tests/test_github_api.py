"""Tests for the GitHub API client."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from wrigi.github_api import GitHubAuthError, GitHubClient, GitHubError, GitHubHTTPError


def make_response(status: int = 200, body=None, headers: dict | None = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = "utf-8"
    return response


def make_client(*responses, **kwargs) -> tuple[GitHubClient, MagicMock]:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = list(responses)
    kwargs.setdefault("token_env", ())
    kwargs.setdefault("backoff_base_s", 0.0)
    return GitHubClient(session=session, **kwargs), session


class TestAuth:
    def test_token_sent(self):
        client, session = make_client(make_response(body=[]), token="secret")

        client.get_json("/repos/o/r/releases")

        headers = session.request.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"
        assert headers["User-Agent"].startswith("Wrigi")

    def test_token_from_env(self, monkeypatch):
        monkeypatch.setenv("WRIGI_TEST_TOKEN", "from-env")
        client, session = make_client(make_response(body=[]), token_env=("WRIGI_TEST_TOKEN",))

        client.get_json("/user")

        assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer from-env"

    def test_no_token_no_header(self):
        client, session = make_client(make_response(body=[]))

        client.get_json("/repos/o/r/releases")

        assert "Authorization" not in session.request.call_args.kwargs["headers"]
        assert not client.has_token

    def test_required_without_token(self):
        with pytest.raises(GitHubAuthError):
            make_client(auth="required")

    def test_required_per_request(self):
        client, session = make_client()

        with pytest.raises(GitHubAuthError):
            client.request("POST", "/repos/o/r/issues", auth="required")
        session.request.assert_not_called()


class TestRequest:
    def test_url_building(self):
        client, session = make_client(make_response(body={}), base_url="https://ghe.example.com/api/v3/")

        client.get_json("/repos/o/r", params={"b": 2, "a": 1})

        assert session.request.call_args.args == (
            "GET",
            "https://ghe.example.com/api/v3/repos/o/r?a=1&b=2",
        )

    def test_http_error(self):
        client, _ = make_client(make_response(404, {"message": "Not Found"}))

        with pytest.raises(GitHubHTTPError) as excinfo:
            client.get_json("/repos/o/missing/releases")

        assert excinfo.value.status_code == 404
        assert "Not Found" in str(excinfo.value)

    def test_transport_error(self):
        client, _ = make_client(requests.ConnectionError("refused"))

        with pytest.raises(GitHubError, match="Request failed"):
            client.get_json("/repos/o/r/releases")

    def test_no_retry_by_default(self):
        client, session = make_client(make_response(503), make_response(200, []))

        with pytest.raises(GitHubHTTPError):
            client.get_json("/repos/o/r/releases")
        assert session.request.call_count == 1

    def test_retry_on_server_error(self, monkeypatch):
        monkeypatch.setattr("wrigi.github_api.time.sleep", lambda s: None)
        client, session = make_client(
            make_response(502), make_response(200, [{"tag_name": "x"}]), max_retries=2
        )

        assert client.get_json("/repos/o/r/releases") == [{"tag_name": "x"}]
        assert session.request.call_count == 2

    def test_retry_on_rate_limit(self, monkeypatch):
        delays = []
        monkeypatch.setattr("wrigi.github_api.time.sleep", delays.append)
        client, _ = make_client(
            make_response(403, {"message": "API rate limit exceeded"}, {"Retry-After": "3"}),
            make_response(200, []),
            max_retries=1,
        )

        assert client.get_json("/repos/o/r/releases") == []
        assert delays == [3.0]

    def test_forbidden_without_rate_limit_not_retried(self):
        client, session = make_client(
            make_response(403, {"message": "Resource not accessible"}), max_retries=3
        )

        with pytest.raises(GitHubHTTPError):
            client.get_json("/repos/o/r/releases")
        assert session.request.call_count == 1


class TestEtagCache:
    def test_not_modified_served_from_cache(self):
        client, session = make_client(
            make_response(200, [{"tag_name": "v1-alpha"}], {"ETag": '"abc"'}),
            make_response(304),
        )

        first = client.get_json("/repos/o/r/releases")
        second = client.get_json("/repos/o/r/releases")

        assert first == second == [{"tag_name": "v1-alpha"}]
        assert session.request.call_args.kwargs["headers"]["If-None-Match"] == '"abc"'

    def test_cache_disabled(self):
        client, session = make_client(
            make_response(200, [], {"ETag": '"abc"'}),
            make_response(200, []),
            cache_enabled=False,
        )

        client.get_json("/repos/o/r/releases")
        client.get_json("/repos/o/r/releases")

        assert "If-None-Match" not in session.request.call_args.kwargs["headers"]


class TestPaginate:
    def test_follows_next_link(self):
        client, session = make_client(
            make_response(
                200,
                [1, 2],
                {"Link": '<https://api.github.com/repos/o/r/releases?page=2>; rel="next"'},
            ),
            make_response(200, [3]),
        )

        assert list(client.paginate("/repos/o/r/releases")) == [1, 2, 3]
        assert session.request.call_args.args[1] == "https://api.github.com/repos/o/r/releases?page=2"

    def test_limit_pages(self):
        client, session = make_client(
            make_response(
                200,
                [1, 2],
                {"Link": '<https://api.github.com/repos/o/r/releases?page=2>; rel="next"'},
            ),
        )

        assert list(client.paginate("/repos/o/r/releases", limit_pages=1)) == [1, 2]
        assert session.request.call_count == 1

    def test_per_page_param(self):
        client, session = make_client(make_response(200, []))

        list(client.paginate("/repos/o/r/releases", per_page=30))

        assert session.request.call_args.args[1].endswith("?per_page=30")

    def test_parse_next_link(self):
        client, _ = make_client()
        header = (
            '<https://api.github.com/x?page=1>; rel="prev", '
            '<https://api.github.com/x?page=3>; rel="next"'
        )

        assert client._parse_next_link(header) == "https://api.github.com/x?page=3"
        assert client._parse_next_link("") is None
