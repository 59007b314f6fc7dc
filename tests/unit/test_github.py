"""Unit tests for conanreadme.github."""

from __future__ import annotations

import base64

import httpx
import pytest
import respx

from conanreadme.config import GitHubSettings
from conanreadme.github import GitHubClient, parse_github_url

README_URL = "https://api.github.com/repos/owner/repo/readme"
REPO_URL = "https://api.github.com/repos/owner/repo"


def _readme_payload(text: str) -> dict[str, object]:
    return {
        "name": "README.md",
        "path": "README.md",
        "encoding": "base64",
        "content": base64.b64encode(text.encode("utf-8")).decode("ascii"),
    }


class TestParseGithubUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/user/repo", ("user", "repo")),
            ("https://github.com/conan-io/conan-center-index", ("conan-io", "conan-center-index")),
            ("https://github.com/owner/repo.git", ("owner", "repo")),
            ("https://github.com/owner/repo/", ("owner", "repo")),
            ("https://www.github.com/madler/zlib", ("madler", "zlib")),
            ("https://github.com/fmtlib/fmt/tree/master/doc", ("fmtlib", "fmt")),
        ],
    )
    def test_valid(self, url: str, expected: tuple[str, str]) -> None:
        assert parse_github_url(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "invalid-url",
            "https://example.com/repo",
            "http://github.com/user/repo",
            "https://github.com/user",
            "",
        ],
    )
    def test_invalid(self, url: str) -> None:
        assert parse_github_url(url) is None


class TestGetReadmeContent:
    async def test_success(self) -> None:
        with respx.mock:
            route = respx.get(README_URL).mock(
                return_value=httpx.Response(
                    200, json=_readme_payload("# Test README\n\nThis is a test.")
                )
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                result = await github.get_readme_content("https://github.com/owner/repo")

        assert result == "# Test README\n\nThis is a test."
        assert route.calls.last.request.headers["accept"] == "application/vnd.github+json"

    async def test_git_suffix(self) -> None:
        with respx.mock:
            respx.get(README_URL).mock(
                return_value=httpx.Response(200, json=_readme_payload("# Test"))
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                result = await github.get_readme_content("https://github.com/owner/repo.git")

        assert result == "# Test"

    async def test_not_found(self) -> None:
        with respx.mock:
            respx.get(README_URL).mock(return_value=httpx.Response(404))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                assert await github.get_readme_content("https://github.com/owner/repo") is None

    async def test_server_error(self) -> None:
        with respx.mock:
            respx.get(README_URL).mock(return_value=httpx.Response(500))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                assert await github.get_readme_content("https://github.com/owner/repo") is None

    async def test_non_base64_encoding(self) -> None:
        payload = {"name": "README.md", "content": "some content", "encoding": "utf-8"}
        with respx.mock:
            respx.get(README_URL).mock(return_value=httpx.Response(200, json=payload))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                assert await github.get_readme_content("https://github.com/owner/repo") is None

    async def test_network_error(self) -> None:
        with respx.mock:
            respx.get(README_URL).mock(side_effect=httpx.ConnectError("Network error"))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                assert await github.get_readme_content("https://github.com/owner/repo") is None

    async def test_non_github_url_makes_no_request(self) -> None:
        with respx.mock(assert_all_called=False) as router:
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                result = await github.get_readme_content("https://example.com/not-github")

        assert result is None
        assert len(router.calls) == 0

    async def test_custom_api_url(self) -> None:
        settings = GitHubSettings(api_url="https://ghe.example.com/api/v3/")
        with respx.mock:
            respx.get("https://ghe.example.com/api/v3/repos/owner/repo/readme").mock(
                return_value=httpx.Response(200, json=_readme_payload("# Enterprise"))
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, settings)
                result = await github.get_readme_content("https://github.com/owner/repo")

        assert result == "# Enterprise"


class TestCheckRepositoryExists:
    async def test_existing_repository(self) -> None:
        with respx.mock:
            route = respx.head(REPO_URL).mock(return_value=httpx.Response(200))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                assert await github.check_repository_exists("https://github.com/owner/repo")

        assert route.called

    async def test_missing_repository(self) -> None:
        with respx.mock:
            respx.head("https://api.github.com/repos/owner/nonexistent").mock(
                return_value=httpx.Response(404)
            )
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                exists = await github.check_repository_exists("https://github.com/owner/nonexistent")

        assert exists is False

    async def test_invalid_url(self) -> None:
        async with httpx.AsyncClient() as client:
            github = GitHubClient(client, GitHubSettings())
            assert await github.check_repository_exists("https://example.com/not-github") is False

    async def test_network_error(self) -> None:
        with respx.mock:
            respx.head(REPO_URL).mock(side_effect=httpx.ConnectError("Network error"))
            async with httpx.AsyncClient() as client:
                github = GitHubClient(client, GitHubSettings())
                assert await github.check_repository_exists("https://github.com/owner/repo") is False
