# ruff: noqa: ANN201, ANN001
from datetime import datetime, timezone

import pytest
from conftest import API, branch_payload, repository_payload, tree_payload

from templatehub.models.github import ErrorCode, RateLimit
from templatehub.utils.result import Err


def test_urls(client):
    assert client.repository_url(42) == API + "repositories/42"
    assert client.search_url("topic:sbox+template") == API + "search/repositories?q=topic:sbox+template"
    assert client.branch_url("x/y", "release/1.0") == API + "repos/x/y/branches/release%2F1.0"
    assert client.tree_url("x/y", "abc") == API + "repos/x/y/git/trees/abc"


@pytest.mark.asyncio
async def test_get_repository(client, github):
    github.add("repositories/1", repository_payload(updated_at="2024-05-01T12:00:00Z"))

    result = await client.get_repository(1)

    repository = result.unwrap()
    assert repository.id == 1
    assert repository.full_name == "x/y"
    assert repository.default_branch == "main"
    assert repository.updated_at == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_search(client, github):
    github.add(
        "search/repositories?q=topic:sbox-template",
        {"total_count": 2, "incomplete_results": False, "items": [repository_payload(1), repository_payload(2)]},
    )

    result = await client.search("topic:sbox-template")

    assert [r.id for r in result.unwrap().items] == [1, 2]


@pytest.mark.asyncio
async def test_default_branch_head_tree_sha(client, github):
    github.add("repos/x/y/branches/main", branch_payload("abc"))

    result = await client.get_default_branch_head_tree_sha("x/y", "main")

    assert result.unwrap() == "abc"


@pytest.mark.asyncio
async def test_get_tree(client, github):
    github.add("repos/x/y/git/trees/abc", tree_payload((".addon", "blob", "1"), ("src", "tree", "2")))

    tree = (await client.get_tree("x/y", "abc")).unwrap().tree

    assert [(e.path, e.is_tree) for e in tree] == [(".addon", False), ("src", True)]


@pytest.mark.asyncio
async def test_invalid_json_is_malformed_response(client, github):
    github.add("repositories/1", "<html>not json</html>")

    assert await client.get_repository(1) == Err(ErrorCode.MALFORMED_RESPONSE)


@pytest.mark.asyncio
async def test_wrong_shape_is_malformed_response(client, github):
    github.add("repos/x/y/branches/main", {"name": "main", "commit": {"sha": "c0ffee"}})

    assert await client.get_default_branch_head_tree_sha("x/y", "main") == Err(ErrorCode.MALFORMED_RESPONSE)


@pytest.mark.asyncio
async def test_cache_errors_are_propagated(client, github):
    assert await client.get_tree("x/y", "missing") == Err(ErrorCode.HTTP_ERROR)

    github.add("repositories/1", {}, headers={"x-ratelimit-remaining": "0"})
    assert await client.get_repository(1) == Err(ErrorCode.RATE_LIMITED)


def test_rate_limit_from_headers():
    headers = {
        "x-ratelimit-limit": "60",
        "x-ratelimit-remaining": "0",
        "x-ratelimit-reset": "1700000000",
        "x-ratelimit-used": "oops",
    }

    rate_limit = RateLimit.from_headers(headers)

    assert rate_limit.limit == 60
    assert rate_limit.reset == 1700000000
    assert rate_limit.used is None
    assert rate_limit.exhausted
    assert not RateLimit.from_headers({}).exhausted
