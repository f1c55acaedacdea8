"""Unit tests for the caretaker check modules."""

import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from ng_dev.caretaker.check.ci import CiModule
from ng_dev.caretaker.check.g3 import G3Module
from ng_dev.caretaker.check.github import GithubQueriesModule
from ng_dev.caretaker.check.services import ServiceConfig, ServicesModule
from ng_dev.configuration.models import CaretakerConfig, GithubConfig, GithubQueryConfig, NgDevConfig

GITHUB = GithubConfig(owner="angular", name="angular")


def make_module(module_type: type, git: MagicMock | None = None, github: MagicMock | None = None, config: NgDevConfig | None = None):
    return module_type(git or MagicMock(), github or MagicMock(), GITHUB, config or NgDevConfig(github=GITHUB))


def test_g3_diff_stats_only_count_synced_files() -> None:
    """Test that diff stats only include files matching the g3 include and exclude lists."""
    git = MagicMock()
    numstat = "\n".join(
        [
            "10\t2\tpackages/core/src/render.ts",
            "-\t-\tpackages/core/assets/logo.png",
            "4\t4\tpackages/core/test/render_spec.ts",
            "7\t1\tdocs/guide.md",
        ]
    )
    git.run.side_effect = [
        subprocess.CompletedProcess(["git"], 0, stdout="5\n", stderr=""),
        subprocess.CompletedProcess(["git"], 0, stdout=numstat, stderr=""),
    ]
    module = make_module(G3Module, git=git)
    stats = module.get_diff_stats("g3sha", "mainsha", ["packages/**"], ["packages/**/test/**"])
    assert (stats.commits, stats.files, stats.insertions, stats.deletions) == (5, 2, 10, 2)
    git.run.assert_any_call(["rev-list", "--count", "g3sha..mainsha"])


@pytest.mark.asyncio
async def test_g3_without_robot_config_is_skipped(tmp_path: Path) -> None:
    """Test that the g3 check is skipped when no g3 file lists are configured."""
    git = MagicMock()
    git.base_dir = tmp_path
    assert await make_module(G3Module, git=git).retrieve_data() is None
    git.run_graceful.assert_not_called()


@pytest.mark.asyncio
async def test_g3_missing_branch_is_skipped(tmp_path: Path) -> None:
    """Test that the g3 check is skipped when the g3 branch does not exist upstream."""
    (tmp_path / ".github").mkdir()
    (tmp_path / ".github" / "angular-robot.yml").write_text("merge:\n  g3Status:\n    include: ['packages/**']\n")
    git = MagicMock()
    git.base_dir = tmp_path
    git.run_graceful.return_value = subprocess.CompletedProcess(["git"], 2, stdout="", stderr="")
    assert await make_module(G3Module, git=git).retrieve_data() is None


def test_github_query_document() -> None:
    """Test that all queries are combined into one aliased GraphQL document."""
    module = make_module(GithubQueriesModule)
    document = module.build_graphql_query(
        [GithubQueryConfig(name="Merge queue", query='is:pr is:open label:"action: merge"'), GithubQueryConfig(name="Triage", query="is:issue")]
    )
    assert 'query0: search(type: ISSUE, first: 20, query: "repo:angular/angular is:pr is:open label:\\"action: merge\\"")' in document
    assert 'query1: search(type: ISSUE, first: 20, query: "repo:angular/angular is:issue")' in document


@pytest.mark.asyncio
async def test_github_queries_retrieve_data() -> None:
    """Test that query results are mapped to their configured names."""
    github = MagicMock()
    github.graphql = AsyncMock(
        return_value={"query0": {"issueCount": 2, "nodes": [{"url": "https://github.com/angular/angular/pull/1"}, {}]}}
    )
    config = NgDevConfig(github=GITHUB, caretaker=CaretakerConfig(github_queries=[GithubQueryConfig(name="Merge queue", query="is:pr")]))
    results = await make_module(GithubQueriesModule, github=github, config=config).retrieve_data()
    assert results is not None
    assert results[0].query_name == "Merge queue"
    assert results[0].count == 2
    assert results[0].matched_urls == ["https://github.com/angular/angular/pull/1"]
    assert results[0].query_url == "https://github.com/angular/angular/issues?q=is%3Apr"


@pytest.mark.asyncio
async def test_github_queries_without_configuration() -> None:
    """Test that no request is made when no queries are configured."""
    github = MagicMock()
    github.graphql = AsyncMock()
    assert await make_module(GithubQueriesModule, github=github).retrieve_data() is None
    github.graphql.assert_not_awaited()


@pytest.mark.asyncio
async def test_service_status_from_standard_api() -> None:
    """Test that statuspage.io responses are mapped to passing or failing statuses."""

    def handler(request: httpx.Request) -> httpx.Response:
        indicator = "none" if "npmjs" in str(request.url) else "major"
        return httpx.Response(
            200,
            json={"status": {"indicator": indicator, "description": "Status"}, "page": {"updated_at": "2021-03-04T10:00:00+00:00"}},
        )

    module = make_module(ServicesModule)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        passing = await module.get_status_from_standard_api(client, ServiceConfig("Npm", "https://status.npmjs.org/api/v2/status.json"))
        failing = await module.get_status_from_standard_api(client, ServiceConfig("Github", "https://www.githubstatus.com/api/v2/status.json"))
    assert passing.status == "passing"
    assert failing.status == "failing"
    assert failing.last_updated.year == 2021


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "badge,expected",
    [("<svg>passing</svg>", "success"), ("<svg>failed</svg>", "failed"), ("<svg>no builds</svg>", "not found"), ("", "not found")],
)
async def test_ci_branch_status_from_badge(badge: str, expected: str) -> None:
    """Test that the CircleCI badge is read as the branch status."""
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, text=badge)

    module = make_module(CiModule)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await module.get_branch_status_from_ci(client, "10.1.x") == expected
    assert requested == ["https://circleci.com/gh/angular/angular/tree/10.1.x.svg?style=shield"]
