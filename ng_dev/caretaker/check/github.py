"""Caretaker check module running the configured GitHub search queries."""

import json
from dataclasses import dataclass, field
from urllib.parse import quote

import structlog

from ng_dev.caretaker.check.base import BaseModule, indent, pad_labels
from ng_dev.configuration.models import GithubQueryConfig
from ng_dev.utils.console import bold, info
from ng_dev.utils.constants import GITHUB_URL

logger = structlog.get_logger(__name__)

# Caretakers have plenty to do once this many matches show up, more are not useful.
MAX_RETURNED_ISSUES = 20


@dataclass
class GithubQueryResult:
    """Result of one configured GitHub search query."""

    query_name: str
    count: int
    query_url: str
    matched_urls: list[str] = field(default_factory=list)


class GithubQueriesModule(BaseModule[list[GithubQueryResult]]):
    """Shows the number of issues and pull requests matching each configured query."""

    async def retrieve_data(self) -> list[GithubQueryResult] | None:
        queries = self.config.caretaker.github_queries if self.config.caretaker else []
        if not queries:
            logger.debug("No github queries defined in the configuration, skipping")
            return None

        query_result = await self.github.graphql(self.build_graphql_query(queries))
        repo_slug = f"{self.github_config.owner}/{self.github_config.name}"
        results: list[GithubQueryResult] = []
        for index, query in enumerate(queries):
            search = query_result[f"query{index}"]
            results.append(
                GithubQueryResult(
                    query_name=query.name,
                    count=search["issueCount"],
                    query_url=f"{GITHUB_URL}/{repo_slug}/issues?q={quote(query.query)}",
                    matched_urls=[node["url"] for node in search["nodes"] if node and "url" in node],
                )
            )
        return results

    def build_graphql_query(self, queries: list[GithubQueryConfig]) -> str:
        """Builds a single GraphQL document searching for all queries, aliased by their index."""
        repo_filter = f"repo:{self.github_config.owner}/{self.github_config.name}"
        searches = []
        for index, query in enumerate(queries):
            search_query = json.dumps(f"{repo_filter} {query.query}")
            searches.append(
                f"query{index}: search(type: ISSUE, first: {MAX_RETURNED_ISSUES}, query: {search_query}) {{"
                " issueCount nodes { ... on PullRequest { url } ... on Issue { url } } }"
            )
        return "query {\n" + "\n".join(searches) + "\n}"

    def print_to_terminal(self) -> None:
        if not self.data:
            return
        info(bold("Github Tasks"))
        width = pad_labels([result.query_name for result in self.data])
        for result in self.data:
            info(indent(f"{result.query_name.ljust(width)}  {result.count}"))
            if result.count > 0:
                info(indent(result.query_url, 2))
                for url in result.matched_urls:
                    info(indent(f"- {url}", 2))
                if result.count > MAX_RETURNED_ISSUES:
                    info(indent(f"... {result.count - MAX_RETURNED_ISSUES} additional matches", 2))
        info()
