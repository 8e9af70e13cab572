"""
GitHub source — Merged pull requests authored by the authenticated user.

Uses the GraphQL search connection rather than a per-repository walk, so a
single paginated query covers every repository the token can see. Each search
edge wraps a node; non-PullRequest results come back as empty objects (the
inline fragment does not match) and are dropped by the post-fetch filter,
which keeps only state == "MERGED".

Export conventions:
    CSV renders an absent mergedAt as "N/A" and joins labels with "; ".
    JSON omits mergedAt when absent and omits an empty labels list.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..formatting import (
    GITHUB_TIMESTAMP_FORMAT,
    format_optional_timestamp,
    format_timestamp,
    join_labels,
    or_placeholder,
    truncate,
)
from ..graphql_queries import GITHUB_MERGED_PRS_QUERY
from ..models import Page
from .base import (
    PAGE_SIZE,
    DateRange,
    PaginatedSource,
    TableColumn,
    int_field,
    label_names,
    object_field,
    optional_text,
    read_page_marker,
    require_list,
    require_object,
    text_field,
    total_count,
)

MERGED_STATE = "MERGED"
LABEL_DELIMITER = "; "
USER_AGENT = "pull-requests-extractor"

CSV_HEADER = (
    "Repository", "PR#", "Title", "URL", "Branch", "State",
    "Merged At", "Created At", "Updated At",
    "Additions", "Deletions", "Changed Files",
    "Reviews", "Comments", "Labels",
)


@dataclass(frozen=True)
class Repository:
    name: str
    owner: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True)
class PullRequest:
    """A GitHub pull request as returned by the search API (raw, nested)."""

    number: int
    title: str
    url: str
    body: str
    state: str
    merged_at: Optional[str]
    created_at: str
    updated_at: str
    additions: int
    deletions: int
    changed_files: int
    head_ref_name: str
    repository: Repository
    review_count: int
    comment_count: int
    labels: Tuple[str, ...]


@dataclass(frozen=True)
class PullRequestExportRecord:
    repository: str
    number: int
    title: str
    description: str
    url: str
    branch: str
    state: str
    merged_at: Optional[str]
    created_at: str
    updated_at: str
    additions: int
    deletions: int
    changed_files: int
    reviews: int
    comments: int
    labels: Tuple[str, ...]

    def to_csv_row(self) -> Tuple[str, ...]:
        return (
            self.repository,
            str(self.number),
            self.title,
            self.url,
            self.branch,
            self.state,
            or_placeholder(self.merged_at),
            self.created_at,
            self.updated_at,
            str(self.additions),
            str(self.deletions),
            str(self.changed_files),
            str(self.reviews),
            str(self.comments),
            join_labels(self.labels, LABEL_DELIMITER),
        )

    def to_json_dict(self) -> Dict[str, Any]:
        out = {
            "repository": self.repository,
            "number": self.number,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "branch": self.branch,
            "state": self.state,
        }
        if self.merged_at is not None:
            out["mergedAt"] = self.merged_at
        out.update({
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "additions": self.additions,
            "deletions": self.deletions,
            "changedFiles": self.changed_files,
            "reviews": self.reviews,
            "comments": self.comments,
        })
        if self.labels:
            out["labels"] = list(self.labels)
        return out


def default_search_query(date_range: DateRange) -> str:
    return f"is:pr author:@me is:merged merged:{date_range.start_day}..{date_range.end_day}"


def build_variables(date_range: DateRange, search_query: Optional[str] = None) -> Dict[str, Any]:
    return {
        "queryString": search_query or default_search_query(date_range),
        "first": PAGE_SIZE,
    }


def parse_pull_request(node: Any) -> PullRequest:
    node = require_object(node, "pull request node")
    repository = object_field(node, "repository")
    return PullRequest(
        number=int_field(node, "number"),
        title=text_field(node, "title"),
        url=text_field(node, "url"),
        body=text_field(node, "body"),
        state=text_field(node, "state"),
        merged_at=optional_text(node, "mergedAt"),
        created_at=text_field(node, "createdAt"),
        updated_at=text_field(node, "updatedAt"),
        additions=int_field(node, "additions"),
        deletions=int_field(node, "deletions"),
        changed_files=int_field(node, "changedFiles"),
        head_ref_name=text_field(node, "headRefName"),
        repository=Repository(
            name=text_field(repository, "name"),
            owner=text_field(object_field(repository, "owner"), "login"),
        ),
        review_count=total_count(node, "reviews"),
        comment_count=total_count(node, "comments"),
        labels=label_names(node),
    )


def extract_page(data: Mapping[str, Any]) -> Page:
    search = require_object(data.get("search"), "search")
    edges = require_list(search.get("edges"), "search.edges")
    items = tuple(
        parse_pull_request(require_object(edge, "search edge").get("node") or {})
        for edge in edges
    )
    issue_count = search.get("issueCount")
    return Page(
        items=items,
        marker=read_page_marker(search),
        total_count=issue_count if isinstance(issue_count, int) else None,
    )


def is_merged(pr: PullRequest) -> bool:
    return pr.state == MERGED_STATE


def project_pull_request(pr: PullRequest) -> PullRequestExportRecord:
    return PullRequestExportRecord(
        repository=pr.repository.full_name,
        number=pr.number,
        title=pr.title,
        description=pr.body,
        url=pr.url,
        branch=pr.head_ref_name,
        state=pr.state,
        merged_at=format_optional_timestamp(pr.merged_at, GITHUB_TIMESTAMP_FORMAT),
        created_at=format_timestamp(pr.created_at, GITHUB_TIMESTAMP_FORMAT),
        updated_at=format_timestamp(pr.updated_at, GITHUB_TIMESTAMP_FORMAT),
        additions=pr.additions,
        deletions=pr.deletions,
        changed_files=pr.changed_files,
        reviews=pr.review_count,
        comments=pr.comment_count,
        labels=pr.labels,
    )


def line_totals(prs: Sequence[PullRequest]) -> List[str]:
    added = sum(pr.additions for pr in prs)
    deleted = sum(pr.deletions for pr in prs)
    return [
        f"Total lines added:   +{added}",
        f"Total lines deleted: -{deleted}",
    ]


def _merged_cell(pr: PullRequest) -> str:
    return or_placeholder(format_optional_timestamp(pr.merged_at, GITHUB_TIMESTAMP_FORMAT))


GITHUB_SOURCE = PaginatedSource(
    name="github",
    title="GitHub Merged Pull Requests Extractor",
    item_noun="pull requests",
    summary_label="merged PRs",
    endpoint_setting="GITHUB_GRAPHQL_URL",
    token_setting="GITHUB_TOKEN",
    query=GITHUB_MERGED_PRS_QUERY,
    build_variables=build_variables,
    extract_page=extract_page,
    keep=is_merged,
    project=project_pull_request,
    csv_header=CSV_HEADER,
    json_filename="pull_requests_merged.json",
    csv_filename="pull_requests_merged.csv",
    auth_scheme="Bearer",
    user_agent=USER_AGENT,
    search_query_setting="GITHUB_SEARCH_QUERY",
    table_columns=(
        TableColumn("Repo", 30, lambda pr: truncate(pr.repository.full_name, 30)),
        TableColumn("PR#", 7, lambda pr: str(pr.number)),
        TableColumn("Title", 42, lambda pr: truncate(pr.title, 42)),
        TableColumn("Branch", 25, lambda pr: truncate(pr.head_ref_name, 25)),
        TableColumn("Merged At", 18, _merged_cell),
        TableColumn("+/-", 10, lambda pr: f"+{pr.additions}/-{pr.deletions}"),
    ),
    table_rule_width=135,
    summary_groups=(
        ("PRs by repository", lambda pr: pr.repository.full_name),
    ),
    summary_totals=line_totals,
    token_help=(
        "To set your token:",
        "  1. Go to GitHub Settings > Developer settings > Personal access tokens",
        "  2. Create a new token with 'repo' scope",
        "  3. Set it as an environment variable or in .env:",
        "     GITHUB_TOKEN='your_token_here'",
    ),
)
