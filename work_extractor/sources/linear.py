"""
Linear source — Completed issues assigned to the authenticated user.

Response shape (one page):
    {
      "viewer": {
        "assignedIssues": {
          "nodes": [ { "identifier": "ENG-42", "state": {...}, "team": {...},
                       "project": {...} | null, "cycle": {...} | null,
                       "labels": { "nodes": [ { "name": "bug" } ] }, ... } ],
          "pageInfo": { "hasNextPage": true, "endCursor": "..." }
        }
      }
    }

Post-fetch filter:
    The server filters on completedAt only. An issue that was completed and
    then reopened keeps its completedAt and still matches, so issues are kept
    only when state.type is "completed".

Export conventions:
    CSV renders absent project, cycle, estimate, completion time and assignee
    as "N/A" and joins labels with ", ". JSON omits those keys instead.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from ..formatting import (
    LINEAR_TIMESTAMP_FORMAT,
    clip,
    format_optional_timestamp,
    format_timestamp,
    format_whole_number,
    join_labels,
    or_placeholder,
    truncate,
)
from ..graphql_queries import LINEAR_COMPLETED_ISSUES_QUERY
from ..models import Page
from .base import (
    PAGE_SIZE,
    DateRange,
    PaginatedSource,
    TableColumn,
    int_field,
    label_names,
    object_field,
    optional_int,
    optional_number,
    optional_object,
    optional_text,
    read_page_marker,
    require_list,
    require_object,
    text_field,
)

COMPLETED_STATE_TYPE = "completed"
LABEL_DELIMITER = ", "

PRIORITY_LABELS = {
    0: "No priority",
    1: "Urgent",
    2: "High",
    3: "Medium",
    4: "Low",
}
UNKNOWN_PRIORITY = "Unknown"

CSV_HEADER = (
    "Identifier", "Title", "URL", "Team", "State", "Priority",
    "Estimate", "Labels", "Project", "Cycle", "Created At",
    "Completed At", "Assignee",
)


@dataclass(frozen=True)
class IssueState:
    id: str
    name: str
    type: str


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    key: str


@dataclass(frozen=True)
class Project:
    id: str
    name: str


@dataclass(frozen=True)
class Cycle:
    number: int
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or f"Cycle {self.number}"


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class Issue:
    """A Linear issue as returned by the API (raw, nested)."""

    id: str
    identifier: str
    title: str
    description: str
    url: str
    priority: Optional[int]
    estimate: Optional[float]
    created_at: str
    updated_at: str
    completed_at: Optional[str]
    state: IssueState
    team: Team
    project: Optional[Project]
    cycle: Optional[Cycle]
    labels: Tuple[str, ...]
    assignee: Optional[User]


@dataclass(frozen=True)
class IssueExportRecord:
    """A flat, presentation-ready issue. None marks an absent optional value."""

    identifier: str
    title: str
    description: str
    url: str
    team: str
    state: str
    priority: str
    estimate: Optional[str]
    labels: Tuple[str, ...]
    project: Optional[str]
    cycle: Optional[str]
    created_at: str
    completed_at: Optional[str]
    assignee: Optional[str]

    def to_csv_row(self) -> Tuple[str, ...]:
        return (
            self.identifier,
            self.title,
            self.url,
            self.team,
            self.state,
            self.priority,
            or_placeholder(self.estimate),
            join_labels(self.labels, LABEL_DELIMITER),
            or_placeholder(self.project),
            or_placeholder(self.cycle),
            self.created_at,
            or_placeholder(self.completed_at),
            or_placeholder(self.assignee),
        )

    def to_json_dict(self) -> Dict[str, Any]:
        out = {
            "identifier": self.identifier,
            "title": self.title,
            "description": self.description,
            "url": self.url,
            "team": self.team,
            "priority": self.priority,
        }
        if self.estimate is not None:
            out["estimate"] = self.estimate
        if self.labels:
            out["labels"] = list(self.labels)
        if self.project is not None:
            out["project"] = self.project
        if self.cycle is not None:
            out["cycle"] = self.cycle
        out["createdAt"] = self.created_at
        if self.completed_at is not None:
            out["completedAt"] = self.completed_at
        return out


def format_priority(priority: Any) -> str:
    """Map a Linear priority code to its label ("Unknown" outside 0-4)."""
    if isinstance(priority, bool) or not isinstance(priority, int):
        return UNKNOWN_PRIORITY
    return PRIORITY_LABELS.get(priority, UNKNOWN_PRIORITY)


def build_variables(date_range: DateRange, search_query: Optional[str] = None) -> Dict[str, Any]:
    return {
        "first": PAGE_SIZE,
        "startDate": date_range.start,
        "endDate": date_range.end,
    }


def parse_issue(node: Any) -> Issue:
    node = require_object(node, "issue node")
    state = object_field(node, "state")
    team = object_field(node, "team")
    project = optional_object(node, "project")
    cycle = optional_object(node, "cycle")
    assignee = optional_object(node, "assignee")

    return Issue(
        id=text_field(node, "id"),
        identifier=text_field(node, "identifier"),
        title=text_field(node, "title"),
        description=text_field(node, "description"),
        url=text_field(node, "url"),
        priority=optional_int(node, "priority"),
        estimate=optional_number(node, "estimate"),
        created_at=text_field(node, "createdAt"),
        updated_at=text_field(node, "updatedAt"),
        completed_at=optional_text(node, "completedAt"),
        state=IssueState(
            id=text_field(state, "id"),
            name=text_field(state, "name"),
            type=text_field(state, "type"),
        ),
        team=Team(
            id=text_field(team, "id"),
            name=text_field(team, "name"),
            key=text_field(team, "key"),
        ),
        project=Project(id=text_field(project, "id"), name=text_field(project, "name"))
        if project is not None else None,
        cycle=Cycle(number=int_field(cycle, "number"), name=optional_text(cycle, "name"))
        if cycle is not None else None,
        labels=label_names(node),
        assignee=User(
            id=text_field(assignee, "id"),
            name=text_field(assignee, "name"),
            email=text_field(assignee, "email"),
        ) if assignee is not None else None,
    )


def extract_page(data: Mapping[str, Any]) -> Page:
    viewer = require_object(data.get("viewer"), "viewer")
    connection = require_object(viewer.get("assignedIssues"), "viewer.assignedIssues")
    nodes = require_list(connection.get("nodes"), "assignedIssues.nodes")
    return Page(
        items=tuple(parse_issue(n) for n in nodes),
        marker=read_page_marker(connection),
    )


def is_completed(issue: Issue) -> bool:
    return issue.state.type == COMPLETED_STATE_TYPE


def project_issue(issue: Issue) -> IssueExportRecord:
    return IssueExportRecord(
        identifier=issue.identifier,
        title=issue.title,
        description=issue.description,
        url=issue.url,
        team=issue.team.name,
        state=issue.state.name,
        priority=format_priority(issue.priority),
        estimate=format_whole_number(issue.estimate) if issue.estimate is not None else None,
        labels=issue.labels,
        project=issue.project.name if issue.project is not None else None,
        cycle=issue.cycle.display_name if issue.cycle is not None else None,
        created_at=format_timestamp(issue.created_at, LINEAR_TIMESTAMP_FORMAT),
        completed_at=format_optional_timestamp(issue.completed_at, LINEAR_TIMESTAMP_FORMAT),
        assignee=issue.assignee.name if issue.assignee is not None else None,
    )


def _completed_cell(issue: Issue) -> str:
    return clip(or_placeholder(format_optional_timestamp(issue.completed_at)), 20)


LINEAR_SOURCE = PaginatedSource(
    name="linear",
    title="Linear Completed Tickets Extractor",
    item_noun="issues",
    summary_label="completed issues",
    endpoint_setting="LINEAR_API_URL",
    token_setting="LINEAR_API_KEY",
    query=LINEAR_COMPLETED_ISSUES_QUERY,
    build_variables=build_variables,
    extract_page=extract_page,
    keep=is_completed,
    project=project_issue,
    csv_header=CSV_HEADER,
    json_filename="linear_completed_tickets.json",
    csv_filename="linear_completed_tickets.csv",
    auth_scheme=None,
    table_columns=(
        TableColumn("ID", 15, lambda i: clip(i.identifier, 15)),
        TableColumn("Title", 50, lambda i: truncate(i.title, 50)),
        TableColumn("Team", 20, lambda i: clip(i.team.name, 20)),
        TableColumn("Completed", 20, _completed_cell),
    ),
    table_rule_width=120,
    summary_groups=(
        ("Issues by team", lambda i: i.team.name),
        ("Issues by priority", lambda i: format_priority(i.priority)),
    ),
    token_help=(
        "To set your API key:",
        "  1. Go to Linear Settings > API > Personal API Keys",
        "  2. Create a new API key",
        "  3. Set it as an environment variable or in .env:",
        "     LINEAR_API_KEY='your_api_key_here'",
    ),
)
