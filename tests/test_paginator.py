"""Tests for work_extractor.paginator.fetch_all() and the pipeline around it."""

from unittest.mock import MagicMock

import pytest

from work_extractor.errors import ProtocolStatusError, RemoteDomainError, SchemaError
from work_extractor.models import GraphQLErrorDetail, ResponseEnvelope
from work_extractor.paginator import fetch_all
from work_extractor.pipeline import extract
from work_extractor.sources.base import PAGE_SIZE, DateRange
from work_extractor.sources.github import GITHUB_SOURCE
from work_extractor.sources.linear import LINEAR_SOURCE

DATE_RANGE = DateRange("2025-01-01T00:00:00.000Z", "2026-02-28T23:59:59.999Z")


def _issue(n, state_type="completed"):
    return {
        "id": f"issue-{n}",
        "identifier": f"ENG-{n}",
        "title": f"Issue {n}",
        "createdAt": "2025-01-02T00:00:00Z",
        "completedAt": "2025-01-03T00:00:00Z",
        "state": {"id": "s", "name": "Done", "type": state_type},
        "team": {"id": "t", "name": "Engineering", "key": "ENG"},
        "labels": {"nodes": []},
    }


def _linear_page(numbers, has_next, cursor=None, state_type="completed"):
    return ResponseEnvelope(data={
        "viewer": {
            "assignedIssues": {
                "nodes": [_issue(n, state_type) for n in numbers],
                "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
            }
        }
    })


def _client(*envelopes):
    client = MagicMock()
    client.send.side_effect = list(envelopes)
    return client


def _base_variables():
    return LINEAR_SOURCE.build_variables(DATE_RANGE)


# ---------------------------------------------------------------------------
# Accumulation and termination
# ---------------------------------------------------------------------------

def test_three_pages_accumulate_in_order():
    client = _client(
        _linear_page(range(0, 100), True, "c1"),
        _linear_page(range(100, 200), True, "c2"),
        _linear_page(range(200, 207), False),
    )
    issues = fetch_all(client, LINEAR_SOURCE, _base_variables())

    assert len(issues) == 207
    assert [i.identifier for i in issues] == [f"ENG-{n}" for n in range(207)]
    assert client.send.call_count == 3


def test_single_page_stops_without_second_call():
    client = _client(_linear_page([1, 2], False, "ignored"))
    issues = fetch_all(client, LINEAR_SOURCE, _base_variables())
    assert len(issues) == 2
    assert client.send.call_count == 1


def test_empty_result():
    client = _client(_linear_page([], False))
    assert fetch_all(client, LINEAR_SOURCE, _base_variables()) == []


def test_cursor_advances_and_base_variables_are_kept():
    client = _client(
        _linear_page([1], True, "cursor-A"),
        _linear_page([2], True, "cursor-B"),
        _linear_page([3], False),
    )
    fetch_all(client, LINEAR_SOURCE, _base_variables())

    sent = [call.args[0] for call in client.send.call_args_list]
    assert [e.variables["after"] for e in sent] == [None, "cursor-A", "cursor-B"]
    for envelope in sent:
        assert envelope.query == LINEAR_SOURCE.query
        assert envelope.variables["first"] == PAGE_SIZE
        assert envelope.variables["startDate"] == DATE_RANGE.start
        assert envelope.variables["endDate"] == DATE_RANGE.end


def test_overlapping_pages_are_not_deduplicated():
    client = _client(
        _linear_page([1, 2], True, "c1"),
        _linear_page([2, 3], False),
    )
    issues = fetch_all(client, LINEAR_SOURCE, _base_variables())
    assert [i.identifier for i in issues] == ["ENG-1", "ENG-2", "ENG-2", "ENG-3"]


def test_github_pages_unwrap_edges():
    def page(numbers, has_next, cursor=None):
        return ResponseEnvelope(data={"search": {
            "issueCount": 3,
            "edges": [{"node": {"number": n, "state": "MERGED"}, "cursor": f"e{n}"} for n in numbers],
            "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
        }})

    client = _client(page([1, 2], True, "c1"), page([3], False))
    prs = fetch_all(client, GITHUB_SOURCE, GITHUB_SOURCE.build_variables(DATE_RANGE))
    assert [pr.number for pr in prs] == [1, 2, 3]


# ---------------------------------------------------------------------------
# Fail-fast
# ---------------------------------------------------------------------------

def test_graphql_errors_fail_immediately():
    failed = ResponseEnvelope(errors=(GraphQLErrorDetail("Authentication required"),))
    client = _client(failed, _linear_page([1], False))

    with pytest.raises(RemoteDomainError):
        fetch_all(client, LINEAR_SOURCE, _base_variables())
    assert client.send.call_count == 1


def test_failure_on_later_page_returns_nothing():
    client = MagicMock()
    client.send.side_effect = [
        _linear_page(range(100), True, "c1"),
        ProtocolStatusError(502, "Bad Gateway"),
    ]
    with pytest.raises(ProtocolStatusError):
        fetch_all(client, LINEAR_SOURCE, _base_variables())


def test_has_next_without_cursor_is_schema_error():
    client = _client(_linear_page([1], True, None))
    with pytest.raises(SchemaError):
        fetch_all(client, LINEAR_SOURCE, _base_variables())


def test_missing_connection_is_schema_error():
    client = _client(ResponseEnvelope(data={"viewer": None}))
    with pytest.raises(SchemaError):
        fetch_all(client, LINEAR_SOURCE, _base_variables())


# ---------------------------------------------------------------------------
# Pipeline: fetch -> filter -> project
# ---------------------------------------------------------------------------

def test_extract_filters_then_projects():
    client = _client(
        _linear_page([1, 2], True, "c1"),
        _linear_page([3], True, "c2", state_type="started"),
        _linear_page([4], False),
    )
    extraction = extract(client, LINEAR_SOURCE, _base_variables())

    assert extraction.fetched_count == 4
    assert extraction.dropped_count == 1
    assert [i.identifier for i in extraction.items] == ["ENG-1", "ENG-2", "ENG-4"]
    assert [r.identifier for r in extraction.records] == ["ENG-1", "ENG-2", "ENG-4"]
