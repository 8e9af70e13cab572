"""Tests for work_extractor.orchestrator.ExtractionOrchestrator."""

import json
import os
from unittest.mock import patch

from work_extractor.errors import RemoteDomainError
from work_extractor.models import GraphQLErrorDetail
from work_extractor.orchestrator import ExtractionOrchestrator, parse_source_names
from work_extractor.pipeline import Extraction
from work_extractor.sources.github import GITHUB_SOURCE
from work_extractor.sources.linear import LINEAR_SOURCE, parse_issue

_BASE_ENV = {
    "LINEAR_API_KEY": "lin_api_test",
    "GITHUB_TOKEN": "ghp_test",
    "SOURCES": "linear,github",
    "SAVE_JSON": "true",
    "SAVE_CSV": "true",
    "DEBUG": "false",
    "OUTPUT_RETENTION_DAYS": "30",
}


def _make_orchestrator(tmp_path, env_overrides=None):
    env = dict(_BASE_ENV)
    env["OUTPUT_DIR"] = str(tmp_path)
    if env_overrides:
        env.update(env_overrides)
    with patch.dict(os.environ, env, clear=True):
        return ExtractionOrchestrator(env_file="/nonexistent/.env")


def _linear_extraction():
    items = (
        parse_issue({"identifier": "ENG-1", "title": "Done thing",
                     "state": {"type": "completed", "name": "Done"},
                     "team": {"name": "Engineering"}}),
    )
    return Extraction(
        source=LINEAR_SOURCE,
        fetched_count=2,
        items=items,
        records=tuple(LINEAR_SOURCE.project(i) for i in items),
    )


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_parse_source_names():
    assert parse_source_names(" Linear, github ,linear,,") == ["linear", "github"]


def test_defaults_loaded(tmp_path):
    orch = _make_orchestrator(tmp_path)
    assert orch.source_names == ["linear", "github"]
    assert orch.start_date == "2025-01-01T00:00:00.000Z"
    assert orch.end_date == "2026-02-28T23:59:59.999Z"
    assert orch.endpoints["LINEAR_API_URL"] == "https://api.linear.app/graphql"
    assert orch.request_timeout == 30.0
    assert orch.output_manager.retention_days == 30


def test_validate_config_valid(tmp_path):
    assert _make_orchestrator(tmp_path).validate_config() is True


def test_validate_config_missing_linear_key(tmp_path, capsys):
    orch = _make_orchestrator(tmp_path, {"LINEAR_API_KEY": ""})
    assert orch.validate_config() is False
    out = capsys.readouterr().out
    assert "LINEAR_API_KEY is required" in out
    assert "Personal API Keys" in out


def test_validate_config_only_checks_selected_sources(tmp_path):
    orch = _make_orchestrator(tmp_path, {"GITHUB_TOKEN": "", "SOURCES": "linear"})
    assert orch.validate_config() is True


def test_validate_config_unknown_source(tmp_path):
    orch = _make_orchestrator(tmp_path, {"SOURCES": "jira"})
    assert orch.validate_config() is False


def test_build_client_uses_source_auth_format(tmp_path):
    orch = _make_orchestrator(tmp_path)
    linear = orch.build_client(LINEAR_SOURCE)
    github = orch.build_client(GITHUB_SOURCE)
    assert linear._headers()["Authorization"] == "lin_api_test"
    assert github._headers()["Authorization"] == "Bearer ghp_test"
    assert github.endpoint == "https://api.github.com/graphql"


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------

def test_run_exports_and_saves_results(tmp_path):
    orch = _make_orchestrator(tmp_path, {"SOURCES": "linear"})
    with patch("work_extractor.orchestrator.extract", return_value=_linear_extraction()) as mock_extract:
        results = orch.run()

    assert results["success"] is True
    outcome = results["sources"]["linear"]
    assert outcome["fetched"] == 2
    assert outcome["kept"] == 1
    assert os.path.exists(outcome["json_path"])
    assert os.path.exists(outcome["csv_path"])
    assert os.path.exists(results["results_path"])

    variables = mock_extract.call_args[0][2]
    assert variables["startDate"] == "2025-01-01T00:00:00.000Z"


def test_fetch_failure_is_reported_and_other_source_still_runs(tmp_path):
    failure = RemoteDomainError([GraphQLErrorDetail("Bad credentials")])
    orch = _make_orchestrator(tmp_path, {"SOURCES": "github,linear"})

    with patch("work_extractor.orchestrator.extract",
               side_effect=[failure, _linear_extraction()]):
        results = orch.run()

    assert results["success"] is False
    assert "Bad credentials" in results["sources"]["github"]["error"]
    assert "json_path" not in results["sources"]["github"]
    assert results["sources"]["linear"]["success"] is True


def test_json_export_failure_does_not_block_csv(tmp_path):
    orch = _make_orchestrator(tmp_path, {"SOURCES": "linear"})
    with patch("work_extractor.orchestrator.extract", return_value=_linear_extraction()), \
         patch("work_extractor.orchestrator.export_json", side_effect=OSError("disk full")):
        results = orch.run()

    outcome = results["sources"]["linear"]
    assert outcome["export_errors"] == ["json: disk full"]
    assert os.path.exists(outcome["csv_path"])


def test_no_records_writes_nothing(tmp_path):
    empty = Extraction(source=LINEAR_SOURCE, fetched_count=0, items=(), records=())
    orch = _make_orchestrator(tmp_path, {"SOURCES": "linear"})
    with patch("work_extractor.orchestrator.extract", return_value=empty):
        results = orch.run()

    assert results["success"] is True
    assert "results_path" not in results
    assert os.listdir(tmp_path) == []


def test_saved_results_are_json(tmp_path):
    orch = _make_orchestrator(tmp_path, {"SOURCES": "linear", "SAVE_CSV": "false"})
    with patch("work_extractor.orchestrator.extract", return_value=_linear_extraction()):
        results = orch.run()

    assert "csv_path" not in results["sources"]["linear"]
    with open(results["results_path"]) as f:
        saved = json.load(f)
    assert saved["sources"]["linear"]["kept"] == 1


def test_print_summary(tmp_path, capsys):
    orch = _make_orchestrator(tmp_path)
    orch.print_summary({
        "success": False,
        "sources": {
            "linear": {"success": True, "kept": 3, "fetched": 4, "export_errors": []},
            "github": {"success": False, "error": "boom", "export_errors": []},
        },
    })
    out = capsys.readouterr().out
    assert "Status: FAILED" in out
    assert "linear: 3 kept of 4 fetched" in out
    assert "github: FAILED - boom" in out


def test_search_query_override_replaces_date_window(tmp_path, capsys):
    orch = _make_orchestrator(
        tmp_path, {"SOURCES": "github", "GITHUB_SEARCH_QUERY": "is:pr author:ada is:merged"}
    )
    empty = Extraction(source=GITHUB_SOURCE, fetched_count=0, items=(), records=())
    with patch("work_extractor.orchestrator.extract", return_value=empty) as mock_extract:
        orch.run()

    assert mock_extract.call_args[0][2]["queryString"] == "is:pr author:ada is:merged"
    out = capsys.readouterr().out
    assert "start and end dates do not apply" in out
    assert "Search query: is:pr author:ada is:merged" in out


def test_search_query_ignored_for_sources_without_one(tmp_path):
    orch = _make_orchestrator(tmp_path, {"GITHUB_SEARCH_QUERY": "is:pr"})
    assert orch.search_query_for(LINEAR_SOURCE) is None
    assert orch.search_query_for(GITHUB_SOURCE) == "is:pr"
