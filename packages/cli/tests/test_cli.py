"""Tests for the CLI entry point."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

from click.testing import CliRunner

from ufglens_cli.auth import resolve_github_token
from ufglens_cli.cli import main
from ufglens_core.descriptor import Descriptor
from ufglens_core.outcome import OutcomeKind, ReviewOutcome
from ufglens_core.reviewer import AnalysisSummary

UPSTREAM = "up-for-grabs/up-for-grabs.net"

VALID_YAML = """\
name: Example
desc: An example project
site: https://example.com
tags:
  - python
upforgrabs:
  name: help wanted
  link: https://github.com/owner/example/labels/help%20wanted
"""


def _make_config(github_token="tok"):
    return {
        "github_token": github_token,
        "upstream_repo": UPSTREAM,
        "projects_dir": "_data/projects/",
        "bot_login": "shiftbot",
        "bot_type": "User",
        "maintainer": "shiftkey",
        "comment_limit": 50,
        "check_liveness": True,
        "tag_aliases": {},
    }


def _patch_common(mocker, config=None, token="tok"):
    """Patch load_config and resolve_github_token for most tests."""
    cfg = config or _make_config()
    mocker.patch("ufglens_core.config.load_config", return_value=cfg)
    mocker.patch("ufglens_cli.auth.resolve_github_token", return_value=token)
    return cfg


def _payload(action="opened", full_name=UPSTREAM):
    return json.dumps(
        {
            "action": action,
            "number": 5,
            "pull_request": {
                "number": 5,
                "node_id": "PR_x",
                "base": {
                    "ref": "gh-pages",
                    "sha": "a" * 40,
                    "repo": {
                        "full_name": full_name,
                        "clone_url": f"https://github.com/{full_name}.git",
                        "default_branch": "gh-pages",
                    },
                },
                "head": {"sha": "b" * 40, "repo": {"clone_url": "https://github.com/c/up-for-grabs.net.git"}},
            },
            "repository": {"full_name": full_name},
        }
    )


def _summary(posted=True):
    outcome = ReviewOutcome(Descriptor("_data/projects/a.yml", Path("a.yml")), OutcomeKind.VALID)
    return AnalysisSummary(
        repo=UPSTREAM,
        pr_number=5,
        head_sha="b" * 40,
        files=["_data/projects/a.yml"],
        outcomes=[outcome],
        body="<!-- marker -->\n\nreport body",
        comment_url="https://github.com/x#c1" if posted else None,
        posted=posted,
    )


class TestAnalyze:
    def test_ineligible_event_does_not_run(self, mocker):
        _patch_common(mocker)
        mock_run = mocker.patch("ufglens_cli.commands.analyze.run_analysis")

        result = CliRunner().invoke(main, ["analyze", "-"], input=_payload(action="edited"))

        assert result.exit_code == 0
        mock_run.assert_not_called()
        assert "Ignoring" in result.output

    def test_other_repository_does_not_run(self, mocker):
        _patch_common(mocker)
        mock_run = mocker.patch("ufglens_cli.commands.analyze.run_analysis")

        CliRunner().invoke(main, ["analyze", "-"], input=_payload(full_name="someone/else"))

        mock_run.assert_not_called()

    def test_invalid_payload(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "-"], input="not json")
        assert result.exit_code != 0
        assert "Could not read pull request event" in result.output

    def test_missing_token(self, mocker):
        _patch_common(mocker, config=_make_config(github_token=None), token=None)
        mock_run = mocker.patch("ufglens_cli.commands.analyze.run_analysis")

        result = CliRunner().invoke(main, ["analyze", "-"], input=_payload())

        assert result.exit_code != 0
        assert "GITHUB_TOKEN" in result.output
        mock_run.assert_not_called()

    def test_runs_pipeline_and_reports_url(self, mocker):
        _patch_common(mocker)
        mock_run = mocker.patch("ufglens_cli.commands.analyze.run_analysis", return_value=_summary())

        result = CliRunner().invoke(main, ["analyze", "-"], input=_payload())

        assert result.exit_code == 0
        event = mock_run.call_args.args[0]
        assert event.number == 5
        assert mock_run.call_args.kwargs["shadow"] is False
        assert "https://github.com/x#c1" in result.output
        assert "0 of 1 file(s) have problems." in result.output

    def test_shadow_prints_report_without_token(self, mocker):
        _patch_common(mocker, config=_make_config(github_token=None), token=None)
        mock_run = mocker.patch("ufglens_cli.commands.analyze.run_analysis", return_value=_summary(posted=False))

        result = CliRunner().invoke(main, ["analyze", "--shadow", "-"], input=_payload())

        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["shadow"] is True
        assert "report body" in result.output
        assert "Shadow run complete. 0 of 1 file(s) have problems." in result.output

    def test_no_report(self, mocker):
        _patch_common(mocker)
        mocker.patch("ufglens_cli.commands.analyze.run_analysis", return_value=None)

        result = CliRunner().invoke(main, ["analyze", "-"], input=_payload())

        assert result.exit_code == 0
        assert "No report" in result.output

    def test_reads_event_file(self, mocker, tmp_path):
        _patch_common(mocker)
        mock_run = mocker.patch("ufglens_cli.commands.analyze.run_analysis", return_value=None)
        event_file = tmp_path / "event.json"
        event_file.write_text(_payload())

        CliRunner().invoke(main, ["analyze", str(event_file)])

        mock_run.assert_called_once()


class TestCheck:
    def test_valid_file_offline(self, mocker, tmp_path):
        _patch_common(mocker)
        (tmp_path / "p.yml").write_text(VALID_YAML)

        result = CliRunner().invoke(main, ["check", "--root", str(tmp_path), "--offline", "p.yml"])

        assert result.exit_code == 0
        assert "look good" in result.output

    def test_invalid_file_exits_nonzero(self, mocker, tmp_path):
        _patch_common(mocker)
        (tmp_path / "p.yml").write_text("name: Example\n")

        result = CliRunner().invoke(main, ["check", "--root", str(tmp_path), "--offline", "p.yml"])

        assert result.exit_code == 1
        assert "1 of 1 file(s) have problems" in result.output

    def test_markdown_output(self, mocker, tmp_path):
        _patch_common(mocker)
        (tmp_path / "p.yml").write_text(VALID_YAML)

        result = CliRunner().invoke(main, ["check", "--root", str(tmp_path), "--offline", "--markdown", "p.yml"])

        assert "#### `p.yml` :white_check_mark:" in result.output

    def test_missing_paths(self, mocker, tmp_path):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["check", "--root", str(tmp_path), "nope.yml"])
        assert result.exit_code != 0
        assert "None of the given paths exist" in result.output

    def test_online_check_uses_github(self, mocker, tmp_path):
        _patch_common(mocker)
        (tmp_path / "p.yml").write_text(VALID_YAML)
        repo = MagicMock(full_name="owner/example", archived=True, html_url="https://github.com/owner/example")
        gh = MagicMock()
        gh.get_repo.return_value = repo
        mocker.patch("ufglens_cli.commands.check.get_client", return_value=gh)

        result = CliRunner().invoke(main, ["check", "--root", str(tmp_path), "--markdown", "p.yml"])

        assert result.exit_code == 1
        assert "archived" in result.output
        gh.get_repo.assert_called_with("owner/example")


class TestResolveGithubToken:
    def test_env_var_wins(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        assert resolve_github_token() == "env-token"

    def test_shiftbot_env_var(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("SHIFTBOT_GITHUB_TOKEN", "bot-token")
        assert resolve_github_token() == "bot-token"

    def test_gh_cli_fallback(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("SHIFTBOT_GITHUB_TOKEN", raising=False)
        mocker.patch(
            "ufglens_cli.auth.subprocess.run",
            return_value=subprocess.CompletedProcess(["gh"], 0, stdout="gh-token\n", stderr=""),
        )
        assert resolve_github_token() == "gh-token"

    def test_gh_not_installed(self, monkeypatch, mocker):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("SHIFTBOT_GITHUB_TOKEN", raising=False)
        mocker.patch("ufglens_cli.auth.subprocess.run", side_effect=FileNotFoundError)
        assert resolve_github_token() is None
