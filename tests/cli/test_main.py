"""Tests for the vseek CLI."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from vaultseek.cli.main import cli

runner = CliRunner()


class TestGroup:
    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "search" in result.output
        assert "explain" in result.output


class TestSearchCommand:
    """vseek search."""

    def test_json_ranks_alias_note_first(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "plan", "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["query"] == "plan"
        assert payload["create"] is None
        top = payload["results"][0]
        assert top["path"] == "Project Plan.md"
        assert top["intent"] == "file-alias"
        assert top["action"] == "open_file"
        assert top["display"] == {"kind": "alias", "text": "plan"}
        assert [r["rank"] for r in payload["results"]] == list(
            range(1, len(payload["results"]) + 1)
        )

    def test_table_output(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "guide"])

        assert result.exit_code == 0, result.output
        assert "Guide.md" in result.stdout
        assert "exact-file" in result.stdout

    def test_limit(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "plan", "--limit", "1", "--json"])

        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)["results"]) == 1

    def test_filter_by_extension(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "plan", "--filter", "pdf", "--json"])

        assert result.exit_code == 0, result.output
        paths = [r["path"] for r in json.loads(result.stdout)["results"]]
        assert paths == ["plan-diagram.pdf"]

    def test_unknown_filter_fails(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "plan", "--filter", "spreadsheet"])

        assert result.exit_code == 1
        assert "CATALOG_INVALID_FILTER" in result.output

    def test_unresolved_link_target_is_offered(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "someday", "--json"])

        assert result.exit_code == 0, result.output
        top = json.loads(result.stdout)["results"][0]
        assert top["path"] == "Someday.md"
        assert top["action"] == "create_file"

    def test_no_match_offers_creation(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "zzzz"])

        assert result.exit_code == 0, result.output
        assert "No matches for 'zzzz'." in result.stdout
        assert "Create: zzzz.md" in result.stdout

    def test_no_match_json(self, vault: Path) -> None:
        result = runner.invoke(cli, ["search", str(vault), "zzzz", "--json"])

        payload = json.loads(result.stdout)
        assert payload["results"] == []
        assert payload["create"] == "zzzz.md"

    def test_missing_vault(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["search", str(tmp_path / "nope"), "plan"])
        assert result.exit_code == 2

    def test_vault_config_applied(self, vault: Path) -> None:
        config_dir = vault / ".vaultseek"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("search:\n  markdown_only: true\n")

        result = runner.invoke(cli, ["search", str(vault), "plan", "--json"])

        assert result.exit_code == 0, result.output
        paths = [r["path"] for r in json.loads(result.stdout)["results"]]
        assert "plan-diagram.pdf" not in paths

    def test_broken_config_fails_cleanly(self, vault: Path) -> None:
        config_dir = vault / ".vaultseek"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("search: [unclosed\n")

        result = runner.invoke(cli, ["search", str(vault), "plan"])

        assert result.exit_code == 1
        assert "CONFIG_PARSE_ERROR" in result.output

    def test_missing_explicit_config_fails(self, vault: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["search", str(vault), "plan", "--config", str(tmp_path / "none.yaml")]
        )

        assert result.exit_code == 1
        assert "CONFIG_FILE_NOT_FOUND" in result.output


class TestExplainCommand:
    """vseek explain."""

    def test_heading_jump(self, vault: Path) -> None:
        result = runner.invoke(cli, ["explain", str(vault), "installation", "--json"])

        assert result.exit_code == 0, result.output
        info = json.loads(result.stdout)
        assert info["entry"] == "Guide.md"
        assert info["intent"] == "heading-content"
        assert info["jump_to_heading"] is True
        assert info["action"] == "jump_to_heading"
        assert info["link"] == "Guide.md#Installation steps"
        assert set(info["factors"]) == {"field_priority", "match_ratio", "position", "match_count"}

    def test_text_output(self, vault: Path) -> None:
        result = runner.invoke(cli, ["explain", str(vault), "plan"])

        assert result.exit_code == 0, result.output
        assert "Entry: Project Plan.md" in result.stdout
        assert "Intent: file-alias (confidence 1.000)" in result.stdout
        assert "Jump to heading: no" in result.stdout

    def test_creation_when_nothing_matches(self, vault: Path) -> None:
        result = runner.invoke(cli, ["explain", str(vault), "brand new"])

        assert result.exit_code == 0, result.output
        assert "Action: create_file brand new.md" in result.stdout

    def test_blank_query_fails(self, vault: Path) -> None:
        result = runner.invoke(cli, ["explain", str(vault), "   "])

        assert result.exit_code == 1
        assert "Nothing to explain" in result.output
