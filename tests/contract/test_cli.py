"""Contract tests for the repo-coord CLI commands."""

import json

import pytest
import yaml
from click.testing import CliRunner

from repo_coord import __version__
from repo_coord.cli.__main__ import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.mark.contract
def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.contract
@pytest.mark.parametrize("command", ["analyze", "impact", "order", "repos", "init-config", "serve"])
def test_command_help(runner, command):
    result = runner.invoke(cli, [command, "--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output


@pytest.mark.contract
class TestAnalyzeCommand:

    def test_json_output(self, runner):
        result = runner.invoke(cli, [
            "analyze", "-c", "protocol", "-t", "loqa-proto",
            "-f", "proto/audio.proto", "-d", "Add sample rate", "--format", "json",
        ])
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["coordination_plan"]["execution_order"][0] == "loqa-proto"
        assert data["coordination_plan"]["risk_assessment"]["level"] == "medium"
        assert data["intelligence"]["critical_path"][-1] == "loqa-commander"
        assert data["summary"].startswith("PROTOCOL change in loqa-proto")

    def test_table_output(self, runner):
        result = runner.invoke(cli, ["analyze", "--category", "breaking", "--target", "loqa-hub"])
        assert result.exit_code == 0, result.output
        assert "Coordination Plan" in result.output
        assert "Risk Assessment" in result.output
        assert "CRITICAL" in result.output
        assert "Timeline Estimate" in result.output

    def test_output_format_from_environment(self, runner, monkeypatch):
        monkeypatch.setenv("REPO_COORD_OUTPUT_FORMAT", "json")
        result = runner.invoke(cli, ["analyze", "-c", "bugfix", "-t", "www-loqalabs-com"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["coordination_plan"]["execution_order"] == ["www-loqalabs-com"]

    def test_unknown_category(self, runner):
        result = runner.invoke(cli, ["analyze", "-c", "refactor", "-t", "loqa-hub"])
        assert result.exit_code == 1
        assert "configuration_error" in result.output
        assert "refactor" in result.output

    def test_unknown_repository(self, runner):
        result = runner.invoke(cli, ["analyze", "-c", "feature", "-t", "loqa-ghost"])
        assert result.exit_code == 1
        assert "loqa-ghost" in result.output

    def test_cyclic_ecosystem(self, runner, cyclic_ecosystem_file):
        result = runner.invoke(cli, [
            "analyze", "-c", "feature", "-t", "A", "--ecosystem", str(cyclic_ecosystem_file),
        ])
        assert result.exit_code == 1
        assert "cyclic_dependency" in result.output

    def test_invalid_ecosystem_file(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"repositories": [{"name": "a"}]}))
        result = runner.invoke(cli, ["analyze", "-c", "feature", "-t", "a", "--ecosystem", str(path)])
        assert result.exit_code == 1
        assert "configuration_error" in result.output


@pytest.mark.contract
class TestImpactCommand:

    def test_json_output(self, runner):
        result = runner.invoke(cli, [
            "impact", "-c", "protocol", "-t", "loqa-proto",
            "-f", "proto/audio.proto", "-d", "Add sample rate", "--format", "json",
        ])
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["impact_type"] == "breaking"
        assert data["affected_repositories"] == ["loqa-skills", "loqa-hub", "loqa-relay"]
        assert data["required_actions"][0]["action_type"] == "regenerate-bindings"
        assert data["estimated_effort"]["label"] == "0.5-1 days"
        assert data["summary"].startswith("BREAKING change in loqa-proto")

    def test_table_output(self, runner):
        result = runner.invoke(cli, [
            "impact", "-c", "feature", "-t", "loqa-hub",
            "-f", "internal/api/sessions.go", "-d", "feat: add sessions endpoint",
        ])
        assert result.exit_code == 0, result.output
        assert "Change Impact" in result.output
        assert "Required Actions" in result.output

    def test_no_follow_up(self, runner):
        result = runner.invoke(cli, ["impact", "-c", "infrastructure", "-t", "loqa-hub", "-d", "tidy logging"])
        assert result.exit_code == 0, result.output
        assert "No follow-up required" in result.output

    def test_unknown_repository(self, runner):
        result = runner.invoke(cli, ["impact", "-c", "feature", "-t", "loqa-ghost"])
        assert result.exit_code == 1
        assert "loqa-ghost" in result.output


@pytest.mark.contract
class TestOrderCommand:

    def test_json_output(self, runner):
        result = runner.invoke(cli, ["order", "-c", "protocol", "--format", "json"])
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["category"] == "protocol"
        assert data["execution_order"][0] == "loqa-proto"
        assert data["execution_order"][-1] == "loqa"
        assert data["details"][0]["order"] == 1

    def test_selected_repositories(self, runner):
        result = runner.invoke(cli, [
            "order", "-r", "loqa-commander", "-r", "loqa-hub", "--format", "json",
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["execution_order"] == ["loqa-hub", "loqa-commander"]

    def test_table_output(self, runner):
        result = runner.invoke(cli, ["order"])
        assert result.exit_code == 0, result.output
        assert "Dependency Order" in result.output
        assert "Foundation repositories" in result.output


@pytest.mark.contract
class TestReposCommand:

    def test_json_output(self, runner):
        result = runner.invoke(cli, ["repos", "--format", "json"])
        assert result.exit_code == 0, result.output

        data = json.loads(result.output)
        assert data["ecosystem"] == "loqa"
        assert len(data["repositories"]) == 7
        assert "breaking" in data["categories"]

    def test_table_output(self, runner):
        result = runner.invoke(cli, ["repos"])
        assert result.exit_code == 0, result.output
        assert "Repositories" in result.output


@pytest.mark.contract
class TestInitConfigCommand:

    def test_config_template(self, runner, tmp_path):
        path = tmp_path / "repo-coord.yaml"
        result = runner.invoke(cli, ["init-config", str(path)])
        assert result.exit_code == 0, result.output
        assert "planner" in yaml.safe_load(path.read_text())

    def test_refuses_to_overwrite(self, runner, tmp_path):
        path = tmp_path / "repo-coord.yaml"
        path.write_text("keep: me\n")
        result = runner.invoke(cli, ["init-config", str(path)])
        assert result.exit_code == 1
        assert path.read_text() == "keep: me\n"

        result = runner.invoke(cli, ["init-config", str(path), "--force"])
        assert result.exit_code == 0

    def test_ecosystem_file_is_usable(self, runner, tmp_path):
        path = tmp_path / "ecosystem.yaml"
        result = runner.invoke(cli, ["init-config", str(path), "--ecosystem"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, [
            "analyze", "-c", "protocol", "-t", "loqa-proto",
            "--ecosystem", str(path), "--format", "json",
        ])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)["coordination_plan"]["affected_repositories"]) == 6

    def test_config_file_selects_ecosystem(self, runner, tmp_path, cyclic_ecosystem_file):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"planner": {"ecosystem_file": str(cyclic_ecosystem_file)}}))
        result = runner.invoke(cli, ["repos", "--config", str(config_path), "--format", "json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["ecosystem"] == "cyclic"
