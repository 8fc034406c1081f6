"""
Tests for the Pulumi CLI wrapper.
"""

import subprocess

import pytest

from shipyard.cli.deploy import DeploymentCLI, DeploymentError


@pytest.fixture
def project_dir(tmp_path):
    (tmp_path / "Pulumi.yaml").write_text("name: shipyard\nruntime: python\n")
    return tmp_path


@pytest.fixture
def recorded(monkeypatch):
    """Replace subprocess.run and record every command."""
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs))
        return subprocess.CompletedProcess(cmd, 0, stdout='{"instanceId": "i-123"}', stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


class TestDeploymentCLI:
    """Tests for DeploymentCLI."""

    def test_up_with_yes(self, project_dir, recorded):
        DeploymentCLI(project_dir).up("dev", yes=True)

        cmd, kwargs = recorded[0]
        assert cmd == ["pulumi", "up", "--stack", "dev", "--yes"]
        assert kwargs["cwd"] == project_dir
        assert kwargs["check"] is True

    def test_destroy_without_stack(self, project_dir, recorded):
        DeploymentCLI(project_dir).destroy()

        assert recorded[0][0] == ["pulumi", "destroy"]

    def test_custom_binary(self, project_dir, recorded):
        DeploymentCLI(project_dir, pulumi_bin="/opt/pulumi/bin/pulumi").preview()

        assert recorded[0][0] == ["/opt/pulumi/bin/pulumi", "preview"]

    def test_stack_output(self, project_dir, recorded):
        outputs = DeploymentCLI(project_dir).stack_output("dev")

        assert outputs == {"instanceId": "i-123"}
        assert recorded[0][0] == ["pulumi", "stack", "output", "--json", "--stack", "dev"]

    def test_stack_output_not_json(self, project_dir, monkeypatch):
        monkeypatch.setattr(
            subprocess, "run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, stdout="oops", stderr=""),
        )

        with pytest.raises(DeploymentError, match="parse stack outputs"):
            DeploymentCLI(project_dir).stack_output()

    def test_missing_project(self, tmp_path, recorded):
        with pytest.raises(DeploymentError, match="Pulumi project not found"):
            DeploymentCLI(tmp_path).up()

        assert recorded == []

    def test_command_failure(self, project_dir, monkeypatch):
        """Test that a failed command surfaces its stderr."""
        def failing_run(cmd, **kwargs):
            raise subprocess.CalledProcessError(255, cmd, stderr="error: no stack named 'dev'")

        monkeypatch.setattr(subprocess, "run", failing_run)

        with pytest.raises(DeploymentError, match="no stack named 'dev'"):
            DeploymentCLI(project_dir).preview("dev")

    def test_missing_executable(self, project_dir, monkeypatch):
        def missing(cmd, **kwargs):
            raise FileNotFoundError(cmd[0])

        monkeypatch.setattr(subprocess, "run", missing)

        with pytest.raises(DeploymentError, match="executable not found"):
            DeploymentCLI(project_dir).preview()
