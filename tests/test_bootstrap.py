"""
Tests for bootstrap scripts.
"""

import pytest

from shipyard.core import BootstrapScript
from shipyard.errors import ConfigurationMissing
from shipyard.scripts import DEFAULT_USER_DATA, fleet_bootstrap


class TestBootstrapScript:
    """Tests for BootstrapScript."""

    def test_inline_render_adds_shebang(self):
        script = BootstrapScript.inline("sudo yum update -y", "echo done")

        assert script.render() == "#!/bin/bash\nsudo yum update -y\necho done\n"

    def test_render_keeps_single_shebang(self):
        script = BootstrapScript.inline("#!/bin/bash", "echo hi")

        assert script.render().count("#!/bin/bash") == 1

    def test_from_file(self, user_data):
        """Test that a script is read verbatim from disk."""
        script = BootstrapScript.from_file(user_data)

        assert script.source == str(user_data)
        assert script.render() == user_data.read_text()

    def test_from_missing_file(self, tmp_path):
        """Test that a missing script fails with ConfigurationMissing."""
        with pytest.raises(ConfigurationMissing):
            BootstrapScript.from_file(tmp_path / "nope.sh")

    def test_missing_file_is_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BootstrapScript.from_file(tmp_path / "nope.sh")

    def test_with_commands(self):
        script = BootstrapScript.inline("echo one").with_commands("echo two")

        assert script.commands == ("echo one", "echo two")


class TestFleetBootstrap:
    """Tests for the fleet first-boot script."""

    def test_installs_codedeploy_agent_for_region(self):
        rendered = fleet_bootstrap(region="eu-west-1").render()

        assert "https://aws-codedeploy-eu-west-1.s3.eu-west-1.amazonaws.com/latest/install" in rendered
        assert "sudo ./install auto" in rendered
        assert "sudo systemctl status codedeploy-agent" in rendered

    def test_without_agent(self):
        rendered = fleet_bootstrap(install_agent=False).render()

        assert "codedeploy" not in rendered

    def test_installs_are_guarded(self):
        """Test that each tool is only installed when missing."""
        rendered = fleet_bootstrap().render()

        for tool in ("node", "yarn", "pm2"):
            assert f"if ! command -v {tool} &> /dev/null; then" in rendered

    def test_order(self):
        rendered = fleet_bootstrap().render()

        assert rendered.startswith("#!/bin/bash\n")
        assert rendered.index("yum update") < rendered.index("setup_20.x")
        assert rendered.index("setup_20.x") < rendered.index("pm2@latest")
        assert rendered.rstrip().endswith('echo "UserData script completed successfully"')

    def test_default_user_data_ships_with_package(self):
        assert DEFAULT_USER_DATA.is_file()
        assert BootstrapScript.from_file(DEFAULT_USER_DATA).render().startswith("#!/bin/bash")
