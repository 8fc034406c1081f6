"""
Bootstrap scripts shipped with shipyard.

``fleet_bootstrap`` builds the fixed first-boot sequence for pipeline fleet
instances. Each tool is installed only if it is not already present, so
re-running the script on a warm instance changes nothing.
"""

from pathlib import Path

from shipyard.core.bootstrap import SHEBANG, BootstrapScript

DEFAULT_USER_DATA = Path(__file__).parent / "user-data.sh"
"""Script loaded by the instance stack unless configured otherwise"""


def _codedeploy_agent_steps(region: str) -> list[str]:
    bucket = f"https://aws-codedeploy-{region}.s3.{region}.amazonaws.com"
    return [
        'echo "Setting up CodeDeploy agent..."',
        "cd $HOME",
        "if [ ! -f ./install ]; then",
        f"    wget {bucket}/latest/install",
        "    chmod +x ./install",
        "fi",
        "sudo ./install auto",
        "if ! systemctl is-active --quiet codedeploy-agent; then",
        "    sudo systemctl start codedeploy-agent",
        "fi",
    ]


def fleet_bootstrap(region: str = "us-east-1", install_agent: bool = True) -> BootstrapScript:
    """
    First-boot script for fleet instances.

    Installs Node.js, Yarn, PM2 and build tools, optionally the CodeDeploy
    agent, and prepares the application directory.
    """
    commands = [
        SHEBANG,
        'echo "Updating system packages..."',
        "sudo yum update -y",
        "sudo yum install -y ruby wget",

        'echo "Setting up NodeJS Environment"',
        "if ! command -v node &> /dev/null; then",
        "    curl --silent --location https://rpm.nodesource.com/setup_20.x | sudo bash -",
        "    sudo yum install -y nodejs",
        "fi",

        'echo "Installing development tools..."',
        'sudo yum group install -y "Development Tools"',
        "sudo yum install -y gcc-c++ make",

        'echo "Installing Yarn..."',
        "if ! command -v yarn &> /dev/null; then",
        "    curl --silent --location https://dl.yarnpkg.com/rpm/yarn.repo | sudo tee /etc/yum.repos.d/yarn.repo",
        "    sudo yum install -y yarn",
        "fi",

        'echo "Setting up PM2..."',
        "if ! command -v pm2 &> /dev/null; then",
        "    sudo npm install -g pm2@latest",
        "    sudo pm2 startup",
        "fi",
    ]

    if install_agent:
        commands.extend(_codedeploy_agent_steps(region))

    commands.extend([
        'echo "Setting up application directory..."',
        "sudo mkdir -p $HOME/app",
        "sudo chown ec2-user:ec2-user $HOME/app",
        "sudo chmod 755 $HOME/app",

        'echo "Verifying installations..."',
        "node --version",
        "npm --version",
        "yarn --version",
        "pm2 --version",
    ])

    if install_agent:
        commands.append("sudo systemctl status codedeploy-agent")

    commands.append('echo "UserData script completed successfully"')
    return BootstrapScript.inline(*commands)
