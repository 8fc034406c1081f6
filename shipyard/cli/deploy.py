"""
Deployment helpers wrapping the Pulumi CLI.

The Pulumi program itself lives at the project root (``__main__.py``);
these helpers only drive ``pulumi preview/up/destroy`` against it.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class DeploymentError(Exception):
    """Raised when a Pulumi command fails."""
    pass


class DeploymentCLI:
    """
    CLI interface for stack deployment.

    Provides commands for:
    - Previewing changes
    - Deploying and destroying stacks
    - Reading stack outputs
    """

    def __init__(self, project_dir: str | Path = ".", pulumi_bin: str = "pulumi"):
        """
        Initialize deployment CLI.

        Args:
            project_dir: Directory containing Pulumi.yaml
            pulumi_bin: Pulumi executable
        """
        self.project_dir = Path(project_dir)
        self.pulumi_bin = pulumi_bin

    def preview(self, stack: str | None = None) -> subprocess.CompletedProcess:
        """Run 'pulumi preview' to preview infrastructure changes."""
        return self._run_pulumi_command(
            ["preview"],
            stack,
            description="Previewing infrastructure changes"
        )

    def up(self, stack: str | None = None, yes: bool = False) -> subprocess.CompletedProcess:
        """Run 'pulumi up' to deploy infrastructure."""
        extra_args = ["--yes"] if yes else []
        return self._run_pulumi_command(
            ["up"],
            stack,
            extra_args=extra_args,
            description="Deploying infrastructure"
        )

    def destroy(self, stack: str | None = None, yes: bool = False) -> subprocess.CompletedProcess:
        """Run 'pulumi destroy' to tear down infrastructure."""
        extra_args = ["--yes"] if yes else []
        return self._run_pulumi_command(
            ["destroy"],
            stack,
            extra_args=extra_args,
            description="Destroying infrastructure"
        )

    def stack_output(self, stack: str | None = None) -> dict[str, Any]:
        """
        Get stack outputs as dictionary.

        Raises:
            DeploymentError: If getting outputs fails
        """
        result = self._run_pulumi_command(
            ["stack", "output", "--json"],
            stack,
            description="Getting stack outputs"
        )

        try:
            return json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise DeploymentError(f"Failed to parse stack outputs: {e}") from e

    def _run_pulumi_command(
        self,
        command: list[str],
        stack: str | None = None,
        extra_args: list[str] | None = None,
        description: str | None = None
    ) -> subprocess.CompletedProcess:
        """
        Run a Pulumi CLI command.

        Args:
            command: Pulumi subcommand and its arguments
            stack: Optional stack name
            extra_args: Optional extra arguments
            description: Optional description for logging

        Returns:
            CompletedProcess with command results

        Raises:
            DeploymentError: If command fails
        """
        if not (self.project_dir / "Pulumi.yaml").is_file():
            raise DeploymentError(f"Pulumi project not found in: {self.project_dir}")

        cmd = [self.pulumi_bin, *command]
        if stack:
            cmd.extend(["--stack", stack])
        if extra_args:
            cmd.extend(extra_args)

        if description:
            logger.info("%s: %s (in %s)", description, " ".join(cmd), self.project_dir)

        try:
            return subprocess.run(
                cmd,
                cwd=self.project_dir,
                check=True,
                capture_output=True,
                text=True
            )
        except FileNotFoundError as e:
            raise DeploymentError(f"Pulumi executable not found: {self.pulumi_bin}") from e
        except subprocess.CalledProcessError as e:
            error_msg = f"Pulumi command failed: {' '.join(cmd)}"
            if e.stderr:
                error_msg += f"\n{e.stderr}"
            raise DeploymentError(error_msg) from e
