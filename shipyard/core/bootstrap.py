"""
BootstrapScript: shell commands run once when an instance first boots.
"""

from dataclasses import dataclass
from pathlib import Path

from shipyard.errors import ConfigurationMissing

SHEBANG = "#!/bin/bash"


@dataclass(frozen=True)
class BootstrapScript:
    """
    An ordered sequence of shell statements.

    The script is opaque to shipyard: it is either assembled from inline
    statements or read verbatim from a file, and rendered once into the
    instance user data. A failing statement is not handled here; the
    instance simply never becomes healthy.

    Example:
        script = BootstrapScript.inline(
            'echo "Updating system packages..."',
            "sudo yum update -y",
        )
        script.render()
    """

    commands: tuple[str, ...]
    """Shell statements, in execution order"""

    source: str | None = None
    """Path the script was loaded from, if any"""

    @classmethod
    def inline(cls, *commands: str) -> 'BootstrapScript':
        return cls(commands=tuple(commands))

    @classmethod
    def from_file(cls, path: str | Path) -> 'BootstrapScript':
        """
        Load a script verbatim from ``path``.

        Raises:
            ConfigurationMissing: If the file does not exist
        """
        script_path = Path(path)
        if not script_path.is_file():
            raise ConfigurationMissing(f"Bootstrap script not found: {script_path}")

        text = script_path.read_text(encoding="utf-8")
        return cls(commands=(text.rstrip("\n"),), source=str(script_path))

    def with_commands(self, *commands: str) -> 'BootstrapScript':
        """Return a copy with ``commands`` appended."""
        return BootstrapScript(commands=self.commands + tuple(commands), source=self.source)

    def render(self) -> str:
        """Render the script as user data, with a single leading shebang."""
        lines = list(self.commands)
        if lines and lines[0] == SHEBANG:
            lines = lines[1:]
        body = "\n".join(lines)
        if body.startswith("#!"):
            return body + "\n"
        return f"{SHEBANG}\n{body}\n"
