"""Thin boundary around the ``docker compose`` command line.

seaman never talks to the container engine directly. Every environment
operation becomes one ``docker compose`` invocation run from the project
root, with output streamed straight to the terminal. In dry-run mode the
command line is printed to stderr instead of executed.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import IO, Optional, Sequence

from seaman.exceptions import ComposeError
from seaman.output import info

logger = logging.getLogger(__name__)

COMPOSE_COMMAND = ("docker", "compose")


class ComposeRunner:
    """Runs ``docker compose`` sub-commands for one project.

    Args:
        project_root: Directory containing the compose file; used as cwd.
        dry_run: Print commands instead of running them.
    """

    def __init__(self, project_root: Path, dry_run: bool = False) -> None:
        self.project_root = project_root
        self.dry_run = dry_run

    def command_line(self, args: Sequence[str]) -> list[str]:
        return [*COMPOSE_COMMAND, *args]

    def run(self, args: Sequence[str], stdin: Optional[IO[bytes]] = None) -> int:
        """Run ``docker compose <args>`` and return its exit code.

        Raises:
            ComposeError: If the ``docker`` executable cannot be found.
        """
        argv = self.command_line(args)
        if self.dry_run:
            info(f"[dry-run] {shlex.join(argv)}")
            return 0

        logger.debug("Running %s in %s", shlex.join(argv), self.project_root)
        try:
            result = subprocess.run(argv, cwd=self.project_root, stdin=stdin)
        except FileNotFoundError:
            raise ComposeError(
                "docker executable not found. Install Docker with the compose plugin."
            ) from None
        return result.returncode

    # ------------------------------------------------------------------
    # Environment operations
    # ------------------------------------------------------------------

    def up(self, service: Optional[str] = None) -> int:
        return self.run(["up", "-d", *([service] if service else [])])

    def stop(self, service: Optional[str] = None) -> int:
        return self.run(["stop", *([service] if service else [])])

    def rebuild(self) -> int:
        return self.run(["up", "-d", "--build", "--force-recreate"])

    def down(self) -> int:
        """Stop and remove containers, networks and volumes."""
        return self.run(["down", "-v"])

    def exec(
        self,
        service: str,
        command: Sequence[str],
        interactive: bool = False,
        stdin: Optional[IO[bytes]] = None,
    ) -> int:
        """Run *command* inside the running *service* container.

        Non-interactive runs pass ``-T`` so no pseudo-TTY is allocated and
        piped input/output stay byte-exact.
        """
        args = ["exec"]
        if not interactive:
            args.append("-T")
        args.extend([service, *command])
        return self.run(args, stdin=stdin)
