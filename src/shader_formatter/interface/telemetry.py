"""Telemetry adapter: rich console output mirrored to a stdlib logger."""

import logging
from typing import Optional

from rich.console import Console


class ProjectTelemetry:
    """Implements TelemetryPort for the command-line tool."""

    def __init__(
        self,
        project_name: str,
        color: str = "cyan",
        welcome_msg: str = "",
        console: Optional[Console] = None,
    ) -> None:
        self.project_name = project_name
        self.color = color
        self.welcome_msg = welcome_msg
        self.console = console or Console(stderr=True)
        self.logger = logging.getLogger(project_name.lower().replace(" ", "_"))

    def handshake(self) -> None:
        """Print the start-up banner."""
        banner = f"[bold {self.color}]{self.project_name}[/bold {self.color}]"
        if self.welcome_msg:
            banner += f" - {self.welcome_msg}"
        self.console.print(banner)
        self.logger.info("%s started", self.project_name)

    def step(self, message: str) -> None:
        self.console.print(f"[{self.color}]>[/{self.color}] {message}")
        self.logger.info(message)

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]error:[/bold red] {message}")
        self.logger.error(message)

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]warning:[/yellow] {message}")
        self.logger.warning(message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)
