"""Error types for external tool failures."""

from __future__ import annotations


class ToolError(Exception):
    """An external collaborator (checker or formatter) could not do its job."""

    def __init__(self, tool: str, message: str) -> None:
        self.tool = tool
        self.message = message
        super().__init__(self.format())

    def format(self) -> str:
        return f"{self.tool}: {self.message}"


class ToolUnavailableError(ToolError):
    """The tool is not installed, not executable, or exited without usable output."""


class ToolTimeoutError(ToolUnavailableError):
    """The tool ran longer than its configured bound."""

    def __init__(self, tool: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(tool, f"timed out after {timeout}s")
