"""External style checker invocation."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from normfix.diagnostics import CheckResult, parse_checker_output
from normfix.errors import ToolTimeoutError, ToolUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Checker:
    """Runs norminette (or a compatible executable) on a file or directory."""

    executable: str = "norminette"
    timeout: float = 30.0

    def run(self, path: Path | str) -> CheckResult:
        """Check *path* and return the parsed diagnostics.

        A non-zero exit status is normal when violations exist; the output is
        parsed either way. Only a run that produces nothing recognisable is
        treated as a tool failure.
        """
        target = str(path)
        try:
            result = subprocess.run(
                [self.executable, target],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise ToolTimeoutError(self.executable, self.timeout) from None
        except OSError as exc:
            raise ToolUnavailableError(self.executable, str(exc)) from None

        output = result.stdout if result.stdout.strip() else result.stderr
        parsed = parse_checker_output(output, target)

        if result.returncode != 0 and parsed.files_checked == 0 and not parsed.diagnostics:
            msg = f"failed (exit {result.returncode})"
            stderr = result.stderr.strip()
            if stderr:
                msg += f": {stderr}"
            raise ToolUnavailableError(self.executable, msg)

        logger.debug("%s %s: %s", self.executable, target, parsed.summary)
        return parsed
