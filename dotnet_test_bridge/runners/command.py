"""Command line construction for console runners."""

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from dotnet_test_bridge.config import CoverageConfig


@dataclass(frozen=True, kw_only=True)
class CommandLine:
    """Runner invocation, optionally wrapped by a coverage console.

    The three slots are the runner path, the runner arguments and the
    coverage results path.
    """

    runner_path: Path
    runner_args: Sequence[str]
    coverage_results_path: Path
    coverage: CoverageConfig | None = None

    def argv(self) -> Sequence[str]:
        """Arguments for process creation, executable first."""
        if self.coverage is None:
            return [str(self.runner_path), *self.runner_args]
        return [
            str(self.coverage.console_path),
            f"-target:{self.runner_path}",
            f"-targetargs:{subprocess.list2cmdline(self.runner_args)}",
            f"-register:{self.coverage.register_mode}",
            f"-output:{self.coverage_results_path}",
        ]

    def render(self) -> str:
        """Single invocable command line string."""
        return subprocess.list2cmdline(self.argv())
