"""Abstract base class for framework console runners."""

import asyncio
import contextlib
import logging
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import ClassVar

from dotnet_test_bridge.config import CoverageConfig, RunnerConfig
from dotnet_test_bridge.context import EngineContext
from dotnet_test_bridge.models.catalog import TestType
from dotnet_test_bridge.runners.command import CommandLine
from dotnet_test_bridge.runners.locator import RunnerLocator
from dotnet_test_bridge.runners.results import ResultsByBinary, load_results

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class TestSelection:
    """Tests chosen for one runner invocation."""

    __test__ = False

    binaries: Sequence[str]
    tests: Sequence[str]


@dataclass(frozen=True, kw_only=True)
class RunPlan:
    """Everything prepared for one runner invocation."""

    stem: str
    results_path: Path
    run_list_path: Path | None
    command: CommandLine


@dataclass(frozen=True, kw_only=True)
class RunOutcome:
    """Exit status of the runner and the results it reported."""

    plan: RunPlan
    exit_code: int
    results: ResultsByBinary


def write_run_list(path: Path, tests: Sequence[str]) -> None:
    """Write one test name per line; the file is closed on every path."""
    with path.open("w", encoding="utf-8", newline="\n") as file:
        for test in tests:
            file.write(f"{test}\n")


@dataclass(frozen=True, kw_only=True)
class TestRunner[ConfigT: RunnerConfig](ABC):
    """Runs selected tests through a framework's console runner.

    Subclasses describe where the executable is installed, how its
    arguments look and how its results artifact is parsed. The base class
    owns working files, the process lifecycle and cleanup.
    """

    __test__ = False

    test_type: ClassVar[TestType]
    install_glob: ClassVar[str]
    executable: ClassVar[str]
    results_extension: ClassVar[str] = ".xml"
    uses_run_list: ClassVar[bool] = True

    config: ConfigT
    context: EngineContext
    work_dir: Path
    coverage: CoverageConfig | None = None

    @classmethod
    def from_config(
        cls,
        config: ConfigT,
        *,
        context: EngineContext,
        work_dir: Path,
        coverage: CoverageConfig | None = None,
    ) -> "TestRunner[ConfigT]":
        """Create a runner from its validated configuration."""
        return cls(config=config, context=context, work_dir=work_dir, coverage=coverage)

    @abstractmethod
    def build_arguments(
        self, selection: TestSelection, run_list_path: Path | None, results_path: Path
    ) -> Sequence[str]:
        """Build the runner's own command line arguments."""

    @abstractmethod
    def parse_results(self, root: ET.Element) -> ResultsByBinary:
        """Turn the parsed results document into results per binary."""

    def locate_runner(self) -> Path:
        return RunnerLocator(
            test_type=self.test_type,
            install_glob=self.install_glob,
            executable=self.executable,
            context=self.context,
            configured_path=self.config.runner_path,
            search_roots=self.config.search_roots,
        ).locate()

    def new_stem(self, now: datetime | None = None) -> str:
        """Working file stem, unique per run through the timestamp."""
        timestamp = (now or datetime.now()).strftime("%Y_%m_%d_%H_%M_%S_%f")
        return f"{self.test_type}_{timestamp}"

    def prepare(self, selection: TestSelection) -> RunPlan:
        """Locate the runner, write the run-list and build the command line.

        Raises:
            RunnerNotFoundError: If the runner executable cannot be located

        """
        runner_path = self.locate_runner()
        self.work_dir.mkdir(parents=True, exist_ok=True)

        stem = self.new_stem()
        results_path = self.work_dir / f"{stem}{self.results_extension}"
        run_list_path = self.work_dir / f"{stem}.txt" if self.uses_run_list else None

        command = CommandLine(
            runner_path=runner_path,
            runner_args=[
                *self.build_arguments(selection, run_list_path, results_path),
                *self.config.extra_args,
            ],
            coverage_results_path=self.work_dir / f"{stem}_coverage.xml",
            coverage=self.coverage,
        )

        if run_list_path is not None:
            try:
                write_run_list(run_list_path, selection.tests)
            except OSError:
                self._remove(run_list_path)
                raise

        return RunPlan(
            stem=stem,
            results_path=results_path,
            run_list_path=run_list_path,
            command=command,
        )

    async def execute(self, plan: RunPlan) -> int:
        """Launch the command and wait for it to exit.

        Returns:
            The process exit code

        Raises:
            TimeoutError: If the configured timeout elapsed; the process is killed

        """
        log.info("Launching %s runner: %s", self.test_type, plan.command.render())
        process = await asyncio.create_subprocess_exec(
            *plan.command.argv(),
            cwd=self.work_dir,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )

        try:
            exit_code = await asyncio.wait_for(process.wait(), timeout=self.config.timeout)
        except TimeoutError:
            await self._terminate(process)
            raise TimeoutError(
                f"{self.test_type} runner did not complete within "
                f"{self.config.timeout} seconds"
            ) from None
        except asyncio.CancelledError:
            await self._terminate(process)
            raise

        log.info("%s runner exited with code %d", self.test_type, exit_code)
        return exit_code

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()

    def read_results(self, plan: RunPlan) -> ResultsByBinary:
        return load_results(
            plan.results_path, self.parse_results, self.context.diagnostics
        )

    def cleanup(self, plan: RunPlan) -> None:
        """Delete the temporary run-list; failures are reported, not raised."""
        if plan.run_list_path is not None:
            self._remove(plan.run_list_path)

    def _remove(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self.context.diagnostics.write(f"Failed to delete {path}: {e}")

    async def run(self, selection: TestSelection) -> RunOutcome:
        """Prepare, execute, clean up and only then read the results."""
        plan = self.prepare(selection)
        try:
            exit_code = await self.execute(plan)
        finally:
            self.cleanup(plan)

        return RunOutcome(plan=plan, exit_code=exit_code, results=self.read_results(plan))
