"""Tests for CLI module."""

import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock, Mock, patch

import pytest

from dotnet_test_bridge.cli import (
    build_runners,
    format_catalog,
    format_output,
    log_results_summary,
    run,
    select_tests,
)
from dotnet_test_bridge.config import EngineConfig
from dotnet_test_bridge.context import EngineContext
from dotnet_test_bridge.discovery.catalog import DiscoveryReport, Skipped
from dotnet_test_bridge.models.catalog import TestClass, TestType
from dotnet_test_bridge.models.result import TestResult
from dotnet_test_bridge.orchestrator import FrameworkRunReport
from dotnet_test_bridge.runners.loading import FrameworkNotFoundError
from dotnet_test_bridge.runners.nunit import NUnitRunner, nunit_manifest
from dotnet_test_bridge.runners.xunit import XUnitRunner, xunit_manifest


@pytest.fixture
def catalog() -> list[TestClass]:
    nunit = TestClass(
        dll_path="Unit.dll", name="Fixture", namespace="Acme", test_type=TestType.NUNIT
    )
    nunit.add_method("Adds", ["Smoke"])
    nunit.add_method("Subtracts")
    xunit = TestClass(
        dll_path="Facts.dll", name="Facts", namespace="Acme", test_type=TestType.XUNIT
    )
    xunit.add_method("Runs", ["Smoke"])
    return [nunit, xunit]


class TestSelectTests:
    """Tests for select_tests."""

    def test_selects_everything_without_filters(self, catalog: list[TestClass]) -> None:
        """No filter selects every method."""
        assert len(select_tests(catalog)) == 3

    def test_filters_by_trait(self, catalog: list[TestClass]) -> None:
        """Only methods carrying the trait are selected."""
        selected = select_tests(catalog, traits=["Smoke"])

        assert [m.full_name for m in selected] == ["Acme.Fixture.Adds", "Acme.Facts.Runs"]

    def test_filters_by_name_and_framework(self, catalog: list[TestClass]) -> None:
        """Filters combine."""
        selected = select_tests(
            catalog, names=["Acme.Fixture.Subtracts", "Runs"], frameworks=["nunit"]
        )

        assert [m.full_name for m in selected] == ["Acme.Fixture.Subtracts"]


def test_log_results_summary(
    catalog: list[TestClass], caplog: pytest.LogCaptureFixture
) -> None:
    """Logs one line per selected test and framework errors."""
    catalog[0].methods[0].result = TestResult(
        method_name="Acme.Fixture.Adds",
        status="error",
        duration=1.25,
        message="Expected 3",
    )
    reports = [
        FrameworkRunReport(test_type=TestType.XUNIT, exit_code=None, error="not found")
    ]

    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), reports, catalog[0].methods)

    assert "Test Results Summary:" in caplog.text
    assert "❌ xunit: not found" in caplog.text
    assert "❌ Acme.Fixture.Adds: error (1.25s)" in caplog.text
    assert "Message: Expected 3" in caplog.text
    assert "Acme.Fixture.Subtracts: not_run (0.00s)" in caplog.text


def test_format_output_counts_statuses(catalog: list[TestClass]) -> None:
    """Counts each status and lists framework outcomes."""
    catalog[0].methods[0].result = TestResult(
        method_name="Acme.Fixture.Adds", status="successful", duration=0.5
    )
    catalog[1].methods[0].result = TestResult(
        method_name="Acme.Facts.Runs", status="error", message="boom"
    )
    reports = [
        FrameworkRunReport(test_type=TestType.NUNIT, exit_code=0),
        FrameworkRunReport(test_type=TestType.XUNIT, exit_code=1),
    ]

    output = format_output(reports, select_tests(catalog))

    assert output["total"] == 3
    assert output["successful"] == 1
    assert output["errors"] == 1
    assert output["not_run"] == 1
    assert output["frameworks"][1] == {"framework": "xunit", "exit_code": 1, "error": None}
    assert output["results"][2] == {
        "test": "Acme.Facts.Runs",
        "status": "error",
        "duration": 0.0,
        "message": "boom",
    }


def test_format_catalog(catalog: list[TestClass]) -> None:
    """Lists classes, methods and skipped units."""
    report = DiscoveryReport(
        classes=catalog, skipped=[Skipped(unit="Broken.dll", reason="metadata unavailable")]
    )

    output = format_catalog(report)

    assert output["total_classes"] == 2
    assert output["total_methods"] == 3
    assert output["classes"][0]["methods"][1] == {
        "name": "Subtracts",
        "full_name": "Acme.Fixture.Subtracts",
        "traits": ["No Traits"],
    }
    assert output["skipped"] == [{"unit": "Broken.dll", "reason": "metadata unavailable"}]


def test_build_runners_validates_framework_sections(tmp_path: Path) -> None:
    """Each runner gets its own validated configuration section."""
    config = EngineConfig(
        work_dir=tmp_path,
        frameworks={"nunit": {"framework": "net-4.0", "noshadow": False}},
    )

    runners = build_runners([nunit_manifest, xunit_manifest], config, EngineContext())

    nunit = runners[TestType.NUNIT]
    assert isinstance(nunit, NUnitRunner)
    assert nunit.config.framework == "net-4.0"
    assert nunit.config.noshadow is False
    assert nunit.work_dir == tmp_path
    assert isinstance(runners[TestType.XUNIT], XUnitRunner)


class TestRun:
    """Tests for the run command."""

    async def test_returns_zero_when_nothing_selected(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Nothing to run is not a failure."""
        report = DiscoveryReport(classes=[], skipped=[])

        with patch("dotnet_test_bridge.cli.discover", AsyncMock(return_value=report)):
            exit_code = await run(["Tests.dll"], EngineConfig())

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {"total": 0, "results": []}

    async def test_returns_one_on_failed_test(
        self, catalog: list[TestClass], capsys: pytest.CaptureFixture[str]
    ) -> None:
        """A failing test makes the run fail."""
        report = DiscoveryReport(classes=catalog, skipped=[])

        async def run_tests(catalog: list[TestClass], selected: list) -> list:
            selected[0].result = TestResult(method_name="Acme.Fixture.Adds", status="error")
            return [FrameworkRunReport(test_type=TestType.NUNIT, exit_code=1)]

        orchestrator = Mock()
        orchestrator.run_tests = AsyncMock(side_effect=run_tests)

        with (
            patch("dotnet_test_bridge.cli.discover", AsyncMock(return_value=report)),
            patch("dotnet_test_bridge.cli.TestOrchestrator", return_value=orchestrator),
        ):
            exit_code = await run(["Unit.dll"], EngineConfig(), frameworks=["nunit"])

        assert exit_code == 1
        output = json.loads(capsys.readouterr().out)
        assert output["total"] == 2
        assert output["errors"] == 1

    async def test_returns_one_on_framework_error(
        self, catalog: list[TestClass]
    ) -> None:
        """A framework that could not run makes the run fail."""
        report = DiscoveryReport(classes=catalog, skipped=[])
        orchestrator = Mock()
        orchestrator.run_tests = AsyncMock(
            return_value=[
                FrameworkRunReport(
                    test_type=TestType.NUNIT, exit_code=None, error="runner not found"
                )
            ]
        )

        with (
            patch("dotnet_test_bridge.cli.discover", AsyncMock(return_value=report)),
            patch("dotnet_test_bridge.cli.TestOrchestrator", return_value=orchestrator),
        ):
            exit_code = await run(["Unit.dll"], EngineConfig())

        assert exit_code == 1

    async def test_rejects_unknown_framework_before_discovery(self) -> None:
        """An unregistered framework key fails before any binary is scanned."""
        discover = AsyncMock()

        with (
            patch("dotnet_test_bridge.cli.discover", discover),
            pytest.raises(FrameworkNotFoundError, match="Framework 'mbunit' not found"),
        ):
            await run(["Unit.dll"], EngineConfig(), frameworks=["mbunit"])

        discover.assert_not_awaited()
