"""CLI entry point for discovering and running .NET tests."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from dotnet_test_bridge.config import EngineConfig
from dotnet_test_bridge.config_loader import load_engine_config
from dotnet_test_bridge.context import EngineContext
from dotnet_test_bridge.discovery.catalog import CatalogBuilder, DiscoveryReport
from dotnet_test_bridge.discovery.classifier import Classifier
from dotnet_test_bridge.models.catalog import TestClass, TestMethod, TestType
from dotnet_test_bridge.orchestrator import FrameworkRunReport, TestOrchestrator
from dotnet_test_bridge.runners.base import TestRunner
from dotnet_test_bridge.runners.loading import (
    FrameworkNotFoundError,
    load_framework_manifest,
    load_framework_manifests,
)
from dotnet_test_bridge.runners.manifest import FrameworkManifest

STATUS_SYMBOLS = {
    "successful": "✅",
    "error": "❌",
    "inconclusive": "❔",
    "not_run": "⏸️",
}


def log_results_summary(
    log: logging.Logger,
    reports: Sequence[FrameworkRunReport],
    selected: Sequence[TestMethod],
) -> None:
    """Log a formatted summary of the executed tests."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for report in reports:
        if report.error:
            log.info("%s %s: %s", STATUS_SYMBOLS["error"], report.test_type, report.error)

    for method in selected:
        symbol = STATUS_SYMBOLS.get(method.status, "?")
        duration = method.result.duration if method.result is not None else 0.0
        log.info("%s %s: %s (%.2fs)", symbol, method.full_name, method.status, duration)
        if method.result is not None and method.result.message:
            log.info("  Message: %s", method.result.message)


def build_runners(
    manifests: Sequence[FrameworkManifest[Any]],
    config: EngineConfig,
    context: EngineContext,
) -> Mapping[TestType, TestRunner]:
    """Create one runner per framework from its configuration section."""
    runners: dict[TestType, TestRunner] = {}
    for manifest in manifests:
        runner_config = manifest.config_cls.model_validate(
            config.frameworks.get(manifest.key, {})
        )
        runners[manifest.convention.test_type] = manifest.runner_factory(
            runner_config,
            context=context,
            work_dir=config.work_dir,
            coverage=config.coverage,
        )
    return runners


def select_tests(
    catalog: Sequence[TestClass],
    names: Sequence[str] = (),
    traits: Sequence[str] = (),
    frameworks: Sequence[str] = (),
) -> Sequence[TestMethod]:
    """Select methods matching every given filter; no filter selects all."""
    selected: list[TestMethod] = []
    for test_class in catalog:
        if frameworks and test_class.test_type.value not in frameworks:
            continue
        for method in test_class.methods:
            if names and method.full_name not in names and method.name not in names:
                continue
            if traits and method.traits.isdisjoint(traits):
                continue
            selected.append(method)
    return selected


def format_catalog(report: DiscoveryReport) -> dict[str, Any]:
    """Format a discovery report for JSON output."""
    return {
        "total_classes": len(report.classes),
        "total_methods": sum(len(c.methods) for c in report.classes),
        "classes": [
            {
                "dll_path": test_class.dll_path,
                "name": test_class.name,
                "namespace": test_class.namespace,
                "test_type": test_class.test_type.value,
                "methods": [
                    {
                        "name": method.name,
                        "full_name": method.full_name,
                        "traits": sorted(method.traits),
                    }
                    for method in test_class.methods
                ],
            }
            for test_class in report.classes
        ],
        "skipped": [{"unit": s.unit, "reason": s.reason} for s in report.skipped],
    }


def format_output(
    reports: Sequence[FrameworkRunReport], selected: Sequence[TestMethod]
) -> dict[str, Any]:
    """Format run results for JSON output."""
    all_results: list[dict[str, Any]] = []
    for method in selected:
        result = method.result
        all_results.append(
            {
                "test": method.full_name,
                "status": method.status,
                "duration": result.duration if result is not None else 0.0,
                "message": result.message if result is not None else None,
            }
        )

    return {
        "total": len(all_results),
        "successful": sum(1 for r in all_results if r["status"] == "successful"),
        "errors": sum(1 for r in all_results if r["status"] == "error"),
        "inconclusive": sum(1 for r in all_results if r["status"] == "inconclusive"),
        "not_run": sum(1 for r in all_results if r["status"] == "not_run"),
        "frameworks": [
            {
                "framework": report.test_type.value,
                "exit_code": report.exit_code,
                "error": report.error,
            }
            for report in reports
        ],
        "results": all_results,
    }


async def load_config(config_path: Path | None) -> EngineConfig:
    if config_path is None:
        return EngineConfig()
    return await load_engine_config(config_path)


async def discover(binaries: Sequence[str], config: EngineConfig) -> DiscoveryReport:
    """Build the catalog for the given binaries."""
    manifests = load_framework_manifests()
    builder = CatalogBuilder(
        classifier=Classifier(
            conventions=[manifest.convention for manifest in manifests],
            legacy_xunit_ancestry=config.legacy_xunit_ancestry,
        ),
        max_parallel_scans=config.max_parallel_scans,
    )
    return await builder.discover(binaries)


async def run(
    binaries: Sequence[str],
    config: EngineConfig,
    names: Sequence[str] = (),
    traits: Sequence[str] = (),
    frameworks: Sequence[str] = (),
) -> int:
    """Discover, run the selected tests and return the exit code.

    Raises:
        FrameworkNotFoundError: If a requested framework is not registered

    """
    log = logging.getLogger("dotnet_test_bridge")

    manifests = (
        [load_framework_manifest(key) for key in frameworks]
        if frameworks
        else load_framework_manifests()
    )

    report = await discover(binaries, config)
    selected = select_tests(report.classes, names, traits, frameworks)

    if not selected:
        log.info("No tests selected")
        print(json.dumps({"total": 0, "results": []}))
        return 0

    context = EngineContext()
    runners = build_runners(manifests, config, context)
    orchestrator = TestOrchestrator(runners=runners)
    reports = await orchestrator.run_tests(report.classes, selected)

    log_results_summary(log, reports, selected)
    print(json.dumps(format_output(reports, selected), indent=2))

    has_failures = any(report.error for report in reports) or any(
        method.status == "error" for method in selected
    )
    return 1 if has_failures else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Discover and run .NET unit tests from compiled binaries"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML configuration file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    discover_parser = subparsers.add_parser("discover", help="List discovered tests")
    discover_parser.add_argument("binaries", nargs="+", help="Binaries to scan")

    run_parser = subparsers.add_parser("run", help="Run discovered tests")
    run_parser.add_argument("binaries", nargs="+", help="Binaries to scan")
    run_parser.add_argument(
        "--test",
        action="append",
        default=[],
        help="Test method name or full name to run (repeatable)",
    )
    run_parser.add_argument(
        "--trait",
        action="append",
        default=[],
        help="Run only tests carrying this trait (repeatable)",
    )
    run_parser.add_argument(
        "--framework",
        action="append",
        default=[],
        help="Framework key to run: xunit, nunit, mstest (repeatable)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = asyncio.run(load_config(args.config))

    if args.command == "discover":
        report = asyncio.run(discover(args.binaries, config))
        print(json.dumps(format_catalog(report), indent=2))
        sys.exit(0)

    try:
        exit_code = asyncio.run(
            run(
                binaries=args.binaries,
                config=config,
                names=args.test,
                traits=args.trait,
                frameworks=args.framework,
            )
        )
    except FrameworkNotFoundError as e:
        parser.error(str(e))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
