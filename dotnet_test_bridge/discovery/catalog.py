"""Build the catalog of test classes found in a set of binaries."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from dotnet_test_bridge.context import EngineContext
from dotnet_test_bridge.discovery.classifier import Classifier
from dotnet_test_bridge.discovery.conventions import Convention
from dotnet_test_bridge.discovery.hierarchy import TypeHierarchy
from dotnet_test_bridge.metadata.reader import DnfileMetadataReader, MetadataReader
from dotnet_test_bridge.models.catalog import TestClass
from dotnet_test_bridge.models.metadata import TypeMetadata

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class Skipped:
    """A unit (binary, type or method) that contributed no tests, and why."""

    unit: str
    reason: str


@dataclass(frozen=True, kw_only=True)
class BinaryScan:
    """Discovery outcome of one binary."""

    path: str
    classes: Sequence[TestClass] = ()
    skipped: Sequence[Skipped] = ()


@dataclass(frozen=True, kw_only=True)
class DiscoveryReport:
    """Catalog plus every unit that was skipped while building it."""

    classes: Sequence[TestClass]
    skipped: Sequence[Skipped]


@dataclass(frozen=True, kw_only=True)
class CatalogBuilder:
    """Scans binaries and classifies their types into test classes."""

    classifier: Classifier = field(default_factory=Classifier)
    reader: MetadataReader = field(default_factory=DnfileMetadataReader)
    context: EngineContext = field(default_factory=EngineContext)
    max_parallel_scans: int = 4

    async def discover(self, paths: Sequence[str]) -> DiscoveryReport:
        """Scan every binary, keeping input order regardless of completion order.

        Args:
            paths: Candidate binaries, in the order the catalog should follow

        Returns:
            The catalog and the skipped units of all binaries

        """
        if not paths:
            log.info("No binaries to scan")
            return DiscoveryReport(classes=[], skipped=[])

        semaphore = asyncio.Semaphore(self.max_parallel_scans)

        async def scan(path: str) -> BinaryScan:
            async with semaphore:
                return await asyncio.to_thread(self.scan_binary, path)

        log.info("Scanning %d binaries for tests...", len(paths))
        scans = await asyncio.gather(*(scan(path) for path in paths))
        report = self.merge(scans)
        log.info(
            "Discovered %d test class(es), skipped %d unit(s)",
            len(report.classes),
            len(report.skipped),
        )
        return report

    def merge(self, scans: Sequence[BinaryScan]) -> DiscoveryReport:
        classes: list[TestClass] = []
        skipped: list[Skipped] = []
        for scan in scans:
            classes.extend(scan.classes)
            skipped.extend(scan.skipped)
        for item in skipped:
            self.context.diagnostics.write(f"Skipped {item.unit}: {item.reason}")
        return DiscoveryReport(classes=classes, skipped=skipped)

    def scan_binary(self, path: str) -> BinaryScan:
        """Discover the test classes of one binary; never raises."""
        if not Path(path).is_file():
            return BinaryScan(
                path=path, skipped=[Skipped(unit=path, reason="file does not exist")]
            )

        assembly = self.reader.read(Path(path))
        if assembly is None:
            return BinaryScan(
                path=path, skipped=[Skipped(unit=path, reason="metadata unavailable")]
            )

        hierarchy = TypeHierarchy.for_assembly(assembly, self.reader)
        classes: list[TestClass] = []
        skipped: list[Skipped] = []

        for type_ in assembly.types:
            try:
                convention = self.classifier.classify(type_, hierarchy)
            except Exception as e:
                skipped.append(Skipped(unit=f"{path}:{type_.full_name}", reason=str(e)))
                continue
            if convention is None:
                continue

            test_class = TestClass(
                dll_path=path,
                name=type_.name,
                namespace=type_.namespace,
                test_type=convention.test_type,
            )
            skipped.extend(self._add_methods(test_class, type_, convention))
            classes.append(test_class)

        log.debug("Found %d test class(es) in %s", len(classes), path)
        return BinaryScan(path=path, classes=classes, skipped=skipped)

    def _add_methods(
        self, test_class: TestClass, type_: TypeMetadata, convention: Convention
    ) -> Sequence[Skipped]:
        skipped: list[Skipped] = []
        for method in type_.methods:
            try:
                if not convention.is_test_method(method):
                    continue
                traits = convention.traits(method)
            except Exception as e:
                skipped.append(
                    Skipped(
                        unit=f"{test_class.dll_path}:{test_class.full_name}.{method.name}",
                        reason=str(e),
                    )
                )
                continue
            test_class.add_method(method.name, traits)
        return skipped
