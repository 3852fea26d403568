"""Tests for the directory walk, downstream scan and test discovery.

Each test builds a small project under ``tmp_path``; the directory name
``proj`` keeps the project root free of test-looking path segments.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from impactlens.analysis.dependencies import (
    DependencyScanner,
    import_patterns,
    imports_source,
    references_symbol,
)
from impactlens.analysis.discovery import TestDiscovery, clean_test_stem, is_related_test
from impactlens.analysis.models import ChangeSet
from impactlens.analysis.walk import DirectoryWalker, matches_any
from impactlens.config.models import ScanConfig
from impactlens.files.ops import LocalFilesystem


def _write(root: Path, rel: str, content: str = "") -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    _write(root, "src/pricing.ts", "export function price(a: number): number { return a; }\n")
    _write(root, "src/cart.ts", 'import { price } from "./pricing";\nprice(1);\n')
    _write(root, "src/report.ts", "const total = price(2);\n")
    _write(root, "src/unrelated.ts", "export const pricey = 1;\n")
    _write(root, "src/redefines.ts", "export function price(a: string) {}\nprice('x');\n")
    _write(root, "src/pricing.test.ts", 'import { price } from "./pricing";\n')
    _write(root, "src/legacy.js", "const p = require('./pricing');\n")
    _write(root, "src/node_modules/dep/index.ts", "price(3);\n")
    _write(root, "tests/test_pricing_rules.py", "# checks pricing\n")
    _write(root, "tests/checkout.spec.ts", "expect(price(1)).toBe(1);\n")
    _write(root, "tests/other.spec.ts", "expect(true).toBe(true);\n")
    _write(root, "src/__tests__/helpers.test.ts", "// exercises pricing helpers\n")
    _write(root, "README.md", "price\n")
    return root


# =============================================================================
# Directory walk
# =============================================================================


class TestDirectoryWalker:
    """Bounded depth-first walk."""

    def test_files_before_subdirectories_and_excluded_dirs_skipped(self, project: Path) -> None:
        walker = DirectoryWalker(fs=LocalFilesystem())
        result = walker.walk([project / "src"], lambda p: p.suffix == ".ts")

        names = [Path(f).relative_to(project).as_posix() for f in result.files]
        assert "src/node_modules/dep/index.ts" not in names
        assert names == [
            "src/cart.ts",
            "src/pricing.test.ts",
            "src/pricing.ts",
            "src/redefines.ts",
            "src/report.ts",
            "src/unrelated.ts",
            "src/__tests__/helpers.test.ts",
        ]
        assert not result.timed_out

    def test_overlapping_roots_are_deduplicated(self, project: Path) -> None:
        walker = DirectoryWalker(fs=LocalFilesystem())
        result = walker.walk([project / "src", project], lambda p: p.name == "cart.ts")
        assert len(result.files) == 1

    def test_extra_excludes(self, project: Path) -> None:
        walker = DirectoryWalker(fs=LocalFilesystem(), extra_excludes=("__tests__",))
        result = walker.walk([project], lambda p: True)
        assert not any("__tests__" in f for f in result.files)

    def test_matches_any(self) -> None:
        assert matches_any("a.tsx", ["*.ts", "*.tsx"])
        assert not matches_any("a.md", ["*.ts"])


# =============================================================================
# Downstream scan
# =============================================================================


class TestImportPatterns:
    """Import detection by base name and file name."""

    @pytest.mark.parametrize(
        "content",
        [
            'import { price } from "./pricing";',
            "import pricing from '../lib/pricing.ts';",
            "const p = require('./pricing');",
            'export * from "./pricing";',
            "from .pricing import price",
            "import app.pricing",
        ],
    )
    def test_detects_imports(self, content: str) -> None:
        assert imports_source(content, import_patterns(Path("/p/src/pricing.ts")))

    @pytest.mark.parametrize(
        "content",
        ['import { x } from "./pricing-v2";', "// pricing is great", "import pricingRules"],
    )
    def test_ignores_lookalikes(self, content: str) -> None:
        assert not imports_source(content, import_patterns(Path("/p/src/pricing.ts")))


class TestReferencesSymbol:
    def test_reference_without_definition(self) -> None:
        assert references_symbol("const t = price(2);", "price")

    def test_identifier_boundaries(self) -> None:
        assert not references_symbol("const pricey = 1; $price(); price_x();", "price")

    def test_local_definition_excludes(self) -> None:
        assert not references_symbol("function price(a) {}\nprice(1);", "price")
        assert not references_symbol("def price(a):\n    pass\nprice(1)", "price")


class TestDependencyScanner:
    """Downstream files in the source directory tree."""

    def test_finds_importers_and_callers(self, project: Path) -> None:
        scanner = DependencyScanner(LocalFilesystem())
        changes = ChangeSet(changed_functions=("price",))

        result = scanner.scan(project / "src" / "pricing.ts", changes)

        names = {Path(f).relative_to(project).as_posix() for f in result.files}
        assert {"src/cart.ts", "src/report.ts", "src/legacy.js", "src/pricing.test.ts"} <= names
        assert "src/pricing.ts" not in names
        assert "src/unrelated.ts" not in names
        assert "src/redefines.ts" not in names
        assert "src/node_modules/dep/index.ts" not in names
        assert all(Path(f).is_absolute() for f in result.files)

    def test_empty_change_set_scans_nothing(self, project: Path) -> None:
        result = DependencyScanner(LocalFilesystem()).scan(project / "src" / "pricing.ts", ChangeSet())
        assert result.files == ()

    def test_large_files_are_skipped(self, project: Path) -> None:
        _write(project, "src/huge.ts", "price(1);\n" + "x" * 2048)
        scanner = DependencyScanner(LocalFilesystem(), ScanConfig(max_file_size_mb=0.001))

        result = scanner.scan(project / "src" / "pricing.ts", ChangeSet(changed_functions=("price",)))

        assert not any(f.endswith("huge.ts") for f in result.files)


# =============================================================================
# Test discovery
# =============================================================================


class TestTestNames:
    """Name-based relation between tests and sources."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("pricing.test.ts", "pricing"),
            ("pricing.spec.tsx", "pricing"),
            ("test_pricing.py", "pricing"),
            ("pricing_test.go", "pricing"),
            ("PricingTest.java", "Pricing"),
            ("PricingTests.cs", "Pricing"),
        ],
    )
    def test_clean_test_stem(self, name: str, expected: str) -> None:
        assert clean_test_stem(name) == expected

    def test_relation_contains_source_stem(self) -> None:
        assert is_related_test("test_pricing_rules.py", "pricing")
        assert is_related_test("PricingTest.java", "pricing")
        assert not is_related_test("checkout.spec.ts", "pricing")
        assert not is_related_test("pricing.test.ts", "")


class TestTestDiscovery:
    """Related test lookup."""

    def test_find(self, project: Path) -> None:
        discovery = TestDiscovery(LocalFilesystem())

        found = discovery.find(project / "src" / "pricing.ts", project, symbols=("price",))

        names = [p.relative_to(project).as_posix() for p in found]
        assert names[0] == "src/pricing.test.ts"
        assert set(names) == {
            "src/pricing.test.ts",
            "src/__tests__/helpers.test.ts",
            "tests/test_pricing_rules.py",
            "tests/checkout.spec.ts",
        }

    def test_find_without_symbols_drops_reference_only_tests(self, project: Path) -> None:
        found = TestDiscovery(LocalFilesystem()).find(project / "src" / "pricing.ts", project)
        assert not any(p.name == "checkout.spec.ts" for p in found)

    def test_proximity_order(self, project: Path) -> None:
        found = TestDiscovery(LocalFilesystem()).find(
            project / "src" / "pricing.ts", project, symbols=("price",)
        )
        names = [p.relative_to(project).as_posix() for p in found]
        assert names.index("src/pricing.test.ts") < names.index("tests/checkout.spec.ts")

    def test_nearby_only_looks_in_source_dir_by_name(self, project: Path) -> None:
        nearby = TestDiscovery(LocalFilesystem()).nearby(project / "src" / "pricing.ts")
        assert [p.relative_to(project).as_posix() for p in nearby] == ["src/pricing.test.ts"]
