from __future__ import annotations

import re
import sys
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from xlsrpt._optional_deps import (  # noqa: E402
    FEATURE_CLI,
    SpecOptionalFeature,
    import_feature_attr,
    import_feature_module,
)


def test_missing_extra_module_gets_install_hint() -> None:
    feature = SpecOptionalFeature(
        name="xlsrpt.cli", extras=("cli",), required_modules=("missing_feature_module",)
    )
    with pytest.raises(ModuleNotFoundError) as exc_info:
        import_feature_module(feature, "missing_feature_module", "xlsrpt")

    message = str(exc_info.value)
    assert "xlsrpt.cli is unavailable" in message
    assert "`missing_feature_module`" in message
    assert re.search(r'pip install "xlsrpt\[cli\]"', message)
    assert "pdm sync -G dev -G cli" in message


def test_unrelated_missing_module_is_reraised() -> None:
    with pytest.raises(ModuleNotFoundError) as exc_info:
        import_feature_module(FEATURE_CLI, ".missing_feature_module", "xlsrpt")
    assert "is unavailable" not in str(exc_info.value)


@pytest.mark.parametrize(
    ("name_missing", "expected"),
    [("rich", True), ("rich.table", True), ("rich_argparse", True), ("polars", False), (None, False)],
)
def test_check_missing(name_missing: str | None, expected: bool) -> None:
    assert FEATURE_CLI.check_missing(name_missing) is expected


def test_duplicate_extras_are_listed_once() -> None:
    feature = SpecOptionalFeature(name="x", extras=("cli", "cli"), required_modules=())
    assert 'xlsrpt[cli]' in feature.install_hint


def test_feature_attr_resolves_when_installed() -> None:
    fn_main = import_feature_attr(FEATURE_CLI, ".cli.app", "main", "xlsrpt")
    assert callable(fn_main)
