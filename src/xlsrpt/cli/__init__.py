from __future__ import annotations

from typing import TYPE_CHECKING, Any

from xlsrpt._optional_deps import FEATURE_CLI, import_feature_attr

__all__ = ["main", "CliHeadings", "SpecCliTheme"]

if TYPE_CHECKING:
    from .app import main
    from .console import CliHeadings, SpecCliTheme

_DICT_ATTR_MODULES = {
    "main": ".app",
    "CliHeadings": ".console",
    "SpecCliTheme": ".console",
}


def __getattr__(name: str) -> Any:
    module_name = _DICT_ATTR_MODULES.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return import_feature_attr(FEATURE_CLI, module_name, name, __name__)


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
