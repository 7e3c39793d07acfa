from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version
from types import ModuleType
from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "report",
    "cli",
]

try:
    __version__ = version("xlsrpt")
except PackageNotFoundError:
    __version__ = "0.0.0"

if TYPE_CHECKING:
    import xlsrpt.cli as cli
    import xlsrpt.report as report

_ALIAS_MODULES: dict[str, str] = {
    "report": "xlsrpt.report",
    "cli": "xlsrpt.cli",
}


def __getattr__(name: str) -> Any:
    module_name = _ALIAS_MODULES.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_loaded: ModuleType = import_module(module_name)
    globals()[name] = module_loaded
    return module_loaded


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
