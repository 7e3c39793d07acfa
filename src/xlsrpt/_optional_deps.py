from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from types import ModuleType
from typing import Any


@dataclass(frozen=True, slots=True)
class SpecOptionalFeature:
    """
    A part of xlsrpt that needs an install extra.

    ``required_modules`` are the top-level imports the extra provides; only a
    miss of one of them is reported with the install hint, any other
    ``ModuleNotFoundError`` is a real bug and propagates unchanged.
    """

    name: str
    extras: tuple[str, ...]
    required_modules: tuple[str, ...]

    @property
    def install_hint(self) -> str:
        c_extras = ",".join(dict.fromkeys(self.extras))
        return (
            f"Install extras with `pip install \"xlsrpt[{c_extras}]\"` "
            f"or sync in development with `pdm sync -G dev -G {c_extras}`."
        )

    def check_missing(self, name_missing: str | None) -> bool:
        if not name_missing:
            return False
        return name_missing.split(".")[0] in self.required_modules

    def create_error(self, name_missing: str | None) -> ModuleNotFoundError:
        c_missing = (
            f"Missing optional dependency `{name_missing}`."
            if name_missing
            else "Missing optional dependency."
        )
        return ModuleNotFoundError(f"{self.name} is unavailable. {c_missing} {self.install_hint}")


FEATURE_CLI = SpecOptionalFeature(
    name="xlsrpt.cli",
    extras=("cli",),
    required_modules=("rich", "rich_argparse"),
)


def import_feature_module(feature: SpecOptionalFeature, module_name: str, package: str) -> ModuleType:
    try:
        return import_module(module_name, package=package)
    except ModuleNotFoundError as exc:
        if feature.check_missing(exc.name):
            raise feature.create_error(exc.name) from exc
        raise


def import_feature_attr(
    feature: SpecOptionalFeature, module_name: str, attr_name: str, package: str
) -> Any:
    return getattr(import_feature_module(feature, module_name, package), attr_name)
