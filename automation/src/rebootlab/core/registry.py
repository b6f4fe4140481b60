from __future__ import annotations

from typing import Callable

from .model import CheckResult, RebootContext

CaseFn = Callable[[RebootContext], list[CheckResult]]


class CaseRegistry:
    def __init__(self) -> None:
        self._cases: dict[str, CaseFn] = {}

    def register(self, name: str, fn: CaseFn) -> None:
        if name in self._cases:
            raise ValueError(f"case already registered: {name}")
        self._cases[name] = fn

    def get(self, name: str) -> CaseFn:
        return self._cases[name]

    def names(self) -> list[str]:
        return list(self._cases)

    def resolve(self, selection: str) -> list[tuple[str, CaseFn]]:
        if selection == "all":
            return list(self._cases.items())
        if selection not in self._cases:
            raise KeyError(selection)
        return [(selection, self._cases[selection])]
