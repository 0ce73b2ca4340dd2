"""Result/failure pair returned by repositories and the session."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from officehub.core.exceptions import OfficeHubException

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    data: T | None = None
    error: OfficeHubException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: T | None = None) -> Result[T]:
        return cls(data=data)

    @classmethod
    def failure(cls, error: OfficeHubException) -> Result[T]:
        return cls(error=error)
