"""Ok / Err outcomes returned across the pipeline boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .exceptions import TokenError


@dataclass(frozen=True)
class Ok:
    value: Any = None

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Err:
    message: str

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise TokenError(self.message)


Result = Union[Ok, Err]
