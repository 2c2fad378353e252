"""
lazyseq - Data Models

Value records handed out by sequences, plus the pydantic models used to
describe pipelines declaratively.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, NamedTuple, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

F = TypeVar("F")
S = TypeVar("S")


@dataclass(frozen=True)
class Pair(Generic[F, S]):
    """Immutable record of two values, produced by ``Seq.pair_up``."""
    first: F
    second: S


class Lookup(NamedTuple):
    """Two-part lookup result: the value and whether one was found."""
    value: Any
    found: bool


NOT_FOUND = Lookup(None, False)


class BridgeStrategy(str, Enum):
    """How a push sequence is turned into a pull source"""
    AUTO = "auto"
    THREAD = "thread"


class OperationType(str, Enum):
    """Operation type enumeration for declarative pipelines"""
    MAP = "map"
    FILTER = "filter"
    TAKE = "take"
    TAKE_WHILE = "take_while"
    DROP = "drop"
    DROP_WHILE = "drop_while"
    ENUMERATE = "enumerate"
    CYCLE = "cycle"


_NEEDS_FUNCTION = {
    OperationType.MAP,
    OperationType.FILTER,
    OperationType.TAKE_WHILE,
    OperationType.DROP_WHILE,
}
_NEEDS_COUNT = {OperationType.TAKE, OperationType.DROP}


class OperationSpec(BaseModel):
    """One step of a declarative pipeline"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: OperationType = Field(..., description="Combinator to apply")
    function: Optional[Callable[..., Any]] = Field(
        None,
        description="Mapper or predicate for map/filter/take_while/drop_while"
    )
    count: Optional[int] = Field(
        None,
        description="Element count for take/drop"
    )

    @model_validator(mode="after")
    def check_arguments(self):
        """Each operation type carries exactly the argument it needs"""
        if self.type in _NEEDS_FUNCTION and self.function is None:
            raise ValueError(f"'{self.type.value}' requires a function")
        if self.type in _NEEDS_COUNT and self.count is None:
            raise ValueError(f"'{self.type.value}' requires a count")
        return self
