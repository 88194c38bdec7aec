"""Domain Types - value objects that flow between parser, registry, dispatcher and store.

Invariants:
    - ParsedCall lives for one dispatch; raw_args keep the caller's order
    - CallRecord.id is assigned by the store, unique and strictly increasing
    - ModuleDescriptor.functions preserves the order of the module's FUNCTIONS table
    - ModuleHandle is rebuilt by every resolve (never cached across calls)

Design Decisions:
    - Frozen dataclasses for records crossing the API boundary: to_dict() is the wire form
    - RecordId as NewType: zero runtime cost, distinguishes ids from limits/counts
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, NewType


RecordId = NewType("RecordId", int)


@dataclass(frozen=True)
class ParsedCall:
    """Decomposed call expression: module.function(raw_args...)."""
    module_name: str
    function_name: str
    raw_args: tuple[str, ...] = ()


@dataclass(frozen=True)
class CallRecord:
    """One persisted call and its (deserialized) result."""
    id: RecordId
    call_string: str
    result: Any = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "call_string": self.call_string,
            "result": self.result,
        }


@dataclass(frozen=True)
class ModuleDescriptor:
    """Listing entry for one loadable handler module."""
    name: str
    functions: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"name": self.name, "functions": list(self.functions)}


@dataclass
class ModuleHandle:
    """A freshly loaded handler module and its explicit export table."""
    name: str
    functions: dict[str, Callable[..., Any]] = field(default_factory=dict)
    origin: str = ""

    def describe(self) -> ModuleDescriptor:
        return ModuleDescriptor(name=self.name, functions=tuple(self.functions))
