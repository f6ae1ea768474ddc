"""
Fact context for rule evaluation.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional

from shared.errors import UndefinedFactError


class Context(Mapping):
    """
    Read-only name -> fact mapping.

    A callable fact is invoked with the context every time it is looked up,
    so facts can be derived lazily from other facts. Results are not cached.

    The operands only rely on has_fact() and get_fact(); any object providing
    those two methods can stand in for a Context.
    """

    def __init__(self, facts: Optional[Mapping] = None, **kwargs: Any):
        self._facts: Dict[str, Any] = dict(facts or {})
        self._facts.update(kwargs)

    def has_fact(self, name: str) -> bool:
        return name in self._facts

    def get_fact(self, name: str) -> Any:
        try:
            fact = self._facts[name]
        except KeyError:
            raise UndefinedFactError(name) from None

        if callable(fact):
            return fact(self)
        return fact

    def __getitem__(self, name: str) -> Any:
        return self.get_fact(name)

    def __contains__(self, name: object) -> bool:
        return name in self._facts

    def __iter__(self) -> Iterator[str]:
        return iter(self._facts)

    def __len__(self) -> int:
        return len(self._facts)

    def __repr__(self) -> str:
        return f"Context({sorted(self._facts)!r})"
