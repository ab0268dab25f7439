"""
Orchestrator - Registry.

============================================================
RESPONSIBILITY
============================================================
Ordered storage of optionally-named components.

- Insertion order is start order
- Push to the front or to the back
- Lookup by name returns the first match
- No removal: composition happens once, before the tree runs

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

from core.constants import ANONYMOUS_NAME_PREFIX

from .component import Component


logger = logging.getLogger(__name__)


# ============================================================
# NAMED COMPONENT
# ============================================================

@dataclass
class NamedComponent:
    """A component paired with the name it is registered under."""

    component: Component
    name: str


# ============================================================
# NAMED COMPONENT LIST
# ============================================================

class NamedComponentList:
    """
    Ordered list of zero or more named components.

    Names need not be unique. Anonymous entries are named
    `__anonymous<N>` where N is the list length before the insertion;
    names are never renumbered, so after a front insertion they no
    longer match positions.

    Not safe for concurrent mutation.
    """

    def __init__(self) -> None:
        self._list: List[NamedComponent] = []

    def _anonymous_name(self) -> str:
        return f"{ANONYMOUS_NAME_PREFIX}{len(self._list)}"

    # --------------------------------------------------------
    # Insertion
    # --------------------------------------------------------

    def push_back(self, component: Component, name: Optional[str] = None) -> NamedComponent:
        """Append a component, synthesizing a name if none is given."""
        named = NamedComponent(component, name if name is not None else self._anonymous_name())
        return self.push_back_named(named)

    def push_back_named(self, named: NamedComponent) -> NamedComponent:
        self._list.append(named)
        logger.debug(f"Registered component: {named.name} | position={len(self._list) - 1}")
        return named

    def push_front(self, component: Component, name: Optional[str] = None) -> NamedComponent:
        """Prepend a component, synthesizing a name if none is given."""
        named = NamedComponent(component, name if name is not None else self._anonymous_name())
        return self.push_front_named(named)

    def push_front_named(self, named: NamedComponent) -> NamedComponent:
        self._list.insert(0, named)
        logger.debug(f"Registered component: {named.name} | position=0")
        return named

    # --------------------------------------------------------
    # Lookup
    # --------------------------------------------------------

    def find_component(self, name: str) -> Optional[Component]:
        """Return the first component registered under name, or None."""
        for named in self._list:
            if named.name == name:
                return named.component
        return None

    def names(self) -> List[str]:
        return [named.name for named in self._list]

    def __len__(self) -> int:
        return len(self._list)

    def __iter__(self) -> Iterator[NamedComponent]:
        return iter(list(self._list))

    def __getitem__(self, index: int) -> NamedComponent:
        return self._list[index]

    def __repr__(self) -> str:
        return f"NamedComponentList({self.names()!r})"


__all__ = [
    "NamedComponent",
    "NamedComponentList",
]
