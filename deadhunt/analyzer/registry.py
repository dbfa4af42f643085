"""In-memory registry of exported symbols shared by both analysis passes."""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, FrozenSet

from .categorizer import Category

logger = logging.getLogger(__name__)


@dataclass
class Symbol:
    """One exported declaration."""
    name: str
    defining_file: str
    category: Category
    used: bool = False


class SymbolRegistry:
    """Name -> Symbol mapping with a fixed set of tracked categories.

    Write discipline: the export pass only calls `register`, the usage pass
    only calls `mark_used`. Nothing is ever removed.

    Symbols are keyed by bare name. When two files export the same name the
    later registration replaces the earlier one (the earlier file and its
    `used` state are lost) while keeping the original insertion position.
    Collisions are logged, not resolved.
    """

    def __init__(self, categories: Iterable[Category]):
        self.categories: FrozenSet[Category] = frozenset(categories)
        self._symbols: Dict[str, Symbol] = {}

    def register(self, name: Optional[str], file_path: str, category: Category) -> Optional[Symbol]:
        """Record an exported symbol if its category is tracked.

        Args:
            name: Exported binding name (empty/None is ignored)
            file_path: File declaring the symbol
            category: Category assigned at declaration time

        Returns:
            The new Symbol, or None if nothing was registered
        """
        if not name or category not in self.categories:
            return None

        previous = self._symbols.get(name)
        if previous is not None and previous.defining_file != file_path:
            logger.warning(
                "Export '%s' in %s replaces the one from %s",
                name, file_path, previous.defining_file
            )

        symbol = Symbol(name=name, defining_file=file_path, category=category)
        self._symbols[name] = symbol
        return symbol

    def mark_used(self, name: str, file_path: str) -> bool:
        """Flag a symbol as used when referenced from a file other than its own.

        Unknown names are ignored. Marking is monotonic.

        Returns:
            True if `name` is registered and `file_path` is not its defining file
        """
        symbol = self._symbols.get(name)
        if symbol is None or symbol.defining_file == file_path:
            return False
        symbol.used = True
        return True

    def get(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)
