"""Dead-symbol report assembly."""
from typing import Iterable, NamedTuple, Optional, Tuple

from .categorizer import Category
from .registry import SymbolRegistry


class DeadSymbol(NamedTuple):
    """An exported symbol nothing else references."""
    category: Category
    name: str
    defining_file: str


def assemble_report(registry: SymbolRegistry,
                    categories: Optional[Iterable[Category]] = None) -> Tuple[DeadSymbol, ...]:
    """Collect unused symbols in registration order.

    Args:
        registry: Registry after both passes
        categories: Categories to report (defaults to the registry's own)

    Returns:
        Unused symbols, ordered by file traversal then declaration order
    """
    wanted = frozenset(categories) if categories is not None else registry.categories
    return tuple(
        DeadSymbol(symbol.category, symbol.name, symbol.defining_file)
        for symbol in registry
        if not symbol.used and symbol.category in wanted
    )
