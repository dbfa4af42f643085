"""Naming-convention classification of exported symbols."""
import re
from enum import Enum

_UPPERCASE_START = re.compile(r'^[A-Z]')


class Category(str, Enum):
    """Kinds of exported symbols the hunter can track."""
    COMPONENT = "Component"
    HOOK = "Hook"
    FUNCTION = "Function"
    TYPE = "Type"

    @classmethod
    def parse(cls, value: str) -> 'Category':
        """Look up a category by its display name, case-insensitively.

        Raises:
            ValueError: If value names no category
        """
        for category in cls:
            if category.value.lower() == value.strip().lower():
                return category
        valid = ", ".join(c.value for c in cls)
        raise ValueError(f"Unknown category '{value}' (expected one of: {valid})")


def categorize(name: str) -> Category:
    """Classify a declared (non-type) name.

    `use` prefix wins over casing, so `useThing` and `UseThing` differ:
    the first is a Hook, the second a Component. Interfaces, type aliases
    and enums never come through here; they are always `Category.TYPE`.
    """
    if name.startswith("use"):
        return Category.HOOK
    if _UPPERCASE_START.match(name):
        return Category.COMPONENT
    return Category.FUNCTION
