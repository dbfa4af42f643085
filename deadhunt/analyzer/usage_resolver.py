"""Second pass: find cross-file references to registered symbols.

Each detector recognizes one syntactic form of reference and reports the
candidate names it sees on a node. The resolver walks every tree once,
hands each node to the detectors registered for its type and marks the
matching registry entries as used.

Matching is by bare name only. There is no scope or binding analysis, so a
local variable that happens to share an exported symbol's name in another
file counts as a use of that symbol.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional
from tree_sitter import Node, Tree

from .export_registry import node_text, walk
from .parser import parse_path
from .registry import SymbolRegistry

logger = logging.getLogger(__name__)

# Elements whose `name` field is a markup tag name
MARKUP_ELEMENTS = {'jsx_opening_element', 'jsx_self_closing_element', 'jsx_closing_element'}
# Node types a tag or attribute name can be built from
MARKUP_NAME_PARTS = {'member_expression', 'nested_identifier', 'jsx_namespace_name'}


def _root_identifier(node: Optional[Node]) -> Optional[Node]:
    """Follow `A.B.C` down to `A`."""
    while node is not None and node.type in ('member_expression', 'nested_identifier'):
        obj = node.child_by_field_name('object')
        if obj is None and node.named_children:
            obj = node.named_children[0]
        node = obj
    if node is not None and node.type == 'identifier':
        return node
    return None


def is_markup_name(node: Node) -> bool:
    """True if node is part of a tag name or an attribute name.

    Those are markup identifiers, not expression identifiers.
    """
    child, parent = node, node.parent
    while parent is not None and parent.type in MARKUP_NAME_PARTS:
        child, parent = parent, parent.parent

    if parent is None:
        return False
    if parent.type == 'jsx_attribute':
        return parent.named_children[0] == child
    if parent.type in MARKUP_ELEMENTS:
        return parent.child_by_field_name('name') == child
    return False


class Detector(ABC):
    """Base class for one usage pattern."""

    #: Node types this detector inspects
    node_types: FrozenSet[str] = frozenset()

    @abstractmethod
    def names(self, node: Node) -> Iterator[str]:
        """Yield the candidate symbol names this node references."""


class ImportBindingDetector(Detector):
    """Names bound by import statements.

    Named imports report the exported name (`import { a as b }` -> `a`);
    default and namespace imports report their local binding.
    """

    node_types = frozenset({'import_statement'})

    def names(self, node: Node) -> Iterator[str]:
        for clause in node.named_children:
            if clause.type != 'import_clause':
                continue
            for child in clause.named_children:
                # import Button from './Button'
                if child.type == 'identifier':
                    yield node_text(child)

                # import * as icons from './icons'
                elif child.type == 'namespace_import':
                    for ns_child in child.named_children:
                        if ns_child.type == 'identifier':
                            yield node_text(ns_child)

                # import { useCounter, Props as P } from './hooks'
                elif child.type == 'named_imports':
                    for specifier in child.named_children:
                        if specifier.type != 'import_specifier':
                            continue
                        name_node = specifier.child_by_field_name('name')
                        if name_node is not None and name_node.type == 'identifier':
                            yield node_text(name_node)


class MarkupTagDetector(Detector):
    """Component usage through opening tags: `<Button />`, `<Layout.Header>`.

    Member-style tags resolve to their root identifier (`Layout`).
    """

    node_types = frozenset({'jsx_opening_element', 'jsx_self_closing_element'})

    def names(self, node: Node) -> Iterator[str]:
        # Fragments (<>...</>) have no name
        root = _root_identifier(node.child_by_field_name('name'))
        if root is not None:
            yield node_text(root)


class IdentifierDetector(Detector):
    """Every identifier token outside of markup names."""

    node_types = frozenset({
        'identifier',
        'property_identifier',
        'shorthand_property_identifier',
        'shorthand_property_identifier_pattern',
        'private_property_identifier',
        'statement_identifier',
        'type_identifier',
    })

    def names(self, node: Node) -> Iterator[str]:
        if is_markup_name(node):
            return
        yield node_text(node).lstrip('#')


class TypeReferenceDetector(Detector):
    """Named type references in annotations, generics and heritage clauses.

    For a qualified reference (`Api.Props`) only the rightmost segment is
    reported; the grammar already isolates it as the `type_identifier`.
    """

    node_types = frozenset({'type_identifier'})

    # Parents whose `name` field declares a type rather than referencing one
    DECLARING_PARENTS = {
        'interface_declaration',
        'type_alias_declaration',
        'class_declaration',
        'abstract_class_declaration',
        'class',
        'type_parameter',
        'mapped_type_clause',
    }

    def names(self, node: Node) -> Iterator[str]:
        parent = node.parent
        if parent is not None:
            if parent.type == 'infer_type':
                return
            if parent.type in self.DECLARING_PARENTS and parent.child_by_field_name('name') == node:
                return
        yield node_text(node)


DEFAULT_DETECTORS = (
    ImportBindingDetector(),
    MarkupTagDetector(),
    IdentifierDetector(),
    TypeReferenceDetector(),
)


class UsageResolver:
    """Mark registry symbols as used when another file references them."""

    def __init__(self, registry: SymbolRegistry, detectors: Optional[Iterable[Detector]] = None):
        """Initialize resolver.

        Args:
            registry: Registry populated by the export pass
            detectors: Detectors to run (defaults to all four)
        """
        self.registry = registry
        self.detectors = tuple(detectors) if detectors is not None else DEFAULT_DETECTORS
        self._dispatch: Dict[str, List[Detector]] = {}
        for detector in self.detectors:
            for node_type in detector.node_types:
                self._dispatch.setdefault(node_type, []).append(detector)

    def resolve(self, files: Iterable[str],
                on_file: Optional[Callable[[str], None]] = None) -> List[str]:
        """Scan every file for references.

        Args:
            files: Usage-pass file paths
            on_file: Optional callback invoked after each file (progress)

        Returns:
            Files skipped because they could not be read or parsed
        """
        skipped = []
        for file_path in files:
            if not self.resolve_file(file_path):
                skipped.append(file_path)
            if on_file:
                on_file(file_path)
        return skipped

    def resolve_file(self, file_path: str) -> bool:
        """Parse one file and mark what it references.

        Returns:
            False if the file was skipped
        """
        tree = parse_path(file_path)
        if tree is None:
            return False
        marked = self.resolve_tree(tree, file_path)
        logger.debug("%s: %d references to registered symbols", file_path, marked)
        return True

    def resolve_tree(self, tree: Tree, file_path: str) -> int:
        """Run the detectors over a parsed tree.

        Returns:
            Number of markings made (repeat markings included)
        """
        marked = 0
        for node in walk(tree.root_node):
            for detector in self._dispatch.get(node.type, ()):
                for name in detector.names(node):
                    if name in self.registry and self.registry.mark_used(name, file_path):
                        marked += 1
        return marked
