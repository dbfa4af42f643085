"""First pass: discover exported declarations and register them."""
import logging
from typing import Callable, Iterable, Iterator, List, Optional, Tuple
from tree_sitter import Node, Tree

from .categorizer import Category, categorize
from .parser import parse_path
from .registry import SymbolRegistry

logger = logging.getLogger(__name__)


def node_text(node: Node) -> str:
    return node.text.decode('utf-8', errors='ignore')


def walk(node: Node) -> Iterator[Node]:
    """Iteratively traverse a tree in source order, yielding named nodes."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        # Reversed so the leftmost child is visited first
        stack.extend(reversed(current.named_children))


class ExportRegistryBuilder:
    """Populate a SymbolRegistry from the export statements of each file.

    Recognized forms:
        export interface X / export type X = ... / export enum X   -> Type
        export const a = ..., b = ...  (let/var too)               -> by name
        export function f() {}                                     -> by name
        export default Name / export default function Name() {}   -> by name

    Anonymous default exports and destructured declarators have no single
    name and are never registered. Neither are named class exports.
    """

    TYPE_DECLARATIONS = {
        'interface_declaration',
        'type_alias_declaration',
        'enum_declaration',
    }
    VARIABLE_DECLARATIONS = {'lexical_declaration', 'variable_declaration'}
    FUNCTION_DECLARATIONS = {'function_declaration', 'generator_function_declaration'}

    def __init__(self, registry: SymbolRegistry):
        self.registry = registry

    def build(self, files: Iterable[str],
              on_file: Optional[Callable[[str], None]] = None) -> List[str]:
        """Register the exports of every file, in order.

        Args:
            files: Ordered file paths; their order becomes report order
            on_file: Optional callback invoked after each file (progress)

        Returns:
            Files skipped because they could not be read or parsed
        """
        skipped = []
        for file_path in files:
            if not self.register_file(file_path):
                skipped.append(file_path)
            if on_file:
                on_file(file_path)
        return skipped

    def register_file(self, file_path: str) -> bool:
        """Parse one file and register its exports.

        Returns:
            False if the file was skipped
        """
        tree = parse_path(file_path)
        if tree is None:
            return False

        exports = self.extract_exports(tree)
        for name, category in exports:
            self.registry.register(name, file_path, category)
        logger.debug("%s: %d exports", file_path, len(exports))
        return True

    def extract_exports(self, tree: Tree) -> List[Tuple[str, Category]]:
        """List (name, category) for every nameable export, in declaration order."""
        exports = []
        for node in walk(tree.root_node):
            if node.type == 'export_statement':
                exports.extend(self._extract_from_export(node))
        return exports

    def _extract_from_export(self, node: Node) -> List[Tuple[str, Category]]:
        if self._is_default_export(node):
            name = self._default_export_name(node)
            return [(name, categorize(name))] if name else []

        declaration = node.child_by_field_name('declaration')
        if declaration is None:
            # export { a, b } / export * from '...'
            return []

        if declaration.type == 'ambient_declaration':
            # export declare const x: number;
            inner = declaration.named_children
            if not inner:
                return []
            declaration = inner[0]

        if declaration.type in self.TYPE_DECLARATIONS:
            name_node = declaration.child_by_field_name('name')
            if name_node is None:
                return []
            return [(node_text(name_node), Category.TYPE)]

        if declaration.type in self.VARIABLE_DECLARATIONS:
            found = []
            for declarator in declaration.named_children:
                if declarator.type != 'variable_declarator':
                    continue
                name_node = declarator.child_by_field_name('name')
                # Destructuring patterns bind no single name
                if name_node is not None and name_node.type == 'identifier':
                    name = node_text(name_node)
                    found.append((name, categorize(name)))
            return found

        if declaration.type in self.FUNCTION_DECLARATIONS:
            name_node = declaration.child_by_field_name('name')
            if name_node is None:
                return []
            name = node_text(name_node)
            return [(name, categorize(name))]

        return []

    @staticmethod
    def _is_default_export(node: Node) -> bool:
        return any(child.type == 'default' for child in node.children)

    @staticmethod
    def _default_export_name(node: Node) -> Optional[str]:
        """Resolve the binding name of `export default ...`, if any.

        Either a bare identifier (`export default Button`) or the own name
        of a function/class (`export default function Button() {}`).
        """
        exported = node.child_by_field_name('declaration') or node.child_by_field_name('value')
        while exported is not None and exported.type == 'parenthesized_expression':
            exported = exported.named_children[0] if exported.named_children else None
        if exported is None:
            return None

        if exported.type == 'identifier':
            return node_text(exported)

        name_node = exported.child_by_field_name('name')
        if name_node is not None:
            return node_text(name_node)
        return None
