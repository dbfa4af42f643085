"""Tests for the usage pass and its four detectors."""
import pytest

from deadhunt.analyzer.categorizer import Category
from deadhunt.analyzer.registry import SymbolRegistry
from deadhunt.analyzer.usage_resolver import (
    Detector,
    IdentifierDetector,
    ImportBindingDetector,
    MarkupTagDetector,
    TypeReferenceDetector,
    UsageResolver,
)

DEFINING_FILE = "src/defs.tsx"
OTHER_FILE = "src/other.tsx"


def make_registry(*names):
    registry = SymbolRegistry(list(Category))
    for name, category in names:
        registry.register(name, DEFINING_FILE, category)
    return registry


def used_names(registry):
    return {symbol.name for symbol in registry if symbol.used}


class TestImportBindingDetector:

    @pytest.fixture
    def resolver_for(self):
        def _make(registry):
            return UsageResolver(registry, detectors=[ImportBindingDetector()])
        return _make

    def test_named_import(self, resolver_for, parse):
        registry = make_registry(("useCounter", Category.HOOK))
        resolver_for(registry).resolve_tree(
            parse("import { useCounter } from './defs';\n"), OTHER_FILE)
        assert used_names(registry) == {"useCounter"}

    def test_aliased_import_uses_exported_name(self, resolver_for, parse):
        registry = make_registry(("Button", Category.COMPONENT), ("B", Category.COMPONENT))
        resolver_for(registry).resolve_tree(
            parse("import { Button as B } from './defs';\n"), OTHER_FILE)
        assert used_names(registry) == {"Button"}

    def test_default_and_namespace_imports_use_local_name(self, resolver_for, parse):
        registry = make_registry(("Card", Category.COMPONENT), ("icons", Category.FUNCTION))
        resolver_for(registry).resolve_tree(parse("""
            import Card from './defs';
            import * as icons from './icons';
        """), OTHER_FILE)
        assert used_names(registry) == {"Card", "icons"}

    def test_type_only_import(self, resolver_for, parse):
        registry = make_registry(("Props", Category.TYPE))
        resolver_for(registry).resolve_tree(
            parse("import type { Props } from './defs';\n"), OTHER_FILE)
        assert used_names(registry) == {"Props"}

    def test_import_in_defining_file_does_not_count(self, resolver_for, parse):
        registry = make_registry(("useCounter", Category.HOOK))
        resolver_for(registry).resolve_tree(
            parse("import { useCounter } from './defs';\n"), DEFINING_FILE)
        assert used_names(registry) == set()


class TestMarkupTagDetector:

    @pytest.fixture
    def resolver_for(self):
        def _make(registry):
            return UsageResolver(registry, detectors=[MarkupTagDetector()])
        return _make

    def test_self_closing_tag(self, resolver_for, parse):
        registry = make_registry(("Button", Category.COMPONENT))
        resolver_for(registry).resolve_tree(
            parse("const view = <Button />;\n"), OTHER_FILE)
        assert used_names(registry) == {"Button"}

    def test_opening_tag(self, resolver_for, parse):
        registry = make_registry(("Panel", Category.COMPONENT))
        resolver_for(registry).resolve_tree(
            parse("const view = <Panel>text</Panel>;\n"), OTHER_FILE)
        assert used_names(registry) == {"Panel"}

    def test_member_tag_resolves_to_root(self, resolver_for, parse):
        registry = make_registry(("Layout", Category.COMPONENT), ("Header", Category.COMPONENT))
        resolver_for(registry).resolve_tree(
            parse("const view = <Layout.Header />;\n"), OTHER_FILE)
        assert used_names(registry) == {"Layout"}

    def test_fragments_and_expressions_are_ignored(self, resolver_for, parse):
        registry = make_registry(("Button", Category.COMPONENT))
        resolver_for(registry).resolve_tree(
            parse("const view = <>{Button}</>;\n"), OTHER_FILE)
        assert used_names(registry) == set()


class TestIdentifierDetector:

    @pytest.fixture
    def resolver_for(self):
        def _make(registry):
            return UsageResolver(registry, detectors=[IdentifierDetector()])
        return _make

    def test_call_without_import(self, resolver_for, parse):
        registry = make_registry(("helperFn", Category.FUNCTION))
        resolver_for(registry).resolve_tree(parse("helperFn();\n"), OTHER_FILE)
        assert used_names(registry) == {"helperFn"}

    def test_member_expression_base_and_property(self, resolver_for, parse):
        registry = make_registry(("api", Category.FUNCTION), ("fetchAll", Category.FUNCTION))
        resolver_for(registry).resolve_tree(parse("api.fetchAll();\n"), OTHER_FILE)
        assert used_names(registry) == {"api", "fetchAll"}

    def test_same_name_local_still_counts(self, resolver_for, parse):
        # Name-only matching: an unrelated local binding is a "use"
        registry = make_registry(("formatDate", Category.FUNCTION))
        resolver_for(registry).resolve_tree(parse("""
            function render() {
                const formatDate = (d) => String(d);
                return formatDate(1);
            }
        """), OTHER_FILE)
        assert used_names(registry) == {"formatDate"}

    def test_markup_names_are_not_identifiers(self, resolver_for, parse):
        registry = make_registry(
            ("Button", Category.COMPONENT),
            ("onClick", Category.FUNCTION),
            ("Layout", Category.COMPONENT),
        )
        resolver_for(registry).resolve_tree(
            parse("const view = <Layout.Header><Button onClick={1} /></Layout.Header>;\n"),
            OTHER_FILE,
        )
        assert used_names(registry) == set()

    def test_identifier_inside_markup_expression(self, resolver_for, parse):
        registry = make_registry(("handleClick", Category.FUNCTION))
        resolver_for(registry).resolve_tree(
            parse("const view = <button onClick={handleClick} />;\n"), OTHER_FILE)
        assert used_names(registry) == {"handleClick"}

    def test_same_file_occurrence_does_not_count(self, resolver_for, parse):
        registry = make_registry(("helperFn", Category.FUNCTION))
        resolver_for(registry).resolve_tree(parse("""
            export const helperFn = () => {};
            helperFn();
        """), DEFINING_FILE)
        assert used_names(registry) == set()


class TestTypeReferenceDetector:

    @pytest.fixture
    def resolver_for(self):
        def _make(registry):
            return UsageResolver(registry, detectors=[TypeReferenceDetector()])
        return _make

    def test_parameter_annotation(self, resolver_for, parse):
        registry = make_registry(("Props", Category.TYPE))
        resolver_for(registry).resolve_tree(parse("function f(p: Props) {}\n"), OTHER_FILE)
        assert used_names(registry) == {"Props"}

    def test_generic_argument_and_heritage(self, resolver_for, parse):
        registry = make_registry(("User", Category.TYPE), ("Base", Category.TYPE))
        resolver_for(registry).resolve_tree(parse("""
            const users: Array<User> = [];
            interface Admin extends Base {}
        """), OTHER_FILE)
        assert used_names(registry) == {"User", "Base"}

    def test_qualified_reference_checks_rightmost_only(self, resolver_for, parse):
        registry = make_registry(("Api", Category.COMPONENT), ("Props", Category.TYPE))
        resolver_for(registry).resolve_tree(parse("let p: Api.Props;\n"), OTHER_FILE)
        assert used_names(registry) == {"Props"}

    def test_declarations_are_not_references(self, resolver_for, parse):
        registry = make_registry(("Props", Category.TYPE), ("Alias", Category.TYPE), ("T", Category.COMPONENT))
        resolver_for(registry).resolve_tree(parse("""
            interface Props { a: number }
            type Alias<T> = { value: number };
        """), OTHER_FILE)
        assert used_names(registry) == set()


class TestUsageResolver:

    def test_each_symbol_marked_by_a_different_detector(self, parse):
        registry = make_registry(
            ("useCounter", Category.HOOK),
            ("Button", Category.COMPONENT),
            ("helperFn", Category.FUNCTION),
            ("Props", Category.TYPE),
            ("unusedThing", Category.FUNCTION),
        )
        UsageResolver(registry).resolve_tree(parse("""
            import { useCounter } from './defs';
            helperFn();
            function f(p: Props) { return <Button />; }
        """), OTHER_FILE)
        assert used_names(registry) == {"useCounter", "Button", "helperFn", "Props"}

    def test_unknown_identifiers_are_not_added(self, parse):
        registry = make_registry(("helperFn", Category.FUNCTION))
        UsageResolver(registry).resolve_tree(parse("somethingElse();\nconst w = <Widget />;\n"), OTHER_FILE)
        assert [s.name for s in registry] == ["helperFn"]
        assert used_names(registry) == set()

    def test_resolving_twice_is_idempotent(self, write_tree):
        root = write_tree({
            "defs.ts": "export const helperFn = () => {};\nexport const orphan = 1;\n",
            "use.ts": "helperFn();\n",
        })
        registry = SymbolRegistry(list(Category))
        registry.register("helperFn", str(root / "defs.ts"), Category.FUNCTION)
        registry.register("orphan", str(root / "defs.ts"), Category.FUNCTION)
        files = [str(root / "defs.ts"), str(root / "use.ts")]

        resolver = UsageResolver(registry)
        resolver.resolve(files)
        first = {s.name: s.used for s in registry}
        resolver.resolve(files)

        assert {s.name: s.used for s in registry} == first == {"helperFn": True, "orphan": False}

    def test_unparseable_file_is_skipped(self, write_tree):
        root = write_tree({
            "broken.tsx": "helperFn( <<< \n",
            "ok.ts": "const x = 1;\n",
        })
        registry = make_registry(("helperFn", Category.FUNCTION))
        files = [str(root / "broken.tsx"), str(root / "ok.ts")]

        skipped = UsageResolver(registry).resolve(files)

        assert skipped == [str(root / "broken.tsx")]
        assert used_names(registry) == set()

    def test_detector_must_implement_names(self):
        class Incomplete(Detector):
            node_types = frozenset({'identifier'})

        with pytest.raises(TypeError):
            Incomplete()

    def test_custom_detector(self, parse):
        class CallDetector(Detector):
            node_types = frozenset({'call_expression'})

            def names(self, node):
                function = node.child_by_field_name('function')
                if function is not None and function.type == 'identifier':
                    yield function.text.decode()

        registry = make_registry(("helperFn", Category.FUNCTION), ("other", Category.FUNCTION))
        tree = parse("helperFn(); const other = 1;")

        UsageResolver(registry, detectors=[CallDetector()]).resolve_tree(tree, OTHER_FILE)

        assert used_names(registry) == {"helperFn"}
