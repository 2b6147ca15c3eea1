"""Tests for selector scoping and nesting flattening."""

import pytest

from stylescope.model import ScopedAtRule, ScopedRule
from stylescope.parser import InterpolationError, parse_sheet
from stylescope.transforms import Scoper, scope_sheet


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _scope(source: str, class_name: str | None = "Cx") -> tuple:
    return scope_sheet(parse_sheet(source), class_name)


def _selectors(source: str, class_name: str | None = "Cx") -> list[tuple[str, ...]]:
    return [item.selectors for item in _scope(source, class_name)]


# ---------------------------------------------------------------------------
# Top-level qualification
# ---------------------------------------------------------------------------


class TestTopLevel:
    @pytest.mark.parametrize(
        "selector, expected",
        [
            (".a", ".Cx.a"),
            ("#main", ".Cx#main"),
            ("div", "div.Cx"),
            ("div.a", "div.Cx.a"),
            ("*", "*.Cx"),
            (":hover", ".Cx:hover"),
            ("::after", ".Cx::after"),
            (":root", ".Cx"),
            (":root.big", ".Cx.big"),
            ("> .child", ".Cx > .child"),
            ("+ .sibling", ".Cx + .sibling"),
            (".a .b", ".Cx.a .b"),
            ("div > span", "div.Cx > span"),
            ('[type="text"]', '.Cx[type="text"]'),
            ("&.active", ".Cx.active"),
            (".theme-dark &", ".theme-dark .Cx"),
        ],
    )
    def test_scope_class_joins_first_compound(self, selector: str, expected: str):
        assert _selectors(f"{selector} {{ color: red; }}") == [(expected,)]

    def test_root_declarations_target_scope_class(self):
        assert _scope("color: red; margin: 0;") == (
            ScopedRule(selectors=(".Cx",), declarations=(("color", "red"), ("margin", "0"))),
        )

    def test_selector_list(self):
        assert _selectors(".a, .b { color: red; }") == [(".Cx.a", ".Cx.b")]

    def test_every_emitted_selector_carries_the_class(self):
        source = ".a { x: 1; .b { y: 2; &:hover { z: 3; } } } div, :root { w: 4; }"
        for selectors in _selectors(source):
            for selector in selectors:
                assert ".Cx" in selector


# ---------------------------------------------------------------------------
# Nesting
# ---------------------------------------------------------------------------


class TestNesting:
    def test_nested_rule_becomes_descendant(self):
        assert _scope(".a { color: red; .b { color: blue; } }") == (
            ScopedRule(selectors=(".Cx.a",), declarations=(("color", "red"),)),
            ScopedRule(selectors=(".Cx.a .b",), declarations=(("color", "blue"),)),
        )

    def test_nesting_marker_is_replaced_by_parent(self):
        assert _scope(".a { &:hover { color: green; } }") == (
            ScopedRule(selectors=(".Cx.a:hover",), declarations=(("color", "green"),)),
        )

    def test_marker_after_ancestor(self):
        assert _selectors(".a { .theme-dark & { color: white; } }") == [(".theme-dark .Cx.a",)]

    def test_marker_list_includes_parent(self):
        assert _selectors(".a { &, & input { color: red; } }") == [(".Cx.a", ".Cx.a input")]

    def test_leading_combinator(self):
        assert _selectors(".a { > .b { color: red; } }") == [(".Cx.a > .b",)]

    def test_cross_product_is_parent_major(self):
        assert _selectors(".a, .b { .c, .d { color: red; } }") == [
            (".Cx.a .c", ".Cx.a .d", ".Cx.b .c", ".Cx.b .d"),
        ]

    def test_deep_nesting(self):
        assert _selectors(".a { .b { .c { color: red; } } }") == [(".Cx.a .b .c",)]

    def test_parent_declarations_come_before_nested_rules(self):
        assert _selectors(".a { .b { x: 1; } color: red; }") == [(".Cx.a",), (".Cx.a .b",)]

    def test_rules_without_declarations_are_not_emitted(self):
        assert _selectors(".a { .b { } }") == []

    def test_sibling_rules_are_not_merged(self):
        assert _scope(".a { color: red; } .a { color: blue; }") == (
            ScopedRule(selectors=(".Cx.a",), declarations=(("color", "red"),)),
            ScopedRule(selectors=(".Cx.a",), declarations=(("color", "blue"),)),
        )

    def test_dangling_declarations_are_dropped(self):
        assert _scope(".a { color red; width: 10px; }") == (
            ScopedRule(selectors=(".Cx.a",), declarations=(("width", "10px"),)),
        )


# ---------------------------------------------------------------------------
# At-rules
# ---------------------------------------------------------------------------


class TestAtRules:
    def test_media_wraps_scoped_rules(self):
        assert _scope("@media (min-width: 600px) { .a { color: red; } }") == (
            ScopedAtRule(
                prelude="@media (min-width: 600px)",
                items=(ScopedRule(selectors=(".Cx.a",), declarations=(("color", "red"),)),),
            ),
        )

    def test_media_nested_in_rule_uses_parent_selector(self):
        assert _scope(".a { @media print { display: none; } }") == (
            ScopedAtRule(
                prelude="@media print",
                items=(ScopedRule(selectors=(".Cx.a",), declarations=(("display", "none"),)),),
            ),
        )

    def test_root_declarations_in_media(self):
        (media,) = _scope("@media print { color: black; }")
        assert media.items == (ScopedRule(selectors=(".Cx",), declarations=(("color", "black"),)),)

    def test_empty_media_is_skipped(self):
        assert _scope("@media print { }") == ()
        assert _scope("@media print { .a { } }") == ()

    def test_keyframes_are_not_scoped(self):
        assert _scope("@keyframes fade { from { opacity: 0; } to { opacity: 1; } }") == (
            ScopedAtRule(
                prelude="@keyframes fade",
                items=(
                    ScopedRule(selectors=("from",), declarations=(("opacity", "0"),)),
                    ScopedRule(selectors=("to",), declarations=(("opacity", "1"),)),
                ),
            ),
        )

    def test_keyframes_inside_rule_are_not_scoped(self):
        (frames,) = _scope(".a { @keyframes spin { to { rotate: 1turn; } } }")
        assert frames.items[0].selectors == ("to",)

    def test_empty_keyframes_are_kept(self):
        assert _scope("@keyframes nothing { }") == (ScopedAtRule(prelude="@keyframes nothing", items=()),)

    def test_font_face_descriptors(self):
        assert _scope("@font-face { font-family: Foo; src: url(foo.woff); }") == (
            ScopedAtRule(
                prelude="@font-face",
                items=(
                    ScopedRule(
                        selectors=(),
                        declarations=(("font-family", "Foo"), ("src", "url(foo.woff)")),
                    ),
                ),
            ),
        )

    def test_supports_inside_media(self):
        (media,) = _scope("@media screen { @supports (display: grid) { .a { display: grid; } } }")
        (supports,) = media.items
        assert supports.prelude == "@supports (display: grid)"
        assert supports.items[0].selectors == (".Cx.a",)


# ---------------------------------------------------------------------------
# Global styles
# ---------------------------------------------------------------------------


class TestGlobal:
    def test_selectors_are_kept_as_written(self):
        assert _selectors("body, .a > p { margin: 0; }", None) == [("body", ".a > p")]

    def test_root_declarations_target_root(self):
        assert _selectors("color: red;", None) == [(":root",)]

    def test_marker_resolves_to_root(self):
        assert _selectors("&.dark { color: white; }", None) == [(":root.dark",)]

    def test_nesting_still_flattens(self):
        assert _selectors(".a { &:hover { color: blue; } .b { color: red; } }", None) == [
            (".a:hover",),
            (".a .b",),
        ]

    def test_scoper_root(self):
        assert str(Scoper(None).root) == ":root"
        assert str(Scoper("Cx").root) == ".Cx"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestUnresolvedPlaceholders:
    def test_placeholder_in_value(self):
        with pytest.raises(InterpolationError) as exc_info:
            _scope("color: ${fg};")
        assert exc_info.value.offset == 7

    def test_placeholder_in_selector(self):
        with pytest.raises(InterpolationError):
            _scope("${sel} { color: red; }")
