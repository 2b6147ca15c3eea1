"""Tests for the style registry: dedup, lifecycle, events and concurrency."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

import stylescope.registry.registry as registry_module
from stylescope import RegistryConfig, Style, StyleRegistry, compile_style, get_registry, reset_registry
from stylescope.events import EventBus, StyleRegistered, StyleUnregistered
from stylescope.parser import InterpolationError, ParseError, StyleError, TokenError
from stylescope.registry import class_name_for, fingerprint

NESTED = ".a { color: red; .b { color: blue; } }"


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def registry() -> StyleRegistry:
    return StyleRegistry()


@pytest.fixture()
def parse_calls(monkeypatch) -> list[str]:
    """Record every source the registry parses."""
    calls: list[str] = []
    real_parse = registry_module.parse_sheet

    def counting(source: str):
        calls.append(source)
        return real_parse(source)

    monkeypatch.setattr(registry_module, "parse_sheet", counting)
    return calls


# ---------------------------------------------------------------------------
# Compile
# ---------------------------------------------------------------------------


class TestCompile:
    def test_returns_scoped_css(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        cls = style.class_name
        assert style.css_text == f".{cls}.a {{\n  color: red;\n}}\n.{cls}.a .b {{\n  color: blue;\n}}"

    def test_class_name_format(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        prefix, _, suffix = style.class_name.partition("-")
        assert prefix == "stylescope"
        assert len(suffix) == 8
        assert set(suffix) <= set("abcdefghijklmnopqrstuvwxyz234567")

    def test_class_name_derives_from_fingerprint(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        assert style.fingerprint == fingerprint(NESTED)
        assert style.class_name == class_name_for(style.fingerprint)

    def test_same_across_registries(self):
        first = StyleRegistry().compile(NESTED)
        second = StyleRegistry().compile(NESTED)
        assert first is not second
        assert first.class_name == second.class_name
        assert first.css_text == second.css_text

    def test_custom_prefix_and_length(self):
        style = StyleRegistry(RegistryConfig(class_prefix="x", hash_length=12)).compile(NESTED)
        assert style.class_name.startswith("x-")
        assert len(style.class_name) == 14

    def test_custom_indent(self):
        style = StyleRegistry(RegistryConfig(indent="\t")).compile("color: red;")
        assert style.css_text == f".{style.class_name} {{\n\tcolor: red;\n}}"

    def test_placeholder_values(self, registry: StyleRegistry):
        style = registry.compile("color: ${fg};", {"fg": "red"})
        assert "color: red;" in style.css_text

    def test_global_style(self, registry: StyleRegistry):
        style = registry.compile("body { margin: 0; }", is_global=True)
        assert style.is_global
        assert style.css_text == "body {\n  margin: 0;\n}"

    def test_warnings_for_dangling_declarations(self, registry: StyleRegistry):
        style = registry.compile(".a { color red; width: 1px; }")
        (warning,) = style.warnings
        assert warning.rule == "dangling_declaration"
        assert warning.is_warning
        assert "width: 1px;" in style.css_text
        assert "color red" not in style.css_text

    def test_custom_transforms_run_after_expansion(self):
        class Tag:
            def __init__(self):
                self.seen = []

            def apply(self, sheet):
                self.seen.append(sheet)
                return sheet

        tag = Tag()
        StyleRegistry(transforms=[tag]).compile("color: ${fg};", {"fg": "red"})
        (sheet,) = tag.seen
        assert str(sheet.contents[0].declarations[0]) == "color: red"


class TestCompileErrors:
    def test_token_error(self, registry: StyleRegistry):
        with pytest.raises(TokenError):
            registry.compile('content: "open')

    def test_parse_error(self, registry: StyleRegistry):
        with pytest.raises(ParseError):
            registry.compile(".a { color: red;")

    def test_missing_placeholder_value(self, registry: StyleRegistry):
        with pytest.raises(InterpolationError):
            registry.compile("color: ${fg};")

    def test_errors_share_a_base_class(self, registry: StyleRegistry):
        with pytest.raises(StyleError):
            registry.compile("}")

    def test_failures_are_not_cached(self, registry: StyleRegistry, parse_calls: list[str]):
        for _ in range(2):
            with pytest.raises(ParseError):
                registry.compile(".a {")
        assert len(parse_calls) == 2
        assert len(registry) == 0


# ---------------------------------------------------------------------------
# Deduplication
# ---------------------------------------------------------------------------


class TestDeduplication:
    def test_same_source_shares_one_style(self, registry: StyleRegistry):
        first = registry.compile(NESTED)
        second = registry.compile(NESTED)
        assert first is second
        assert first.ref_count == 2
        assert len(registry) == 1

    def test_cache_hit_does_not_reparse(self, registry: StyleRegistry, parse_calls: list[str]):
        registry.compile(NESTED)
        registry.compile(NESTED)
        assert parse_calls == [NESTED]

    def test_indentation_is_ignored(self, registry: StyleRegistry):
        first = registry.compile("color: red;")
        second = registry.compile("\n    color: red;\n\n")
        assert first is second

    def test_values_change_the_fingerprint(self, registry: StyleRegistry):
        red = registry.compile("color: ${c};", {"c": "red"})
        blue = registry.compile("color: ${c};", {"c": "blue"})
        assert red.class_name != blue.class_name
        assert len(registry) == 2

    def test_value_order_does_not_matter(self, registry: StyleRegistry):
        first = registry.compile("margin: ${a} ${b};", {"a": 1, "b": 2})
        second = registry.compile("margin: ${a} ${b};", {"b": 2, "a": 1})
        assert first is second

    def test_global_flag_changes_the_fingerprint(self, registry: StyleRegistry):
        scoped = registry.compile("color: red;")
        unscoped = registry.compile("color: red;", is_global=True)
        assert scoped is not unscoped
        assert scoped.class_name != unscoped.class_name

    def test_different_source(self, registry: StyleRegistry):
        assert registry.compile("color: red;") is not registry.compile("color: blue;")


class TestConcurrency:
    def test_concurrent_first_compiles_parse_once(self, registry: StyleRegistry, monkeypatch):
        calls = []
        real_parse = registry_module.parse_sheet

        def slow_parse(source: str):
            calls.append(source)
            time.sleep(0.01)
            return real_parse(source)

        monkeypatch.setattr(registry_module, "parse_sheet", slow_parse)
        workers = 16
        barrier = threading.Barrier(workers)

        def compile_once(_: int) -> Style:
            barrier.wait()
            return registry.compile(NESTED)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            styles = list(pool.map(compile_once, range(workers)))

        assert len(calls) == 1
        assert all(style is styles[0] for style in styles)
        assert styles[0].ref_count == workers

    def test_concurrent_acquire_and_release_balance(self, registry: StyleRegistry):
        registry.compile(NESTED)
        style = registry.compile(NESTED)

        def churn(_: int) -> None:
            for _ in range(50):
                held = registry.compile(NESTED)
                held.unregister()

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(churn, range(8)))

        assert style.ref_count == 2
        assert style in registry

    def test_slow_release_listener_does_not_undo_recompile(self):
        bus = EventBus()
        registry = StyleRegistry(bus=bus)
        injected: set[str] = set()
        releasing = threading.Event()

        def host(event) -> None:
            if isinstance(event, StyleRegistered):
                injected.add(event.class_name)
            else:
                releasing.set()
                time.sleep(0.05)
                injected.discard(event.class_name)

        bus.on_all(host)
        first = registry.compile(NESTED)

        def recompile() -> Style:
            releasing.wait(timeout=5)
            return registry.compile(NESTED)

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(recompile)
            first.unregister()
            second = future.result()

        assert second.ref_count == 1
        assert second in registry
        assert injected == {second.class_name}


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_last_release_evicts(self, registry: StyleRegistry):
        styles = [registry.compile(NESTED) for _ in range(3)]
        for style in styles:
            assert style in registry
            style.unregister()
        assert styles[0] not in registry
        assert styles[0].ref_count == 0
        assert len(registry) == 0

    def test_recompile_after_eviction_builds_new_handle(self, registry: StyleRegistry):
        old = registry.compile(NESTED)
        old.unregister()
        new = registry.compile(NESTED)
        assert new is not old
        assert new.class_name == old.class_name
        assert new.ref_count == 1

    def test_register_increments(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        assert style.register() is style
        assert style.ref_count == 2

    def test_register_after_eviction_reinserts(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        style.unregister()
        style.register()
        assert style in registry
        assert registry.compile(NESTED) is style

    def test_register_stale_handle_raises(self, registry: StyleRegistry):
        old = registry.compile(NESTED)
        old.unregister()
        registry.compile(NESTED)
        with pytest.raises(StyleError, match="replaced"):
            old.register()

    def test_over_release_is_ignored(self, registry: StyleRegistry, caplog):
        style = registry.compile(NESTED)
        style.unregister()
        with caplog.at_level(logging.WARNING, logger="stylescope.registry.registry"):
            style.unregister()
        assert style.ref_count == 0
        assert "ignoring release" in caplog.text

    def test_stale_release_does_not_touch_new_handle(self, registry: StyleRegistry):
        old = registry.compile(NESTED)
        old.unregister()
        new = registry.compile(NESTED)
        old.unregister()
        assert new.ref_count == 1
        assert new in registry

    def test_context_manager_releases(self, registry: StyleRegistry):
        with registry.compile(NESTED) as style:
            assert style in registry
        assert style not in registry

    def test_retain_unused_keeps_entry(self):
        registry = StyleRegistry(RegistryConfig(retain_unused=True))
        style = registry.compile(NESTED)
        style.unregister()
        assert style in registry
        assert style.ref_count == 0
        assert registry.compile(NESTED) is style
        assert style.ref_count == 1

    def test_detached_style_cannot_register(self):
        style = Style(class_name="x", css_text="", fingerprint="0")
        with pytest.raises(RuntimeError):
            style.register()

    def test_str_is_class_name(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        assert str(style) == style.class_name


class TestInspection:
    def test_get_by_fingerprint(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        assert registry.get(style.fingerprint) is style
        assert registry.get("missing") is None

    def test_contains_accepts_fingerprint(self, registry: StyleRegistry):
        style = registry.compile(NESTED)
        assert style.fingerprint in registry

    def test_styles_in_insertion_order(self, registry: StyleRegistry):
        first = registry.compile("color: red;")
        second = registry.compile("color: blue;")
        assert registry.styles() == [first, second]

    def test_clear(self, registry: StyleRegistry):
        registry.compile(NESTED)
        registry.clear()
        assert len(registry) == 0


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class TestEvents:
    def test_registered_once_per_first_holder(self):
        bus = EventBus()
        events = []
        bus.on_all(events.append)
        registry = StyleRegistry(bus=bus)

        style = registry.compile(NESTED)
        registry.compile(NESTED)
        assert events == [StyleRegistered(style.class_name, style.css_text, style.fingerprint)]

        style.unregister()
        assert len(events) == 1
        style.unregister()
        assert events[-1] == StyleUnregistered(style.class_name, style.fingerprint)
        assert len(events) == 2

    def test_retained_style_is_registered_again(self):
        bus = EventBus()
        registered = []
        bus.subscribe(StyleRegistered, registered.append)
        registry = StyleRegistry(RegistryConfig(retain_unused=True), bus=bus)

        style = registry.compile(NESTED)
        style.unregister()
        registry.compile(NESTED)
        assert len(registered) == 2

    def test_listener_may_call_back_into_registry(self):
        registry = StyleRegistry()
        sizes = []
        registry.bus.subscribe(StyleRegistered, lambda event: sizes.append(len(registry)))
        registry.compile(NESTED)
        assert sizes == [1]

    def test_failed_compile_emits_nothing(self):
        bus = EventBus()
        events = []
        bus.on_all(events.append)
        with pytest.raises(ParseError):
            StyleRegistry(bus=bus).compile("}")
        assert events == []


# ---------------------------------------------------------------------------
# Default registry
# ---------------------------------------------------------------------------


class TestDefaultRegistry:
    @pytest.fixture(autouse=True)
    def fresh(self):
        reset_registry()
        yield
        reset_registry()

    def test_get_registry_is_shared(self):
        assert get_registry() is get_registry()

    def test_compile_style_uses_default_registry(self):
        style = compile_style(NESTED)
        assert style in get_registry()
        assert compile_style(NESTED) is style

    def test_reset_replaces_registry(self):
        before = get_registry()
        compile_style(NESTED)
        after = reset_registry(RegistryConfig(class_prefix="app"))
        assert after is not before
        assert len(after) == 0
        assert compile_style(NESTED).class_name.startswith("app-")
