"""Tests for analysis/inheritance.py."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from patchscope.analysis.inheritance import resolve_inheritance
from patchscope.syntax.tree import SourceFile

ParseJs = Callable[..., SourceFile]


class TestResolveInheritance:
    """Prototype-linking idioms."""

    @pytest.mark.parametrize(
        ("code", "expected"),
        [
            (
                "Game_Actor.prototype = Object.create(Game_Battler.prototype);",
                {"Game_Actor": "Game_Battler"},
            ),
            ("class Game_Actor extends Game_Battler {}", {"Game_Actor": "Game_Battler"}),
            (
                "Object.setPrototypeOf(Game_Actor.prototype, Game_Battler.prototype);",
                {"Game_Actor": "Game_Battler"},
            ),
        ],
        ids=["object-create", "class-extends", "set-prototype-of"],
    )
    def test_given_idiom_when_resolved_then_link_recorded(
        self, parse_js: ParseJs, code: str, expected: dict[str, str]
    ) -> None:
        # When
        inheritance = resolve_inheritance([parse_js(code)])

        # Then
        assert inheritance == expected

    def test_given_dotted_names_when_resolved_then_full_names_kept(
        self, parse_js: ParseJs
    ) -> None:
        """Namespaced plugin classes keep their dotted names."""
        source = parse_js(
            "MyPlugin.Window_Log.prototype = Object.create(Window_Base.prototype);"
        )

        assert resolve_inheritance([source]) == {"MyPlugin.Window_Log": "Window_Base"}

    def test_given_relink_in_later_file_when_resolved_then_later_wins(
        self, parse_js: ParseJs
    ) -> None:
        """One live superclass per class; the last link in load order wins."""
        core = parse_js("Window_Help.prototype = Object.create(Window_Base.prototype);")
        plugin = parse_js("Window_Help.prototype = Object.create(Window_Selectable.prototype);")

        assert resolve_inheritance([core, plugin]) == {"Window_Help": "Window_Selectable"}

    def test_given_other_shapes_when_resolved_then_ignored(self, parse_js: ParseJs) -> None:
        """Look-alike statements are not inheritance links."""
        source = parse_js(
            "Foo.prototype = Object.assign({}, Bar.prototype);\n"
            "Foo.prototype = Object.create(Bar);\n"
            "class Baz {}\n"
            "Object.setPrototypeOf(Foo, Bar);\n"
        )

        assert resolve_inheritance([source]) == {}

    def test_given_cycle_when_resolved_then_kept_as_is(self, parse_js: ParseJs) -> None:
        """Cycles are not rejected here; lookups guard against them."""
        source = parse_js(
            "A.prototype = Object.create(B.prototype);\nB.prototype = Object.create(A.prototype);"
        )

        assert resolve_inheritance([source]) == {"A": "B", "B": "A"}
