"""Unit tests for template resolution, entry building and theme selection."""

from __future__ import annotations

import random

import pytest

from review_bomber.configurations import configuration_constants
from review_bomber.configurations.game_config import ThemePrompt
from review_bomber.server import round_builder
from review_bomber.server.round_builder import Entry, RoundState
from review_bomber.server.session_registry import SessionRegistry


class TestResolveTemplate:
    @pytest.mark.parametrize(
        "template",
        [
            "Don't let your {A} ever cause {B} again!",
            "{A}{B}",
            "{B} before {A}",
            "It's like {A}, but for {B}.",
        ],
    )
    def test_both_placeholders_replaced(self, template):
        result = round_builder.resolve_template(template, "X", "Y")

        assert "{A}" not in result and "{B}" not in result
        assert result.count("X") == 1
        assert result.count("Y") == 1

    def test_placeholders_are_case_sensitive(self):
        assert round_builder.resolve_template("{a} {A}{B}", "X", "Y") == "{a} XY"

    def test_legacy_word_tokens(self):
        result = round_builder.resolve_template("Your A ruined B forever", "cat", "dinner")
        assert result == "Your cat ruined dinner forever"

    def test_legacy_tokens_do_not_touch_words(self):
        result = round_builder.resolve_template("A Big {A} and {B}", "x", "y")
        assert result == "A Big x and y"

    def test_trailing_token(self):
        assert round_builder.resolve_template("Beware the A", "moon", "sun") == "Beware the moon"
        assert round_builder.resolve_template("Beware the B", "moon", "sun") == "Beware the sun"

    def test_empty_template(self):
        assert round_builder.resolve_template("", "x", "y") == "x / y"

    def test_substituted_value_containing_token_is_not_guarded(self):
        # The A value is inserted before {B} is replaced, so it gets rewritten too
        assert round_builder.resolve_template("{A}!", "{B}", "boom") == "boom!"


class TestBuildEntries:
    def _sessions(self, submissions):
        registry = SessionRegistry()
        for i, (name, a, b) in enumerate(submissions):
            registry.add(f"c{i}")
            registry.set_name(f"c{i}", name)
            session = registry.get(f"c{i}")
            session.blank_a = a
            session.blank_b = b
        return registry.ordered_snapshot()

    def test_entries_are_index_aligned_with_order(self):
        ordered = self._sessions(
            [("carol", "e", "f"), ("alice", "a", "b"), ("bob", "c", "d")]
        )
        entries = round_builder.build_entries(ordered, "{A}-{B}")

        assert [e.author_name for e in entries] == ["alice", "bob", "carol"]
        assert [e.text for e in entries] == ["a-b", "c-d", "e-f"]
        assert [e.author_index for e in entries] == [0, 1, 2]

    def test_blank_and_whitespace_become_placeholder(self):
        ordered = self._sessions([("alice", "   ", ""), ("bob", "  trimmed  ", None)])
        entries = round_builder.build_entries(ordered, "{A}|{B}")

        blank = configuration_constants.EMPTY_BLANK
        assert entries[0].text == f"{blank}|{blank}"
        assert entries[1].text == f"trimmed|{blank}"

    def test_unnamed_author_gets_fallback_name(self):
        ordered = self._sessions([(None, "a", "b"), ("zed", "c", "d")])
        entries = round_builder.build_entries(ordered, "{A}{B}")
        assert entries[0].author_name == "Player1"


class TestEntry:
    def test_average_without_ratings_is_zero(self):
        assert Entry(0, "alice", "text").average_stars == 0.0

    def test_average(self):
        entry = Entry(0, "alice", "text", ratings={"bob": 5, "carol": 2})
        assert entry.average_stars == pytest.approx(3.5)


class TestPickThemePrompt:
    DEFAULT = ThemePrompt(
        theme=configuration_constants.DEFAULT_THEME,
        prompt_template=configuration_constants.DEFAULT_PROMPT_TEMPLATE,
    )

    def test_empty_list_uses_default(self):
        chosen = round_builder.pick_theme_prompt([], self.DEFAULT, random.Random(0))
        assert chosen == self.DEFAULT

    def test_picks_from_configured_list(self):
        prompts = [ThemePrompt("Cars", "{A} drives {B}"), ThemePrompt("Food", "{A} eats {B}")]
        chosen = round_builder.pick_theme_prompt(prompts, self.DEFAULT, random.Random(1))
        assert chosen in prompts

    def test_malformed_template_falls_back_to_default_template(self):
        prompts = [ThemePrompt("Broken", "only {A} here")]
        chosen = round_builder.pick_theme_prompt(prompts, self.DEFAULT, random.Random(0))

        assert chosen.theme == "Broken"
        assert chosen.prompt_template == self.DEFAULT.prompt_template


def test_start_new_round_resets_state():
    registry = SessionRegistry()
    registry.add("c1")
    registry.set_name("c1", "bob")
    registry.add("c0")
    registry.set_name("c0", "alice")
    registry.get("c0").blank_a = "stale"

    state = RoundState(
        entries=[Entry(0, "x", "y")], current_entry_index=4, responses_received=2
    )
    round_builder.start_new_round(state, registry)

    assert state.entries == []
    assert state.current_entry_index == 0
    assert state.responses_received == 0
    assert state.ordered_ids == ["c0", "c1"]
    assert registry.get("c0").blank_a == ""
