"""Tests for chat command routing and the post-heal continuation."""

import logging
import random
import threading
import time

import config
from engine.locks import get_character_lock
from engine.resource import CharacterResource
from engine.router import continuation_prompt, handle_input, parse_command
from engine.store import AttributeStore, load_table
from models.characters import Graphic, Journal
from models.chat import ChatEvent
from models.table import TableState


class FixedRandom(random.Random):
    """Random stub whose die rolls always land on the same face."""

    def __init__(self, roll: int = 1) -> None:
        super().__init__(0)
        self.roll = roll

    def randint(self, a, b):
        return self.roll


def _make_table(
    hp: int = 10,
    max_hp: int = 20,
    hit_dice: int = 3,
    max_hit_dice: int = 5,
    level: int = 4,
    surge: str = "ready",
) -> TableState:
    """Helper to create a table with one character and its token."""
    table = TableState()
    table.journals["c1"] = Journal(id="c1", name="Alice", controlled_by=["p1"])
    table.graphics["t1"] = Graphic(id="t1", represents="c1")
    table.graphics["d1"] = Graphic(id="d1", is_drawing=True, represents="c1")
    store = AttributeStore(table)
    store.write_attribute("c1", "hp", hp, max_hp)
    store.write_attribute("c1", "hit_dice", hit_dice, max_hit_dice)
    store.write_attribute("c1", "hit_die_size", 8)
    store.write_attribute("c1", "level", level)
    store.write_attribute("c1", "constitution", 10)
    store.write_attribute("c1", "healing_surge", surge)
    return table


def _event(
    content: str,
    selected: list[str] | None = None,
    who: str = "Alice",
    is_gm: bool = False,
    type: str = "api",
    player_id: str = "p1",
) -> ChatEvent:
    """Helper to build a chat event, from player p1 by default."""
    return ChatEvent(
        type=type,
        content=content,
        who=who,
        player_id=player_id,
        is_gm=is_gm,
        selected=["t1"] if selected is None else selected,
    )


def _attr(table: TableState, name: str) -> str:
    return table.attributes["c1"][name].current


class TestParseCommand:
    """Tests for parse_command()."""

    def test_flag(self):
        assert parse_command("!ihs -surge") == "-surge"

    def test_extra_whitespace(self):
        assert parse_command("  !ihs   -long  ") == "-long"

    def test_bare_prefix(self):
        assert parse_command("!ihs") == ""

    def test_other_script(self):
        assert parse_command("!acg -str") is None

    def test_prefix_must_be_whole_word(self):
        assert parse_command("!ihsx -surge") is None

    def test_plain_chat(self):
        assert parse_command("hello there") is None


class TestIgnoredMessages:
    """Messages that are not for this script produce nothing."""

    def test_non_api_message(self):
        table = _make_table()
        response = handle_input(_event("!ihs -surge", type="general"), table)
        assert not response.handled
        assert response.messages == []
        assert _attr(table, "hit_dice") == "3"

    def test_unprefixed_message(self):
        table = _make_table()
        response = handle_input(_event("!other -surge"), table)
        assert not response.handled


class TestSurgeCommand:
    """Tests for -surge and the continuation that follows it."""

    def test_prompts_for_another_die(self):
        table = _make_table(hp=5, max_hp=20, hit_dice=3)
        response = handle_input(_event("!ihs -surge"), table, rng=FixedRandom(4))

        assert response.handled
        assert _attr(table, "hp") == "9"
        assert _attr(table, "hit_dice") == "2"
        assert _attr(table, "healing_surge") == "ready"
        prompt = response.messages[-1]
        assert prompt.content == continuation_prompt()
        assert "[Yes](!ihs -surge)" in prompt.content
        assert "[No](!ihs -exhaust)" in prompt.content
        assert prompt.whisper_to == "Alice"

    def test_yes_is_just_another_surge(self):
        table = _make_table(hp=5, max_hp=20, hit_dice=3)
        handle_input(_event("!ihs -surge"), table, rng=FixedRandom(4))
        handle_input(_event("!ihs -surge"), table, rng=FixedRandom(4))
        assert _attr(table, "hp") == "13"
        assert _attr(table, "hit_dice") == "1"

    def test_no_exhausts(self):
        table = _make_table(hp=5, max_hp=20, hit_dice=3)
        handle_input(_event("!ihs -surge"), table, rng=FixedRandom(4))
        response = handle_input(_event("!ihs -exhaust"), table)
        assert _attr(table, "healing_surge") == "not_ready"
        assert response.messages[-1].is_emote

    def test_healed_to_full_exhausts(self):
        table = _make_table(hp=18, max_hp=20, hit_dice=3)
        response = handle_input(_event("!ihs -surge"), table, rng=FixedRandom(6))
        assert _attr(table, "hp") == "20"
        assert _attr(table, "healing_surge") == "not_ready"
        assert response.messages[-1].is_emote
        assert response.messages[-1].speaker == "Alice"

    def test_last_die_exhausts(self):
        table = _make_table(hp=2, max_hp=20, hit_dice=1)
        handle_input(_event("!ihs -surge"), table, rng=FixedRandom(3))
        assert _attr(table, "hit_dice") == "0"
        assert _attr(table, "healing_surge") == "not_ready"

    def test_exhausted_surge_reports_error(self):
        table = _make_table(surge="not_ready")
        response = handle_input(_event("!ihs -surge"), table)
        assert len(response.messages) == 1
        assert "Healing Surge Unusable" in response.messages[0].content
        assert response.messages[0].whisper_to == "Alice"
        assert _attr(table, "hit_dice") == "3"

    def test_full_health_reports_error(self):
        table = _make_table(hp=20, max_hp=20)
        response = handle_input(_event("!ihs -surge"), table)
        assert "Full Health" in response.messages[0].content

    def test_no_dice_reports_error(self):
        table = _make_table(hit_dice=0)
        response = handle_input(_event("!ihs -surge"), table)
        assert "No Hit Dice Remaining" in response.messages[0].content

    def test_gm_tag_stripped_from_sender(self):
        table = _make_table(hp=5)
        response = handle_input(
            _event("!ihs -surge", who="Morgan (GM)", is_gm=True),
            table,
            rng=FixedRandom(2),
        )
        assert response.messages[0].whisper_to == "Morgan"


class TestRestCommands:
    """Tests for -short and -long."""

    def test_short_rest(self):
        table = _make_table(level=8, hit_dice=2, max_hit_dice=5, surge="not_ready")
        response = handle_input(_event("!ihs -short"), table)
        assert _attr(table, "hit_dice") == "4"
        assert _attr(table, "healing_surge") == "ready"
        assert response.messages[0].content == "Alice feels invigorated."

    def test_long_rest(self):
        table = _make_table(hit_dice=0, max_hit_dice=5, surge="not_ready")
        handle_input(_event("!ihs -long"), table)
        assert _attr(table, "hit_dice") == "5"
        assert _attr(table, "healing_surge") == "ready"


class TestValidationErrors:
    """Validation failures are whispered to the sender."""

    def test_no_selection(self):
        table = _make_table()
        response = handle_input(_event("!ihs -short", selected=[]), table)
        assert len(response.messages) == 1
        assert "Invalid Selection" in response.messages[0].content
        assert response.messages[0].whisper_to == "Alice"

    def test_two_tokens_selected(self):
        table = _make_table()
        table.graphics["t2"] = Graphic(id="t2", represents="c1")
        response = handle_input(_event("!ihs -short", selected=["t1", "t2"]), table)
        assert "Invalid Selection" in response.messages[0].content

    def test_other_players_character(self):
        table = _make_table(hp=5)
        response = handle_input(_event("!ihs -surge", who="Bob", player_id="p2"), table)
        assert "Invalid Selection" in response.messages[0].content
        assert response.messages[0].whisper_to == "Bob"
        assert _attr(table, "hit_dice") == "3"
        assert _attr(table, "hp") == "5"

    def test_drawing_selected(self):
        table = _make_table()
        response = handle_input(_event("!ihs -exhaust", selected=["d1"]), table)
        assert "Invalid Selection" in response.messages[0].content
        assert _attr(table, "healing_surge") == "ready"

    def test_missing_attribute(self):
        table = _make_table()
        del table.attributes["c1"]["hit_die_size"]
        response = handle_input(_event("!ihs -surge"), table)
        content = response.messages[0].content
        assert "Attribute Missing" in content
        assert "hit_die_size" in content

    def test_unknown_flag(self):
        table = _make_table()
        response = handle_input(_event("!ihs -dance"), table)
        assert "Unknown Command" in response.messages[0].content
        assert "-dance" in response.messages[0].content

    def test_bare_prefix(self):
        table = _make_table()
        response = handle_input(_event("!ihs"), table)
        assert "Unknown Command" in response.messages[0].content

    def test_error_is_highlighted(self):
        table = _make_table()
        response = handle_input(_event("!ihs -short", selected=[]), table)
        assert response.messages[0].content.startswith('<span style="color: red;')


class TestInitialize:
    """Tests for -initialize."""

    def test_requires_gm(self):
        table = _make_table()
        response = handle_input(_event("!ihs -initialize"), table)
        assert "Restricted Access" in response.messages[0].content
        assert table.macros == {}

    def test_creates_macros(self):
        table = _make_table()
        handle_input(_event("!ihs -initialize", who="Morgan (GM)", is_gm=True), table)
        assert set(table.macros) == {"HealingSurge", "ShortRest", "LongRest"}
        assert table.macros["HealingSurge"].action == "!ihs -surge"
        assert table.macros["ShortRest"].action == "!ihs -short"
        assert table.macros["LongRest"].action == "!ihs -long"
        assert all(m.owner_id == "p1" for m in table.macros.values())

    def test_does_not_need_selection(self):
        table = _make_table()
        response = handle_input(
            _event("!ihs -initialize", selected=[], is_gm=True), table,
        )
        assert "Invalid Selection" not in response.messages[0].content
        assert len(table.macros) == 3

    def test_second_run_creates_nothing(self):
        table = _make_table()
        handle_input(_event("!ihs -initialize", is_gm=True), table)
        table.macros["HealingSurge"].visible_to = "p1"
        response = handle_input(_event("!ihs -initialize", is_gm=True), table)
        assert len(table.macros) == 3
        assert table.macros["HealingSurge"].visible_to == "p1"
        assert "already present" in response.messages[0].content


class TestUnexpectedErrors:
    """Unknown failures are logged, not shown."""

    def test_logged_and_silent(self, caplog):
        table = _make_table()
        table.attributes["c1"]["level"].current = "seven"
        with caplog.at_level(logging.ERROR, logger="engine.router"):
            response = handle_input(_event("!ihs -short"), table)
        assert response.handled
        assert response.messages == []
        assert any("Unexpected error" in r.getMessage() for r in caplog.records)
        assert _attr(table, "hit_dice") == "3"


class TestPersistence:
    """Attribute writes are flushed as each step completes."""

    def test_writes_flushed_to_file(self, tmp_path):
        path = str(tmp_path / "table.json")
        table = _make_table(hp=5, hit_dice=3)
        handle_input(_event("!ihs -surge"), table, path=path, rng=FixedRandom(4))
        saved = load_table(path)
        assert saved is not None
        assert saved.attributes["c1"]["hit_dice"].current == "2"
        assert saved.attributes["c1"]["hp"].current == "9"


class TestSerialization:
    """Tests for the opt-in per-character lock."""

    def test_same_lock_per_character(self):
        assert get_character_lock("c1") is get_character_lock("c1")
        assert get_character_lock("c1") is not get_character_lock("c2")

    def test_command_runs_with_lock_enabled(self, monkeypatch):
        monkeypatch.setattr(config, "SERIALIZE_PER_CHARACTER", True)
        table = _make_table(level=8, hit_dice=2, max_hit_dice=5)
        handle_input(_event("!ihs -short"), table)
        assert _attr(table, "hit_dice") == "4"
        assert not get_character_lock("c1").locked()

    def test_interleaved_surges_each_spend_a_die(self, monkeypatch):
        """Two surges racing on one character both count with the lock on."""
        monkeypatch.setattr(config, "SERIALIZE_PER_CHARACTER", True)
        original_load = CharacterResource.load

        def slow_load(*args, **kwargs):
            resource = original_load(*args, **kwargs)
            time.sleep(0.1)  # Widen the gap between reading and writing hit dice
            return resource

        monkeypatch.setattr(CharacterResource, "load", slow_load)
        table = _make_table(hp=2, max_hp=20, hit_dice=3)
        threads = [
            threading.Thread(
                target=handle_input,
                args=(_event("!ihs -surge"), table),
                kwargs={"rng": FixedRandom(4)},
            )
            for _ in range(2)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert _attr(table, "hit_dice") == "1"
        assert _attr(table, "hp") == "10"
