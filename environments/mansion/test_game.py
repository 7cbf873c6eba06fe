"""Tests for exploration, verdicts and the reference mansion."""

import pytest

from environments.mansion._dossier import Dossier, insert_clue
from environments.mansion._exploration import Direction, ExplorationEngine, parse_choice
from environments.mansion._models import (
    CaseUnresolvable,
    ClueAddedToDossier,
    ClueCollected,
    Classification,
    DeadEnd,
    EvidenceClassified,
    ExplorationEnded,
    InvalidOrBlockedChoice,
    Outcome,
    RoomEntered,
    Verdict,
)
from environments.mansion._registry import UNKNOWN_SUSPECT, ClueRegistry
from environments.mansion._rooms import RoomMap, Side
from environments.mansion._scenario import (
    SCENARIO_ENV_VAR,
    get_default_scenario_path,
    load_scenario,
    parse_scenario,
)
from environments.mansion._verdict import SUCCESS_THRESHOLD, judge, tally, verdict

WATCH = "Um relógio de bolso com as iniciais 'M.S.' foi derrubado na entrada."
WINE = "Um pedaço de pano manchado de vinho tinto foi deixado perto da escada."

# every root-to-leaf walk of the reference mansion
ALL_PATHS = [
    ["l", "l", "l", "q"],
    ["l", "l", "r", "q"],
    ["l", "r", "l", "q"],
    ["l", "r", "r", "q"],
    ["r", "l", "q"],
    ["r", "r", "q"],
]


def kinds(events):
    return [e.kind for e in events]


@pytest.fixture
def scenario():
    return load_scenario(get_default_scenario_path())


@pytest.fixture
def mansion(scenario):
    return scenario.build_map()


@pytest.fixture
def registry(scenario):
    return scenario.build_registry()


def explore_everything(room_map, dossier):
    """Walk every path; collected rooms stay collected between walks."""
    for path in ALL_PATHS:
        ExplorationEngine(room_map, dossier).run(path)


class TestParseChoice:

    @pytest.mark.parametrize("token,expected", [
        ("l", Direction.LEFT),
        ("L", Direction.LEFT),
        ("Left", Direction.LEFT),
        ("e", Direction.LEFT),
        ("r", Direction.RIGHT),
        ("D", Direction.RIGHT),
        (" q ", Direction.QUIT),
        ("S", Direction.QUIT),
        ("x", None),
        ("", None),
    ])
    def test_aliases(self, token, expected):
        assert parse_choice(token) is expected


class TestExplorationEngine:

    def test_start_collects_root_clue(self, mansion):
        engine = ExplorationEngine(mansion)
        events = engine.start()
        assert kinds(events) == ["room_entered", "clue_collected", "clue_added"]
        assert events[0] == RoomEntered(room_name="Hall de Entrada", exits=["left", "right"])
        assert events[1] == ClueCollected(room_name="Hall de Entrada", clue_text=WATCH)
        assert events[2] == ClueAddedToDossier(clue_text=WATCH)
        assert engine.start() == []

    def test_move_left_and_right(self, mansion):
        engine = ExplorationEngine(mansion)
        engine.start()
        engine.step("l")
        assert engine.current.name == "Sala de Estar"
        engine.step("R")
        assert engine.current.name == "Biblioteca"
        assert engine.moves == 2

    def test_room_without_clue(self, mansion):
        engine = ExplorationEngine(mansion)
        engine.start()
        events = engine.step("left")
        assert kinds(events) == ["room_entered"]

    def test_invalid_choice_keeps_room(self, mansion):
        engine = ExplorationEngine(mansion)
        engine.start()
        events = engine.step("up")
        assert events == [InvalidOrBlockedChoice(choice="up")]
        assert engine.current.name == "Hall de Entrada"
        assert not engine.ended

    def test_dead_end_is_not_terminal(self, mansion):
        engine = ExplorationEngine(mansion)
        engine.run(["l", "l", "l"])
        assert engine.current.name == "Despensa"
        assert isinstance(engine.history[-1], DeadEnd)
        assert not engine.ended

        for choice in ("l", "r"):
            assert engine.step(choice) == [InvalidOrBlockedChoice(choice=choice)]
        assert engine.current.name == "Despensa"

        assert engine.step("q") == [ExplorationEnded()]
        assert engine.ended

    def test_blocked_direction(self):
        room_map = RoomMap.from_entries([
            (None, None, "Hall", ""),
            ("Hall", Side.LEFT, "Study", ""),
        ])
        engine = ExplorationEngine(room_map)
        engine.start()
        assert engine.step("r") == [InvalidOrBlockedChoice(choice="r")]
        assert engine.current.name == "Hall"

    def test_quit_without_start_enters_root_first(self, mansion):
        engine = ExplorationEngine(mansion)
        events = engine.step("q")
        assert kinds(events) == ["room_entered", "clue_collected", "clue_added", "exploration_ended"]
        assert list(engine.dossier) == [WATCH]

    def test_step_after_end_raises(self, mansion):
        engine = ExplorationEngine(mansion)
        engine.run(["q"])
        with pytest.raises(RuntimeError):
            engine.step("l")

    def test_run_stops_at_quit(self, mansion):
        engine = ExplorationEngine(mansion)
        engine.run(["l", "q", "l", "l"])
        assert engine.ended
        assert engine.current.name == "Sala de Estar"

    def test_listener_receives_every_event(self, mansion):
        seen = []
        engine = ExplorationEngine(mansion, listener=seen.append)
        engine.run(["r", "r", "q"])
        assert seen == engine.history
        assert seen[-1] == ExplorationEnded()

    def test_each_clue_collected_once_across_walks(self, mansion):
        dossier = Dossier()
        first = ExplorationEngine(mansion, dossier).run(["l", "l", "l", "q"])
        second = ExplorationEngine(mansion, dossier).run(["l", "l", "r", "q"])
        assert kinds(first).count("clue_collected") == 3
        # Hall and Cozinha were already collected; only Porão is new
        collected = [e for e in second if isinstance(e, ClueCollected)]
        assert [e.room_name for e in collected] == ["Porão"]
        assert len(dossier) == 4

    def test_duplicate_clue_text_not_re_added(self):
        room_map = RoomMap.from_entries([
            (None, None, "Hall", "ash"),
            ("Hall", Side.LEFT, "Study", "ash"),
        ])
        engine = ExplorationEngine(room_map)
        events = engine.run(["l", "q"])
        assert kinds(events).count("clue_collected") == 2
        assert kinds(events).count("clue_added") == 1
        assert list(engine.dossier) == ["ash"]

    def test_empty_map(self):
        with pytest.raises(ValueError):
            ExplorationEngine(RoomMap())


class TestVerdict:

    def test_threshold(self):
        assert SUCCESS_THRESHOLD == 2
        assert verdict(3) is Outcome.SUCCESS
        assert verdict(2) is Outcome.SUCCESS
        assert verdict(1) is Outcome.FAILURE
        assert verdict(0) is Outcome.FAILURE

    def test_tally_classifies_in_order(self):
        registry = ClueRegistry.from_pairs([("b-knife", "Cook"), ("a-rope", "Butler"), ("c-glove", "Cook")])
        root = None
        for text in ["c-glove", "a-rope", "b-knife", "d-ash"]:
            root = insert_clue(root, text)

        seen = []
        count = tally(root, registry, "Cook", seen.append)
        assert count == 2
        assert seen == [
            EvidenceClassified(clue_text="a-rope", classification=Classification.IRRELEVANT,
                               associated_suspect="Butler"),
            EvidenceClassified(clue_text="b-knife", classification=Classification.VALID,
                               associated_suspect="Cook"),
            EvidenceClassified(clue_text="c-glove", classification=Classification.VALID,
                               associated_suspect="Cook"),
            EvidenceClassified(clue_text="d-ash", classification=Classification.UNASSOCIATED,
                               associated_suspect=UNKNOWN_SUSPECT),
        ]

    def test_accused_name_is_exact(self):
        registry = ClueRegistry.from_pairs([("knife", "Cook"), ("glove", "Cook")])
        root = insert_clue(insert_clue(None, "knife"), "glove")
        assert tally(root, registry, "cook") == 0
        assert tally(root, registry, "Cook") == 2

    def test_empty_dossier_is_unresolvable(self, registry):
        assert judge(None, registry, "Mordomo") == [CaseUnresolvable()]
        assert tally(None, registry, "Mordomo") == 0

    def test_judge_ends_with_verdict(self):
        registry = ClueRegistry.from_pairs([("knife", "Cook")])
        events = judge(insert_clue(None, "knife"), registry, "Cook")
        assert events[-1] == Verdict(accused_name="Cook", valid_count=1, outcome=Outcome.FAILURE)


class TestReferenceMansion:

    def test_topology(self, mansion):
        stats = mansion.get_stats()
        assert stats.rooms == 11
        assert stats.clue_rooms == 8
        assert stats.height == 3
        root = mansion.root
        assert root.name == "Hall de Entrada"
        assert (root.left.name, root.right.name) == ("Sala de Estar", "Jardim de Inverno")
        assert (root.left.left.name, root.left.right.name) == ("Cozinha", "Biblioteca")
        assert (root.right.left.name, root.right.right.name) == ("Escritório", "Área da Piscina")
        assert (root.left.left.left.name, root.left.left.right.name) == ("Despensa", "Porão")
        assert (root.left.right.left.name, root.left.right.right.name) == ("Quarto de Hóspedes", "Sótão")

    def test_registry(self, registry):
        assert registry.lookup(WATCH) == "Mordomo"
        assert registry.lookup(WINE) == UNKNOWN_SUSPECT
        assert registry.suspects() == ["Mordomo", "Jardineiro", "Cozinheira"]

    @pytest.mark.parametrize("accused,count,outcome", [
        ("Mordomo", 2, Outcome.SUCCESS),
        ("Cozinheira", 2, Outcome.SUCCESS),
        ("Jardineiro", 3, Outcome.SUCCESS),
        ("Motorista", 0, Outcome.FAILURE),
    ])
    def test_full_exploration(self, mansion, registry, accused, count, outcome):
        dossier = Dossier()
        explore_everything(mansion, dossier)
        assert len(dossier) == 8
        assert mansion.remaining_clues() == []

        events = judge(dossier.root, registry, accused)
        assert events[-1] == Verdict(accused_name=accused, valid_count=count, outcome=outcome)
        classifications = [e.classification for e in events[:-1]]
        assert classifications.count(Classification.UNASSOCIATED) == 1

    def test_entrance_only(self, mansion, registry):
        engine = ExplorationEngine(mansion)
        engine.run(["q"])
        assert list(engine.dossier) == [WATCH]
        events = judge(engine.dossier.root, registry, "Mordomo")
        assert events[-1] == Verdict(accused_name="Mordomo", valid_count=1, outcome=Outcome.FAILURE)


class TestScenario:

    def test_default_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "tiny.yaml"
        path.write_text(
            "title: Tiny\n"
            "rooms:\n"
            "  - {name: Hall, clue: ash}\n"
            "  - {name: Den, parent: Hall, side: right, clue: soot}\n"
            "associations:\n"
            "  - {clue: ash, suspect: Maid}\n"
            "  - {clue: soot, suspect: Maid}\n",
            encoding="utf-8",
        )
        monkeypatch.setenv(SCENARIO_ENV_VAR, str(path))
        scenario = load_scenario()
        assert scenario.title == "Tiny"
        assert scenario.bucket_count == 10
        assert scenario.suspect_names() == ["Maid"]

        room_map = scenario.build_map()
        assert room_map.root.right.name == "Den"
        engine = ExplorationEngine(room_map)
        engine.run(["r", "q"])
        events = judge(engine.dossier.root, scenario.build_registry(), "Maid")
        assert events[-1].outcome is Outcome.SUCCESS

    def test_unregistered_clue_is_logged(self, caplog):
        data = {"rooms": [{"name": "Hall", "clue": "ash"}], "associations": []}
        with caplog.at_level("INFO"):
            scenario = parse_scenario(data)
        assert scenario.unregistered_clues() == ["ash"]
        assert [r.levelname for r in caplog.records if "no registered suspect" in r.message] == ["INFO"]

    def test_reference_mansion_loads_without_warnings(self, caplog):
        with caplog.at_level("WARNING"):
            load_scenario(get_default_scenario_path())
        assert caplog.records == []

    def test_null_clue_is_empty(self):
        scenario = parse_scenario({"rooms": [{"name": "Hall", "clue": None}]})
        assert scenario.rooms[0].clue == ""

    @pytest.mark.parametrize("data", [
        {"rooms": []},
        {"rooms": [{"name": "Hall", "parent": "Attic"}]},
        {"rooms": [{"name": "Hall"}], "bucket_count": 0},
        {"rooms": [{"name": "Hall"}, {"name": "Den", "parent": "Hall", "side": "up"}]},
        {"title": "no rooms"},
        ["not", "a", "mapping"],
    ])
    def test_invalid_scenarios(self, data):
        with pytest.raises(ValueError):
            parse_scenario(data)

    def test_bad_wiring_fails_at_build(self):
        scenario = parse_scenario({"rooms": [
            {"name": "Hall"},
            {"name": "Den", "parent": "Cellar", "side": "left"},
        ]})
        with pytest.raises(ValueError):
            scenario.build_map()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
