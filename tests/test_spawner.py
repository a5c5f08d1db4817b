import pytest

from game.entities import EntityKind, Hostile, Participant, Resource
from game.sim.determinism import match_digest
from game.sim.tunables import MatchRules
from game.systems import EventLog, EntitySpawner, generate_entities, round_n, sanitize_participants, spawn_counts

DIGEST = match_digest("BLOGUS", "alpha")


def _rounded(e):
    return (round_n(e.x), round_n(e.z), round_n(e.vx), round_n(e.vz))


class TestSpawnCounts:
    @pytest.mark.parametrize(
        "n, expected",
        [
            (0, (1, 4, 4)),
            (1, (1, 4, 4)),
            (2, (2, 4, 4)),
            (5, (5, 5, 4)),
            (6, (6, 6, 4)),
            (10, (10, 10, 8)),
        ],
    )
    def test_counts(self, n, expected):
        c = spawn_counts(n)
        assert (c.players, c.foes, c.food) == expected


class TestGenerateEntities:
    def test_blogus_alpha_scenario(self):
        ents = generate_entities(DIGEST, ["Amy", "Bob"], MatchRules())
        assert len(ents) == 10
        assert [type(e) for e in ents] == [Participant] * 2 + [Hostile] * 4 + [Resource] * 4
        assert [e.id for e in ents] == [
            "Amy", "Bob",
            "foe0", "foe1", "foe2", "foe3",
            "food0", "food1", "food2", "food3",
        ]
        assert all(p.health == 3 for p in ents[:2])

    def test_pinned_spawn_values(self):
        ents = {e.id: e for e in generate_entities(DIGEST, ["Amy", "Bob"], MatchRules())}
        assert _rounded(ents["Amy"]) == (23.199, 12.917, -0.704, 0.833)
        assert _rounded(ents["Bob"]) == (-23.445, -21.191, -3.393, -3.257)
        assert _rounded(ents["foe0"]) == (16.412, -19.503, 3.113, 1.601)
        assert _rounded(ents["food0"]) == (-30.444, 22.874, 1.649, 1.031)

    def test_positions_within_spawn_span(self):
        ents = generate_entities(DIGEST, [f"user{i}" for i in range(30)], MatchRules())
        for e in ents:
            assert -40.0 <= e.x < 40.0
            assert -40.0 <= e.z < 40.0

    def test_resource_velocity_scale_is_smaller(self):
        ents = generate_entities(DIGEST, [f"user{i}" for i in range(30)], MatchRules())
        for e in ents:
            limit = 2.0 if isinstance(e, Resource) else 3.5
            assert abs(e.vx) <= limit and abs(e.vz) <= limit

    def test_changing_one_id_only_changes_that_participant(self):
        before = {e.id: _rounded(e) for e in generate_entities(DIGEST, ["Amy", "Bob"], MatchRules())}
        after = {e.id: _rounded(e) for e in generate_entities(DIGEST, ["Amy", "Zed"], MatchRules())}
        assert after["Amy"] == before["Amy"]
        for i in range(4):
            assert after[f"foe{i}"] == before[f"foe{i}"]
            assert after[f"food{i}"] == before[f"food{i}"]
        assert after["Zed"] != before["Bob"]

    def test_adding_participant_keeps_existing_trajectories(self):
        two = {e.id: _rounded(e) for e in generate_entities(DIGEST, ["Amy", "Bob"], MatchRules())}
        three = {e.id: _rounded(e) for e in generate_entities(DIGEST, ["Amy", "Bob", "Cat"], MatchRules())}
        for key, value in two.items():
            assert three[key] == value

    def test_zero_participants_spawns_synthetic_player(self):
        ents = generate_entities(DIGEST, [], MatchRules())
        assert ents[0].id == "player0"
        assert ents[0].kind is EntityKind.PARTICIPANT
        assert len(ents) == 9

    def test_different_seed_word_moves_everything(self):
        a = {e.id: _rounded(e) for e in generate_entities(match_digest("BLOGUS", "alpha"), ["Amy"])}
        b = {e.id: _rounded(e) for e in generate_entities(match_digest("BLOGUS", "beta"), ["Amy"])}
        assert all(a[k] != b[k] for k in a)


class TestEntitySpawner:
    def test_spawn_logs_one_record_per_entity_at_tick_zero(self):
        log = EventLog()
        ents, counts = EntitySpawner(MatchRules()).spawn(DIGEST, ["Amy", "Bob"], log)
        records = list(log)
        assert len(records) == len(ents) == counts.total == 10
        assert all(r.tick == 0 and r.kind.value == "spawn" for r in records)
        assert records[0].data["id"] == "Amy"
        assert records[1].data["id"] == "Bob"
        assert records[0].data["hp"] == 3
        assert records[2].data["hp"] is None
        assert records[2].data["t"] == "foe"


class TestSanitizeParticipants:
    def test_trims_dedupes_and_sorts_case_insensitively(self):
        assert sanitize_participants([" bob", "Amy", "", "carl", "Bob", "bob ", "  "]) == ["Amy", "Bob", "bob", "carl"]

    def test_order_independent(self):
        names = ["delta", "Alpha", "charlie", "Bravo"]
        assert sanitize_participants(names) == sanitize_participants(reversed(names)) == [
            "Alpha", "Bravo", "charlie", "delta",
        ]
