import pytest

from game.entities import Ghost, Hostile, Participant, Resource
from game.sim.tunables import MatchRules
from game.systems import InteractionResolver


def _kinds(state):
    return [(r.tick, r.kind.value, r.data.get("id") or r.data.get("a")) for r in state.log]


class TestRuleTable:
    def test_participant_hits_hostile(self):
        p, h = Participant("Amy", 0, 0), Hostile("foe0", 0, 0)
        assert InteractionResolver.apply_rule(p, h) == (h, "killed-by-participant")
        assert p.health == 1

    def test_hostile_first_still_hurts_participant(self):
        h, p = Hostile("foe0", 0, 0), Participant("Amy", 0, 0)
        assert InteractionResolver.apply_rule(h, p) == (h, "killed-by-participant")
        assert p.health == 1

    @pytest.mark.parametrize("order", ["pr", "rp"])
    def test_participant_consumes_resource(self, order):
        p, r = Participant("Amy", 0, 0), Resource("food0", 0, 0)
        pair = (p, r) if order == "pr" else (r, p)
        assert InteractionResolver.apply_rule(*pair) == (r, "consumed")
        assert p.health == 4

    def test_participants_bump(self):
        a, b = Participant("Amy", 0, 0), Participant("Bob", 0, 0)
        assert InteractionResolver.apply_rule(a, b) is None
        assert (a.health, b.health) == (2, 2)

    @pytest.mark.parametrize(
        "a, b",
        [
            (Hostile("foe0", 0, 0), Hostile("foe1", 0, 0)),
            (Hostile("foe0", 0, 0), Resource("food0", 0, 0)),
            (Resource("food0", 0, 0), Hostile("foe0", 0, 0)),
            (Resource("food0", 0, 0), Resource("food1", 0, 0)),
        ],
    )
    def test_non_participant_pairs_only_bounce(self, a, b):
        assert InteractionResolver.apply_rule(a, b) is None

    def test_ghosts_have_no_rule(self):
        with pytest.raises(TypeError):
            InteractionResolver.apply_rule(Ghost("Amy", 0, 0, 0), Hostile("foe0", 0, 0))


class TestStep:
    def test_integrates_with_fixed_step(self, make_state):
        rules = MatchRules(step_hz=4, elimination="remove")
        a = Hostile("foe0", 0.0, 0.0, vx=1.0, vz=-2.0)
        b = Resource("food0", 20.0, 20.0)
        state = make_state([a, b], rules=rules)
        InteractionResolver().step(state)
        assert (a.x, a.z) == (0.25, -0.5)
        assert state.tick == 1

    def test_collision_swaps_velocities_and_logs(self, make_state):
        a = Hostile("foe0", 0.0, 0.0, vx=1.0, vz=0.0)
        b = Hostile("foe1", 1.5, 0.0, vx=-1.0, vz=0.5)
        c = Resource("food0", 30.0, 30.0)
        state = make_state([a, b, c])
        InteractionResolver().step(state)
        assert (a.vx, a.vz, b.vx, b.vz) == (-1.0, 0.5, 1.0, 0.0)
        rec = list(state.log)[-1]
        assert rec.kind.value == "collision"
        assert rec.data == {"a": "foe0", "ta": "foe", "ahp": None, "b": "foe1", "tb": "foe", "bhp": None}

    def test_touching_boxes_overlap(self):
        assert Hostile("a", 0.0, 0.0).overlaps(Hostile("b", 2.0, 2.0), 1.0)
        assert not Hostile("a", 0.0, 0.0).overlaps(Hostile("b", 2.001, 0.0), 1.0)

    def test_removed_entities_are_skipped_for_the_rest_of_the_scan(self, make_state):
        p = Participant("Amy", 0.0, 0.0)
        h = Hostile("foe0", 0.5, 0.0)
        r = Resource("food0", 1.0, 0.0)
        state = make_state([p, h, r])
        ended = InteractionResolver().step(state)

        records = list(state.log)
        assert [(x.kind.value, x.data.get("id") or x.data.get("b")) for x in records] == [
            ("collision", "foe0"),
            ("remove", "foe0"),
            ("collision", "food0"),
            ("remove", "food0"),
        ]
        # Health logged on the collision is the value before the rule applied.
        assert records[0].data["ahp"] == 3
        assert records[2].data["ahp"] == 1
        assert p.health == 2
        assert state.entities == [p]
        assert ended is True

    def test_outer_entity_removed_stops_its_inner_scan(self, make_state):
        h = Hostile("foe0", 0.0, 0.0)
        p = Participant("Amy", 0.5, 0.0)
        r = Resource("food0", -0.5, 0.0)
        q = Participant("Bob", 40.0, 40.0)
        state = make_state([h, p, r, q])
        InteractionResolver().step(state)
        # (foe0, Amy) removes foe0, so (foe0, food0) never happens; (Amy, food0) still does.
        assert _kinds(state) == [
            (1, "collision", "foe0"),
            (1, "remove", "foe0"),
            (1, "collision", "Amy"),
            (1, "remove", "food0"),
        ]
        assert [e.id for e in state.entities] == ["Amy", "Bob"]
        assert p.health == 2

    def test_elimination_removes_participant(self, make_state):
        p = Participant("Amy", 0.0, 0.0, health=1)
        h = Hostile("foe0", 0.5, 0.0)
        far = [Resource("food0", 30.0, 30.0), Resource("food1", -30.0, -30.0)]
        state = make_state([p, h, *far])
        InteractionResolver().step(state)
        removes = [(r.data["id"], r.data["reason"]) for r in state.log if r.kind.value == "remove"]
        assert removes == [("foe0", "killed-by-participant"), ("Amy", "eliminated")]
        assert [e.id for e in state.entities] == ["food0", "food1"]
        assert state.ghosts == []

    def test_elimination_into_ghost(self, make_state):
        rules = MatchRules(elimination="ghost")
        a = Participant("Amy", 0.0, 0.0, health=1)
        b = Participant("Bob", 0.5, 0.0, health=1)
        far = Resource("food0", 30.0, 30.0)
        state = make_state([a, b, far], rules=rules)
        ended = InteractionResolver().step(state)
        # Eliminations are logged back to front.
        removes = [r.data["id"] for r in state.log if r.kind.value == "remove"]
        assert removes == ["Bob", "Amy"]
        assert [g.id for g in state.ghosts] == ["Bob", "Amy"]
        assert all(isinstance(g, Ghost) for g in state.ghosts)
        assert state.entities == [far]
        assert ended is True

    def test_ghosts_take_no_part_in_later_steps(self, make_state):
        rules = MatchRules(elimination="ghost")
        state = make_state([Hostile("foe0", 0.0, 0.0), Hostile("foe1", 20.0, 0.0)], rules=rules)
        state.ghosts.append(Ghost("Amy", 0.0, 0.0, health=0))
        InteractionResolver().step(state)
        assert len(state.log) == 0
        assert (state.ghosts[0].x, state.ghosts[0].z) == (0.0, 0.0)


class TestBoundary:
    def test_exact_edge_reflects(self):
        e = Hostile("foe0", 49.0, 0.0, vx=2.0, vz=0.0)
        e.reflect(49.0)
        assert (e.vx, e.vz) == (-2.0, 0.0)

    def test_inside_is_left_alone(self):
        e = Hostile("foe0", 48.999, -48.999, vx=2.0, vz=-2.0)
        e.reflect(49.0)
        assert (e.vx, e.vz) == (2.0, -2.0)

    def test_outside_flips_regardless_of_heading(self):
        e = Hostile("foe0", 49.5, 0.0, vx=-1.0)
        e.reflect(49.0)
        assert e.vx == 1.0
        f = Hostile("foe1", -49.5, 49.5, vx=1.0, vz=-1.0)
        f.reflect(49.0)
        assert (f.vx, f.vz) == (-1.0, 1.0)

    def test_one_flip_per_step(self, make_state):
        a = Hostile("foe0", 49.5, 0.0, vx=-6.0)
        b = Hostile("foe1", -20.0, 0.0)
        state = make_state([a, b])
        resolver = InteractionResolver()
        resolver.step(state)
        # 49.4 after integration, still past the edge: flipped outward once
        assert a.vx == 6.0
        resolver.step(state)
        assert a.vx == -6.0

    def test_both_axes(self):
        e = Resource("food0", -50.0, 50.0, vx=-1.0, vz=3.0)
        e.reflect(49.0)
        assert (e.vx, e.vz) == (1.0, -3.0)

    def test_no_event_logged_for_reflection(self, make_state):
        a = Hostile("foe0", 48.99, 0.0, vx=6.0)
        b = Hostile("foe1", -20.0, 0.0)
        state = make_state([a, b])
        InteractionResolver().step(state)
        assert a.vx == -6.0
        assert len(state.log) == 0


class TestTermination:
    def test_tick_cap_forces_end(self, make_state):
        a = Hostile("foe0", -10.0, 0.0, vx=0.0, vz=1.0)
        b = Resource("food0", 10.0, 0.0, vx=0.0, vz=1.0)
        state = make_state([a, b], max_ticks=5)
        resolver = InteractionResolver()
        results = [resolver.step(state) for _ in range(5)]
        assert results == [False, False, False, False, True]
        assert state.tick == 5

    def test_single_live_entity_ends(self, make_state):
        state = make_state([Hostile("foe0", 0.0, 0.0)])
        assert InteractionResolver().step(state) is True
