import pytest

from game.sim.timebase import SimulationClock, wall_clock_seconds


class TestSimulationClock:
    def test_first_reading_only_anchors(self):
        clock = SimulationClock(0.25)
        assert clock.advance(100.0) == 0
        assert clock.accumulated == 0.0

    def test_whole_steps_and_remainder_carry(self):
        clock = SimulationClock(0.25)
        clock.advance(0.0)
        assert clock.advance(0.5) == 2
        assert clock.advance(0.625) == 0
        assert clock.accumulated == 0.125
        assert clock.advance(0.75) == 1
        assert clock.accumulated == 0.0

    def test_backwards_reading_counts_as_zero(self):
        clock = SimulationClock(0.25)
        clock.advance(1.0)
        assert clock.advance(0.5) == 0
        assert clock.accumulated == 0.0
        assert clock.advance(1.0) == 2

    def test_irregular_frames_give_same_total_steps(self):
        a, b = SimulationClock(0.25), SimulationClock(0.25)
        a.advance(0.0)
        b.advance(0.0)
        total_a = sum(a.advance(t) for t in (0.5, 1.0, 1.5, 2.0))
        total_b = sum(b.advance(t) for t in (0.125, 0.375, 1.125, 1.25, 2.0))
        assert total_a == total_b == 8

    def test_tick_only_moves_forward(self):
        clock = SimulationClock(0.25)
        assert clock.tick == 0
        assert clock.consume_step() == 1
        assert clock.consume_step() == 2
        assert clock.tick == 2

    def test_max_ticks_caps_steps(self):
        clock = SimulationClock(0.25, max_ticks=3)
        clock.advance(0.0)
        assert clock.advance(10.0) == 3
        for _ in range(3):
            clock.consume_step()
        assert clock.capped
        assert clock.advance(20.0) == 0

    def test_reset(self):
        clock = SimulationClock(0.25)
        clock.advance(0.0)
        clock.advance(0.3)
        clock.consume_step()
        clock.reset()
        assert (clock.tick, clock.accumulated) == (0, 0.0)
        assert clock.advance(5.0) == 0

    def test_rejects_non_positive_step(self):
        with pytest.raises(ValueError):
            SimulationClock(0)


def test_wall_clock_is_monotonic():
    a = wall_clock_seconds()
    b = wall_clock_seconds()
    assert 0.0 <= a <= b
