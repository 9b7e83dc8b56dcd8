"""
Tests de los temporizadores DT (delay) y ST (sound).

Fuente: Cowgod's Chip-8 Technical Reference - 2.5 Timers & Sound
"""

from chip8.io.timer import Timers
from tests.helpers_cpu import load_program, run_steps


class TestTimers:
    """Decremento a 60 Hz"""

    def test_initial_state(self) -> None:
        timers = Timers()
        assert timers.read_delay() == 0
        assert timers.read_sound() == 0
        assert timers.sound_active is False

    def test_tick_at_zero_stays_zero(self) -> None:
        timers = Timers()
        timers.tick()
        assert timers.read_delay() == 0
        assert timers.read_sound() == 0

    def test_independent_countdown(self) -> None:
        timers = Timers()
        timers.write_delay(2)
        timers.write_sound(4)

        timers.tick()
        timers.tick()

        assert timers.read_delay() == 0
        assert timers.read_sound() == 2

    def test_sound_tone_transitions(self) -> None:
        """El tono se activa al escribir ST != 0 y se apaga al llegar a 0."""
        timers = Timers()

        timers.write_sound(2)
        assert timers.sound_active is True

        assert timers.tick() is True
        assert timers.tick() is False
        assert timers.sound_active is False

    def test_write_sound_zero_stops_tone(self) -> None:
        timers = Timers()
        timers.write_sound(10)
        timers.write_sound(0)
        assert timers.sound_active is False

    def test_reset(self) -> None:
        timers = Timers()
        timers.write_delay(9)
        timers.write_sound(9)
        timers.reset()
        assert timers.read_delay() == 0
        assert timers.sound_active is False


class TestTimerInstructions:
    """Fx07, Fx15 y Fx18"""

    def test_delay_countdown_to_zero(self, machine) -> None:
        """DT = 3 vía Fx15; tres ticks lo dejan a 0 y un cuarto no lo hace negativo."""
        load_program(machine, [0x6003, 0xF015])
        run_steps(machine, 2)
        assert machine.delay_timer == 3

        for expected in (2, 1, 0):
            machine.tick_timers()
            assert machine.delay_timer == expected

        machine.tick_timers()
        assert machine.delay_timer == 0

    def test_read_delay(self, machine) -> None:
        load_program(machine, [0x6030, 0xF015, 0xF107])
        run_steps(machine, 2)
        machine.tick_timers()
        machine.step()
        assert machine.registers.get_v(1) == 0x2F

    def test_sound_timer(self, machine) -> None:
        load_program(machine, [0x6002, 0xF018])
        run_steps(machine, 2)

        assert machine.sound_timer == 2
        assert machine.sound_active is True

        machine.tick_timers()
        assert machine.sound_active is True
        machine.tick_timers()
        assert machine.sound_active is False

    def test_step_does_not_tick_timers(self, machine) -> None:
        load_program(machine, [0x6009, 0xF015, 0x1204])
        run_steps(machine, 50)
        assert machine.delay_timer == 9
