import pytest

from Instruction import InstructionType
from Statistics import ClockConfiguration, ExecutionStatistics


def test_default_clock():
    config = ClockConfiguration()
    assert config.frequency == 1_000_000
    assert config.cycles_for(InstructionType.R) == 1
    assert config.step_delay == pytest.approx(1e-6)


@pytest.mark.parametrize("kwargs", [
    {"frequency": 0},
    {"frequency": -5},
    {"r_cycles": 0},
    {"j_cycles": 1.5},
    {"i_cycles": True},
])
def test_invalid_clock_configuration(kwargs):
    with pytest.raises(ValueError):
        ClockConfiguration(**kwargs)


def test_execution_time_formula():
    config = ClockConfiguration(frequency=1000, r_cycles=2, i_cycles=3, j_cycles=4)
    assert config.total_time(1, 2, 3) == pytest.approx((2 + 6 + 12) / 1000)


def test_record_counts_and_cycles():
    config = ClockConfiguration(frequency=100, r_cycles=1, i_cycles=2, j_cycles=3)
    stats = ExecutionStatistics()
    stats.record(InstructionType.I, config)
    stats.record(InstructionType.I, config)
    stats.record(InstructionType.R, config)
    stats.record(InstructionType.J, config)
    assert (stats.r_count, stats.i_count, stats.j_count) == (1, 2, 1)
    assert stats.total_instructions == 4
    assert stats.clock_cycles == 1 + 2 * 2 + 3
    assert stats.execution_time == pytest.approx(8 / 100)


def test_changing_clock_recomputes_time_only():
    stats = ExecutionStatistics()
    stats.record(InstructionType.R, ClockConfiguration())
    stats.update_execution_time(ClockConfiguration(frequency=10))
    assert stats.r_count == 1
    assert stats.execution_time == pytest.approx(0.1)


def test_reset():
    stats = ExecutionStatistics()
    stats.record(InstructionType.R, ClockConfiguration())
    stats.reset()
    assert stats.to_dict() == {
        "r_count": 0, "i_count": 0, "j_count": 0, "clock_cycles": 0, "execution_time": 0.0,
    }


@pytest.mark.parametrize("seconds, text", [
    (3e-6, "3.00 µs"),
    (5e-9, "5.00 ns"),
    (0.25, "250.00 ms"),
    (2.0, "2.0000 s"),
])
def test_format_execution_time(seconds, text):
    stats = ExecutionStatistics()
    stats.execution_time = seconds
    assert stats.format_execution_time() == text


def test_from_dict_fills_defaults():
    config = ClockConfiguration.from_dict({"frequency": 50})
    assert config.to_dict() == {"frequency": 50, "r_cycles": 1, "i_cycles": 1, "j_cycles": 1}
