from dataclasses import dataclass

from Instruction import InstructionType


@dataclass(frozen=True)
class ClockConfiguration:
    """Clock frequency (Hz) and cycles taken by each instruction class."""

    frequency: int = 1_000_000
    r_cycles: int = 1
    i_cycles: int = 1
    j_cycles: int = 1

    def __post_init__(self):
        for name in ("frequency", "r_cycles", "i_cycles", "j_cycles"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

    @classmethod
    def from_dict(cls, data):
        data = data or {}
        return cls(
            frequency=data.get("frequency", cls.frequency),
            r_cycles=data.get("r_cycles", cls.r_cycles),
            i_cycles=data.get("i_cycles", cls.i_cycles),
            j_cycles=data.get("j_cycles", cls.j_cycles),
        )

    def to_dict(self):
        return {
            "frequency": self.frequency,
            "r_cycles": self.r_cycles,
            "i_cycles": self.i_cycles,
            "j_cycles": self.j_cycles,
        }

    def cycles_for(self, kind: InstructionType) -> int:
        if kind == InstructionType.R:
            return self.r_cycles
        if kind == InstructionType.I:
            return self.i_cycles
        return self.j_cycles

    def total_time(self, r_count: int, i_count: int, j_count: int) -> float:
        cycles = r_count * self.r_cycles + i_count * self.i_cycles + j_count * self.j_cycles
        return cycles / self.frequency

    @property
    def step_delay(self) -> float:
        """Seconds between cycles when pacing continuous execution."""
        return 1.0 / self.frequency


class ExecutionStatistics:
    """Instruction counters per class, clock cycles and simulated time."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.r_count = 0
        self.i_count = 0
        self.j_count = 0
        self.clock_cycles = 0
        self.execution_time = 0.0

    def record(self, kind: InstructionType, config: ClockConfiguration):
        if kind == InstructionType.R:
            self.r_count += 1
        elif kind == InstructionType.I:
            self.i_count += 1
        else:
            self.j_count += 1
        self.clock_cycles += config.cycles_for(kind)
        self.update_execution_time(config)

    def update_execution_time(self, config: ClockConfiguration):
        self.execution_time = config.total_time(self.r_count, self.i_count, self.j_count)
        return self.execution_time

    @property
    def total_instructions(self) -> int:
        return self.r_count + self.i_count + self.j_count

    def format_execution_time(self) -> str:
        t = self.execution_time
        if t < 1e-6:
            return f"{t * 1e9:.2f} ns"
        if t < 1e-3:
            return f"{t * 1e6:.2f} µs"
        if t < 1:
            return f"{t * 1e3:.2f} ms"
        return f"{t:.4f} s"

    def to_dict(self):
        return {
            "r_count": self.r_count,
            "i_count": self.i_count,
            "j_count": self.j_count,
            "clock_cycles": self.clock_cycles,
            "execution_time": self.execution_time,
        }
