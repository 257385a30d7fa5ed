import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from Assembler import Assembler
from Config import load_config
from Core import Core
from Errors import AddressOutOfRange, SimulatorError, SimulatorStateError
from Instruction import decode
from Loader import bytes_to_words, words_to_bytes
from Memory import make_memory
from Registers import register_index
from Statistics import ClockConfiguration, ExecutionStatistics

logger = logging.getLogger(__name__)


class SimulationState(Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class MachineSnapshot:
    """Immutable copy of the machine handed to observers after every step."""

    pc: int
    registers: Tuple[int, ...]
    memory: bytes
    current_instruction: Optional[int]
    current_instruction_hex: str
    current_instruction_assembly: str
    last_instruction: str
    r_count: int
    i_count: int
    j_count: int
    clock_cycles: int
    execution_time: float
    state: str
    finished: bool
    error: Optional[str] = None

    def register(self, name) -> int:
        """Register value by index or by name (``"t0"``, ``"$sp"``)."""
        index = name if isinstance(name, int) else register_index(name)
        return self.registers[index]

    def word_at(self, address: int) -> int:
        return int.from_bytes(self.memory[address:address + 4], "little")

    def to_dict(self):
        return {
            "pc": self.pc,
            "registers": list(self.registers),
            "memory": self.memory.hex(),
            "current_instruction": self.current_instruction,
            "current_instruction_hex": self.current_instruction_hex,
            "current_instruction_assembly": self.current_instruction_assembly,
            "last_instruction": self.last_instruction,
            "r_count": self.r_count,
            "i_count": self.i_count,
            "j_count": self.j_count,
            "clock_cycles": self.clock_cycles,
            "execution_time": self.execution_time,
            "state": self.state,
            "finished": self.finished,
            "error": self.error,
        }


class Simulator:
    """
    Owns one machine (core, memory, statistics) and drives it either one
    step at a time or continuously on a background worker.

    Every cycle runs under a single lock, so a single step never interleaves
    with the worker. Observers registered with ``subscribe`` are called as
    ``callback(event, snapshot)``.
    """

    def __init__(self, memory=None, clock: ClockConfiguration = None,
                 load_address: int = 0, snapshot_bytes: int = 1024):
        self.core = Core(memory)
        self.clock = clock or ClockConfiguration()
        self.statistics = ExecutionStatistics()
        self.load_address = load_address
        self.snapshot_bytes = snapshot_bytes

        self.program = []
        self.labels = {}
        self.last_instruction = None
        self.last_error = None

        self._state = SimulationState.IDLE
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._executor = None
        self._future = None
        self._listeners = []
        self._snapshot = self._build_snapshot()

    @classmethod
    def from_config(cls, config: dict = None):
        config = config or load_config()
        memory_config = config["memory"]
        return cls(
            memory=make_memory(memory_config["kind"], memory_config["size"]),
            clock=ClockConfiguration.from_dict(config["clock"]),
            load_address=memory_config["load_address"],
            snapshot_bytes=config["snapshot"]["memory_bytes"],
        )

    # --- observers ---

    def subscribe(self, callback: Callable):
        self._listeners.append(callback)
        return callback

    def unsubscribe(self, callback: Callable):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, event: str, snapshot: MachineSnapshot):
        for callback in list(self._listeners):
            try:
                callback(event, snapshot)
            except Exception:
                logger.exception("Observer %r failed on %s event", callback, event)

    # --- state ---

    @property
    def state(self) -> SimulationState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SimulationState.RUNNING

    @property
    def snapshot(self) -> MachineSnapshot:
        return self._snapshot

    def _build_snapshot(self) -> MachineSnapshot:
        core = self.core
        finished = core.has_finished()

        word = None
        hex_text = ""
        assembly = ""
        if not finished:
            try:
                word = core.fetch()
            except AddressOutOfRange:
                word = None
            if word is not None:
                instruction = decode(word)
                hex_text = instruction.hex
                assembly = str(instruction)

        return MachineSnapshot(
            pc=core.pc,
            registers=core.registers.as_tuple(),
            memory=core.memory.dump(0, self.snapshot_bytes),
            current_instruction=word,
            current_instruction_hex=hex_text,
            current_instruction_assembly=assembly,
            last_instruction=str(self.last_instruction) if self.last_instruction is not None else "",
            r_count=self.statistics.r_count,
            i_count=self.statistics.i_count,
            j_count=self.statistics.j_count,
            clock_cycles=self.statistics.clock_cycles,
            execution_time=self.statistics.execution_time,
            state=self._state.value,
            finished=finished,
            error=self.last_error,
        )

    def _require_idle(self, action: str):
        if self._state != SimulationState.IDLE:
            raise SimulatorStateError(f"cannot {action} while the simulation is running")

    # --- loading ---

    def load_program(self, source):
        """
        Assemble ``source`` and install it. A ParseError leaves the current
        machine untouched.

        Returns:
            list[int]: the assembled words
        """
        self._require_idle("load a program")
        assembler = Assembler(self.load_address)
        words = assembler.assemble(source)
        self._install(words, assembler.labels)
        return words

    def load_binary(self, data):
        """Install raw machine code given as little-endian bytes or a list of words."""
        self._require_idle("load a program")
        if isinstance(data, (bytes, bytearray)):
            words = bytes_to_words(bytes(data))
        else:
            words = [w & 0xFFFFFFFF for w in data]
        self._install(words, {})
        return words

    def _install(self, words, labels):
        with self._lock:
            self.core.load_program(words_to_bytes(words), self.load_address)
            self.statistics.reset()
            self.program = list(words)
            self.labels = dict(labels)
            self.last_instruction = None
            self.last_error = None
            self._snapshot = snapshot = self._build_snapshot()
        logger.info("Program loaded: %d instructions at 0x%08X", len(words), self.load_address)
        self._notify("loaded", snapshot)

    def set_clock_configuration(self, frequency: int, r_cycles: int = 1,
                                i_cycles: int = 1, j_cycles: int = 1):
        """Takes effect from the next time computation; counters are untouched."""
        self.clock = ClockConfiguration(frequency, r_cycles, i_cycles, j_cycles)
        logger.info("Clock configuration: %s", self.clock)
        self._notify("clock", self._snapshot)
        return self.clock

    # --- execution ---

    def step(self) -> MachineSnapshot:
        """Execute exactly one instruction. Only valid while idle."""
        self._require_idle("single-step")
        return self._step()

    def _step(self) -> MachineSnapshot:
        events = []
        error = None
        with self._lock:
            if self.core.has_finished():
                self._snapshot = self._build_snapshot()
                events.append("completed")
            else:
                try:
                    instruction, terminate = self.core.execute_cycle()
                except SimulatorError as e:
                    error = e
                    self.last_error = str(e)
                    self._snapshot = self._build_snapshot()
                    events.append("error")
                else:
                    self.statistics.record(instruction.kind, self.clock)
                    self.last_instruction = instruction
                    self.last_error = None
                    self._snapshot = self._build_snapshot()
                    events.append("step")
                    if terminate or self._snapshot.finished:
                        events.append("completed")
            snapshot = self._snapshot

        for event in events:
            self._notify(event, snapshot)
        if error is not None:
            raise error
        return snapshot

    def run(self, delay: float = None):
        """
        Start continuous execution on the background worker.

        Args:
            delay (float): seconds between cycles; defaults to one clock period
        """
        self._require_idle("start")
        pacing = self.clock.step_delay if delay is None else max(0.0, delay)

        with self._lock:
            self._state = SimulationState.RUNNING
            self._stop.clear()
            self._snapshot = snapshot = self._build_snapshot()
        logger.info("Simulation started (delay %.6fs)", pacing)
        self._notify("started", snapshot)

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1)
        self._future = self._executor.submit(self._run_loop, pacing)

    def _run_loop(self, pacing: float):
        try:
            while not self._stop.is_set():
                snapshot = self._step()
                if snapshot.finished:
                    logger.info("Program completed at PC 0x%08X", snapshot.pc)
                    break
                if pacing > 0 and self._stop.wait(pacing):
                    break
        except SimulatorError as e:
            logger.error("Simulation stopped: %s", e)
        finally:
            with self._lock:
                self._state = SimulationState.IDLE
                self._snapshot = snapshot = self._build_snapshot()
            self._notify("stopped", snapshot)

    def pause(self, timeout: float = 1.0) -> MachineSnapshot:
        """
        Ask the worker to stop after its current cycle and wait up to
        ``timeout`` seconds for it. A worker that has not stopped by then
        leaves the simulator running; call ``pause`` again.
        """
        if not self.is_running:
            return self._snapshot

        self._stop.set()
        future = self._future
        if future is not None:
            try:
                future.result(timeout=timeout)
            except FutureTimeout:
                logger.warning("Worker did not stop within %.1fs", timeout)
                return self._snapshot
            self._future = None

        with self._lock:
            self._state = SimulationState.IDLE
            self._snapshot = snapshot = self._build_snapshot()
        logger.info("Simulation paused at PC 0x%08X", snapshot.pc)
        self._notify("paused", snapshot)
        return snapshot

    def wait(self, timeout: float = None) -> MachineSnapshot:
        """Block until a running program stops on its own."""
        future = self._future
        if future is not None:
            future.result(timeout=timeout)
        return self._snapshot

    def run_to_completion(self, max_steps: int = 100000) -> MachineSnapshot:
        """Run synchronously, without pacing, until the program finishes."""
        self._require_idle("run")
        snapshot = self._snapshot
        steps = 0
        while not self.core.has_finished():
            if steps >= max_steps:
                logger.warning("Stopped after %d steps without completing", max_steps)
                break
            snapshot = self._step()
            steps += 1
        return snapshot

    def reset(self) -> MachineSnapshot:
        """Stop, reinstall the loaded program image and clear the statistics."""
        if self.is_running:
            self.pause()
        self._require_idle("reset")
        with self._lock:
            self.core.load_program(words_to_bytes(self.program), self.load_address)
            self.statistics.reset()
            self.last_instruction = None
            self.last_error = None
            self._snapshot = snapshot = self._build_snapshot()
        logger.info("Simulation reset")
        self._notify("reset", snapshot)
        return snapshot

    def shutdown(self):
        if self.is_running:
            self.pause()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
