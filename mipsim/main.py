import argparse
import logging
import os

from flask import Flask, request, jsonify
from flask_cors import CORS

from Assembler import assemble
from Config import load_config
from Errors import SimulatorError, SimulatorStateError
from Instruction import disassemble
from Loader import (bytes_to_words, load_assembly_file, load_binary_file, load_machine_code_text,
                    save_binary_file, save_machine_code_text)
from Registers import register_name
from Simulator import Simulator

logger = logging.getLogger(__name__)

MACHINE_CODE_EXTENSIONS = (".txt", ".hex")


# Sample programs
program_sum = '''
addi $t0, $zero, 10
addi $t1, $zero, 20
add  $t2, $t0, $t1
'''

program_loop = '''
addi $t0, $zero, 0
addi $t1, $zero, 3
loop: addi $t0, $t0, 1
bne $t0, $t1, loop
'''

program_memory = '''
addi $t0, $zero, 0x7F
sll  $t0, $t0, 8
sw   $t0, 0x100($zero)
lw   $t1, 0x100($zero)
'''


def create_app(simulator: Simulator = None):
    """Flask app serving snapshots of one simulator to a front end."""
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    sim = simulator or Simulator.from_config()
    app.config["SIMULATOR"] = sim

    def state_response(snapshot=None, **extra):
        response = (snapshot or sim.snapshot).to_dict()
        response["clock"] = sim.clock.to_dict()
        response["execution_time_text"] = sim.statistics.format_execution_time()
        response.update(extra)
        return jsonify(response)

    def program_text():
        data = request.get_json(silent=True) or {}
        program = data.get("program")
        if not isinstance(program, str):
            raise ValueError("request body must contain a 'program' string")
        return program

    @app.errorhandler(SimulatorError)
    def handle_simulator_error(e):
        status = 409 if isinstance(e, SimulatorStateError) else 400
        return jsonify({"error": str(e), "type": type(e).__name__}), status

    @app.errorhandler(ValueError)
    def handle_value_error(e):
        return jsonify({"error": str(e), "type": "ValueError"}), 400

    @app.route('/state', methods=['GET'])
    def get_state():
        return state_response()

    @app.route('/assemble', methods=['POST'])
    def assemble_program():
        words = assemble(program_text(), sim.load_address)
        return jsonify({
            "words": [f"0x{w:08X}" for w in words],
            "listing": [disassemble(w) for w in words],
        })

    @app.route('/load', methods=['POST'])
    def load_program():
        data = request.get_json(silent=True) or {}
        if "words" in data:
            # raw machine code: ints or "0x..." strings
            words = sim.load_binary([w if isinstance(w, int) else int(str(w), 0) for w in data["words"]])
        else:
            words = sim.load_program(program_text())
        return state_response(words=[f"0x{w:08X}" for w in words], labels=sim.labels)

    @app.route('/step', methods=['POST'])
    def step():
        return state_response(sim.step())

    @app.route('/run', methods=['POST'])
    def run_program():
        data = request.get_json(silent=True) or {}
        delay = data.get("delay")
        sim.run(float(delay) if delay is not None else None)
        return state_response()

    @app.route('/pause', methods=['POST'])
    def pause():
        return state_response(sim.pause())

    @app.route('/reset', methods=['POST'])
    def reset():
        return state_response(sim.reset())

    @app.route('/clock', methods=['POST'])
    def set_clock():
        data = request.get_json(silent=True) or {}
        current = sim.clock.to_dict()
        sim.set_clock_configuration(
            frequency=data.get("frequency", current["frequency"]),
            r_cycles=data.get("r_cycles", current["r_cycles"]),
            i_cycles=data.get("i_cycles", current["i_cycles"]),
            j_cycles=data.get("j_cycles", current["j_cycles"]),
        )
        return state_response()

    return app


def read_program(path: str):
    """Assembly source text, or a list of words for .bin and .txt/.hex machine-code images."""
    extension = os.path.splitext(path)[1].lower()
    if extension == ".bin":
        return bytes_to_words(load_binary_file(path))
    if extension in MACHINE_CODE_EXTENSIONS:
        return load_machine_code_text(path)
    return load_assembly_file(path)


def write_program(path: str, words):
    if os.path.splitext(path)[1].lower() == ".bin":
        save_binary_file(path, words)
    else:
        save_machine_code_text(path, words)
    logger.info("Wrote %d words to %s", len(words), path)


def main(program, max_steps: int = 100000, config: dict = None):
    """
    Run ``program`` to completion and return the simulator. A string is
    assembled first; a list of ints is loaded as machine code.
    """
    sim = Simulator.from_config(config)
    if isinstance(program, str):
        sim.load_program(program)
    else:
        sim.load_binary(program)
    snapshot = sim.run_to_completion(max_steps)

    logger.info("Finished at PC 0x%08X after %d instructions (%s)",
                snapshot.pc, sim.statistics.total_instructions,
                sim.statistics.format_execution_time())
    return sim


def print_state(sim: Simulator):
    snapshot = sim.snapshot
    print("=== Register States ===")
    for i, value in enumerate(snapshot.registers):
        if value:
            print(f"{register_name(i):6} 0x{value:08X} ({value})")
    print(f"PC: 0x{snapshot.pc:08X}")
    print(f"Instructions: R={snapshot.r_count} I={snapshot.i_count} J={snapshot.j_count}")
    print(f"Clock cycles: {snapshot.clock_cycles}")
    print(f"Execution time: {sim.statistics.format_execution_time()}")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="MIPS subset simulator")
    parser.add_argument("program", nargs="?",
                        help="assembly (.asm) or machine code (.bin, .txt, .hex) to run; serves the API when omitted")
    parser.add_argument("--config", help="YAML configuration file")
    parser.add_argument("--max-steps", type=int, default=100000)
    parser.add_argument("--output", help="assemble only and write the machine code here (.bin or text)")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(name)s %(levelname)s %(message)s")
    config = load_config(args.config)

    if args.program and args.output:
        program = read_program(args.program)
        if isinstance(program, str):
            program = assemble(program, config["memory"]["load_address"])
        write_program(args.output, program)
    elif args.program:
        print_state(main(read_program(args.program), args.max_steps, config))
    else:
        app = create_app(Simulator.from_config(config))
        app.run(host=config["server"]["host"], port=config["server"]["port"])
