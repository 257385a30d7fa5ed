import pytest

from Assembler import assemble
from main import create_app, main, program_loop, program_memory, program_sum, read_program, write_program
from Simulator import Simulator


@pytest.fixture
def client():
    sim = Simulator()
    app = create_app(sim)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
    sim.shutdown()


def test_state(client):
    response = client.get("/state")
    assert response.status_code == 200
    data = response.get_json()
    assert data["pc"] == 0
    assert data["state"] == "idle"
    assert len(data["registers"]) == 32
    assert data["clock"]["frequency"] == 1000000


def test_assemble_only(client):
    response = client.post("/assemble", json={"program": program_sum})
    assert response.get_json()["words"] == ["0x2008000A", "0x20090014", "0x01095020"]
    assert client.get("/state").get_json()["finished"]


def test_load_and_step(client):
    data = client.post("/load", json={"program": program_loop}).get_json()
    assert data["labels"] == {"loop": 8}
    assert data["current_instruction_assembly"] == "addi $t0, $zero, 0"

    data = client.post("/step").get_json()
    assert data["pc"] == 4
    assert data["i_count"] == 1
    assert data["last_instruction"] == "addi $t0, $zero, 0"


def test_parse_error_is_bad_request(client):
    response = client.post("/load", json={"program": "addi $t0, $t1, $t2"})
    assert response.status_code == 400
    assert response.get_json()["type"] == "ParseError"


def test_missing_program_is_bad_request(client):
    assert client.post("/load", json={}).status_code == 400


def test_run_pause_reset(client):
    client.post("/load", json={"program": "loop: j loop"})
    assert client.post("/run", json={"delay": 0.001}).get_json()["state"] == "running"
    conflict = client.post("/step")
    assert conflict.status_code == 409
    assert conflict.get_json()["type"] == "SimulatorStateError"

    paused = client.post("/pause").get_json()
    assert paused["state"] == "idle"

    reset = client.post("/reset").get_json()
    assert reset["j_count"] == 0
    assert reset["pc"] == 0


def test_clock(client):
    data = client.post("/clock", json={"frequency": 100, "i_cycles": 3}).get_json()
    assert data["clock"] == {"frequency": 100, "r_cycles": 1, "i_cycles": 3, "j_cycles": 1}
    assert client.post("/clock", json={"frequency": -1}).status_code == 400


def test_batch_main():
    sim = main(program_sum)
    assert sim.snapshot.register("t2") == 30
    assert sim.snapshot.pc == 12

    sim = main(program_memory)
    assert sim.snapshot.register("t1") == 0x7F00
    assert sim.snapshot.word_at(0x100) == 0x7F00


def test_assemble_listing(client):
    data = client.post("/assemble", json={"program": "addi $t0,$zero,10\njr $ra"}).get_json()
    assert data["listing"] == ["addi $t0, $zero, 10", "jr $ra"]


def test_load_machine_words(client):
    data = client.post("/load", json={"words": ["0x2008000A", 0x20090014]}).get_json()
    assert data["words"] == ["0x2008000A", "0x20090014"]
    assert data["current_instruction_assembly"] == "addi $t0, $zero, 10"
    assert client.post("/load", json={"words": ["zz"]}).status_code == 400


def test_load_image_too_large(client):
    response = client.post("/load", json={"words": [0] * 2000})
    assert response.status_code == 400
    assert response.get_json()["type"] == "AddressOutOfRange"


@pytest.mark.parametrize("name", ["prog.txt", "prog.hex", "prog.bin"])
def test_machine_code_files_run(tmp_path, name):
    path = str(tmp_path / name)
    write_program(path, assemble(program_sum))
    program = read_program(path)
    assert program == [0x2008000A, 0x20090014, 0x01095020]
    assert main(program).snapshot.register("t2") == 30


def test_read_assembly_file(tmp_path):
    path = tmp_path / "prog.asm"
    path.write_text(program_loop, encoding="utf-8")
    assert read_program(str(path)) == program_loop
    assert main(read_program(str(path))).snapshot.register("t0") == 3
