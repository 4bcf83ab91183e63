from chipvm.cli import build_parser, main, run, run_frame
from chipvm.constants import DEFAULT_CLOCK_HZ
from chipvm.machine import Machine


class FakeFrontend:
    """Feeds scripted input and records what the driver hands back."""

    def __init__(self, events):
        self.events = list(events)
        self.snapshots = []
        self.ticks = 0

    def handle_events(self):
        if not self.events:
            return {}, None, False
        return self.events.pop(0)

    def handle_snapshot(self, snapshot):
        self.snapshots.append(snapshot)

    def tick(self, fps):
        self.ticks += 1


def test_parser_defaults() -> None:
    args = build_parser().parse_args(["game.ch8"])

    assert args.rom == "game.ch8"
    assert args.clock == DEFAULT_CLOCK_HZ
    assert args.scale == 15
    assert args.tone == 440
    assert not args.disassemble


def test_main_disassembles(tmp_path, capsys) -> None:
    path = tmp_path / "prog.ch8"
    path.write_bytes(bytes([0x60, 0x0A, 0xA0, 0x00]))

    assert main([str(path), "--disassemble"]) == 0

    out = capsys.readouterr().out
    assert "0x200: 600A  LD V0, 0x0A" in out
    assert "0x202: A000  LD I, 0x000" in out


def test_main_reports_missing_rom(tmp_path) -> None:
    assert main([str(tmp_path / "missing.ch8")]) == 1


def test_main_reports_oversized_rom(tmp_path) -> None:
    path = tmp_path / "huge.ch8"
    path.write_bytes(bytes(8192))

    assert main([str(path), "--disassemble"]) == 1


def test_run_frame_folds_display_changes() -> None:
    machine = Machine(bytes([0xD0, 0x15, 0x60, 0x01, 0x12, 0x04]))

    snap = run_frame(machine, {}, None, 3)

    assert snap.display_changed
    assert machine.registers[0] == 1


def test_run_frame_passes_key_to_first_step_only() -> None:
    machine = Machine(bytes([0xF0, 0x0A, 0xF1, 0x0A]))
    machine.step({})

    snap = run_frame(machine, {}, 7, 3)

    assert machine.registers[0] == 7
    assert machine.waiting_for_input == 1
    assert snap.waiting_for_input


def test_run_until_frontend_stops() -> None:
    machine = Machine(bytes([0x70, 0x01, 0x12, 0x00]))
    frontend = FakeFrontend([({}, None, True), ({}, None, True)])

    run(machine, frontend, clock_hz=120)

    assert len(frontend.snapshots) == 2
    assert frontend.ticks == 2
    # two frames of two cycles each: ADD, JP, ADD, JP
    assert machine.registers[0] == 2
