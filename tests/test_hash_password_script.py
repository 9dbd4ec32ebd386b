import importlib.util
import io
import sys
from pathlib import Path

import main as cli
from seminar.security import verify_password

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "hash_password.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("hash_password_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_script_hashes_from_stdin(monkeypatch, capsys) -> None:
    script = _load_script()
    monkeypatch.setattr(sys, "stdin", io.StringIO("letmein\n"))

    assert script.main(["--stdin"]) == 0

    hashed = capsys.readouterr().out.strip()
    assert verify_password("letmein", hashed)


def test_script_delegates_to_cli_subcommand(monkeypatch) -> None:
    script = _load_script()
    seen = []
    monkeypatch.setattr(cli, "main", lambda argv: seen.append(argv) or 0)

    assert script.main(["--stdin"]) == 0
    assert seen == [["hash-password", "--stdin"]]
