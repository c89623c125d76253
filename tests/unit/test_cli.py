from pathlib import Path

from siarni.cli.main import main

REFERENCE_FINGERPRINT = "ac9a0d1cf1d2462ef33605edccf2725e19027c451dcf7d1e460ffae2470d0246"
FIELD_ARGS = [
    "--husband", "Ahmad Sutrisno",
    "--wife", "Siti Aminah",
    "--date", "2024-05-01",
    "--nb", "001/2024",
    "--akta", "045/2024",
    "--kecamatan", "Sumbersari",
    "--bok", "B-12",
    "--lokasi", "KUA Sumbersari",
    "--text", "...",
]


def test_fingerprint_command_prints_reference_vector(tmp_path: Path, capsys) -> None:
    exit_code = main(["--project-root", str(tmp_path), "fingerprint", *FIELD_ARGS, "--canonical"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "AHMAD SUTRISNO|SITI AMINAH|2024-05-01" in out
    assert REFERENCE_FINGERPRINT in out


def test_add_and_verify_commands(tmp_path: Path, monkeypatch, capsys) -> None:
    monkeypatch.delenv("SIARNI_HOME", raising=False)
    scan = tmp_path / "scan.jpg"
    scan.write_bytes(b"scan bytes")

    assert main(["--project-root", str(tmp_path), "init"]) == 0
    assert main(["--project-root", str(tmp_path), "add", str(scan), *FIELD_ARGS]) == 0
    assert main(["--project-root", str(tmp_path), "verify", "fingerprint", REFERENCE_FINGERPRINT]) == 0
    assert main(["--project-root", str(tmp_path), "verify", "all"]) == 0

    out = capsys.readouterr().out
    assert "SUCCESS" in out


def test_commands_require_initialized_project(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("SIARNI_HOME", raising=False)
    assert main(["--project-root", str(tmp_path), "records", "list"]) == 1
