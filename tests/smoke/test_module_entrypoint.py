import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _run(*args):
    return subprocess.run(
        [sys.executable, "-m", "loan_rates", *args],
        cwd=ROOT,
        capture_output=True,
        text=True,
    )


def test_python_m_rate():
    proc = _run("rate", "--payment", "450.00", "--term", "72", "--principal", "25000")
    assert proc.returncode == 0, proc.stderr
    assert proc.stdout.strip() == "0.089485"


def test_python_m_bad_input_exits_nonzero():
    proc = _run("apr", "--annual-rate", "0.1", "--term", "12", "--principal", "-5")
    assert proc.returncode == 2
    assert "ERROR" in proc.stderr
