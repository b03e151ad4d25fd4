import json
import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]


def _run_cli(args, cwd=None, input=None, timeout=60):
    """
    Run the CLI as a subprocess: python -m textparser.cli <args>
    Returns CompletedProcess with stdout/stderr text captured.
    """
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(REPO_ROOT), env.get("PYTHONPATH")) if p)
    cmd = [sys.executable, "-m", "textparser.cli"] + list(map(str, args))
    return subprocess.run(cmd, cwd=cwd, env=env, input=input, capture_output=True, text=True, timeout=timeout)


def _load_json(p: Path):
    with p.open("r") as f:
        return json.load(f)


def _assert_exit_ok(proc):
    assert proc.returncode == 0, f"Non-zero exit:\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"


def _assert_file(p: Path):
    assert p.exists(), f"Expected file missing: {p}"
    return p


@pytest.fixture()
def run_cli():
    return _run_cli


@pytest.fixture()
def load_json():
    return _load_json


@pytest.fixture()
def assert_exit_ok():
    return _assert_exit_ok


@pytest.fixture()
def assert_file():
    return _assert_file


@pytest.fixture()
def dataset_dir(tmp_path: Path) -> Path:
    """
    Copy the embedded dataset into a temporary directory and return its path.
    """
    src = Path(__file__).parent / "assets" / "dataset"
    dst = tmp_path / "dataset"
    shutil.copytree(src, dst)
    return dst


@pytest.fixture()
def out_dir(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir(parents=True, exist_ok=True)
    return d
