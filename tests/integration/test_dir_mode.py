from pathlib import Path


def test_dir_mode_end_to_end(dataset_dir: Path, out_dir: Path, run_cli, load_json, assert_exit_ok, assert_file):
    proc = run_cli(["dir", dataset_dir, "--out", out_dir, "--no-progress"])
    assert_exit_ok(proc)

    index = load_json(assert_file(out_dir / "index.json"))
    by_source = {Path(item["source"]).as_posix(): item for item in index}
    assert set(by_source) == {
        "broken.csv",
        "divider.cir",
        "notes.txt",
        "parts.csv",
        "nested/deploy.sh",
        "nested/readme.md",
    }
    assert by_source["broken.csv"]["error"]
    assert by_source["parts.csv"]["records"] == 3
    assert by_source["divider.cir"]["aborted"] is True

    deploy = load_json(assert_file(out_dir / "nested__deploy.sh.json"))
    assert deploy["parser"] == "backslash"
    assert len(deploy["records"]) == 3
    assert deploy["records"][1].startswith("rsync -a")
    assert deploy["records"][1].endswith("dst/")
    assert_file(out_dir / "summary.md")


def test_dir_mode_include_and_exclude(dataset_dir: Path, out_dir: Path, run_cli, load_json, assert_exit_ok, assert_file):
    proc = run_cli(
        ["dir", dataset_dir, "--out", out_dir, "--no-progress", "--include", "*.txt,*.md,*.sh", "--exclude", "nested"]
    )
    assert_exit_ok(proc)
    index = load_json(assert_file(out_dir / "index.json"))
    assert [item["source"] for item in index] == ["notes.txt"]


def test_dir_mode_forced_parser(dataset_dir: Path, out_dir: Path, run_cli, load_json, assert_exit_ok, assert_file):
    proc = run_cli(["dir", dataset_dir, "--out", out_dir, "--no-progress", "--parser", "text", "--include", "*.csv"])
    assert_exit_ok(proc)
    index = load_json(assert_file(out_dir / "index.json"))
    assert {item["parser"] for item in index} == {"text"}
    assert all(item["error"] is None for item in index)


def test_list_mode(run_cli, assert_exit_ok):
    proc = run_cli(["list"])
    assert_exit_ok(proc)
    names = {line.split()[0] for line in proc.stdout.splitlines() if line.strip()}
    assert {"text", "csv", "backslash", "spice", "abort_marker"} <= names
