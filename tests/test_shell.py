import io
import os

import pytest

from hopshell.shell import EOF_MESSAGE, Shell, split_background


@pytest.fixture
def shell(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a" / "b").mkdir(parents=True)
    return Shell(str(tmp_path))


def test_split_background_single_foreground():
    assert split_background("echo hi") == [("echo hi", False)]


def test_split_background_trailing_ampersand():
    assert split_background("sleep 1 &") == [("sleep 1", True)]


def test_split_background_mixed():
    assert split_background("sleep 1 & echo hi") == [("sleep 1", True), ("echo hi", False)]


def test_split_background_all_backgrounded():
    pairs = split_background(" a & b & ")
    assert pairs == [("a", True), ("b", True)]


def test_hop_changes_directory(shell, tmp_path):
    shell.run_line("hop a")
    assert shell.state.curr == str(tmp_path / "a")
    assert os.getcwd() == str(tmp_path / "a")


def test_hop_back_with_dash(shell, tmp_path):
    shell.run_line("hop a b")
    shell.run_line("hop -")
    assert shell.state.curr == str(tmp_path / "a")
    assert shell.state.prev == str(tmp_path / "a" / "b")


def test_semicolons_run_in_order(shell, tmp_path):
    shell.run_line("hop a ; hop b")
    assert shell.state.curr == str(tmp_path / "a" / "b")


def test_history_recorded_and_saved(shell, tmp_path):
    shell.run_line("hop a")
    assert list(shell.history) == ["hop a"]
    assert (tmp_path / "store.txt").read_text() == "hop a\n"


def test_repeated_and_log_commands_not_recorded(shell):
    shell.run_line("hop .")
    shell.run_line("hop .")
    shell.run_line("log")
    assert list(shell.history) == ["hop ."]


def test_log_lists_history(shell, capsys):
    shell.run_line("hop a")
    shell.run_line("hop ..")
    capsys.readouterr()
    shell.run_log([])
    out = capsys.readouterr().out
    assert out.splitlines() == ["hop a", "hop .."]


def test_log_empty_history(shell, capsys):
    shell.run_log([])
    assert capsys.readouterr().out == "Queue is empty\n"


def test_log_purge(shell, tmp_path):
    shell.run_line("hop a")
    shell.run_line("log purge")
    assert len(shell.history) == 0
    assert (tmp_path / "store.txt").read_text() == ""


def test_log_execute_reruns_without_recording(shell, tmp_path):
    shell.run_line("hop a")
    shell.run_line("hop ..")
    shell.run_line("log execute 2")
    assert shell.state.curr == str(tmp_path / "a")
    assert list(shell.history) == ["hop a", "hop .."]


def test_log_execute_out_of_range(shell, capsys):
    shell.run_line("hop .")
    shell.run_log(["execute", "5"])
    assert "no history entry" in capsys.readouterr().err
    assert len(shell.history) == 1


def test_history_loaded_on_start(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "store.txt").write_text("hop x\nhop y\n")
    loaded = Shell(str(tmp_path))
    assert len(loaded.history) == 2
    assert list(loaded.history) == ["hop x", "hop y"]


def test_alias_expansion(shell, tmp_path):
    (tmp_path / ".myshrc").write_text("go=hop\n")
    shell.run_command("go a")
    assert shell.state.curr == str(tmp_path / "a")


def test_external_output_redirection(shell, tmp_path):
    shell.run_command("echo hello > out.txt")
    assert (tmp_path / "out.txt").read_text() == "hello\n"
    assert list(shell.jobs) == []
    assert shell.state.curr == str(tmp_path)


def test_external_append_redirection(shell, tmp_path):
    shell.run_command("echo one > out.txt")
    shell.run_command("echo two >> out.txt")
    assert (tmp_path / "out.txt").read_text() == "one\ntwo\n"
    assert list(shell.jobs) == []
    assert shell.state.curr == str(tmp_path)


def test_missing_input_file_reported(shell, capsys):
    shell.run_command("cat < missing.txt")
    assert "Error opening input file" in capsys.readouterr().err


def test_pipeline(shell, capfd):
    shell.run_pipeline("echo hello | tr a-z A-Z")
    assert "HELLO" in capfd.readouterr().out


def test_invalid_pipe(shell, capsys):
    shell.run_pipeline("echo a | | cat")
    assert capsys.readouterr().out == "Invalid use of pipe\n"


def test_background_job_registered(shell, capsys):
    shell.run_line("sleep 0 &")
    jobs = list(shell.jobs)
    try:
        assert [job.command for job in jobs] == ["sleep 0"]
        assert f"[{jobs[0].pid}] sleep 0" in capsys.readouterr().out
    finally:
        for job in jobs:
            os.waitpid(job.pid, 0)


def test_activities_without_jobs(shell, capsys):
    shell.run_command("activities")
    assert capsys.readouterr().out == "No background processes\n"


def test_fg_unknown_pid(shell, capsys):
    shell.run_command("fg 999999999")
    assert "No such process found" in capsys.readouterr().out


def test_prompt_shows_home_and_slow_command(shell):
    shell.jobs.slow_command = "sleep 3"
    first = shell.prompt()
    second = shell.prompt()
    assert first.endswith("> ")
    assert "~" in first
    assert "sleep 3" in first
    assert "sleep 3" not in second


def test_loop_stops_on_stop(shell, tmp_path):
    assert shell.loop(io.StringIO("hop a\nstop\nhop b\n")) == 0
    assert shell.state.curr == str(tmp_path / "a")


def test_loop_end_of_input(shell, capsys):
    assert shell.loop(io.StringIO("")) == 0
    assert EOF_MESSAGE in capsys.readouterr().out