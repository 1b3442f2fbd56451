import os
import signal
import subprocess
import time

import pytest

from hopshell.jobs import (
    BackgroundJob,
    CommandLine,
    JobTable,
    ping,
    process_status,
    run_external,
    split_command_line,
)


def _cleanup(*pids):
    for pid in pids:
        try:
            os.kill(pid, signal.SIGKILL)
        except OSError:
            pass
        try:
            os.waitpid(pid, 0)
        except ChildProcessError:
            pass


def _dead_pid():
    proc = subprocess.Popen(["true"])
    proc.wait()
    return proc.pid


def _wait_for_status(pid, wanted, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if process_status(pid) == wanted:
            return True
        time.sleep(0.02)
    return False


def test_split_honours_quotes():
    assert split_command_line('echo "hello world" \'a b\'').argv == ("echo", "hello world", "a b")


def test_split_extracts_redirections():
    line = split_command_line("sort < in.txt >> log.txt")
    assert line == CommandLine(("sort",), "in.txt", "log.txt", True)


def test_split_truncating_output():
    line = split_command_line("echo hi > out.txt")
    assert line.output_file == "out.txt" and line.append is False
    assert line.argv == ("echo", "hi")


def test_split_operator_needs_blanks():
    assert split_command_line("echo a>b").argv == ("echo", "a>b")


def test_ping_missing_process():
    with pytest.raises(ProcessLookupError):
        ping(_dead_pid(), 9)


def test_ping_wraps_signal_number():
    assert ping(os.getpid(), 32) == 0


def test_table_add_remove():
    jobs = JobTable()
    jobs.add(10, "sleep 1")
    jobs.add(5, "sleep 2")
    assert len(jobs) == 2
    assert list(jobs) == [BackgroundJob(10, "sleep 1"), BackgroundJob(5, "sleep 2")]
    assert jobs.remove(10) == BackgroundJob(10, "sleep 1")
    with pytest.raises(KeyError):
        jobs.remove(10)


def test_activities_empty():
    assert JobTable().activities() == ["No background processes"]


def test_process_status_stopped():
    proc = subprocess.Popen(["sleep", "5"])
    try:
        assert process_status(proc.pid) == "Running"
        os.kill(proc.pid, signal.SIGSTOP)
        assert _wait_for_status(proc.pid, "Stopped")
        assert process_status(proc.pid) == "Stopped"
    finally:
        proc.kill()
        proc.wait()


def test_process_status_missing():
    assert process_status(_dead_pid()) == "Unknown (Process does not exist or no permission)"


def test_foreground_command_with_redirection(tmp_path):
    jobs = JobTable()
    out = tmp_path / "out.txt"
    run_external(f"echo hello > {out}", False, jobs)
    assert out.read_text() == "hello\n"
    assert jobs.fg_pid is None and jobs.slow_command is None


def test_append_redirection(tmp_path):
    jobs = JobTable()
    out = tmp_path / "out.txt"
    out.write_text("first\n")
    run_external(f"echo second >> {out}", False, jobs)
    assert out.read_text() == "first\nsecond\n"


def test_missing_program_raises():
    with pytest.raises(OSError):
        run_external("no-such-program-anywhere", False, JobTable())


def test_missing_input_file_raises(tmp_path):
    with pytest.raises(OSError):
        run_external(f"cat < {tmp_path / 'absent'}", False, JobTable())


def test_empty_command():
    assert run_external("   ", False, JobTable()) is None


def test_reap_reports_finished_job():
    jobs = JobTable()
    pid = run_external("true", True, jobs)
    messages = []
    deadline = time.monotonic() + 5
    while not messages and time.monotonic() < deadline:
        messages = jobs.reap()
        time.sleep(0.02)
    assert messages == ["true got terminated"]
    assert pid not in [job.pid for job in jobs]


def test_kill_all():
    jobs = JobTable()
    pid = run_external("sleep 5", True, jobs)
    try:
        assert jobs.kill_all() == [f"Sent signal {int(signal.SIGKILL)} to process with pid {pid}"]
        _, status = os.waitpid(pid, 0)
        assert os.WIFSIGNALED(status) and os.WTERMSIG(status) == signal.SIGKILL
    finally:
        _cleanup(pid)


def test_foreground_resumes_stopped_job():
    jobs = JobTable()
    pid = run_external("sleep 0.2", True, jobs)
    try:
        os.kill(pid, signal.SIGSTOP)
        assert _wait_for_status(pid, "Stopped")
        job = jobs.foreground(pid)
        assert job == BackgroundJob(pid, "sleep 0.2")
        assert len(jobs) == 0
        with pytest.raises(ChildProcessError):
            os.waitpid(pid, os.WNOHANG)
    finally:
        _cleanup(pid)


def test_foreground_unknown_pid():
    with pytest.raises(ProcessLookupError):
        JobTable().foreground(_dead_pid())


def test_background_dead_pid():
    with pytest.raises(ProcessLookupError):
        JobTable().background(_dead_pid())


def test_no_foreground_process():
    jobs = JobTable()
    with pytest.raises(ProcessLookupError):
        jobs.stop_foreground()
    with pytest.raises(ProcessLookupError):
        jobs.interrupt_foreground()


def test_interrupt_foreground_kills():
    proc = subprocess.Popen(["sleep", "5"])
    jobs = JobTable(fg_pid=proc.pid, fg_command="sleep 5")
    assert jobs.interrupt_foreground() == proc.pid
    assert proc.wait() == -signal.SIGKILL
    assert jobs.fg_pid is None