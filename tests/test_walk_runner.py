"""
End-to-end tests for a complete walk with real child processes.
"""

import io
import os
import signal
import sys
from unittest.mock import MagicMock

import pytest

from gitwalk.config import WalkConfig
from gitwalk.exec import ConcurrencyMode, Outcome, OutputSerializer, ProcessExecutor
from gitwalk.walk import WalkRunner


def run_walk(root, command, concurrency, quiet=False, relay=None):
    out, err = io.BytesIO(), io.BytesIO()
    config = WalkConfig(concurrency=concurrency, quiet=quiet, where=str(root), command=command)
    serializer = OutputSerializer(quiet=quiet, stdout=out, stderr=err)
    runner = WalkRunner(config, serializer=serializer, relay=relay or MagicMock())
    summary = runner.run()
    return runner, summary, out.getvalue(), err.getvalue()


class TestWalkRunner:
    """Producer, pool, executor and serializer working together."""

    @pytest.mark.parametrize("concurrency", [1, 3, 20])
    def test_one_invocation_per_repository(self, make_tree, python_command, concurrency):
        root = make_tree([f"r{i}/.git" for i in range(7)] + ["plain/dir"])
        command = python_command("pass")

        runner, summary, out, _ = run_walk(root, command, concurrency)

        assert runner.mode == ConcurrencyMode.for_concurrency(concurrency)
        assert summary.counts[Outcome.SUCCESS] == 7
        assert summary.ok
        lines = out.decode().splitlines()
        expected = {f"cd {os.path.join(str(root), f'r{i}')}; {' '.join(command)}" for i in range(7)}
        assert len(lines) == 7
        assert set(lines) == expected

    def test_buffered_output_follows_its_status_line(self, make_tree, python_command):
        root = make_tree(["a/.git", "b/.git", "c/.git"])
        command = python_command(
            "import os, sys; sys.stdout.write('AB-' + os.path.basename(os.getcwd()) + '\\n')"
        )

        _, summary, out, _ = run_walk(root, command, concurrency=3)

        text = out.decode()
        for name in ["a", "b", "c"]:
            status = f"cd {os.path.join(str(root), name)}; {' '.join(command)}\n"
            assert status + f"AB-{name}\n" in text
        assert summary.ok

    def test_pruned_nested_repository(self, make_tree, python_command):
        root = make_tree(["A/.git", "A/B/.git", "C"])
        command = python_command("pass")

        _, summary, out, _ = run_walk(root, command, concurrency=2)

        assert summary.total == 1
        assert out.decode() == f"cd {os.path.join(str(root), 'A')}; {' '.join(command)}\n"

    def test_quiet_keeps_failures(self, make_tree, python_command):
        root = make_tree(["good/.git", "bad/.git"])
        command = python_command(
            "import os, sys; sys.exit(1 if os.path.basename(os.getcwd()) == 'bad' else 0)"
        )

        _, summary, out, err = run_walk(root, command, concurrency=2, quiet=True)

        assert out == b""
        assert err.decode() == (
            f"cd {os.path.join(str(root), 'bad')}: `{' '.join(command)}` failed on exit status 1\n"
        )
        assert summary.counts[Outcome.SUCCESS] == 1
        assert summary.counts[Outcome.EXIT_FAILURE] == 1
        assert not summary.ok

    def test_spawn_failure_does_not_stop_other_repositories(self, make_tree):
        root = make_tree(["a/.git", "b/.git"])

        _, summary, _, err = run_walk(root, ["gitwalk-no-such-program-xyz"], concurrency=2)

        assert summary.counts[Outcome.SPAWN_FAILURE] == 2
        assert err.decode().count("failed on") == 2

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
    def test_signaled_child_is_relayed(self, make_tree, python_command):
        root = make_tree(["a/.git", "b/.git"])
        relay = MagicMock()
        command = python_command(
            "import os, signal; os.kill(os.getpid(), signal.SIGTERM) "
            "if os.path.basename(os.getcwd()) == 'b' else None"
        )

        _, summary, _, err = run_walk(root, command, concurrency=2, relay=relay)

        relay.relay.assert_called_once_with(signal.SIGTERM)
        assert summary.counts[Outcome.SIGNAL_TERMINATION] == 1
        assert "failed on signal: SIGTERM" in err.decode()

    def test_traversal_error_marks_run_failed(self, tmp_path, python_command):
        _, summary, _, err = run_walk(tmp_path / "missing", python_command("pass"), concurrency=2)

        assert summary.total == 0
        assert summary.traversal_errors == 1
        assert not summary.ok
        assert err.decode().startswith('walk "')

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
    @pytest.mark.parametrize("concurrency", [1, 2])
    def test_no_command_starts_after_relay(self, make_tree, tmp_path, concurrency):
        root = make_tree([f"tree/r{i:02d}/.git" for i in range(8)]) / "tree"
        started = tmp_path / "started.log"
        code = (
            "import os, signal, sys, time\n"
            "name = os.path.basename(os.getcwd())\n"
            "with open(sys.argv[1], 'a') as f:\n"
            "    f.write(name + '\\n')\n"
            "if name == 'r00':\n"
            "    os.kill(os.getpid(), signal.SIGTERM)\n"
            "time.sleep(1)\n"
        )
        relay = MagicMock()

        _, summary, _, _ = run_walk(root, [sys.executable, "-c", code, str(started)], concurrency, relay=relay)

        names = started.read_text().split()
        relay.relay.assert_called_once_with(signal.SIGTERM)
        # Only r01 may already have been running in the second worker.
        assert names[0] in ("r00", "r01")
        assert set(names) <= {"r00", "r01"}
        assert summary.counts[Outcome.SIGNAL_TERMINATION] == 1
        assert summary.total + summary.skipped <= 8
        assert summary.skipped >= 1

    def test_worker_errors_counted_separately(self, make_tree):
        root = make_tree(["a/.git", "b/.git"])
        executor = MagicMock(spec=ProcessExecutor)
        executor.execute.side_effect = RuntimeError("boom")
        config = WalkConfig(concurrency=2, where=str(root))
        serializer = OutputSerializer(stdout=io.BytesIO(), stderr=io.BytesIO())

        summary = WalkRunner(config, serializer=serializer, executor=executor, relay=MagicMock()).run()

        assert summary.worker_errors == 2
        assert summary.traversal_errors == 0
        assert summary.total == 0
        assert not summary.ok
