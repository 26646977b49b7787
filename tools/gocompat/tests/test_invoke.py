from __future__ import annotations

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tools.gocompat import invoke
from tools.gocompat.invoke import FailureKind, InvocationError


class InvokeTests(unittest.TestCase):
    def test_output_trims_stdout(self) -> None:
        out = invoke.output(sys.executable, ["-c", "print('  hello world  ')"])
        self.assertEqual(out, b"hello world")

    def test_run_succeeds_silently(self) -> None:
        self.assertIsNone(invoke.run(sys.executable, ["-c", "pass"]))

    def test_non_zero_exit_reports_trimmed_stderr(self) -> None:
        script = "import sys; print(' partial '); sys.stderr.write('\\n  boom  \\n'); sys.exit(3)"
        with self.assertRaises(InvocationError) as cm:
            invoke.output(sys.executable, ["-c", script])

        err = cm.exception
        self.assertIs(err.kind, FailureKind.EXIT)
        self.assertEqual(err.returncode, 3)
        self.assertEqual(err.stderr, b"boom")
        self.assertEqual(err.stdout, b"partial")
        self.assertEqual(err.cmd, sys.executable)
        self.assertEqual(err.argv, ["-c", script])
        self.assertIn("exit status 3", str(err))
        self.assertTrue(str(err).endswith(": boom"))

    def test_missing_executable_is_a_start_failure(self) -> None:
        with tempfile.TemporaryDirectory(prefix="gocompat-invoke-") as td:
            missing = Path(td) / "bin" / "go"
            with self.assertRaises(InvocationError) as cm:
                invoke.run(missing, ["vet", "./..."])

        err = cm.exception
        self.assertIs(err.kind, FailureKind.START)
        self.assertIsNone(err.returncode)
        self.assertEqual(err.stderr, b"")
        self.assertIsInstance(err.__cause__, OSError)
        self.assertTrue(str(err).startswith(f"{missing} vet ./...: "))

    def test_invalid_argument_is_a_start_failure(self) -> None:
        with self.assertRaises(InvocationError) as cm:
            invoke.run(sys.executable, ["-c", "pass\0"])
        self.assertIs(cm.exception.kind, FailureKind.START)
        self.assertIsInstance(cm.exception.__cause__, ValueError)

    def test_env_is_passed_to_the_command(self) -> None:
        env = invoke.pinned_env("/opt/sdk/go1.16")
        out = invoke.output(
            sys.executable, ["-c", "import os; print(os.environ['GOROOT'])"], env=env
        )
        self.assertEqual(out.decode(), "/opt/sdk/go1.16")


class PinnedEnvTests(unittest.TestCase):
    def test_overrides_goroot_only(self) -> None:
        base = {"GOROOT": "/usr/local/go", "HOME": "/home/gopher"}
        env = invoke.pinned_env(Path("/sdk/go1.15"), base=base)
        self.assertEqual(env, {"GOROOT": str(Path("/sdk/go1.15")), "HOME": "/home/gopher"})
        # The base mapping is never modified.
        self.assertEqual(base["GOROOT"], "/usr/local/go")

    def test_defaults_to_process_environment(self) -> None:
        with mock.patch.dict(os.environ, {"GOCOMPAT_TEST_MARKER": "1"}):
            env = invoke.pinned_env("/sdk/go1.14")
        self.assertEqual(env["GOCOMPAT_TEST_MARKER"], "1")
        self.assertEqual(env["GOROOT"], "/sdk/go1.14")

    def test_returns_a_fresh_mapping(self) -> None:
        a = invoke.pinned_env("/sdk/go1.14")
        b = invoke.pinned_env("/sdk/go1.14")
        self.assertIsNot(a, b)
        self.assertIsNot(a, os.environ)


if __name__ == "__main__":
    unittest.main()
