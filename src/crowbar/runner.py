"""
RustRunner: compile a source snapshot with rustc and run the result.

The snapshot goes into a fresh temporary directory, so concurrent runs never
share files. Failures of the compiler or the program are results, not
exceptions; only an unusable configuration raises.
"""

import os
import subprocess
import tempfile
import time
from pathlib import Path
from typing import List, Optional

from crowbar.exceptions import RunnerError
from crowbar.logging_config import logger
from crowbar.schemas import RunResult
from crowbar.tracing import trace
from crowbar.user_config import get_user_config

SOURCE_NAME = "main.rs"
EXECUTABLE_NAME = "main.exe" if os.name == "nt" else "main"


def _as_text(output) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


class RustRunner:
    """
    Compile-and-run collaborator.

    Settings default to the `runner` section of the user config.
    """

    def __init__(
        self,
        rustc: Optional[str] = None,
        args: Optional[List[str]] = None,
        compile_timeout: Optional[float] = None,
        run_timeout: Optional[float] = None,
    ):
        config = get_user_config()
        self.rustc = rustc if rustc is not None else config.get("runner.rustc", "rustc")
        self.args = list(args if args is not None else config.get("runner.args", []))
        self.compile_timeout = compile_timeout if compile_timeout is not None else config.get("runner.compile_timeout", 60)
        self.run_timeout = run_timeout if run_timeout is not None else config.get("runner.run_timeout", 10)
        self._validate()

    def _validate(self) -> None:
        if not isinstance(self.rustc, str) or not self.rustc.strip():
            raise RunnerError("runner.rustc must be a non-empty command")
        if not all(isinstance(arg, str) for arg in self.args):
            raise RunnerError("runner.args must be a list of strings", command=self.rustc)
        for name in ("compile_timeout", "run_timeout"):
            timeout = getattr(self, name)
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
                raise RunnerError(f"runner.{name} must be a positive number of seconds", command=self.rustc)

    def compile_command(self, source_path: Path, executable_path: Path) -> List[str]:
        return [self.rustc, *self.args, str(source_path), "-o", str(executable_path)]

    @trace
    def run(self, source: str) -> RunResult:
        """
        Compile source, then run the executable if compilation succeeded.

        Args:
            source: Complete Rust program text

        Returns:
            RunResult for the compile stage on compile failure, otherwise for
            the run stage; compiler warnings come first in the run stderr
        """
        started = time.perf_counter()

        with tempfile.TemporaryDirectory(prefix="crowbar-") as build_dir:
            source_path = Path(build_dir) / SOURCE_NAME
            executable_path = Path(build_dir) / EXECUTABLE_NAME
            with open(source_path, "w", encoding="utf-8", newline="") as f:
                f.write(source)

            compiled = self._execute(
                self.compile_command(source_path, executable_path),
                self.compile_timeout,
                "compile",
                started,
            )
            if not compiled.success:
                logger.info(f"Compilation failed (exit code {compiled.returncode})")
                return compiled

            ran = self._execute([str(executable_path)], self.run_timeout, "run", started)

        logger.info(f"Program exited with {ran.returncode} after {ran.duration:.2f}s")
        if compiled.stderr:
            ran = ran.model_copy(update={"stderr": compiled.stderr + ran.stderr})
        return ran

    def _execute(self, command: List[str], timeout: float, stage: str, started: float) -> RunResult:
        logger.debug(f"Executing: {' '.join(command)}")
        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            return RunResult(
                stage=stage,
                success=False,
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr) + f"\n{stage} timed out after {timeout}s",
                duration=time.perf_counter() - started,
                timed_out=True,
            )
        except OSError as e:
            # Missing compiler, permission problems
            return RunResult(
                stage=stage,
                success=False,
                stderr=f"Failed to start {command[0]}: {e}",
                duration=time.perf_counter() - started,
            )

        return RunResult(
            stage=stage,
            success=proc.returncode == 0,
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            duration=time.perf_counter() - started,
        )
