# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/airlift/bootstrap/runner.py

from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from pathlib import Path
from typing import Dict, Optional, TextIO

from airlift.errors import ExecError

log = logging.getLogger("airlift")

SHELL = "/bin/sh"
SCRIPT_MODE = 0o755
TERMINATE_GRACE_SECONDS = 10


class Bootstrapper:
    """
    Writes the install script to a fixed path and runs it through the
    system shell.

    - environment = os.environ + overlay (overlay wins)
    - stdout is streamed line by line into the caller's sink
    - stderr passes through to this process
    - no timeout unless the caller passes ``timeout`` or a ``cancel`` event
    """

    def __init__(
        self,
        *,
        script: str,
        script_path: Path,
        env_overlay: Optional[Dict[str, str]] = None,
    ):
        self.script = script
        self.script_path = Path(script_path)
        self.env_overlay = dict(env_overlay or {})

    def environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.env_overlay)
        return env

    def write_script(self) -> Path:
        if not self.script:
            raise ExecError("no install script payload supplied", script=str(self.script_path))
        try:
            self.script_path.parent.mkdir(parents=True, exist_ok=True)
            self.script_path.write_text(self.script)
            os.chmod(self.script_path, SCRIPT_MODE)
        except OSError as e:
            raise ExecError(
                f"cannot write install script {self.script_path}: {e}",
                script=str(self.script_path),
            ) from e
        return self.script_path

    @staticmethod
    def _signal_group(proc: subprocess.Popen, sig: int) -> None:
        try:
            os.killpg(proc.pid, sig)
        except ProcessLookupError:
            pass

    @classmethod
    def _terminate(cls, proc: subprocess.Popen) -> None:
        # the installer spawns children that inherit stdout; stop the whole group
        cls._signal_group(proc, signal.SIGTERM)
        try:
            proc.wait(timeout=TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            cls._signal_group(proc, signal.SIGKILL)
            proc.wait()

    def _watch(
        self,
        proc: subprocess.Popen,
        finished: threading.Event,
        cancelled: threading.Event,
        cancel: Optional[threading.Event],
        timeout: Optional[float],
    ) -> None:
        deadline = time.monotonic() + timeout if timeout is not None else None
        while not finished.is_set():
            if cancel is not None and cancel.is_set():
                break
            if deadline is not None and time.monotonic() >= deadline:
                break
            finished.wait(0.1)
        else:
            return
        if proc.poll() is not None:
            # exited on its own before the cancel was seen
            return
        cancelled.set()
        log.warning("Terminating %s (pid=%s)", self.script_path, proc.pid)
        self._terminate(proc)

    def run(
        self,
        out: TextIO,
        *,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> None:
        script = str(self.write_script())
        cmd = [SHELL, script]
        log.info("$ %s", " ".join(cmd))
        log.debug("env overlay: %s", self.env_overlay)

        start = time.time()
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                text=True,
                errors="replace",
                bufsize=1,
                env=self.environment(),
                start_new_session=True,
            )
        except OSError as e:
            raise ExecError(f"failed to launch {script}: {e}", script=script) from e

        finished = threading.Event()
        cancelled = threading.Event()
        watcher = None
        if cancel is not None or timeout is not None:
            watcher = threading.Thread(
                target=self._watch,
                args=(proc, finished, cancelled, cancel, timeout),
                daemon=True,
            )
            watcher.start()

        try:
            for line in proc.stdout:
                out.write(line)
                if hasattr(out, "flush"):
                    out.flush()
            rc = proc.wait()
        finally:
            finished.set()
            if proc.poll() is None:
                self._terminate(proc)
            if proc.stdout:
                proc.stdout.close()
            if watcher is not None:
                watcher.join()

        elapsed = round(time.time() - start, 2)
        if cancelled.is_set() and rc != 0:
            raise ExecError(f"{script} cancelled after {elapsed}s (rc={rc})", script=script, returncode=rc)
        if rc != 0:
            raise ExecError(f"{script} failed (rc={rc}) after {elapsed}s", script=script, returncode=rc)

        log.info("%s completed successfully in %ss", script, elapsed)
