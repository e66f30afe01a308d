"""
Locating and running the external BLAST+ executables.

`ToolLocator` subclasses hold the per-platform discovery rules; `ToolRunner`
starts a child process, waits for it with a timeout and kills it when the
timeout expires or `cancel()` is called from another thread.
"""

import logging
import os
import shutil
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import ToolExecutionError, ToolNotFoundError, ToolTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    cmd: List[str]
    exit_code: Optional[int]
    stdout: str
    stderr: str
    timed_out: bool = False
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and not self.cancelled

    @property
    def cmd_text(self) -> str:
        return subprocess.list2cmdline(self.cmd) if sys.platform.startswith("win") else " ".join(self.cmd)


def raise_for_result(result: ToolResult, timeout: float) -> None:
    """Turn a failed ToolResult into the matching exception. Timeouts win over exit codes."""
    if result.timed_out:
        raise ToolTimeoutError(result.cmd_text, timeout)
    if result.cancelled:
        raise ToolExecutionError(result.cmd_text, result.exit_code, "cancelled by user")
    if result.exit_code != 0:
        raise ToolExecutionError(result.cmd_text, result.exit_code, result.stderr)


class ToolLocator:
    """which-style lookup on PATH, with extra directories searched first."""

    platform_dirs: Tuple[str, ...] = ()

    def __init__(self, extra_dirs: Iterable[str] = ()):
        self.extra_dirs = [str(d) for d in extra_dirs]

    def search_dirs(self) -> List[str]:
        dirs: List[str] = []
        for d in [*self.extra_dirs, *self.platform_dirs]:
            d = os.path.expanduser(d)
            if d not in dirs:
                dirs.append(d)
        return dirs

    def search_path(self, inherited: Optional[str] = None) -> str:
        """PATH value with the fallback directories prepended to the inherited one."""
        inherited = os.environ.get("PATH", "") if inherited is None else inherited
        parts = self.search_dirs()
        if inherited:
            parts.append(inherited)
        return os.pathsep.join(parts)

    def candidates(self, tool: str) -> List[str]:
        return [tool]

    def locate(self, tool: str) -> str:
        """Return the absolute path of `tool`, or raise ToolNotFoundError."""
        path = self.search_path()
        for name in self.candidates(tool):
            if os.path.dirname(name):
                if os.path.isfile(name) and os.access(name, os.X_OK):
                    return os.path.abspath(name)
                continue
            found = shutil.which(name, path=path)
            if found:
                logger.debug("Located %s at %s", tool, found)
                return found
        logger.debug("Could not locate %s on %s", tool, path)
        raise ToolNotFoundError(tool, path)


class PosixToolLocator(ToolLocator):
    pass


class MacToolLocator(ToolLocator):
    # GUI apps on macOS inherit a minimal PATH that misses Homebrew, MacPorts and the NCBI installer.
    platform_dirs = (
        "/usr/bin",
        "/bin",
        "/usr/sbin",
        "/sbin",
        "/opt/local/bin",
        "/usr/local/bin",
        "~/bin",
        "/usr/local/ncbi/blast/bin",
    )


class WindowsToolLocator(ToolLocator):
    def candidates(self, tool: str) -> List[str]:
        if tool.lower().endswith(".exe"):
            return [tool]
        return [tool, tool + ".exe"]


def default_locator(extra_dirs: Iterable[str] = (), platform: Optional[str] = None) -> ToolLocator:
    platform = platform or sys.platform
    if platform.startswith("win"):
        return WindowsToolLocator(extra_dirs)
    if platform == "darwin":
        return MacToolLocator(extra_dirs)
    return PosixToolLocator(extra_dirs)


def _quiet_kwargs() -> Dict[str, object]:
    """Keep a console window from flashing up for every child on Windows GUI builds."""
    if not sys.platform.startswith("win"):
        return {}
    si = subprocess.STARTUPINFO()
    si.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    si.wShowWindow = subprocess.SW_HIDE
    return {"creationflags": subprocess.CREATE_NO_WINDOW, "startupinfo": si}


class ToolRunner:
    """Runs one external command at a time with a bounded wait."""

    def __init__(self, locator: Optional[ToolLocator] = None):
        self.locator = locator or default_locator()
        self._lock = threading.Lock()
        self._proc: Optional[subprocess.Popen] = None
        self._cancelled = False

    def locate(self, tool: str) -> str:
        return self.locator.locate(tool)

    def environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        env["PATH"] = self.locator.search_path()
        return env

    @property
    def running(self) -> bool:
        with self._lock:
            return self._proc is not None

    def run(self, cmd: Sequence[str], timeout: float) -> ToolResult:
        """
        Run `cmd` and wait at most `timeout` seconds.
        On timeout the child is killed and the result has timed_out=True; output
        produced before the kill is still returned. Failing to start the program
        at all raises ToolExecutionError.
        """
        cmd = [str(part) for part in cmd]
        logger.debug("Running (timeout %ss): %s", timeout, " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=self.environment(),
                **_quiet_kwargs(),
            )
        except OSError as exc:
            raise ToolExecutionError(" ".join(cmd), None, str(exc)) from exc

        with self._lock:
            self._proc = proc
            self._cancelled = False
        timed_out = False
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Killing %s after %ss", cmd[0], timeout)
            proc.kill()
            stdout, stderr = proc.communicate()
            timed_out = True
        finally:
            with self._lock:
                self._proc = None
                cancelled = self._cancelled

        result = ToolResult(
            cmd=cmd,
            exit_code=proc.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
            timed_out=timed_out,
            cancelled=cancelled and not timed_out,
        )
        logger.debug(
            "%s exited with %s (%d bytes stdout, %d bytes stderr)",
            cmd[0],
            result.exit_code,
            len(result.stdout),
            len(result.stderr),
        )
        return result

    def cancel(self) -> bool:
        """Kill the running child, if any. Returns True when a process was signalled."""
        with self._lock:
            proc = self._proc
            if proc is None or proc.poll() is not None:
                return False
            self._cancelled = True
        logger.info("Cancelling %s", proc.args[0] if isinstance(proc.args, list) else proc.args)
        proc.kill()
        return True
