"""
MPV output sink with JSON IPC.

Every playback session gets its own mpv process, so tearing a session down
kills exactly the audio it started and nothing else.
"""

import itertools
import json
import os
import socket
import subprocess
import time
from collections import deque
from functools import partial
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from loguru import logger

from music_triage.core.config import PlayerConfig
from music_triage.exceptions import AudioDeviceError, DecoderError

IPC_TIMEOUT = 2.0

_socket_counter = itertools.count()


class AudioSink(Protocol):
    """What a playback session needs from its output."""

    def load(self, path: str) -> None: ...

    def set_paused(self, paused: bool) -> bool: ...

    def close(self) -> None: ...


SinkFactory = Callable[[], AudioSink]


def check_mpv_available(mpv_path: str = "mpv") -> bool:
    """Check if MPV is available on the system."""
    try:
        result = subprocess.run(
            [mpv_path, "--version"], capture_output=True, text=True, timeout=5
        )
        return result.returncode == 0
    except (subprocess.SubprocessError, FileNotFoundError, OSError):
        return False


def build_mpv_command(config: PlayerConfig, socket_path: str) -> list[str]:
    """mpv arguments for a paused, endlessly looping, audio-only player."""
    return [
        config.mpv_path,
        "--idle=yes",
        "--no-video",
        "--no-terminal",
        "--pause",
        "--loop-file=inf",
        f"--input-ipc-server={socket_path}",
        f"--volume={config.volume}",
        "--load-scripts=no",
    ]


def _discard_process(process: subprocess.Popen, socket_path: str) -> None:
    """Kill and reap an mpv that never became usable, and remove its socket."""
    if process.poll() is None:
        process.kill()
    process.wait()
    if os.path.exists(socket_path):
        try:
            os.unlink(socket_path)
        except OSError:
            pass


class MpvSink:
    """One mpv process plus a persistent IPC connection to it."""

    def __init__(self, process: subprocess.Popen, sock: socket.socket, socket_path: str):
        self.process = process
        self.socket_path = socket_path
        self._sock = sock
        self._buffer = b""
        self._events: deque[dict[str, Any]] = deque()
        self._request_ids = itertools.count(1)
        self._closed = False

    @classmethod
    def start(cls, config: PlayerConfig) -> "MpvSink":
        """Launch mpv and connect to its IPC socket.

        Raises:
            AudioDeviceError: If mpv cannot be started or does not answer
        """
        socket_path = str(
            Path(config.socket_dir)
            / f"music-triage-{os.getpid()}-{next(_socket_counter)}.sock"
        )
        if os.path.exists(socket_path):
            logger.debug(f"Removing existing socket: {socket_path}")
            os.unlink(socket_path)

        try:
            process = subprocess.Popen(
                build_mpv_command(config, socket_path),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (subprocess.SubprocessError, OSError) as e:
            raise AudioDeviceError(f"Failed to start mpv: {e}") from e

        start_time = time.monotonic()
        while not os.path.exists(socket_path):
            if process.poll() is not None:
                _discard_process(process, socket_path)
                raise AudioDeviceError(
                    f"mpv exited during startup (code {process.returncode})"
                )
            if time.monotonic() - start_time > config.startup_timeout:
                _discard_process(process, socket_path)
                raise AudioDeviceError(
                    f"mpv socket creation timeout after {config.startup_timeout}s"
                )
            time.sleep(0.05)

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.settimeout(IPC_TIMEOUT)
            sock.connect(socket_path)
        except OSError as e:
            sock.close()
            _discard_process(process, socket_path)
            raise AudioDeviceError(f"mpv socket connection failed: {e}") from e

        logger.debug(f"mpv started (pid={process.pid}, socket={socket_path})")
        return cls(process, sock, socket_path)

    def _read_message(self, timeout: Optional[float]) -> dict[str, Any]:
        """Next JSON line from mpv; events and replies share the stream."""
        self._sock.settimeout(timeout)
        while b"\n" not in self._buffer:
            chunk = self._sock.recv(4096)
            if not chunk:
                raise AudioDeviceError("mpv closed the IPC connection")
            self._buffer += chunk
        line, self._buffer = self._buffer.split(b"\n", 1)
        try:
            # mpv passes file names through as raw bytes, valid UTF-8 or not
            return json.loads(line.decode("utf-8", "surrogateescape"))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed mpv message: {line[:200]!r}")
            return {}

    def command(self, *args: Any) -> dict[str, Any]:
        """Send a command and wait for its reply; events seen meanwhile are kept.

        Raises:
            AudioDeviceError: If mpv is unreachable
        """
        request_id = next(self._request_ids)
        payload = json.dumps(
            {"command": list(args), "request_id": request_id}, ensure_ascii=False
        ) + "\n"
        # Surrogate escapes from os.fsdecode go back out as the original bytes
        data = payload.encode("utf-8", "surrogateescape")
        try:
            self._sock.sendall(data)
            while True:
                message = self._read_message(IPC_TIMEOUT)
                if message.get("request_id") == request_id:
                    return message
                if "event" in message:
                    self._events.append(message)
        except (socket.timeout, OSError) as e:
            raise AudioDeviceError(f"mpv IPC failed: {e}") from e

    def _next_event(self) -> dict[str, Any]:
        if self._events:
            return self._events.popleft()
        while True:
            # Decoding a large file may take a while; wait as long as mpv lives
            try:
                message = self._read_message(None)
            except OSError as e:
                raise AudioDeviceError(f"mpv IPC failed: {e}") from e
            if "event" in message:
                return message

    def load(self, path: str) -> None:
        """Load a file and block until mpv has opened it.

        Raises:
            DecoderError: If mpv rejects the file
            AudioDeviceError: If mpv is unreachable
        """
        reply = self.command("loadfile", path, "replace")
        if reply.get("error") != "success":
            raise DecoderError(
                f"mpv refused {path}: {reply.get('error')}", path=path
            )

        while True:
            event = self._next_event()
            name = event.get("event")
            if name == "file-loaded":
                logger.debug(f"mpv loaded {path}")
                return
            if name == "end-file" and event.get("reason") == "error":
                raise DecoderError(
                    f"mpv could not decode {path}: {event.get('file_error', 'unknown error')}",
                    path=path,
                )

    def set_paused(self, paused: bool) -> bool:
        """Set the pause flag; returns False if mpv did not accept it."""
        try:
            reply = self.command("set_property", "pause", paused)
        except AudioDeviceError as e:
            logger.warning(f"Could not set pause={paused}: {e}")
            return False
        return reply.get("error") == "success"

    def close(self) -> None:
        """Stop mpv and cleanup; safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        try:
            self.command("quit")
        except AudioDeviceError:
            pass  # Already gone
        try:
            self._sock.close()
        except OSError:
            pass

        try:
            self.process.wait(timeout=IPC_TIMEOUT)
        except subprocess.TimeoutExpired:
            logger.warning(f"mpv (pid={self.process.pid}) did not quit, killing")
            self.process.kill()
            self.process.wait()

        if os.path.exists(self.socket_path):
            try:
                os.unlink(self.socket_path)
            except OSError:
                pass
        logger.debug(f"mpv stopped (pid={self.process.pid})")


def mpv_sink_factory(config: PlayerConfig) -> SinkFactory:
    """Factory producing a fresh mpv sink for each session."""
    return partial(MpvSink.start, config)
