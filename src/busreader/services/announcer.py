"""Announcement sinks: where confirmed route numbers are voiced.

A sink never blocks its caller and a new utterance always preempts the one
in progress.
"""

from __future__ import annotations

import abc
import logging
import shutil
import subprocess
import threading
from typing import Callable, List, Optional, Sequence

from busreader.config.models import SpeechConfig

logger = logging.getLogger("services.announcer")


class AnnouncementSink(abc.ABC):
    """Capability that speaks short utterances."""

    @abc.abstractmethod
    def speak(self, text: str) -> None:
        """Start voicing ``text``, interrupting anything still being spoken."""

    def stop(self) -> None:
        """Interrupt the current utterance, if any."""

    def close(self) -> None:
        self.stop()


class LoggingAnnouncementSink(AnnouncementSink):
    """Headless sink that only records what would have been said."""

    def __init__(self) -> None:
        self.spoken: List[str] = []

    def speak(self, text: str) -> None:
        self.spoken.append(text)
        logger.info("🔊 Announcing %s", text)


class CommandAnnouncementSink(AnnouncementSink):
    """Voices utterances by spawning an external text-to-speech command.

    The default argv matches ``espeak-ng``; ``argv_builder`` can adapt it to
    other engines. The previous process is terminated before each new one.
    """

    def __init__(
        self,
        config: SpeechConfig,
        argv_builder: Optional[Callable[[SpeechConfig, str], Sequence[str]]] = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self._config = config
        self._argv_builder = argv_builder or _espeak_argv
        self._popen = popen
        self._process: Optional[subprocess.Popen] = None
        self._lock = threading.Lock()

    @staticmethod
    def is_available(command: str) -> bool:
        return shutil.which(command) is not None

    def speak(self, text: str) -> None:
        argv = list(self._argv_builder(self._config, text))
        with self._lock:
            self._terminate_locked()
            try:
                self._process = self._popen(
                    argv,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
            except OSError as exc:
                self._process = None
                logger.error("Speech command %s failed to start: %s", argv[0], exc)
                return
        logger.info("🔊 Announcing %s", text)

    def stop(self) -> None:
        with self._lock:
            self._terminate_locked()

    def is_speaking(self) -> bool:
        with self._lock:
            return self._process is not None and self._process.poll() is None

    def _terminate_locked(self) -> None:
        process = self._process
        self._process = None
        if process is None or process.poll() is not None:
            return
        logger.debug("Interrupting utterance in progress (pid %s).", process.pid)
        process.terminate()


def _espeak_argv(config: SpeechConfig, text: str) -> Sequence[str]:
    return [config.command, "-v", config.voice, "-s", str(config.rate_wpm), text]


def create_sink(config: SpeechConfig) -> AnnouncementSink:
    """Build the sink selected by ``config.backend``."""
    if config.backend == "command":
        if not CommandAnnouncementSink.is_available(config.command):
            logger.warning("Speech command %r not found on PATH; announcements will only be logged.", config.command)
            return LoggingAnnouncementSink()
        return CommandAnnouncementSink(config)
    return LoggingAnnouncementSink()
