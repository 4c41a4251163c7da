"""Tests for announcement sinks."""

from __future__ import annotations

from typing import List, Optional

import pytest

from busreader.config import SpeechConfig
from busreader.services import CommandAnnouncementSink, LoggingAnnouncementSink, create_sink


class _FakeProcess:
    _next_pid = 100

    def __init__(self, argv: List[str]) -> None:
        self.argv = argv
        self.returncode: Optional[int] = None
        self.terminated = False
        _FakeProcess._next_pid += 1
        self.pid = _FakeProcess._next_pid

    def poll(self) -> Optional[int]:
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15


class _FakePopen:
    def __init__(self) -> None:
        self.processes: List[_FakeProcess] = []

    def __call__(self, argv, **kwargs) -> _FakeProcess:
        process = _FakeProcess(list(argv))
        self.processes.append(process)
        return process


def _failing_popen(argv, **kwargs):
    raise FileNotFoundError(argv[0])


def test_command_line_carries_voice_rate_and_text() -> None:
    popen = _FakePopen()
    sink = CommandAnnouncementSink(SpeechConfig(backend="command", voice="en-GB", rate_wpm=140), popen=popen)
    sink.speak("Bus 12")
    assert popen.processes[0].argv == ["espeak-ng", "-v", "en-GB", "-s", "140", "Bus 12"]
    assert sink.is_speaking()


def test_new_utterance_interrupts_the_previous_one() -> None:
    popen = _FakePopen()
    sink = CommandAnnouncementSink(SpeechConfig(backend="command"), popen=popen)
    sink.speak("Bus 12")
    sink.speak("Bus 34")
    first, second = popen.processes
    assert first.terminated
    assert not second.terminated


def test_finished_utterance_is_not_terminated() -> None:
    popen = _FakePopen()
    sink = CommandAnnouncementSink(SpeechConfig(backend="command"), popen=popen)
    sink.speak("Bus 12")
    popen.processes[0].returncode = 0
    assert not sink.is_speaking()
    sink.speak("Bus 34")
    assert not popen.processes[0].terminated


def test_close_stops_current_utterance() -> None:
    popen = _FakePopen()
    sink = CommandAnnouncementSink(SpeechConfig(backend="command"), popen=popen)
    sink.speak("Bus 12")
    sink.close()
    assert popen.processes[0].terminated
    assert not sink.is_speaking()


def test_custom_argv_builder() -> None:
    popen = _FakePopen()
    sink = CommandAnnouncementSink(
        SpeechConfig(backend="command", command="say"),
        argv_builder=lambda config, text: [config.command, text],
        popen=popen,
    )
    sink.speak("Bus 7")
    assert popen.processes[0].argv == ["say", "Bus 7"]


def test_spawn_failure_is_absorbed() -> None:
    sink = CommandAnnouncementSink(SpeechConfig(backend="command"), popen=_failing_popen)
    sink.speak("Bus 12")
    assert not sink.is_speaking()


def test_logging_sink_records_utterances() -> None:
    sink = LoggingAnnouncementSink()
    sink.speak("Bus 1")
    sink.speak("Bus 2")
    sink.close()
    assert sink.spoken == ["Bus 1", "Bus 2"]


def test_log_backend_builds_logging_sink() -> None:
    assert isinstance(create_sink(SpeechConfig()), LoggingAnnouncementSink)


@pytest.mark.parametrize("available, expected", [(True, CommandAnnouncementSink), (False, LoggingAnnouncementSink)])
def test_command_backend_depends_on_path(monkeypatch: pytest.MonkeyPatch, available: bool, expected: type) -> None:
    monkeypatch.setattr(CommandAnnouncementSink, "is_available", staticmethod(lambda command: available))
    assert isinstance(create_sink(SpeechConfig(backend="command")), expected)
