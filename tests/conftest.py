from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterable, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cooker.collaborators import (  # noqa: E402
    BuildInvoker,
    Collaborators,
    FileTreeCleaner,
    PackageInstaller,
    ShutilFileTreeCleaner,
    SourceFetcher,
    ToolChecker,
)
from cooker.errors import CommandError  # noqa: E402


MANIFEST_TEMPLATE = """{
  "name": "theme_package",
  "version": "2.3.4",
  "description": "theme_name development habitat",
  "config": {
    "namespace": "theme_namespace",
    "prefix": "theme_prefix",
    "dependencies": {"version": "9.9.9"}
  }
}
"""


class RecordingReporter:
    """Reporter double keeping every call in ``events``."""

    def __init__(self) -> None:
        self.events: list[tuple[str, ...]] = []

    def message(self, text: str) -> None:
        self.events.append(("message", text))

    def label(self, text: str) -> None:
        self.events.append(("label", text))

    def error(self, text: str) -> None:
        self.events.append(("error", text))

    def summary(self, lines: Sequence[tuple[str, str]]) -> None:
        self.events.append(("summary", *(value for _, value in lines)))

    def started(self, step: str) -> None:
        self.events.append(("started", step))

    def succeeded(self, step: str) -> None:
        self.events.append(("succeeded", step))

    def failed(self, step: str, reason: str) -> None:
        self.events.append(("failed", step, reason))

    def of_kind(self, kind: str) -> list[tuple[str, ...]]:
        return [event for event in self.events if event[0] == kind]


class ScriptedReader:
    """Answer prompts from a fixed list, recording each question."""

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.questions: list[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        if not self._answers:
            raise AssertionError(f"no scripted answer left for {question!r}")
        return self._answers.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._answers)


class _Trace:
    def __init__(self, fail_on: str | None) -> None:
        self.calls: list[str] = []
        self._fail_on = fail_on

    def record(self, call: str) -> None:
        self.calls.append(call)
        if call == self._fail_on:
            raise CommandError(f"{call} failed")


class FakeFetcher(SourceFetcher):
    def __init__(self, trace: _Trace) -> None:
        self.trace = trace
        self.requests: list[tuple[str, str, Path]] = []

    def fetch(self, repository_url: str, ref: str, destination: Path) -> None:
        self.requests.append((repository_url, ref, destination))
        self.trace.record("fetch")
        destination.mkdir(parents=True)
        (destination / "package.json").write_text(MANIFEST_TEMPLATE, encoding="utf-8")
        for name in ("packages", ".git", ".github"):
            (destination / name).mkdir()
            (destination / name / "keep.txt").write_text("theme_name", encoding="utf-8")


class FakeInstaller(PackageInstaller):
    def __init__(self, trace: _Trace) -> None:
        self.trace = trace

    def install_dependencies(self, project_path: Path, ecosystem: str) -> None:
        self.trace.record(f"install:{ecosystem}")

    def refresh_autoloader(self, project_path: Path, ecosystem: str) -> None:
        self.trace.record(f"autoload:{ecosystem}")


class FakeBuilder(BuildInvoker):
    def __init__(self, trace: _Trace) -> None:
        self.trace = trace

    def run_named_script(self, project_path: Path, script_name: str) -> None:
        self.trace.record(f"script:{script_name}")


class TracingCleaner(FileTreeCleaner):
    def __init__(self, trace: _Trace) -> None:
        self.trace = trace
        self._delegate = ShutilFileTreeCleaner()

    def remove(self, path: Path) -> None:
        self.trace.record(f"remove:{path.name}")
        self._delegate.remove(path)


class FakeToolChecker(ToolChecker):
    def __init__(self, missing_tools: Sequence[str] = ()) -> None:
        self._missing = list(missing_tools)

    def missing(self, tools: Iterable[str]) -> list[str]:
        return [tool for tool in tools if tool in self._missing]


@pytest.fixture()
def manifest_template() -> str:
    return MANIFEST_TEMPLATE


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def make_reader() -> Callable[..., ScriptedReader]:
    def factory(*answers: str) -> ScriptedReader:
        return ScriptedReader(answers)

    return factory


@pytest.fixture()
def make_collaborators() -> Callable[..., tuple[Collaborators, list[str]]]:
    """Return a factory building fake collaborators and their shared call trace."""

    def factory(*, fail_on: str | None = None, missing_tools: Sequence[str] = ()) -> tuple[Collaborators, list[str]]:
        trace = _Trace(fail_on)
        collaborators = Collaborators(
            fetcher=FakeFetcher(trace),
            installer=FakeInstaller(trace),
            builder=FakeBuilder(trace),
            cleaner=TracingCleaner(trace),
            tools=FakeToolChecker(missing_tools),
        )
        return collaborators, trace.calls

    return factory
