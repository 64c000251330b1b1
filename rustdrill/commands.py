"""Listing, lookup and batch grading of exercises."""

from __future__ import annotations

import json
import subprocess
import sys
import threading
import time
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import TextIO

from rustdrill.exercise import Exercise
from rustdrill.run import RunFailed, run

DEFAULT_RESULT_PATH = ".github/result/check_result.json"


class ExerciseNotFound(LookupError):
    """No exercise matches the requested name."""


@dataclass
class ExerciseResult:
    """Outcome of grading one exercise."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals collected while grading all exercises."""

    total_exercations: int
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """The grading report written after a batch verification."""

    statistics: ExerciseStatistics
    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None

    def to_json(self) -> str:
        """Serialise to indented JSON."""
        data = {
            "exercises": [asdict(result) for result in self.exercises],
            "user_name": self.user_name,
            "statistics": asdict(self.statistics),
        }
        return json.dumps(data, indent=2, ensure_ascii=False)


def find_exercise(name: str, exercises: Iterable[Exercise]) -> Exercise:
    """Find an exercise by name; "next" means the first one not yet done."""
    if name == "next":
        found = next((e for e in exercises if not e.looks_done()), None)
        if found is None:
            raise ExerciseNotFound(
                "🎉 Congratulations! You have done all the exercises!\n"
                "🔚 There are no more exercises to do next!"
            )
        return found
    found = next((e for e in exercises if e.name == name), None)
    if found is None:
        raise ExerciseNotFound(f"No exercise found for '{name}'!")
    return found


def _matches_filter(exercise: Exercise, filter_text: str | None) -> bool:
    if filter_text is None:
        return True
    fname = str(exercise.path)
    patterns = (f for f in filter_text.lower().split(",") if f.strip())
    return any(f in exercise.name or f in fname for f in patterns)


def _matches_state(done: bool, solved: bool, unsolved: bool) -> bool:
    return (done and solved) or (not done and unsolved) or (not solved and not unsolved)


def filter_exercises(
    exercises: Iterable[Exercise],
    filter_text: str | None,
    solved: bool,
    unsolved: bool,
) -> list[Exercise]:
    """Select exercises by comma separated name/path patterns and by state."""
    return [
        e
        for e in exercises
        if _matches_state(e.looks_done(), solved, unsolved)
        and _matches_filter(e, filter_text)
    ]


def list_exercises(
    exercises: Sequence[Exercise],
    paths: bool = False,
    names: bool = False,
    filter_text: str | None = None,
    solved: bool = False,
    unsolved: bool = False,
    out: TextIO | None = None,
) -> int:
    """Write the exercise table and a progress line; return how many are done."""
    out = sys.stdout if out is None else out
    if not paths and not names:
        out.write(f"{'Name':<17}\t{'Path':<46}\t{'Status':<7}\n")
    done_count = 0
    for exercise in exercises:
        done = exercise.looks_done()
        if done:
            done_count += 1
        if not (_matches_state(done, solved, unsolved) and _matches_filter(exercise, filter_text)):
            continue
        fname = str(exercise.path)
        if paths:
            out.write(f"{fname}\n")
        elif names:
            out.write(f"{exercise.name}\n")
        else:
            status = "Done" if done else "Pending"
            out.write(f"{exercise.name:<17}\t{fname:<46}\t{status:<7}\n")
    total = len(exercises)
    percentage = f"{done_count / total * 100.0:.1f}" if total else "NaN"
    out.write(
        f"Progress: You completed {done_count} / {total} exercises ({percentage} %).\n"
    )
    return done_count


def cicv_verify(
    exercises: Sequence[Exercise], output_path: str | Path = DEFAULT_RESULT_PATH
) -> ExerciseCheckList:
    """Run every exercise concurrently, print progress and write a JSON report."""
    started = int(time.time())
    total = len(exercises)
    report = ExerciseCheckList(statistics=ExerciseStatistics(total_exercations=total))
    lock = threading.Lock()
    rights = 0

    def grade(exercise: Exercise, queued_at: int) -> None:
        nonlocal rights
        try:
            run(exercise, True)
            passed = True
        except RunFailed:
            passed = False
        with lock:
            if passed:
                rights += 1
            print(f"{exercise.name}{'执行成功' if passed else '执行失败'}")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {rights}")
            print(f"当前修改试卷耗时: {int(time.time()) - queued_at} s")
            report.exercises.append(ExerciseResult(name=exercise.name, result=passed))
            if passed:
                report.statistics.total_succeeds += 1
            else:
                report.statistics.total_failures += 1

    with ThreadPoolExecutor() as pool:
        futures = [pool.submit(grade, e, int(time.time())) for e in exercises]
        for future in futures:
            future.result()

    total_time = int(time.time()) - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    report.statistics.total_time = total_time
    Path(output_path).write_text(report.to_json(), encoding="utf-8")
    return report


def rustc_exists() -> bool:
    """Whether `rustc --version` can be started and succeeds."""
    try:
        result = subprocess.run(
            ["rustc", "--version"], stdout=subprocess.DEVNULL, check=False
        )
    except OSError:
        return False
    return result.returncode == 0