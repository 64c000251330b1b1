"""Checking exercises in order and reporting progress."""

from __future__ import annotations

import enum
from collections.abc import Iterable

from rich.console import Console
from rich.text import Text

from rustdrill.exercise import CompiledExercise, Exercise, ExerciseFailed, Mode
from rustdrill.ui import no_emoji, success, warn

_BAR_WIDTH = 60
_SEPARATOR = "===================="


class RunMode(enum.Enum):
    """Whether a passing exercise leads to the completion prompt."""

    INTERACTIVE = "interactive"
    NON_INTERACTIVE = "non-interactive"


class VerificationFailed(Exception):
    """An exercise did not compile, did not pass, or is still pending."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"verification of {exercise} failed")
        self.exercise = exercise


def _console() -> Console:
    return Console(highlight=False, soft_wrap=True)


def _percentage(position: int, total: int) -> float:
    return position / total * 100.0 if total else 0.0


def _progress_line(position: int, total: int) -> Text:
    filled = min(_BAR_WIDTH * position // total, _BAR_WIDTH) if total else _BAR_WIDTH
    line = Text("Progress: [")
    line.append("#" * filled, style="green")
    if filled < _BAR_WIDTH:
        line.append(">" + "-" * (_BAR_WIDTH - filled - 1), style="red")
    line.append(f"] {position}/{total} ({_percentage(position, total):.1f} %)")
    return line


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool,
    success_hints: bool,
) -> None:
    """Check every exercise in turn; raise VerificationFailed at the first that fails."""
    position, total = progress
    console = _console()
    console.print(_progress_line(position, total))
    for exercise in exercises:
        if not _check(exercise, verbose, success_hints):
            raise VerificationFailed(exercise)
        position += 1
        console.print(_progress_line(position, total))


def _check(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return _compile_and_test(exercise, RunMode.INTERACTIVE, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)
    return False


def test(exercise: Exercise, verbose: bool) -> None:
    """Build and run the exercise's test harness; raise VerificationFailed on failure."""
    if not _compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose, False):
        raise VerificationFailed(exercise)


def _compile(exercise: Exercise) -> CompiledExercise | None:
    try:
        return exercise.compile()
    except ExerciseFailed as err:
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        return None


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    compiled = _compile(exercise)
    if compiled is None:
        return False
    with compiled:
        return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    compiled = _compile(exercise)
    if compiled is None:
        return False
    with compiled:
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            warn(f"Ran {exercise} with errors")
            print(err.output.stdout)
            print(err.output.stderr)
            return False
        return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, run_mode: RunMode, verbose: bool, success_hints: bool
) -> bool:
    compiled = _compile(exercise)
    if compiled is None:
        return False
    with compiled:
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
            print(err.output.stdout)
            return False
        if verbose:
            print(output.stdout)
        if run_mode is RunMode.INTERACTIVE:
            return prompt_for_completion(exercise, None, success_hints)
        return True


def _success_message(mode: Mode, plain: bool) -> str:
    match mode:
        case Mode.COMPILE:
            return "The code is compiling!"
        case Mode.TEST:
            return "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            if plain:
                return "The code is compiling, and Clippy is happy!"
            return "The code is compiling, and 📎 Clippy 📎 is happy!"
        case Mode.BUILD_SCRIPT:
            return "Build script works!"
    return ""


def _announce(exercise: Exercise) -> None:
    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where the marker is and return False."""
    state = exercise.state()
    if state.done():
        return True
    _announce(exercise)

    console = _console()
    separator = Text(_SEPARATOR, style="bold")
    plain = no_emoji()
    message = _success_message(exercise.mode, plain)
    print()
    print(f"~*~ {message} ~*~" if plain else f"🎉 🎉  {message} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        console.print(separator)
        print(prompt_output)
        console.print(separator)
        print()
    if success_hints:
        print("Hints:")
        console.print(separator)
        print(exercise.hint)
        console.print(separator)
        print()

    print("You can keep working on this exercise,")
    invitation = Text("or jump into the next one by removing the ")
    invitation.append("`I AM NOT DONE`", style="bold")
    invitation.append(" comment:")
    console.print(invitation)
    print()
    for context_line in state.context or ():
        row = Text(f"{context_line.number:>2}", style="bold blue")
        row.append(" ")
        row.append("|", style="blue")
        row.append("  ")
        row.append(context_line.line, style="bold" if context_line.important else "")
        console.print(row)
    return False