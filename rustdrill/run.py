"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from rustdrill.exercise import Exercise, ExerciseFailed, Mode
from rustdrill.ui import success, warn
from rustdrill.verify import VerificationFailed, test


class RunFailed(Exception):
    """Running or resetting an exercise failed."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"running {exercise} failed")
        self.exercise = exercise


def run(exercise: Exercise, verbose: bool) -> None:
    """Build and run (or test) the exercise; raise RunFailed on failure."""
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            try:
                test(exercise, verbose)
            except VerificationFailed:
                raise RunFailed(exercise) from None
        case Mode.COMPILE | Mode.CLIPPY:
            if not _compile_and_run(exercise):
                raise RunFailed(exercise)


def reset(exercise: Exercise) -> None:
    """Stash local changes to the exercise file with git."""
    try:
        subprocess.run(["git", "stash", "--", str(exercise.path)], check=False)
    except OSError:
        raise RunFailed(exercise) from None


def _compile_and_run(exercise: Exercise) -> bool:
    try:
        compiled = exercise.compile()
    except ExerciseFailed as err:
        warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
        print(err.output.stderr)
        return False
    with compiled:
        try:
            output = compiled.run()
        except ExerciseFailed as err:
            print(err.output.stdout)
            print(err.output.stderr)
            warn(f"Ran {exercise} with errors")
            return False
    print(output.stdout)
    success(f"Successfully ran {exercise}")
    return True