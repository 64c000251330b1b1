import subprocess
from pathlib import Path
from unittest import mock

import pytest

from rustdrill.exercise import (
    BUILD_SCRIPT_CARGO_TOML_PATH,
    CLIPPY_CARGO_TOML_PATH,
    CompiledExercise,
    ContextLine,
    Exercise,
    ExerciseFailed,
    ExerciseOutput,
    Mode,
    State,
    clean,
    load_exercises,
    parse_exercise_list,
    temp_file,
)

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"


def _completed(code=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess([], code, stdout=stdout, stderr=stderr)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content)
    return path


def test_pending_state(tmp_path):
    path = _write(tmp_path, "pending_exercise.rs", PENDING)
    exercise = Exercise("pending_exercise", path, Mode.COMPILE, "")
    expected = State(
        (
            ContextLine("// fake_exercise", 1, False),
            ContextLine("", 2, False),
            ContextLine("// I AM NOT DONE", 3, True),
            ContextLine("", 4, False),
            ContextLine("fn main() {", 5, False),
        )
    )
    assert exercise.state() == expected
    assert exercise.looks_done() is False


def test_finished_exercise(tmp_path):
    path = _write(tmp_path, "finished_exercise.rs", FINISHED)
    exercise = Exercise("finished_exercise", path, Mode.COMPILE, "")
    assert exercise.state() == State()
    assert exercise.state().done()
    assert exercise.looks_done() is True


def test_marker_on_first_line_clamps_context(tmp_path):
    path = _write(tmp_path, "t.rs", "// I AM NOT DONE\n\n#[test]\nfn it_works() {}\n")
    context = Exercise("t", path, Mode.TEST).state().context
    assert [c.number for c in context] == [1, 2, 3]
    assert [c.important for c in context] == [True, False, False]


def test_triple_slash_and_indent_marker(tmp_path):
    path = _write(tmp_path, "t.rs", "fn main() {}\n    ///  I  AM NOT   DONE\n")
    context = Exercise("t", path, Mode.COMPILE).state().context
    assert context[-1] == ContextLine("    ///  I  AM NOT   DONE", 2, True)


def test_crlf_lines_are_stripped(tmp_path):
    path = tmp_path / "t.rs"
    path.write_bytes(b"a\r\n// I AM NOT DONE\r\nb\r\n")
    context = Exercise("t", path, Mode.COMPILE).state().context
    assert [c.line for c in context] == ["a", "// I AM NOT DONE", "b"]


def test_missing_file_raises(tmp_path):
    exercise = Exercise("x", tmp_path / "missing.rs", Mode.COMPILE)
    with pytest.raises(FileNotFoundError):
        exercise.state()


def test_str_is_path():
    assert str(Exercise("a", Path("exercises/a.rs"), Mode.TEST)) == str(Path("exercises/a.rs"))


def test_mode_from_string():
    assert Exercise("a", "a.rs", "buildscript").mode is Mode.BUILD_SCRIPT


def test_clean(workdir):
    Path(temp_file()).touch()
    exercise = Exercise("example", workdir / "pending.rs", Mode.COMPILE)
    with mock.patch("subprocess.run", return_value=_completed()) as run:
        compiled = exercise.compile()
    assert isinstance(compiled, CompiledExercise)
    assert run.call_args.args[0] == [
        "rustc", str(workdir / "pending.rs"), "-o", temp_file(),
        "--color", "always", "--edition", "2021",
    ]
    assert Path(temp_file()).exists()
    compiled.close()
    assert not Path(temp_file()).exists()


def test_context_manager_removes_binary(workdir):
    Path(temp_file()).touch()
    exercise = Exercise("example", "x.rs", Mode.COMPILE)
    with mock.patch("subprocess.run", return_value=_completed()):
        with exercise.compile() as compiled:
            assert compiled.exercise is exercise
    assert not Path(temp_file()).exists()


def test_clean_without_file(workdir):
    clean()
    assert not Path(temp_file()).exists()


def test_compile_failure_raises_with_output(workdir):
    Path(temp_file()).touch()
    exercise = Exercise("compFailure", "compFailure.rs", Mode.COMPILE)
    failed = _completed(1, stdout=b"", stderr=b"error: expected pattern")
    with mock.patch("subprocess.run", return_value=failed):
        with pytest.raises(ExerciseFailed) as info:
            exercise.compile()
    assert info.value.output == ExerciseOutput("", "error: expected pattern")
    assert not Path(temp_file()).exists()


def test_exercise_with_output(workdir):
    exercise = Exercise("exercise_with_output", "testSuccess.rs", Mode.TEST)
    responses = [_completed(), _completed(stdout=b"THIS TEST TOO SHALL PASS\n")]
    with mock.patch("subprocess.run", side_effect=responses) as run:
        with exercise.compile() as compiled:
            out = compiled.run()
    assert "THIS TEST TOO SHALL PASS" in out.stdout
    assert run.call_args_list[0].args[0][:2] == ["rustc", "--test"]
    assert run.call_args_list[1].args[0] == [temp_file(), "--show-output"]


def test_run_failure_raises(workdir):
    exercise = Exercise("testNotPassed", "testNotPassed.rs", Mode.TEST)
    responses = [_completed(), _completed(101, stdout=b"failed", stderr=b"panic")]
    with mock.patch("subprocess.run", side_effect=responses):
        with exercise.compile() as compiled:
            with pytest.raises(ExerciseFailed) as info:
                compiled.run()
    assert info.value.output == ExerciseOutput("failed", "panic")


def test_output_is_decoded_lossily(workdir):
    exercise = Exercise("x", "x.rs", Mode.COMPILE)
    responses = [_completed(), _completed(stdout=b"ok\xff")]
    with mock.patch("subprocess.run", side_effect=responses):
        with exercise.compile() as compiled:
            assert compiled.run().stdout == "ok\ufffd"


def test_build_script_writes_manifest(workdir):
    (workdir / "exercises" / "tests").mkdir(parents=True)
    exercise = Exercise("build", "exercises/tests/build.rs", Mode.BUILD_SCRIPT)
    with mock.patch("subprocess.run", return_value=_completed()) as run:
        with exercise.compile() as compiled:
            out = compiled.run()
    assert out == ExerciseOutput("", "")
    assert run.call_count == 1
    assert run.call_args.args[0] == [
        "cargo", "test", "--manifest-path", BUILD_SCRIPT_CARGO_TOML_PATH
    ]
    manifest = Path(BUILD_SCRIPT_CARGO_TOML_PATH).read_text()
    assert manifest == (
        '[package]\nname = "build"\nversion = "0.0.1"\nedition = "2021"\n'
        '[[bin]]\nname = "build"\npath = "build.rs"'
    )


def test_clippy_runs_three_commands(workdir):
    (workdir / "exercises" / "clippy").mkdir(parents=True)
    exercise = Exercise("clippy1", "exercises/clippy/clippy1.rs", Mode.CLIPPY)
    with mock.patch("subprocess.run", return_value=_completed()) as run:
        compiled = exercise.compile()
    assert isinstance(compiled, CompiledExercise)
    assert compiled.exercise is exercise
    compiled.close()
    commands = [c.args[0] for c in run.call_args_list]
    assert len(commands) == 3
    assert commands[0][0] == "rustc"
    assert [c[:2] for c in commands[1:]] == [["cargo", "clean"], ["cargo", "clippy"]]
    assert commands[2][-5:] == ["--", "-D", "warnings", "-D", "clippy::float_cmp"]
    manifest = Path(CLIPPY_CARGO_TOML_PATH).read_text()
    assert manifest == (
        '[package]\nname = "clippy1"\nversion = "0.0.1"\nedition = "2021"\n'
        '[[bin]]\nname = "clippy1"\npath = "clippy1.rs"'
    )


def test_manifest_write_failure(workdir):
    exercise = Exercise("clippy1", "clippy1.rs", Mode.CLIPPY)
    with mock.patch("subprocess.run", return_value=_completed()):
        with pytest.raises(OSError, match="Cargo.toml"):
            exercise.compile()


INFO = """
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "No hints this time ;)"

[[exercises]]
name = "build"
path = "exercises/tests/build.rs"
mode = "buildscript"
hint = ""
"""


def test_parse_exercise_list():
    exercises = parse_exercise_list(INFO)
    assert [e.name for e in exercises] == ["intro1", "build"]
    assert exercises[0].path == Path("exercises/intro/intro1.rs")
    assert exercises[0].mode is Mode.COMPILE
    assert exercises[0].hint == "No hints this time ;)"
    assert exercises[1].mode is Mode.BUILD_SCRIPT


def test_load_exercises(tmp_path):
    info = _write(tmp_path, "info.toml", INFO)
    assert [e.name for e in load_exercises(info)] == ["intro1", "build"]


def test_parse_unknown_mode():
    text = '[[exercises]]\nname="a"\npath="a.rs"\nmode="bogus"\nhint=""\n'
    with pytest.raises(ValueError, match="bogus"):
        parse_exercise_list(text)


def test_parse_missing_field():
    text = '[[exercises]]\nname="a"\npath="a.rs"\nmode="test"\n'
    with pytest.raises(ValueError, match="hint"):
        parse_exercise_list(text)


def test_parse_missing_list():
    with pytest.raises(ValueError):
        parse_exercise_list('title = "x"\n')


def test_parse_invalid_toml():
    with pytest.raises(ValueError):
        parse_exercise_list("[[exercises]\n")