# rustdrill

A terminal companion for working through a collection of small Rust
exercises. It builds, runs and tests each exercise with `rustc`. Where an
exercise asks for it, it uses `cargo clippy` or `cargo test` instead. It
tells you what fails and keeps track of which exercises you have finished.

## Installation

```
pip install .
```

You need a working Rust toolchain on your `PATH`. Check it with
`rustc --version`. Every command except `--version` stops with exit status 1
if `rustc` cannot be started.

## The exercise directory

Run `rustdrill` from a directory that holds an `info.toml` file. Without one
it exits with status 1. That file lists the exercises in their recommended
order:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the marker comment to move on."
```

Every entry needs all four fields. `mode` is one of:

- `compile`: build the file as a program with `rustc` and run it
- `test`: build the file as a test harness and run its tests
- `clippy`: write `exercises/clippy/Cargo.toml`, build the file, and lint it
  with `cargo clippy`, treating warnings as errors
- `buildscript`: write `exercises/tests/Cargo.toml` and run `cargo test`

An exercise counts as unfinished while its source still holds a line that
starts with `// I AM NOT DONE` (leading spaces and `///` are allowed). Delete
that line once the code works, and the exercise counts as done.

## Commands

```
rustdrill                    # print the introduction
rustdrill --version          # print the version
rustdrill watch              # verify exercises in order, re-checking as you edit
rustdrill verify             # verify every exercise in order, once
rustdrill run NAME           # compile and run (or test) a single exercise
rustdrill run next           # run the first exercise that is not done yet
rustdrill hint NAME          # show the hint for an exercise
rustdrill reset NAME         # stash your changes to an exercise with git
rustdrill list               # show every exercise with its path and status
rustdrill lsp                # write rust-project.json for rust-analyzer
rustdrill cicvverify         # run every exercise and write a JSON score report
```

Add `--nocapture` before the command to see the output of test exercises,
for example `rustdrill --nocapture run NAME`.

`verify`, `run` and `reset` exit with status 1 when they fail. So do `run`,
`hint` and `reset` when no exercise has the given name. `verify` stops at the
first exercise that fails to build or run, or that still holds the marker.

### watch

`watch` verifies the exercises in order. It stops at the first exercise that
fails or is still marked as not done. It checks again each time a `.rs` file
under `exercises/` is created or changed. The edited exercise is checked
first, then the other unfinished ones. While it runs you can type:

- `hint`: print the current exercise's hint
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, for example `!rustc --explain E0381`
- `help`: list these commands

Pass `--success-hints` to show each exercise's hint once it compiles.

### list

```
rustdrill list --paths            # paths only (-p)
rustdrill list --names            # names only (-n)
rustdrill list --filter vec,str   # names or paths containing any of the patterns (-f)
rustdrill list --solved           # only finished exercises (-s)
rustdrill list --unsolved         # only unfinished exercises (-u)
```

Filter patterns are lower-cased before they are matched. The listing ends
with a progress line such as
`Progress: You completed 3 / 10 exercises (30.0 %).`

### lsp

`lsp` writes `rust-project.json` to the current directory. The file has one
crate for every `.rs` file below `exercises/`, so rust-analyzer can work on
the exercises. The standard library sources are taken from `RUST_SRC_PATH`
if it is set. Otherwise they come from `rustc --print sysroot`.

### cicvverify

This command runs every exercise at the same time and prints the result of
each one. It then writes a summary to `.github/result/check_result.json`.
The summary holds the result of each exercise, the number of successes and
failures, and the total time in seconds. The `.github/result` directory
must already exist. If the report cannot be written, the command exits with
status 1.

## Using it from Python

The pieces behind the commands can be imported:

```python
from rustdrill.exercise import load_exercises
from rustdrill.verify import verify, VerificationFailed

exercises = load_exercises("info.toml")
pending = [e for e in exercises if not e.looks_done()]
try:
    verify(exercises, (0, len(exercises)), verbose=False, success_hints=False)
except VerificationFailed as err:
    print("stuck at", err.exercise.name)
```

`Exercise.state()` returns a `State` whose `context` holds the lines around
the marker, or is `None` once the exercise is done.

## Environment

Set `NO_EMOJI` to any value to print plain symbols instead of emoji.