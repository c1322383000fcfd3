"""A minimal command shell with interactive and batch modes.

Each input line may hold several commands separated by ';'. Every command
is run to completion in turn. If any command on the line contains "quit",
the shell stops after the whole line has run.
"""

from __future__ import annotations

import subprocess
import sys
from typing import Iterator, List, Optional, Sequence, TextIO

# Longest line read at once, including the terminating character.
MAX = 100

PROMPT = "prompt> "


def _fgets(stream: TextIO) -> Iterator[str]:
    """Yield pieces of input as a fixed-size line reader would return them."""
    for line in iter(stream.readline, ""):
        while len(line) > MAX - 1:
            yield line[:MAX - 1]
            line = line[MAX - 1:]
        if line:
            yield line


def split_commands(line: str) -> List[str]:
    """Cut the newline off ``line`` and split it on ';', dropping empty pieces."""
    first = next((part for part in line.split("\n") if part), None)
    if first is None:
        return []
    return [command for command in first.split(";") if command]


def split_args(command: str) -> List[str]:
    """Split a command on spaces, dropping empty pieces."""
    return [arg for arg in command.split(" ") if arg]


def contains_quit(commands: Sequence[str]) -> bool:
    """True when any command contains the text "quit"."""
    return any("quit" in command for command in commands)


def execute(command: str) -> Optional[int]:
    """Run one command and wait for it.

    Returns the exit status, or None when there is nothing to run or the
    program cannot be started.
    """
    args = split_args(command)
    if not args:
        return None
    sys.stdout.flush()
    try:
        return subprocess.run(args).returncode
    except (FileNotFoundError, PermissionError, NotADirectoryError):
        return None
    except OSError:
        print("Fork Error!")
        return None


def process_line(line: str) -> bool:
    """Run every command on ``line``; return True when the shell should stop."""
    commands = split_commands(line)
    stop = contains_quit(commands)
    for command in commands:
        execute(command)
    return stop


def interactive(stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None) -> None:
    """Prompt for lines on ``stdin`` until end of input or a quit command."""
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    pieces = _fgets(stdin)
    while True:
        stdout.write(PROMPT)
        stdout.flush()
        oper = next(pieces, None)
        if oper is None:
            stdout.write("\n")
            stdout.flush()
            break
        if oper.startswith("\n"):
            continue
        if process_line(oper):
            break


def batch(path: str, stdout: Optional[TextIO] = None) -> None:
    """Echo and run each line of the file at ``path`` until its end or a quit command."""
    stdout = sys.stdout if stdout is None else stdout
    with open(path, "r") as fp:
        for oper in _fgets(fp):
            stdout.write(oper)
            stdout.flush()
            if oper.startswith("\n"):
                continue
            if process_line(oper):
                break


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        interactive()
        return 0
    if len(args) == 1:
        try:
            batch(args[0])
        except OSError as exc:
            print(f"{args[0]}: {exc.strerror}", file=sys.stderr)
            return 1
        return 0
    print("Input Error!")
    return -1


if __name__ == "__main__":
    sys.exit(main())