"""Thread management demonstrations: creation, argument passing, joining,
mutual exclusion and condition variables."""

from __future__ import annotations

import argparse
import sys
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TextIO

MESSAGES = (
    "English: Hello World!",
    "French: Bonjour, le monde!",
    "Spanish: Hola al mundo",
    "Klingon: Nuq neH!",
    "German: Guten Tag, Welt!",
    "Russian: Zdravstvuyte, mir!",
    "Korea: Ahnneyonghaseyo segye!",
    "Latin: Orbis, te saluto!",
)

NUM_HELLO_THREADS = 5
NUM_JOIN_THREADS = 4
BUSY_ITERATIONS = 1_000_000
NUM_COUNTER_THREADS = 16
NUM_INCREASE = 10_000_000
TCOUNT = 10
COUNT_LIMIT = 12
COUNT_BONUS = 125


class _Printer:
    """Serialises writes from several threads to one stream."""

    def __init__(self, out: Optional[TextIO]) -> None:
        self._out = sys.stdout if out is None else out
        self._lock = threading.Lock()

    def __call__(self, text: str) -> None:
        with self._lock:
            self._out.write(text)
            self._out.flush()


def _start(target: Callable[..., None], *args: object) -> threading.Thread:
    thread = threading.Thread(target=target, args=args)
    thread.start()
    return thread


def create_and_exit(num_threads: int = NUM_HELLO_THREADS, out: Optional[TextIO] = None) -> List[int]:
    """Start ``num_threads`` greeting threads, wait for them, and return their identifiers."""
    write = _Printer(out)

    def hello(tid: int) -> None:
        write(f"Hello World! It's me, thread #{tid}!\n")

    threads = []
    for t in range(num_threads):
        thread = _start(hello, t)
        threads.append(thread)
        write(f"In main: creating thread {t} thread id: {thread.ident}\n")
    for thread in threads:
        thread.join()
    return [thread.ident for thread in threads]


def argument_pass(messages: Sequence[str] = MESSAGES, out: Optional[TextIO] = None) -> List[str]:
    """Hand each thread its index; each prints the message at that index.

    Returns the lines the threads printed, ordered by thread index.
    """
    write = _Printer(out)
    lines: List[str] = [""] * len(messages)

    def hello(taskid: int) -> None:
        line = f"Thread {taskid}: {messages[taskid]}"
        lines[taskid] = line
        write(line + "\n")

    threads = []
    for t in range(len(messages)):
        write(f"Creating thread {t}\n")
        threads.append(_start(hello, t))
    for thread in threads:
        thread.join()
    return lines


@dataclass(frozen=True)
class ThreadData:
    """Arguments handed to one thread."""

    thread_id: int
    sum: int
    message: str


def argument_pass_with_sum(
    messages: Sequence[str] = MESSAGES, out: Optional[TextIO] = None
) -> List[ThreadData]:
    """Hand each thread a record holding its index, a running sum and a message."""
    write = _Printer(out)

    def hello(data: ThreadData) -> None:
        write(f"Thread {data.thread_id}: {data.message}  Sum = {data.sum}\n")

    records: List[ThreadData] = []
    threads = []
    total = 0
    for t, message in enumerate(messages):
        total += t
        data = ThreadData(thread_id=t, sum=total, message=message)
        records.append(data)
        write(f"Creating thread {t}\n")
        threads.append(_start(hello, data))
    for thread in threads:
        thread.join()
    return records


def busy_work(tid: int, iterations: int = BUSY_ITERATIONS, out: Optional[TextIO] = None) -> int:
    """Sum 0..iterations-1 as a float, report it, and return ``tid`` as the status."""
    write = _Printer(out) if not isinstance(out, _Printer) else out
    write(f"Thread {tid} starting...\n")
    result = 0.0
    for i in range(iterations):
        result += i
    write(f"Thread {tid} done. Result = {result:e}\n")
    return tid


def join_demo(
    num_threads: int = NUM_JOIN_THREADS,
    iterations: int = BUSY_ITERATIONS,
    out: Optional[TextIO] = None,
) -> List[int]:
    """Run ``busy_work`` in several threads, join each, and return their statuses."""
    write = _Printer(out)
    statuses: List[Optional[int]] = [None] * num_threads

    def run(t: int) -> None:
        statuses[t] = busy_work(t, iterations, write)  # type: ignore[arg-type]

    threads = []
    for t in range(num_threads):
        write(f"Main: creating thread {t}\n")
        threads.append(_start(run, t))
    for t, thread in enumerate(threads):
        thread.join()
        write(f"Main: completed join with thread {t} having a status of {statuses[t]}\n")
    write("Main: program completed. Exiting.\n")
    return [status for status in statuses if status is not None]


@dataclass(frozen=True)
class CounterResult:
    """Outcome of the shared counter run."""

    global_count: int
    local_counts: List[int]


def locked_counter(
    num_threads: int = NUM_COUNTER_THREADS, increments: int = NUM_INCREASE
) -> CounterResult:
    """Have each thread bump a shared counter under a lock and a private one without."""
    lock = threading.Lock()
    shared = [0]
    local_counts = [0] * num_threads

    def work(index: int) -> None:
        local = 0
        for _ in range(increments):
            with lock:
                shared[0] += 1
            local += 1
        local_counts[index] = local

    threads = [_start(work, i) for i in range(num_threads)]
    for thread in threads:
        thread.join()
    return CounterResult(global_count=shared[0], local_counts=local_counts)


def condition_demo(
    tcount: int = TCOUNT,
    limit: int = COUNT_LIMIT,
    out: Optional[TextIO] = None,
    delay: float = 1.0,
) -> int:
    """Two threads count up while a third waits for the count to reach ``limit``.

    Returns the final count. Raises ValueError when the counting threads
    could never reach ``limit``, since the waiting thread would block forever.
    """
    if limit > 2 * tcount:
        raise ValueError(f"limit {limit} is never reached by two threads counting to {tcount}")
    write = _Printer(out)
    cond = threading.Condition()
    count = [0]

    def inc_count(my_id: int) -> None:
        for _ in range(tcount):
            with cond:
                count[0] += 1
                if count[0] == limit:
                    write(f"inc_count(): thread {my_id}, count = {count[0]}  Threshold reached. ")
                    cond.notify()
                    write("Just sent signal.\n")
                write(f"inc_count(): thread {my_id}, count = {count[0]}, unlocking mutex\n")
            time.sleep(delay)

    def watch_count(my_id: int) -> None:
        write(f"Starting watch_count(): thread {my_id}\n")
        with cond:
            while count[0] < limit:
                write(f"watch_count(): thread {my_id} Count= {count[0]}. Going into wait...\n")
                cond.wait()
                write(
                    f"watch_count(): thread {my_id} Condition signal received. Count= {count[0]}\n"
                )
            write(f"watch_count(): thread {my_id} Updating the value of count...\n")
            count[0] += COUNT_BONUS
            write(f"watch_count(): thread {my_id} count now = {count[0]}.\n")
            write(f"watch_count(): thread {my_id} Unlocking mutex.\n")

    threads = [_start(watch_count, 1), _start(inc_count, 2), _start(inc_count, 3)]
    for thread in threads:
        thread.join()
    write(
        f"Main(): Waited and joined with {len(threads)} threads. "
        f"Final value of count = {count[0]}. Done.\n"
    )
    return count[0]


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="threads", description="Thread demonstrations.")
    sub = parser.add_subparsers(dest="demo", required=True)

    p = sub.add_parser("create", help="create threads that greet")
    p.add_argument("--threads", type=int, default=NUM_HELLO_THREADS)
    sub.add_parser("args", help="pass an index to each thread")
    sub.add_parser("args-sum", help="pass a record to each thread")
    p = sub.add_parser("join", help="join busy threads")
    p.add_argument("--threads", type=int, default=NUM_JOIN_THREADS)
    p.add_argument("--iterations", type=int, default=BUSY_ITERATIONS)
    p = sub.add_parser("counter", help="count under a lock")
    p.add_argument("--threads", type=int, default=NUM_COUNTER_THREADS)
    p.add_argument("--increments", type=int, default=NUM_INCREASE)
    p = sub.add_parser("condition", help="wait on a condition variable")
    p.add_argument("--tcount", type=int, default=TCOUNT)
    p.add_argument("--limit", type=int, default=COUNT_LIMIT)
    p.add_argument("--delay", type=float, default=1.0)
    args = parser.parse_args(argv)

    if args.demo == "create":
        create_and_exit(args.threads)
    elif args.demo == "args":
        argument_pass()
    elif args.demo == "args-sum":
        argument_pass_with_sum()
    elif args.demo == "join":
        join_demo(args.threads, args.iterations)
    elif args.demo == "counter":
        result = locked_counter(args.threads, args.increments)
        for index, local in enumerate(result.local_counts):
            print(f"thread {index}, local count: {local}")
        print(f"global count: {result.global_count}")
    else:
        try:
            condition_demo(args.tcount, args.limit, delay=args.delay)
        except ValueError as exc:
            print(f"threads: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())