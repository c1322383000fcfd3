import io

import pytest

from xv6tools.threads import (
    COUNT_BONUS,
    MESSAGES,
    argument_pass,
    argument_pass_with_sum,
    busy_work,
    condition_demo,
    create_and_exit,
    join_demo,
    locked_counter,
    main,
)


def test_create_and_exit_greets_every_thread():
    out = io.StringIO()
    idents = create_and_exit(3, out)
    text = out.getvalue()
    assert len(idents) == 3
    for t in range(3):
        assert f"Hello World! It's me, thread #{t}!\n" in text
        assert f"In main: creating thread {t} thread id: {idents[t]}\n" in text
    assert len(text.splitlines()) == 6


def test_argument_pass_prints_message_per_index():
    out = io.StringIO()
    lines = argument_pass(MESSAGES, out)
    assert lines[0] == "Thread 0: English: Hello World!"
    assert len(lines) == len(MESSAGES)
    for t, line in enumerate(lines):
        assert line.endswith(MESSAGES[t])
        assert line + "\n" in out.getvalue()
        assert f"Creating thread {t}\n" in out.getvalue()


def test_argument_pass_with_sum_keeps_running_sum():
    out = io.StringIO()
    records = argument_pass_with_sum(["a", "b", "c", "d"], out)
    assert [r.thread_id for r in records] == [0, 1, 2, 3]
    assert [r.message for r in records] == ["a", "b", "c", "d"]
    assert records[0].sum == 0
    for prev, cur in zip(records, records[1:]):
        assert cur.sum - prev.sum == cur.thread_id
    assert f"Thread 3: d  Sum = {records[3].sum}\n" in out.getvalue()


def test_busy_work_returns_tid_and_reports_result():
    out = io.StringIO()
    assert busy_work(5, 1000, out) == 5
    lines = out.getvalue().splitlines()
    assert lines[0] == "Thread 5 starting..."
    assert lines[1] == "Thread 5 done. Result = 4.995000e+05"


def test_join_demo_returns_statuses_in_order():
    out = io.StringIO()
    statuses = join_demo(3, 100, out)
    assert statuses == [0, 1, 2]
    lines = out.getvalue().splitlines()
    assert lines[-1] == "Main: program completed. Exiting."
    for t in range(3):
        assert f"Main: completed join with thread {t} having a status of {t}" in lines


def test_locked_counter_counts_every_increment():
    result = locked_counter(4, 1000)
    assert result.local_counts == [1000] * 4
    assert result.global_count == sum(result.local_counts)


def test_condition_demo_final_count():
    out = io.StringIO()
    final = condition_demo(3, 4, out, 0)
    assert final == 2 * 3 + COUNT_BONUS
    text = out.getvalue()
    assert text.count("Threshold reached.") == 1
    assert f"Final value of count = {final}. Done." in text
    assert "Starting watch_count(): thread 1\n" in text


def test_condition_demo_rejects_unreachable_limit():
    with pytest.raises(ValueError):
        condition_demo(2, 10, io.StringIO(), 0)


def test_main_counter(capsys):
    assert main(["counter", "--threads", "2", "--increments", "10"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[-1] == "global count: 20"
    assert "thread 0, local count: 10" in lines


def test_main_condition_error(capsys):
    assert main(["condition", "--tcount", "1", "--limit", "5", "--delay", "0"]) == 1
    assert "threads:" in capsys.readouterr().err