import io

import pytest

from xv6tools.grep import grep, main, match, match_here, match_star


@pytest.mark.parametrize(
    "pattern, text, expected",
    [
        ("^ab", "abc", True),
        ("^b", "ab", False),
        ("b.d", "abcd", True),
        ("a*b", "b", True),
        ("a*b", "aaab", True),
        ("c$", "abc", True),
        ("c$", "abcd", False),
        ("", "x", True),
        ("x", "", False),
        (".*", "", True),
        ("^a.*z$", "abcz", True),
        ("^a.*z$", "abczy", False),
    ],
)
def test_match(pattern, text, expected):
    assert match(pattern, text) is expected


def test_match_here_anchors_at_start():
    assert match_here("bc", "bcd") is True
    assert match_here("bc", "abc") is False


def test_match_star():
    assert match_star("a", "b", "aaab") is True
    assert match_star("a", "b", "aaac") is False
    assert match_star(".", "c", "xyzc") is True


def test_match_long_line_does_not_overflow():
    text = "a" * 5000 + "b"
    assert match("a*b$", text) is True


def test_grep_prints_matching_lines():
    out = io.BytesIO()
    grep("o", io.BytesIO(b"one\ntwo\nsix\n"), out)
    assert out.getvalue() == b"one\ntwo\n"


def test_grep_ignores_unterminated_last_line():
    out = io.BytesIO()
    grep("thr", io.BytesIO(b"one\nthree"), out)
    assert out.getvalue() == b""


def test_grep_output_is_subset_of_input_lines():
    data = b"".join(b"line %d\n" % i for i in range(500))
    out = io.BytesIO()
    grep("^line 4", io.BytesIO(data), out)
    lines = out.getvalue().splitlines()
    assert lines
    assert all(line.startswith(b"line 4") for line in lines)
    assert set(lines) <= set(data.splitlines())


def test_main_without_pattern(capsys):
    assert main([]) == 1
    assert "usage: grep pattern" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    missing = tmp_path / "missing.txt"
    assert main(["x", str(missing)]) == 1
    assert f"grep: cannot open {missing}" in capsys.readouterr().out


def test_main_reads_files(tmp_path, capsysbinary):
    path = tmp_path / "words.txt"
    path.write_bytes(b"apple\nbanana\ncherry\n")
    assert main(["an", str(path)]) == 0
    assert capsysbinary.readouterr().out == b"banana\n"