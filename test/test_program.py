"""Program parsing and the non-interactive entry points."""

from __future__ import annotations

import io

import pytest
from parser import ParseError, parse, tokenize
from ports import CollectOutput, IteratorInput, NoMoreInput, PortError, PrintOutput
from processor import Complete
from program import Program, run_source

DAY2 = "1,9,10,3,2,3,11,0,99,30,40,50"
QUINE = "109,1,204,-1,1001,100,1,100,1008,100,16,101,1006,101,0,99"


def test_tokenize_trims_whitespace() -> None:
    assert tokenize(" 1, 2 ,\n-3\n") == ["1", "2", "-3"]


def test_parse_words() -> None:
    assert parse("1,-1,2,0,99\n") == [1, -1, 2, 0, 99]
    assert Program.parse("104,1125899906842624,99").words == (104, 1125899906842624, 99)


@pytest.mark.parametrize("bad", ["a", "", "2.5", "+5", "1 2", "9223372036854775808", "9" * 5000, "٣", "-٣"])
def test_parse_error_names_token_and_text(bad: str) -> None:
    text = f"1,{bad},3"
    with pytest.raises(ParseError) as exc:
        Program.parse(text)
    assert exc.value.token == bad
    assert exc.value.text == text
    assert repr(text) in str(exc.value)


@pytest.mark.parametrize(
    ("source", "noun", "verb", "expected"),
    [
        (DAY2, 9, 10, 3500),
        ("1,0,0,0,99", 0, 0, 2),
        ("2,4,4,0,99", 4, 4, 9801),
        ("1,1,1,4,99,5,6,0,99", 1, 1, 30),
    ],
)
def test_run_noun_verb(source: str, noun: int, verb: int, expected: int) -> None:
    assert Program.parse(source).run(noun, verb) == expected


@pytest.mark.parametrize(("noun", "verb"), [(9, 10), (0, 0), (11, 3), (12, 2)])
def test_run_matches_manual_patching(noun: int, verb: int) -> None:
    prog = Program.parse(DAY2)
    rt = prog.new_runtime()
    rt.set(1, noun)
    rt.set(2, verb)
    while rt.resume() != Complete():
        pass
    assert prog.run(noun, verb) == rt.get(0)


def test_run_refuses_io() -> None:
    with pytest.raises(PortError, match="input not implemented"):
        Program.parse("3,0,99").run(0, 99)
    with pytest.raises(PortError, match="output not implemented"):
        Program.parse("4,0,99").run(0, 99)


def test_run_collect_output() -> None:
    assert Program.parse("3,0,4,0,99").run_collect_output([42]) == [42]


def test_run_collect_output_runs_out_of_input() -> None:
    with pytest.raises(NoMoreInput, match="no more input"):
        Program.parse("3,0,3,1,99").run_collect_output([1])


def test_quine_reproduces_itself() -> None:
    prog = Program.parse(QUINE)
    assert prog.run_collect_output([]) == list(prog.words)


def test_sixteen_digit_output() -> None:
    out = Program.parse("1102,34915192,34915192,7,4,7,99,0").run_collect_output([])
    assert len(out) == 1
    assert len(str(out[0])) == 16


def test_run_io_with_print_output() -> None:
    stream = io.StringIO()
    rt = Program.parse("3,0,4,0,4,0,99").run_io(IteratorInput([3]), PrintOutput(stream))
    assert stream.getvalue() == "3\n3\n"
    assert rt.is_complete


def test_run_io_with_collect_output_list() -> None:
    values: list[int] = []
    Program.parse("104,5,104,6,99").run_io(IteratorInput([]), CollectOutput(values))
    assert values == [5, 6]


def test_program_is_not_modified_by_runtimes() -> None:
    prog = Program.parse("1,0,0,0,99")
    rt = prog.new_runtime()
    rt.set(0, 2)
    rt.resume()
    assert prog.words == (1, 0, 0, 0, 99)
    assert prog.new_runtime().get(0) == 1
    assert len(prog) == 5


@pytest.mark.parametrize(("value", "expected"), [(7, 999), (8, 1000), (9, 1001)])
def test_compare_and_jump(value: int, expected: int) -> None:
    prog = Program.parse(
        "3,21,1008,21,8,20,1005,20,22,107,8,21,20,1006,20,31,"
        "1106,0,36,98,0,0,1002,21,125,20,4,20,1105,1,46,104,"
        "999,1105,1,46,1101,1000,1,20,4,20,1105,1,46,98,99"
    )
    assert prog.run_collect_output([value]) == [expected]


def test_run_source_applies_config() -> None:
    out, rt = run_source("3,0,4,0,99", [8], {"trace": True, "step_limit": 3})
    assert out == [8]
    assert rt.trace
    assert rt.step_limit == 3
