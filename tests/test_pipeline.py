"""Tests de extremo a extremo del pipeline y del contrato Outcome."""

import pytest

from diagnostics import Diagnostic, DiagnosticKind, Position
from pipeline import run
from result import Outcome, Result


def test_end_to_end_scenarios():
    outcome = run("(1 + 2) * 3")
    assert outcome.ok
    assert outcome.result == Result(9)

    outcome = run("1 +")
    assert not outcome.ok
    assert outcome.diagnostic.kind is DiagnosticKind.SYNTAX
    assert outcome.diagnostic.position == Position(1, 4)

    outcome = run("1 $ 2")
    assert not outcome.ok
    assert outcome.diagnostic.kind is DiagnosticKind.LEXICAL
    assert outcome.diagnostic.position == Position(1, 3)


def test_trailing_input_gives_no_result():
    outcome = run("2 + 2 extra")
    assert outcome.result is None
    assert outcome.diagnostic.kind is DiagnosticKind.SYNTAX


def test_invocations_share_no_state():
    assert run("x = 1").ok
    outcome = run("x")
    assert not outcome.ok
    assert outcome.diagnostic.kind is DiagnosticKind.RUNTIME


def test_result_is_immutable():
    result = run("2 + 3 * 4").result
    with pytest.raises(AttributeError):
        result.value = 0


def test_outcome_holds_exactly_one_value():
    diagnostic = Diagnostic(DiagnosticKind.SYNTAX, "x", Position(1, 1))
    with pytest.raises(ValueError):
        Outcome()
    with pytest.raises(ValueError):
        Outcome(result=Result(1), diagnostic=diagnostic)
    assert Outcome.failure(diagnostic).diagnostic is diagnostic


def test_diagnostic_text():
    diagnostic = Diagnostic(DiagnosticKind.SYNTAX, "token inesperado", Position(2, 5),
                            ('INT', 'NAME'))
    assert str(diagnostic) == (
        "Error sintáctico en línea 2, columna 5: token inesperado "
        "(se esperaba: INT, NAME)")
