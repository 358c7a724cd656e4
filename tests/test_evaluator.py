"""Tests del intérprete, a través de pipeline.run()."""

import io

import pytest

from diagnostics import DiagnosticKind, Position
from pipeline import run


def value_of(source):
    outcome = run(source)
    assert outcome.ok, outcome.diagnostic
    return outcome.result.value


def failure_of(source):
    outcome = run(source)
    assert not outcome.ok
    assert outcome.result is None
    return outcome.diagnostic


# --- Aritmética ---

@pytest.mark.parametrize('source, expected', [
    ("2 + 3 * 4", 14),
    ("(1 + 2) * 3", 9),
    ("10 - 2 - 3", 5),
    ("7 // 2", 3),
    ("7 % 3", 1),
    ("2 ** 10", 1024),
    ("2 ** 3 ** 2", 512),
    ("-2 ** 2", -4),
    ("-(2 + 3)", -5),
    ("+4", 4),
])
def test_integer_arithmetic(source, expected):
    assert value_of(source) == expected


def test_true_division():
    assert value_of("7 / 2") == pytest.approx(3.5)
    assert value_of("1.5 * 2") == pytest.approx(3.0)


def test_strings():
    assert value_of('"hola" + " " + "mundo"') == 'hola mundo'
    assert value_of('"ab" * 2') == 'abab'


# --- Lógica ---

def test_comparisons_and_logic():
    assert value_of("1 < 2 and 3 > 2") is True
    assert value_of("not True") is False
    assert value_of("0 or 5") == 5
    assert value_of("0 and undefined_name") == 0
    assert value_of("1 <= 1 and 2 != 3") is True


# --- Variables y sentencias ---

def test_variables_and_augmented_assignment():
    assert value_of("x = 4\nx += 1\nx * 2") == 10
    assert value_of("x = 9\nx /= 2") == pytest.approx(4.5)


def test_assignment_value_is_result():
    assert value_of("x = 5") == 5


def test_if_elif_else():
    source = (
        "def nota(n):\n"
        "    if n >= 9:\n"
        "        'A'\n"
        "    elif n >= 6:\n"
        "        'B'\n"
        "    else:\n"
        "        'C'\n"
        "nota(9) + nota(7) + nota(2)\n"
    )
    assert value_of(source) == 'ABC'


def test_if_without_taken_branch_is_none():
    assert value_of("if False:\n    1\n") is None


# --- Funciones ---

def test_function_call():
    assert value_of("def suma(a, b):\n    a + b\nsuma(2, 3)") == 5


def test_recursive_function():
    source = (
        "def fact(n):\n"
        "    if n <= 1:\n"
        "        1\n"
        "    else:\n"
        "        n * fact(n - 1)\n"
        "fact(5)\n"
    )
    assert value_of(source) == 120


def test_function_sees_globals_but_locals_do_not_leak():
    assert value_of("x = 10\ndef f(a):\n    a + x\nf(1)") == 11
    diagnostic = failure_of("def f():\n    y = 2\n    y\nf()\ny")
    assert "'y'" in diagnostic.message


def test_builtins():
    assert value_of('len("hola")') == 4
    assert value_of("max(1, 5, 3)") == 5
    assert value_of("min(4, 2)") == 2
    assert value_of("abs(-3)") == 3
    assert value_of("round(2.567, 2)") == pytest.approx(2.57)
    assert value_of('int("12") + 1') == 13
    assert value_of("str(3) + \"!\"") == '3!'


def test_print_writes_to_output():
    output = io.StringIO()
    outcome = run('print("hola", 1)', output=output)
    assert outcome.ok
    assert output.getvalue() == 'hola 1\n'
    assert outcome.result.value is None
    assert str(outcome.result) == 'None'


def test_function_value_formatting():
    outcome = run("def f():\n    1\n")
    assert str(outcome.result) == '<función f>'


# --- Errores de ejecución ---

def test_division_by_zero():
    diagnostic = failure_of("y = 1\nz = y / 0")
    assert diagnostic.kind is DiagnosticKind.RUNTIME
    assert diagnostic.position == Position(2, 1)
    assert "división por cero" in diagnostic.message


def test_undefined_name():
    diagnostic = failure_of("x + 1")
    assert diagnostic.kind is DiagnosticKind.RUNTIME
    assert "no definido" in diagnostic.message


def test_unsupported_operand_types():
    diagnostic = failure_of('1 + "a"')
    assert "entero" in diagnostic.message
    assert "cadena" in diagnostic.message


def test_arity_mismatch():
    diagnostic = failure_of("def f(a):\n    a\nf(1, 2)")
    assert diagnostic.position == Position(3, 1)
    assert "espera 1" in diagnostic.message


def test_error_inside_function_reports_inner_statement():
    diagnostic = failure_of("def f(a):\n    a / 0\nf(1)")
    assert diagnostic.position == Position(2, 5)


def test_calling_a_non_function():
    diagnostic = failure_of("x = 1\nx(2)")
    assert "no es una función" in diagnostic.message


def test_augmented_assignment_requires_definition():
    diagnostic = failure_of("z += 1")
    assert "'z'" in diagnostic.message


def test_unbounded_recursion():
    diagnostic = failure_of("def f(n):\n    f(n + 1)\nf(0)")
    assert diagnostic.kind is DiagnosticKind.RUNTIME
    assert "recursión" in diagnostic.message


def test_duplicate_parameters():
    diagnostic = failure_of("def f(a, a):\n    a\n")
    assert "repetidos" in diagnostic.message
