from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

# --- Información de diagnóstico ---
# Cuando el análisis no puede continuar se produce un Diagnostic en lugar
# de un resultado. Las tres fases (léxica, sintáctica y de ejecución)
# comparten esta misma estructura.


class DiagnosticKind(Enum):
    LEXICAL = 'Error léxico'
    SYNTAX = 'Error sintáctico'
    RUNTIME = 'Error de ejecución'


@dataclass(frozen=True)
class Position:
    # Línea y columna empiezan en 1
    line: int
    column: int

    def __str__(self):
        return f"línea {self.line}, columna {self.column}"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    position: Optional[Position] = None
    # Tipos de token que el parser habría aceptado (solo errores sintácticos)
    expected: Tuple[str, ...] = ()

    def __str__(self):
        text = self.kind.value
        if self.position is not None:
            text += f" en {self.position}"
        text += f": {self.message}"
        if self.expected:
            text += f" (se esperaba: {', '.join(self.expected)})"
        return text


# --- Excepciones ---
# Se lanzan en el punto donde se detecta el error y se convierten en un
# Outcome una única vez, en pipeline.run().

class CompilerError(Exception):
    kind = None

    def __init__(self, message, position=None, expected=()):
        self.diagnostic = Diagnostic(self.kind, message, position, tuple(expected))
        super().__init__(str(self.diagnostic))

    @property
    def position(self):
        return self.diagnostic.position


class LexicalError(CompilerError):
    kind = DiagnosticKind.LEXICAL


class SyntacticError(CompilerError):
    kind = DiagnosticKind.SYNTAX


class EvaluationError(CompilerError):
    kind = DiagnosticKind.RUNTIME


def find_position(data, lexpos):
    """Convierte un desplazamiento absoluto (lexpos de PLY) en línea/columna."""
    line = data.count('\n', 0, lexpos) + 1
    column = lexpos - data.rfind('\n', 0, lexpos)
    return Position(line, column)


def end_position(data):
    return find_position(data, len(data))
