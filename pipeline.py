import logging

from diagnostics import CompilerError
from evaluator import Interpreter
from parser import Parser
from result import Outcome, Result

logger = logging.getLogger(__name__)


def run(source, output=None):
    """Lexer -> Parser -> Interpreter sobre source.

    Devuelve un Outcome: el llamador distingue éxito o fallo con outcome.ok
    sin tener que capturar excepciones. La salida de print() va a output
    (por defecto sys.stdout).
    """
    parser = Parser()
    try:
        program = parser.parse(source)
        value = Interpreter(output=output).run(program)
    except CompilerError as exc:
        logger.info("análisis interrumpido: %s", exc.diagnostic)
        return Outcome.failure(exc.diagnostic)
    logger.info("programa evaluado: %d sentencia(s) de nivel superior", len(program))
    return Outcome.success(Result(value))
