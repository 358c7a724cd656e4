import logging
import sys

from diagnostics import LexicalError
from lexer import tokenize
from pipeline import run

BANNER = "===== RESULTADO ====="
USAGE = "Uso: python main.py [--tokens] [--debug] [archivo_fuente]"
OPTIONS = ('--tokens', '--debug')


def read_source(filename):
    # Sin archivo se lee la entrada estándar
    if filename is None:
        if hasattr(sys.stdin, 'reconfigure'):
            sys.stdin.reconfigure(encoding='utf-8')
        return sys.stdin.read()
    with open(filename, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    options = [arg for arg in args if arg.startswith('--')]
    paths = [arg for arg in args if not arg.startswith('--')]
    if any(option not in OPTIONS for option in options) or len(paths) > 1:
        print(USAGE, file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if '--debug' in options else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s')

    filename = paths[0] if paths else None
    try:
        data = read_source(filename)
    except FileNotFoundError:
        print(f"Error: No se encontró el archivo '{filename}'", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: No se pudo leer '{filename or '<stdin>'}': {exc}", file=sys.stderr)
        return 1

    # [Fase 1: Análisis Léxico]
    # Solo para inspección: el parser vuelve a pedir los tokens uno a uno.
    if '--tokens' in options:
        print("[Fase 1: Análisis Léxico]")
        try:
            for token in tokenize(data):
                print(f"{token.position.line}:{token.position.column}\t"
                      f"{token.kind.name}\t{token.lexeme!r}")
        except LexicalError as exc:
            print(exc.diagnostic, file=sys.stderr)
            return 1

    outcome = run(data)
    if not outcome.ok:
        print(outcome.diagnostic, file=sys.stderr)
        return 1

    print("\n" + BANNER)
    print(outcome.result)
    return 0


if __name__ == '__main__':
    sys.exit(main())
