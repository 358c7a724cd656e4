import logging
from dataclasses import dataclass
from enum import Enum

import ply.lex as lex

from diagnostics import LexicalError, Position, end_position, find_position

logger = logging.getLogger(__name__)

# Ancho de un tabulador al medir la indentación
TAB_WIDTH = 4

# --- Definición de Tokens ---
# El lexer necesita una lista de tokens para exportar al parser.

# Palabras reservadas: se mapea la cadena (ej: 'def') a su TIPO DE TOKEN
# (ej: 'DEF'). Así un identificador llamado 'def' nunca llega como NAME.
reserved = {
    'def': 'DEF',
    'if': 'IF',
    'elif': 'ELIF',
    'else': 'ELSE',
    'and': 'AND',
    'or': 'OR',
    'not': 'NOT',
    'True': 'TRUE',
    'False': 'FALSE',
    'None': 'NONE',
}

# Lista completa de tokens.
# INDENT/DEDENT no tienen expresión regular: los genera IndentLexer.
tokens = [
    'NAME', 'INT', 'FLOAT', 'STRING',
    'PLUS', 'MINUS', 'TIMES', 'DIVIDE', 'FLOORDIV', 'MOD', 'POWER',
    'EQUAL', 'PLUSEQ', 'MINUSEQ', 'TIMESEQ', 'DIVIDEEQ',
    'EQEQ', 'NEQ', 'LT', 'GT', 'LE', 'GE',
    'LPAREN', 'RPAREN', 'COMMA', 'COLON',
    'NEWLINE', 'INDENT', 'DEDENT'
] + list(reserved.values())

# Conjunto cerrado de categorías de token; EOF no lo ve PLY (usa $end).
TokenKind = Enum('TokenKind', [(name, name) for name in tokens + ['EOF']])


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str
    position: Position


# --- Expresiones Regulares Simples ---
# PLY ordena estas reglas por longitud de la regex (de mayor a menor),
# así '**' gana a '*' y '<=' gana a '<' (maximal munch).

t_PLUS     = r'\+'
t_MINUS    = r'-'
t_TIMES    = r'\*'
t_DIVIDE   = r'/'
t_FLOORDIV = r'//'
t_MOD      = r'%'
t_POWER    = r'\*\*'
t_EQUAL    = r'='
t_PLUSEQ   = r'\+='
t_MINUSEQ  = r'-='
t_TIMESEQ  = r'\*='
t_DIVIDEEQ = r'/='
t_EQEQ     = r'=='
t_NEQ      = r'!='
t_LT       = r'<'
t_GT       = r'>'
t_LE       = r'<='
t_GE       = r'>='
t_LPAREN   = r'\('
t_RPAREN   = r'\)'
t_COMMA    = r','
t_COLON    = r':'

# --- Expresiones Regulares con Acción ---
# Las funciones se prueban en orden de definición: FLOAT antes que INT.
# El valor del token se deja como el texto exacto (lexema); la conversión
# a número o cadena la hace la acción semántica del parser.

def t_COMMENT(t):
    r'\#.*'
    pass # Ignorar comentarios

def t_FLOAT(t):
    r'([0-9]+\.[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+'
    return t

def t_INT(t):
    r'[0-9]+'
    return t

def t_STRING(t):
    r"""("([^"\\\n]|\\.)*")|('([^'\\\n]|\\.)*')"""
    return t

def t_NAME(t):
    r'[^\W\d]\w*'
    t.type = reserved.get(t.value, 'NAME') # Verificar palabras reservadas
    return t

def t_NEWLINE(t):
    r'\n+'
    t.lexer.lineno += len(t.value)
    return t


t_ignore = ' \t\r'

def t_error(t):
    # Sin recuperación: el primer carácter ilegal detiene el análisis
    char = t.value[0]
    position = find_position(t.lexer.lexdata, t.lexpos)
    if char in '"\'':
        raise LexicalError("cadena sin cerrar", position)
    raise LexicalError(f"carácter ilegal {char!r}", position)


# --- Filtro de Indentación ---

def _make_token(type, value, lineno, lexpos):
    t = lex.LexToken()
    t.type = type
    t.value = value
    t.lineno = lineno
    t.lexpos = lexpos
    return t


class IndentLexer(object):
    def __init__(self, lexer):
        self.lexer = lexer
        self.data = ''
        self.token_stream = None

    # yacc lee lineno/lexpos del lexer al reducir producciones vacías
    @property
    def lineno(self):
        return self.lexer.lineno

    @property
    def lexpos(self):
        return self.lexer.lexpos

    def input(self, data):
        self.data = data
        self.lexer.input(data)
        self.lexer.lineno = 1
        self.token_stream = self.filter_tokens(self.lexer)

    def token(self):
        # Interfaz que espera ply.yacc: None al terminar, y None para siempre
        if self.token_stream is None:
            return None
        return next(self.token_stream, None)

    def next_token(self):
        tok = self.token()
        if tok is None:
            return Token(TokenKind.EOF, '', end_position(self.data))
        return Token(TokenKind[tok.type], tok.value, find_position(self.data, tok.lexpos))

    def __iter__(self):
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.EOF:
                return

    def indent_width(self, lexpos):
        line_start = self.data.rfind('\n', 0, lexpos) + 1
        prefix = self.data[line_start:lexpos]
        return sum(TAB_WIDTH if char == '\t' else 1 for char in prefix)

    # filter_tokens es un generador que intercepta el flujo de tokens de PLY
    def filter_tokens(self, lexer):
        indent_stack = [0] # Pila de niveles de indentación (top es nivel actual)
        depth = 0          # Paréntesis abiertos: dentro de ellos no hay NEWLINE
        last_type = None

        for token in iter(lexer.token, None):
            if token.type == 'NEWLINE':
                # Líneas vacías o solo con comentarios no generan NEWLINE
                if depth > 0 or last_type in (None, 'NEWLINE'):
                    continue
                last_type = 'NEWLINE'
                yield token
                continue

            if last_type in (None, 'NEWLINE'):
                # Primer token de una línea lógica: comprobar niveles
                width = self.indent_width(token.lexpos)
                if width > indent_stack[-1]:
                    indent_stack.append(width)
                    yield _make_token('INDENT', '', token.lineno, token.lexpos)
                else:
                    while width < indent_stack[-1]:
                        indent_stack.pop()
                        yield _make_token('DEDENT', '', token.lineno, token.lexpos)
                    if width != indent_stack[-1]:
                        raise LexicalError(
                            "la indentación no coincide con ningún nivel exterior",
                            find_position(self.data, token.lexpos))

            if token.type == 'LPAREN':
                depth += 1
            elif token.type == 'RPAREN' and depth > 0:
                depth -= 1

            logger.debug("token %s %r en %d", token.type, token.value, token.lexpos)
            last_type = token.type
            yield token

        # Cerrar la última línea lógica si el archivo no termina en salto de línea
        end = len(self.data)
        if last_type not in (None, 'NEWLINE'):
            yield _make_token('NEWLINE', '', lexer.lineno, end)

        # Al final del archivo, vaciar la pila de indentación
        while len(indent_stack) > 1:
            indent_stack.pop()
            yield _make_token('DEDENT', '', lexer.lineno, end)


# Construir el lexer básico una sola vez: sus tablas no cambian.
# Cada análisis trabaja sobre un clon con su propio cursor.
lexer_base = lex.lex(errorlog=logger)


def build_lexer():
    return IndentLexer(lexer_base.clone())


def tokenize(data):
    """Devuelve la lista completa de tokens de data, terminada en EOF."""
    indent_lexer = build_lexer()
    indent_lexer.input(data)
    return list(indent_lexer)
