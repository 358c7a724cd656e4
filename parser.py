import logging
import re

import ply.yacc as yacc

from diagnostics import SyntacticError, end_position, find_position
from lexer import build_lexer, tokens

logger = logging.getLogger(__name__)

# Secuencias de escape admitidas dentro de las cadenas
_ESCAPES = {'n': '\n', 't': '\t', '\\': '\\', '"': '"', "'": "'"}

# Cómo se nombra cada token especial en los mensajes de error
_TOKEN_NAMES = {
    'NEWLINE': 'fin de línea',
    'INDENT': 'indentación',
    'DEDENT': 'fin de bloque',
    '$end': 'fin de entrada',
}


def unescape(text):
    return re.sub(r'\\(.)', lambda m: _ESCAPES.get(m.group(1), m.group(0)), text)


def describe_token(tok):
    if tok.type in _TOKEN_NAMES:
        return _TOKEN_NAMES[tok.type]
    return f"{tok.value!r} ({tok.type})"


class Parser(object):
    """Parser LALR(1) construido con ply.yacc sobre los métodos p_ de la clase.

    Cada instancia genera sus propias tablas y guarda su propio lexer, así
    que no queda estado global entre análisis. parse() devuelve el programa
    como lista de pares (Position, nodo), donde cada nodo es una tupla cuyo
    primer elemento indica su tipo: ('arith', '+', izq, der), ('call', ...).
    """

    tokens = tokens
    start = 'program'

    # --- Precedencia y Asociatividad ---
    # De menor a mayor. Cada conflicto shift/reduce de la gramática de
    # expresiones se resuelve con esta tabla:
    #   - los operadores aritméticos y lógicos asocian por la izquierda;
    #   - las comparaciones no asocian ('1 < 2 < 3' es un error);
    #   - '**' asocia por la derecha y liga más fuerte que el menos unario.
    precedence = (
        ('left', 'OR'),
        ('left', 'AND'),
        ('right', 'NOT'),
        ('nonassoc', 'EQEQ', 'NEQ', 'LT', 'GT', 'LE', 'GE'),
        ('left', 'PLUS', 'MINUS'),
        ('left', 'TIMES', 'DIVIDE', 'FLOORDIV', 'MOD'),
        ('right', 'UMINUS'),
        ('right', 'POWER'),
    )

    def __init__(self, lexer=None):
        self._lexer = lexer if lexer is not None else build_lexer()
        self._yacc = yacc.yacc(module=self, debug=False, write_tables=False,
                               errorlog=logger)

    def parse(self, source):
        logger.debug("analizando %d caracteres", len(source))
        debug = logger if logger.isEnabledFor(logging.DEBUG) else False
        return self._yacc.parse(source, lexer=self._lexer, tracking=True, debug=debug)

    def _position(self, lexpos):
        return find_position(self._lexer.data, lexpos)

    # --- Reglas Gramaticales ---
    # Los métodos p_ definen la gramática. El docstring contiene la regla BNF.

    def p_program(self, p):
        '''program : stmt_list'''
        p[0] = p[1]

    def p_stmt_list(self, p):
        '''stmt_list : stmt_list stmt
                     | stmt'''
        if len(p) == 3:
            p[0] = p[1] + [p[2]]
        else:
            p[0] = [p[1]]

    # Cada sentencia se guarda junto a la posición de su primer token
    def p_stmt(self, p):
        '''stmt : simple_stmt NEWLINE
                | compound_stmt'''
        p[0] = (self._position(p.lexpos(1)), p[1])

    def p_simple_stmt(self, p):
        '''simple_stmt : assign_stmt
                       | expr_stmt'''
        p[0] = p[1]

    def p_assign_stmt(self, p):
        '''assign_stmt : NAME assign_op expr'''
        p[0] = ('assign', p[1], p[2], p[3])

    def p_assign_op(self, p):
        '''assign_op : EQUAL
                     | PLUSEQ
                     | MINUSEQ
                     | TIMESEQ
                     | DIVIDEEQ'''
        p[0] = p[1]

    def p_expr_stmt(self, p):
        '''expr_stmt : expr'''
        p[0] = p[1]

    def p_compound_stmt(self, p):
        '''compound_stmt : funcdef
                         | if_stmt'''
        p[0] = p[1]

    # Definición de función:
    # def nombre(params): \n indent bloque dedent
    def p_funcdef(self, p):
        '''funcdef : DEF NAME LPAREN params_opt RPAREN COLON block'''
        p[0] = ('func_def', p[2], p[4], p[7])

    def p_params_opt(self, p):
        '''params_opt : params
                      | empty'''
        p[0] = p[1] if p[1] is not None else []

    def p_params(self, p):
        '''params : NAME
                  | params COMMA NAME'''
        if len(p) == 2:
            p[0] = [p[1]]
        else:
            p[0] = p[1] + [p[3]]

    def p_if_stmt(self, p):
        '''if_stmt : IF expr COLON block else_opt'''
        p[0] = ('if', p[2], p[4], p[5])

    # elif se representa como un if anidado dentro de la rama else
    def p_else_opt(self, p):
        '''else_opt : ELIF expr COLON block else_opt
                    | ELSE COLON block
                    | empty'''
        if len(p) == 6:
            p[0] = [(self._position(p.lexpos(1)), ('if', p[2], p[4], p[5]))]
        elif len(p) == 4:
            p[0] = p[3]
        else:
            p[0] = None

    # Bloque indentado: el DEDENT cierra el bloque
    def p_block(self, p):
        '''block : NEWLINE INDENT stmt_list DEDENT'''
        p[0] = p[3]

    # --- Expresiones ---

    def p_expr_arith(self, p):
        '''expr : expr PLUS expr
                | expr MINUS expr'''
        p[0] = ('arith', p[2], p[1], p[3])

    def p_expr_term(self, p):
        '''expr : expr TIMES expr
                | expr DIVIDE expr
                | expr FLOORDIV expr
                | expr MOD expr'''
        p[0] = ('term', p[2], p[1], p[3])

    def p_expr_power(self, p):
        '''expr : expr POWER expr'''
        p[0] = ('power', p[2], p[1], p[3])

    def p_expr_comparison(self, p):
        '''expr : expr EQEQ expr
                | expr NEQ expr
                | expr LT expr
                | expr GT expr
                | expr LE expr
                | expr GE expr'''
        p[0] = ('comparison', p[2], p[1], p[3])

    def p_expr_logic(self, p):
        '''expr : expr AND expr
                | expr OR expr'''
        p[0] = (p[2], p[1], p[3])

    def p_expr_not(self, p):
        '''expr : NOT expr'''
        p[0] = ('not', p[2])

    def p_expr_unary(self, p):
        '''expr : MINUS expr %prec UMINUS
                | PLUS expr %prec UMINUS'''
        p[0] = ('unary', p[1], p[2])

    def p_expr_atom(self, p):
        '''expr : atom'''
        p[0] = p[1]

    def p_atom(self, p):
        '''atom : literal
                | LPAREN expr RPAREN
                | call'''
        if len(p) == 2:
            p[0] = p[1]
        else:
            p[0] = p[2]

    def p_atom_name(self, p):
        '''atom : NAME'''
        p[0] = ('name', p[1])

    def p_call(self, p):
        '''call : NAME LPAREN arglist_opt RPAREN'''
        p[0] = ('call', p[1], p[3])

    def p_arglist_opt(self, p):
        '''arglist_opt : arglist
                       | empty'''
        p[0] = p[1] if p[1] is not None else []

    def p_arglist(self, p):
        '''arglist : expr
                   | arglist COMMA expr'''
        if len(p) == 2:
            p[0] = [p[1]]
        else:
            p[0] = p[1] + [p[3]]

    # Acción semántica de los literales: el lexer entrega el texto exacto
    def p_literal_int(self, p):
        '''literal : INT'''
        p[0] = ('literal', int(p[1]))

    def p_literal_float(self, p):
        '''literal : FLOAT'''
        p[0] = ('literal', float(p[1]))

    def p_literal_string(self, p):
        '''literal : STRING'''
        p[0] = ('literal', unescape(p[1][1:-1])) # Eliminar comillas

    def p_literal_constant(self, p):
        '''literal : TRUE
                   | FALSE
                   | NONE'''
        p[0] = ('literal', {'TRUE': True, 'FALSE': False, 'NONE': None}[p.slice[1].type])

    def p_empty(self, p):
        '''empty :'''
        pass

    # --- Manejo de Errores ---
    # Sin recuperación: el primer error detiene el análisis.

    def p_error(self, p):
        expected = self._expected_tokens()
        if p is None:
            # p es None si se llega al final del archivo (EOF) inesperadamente
            raise SyntacticError("fin de entrada inesperado",
                                 end_position(self._lexer.data), expected)
        position = self._position(p.lexpos)
        # El NEWLINE sintético (lexema vacío) marca el final de la entrada
        if p.type == 'NEWLINE' and not p.value:
            raise SyntacticError("fin de entrada inesperado", position, expected)
        raise SyntacticError(f"token inesperado {describe_token(p)}", position, expected)

    def _expected_tokens(self):
        # Acciones definidas en la tabla LR para el estado donde falló
        state = getattr(self._yacc, 'state', None)
        if state is None:
            return ()
        # None marca los operadores no asociativos: también son un error
        names = (_TOKEN_NAMES[name] if name == '$end' else name
                 for name, action in self._yacc.action[state].items()
                 if action is not None and name != 'error')
        return tuple(sorted(names))
