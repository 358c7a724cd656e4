import logging
import operator
import sys

from diagnostics import EvaluationError

logger = logging.getLogger(__name__)

# --- Operadores ---
# Cada operador del lenguaje se corresponde con su equivalente de Python.

BINARY_OPERATORS = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.truediv,
    '//': operator.floordiv,
    '%': operator.mod,
    '**': operator.pow,
    '==': operator.eq,
    '!=': operator.ne,
    '<': operator.lt,
    '>': operator.gt,
    '<=': operator.le,
    '>=': operator.ge,
}

UNARY_OPERATORS = {
    '-': operator.neg,
    '+': operator.pos,
}

# Nombres de tipo usados en los mensajes de error
TYPE_NAMES = {
    bool: 'booleano',
    int: 'entero',
    float: 'real',
    str: 'cadena',
    type(None): 'None',
}


def type_name(value):
    if isinstance(value, Function):
        return 'función'
    return TYPE_NAMES.get(type(value), type(value).__name__)


class Function(object):
    def __init__(self, name, params, body):
        self.name = name
        self.params = params
        self.body = body

    def __str__(self):
        return f"<función {self.name}>"

    __repr__ = __str__


class Interpreter(object):
    """Recorre el programa que devuelve Parser.parse() y calcula su valor.

    El valor de un bloque es el de su última sentencia; el del programa es
    el valor del último bloque de nivel superior.
    """

    def __init__(self, output=None):
        self.output = output if output is not None else sys.stdout
        self.globals = {}
        self.position = None
        self.builtins = {
            'print': self._print,
            'len': len,
            'round': round,
            'abs': abs,
            'min': min,
            'max': max,
            'int': int,
            'float': float,
            'str': str,
        }
        self._statements = {
            'assign': self.exec_assign,
            'func_def': self.exec_func_def,
            'if': self.exec_if,
        }
        self._expressions = {
            'literal': self.eval_literal,
            'name': self.eval_name,
            'arith': self.eval_binary,
            'term': self.eval_binary,
            'power': self.eval_binary,
            'comparison': self.eval_binary,
            'and': self.eval_and,
            'or': self.eval_or,
            'not': self.eval_not,
            'unary': self.eval_unary,
            'call': self.eval_call,
        }

    def run(self, program):
        try:
            return self.exec_block(program, self.globals)
        except RecursionError:
            raise EvaluationError("recursión demasiado profunda", self.position) from None

    def error(self, message):
        raise EvaluationError(message, self.position)

    # --- Sentencias ---

    def exec_block(self, statements, scope):
        value = None
        for position, stmt in statements:
            self.position = position
            value = self.exec_stmt(stmt, scope)
        return value

    def exec_stmt(self, stmt, scope):
        handler = self._statements.get(stmt[0])
        if handler is None:
            # Sentencia de expresión
            return self.evaluate(stmt, scope)
        return handler(stmt, scope)

    def exec_assign(self, stmt, scope):
        _, name, op, expr = stmt
        value = self.evaluate(expr, scope)
        if op != '=':
            # '+=' -> '+', '-=' -> '-', ...
            value = self.apply(op[:-1], self.lookup(name, scope), value)
        scope[name] = value
        return value

    def exec_func_def(self, stmt, scope):
        _, name, params, body = stmt
        if len(set(params)) != len(params):
            self.error(f"parámetros repetidos en la definición de '{name}'")
        function = Function(name, params, body)
        scope[name] = function
        return function

    def exec_if(self, stmt, scope):
        _, condition, body, orelse = stmt
        if self.evaluate(condition, scope):
            return self.exec_block(body, scope)
        if orelse is not None:
            return self.exec_block(orelse, scope)
        return None

    # --- Expresiones ---

    def evaluate(self, node, scope):
        handler = self._expressions.get(node[0])
        if handler is None:
            raise ValueError(f"nodo desconocido: {node[0]!r}")
        return handler(node, scope)

    def eval_literal(self, node, scope):
        return node[1]

    def eval_name(self, node, scope):
        return self.lookup(node[1], scope)

    def lookup(self, name, scope):
        # Ámbito local -> global -> funciones predefinidas
        for namespace in (scope, self.globals, self.builtins):
            if name in namespace:
                return namespace[name]
        self.error(f"nombre '{name}' no definido")

    def eval_binary(self, node, scope):
        _, op, left, right = node
        return self.apply(op, self.evaluate(left, scope), self.evaluate(right, scope))

    def apply(self, op, left, right):
        try:
            return BINARY_OPERATORS[op](left, right)
        except ZeroDivisionError:
            self.error("división por cero")
        except OverflowError:
            self.error(f"resultado demasiado grande en '{op}'")
        except TypeError:
            self.error(f"operación '{op}' no soportada entre "
                       f"{type_name(left)} y {type_name(right)}")

    # and/or evalúan en cortocircuito y devuelven uno de los operandos
    def eval_and(self, node, scope):
        left = self.evaluate(node[1], scope)
        if not left:
            return left
        return self.evaluate(node[2], scope)

    def eval_or(self, node, scope):
        left = self.evaluate(node[1], scope)
        if left:
            return left
        return self.evaluate(node[2], scope)

    def eval_not(self, node, scope):
        return not self.evaluate(node[1], scope)

    def eval_unary(self, node, scope):
        _, op, operand = node
        value = self.evaluate(operand, scope)
        try:
            return UNARY_OPERATORS[op](value)
        except TypeError:
            self.error(f"operación unaria '{op}' no soportada para {type_name(value)}")

    def eval_call(self, node, scope):
        _, name, arg_nodes = node
        callee = self.lookup(name, scope)
        args = [self.evaluate(arg, scope) for arg in arg_nodes]
        if isinstance(callee, Function):
            return self.call_function(callee, args)
        if not callable(callee):
            self.error(f"'{name}' no es una función ({type_name(callee)})")
        try:
            return callee(*args)
        except (TypeError, ValueError, OverflowError) as exc:
            self.error(f"error en la llamada a '{name}': {exc}")

    def call_function(self, function, args):
        if len(args) != len(function.params):
            self.error(f"'{function.name}' espera {len(function.params)} "
                       f"argumento(s) y recibió {len(args)}")
        logger.debug("llamada a %s%r", function.name, tuple(args))
        local_scope = dict(zip(function.params, args))
        saved = self.position
        value = self.exec_block(function.body, local_scope)
        self.position = saved
        return value

    def _print(self, *args):
        print(*(str(arg) for arg in args), file=self.output)
        return None
