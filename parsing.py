"""
loopcalc Expression Parser
Compiles arithmetic expressions against a binding table and evaluates them
"""

from typing import List, Dict, Any, Tuple
from dataclasses import dataclass
import sys

# Import pyparsing with error handling
try:
    from pyparsing import (
        Regex, Literal, Suppress, Forward, ZeroOrMore, ParseException,
        ParserElement, ParseResults, Optional as PyParsingOptional, infix_notation,
        OpAssoc, one_of
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from error_handling import ExpressionSyntaxError, enhance_parse_exception
from stdlib import (
    BINARY_OPERATORS,
    calc_neg,
    get_builtin_function,
    is_builtin_constant,
)


Binding = Tuple[str, float]


# ============================================================================
# PARSE ACTIONS
# ============================================================================

def unwrap(token: Any) -> Any:
    """Strip ParseResults wrappers that nested infix_notation levels leave"""
    while isinstance(token, ParseResults):
        token = token[0]
    return token


def make_number(s: str, loc: int, t) -> Tuple:
    return ("NUMBER", float(t[0]), loc)


def make_name(s: str, loc: int, t) -> Tuple:
    return ("NAME", t[0], loc)


def make_call(s: str, loc: int, t) -> Tuple:
    return ("CALL", t[0], [unwrap(arg) for arg in t[1:]], loc)


def make_unary(t) -> Tuple:
    op, operand = t[0][0], unwrap(t[0][1])
    if op == '-':
        return ("NEGATE", operand)
    return operand


def make_binary(t) -> Tuple:
    """Fold 'a op b op c' into left-associative BINARY nodes"""
    items = t[0]
    node = unwrap(items[0])
    for i in range(1, len(items), 2):
        node = ("BINARY", items[i], node, unwrap(items[i + 1]))
    return node


def make_comma_list(t) -> Tuple:
    node = unwrap(t[0])
    for item in t[1:]:
        node = ("BINARY", ',', node, unwrap(item))
    return node


# ============================================================================
# GRAMMAR
# ============================================================================

class ExpressionGrammar:
    """Arithmetic expression grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup the expression grammar

        list    : expr ("," expr)*
        expr    : term (("+"|"-") term)*
        term    : factor (("*"|"/"|"%") factor)*
        factor  : power ("^" power)*
        power   : ("+"|"-")* base
        base    : number | call | name | "(" list ")"
        """
        expression_list = Forward()

        number = Regex(r'(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?').set_parse_action(make_number)
        identifier = Regex(r'[A-Za-z][A-Za-z0-9_]*')

        arithmetic = Forward()
        arguments = PyParsingOptional(arithmetic + ZeroOrMore(Suppress(",") + arithmetic))
        call = (
            identifier + Suppress("(") + arguments + Suppress(")")
        ).set_parse_action(make_call)
        name = identifier.copy().set_parse_action(make_name)

        parenthesized = Suppress("(") + expression_list + Suppress(")")
        base = call | number | name | parenthesized

        arithmetic <<= infix_notation(base, [
            (one_of("+ -"), 1, OpAssoc.RIGHT, make_unary),
            (Literal("^"), 2, OpAssoc.LEFT, make_binary),
            (one_of("* / %"), 2, OpAssoc.LEFT, make_binary),
            (one_of("+ -"), 2, OpAssoc.LEFT, make_binary),
        ])

        expression_list <<= (
            arithmetic + ZeroOrMore(Suppress(",") + arithmetic)
        ).set_parse_action(make_comma_list)

        self.number = number
        self.identifier = identifier
        self.arithmetic = arithmetic
        self.expression = expression_list

    def parse_expression(self, text: str) -> Tuple:
        """Parse an expression into a syntax tree of tuples"""
        try:
            result = self.expression.parse_string(text, parse_all=True)
        except ParseException as e:
            raise enhance_parse_exception(e, text) from e
        return unwrap(result[0])


# ============================================================================
# COMPILATION AND EVALUATION
# ============================================================================

@dataclass(frozen=True)
class CompiledExpression:
    """An expression with every name resolved against one binding table"""
    text: str
    tree: Tuple

    def evaluate(self) -> float:
        return evaluate_tree(self.tree)


def resolve_tree(node: Tuple, bindings: Dict[str, float], text: str) -> Tuple:
    """Replace names with values and built-in names with functions"""
    kind = node[0]

    if kind == "NUMBER":
        return ("VALUE", node[1])

    if kind == "NAME":
        name, loc = node[1], node[2]
        if name in bindings:
            return ("VALUE", bindings[name])
        if is_builtin_constant(name):
            return ("CALL", get_builtin_function(name)['func'], [])
        raise ExpressionSyntaxError(f"Unknown name '{name}'", loc + 1, text)

    if kind == "CALL":
        name, args, loc = node[1], node[2], node[3]
        builtin = get_builtin_function(name)
        if name in bindings or builtin is None:
            raise ExpressionSyntaxError(f"Unknown function '{name}'", loc + 1, text)
        if len(args) != builtin['arity']:
            raise ExpressionSyntaxError(
                f"{name} takes {builtin['arity']} argument(s), got {len(args)}",
                loc + 1, text)
        return ("CALL", builtin['func'], [resolve_tree(a, bindings, text) for a in args])

    if kind == "NEGATE":
        return ("NEGATE", resolve_tree(node[1], bindings, text))

    if kind == "BINARY":
        return ("BINARY", BINARY_OPERATORS[node[1]],
                resolve_tree(node[2], bindings, text),
                resolve_tree(node[3], bindings, text))

    raise ExpressionSyntaxError(f"Unknown node type: {kind}", 0, text)


def evaluate_tree(node: Tuple) -> float:
    kind = node[0]
    if kind == "VALUE":
        return node[1]
    if kind == "NEGATE":
        return calc_neg(evaluate_tree(node[1]))
    if kind == "BINARY":
        return node[1](evaluate_tree(node[2]), evaluate_tree(node[3]))
    # CALL
    return node[1](*[evaluate_tree(arg) for arg in node[2]])


class ExpressionParser:
    """Main expression parser: compile text against bindings, then evaluate"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = ExpressionGrammar(debug)

    def compile(self, text: str, bindings: List[Binding]) -> CompiledExpression:
        """Compile an expression, raising ExpressionSyntaxError on failure"""
        tree = self.grammar.parse_expression(text)
        if self.debug:
            print(f"[debug] parsed {text.strip()!r}: {pretty_print_tree(tree)}", file=sys.stderr)
        table = {}
        for name, value in bindings:
            table.setdefault(name, value)
        return CompiledExpression(text, resolve_tree(tree, table, text))

    def evaluate(self, text: str, bindings: List[Binding]) -> float:
        """Compile and evaluate in one step"""
        return self.compile(text, bindings).evaluate()


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> ExpressionParser:
    """Create an expression parser"""
    return ExpressionParser(debug=debug)


def create_debug_parser() -> ExpressionParser:
    """Create an expression parser with debug enabled"""
    return ExpressionParser(debug=True)


def pretty_print_tree(node: Any) -> str:
    """Render a parsed expression tree in prefix form for debugging"""
    if not isinstance(node, tuple):
        return repr(node)
    kind = node[0]
    if kind == "NUMBER":
        return repr(node[1])
    if kind == "NAME":
        return node[1]
    if kind == "CALL":
        return f"{node[1]}({', '.join(pretty_print_tree(a) for a in node[2])})"
    if kind == "NEGATE":
        return f"(- {pretty_print_tree(node[1])})"
    if kind == "BINARY":
        return f"({node[1]} {pretty_print_tree(node[2])} {pretty_print_tree(node[3])})"
    return repr(node)
