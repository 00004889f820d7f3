"""
Abstract Syntax Tree (AST) node definitions for the Green language.

The evaluator consumes trees built by an external parser (or by hand). A
program is a list of function and coroutine declarations plus a main
statement sequence:

    function add(a: int, b: int) -> int {
        return a + b;
    }

    coroutine Worker {
        print(10);
        yield;
        print(20);
    }

Declarations and variable declarations may carry a doc comment. A doc
comment whose first token is ``@process`` feeds the sequence-diagram
generator; the evaluator only reports when such constructs run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, List, Optional, Union

from .source import SourceSpan
from .types import Type, INT, FLOAT, BOOL, STRING


# =============================================================================
# Base Classes
# =============================================================================

@dataclass
class AstNode:
    """Base class for all AST nodes."""
    span: Optional[SourceSpan] = field(default=None, kw_only=True, compare=False, repr=False)

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor:
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Doc Comments
# =============================================================================

@dataclass
class DocComment:
    """Comment lines immediately preceding a declaration.

    Inert for the evaluator. When the first token is ``@process`` the comment
    is a process note for the diagram generator; the note is the rest of the
    first line followed by the remaining lines.
    """
    lines: List[str]

    PROCESS_MARKER: ClassVar[str] = "@process"

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def is_process(self) -> bool:
        if not self.lines:
            return False
        tokens = self.lines[0].split(maxsplit=1)
        return bool(tokens) and tokens[0] == self.PROCESS_MARKER

    @property
    def note(self) -> Optional[str]:
        """The process note, or None for an ordinary doc comment."""
        if not self.is_process:
            return None
        first = self.lines[0].strip()[len(self.PROCESS_MARKER):].strip()
        return "\n".join([first] + list(self.lines[1:]))


# =============================================================================
# Operators
# =============================================================================

class BinaryOperator(Enum):
    """Binary operators, valued by their source spelling."""
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    AND = "and"
    OR = "or"
    XOR = "xor"

    def __str__(self) -> str:
        return self.value


class UnaryOperator(Enum):
    """Unary operators, valued by their source spelling."""
    PLUS = "+"
    MINUS = "-"
    NOT = "not"

    def __str__(self) -> str:
        return self.value


ARITHMETIC_OPERATORS = frozenset({
    BinaryOperator.ADD, BinaryOperator.SUB, BinaryOperator.MUL, BinaryOperator.DIV,
})
COMPARISON_OPERATORS = frozenset({
    BinaryOperator.EQ, BinaryOperator.NE,
    BinaryOperator.LT, BinaryOperator.LE, BinaryOperator.GT, BinaryOperator.GE,
})
LOGICAL_OPERATORS = frozenset({
    BinaryOperator.AND, BinaryOperator.OR, BinaryOperator.XOR,
})


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass
class Literal(Expression):
    """A literal value (int, float, string, bool)."""
    value: Union[int, float, str, bool]
    literal_type: Type


@dataclass
class VariableRef(Expression):
    """A variable reference."""
    name: str


@dataclass
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, x and y)."""
    left: Expression
    operator: BinaryOperator
    right: Expression


@dataclass
class UnaryOp(Expression):
    """A unary operation (e.g., not x, -n)."""
    operator: UnaryOperator
    operand: Expression


@dataclass
class Call(Expression):
    """A call of a built-in or declared function (e.g., add(1, 2))."""
    name: str
    arguments: List[Expression] = field(default_factory=list)


# =============================================================================
# Statement Nodes
# =============================================================================

@dataclass
class Statement(AstNode):
    """Base class for all statements."""
    pass


@dataclass
class Block(AstNode):
    """An ordered sequence of statements executed in its own scope."""
    statements: List[Statement] = field(default_factory=list)


@dataclass
class VarDecl(Statement):
    """A typed variable declaration (e.g., let x: int = 42;).

    Without an initializer the variable is declared but unset.
    """
    name: str
    var_type: Type
    initializer: Optional[Expression] = None
    doc: Optional[DocComment] = None


@dataclass
class Assign(Statement):
    """An assignment to an existing variable (e.g., x = 5;)."""
    name: str
    value: Expression


@dataclass
class ExprStmt(Statement):
    """A call evaluated for its effect."""
    expression: Expression


@dataclass
class If(Statement):
    """An if statement with optional else branch."""
    condition: Expression
    then_branch: Block
    else_branch: Optional[Block] = None


@dataclass
class While(Statement):
    """A while loop."""
    condition: Expression
    body: Block


@dataclass
class Return(Statement):
    """A return statement; without a value it returns void."""
    value: Optional[Expression] = None


@dataclass
class Break(Statement):
    """Leave the innermost while loop."""
    pass


@dataclass
class Continue(Statement):
    """Skip to the next iteration of the innermost while loop."""
    pass


@dataclass
class Yield(Statement):
    """Suspend the running coroutine instance."""
    pass


@dataclass
class CreateCoroutine(Statement):
    """Instantiate a coroutine under a task name (e.g., task1 = Worker;)."""
    name: str
    coroutine: str


@dataclass
class Resume(Statement):
    """Resume the coroutine instance bound to a task name."""
    name: str


@dataclass
class ProcessNote(Statement):
    """An ``@process`` comment inside a block."""
    note: str


# =============================================================================
# Declarations
# =============================================================================

@dataclass
class Parameter(AstNode):
    """A function parameter."""
    name: str
    param_type: Type


@dataclass
class FunctionDecl(AstNode):
    """A function declaration.

    Syntax:
        function name(param1: type1, param2: type2) -> return_type { ... }
    """
    name: str
    parameters: List[Parameter]
    return_type: Optional[Type]
    body: Block
    doc: Optional[DocComment] = None


@dataclass
class CoroutineDecl(AstNode):
    """A coroutine declaration: a named, suspendable statement body."""
    name: str
    body: Block
    doc: Optional[DocComment] = None


Declaration = Union[FunctionDecl, CoroutineDecl]


@dataclass
class Program(AstNode):
    """A complete program: declarations plus the main statement sequence."""
    declarations: List[Declaration] = field(default_factory=list)
    main: Block = field(default_factory=Block)

    @property
    def functions(self) -> List[FunctionDecl]:
        return [d for d in self.declarations if isinstance(d, FunctionDecl)]

    @property
    def coroutines(self) -> List[CoroutineDecl]:
        return [d for d in self.declarations if isinstance(d, CoroutineDecl)]


# =============================================================================
# Literal Helpers
# =============================================================================

def int_lit(n: int) -> Literal:
    """An int literal."""
    return Literal(int(n), INT)


def float_lit(x: float) -> Literal:
    """A float literal."""
    return Literal(float(x), FLOAT)


def bool_lit(b: bool) -> Literal:
    """A bool literal."""
    return Literal(bool(b), BOOL)


def string_lit(s: str) -> Literal:
    """A string literal."""
    return Literal(str(s), STRING)


# =============================================================================
# Visitor Helpers
# =============================================================================

class PrintVisitor(AstVisitor):
    """Debug visitor that renders the AST structure as indented lines."""

    def __init__(self, indent: int = 0):
        self.indent = indent
        self.lines: List[str] = []

    def _emit(self, text: str) -> None:
        self.lines.append("  " * self.indent + text)

    def _nested(self, node: AstNode) -> None:
        child = PrintVisitor(self.indent + 2)
        child.generic_visit(node)
        self.lines.extend(child.lines)

    def generic_visit(self, node: AstNode) -> None:
        self._emit(f"{node.__class__.__name__}")
        for name, value in node.__dict__.items():
            if name == "span":
                continue
            if isinstance(value, AstNode):
                self._emit(f"  {name}:")
                self._nested(value)
            elif isinstance(value, list):
                self._emit(f"  {name}: [")
                for item in value:
                    if isinstance(item, AstNode):
                        self._nested(item)
                    else:
                        self._emit(f"    {item!r}")
                self._emit("  ]")
            elif value is not None:
                self._emit(f"  {name}: {value}")


def format_ast(node: AstNode) -> str:
    """Render an AST node for debugging."""
    visitor = PrintVisitor()
    visitor.generic_visit(node)
    return "\n".join(visitor.lines)


def print_ast(node: AstNode) -> None:
    """Print an AST node for debugging."""
    print(format_ast(node))
