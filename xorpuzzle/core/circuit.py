"""Boolean circuit expressions: the formula that drives a level's bulb.

A formula is kept as a small immutable expression tree so it can be stored
as text in the level files, rendered back for the puzzle screen, and
evaluated without any level-specific code in the engine.

Text syntax (inputs are named ``a`` .. ``f`` by switch position)::

    not a            !a   ~a
    a and b          a && b   a & b
    a or b           a || b   a | b
    a xor b          a ^ b
    a xnor b   a nand b   a nor b
    true   false   ( ... )

Precedence, highest first: NOT, AND/NAND, XOR/XNOR, OR/NOR.
"""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple, Union

INPUT_NAMES = "abcdef"
MAX_INPUTS = len(INPUT_NAMES)


class ExpressionError(ValueError):
    """Raised for malformed formulas or input vectors of the wrong size."""


class GateOp(Enum):
    AND = "and"
    OR = "or"
    XOR = "xor"
    XNOR = "xnor"
    NAND = "nand"
    NOR = "nor"


# Chains of these collapse into one n-ary gate without changing the result.
_ASSOCIATIVE = {GateOp.AND, GateOp.OR, GateOp.XOR}


def _apply(op: GateOp, bits: Sequence[bool]) -> bool:
    if op is GateOp.AND:
        return all(bits)
    if op is GateOp.OR:
        return any(bits)
    parity = sum(1 for b in bits if b) % 2 == 1
    if op is GateOp.XOR:
        return parity
    if op is GateOp.XNOR:
        return not parity
    if op is GateOp.NAND:
        return not all(bits)
    return not any(bits)


@dataclass(frozen=True)
class Input:
    index: int

    def evaluate(self, values: Sequence[bool]) -> bool:
        return bool(values[self.index])

    def inputs(self) -> FrozenSet[int]:
        return frozenset({self.index})

    def __str__(self) -> str:
        return INPUT_NAMES[self.index]


@dataclass(frozen=True)
class Const:
    value: bool

    def evaluate(self, values: Sequence[bool]) -> bool:
        return self.value

    def inputs(self) -> FrozenSet[int]:
        return frozenset()

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Not:
    operand: "Node"

    def evaluate(self, values: Sequence[bool]) -> bool:
        return not self.operand.evaluate(values)

    def inputs(self) -> FrozenSet[int]:
        return self.operand.inputs()

    def __str__(self) -> str:
        return f"not {_wrap(self.operand)}"


@dataclass(frozen=True)
class Gate:
    op: GateOp
    operands: Tuple["Node", ...]

    def evaluate(self, values: Sequence[bool]) -> bool:
        return _apply(self.op, [node.evaluate(values) for node in self.operands])

    def inputs(self) -> FrozenSet[int]:
        return frozenset().union(*(node.inputs() for node in self.operands))

    def __str__(self) -> str:
        return f" {self.op.value} ".join(_wrap(node) for node in self.operands)


Node = Union[Input, Const, Not, Gate]


def _wrap(node: Node) -> str:
    return f"({node})" if isinstance(node, Gate) else str(node)


def _combine(op: GateOp, left: Node, right: Node) -> Node:
    if op in _ASSOCIATIVE and isinstance(left, Gate) and left.op is op:
        return Gate(op, left.operands + (right,))
    return Gate(op, (left, right))


# ---------------------------------------------------------------------------
# Tokenizer / parser
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
    (?P<SKIP>\s+)
  | (?P<SYMBOL>&&|\|\||[!~&|^()])
  | (?P<WORD>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<MISMATCH>.)
    """,
    re.VERBOSE,
)

_SYMBOL_ALIASES = {
    "&&": "and",
    "&": "and",
    "||": "or",
    "|": "or",
    "!": "not",
    "~": "not",
    "^": "xor",
}

_KEYWORDS = {"not", "true", "false"} | {op.value for op in GateOp}


@dataclass
class _Token:
    kind: str  # "KW", "NAME", "LPAREN", "RPAREN", "EOF"
    value: str
    pos: int


def _tokenize(text: str) -> List[_Token]:
    tokens: List[_Token] = []
    for m in _TOKEN_RE.finditer(text):
        kind = m.lastgroup
        value = m.group(0)
        if kind == "SKIP":
            continue
        if kind == "MISMATCH":
            raise ExpressionError(f"Unexpected character {value!r} at position {m.start()}")
        if kind == "SYMBOL":
            if value == "(":
                tokens.append(_Token("LPAREN", value, m.start()))
            elif value == ")":
                tokens.append(_Token("RPAREN", value, m.start()))
            else:
                tokens.append(_Token("KW", _SYMBOL_ALIASES[value], m.start()))
            continue
        word = value.lower()
        if word in _KEYWORDS:
            tokens.append(_Token("KW", word, m.start()))
        else:
            tokens.append(_Token("NAME", value, m.start()))
    tokens.append(_Token("EOF", "", len(text)))
    return tokens


class _Parser:
    def __init__(self, text: str, arity: int) -> None:
        self.tokens = _tokenize(text)
        self.arity = arity
        self.i = 0

    def cur(self) -> _Token:
        return self.tokens[self.i]

    def match_kw(self, *values: str) -> Optional[str]:
        t = self.cur()
        if t.kind == "KW" and t.value in values:
            self.i += 1
            return t.value
        return None

    def parse(self) -> Node:
        node = self.parse_or()
        t = self.cur()
        if t.kind != "EOF":
            raise ExpressionError(f"Unexpected {t.value!r} at position {t.pos}")
        return node

    def parse_or(self) -> Node:
        node = self.parse_xor()
        while True:
            op = self.match_kw("or", "nor")
            if op is None:
                return node
            node = _combine(GateOp(op), node, self.parse_xor())

    def parse_xor(self) -> Node:
        node = self.parse_and()
        while True:
            op = self.match_kw("xor", "xnor")
            if op is None:
                return node
            node = _combine(GateOp(op), node, self.parse_and())

    def parse_and(self) -> Node:
        node = self.parse_unary()
        while True:
            op = self.match_kw("and", "nand")
            if op is None:
                return node
            node = _combine(GateOp(op), node, self.parse_unary())

    def parse_unary(self) -> Node:
        if self.match_kw("not"):
            return Not(self.parse_unary())
        return self.parse_atom()

    def parse_atom(self) -> Node:
        t = self.cur()
        if t.kind == "LPAREN":
            self.i += 1
            node = self.parse_or()
            if self.cur().kind != "RPAREN":
                raise ExpressionError(f"Expected ')' at position {self.cur().pos}")
            self.i += 1
            return node
        if t.kind == "KW" and t.value in ("true", "false"):
            self.i += 1
            return Const(t.value == "true")
        if t.kind == "NAME":
            index = INPUT_NAMES.find(t.value)
            if len(t.value) != 1 or index < 0:
                raise ExpressionError(f"Unknown input {t.value!r} at position {t.pos}")
            if index >= self.arity:
                raise ExpressionError(
                    f"Input {t.value!r} at position {t.pos} is out of range for {self.arity} switch(es)"
                )
            self.i += 1
            return Input(index)
        if t.kind == "EOF":
            raise ExpressionError("Unexpected end of expression")
        raise ExpressionError(f"Unexpected {t.value!r} at position {t.pos}")


# ---------------------------------------------------------------------------
# Public expression type
# ---------------------------------------------------------------------------

class CircuitExpression:
    """A pure boolean function over a fixed number of switch values."""

    def __init__(
        self,
        arity: int,
        predicate: Callable[[Tuple[bool, ...]], bool],
        *,
        tree: Optional[Node] = None,
        label: Optional[str] = None,
    ) -> None:
        if not 1 <= arity <= MAX_INPUTS:
            raise ExpressionError(f"Circuits take 1..{MAX_INPUTS} inputs, got {arity}")
        self._arity = arity
        self._predicate = predicate
        self._tree = tree
        self._label = label

    @classmethod
    def parse(cls, text: str, arity: int) -> "CircuitExpression":
        """Compile a textual formula over *arity* inputs."""
        if not 1 <= arity <= MAX_INPUTS:
            raise ExpressionError(f"Circuits take 1..{MAX_INPUTS} inputs, got {arity}")
        tree = _Parser(text, arity).parse()
        return cls(arity, tree.evaluate, tree=tree)

    @classmethod
    def from_tree(cls, tree: Node, arity: int) -> "CircuitExpression":
        highest = max(tree.inputs(), default=-1)
        if highest >= arity:
            raise ExpressionError(f"Input {INPUT_NAMES[highest]!r} is out of range for {arity} switch(es)")
        return cls(arity, tree.evaluate, tree=tree)

    @classmethod
    def from_function(
        cls,
        fn: Callable[[Sequence[bool]], bool],
        arity: int,
        label: Optional[str] = None,
    ) -> "CircuitExpression":
        """Wrap an arbitrary predicate; it receives the switch values as a tuple."""
        return cls(arity, lambda values: bool(fn(values)), label=label or getattr(fn, "__name__", None))

    @property
    def arity(self) -> int:
        return self._arity

    @property
    def tree(self) -> Optional[Node]:
        """The expression tree, or None for wrapped Python predicates."""
        return self._tree

    def evaluate(self, values: Sequence[bool]) -> bool:
        values = tuple(bool(v) for v in values)
        if len(values) != self._arity:
            raise ExpressionError(f"Expected {self._arity} input(s), got {len(values)}")
        return bool(self._predicate(values))

    __call__ = evaluate

    def inputs_used(self) -> FrozenSet[int]:
        if self._tree is None:
            return frozenset(range(self._arity))
        return self._tree.inputs()

    def truth_table(self) -> List[Tuple[Tuple[bool, ...], bool]]:
        """Every input vector (all-off first) paired with its output."""
        return [
            (values, self.evaluate(values))
            for values in itertools.product((False, True), repeat=self._arity)
        ]

    def __str__(self) -> str:
        if self._tree is not None:
            return str(self._tree)
        return self._label or "<function>"

    def __repr__(self) -> str:
        return f"CircuitExpression({str(self)!r}, arity={self._arity})"
