"""
Rule system for the tile world automaton.

Transition rules are small textual boolean conditions over the
neighbor-count table of a cell (symbol -> number of neighbors showing it):

    count['#'] >= 2
    count['~'] == 1 && count['#'] >= 3
    count['T'] < 2 || count['^'] > 4
    true / false / ""            (constants, empty means true)

Grammar:
    expr       := ""  |  "true"  |  "false"  |  node
    node       := operand "&&" node-rest     (split on the FIRST "&&")
                | operand "||" node-rest     (only if no "&&" present)
                | comparison
    operand    := node                       (literals are not allowed here)
    comparison := "count['" <char> "']" <op> <digits>
    op         := "==" | ">=" | "<=" | "!=" | ">" | "<"

The split point is the first "&&" if one exists, otherwise the first "||".
This keeps the historical left-to-right reading of mixed expressions:
"a || b && c" is read as (a || b) && c.

Parsing happens once, when a RuleExpression is constructed. A malformed
condition is kept as a RuleParseError on the expression and evaluates to
False; callers loading rule sets decide whether to log it.

Each symbol has an AutomatonRule holding three optional expressions:
- survival: cell keeps living only while this holds
- birth:    empty cell becomes this tile when this holds
- death:    cell dies when this holds (checked before survival)
"""

from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union
import operator
import re


class RuleParseError(ValueError):
    """Raised when a rule expression cannot be parsed."""
    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Cannot parse rule {text!r}: {reason}")


_OPERATORS: Dict[str, Callable[[int, int], bool]] = {
    "==": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
}

_COUNT_PREFIX = "count['"
_COUNT_SUFFIX = "']"
_RHS_PATTERN = re.compile(r"(==|>=|<=|!=|>|<)(\d+)")


# ===== Expression tree =====

@dataclass(frozen=True)
class Const:
    """Constant condition."""
    value: bool

    def evaluate(self, counts: Mapping[str, int]) -> bool:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Compare:
    """Single comparison of a neighbor count against an integer."""
    symbol: str
    op: str
    value: int

    def evaluate(self, counts: Mapping[str, int]) -> bool:
        # Absent symbols count as zero
        actual = counts.get(self.symbol, 0)
        return _OPERATORS[self.op](actual, self.value)

    def __str__(self) -> str:
        return f"count['{self.symbol}'] {self.op} {self.value}"


@dataclass(frozen=True)
class And:
    left: "Node"
    right: "Node"

    def evaluate(self, counts: Mapping[str, int]) -> bool:
        return self.left.evaluate(counts) and self.right.evaluate(counts)

    def __str__(self) -> str:
        return f"{self.left} && {self.right}"


@dataclass(frozen=True)
class Or:
    left: "Node"
    right: "Node"

    def evaluate(self, counts: Mapping[str, int]) -> bool:
        return self.left.evaluate(counts) or self.right.evaluate(counts)

    def __str__(self) -> str:
        return f"{self.left} || {self.right}"


Node = Union[Const, Compare, And, Or]


# ===== Parser =====

def parse_rule_expression(text: str) -> Node:
    """
    Parse rule text into an expression tree.

    Args:
        text: Rule condition text

    Returns:
        Root node of the expression tree

    Raises:
        RuleParseError: If the text is malformed
    """
    stripped = text.strip()
    if stripped == "" or stripped == "true":
        return Const(True)
    if stripped == "false":
        return Const(False)
    return _parse_node(stripped, text)


def _parse_node(text: str, source: str) -> Node:
    for token, node_type in (("&&", And), ("||", Or)):
        pos = text.find(token)
        if pos != -1:
            left = _parse_operand(text[:pos], source)
            right = _parse_operand(text[pos + len(token):], source)
            return node_type(left, right)
    return _parse_comparison(text, source)


def _parse_operand(text: str, source: str) -> Node:
    text = text.strip()
    if not text:
        raise RuleParseError(source, "empty operand around logical operator")
    return _parse_node(text, source)


def _parse_comparison(text: str, source: str) -> Compare:
    text = text.strip()
    if not text.startswith(_COUNT_PREFIX):
        raise RuleParseError(source, f"expected {_COUNT_PREFIX!r} in {text!r}")

    symbol_pos = len(_COUNT_PREFIX)
    suffix_pos = symbol_pos + 1
    if text[suffix_pos:suffix_pos + len(_COUNT_SUFFIX)] != _COUNT_SUFFIX:
        raise RuleParseError(source, f"expected single-character symbol and {_COUNT_SUFFIX!r}")
    symbol = text[symbol_pos]

    # Whitespace inside the right-hand side is ignored
    rest = "".join(text[suffix_pos + len(_COUNT_SUFFIX):].split())
    match = _RHS_PATTERN.fullmatch(rest)
    if match is None:
        if not rest or rest[0] not in "=<>!":
            raise RuleParseError(source, "missing comparison operator")
        raise RuleParseError(source, f"invalid comparison {rest!r}")

    return Compare(symbol=symbol, op=match.group(1), value=int(match.group(2)))


class RuleExpression:
    """
    Compiled, immutable rule condition.

    Example:
        rule = RuleExpression("count['#'] >= 2")
        rule.evaluate({'#': 2})   # True
        rule.evaluate({})         # False, absent symbol counts as 0

        bad = RuleExpression("count[#] >= 2")
        bad.is_valid              # False
        bad.error                 # RuleParseError(...)
        bad.evaluate({'#': 5})    # False
    """

    __slots__ = ("_text", "_node", "_error")

    def __init__(self, text: str = ""):
        self._text = text
        self._node: Optional[Node] = None
        self._error: Optional[RuleParseError] = None
        try:
            self._node = parse_rule_expression(text)
        except RuleParseError as exc:
            self._error = exc

    @property
    def text(self) -> str:
        return self._text

    @property
    def node(self) -> Optional[Node]:
        """Parsed tree, None if the text was malformed."""
        return self._node

    @property
    def error(self) -> Optional[RuleParseError]:
        return self._error

    @property
    def is_valid(self) -> bool:
        return self._error is None

    def evaluate(self, counts: Mapping[str, int]) -> bool:
        """Evaluate against a neighbor-count table. Malformed rules are False."""
        if self._node is None:
            return False
        return self._node.evaluate(counts)

    __call__ = evaluate

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleExpression):
            return False
        return self._text == other._text

    def __hash__(self) -> int:
        return hash(self._text)

    def __repr__(self) -> str:
        status = "" if self.is_valid else ", invalid"
        return f"RuleExpression({self._text!r}{status})"


def _as_expression(value: Union[None, str, RuleExpression]) -> Optional[RuleExpression]:
    if value is None or isinstance(value, RuleExpression):
        return value
    return RuleExpression(value)


@dataclass(frozen=True)
class AutomatonRule:
    """
    Survival / birth / death conditions for one tile symbol.

    A missing condition means: never dies of starvation (survival),
    never spontaneously born (birth), never naturally dies (death).
    """
    survival: Optional[RuleExpression] = None
    birth: Optional[RuleExpression] = None
    death: Optional[RuleExpression] = None

    @classmethod
    def from_text(
        cls,
        survival: Optional[str] = None,
        birth: Optional[str] = None,
        death: Optional[str] = None,
    ) -> "AutomatonRule":
        return cls(
            survival=_as_expression(survival),
            birth=_as_expression(birth),
            death=_as_expression(death),
        )

    def expressions(self) -> Iterator[Tuple[str, RuleExpression]]:
        """(kind, expression) for every condition that is present."""
        for kind in ("survival", "birth", "death"):
            expr = getattr(self, kind)
            if expr is not None:
                yield kind, expr


RuleSource = Union[AutomatonRule, Mapping[str, Optional[str]], Tuple[Optional[str], ...]]


class AutomatonRuleSet:
    """
    Immutable mapping from tile symbol to AutomatonRule.

    Iteration order is insertion order; the automaton's birth check walks
    entries in this order and the first match wins.

    A rule set is never patched in place. Reloading builds a new instance
    which the owner swaps in as a whole.

    Example:
        rules = AutomatonRuleSet.from_mapping({
            '#': {"survival": "count['#'] >= 2 && count['#'] <= 3",
                  "birth": "count['#'] == 3"},
        })
        rules.get_rule('#').birth.evaluate({'#': 3})  # True
    """

    def __init__(self, rules: Optional[Mapping[str, AutomatonRule]] = None):
        entries: Dict[str, AutomatonRule] = {}
        for symbol, rule in (rules or {}).items():
            if len(symbol) != 1:
                raise ValueError(f"Rule symbol must be a single character, got {symbol!r}")
            if not isinstance(rule, AutomatonRule):
                raise TypeError(f"Expected AutomatonRule for {symbol!r}, got {type(rule).__name__}")
            entries[symbol] = rule
        self._rules = MappingProxyType(entries)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, RuleSource]) -> "AutomatonRuleSet":
        """
        Build from {symbol: rule-ish}.

        Accepted values: AutomatonRule, a dict with optional "survival",
        "birth" and "death" texts, or a (survival, birth, death) tuple.
        """
        entries: Dict[str, AutomatonRule] = {}
        for symbol, source in mapping.items():
            if isinstance(source, AutomatonRule):
                entries[symbol] = source
            elif isinstance(source, Mapping):
                unknown = set(source) - {"survival", "birth", "death"}
                if unknown:
                    raise ValueError(f"Unknown rule kinds for {symbol!r}: {sorted(unknown)}")
                entries[symbol] = AutomatonRule.from_text(**source)
            else:
                entries[symbol] = AutomatonRule.from_text(*source)
        return cls(entries)

    def get_rule(self, symbol: str) -> Optional[AutomatonRule]:
        return self._rules.get(symbol)

    def all_rules(self) -> Mapping[str, AutomatonRule]:
        """Read-only view of symbol -> rule."""
        return self._rules

    @property
    def has_rules(self) -> bool:
        return len(self._rules) > 0

    def with_rule(self, symbol: str, rule: AutomatonRule) -> "AutomatonRuleSet":
        """New rule set with `symbol` added or replaced."""
        entries = dict(self._rules)
        entries[symbol] = rule
        return AutomatonRuleSet(entries)

    def parse_errors(self) -> List[Tuple[str, str, RuleParseError]]:
        """(symbol, kind, error) for every malformed expression."""
        errors = []
        for symbol, rule in self._rules.items():
            for kind, expr in rule.expressions():
                if expr.error is not None:
                    errors.append((symbol, kind, expr.error))
        return errors

    def summary(self) -> str:
        """Multi-line description for logging."""
        lines = []
        for symbol, rule in self._rules.items():
            parts = []
            for kind in ("survival", "birth", "death"):
                expr = getattr(rule, kind)
                if expr is None:
                    parts.append(f"{kind}=<none>")
                elif not expr.is_valid:
                    parts.append(f"{kind}=<invalid: {expr.text}>")
                else:
                    parts.append(f"{kind}={expr.text or 'true'}")
            lines.append(f"Tile '{symbol}': " + ", ".join(parts))
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._rules

    def __repr__(self) -> str:
        return f"AutomatonRuleSet({len(self._rules)} symbols)"


# ===== Predefined rule sets =====

def create_life_rules(symbol: str = "#") -> AutomatonRuleSet:
    """
    Conway's Game of Life (B3/S23) for a single symbol.

    Meant for a Moore neighborhood of radius 1.
    """
    return AutomatonRuleSet.from_mapping({
        symbol: {
            "survival": f"count['{symbol}'] >= 2 && count['{symbol}'] <= 3",
            "birth": f"count['{symbol}'] == 3",
        },
    })


def create_default_rules() -> AutomatonRuleSet:
    """
    Ecology-flavoured defaults for the built-in tile catalog.

    Trees spread near water and grass, die when crowded by mountains;
    sand creeps next to water.
    """
    return AutomatonRuleSet.from_mapping({
        "T": {
            "survival": "count['T'] >= 1 || count['~'] >= 1",
            "birth": "count['T'] >= 3 && count['.'] >= 2",
            "death": "count['^'] >= 5",
        },
        ",": {
            "survival": "count['~'] >= 1",
            "birth": "count['~'] >= 3 && count[','] >= 2",
        },
    })
