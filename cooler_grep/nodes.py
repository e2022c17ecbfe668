# pattern nodes for the grep engine.
# ...a compiled pattern is a flat tuple of these nodes; groups and
# alternations hold nested tuples, so the whole thing forms a small AST.
# Nodes carry no behaviour: the matcher dispatches on their type.

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple


class RegexNode:
    # Common base so the compiler, matcher and AST tooling can tell a
    # pattern node apart from anything else.
    __slots__ = ()


# --- ATOMIC NODES: consume exactly one character. ---

@dataclass(frozen=True)
class Literal(RegexNode):
    # A single, specific character (e.g. 'a', or '.' when written as '\.').
    char: str

    def __repr__(self):
        return f"Literal({self.char!r})"


@dataclass(frozen=True)
class AnyDigit(RegexNode):
    # '\d': one ASCII decimal digit.
    def __repr__(self):
        return "AnyDigit"


@dataclass(frozen=True)
class AnyWordChar(RegexNode):
    # '\w': a letter or digit from any script, or underscore.
    def __repr__(self):
        return "AnyWordChar"


@dataclass(frozen=True)
class CharClass(RegexNode):
    # '[abc]' or '[^abc]'.
    members: FrozenSet[str]
    negated: bool = False

    def __repr__(self):
        chars = "".join(sorted(self.members))
        return f"CharClass([{'^' if self.negated else ''}{chars}])"


@dataclass(frozen=True)
class Wildcard(RegexNode):
    # '.': any one character.
    def __repr__(self):
        return "Wildcard"


# --- ANCHORS: zero-width, only valid at the ends of the top-level sequence. ---

@dataclass(frozen=True)
class StartAnchor(RegexNode):
    def __repr__(self):
        return "StartAnchor"


@dataclass(frozen=True)
class EndAnchor(RegexNode):
    def __repr__(self):
        return "EndAnchor"


# --- QUANTIFIERS: wrap the single node that precedes them. ---

@dataclass(frozen=True)
class ZeroOrOne(RegexNode):
    inner: RegexNode

    def __repr__(self):
        return f"ZeroOrOne({self.inner!r})"


@dataclass(frozen=True)
class OneOrMore(RegexNode):
    inner: RegexNode

    def __repr__(self):
        return f"OneOrMore({self.inner!r})"


# --- COMBINERS: parenthesized constructs, each owning a capture slot. ---

@dataclass(frozen=True)
class Group(RegexNode):
    body: Tuple[RegexNode, ...]
    capture_index: Optional[int] = None

    def __repr__(self):
        return f"Group#{self.capture_index}{list(self.body)!r}"


@dataclass(frozen=True)
class Alternation(RegexNode):
    branches: Tuple[Tuple[RegexNode, ...], ...]
    capture_index: Optional[int] = None

    def __repr__(self):
        alts = " | ".join(repr(list(b)) for b in self.branches)
        return f"Alternation#{self.capture_index}({alts})"


@dataclass(frozen=True)
class Backreference(RegexNode):
    # '\1'..'\9': must repeat what that capture last matched.
    capture_index: int

    def __repr__(self):
        return f"Backreference(\\{self.capture_index})"


# Nodes that consume exactly one character and can be tested with a
# simple predicate.
SINGLE_CHAR_NODES = (Literal, AnyDigit, AnyWordChar, CharClass, Wildcard)
