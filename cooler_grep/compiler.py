# pattern compiler for the grep engine.
# ...turns a pattern string into a tuple of nodes (see nodes.py) with a
# single left-to-right scan. Parenthesized content is split on its
# top-level '|' and each alternative is compiled by the same scan.

import logging

from .nodes import (
    Alternation, AnyDigit, AnyWordChar, Backreference, CharClass, EndAnchor,
    Group, Literal, OneOrMore, StartAnchor, Wildcard, ZeroOrOne,
)

logger = logging.getLogger(__name__)


class PatternError(ValueError):
    """Raised when a pattern cannot be compiled."""

    def __init__(self, message, position):
        super().__init__(f"{message} at position {position}")
        self.message = message
        self.position = position


class RegexParser:
    # Builds the node tuple for one pattern. Capture indices are handed out
    # in the order the opening parentheses appear, starting at 1, so a
    # parser instance is good for exactly one pattern.
    def __init__(self, pattern):
        self.pattern = pattern
        self.next_capture = 1

    ##
    def parse(self):
        return self.parse_sequence(0, len(self.pattern), top_level=True)

    ##
    def parse_sequence(self, start, end, top_level=False):
        # Compile pattern[start:end]. Anchors are only legal at the very
        # ends of the top-level pattern.
        pattern = self.pattern
        nodes = []
        anchored_start = anchored_end = False
        pos = start
        while pos < end:
            c = pattern[pos]

            if c == '^':
                if not (top_level and pos == 0):
                    raise PatternError(
                        "'^' is only allowed at the start of the pattern", pos)
                anchored_start = True
                pos += 1

            elif c == '$':
                if not (top_level and pos == len(pattern) - 1):
                    raise PatternError(
                        "'$' is only allowed at the end of the pattern", pos)
                anchored_end = True
                pos += 1

            elif c == '[':
                node, pos = self.parse_char_class(pos, end)
                nodes.append(node)

            elif c == '\\':
                node, pos = self.parse_escape(pos, end)
                nodes.append(node)

            elif c == '(':
                node, pos = self.parse_group(pos, end)
                nodes.append(node)

            elif c == '.':
                nodes.append(Wildcard())
                pos += 1

            elif c in '?+':
                if not nodes:
                    raise PatternError(f"Nothing to repeat for '{c}'", pos)
                prev = nodes.pop()
                nodes.append(ZeroOrOne(prev) if c == '?' else OneOrMore(prev))
                pos += 1

            else:
                nodes.append(Literal(c))
                pos += 1

        if anchored_start:
            nodes.insert(0, StartAnchor())
        if anchored_end:
            nodes.append(EndAnchor())
        return tuple(nodes)

    ##
    def parse_char_class(self, pos, end):
        # Members are taken verbatim up to the first ']'; no escapes inside.
        close = self.pattern.find(']', pos + 1, end)
        if close == -1:
            raise PatternError("Unterminated character class", pos)
        members = self.pattern[pos + 1:close]
        negated = members.startswith('^')
        if negated:
            members = members[1:]
        return CharClass(frozenset(members), negated), close + 1

    ##
    def parse_escape(self, pos, end):
        if pos + 1 >= end:
            raise PatternError("Pattern ends with '\\'", pos)
        c = self.pattern[pos + 1]
        if c == 'd':
            node = AnyDigit()
        elif c == 'w':
            node = AnyWordChar()
        elif '1' <= c <= '9':
            index = int(c)
            if index >= self.next_capture:
                raise PatternError(
                    f"Backreference \\{index} to an undefined group", pos)
            node = Backreference(index)
        else:
            node = Literal(c)
        return node, pos + 2

    ##
    def parse_group(self, pos, end):
        # The index is taken before the body is compiled so that an outer
        # group numbers lower than the groups nested inside it.
        capture_index = self.next_capture
        self.next_capture += 1

        close = self.find_close(pos, end)
        branches = tuple(
            self.parse_sequence(alt_start, alt_end)
            for alt_start, alt_end in self.split_alternatives(pos + 1, close)
        )
        if len(branches) == 1:
            return Group(branches[0], capture_index), close + 1
        return Alternation(branches, capture_index), close + 1

    ##
    def find_close(self, pos, end):
        # Index of the ')' balancing the '(' at `pos`, skipping escaped
        # characters and the contents of character classes.
        pattern = self.pattern
        depth = 0
        i = pos
        while i < end:
            c = pattern[i]
            if c == '\\':
                i += 2
                continue
            if c == '[':
                close = pattern.find(']', i + 1, end)
                if close == -1:
                    raise PatternError("Unterminated character class", i)
                i = close + 1
                continue
            if c == '(':
                depth += 1
            elif c == ')':
                depth -= 1
                if depth == 0:
                    return i
            i += 1
        raise PatternError("Unterminated group", pos)

    ##
    def split_alternatives(self, start, end):
        # (start, end) spans of the '|'-separated alternatives in
        # pattern[start:end], ignoring '|' nested in groups or classes.
        pattern = self.pattern
        spans = []
        depth = 0
        alt_start = i = start
        while i < end:
            c = pattern[i]
            if c == '\\':
                i += 2
                continue
            if c == '[':
                # find_close already proved every class here is closed
                i = pattern.find(']', i + 1, end) + 1
                continue
            if c == '(':
                depth += 1
            elif c == ')':
                depth -= 1
            elif c == '|' and depth == 0:
                spans.append((alt_start, i))
                alt_start = i + 1
            i += 1
        spans.append((alt_start, end))
        return spans


def compile(pattern):
    """Compile `pattern` into a tuple of pattern nodes.

    Raises PatternError for a dangling escape or quantifier, an
    unterminated class or group, a misplaced anchor, or a backreference
    to a group that has not been opened yet.
    """
    nodes = RegexParser(pattern).parse()
    logger.debug("compiled %r -> %r", pattern, nodes)
    return nodes
