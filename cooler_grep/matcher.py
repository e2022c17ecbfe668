# backtracking matcher for the grep engine.
# ...executes a compiled node tuple against one line of text.
#
# Matching is a loop over an explicit stack instead of nested calls, so the
# Python stack does not grow with the length of the line or the number of
# repetitions. A matching state is (position, capture table, continuation):
# the continuation is a linked list of (frame, rest) pairs describing what
# still has to match after the current node. Every decision point (a '?',
# each extra '+' repetition, each later alternation branch) pushes the
# state for the option not taken yet; a failure pops the most recent one.
# Capture tables are never mutated once stored; recording a capture makes a
# fresh copy, so abandoning a path drops its captures too.

from .nodes import (
    Alternation, AnyDigit, AnyWordChar, Backreference, CharClass, EndAnchor,
    Group, Literal, OneOrMore, SINGLE_CHAR_NODES, StartAnchor, Wildcard,
    ZeroOrOne,
)


def char_matches(node, ch):
    # Predicate for the nodes that consume exactly one character.
    if isinstance(node, Literal):
        return ch == node.char
    if isinstance(node, AnyDigit):
        return '0' <= ch <= '9'
    if isinstance(node, AnyWordChar):
        return ch.isalnum() or ch == '_'
    if isinstance(node, CharClass):
        # (ch in members) != negated covers both the plain and negated class.
        return (ch in node.members) != node.negated
    if isinstance(node, Wildcard):
        return True
    raise TypeError(f"Not a single-character node: {node!r}")


# --- CONTINUATION FRAMES ---

class _Seq:
    # Match seq[idx:], then carry on with the rest of the continuation.
    __slots__ = ('seq', 'idx')

    def __init__(self, seq, idx):
        self.seq = seq
        self.idx = idx


class _Record:
    # A group or alternation body ended here: capture text[start:pos].
    __slots__ = ('capture_index', 'start')

    def __init__(self, capture_index, start):
        self.capture_index = capture_index
        self.start = start


class _Repeat:
    # One repetition of a '+' operand ended here; try another or stop.
    __slots__ = ('inner', 'start')

    def __init__(self, inner, start):
        self.inner = inner
        self.start = start


class _Done:
    # Only used while tracing: a composite node finished matching.
    __slots__ = ('node', 'start')

    def __init__(self, node, start):
        self.node = node
        self.start = start


class BacktrackingMatcher:
    # Runs one compiled pattern. An optional ASTTracer (see ast_tracer.py)
    # sees every node visit; without one, matching is unobserved.
    def __init__(self, nodes, tracer=None):
        self.nodes = tuple(nodes)
        self.tracer = tracer

    def search(self, text):
        # First (start, end) span the pattern accepts, or None.
        nodes = self.nodes
        anchored = bool(nodes) and isinstance(nodes[0], StartAnchor)
        last_start = 0 if anchored else len(text)
        for start_pos in range(last_start + 1):
            end_pos = self._match_at(text, start_pos)
            if end_pos is not None:
                return start_pos, end_pos
        return None

    def _match_at(self, text, start_pos):
        # End position of the first match starting at `start_pos`, or None.
        # Each start offset gets its own stack and a fresh capture table.
        backtrack = [(start_pos, {}, (_Seq(self.nodes, 0), None))]
        while backtrack:
            pos, captures, cont = backtrack.pop()
            while True:
                if cont is None:
                    return pos
                frame, rest = cont

                if isinstance(frame, _Seq):
                    if frame.idx == len(frame.seq):
                        cont = rest
                        continue
                    node = frame.seq[frame.idx]
                    k = (_Seq(frame.seq, frame.idx + 1), rest)
                    state = self._step(node, text, pos, captures, k, backtrack)

                elif isinstance(frame, _Record):
                    captures = _record(captures, frame.capture_index, text[frame.start:pos])
                    cont = rest
                    continue

                elif isinstance(frame, _Repeat):
                    if pos == frame.start:
                        # an empty repetition cannot make progress, so stop
                        cont = rest
                        continue
                    # greedy: another repetition first, stopping here on failure
                    backtrack.append((pos, captures, rest))
                    k = (_Repeat(frame.inner, pos), rest)
                    state = self._step(frame.inner, text, pos, captures, k, backtrack)

                else:
                    self.tracer.matched(frame.node, frame.start, pos)
                    cont = rest
                    continue

                if state is None:
                    break
                pos, captures, cont = state
        return None

    def _step(self, node, text, pos, captures, k, backtrack):
        # Start matching `node` at `pos` with continuation `k`. Returns the
        # state to carry on from, or None when this path failed outright.
        tracer = self.tracer
        if tracer is not None:
            tracer.enter(node, pos)

        if isinstance(node, SINGLE_CHAR_NODES):
            if pos < len(text) and char_matches(node, text[pos]):
                return self._advance(node, pos, pos + 1, captures, k)
            return self._fail(node, pos)

        if isinstance(node, StartAnchor):
            if pos == 0:
                return self._advance(node, pos, pos, captures, k)
            return self._fail(node, pos)

        if isinstance(node, EndAnchor):
            if pos == len(text):
                return self._advance(node, pos, pos, captures, k)
            return self._fail(node, pos)

        if isinstance(node, Backreference):
            captured = captures.get(node.capture_index)
            if captured is not None and text.startswith(captured, pos):
                return self._advance(node, pos, pos + len(captured), captures, k)
            return self._fail(node, pos)

        # composite nodes report their match once the continuation reaches them
        if tracer is not None:
            k = (_Done(node, pos), k)

        if isinstance(node, ZeroOrOne):
            # greedy: the one-match case first, the zero-match case on failure
            backtrack.append((pos, captures, k))
            return self._step(node.inner, text, pos, captures, k, backtrack)

        if isinstance(node, OneOrMore):
            inner = node.inner
            if isinstance(inner, SINGLE_CHAR_NODES):
                # Single characters have one way to match, so count the run
                # and queue the shorter runs, longest first.
                end_pos = pos
                while end_pos < len(text) and char_matches(inner, text[end_pos]):
                    end_pos += 1
                if end_pos == pos:
                    return self._fail(node, pos)
                for shorter in range(pos + 1, end_pos):
                    backtrack.append((shorter, captures, k))
                return end_pos, captures, k
            return self._step(inner, text, pos, captures, (_Repeat(inner, pos), k), backtrack)

        if isinstance(node, Group):
            return pos, captures, (_Seq(node.body, 0), (_Record(node.capture_index, pos), k))

        if isinstance(node, Alternation):
            # Later branches are queued in reverse so the first one declared
            # is popped first once the current branch fails.
            if not node.branches:
                return self._fail(node, pos)
            record = (_Record(node.capture_index, pos), k)
            for branch in reversed(node.branches[1:]):
                backtrack.append((pos, captures, (_Seq(branch, 0), record)))
            return pos, captures, (_Seq(node.branches[0], 0), record)

        raise TypeError(f"Unknown pattern node: {node!r}")

    def _advance(self, node, start, end, captures, k):
        if self.tracer is not None:
            self.tracer.matched(node, start, end)
        return end, captures, k

    def _fail(self, node, pos):
        if self.tracer is not None:
            self.tracer.failed(node, pos)
        return None


def _record(captures, index, value):
    if index is None:
        return captures
    updated = dict(captures)
    updated[index] = value
    return updated


def search(nodes, text, tracer=None):
    """Return the (start, end) span of the first match of `nodes` in `text`.

    Start offsets are tried from 0 upwards (only 0 for a pattern starting
    with '^'); at each offset the first match found by greedy backtracking
    wins. Returns None when no offset matches.
    """
    return BacktrackingMatcher(nodes, tracer).search(text)


def is_match(nodes, text, tracer=None):
    """Return True if the compiled pattern matches anywhere in `text`."""
    return search(nodes, text, tracer) is not None
