import pytest

from cooler_grep import BacktrackingMatcher, compile, is_match, search
from cooler_grep.nodes import Literal


def matches(pattern, text):
    return is_match(compile(pattern), text)


# Each tuple: (pattern, text, expected)
SEARCH_TESTS = [
    # literals behave like substring search
    ("wor", "hello world", True),
    ("xyz", "hello world", False),
    ("h", "hello world", True),
    ("f", "hello world", False),
    # '\d' is an ASCII digit
    (r"\d", "hello world", False),
    (r"\d", "Cia0", True),
    (r"\d apple", "sally has 3 apples", True),
    (r"\d apple", "sally has x apples", False),
    (r"\d\d\d apples", "sally has 124 apples", True),
    (r"\d\d\d apples", "sally has 12 apples", False),
    (r"\d", "٣", False),        # ARABIC-INDIC DIGIT THREE
    # '\w' is a letter or digit from any script, or underscore
    (r"\w", "___", True),
    (r"\w", "£$%", False),
    (r"\w", "---", False),
    (r"\w", "é", True),
    (r"\w+", "日本", True),
    (r"\w\w\ws", "3 dogs", True),
    (r"\w\w\ws", "ab s", False),
    # character classes
    ("[abc]", "apple", True),
    ("[abc]", "dog", False),
    ("[^xyz]", "apple", True),
    ("[^anb]", "banana", False),
    ("[]", "anything", False),
    ("[^]", "x", True),
    # wildcard
    ("d.g", "dog", True),
    ("d.g", "cog", False),
    ("d.g", "dg", False),
    # anchors
    ("^abc", "abcde", True),
    ("^world", "hello world", False),
    ("log$", "log", True),
    ("log$", "logs", False),
    ("log$", "a catalog", True),
    ("^log$", "log", True),
    ("^log$", "logs", False),
    ("^log$", "blog", False),
    ("^$", "", True),
    ("^$", "a", False),
    ("^", "anything", True),
    ("$", "anything", True),
    # '+' is greedy and gives back one repetition at a time
    ("a+b", "aaab", True),
    ("a+b", "b", False),
    ("ca+t", "caaats", True),
    ("ca+t", "ct", False),
    ("^a+$", "aaa", True),
    ("^a+$", "aab", False),
    ("a.+c$", "abcbc", True),
    (".+ing", "running", True),
    ("a+a+a", "aaa", True),
    ("a+a+a", "aa", False),
    # '?' tries the character before skipping it
    ("log?s", "logs", True),
    ("log?s", "los", True),
    ("log?s", "loggs", False),
    ("colou?r", "color", True),
    ("colou?r", "colour", True),
    ("colou?r", "colouur", False),
    ("a?", "", True),
    # alternation
    ("(dog|cat)", "cat", True),
    ("(dog|cat)", "fish", False),
    ("a (cat|dog)", "a cat", True),
    ("a (cat|dog)", "a cow", False),
    ("(dog|cat)s?", "dogs and cats", True),
    ("(a|b)(c|d)(e|f)", "bdf", True),
    ("(|a)b", "b", True),
    # a branch that matches locally but dooms the rest is abandoned
    ("(a|ab)c", "abc", True),
    ("^(ab|a)b$", "ab", True),
    ("^(a|b|c)+$", "abcbca", True),
    ("^(a|b|c)+$", "abcbda", False),
    # groups, quantified groups
    ("()", "", True),
    ("(ab)+c", "ababc", True),
    ("(ab)+c", "ac", False),
    ("^(ab)+$", "ababab", True),
    ("^(ab)+$", "ababa", False),
    ("(a(b(c)d)e)f", "abcdef", True),
    ("^(a?)+b$", "aab", True),
    ("^(a+)+b", "aaaab", True),
    # backreferences
    ("(cat) and \\1", "cat and cat", True),
    ("(cat) and \\1", "cat and dog", False),
    (r"(\w+) and \1", "cat and cat", True),
    (r"(\w+) and \1", "cat and dog", False),
    (r"(\d+) (\w+) squares and \1 \2 circles", "3 red squares and 3 red circles", True),
    (r"(\d+) (\w+) squares and \1 \2 circles", "3 red squares and 4 red circles", False),
    (r"([abcd]+) is \1, not [^xyz]+", "abcd is abcd, not efg", True),
    (r"^(\w+) starts and ends with \1$", "this starts and ends with this", True),
    (r"^(\w+) starts and ends with \1$", "that starts and ends with this", False),
    ("(a) \\1", "a A", False),       # backreferences are case-sensitive
    ("((a)|b)\\2", "aa", True),
    ("((c)|b)\\2", "bb", False),     # group 2 never captured on the 'b' branch
    ("(a?)b\\1", "b", True),         # an empty capture matches empty
    ("(b)?a\\1", "ba", False),
    ("(b)?a\\1", "a", False),        # unset capture never matches
    ("(a\\1)", "aa", False),         # a group cannot see its own capture
    ("^(a+)-\\1$", "aaa-aa", False),
    ("(a+)-\\1$", "aaa-aa", True),   # capture at a later start offset
    # escaped specials
    (r"\.", "a.b", True),
    (r"\.", "ab", False),
    (r"a\+", "a+", True),
    (r"a\+", "aa", False),
    (r"\(x\)", "f(x)", True),
    # '|' outside a group is a literal character
    ("a|b", "a|b", True),
    ("a|b", "a", False),
    # empty pattern
    ("", "", True),
    ("", "anything", True),
]


@pytest.mark.parametrize("pattern,text,expected", SEARCH_TESTS)
def test_is_match(pattern, text, expected):
    assert matches(pattern, text) is expected


@pytest.mark.parametrize("pattern,text", [
    ("wor", "hello world"),
    ("xyz", "hello world"),
    ("ll", "hello"),
    ("lo w", "hello world"),
    ("abc", "ab"),
    ("a", ""),
])
def test_literal_patterns_are_substring_search(pattern, text):
    assert matches(pattern, text) is (pattern in text)


# (capturing construct, text it accepts)
BACKREFERENCE_ROUND_TRIPS = [
    (r"\d+", "123"),
    ("[abc]+", "cab"),
    ("cat|dog", "dog"),
    (r"\w+", "hello"),
    ("a.c", "abc"),
    ("x?y", "y"),
]


@pytest.mark.parametrize("construct,text", BACKREFERENCE_ROUND_TRIPS)
def test_backreference_repeats_capture(construct, text):
    separator = " - "
    pattern = "(" + construct + ")" + separator + "\\1"
    assert matches(pattern, text + separator + text)


# (pattern, text, expected span)
SPAN_TESTS = [
    ("a+b", "xaaabyz", (1, 5)),
    ("(a|ab)c", "xabc", (1, 4)),
    ("a?", "bab", (0, 0)),
    ("", "abc", (0, 0)),
    ("$", "abc", (3, 3)),
    ("o", "hello world", (4, 5)),
    (".+", "abc", (0, 3)),
    ("b+$", "abbb", (1, 4)),
    ("^x", "abc", None),
    ("z", "abc", None),
]


@pytest.mark.parametrize("pattern,text,span", SPAN_TESTS)
def test_search_span(pattern, text, span):
    assert search(compile(pattern), text) == span


def test_compiled_pattern_is_reusable():
    nodes = compile("(dog|cat)s?")
    matcher = BacktrackingMatcher(nodes)
    assert matcher.search("hotdogs") == (3, 7)
    assert matcher.search("bird") is None
    assert matcher.search("cat") == (0, 3)


def test_recompiled_patterns_agree():
    first = compile(r"^(\w+) and \1$")
    second = compile(r"^(\w+) and \1$")
    for text in ["cat and cat", "cat and dog", "", "and"]:
        assert is_match(first, text) == is_match(second, text)


def test_node_sequences_can_be_built_by_hand():
    assert is_match((Literal("a"), Literal("b")), "cab")
    assert not is_match((Literal("a"), Literal("b")), "acb")


def test_unknown_node_is_rejected():
    with pytest.raises(TypeError):
        is_match(("not a node",), "abc")


# Long lines must not exhaust the Python stack: the depth of the matcher
# does not grow with the number of repetitions or pattern nodes.
LONG_LINE_TESTS = [
    (r"(\w)+", "a" * 5000, True),
    ("(ab)+c", "ab" * 2500 + "c", True),
    ("^(ab)+c", "ab" * 2500 + "d", False),
    ("(a|b)+$", "ab" * 2500, True),
    ("^(a|b)+$", "ab" * 2500 + "!", False),
    ("^(a?)+b$", "a" * 5000 + "b", True),
    (r"^(\d+)-\1$", "7" * 2000 + "-" + "7" * 2000, True),
    ("a" * 5000, "a" * 5000, True),
    ("^" + "a" * 5000, "a" * 4999 + "b", False),
    (".+x", "y" * 5000 + "x", True),
]


@pytest.mark.parametrize(
    "pattern,text,expected", LONG_LINE_TESTS,
    ids=[f"{pattern[:12]}-{len(text)}" for pattern, text, _ in LONG_LINE_TESTS],
)
def test_long_lines(pattern, text, expected):
    assert matches(pattern, text) is expected


def test_long_line_span():
    assert search(compile("(ab)+"), "x" + "ab" * 3000) == (1, 6001)


@pytest.mark.parametrize("ch,expected", [
    ("a", True),
    ("Ж", True),
    ("日", True),
    ("७", True),          # DEVANAGARI DIGIT SEVEN
    ("_", True),
    ("ा", False),    # DEVANAGARI VOWEL SIGN AA: a combining mark, not alphanumeric
    ("́", False),    # COMBINING ACUTE ACCENT
    (" ", False),
])
def test_word_char_follows_str_isalnum(ch, expected):
    assert matches(r"^\w$", ch) is expected
