import json

from graphviz import Digraph

from .nodes import (
    Alternation, Backreference, CharClass, Group, Literal, OneOrMore,
    RegexNode, ZeroOrOne,
)

# AST tooling for the grep engine: JSON dumps, graphviz diagrams and a
# tracer that records what the matcher visits.


def _label_detail(node):
    """
    Short human-readable detail for a node, or None when the type says it all.
    """
    if isinstance(node, Literal):
        return node.char
    if isinstance(node, CharClass):
        return {
            "chars": sorted(node.members),
            "negated": node.negated
        }
    if isinstance(node, Backreference):
        return node.capture_index
    return None


def _collect_children(node):
    """
    Child entries of a node as (label, nodes) pairs.
    Quantifiers and groups have one unlabelled entry; alternations have one
    entry per branch so the branch boundaries survive in the output.
    """
    if isinstance(node, (ZeroOrOne, OneOrMore)):
        return [(None, [node.inner])]
    if isinstance(node, Group):
        return [(None, list(node.body))]
    if isinstance(node, Alternation):
        return [(f"Branch {i}", list(branch))
                for i, branch in enumerate(node.branches, 1)]
    if isinstance(node, RegexNode):
        return []
    raise TypeError(f"Unknown pattern node: {node!r}")


def ast_to_dict(node):
    """
    Convert a pattern node into a JSON-serializable dictionary.
    """
    data = {
        "type": type(node).__name__,
        "repr": _label_detail(node),
        "capture_index": getattr(node, "capture_index", None),
        "children": []
    }
    for label, nodes in _collect_children(node):
        children = [ast_to_dict(child) for child in nodes]
        if label is None:
            data["children"].extend(children)
        else:
            data["children"].append({
                "type": "Branch",
                "repr": label,
                "capture_index": None,
                "children": children
            })
    return data


def sequence_to_dict(nodes):
    """
    Wrap a compiled node sequence in a root "Pattern" entry.
    """
    return {
        "type": "Pattern",
        "repr": None,
        "capture_index": None,
        "children": [ast_to_dict(node) for node in nodes]
    }


def persist_ast(nodes, filename: str) -> None:
    """
    Serialize the compiled sequence to a JSON file.
    """
    with open(filename, 'w') as f:
        json.dump(sequence_to_dict(nodes), f, indent=2)


def build_graph(nodes, format: str = 'png') -> Digraph:
    """
    Build (but do not render) a Graphviz diagram of the compiled sequence.
    """
    graph = Digraph(comment='Regex AST', format=format)
    counter = [0]

    def new_id():
        counter[0] += 1
        return f"n{counter[0]}"

    def add_sequence(parent_id, seq):
        for child in seq:
            graph.edge(parent_id, recurse(child))

    def recurse(n):
        nid = new_id()
        label = type(n).__name__
        if isinstance(n, Literal):
            label += f"('{n.char}')"
        elif isinstance(n, CharClass):
            chars = ''.join(sorted(n.members))
            label += f"([{'^' if n.negated else ''}{chars}])"
        elif isinstance(n, Backreference):
            label += f"(\\{n.capture_index})"
        elif isinstance(n, (Group, Alternation)):
            label += f" #{n.capture_index}"
        graph.node(nid, label)
        for branch_label, seq in _collect_children(n):
            if branch_label is None:
                add_sequence(nid, seq)
            else:
                bid = new_id()
                graph.node(bid, branch_label, shape='box')
                graph.edge(nid, bid)
                add_sequence(bid, seq)
        return nid

    root = new_id()
    graph.node(root, 'Pattern', shape='doublecircle')
    add_sequence(root, nodes)
    return graph


def visualize_ast(nodes, output_path: str = 'ast', format: str = 'png') -> str:
    """
    Render a Graphviz diagram of the compiled sequence.
    Returns the path to the rendered file.
    """
    return build_graph(nodes, format=format).render(output_path, cleanup=True)


class ASTTracer:
    """
    Record entry, successful matches, and failures for every node the
    matcher visits. Hand an instance to BacktrackingMatcher (or to
    search/is_match) and read the log with get_trace().
    Groups and alternations never fail themselves: their failures show up
    as FAIL entries of the nodes inside them.
    """

    def __init__(self):
        self.trace = []

    def enter(self, node, pos):
        self.trace.append(f"ENTER {type(node).__name__} pos={pos}")

    def matched(self, node, start, end):
        self.trace.append(f"MATCH {type(node).__name__} {start}->{end}")

    def failed(self, node, pos):
        self.trace.append(f"FAIL {type(node).__name__} pos={pos}")

    def get_trace(self) -> list:
        """
        Get the collected trace entries.
        """
        return self.trace
