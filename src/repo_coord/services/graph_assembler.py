"""Graph assembly: restrict the full topology to affected repositories."""

from typing import Dict, Iterable, List, Tuple

from repo_coord.services.topology import Adjacency


class DependencyGraph:
    """
    Directed graph of "must happen before" edges among affected repositories.

    Node order is the affected-list order and is used for every tie-break.
    """

    def __init__(self, nodes: Iterable[str], edges: Iterable[Tuple[str, str]] = ()):
        self.nodes: List[str] = list(dict.fromkeys(nodes))
        self._positions: Dict[str, int] = {node: i for i, node in enumerate(self.nodes)}
        self._predecessors: Dict[str, List[str]] = {node: [] for node in self.nodes}
        self._successors: Dict[str, List[str]] = {node: [] for node in self.nodes}

        for before, after in edges:
            if before not in self._successors or after not in self._predecessors:
                raise ValueError(f"Edge {before} -> {after} references a node outside the graph")
            if before not in self._predecessors[after]:
                self._predecessors[after].append(before)
                self._successors[before].append(after)

        # Neighbour lists follow node order
        position = self.position
        for node in self.nodes:
            self._predecessors[node].sort(key=position)
            self._successors[node].sort(key=position)

    def position(self, node: str) -> int:
        return self._positions[node]

    def __contains__(self, node: str) -> bool:
        return node in self._predecessors

    def __len__(self) -> int:
        return len(self.nodes)

    def predecessors(self, node: str) -> List[str]:
        return list(self._predecessors[node])

    def successors(self, node: str) -> List[str]:
        return list(self._successors[node])

    def has_edge(self, a: str, b: str) -> bool:
        """Whether a direct edge joins ``a`` and ``b`` in either direction."""
        return b in self._successors.get(a, ()) or a in self._successors.get(b, ())

    @property
    def edges(self) -> List[Tuple[str, str]]:
        return [(before, after) for before in self.nodes for after in self._successors[before]]

    @property
    def roots(self) -> List[str]:
        return [node for node in self.nodes if not self._predecessors[node]]

    def to_adjacency(self) -> Dict[str, List[str]]:
        """Node to predecessors, in node order."""
        return {node: list(self._predecessors[node]) for node in self.nodes}


def assemble_graph(adjacency: Adjacency, affected: Iterable[str]) -> DependencyGraph:
    """
    Build the subgraph induced by the affected repositories.

    Args:
        adjacency: Full repository to predecessors mapping
        affected: Affected repository names, in affected-list order

    Returns:
        Graph containing only edges whose endpoints are both affected
    """
    nodes = list(dict.fromkeys(affected))
    members = set(nodes)
    edges = [
        (before, node)
        for node in nodes
        for before in adjacency.get(node, ())
        if before in members
    ]
    return DependencyGraph(nodes, edges)
