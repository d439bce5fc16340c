"""Grid placement of a genealogical graph.

Each node takes a NODE_SPAN x NODE_SPAN cell of grid units. Rows are
generations relative to the root, partners sit next to each other and a
family unit is centred over the span of its children.
"""
import math
from collections import deque
import networkx as nx
from familytree.models.graph_model import Node, PositionedNode

NODE_SPAN = 2

class GridLayout:
    def __init__(self, nodes: list[Node]):
        self.order: dict[str, int] = {}
        for node in nodes:
            self.order.setdefault(node.id, len(self.order))

        self.lineage = nx.DiGraph()
        self.couples = nx.Graph()
        self.lineage.add_nodes_from(self.order)
        self.couples.add_nodes_from(self.order)
        for node in nodes:
            for child in node.children:
                if child.id in self.order and child.id != node.id:
                    self.lineage.add_edge(node.id, child.id)
            for parent in node.parents:
                if parent.id in self.order and parent.id != node.id:
                    self.lineage.add_edge(parent.id, node.id)
            for spouse in node.spouses:
                if spouse.id in self.order and spouse.id != node.id:
                    self.couples.add_edge(node.id, spouse.id)

        self.rows: dict[str, int] = {}
        self.columns: dict[str, int] = {}
        self.visited: set[str] = set()
        self.placed: list[str] = []

    def _sorted(self, ids) -> list[str]:
        return sorted(ids, key=self.order.__getitem__)

    def arrange(self, root_id: str | None) -> list[PositionedNode]:
        if not self.order:
            return []
        ordered = list(self.order)
        if root_id not in self.order:
            root_id = ordered[0]

        self._assign_rows([root_id] + ordered)

        starts = [root_id]
        starts += [n for n in ordered if self.lineage.in_degree(n) == 0]
        starts += ordered
        x = 0
        for start in starts:
            if start not in self.visited:
                x += self._place(start, x)

        self._resolve_collisions()
        return [
            PositionedNode(id=n, left=self.columns[n], top=self.rows[n] * NODE_SPAN)
            for n in ordered
        ]

    def _assign_rows(self, starts: list[str]):
        for start in starts:
            if start in self.rows:
                continue
            self.rows[start] = 0
            queue = deque([start])
            while queue:
                current = queue.popleft()
                row = self.rows[current]
                neighbours = [(c, row + 1) for c in self.lineage.successors(current)]
                neighbours += [(p, row - 1) for p in self.lineage.predecessors(current)]
                neighbours += [(s, row) for s in self.couples.neighbors(current)]
                for neighbour, neighbour_row in neighbours:
                    if neighbour not in self.rows:
                        self.rows[neighbour] = neighbour_row
                        queue.append(neighbour)
        lowest = min(self.rows.values())
        for node_id in self.rows:
            self.rows[node_id] -= lowest

    def _place(self, node_id: str, x_offset: int) -> int:
        """Place ``node_id``'s family unit and descendants from ``x_offset``; return the width used."""
        if node_id in self.visited:
            return 0
        row = self.rows[node_id]
        family = [node_id] + [
            s for s in self._sorted(self.couples.neighbors(node_id))
            if s not in self.visited and self.rows[s] == row
        ]
        self.visited.update(family)

        children: list[str] = []
        for member in family:
            for child in self._sorted(self.lineage.successors(member)):
                if child not in self.visited and child not in children:
                    children.append(child)

        family_width = len(family) * NODE_SPAN
        mark = len(self.placed)
        child_x = x_offset
        centres: list[float] = []
        for child in children:
            width = self._place(child, child_x)
            if width:
                centres.append(self._unit_centre(child))
                child_x += width

        start = x_offset
        if centres:
            start = math.floor((min(centres) + max(centres)) / 2 - family_width / 2)
            if start < x_offset:
                shift = x_offset - start
                for placed in self.placed[mark:]:
                    self.columns[placed] += shift
                child_x += shift
                start = x_offset

        for index, member in enumerate(family):
            self.columns[member] = start + index * NODE_SPAN
            self.placed.append(member)
        return max(start + family_width, child_x) - x_offset

    def _unit_centre(self, node_id: str) -> float:
        row = self.rows[node_id]
        xs = [self.columns[node_id]]
        xs += [
            self.columns[s] for s in self.couples.neighbors(node_id)
            if s in self.columns and self.rows[s] == row
        ]
        return (min(xs) + max(xs) + NODE_SPAN) / 2

    def _resolve_collisions(self):
        by_row: dict[int, list[str]] = {}
        for node_id, row in self.rows.items():
            by_row.setdefault(row, []).append(node_id)
        for ids in by_row.values():
            ids.sort(key=lambda n: (self.columns[n], self.order[n]))
            for i in range(1, len(ids)):
                previous, current = ids[i - 1], ids[i]
                gap = self.columns[current] - self.columns[previous]
                if gap < NODE_SPAN:
                    push = NODE_SPAN - gap
                    for later in ids[i:]:
                        self.columns[later] += push

def arrange(nodes: list[Node], root_id: str | None) -> list[PositionedNode]:
    return GridLayout(nodes).arrange(root_id)
