"""Pixel geometry for a laid-out tree: node boxes and connector paths."""
from typing import Iterable, Optional
from familytree.models.member_model import MemberRecord
from familytree.models.graph_model import (
    ChildRef, FamilyConnector, Node, PixelNode, Point, PositionedNode, Segment, Spacing,
    SpouseConnector, TreeGeometry, TreeLayoutOut,
)
from familytree.services import grid_layout
from familytree.services.generation_service import parse_generation
from familytree.services.graph_service import build_graph, merge_children_across_spouses, resolve_root

# Spacing must match the rendered node box or neighbouring nodes overlap
SPACING_PRESETS = {
    "workspace": Spacing(x=120, y=150, nodeWidth=180, nodeHeight=200),
    "viewer": Spacing(x=120, y=180, nodeWidth=150, nodeHeight=200),
}

def compute_layout(nodes: list[Node], root_id: Optional[str]) -> list[PositionedNode]:
    return grid_layout.arrange(nodes, root_id)

def members_in_generation(members: Iterable[MemberRecord], generation: int) -> set[str]:
    return {str(m.id) for m in members if parse_generation(m.generation) == generation}

def to_pixels(node: PositionedNode, spacing: Spacing) -> PixelNode:
    x = node.left * spacing.x
    y = node.top * spacing.y
    return PixelNode(
        id=node.id, left=node.left, top=node.top, x=x, y=y,
        boxLeft=x - spacing.nodeWidth / 2, boxTop=y - spacing.nodeHeight / 2,
        width=spacing.nodeWidth, height=spacing.nodeHeight,
    )

def _point(x: float, y: float) -> Point:
    return Point(x=x, y=y)

def derive_geometry(positioned: list[PositionedNode], nodes: list[Node],
                    child_map: dict[int, list[ChildRef]], spacing: Spacing,
                    visible_ids: Optional[Iterable[str]] = None) -> TreeGeometry:
    """Boxes and connectors for the nodes in view.

    A connector is drawn only when every endpoint is visible; edges into
    filtered-out nodes are dropped, not rerouted.
    """
    visible = None if visible_ids is None else set(visible_ids)
    pixels: dict[str, PixelNode] = {}
    for p in positioned:
        if (visible is None or p.id in visible) and p.id not in pixels:
            pixels[p.id] = to_pixels(p, spacing)

    spouse_connectors: list[SpouseConnector] = []
    seen_pairs: set[str] = set()
    for node in nodes:
        if node.id not in pixels:
            continue
        for spouse in node.spouses:
            pair = sorted([node.id, spouse.id])
            key = "-".join(pair)
            if key in seen_pairs or spouse.id not in pixels:
                continue
            seen_pairs.add(key)
            a, b = pixels[pair[0]], pixels[pair[1]]
            spouse_connectors.append(SpouseConnector(
                pairKey=key,
                memberIds=pair,
                line=Segment(start=_point(a.x, a.y), end=_point(b.x, b.y)),
                midpoint=_point((a.x + b.x) / 2, (a.y + b.y) / 2),
            ))

    half_height = spacing.nodeHeight / 2
    children_of = {str(k): v for k, v in child_map.items()}
    family_connectors: list[FamilyConnector] = []
    seen_families: set[str] = set()
    for parent_id, parent in pixels.items():
        kids = [pixels[str(c.id)] for c in children_of.get(parent_id, []) if str(c.id) in pixels]
        if not kids:
            continue
        key = "-".join([parent_id] + sorted(k.id for k in kids))
        if key in seen_families:
            continue
        seen_families.add(key)

        parent_bottom = parent.y + half_height
        child_top = min(k.y for k in kids) - half_height
        mid_y = (parent_bottom + child_top) / 2
        xs = sorted(k.x for k in kids)
        # the bar reaches the trunk when the parent sits outside its children's span
        left, right = min(xs[0], parent.x), max(xs[-1], parent.x)
        family_connectors.append(FamilyConnector(
            parentId=parent_id,
            childIds=[k.id for k in kids],
            trunk=Segment(start=_point(parent.x, parent_bottom), end=_point(parent.x, mid_y)),
            bar=Segment(start=_point(left, mid_y), end=_point(right, mid_y)),
            drops=[
                Segment(start=_point(k.x, mid_y), end=_point(k.x, k.y - half_height))
                for k in kids
            ],
        ))

    return TreeGeometry(
        nodes=list(pixels.values()),
        spouseConnectors=spouse_connectors,
        familyConnectors=family_connectors,
    )

def build_tree_layout(members: list[MemberRecord], generation: Optional[int] = None,
                      preset: str = "workspace", strict: bool = False) -> TreeLayoutOut:
    """Members -> merged children -> graph -> grid -> pixels, optionally for one generation."""
    spacing = SPACING_PRESETS[preset]
    child_map = merge_children_across_spouses(members)
    nodes = build_graph(members, child_map)
    root = resolve_root(members, strict=strict)
    positioned = compute_layout(nodes, root.rootId)
    visible = members_in_generation(members, generation) if generation is not None else None
    geometry = derive_geometry(positioned, nodes, child_map, spacing, visible)
    if visible is not None:
        positioned = [p for p in positioned if p.id in visible]
    return TreeLayoutOut(
        rootId=root.rootId,
        diagnostics=root.diagnostics,
        generation=generation,
        preset=preset,
        positioned=positioned,
        geometry=geometry,
    )
