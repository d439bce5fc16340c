"""Relationship graph derived from the flat member list.

Storage only keeps ``parentId`` and spouse relationships; everything here is
recomputed from scratch on each read.
"""
import logging
from datetime import date
from typing import Optional
import networkx as nx
from familytree.core.errors import RootInvariantError
from familytree.models.member_model import MemberRecord
from familytree.models.graph_model import (
    ChildRef, Node, NodeGender, Relation, RelationType, RootResolution, SpouseRelation, SpouseType,
    TreeGraphOut,
)

logger = logging.getLogger(__name__)

_GENDERS = {"MALE": NodeGender.MALE, "FEMALE": NodeGender.FEMALE}

def partners_of(member: MemberRecord) -> list[tuple[int, Optional[date]]]:
    """(partner id, divorce date) for every relationship, whichever side ``member`` is on."""
    partners = [(rel.familyMember2.id, rel.divorceDate) for rel in member.spouse1]
    partners += [(rel.familyMember1.id, rel.divorceDate) for rel in member.spouse2]
    return partners

def active_partner_ids(member: MemberRecord, exclude: Optional[int] = None) -> list[int]:
    return [pid for pid, divorced_on in partners_of(member) if divorced_on is None and pid != exclude]

def _relation_type(member: MemberRecord) -> RelationType:
    return RelationType.ADOPTED if member.isAdopted else RelationType.BLOOD

def merge_children_across_spouses(members: list[MemberRecord]) -> dict[int, list[ChildRef]]:
    """Parent id -> children, shared between everyone linked by marriage.

    Children recorded under one partner are also the other partner's. The
    union is taken over each group of spouse-linked members, so a member with
    sequential spouses shares one child set with all of them (including
    children of a divorced partner). Members without children are absent.
    """
    order: dict[int, int] = {}
    for index, member in enumerate(members):
        order.setdefault(member.id, index)

    direct: dict[int, dict[int, ChildRef]] = {}
    for member in members:
        if member.parentId is None:
            continue
        direct.setdefault(member.parentId, {}).setdefault(
            member.id, ChildRef(id=member.id, type=_relation_type(member))
        )

    couples = nx.Graph()
    for member in members:
        for partner_id, _ in partners_of(member):
            if partner_id != member.id:
                couples.add_edge(member.id, partner_id)

    merged: dict[int, list[ChildRef]] = {
        parent_id: sorted(children.values(), key=lambda c: order[c.id])
        for parent_id, children in direct.items()
    }
    for group in nx.connected_components(couples):
        union: dict[int, ChildRef] = {}
        for member_id in group:
            for child_id, child in direct.get(member_id, {}).items():
                union.setdefault(child_id, child)
        if not union:
            continue
        shared = sorted(union.values(), key=lambda c: order[c.id])
        for member_id in group:
            merged[member_id] = list(shared)
    return merged

def build_graph(members: list[MemberRecord],
                child_map: Optional[dict[int, list[ChildRef]]] = None) -> list[Node]:
    if child_map is None:
        child_map = merge_children_across_spouses(members)

    nodes: dict[str, Node] = {}
    for member in members:
        node_id = str(member.id)
        if node_id in nodes:
            continue
        parents = []
        if member.parentId is not None:
            parents.append(Relation(id=str(member.parentId), type=_relation_type(member)))
        children = [Relation(id=str(c.id), type=c.type) for c in child_map.get(member.id, [])]
        spouses: list[SpouseRelation] = []
        for partner_id, divorced_on in partners_of(member):
            edge = SpouseRelation(
                id=str(partner_id),
                type=SpouseType.DIVORCED if divorced_on else SpouseType.MARRIED,
            )
            if edge not in spouses:
                spouses.append(edge)
        nodes[node_id] = Node(
            id=node_id,
            gender=_GENDERS.get(member.gender or "", NodeGender.UNSPECIFIED),
            parents=parents,
            children=children,
            siblings=[],
            spouses=spouses,
        )
    return list(nodes.values())

def resolve_root(members: list[MemberRecord], strict: bool = False) -> RootResolution:
    """Pick the layout root and report any breach of the single-root rule.

    The expected root is the one member flagged ``isRootPerson`` with no
    parent. Otherwise the first parentless member is used, then the first
    member, and every deviation is returned (and logged) as a diagnostic.
    """
    if not members:
        diagnostics = ["Tree has no members"]
        if strict:
            raise RootInvariantError(diagnostics)
        return RootResolution(rootId=None, diagnostics=diagnostics)

    diagnostics: list[str] = []
    flagged: list[MemberRecord] = []
    for m in members:
        if m.isRootPerson and all(f.id != m.id for f in flagged):
            flagged.append(m)

    if len(flagged) == 1 and flagged[0].parentId is None:
        return RootResolution(rootId=str(flagged[0].id))

    if not flagged:
        diagnostics.append("No member is marked as the root person")
    elif len(flagged) > 1:
        ids = ", ".join(str(m.id) for m in flagged)
        diagnostics.append(f"{len(flagged)} members are marked as the root person: {ids}")
    for m in flagged:
        if m.parentId is not None:
            diagnostics.append(f"Root person {m.id} has a parent ({m.parentId})")

    candidates = [m for m in flagged if m.parentId is None]
    if not candidates:
        candidates = [m for m in members if m.parentId is None]
    if candidates:
        root = candidates[0]
    else:
        root = members[0]
        diagnostics.append("Every member has a parent")
    diagnostics.append(f"Using member {root.id} as the layout root")

    for message in diagnostics:
        logger.warning("Root check: %s", message)
    if strict:
        raise RootInvariantError(diagnostics)
    return RootResolution(rootId=str(root.id), diagnostics=diagnostics)

def build_tree_graph(members: list[MemberRecord], strict: bool = False) -> TreeGraphOut:
    child_map = merge_children_across_spouses(members)
    root = resolve_root(members, strict=strict)
    return TreeGraphOut(
        rootId=root.rootId,
        diagnostics=root.diagnostics,
        nodes=build_graph(members, child_map),
        childMap={str(k): v for k, v in child_map.items()},
    )
