from datetime import datetime, timedelta
from typing import Iterable
from familytree.models.member_model import MemberRecord
from familytree.models.tree_model import TreeStatistics, TreeTrends
from familytree.services.generation_service import parse_generation

# (entityType, action) -> trend counter
TREND_EVENTS = {
    ("FamilyMember", "CREATE"): "memberGrowth",
    ("PassingRecord", "CREATE"): "deaths",
    ("SpouseRelationship", "CREATE"): "marriages",
    ("Divorce", "CREATE"): "divorces",
    ("Achievement", "CREATE"): "achievements",
}

def summarize_tree(members: list[MemberRecord], change_logs: Iterable[dict],
                   now: datetime, window_days: int = 30) -> TreeStatistics:
    living = [m for m in members if not m.passingRecords]
    # Members without a usable generation count as generation 1
    generations = [parse_generation(m.generation) for m in members]
    total_generations = max([g if g is not None else 1 for g in generations] + [1])

    since = now - timedelta(days=window_days)
    counts = TreeTrends()
    for log in change_logs:
        created = log.get("createdAt")
        if created is None or created < since:
            continue
        counter = TREND_EVENTS.get((log.get("entityType"), log.get("action")))
        if counter:
            setattr(counts, counter, getattr(counts, counter) + 1)

    return TreeStatistics(
        totalMembers=len(members),
        livingMembers=len(living),
        totalGenerations=total_generations,
        windowDays=window_days,
        trends=counts,
    )
