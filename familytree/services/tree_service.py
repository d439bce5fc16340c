import uuid
import logging
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException
from familytree.core.config import settings
from familytree.db.mongo import collection
from familytree.models.graph_model import TreeGraphOut, TreeLayoutOut
from familytree.models.tree_model import FamilyTreeCreate, FamilyTreeUpdate, TreeStatistics
from familytree.services.changelog_service import list_changes_since
from familytree.services.graph_service import build_tree_graph
from familytree.services.layout_service import build_tree_layout
from familytree.services.life_event_service import delete_tree_events
from familytree.services.member_service import create_root_member, delete_tree_members, list_members
from familytree.services.statistics_service import summarize_tree

logger = logging.getLogger(__name__)

def now():
    return datetime.now(timezone.utc)

TREES = lambda: collection("family_trees")

async def create_tree(data: FamilyTreeCreate) -> dict:
    doc = {
        "_id": str(uuid.uuid4()),
        "name": data.name.strip(),
        "description": data.description,
        "origin": data.origin,
        "establishYear": data.establishYear,
        "rootMemberId": None,
        "createdAt": now(),
    }
    await TREES().insert_one(doc)
    root = await create_root_member(doc["_id"], data.root, settings.ROOT_GENERATION_BASELINE)
    await TREES().update_one({"_id": doc["_id"]}, {"$set": {"rootMemberId": root.id}})
    doc["rootMemberId"] = root.id
    logger.info("Created tree %s with root member %s", doc["_id"], root.id)
    return doc

async def list_trees(limit: int = 50, skip: int = 0) -> list[dict]:
    cursor = TREES().find({}).sort("createdAt", -1).skip(skip).limit(limit)
    return await cursor.to_list(length=limit)

async def get_tree(tree_id: str) -> dict:
    tree = await TREES().find_one({"_id": tree_id})
    if not tree:
        raise HTTPException(status_code=404, detail="Family tree not found")
    return tree

async def update_tree(tree_id: str, data: FamilyTreeUpdate) -> dict:
    patch = data.model_dump(exclude_none=True)
    if not patch:
        raise HTTPException(status_code=400, detail="Nothing to update")
    await get_tree(tree_id)
    await TREES().update_one({"_id": tree_id}, {"$set": patch})
    return await get_tree(tree_id)

async def delete_tree(tree_id: str):
    await get_tree(tree_id)
    removed = await delete_tree_members(tree_id)
    await delete_tree_events(tree_id)
    await TREES().delete_one({"_id": tree_id})
    logger.info("Deleted tree %s and %s members", tree_id, removed)
    return True

async def get_tree_graph(tree_id: str) -> TreeGraphOut:
    members = await list_members(tree_id)
    return build_tree_graph(members, strict=settings.STRICT_ROOT_CHECK)

async def get_tree_layout(tree_id: str, generation: int | None = None,
                          preset: str | None = None) -> TreeLayoutOut:
    members = await list_members(tree_id)
    return build_tree_layout(members, generation=generation, preset=preset or settings.LAYOUT_PRESET,
                             strict=settings.STRICT_ROOT_CHECK)

async def get_statistics(tree_id: str) -> TreeStatistics:
    members = await list_members(tree_id)
    current = now()
    logs = await list_changes_since(tree_id, current - timedelta(days=settings.TREND_WINDOW_DAYS))
    return summarize_tree(members, logs, current, settings.TREND_WINDOW_DAYS)
