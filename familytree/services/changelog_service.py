import uuid
import logging
from datetime import datetime, timezone
from typing import Any
from pymongo.errors import PyMongoError
from familytree.db.mongo import collection

logger = logging.getLogger(__name__)

def now():
    return datetime.now(timezone.utc)

CHANGE_LOGS = lambda: collection("change_logs")

async def log_change(entity_type: str, entity_id: Any, action: str, tree_id: str,
                     old_values: dict | None = None, new_values: dict | None = None):
    """Record a write; the primary write has already happened, so failures are only logged."""
    doc = {
        "_id": str(uuid.uuid4()),
        "treeId": tree_id,
        "entityType": entity_type,
        "entityId": entity_id,
        "action": action,
        "oldValues": old_values,
        "newValues": new_values,
        "createdAt": now(),
    }
    try:
        await CHANGE_LOGS().insert_one(doc)
    except PyMongoError:
        logger.exception("Failed to log %s %s for entity %s in tree %s", entity_type, action, entity_id, tree_id)
        return None
    logger.info("Logged %s %s for entity %s in tree %s", entity_type, action, entity_id, tree_id)
    return doc

async def list_changes(tree_id: str, limit: int = 50, skip: int = 0) -> list[dict]:
    cursor = CHANGE_LOGS().find({"treeId": tree_id}).sort("createdAt", -1).skip(skip).limit(limit)
    return await cursor.to_list(length=limit)

async def list_changes_since(tree_id: str, since: datetime) -> list[dict]:
    cursor = CHANGE_LOGS().find({"treeId": tree_id, "createdAt": {"$gte": since}})
    return await cursor.to_list(length=None)
