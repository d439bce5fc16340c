import logging
from motor.motor_asyncio import AsyncIOMotorClient
from familytree.core.config import settings

logger = logging.getLogger(__name__)

class Mongo:
    client: AsyncIOMotorClient | None = None

mongo = Mongo()

def collection(name: str):
    return mongo.client[settings.MONGODB_DB][name]

async def connect_to_mongo():
    mongo.client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    db = mongo.client[settings.MONGODB_DB]
    await db.family_trees.create_index("name")
    # One passing record per member
    await db.passing_records.create_index("familyMemberId", unique=True)
    await db.passing_records.create_index("treeId")
    await db.achievements.create_index([("treeId", 1), ("familyMemberId", 1)])
    await db.occupations.create_index("familyMemberId")
    await db.places_of_origin.create_index("familyMemberId")
    await db.change_logs.create_index([("treeId", 1), ("createdAt", -1)])
    logger.info("Connected to MongoDB database %s", settings.MONGODB_DB)
    return mongo.client

async def close_mongo():
    if mongo.client:
        mongo.client.close()
