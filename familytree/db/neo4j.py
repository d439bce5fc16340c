import logging
from neo4j import AsyncGraphDatabase, AsyncDriver
from familytree.core.config import settings

logger = logging.getLogger(__name__)

class Neo4j:
    driver: AsyncDriver | None = None

neo4j = Neo4j()

async def connect_to_neo4j():
    neo4j.driver = AsyncGraphDatabase.driver(
        settings.NEO4J_URI,
        auth=(settings.NEO4J_USER, settings.NEO4J_PASSWORD),
    )
    async with neo4j.driver.session() as session:
        # Member ids are unique across every tree
        await session.run(
            "CREATE CONSTRAINT family_member_unique IF NOT EXISTS FOR (m:FamilyMember) REQUIRE m.memberId IS UNIQUE"
        )
        await session.run(
            "CREATE INDEX family_member_tree IF NOT EXISTS FOR (m:FamilyMember) ON (m.treeId)"
        )
    logger.info("Connected to Neo4j at %s", settings.NEO4J_URI)
    return neo4j.driver

async def close_neo4j():
    if neo4j.driver:
        await neo4j.driver.close()
