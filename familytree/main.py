import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from familytree.core.config import settings
from familytree.core.errors import DateOrderingError, RootInvariantError
from familytree.db.mongo import connect_to_mongo, close_mongo
from familytree.db.neo4j import connect_to_neo4j, close_neo4j
from familytree.routers import life_events, members, relationships, tree, trees

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    await connect_to_neo4j()
    logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)
    yield
    await close_neo4j()
    await close_mongo()

# Swagger UI at the root URL
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, docs_url="/")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(DateOrderingError)
async def date_ordering_handler(request: Request, exc: DateOrderingError):
    return JSONResponse(status_code=400, content={"detail": exc.message, "field": exc.field})

@app.exception_handler(RootInvariantError)
async def root_invariant_handler(request: Request, exc: RootInvariantError):
    logger.error("Root check failed for %s: %s", request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": "Tree root is ambiguous", "diagnostics": exc.diagnostics})

# Routers
app.include_router(trees.router)
app.include_router(members.router)
app.include_router(relationships.router)
app.include_router(life_events.router)
app.include_router(tree.router)

@app.get("/healthz")
async def healthz():
    return {"status": "ok"}

@app.get("/version")
async def version():
    return {"name": settings.APP_NAME, "env": settings.APP_ENV}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "familytree.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.APP_ENV == "dev",
    )
