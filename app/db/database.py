from pymongo import AsyncMongoClient
import logging
from beanie import Document, init_beanie
import app.schemas
from app.core.config import settings

logger = logging.getLogger(__name__)


class DBMongo:
    client: AsyncMongoClient = None


db = DBMongo()


def document_models():
    """Every Beanie Document exported by app.schemas."""
    return [
        model for model in app.schemas.__dict__.values()
        if isinstance(model, type) and issubclass(model, Document)
    ]


async def connect_to_mongo() -> bool:
    if not settings.MONGODB_URI:
        logger.error("MONGODB_URI environment variable not set")
        return False

    try:
        db.client = AsyncMongoClient(settings.MONGODB_URI)
        await db.client.admin.command("ping")
        await init_beanie(
            database=db.client[settings.MONGODB_DATABASE],
            document_models=document_models(),
        )
    except Exception as e:
        logger.exception("Failed to connect to MongoDB: %s", e)
        db.client = None
        return False

    logger.info("Successfully connected to MongoDB database '%s'", settings.MONGODB_DATABASE)
    return True


async def close_mongo_connection():
    if db.client is not None:
        await db.client.close()
        db.client = None
        logger.info("MongoDB connection closed")
