# seed script — creates a demo account with a few diary entries
# run once: python -m diary.seed

import asyncio
import logging
import os

from diary.config import settings
from diary.services.db import db
from diary.services.auth_service import hash_password
from diary.services.entry_store import EntryStore, SERVER_TIMESTAMP

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

DEMO_EMAIL = os.getenv("SEED_EMAIL", "demo@diary.local")
DEMO_PASSWORD = os.getenv("SEED_PASSWORD", "diary-demo")

DEMO_ENTRIES = [
    {"title": "First page", "content": "Starting this diary today. Let's see how long I keep it up.", "mood": "happy", "date": "1/5/2025", "is_favorite": True},
    {"title": "Rainy week", "content": "Rain every day this week, stayed in and read.", "mood": "sad", "date": "1/12/2025", "is_favorite": False},
    {"title": "Untitled", "content": "Nothing special happened. Made soup.", "mood": "neutral", "date": "1/14/2025", "is_favorite": False},
]


async def seed():
    """create the demo user and its entries, skips if the user already exists"""
    await db.connect()

    existing = await db.users.find_one({"email": DEMO_EMAIL})
    if existing:
        logger.info(f"Demo user already exists: {DEMO_EMAIL} (id: {existing['_id']})")
        await db.close()
        return

    result = await db.users.insert_one({
        "email": DEMO_EMAIL,
        "hashed_password": hash_password(DEMO_PASSWORD),
        "display_name": "Demo",
        "photo_url": None,
        "provider": "password",
        "created_at": "2025-01-05T00:00:00Z",
    })
    owner_id = str(result.inserted_id)
    logger.info(f"Created demo user: {DEMO_EMAIL} (id: {owner_id})")

    store = EntryStore(db)
    for entry in DEMO_ENTRIES:
        entry_id = await store.create(settings.ENTRIES_COLLECTION, {
            "owner_id": owner_id,
            "created_at": SERVER_TIMESTAMP,
            "images": [],
            "attachments": [],
            "is_locked": False,
            **entry,
        })
        logger.info(f"  entry {entry_id}: {entry['title']}")

    logger.info(f"Seeded {len(DEMO_ENTRIES)} entries")
    await db.close()


if __name__ == "__main__":
    asyncio.run(seed())
