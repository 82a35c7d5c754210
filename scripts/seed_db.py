"""Seed the database with a demo couple and a few pending sessions."""

import asyncio
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select

from rapport.database import async_session, init_db
from rapport.models import Session

DEMO_GROUP_ID = uuid.UUID("7b0c6f3e-2a51-4d8e-9c1a-5e0f4b2d8a10")
PARTICIPANT_MAP = {"Alex": "demo-alex", "Sam": "demo-sam"}

SAMPLE_SESSIONS = [
    [
        {"speaker": "Alex", "content": "You never help with the dishes. You always leave them for me."},
        {"speaker": "Sam", "content": "That's not true. I did them on Tuesday."},
        {"speaker": "Alex", "content": "Whatever. I don't care anymore."},
        {"speaker": "Sam", "content": "Can we take a break and talk about this later?"},
    ],
    [
        {"speaker": "Alex", "content": "I've been worried about money this month. The rent and the bills feel heavy."},
        {"speaker": "Sam", "content": "I hear you. What if we sit down together and plan the budget?"},
        {"speaker": "Alex", "content": "Thank you, I appreciate that. I'm sorry I was short with you yesterday."},
        {"speaker": "Sam", "content": "It's okay. We're a team and we'll figure it out together."},
    ],
    [
        {"speaker": "Sam", "content": "I felt a little lonely this weekend. Can we plan a date night?"},
        {"speaker": "Alex", "content": "That makes sense. I love spending time with you. How about Friday?"},
        {"speaker": "Sam", "content": "I'd love that. Thanks for listening."},
    ],
]


async def seed():
    await init_db()
    now = datetime.now(timezone.utc)

    async with async_session() as db:
        existing = await db.execute(select(Session.id).where(Session.group_id == DEMO_GROUP_ID).limit(1))
        if existing.scalar_one_or_none():
            print(f"Group {DEMO_GROUP_ID} already seeded, skipping")
            return

        for i, messages in enumerate(SAMPLE_SESSIONS):
            db.add(
                Session(
                    group_id=DEMO_GROUP_ID,
                    messages=messages,
                    participant_map=PARTICIPANT_MAP,
                    created_at=now - timedelta(days=(len(SAMPLE_SESSIONS) - i) * 7),
                )
            )

        await db.commit()
        print(f"Seeded {len(SAMPLE_SESSIONS)} sessions for group {DEMO_GROUP_ID}")


def main():
    asyncio.run(seed())


if __name__ == "__main__":
    main()
