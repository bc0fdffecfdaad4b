"""Create tables (if needed) and insert the demo crypto lesson."""
import asyncio

from cryptotutor.database import async_session_maker, close_db, init_db
from cryptotutor.kernel.seed import seed_demo_lesson


async def main():
    await init_db()
    async with async_session_maker() as session:
        lesson = await seed_demo_lesson(session)
        await session.commit()
        print(f"Demo lesson ready: id={lesson.id} title={lesson.title!r}")
    await close_db()


if __name__ == "__main__":
    asyncio.run(main())
