# create_tables.py
import asyncio
import logging
from sketchrelay.core.database import engine
from sketchrelay.models import Base

logger = logging.getLogger(__name__)

async def create_all_tables():
    # run_sync를 통해 동기 함수인 create_all을 실행
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def init_db():
    print("Creating tables...")
    await create_all_tables()
    print("Tables created successfully! 🎉")
    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(init_db())
