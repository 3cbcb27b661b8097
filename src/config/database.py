import contextlib
import sys
from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config.settings import settings


def create_engine(url: str):
    url = str(url)
    use_echo = settings.LOG_DB
    if "sqlite" in url:
        return create_async_engine(
            url,
            echo=use_echo,
            connect_args={"timeout": 15},
        )
    return create_async_engine(
        url,
        echo=use_echo,
        pool_pre_ping=True,
        # a request waiting on a connection counts against the store timeout too
        pool_timeout=settings.STORE_TIMEOUT_SECONDS,
        connect_args={"timeout": settings.STORE_TIMEOUT_SECONDS},
    )


def generate_test_db_dsn(dsn: str) -> str:
    part_dsn, db_name = str(dsn).rsplit("/", 1)
    return f"{part_dsn}/test_{db_name}"


engine = create_engine(settings.DB_DSN)
if "pytest" in sys.modules:
    # never point a test run at the live database
    engine = create_engine(generate_test_db_dsn(settings.DB_DSN))


async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


@contextlib.asynccontextmanager
async def async_session_manager(
    auto_commit=True, session_overwrite: AsyncSession | None = None
) -> AsyncIterator[AsyncSession]:
    if session_overwrite:
        yield session_overwrite
    else:
        async with async_session_maker() as session:
            try:
                yield session
            except Exception as e:
                await session.rollback()
                raise e
            else:
                if auto_commit:
                    await session.commit()
