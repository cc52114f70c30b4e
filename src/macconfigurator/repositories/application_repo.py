"""Application repository."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from macconfigurator.db.models.application import ApplicationRow


class ApplicationRepository:
    """Async access to ``applications`` rows within one session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, application_id: str) -> ApplicationRow | None:
        stmt = select(ApplicationRow).where(ApplicationRow.application_id == application_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(self, application_id: str, **values: Any) -> ApplicationRow:
        """Replace the row's columns, inserting it when absent."""
        row = await self.get(application_id)
        if row is None:
            row = ApplicationRow(application_id=application_id, **values)
            self.session.add(row)
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await self.session.flush()
        return row

    async def list_all(self) -> list[ApplicationRow]:
        stmt = select(ApplicationRow).order_by(ApplicationRow.application_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
