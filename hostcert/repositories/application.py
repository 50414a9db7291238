"""Application repository — read-only snapshot access for the document workflow."""


from hostcert.core.exceptions import NotFoundError
from hostcert.domain.application import Application
from hostcert.repositories.base import BaseRepository
from hostcert.services.permissions import ApplicationSnapshot
from hostcert.services.ports import ApplicationRepository


class SqlApplicationRepository(BaseRepository[Application], ApplicationRepository):
    model = Application

    async def get(self, application_id: str) -> ApplicationSnapshot:
        application = await self.get_by_id(application_id)
        if not application:
            raise NotFoundError("Application", application_id)
        return ApplicationSnapshot(
            id=application.id,
            owner_id=application.host_id,
            status=application.status,
        )
