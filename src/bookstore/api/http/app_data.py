from dataclasses import dataclass

from src.bookstore.core.services import DbSessionService


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
