"""Domain port definitions for adapters."""

from __future__ import annotations

from .automation import AutomationHooks
from .fetching import (
    BookingSource,
    QuestionnaireDocumentSource,
    QuestionnaireSource,
    ReferralDownloader,
)
from .persistence import (
    ClientRepository,
    EventRepository,
    PetRepository,
    Repository,
    TaskRepository,
)
from .storage import SubmissionArchive, SubmissionTracker
from .unit_of_work import (
    IntakeRepositories,
    IntakeUnitOfWork,
    IntakeUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AutomationHooks",
    "BookingSource",
    "ClientRepository",
    "EventRepository",
    "IntakeRepositories",
    "IntakeUnitOfWork",
    "IntakeUnitOfWorkFactory",
    "PetRepository",
    "QuestionnaireDocumentSource",
    "QuestionnaireSource",
    "ReferralDownloader",
    "Repository",
    "RepositoryCollection",
    "SubmissionArchive",
    "SubmissionTracker",
    "TaskRepository",
    "UnitOfWork",
]
