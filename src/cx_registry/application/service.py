"""RegistryApplicationService — owns the project approval state machine.

    UNDER_VALIDATION --decide(VERIFIED)--> VERIFIED   (terminal)
    UNDER_VALIDATION --decide(REJECTED)--> REJECTED   (terminal)

Verification runs the pricing engine and creates the credit listing in the
same transaction as the status change; the ISSUED ledger entry and the owner
notification follow as advisory steps.
"""

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.cx_common.advisory import run_advisory
from src.cx_common.cents import cents_to_display
from src.cx_common.enums import LedgerAction, ReviewOutcome
from src.cx_common.errors import (
    AppError,
    MissingVerifierScoreError,
    PersistenceError,
    ProjectAlreadyReviewedError,
    ProjectNotEditableError,
    ProjectNotFoundError,
)
from src.cx_common.id_generator import generate_id
from src.cx_inventory.domain.models import CreditListing
from src.cx_inventory.domain.repository import ListingRepositoryProtocol
from src.cx_inventory.infrastructure.persistence import ListingRepository
from src.cx_ledger.application.service import LedgerApplicationService
from src.cx_notification.application.service import NotificationService
from src.cx_pricing.domain.integrity import IntegrityQuote, evaluate
from src.cx_registry.application.schemas import (
    DecisionRequest,
    DecisionResponse,
    EditProjectRequest,
    ProjectOut,
    SubmitProjectRequest,
)
from src.cx_registry.domain.models import Project, ProjectDraft
from src.cx_registry.domain.repository import ProjectRepositoryProtocol
from src.cx_registry.infrastructure.persistence import CLEARABLE_FIELDS, ProjectRepository

logger = logging.getLogger(__name__)


def _listing_for(project: Project, quote: IntegrityQuote, corresponding_adjustment: bool) -> CreditListing:
    return CreditListing(
        id=project.id,
        project_id=project.id,
        project_name=project.name,
        project_type=project.project_type,
        country=project.country,
        vintage_year=project.vintage_year,
        unit_price_cents=quote.unit_price_cents,
        integrity_score=quote.integrity_score,
        additionality_score=quote.additionality_score,
        permanence_score=quote.permanence_score,
        mrv_score=quote.mrv_score,
        corresponding_adjustment=corresponding_adjustment,
        available_tons=0,
    )


class RegistryApplicationService:
    def __init__(
        self,
        repo: ProjectRepositoryProtocol | None = None,
        listings: ListingRepositoryProtocol | None = None,
        ledger: LedgerApplicationService | None = None,
        notifications: NotificationService | None = None,
    ) -> None:
        self._repo: ProjectRepositoryProtocol = repo or ProjectRepository()
        self._listings: ListingRepositoryProtocol = listings or ListingRepository()
        self._ledger = ledger or LedgerApplicationService()
        self._notifications = notifications or NotificationService()

    async def submit(self, db: AsyncSession, body: SubmitProjectRequest) -> ProjectOut:
        draft = ProjectDraft(
            name=body.name,
            project_type=body.project_type.value,
            country=body.country,
            vintage_year=body.vintage_year,
            requested_tons=body.requested_tons,
            methodology=body.methodology,
            owner_id=body.owner_id,
            description=body.description,
            website=body.website,
        )
        try:
            project = await self._repo.create_project(db, generate_id(), draft)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Project %s submitted by %s", project.id, project.owner_id)
        return ProjectOut.from_domain(project)

    async def get_project(self, db: AsyncSession, project_id: str) -> ProjectOut:
        project = await self._repo.get_project_by_id(db, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return ProjectOut.from_domain(project)

    async def list_projects(
        self, db: AsyncSession, status: str | None, owner_id: str | None
    ) -> list[ProjectOut]:
        projects = await self._repo.list_projects(db, status, owner_id)
        return [ProjectOut.from_domain(p) for p in projects]

    async def edit(
        self, db: AsyncSession, project_id: str, body: EditProjectRequest
    ) -> ProjectOut:
        # An explicit null clears a nullable column; elsewhere it means "unchanged".
        fields: dict[str, Any] = {
            name: value
            for name, value in body.model_dump(exclude_unset=True).items()
            if value is not None or name in CLEARABLE_FIELDS
        }
        if "project_type" in fields:
            fields["project_type"] = body.project_type.value  # type: ignore[union-attr]
        try:
            project = await self._repo.update_pending_project(db, project_id, fields)
            if project is None:
                existing = await self._repo.get_project_by_id(db, project_id)
                if existing is None:
                    raise ProjectNotFoundError(project_id)
                raise ProjectNotEditableError(project_id, existing.status)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProjectOut.from_domain(project)

    async def decide(
        self, db: AsyncSession, project_id: str, body: DecisionRequest
    ) -> DecisionResponse:
        verifying = body.outcome == ReviewOutcome.VERIFIED
        if verifying and body.mrv_score is None:
            raise MissingVerifierScoreError()

        listing: CreditListing | None = None
        try:
            project = await self._repo.decide_pending_project(
                db,
                project_id,
                body.outcome.value,
                body.mrv_score if verifying else None,
            )
            if project is None:
                existing = await self._repo.get_project_by_id(db, project_id)
                if existing is None:
                    raise ProjectNotFoundError(project_id)
                raise ProjectAlreadyReviewedError(project_id, existing.status)
            if verifying:
                quote = evaluate(project)
                listing = await self._listings.create_listing(
                    db, _listing_for(project, quote, body.corresponding_adjustment)
                )
            await db.commit()
        except AppError:
            await db.rollback()
            raise
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.error("Decision on project %s failed: %s", project_id, exc)
            raise PersistenceError(1005, f"Decision on project {project_id} was not recorded") from exc

        logger.info("Project %s decided: %s", project.id, project.status)
        warnings: list[str] = []

        if listing is not None:
            ledger = await run_advisory(
                db,
                f"ledger ISSUED {listing.id}",
                lambda: self._ledger.record(
                    db,
                    LedgerAction.ISSUED,
                    listing.id,
                    settings.REGISTRY_NAME,
                    project.name,
                    project.requested_tons,
                ),
            )
            if ledger.warning:
                warnings.append(ledger.warning)

        title, message = _decision_notice(project)
        warning = await self._notifications.notify(
            db, project.owner_id, title, message, "/developer/projects"
        )
        if warning:
            warnings.append(warning)

        return DecisionResponse(
            project=ProjectOut.from_domain(project),
            listing_id=listing.id if listing else None,
            integrity_score=listing.integrity_score if listing else None,
            unit_price_cents=listing.unit_price_cents if listing else None,
            unit_price_display=cents_to_display(listing.unit_price_cents) if listing else None,
            warnings=warnings,
        )


def _decision_notice(project: Project) -> tuple[str, str]:
    if project.status == ReviewOutcome.VERIFIED:
        return (
            "Project verified",
            f'"{project.name}" has been verified and listed. Credits become '
            "available once they are issued.",
        )
    return (
        "Project rejected",
        f'"{project.name}" did not pass review. You may submit a revised project.',
    )
