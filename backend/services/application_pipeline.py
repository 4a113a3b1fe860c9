"""Application pipeline state machine.

Happy path, one step at a time:
    applied → screening → shortlisted → interview_scheduled
      → interview_completed → offer_extended → offer_accepted → hired

``rejected`` is reachable from every non-terminal stage. ``hired`` and
``rejected`` are terminal. Automated transitions may skip or go backward
but still cannot leave a terminal stage.

Transitions on one application are serialized by a per-application lock;
callers that computed a transition against a status they read earlier can
pass ``expected_status`` and get ``StaleStateError`` when it moved on.
"""

import logging
import threading
import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from models.schemas.application import Application, PipelineStage, StageHistoryEntry
from models.schemas.match_explanation import MatchExplanation
from services.errors import ConflictError, NotFoundError, StaleStateError, ValidationError
from services.validation import validate_fit_score

logger = logging.getLogger(__name__)

HAPPY_PATH: tuple[PipelineStage, ...] = (
    PipelineStage.APPLIED,
    PipelineStage.SCREENING,
    PipelineStage.SHORTLISTED,
    PipelineStage.INTERVIEW_SCHEDULED,
    PipelineStage.INTERVIEW_COMPLETED,
    PipelineStage.OFFER_EXTENDED,
    PipelineStage.OFFER_ACCEPTED,
    PipelineStage.HIRED,
)

TERMINAL_STAGES = frozenset({PipelineStage.HIRED, PipelineStage.REJECTED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def is_terminal(stage: PipelineStage) -> bool:
    return stage in TERMINAL_STAGES


def next_stage(stage: PipelineStage) -> PipelineStage | None:
    """The following happy-path stage, or None at the end / off the path."""
    if stage not in HAPPY_PATH:
        return None
    position = HAPPY_PATH.index(stage)
    if position + 1 >= len(HAPPY_PATH):
        return None
    return HAPPY_PATH[position + 1]


def allowed_transitions(stage: PipelineStage) -> list[PipelineStage]:
    """Stages a manual transition may move to from ``stage``."""
    if is_terminal(stage):
        return []
    following = next_stage(stage)
    allowed = [following] if following is not None else []
    allowed.append(PipelineStage.REJECTED)
    return allowed


def check_transition(current: PipelineStage, target: PipelineStage, automated: bool = False) -> None:
    """Raise if moving from ``current`` to ``target`` is not permitted."""
    if is_terminal(current):
        raise ConflictError(f"application already finalized (stage '{current.value}')")
    if target == current:
        raise ValidationError(f"Application is already in stage '{current.value}'")
    if automated:
        return
    if target not in allowed_transitions(current):
        raise ValidationError(
            f"Invalid stage transition from '{current.value}' to '{target.value}'"
        )


class ApplicationPipeline:
    """Owns applications and their stage history.

    ``clock`` and ``id_factory`` are injected so tests can pin timestamps
    and identifiers.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._clock = clock
        self._new_id = id_factory
        self._applications: dict[str, Application] = {}
        self._by_pair: dict[tuple[str, str], str] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, application_id: str) -> threading.Lock:
        with self._registry_lock:
            if application_id not in self._applications:
                raise NotFoundError(f"Application with ID {application_id} not found")
            return self._locks[application_id]

    def _snapshot(self, application: Application) -> Application:
        return application.model_copy(deep=True)

    def create_application(
        self,
        candidate_id: str,
        company_job_variant_id: str,
        changed_by: str | None = None,
        notes: str | None = None,
    ) -> Application:
        """Create an application in ``applied``. One per candidate and variant."""
        if not candidate_id or not company_job_variant_id:
            raise ValidationError("candidate_id and company_job_variant_id are required")

        pair = (candidate_id, company_job_variant_id)
        with self._registry_lock:
            if pair in self._by_pair:
                raise ConflictError(
                    f"Candidate {candidate_id} has already applied to variant {company_job_variant_id}"
                )
            now = self._clock()
            application_id = self._new_id()
            application = Application(
                id=application_id,
                candidate_id=candidate_id,
                company_job_variant_id=company_job_variant_id,
                status=PipelineStage.APPLIED,
                created_at=now,
                updated_at=now,
            )
            application.stage_history.append(StageHistoryEntry(
                id=self._new_id(),
                application_id=application_id,
                from_stage=None,
                to_stage=PipelineStage.APPLIED,
                changed_by=changed_by,
                automated=changed_by is None,
                changed_at=now,
                notes=notes,
            ))
            self._applications[application_id] = application
            self._by_pair[pair] = application_id
            self._locks[application_id] = threading.Lock()

        logger.info(
            "Application %s created for candidate %s on variant %s",
            application_id, candidate_id, company_job_variant_id,
        )
        return self._snapshot(application)

    def get(self, application_id: str) -> Application:
        with self._lock_for(application_id):
            return self._snapshot(self._applications[application_id])

    def find_by_candidate_and_variant(self, candidate_id: str, company_job_variant_id: str) -> Application:
        with self._registry_lock:
            application_id = self._by_pair.get((candidate_id, company_job_variant_id))
        if application_id is None:
            raise NotFoundError(
                f"No application from candidate {candidate_id} for variant {company_job_variant_id}"
            )
        return self.get(application_id)

    def find_by_stage(self, stage: PipelineStage) -> list[Application]:
        with self._registry_lock:
            applications = list(self._applications.values())
        return [self._snapshot(a) for a in applications if a.status == stage]

    def history(self, application_id: str) -> list[StageHistoryEntry]:
        """Stage history in the order it was recorded."""
        with self._lock_for(application_id):
            return list(self._applications[application_id].stage_history)

    def transition(
        self,
        application_id: str,
        to_stage: PipelineStage,
        changed_by: str | None = None,
        automated: bool = False,
        notes: str | None = None,
        expected_status: PipelineStage | None = None,
    ) -> Application:
        """Move an application to ``to_stage`` and record the change."""
        with self._lock_for(application_id):
            application = self._applications[application_id]
            current = application.status

            if expected_status is not None and expected_status != current:
                raise StaleStateError(
                    f"Application {application_id} is in stage '{current.value}', "
                    f"not '{expected_status.value}'; re-fetch and retry"
                )
            try:
                check_transition(current, to_stage, automated)
                if not automated and not changed_by:
                    raise ValidationError("Manual stage transitions require changed_by")
            except (ConflictError, ValidationError) as e:
                logger.warning("Rejected transition on application %s: %s", application_id, e)
                raise

            now = self._clock()
            entry = StageHistoryEntry(
                id=self._new_id(),
                application_id=application_id,
                from_stage=current,
                to_stage=to_stage,
                changed_by=changed_by,
                automated=automated,
                changed_at=now,
                notes=notes,
            )
            # Build the successor first so a failure leaves the stored record untouched
            updated = application.model_copy(update={
                "status": to_stage,
                "stage_history": [*application.stage_history, entry],
                "version": application.version + 1,
                "updated_at": now,
            })
            self._applications[application_id] = updated

        logger.info(
            "Application %s moved %s -> %s (%s)",
            application_id, current.value, to_stage.value,
            "automated" if automated else f"by {changed_by}",
        )
        return self._snapshot(updated)

    def reject(
        self,
        application_id: str,
        changed_by: str | None = None,
        automated: bool = False,
        notes: str | None = None,
    ) -> Application:
        return self.transition(
            application_id, PipelineStage.REJECTED,
            changed_by=changed_by, automated=automated, notes=notes,
        )

    def advance(self, application_id: str, changed_by: str, notes: str | None = None) -> Application:
        """Move one step along the happy path."""
        current = self.get(application_id).status
        following = next_stage(current)
        if following is None or is_terminal(current):
            raise ConflictError(f"application already finalized (stage '{current.value}')")
        return self.transition(
            application_id, following, changed_by=changed_by, notes=notes, expected_status=current,
        )

    def update_fit_score(self, application_id: str, fit_score: float) -> Application:
        validate_fit_score(fit_score)
        with self._lock_for(application_id):
            application = self._applications[application_id]
            updated = application.model_copy(update={"fit_score": fit_score, "updated_at": self._clock()})
            self._applications[application_id] = updated
        return self._snapshot(updated)

    def attach_match(self, application_id: str, explanation: MatchExplanation) -> Application:
        """Store a scoring run on the application, replacing any previous one."""
        validate_fit_score(explanation.overall_score)
        with self._lock_for(application_id):
            application = self._applications[application_id]
            updated = application.model_copy(update={
                "fit_score": explanation.overall_score,
                "match_explanation": explanation.model_copy(deep=True),
                "updated_at": self._clock(),
            })
            self._applications[application_id] = updated
        logger.info("Application %s scored %.2f", application_id, explanation.overall_score)
        return self._snapshot(updated)

    def stage_transition_stats(self, stage: PipelineStage) -> dict[str, int]:
        """Counts of recorded transitions into ``stage``."""
        with self._registry_lock:
            applications = list(self._applications.values())
        entries = [
            entry
            for application in applications
            for entry in application.stage_history
            if entry.to_stage == stage
        ]
        automated = sum(1 for entry in entries if entry.automated)
        return {
            "total_transitions": len(entries),
            "automated_transitions": automated,
            "manual_transitions": len(entries) - automated,
        }
