"""
Training session coordinator.

Owns the one active plan document of a user session: the generation
settings, the plan and its versioned wrapper. Every edit goes through
the plan editor and is re-wrapped and persisted as one step, so the
three persisted slots never disagree.
"""

from dataclasses import replace
from enum import Enum
from typing import Any, Mapping, Optional, Protocol, Union
import json
import logging

from ..db.session_store import InMemorySessionStore, SessionStore
from ..exceptions import (
    GeneratorNotConfiguredError,
    NoActivePlanError,
    PlanGenerationError,
    PlanImportError,
    PlanValidationError,
    SessionStateError,
    StorageError,
    TrainingCalendarError,
    UnsupportedSchemaVersionError,
    ValidationError,
)
from ..models.document import PlanDocument, PlanSettings, PlanSource
from ..models.plans import Day, Plan
from ..schema import from_json, parse_document, revise_after_edit, to_json, wrap
from ..units import DistanceUnit
from .base import BaseService
from . import plan_editor
from .plan_editor import WorkoutSpec, WorkoutUpdate


SETTINGS_SLOT = "training-form-values"
PLAN_SLOT = "training-plan"
DOCUMENT_SLOT = "training-plan-schema-v1"

SESSION_SLOTS = (SETTINGS_SLOT, PLAN_SLOT, DOCUMENT_SLOT)


class TrainingStep(str, Enum):
    """Where the user is in the configure -> edit -> export flow."""
    CONFIGURE = "configure"
    EDIT = "edit"
    EXPORT = "export"


class PlanGenerator(Protocol):
    """Produces a plan from generation settings."""

    def __call__(self, settings: PlanSettings) -> Plan:
        ...


DayKey = Union[Day, str]


class TrainingSession(BaseService):
    """
    Coordinates one user's plan across generation, editing and export.

    Example:
        session = TrainingSession(store=SqliteSessionStore(path), generator=my_generator)
        session.generate(settings)
        session.add_workout(1, "Tue", WorkoutSpec(type="Easy", distance=5))
        data = session.export_json()
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        generator: Optional[PlanGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        super().__init__(store=store, logger=logger)
        self._generator = generator
        self._document: Optional[PlanDocument] = None
        self._step = TrainingStep.CONFIGURE

    # =========================================================================
    # State
    # =========================================================================

    @property
    def document(self) -> Optional[PlanDocument]:
        return self._document

    @property
    def settings(self) -> Optional[PlanSettings]:
        return self._document.settings if self._document else None

    @property
    def plan(self) -> Optional[Plan]:
        return self._document.plan if self._document else None

    @property
    def step(self) -> TrainingStep:
        return self._step

    @property
    def has_plan(self) -> bool:
        return self._document is not None and not self._document.plan.is_empty

    def set_step(self, step: Union[TrainingStep, str]) -> None:
        """
        Move to another step of the flow.

        Raises:
            SessionStateError: If the step is unknown, or is edit/export without a plan
        """
        try:
            step = TrainingStep(step)
        except ValueError:
            raise SessionStateError(f"Unknown step '{step}'", details={"step": str(step)})
        if step is not TrainingStep.CONFIGURE and not self.has_plan:
            raise SessionStateError(
                f"Cannot move to '{step.value}' without a training plan",
                details={"step": step.value},
            )
        self._step = step

    def _require_document(self, operation: str) -> PlanDocument:
        if self._document is None:
            raise NoActivePlanError(operation)
        return self._document

    def _activate(self, document: PlanDocument) -> None:
        self._document = document
        self._step = TrainingStep.CONFIGURE if document.plan.is_empty else TrainingStep.EDIT
        self._persist()

    # =========================================================================
    # Generation and import
    # =========================================================================

    def generate(self, settings: PlanSettings) -> PlanDocument:
        """
        Generate a fresh plan with the injected generator.

        Raises:
            GeneratorNotConfiguredError: If the session has no generator
            PlanGenerationError: If the generator fails
        """
        if self._generator is None:
            raise GeneratorNotConfiguredError()

        try:
            plan = self._generator(settings)
        except TrainingCalendarError:
            raise
        except Exception as e:
            self.logger.error(f"Plan generation failed: {e}")
            raise PlanGenerationError(f"Plan generation failed: {e}")

        document = wrap(settings, plan, PlanSource.GENERATED)
        self._activate(document)
        self.logger.info(
            f"Generated {document.plan.total_weeks}-week plan for "
            f"{settings.race_distance.label} on {settings.race_date.isoformat()}"
        )
        return document

    def import_document(self, raw: Union[bytes, str, Mapping[str, Any]]) -> PlanDocument:
        """
        Replace the session's document with an imported one.

        The incoming document keeps its own source. On any failure the
        session is left exactly as it was.

        Raises:
            PlanImportError: With every problem found in the document
        """
        try:
            document = from_json(raw) if isinstance(raw, (bytes, str)) else parse_document(raw)
        except UnsupportedSchemaVersionError as e:
            self.logger.warning(f"Import rejected: {e.message}")
            raise PlanImportError([e.message], details=e.details)
        except PlanValidationError as e:
            self.logger.warning(f"Import rejected with {len(e.errors)} error(s)")
            raise PlanImportError(e.errors)

        self._activate(document)
        self.logger.info(
            f"Imported {document.source.value} plan with {document.plan.total_weeks} weeks"
        )
        return document

    # =========================================================================
    # Editing
    # =========================================================================

    def _commit(self, operation: str, plan: Plan, settings: Optional[PlanSettings] = None) -> Plan:
        document = self._require_document(operation)
        self._document = revise_after_edit(document, plan, settings=settings)
        self._persist()
        self.logger.debug(f"{operation}: plan revised at {self._document.updated_at.isoformat()}")
        return self._document.plan

    def add_workout(self, week: int, day: DayKey, spec: WorkoutSpec) -> Plan:
        document = self._require_document("add_workout")
        return self._commit("add_workout", plan_editor.add_workout(document.plan, week, day, spec))

    def update_workout(self, week: int, day: DayKey, index: int, updates: WorkoutUpdate) -> Plan:
        document = self._require_document("update_workout")
        return self._commit(
            "update_workout",
            plan_editor.update_workout(document.plan, week, day, index, updates),
        )

    def update_nickname(self, week: int, day: DayKey, index: int, nickname: Optional[str]) -> Plan:
        document = self._require_document("update_nickname")
        return self._commit(
            "update_nickname",
            plan_editor.update_nickname(document.plan, week, day, index, nickname),
        )

    def remove_workout(self, week: int, day: DayKey, index: int) -> Plan:
        document = self._require_document("remove_workout")
        return self._commit("remove_workout", plan_editor.remove_workout(document.plan, week, day, index))

    def reorder_within_day(self, week: int, day: DayKey, from_index: int, to_index: int) -> Plan:
        document = self._require_document("reorder_within_day")
        return self._commit(
            "reorder_within_day",
            plan_editor.reorder_within_day(document.plan, week, day, from_index, to_index),
        )

    def move_workout(
        self,
        from_week: int,
        from_day: DayKey,
        from_index: int,
        to_week: int,
        to_day: DayKey,
        to_index: int,
    ) -> Plan:
        document = self._require_document("move_workout")
        return self._commit(
            "move_workout",
            plan_editor.move_workout(
                document.plan, from_week, from_day, from_index, to_week, to_day, to_index
            ),
        )

    def change_unit(self, unit: Union[DistanceUnit, str]) -> Plan:
        """
        Switch the display unit, converting every distance in the plan.

        Plan, settings and document change together in a single commit.
        """
        document = self._require_document("change_unit")
        try:
            unit = DistanceUnit(unit)
        except ValueError:
            raise ValidationError(f"Unknown distance unit: {unit}", field="unit")

        current = document.settings.unit
        if unit == current:
            return document.plan

        plan = plan_editor.convert_units(document.plan, current, unit)
        self.logger.info(f"Switched plan from {current.value} to {unit.value}")
        return self._commit("change_unit", plan, settings=replace(document.settings, unit=unit))

    # =========================================================================
    # Export
    # =========================================================================

    def export_document(self) -> Optional[PlanDocument]:
        """The current document, or None before anything was generated or imported."""
        return self._document

    def export_json(self, indent: Optional[int] = 2) -> str:
        document = self._require_document("export")
        return to_json(document, indent=indent)

    def export_bytes(self, indent: Optional[int] = 2) -> bytes:
        return self.export_json(indent=indent).encode("utf-8")

    # =========================================================================
    # Lifecycle and persistence
    # =========================================================================

    def reset(self) -> None:
        """Discard the plan and return to the configure step."""
        self._document = None
        self._step = TrainingStep.CONFIGURE
        self._persist()
        self.logger.info("Session reset")

    def _persist(self) -> None:
        if self._document is None:
            for key in SESSION_SLOTS:
                self._delete_slot(key)
            return
        self._write_slot(SETTINGS_SLOT, _dump(self._document.settings.to_dict()))
        self._write_slot(PLAN_SLOT, _dump(self._document.plan.to_dict()))
        self._write_slot(DOCUMENT_SLOT, to_json(self._document, indent=None).encode("utf-8"))

    @classmethod
    def restore(
        cls,
        store: SessionStore,
        generator: Optional[PlanGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "TrainingSession":
        """
        Rebuild a session from persisted slots.

        The document slot is authoritative. A document that no longer
        validates is discarded together with the other slots and the
        session starts empty.
        """
        session = cls(store=store, generator=generator, logger=logger)
        raw = session._read_slot(DOCUMENT_SLOT)
        if raw is None:
            return session

        try:
            document = from_json(raw)
        except ValidationError as e:
            session.logger.warning(f"Discarding persisted session: {e.message}")
            session._persist()
            return session

        session._document = document
        session._step = TrainingStep.CONFIGURE if document.plan.is_empty else TrainingStep.EDIT
        session.logger.info(f"Restored session with {document.plan.total_weeks}-week plan")
        return session

    def save(self) -> bytes:
        """Snapshot the session as bytes."""
        payload = {
            "step": self._step.value,
            "document": self._document.to_dict() if self._document else None,
        }
        return _dump(payload)

    @classmethod
    def load(
        cls,
        data: bytes,
        store: Optional[SessionStore] = None,
        generator: Optional[PlanGenerator] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "TrainingSession":
        """
        Rebuild a session from a save() snapshot.

        Raises:
            StorageError: If the snapshot is not readable
            PlanValidationError: If the embedded document fails validation
        """
        try:
            payload = json.loads(data.decode("utf-8") if isinstance(data, bytes) else data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Unreadable session snapshot: {e}", operation="load")
        if not isinstance(payload, Mapping):
            raise StorageError("Unreadable session snapshot: expected an object", operation="load")

        session = cls(store=store or InMemorySessionStore(), generator=generator, logger=logger)
        if payload.get("document") is not None:
            session._activate(parse_document(payload["document"]))
        else:
            session._persist()

        step = payload.get("step")
        if step and step != session.step.value:
            try:
                session.set_step(step)
            except SessionStateError as e:
                session.logger.warning(f"Ignoring saved step: {e.message}")
        return session


def _dump(data: Any) -> bytes:
    return json.dumps(data, ensure_ascii=False).encode("utf-8")
