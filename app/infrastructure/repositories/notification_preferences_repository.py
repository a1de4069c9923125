"""Persistence helpers for supplier notification preferences."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import NotificationPreferences
from app.domain.entities.notification_preferences import parse_clock, preference_toggle_names
from app.infrastructure.models import NotificationPreferencesModel
from app.utils import ensure_utc, to_storage_datetime, utc_now

from .notification_repository import NotificationStoreError


class NotificationPreferencesRepository:
    """Provide lazy creation and in-place updates of preference rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, fournisseur_id: str) -> NotificationPreferences | None:
        model = self._find(fournisseur_id)
        return self._to_entity(model) if model is not None else None

    def get_or_create(self, fournisseur_id: str) -> NotificationPreferences:
        """Return the supplier preferences, creating the default row if needed."""

        model = self._find(fournisseur_id)
        if model is not None:
            return self._to_entity(model)

        defaults = NotificationPreferences(fournisseur_id=fournisseur_id)
        now = to_storage_datetime(utc_now())
        model = NotificationPreferencesModel(
            fournisseur_id=fournisseur_id, created_at=now, updated_at=now
        )
        self._apply_values(model, asdict(defaults))
        self._commit(model)
        return self._to_entity(model)

    def update(self, fournisseur_id: str, changes: Mapping[str, Any]) -> NotificationPreferences:
        """Apply ``changes`` to the stored preferences of ``fournisseur_id``."""

        allowed = set(preference_toggle_names())
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown preference fields: {', '.join(sorted(unknown))}")
        for key in ("quiet_hours_start", "quiet_hours_end"):
            if key in changes:
                parse_clock(str(changes[key]))

        self.get_or_create(fournisseur_id)
        model = self._find(fournisseur_id)
        self._apply_values(model, changes)
        model.updated_at = to_storage_datetime(utc_now())
        self._commit(model)
        return self._to_entity(model)

    def _find(self, fournisseur_id: str) -> NotificationPreferencesModel | None:
        try:
            return (
                self.session.query(NotificationPreferencesModel)
                .filter(NotificationPreferencesModel.fournisseur_id == fournisseur_id)
                .one_or_none()
            )
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise NotificationStoreError("Failed to load notification preferences") from exc

    def _commit(self, model: NotificationPreferencesModel) -> None:
        try:
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise NotificationStoreError("Failed to save notification preferences") from exc

    @staticmethod
    def _apply_values(model: NotificationPreferencesModel, values: Mapping[str, Any]) -> None:
        for name in preference_toggle_names():
            if name in values:
                setattr(model, name, values[name])

    @staticmethod
    def _to_entity(model: NotificationPreferencesModel) -> NotificationPreferences:
        values = {name: getattr(model, name) for name in preference_toggle_names()}
        return NotificationPreferences(
            fournisseur_id=model.fournisseur_id,
            id=model.id,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
            **values,
        )


__all__ = ["NotificationPreferencesRepository"]
