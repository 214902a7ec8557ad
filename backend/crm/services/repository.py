from __future__ import annotations
"""Audited CRUD over one entity type.

Every mutation runs through ``with_activity_logging`` so the activity log records who
changed what. The session and the activity store are passed in rather than looked up, so
tests can hand in an in-memory fake store.
"""
from typing import Any, Callable, Dict, Generic, Optional, Type, TypeVar
from flask import abort
from crm.models.activity import ActivityAction
from crm.models.user import new_id, utcnow
from crm.services.activity import ActivityLogStore, AuditOptions, with_activity_logging

ModelType = TypeVar('ModelType')

# bookkeeping columns left out of audit snapshots so they never show up as changes
AUDIT_EXCLUDED = ('created_at', 'updated_at')


class AuditedRepository(Generic[ModelType]):

    def __init__(self, model: Type[ModelType], entity_type: str, serialize: Callable[[ModelType], Dict[str, Any]],
                 session, store: Optional[ActivityLogStore] = None):
        self.model = model
        self.entity_type = entity_type
        self.serialize = serialize
        self.session = session
        self.store = store or ActivityLogStore(lambda: session)

    def get(self, entity_id: str) -> Optional[ModelType]:
        return self.session.get(self.model, entity_id)

    def get_or_404(self, entity_id: str) -> ModelType:
        obj = self.get(entity_id)
        if obj is None:
            abort(404, description=f'{self.entity_type} not found')
        return obj

    def audit_view(self, obj: ModelType) -> Dict[str, Any]:
        data = self.serialize(obj)
        return {k: v for k, v in data.items() if k not in AUDIT_EXCLUDED}

    def snapshot(self, entity_id: str) -> Optional[Dict[str, Any]]:
        obj = self.get(entity_id)
        return self.audit_view(obj) if obj is not None else None

    def create(self, fields: Dict[str, Any], user_id: str, metadata: Optional[dict] = None) -> ModelType:
        # id assigned up front so a failed insert is still attributable in the log
        fields = dict(fields)
        entity_id = fields.setdefault('id', new_id())

        def operation():
            obj = self.model(**fields)
            self.session.add(obj)
            self.session.commit()
            return obj
        return with_activity_logging(operation, AuditOptions(
            entity_type=self.entity_type,
            entity_id=entity_id,
            action=ActivityAction.CREATE,
            user_id=user_id,
            get_current_data=self.audit_view,
            metadata=metadata,
        ), self.store)

    def update(self, entity_id: str, changes: Dict[str, Any], user_id: str, metadata: Optional[dict] = None) -> ModelType:
        def operation():
            obj = self.get_or_404(entity_id)
            for name, value in changes.items():
                setattr(obj, name, value)
            self.session.commit()
            return obj
        meta = {'fields': sorted(changes)}
        meta.update(metadata or {})
        return with_activity_logging(operation, AuditOptions(
            entity_type=self.entity_type,
            entity_id=entity_id,
            action=ActivityAction.UPDATE,
            user_id=user_id,
            get_previous_data=lambda: self.snapshot(entity_id),
            get_current_data=self.audit_view,
            metadata=meta,
        ), self.store)

    def delete(self, entity_id: str, user_id: str) -> ModelType:
        def operation():
            obj = self.get_or_404(entity_id)
            self.session.delete(obj)
            self.session.commit()
            return obj
        return with_activity_logging(operation, AuditOptions(
            entity_type=self.entity_type,
            entity_id=entity_id,
            action=ActivityAction.DELETE,
            user_id=user_id,
            get_previous_data=lambda: self.snapshot(entity_id),
            metadata={'deleted_at': utcnow().isoformat()},
        ), self.store)

__all__ = ['AuditedRepository']
