from __future__ import annotations
"""Reusable validation helpers for request payloads and domain values.

Request bodies are validated with pydantic schemas (``crm.schemas``); failures become a
``ValidationError`` (HTTP 422) that separates field-level messages from generic ones:

    {"error": {"status": 422, "title": "Unprocessable Entity", "detail": "Validation error",
               "fields": {"amount": ["Input should be greater than or equal to 0"]},
               "form": []}}
"""
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar
from flask import abort
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from werkzeug.exceptions import UnprocessableEntity

M = TypeVar('M', bound=BaseModel)


class ValidationError(UnprocessableEntity):
    def __init__(self, fields: Optional[Dict[str, List[str]]] = None, form: Optional[List[str]] = None,
                 description: str = 'Validation error'):
        super().__init__(description=description)
        self.fields = fields or {}
        self.form = form or []

    @property
    def details(self) -> Dict[str, Any]:
        return {'fields': self.fields, 'form': self.form}

    @classmethod
    def from_schema_error(cls, err: SchemaError) -> 'ValidationError':
        fields: Dict[str, List[str]] = {}
        form: List[str] = []
        for item in err.errors():
            loc = [str(p) for p in item.get('loc', ()) if p != '__root__']
            if loc:
                fields.setdefault(loc[0], []).append(item['msg'])
            else:
                form.append(item['msg'])
        return cls(fields=fields, form=form)


def parse_payload(schema: Type[M], data: Any) -> M:
    if not isinstance(data, dict):
        raise ValidationError(form=['Expected a JSON object'])
    try:
        return schema.model_validate(data)
    except SchemaError as err:
        raise ValidationError.from_schema_error(err) from None


def ensure_references(session, refs: Dict[str, Any]) -> None:
    """Check that referenced rows exist. refs: { field_name: (Model, id or None) }."""
    missing = {}
    for field_name, (model, ref_id) in refs.items():
        if ref_id is not None and session.get(model, ref_id) is None:
            missing[field_name] = [f"{model.__name__} {ref_id} not found"]
    if missing:
        raise ValidationError(fields=missing)


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or aborts with 400.
    """
    if new_status not in allowed:
        abort(400, description=f"{field_name} invalid")
    return new_status

__all__ = ['ValidationError', 'parse_payload', 'ensure_references', 'validate_status']
