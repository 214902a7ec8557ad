from __future__ import annotations
from typing import Callable, Iterable, Optional, Tuple
from flask import request, abort, make_response
from sqlalchemy import func
from sqlalchemy.orm import Query
from crm.config.pagination import normalize_pagination
import hashlib
import json
from datetime import datetime, timezone, timedelta
from email.utils import parsedate_to_datetime, format_datetime

TIMESTAMP_TOLERANCE = timedelta(seconds=1)

def canonicalize_timestamp(dt: datetime) -> datetime:
    """Return UTC tz-aware timestamp truncated to whole seconds (microseconds removed)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.replace(microsecond=0)

def iso_z(dt: datetime) -> str:
    return canonicalize_timestamp(dt).isoformat().replace('+00:00', 'Z')

def apply_pagination(q: Query) -> Tuple[Query, int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.order_by(None).count()
    return q.offset(offset).limit(limit), total, limit, offset

def compute_etag(ids: Iterable[str], total: int, limit: int, offset: int, latest_ts: Optional[str] = '') -> str:
    seed = f"{list(ids)}|{total}|{limit}|{offset}|{latest_ts or ''}"
    return hashlib.sha256(seed.encode()).hexdigest()[:32]

def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }

def _http_date(dt: datetime) -> str:
    """Return RFC1123 HTTP-date string in GMT."""
    return format_datetime(dt, usegmt=True)

def _set_validators(resp, etag: str, latest_ts: Optional[datetime]):
    resp.headers['ETag'] = etag
    if latest_ts:
        latest_c = canonicalize_timestamp(latest_ts)
        resp.headers['Last-Modified'] = _http_date(latest_c)
        # Canonical ISO in secondary header for clients that prefer it
        resp.headers['X-Last-Modified-ISO'] = iso_z(latest_c)
    return resp

def make_cached_list_response(rows: list, total: int, limit: int, offset: int, latest_ts: Optional[datetime] = None):
    ids = [r.get('id') for r in rows]
    latest_iso = iso_z(latest_ts) if isinstance(latest_ts, datetime) else ''
    # Keep ETag seed stable using ISO canonical form
    etag = compute_etag(ids, total, limit, offset, latest_iso)
    resp = make_response(build_list_payload(rows, total, limit, offset))
    return _set_validators(resp, etag, latest_ts), etag

def _parse_if_modified_since(header_val: str) -> Optional[datetime]:
    if not header_val:
        return None
    # Try ISO 8601 first
    try:
        dt = datetime.fromisoformat(header_val.replace('Z', '+00:00'))
    except ValueError:
        # Fall back to HTTP-date (RFC 1123)
        try:
            dt = parsedate_to_datetime(header_val)
        except (TypeError, ValueError):
            return None
    if dt and dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt

def handle_conditional(etag_value: str, latest_ts: Optional[datetime]):
    """Evaluate conditional request headers.

    Precedence: If-None-Match over If-Modified-Since (per RFC 9110 semantics).
    Returns a 304 response object if conditions satisfied, else None.
    """
    inm = request.headers.get('If-None-Match')
    if inm and inm.strip('"') == etag_value:
        return _set_validators(make_response('', 304), etag_value, latest_ts)
    # Only evaluate If-Modified-Since if If-None-Match was not a match / absent
    ims_raw = request.headers.get('If-Modified-Since')
    if ims_raw and latest_ts:
        ims_dt = _parse_if_modified_since(ims_raw)
        if ims_dt:
            latest_c = canonicalize_timestamp(latest_ts)
            if latest_c <= canonicalize_timestamp(ims_dt) + TIMESTAMP_TOLERANCE:
                return _set_validators(make_response('', 304), etag_value, latest_ts)
    return None

def list_response(q: Query, serialize: Callable, updated_col):
    """Paginate ``q``, serialize the page and answer with ETag/Last-Modified validators.

    The Last-Modified value is the newest ``updated_col`` across the whole filtered set, so
    an edit anywhere in the result invalidates cached pages.
    """
    paged_q, total, limit, offset = apply_pagination(q)
    rows = paged_q.all()
    rows_json = [serialize(r) for r in rows]
    latest_ts = q.order_by(None).with_entities(func.max(updated_col)).scalar()
    resp, etag = make_cached_list_response(rows_json, total, limit, offset, latest_ts)
    cond = handle_conditional(etag, latest_ts)
    if cond:
        return cond
    return resp

def single_response(body: dict, updated_at: Optional[datetime]):
    """Single-resource response carrying the same validators as list responses."""
    # seeded with the body so edits inside the same second still change the validator
    digest = hashlib.sha256(json.dumps(body, sort_keys=True, default=str).encode()).hexdigest()
    etag = compute_etag([body.get('id')], 1, 1, 0, digest)
    cond = handle_conditional(etag, updated_at)
    if cond:
        return cond
    return _set_validators(make_response(body), etag, updated_at)
