import pytest
from werkzeug.exceptions import NotFound
from crm.models.activity import ActivityAction
from crm.services.activity import AuditOptions, with_activity_logging


class FakeStore:
    """In-memory stand-in for ActivityLogStore."""

    def __init__(self, fail: bool = False):
        self.entries = []
        self.discarded = []
        self.fail = fail

    def append(self, entry, *, discard_pending=False):
        self.entries.append(entry)
        self.discarded.append(discard_pending)
        if self.fail:
            raise RuntimeError('activity table unavailable')
        return entry


def _options(**kw):
    base = dict(entity_type='Deal', entity_id='d1', action=ActivityAction.UPDATE, user_id='u1')
    base.update(kw)
    return AuditOptions(**base)


def test_deal_amount_update_records_changed_field():
    store = FakeStore()
    state = {'id': 'd1', 'amount': 100, 'stage': 'New'}

    def op():
        state['amount'] = 150
        return state

    result = with_activity_logging(op, _options(
        get_previous_data=lambda: {k: state[k] for k in ('amount', 'stage')},
        get_current_data=lambda r: {k: r[k] for k in ('amount', 'stage')},
    ), store)
    assert result is state
    assert len(store.entries) == 1
    entry = store.entries[0]
    assert entry.action == ActivityAction.UPDATE
    assert entry.performed_by_id == 'u1'
    assert entry.changed_fields == ['amount']
    assert entry.previous_values['amount'] == 100
    assert entry.new_values == {'amount': 150, 'stage': 'New'}


def test_customer_create_without_loader_uses_result_id():
    store = FakeStore()
    row = {'id': 'c1', 'full_name': 'Jane'}
    result = with_activity_logging(lambda: row, _options(
        entity_type='Customer', entity_id='', action=ActivityAction.CREATE,
        get_current_data=lambda r: dict(r),
    ), store)
    assert result == row
    entry = store.entries[0]
    assert entry.entity_id == 'c1'
    assert entry.action == ActivityAction.CREATE
    assert entry.previous_values is None
    assert entry.new_values == row
    assert entry.changed_fields == []


def test_result_id_read_from_attribute():
    class Row:
        id = 'r9'
    store = FakeStore()
    with_activity_logging(Row, _options(entity_id='', action=ActivityAction.CREATE), store)
    assert store.entries[0].entity_id == 'r9'


def test_prospect_delete_missing_logs_failure_and_reraises():
    store = FakeStore()

    def op():
        raise NotFound(description='Prospect not found')

    with pytest.raises(NotFound):
        with_activity_logging(op, _options(
            entity_type='Prospect', entity_id='p404', action=ActivityAction.DELETE,
            get_previous_data=lambda: None,
            metadata={'deleted_at': '2026-01-01T00:00:00'},
        ), store)
    assert len(store.entries) == 1
    entry = store.entries[0]
    assert entry.action == ActivityAction.DELETE
    assert entry.new_values is None
    assert entry.previous_values is None
    assert 'not found' in entry.metadata['error']
    assert entry.metadata['deleted_at'] == '2026-01-01T00:00:00'
    assert store.discarded == [True]


def test_original_exception_reraised_unchanged():
    store = FakeStore()
    boom = RuntimeError('db down')

    def op():
        raise boom

    with pytest.raises(RuntimeError) as exc:
        with_activity_logging(op, _options(), store)
    assert exc.value is boom
    assert store.entries[0].metadata == {'error': 'db down'}


def test_loader_failure_skips_operation_and_log():
    store = FakeStore()
    calls = []

    def loader():
        raise LookupError('cannot load')

    with pytest.raises(LookupError):
        with_activity_logging(lambda: calls.append(1), _options(get_previous_data=loader), store)
    assert calls == []
    assert store.entries == []


def test_store_failure_does_not_leak(caplog):
    store = FakeStore(fail=True)
    assert with_activity_logging(lambda: {'id': 'd1'}, _options(), store) == {'id': 'd1'}

    def op():
        raise ValueError('bad')

    with pytest.raises(ValueError):
        with_activity_logging(op, _options(), store)
    assert len(store.entries) == 2
    assert sum('Activity store raised' in r.getMessage() for r in caplog.records) == 2


def test_extractor_failure_still_logs_success(caplog):
    store = FakeStore()

    def extractor(_result):
        raise KeyError('amount')

    with caplog.at_level('WARNING', logger='crm.services.activity'):
        result = with_activity_logging(lambda: {'id': 'd1'}, _options(
            get_previous_data=lambda: {'amount': 1},
            get_current_data=extractor,
            metadata={'fields': ['amount']},
        ), store)
    assert result == {'id': 'd1'}
    entry = store.entries[0]
    assert entry.new_values is None
    assert entry.changed_fields == []
    assert 'current_data_error' in entry.metadata
    assert entry.metadata['fields'] == ['amount']
    assert any('Could not read Deal state' in r.getMessage() for r in caplog.records)


def test_caller_metadata_not_mutated():
    store = FakeStore()
    meta = {'fields': ['stage']}

    def op():
        raise RuntimeError('x')

    with pytest.raises(RuntimeError):
        with_activity_logging(op, _options(metadata=meta), store)
    assert meta == {'fields': ['stage']}
