import logging
from crm import get_db
from crm.models.activity import ActivityAction, ActivityLog
from crm.models.company import Company
from crm.services.activity import ActivityLogEntry, ActivityLogStore
from tests.test_utils_seed import ensure_user, unique_email, activity_for


def _entry(user_id, **kw):
    base = dict(entity_type='Company', entity_id='co-store-1', action=ActivityAction.UPDATE,
                performed_by_id=user_id, changed_fields=['status'],
                previous_values={'status': 'Active'}, new_values={'status': 'Inactive'},
                metadata={'fields': ['status']})
    base.update(kw)
    return ActivityLogEntry(**base)


def test_append_persists_entry(app_context):
    user = ensure_user(unique_email('store'))
    log = ActivityLogStore().append(_entry(user.id, entity_id='co-store-persist'))
    assert isinstance(log, ActivityLog)
    rows = activity_for('Company', 'co-store-persist')
    assert len(rows) == 1
    assert rows[0].action == 'Update'
    assert rows[0].changed_fields == ['status']
    assert rows[0].meta == {'fields': ['status']}
    assert rows[0].performed_by.id == user.id


def test_append_refuses_empty_ids(app_context, caplog):
    user = ensure_user(unique_email('store'))
    store = ActivityLogStore()
    with caplog.at_level(logging.ERROR, logger='crm.services.activity'):
        assert store.append(_entry(user.id, entity_id='')) is None
        assert store.append(_entry('', entity_id='co-store-nouser')) is None
    assert activity_for('Company', 'co-store-nouser') == []
    assert sum('Refusing activity entry' in r.getMessage() for r in caplog.records) == 2


def test_append_never_raises(app_context, caplog):
    def broken_factory():
        raise RuntimeError('no database')

    with caplog.at_level(logging.ERROR, logger='crm.services.activity'):
        assert ActivityLogStore(broken_factory).append(_entry('u1')) is None
    assert any('Failed to log activity' in r.getMessage() for r in caplog.records)


def test_discard_pending_drops_failed_work(app_context):
    user = ensure_user(unique_email('store'))
    session = get_db()
    session.add(Company(full_name='Never Saved', industry='None', owner_id=user.id, user_id=user.id))
    session.flush()
    ActivityLogStore().append(_entry(user.id, entity_id='co-store-discard', new_values=None), discard_pending=True)
    assert session.query(Company).filter_by(full_name='Never Saved').count() == 0
    assert len(activity_for('Company', 'co-store-discard')) == 1


def test_append_keeps_long_joined_entity_id(app_context):
    user = ensure_user(unique_email('store'))
    joined = ','.join(f'{n:036d}' for n in range(40))
    assert len(joined) > 512
    ActivityLogStore().append(_entry(user.id, entity_type='User', entity_id=joined,
                                     action=ActivityAction.DELETE))
    rows = activity_for('User', joined)
    assert len(rows) == 1
    assert rows[0].entity_id == joined
