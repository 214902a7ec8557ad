import os, sys, pytest
# Ensure the backend directory is on path so 'crm' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
from crm import create_app, get_db
from crm.models.user import Base
# Import all model modules to ensure tables are registered before create_all
import crm.models.company  # noqa: F401
import crm.models.customer  # noqa: F401
import crm.models.prospect  # noqa: F401
import crm.models.deal  # noqa: F401
import crm.models.todo  # noqa: F401
import crm.models.meeting  # noqa: F401
import crm.models.email_settings  # noqa: F401
import crm.models.activity  # noqa: F401

SENT_NOTICES = []


def _record_notice(to, subject, text):
    SENT_NOTICES.append({'to': to, 'subject': subject, 'text': text})


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = 'sqlite+pysqlite:///:memory:'
    app = create_app({'NOTIFIER': _record_notice, 'JWT_SECRET_KEY': 'test-secret-key-with-enough-length-for-hs256'})
    # After app and blueprints are registered, ensure all tables exist
    with app.app_context():
        engine = get_db().get_bind()
        Base.metadata.create_all(engine)
    yield app


@pytest.fixture()
def app_context(app_instance):
    with app_instance.app_context():
        yield app_instance


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def notices():
    SENT_NOTICES.clear()
    return SENT_NOTICES
