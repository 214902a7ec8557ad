from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['ACTIVATION_TOKEN_HOURS'] = int(os.getenv('ACTIVATION_TOKEN_HOURS', '48'))
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['NOTIFIER'] = None

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    logging.basicConfig(level=app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.deals import deals_bp
    from .routes.companies import companies_bp
    from .routes.customers import customers_bp
    from .routes.prospects import prospects_bp
    from .routes.todos import todos_bp
    from .routes.meetings import meetings_bp
    from .routes.settings import settings_bp
    from .routes.activity import activity_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(users_bp, url_prefix='/users')
    app.register_blueprint(deals_bp, url_prefix='/deals')
    app.register_blueprint(companies_bp, url_prefix='/companies')
    app.register_blueprint(customers_bp, url_prefix='/customers')
    app.register_blueprint(prospects_bp, url_prefix='/prospects')
    app.register_blueprint(todos_bp, url_prefix='/todos')
    app.register_blueprint(meetings_bp, url_prefix='/meetings')
    app.register_blueprint(settings_bp, url_prefix='/settings')
    app.register_blueprint(activity_bp, url_prefix='/activity')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            extra = getattr(e, 'details', None)
            if extra:
                payload['error'].update(extra)
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()
