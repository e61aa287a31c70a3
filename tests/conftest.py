# -*- coding: utf-8 -*-
import pytest
from config import TestingConfig
from sarrafi import create_app, db
from sarrafi.models import User, Role
from sarrafi.models.constants import PERMISSION_MODULES
from tests.factories import (login_as, ADMIN_USERNAME, ADMIN_PASSWORD,
                             CLERK_USERNAME, CLERK_PASSWORD)

def _grants(**modules):
    return {module: {action: True for action in modules.get(module, [])}
            for module in PERMISSION_MODULES}

@pytest.fixture
def app():
    application = create_app(TestingConfig)
    with application.app_context():
        db.create_all()

        clerk_role = Role(name='clerk', description='ثبت عملیات', permissions=_grants(
            dashboard=['view'],
            cashbox=['view', 'create'],
            domestic_transfers=['view', 'create'],
            customers=['view'],
        ))
        db.session.add(clerk_role)

        admin = User(username=ADMIN_USERNAME, name='مدیر سیستم', is_superuser=True)
        admin.set_password(ADMIN_PASSWORD)
        clerk = User(username=CLERK_USERNAME, name='کارمند', role=clerk_role)
        clerk.set_password(CLERK_PASSWORD)
        db.session.add_all([admin, clerk])
        db.session.commit()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()

@pytest.fixture
def ctx(app):
    """App context for calling services directly."""
    with app.app_context():
        yield
        db.session.rollback()

@pytest.fixture
def admin(ctx):
    return User.query.filter_by(username=ADMIN_USERNAME).one()

@pytest.fixture
def clerk(ctx):
    return User.query.filter_by(username=CLERK_USERNAME).one()

@pytest.fixture
def anon_client(app):
    return app.test_client()

@pytest.fixture
def client(app):
    return login_as(app, app.test_client(), ADMIN_USERNAME)

@pytest.fixture
def clerk_client(app):
    return login_as(app, app.test_client(), CLERK_USERNAME)
