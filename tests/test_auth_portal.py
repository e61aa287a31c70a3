# -*- coding: utf-8 -*-
from decimal import Decimal
from sarrafi import db
from sarrafi.models import User, ActivityLog
from sarrafi.models.constants import EntryType
from sarrafi.services import admin_service
from tests.factories import (ADMIN_USERNAME, ADMIN_PASSWORD, CLERK_USERNAME, CLERK_PASSWORD,
                             make_customer, make_partner)


def _login(client, username, password):
    return client.post('/auth/login', json={'username': username, 'password': password})


def test_login_and_logout(anon_client, app):
    response = _login(anon_client, ADMIN_USERNAME, ADMIN_PASSWORD)
    assert response.status_code == 200
    assert response.get_json()['user']['username'] == ADMIN_USERNAME

    me = anon_client.get('/auth/me').get_json()['user']
    assert me['user_type'] == 'internal'

    assert anon_client.post('/auth/logout').status_code == 200
    assert anon_client.get('/auth/me').status_code == 401

    with app.app_context():
        actions = [log.action for log in ActivityLog.query.order_by(ActivityLog.id)]
        assert actions == ['login', 'logout']
        assert User.query.filter_by(username=ADMIN_USERNAME).one().last_login is not None


def test_wrong_password_is_logged(anon_client, app):
    response = _login(anon_client, ADMIN_USERNAME, 'wrong')
    assert response.status_code == 401
    assert _login(anon_client, 'nobody', 'x').status_code == 401

    with app.app_context():
        failed = ActivityLog.query.filter_by(action='login_failed').all()
        assert len(failed) == 2
        assert failed[0].status == 'failed'


def test_login_form_errors(anon_client):
    response = anon_client.post('/auth/login', json={'username': ADMIN_USERNAME})
    assert response.status_code == 400
    assert 'password' in response.get_json()['errors']


def test_inactive_user_cannot_login(anon_client, app):
    with app.app_context():
        User.query.filter_by(username=CLERK_USERNAME).one().is_active = False
        db.session.commit()

    assert _login(anon_client, CLERK_USERNAME, CLERK_PASSWORD).status_code == 403

    with app.app_context():
        failed = ActivityLog.query.filter_by(action='login_failed').one()
        assert failed.status == 'failed'
        assert CLERK_USERNAME in failed.description


def _customer_portal(app):
    with app.app_context():
        customer = make_customer(code='P1', name='پرویز')
        customer.post(EntryType.CREDIT, Decimal('250'), 'USD', 'واریز نقدی')
        customer.post(EntryType.DEBIT, Decimal('50'), 'USD', 'برداشت')
        admin_service.create_external_login('parviz', 'secret1', 'customer', customer.id)
        db.session.commit()


def test_customer_portal(anon_client, app):
    _customer_portal(app)
    response = _login(anon_client, 'parviz', 'secret1')
    assert response.status_code == 200
    assert response.get_json()['user']['login_type'] == 'customer'

    me = anon_client.get('/portal/me').get_json()
    assert me['type'] == 'customer'
    assert me['account']['code'] == 'P1'
    assert me['balances'] == {'USD': '200.00'}

    statement = anon_client.get('/portal/statement').get_json()
    assert [entry['balance'] for entry in statement['entries']] == ['200.00', '250.00']
    assert statement['exchanges'] == []

    filtered = anon_client.get('/portal/statement?type=debit').get_json()['entries']
    assert [entry['description'] for entry in filtered] == ['برداشت']


def test_partner_portal(anon_client, app):
    with app.app_context():
        partner = make_partner()
        partner.post(EntryType.CREDIT, Decimal('900'), 'AFN', 'حواله')
        admin_service.create_external_login('herat', 'secret1', 'partner', partner.id)
        db.session.commit()

    _login(anon_client, 'herat', 'secret1')
    me = anon_client.get('/portal/me').get_json()
    assert me['type'] == 'partner'
    assert me['balances'] == {'AFN': '900.00'}

    statement = anon_client.get('/portal/statement').get_json()
    assert len(statement['entries']) == 1
    assert 'exchanges' not in statement


def test_portal_user_cannot_reach_staff_pages(anon_client, app):
    _customer_portal(app)
    _login(anon_client, 'parviz', 'secret1')

    assert anon_client.get('/cashbox/balances').status_code == 403
    assert anon_client.get('/customers/').status_code == 403
    assert anon_client.get('/settings/backup').status_code == 403


def test_staff_cannot_use_portal(client, anon_client):
    assert client.get('/portal/me').status_code == 403
    assert anon_client.get('/portal/me').status_code == 401


def test_unknown_route_returns_json(client):
    response = client.get('/no-such-page')
    assert response.status_code == 404
    assert 'error' in response.get_json()
