# -*- coding: utf-8 -*-
from decimal import Decimal
import pytest
from sarrafi import db
from sarrafi.models import User, Role, Customer, SystemSettings
from sarrafi.models.constants import RequestType
from sarrafi.services import admin_service, backup_service, cashbox_service
from sarrafi.services.errors import WorkflowError, NotFoundError
from tests.factories import make_customer, make_partner


def test_create_user_checks_username(ctx):
    user = admin_service.create_user('cashier1', 'secret1', 'صندوقدار')
    assert user.check_password('secret1')
    assert not user.is_superuser

    with pytest.raises(WorkflowError):
        admin_service.create_user('cashier1', 'secret1', 'دوم')
    with pytest.raises(NotFoundError):
        admin_service.create_user('cashier2', 'secret1', 'سوم', role_id=404)


def test_portal_usernames_share_namespace_with_staff(ctx):
    customer = make_customer()
    with pytest.raises(WorkflowError):
        admin_service.create_external_login('admin', 'secret1', 'customer', customer.id)

    admin_service.create_external_login('c100', 'secret1', 'customer', customer.id)
    with pytest.raises(WorkflowError):
        admin_service.create_user('c100', 'secret1', 'کارمند')


def test_external_login_needs_linked_entity(ctx):
    with pytest.raises(NotFoundError):
        admin_service.create_external_login('p1', 'secret1', 'partner', 404)
    with pytest.raises(WorkflowError):
        admin_service.create_external_login('p1', 'secret1', 'bank', 1)

    partner = make_partner()
    login = admin_service.create_external_login('p1', 'secret1', 'partner', partner.id)
    assert login.entity.id == partner.id
    assert login.get_id() == f'ext:{login.id}'
    assert not login.has_permission('cashbox', 'view')


def test_users_cannot_delete_themselves(admin, clerk):
    with pytest.raises(WorkflowError):
        admin_service.delete_user(admin.id, admin)
    admin_service.delete_user(clerk.id, admin)
    assert User.query.filter_by(username='clerk').first() is None


def test_user_with_history_is_deactivated_not_deleted(admin, clerk):
    request = cashbox_service.create_request(clerk, RequestType.DEPOSIT, 50, 'USD', reason='واریز')

    user, deleted = admin_service.delete_user(clerk.id, admin)

    assert deleted is False
    assert user.is_active is False
    assert db.session.get(User, request.requested_by_id) is not None


def test_role_permissions_are_cleaned(ctx):
    role = admin_service.create_role('auditor', permissions={
        'reports': {'view': True, 'delete': 'yes'},
        'rockets': {'launch': True},
    })
    assert role.allows('reports', 'view')
    assert not role.allows('reports', 'delete')
    assert 'rockets' not in role.permissions

    with pytest.raises(WorkflowError):
        admin_service.create_role('broken', permissions=['reports'])


def test_role_in_use_cannot_be_deleted(ctx):
    role = Role.query.filter_by(name='clerk').one()
    with pytest.raises(WorkflowError):
        admin_service.delete_role(role.id)

    spare = admin_service.create_role('spare')
    admin_service.delete_role(spare.id)
    assert Role.query.filter_by(name='spare').first() is None


def test_update_thresholds(ctx):
    settings = admin_service.update_thresholds({'USD': '1000', 'AFN': '', 'EUR': 0})
    assert settings.approval_thresholds == {'USD': '1000', 'EUR': '0'}
    assert SystemSettings.get().threshold_for('USD') == Decimal('1000')

    with pytest.raises(WorkflowError):
        admin_service.update_thresholds({'GBP': '10'})
    with pytest.raises(WorkflowError):
        admin_service.update_thresholds({'USD': '-1'})
    with pytest.raises(WorkflowError):
        admin_service.update_thresholds({'USD': 'lots'})


def test_backup_round_trip(ctx):
    make_customer(code='KEEP')
    db.session.flush()
    state = backup_service.dump_state()
    assert state['version'] == backup_service.BACKUP_VERSION
    assert [row['code'] for row in state['tables']['customers']] == ['KEEP']

    make_customer(code='DROP')
    counts = backup_service.restore_state(state)

    assert counts['customers'] == 1
    assert counts['users'] == 2
    codes = [customer.code for customer in Customer.query.all()]
    assert codes == ['KEEP']


def test_restore_rejects_bad_payloads(ctx):
    with pytest.raises(WorkflowError):
        backup_service.restore_state(None)
    with pytest.raises(WorkflowError):
        backup_service.restore_state({'tables': {'rockets': []}})


# API

def test_user_endpoints(client, app):
    response = client.post('/settings/users', json={
        'username': 'cashier1', 'name': 'صندوقدار', 'password': 'secret1', 'is_superuser': True
    })
    assert response.status_code == 201
    user = response.get_json()['user']
    assert user['is_superuser'] is True
    assert 'password_hash' not in user

    response = client.put(f'/settings/users/{user["id"]}', json={'name': 'صندوقدار اول', 'is_active': False})
    assert response.status_code == 200
    assert response.get_json()['user']['is_active'] is False

    with app.app_context():
        admin_id = User.query.filter_by(username='admin').one().id
    assert client.delete(f'/settings/users/{admin_id}').status_code == 400
    response = client.delete(f'/settings/users/{user["id"]}')
    assert response.status_code == 200
    assert response.get_json()['deleted'] is True


def test_role_endpoints(client):
    response = client.post('/settings/roles', json={
        'name': 'cashier', 'permissions': {'cashbox': {'view': True, 'approve': True}}
    })
    assert response.status_code == 201
    role = response.get_json()['role']
    assert role['permissions']['cashbox']['approve'] is True

    response = client.put(f'/settings/roles/{role["id"]}', json={'name': 'cashier', 'permissions': {}})
    assert response.get_json()['role']['permissions']['cashbox']['approve'] is False

    names = [item['name'] for item in client.get('/settings/roles').get_json()['items']]
    assert names == ['cashier', 'clerk']
    assert client.delete(f'/settings/roles/{role["id"]}').status_code == 200


def test_external_login_endpoints(client, app):
    with app.app_context():
        customer_id = make_customer().id
        db.session.commit()

    response = client.post('/settings/external-logins', json={
        'username': 'c100', 'password': 'secret1', 'login_type': 'customer', 'linked_entity_id': customer_id
    })
    assert response.status_code == 201
    login = response.get_json()['login']
    assert login['entity_name'] == 'احمد'

    assert len(client.get('/settings/external-logins').get_json()['items']) == 1
    assert client.delete(f'/settings/external-logins/{login["id"]}').status_code == 200


def test_threshold_endpoints(client):
    response = client.put('/settings/thresholds', json={'thresholds': {'USD': '500'}})
    assert response.status_code == 200
    assert client.get('/settings/thresholds').get_json()['thresholds'] == {'USD': '500'}

    response = client.post('/cashbox/requests', json={
        'request_type': 'deposit', 'amount': 400, 'currency': 'USD', 'reason': 'کوچک'
    })
    assert response.get_json()['request']['status'] == 'PendingCashboxApproval'

    assert client.put('/settings/thresholds', json={'thresholds': {'XYZ': '1'}}).status_code == 400


def test_backup_and_restore_endpoints(client):
    client.post('/customers/', json={'code': 'KEEP', 'name': 'نگه'})
    backup = client.get('/settings/backup').get_json()
    client.post('/customers/', json={'code': 'DROP', 'name': 'حذف'})

    response = client.post('/settings/restore', json=backup)
    assert response.status_code == 200
    assert response.get_json()['counts']['customers'] == 1

    codes = [item['code'] for item in client.get('/customers/').get_json()['items']]
    assert codes == ['KEEP']

    activity = client.get('/activity').get_json()['items']
    assert activity[0]['action'] == 'restore'

    assert client.post('/settings/restore', json={'tables': 'x'}).status_code == 400


def test_settings_need_permissions(clerk_client):
    assert clerk_client.get('/settings/users').status_code == 403
    assert clerk_client.get('/settings/backup').status_code == 403
    assert clerk_client.post('/settings/restore', json={}).status_code == 403
