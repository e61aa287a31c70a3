# -*- coding: utf-8 -*-
from decimal import Decimal
import pytest
from sarrafi import db
from sarrafi.models import User
from sarrafi.models.constants import ExpenseStatus, AmanatStatus, LinkedEntity, RequestType
from sarrafi.services import expense_service, cashbox_service
from sarrafi.services.errors import WorkflowError, InvalidStateError, NotFoundError
from tests.factories import ADMIN_USERNAME, fund_cashbox, approve, reject, linked_request


def test_expense_waits_for_cashbox(admin):
    fund_cashbox(admin, 1000, 'AFN')
    expense = expense_service.create_expense(admin, 'Rent', 400, 'AFN', 'کرایه دفتر')

    assert expense.status == ExpenseStatus.PENDING_APPROVAL
    request = linked_request(LinkedEntity.EXPENSE, expense.id)
    assert request.request_type == RequestType.WITHDRAWAL

    approve(request, admin)
    assert expense.status == ExpenseStatus.APPROVED
    assert cashbox_service.get_cashbox_balances()['AFN'] == Decimal('600.00')


def test_rejected_expense(admin):
    expense = expense_service.create_expense(admin, 'Salary', 400, 'AFN')
    reject(linked_request(LinkedEntity.EXPENSE, expense.id), admin)
    assert expense.status == ExpenseStatus.REJECTED


def test_expense_category_must_be_known(admin):
    with pytest.raises(WorkflowError):
        expense_service.create_expense(admin, 'Travel', 10, 'USD')


def test_amanat_lifecycle(admin):
    amanat = expense_service.create_amanat(admin, 'حاجی رحیم', 2000, 'USD', notes='تا عید')
    assert amanat.status == AmanatStatus.PENDING_DEPOSIT

    approve(linked_request(LinkedEntity.AMANAT, amanat.id), admin)
    assert amanat.status == AmanatStatus.ACTIVE
    assert cashbox_service.get_cashbox_balances()['USD'] == Decimal('2000.00')

    expense_service.return_amanat(admin, amanat.id)
    assert amanat.status == AmanatStatus.PENDING_RETURN
    with pytest.raises(InvalidStateError):
        expense_service.return_amanat(admin, amanat.id)

    payback = linked_request(LinkedEntity.AMANAT, amanat.id, RequestType.WITHDRAWAL)
    assert payback.amount == Decimal('2000.00')
    approve(payback, admin)

    assert amanat.status == AmanatStatus.RETURNED
    assert amanat.returned_at is not None
    assert cashbox_service.get_cashbox_balances()['USD'] == Decimal('0.00')


def test_rejected_return_keeps_amanat_active(admin):
    amanat = expense_service.create_amanat(admin, 'حاجی رحیم', 500, 'USD')
    approve(linked_request(LinkedEntity.AMANAT, amanat.id), admin)
    expense_service.return_amanat(admin, amanat.id)

    reject(linked_request(LinkedEntity.AMANAT, amanat.id, RequestType.WITHDRAWAL), admin)
    assert amanat.status == AmanatStatus.ACTIVE


def test_rejected_deposit_rejects_amanat(admin):
    amanat = expense_service.create_amanat(admin, 'حاجی رحیم', 500, 'USD')
    reject(linked_request(LinkedEntity.AMANAT, amanat.id), admin)

    assert amanat.status == AmanatStatus.REJECTED
    with pytest.raises(InvalidStateError):
        expense_service.return_amanat(admin, amanat.id)


def test_unknown_amanat(admin):
    with pytest.raises(NotFoundError):
        expense_service.return_amanat(admin, 404)


# API

def test_expense_endpoints(client):
    response = client.post('/expenses', json={'category': 'Travel', 'amount': 10, 'currency': 'USD'})
    assert response.status_code == 400
    assert 'category' in response.get_json()['errors']

    response = client.post('/expenses', json={
        'category': 'Utilities', 'amount': '۲۵۰', 'currency': 'AFN', 'description': 'برق'
    })
    assert response.status_code == 201
    assert response.get_json()['expense']['status'] == ExpenseStatus.PENDING_APPROVAL

    assert client.get('/expenses?category=Utilities').get_json()['total'] == 1
    assert client.get('/expenses?category=Rent').get_json()['total'] == 0


def test_amanat_endpoints(client, app):
    response = client.post('/amanat', json={'customer_name': 'حاجی رحیم', 'amount': 300, 'currency': 'USD'})
    assert response.status_code == 201
    amanat_id = response.get_json()['amanat']['id']

    response = client.post(f'/amanat/{amanat_id}/return', json={})
    assert response.status_code == 400

    with app.app_context():
        admin = User.query.filter_by(username=ADMIN_USERNAME).one()
        approve(linked_request(LinkedEntity.AMANAT, amanat_id), admin)
        db.session.commit()

    response = client.post(f'/amanat/{amanat_id}/return', json={})
    assert response.status_code == 200
    assert response.get_json()['amanat']['status'] == AmanatStatus.PENDING_RETURN
    assert client.get('/amanat?status=PendingReturn').get_json()['total'] == 1


def test_clerk_cannot_log_expenses(clerk_client):
    response = clerk_client.post('/expenses', json={'category': 'Rent', 'amount': 10, 'currency': 'USD'})
    assert response.status_code == 403
