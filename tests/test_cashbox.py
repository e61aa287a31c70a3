# -*- coding: utf-8 -*-
from decimal import Decimal
import pytest
from sarrafi import db
from sarrafi.models import SystemSettings
from sarrafi.models.constants import CashboxRequestStatus, RequestType
from sarrafi.services import cashbox_service
from sarrafi.services.errors import (WorkflowError, InvalidStateError,
                                     InsufficientBalanceError, NotFoundError)
from tests.factories import make_customer, make_bank_account, fund_cashbox, approve, reject


def test_new_request_waits_for_manager(admin):
    request = cashbox_service.create_request(admin, RequestType.DEPOSIT, '250', 'USD', reason='واریز')

    assert request.status == CashboxRequestStatus.PENDING
    assert request.serial_no.startswith('CR-')
    assert cashbox_service.get_cashbox_balances()['USD'] == Decimal('0.00')


def test_serial_numbers_are_sequential(admin):
    first = cashbox_service.create_request(admin, RequestType.DEPOSIT, 1, 'USD')
    second = cashbox_service.create_request(admin, RequestType.DEPOSIT, 1, 'USD')
    assert int(second.serial_no[-6:]) == int(first.serial_no[-6:]) + 1


def test_two_step_approval_moves_balance(admin):
    request = cashbox_service.create_request(admin, RequestType.DEPOSIT, '250', 'USD')

    cashbox_service.resolve_request(request.id, cashbox_service.APPROVE, admin)
    assert request.status == CashboxRequestStatus.PENDING_CASHBOX_APPROVAL
    assert request.manager_approved_by_id == admin.id
    assert cashbox_service.get_cashbox_balances()['USD'] == Decimal('0.00')

    cashbox_service.resolve_request(request.id, cashbox_service.APPROVE, admin)
    assert request.status == CashboxRequestStatus.APPROVED
    assert request.resolved_by == admin.name
    assert cashbox_service.get_cashbox_balances()['USD'] == Decimal('250.00')


def test_threshold_skips_manager_step(admin):
    SystemSettings.get().approval_thresholds = {'AFN': '5000'}
    db.session.flush()

    small = cashbox_service.create_request(admin, RequestType.DEPOSIT, 5000, 'AFN')
    large = cashbox_service.create_request(admin, RequestType.DEPOSIT, '5000.01', 'AFN')
    other = cashbox_service.create_request(admin, RequestType.DEPOSIT, 10, 'USD')

    assert small.status == CashboxRequestStatus.PENDING_CASHBOX_APPROVAL
    assert large.status == CashboxRequestStatus.PENDING
    assert other.status == CashboxRequestStatus.PENDING


def test_rejected_request_cannot_be_resolved_again(admin):
    request = cashbox_service.create_request(admin, RequestType.DEPOSIT, 10, 'USD')
    reject(request, admin)
    assert request.status == CashboxRequestStatus.REJECTED

    with pytest.raises(InvalidStateError):
        cashbox_service.resolve_request(request.id, cashbox_service.APPROVE, admin)


def test_withdrawal_needs_funds(admin):
    fund_cashbox(admin, 100, 'USD')
    request = cashbox_service.create_request(admin, RequestType.WITHDRAWAL, 150, 'USD')
    cashbox_service.resolve_request(request.id, cashbox_service.APPROVE, admin)

    with pytest.raises(InsufficientBalanceError):
        cashbox_service.resolve_request(request.id, cashbox_service.APPROVE, admin)
    assert request.status == CashboxRequestStatus.PENDING_CASHBOX_APPROVAL


def test_increase_balance_is_auto_approved(admin):
    request = fund_cashbox(admin, '1000', 'AFN')

    assert request.status == CashboxRequestStatus.AUTO_APPROVED
    assert request.linked_entity_id == cashbox_service.BALANCE_ADJUST
    assert cashbox_service.get_cashbox_balances()['AFN'] == Decimal('1000.00')


def test_customer_account_moves_with_approval(admin):
    customer = make_customer(code='C1', whatsapp_number='0700000000')
    request = cashbox_service.create_request(admin, RequestType.DEPOSIT, 300, 'USD',
                                             reason='واریز مشتری', customer_code='C1')
    assert customer.balance_for('USD') == Decimal('0.00')

    approve(request, admin)
    assert customer.balance_for('USD') == Decimal('300.00')


def test_unknown_customer_code(admin):
    with pytest.raises(NotFoundError):
        cashbox_service.create_request(admin, RequestType.DEPOSIT, 1, 'USD', customer_code='NOPE')


def test_invalid_amount_and_currency(admin):
    with pytest.raises(WorkflowError):
        cashbox_service.create_request(admin, RequestType.DEPOSIT, 0, 'USD')
    with pytest.raises(WorkflowError):
        cashbox_service.create_request(admin, RequestType.DEPOSIT, 10, 'GBP')


def test_bank_currency_requires_matching_account(admin):
    with pytest.raises(WorkflowError):
        cashbox_service.create_request(admin, RequestType.DEPOSIT, 10, 'IRT_BANK')

    account = make_bank_account()
    with pytest.raises(WorkflowError):
        cashbox_service.create_request(admin, RequestType.DEPOSIT, 10, 'USD', bank_account_id=account.id)

    request = cashbox_service.create_request(admin, RequestType.DEPOSIT, 10, 'IRT_BANK',
                                             bank_account_id=account.id)
    approve(request, admin)
    assert account.balance == Decimal('10.00')


def test_bank_withdrawal_checks_account_balance(admin):
    first = make_bank_account(account_number='1')
    second = make_bank_account(account_number='2')
    fund_cashbox(admin, 100, 'IRT_BANK', bank_account_id=first.id)

    request = cashbox_service.create_request(admin, RequestType.WITHDRAWAL, 50, 'IRT_BANK',
                                             bank_account_id=second.id)
    cashbox_service.resolve_request(request.id, cashbox_service.APPROVE, admin)
    with pytest.raises(InsufficientBalanceError):
        cashbox_service.resolve_request(request.id, cashbox_service.APPROVE, admin)


def test_receipt_spells_amount(admin):
    request = cashbox_service.create_request(admin, RequestType.DEPOSIT, 1500, 'USD')
    receipt = cashbox_service.receipt(request)
    assert receipt['amount_in_words'] == 'هزار و پانصد'
    assert receipt['serial_no'] == request.serial_no


def test_filter_requests(admin):
    cashbox_service.create_request(admin, RequestType.DEPOSIT, 10, 'USD', reason='کرایه دفتر')
    cashbox_service.create_request(admin, RequestType.WITHDRAWAL, 20, 'AFN', reason='معاش')

    assert cashbox_service.filter_requests(search='کرایه').count() == 1
    assert cashbox_service.filter_requests(currency='AFN').count() == 1
    assert cashbox_service.filter_requests(request_type=RequestType.DEPOSIT).count() == 1
    assert cashbox_service.filter_requests(status=CashboxRequestStatus.PENDING).count() == 2


# API

def test_create_and_resolve_over_api(client):
    response = client.post('/cashbox/requests', json={
        'request_type': 'deposit', 'amount': '۵۰۰', 'currency': 'USD', 'reason': 'واریز نقدی'
    })
    assert response.status_code == 201
    request_id = response.get_json()['request']['id']

    for expected in (CashboxRequestStatus.PENDING_CASHBOX_APPROVAL, CashboxRequestStatus.APPROVED):
        response = client.post(f'/cashbox/requests/{request_id}/resolve', json={'resolution': 'approve'})
        assert response.status_code == 200
        assert response.get_json()['request']['status'] == expected

    balances = client.get('/cashbox/balances').get_json()['balances']
    assert balances['USD'] == '500.00'

    receipt = client.get(f'/cashbox/requests/{request_id}/receipt').get_json()['receipt']
    assert receipt['amount_in_words'] == 'پانصد'


def test_create_request_validation_errors(client):
    response = client.post('/cashbox/requests', json={'request_type': 'deposit', 'currency': 'USD'})
    assert response.status_code == 400
    errors = response.get_json()['errors']
    assert 'amount' in errors
    assert 'reason' in errors


def test_bank_currency_needs_bank_account_in_form(client):
    response = client.post('/cashbox/requests', json={
        'request_type': 'deposit', 'amount': 100, 'currency': 'IRT_BANK', 'reason': 'واریز'
    })
    assert response.status_code == 400
    assert 'bank_account_id' in response.get_json()['errors']

    response = client.post('/cashbox/increase-balance', json={
        'amount': 100, 'currency': 'IRT_BANK', 'description': 'شارژ'
    })
    assert response.status_code == 400
    assert 'bank_account_id' in response.get_json()['errors']


def test_resolving_closed_request_is_rejected(client):
    response = client.post('/cashbox/increase-balance', json={
        'amount': 100, 'currency': 'USD', 'description': 'شارژ'
    })
    request_id = response.get_json()['request']['id']
    response = client.post(f'/cashbox/requests/{request_id}/resolve', json={'resolution': 'reject'})
    assert response.status_code == 400
    assert 'error' in response.get_json()


def test_search_requests(client):
    client.post('/cashbox/increase-balance', json={'amount': 100, 'currency': 'USD', 'description': 'شارژ'})
    response = client.get('/cashbox/requests?status=AutoApproved')
    assert response.status_code == 200
    assert response.get_json()['total'] == 1

    response = client.get('/cashbox/requests')
    assert response.get_json()['total'] == 1


def test_clerk_cannot_approve(clerk_client, app):
    response = clerk_client.post('/cashbox/requests', json={
        'request_type': 'deposit', 'amount': 10, 'currency': 'USD', 'reason': 'x'
    })
    assert response.status_code == 201
    request_id = response.get_json()['request']['id']

    response = clerk_client.post(f'/cashbox/requests/{request_id}/resolve', json={'resolution': 'approve'})
    assert response.status_code == 403

    response = clerk_client.post('/cashbox/increase-balance', json={
        'amount': 10, 'currency': 'USD', 'description': 'x'
    })
    assert response.status_code == 403


def test_anonymous_gets_401(anon_client):
    assert anon_client.get('/cashbox/balances').status_code == 401
    assert anon_client.post('/cashbox/requests', json={}).status_code == 401
