# -*- coding: utf-8 -*-
from decimal import Decimal
import pytest
from sarrafi import db
from sarrafi.models import CashboxRequest, DomesticTransfer
from sarrafi.models.constants import (TransferStatus, CashboxRequestStatus, RequestType,
                                      LinkedEntity)
from sarrafi.services import transfer_service, partner_service
from sarrafi.services.errors import WorkflowError, InvalidStateError, NotFoundError
from tests.factories import (make_customer, make_partner, fund_cashbox, approve, reject,
                             linked_request)


def _outgoing(user, **overrides):
    data = dict(sender_name='کریم', receiver_name='نادر', amount=1000, currency='USD',
                partner_name='صرافی هرات', commission=20)
    data.update(overrides)
    return transfer_service.create_domestic_transfer(user, **data)


def test_cash_outgoing_waits_for_cashbox(admin):
    partner = make_partner()
    transfer = _outgoing(admin)

    assert transfer.direction == transfer_service.OUTGOING
    assert transfer.status == TransferStatus.PENDING_CASHBOX
    assert transfer.serial_no.startswith('DT-')
    assert transfer.destination_province == partner.province

    request = linked_request(LinkedEntity.DOMESTIC_TRANSFER, transfer.id)
    assert request.request_type == RequestType.DEPOSIT
    assert request.amount == Decimal('1020.00')
    assert partner.balance_for('USD') == Decimal('0.00')


def test_cash_outgoing_approved_credits_partner(admin):
    partner = make_partner()
    transfer = _outgoing(admin)
    approve(linked_request(LinkedEntity.DOMESTIC_TRANSFER, transfer.id), admin)

    assert transfer.status == TransferStatus.UNEXECUTED
    # we owe the partner the amount they will pay out
    assert partner.balance_for('USD') == Decimal('1000.00')
    assert [step['status'] for step in transfer.history] == [
        TransferStatus.PENDING_CASHBOX, TransferStatus.UNEXECUTED]

    transfer_service.update_transfer_status(admin, transfer.id, TransferStatus.EXECUTED)
    assert transfer.status == TransferStatus.EXECUTED


def test_cash_outgoing_rejected_by_cashbox(admin):
    partner = make_partner()
    transfer = _outgoing(admin)
    reject(linked_request(LinkedEntity.DOMESTIC_TRANSFER, transfer.id), admin)

    assert transfer.status == TransferStatus.REJECTED_BY_CASHBOX
    assert partner.balance_for('USD') == Decimal('0.00')


def test_cancelling_cash_transfer_refunds_total(admin):
    partner = make_partner()
    transfer = _outgoing(admin)
    approve(linked_request(LinkedEntity.DOMESTIC_TRANSFER, transfer.id), admin)

    transfer_service.update_transfer_status(admin, transfer.id, TransferStatus.CANCELLED)

    assert transfer.status == TransferStatus.CANCELLED
    assert partner.balance_for('USD') == Decimal('0.00')
    refund = linked_request(LinkedEntity.DOMESTIC_TRANSFER_REFUND, transfer.id)
    assert refund.request_type == RequestType.WITHDRAWAL
    assert refund.amount == Decimal('1020.00')

    approve(refund, admin)
    assert refund.status == CashboxRequestStatus.APPROVED


def test_account_paid_transfer_posts_immediately(admin):
    partner = make_partner()
    customer = make_customer(code='C7')
    transfer = _outgoing(admin, is_cash_payment=False, customer_code='C7')

    assert transfer.status == TransferStatus.UNEXECUTED
    assert transfer.customer_id == customer.id
    # customers may go negative on account-paid transfers
    assert customer.balance_for('USD') == Decimal('-1020.00')
    assert partner.balance_for('USD') == Decimal('1000.00')
    assert linked_request(LinkedEntity.DOMESTIC_TRANSFER, transfer.id) is None


def test_cancelling_account_paid_transfer_credits_customer(admin):
    partner = make_partner()
    customer = make_customer(code='C7')
    transfer = _outgoing(admin, is_cash_payment=False, customer_code='C7')

    transfer_service.update_transfer_status(admin, transfer.id, TransferStatus.CANCELLED)

    assert customer.balance_for('USD') == Decimal('0.00')
    assert partner.balance_for('USD') == Decimal('0.00')
    assert linked_request(LinkedEntity.DOMESTIC_TRANSFER_REFUND, transfer.id) is None


def test_account_paid_transfer_requires_customer(admin):
    make_partner()
    with pytest.raises(WorkflowError):
        _outgoing(admin, is_cash_payment=False)


def test_inactive_or_unknown_partner(admin):
    partner = make_partner()
    partner_service.deactivate_partner(partner.id)

    with pytest.raises(WorkflowError):
        _outgoing(admin)
    with pytest.raises(NotFoundError):
        _outgoing(admin, partner_name='ناشناس')


def test_incoming_transfer_payout(admin):
    partner = make_partner()
    fund_cashbox(admin, 5000, 'USD')
    transfer = _outgoing(admin, partner_reference='HR-77', receiver_tazkereh='T-1')

    assert transfer.direction == transfer_service.INCOMING
    assert transfer.commission == Decimal('0.00')
    assert transfer.status == TransferStatus.UNEXECUTED
    assert transfer_service.find_transfers('HR-77') == [transfer]
    assert transfer_service.find_transfers('T-1') == [transfer]
    assert transfer_service.find_transfers('') == []

    transfer, request = transfer_service.payout_incoming_transfer(admin, transfer.id)
    assert transfer.status == TransferStatus.PENDING_CASHBOX
    assert request.request_type == RequestType.WITHDRAWAL
    assert transfer_service.find_transfers('HR-77') == []

    approve(request, admin)
    assert transfer.status == TransferStatus.EXECUTED
    # partner collected it, so they now owe us
    assert partner.balance_for('USD') == Decimal('-1000.00')


def test_rejected_payout_returns_to_unexecuted(admin):
    make_partner()
    transfer = _outgoing(admin, partner_reference='HR-78')
    transfer, request = transfer_service.payout_incoming_transfer(admin, transfer.id)
    reject(request, admin)

    assert transfer.status == TransferStatus.UNEXECUTED
    with pytest.raises(WorkflowError):
        transfer_service.update_transfer_status(admin, transfer.id, 'Bogus')
    with pytest.raises(WorkflowError):
        transfer_service.update_transfer_status(admin, transfer.id, TransferStatus.EXECUTED)


def test_status_change_only_from_unexecuted(admin):
    make_partner()
    transfer = _outgoing(admin)
    with pytest.raises(InvalidStateError):
        transfer_service.update_transfer_status(admin, transfer.id, TransferStatus.EXECUTED)


def test_payout_rejects_outgoing(admin):
    make_partner()
    transfer = _outgoing(admin)
    with pytest.raises(WorkflowError):
        transfer_service.payout_incoming_transfer(admin, transfer.id)


def test_filter_transfers(admin):
    make_partner()
    _outgoing(admin, sender_name='جمیله')
    _outgoing(admin, partner_reference='R1')

    assert transfer_service.filter_transfers(search='جمیله').count() == 1
    assert transfer_service.filter_transfers(direction='incoming').count() == 1
    assert transfer_service.filter_transfers(status=TransferStatus.PENDING_CASHBOX).count() == 1


# API

def _seed_partner(app):
    with app.app_context():
        make_partner()
        db.session.commit()


def test_create_transfer_over_api(client, app):
    _seed_partner(app)
    response = client.post('/transfers/', json={
        'sender_name': 'کریم', 'receiver_name': 'نادر', 'amount': '۱۰۰۰',
        'commission': '10', 'currency': 'USD', 'partner_sarraf': 'صرافی هرات'
    })
    assert response.status_code == 201
    transfer = response.get_json()['transfer']
    assert transfer['status'] == TransferStatus.PENDING_CASHBOX
    assert transfer['is_cash_payment'] is True

    response = client.get('/transfers/?direction=outgoing')
    assert response.get_json()['total'] == 1

    with app.app_context():
        assert CashboxRequest.query.count() == 1


def test_account_payment_needs_customer_code(client, app):
    _seed_partner(app)
    response = client.post('/transfers/', json={
        'sender_name': 'کریم', 'receiver_name': 'نادر', 'amount': 100,
        'currency': 'USD', 'partner_sarraf': 'صرافی هرات', 'is_cash_payment': False
    })
    assert response.status_code == 400
    assert 'customer_code' in response.get_json()['errors']


def test_unknown_partner_over_api(client):
    response = client.post('/transfers/', json={
        'sender_name': 'کریم', 'receiver_name': 'نادر', 'amount': 100,
        'currency': 'USD', 'partner_sarraf': 'ناشناس'
    })
    assert response.status_code == 404


def test_search_and_payout_over_api(client, app):
    _seed_partner(app)
    response = client.post('/transfers/', json={
        'sender_name': 'کریم', 'receiver_name': 'نادر', 'amount': 100, 'currency': 'USD',
        'partner_sarraf': 'صرافی هرات', 'partner_reference': 'HR-1'
    })
    transfer_id = response.get_json()['transfer']['id']

    items = client.get('/transfers/search?q=HR-1').get_json()['items']
    assert [item['id'] for item in items] == [transfer_id]

    response = client.post(f'/transfers/{transfer_id}/payout', json={})
    assert response.status_code == 200
    assert response.get_json()['transfer']['status'] == TransferStatus.PENDING_CASHBOX

    response = client.post(f'/transfers/{transfer_id}/status', json={'status': TransferStatus.CANCELLED})
    assert response.status_code == 400

    with app.app_context():
        assert db.session.get(DomesticTransfer, transfer_id).status == TransferStatus.PENDING_CASHBOX


def test_clerk_cannot_change_status(clerk_client, app):
    _seed_partner(app)
    response = clerk_client.post('/transfers/', json={
        'sender_name': 'کریم', 'receiver_name': 'نادر', 'amount': 100,
        'currency': 'USD', 'partner_sarraf': 'صرافی هرات'
    })
    assert response.status_code == 201
    transfer_id = response.get_json()['transfer']['id']

    response = clerk_client.post(f'/transfers/{transfer_id}/status', json={'status': TransferStatus.CANCELLED})
    assert response.status_code == 403
