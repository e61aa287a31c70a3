# -*- coding: utf-8 -*-
from decimal import Decimal
import pytest
from sarrafi import db
from sarrafi.models.constants import (ForeignTransactionStatus, CommissionTransferStatus,
                                      RequestType, LinkedEntity)
from sarrafi.services import exchange_service, cashbox_service
from sarrafi.services.errors import WorkflowError, NotFoundError, InvalidStateError
from tests.factories import (make_customer, make_partner, make_bank_account, fund_cashbox,
                             approve, reject, linked_request)


def test_assets_list_cash_and_active_banks(admin):
    account = make_bank_account()
    closed = make_bank_account(account_number='99')
    closed.status = 'Inactive'
    fund_cashbox(admin, 300, 'USD')

    assets = {asset['id']: asset for asset in exchange_service.get_available_assets()}

    assert 'cashbox:IRT_BANK' not in assets
    assert assets['cashbox:USD']['balance'] == Decimal('300.00')
    assert assets[f'bank:{account.id}']['currency'] == 'IRT_BANK'
    assert f'bank:{closed.id}' not in assets


def test_resolve_asset_rejects_unknown_ids(ctx):
    with pytest.raises(NotFoundError):
        exchange_service.resolve_asset('cashbox:GBP')
    with pytest.raises(NotFoundError):
        exchange_service.resolve_asset('bank:404')
    with pytest.raises(NotFoundError):
        exchange_service.resolve_asset('vault:USD')


def test_foreign_exchange_full_flow(admin):
    account = make_bank_account()
    fund_cashbox(admin, 1000, 'USD')

    transaction = exchange_service.initiate_foreign_exchange(admin, 'cashbox:USD', 500, 'خرید تومان')
    assert transaction.status == ForeignTransactionStatus.PENDING_WITHDRAWAL_APPROVAL

    with pytest.raises(InvalidStateError):
        exchange_service.complete_foreign_exchange(admin, transaction.id, f'bank:{account.id}', 1)

    approve(linked_request(LinkedEntity.FOREIGN_TRANSACTION, transaction.id), admin)
    assert transaction.status == ForeignTransactionStatus.PENDING_DEPOSIT
    assert cashbox_service.get_cashbox_balances()['USD'] == Decimal('500.00')

    exchange_service.complete_foreign_exchange(admin, transaction.id, f'bank:{account.id}', 45000000)
    assert transaction.status == ForeignTransactionStatus.PENDING_DEPOSIT_APPROVAL
    deposit = linked_request(LinkedEntity.FOREIGN_TRANSACTION, transaction.id, RequestType.DEPOSIT)
    assert deposit.bank_account_id == account.id

    approve(deposit, admin)
    assert transaction.status == ForeignTransactionStatus.COMPLETED
    assert transaction.completed_at is not None
    assert account.balance == Decimal('45000000.00')


def test_rejected_withdrawal_closes_exchange(admin):
    fund_cashbox(admin, 1000, 'USD')
    transaction = exchange_service.initiate_foreign_exchange(admin, 'cashbox:USD', 500)
    reject(linked_request(LinkedEntity.FOREIGN_TRANSACTION, transaction.id), admin)
    assert transaction.status == ForeignTransactionStatus.REJECTED


def test_rejected_deposit_returns_to_pending_deposit(admin):
    fund_cashbox(admin, 1000, 'USD')
    transaction = exchange_service.initiate_foreign_exchange(admin, 'cashbox:USD', 500)
    approve(linked_request(LinkedEntity.FOREIGN_TRANSACTION, transaction.id), admin)

    exchange_service.complete_foreign_exchange(admin, transaction.id, 'cashbox:AFN', 35000)
    reject(linked_request(LinkedEntity.FOREIGN_TRANSACTION, transaction.id, RequestType.DEPOSIT), admin)

    assert transaction.status == ForeignTransactionStatus.PENDING_DEPOSIT
    assert transaction.to_asset_id is None
    assert transaction.to_amount is None

    # a second attempt is allowed
    exchange_service.complete_foreign_exchange(admin, transaction.id, 'cashbox:AFN', 35500)
    assert transaction.status == ForeignTransactionStatus.PENDING_DEPOSIT_APPROVAL


def test_calculate_commission():
    assert exchange_service.calculate_commission(Decimal('1000'), 2) == (Decimal('20.00'), Decimal('980.00'))
    assert exchange_service.calculate_commission(Decimal('333'), Decimal('1.5')) == (
        Decimal('5.00'), Decimal('328.00'))
    assert exchange_service.calculate_commission(Decimal('100'), 0) == (Decimal('0.00'), Decimal('100.00'))


def test_commission_transfer_flow(admin):
    customer = make_customer(code='C5')
    account = make_bank_account()

    transfer = exchange_service.log_commission_transfer(admin, 'Customer', 1000, account.id, 2,
                                                        customer_code='C5')
    assert transfer.status == CommissionTransferStatus.PENDING_DEPOSIT_APPROVAL
    assert transfer.customer_id == customer.id
    assert transfer.currency == 'IRT_BANK'

    with pytest.raises(InvalidStateError):
        exchange_service.execute_commission_transfer(admin, transfer.id, account.id, 'IR-1')

    approve(linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id), admin)
    assert transfer.status == CommissionTransferStatus.PENDING_EXECUTION
    assert account.balance == Decimal('1000.00')

    exchange_service.execute_commission_transfer(admin, transfer.id, account.id, 'IR-1')
    assert transfer.status == CommissionTransferStatus.PENDING_WITHDRAWAL_APPROVAL
    assert transfer.commission_amount == Decimal('20.00')
    payout = linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id, RequestType.WITHDRAWAL)
    assert payout.amount == Decimal('980.00')
    assert payout.destination_account_number == 'IR-1'

    approve(payout, admin)
    assert transfer.status == CommissionTransferStatus.COMPLETED
    # the commission stays in the account
    assert account.balance == Decimal('20.00')


def test_rejected_commission_payout_can_be_retried(admin):
    partner = make_partner()
    account = make_bank_account()
    transfer = exchange_service.log_commission_transfer(admin, 'Partner', 500, account.id, 1,
                                                        partner_id=partner.id)
    approve(linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id), admin)
    exchange_service.execute_commission_transfer(admin, transfer.id, account.id, 'IR-2')

    reject(linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id, RequestType.WITHDRAWAL), admin)

    assert transfer.status == CommissionTransferStatus.PENDING_EXECUTION
    assert transfer.commission_amount is None
    assert transfer.destination_account_number is None


def test_rejected_commission_deposit(admin):
    account = make_bank_account()
    make_customer(code='C5')
    transfer = exchange_service.log_commission_transfer(admin, 'Customer', 500, account.id, 1,
                                                        customer_code='C5')
    reject(linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id), admin)
    assert transfer.status == CommissionTransferStatus.REJECTED


def test_commission_at_zero_percent_pays_everything_out(admin):
    make_customer(code='C5')
    account = make_bank_account()
    transfer = exchange_service.log_commission_transfer(admin, 'Customer', 1000, account.id, 0,
                                                        customer_code='C5')
    approve(linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id), admin)

    exchange_service.execute_commission_transfer(admin, transfer.id, account.id, 'IR-3')
    assert transfer.commission_amount == Decimal('0.00')
    payout = linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id, RequestType.WITHDRAWAL)
    assert payout.amount == Decimal('1000.00')

    approve(payout, admin)
    assert transfer.status == CommissionTransferStatus.COMPLETED
    assert account.balance == Decimal('0.00')


def test_commission_at_full_percent_completes_without_payout(admin):
    make_customer(code='C5')
    account = make_bank_account()
    transfer = exchange_service.log_commission_transfer(admin, 'Customer', 1000, account.id, 100,
                                                        customer_code='C5')
    approve(linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id), admin)

    exchange_service.execute_commission_transfer(admin, transfer.id, account.id, 'IR-4')

    assert transfer.status == CommissionTransferStatus.COMPLETED
    assert transfer.completed_at is not None
    assert transfer.commission_amount == Decimal('1000.00')
    assert transfer.final_amount_paid == Decimal('0.00')
    assert linked_request(LinkedEntity.COMMISSION_TRANSFER, transfer.id, RequestType.WITHDRAWAL) is None
    assert account.balance == Decimal('1000.00')


def test_commission_transfer_validation(admin):
    account = make_bank_account()
    make_customer(code='C5')
    with pytest.raises(WorkflowError):
        exchange_service.log_commission_transfer(admin, 'Customer', 100, account.id, 150,
                                                 customer_code='C5')
    with pytest.raises(WorkflowError):
        exchange_service.log_commission_transfer(admin, 'Bank', 100, account.id, 1)
    with pytest.raises(NotFoundError):
        exchange_service.log_commission_transfer(admin, 'Customer', 100, 404, 1, customer_code='C5')


# API

def _seed(app):
    with app.app_context():
        make_customer(code='C5')
        account_id = make_bank_account().id
        db.session.commit()
    return account_id


def test_foreign_exchange_over_api(client, app):
    client.post('/cashbox/increase-balance', json={'amount': 800, 'currency': 'EUR', 'description': 'شارژ'})

    assets = client.get('/exchanges/assets').get_json()['items']
    euro = next(asset for asset in assets if asset['id'] == 'cashbox:EUR')
    assert euro['balance'] == '800.00'

    response = client.post('/exchanges/foreign', json={'from_asset_id': 'cashbox:EUR', 'from_amount': 100})
    assert response.status_code == 201
    transaction = response.get_json()['transaction']

    response = client.post(f'/exchanges/foreign/{transaction["id"]}/complete',
                           json={'to_asset_id': 'cashbox:USD', 'to_amount': 108})
    assert response.status_code == 400

    response = client.get('/exchanges/foreign?status=PendingWithdrawalApproval')
    assert response.get_json()['total'] == 1


def test_commission_transfer_over_api(client, app):
    account_id = _seed(app)

    response = client.post('/exchanges/commission', json={
        'initiator_type': 'Customer', 'amount': 1000, 'received_into_bank_account_id': account_id
    })
    assert response.status_code == 400
    assert 'customer_code' in response.get_json()['errors']

    response = client.post('/exchanges/commission', json={
        'initiator_type': 'Partner', 'amount': 1000, 'received_into_bank_account_id': account_id
    })
    assert response.status_code == 400
    assert 'partner_id' in response.get_json()['errors']

    response = client.post('/exchanges/commission', json={
        'initiator_type': 'Customer', 'customer_code': 'C5', 'amount': 1000,
        'received_into_bank_account_id': account_id, 'commission_percentage': '۲'
    })
    assert response.status_code == 201
    transfer = response.get_json()['transfer']
    assert transfer['status'] == CommissionTransferStatus.PENDING_DEPOSIT_APPROVAL

    response = client.post(f'/exchanges/commission/{transfer["id"]}/execute', json={
        'paid_from_bank_account_id': account_id, 'destination_account_number': 'IR-9'
    })
    assert response.status_code == 400

    assert client.get('/exchanges/commission').get_json()['total'] == 1


def test_clerk_has_no_exchange_access(clerk_client):
    assert clerk_client.get('/exchanges/assets').status_code == 403
