"""Foreign exchanges between our own assets and commission-based bank transfers.

Both flows are two cashbox legs: the first request's approval opens the
second step, and a rejected second leg returns the record to the step
before it.
"""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from sarrafi import db
from sarrafi.models import (ForeignTransaction, CommissionTransfer, BankAccount,
                            cashbox_balance)
from sarrafi.models.constants import (CURRENCIES, BANK_CURRENCY, RequestType, LinkedEntity,
                                      ForeignTransactionStatus, CommissionTransferStatus)
from sarrafi.models.mixins import CENT
from sarrafi.services import cashbox_service
from sarrafi.services.cashbox_service import register_handler, validate_amount
from sarrafi.services.customer_service import get_customer_by_code
from sarrafi.services.errors import WorkflowError, NotFoundError, InvalidStateError
from sarrafi.services.partner_service import get_partner

logger = logging.getLogger(__name__)

CASHBOX_ASSET = 'cashbox'
BANK_ASSET = 'bank'


def get_available_assets():
    """Cash per currency plus every active bank account, with current balances."""
    assets = []
    for currency in CURRENCIES:
        if currency == BANK_CURRENCY:
            continue
        assets.append({
            'id': f'{CASHBOX_ASSET}:{currency}',
            'name': f'صندوق {currency}',
            'currency': currency,
            'bank_account_id': None,
            'balance': cashbox_balance(currency),
        })
    for account in BankAccount.query.filter_by(status='Active').order_by(BankAccount.bank_name):
        assets.append({
            'id': f'{BANK_ASSET}:{account.id}',
            'name': account.label,
            'currency': account.currency,
            'bank_account_id': account.id,
            'balance': account.balance,
        })
    return assets


def resolve_asset(asset_id):
    kind, _, key = (asset_id or '').partition(':')
    if kind == CASHBOX_ASSET and key in CURRENCIES and key != BANK_CURRENCY:
        return {'id': asset_id, 'name': f'صندوق {key}', 'currency': key, 'bank_account_id': None}
    if kind == BANK_ASSET and key.isdigit():
        account = db.session.get(BankAccount, int(key))
        if account is not None and account.is_active:
            return {'id': asset_id, 'name': account.label, 'currency': account.currency,
                    'bank_account_id': account.id}
    raise NotFoundError(f'دارایی {asset_id} یافت نشد.')


def get_foreign_transaction(transaction_id):
    transaction = db.session.get(ForeignTransaction, transaction_id)
    if transaction is None:
        raise NotFoundError('تبادله یافت نشد.')
    return transaction


def initiate_foreign_exchange(user, from_asset_id, from_amount, description=None):
    asset = resolve_asset(from_asset_id)
    from_amount = validate_amount(from_amount)

    transaction = ForeignTransaction(
        description=description,
        from_asset_id=asset['id'],
        from_asset_name=asset['name'],
        from_currency=asset['currency'],
        from_amount=from_amount,
        status=ForeignTransactionStatus.PENDING_WITHDRAWAL_APPROVAL,
        created_by_id=user.id,
        created_by=user.name,
    )
    db.session.add(transaction)
    db.session.flush()

    cashbox_service.create_request(
        user, RequestType.WITHDRAWAL, from_amount, asset['currency'],
        reason=description or f'برداشت برای تبادله {transaction.id} از {asset["name"]}',
        bank_account_id=asset['bank_account_id'],
        linked_entity=(LinkedEntity.FOREIGN_TRANSACTION, transaction.id, description),
    )
    logger.info('Foreign exchange %s initiated: %s %s from %s', transaction.id,
                from_amount, asset['currency'], asset['id'])
    return transaction


def complete_foreign_exchange(user, transaction_id, to_asset_id, to_amount):
    transaction = get_foreign_transaction(transaction_id)
    if transaction.status != ForeignTransactionStatus.PENDING_DEPOSIT:
        raise InvalidStateError('این تبادله در انتظار واریز نیست.')

    asset = resolve_asset(to_asset_id)
    to_amount = validate_amount(to_amount)

    transaction.to_asset_id = asset['id']
    transaction.to_asset_name = asset['name']
    transaction.to_currency = asset['currency']
    transaction.to_amount = to_amount
    transaction.status = ForeignTransactionStatus.PENDING_DEPOSIT_APPROVAL
    db.session.flush()

    cashbox_service.create_request(
        user, RequestType.DEPOSIT, to_amount, asset['currency'],
        reason=f'واریز تبادله {transaction.id} به {asset["name"]}',
        bank_account_id=asset['bank_account_id'],
        linked_entity=(LinkedEntity.FOREIGN_TRANSACTION, transaction.id, transaction.description),
    )
    logger.info('Foreign exchange %s deposit leg: %s %s to %s', transaction.id,
                to_amount, asset['currency'], asset['id'])
    return transaction


@register_handler(LinkedEntity.FOREIGN_TRANSACTION)
class ForeignTransactionHandler:

    @staticmethod
    def on_approved(request, user):
        transaction = get_foreign_transaction(int(request.linked_entity_id))
        if request.request_type == RequestType.WITHDRAWAL:
            transaction.status = ForeignTransactionStatus.PENDING_DEPOSIT
        else:
            transaction.status = ForeignTransactionStatus.COMPLETED
            transaction.completed_at = datetime.utcnow()
        db.session.flush()

    @staticmethod
    def on_rejected(request, user):
        transaction = get_foreign_transaction(int(request.linked_entity_id))
        if request.request_type == RequestType.WITHDRAWAL:
            transaction.status = ForeignTransactionStatus.REJECTED
        else:
            transaction.clear_deposit_leg()
            transaction.status = ForeignTransactionStatus.PENDING_DEPOSIT
        db.session.flush()


def get_commission_transfer(transfer_id):
    transfer = db.session.get(CommissionTransfer, transfer_id)
    if transfer is None:
        raise NotFoundError('انتقال کمیشنی یافت نشد.')
    return transfer


def _percentage(value):
    try:
        value = Decimal(str(value))
    except InvalidOperation:
        raise WorkflowError('درصد کمیشن نامعتبر است.')
    if value < 0 or value > 100:
        raise WorkflowError('درصد کمیشن باید بین ۰ و ۱۰۰ باشد.')
    return value


def calculate_commission(amount, percentage):
    """Return (commission, amount paid onward), both rounded to cents."""
    commission = (Decimal(str(amount)) * Decimal(str(percentage)) / 100).quantize(CENT, rounding=ROUND_HALF_UP)
    return commission, Decimal(str(amount)) - commission


def log_commission_transfer(user, initiator_type, amount, received_into_bank_account_id,
                            commission_percentage, source_account_number=None,
                            customer_code=None, partner_id=None):
    """Record money arriving in our bank account on someone's behalf."""
    amount = validate_amount(amount)
    percentage = _percentage(commission_percentage)

    customer = partner = None
    if initiator_type == 'Customer':
        customer = get_customer_by_code(customer_code)
    elif initiator_type == 'Partner':
        partner = get_partner(partner_id)
    else:
        raise WorkflowError('نوع درخواست کننده باید Customer یا Partner باشد.')

    account = db.session.get(BankAccount, int(received_into_bank_account_id))
    if account is None:
        raise NotFoundError('حساب بانکی یافت نشد.')

    transfer = CommissionTransfer(
        initiator_type=initiator_type,
        customer_id=customer.id if customer else None,
        partner_id=partner.id if partner else None,
        amount=amount,
        currency=account.currency,
        commission_percentage=percentage,
        source_account_number=source_account_number,
        received_into_bank_account_id=account.id,
        status=CommissionTransferStatus.PENDING_DEPOSIT_APPROVAL,
        created_by_id=user.id,
        created_by=user.name,
    )
    db.session.add(transfer)
    db.session.flush()

    initiator = customer.name if customer else partner.name
    cashbox_service.create_request(
        user, RequestType.DEPOSIT, amount, account.currency,
        reason=f'دریافت انتقال کمیشنی {transfer.id} از {initiator}',
        bank_account_id=account.id,
        source_account_number=source_account_number,
        linked_entity=(LinkedEntity.COMMISSION_TRANSFER, transfer.id, initiator),
    )
    logger.info('Commission transfer %s logged: %s %s into %s', transfer.id, amount,
                account.currency, account.label)
    return transfer


def execute_commission_transfer(user, transfer_id, paid_from_bank_account_id,
                                destination_account_number):
    transfer = get_commission_transfer(transfer_id)
    if transfer.status != CommissionTransferStatus.PENDING_EXECUTION:
        raise InvalidStateError('این انتقال آماده اجرا نیست.')

    commission, paid = calculate_commission(transfer.amount, transfer.commission_percentage)

    transfer.commission_amount = commission
    transfer.final_amount_paid = paid
    transfer.paid_from_bank_account_id = int(paid_from_bank_account_id)
    transfer.destination_account_number = destination_account_number

    # Whole amount kept as commission: nothing leaves the bank account
    if paid <= 0:
        transfer.status = CommissionTransferStatus.COMPLETED
        transfer.completed_at = datetime.utcnow()
        db.session.flush()
        logger.info('Commission transfer %s completed with nothing to pay out', transfer.id)
        return transfer

    transfer.status = CommissionTransferStatus.PENDING_WITHDRAWAL_APPROVAL
    db.session.flush()

    cashbox_service.create_request(
        user, RequestType.WITHDRAWAL, paid, transfer.currency,
        reason=f'پرداخت انتقال کمیشنی {transfer.id} به {destination_account_number}',
        bank_account_id=paid_from_bank_account_id,
        destination_account_number=destination_account_number,
        linked_entity=(LinkedEntity.COMMISSION_TRANSFER, transfer.id, transfer.initiator_name),
    )
    logger.info('Commission transfer %s executing: paid %s, commission %s', transfer.id,
                paid, commission)
    return transfer


@register_handler(LinkedEntity.COMMISSION_TRANSFER)
class CommissionTransferHandler:

    @staticmethod
    def on_approved(request, user):
        transfer = get_commission_transfer(int(request.linked_entity_id))
        if request.request_type == RequestType.DEPOSIT:
            transfer.status = CommissionTransferStatus.PENDING_EXECUTION
        else:
            transfer.status = CommissionTransferStatus.COMPLETED
            transfer.completed_at = datetime.utcnow()
        db.session.flush()

    @staticmethod
    def on_rejected(request, user):
        transfer = get_commission_transfer(int(request.linked_entity_id))
        if request.request_type == RequestType.DEPOSIT:
            transfer.status = CommissionTransferStatus.REJECTED
        else:
            transfer.commission_amount = None
            transfer.final_amount_paid = None
            transfer.paid_from_bank_account_id = None
            transfer.destination_account_number = None
            transfer.status = CommissionTransferStatus.PENDING_EXECUTION
        db.session.flush()
