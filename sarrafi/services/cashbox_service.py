"""Cashbox requests: creation, two-step approval and balance effects.

Every operation that moves physical money (cash or one of our bank
accounts) goes through a CashboxRequest. Business modules register a
handler for their linked entity type; resolving the request calls the
handler so the owning record can advance.

Functions here add and flush but never commit; the calling view owns
the transaction.
"""
import logging
from datetime import datetime
from sarrafi import db
from sarrafi.models import (CashboxRequest, BankAccount, Customer, SystemSettings,
                            cashbox_balances, cashbox_balance, bank_account_balance)
from sarrafi.models.constants import (CURRENCIES, BANK_CURRENCY, RequestType,
                                      CashboxRequestStatus, EntryType, LinkedEntity)
from sarrafi.models.mixins import money
from sarrafi.services.errors import (WorkflowError, NotFoundError, InvalidStateError,
                                     InsufficientBalanceError)
from sarrafi.utils.ledger import apply_date_range
from sarrafi.utils.notifications import send_whatsapp_notification
from sarrafi.utils.numbers import number_to_words

logger = logging.getLogger(__name__)

APPROVE = 'approve'
REJECT = 'reject'
BALANCE_ADJUST = 'BALANCE_ADJUST'

_handlers = {}


def register_handler(entity_type):
    """Class decorator: the class provides on_approved(request, user) and
    on_rejected(request, user) for requests linked to ``entity_type``."""
    def decorator(handler):
        _handlers[entity_type] = handler
        return handler
    return decorator


def get_handler(entity_type):
    return _handlers.get(entity_type)


def validate_amount(amount):
    value = money(amount)
    if value <= 0:
        raise WorkflowError('مبلغ باید بیشتر از صفر باشد.')
    return value


def validate_currency(currency):
    if currency not in CURRENCIES:
        raise WorkflowError(f'واحد پول نامعتبر است: {currency}')
    return currency


def get_request(request_id):
    request = db.session.get(CashboxRequest, request_id)
    if request is None:
        raise NotFoundError('درخواست صندوق یافت نشد.')
    return request


def _resolve_bank_account(bank_account_id, currency):
    if not bank_account_id:
        if currency == BANK_CURRENCY:
            raise WorkflowError('برای تومان بانکی انتخاب حساب بانکی الزامی است.')
        return None

    account = db.session.get(BankAccount, int(bank_account_id))
    if account is None:
        raise NotFoundError('حساب بانکی یافت نشد.')
    if not account.is_active:
        raise WorkflowError('حساب بانکی غیرفعال است.')
    if account.currency != currency:
        raise WorkflowError('واحد پول درخواست با واحد پول حساب بانکی مطابقت ندارد.')
    return account


def _check_funds(request):
    available = cashbox_balance(request.currency)
    if available < request.amount:
        raise InsufficientBalanceError(
            f'موجودی صندوق کافی نیست. موجودی {request.currency}: {available}')

    if request.bank_account_id:
        available = bank_account_balance(request.bank_account_id)
        if available < request.amount:
            raise InsufficientBalanceError(
                f'موجودی حساب بانکی کافی نیست. موجودی: {available}')


def create_request(user, request_type, amount, currency, reason='', customer_code=None,
                   bank_account_id=None, source_account_number=None,
                   destination_account_number=None, linked_entity=None, auto_approve=False):
    """Create a deposit or withdrawal request.

    ``linked_entity`` is a (type, id, description) tuple. Auto-approved
    requests take effect immediately; otherwise amounts at or below the
    currency's approval threshold skip the manager step.
    """
    if request_type not in RequestType.ALL:
        raise WorkflowError('نوع درخواست نامعتبر است.')
    amount = validate_amount(amount)
    validate_currency(currency)

    customer = None
    if customer_code:
        customer = Customer.query.filter_by(code=customer_code).first()
        if customer is None:
            raise NotFoundError(f'مشتری با کد {customer_code} یافت نشد.')

    account = _resolve_bank_account(bank_account_id, currency)

    request = CashboxRequest(
        request_type=request_type,
        amount=amount,
        currency=currency,
        reason=reason or '',
        requested_by_id=user.id,
        requested_by=user.name,
        customer_id=customer.id if customer else None,
        bank_account_id=account.id if account else None,
        source_account_number=source_account_number,
        destination_account_number=destination_account_number,
    )
    if linked_entity:
        request.link(*linked_entity)

    request.generate_serial_no()

    if auto_approve:
        if request_type == RequestType.WITHDRAWAL:
            _check_funds(request)
        request.status = CashboxRequestStatus.AUTO_APPROVED
        request.resolved_by_id = user.id
        request.resolved_by = user.name
        request.resolved_at = datetime.utcnow()
    else:
        threshold = SystemSettings.get().threshold_for(currency)
        if threshold is not None and amount <= threshold:
            request.status = CashboxRequestStatus.PENDING_CASHBOX_APPROVAL
        else:
            request.status = CashboxRequestStatus.PENDING

    db.session.add(request)
    db.session.flush()

    logger.info('Cashbox request %s created: %s %s %s [%s]', request.serial_no,
                request_type, amount, currency, request.status)

    if request.is_effective:
        _apply_effects(request, user)

    return request


def resolve_request(request_id, resolution, user):
    """Advance a request one step: manager approval, cashier approval or rejection."""
    if resolution not in (APPROVE, REJECT):
        raise WorkflowError('نتیجه بررسی نامعتبر است.')

    request = get_request(request_id)
    if not request.is_open:
        raise InvalidStateError(f'درخواست {request.serial_no} در وضعیت {request.status} قابل بررسی نیست.')

    now = datetime.utcnow()

    if resolution == REJECT:
        request.status = CashboxRequestStatus.REJECTED
        request.resolved_by_id = user.id
        request.resolved_by = user.name
        request.resolved_at = now
        db.session.flush()
        _dispatch(request, 'on_rejected', user)
        logger.info('Cashbox request %s rejected by %s', request.serial_no, user.username)
        return request

    if request.status == CashboxRequestStatus.PENDING:
        request.status = CashboxRequestStatus.PENDING_CASHBOX_APPROVAL
        request.manager_approved_by_id = user.id
        request.manager_approved_at = now
        db.session.flush()
        logger.info('Cashbox request %s approved by manager %s', request.serial_no, user.username)
        return request

    if request.request_type == RequestType.WITHDRAWAL:
        _check_funds(request)

    request.status = CashboxRequestStatus.APPROVED
    request.resolved_by_id = user.id
    request.resolved_by = user.name
    request.resolved_at = now
    db.session.flush()

    _apply_effects(request, user)
    logger.info('Cashbox request %s approved by %s', request.serial_no, user.username)
    return request


def _apply_effects(request, user):
    if request.customer_id:
        customer = db.session.get(Customer, request.customer_id)
        entry_type = EntryType.CREDIT if request.request_type == RequestType.DEPOSIT else EntryType.DEBIT
        customer.post(entry_type, request.amount, request.currency,
                      request.reason or f'درخواست صندوق {request.serial_no}',
                      reference_type='CashboxRequest', reference_id=request.id)
        db.session.flush()

        verb = 'واریز' if request.request_type == RequestType.DEPOSIT else 'برداشت'
        send_whatsapp_notification(
            customer.whatsapp_number,
            f'{customer.name} عزیز، مبلغ {request.amount} {request.currency} از حساب شما {verb} شد. '
            f'شماره درخواست: {request.serial_no}'
        )

    _dispatch(request, 'on_approved', user)


def _dispatch(request, hook, user):
    if not request.linked_entity_type:
        return
    handler = get_handler(request.linked_entity_type)
    if handler is None:
        if request.linked_entity_type != LinkedEntity.MANUAL:
            logger.warning('No handler for linked entity %s on %s',
                           request.linked_entity_type, request.serial_no)
        return
    getattr(handler, hook)(request, user)


def increase_cashbox_balance(user, amount, currency, description, bank_account_id=None,
                             source_account_number=None):
    """Record money put into the cashbox directly, without approval."""
    return create_request(
        user, RequestType.DEPOSIT, amount, currency,
        reason=description,
        bank_account_id=bank_account_id,
        source_account_number=source_account_number,
        linked_entity=(LinkedEntity.MANUAL, BALANCE_ADJUST, description),
        auto_approve=True,
    )


def get_cashbox_balances():
    balances = {currency: money(0) for currency in CURRENCIES}
    balances.update(cashbox_balances())
    return balances


def filter_requests(search=None, requested_by=None, request_type=None, status=None,
                    currency=None, start_date=None, end_date=None):
    query = CashboxRequest.query

    if search:
        like = f'%{search}%'
        query = query.filter(db.or_(
            CashboxRequest.reason.like(like),
            CashboxRequest.serial_no.like(like)
        ))

    if requested_by:
        query = query.filter(CashboxRequest.requested_by.like(f'%{requested_by}%'))

    if request_type:
        query = query.filter_by(request_type=request_type)

    if status:
        query = query.filter_by(status=status)

    if currency:
        query = query.filter_by(currency=currency)

    query = apply_date_range(query, CashboxRequest.created_at, start_date, end_date)
    return query.order_by(CashboxRequest.created_at.desc(), CashboxRequest.id.desc())


def receipt(request):
    data = request.to_dict()
    data['amount_in_words'] = number_to_words(request.amount)
    data['bank_account'] = request.bank_account.label if request.bank_account else None
    return data
