"""Customer accounts, book transfers between them and in-account currency exchange."""
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from flask import current_app
from sarrafi import db
from sarrafi.models import Customer, AccountTransfer, InternalExchange, CashboxRequest
from sarrafi.models.constants import EntryType, AccountTransferStatus, CashboxRequestStatus
from sarrafi.services.cashbox_service import validate_amount, validate_currency
from sarrafi.services.errors import WorkflowError, NotFoundError, InvalidStateError, InsufficientBalanceError
from sarrafi.utils.ledger import build_running_ledger, ledger_row, cashbox_row

logger = logging.getLogger(__name__)


def get_customer(customer_id):
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError('مشتری یافت نشد.')
    return customer


def get_customer_by_code(code):
    customer = Customer.query.filter_by(code=(code or '').strip()).first()
    if customer is None:
        raise NotFoundError(f'مشتری با کد {code} یافت نشد.')
    return customer


def find_customers(query):
    like = f'%{query.strip()}%'
    return Customer.query.filter(db.or_(
        Customer.code.like(like),
        Customer.name.like(like)
    )).order_by(Customer.name).all()


def create_customer(code, name, whatsapp_number=None):
    code = code.strip()
    if Customer.query.filter_by(code=code).first():
        raise WorkflowError('مشتری با این کد قبلاً ثبت شده است.')
    customer = Customer(code=code, name=name.strip(), whatsapp_number=whatsapp_number)
    db.session.add(customer)
    db.session.flush()
    logger.info('Customer created: %s - %s', customer.code, customer.name)
    return customer


def update_customer(customer_id, name, whatsapp_number=None):
    customer = get_customer(customer_id)
    customer.name = name.strip()
    customer.whatsapp_number = whatsapp_number
    db.session.flush()
    return customer


def get_suspense_customer():
    code = current_app.config['SUSPENSE_ACCOUNT_CODE']
    customer = Customer.query.filter_by(code=code).first()
    if customer is None:
        customer = Customer(code=code, name='حساب معلق')
        db.session.add(customer)
        db.session.flush()
        logger.info('Suspense customer %s created', code)
    return customer


def customer_statement(customer):
    """Ledger entries plus the customer's cashbox requests still awaiting approval."""
    rows = [ledger_row(entry) for entry in customer.transactions]

    pending = CashboxRequest.query.filter(
        CashboxRequest.customer_id == customer.id,
        CashboxRequest.status.in_(CashboxRequestStatus.OPEN)
    ).all()
    for request in pending:
        row = cashbox_row(request)
        row['type'] = EntryType.CREDIT if request.signed_amount > 0 else EntryType.DEBIT
        rows.append(row)

    return build_running_ledger(rows)


def create_account_transfer(user, from_customer_code, amount, currency, description=None,
                            to_customer_code=None, is_pending_assignment=False):
    """Move money from one customer account to another.

    With ``is_pending_assignment`` the money waits in the suspense account
    until the real receiver is known.
    """
    amount = validate_amount(amount)
    validate_currency(currency)
    sender = get_customer_by_code(from_customer_code)

    if is_pending_assignment:
        receiver = get_suspense_customer()
        status = AccountTransferStatus.PENDING_ASSIGNMENT
    else:
        if not to_customer_code:
            raise WorkflowError('کد مشتری دریافت کننده الزامی است.')
        receiver = get_customer_by_code(to_customer_code)
        status = AccountTransferStatus.COMPLETED

    if sender.id == receiver.id:
        raise WorkflowError('انتقال به همان حساب ممکن نیست.')

    transfer = AccountTransfer(
        from_customer_id=sender.id,
        to_customer_id=receiver.id,
        amount=amount,
        currency=currency,
        description=description,
        status=status,
        created_by_id=user.id,
    )
    db.session.add(transfer)
    db.session.flush()

    text = description or f'انتقال از {sender.code} به {receiver.code}'
    sender.post(EntryType.DEBIT, amount, currency, text,
                reference_type='AccountTransfer', reference_id=transfer.id)
    receiver.post(EntryType.CREDIT, amount, currency, text,
                  reference_type='AccountTransfer', reference_id=transfer.id)
    db.session.flush()

    logger.info('Account transfer %s: %s -> %s %s %s [%s]', transfer.id, sender.code,
                receiver.code, amount, currency, status)
    return transfer


def reassign_pending_transfer(user, transfer_id, final_customer_code):
    transfer = db.session.get(AccountTransfer, transfer_id)
    if transfer is None:
        raise NotFoundError('انتقال یافت نشد.')
    if transfer.status != AccountTransferStatus.PENDING_ASSIGNMENT:
        raise InvalidStateError('این انتقال در انتظار تعیین دریافت کننده نیست.')

    final_customer = get_customer_by_code(final_customer_code)
    suspense = transfer.to_customer
    if final_customer.id == suspense.id:
        raise WorkflowError('دریافت کننده نهایی نمی تواند حساب معلق باشد.')

    text = f'تخصیص انتقال {transfer.id} به {final_customer.code}'
    suspense.post(EntryType.DEBIT, transfer.amount, transfer.currency, text,
                  reference_type='AccountTransfer', reference_id=transfer.id)
    final_customer.post(EntryType.CREDIT, transfer.amount, transfer.currency, text,
                        reference_type='AccountTransfer', reference_id=transfer.id)

    transfer.final_customer_id = final_customer.id
    transfer.status = AccountTransferStatus.COMPLETED
    transfer.assigned_at = datetime.utcnow()
    db.session.flush()

    logger.info('Account transfer %s assigned to %s by %s', transfer.id,
                final_customer.code, user.username)
    return transfer


def perform_internal_customer_exchange(user, customer_id, from_currency, from_amount,
                                       to_currency, to_amount, rate):
    """Convert part of a customer's balance from one currency to another."""
    customer = get_customer(customer_id)
    validate_currency(from_currency)
    validate_currency(to_currency)
    if from_currency == to_currency:
        raise WorkflowError('ارز مبدا و مقصد باید متفاوت باشند.')

    from_amount = validate_amount(from_amount)
    to_amount = validate_amount(to_amount)
    try:
        rate = Decimal(str(rate))
    except InvalidOperation:
        raise WorkflowError('نرخ تبادله نامعتبر است.')
    if rate <= 0:
        raise WorkflowError('نرخ تبادله باید بیشتر از صفر باشد.')

    available = customer.balance_for(from_currency)
    if available < from_amount:
        raise InsufficientBalanceError(
            f'موجودی {from_currency} مشتری کافی نیست. موجودی: {available}')

    exchange = InternalExchange(
        customer_id=customer.id,
        from_currency=from_currency,
        from_amount=from_amount,
        to_currency=to_currency,
        to_amount=to_amount,
        rate=rate,
        created_by_id=user.id,
    )
    db.session.add(exchange)
    db.session.flush()

    text = f'تبادله {from_amount} {from_currency} به {to_amount} {to_currency} (نرخ {rate})'
    customer.post(EntryType.DEBIT, from_amount, from_currency, text,
                  reference_type='InternalExchange', reference_id=exchange.id)
    customer.post(EntryType.CREDIT, to_amount, to_currency, text,
                  reference_type='InternalExchange', reference_id=exchange.id)
    db.session.flush()

    logger.info('Internal exchange %s for %s: %s %s -> %s %s', exchange.id, customer.code,
                from_amount, from_currency, to_amount, to_currency)
    return exchange
