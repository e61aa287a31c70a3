"""Office expenses and amanat (money held in trust)."""
import logging
from datetime import datetime
from sarrafi import db
from sarrafi.models import Expense, Amanat
from sarrafi.models.constants import (RequestType, LinkedEntity, ExpenseStatus, AmanatStatus,
                                      EXPENSE_CATEGORIES)
from sarrafi.services import cashbox_service
from sarrafi.services.cashbox_service import register_handler, validate_amount, validate_currency
from sarrafi.services.errors import WorkflowError, NotFoundError, InvalidStateError

logger = logging.getLogger(__name__)


def create_expense(user, category, amount, currency, description=None, bank_account_id=None):
    if category not in EXPENSE_CATEGORIES:
        raise WorkflowError('دسته مصرف نامعتبر است.')
    amount = validate_amount(amount)
    validate_currency(currency)

    expense = Expense(
        category=category,
        amount=amount,
        currency=currency,
        description=description,
        bank_account_id=bank_account_id,
        status=ExpenseStatus.PENDING_APPROVAL,
        created_by_id=user.id,
        created_by=user.name,
    )
    db.session.add(expense)
    db.session.flush()

    cashbox_service.create_request(
        user, RequestType.WITHDRAWAL, amount, currency,
        reason=f'مصرف ({category}): {description or ""}'.strip(),
        bank_account_id=bank_account_id,
        linked_entity=(LinkedEntity.EXPENSE, expense.id, category),
    )
    logger.info('Expense %s created: %s %s %s', expense.id, category, amount, currency)
    return expense


def _get_expense(expense_id):
    expense = db.session.get(Expense, expense_id)
    if expense is None:
        raise NotFoundError('مصرف یافت نشد.')
    return expense


@register_handler(LinkedEntity.EXPENSE)
class ExpenseHandler:

    @staticmethod
    def on_approved(request, user):
        _get_expense(int(request.linked_entity_id)).status = ExpenseStatus.APPROVED
        db.session.flush()

    @staticmethod
    def on_rejected(request, user):
        _get_expense(int(request.linked_entity_id)).status = ExpenseStatus.REJECTED
        db.session.flush()


def get_amanat(amanat_id):
    amanat = db.session.get(Amanat, amanat_id)
    if amanat is None:
        raise NotFoundError('امانت یافت نشد.')
    return amanat


def create_amanat(user, customer_name, amount, currency, notes=None, bank_account_id=None):
    amount = validate_amount(amount)
    validate_currency(currency)

    amanat = Amanat(
        customer_name=customer_name,
        amount=amount,
        currency=currency,
        notes=notes,
        bank_account_id=bank_account_id,
        status=AmanatStatus.PENDING_DEPOSIT,
        created_by_id=user.id,
        created_by=user.name,
    )
    db.session.add(amanat)
    db.session.flush()

    cashbox_service.create_request(
        user, RequestType.DEPOSIT, amount, currency,
        reason=f'دریافت امانت از {customer_name}',
        bank_account_id=bank_account_id,
        linked_entity=(LinkedEntity.AMANAT, amanat.id, customer_name),
    )
    logger.info('Amanat %s created for %s: %s %s', amanat.id, customer_name, amount, currency)
    return amanat


def return_amanat(user, amanat_id):
    amanat = get_amanat(amanat_id)
    if amanat.status != AmanatStatus.ACTIVE:
        raise InvalidStateError('فقط امانت فعال قابل بازگشت است.')

    amanat.status = AmanatStatus.PENDING_RETURN
    db.session.flush()

    cashbox_service.create_request(
        user, RequestType.WITHDRAWAL, amanat.amount, amanat.currency,
        reason=f'بازگشت امانت به {amanat.customer_name}',
        bank_account_id=amanat.bank_account_id,
        linked_entity=(LinkedEntity.AMANAT, amanat.id, amanat.customer_name),
    )
    return amanat


@register_handler(LinkedEntity.AMANAT)
class AmanatHandler:

    @staticmethod
    def on_approved(request, user):
        amanat = get_amanat(int(request.linked_entity_id))
        if request.request_type == RequestType.DEPOSIT:
            amanat.status = AmanatStatus.ACTIVE
        else:
            amanat.status = AmanatStatus.RETURNED
            amanat.returned_at = datetime.utcnow()
        db.session.flush()

    @staticmethod
    def on_rejected(request, user):
        amanat = get_amanat(int(request.linked_entity_id))
        if request.request_type == RequestType.DEPOSIT:
            amanat.status = AmanatStatus.REJECTED
        else:
            amanat.status = AmanatStatus.ACTIVE
        db.session.flush()
