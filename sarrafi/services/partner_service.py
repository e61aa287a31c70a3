"""Partner sarrafs in other provinces and the running account we keep with each.

Convention: a credit means we owe the partner more, a debit means the
partner owes us more.
"""
import logging
from sarrafi import db
from sarrafi.models import PartnerAccount, CashboxRequest
from sarrafi.models.constants import RequestType, EntryType, LinkedEntity, CashboxRequestStatus
from sarrafi.services import cashbox_service
from sarrafi.services.cashbox_service import register_handler, validate_amount, validate_currency
from sarrafi.services.errors import WorkflowError, NotFoundError
from sarrafi.utils.ledger import build_running_ledger, ledger_row

logger = logging.getLogger(__name__)

PAY = 'pay'
RECEIVE = 'receive'


def get_partner(partner_id):
    partner = db.session.get(PartnerAccount, partner_id)
    if partner is None:
        raise NotFoundError('حساب همکار یافت نشد.')
    return partner


def get_partner_by_name(name, active_only=False):
    partner = PartnerAccount.query.filter_by(name=(name or '').strip()).first()
    if partner is None:
        raise NotFoundError(f'همکار با نام {name} یافت نشد.')
    if active_only and not partner.is_active:
        raise WorkflowError(f'حساب همکار {partner.name} غیرفعال است.')
    return partner


def create_partner(name, province, whatsapp_number=None):
    name = name.strip()
    if PartnerAccount.query.filter_by(name=name).first():
        raise WorkflowError('همکاری با این نام قبلاً ثبت شده است.')
    partner = PartnerAccount(name=name, province=province, whatsapp_number=whatsapp_number)
    db.session.add(partner)
    db.session.flush()
    logger.info('Partner created: %s (%s)', partner.name, partner.province)
    return partner


def update_partner(partner_id, name, province, whatsapp_number=None):
    partner = get_partner(partner_id)
    name = name.strip()
    clash = PartnerAccount.query.filter(PartnerAccount.name == name,
                                        PartnerAccount.id != partner.id).first()
    if clash:
        raise WorkflowError('همکاری با این نام قبلاً ثبت شده است.')
    partner.name = name
    partner.province = province
    partner.whatsapp_number = whatsapp_number
    db.session.flush()
    return partner


def deactivate_partner(partner_id):
    partner = get_partner(partner_id)
    partner.status = 'Inactive'
    db.session.flush()
    logger.info('Partner deactivated: %s', partner.name)
    return partner


def _settlement_request(user, partner, request_type, amount, currency, description,
                        bank_account_id=None, account_number=None):
    if not partner.is_active:
        raise WorkflowError(f'حساب همکار {partner.name} غیرفعال است.')
    amount = validate_amount(amount)
    validate_currency(currency)

    if request_type == RequestType.DEPOSIT:
        reason = description or f'دریافت از همکار {partner.name}'
        accounts = {'source_account_number': account_number}
    else:
        reason = description or f'پرداخت به همکار {partner.name}'
        accounts = {'destination_account_number': account_number}

    return cashbox_service.create_request(
        user, request_type, amount, currency,
        reason=reason,
        bank_account_id=bank_account_id,
        linked_entity=(LinkedEntity.PARTNER_SETTLEMENT, partner.id, reason),
        **accounts
    )


def receive_from_partner(user, partner_id, amount, currency, description=None,
                         bank_account_id=None, source_account_number=None):
    """Partner hands us money; once the cashbox approves we owe them that much more."""
    partner = get_partner(partner_id)
    return _settlement_request(user, partner, RequestType.DEPOSIT, amount, currency,
                               description, bank_account_id, source_account_number)


def pay_to_partner(user, partner_id, amount, currency, description=None,
                   bank_account_id=None, destination_account_number=None):
    partner = get_partner(partner_id)
    return _settlement_request(user, partner, RequestType.WITHDRAWAL, amount, currency,
                               description, bank_account_id, destination_account_number)


def settle_partner_balance_by_name(user, partner_name, amount, currency, settlement_type):
    partner = get_partner_by_name(partner_name, active_only=True)
    if settlement_type == PAY:
        return pay_to_partner(user, partner.id, amount, currency)
    if settlement_type == RECEIVE:
        return receive_from_partner(user, partner.id, amount, currency)
    raise WorkflowError('نوع تسویه باید pay یا receive باشد.')


def partner_statement(partner):
    """Completed ledger entries plus settlements still waiting in the cashbox."""
    rows = [ledger_row(entry) for entry in partner.transactions]

    pending = CashboxRequest.query.filter(
        CashboxRequest.linked_entity_type == LinkedEntity.PARTNER_SETTLEMENT,
        CashboxRequest.linked_entity_id == str(partner.id),
        CashboxRequest.status.in_(CashboxRequestStatus.OPEN)
    ).all()
    for request in pending:
        rows.append({
            'id': request.id,
            'timestamp': request.created_at,
            'type': EntryType.CREDIT if request.request_type == RequestType.DEPOSIT else EntryType.DEBIT,
            'description': request.reason,
            'amount': request.signed_amount,
            'currency': request.currency,
            'reference_type': 'CashboxRequest',
            'reference_id': str(request.id),
            'status': request.status,
            'is_completed': False,
        })

    return build_running_ledger(rows)


@register_handler(LinkedEntity.PARTNER_SETTLEMENT)
class PartnerSettlementHandler:

    @staticmethod
    def on_approved(request, user):
        partner = get_partner(int(request.linked_entity_id))
        entry_type = EntryType.CREDIT if request.request_type == RequestType.DEPOSIT else EntryType.DEBIT
        partner.post(entry_type, request.amount, request.currency, request.reason,
                     reference_type='CashboxRequest', reference_id=request.id)
        db.session.flush()

    @staticmethod
    def on_rejected(request, user):
        logger.info('Partner settlement %s rejected', request.serial_no)
