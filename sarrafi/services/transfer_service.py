"""Domestic transfers (hawala) settled through partner sarrafs."""
import logging
from sarrafi import db
from sarrafi.models import DomesticTransfer
from sarrafi.models.constants import RequestType, EntryType, LinkedEntity, TransferStatus
from sarrafi.models.mixins import money
from sarrafi.services import cashbox_service
from sarrafi.services.cashbox_service import register_handler, validate_amount, validate_currency
from sarrafi.services.customer_service import get_customer_by_code
from sarrafi.services.errors import WorkflowError, NotFoundError, InvalidStateError
from sarrafi.services.partner_service import get_partner_by_name
from sarrafi.utils.notifications import send_whatsapp_notification

logger = logging.getLogger(__name__)

OUTGOING = 'outgoing'
INCOMING = 'incoming'


def get_transfer(transfer_id):
    transfer = db.session.get(DomesticTransfer, transfer_id)
    if transfer is None:
        raise NotFoundError('حواله یافت نشد.')
    return transfer


def create_domestic_transfer(user, sender_name, receiver_name, amount, currency, partner_name,
                             commission=0, sender_tazkereh=None, receiver_tazkereh=None,
                             destination_province=None, partner_reference=None,
                             is_cash_payment=True, customer_code=None, bank_account_id=None):
    """Register a hawala.

    With ``partner_reference`` it is incoming: the partner already collected
    the money and we pay the receiver later. Otherwise it is outgoing and
    the sender pays us, in cash or from a customer account.
    """
    amount = validate_amount(amount)
    validate_currency(currency)
    partner = get_partner_by_name(partner_name, active_only=True)

    direction = INCOMING if partner_reference else OUTGOING
    commission = money(commission) if direction == OUTGOING else money(0)
    if commission < 0:
        raise WorkflowError('کمیشن نمی تواند منفی باشد.')

    customer = None
    if direction == OUTGOING and not is_cash_payment:
        if not customer_code:
            raise WorkflowError('برای پرداخت از حساب، کد مشتری الزامی است.')
        customer = get_customer_by_code(customer_code)

    transfer = DomesticTransfer(
        direction=direction,
        sender_name=sender_name,
        sender_tazkereh=sender_tazkereh,
        receiver_name=receiver_name,
        receiver_tazkereh=receiver_tazkereh,
        amount=amount,
        commission=commission,
        currency=currency,
        destination_province=destination_province or partner.province,
        partner_id=partner.id,
        partner_sarraf=partner.name,
        partner_reference=partner_reference,
        is_cash_payment=direction == INCOMING or bool(is_cash_payment),
        customer_id=customer.id if customer else None,
        status=None,
        history=[],
        created_by_id=user.id,
        created_by=user.name,
    )
    transfer.generate_serial_no()

    if direction == OUTGOING and transfer.is_cash_payment:
        transfer.set_status(TransferStatus.PENDING_CASHBOX, user)
    else:
        transfer.set_status(TransferStatus.UNEXECUTED, user)

    db.session.add(transfer)
    db.session.flush()

    if direction == OUTGOING:
        total = transfer.total_charged
        if transfer.is_cash_payment:
            cashbox_service.create_request(
                user, RequestType.DEPOSIT, total, currency,
                reason=f'دریافت وجه حواله {transfer.serial_no} از {sender_name}',
                bank_account_id=bank_account_id,
                linked_entity=(LinkedEntity.DOMESTIC_TRANSFER, transfer.id, transfer.serial_no),
            )
        else:
            customer.post(EntryType.DEBIT, total, currency,
                          f'حواله {transfer.serial_no} به {receiver_name}',
                          reference_type='DomesticTransfer', reference_id=transfer.id)
            partner.post(EntryType.CREDIT, amount, currency,
                         f'حواله {transfer.serial_no} به {receiver_name}',
                         reference_type='DomesticTransfer', reference_id=transfer.id)
            db.session.flush()
            _notify_partner(transfer)

    logger.info('Domestic transfer %s created: %s %s %s via %s [%s]', transfer.serial_no,
                direction, amount, currency, partner.name, transfer.status)
    return transfer


def _notify_partner(transfer):
    send_whatsapp_notification(
        transfer.partner.whatsapp_number,
        f'حواله {transfer.serial_no}: مبلغ {transfer.amount} {transfer.currency} '
        f'به {transfer.receiver_name} پرداخت شود.'
    )


def update_transfer_status(user, transfer_id, new_status):
    """Execute or cancel an Unexecuted transfer."""
    transfer = get_transfer(transfer_id)
    if transfer.status != TransferStatus.UNEXECUTED:
        raise InvalidStateError(f'وضعیت حواله {transfer.serial_no} قابل تغییر نیست.')

    if new_status == TransferStatus.EXECUTED:
        if transfer.is_incoming:
            raise WorkflowError('حواله ورودی باید از طریق پرداخت صندوق اجرا شود.')
        transfer.set_status(TransferStatus.EXECUTED, user)

    elif new_status == TransferStatus.CANCELLED:
        if not transfer.is_incoming:
            _reverse_outgoing(transfer, user)
        transfer.set_status(TransferStatus.CANCELLED, user)

    else:
        raise WorkflowError(f'وضعیت {new_status} برای حواله مجاز نیست.')

    db.session.flush()
    logger.info('Domestic transfer %s -> %s by %s', transfer.serial_no, new_status, user.username)
    return transfer


def _reverse_outgoing(transfer, user):
    text = f'لغو حواله {transfer.serial_no}'
    transfer.partner.post(EntryType.DEBIT, transfer.amount, transfer.currency, text,
                          reference_type='DomesticTransfer', reference_id=transfer.id)

    total = transfer.total_charged
    if transfer.customer_id:
        transfer.customer.post(EntryType.CREDIT, total, transfer.currency, text,
                               reference_type='DomesticTransfer', reference_id=transfer.id)
    else:
        cashbox_service.create_request(
            user, RequestType.WITHDRAWAL, total, transfer.currency,
            reason=f'بازپرداخت حواله لغو شده {transfer.serial_no} به {transfer.sender_name}',
            linked_entity=(LinkedEntity.DOMESTIC_TRANSFER_REFUND, transfer.id, transfer.serial_no),
        )


def find_transfers(query):
    """Incoming transfers waiting for payout that match a number, reference, tazkereh or name."""
    query = (query or '').strip()
    if not query:
        return []
    return DomesticTransfer.query.filter(
        DomesticTransfer.direction == INCOMING,
        DomesticTransfer.status == TransferStatus.UNEXECUTED,
        db.or_(
            DomesticTransfer.serial_no == query,
            DomesticTransfer.partner_reference == query,
            DomesticTransfer.receiver_tazkereh == query,
            DomesticTransfer.receiver_name.like(f'%{query}%')
        )
    ).order_by(DomesticTransfer.created_at.desc()).all()


def payout_incoming_transfer(user, transfer_id, bank_account_id=None):
    transfer = get_transfer(transfer_id)
    if not transfer.is_incoming:
        raise WorkflowError('فقط حواله های ورودی قابل پرداخت هستند.')
    if transfer.status != TransferStatus.UNEXECUTED:
        raise InvalidStateError(f'حواله {transfer.serial_no} آماده پرداخت نیست.')

    request = cashbox_service.create_request(
        user, RequestType.WITHDRAWAL, transfer.amount, transfer.currency,
        reason=f'پرداخت حواله {transfer.serial_no} به {transfer.receiver_name}',
        bank_account_id=bank_account_id,
        linked_entity=(LinkedEntity.DOMESTIC_TRANSFER, transfer.id, transfer.serial_no),
    )
    transfer.set_status(TransferStatus.PENDING_CASHBOX, user)
    db.session.flush()
    return transfer, request


def filter_transfers(search=None, status=None, direction=None, currency=None):
    query = DomesticTransfer.query
    if search:
        like = f'%{search}%'
        query = query.filter(db.or_(
            DomesticTransfer.serial_no.like(like),
            DomesticTransfer.sender_name.like(like),
            DomesticTransfer.receiver_name.like(like),
            DomesticTransfer.partner_sarraf.like(like)
        ))
    if status:
        query = query.filter_by(status=status)
    if direction:
        query = query.filter_by(direction=direction)
    if currency:
        query = query.filter_by(currency=currency)
    return query.order_by(DomesticTransfer.created_at.desc())


@register_handler(LinkedEntity.DOMESTIC_TRANSFER)
class DomesticTransferHandler:

    @staticmethod
    def on_approved(request, user):
        transfer = get_transfer(int(request.linked_entity_id))
        text = f'حواله {transfer.serial_no}'
        if transfer.is_incoming:
            # paid out here; the partner collected it there
            transfer.partner.post(EntryType.DEBIT, transfer.amount, transfer.currency, text,
                                  reference_type='DomesticTransfer', reference_id=transfer.id)
            transfer.set_status(TransferStatus.EXECUTED, user)
        else:
            transfer.partner.post(EntryType.CREDIT, transfer.amount, transfer.currency, text,
                                  reference_type='DomesticTransfer', reference_id=transfer.id)
            transfer.set_status(TransferStatus.UNEXECUTED, user)
            _notify_partner(transfer)
        db.session.flush()

    @staticmethod
    def on_rejected(request, user):
        transfer = get_transfer(int(request.linked_entity_id))
        if transfer.is_incoming:
            transfer.set_status(TransferStatus.UNEXECUTED, user)
        else:
            transfer.set_status(TransferStatus.REJECTED_BY_CASHBOX, user)
        db.session.flush()


@register_handler(LinkedEntity.DOMESTIC_TRANSFER_REFUND)
class DomesticTransferRefundHandler:

    @staticmethod
    def on_approved(request, user):
        logger.info('Refund %s paid for cancelled transfer %s', request.serial_no,
                    request.linked_entity_description)

    @staticmethod
    def on_rejected(request, user):
        logger.warning('Refund %s for cancelled transfer %s was rejected', request.serial_no,
                       request.linked_entity_description)
