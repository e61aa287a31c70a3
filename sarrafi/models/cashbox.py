from datetime import datetime
from sqlalchemy import case, func
from sarrafi import db
from sarrafi.models.constants import CashboxRequestStatus, RequestType
from sarrafi.models.mixins import SerializerMixin, SerialNumberMixin, money

class CashboxRequest(SerialNumberMixin, SerializerMixin, db.Model):
    """A single movement of money through the cashbox (cash or one of our bank accounts).

    Every business operation that touches physical money produces one of
    these; the linked entity fields point back at the operation so that
    resolving the request can advance it.
    """
    __tablename__ = 'cashbox_requests'
    serial_prefix = 'CR'

    id = db.Column(db.Integer, primary_key=True)
    serial_no = db.Column(db.String(30), unique=True, nullable=False, index=True)

    request_type = db.Column(db.String(10), nullable=False)  # deposit, withdrawal
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    reason = db.Column(db.Text, nullable=False, default='')

    status = db.Column(db.String(30), nullable=False, default=CashboxRequestStatus.PENDING, index=True)

    # Who asked
    requested_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    requested_by = db.Column(db.String(100), nullable=False)

    # Optional customer whose account moves with the cash
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'))

    # Bank side (IRT_BANK and other bank-held currencies)
    bank_account_id = db.Column(db.Integer, db.ForeignKey('bank_accounts.id'))
    source_account_number = db.Column(db.String(50))
    destination_account_number = db.Column(db.String(50))

    # Business operation this request belongs to
    linked_entity_type = db.Column(db.String(40))
    linked_entity_id = db.Column(db.String(40))
    linked_entity_description = db.Column(db.Text)

    # Approval trail
    manager_approved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    manager_approved_at = db.Column(db.DateTime)
    resolved_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    resolved_by = db.Column(db.String(100))
    resolved_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    customer = db.relationship('Customer')
    bank_account = db.relationship('BankAccount', backref=db.backref('requests', lazy='dynamic'))

    @property
    def is_effective(self):
        return self.status in CashboxRequestStatus.EFFECTIVE

    @property
    def is_open(self):
        return self.status in CashboxRequestStatus.OPEN

    @property
    def signed_amount(self):
        return self.amount if self.request_type == RequestType.DEPOSIT else -self.amount

    def link(self, entity_type, entity_id, description=None):
        self.linked_entity_type = entity_type
        self.linked_entity_id = str(entity_id)
        self.linked_entity_description = description

    def to_dict(self):
        data = super().to_dict()
        data['customer_code'] = self.customer.code if self.customer else None
        data['linked_entity'] = {
            'type': self.linked_entity_type,
            'id': self.linked_entity_id,
            'description': self.linked_entity_description,
        } if self.linked_entity_type else None
        return data

    def __repr__(self):
        return f'<CashboxRequest {self.serial_no} {self.request_type} {self.amount} {self.currency} [{self.status}]>'


def _effective_signed_sum():
    return func.sum(case(
        (CashboxRequest.request_type == RequestType.DEPOSIT, CashboxRequest.amount),
        else_=-CashboxRequest.amount
    ))


def cashbox_balances():
    """Current balance per currency: approved deposits minus approved withdrawals."""
    rows = db.session.query(
        CashboxRequest.currency, _effective_signed_sum()
    ).filter(
        CashboxRequest.status.in_(CashboxRequestStatus.EFFECTIVE)
    ).group_by(CashboxRequest.currency).all()
    return {currency: money(total) for currency, total in rows}


def cashbox_balance(currency):
    total = db.session.query(_effective_signed_sum()).filter(
        CashboxRequest.currency == currency,
        CashboxRequest.status.in_(CashboxRequestStatus.EFFECTIVE)
    ).scalar()
    return money(total)


def bank_account_balance(bank_account_id):
    total = db.session.query(_effective_signed_sum()).filter(
        CashboxRequest.bank_account_id == bank_account_id,
        CashboxRequest.status.in_(CashboxRequestStatus.EFFECTIVE)
    ).scalar()
    return money(total)
