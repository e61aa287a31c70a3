from datetime import datetime
from decimal import Decimal
from sarrafi import db
from sarrafi.models.constants import TransferStatus, AccountTransferStatus
from sarrafi.models.mixins import SerializerMixin, SerialNumberMixin

class DomesticTransfer(SerialNumberMixin, SerializerMixin, db.Model):
    """Hawala between us and a partner sarraf in another province.

    Outgoing: our customer (or a walk-in) pays here, the partner pays out there.
    Incoming: the partner took the money there, we pay the receiver here.
    """
    __tablename__ = 'domestic_transfers'
    serial_prefix = 'DT'

    id = db.Column(db.Integer, primary_key=True)
    serial_no = db.Column(db.String(30), unique=True, nullable=False, index=True)

    direction = db.Column(db.String(10), nullable=False, default='outgoing')  # outgoing, incoming

    sender_name = db.Column(db.String(150), nullable=False)
    sender_tazkereh = db.Column(db.String(50))
    receiver_name = db.Column(db.String(150), nullable=False)
    receiver_tazkereh = db.Column(db.String(50))

    amount = db.Column(db.Numeric(18, 2), nullable=False)
    commission = db.Column(db.Numeric(18, 2), nullable=False, default=Decimal('0.00'))
    currency = db.Column(db.String(10), nullable=False)

    destination_province = db.Column(db.String(50))
    partner_id = db.Column(db.Integer, db.ForeignKey('partner_accounts.id'), nullable=False)
    partner_sarraf = db.Column(db.String(150), nullable=False)
    partner_reference = db.Column(db.String(50), index=True)

    is_cash_payment = db.Column(db.Boolean, default=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'))

    status = db.Column(db.String(20), nullable=False, default=TransferStatus.UNEXECUTED, index=True)
    history = db.Column(db.JSON, nullable=False, default=list)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    partner = db.relationship('PartnerAccount', backref=db.backref('domestic_transfers', lazy='dynamic'))
    customer = db.relationship('Customer')

    @property
    def is_incoming(self):
        return self.direction == 'incoming'

    @property
    def total_charged(self):
        return self.amount + (self.commission or Decimal('0.00'))

    def set_status(self, status, user):
        """Change status and append the change to the history"""
        self.history = list(self.history or []) + [{
            'status': status,
            'previous': self.status,
            'user': user.username if user else 'system',
            'timestamp': datetime.utcnow().isoformat(),
        }]
        self.status = status

    def to_dict(self):
        data = super().to_dict()
        data['customer_code'] = self.customer.code if self.customer else None
        return data

    def __repr__(self):
        return f'<DomesticTransfer {self.serial_no} {self.direction} {self.amount} {self.currency} [{self.status}]>'


class AccountTransfer(SerializerMixin, db.Model):
    """Book transfer between two customer accounts; no cash moves."""
    __tablename__ = 'account_transfers'

    id = db.Column(db.Integer, primary_key=True)
    from_customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    to_customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    final_customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'))

    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text)

    status = db.Column(db.String(20), nullable=False, default=AccountTransferStatus.COMPLETED)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    assigned_at = db.Column(db.DateTime)

    from_customer = db.relationship('Customer', foreign_keys=[from_customer_id])
    to_customer = db.relationship('Customer', foreign_keys=[to_customer_id])
    final_customer = db.relationship('Customer', foreign_keys=[final_customer_id])

    def to_dict(self):
        data = super().to_dict()
        data['from_customer_code'] = self.from_customer.code if self.from_customer else None
        data['to_customer_code'] = self.to_customer.code if self.to_customer else None
        data['final_customer_code'] = self.final_customer.code if self.final_customer else None
        return data

    def __repr__(self):
        return f'<AccountTransfer {self.id} {self.amount} {self.currency} [{self.status}]>'
