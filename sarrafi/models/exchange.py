from datetime import datetime
from sarrafi import db
from sarrafi.models.constants import ForeignTransactionStatus, CommissionTransferStatus, BANK_CURRENCY
from sarrafi.models.mixins import SerializerMixin

class ForeignTransaction(SerializerMixin, db.Model):
    """Two-legged exchange: money leaves one asset, later arrives in another."""
    __tablename__ = 'foreign_transactions'

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.Text)

    from_asset_id = db.Column(db.String(40), nullable=False)
    from_asset_name = db.Column(db.String(200))
    from_currency = db.Column(db.String(10), nullable=False)
    from_amount = db.Column(db.Numeric(18, 2), nullable=False)

    to_asset_id = db.Column(db.String(40))
    to_asset_name = db.Column(db.String(200))
    to_currency = db.Column(db.String(10))
    to_amount = db.Column(db.Numeric(18, 2))

    status = db.Column(db.String(30), nullable=False,
                       default=ForeignTransactionStatus.PENDING_WITHDRAWAL_APPROVAL, index=True)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_by = db.Column(db.String(100))
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    completed_at = db.Column(db.DateTime)

    def clear_deposit_leg(self):
        self.to_asset_id = None
        self.to_asset_name = None
        self.to_currency = None
        self.to_amount = None

    def __repr__(self):
        return f'<ForeignTransaction {self.id} {self.from_amount} {self.from_currency} [{self.status}]>'


class CommissionTransfer(SerializerMixin, db.Model):
    """Money received into our bank account and paid onward, minus our commission."""
    __tablename__ = 'commission_transfers'

    id = db.Column(db.Integer, primary_key=True)

    initiator_type = db.Column(db.String(10), nullable=False)  # Customer, Partner
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'))
    partner_id = db.Column(db.Integer, db.ForeignKey('partner_accounts.id'))

    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False, default=BANK_CURRENCY)
    commission_percentage = db.Column(db.Numeric(5, 2), nullable=False)
    commission_amount = db.Column(db.Numeric(18, 2))
    final_amount_paid = db.Column(db.Numeric(18, 2))

    source_account_number = db.Column(db.String(50))
    received_into_bank_account_id = db.Column(db.Integer, db.ForeignKey('bank_accounts.id'), nullable=False)
    paid_from_bank_account_id = db.Column(db.Integer, db.ForeignKey('bank_accounts.id'))
    destination_account_number = db.Column(db.String(50))

    status = db.Column(db.String(30), nullable=False,
                       default=CommissionTransferStatus.PENDING_DEPOSIT_APPROVAL, index=True)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    completed_at = db.Column(db.DateTime)

    customer = db.relationship('Customer')
    partner = db.relationship('PartnerAccount')

    @property
    def initiator_name(self):
        initiator = self.customer if self.initiator_type == 'Customer' else self.partner
        return initiator.name if initiator else None

    def to_dict(self):
        data = super().to_dict()
        data['initiator_name'] = self.initiator_name
        return data

    def __repr__(self):
        return f'<CommissionTransfer {self.id} {self.amount} {self.currency} [{self.status}]>'
