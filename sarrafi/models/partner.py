from datetime import datetime
from sarrafi import db
from sarrafi.models.mixins import SerializerMixin, LedgerOwnerMixin, to_json_value

class PartnerTransaction(SerializerMixin, db.Model):
    __tablename__ = 'partner_transactions'

    id = db.Column(db.Integer, primary_key=True)
    partner_id = db.Column(db.Integer, db.ForeignKey('partner_accounts.id'), nullable=False, index=True)

    # credit = we owe the partner more, debit = the partner owes us more
    type = db.Column(db.String(10), nullable=False)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text)

    reference_type = db.Column(db.String(40))
    reference_id = db.Column(db.String(40))

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f'<PartnerTransaction {self.type} {self.amount} {self.currency}>'


class PartnerAccount(LedgerOwnerMixin, SerializerMixin, db.Model):
    __tablename__ = 'partner_accounts'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), unique=True, nullable=False, index=True)
    province = db.Column(db.String(50), nullable=False)
    whatsapp_number = db.Column(db.String(30))

    # Active, Inactive
    status = db.Column(db.String(10), nullable=False, default='Active')

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    transactions = db.relationship('PartnerTransaction', backref='partner', lazy='dynamic',
                                   order_by='PartnerTransaction.timestamp')

    ledger_model = PartnerTransaction
    ledger_owner_column = 'partner_id'

    @property
    def is_active(self):
        return self.status == 'Active'

    def to_dict(self):
        data = super().to_dict()
        data['balances'] = {currency: to_json_value(amount)
                            for currency, amount in self.balances.items()}
        return data

    def __repr__(self):
        return f'<PartnerAccount {self.name} ({self.province})>'
