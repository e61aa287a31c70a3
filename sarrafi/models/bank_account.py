from datetime import datetime
from sarrafi import db
from sarrafi.models.constants import BANK_CURRENCY
from sarrafi.models.mixins import SerializerMixin, to_json_value

class BankAccount(SerializerMixin, db.Model):
    __tablename__ = 'bank_accounts'

    id = db.Column(db.Integer, primary_key=True)
    bank_name = db.Column(db.String(100), nullable=False)
    account_holder = db.Column(db.String(150), nullable=False)
    account_number = db.Column(db.String(50), nullable=False)
    card_to_card_number = db.Column(db.String(30))
    currency = db.Column(db.String(10), nullable=False, default=BANK_CURRENCY)

    # Active, Inactive (accounts are never deleted, their history stays)
    status = db.Column(db.String(10), nullable=False, default='Active')

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def balance(self):
        """Approved deposits minus approved withdrawals booked on this account"""
        from sarrafi.models.cashbox import bank_account_balance
        return bank_account_balance(self.id)

    @property
    def is_active(self):
        return self.status == 'Active'

    @property
    def label(self):
        return f'{self.bank_name} - {self.account_holder}'

    def to_dict(self):
        data = super().to_dict()
        data['balance'] = to_json_value(self.balance)
        return data

    def __repr__(self):
        return f'<BankAccount {self.bank_name} {self.account_number}>'
