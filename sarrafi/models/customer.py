from datetime import datetime
from sarrafi import db
from sarrafi.models.mixins import SerializerMixin, LedgerOwnerMixin, to_json_value

class CustomerTransaction(SerializerMixin, db.Model):
    __tablename__ = 'customer_transactions'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False, index=True)

    type = db.Column(db.String(10), nullable=False)  # credit, debit
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text)

    # Origin of the entry, e.g. ('CashboxRequest', 12), ('AccountTransfer', 3)
    reference_type = db.Column(db.String(40))
    reference_id = db.Column(db.String(40))

    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f'<CustomerTransaction {self.type} {self.amount} {self.currency}>'


class Customer(LedgerOwnerMixin, SerializerMixin, db.Model):
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(30), unique=True, nullable=False, index=True)
    name = db.Column(db.String(150), nullable=False)
    whatsapp_number = db.Column(db.String(30))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    transactions = db.relationship('CustomerTransaction', backref='customer', lazy='dynamic',
                                   order_by='CustomerTransaction.timestamp')

    ledger_model = CustomerTransaction
    ledger_owner_column = 'customer_id'

    def to_dict(self):
        data = super().to_dict()
        data['balances'] = {currency: to_json_value(amount)
                            for currency, amount in self.balances.items()}
        return data

    def __repr__(self):
        return f'<Customer {self.code} - {self.name}>'


class InternalExchange(SerializerMixin, db.Model):
    """Currency conversion inside one customer's account."""
    __tablename__ = 'internal_exchanges'

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False, index=True)

    from_currency = db.Column(db.String(10), nullable=False)
    from_amount = db.Column(db.Numeric(18, 2), nullable=False)
    to_currency = db.Column(db.String(10), nullable=False)
    to_amount = db.Column(db.Numeric(18, 2), nullable=False)
    rate = db.Column(db.Numeric(18, 6), nullable=False)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)

    customer = db.relationship('Customer', backref=db.backref('internal_exchanges', lazy='dynamic'))

    def __repr__(self):
        return f'<InternalExchange {self.from_amount} {self.from_currency} -> {self.to_amount} {self.to_currency}>'
