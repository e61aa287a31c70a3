from datetime import datetime
from sarrafi import db
from sarrafi.models.constants import ExpenseStatus, AmanatStatus
from sarrafi.models.mixins import SerializerMixin

class Expense(SerializerMixin, db.Model):
    __tablename__ = 'expenses'

    id = db.Column(db.Integer, primary_key=True)
    category = db.Column(db.String(20), nullable=False)  # Salary, Rent, Utilities, Hospitality, Other
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    description = db.Column(db.Text)
    bank_account_id = db.Column(db.Integer, db.ForeignKey('bank_accounts.id'))

    status = db.Column(db.String(20), nullable=False, default=ExpenseStatus.PENDING_APPROVAL, index=True)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f'<Expense {self.category} {self.amount} {self.currency} [{self.status}]>'


class Amanat(SerializerMixin, db.Model):
    """Money held in trust for someone; returned in full, never spent."""
    __tablename__ = 'amanat'

    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(150), nullable=False)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    notes = db.Column(db.Text)
    bank_account_id = db.Column(db.Integer, db.ForeignKey('bank_accounts.id'))

    status = db.Column(db.String(20), nullable=False, default=AmanatStatus.PENDING_DEPOSIT, index=True)

    created_by_id = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_by = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    returned_at = db.Column(db.DateTime)

    def __repr__(self):
        return f'<Amanat {self.customer_name} {self.amount} {self.currency} [{self.status}]>'
