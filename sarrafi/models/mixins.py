from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')


class SerializerMixin:
    """Column-level dict dump used by the JSON API and by backups."""

    def to_dict(self):
        data = {}
        for column in self.__table__.columns:
            data[column.key] = to_json_value(getattr(self, column.key))
        return data


class SerialNumberMixin:
    """Adds sequential human-facing numbers such as CR-2026-000042.

    Models using it define ``serial_prefix`` and a ``serial_no`` column.
    Call before adding the object to the session: the lookup autoflushes.
    """
    serial_prefix = 'DOC'

    def generate_serial_no(self):
        cls = type(self)
        year = datetime.now().year
        prefix = f"{cls.serial_prefix}-{year}"

        # Get last number for this prefix
        last = cls.query.filter(
            cls.serial_no.like(f'{prefix}-%')
        ).order_by(cls.serial_no.desc()).first()

        if last:
            seq = int(last.serial_no.split('-')[-1]) + 1
        else:
            seq = 1

        self.serial_no = f"{prefix}-{seq:06d}"
        return self.serial_no


class LedgerOwnerMixin:
    """Per-currency balance over a credit/debit ledger table.

    Owners define ``ledger_model`` (the transaction model) and
    ``ledger_owner_column`` (its foreign key column name).
    """
    ledger_model = None
    ledger_owner_column = None

    @property
    def balances(self):
        from sqlalchemy import case, func
        from sarrafi import db

        model = self.ledger_model
        signed = case(
            (model.type == 'credit', model.amount),
            else_=-model.amount
        )
        rows = db.session.query(
            model.currency, func.sum(signed)
        ).filter(
            getattr(model, self.ledger_owner_column) == self.id
        ).group_by(model.currency).all()

        return {currency: money(total) for currency, total in rows}

    def balance_for(self, currency):
        return self.balances.get(currency, money(0))

    def post(self, entry_type, amount, currency, description,
             reference_type=None, reference_id=None):
        """Append a ledger entry; the caller owns the commit."""
        from sarrafi import db

        entry = self.ledger_model(
            type=entry_type,
            amount=amount,
            currency=currency,
            description=description,
            reference_type=reference_type,
            reference_id=str(reference_id) if reference_id is not None else None,
        )
        setattr(entry, self.ledger_owner_column, self.id)
        db.session.add(entry)
        return entry


def money(value):
    """Normalise an amount or a DB aggregate (float on SQLite) to 2 dp."""
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_json_value(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
