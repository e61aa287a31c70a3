"""Running-balance statements over ledger rows.

A row is a dict with at least ``timestamp``, ``currency``, ``type``,
``description``, ``amount`` (signed: positive adds to the balance) and
``is_completed``. Pending rows are shown but never move the balance.
"""
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal


def _as_date(value):
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def day_bounds(start_date=None, end_date=None):
    """Datetime bounds [start, end) covering whole days; the end day is included."""
    start = _as_date(start_date)
    end = _as_date(end_date)
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lower, upper


def apply_date_range(query, column, start_date=None, end_date=None):
    lower, upper = day_bounds(start_date, end_date)
    if lower is not None:
        query = query.filter(column >= lower)
    if upper is not None:
        query = query.filter(column < upper)
    return query


def build_running_ledger(rows):
    """Return rows newest first, each with the per-currency ``balance`` after it."""
    ordered = sorted(rows, key=lambda row: (row['timestamp'], row.get('id') or 0))
    running = defaultdict(lambda: Decimal('0.00'))

    result = []
    for row in ordered:
        entry = dict(row)
        if entry.get('is_completed', True):
            running[entry['currency']] += entry['amount']
        entry['balance'] = running[entry['currency']]
        result.append(entry)

    result.reverse()
    return result


def filter_ledger(rows, description=None, entry_type=None, start_date=None, end_date=None):
    """Filter an already balanced statement; balances keep their full-history values."""
    lower, upper = day_bounds(start_date, end_date)
    needle = description.strip().lower() if description else None

    filtered = []
    for row in rows:
        if needle and needle not in (row.get('description') or '').lower():
            continue
        if entry_type and row.get('type') != entry_type:
            continue
        if lower is not None and row['timestamp'] < lower:
            continue
        if upper is not None and row['timestamp'] >= upper:
            continue
        filtered.append(row)
    return filtered


def ledger_row(entry):
    """Ledger row for a CustomerTransaction or PartnerTransaction."""
    amount = entry.amount if entry.type == 'credit' else -entry.amount
    return {
        'id': entry.id,
        'timestamp': entry.timestamp,
        'type': entry.type,
        'description': entry.description,
        'amount': amount,
        'currency': entry.currency,
        'reference_type': entry.reference_type,
        'reference_id': entry.reference_id,
        'is_completed': True,
    }


def cashbox_row(request):
    """Ledger row for a CashboxRequest; only effective requests are completed."""
    return {
        'id': request.id,
        'timestamp': request.created_at,
        'type': request.request_type,
        'description': request.reason,
        'amount': request.signed_amount,
        'currency': request.currency,
        'serial_no': request.serial_no,
        'status': request.status,
        'is_completed': request.is_effective,
    }
