"""Financial reports, dashboard analytics and the activity feed."""
import logging
from collections import defaultdict
from datetime import date, timedelta
from sqlalchemy import func, case
from sarrafi import db
from sarrafi.models import (CashboxRequest, DomesticTransfer, ForeignTransaction, CommissionTransfer,
                            Expense, Customer, CustomerTransaction, PartnerAccount,
                            PartnerTransaction, ActivityLog)
from sarrafi.models.constants import (ReportType, RequestType, CashboxRequestStatus, TransferStatus,
                                      CommissionTransferStatus, ExpenseStatus, EntryType)
from sarrafi.models.mixins import money
from sarrafi.services.cashbox_service import get_cashbox_balances
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.ledger import apply_date_range
from sarrafi.utils.timefmt import format_time_ago

logger = logging.getLogger(__name__)


def generate_report(report_type, start_date=None, end_date=None):
    """Build one of the three reports for a date range; both ends are inclusive days."""
    builders = {
        ReportType.PROFIT_AND_LOSS: profit_and_loss,
        ReportType.CASHBOX_SUMMARY: cashbox_summary,
        ReportType.INTERNAL_LEDGER: internal_ledger,
    }
    builder = builders.get(report_type)
    if builder is None:
        raise WorkflowError(f'نوع گزارش نامعتبر است: {report_type}')

    data = builder(start_date, end_date)
    data.update({'report_type': report_type, 'start_date': start_date, 'end_date': end_date})
    logger.info('Report %s generated for %s..%s', report_type, start_date, end_date)
    return data


def profit_and_loss(start_date=None, end_date=None):
    revenue = defaultdict(lambda: money(0))
    expenses = defaultdict(lambda: money(0))
    by_category = defaultdict(lambda: defaultdict(lambda: money(0)))

    transfer_commissions = db.session.query(
        DomesticTransfer.currency, func.sum(DomesticTransfer.commission)
    ).filter(
        DomesticTransfer.direction == 'outgoing',
        DomesticTransfer.status.in_([TransferStatus.UNEXECUTED, TransferStatus.EXECUTED])
    )
    transfer_commissions = apply_date_range(transfer_commissions, DomesticTransfer.created_at,
                                            start_date, end_date)
    for currency, total in transfer_commissions.group_by(DomesticTransfer.currency):
        revenue[currency] += money(total)

    bank_commissions = db.session.query(
        CommissionTransfer.currency, func.sum(CommissionTransfer.commission_amount)
    ).filter(CommissionTransfer.status == CommissionTransferStatus.COMPLETED)
    bank_commissions = apply_date_range(bank_commissions, CommissionTransfer.created_at,
                                        start_date, end_date)
    for currency, total in bank_commissions.group_by(CommissionTransfer.currency):
        revenue[currency] += money(total)

    approved_expenses = db.session.query(
        Expense.currency, Expense.category, func.sum(Expense.amount)
    ).filter(Expense.status == ExpenseStatus.APPROVED)
    approved_expenses = apply_date_range(approved_expenses, Expense.created_at, start_date, end_date)
    for currency, category, total in approved_expenses.group_by(Expense.currency, Expense.category):
        expenses[currency] += money(total)
        by_category[currency][category] += money(total)

    currencies = sorted(set(revenue) | set(expenses))
    return {
        'rows': [{
            'currency': currency,
            'revenue': revenue[currency],
            'expenses': expenses[currency],
            'expenses_by_category': dict(by_category[currency]),
            'net': revenue[currency] - expenses[currency],
        } for currency in currencies],
    }


def cashbox_summary(start_date=None, end_date=None):
    deposit = case((CashboxRequest.request_type == RequestType.DEPOSIT, CashboxRequest.amount), else_=0)
    withdrawal = case((CashboxRequest.request_type == RequestType.WITHDRAWAL, CashboxRequest.amount), else_=0)

    effective = db.session.query(
        CashboxRequest.currency,
        func.sum(deposit).label('deposits'),
        func.sum(withdrawal).label('withdrawals')
    ).filter(CashboxRequest.status.in_(CashboxRequestStatus.EFFECTIVE))
    effective = apply_date_range(effective, CashboxRequest.created_at, start_date, end_date)
    totals = {row.currency: row for row in effective.group_by(CashboxRequest.currency)}

    pending = db.session.query(
        CashboxRequest.currency, func.count(CashboxRequest.id)
    ).filter(CashboxRequest.status.in_(CashboxRequestStatus.OPEN))
    pending = apply_date_range(pending, CashboxRequest.created_at, start_date, end_date)
    pending_counts = dict(pending.group_by(CashboxRequest.currency).all())

    balances = get_cashbox_balances()
    currencies = sorted(set(totals) | set(pending_counts))

    rows = []
    for currency in currencies:
        row = totals.get(currency)
        deposits = money(row.deposits if row else 0)
        withdrawals = money(row.withdrawals if row else 0)
        rows.append({
            'currency': currency,
            'deposits': deposits,
            'withdrawals': withdrawals,
            'net': deposits - withdrawals,
            'pending_count': pending_counts.get(currency, 0),
            'balance': balances.get(currency, money(0)),
        })
    return {'rows': rows}


def _ledger_totals(owner_model, entry_model, owner_column, start_date, end_date):
    credit = case((entry_model.type == EntryType.CREDIT, entry_model.amount), else_=0)
    debit = case((entry_model.type == EntryType.DEBIT, entry_model.amount), else_=0)
    query = db.session.query(
        owner_model.id,
        owner_model.name,
        entry_model.currency,
        func.sum(credit).label('credits'),
        func.sum(debit).label('debits')
    ).join(entry_model, getattr(entry_model, owner_column) == owner_model.id)
    query = apply_date_range(query, entry_model.timestamp, start_date, end_date)
    return query.group_by(owner_model.id, owner_model.name, entry_model.currency).order_by(owner_model.name)


def internal_ledger(start_date=None, end_date=None):
    def rows(kind, query):
        result = []
        for owner_id, name, currency, credits, debits in query:
            credits, debits = money(credits), money(debits)
            result.append({
                'kind': kind,
                'id': owner_id,
                'name': name,
                'currency': currency,
                'credits': credits,
                'debits': debits,
                'net': credits - debits,
            })
        return result

    return {
        'customers': rows('customer', _ledger_totals(Customer, CustomerTransaction, 'customer_id',
                                                     start_date, end_date)),
        'partners': rows('partner', _ledger_totals(PartnerAccount, PartnerTransaction, 'partner_id',
                                                   start_date, end_date)),
    }


def dashboard_analytics(today=None):
    today = today or date.today()
    days = [today - timedelta(days=offset) for offset in range(6, -1, -1)]
    week_start = days[0]

    def daily_counts(model, column):
        query = db.session.query(func.date(column), func.count(model.id))
        query = apply_date_range(query, column, week_start, today)
        counts = {str(day): count for day, count in query.group_by(func.date(column))}
        return [counts.get(day.isoformat(), 0) for day in days]

    weekly = {
        'labels': [day.isoformat() for day in days],
        'domestic': daily_counts(DomesticTransfer, DomesticTransfer.created_at),
        'foreign': daily_counts(ForeignTransaction, ForeignTransaction.timestamp),
    }

    partner_activity = db.session.query(
        PartnerAccount.name, func.count(DomesticTransfer.id)
    ).join(DomesticTransfer, DomesticTransfer.partner_id == PartnerAccount.id).group_by(
        PartnerAccount.name
    ).order_by(func.count(DomesticTransfer.id).desc()).limit(10).all()

    pending_requests = CashboxRequest.query.filter(
        CashboxRequest.status.in_(CashboxRequestStatus.OPEN)
    ).count()

    return {
        'weekly_activity': weekly,
        'partner_activity': [{'name': name, 'transfers': count} for name, count in partner_activity],
        'cashbox_balances': get_cashbox_balances(),
        'pending_cashbox_requests': pending_requests,
    }


def activity_feed(limit=50):
    logs = ActivityLog.query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()
    feed = []
    for log in logs:
        item = log.to_dict()
        item['time_ago'] = format_time_ago(log.created_at)
        feed.append(item)
    return feed
