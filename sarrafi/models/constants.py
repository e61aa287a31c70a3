"""Status values and enumerations shared by models, services and forms."""

CURRENCIES = ['AFN', 'USD', 'PKR', 'EUR', 'IRT_BANK', 'IRT_CASH']
BANK_CURRENCY = 'IRT_BANK'


class RequestType:
    DEPOSIT = 'deposit'
    WITHDRAWAL = 'withdrawal'

    ALL = [DEPOSIT, WITHDRAWAL]


class CashboxRequestStatus:
    PENDING = 'Pending'
    PENDING_CASHBOX_APPROVAL = 'PendingCashboxApproval'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'
    AUTO_APPROVED = 'AutoApproved'

    ALL = [PENDING, PENDING_CASHBOX_APPROVAL, APPROVED, REJECTED, AUTO_APPROVED]
    OPEN = [PENDING, PENDING_CASHBOX_APPROVAL]
    # only these move money
    EFFECTIVE = [APPROVED, AUTO_APPROVED]


class TransferStatus:
    UNEXECUTED = 'Unexecuted'
    PENDING_CASHBOX = 'PendingCashbox'
    EXECUTED = 'Executed'
    CANCELLED = 'Cancelled'
    REJECTED_BY_CASHBOX = 'RejectedByCashbox'

    ALL = [UNEXECUTED, PENDING_CASHBOX, EXECUTED, CANCELLED, REJECTED_BY_CASHBOX]


class AccountTransferStatus:
    COMPLETED = 'Completed'
    PENDING_ASSIGNMENT = 'PendingAssignment'


class ForeignTransactionStatus:
    PENDING_WITHDRAWAL_APPROVAL = 'PendingWithdrawalApproval'
    PENDING_DEPOSIT = 'PendingDeposit'
    PENDING_DEPOSIT_APPROVAL = 'PendingDepositApproval'
    COMPLETED = 'Completed'
    REJECTED = 'Rejected'


class CommissionTransferStatus:
    PENDING_DEPOSIT_APPROVAL = 'PendingDepositApproval'
    PENDING_EXECUTION = 'PendingExecution'
    PENDING_WITHDRAWAL_APPROVAL = 'PendingWithdrawalApproval'
    COMPLETED = 'Completed'
    REJECTED = 'Rejected'


class ExpenseStatus:
    PENDING_APPROVAL = 'PendingApproval'
    APPROVED = 'Approved'
    REJECTED = 'Rejected'


EXPENSE_CATEGORIES = ['Salary', 'Rent', 'Utilities', 'Hospitality', 'Other']


class AmanatStatus:
    PENDING_DEPOSIT = 'PendingDeposit'
    ACTIVE = 'Active'
    PENDING_RETURN = 'PendingReturn'
    RETURNED = 'Returned'
    REJECTED = 'Rejected'


class EntryType:
    CREDIT = 'credit'
    DEBIT = 'debit'


class ReportType:
    PROFIT_AND_LOSS = 'ProfitAndLoss'
    CASHBOX_SUMMARY = 'CashboxSummary'
    INTERNAL_LEDGER = 'InternalLedger'

    ALL = [PROFIT_AND_LOSS, CASHBOX_SUMMARY, INTERNAL_LEDGER]


# Linked entity types carried by cashbox requests
class LinkedEntity:
    MANUAL = 'Manual'
    DOMESTIC_TRANSFER = 'DomesticTransfer'
    DOMESTIC_TRANSFER_REFUND = 'DomesticTransferRefund'
    PARTNER_SETTLEMENT = 'PartnerSettlement'
    FOREIGN_TRANSACTION = 'ForeignTransaction'
    COMMISSION_TRANSFER = 'CommissionTransfer'
    EXPENSE = 'Expense'
    AMANAT = 'Amanat'


PERMISSION_MODULES = [
    'dashboard', 'cashbox', 'domestic_transfers', 'foreign_transfers',
    'commission_transfers', 'account_transfers', 'customers', 'partner_accounts',
    'expenses', 'reports', 'settings', 'amanat',
]
PERMISSION_ACTIONS = ['view', 'create', 'edit', 'delete', 'approve', 'process']
