from flask import Blueprint, request
from flask_login import login_required
from sarrafi import db
from sarrafi.models import BankAccount, CashboxRequest
from sarrafi.forms import BankAccountForm, LedgerFilterForm
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import audit, form_errors, json_response
from sarrafi.utils.ledger import build_running_ledger, filter_ledger, cashbox_row

bank_accounts_bp = Blueprint('bank_accounts', __name__)

@bank_accounts_bp.route('/')
@login_required
@permission_required('cashbox', 'view')
def index():
    query = BankAccount.query
    if request.args.get('active_only', type=int):
        query = query.filter_by(status='Active')
    accounts = query.order_by(BankAccount.bank_name, BankAccount.account_holder).all()
    return json_response({'items': [account.to_dict() for account in accounts]})

@bank_accounts_bp.route('/', methods=['POST'])
@login_required
@permission_required('cashbox', 'create')
def create():
    form = BankAccountForm()
    if not form.validate_on_submit():
        return form_errors(form)

    account = BankAccount(
        bank_name=form.bank_name.data,
        account_holder=form.account_holder.data,
        account_number=form.account_number.data,
        card_to_card_number=form.card_to_card_number.data,
        currency=form.currency.data
    )
    db.session.add(account)
    db.session.flush()

    audit('create', 'BankAccount', account.id,
          new_values={'bank_name': account.bank_name, 'account_number': account.account_number},
          description=f'Created bank account: {account.label}')

    db.session.commit()
    return json_response({'message': f'حساب بانکی {account.label} ثبت شد.', 'account': account.to_dict()}, 201)

@bank_accounts_bp.route('/<int:id>', methods=['PUT'])
@login_required
@permission_required('cashbox', 'edit')
def edit(id):
    account = db.get_or_404(BankAccount, id)
    form = BankAccountForm()
    if not form.validate_on_submit():
        return form_errors(form)

    old_values = {'bank_name': account.bank_name, 'account_number': account.account_number,
                  'currency': account.currency}

    account.bank_name = form.bank_name.data
    account.account_holder = form.account_holder.data
    account.account_number = form.account_number.data
    account.card_to_card_number = form.card_to_card_number.data
    account.currency = form.currency.data

    audit('update', 'BankAccount', account.id, old_values=old_values,
          new_values={'bank_name': account.bank_name, 'account_number': account.account_number,
                      'currency': account.currency},
          description=f'Updated bank account: {account.label}')

    db.session.commit()
    return json_response({'message': 'حساب بانکی به روز شد.', 'account': account.to_dict()})

@bank_accounts_bp.route('/<int:id>/deactivate', methods=['POST'])
@login_required
@permission_required('cashbox', 'delete')
def deactivate(id):
    account = db.get_or_404(BankAccount, id)
    account.status = 'Inactive'

    audit('deactivate', 'BankAccount', account.id, old_values={'status': 'Active'},
          new_values={'status': 'Inactive'}, description=f'Deactivated bank account: {account.label}')

    db.session.commit()
    return json_response({'message': 'حساب بانکی غیرفعال شد.', 'account': account.to_dict()})

@bank_accounts_bp.route('/<int:id>/ledger')
@login_required
@permission_required('cashbox', 'view')
def ledger(id):
    account = db.get_or_404(BankAccount, id)
    form = LedgerFilterForm(request.args, meta={'csrf': False})
    if not form.validate():
        return form_errors(form)

    requests = CashboxRequest.query.filter_by(bank_account_id=account.id).all()
    rows = build_running_ledger([cashbox_row(r) for r in requests])
    rows = filter_ledger(rows, description=form.description.data, entry_type=form.type.data,
                         start_date=form.start_date.data, end_date=form.end_date.data)

    return json_response({'account': account.to_dict(), 'entries': rows})
