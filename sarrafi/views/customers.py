from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi import db
from sarrafi.models import Customer, AccountTransfer, InternalExchange
from sarrafi.forms import (CustomerForm, CustomerUpdateForm, AccountTransferForm,
                           ReassignTransferForm, InternalExchangeForm, LedgerFilterForm)
from sarrafi.services import customer_service
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import audit, form_errors, json_error, json_response, paginate
from sarrafi.utils.ledger import filter_ledger

customers_bp = Blueprint('customers', __name__)

@customers_bp.route('/')
@login_required
@permission_required('customers', 'view')
def index():
    page = request.args.get('page', 1, type=int)
    query = Customer.query
    search = request.args.get('q', '').strip()
    if search:
        like = f'%{search}%'
        query = query.filter(db.or_(Customer.code.like(like), Customer.name.like(like)))
    return json_response(paginate(query.order_by(Customer.name), page))

@customers_bp.route('/', methods=['POST'])
@login_required
@permission_required('customers', 'create')
def create():
    form = CustomerForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        customer = customer_service.create_customer(form.code.data, form.name.data,
                                                    form.whatsapp_number.data)
        audit('create', 'Customer', customer.code, new_values={'name': customer.name},
              description=f'Created customer: {customer.code} - {customer.name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': f'مشتری {customer.name} ثبت شد.', 'customer': customer.to_dict()}, 201)

@customers_bp.route('/<int:id>')
@login_required
@permission_required('customers', 'view')
def view(id):
    customer = db.get_or_404(Customer, id)
    return json_response({'customer': customer.to_dict()})

@customers_bp.route('/code/<code>')
@login_required
@permission_required('customers', 'view')
def by_code(code):
    customer = customer_service.get_customer_by_code(code)
    return json_response({'customer': customer.to_dict()})

@customers_bp.route('/<int:id>', methods=['PUT'])
@login_required
@permission_required('customers', 'edit')
def edit(id):
    customer = db.get_or_404(Customer, id)
    form = CustomerUpdateForm()
    if not form.validate_on_submit():
        return form_errors(form)

    old_values = {'name': customer.name, 'whatsapp_number': customer.whatsapp_number}
    customer_service.update_customer(customer.id, form.name.data, form.whatsapp_number.data)

    audit('update', 'Customer', customer.code, old_values=old_values,
          new_values={'name': customer.name, 'whatsapp_number': customer.whatsapp_number},
          description=f'Updated customer: {customer.code}')
    db.session.commit()
    return json_response({'message': 'اطلاعات مشتری به روز شد.', 'customer': customer.to_dict()})

@customers_bp.route('/<int:id>/statement')
@login_required
@permission_required('customers', 'view')
def statement(id):
    customer = db.get_or_404(Customer, id)
    form = LedgerFilterForm(request.args, meta={'csrf': False})
    if not form.validate():
        return form_errors(form)

    rows = filter_ledger(customer_service.customer_statement(customer),
                         description=form.description.data, entry_type=form.type.data,
                         start_date=form.start_date.data, end_date=form.end_date.data)
    return json_response({'customer': customer.to_dict(), 'entries': rows})

@customers_bp.route('/<int:id>/exchanges')
@login_required
@permission_required('customers', 'view')
def exchanges(id):
    customer = db.get_or_404(Customer, id)
    items = customer.internal_exchanges.order_by(InternalExchange.timestamp.desc()).all()
    return json_response({'items': [exchange.to_dict() for exchange in items]})

@customers_bp.route('/exchange', methods=['POST'])
@login_required
@permission_required('customers', 'process')
def internal_exchange():
    form = InternalExchangeForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        exchange = customer_service.perform_internal_customer_exchange(
            current_user,
            form.customer_id.data,
            form.from_currency.data,
            form.from_amount.data,
            form.to_currency.data,
            form.to_amount.data,
            form.rate.data
        )
        audit('exchange', 'InternalExchange', exchange.id,
              new_values={'from': f'{exchange.from_amount} {exchange.from_currency}',
                          'to': f'{exchange.to_amount} {exchange.to_currency}'},
              description=f'Internal exchange for customer {exchange.customer_id}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'تبادله انجام شد.', 'exchange': exchange.to_dict()}, 201)

@customers_bp.route('/account-transfers')
@login_required
@permission_required('account_transfers', 'view')
def account_transfers():
    page = request.args.get('page', 1, type=int)
    query = AccountTransfer.query
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    return json_response(paginate(query.order_by(AccountTransfer.created_at.desc()), page))

@customers_bp.route('/account-transfers', methods=['POST'])
@login_required
@permission_required('account_transfers', 'create')
def create_account_transfer():
    form = AccountTransferForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transfer = customer_service.create_account_transfer(
            current_user,
            form.from_customer_code.data,
            form.amount.data,
            form.currency.data,
            description=form.description.data,
            to_customer_code=form.to_customer_code.data,
            is_pending_assignment=form.is_pending_assignment.data
        )
        audit('transfer', 'AccountTransfer', transfer.id,
              new_values={'amount': transfer.amount, 'currency': transfer.currency,
                          'status': transfer.status},
              description=f'Account transfer from {form.from_customer_code.data}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'انتقال ثبت شد.', 'transfer': transfer.to_dict()}, 201)

@customers_bp.route('/account-transfers/<int:id>/reassign', methods=['POST'])
@login_required
@permission_required('account_transfers', 'process')
def reassign_account_transfer(id):
    form = ReassignTransferForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transfer = customer_service.reassign_pending_transfer(current_user, id,
                                                              form.final_customer_code.data)
        audit('assign', 'AccountTransfer', transfer.id,
              new_values={'final_customer': form.final_customer_code.data},
              description=f'Assigned pending account transfer {transfer.id}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'انتقال به مشتری نهایی تخصیص یافت.', 'transfer': transfer.to_dict()})
