from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi import db
from sarrafi.models import Expense, Amanat
from sarrafi.forms import ExpenseForm, AmanatForm
from sarrafi.services import expense_service
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import audit, form_errors, json_error, json_response, paginate

expenses_bp = Blueprint('expenses', __name__)

@expenses_bp.route('/expenses')
@login_required
@permission_required('expenses', 'view')
def index():
    page = request.args.get('page', 1, type=int)
    query = Expense.query
    if request.args.get('category'):
        query = query.filter_by(category=request.args['category'])
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    return json_response(paginate(query.order_by(Expense.created_at.desc()), page))

@expenses_bp.route('/expenses', methods=['POST'])
@login_required
@permission_required('expenses', 'create')
def create():
    form = ExpenseForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        expense = expense_service.create_expense(
            current_user, form.category.data, form.amount.data, form.currency.data,
            description=form.description.data, bank_account_id=form.bank_account_id.data
        )
        audit('create', 'Expense', expense.id,
              new_values={'category': expense.category, 'amount': expense.amount,
                          'currency': expense.currency},
              description=f'Created expense: {expense.category} {expense.amount} {expense.currency}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'مصرف ثبت و به صندوق ارسال شد.', 'expense': expense.to_dict()}, 201)

@expenses_bp.route('/amanat')
@login_required
@permission_required('amanat', 'view')
def amanat_index():
    page = request.args.get('page', 1, type=int)
    query = Amanat.query
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    return json_response(paginate(query.order_by(Amanat.created_at.desc()), page))

@expenses_bp.route('/amanat', methods=['POST'])
@login_required
@permission_required('amanat', 'create')
def amanat_create():
    form = AmanatForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        amanat = expense_service.create_amanat(
            current_user, form.customer_name.data, form.amount.data, form.currency.data,
            notes=form.notes.data, bank_account_id=form.bank_account_id.data
        )
        audit('create', 'Amanat', amanat.id,
              new_values={'customer_name': amanat.customer_name, 'amount': amanat.amount,
                          'currency': amanat.currency},
              description=f'Created amanat for {amanat.customer_name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'امانت ثبت و به صندوق ارسال شد.', 'amanat': amanat.to_dict()}, 201)

@expenses_bp.route('/amanat/<int:id>/return', methods=['POST'])
@login_required
@permission_required('amanat', 'process')
def amanat_return(id):
    try:
        amanat = expense_service.return_amanat(current_user, id)
        audit('return', 'Amanat', amanat.id, new_values={'status': amanat.status},
              description=f'Requested return of amanat {amanat.id} to {amanat.customer_name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'درخواست بازگشت امانت به صندوق ارسال شد.', 'amanat': amanat.to_dict()})
