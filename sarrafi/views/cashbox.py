from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi import db
from sarrafi.models import CashboxRequest
from sarrafi.forms import CashboxRequestForm, ResolveRequestForm, IncreaseBalanceForm, CashboxSearchForm
from sarrafi.services import cashbox_service
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import audit, form_errors, json_error, json_response, paginate

cashbox_bp = Blueprint('cashbox', __name__)

@cashbox_bp.route('/requests')
@login_required
@permission_required('cashbox', 'view')
def index():
    page = request.args.get('page', 1, type=int)
    form = CashboxSearchForm(request.args, meta={'csrf': False})
    if not form.validate():
        return form_errors(form)

    query = cashbox_service.filter_requests(
        search=form.search.data,
        requested_by=form.requested_by.data,
        request_type=form.request_type.data,
        status=form.status.data,
        currency=form.currency.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data
    )
    return json_response(paginate(query, page))

@cashbox_bp.route('/requests', methods=['POST'])
@login_required
@permission_required('cashbox', 'create')
def create():
    form = CashboxRequestForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        cashbox_request = cashbox_service.create_request(
            current_user,
            form.request_type.data,
            form.amount.data,
            form.currency.data,
            reason=form.reason.data,
            customer_code=form.customer_code.data,
            bank_account_id=form.bank_account_id.data,
            source_account_number=form.source_account_number.data,
            destination_account_number=form.destination_account_number.data
        )

        # Log action
        audit('create', 'CashboxRequest', cashbox_request.serial_no,
              new_values={'amount': cashbox_request.amount, 'currency': cashbox_request.currency,
                          'type': cashbox_request.request_type, 'status': cashbox_request.status},
              description=f'Created cashbox request: {cashbox_request.serial_no}')

        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({
        'message': f'درخواست {cashbox_request.serial_no} ثبت شد.',
        'request': cashbox_request.to_dict()
    }, 201)

@cashbox_bp.route('/requests/<int:id>')
@login_required
@permission_required('cashbox', 'view')
def view(id):
    cashbox_request = db.get_or_404(CashboxRequest, id)
    return json_response({'request': cashbox_request.to_dict()})

@cashbox_bp.route('/requests/<int:id>/receipt')
@login_required
@permission_required('cashbox', 'view')
def receipt(id):
    cashbox_request = db.get_or_404(CashboxRequest, id)
    return json_response({'receipt': cashbox_service.receipt(cashbox_request)})

@cashbox_bp.route('/requests/<int:id>/resolve', methods=['POST'])
@login_required
@permission_required('cashbox', 'approve')
def resolve(id):
    form = ResolveRequestForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        cashbox_request = cashbox_service.get_request(id)
        old_status = cashbox_request.status
        cashbox_service.resolve_request(id, form.resolution.data, current_user)

        # Log action
        audit(form.resolution.data, 'CashboxRequest', cashbox_request.serial_no,
              old_values={'status': old_status},
              new_values={'status': cashbox_request.status},
              description=f'{form.resolution.data.capitalize()} cashbox request: {cashbox_request.serial_no}')

        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({
        'message': f'وضعیت درخواست {cashbox_request.serial_no}: {cashbox_request.status}',
        'request': cashbox_request.to_dict()
    })

@cashbox_bp.route('/increase-balance', methods=['POST'])
@login_required
@permission_required('cashbox', 'process')
def increase_balance():
    form = IncreaseBalanceForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        cashbox_request = cashbox_service.increase_cashbox_balance(
            current_user,
            form.amount.data,
            form.currency.data,
            form.description.data,
            bank_account_id=form.bank_account_id.data,
            source_account_number=form.source_account_number.data
        )

        audit('increase_balance', 'CashboxRequest', cashbox_request.serial_no,
              new_values={'amount': cashbox_request.amount, 'currency': cashbox_request.currency},
              description=f'Increased cashbox balance: {cashbox_request.amount} {cashbox_request.currency}')

        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({
        'message': 'موجودی صندوق افزایش یافت.',
        'request': cashbox_request.to_dict()
    }, 201)

@cashbox_bp.route('/balances')
@login_required
@permission_required('cashbox', 'view')
def balances():
    return json_response({'balances': cashbox_service.get_cashbox_balances()})
