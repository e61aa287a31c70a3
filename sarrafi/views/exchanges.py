from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi import db
from sarrafi.models import ForeignTransaction, CommissionTransfer
from sarrafi.forms import (InitiateForeignExchangeForm, CompleteForeignExchangeForm,
                           LogCommissionTransferForm, ExecuteCommissionTransferForm)
from sarrafi.services import exchange_service
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import audit, form_errors, json_error, json_response, paginate

exchanges_bp = Blueprint('exchanges', __name__)

@exchanges_bp.route('/assets')
@login_required
@permission_required('foreign_transfers', 'view')
def assets():
    return json_response({'items': exchange_service.get_available_assets()})

@exchanges_bp.route('/foreign')
@login_required
@permission_required('foreign_transfers', 'view')
def foreign_index():
    page = request.args.get('page', 1, type=int)
    query = ForeignTransaction.query
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    return json_response(paginate(query.order_by(ForeignTransaction.timestamp.desc()), page))

@exchanges_bp.route('/foreign', methods=['POST'])
@login_required
@permission_required('foreign_transfers', 'create')
def foreign_initiate():
    form = InitiateForeignExchangeForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transaction = exchange_service.initiate_foreign_exchange(
            current_user, form.from_asset_id.data, form.from_amount.data, form.description.data
        )
        audit('create', 'ForeignTransaction', transaction.id,
              new_values={'from_asset': transaction.from_asset_id, 'amount': transaction.from_amount},
              description=f'Initiated foreign exchange {transaction.id}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'درخواست برداشت تبادله ثبت شد.', 'transaction': transaction.to_dict()}, 201)

@exchanges_bp.route('/foreign/<int:id>/complete', methods=['POST'])
@login_required
@permission_required('foreign_transfers', 'process')
def foreign_complete(id):
    form = CompleteForeignExchangeForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transaction = exchange_service.complete_foreign_exchange(
            current_user, id, form.to_asset_id.data, form.to_amount.data
        )
        audit('complete', 'ForeignTransaction', transaction.id,
              new_values={'to_asset': transaction.to_asset_id, 'amount': transaction.to_amount},
              description=f'Deposit leg for foreign exchange {transaction.id}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'درخواست واریز تبادله ثبت شد.', 'transaction': transaction.to_dict()})

@exchanges_bp.route('/commission')
@login_required
@permission_required('commission_transfers', 'view')
def commission_index():
    page = request.args.get('page', 1, type=int)
    query = CommissionTransfer.query
    if request.args.get('status'):
        query = query.filter_by(status=request.args['status'])
    return json_response(paginate(query.order_by(CommissionTransfer.created_at.desc()), page))

@exchanges_bp.route('/commission', methods=['POST'])
@login_required
@permission_required('commission_transfers', 'create')
def commission_log():
    form = LogCommissionTransferForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transfer = exchange_service.log_commission_transfer(
            current_user,
            form.initiator_type.data,
            form.amount.data,
            form.received_into_bank_account_id.data,
            form.commission_percentage.data or 0,
            source_account_number=form.source_account_number.data,
            customer_code=form.customer_code.data,
            partner_id=form.partner_id.data
        )
        audit('create', 'CommissionTransfer', transfer.id,
              new_values={'amount': transfer.amount, 'percentage': transfer.commission_percentage},
              description=f'Logged commission transfer {transfer.id} from {transfer.initiator_name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'انتقال کمیشنی ثبت شد.', 'transfer': transfer.to_dict()}, 201)

@exchanges_bp.route('/commission/<int:id>/execute', methods=['POST'])
@login_required
@permission_required('commission_transfers', 'process')
def commission_execute(id):
    form = ExecuteCommissionTransferForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transfer = exchange_service.execute_commission_transfer(
            current_user, id, form.paid_from_bank_account_id.data,
            form.destination_account_number.data
        )
        audit('execute', 'CommissionTransfer', transfer.id,
              new_values={'commission': transfer.commission_amount, 'paid': transfer.final_amount_paid},
              description=f'Executed commission transfer {transfer.id}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'درخواست پرداخت انتقال کمیشنی ثبت شد.', 'transfer': transfer.to_dict()})
