from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi import db
from sarrafi.models import DomesticTransfer
from sarrafi.forms import DomesticTransferForm, TransferStatusForm, PayoutForm, TransferSearchForm
from sarrafi.services import transfer_service
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import audit, form_errors, json_error, json_response, paginate

transfers_bp = Blueprint('transfers', __name__)

@transfers_bp.route('/')
@login_required
@permission_required('domestic_transfers', 'view')
def index():
    page = request.args.get('page', 1, type=int)
    form = TransferSearchForm(request.args, meta={'csrf': False})
    if not form.validate():
        return form_errors(form)

    query = transfer_service.filter_transfers(
        search=form.search.data,
        status=form.status.data,
        direction=form.direction.data,
        currency=form.currency.data
    )
    return json_response(paginate(query, page))

@transfers_bp.route('/', methods=['POST'])
@login_required
@permission_required('domestic_transfers', 'create')
def create():
    form = DomesticTransferForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transfer = transfer_service.create_domestic_transfer(
            current_user,
            sender_name=form.sender_name.data,
            receiver_name=form.receiver_name.data,
            amount=form.amount.data,
            currency=form.currency.data,
            partner_name=form.partner_sarraf.data,
            commission=form.commission.data or 0,
            sender_tazkereh=form.sender_tazkereh.data,
            receiver_tazkereh=form.receiver_tazkereh.data,
            destination_province=form.destination_province.data,
            partner_reference=form.partner_reference.data,
            is_cash_payment=form.is_cash_payment.data,
            customer_code=form.customer_code.data,
            bank_account_id=form.bank_account_id.data
        )

        # Log action
        audit('create', 'DomesticTransfer', transfer.serial_no,
              new_values={'amount': transfer.amount, 'commission': transfer.commission,
                          'currency': transfer.currency, 'direction': transfer.direction,
                          'status': transfer.status},
              description=f'Created {transfer.direction} transfer: {transfer.serial_no}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': f'حواله {transfer.serial_no} ثبت شد.', 'transfer': transfer.to_dict()}, 201)

@transfers_bp.route('/<int:id>')
@login_required
@permission_required('domestic_transfers', 'view')
def view(id):
    transfer = db.get_or_404(DomesticTransfer, id)
    return json_response({'transfer': transfer.to_dict()})

@transfers_bp.route('/<int:id>/status', methods=['POST'])
@login_required
@permission_required('domestic_transfers', 'edit')
def update_status(id):
    form = TransferStatusForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transfer = transfer_service.get_transfer(id)
        old_status = transfer.status
        transfer_service.update_transfer_status(current_user, id, form.status.data)

        audit('update_status', 'DomesticTransfer', transfer.serial_no,
              old_values={'status': old_status}, new_values={'status': transfer.status},
              description=f'Changed transfer {transfer.serial_no} status to {transfer.status}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': f'وضعیت حواله {transfer.serial_no} تغییر کرد.', 'transfer': transfer.to_dict()})

@transfers_bp.route('/search')
@login_required
@permission_required('domestic_transfers', 'view')
def search():
    transfers = transfer_service.find_transfers(request.args.get('q', ''))
    return json_response({'items': [transfer.to_dict() for transfer in transfers]})

@transfers_bp.route('/<int:id>/payout', methods=['POST'])
@login_required
@permission_required('domestic_transfers', 'process')
def payout(id):
    form = PayoutForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        transfer, cashbox_request = transfer_service.payout_incoming_transfer(
            current_user, id, bank_account_id=form.bank_account_id.data
        )
        audit('payout', 'DomesticTransfer', transfer.serial_no,
              new_values={'request': cashbox_request.serial_no, 'status': transfer.status},
              description=f'Payout requested for incoming transfer {transfer.serial_no}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({
        'message': f'درخواست پرداخت حواله {transfer.serial_no} به صندوق ارسال شد.',
        'transfer': transfer.to_dict(),
        'request': cashbox_request.to_dict()
    })
