from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi import db
from sarrafi.models import PartnerAccount
from sarrafi.forms import PartnerForm, SettlementForm, SettleByNameForm, LedgerFilterForm
from sarrafi.services import partner_service
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import audit, form_errors, json_error, json_response
from sarrafi.utils.ledger import filter_ledger

partners_bp = Blueprint('partners', __name__)

@partners_bp.route('/')
@login_required
@permission_required('partner_accounts', 'view')
def index():
    query = PartnerAccount.query
    if request.args.get('active_only', type=int):
        query = query.filter_by(status='Active')
    partners = query.order_by(PartnerAccount.name).all()
    return json_response({'items': [partner.to_dict() for partner in partners]})

@partners_bp.route('/', methods=['POST'])
@login_required
@permission_required('partner_accounts', 'create')
def create():
    form = PartnerForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        partner = partner_service.create_partner(form.name.data, form.province.data,
                                                 form.whatsapp_number.data)
        audit('create', 'PartnerAccount', partner.id,
              new_values={'name': partner.name, 'province': partner.province},
              description=f'Created partner: {partner.name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': f'همکار {partner.name} ثبت شد.', 'partner': partner.to_dict()}, 201)

@partners_bp.route('/<int:id>')
@login_required
@permission_required('partner_accounts', 'view')
def view(id):
    partner = db.get_or_404(PartnerAccount, id)
    return json_response({'partner': partner.to_dict()})

@partners_bp.route('/by-name/<name>')
@login_required
@permission_required('partner_accounts', 'view')
def by_name(name):
    return json_response({'partner': partner_service.get_partner_by_name(name).to_dict()})

@partners_bp.route('/<int:id>', methods=['PUT'])
@login_required
@permission_required('partner_accounts', 'edit')
def edit(id):
    partner = db.get_or_404(PartnerAccount, id)
    form = PartnerForm()
    if not form.validate_on_submit():
        return form_errors(form)

    old_values = {'name': partner.name, 'province': partner.province}
    try:
        partner_service.update_partner(partner.id, form.name.data, form.province.data,
                                       form.whatsapp_number.data)
        audit('update', 'PartnerAccount', partner.id, old_values=old_values,
              new_values={'name': partner.name, 'province': partner.province},
              description=f'Updated partner: {partner.name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'اطلاعات همکار به روز شد.', 'partner': partner.to_dict()})

@partners_bp.route('/<int:id>/deactivate', methods=['POST'])
@login_required
@permission_required('partner_accounts', 'delete')
def deactivate(id):
    partner = partner_service.deactivate_partner(id)
    audit('deactivate', 'PartnerAccount', partner.id, new_values={'status': partner.status},
          description=f'Deactivated partner: {partner.name}')
    db.session.commit()
    return json_response({'message': f'حساب همکار {partner.name} غیرفعال شد.', 'partner': partner.to_dict()})

@partners_bp.route('/<int:id>/statement')
@login_required
@permission_required('partner_accounts', 'view')
def statement(id):
    partner = db.get_or_404(PartnerAccount, id)
    form = LedgerFilterForm(request.args, meta={'csrf': False})
    if not form.validate():
        return form_errors(form)

    rows = filter_ledger(partner_service.partner_statement(partner),
                         description=form.description.data, entry_type=form.type.data,
                         start_date=form.start_date.data, end_date=form.end_date.data)
    return json_response({'partner': partner.to_dict(), 'entries': rows})

def _settle(id, receive):
    form = SettlementForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        if receive:
            cashbox_request = partner_service.receive_from_partner(
                current_user, id, form.amount.data, form.currency.data,
                description=form.description.data,
                bank_account_id=form.bank_account_id.data,
                source_account_number=form.account_number.data
            )
        else:
            cashbox_request = partner_service.pay_to_partner(
                current_user, id, form.amount.data, form.currency.data,
                description=form.description.data,
                bank_account_id=form.bank_account_id.data,
                destination_account_number=form.account_number.data
            )
        audit('receive' if receive else 'pay', 'PartnerAccount', id,
              new_values={'amount': cashbox_request.amount, 'currency': cashbox_request.currency,
                          'request': cashbox_request.serial_no},
              description=cashbox_request.reason)
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({
        'message': f'درخواست {cashbox_request.serial_no} به صندوق ارسال شد.',
        'request': cashbox_request.to_dict()
    }, 201)

@partners_bp.route('/<int:id>/receive', methods=['POST'])
@login_required
@permission_required('partner_accounts', 'process')
def receive(id):
    return _settle(id, receive=True)

@partners_bp.route('/<int:id>/pay', methods=['POST'])
@login_required
@permission_required('partner_accounts', 'process')
def pay(id):
    return _settle(id, receive=False)

@partners_bp.route('/settle', methods=['POST'])
@login_required
@permission_required('partner_accounts', 'process')
def settle_by_name():
    form = SettleByNameForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        cashbox_request = partner_service.settle_partner_balance_by_name(
            current_user, form.partner_name.data, form.amount.data,
            form.currency.data, form.type.data
        )
        audit(form.type.data, 'PartnerAccount', form.partner_name.data,
              new_values={'amount': cashbox_request.amount, 'currency': cashbox_request.currency,
                          'request': cashbox_request.serial_no},
              description=f'Settlement with partner {form.partner_name.data}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({
        'message': f'درخواست {cashbox_request.serial_no} به صندوق ارسال شد.',
        'request': cashbox_request.to_dict()
    }, 201)
