from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi.models import InternalExchange
from sarrafi.forms import LedgerFilterForm
from sarrafi.services import customer_service, partner_service
from sarrafi.utils.decorators import portal_login_required
from sarrafi.utils.http import form_errors, json_error, json_response
from sarrafi.utils.ledger import filter_ledger

portal_bp = Blueprint('portal', __name__)

def _entity():
    entity = current_user.entity
    if entity is None:
        return None, json_error('حساب مرتبط با این ورود یافت نشد.', 404)
    return entity, None

@portal_bp.route('/me')
@login_required
@portal_login_required
def me():
    entity, error = _entity()
    if error:
        return error
    return json_response({
        'login': current_user.to_dict(),
        'type': current_user.login_type,
        'account': entity.to_dict(),
        'balances': entity.balances
    })

@portal_bp.route('/statement')
@login_required
@portal_login_required
def statement():
    entity, error = _entity()
    if error:
        return error

    form = LedgerFilterForm(request.args, meta={'csrf': False})
    if not form.validate():
        return form_errors(form)

    if current_user.login_type == 'customer':
        rows = customer_service.customer_statement(entity)
        exchanges = entity.internal_exchanges.order_by(InternalExchange.timestamp.desc()).all()
        extra = {'exchanges': [exchange.to_dict() for exchange in exchanges]}
    else:
        rows = partner_service.partner_statement(entity)
        extra = {}

    rows = filter_ledger(rows, description=form.description.data, entry_type=form.type.data,
                         start_date=form.start_date.data, end_date=form.end_date.data)
    return json_response({'account': entity.to_dict(), 'entries': rows, **extra})
