from flask import Blueprint, request
from flask_login import login_required
from sarrafi.forms import ReportForm
from sarrafi.services import report_service
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import form_errors, json_response

reports_bp = Blueprint('reports', __name__)

@reports_bp.route('/')
@reports_bp.route('/generate')
@login_required
@permission_required('reports', 'view')
def generate():
    form = ReportForm(request.args, meta={'csrf': False})
    if not form.validate():
        return form_errors(form)

    report = report_service.generate_report(
        form.report_type.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data
    )
    return json_response({'report': report})
