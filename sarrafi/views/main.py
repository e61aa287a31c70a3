from flask import Blueprint, current_app
from flask_login import login_required
from sarrafi.services import report_service
from sarrafi.utils.decorators import permission_required
from sarrafi.utils.http import json_response

main_bp = Blueprint('main', __name__)

@main_bp.route('/')
@main_bp.route('/dashboard')
@login_required
@permission_required('dashboard', 'view')
def dashboard():
    return json_response(report_service.dashboard_analytics())

@main_bp.route('/activity')
@login_required
@permission_required('dashboard', 'view')
def activity():
    feed = report_service.activity_feed(current_app.config['ACTIVITY_FEED_SIZE'])
    return json_response({'items': feed})
