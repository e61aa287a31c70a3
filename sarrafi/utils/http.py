import logging
from datetime import date, datetime
from decimal import Decimal
from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from sarrafi import db

logger = logging.getLogger(__name__)


def jsonable(value):
    """Recursively turn Decimals and datetimes into JSON-safe strings."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(item) for item in value]
    return value


def json_response(payload, status=200):
    return jsonify(jsonable(payload)), status


def json_error(message, status=400):
    return jsonify({'error': message}), status


def form_errors(form):
    return jsonify({'errors': form.errors}), 400


def paginate(query, page, serializer=None, per_page=None):
    per_page = per_page or current_app.config['ITEMS_PER_PAGE']
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)
    serializer = serializer or (lambda obj: obj.to_dict())
    return {
        'items': [serializer(item) for item in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'per_page': pagination.per_page,
        'total': pagination.total,
    }


def register_error_handlers(app):
    from sarrafi.services.errors import WorkflowError

    @app.errorhandler(WorkflowError)
    def handle_workflow_error(error):
        db.session.rollback()
        logger.warning('Workflow error: %s', error)
        return json_error(str(error), error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return json_error(error.description, error.code)

    @app.errorhandler(500)
    def handle_server_error(error):
        db.session.rollback()
        logger.exception('Unhandled error')
        return json_error('خطای داخلی سرور رخ داد.', 500)


def audit(action, model_name=None, record_id=None, description=None,
          old_values=None, new_values=None, user=None, status='success'):
    """Log an ActivityLog row for the current request; the view commits."""
    from flask import request
    from flask_login import current_user
    from sarrafi.models import ActivityLog

    if user is None and current_user and current_user.is_authenticated:
        user = current_user
    return ActivityLog.log_action(
        user=user,
        action=action,
        model_name=model_name,
        record_id=record_id,
        old_values=jsonable(old_values),
        new_values=jsonable(new_values),
        description=description,
        ip_address=request.remote_addr,
        user_agent=request.user_agent.string,
        status=status
    )
