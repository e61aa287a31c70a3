from flask import Blueprint, request
from flask_login import login_required, current_user
from sarrafi import db
from sarrafi.models import User, Role, ExternalLogin, SystemSettings
from sarrafi.forms import UserForm, UserUpdateForm, RoleForm, ExternalLoginForm
from sarrafi.services import admin_service, backup_service
from sarrafi.services.errors import WorkflowError
from sarrafi.utils.decorators import permission_required, admin_required
from sarrafi.utils.http import audit, form_errors, json_error, json_response

settings_bp = Blueprint('settings', __name__)

def _json_body():
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}

# Users

@settings_bp.route('/users')
@login_required
@permission_required('settings', 'view')
def users():
    users = User.query.order_by(User.username).all()
    return json_response({'items': [user.to_dict() for user in users]})

@settings_bp.route('/users', methods=['POST'])
@login_required
@permission_required('settings', 'create')
def create_user():
    form = UserForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        user = admin_service.create_user(form.username.data, form.password.data, form.name.data,
                                         role_id=form.role_id.data,
                                         is_superuser=form.is_superuser.data and current_user.is_superuser)
        audit('create', 'User', user.id, new_values={'username': user.username, 'role_id': user.role_id},
              description=f'Created user: {user.username}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': f'کاربر {user.username} ایجاد شد.', 'user': user.to_dict()}, 201)

@settings_bp.route('/users/<int:id>', methods=['PUT'])
@login_required
@permission_required('settings', 'edit')
def update_user(id):
    form = UserUpdateForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        user = db.get_or_404(User, id)
        old_values = {'name': user.name, 'role_id': user.role_id, 'is_active': user.is_active}
        admin_service.update_user(id, form.name.data, role_id=form.role_id.data,
                                  password=form.password.data, is_active=form.is_active.data)
        audit('update', 'User', user.id, old_values=old_values,
              new_values={'name': user.name, 'role_id': user.role_id, 'is_active': user.is_active},
              description=f'Updated user: {user.username}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'اطلاعات کاربر به روز شد.', 'user': user.to_dict()})

@settings_bp.route('/users/<int:id>', methods=['DELETE'])
@login_required
@permission_required('settings', 'delete')
def delete_user(id):
    try:
        user, deleted = admin_service.delete_user(id, current_user)
        if deleted:
            audit('delete', 'User', id, old_values={'username': user.username},
                  description=f'Deleted user: {user.username}')
        else:
            audit('deactivate', 'User', id, old_values={'is_active': True},
                  new_values={'is_active': False},
                  description=f'Deactivated user with history: {user.username}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    if not deleted:
        return json_response({'message': f'کاربر {user.username} سابقه دارد و غیرفعال شد.',
                              'deleted': False, 'user': user.to_dict()})
    return json_response({'message': f'کاربر {user.username} حذف شد.', 'deleted': True})

# Roles

@settings_bp.route('/roles')
@login_required
@permission_required('settings', 'view')
def roles():
    roles = Role.query.order_by(Role.name).all()
    return json_response({'items': [role.to_dict() for role in roles]})

@settings_bp.route('/roles', methods=['POST'])
@login_required
@permission_required('settings', 'create')
def create_role():
    form = RoleForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        role = admin_service.create_role(form.name.data, form.description.data,
                                         permissions=_json_body().get('permissions'))
        audit('create', 'Role', role.id, new_values={'name': role.name, 'permissions': role.permissions},
              description=f'Created role: {role.name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': f'نقش {role.name} ایجاد شد.', 'role': role.to_dict()}, 201)

@settings_bp.route('/roles/<int:id>', methods=['PUT'])
@login_required
@permission_required('settings', 'edit')
def update_role(id):
    form = RoleForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        role = db.get_or_404(Role, id)
        old_values = {'name': role.name, 'permissions': role.permissions}
        admin_service.update_role(id, form.name.data, form.description.data,
                                  permissions=_json_body().get('permissions'))
        audit('update', 'Role', role.id, old_values=old_values,
              new_values={'name': role.name, 'permissions': role.permissions},
              description=f'Updated role: {role.name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'نقش به روز شد.', 'role': role.to_dict()})

@settings_bp.route('/roles/<int:id>', methods=['DELETE'])
@login_required
@permission_required('settings', 'delete')
def delete_role(id):
    try:
        role = admin_service.delete_role(id)
        audit('delete', 'Role', id, old_values={'name': role.name},
              description=f'Deleted role: {role.name}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': f'نقش {role.name} حذف شد.'})

# Portal logins

@settings_bp.route('/external-logins')
@login_required
@permission_required('settings', 'view')
def external_logins():
    logins = ExternalLogin.query.order_by(ExternalLogin.username).all()
    return json_response({'items': [login.to_dict() for login in logins]})

@settings_bp.route('/external-logins', methods=['POST'])
@login_required
@permission_required('settings', 'create')
def create_external_login():
    form = ExternalLoginForm()
    if not form.validate_on_submit():
        return form_errors(form)

    try:
        login = admin_service.create_external_login(form.username.data, form.password.data,
                                                    form.login_type.data, form.linked_entity_id.data)
        audit('create', 'ExternalLogin', login.id,
              new_values={'username': login.username, 'login_type': login.login_type,
                          'linked_entity_id': login.linked_entity_id},
              description=f'Created portal login: {login.username}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'حساب ورود پرتال ایجاد شد.', 'login': login.to_dict()}, 201)

@settings_bp.route('/external-logins/<int:id>', methods=['DELETE'])
@login_required
@permission_required('settings', 'delete')
def delete_external_login(id):
    try:
        login = admin_service.delete_external_login(id)
        audit('delete', 'ExternalLogin', id, old_values={'username': login.username},
              description=f'Deleted portal login: {login.username}')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'حساب ورود پرتال حذف شد.'})

# Approval thresholds

@settings_bp.route('/thresholds')
@login_required
@permission_required('settings', 'view')
def thresholds():
    return json_response({'thresholds': SystemSettings.get().approval_thresholds or {}})

@settings_bp.route('/thresholds', methods=['PUT'])
@login_required
@permission_required('settings', 'edit')
def update_thresholds():
    try:
        settings = SystemSettings.get()
        old_values = dict(settings.approval_thresholds or {})
        admin_service.update_thresholds(_json_body().get('thresholds'))
        audit('update', 'SystemSettings', settings.id, old_values=old_values,
              new_values=settings.approval_thresholds,
              description='Updated approval thresholds')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'آستانه های تایید ذخیره شد.',
                          'thresholds': settings.approval_thresholds})

# Backup

@settings_bp.route('/backup')
@login_required
@admin_required
def backup():
    state = backup_service.dump_state()
    audit('backup', 'System', None, description='Downloaded database backup')
    db.session.commit()
    return json_response(state)

@settings_bp.route('/restore', methods=['POST'])
@login_required
@admin_required
def restore():
    try:
        counts = backup_service.restore_state(request.get_json(silent=True))
        # logged after the wipe so the entry is kept
        audit('restore', 'System', None, new_values=counts, description='Restored database from backup')
        db.session.commit()
    except WorkflowError as e:
        db.session.rollback()
        return json_error(str(e), e.status_code)

    return json_response({'message': 'اطلاعات از فایل پشتیبان بازیابی شد.', 'counts': counts})
