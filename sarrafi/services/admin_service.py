"""Users, roles, portal logins and system settings."""
import logging
from decimal import Decimal, InvalidOperation
from sqlalchemy import select
from sarrafi import db
from sarrafi.models import User, Role, ExternalLogin, Customer, PartnerAccount, SystemSettings
from sarrafi.models.constants import CURRENCIES, PERMISSION_MODULES, PERMISSION_ACTIONS
from sarrafi.services.errors import WorkflowError, NotFoundError

logger = logging.getLogger(__name__)


def _get(model, object_id, message):
    obj = db.session.get(model, object_id)
    if obj is None:
        raise NotFoundError(message)
    return obj


def _username_taken(username, exclude_user_id=None):
    query = User.query.filter_by(username=username)
    if exclude_user_id:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None or \
        ExternalLogin.query.filter_by(username=username).first() is not None


def create_user(username, password, name, role_id=None, is_superuser=False):
    if _username_taken(username):
        raise WorkflowError('این نام کاربری قبلاً استفاده شده است.')
    if role_id:
        _get(Role, role_id, 'نقش یافت نشد.')
    user = User(username=username, name=name, role_id=role_id or None, is_superuser=bool(is_superuser))
    user.set_password(password)
    db.session.add(user)
    db.session.flush()
    logger.info('User created: %s', username)
    return user


def update_user(user_id, name, role_id=None, password=None, is_active=True):
    user = _get(User, user_id, 'کاربر یافت نشد.')
    if role_id:
        _get(Role, role_id, 'نقش یافت نشد.')
    user.name = name
    user.role_id = role_id or None
    user.is_active = bool(is_active)
    if password:
        user.set_password(password)
    db.session.flush()
    return user


def _has_history(user_id):
    """True when any record still points at the user."""
    for table in db.metadata.sorted_tables:
        for column in table.columns:
            if any(fk.column.table.name == User.__tablename__ for fk in column.foreign_keys):
                found = db.session.execute(
                    select(column).where(column == user_id).limit(1)
                ).first()
                if found is not None:
                    return True
    return False


def delete_user(user_id, acting_user):
    """Delete a user, or deactivate it when records still reference it.

    Returns ``(user, deleted)``.
    """
    user = _get(User, user_id, 'کاربر یافت نشد.')
    if user.id == acting_user.id:
        raise WorkflowError('نمی توانید حساب کاربری خودتان را حذف کنید.')
    if _has_history(user.id):
        user.is_active = False
        db.session.flush()
        logger.info('User %s has history, deactivated instead of deleted', user.username)
        return user, False
    db.session.delete(user)
    db.session.flush()
    logger.info('User deleted: %s', user.username)
    return user, True


def clean_permissions(permissions):
    """Keep known modules and actions only, as strict booleans."""
    permissions = permissions or {}
    if not isinstance(permissions, dict):
        raise WorkflowError('ساختار دسترسی ها نامعتبر است.')
    return {module: {action: (permissions.get(module) or {}).get(action) is True
                     for action in PERMISSION_ACTIONS}
            for module in PERMISSION_MODULES}


def create_role(name, description=None, permissions=None):
    if Role.query.filter_by(name=name).first():
        raise WorkflowError('نقشی با این نام وجود دارد.')
    role = Role(name=name, description=description, permissions=clean_permissions(permissions))
    db.session.add(role)
    db.session.flush()
    return role


def update_role(role_id, name, description=None, permissions=None):
    role = _get(Role, role_id, 'نقش یافت نشد.')
    clash = Role.query.filter(Role.name == name, Role.id != role.id).first()
    if clash:
        raise WorkflowError('نقشی با این نام وجود دارد.')
    role.name = name
    role.description = description
    role.permissions = clean_permissions(permissions)
    db.session.flush()
    return role


def delete_role(role_id):
    role = _get(Role, role_id, 'نقش یافت نشد.')
    if role.users.count():
        raise WorkflowError('این نقش به کاربرانی اختصاص داده شده و قابل حذف نیست.')
    db.session.delete(role)
    db.session.flush()
    return role


def create_external_login(username, password, login_type, linked_entity_id):
    if login_type not in ('customer', 'partner'):
        raise WorkflowError('نوع ورود باید customer یا partner باشد.')
    if _username_taken(username):
        raise WorkflowError('این نام کاربری قبلاً استفاده شده است.')
    model = Customer if login_type == 'customer' else PartnerAccount
    _get(model, linked_entity_id, 'حساب مرتبط یافت نشد.')

    login = ExternalLogin(username=username, login_type=login_type, linked_entity_id=linked_entity_id)
    login.set_password(password)
    db.session.add(login)
    db.session.flush()
    logger.info('External login created: %s (%s %s)', username, login_type, linked_entity_id)
    return login


def delete_external_login(login_id):
    login = _get(ExternalLogin, login_id, 'حساب ورود یافت نشد.')
    db.session.delete(login)
    db.session.flush()
    return login


def update_thresholds(thresholds):
    """Replace the per-currency approval thresholds; empty values clear a currency."""
    if not isinstance(thresholds, dict):
        raise WorkflowError('ساختار آستانه ها نامعتبر است.')

    cleaned = {}
    for currency, value in thresholds.items():
        if currency not in CURRENCIES:
            raise WorkflowError(f'واحد پول نامعتبر است: {currency}')
        if value in (None, ''):
            continue
        try:
            amount = Decimal(str(value))
        except InvalidOperation:
            raise WorkflowError(f'آستانه {currency} نامعتبر است.')
        if amount < 0:
            raise WorkflowError(f'آستانه {currency} نمی تواند منفی باشد.')
        cleaned[currency] = str(amount)

    settings = SystemSettings.get()
    settings.approval_thresholds = cleaned
    db.session.flush()
    return settings
