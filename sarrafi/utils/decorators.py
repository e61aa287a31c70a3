from functools import wraps
from flask import jsonify
from flask_login import current_user

def permission_required(module, action):
    """Decorator to check if user has a permission on a module"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': 'لطفاً ابتدا وارد سیستم شوید.'}), 401

            if not current_user.has_permission(module, action):
                return jsonify({'error': 'شما اجازه انجام این عملیات را ندارید.'}), 403

            return f(*args, **kwargs)
        return decorated_function
    return decorator

def admin_required(f):
    """Decorator to check if user is admin"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'لطفاً ابتدا وارد سیستم شوید.'}), 401

        if not current_user.is_superuser:
            return jsonify({'error': 'این بخش فقط برای مدیر سیستم است.'}), 403

        return f(*args, **kwargs)
    return decorated_function

def portal_login_required(f):
    """Decorator for customer/partner portal endpoints"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'لطفاً ابتدا وارد سیستم شوید.'}), 401

        if current_user.user_type not in ('customer', 'partner'):
            return jsonify({'error': 'این بخش فقط برای مشتریان و همکاران است.'}), 403

        return f(*args, **kwargs)
    return decorated_function
