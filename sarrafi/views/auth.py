from datetime import datetime
from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from flask_wtf.csrf import generate_csrf
from sarrafi import db
from sarrafi.models import User, ExternalLogin
from sarrafi.forms import LoginForm
from sarrafi.utils.http import audit, form_errors, json_error

auth_bp = Blueprint('auth', __name__)

@auth_bp.route('/csrf-token')
def csrf_token():
    return jsonify({'csrf_token': generate_csrf()})

@auth_bp.route('/login', methods=['POST'])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return form_errors(form)

    # Staff first, then customer/partner portal logins
    account = User.query.filter_by(username=form.username.data).first() or \
        ExternalLogin.query.filter_by(username=form.username.data).first()

    if account is None or not account.check_password(form.password.data):
        # Log failed login attempt
        audit('login_failed', description=f'Failed login attempt for username: {form.username.data}',
              status='failed')
        db.session.commit()
        return json_error('نام کاربری یا رمز عبور اشتباه است.', 401)

    if not account.is_active:
        audit('login_failed', description=f'Login attempt on inactive account: {form.username.data}',
              status='failed')
        db.session.commit()
        return json_error('حساب شما غیرفعال است. با مدیر سیستم تماس بگیرید.', 403)

    login_user(account, remember=form.remember_me.data)
    if isinstance(account, User):
        account.last_login = datetime.utcnow()

    audit('login', description=f'{account.user_type} login', user=account)
    db.session.commit()

    return jsonify({'message': f'خوش آمدید {account.name}!', 'user': account.to_dict()})

@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    audit('logout', description='User logged out')
    db.session.commit()

    logout_user()
    return jsonify({'message': 'با موفقیت خارج شدید.'})

@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})
