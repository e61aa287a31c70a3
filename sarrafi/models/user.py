from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from sarrafi import db, login_manager
from sarrafi.models.constants import PERMISSION_MODULES, PERMISSION_ACTIONS
from sarrafi.models.mixins import SerializerMixin

EXTERNAL_ID_PREFIX = 'ext:'

class Role(SerializerMixin, db.Model):
    __tablename__ = 'roles'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)
    description = db.Column(db.String(200))

    # {module: {action: bool}}
    permissions = db.Column(db.JSON, nullable=False, default=dict)

    users = db.relationship('User', backref='role', lazy='dynamic')

    def allows(self, module, action):
        module_permissions = (self.permissions or {}).get(module) or {}
        return module_permissions.get(action) is True

    @staticmethod
    def full_permissions():
        return {module: {action: True for action in PERMISSION_ACTIONS}
                for module in PERMISSION_MODULES}

    def __repr__(self):
        return f'<Role {self.name}>'

class User(UserMixin, SerializerMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)

    # Status
    is_active = db.Column(db.Boolean, default=True)
    is_superuser = db.Column(db.Boolean, default=False)

    # Role
    role_id = db.Column(db.Integer, db.ForeignKey('roles.id'))

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    user_type = 'internal'

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def has_permission(self, module, action):
        if self.is_superuser:
            return True
        if not self.role:
            return False
        return self.role.allows(module, action)

    def to_dict(self):
        data = super().to_dict()
        data.pop('password_hash', None)
        data['user_type'] = self.user_type
        data['role'] = self.role.name if self.role else None
        return data

    def __repr__(self):
        return f'<User {self.username}>'


class ExternalLogin(UserMixin, SerializerMixin, db.Model):
    """Portal access for a customer or a partner; read-only on their own statement."""
    __tablename__ = 'external_logins'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    login_type = db.Column(db.String(20), nullable=False)  # customer, partner
    linked_entity_id = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    is_superuser = False

    def get_id(self):
        return f'{EXTERNAL_ID_PREFIX}{self.id}'

    @property
    def user_type(self):
        return self.login_type

    @property
    def name(self):
        entity = self.entity
        return entity.name if entity else self.username

    @property
    def entity(self):
        from sarrafi.models.customer import Customer
        from sarrafi.models.partner import PartnerAccount
        model = Customer if self.login_type == 'customer' else PartnerAccount
        return db.session.get(model, self.linked_entity_id)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def has_permission(self, module, action):
        return False

    def to_dict(self):
        data = super().to_dict()
        data.pop('password_hash', None)
        entity = self.entity
        data['entity_name'] = entity.name if entity else None
        return data

    def __repr__(self):
        return f'<ExternalLogin {self.login_type}:{self.username}>'

@login_manager.user_loader
def load_user(user_id):
    if user_id.startswith(EXTERNAL_ID_PREFIX):
        return db.session.get(ExternalLogin, int(user_id[len(EXTERNAL_ID_PREFIX):]))
    return db.session.get(User, int(user_id))
