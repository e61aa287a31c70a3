from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    from sarrafi.logging_config import setup_logging
    setup_logging(app)

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'لطفاً ابتدا وارد سیستم شوید.'}), 401

    # Register blueprints
    from sarrafi.views.auth import auth_bp
    from sarrafi.views.main import main_bp
    from sarrafi.views.cashbox import cashbox_bp
    from sarrafi.views.bank_accounts import bank_accounts_bp
    from sarrafi.views.customers import customers_bp
    from sarrafi.views.partners import partners_bp
    from sarrafi.views.transfers import transfers_bp
    from sarrafi.views.exchanges import exchanges_bp
    from sarrafi.views.expenses import expenses_bp
    from sarrafi.views.reports import reports_bp
    from sarrafi.views.settings import settings_bp
    from sarrafi.views.portal import portal_bp

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(main_bp)
    app.register_blueprint(cashbox_bp, url_prefix='/cashbox')
    app.register_blueprint(bank_accounts_bp, url_prefix='/bank-accounts')
    app.register_blueprint(customers_bp, url_prefix='/customers')
    app.register_blueprint(partners_bp, url_prefix='/partners')
    app.register_blueprint(transfers_bp, url_prefix='/transfers')
    app.register_blueprint(exchanges_bp, url_prefix='/exchanges')
    app.register_blueprint(expenses_bp)
    app.register_blueprint(reports_bp, url_prefix='/reports')
    app.register_blueprint(settings_bp, url_prefix='/settings')
    app.register_blueprint(portal_bp, url_prefix='/portal')

    from sarrafi.utils.http import register_error_handlers
    register_error_handlers(app)

    app.logger.info('Sarrafi back-office started (db=%s)', app.config['SQLALCHEMY_DATABASE_URI'].split('://')[0])

    return app
