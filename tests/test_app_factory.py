# -*- coding: utf-8 -*-
import logging
from logging.handlers import RotatingFileHandler
from sarrafi.logging_config import setup_logging


def test_blueprints_registered(app):
    for name in ('auth', 'main', 'cashbox', 'bank_accounts', 'customers', 'partners',
                 'transfers', 'exchanges', 'expenses', 'reports', 'settings', 'portal'):
        assert name in app.blueprints


def test_testing_config(app):
    assert app.config['TESTING'] is True
    assert app.config['WTF_CSRF_ENABLED'] is False
    assert app.config['SUSPENSE_ACCOUNT_CODE'] == 'SUSPENSE'


def test_setup_logging_is_idempotent(tmp_path):
    logfile = str(tmp_path / 'sarrafi.log')
    root = setup_logging(log_level='debug', logfile=logfile)
    setup_logging(log_level='debug', logfile=logfile)

    file_handlers = [h for h in root.handlers
                     if isinstance(h, RotatingFileHandler) and h.baseFilename == logfile]
    assert len(file_handlers) == 1
    assert root.level == logging.DEBUG

    root.setLevel(logging.INFO)
    root.removeHandler(file_handlers[0])
    file_handlers[0].close()
