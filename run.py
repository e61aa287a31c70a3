#!/usr/bin/env python
# -*- coding: utf-8 -*-

import os
from sarrafi import create_app, db
from sarrafi.models import User, Role, Customer, PartnerAccount, BankAccount, CashboxRequest

app = create_app()

@app.shell_context_processor
def make_shell_context():
    return {
        'db': db,
        'User': User,
        'Role': Role,
        'Customer': Customer,
        'PartnerAccount': PartnerAccount,
        'BankAccount': BankAccount,
        'CashboxRequest': CashboxRequest,
    }

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_DEBUG') == '1')
