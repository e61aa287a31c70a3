#!/usr/bin/env python
# -*- coding: utf-8 -*-

import os
from sarrafi import create_app, db
from sarrafi.models import User, Role, SystemSettings
from sarrafi.models.constants import PERMISSION_MODULES
from sarrafi.services.customer_service import get_suspense_customer


def _permissions(grants):
    """{module: [actions]} -> full permission matrix"""
    return {module: {action: True for action in grants.get(module, [])}
            for module in PERMISSION_MODULES}


ROLES = [
    {
        'name': 'manager',
        'description': 'دسترسی کامل به همه بخش ها',
        'permissions': Role.full_permissions(),
    },
    {
        'name': 'cashier',
        'description': 'تایید و رد درخواست های صندوق',
        'permissions': _permissions({
            'dashboard': ['view'],
            'cashbox': ['view', 'create', 'approve', 'process'],
            'domestic_transfers': ['view', 'process'],
            'customers': ['view'],
            'partner_accounts': ['view'],
            'amanat': ['view'],
            'expenses': ['view'],
        }),
    },
    {
        'name': 'clerk',
        'description': 'ثبت حواله، تبادله و مصارف',
        'permissions': _permissions({
            'dashboard': ['view'],
            'cashbox': ['view', 'create'],
            'domestic_transfers': ['view', 'create', 'edit', 'process'],
            'foreign_transfers': ['view', 'create', 'process'],
            'commission_transfers': ['view', 'create', 'process'],
            'account_transfers': ['view', 'create', 'process'],
            'customers': ['view', 'create', 'edit', 'process'],
            'partner_accounts': ['view', 'process'],
            'expenses': ['view', 'create'],
            'amanat': ['view', 'create', 'process'],
        }),
    },
    {
        'name': 'auditor',
        'description': 'فقط مشاهده گزارش ها',
        'permissions': _permissions({
            'dashboard': ['view'],
            'reports': ['view'],
            'customers': ['view'],
            'partner_accounts': ['view'],
        }),
    },
]


def init_database():
    """Initialize database with default data"""
    app = create_app()

    with app.app_context():
        db.create_all()
        print("✓ جداول پایگاه داده ساخته شد")

        for role_data in ROLES:
            if not Role.query.filter_by(name=role_data['name']).first():
                db.session.add(Role(**role_data))
        db.session.commit()
        print("✓ نقش های پیش فرض ساخته شد")

        if not User.query.filter_by(username='admin').first():
            password = os.environ.get('ADMIN_PASSWORD', 'admin123')
            admin = User(
                username='admin',
                name='مدیر سیستم',
                is_active=True,
                is_superuser=True,
                role=Role.query.filter_by(name='manager').first()
            )
            admin.set_password(password)
            db.session.add(admin)
            db.session.commit()
            print("✓ کاربر مدیر ساخته شد (admin)")

        SystemSettings.get()
        get_suspense_customer()
        db.session.commit()
        print("✓ تنظیمات سیستم و حساب معلق آماده است")

        print("\n" + "=" * 50)
        print("پایگاه داده با موفقیت آماده شد!")
        print("=" * 50)
        print("\nبرای اجرا:")
        print("  python run.py")
        print("=" * 50)


if __name__ == '__main__':
    init_database()
