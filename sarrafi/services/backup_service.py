"""Whole-database JSON backup and restore."""
import logging
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import Date, DateTime, Numeric
from sarrafi import db
from sarrafi.models.mixins import to_json_value
from sarrafi.services.errors import WorkflowError

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1


def dump_state():
    """Every table's rows, parents before children."""
    tables = {}
    for table in db.metadata.sorted_tables:
        rows = db.session.execute(table.select()).mappings().all()
        tables[table.name] = [{key: to_json_value(value) for key, value in row.items()}
                              for row in rows]
    return {
        'version': BACKUP_VERSION,
        'created_at': datetime.utcnow().isoformat(),
        'tables': tables,
    }


def _convert(column, value):
    if value is None:
        return None
    if isinstance(column.type, DateTime):
        return datetime.fromisoformat(value)
    if isinstance(column.type, Date):
        return date.fromisoformat(value)
    if isinstance(column.type, Numeric):
        return Decimal(str(value))
    return value


def restore_state(backup):
    """Replace all rows with the ones in ``backup``; the caller commits."""
    if not isinstance(backup, dict) or not isinstance(backup.get('tables'), dict):
        raise WorkflowError('فایل پشتیبان نامعتبر است.')

    tables = backup['tables']
    known = {table.name for table in db.metadata.sorted_tables}
    unknown = set(tables) - known
    if unknown:
        raise WorkflowError(f'جداول ناشناخته در فایل پشتیبان: {", ".join(sorted(unknown))}')

    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())

    counts = {}
    for table in db.metadata.sorted_tables:
        rows = tables.get(table.name) or []
        converted = []
        for row in rows:
            try:
                converted.append({column.name: _convert(column, row.get(column.name))
                                  for column in table.columns if column.name in row})
            except (TypeError, ValueError) as e:
                raise WorkflowError(f'داده نامعتبر در جدول {table.name}: {e}')
        if converted:
            db.session.execute(table.insert(), converted)
        counts[table.name] = len(converted)

    db.session.flush()
    logger.warning('Database restored from backup: %s', counts)
    return counts
