from datetime import datetime
from decimal import Decimal, InvalidOperation
from sarrafi import db
from sarrafi.models.mixins import SerializerMixin

class SystemSettings(SerializerMixin, db.Model):
    __tablename__ = 'system_settings'

    id = db.Column(db.Integer, primary_key=True)

    # {currency: "amount"}; requests at or below the amount skip the manager step
    approval_thresholds = db.Column(db.JSON, nullable=False, default=dict)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def get(cls):
        settings = db.session.get(cls, 1)
        if settings is None:
            settings = cls(id=1, approval_thresholds={})
            db.session.add(settings)
            db.session.flush()
        return settings

    def threshold_for(self, currency):
        raw = (self.approval_thresholds or {}).get(currency)
        if raw in (None, ''):
            return None
        try:
            return Decimal(str(raw))
        except InvalidOperation:
            return None

    def __repr__(self):
        return f'<SystemSettings {self.approval_thresholds}>'
