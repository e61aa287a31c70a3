from decimal import Decimal, InvalidOperation
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, DecimalField, SelectField
from sarrafi.models.constants import CURRENCIES
from sarrafi.utils.numbers import persian_to_english_number

CURRENCY_CHOICES = [(currency, currency) for currency in CURRENCIES]
FALSE_VALUES = ('false', 'False', '0', '')


def json_formdata(payload):
    """Flatten a JSON object into form data: nulls dropped, booleans as 'y' or ''."""
    formdata = MultiDict()
    for key, value in (payload or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            formdata.add(key, 'y' if value else '')
        elif isinstance(value, (list, tuple)):
            for item in value:
                formdata.add(key, str(item))
        else:
            formdata.add(key, str(value))
    return formdata


class ApiForm(FlaskForm):
    """FlaskForm that also reads a flat JSON object sent as the request body."""

    def __init__(self, *args, **kwargs):
        if not args and 'formdata' not in kwargs and request.is_json:
            payload = request.get_json(silent=True)
            kwargs['formdata'] = json_formdata(payload if isinstance(payload, dict) else {})
        super().__init__(*args, **kwargs)


class LocalizedDecimalField(DecimalField):
    """Decimal input that accepts Persian digits and thousands separators."""

    def process_formdata(self, valuelist):
        if not valuelist:
            return
        raw = persian_to_english_number(valuelist[0])
        raw = raw.replace('٬', '').replace(',', '').replace('٫', '.').strip()
        if raw == '':
            self.data = None
            return
        try:
            self.data = Decimal(raw)
        except InvalidOperation:
            self.data = None
            raise ValueError('مقدار عددی نامعتبر است.')


class CurrencyField(SelectField):
    def __init__(self, label='واحد پول', **kwargs):
        kwargs.setdefault('choices', CURRENCY_CHOICES)
        super().__init__(label, **kwargs)


class FlagField(BooleanField):
    """Boolean that keeps its default when the key is absent from the body."""

    def __init__(self, label=None, **kwargs):
        kwargs.setdefault('false_values', FALSE_VALUES)
        super().__init__(label, **kwargs)

    def process_formdata(self, valuelist):
        if valuelist:
            super().process_formdata(valuelist)
