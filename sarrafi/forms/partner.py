from flask import current_app
from wtforms import StringField, TextAreaField, SelectField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange, ValidationError
from sarrafi.forms.base import ApiForm, LocalizedDecimalField, CurrencyField

class PartnerForm(ApiForm):
    name = StringField('نام همکار', validators=[
        DataRequired(),
        Length(max=150, message='نام نباید بیشتر از ۱۵۰ حرف باشد')
    ])
    province = StringField('ولایت', validators=[DataRequired(), Length(max=50)])
    whatsapp_number = StringField('شماره واتساپ', validators=[Optional(), Length(max=30)])

    def validate_province(self, field):
        if field.data not in current_app.config['PROVINCES']:
            raise ValidationError('ولایت نامعتبر است')

class SettlementForm(ApiForm):
    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    currency = CurrencyField(validators=[DataRequired()])
    description = TextAreaField('شرح', validators=[Optional()])
    bank_account_id = IntegerField('حساب بانکی', validators=[Optional()])
    account_number = StringField('شماره حساب', validators=[Optional(), Length(max=50)])

class SettleByNameForm(ApiForm):
    partner_name = StringField('نام همکار', validators=[DataRequired()])
    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    currency = CurrencyField(validators=[DataRequired()])
    type = SelectField('نوع تسویه', choices=[
        ('pay', 'پرداخت به همکار'),
        ('receive', 'دریافت از همکار')
    ], validators=[DataRequired()])
