from wtforms import StringField, TextAreaField, SelectField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange, ValidationError
from sarrafi.forms.base import ApiForm, LocalizedDecimalField

class InitiateForeignExchangeForm(ApiForm):
    from_asset_id = StringField('دارایی مبدا', validators=[DataRequired()])
    from_amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    description = TextAreaField('شرح', validators=[Optional()])

class CompleteForeignExchangeForm(ApiForm):
    to_asset_id = StringField('دارایی مقصد', validators=[DataRequired()])
    to_amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])

class LogCommissionTransferForm(ApiForm):
    initiator_type = SelectField('درخواست کننده', choices=[
        ('Customer', 'مشتری'),
        ('Partner', 'همکار')
    ], validators=[DataRequired()])
    customer_code = StringField('کد مشتری')
    partner_id = IntegerField('همکار')

    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    source_account_number = StringField('حساب مبدا', validators=[Optional(), Length(max=50)])
    received_into_bank_account_id = IntegerField('حساب بانکی دریافت', validators=[DataRequired()])
    commission_percentage = LocalizedDecimalField('درصد کمیشن', places=2, validators=[
        Optional(),
        NumberRange(min=0, max=100, message='درصد کمیشن باید بین ۰ و ۱۰۰ باشد')
    ])

    def validate_customer_code(self, field):
        if self.initiator_type.data == 'Customer' and not field.data:
            raise ValidationError('کد مشتری الزامی است')

    def validate_partner_id(self, field):
        if self.initiator_type.data == 'Partner' and not field.data:
            raise ValidationError('انتخاب همکار الزامی است')

class ExecuteCommissionTransferForm(ApiForm):
    paid_from_bank_account_id = IntegerField('حساب بانکی پرداخت', validators=[DataRequired()])
    destination_account_number = StringField('حساب مقصد', validators=[DataRequired(), Length(max=50)])
