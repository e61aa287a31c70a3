from wtforms import StringField, SelectField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange, ValidationError
from sarrafi.forms.base import ApiForm, LocalizedDecimalField, CurrencyField, FlagField
from sarrafi.models.constants import TransferStatus

class DomesticTransferForm(ApiForm):
    sender_name = StringField('نام فرستنده', validators=[DataRequired(), Length(max=150)])
    sender_tazkereh = StringField('تذکره فرستنده', validators=[Optional(), Length(max=50)])
    receiver_name = StringField('نام گیرنده', validators=[DataRequired(), Length(max=150)])
    receiver_tazkereh = StringField('تذکره گیرنده', validators=[Optional(), Length(max=50)])

    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    commission = LocalizedDecimalField('کمیشن', places=2, default=0, validators=[
        Optional(),
        NumberRange(min=0, message='کمیشن نمی تواند منفی باشد')
    ])
    currency = CurrencyField(validators=[DataRequired()])

    destination_province = StringField('ولایت مقصد', validators=[Optional(), Length(max=50)])
    partner_sarraf = StringField('صراف همکار', validators=[DataRequired()])
    partner_reference = StringField('شماره حواله همکار', validators=[Optional(), Length(max=50)])

    is_cash_payment = FlagField('پرداخت نقدی', default=True)
    customer_code = StringField('کد مشتری')
    bank_account_id = IntegerField('حساب بانکی', validators=[Optional()])

    def validate_customer_code(self, field):
        if not self.partner_reference.data and not self.is_cash_payment.data and not field.data:
            raise ValidationError('برای پرداخت از حساب، کد مشتری الزامی است')

class TransferStatusForm(ApiForm):
    status = SelectField('وضعیت جدید', choices=[
        (TransferStatus.EXECUTED, 'اجرا شده'),
        (TransferStatus.CANCELLED, 'لغو شده')
    ], validators=[DataRequired()])

class PayoutForm(ApiForm):
    bank_account_id = IntegerField('حساب بانکی', validators=[Optional()])

class TransferSearchForm(ApiForm):
    search = StringField('جستجو', validators=[Optional()])
    status = SelectField('وضعیت', default='', choices=[('', 'همه')] + [(s, s) for s in TransferStatus.ALL],
                         validators=[Optional()])
    direction = SelectField('جهت', default='', choices=[('', 'همه'), ('outgoing', 'خروجی'), ('incoming', 'ورودی')],
                            validators=[Optional()])
    currency = StringField('واحد پول', validators=[Optional()])
