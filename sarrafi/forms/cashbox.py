from wtforms import StringField, TextAreaField, SelectField, IntegerField, DateField
from wtforms.validators import DataRequired, Length, Optional, NumberRange, ValidationError
from sarrafi.forms.base import ApiForm, LocalizedDecimalField, CurrencyField
from sarrafi.models.constants import RequestType, CashboxRequestStatus, BANK_CURRENCY

AMOUNT_MESSAGE = 'مبلغ باید بیشتر از صفر باشد'

class CashboxRequestForm(ApiForm):
    request_type = SelectField('نوع درخواست', choices=[
        (RequestType.DEPOSIT, 'واریز'),
        (RequestType.WITHDRAWAL, 'برداشت')
    ], validators=[DataRequired()])

    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message=AMOUNT_MESSAGE)
    ])
    currency = CurrencyField(validators=[DataRequired()])
    reason = TextAreaField('شرح', validators=[DataRequired()])

    customer_code = StringField('کد مشتری', validators=[Optional(), Length(max=30)])
    bank_account_id = IntegerField('حساب بانکی')
    source_account_number = StringField('حساب مبدا', validators=[Optional(), Length(max=50)])
    destination_account_number = StringField('حساب مقصد', validators=[Optional(), Length(max=50)])

    def validate_bank_account_id(self, field):
        if self.currency.data == BANK_CURRENCY and not field.data:
            raise ValidationError('برای تومان بانکی انتخاب حساب بانکی الزامی است')

class ResolveRequestForm(ApiForm):
    resolution = SelectField('نتیجه', choices=[
        ('approve', 'تایید'),
        ('reject', 'رد')
    ], validators=[DataRequired()])

class IncreaseBalanceForm(ApiForm):
    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message=AMOUNT_MESSAGE)
    ])
    currency = CurrencyField(validators=[DataRequired()])
    description = TextAreaField('شرح', validators=[DataRequired()])
    bank_account_id = IntegerField('حساب بانکی')
    source_account_number = StringField('حساب مبدا', validators=[Optional(), Length(max=50)])

    def validate_bank_account_id(self, field):
        if self.currency.data == BANK_CURRENCY and not field.data:
            raise ValidationError('برای تومان بانکی انتخاب حساب بانکی الزامی است')

class CashboxSearchForm(ApiForm):
    search = StringField('جستجو', validators=[Optional()])
    requested_by = StringField('درخواست کننده', validators=[Optional()])
    request_type = SelectField('نوع', default='', choices=[('', 'همه')] + [(t, t) for t in RequestType.ALL],
                               validators=[Optional()])
    status = SelectField('وضعیت', default='', choices=[('', 'همه')] + [(s, s) for s in CashboxRequestStatus.ALL],
                         validators=[Optional()])
    currency = StringField('واحد پول', validators=[Optional()])
    start_date = DateField('از تاریخ', format='%Y-%m-%d', validators=[Optional()])
    end_date = DateField('تا تاریخ', format='%Y-%m-%d', validators=[Optional()])

class BankAccountForm(ApiForm):
    bank_name = StringField('نام بانک', validators=[DataRequired(), Length(max=100)])
    account_holder = StringField('صاحب حساب', validators=[DataRequired(), Length(max=150)])
    account_number = StringField('شماره حساب', validators=[DataRequired(), Length(max=50)])
    card_to_card_number = StringField('شماره کارت', validators=[Optional(), Length(max=30)])
    currency = CurrencyField(default=BANK_CURRENCY, validators=[DataRequired()])

class LedgerFilterForm(ApiForm):
    description = StringField('شرح', validators=[Optional()])
    type = StringField('نوع', validators=[Optional()])
    start_date = DateField('از تاریخ', format='%Y-%m-%d', validators=[Optional()])
    end_date = DateField('تا تاریخ', format='%Y-%m-%d', validators=[Optional()])
