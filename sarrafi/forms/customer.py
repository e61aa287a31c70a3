from wtforms import StringField, TextAreaField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange, ValidationError
from sarrafi.forms.base import ApiForm, LocalizedDecimalField, CurrencyField, FlagField

class CustomerForm(ApiForm):
    code = StringField('کد مشتری', validators=[
        DataRequired(),
        Length(max=30, message='کد مشتری نباید بیشتر از ۳۰ حرف باشد')
    ])
    name = StringField('نام', validators=[DataRequired(), Length(max=150)])
    whatsapp_number = StringField('شماره واتساپ', validators=[Optional(), Length(max=30)])

class CustomerUpdateForm(ApiForm):
    name = StringField('نام', validators=[DataRequired(), Length(max=150)])
    whatsapp_number = StringField('شماره واتساپ', validators=[Optional(), Length(max=30)])

class AccountTransferForm(ApiForm):
    from_customer_code = StringField('از مشتری', validators=[DataRequired()])
    to_customer_code = StringField('به مشتری')
    is_pending_assignment = FlagField('در انتظار تعیین دریافت کننده')
    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    currency = CurrencyField(validators=[DataRequired()])
    description = TextAreaField('شرح', validators=[Optional()])

    def validate_to_customer_code(self, field):
        if not self.is_pending_assignment.data and not field.data:
            raise ValidationError('کد مشتری دریافت کننده الزامی است')
        if field.data and field.data == self.from_customer_code.data:
            raise ValidationError('انتقال به همان حساب ممکن نیست')

class ReassignTransferForm(ApiForm):
    final_customer_code = StringField('مشتری نهایی', validators=[DataRequired()])

class InternalExchangeForm(ApiForm):
    customer_id = IntegerField('مشتری', validators=[DataRequired()])
    from_currency = CurrencyField('از ارز', validators=[DataRequired()])
    from_amount = LocalizedDecimalField('مبلغ مبدا', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    to_currency = CurrencyField('به ارز', validators=[DataRequired()])
    to_amount = LocalizedDecimalField('مبلغ مقصد', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    rate = LocalizedDecimalField('نرخ', places=6, validators=[
        DataRequired(),
        NumberRange(min=0.000001, message='نرخ باید بیشتر از صفر باشد')
    ])

    def validate_to_currency(self, field):
        if field.data == self.from_currency.data:
            raise ValidationError('ارز مبدا و مقصد باید متفاوت باشند')
