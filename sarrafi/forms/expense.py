from wtforms import StringField, TextAreaField, SelectField, IntegerField
from wtforms.validators import DataRequired, Length, Optional, NumberRange
from sarrafi.forms.base import ApiForm, LocalizedDecimalField, CurrencyField

class ExpenseForm(ApiForm):
    category = SelectField('دسته', choices=[
        ('Salary', 'معاش'),
        ('Rent', 'کرایه'),
        ('Utilities', 'آب و برق'),
        ('Hospitality', 'پذیرایی'),
        ('Other', 'سایر')
    ], validators=[DataRequired()])
    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    currency = CurrencyField(validators=[DataRequired()])
    description = TextAreaField('شرح', validators=[Optional()])
    bank_account_id = IntegerField('حساب بانکی', validators=[Optional()])

class AmanatForm(ApiForm):
    customer_name = StringField('نام امانت گذار', validators=[DataRequired(), Length(max=150)])
    amount = LocalizedDecimalField('مبلغ', places=2, validators=[
        DataRequired(),
        NumberRange(min=0.01, message='مبلغ باید بیشتر از صفر باشد')
    ])
    currency = CurrencyField(validators=[DataRequired()])
    notes = TextAreaField('یادداشت', validators=[Optional()])
    bank_account_id = IntegerField('حساب بانکی', validators=[Optional()])
