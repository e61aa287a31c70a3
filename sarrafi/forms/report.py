from wtforms import SelectField, DateField
from wtforms.validators import DataRequired, Optional, ValidationError
from sarrafi.forms.base import ApiForm
from sarrafi.models.constants import ReportType

class ReportForm(ApiForm):
    report_type = SelectField('نوع گزارش', choices=[
        (ReportType.PROFIT_AND_LOSS, 'سود و زیان'),
        (ReportType.CASHBOX_SUMMARY, 'خلاصه صندوق'),
        (ReportType.INTERNAL_LEDGER, 'دفتر داخلی')
    ], validators=[DataRequired()])
    start_date = DateField('از تاریخ', format='%Y-%m-%d', validators=[Optional()])
    end_date = DateField('تا تاریخ', format='%Y-%m-%d', validators=[Optional()])

    def validate_end_date(self, field):
        if field.data and self.start_date.data and field.data < self.start_date.data:
            raise ValidationError('تاریخ پایان نباید قبل از تاریخ شروع باشد')
