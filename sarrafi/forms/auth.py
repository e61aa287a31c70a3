from wtforms import StringField, PasswordField, IntegerField, SelectField
from wtforms.validators import DataRequired, Length, Optional
from sarrafi.forms.base import ApiForm, FlagField

class LoginForm(ApiForm):
    username = StringField('نام کاربری', validators=[DataRequired()])
    password = PasswordField('رمز عبور', validators=[DataRequired()])
    remember_me = FlagField('مرا به خاطر بسپار')

class UserForm(ApiForm):
    username = StringField('نام کاربری', validators=[
        DataRequired(),
        Length(min=3, max=80, message='نام کاربری باید بین ۳ تا ۸۰ حرف باشد')
    ])
    name = StringField('نام کامل', validators=[DataRequired(), Length(max=100)])
    password = PasswordField('رمز عبور', validators=[
        DataRequired(),
        Length(min=6, message='رمز عبور باید حداقل ۶ حرف باشد')
    ])
    role_id = IntegerField('نقش', validators=[Optional()])
    is_superuser = FlagField('مدیر سیستم')

class UserUpdateForm(ApiForm):
    name = StringField('نام کامل', validators=[DataRequired(), Length(max=100)])
    password = PasswordField('رمز عبور جدید', validators=[
        Optional(),
        Length(min=6, message='رمز عبور باید حداقل ۶ حرف باشد')
    ])
    role_id = IntegerField('نقش', validators=[Optional()])
    is_active = FlagField('فعال', default=True)

class ExternalLoginForm(ApiForm):
    username = StringField('نام کاربری', validators=[DataRequired(), Length(min=3, max=80)])
    password = PasswordField('رمز عبور', validators=[DataRequired(), Length(min=6)])
    login_type = SelectField('نوع', choices=[
        ('customer', 'مشتری'),
        ('partner', 'همکار')
    ], validators=[DataRequired()])
    linked_entity_id = IntegerField('حساب مرتبط', validators=[DataRequired()])

class RoleForm(ApiForm):
    name = StringField('نام نقش', validators=[DataRequired(), Length(max=50)])
    description = StringField('توضیحات', validators=[Optional(), Length(max=200)])
