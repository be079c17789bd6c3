"""Authentication forms."""

from flask_wtf import FlaskForm
from wtforms.validators import DataRequired, Email, Length, Regexp
from .fields import JSONStringField, JSONPasswordField


class RegistrationForm(FlaskForm):
    """Account registration form."""
    name = JSONStringField('Name', validators=[
        DataRequired(message='Name is required'),
        Regexp(r'^[A-Za-zА-Яа-яЁё\s\d]{2,50}$',
               message='Name must be 2 to 50 letters, digits or spaces')
    ])
    email = JSONStringField('Email', validators=[
        DataRequired(message='Email is required'),
        Email(message='Please enter a valid email address'),
        Length(max=100)
    ])
    password = JSONPasswordField('Password', validators=[
        DataRequired(message='Password is required'),
        Regexp(r'^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d]{8,}$',
               message='Password must be at least 8 characters with letters and digits')
    ])


class LoginForm(FlaskForm):
    """Login form."""
    email = JSONStringField('Email', validators=[
        DataRequired(message='Email is required')
    ])
    password = JSONPasswordField('Password', validators=[
        DataRequired(message='Password is required')
    ])
