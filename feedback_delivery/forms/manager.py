"""Manager forms."""

from flask_wtf import FlaskForm
from wtforms import SelectField
from wtforms.validators import DataRequired, Length
from feedback_delivery.models import REVIEW_TYPES
from .fields import JSONTextAreaField


class ResponseForm(FlaskForm):
    """Manager's public answer to a review."""
    text = JSONTextAreaField('Response', validators=[
        DataRequired(message='Response text is required'),
        Length(max=2000, message='Response must be at most 2000 characters')
    ])


class ReviewTypeForm(FlaskForm):
    type = SelectField('Type', choices=[(t, t) for t in REVIEW_TYPES], validators=[
        DataRequired(message='Type is required')
    ])
