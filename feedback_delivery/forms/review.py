"""Review and report forms."""

from flask_wtf import FlaskForm
from wtforms import SelectField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, ValidationError
from feedback_delivery.models import REVIEW_TYPES, CRITERIA_FIELDS
from .fields import JSONIntegerField, JSONStringField, JSONTextAreaField
from .validators import IfPresent

TYPE_CHOICES = [(t, t) for t in REVIEW_TYPES]


def criterion_field(label):
    """0 means the criterion was not rated."""
    return JSONIntegerField(label, validators=[
        Optional(),
        NumberRange(min=0, max=5, message=f'{label} must be an integer from 0 to 5')
    ])


class CriteriaRatingsMixin:
    food_rating = criterion_field('Food rating')
    service_rating = criterion_field('Service rating')
    atmosphere_rating = criterion_field('Atmosphere rating')
    price_rating = criterion_field('Price rating')
    cleanliness_rating = criterion_field('Cleanliness rating')

    def criteria_ratings(self):
        """Criteria sent in the request, by column name."""
        return {name: self[name].data for name in CRITERIA_FIELDS
                if self[name].data is not None}


class ReviewForm(CriteriaRatingsMixin, FlaskForm):
    """New review; the restaurant is given by id or by exact name."""
    restaurant_id = JSONIntegerField('Restaurant', validators=[Optional()])
    restaurant_name = JSONStringField('Restaurant name', validators=[
        Optional(),
        Length(min=1, max=50, message='Restaurant name must be 1 to 50 characters')
    ])
    rating = JSONIntegerField('Rating', validators=[
        NumberRange(min=1, max=5, message='Rating must be an integer from 1 to 5')
    ])
    content = JSONTextAreaField('Review', validators=[
        DataRequired(message='Review text is required'),
        Length(max=1000, message='Review must be at most 1000 characters')
    ])
    type = SelectField('Type', choices=TYPE_CHOICES, default='inRestaurant')

    def validate(self, extra_validators=None):
        if not super().validate(extra_validators):
            return False
        if self.restaurant_id.data is None and not self.restaurant_name.data:
            self.restaurant_id.errors.append('restaurant_id or restaurant_name is required')
            return False
        return True


class ReviewUpdateForm(CriteriaRatingsMixin, FlaskForm):
    """Partial review edit by its author."""
    rating = JSONIntegerField('Rating', validators=[
        Optional(),
        NumberRange(min=1, max=5, message='Rating must be an integer from 1 to 5')
    ])
    content = JSONTextAreaField('Review', validators=[
        IfPresent(message='Review text cannot be blank'),
        Length(min=1, max=1000, message='Review must be 1 to 1000 characters')
    ])
    type = SelectField('Type', choices=TYPE_CHOICES, validators=[Optional()],
                       validate_choice=False)

    def validate_type(self, field):
        if field.raw_data and field.data not in REVIEW_TYPES:
            raise ValidationError('Type must be inRestaurant or delivery')


class ReportForm(FlaskForm):
    """Error report on a review."""
    reason = JSONTextAreaField('Reason', validators=[
        DataRequired(message='Reason is required'),
        Length(max=1000)
    ])
