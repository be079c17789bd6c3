"""Restaurant forms."""

from numbers import Real

from flask_wtf import FlaskForm
from wtforms import BooleanField
from wtforms.validators import DataRequired, Length, Optional, ValidationError
from .fields import JSONStringField, JSONTextAreaField, JSONObjectField
from .validators import IfPresent

CRITERION_NAME_MAX = 100
CRITERION_WEIGHT_MIN = 0.1
CRITERION_WEIGHT_MAX = 10


class RestaurantForm(FlaskForm):
    """Create or edit a restaurant."""
    name = JSONStringField('Name', validators=[
        DataRequired(message='Restaurant name is required'),
        Length(min=1, max=50, message='Restaurant name must be 1 to 50 characters')
    ])
    address = JSONStringField('Address', validators=[Optional(), Length(max=255)])
    description = JSONTextAreaField('Description', validators=[Optional(), Length(max=5000)])
    image_url = JSONStringField('Image URL', validators=[Optional(), Length(max=255)])
    category = JSONStringField('Category', validators=[Optional(), Length(max=100)])
    price_range = JSONStringField('Price range', validators=[Optional(), Length(max=10)])
    is_active = BooleanField('Active', default=True)


class RestaurantUpdateForm(RestaurantForm):
    """Partial edit; only fields present in the request are applied."""
    name = JSONStringField('Name', validators=[
        IfPresent(message='Restaurant name cannot be blank'),
        Length(min=1, max=50, message='Restaurant name must be 1 to 50 characters')
    ])


class SlugForm(FlaskForm):
    """Explicit restaurant slug."""
    slug = JSONStringField('Slug', validators=[
        DataRequired(message='Slug is required'),
        Length(max=100)
    ])


class CriteriaForm(FlaskForm):
    """Rating criteria of a restaurant: criterion name -> weight."""
    criteria = JSONObjectField('Criteria')

    def validate_criteria(self, field):
        if field.data is None:
            raise ValidationError('Criteria are required')
        for name, weight in field.data.items():
            if not name.strip() or len(name.strip()) > CRITERION_NAME_MAX:
                raise ValidationError(
                    f'Criterion names must be 1 to {CRITERION_NAME_MAX} characters')
            if isinstance(weight, bool) or not isinstance(weight, Real):
                raise ValidationError(f'Weight of {name!r} must be a number')
            if not CRITERION_WEIGHT_MIN <= weight <= CRITERION_WEIGHT_MAX:
                raise ValidationError(
                    f'Weight of {name!r} must be between {CRITERION_WEIGHT_MIN} '
                    f'and {CRITERION_WEIGHT_MAX}')

    def cleaned(self):
        return {name.strip(): weight for name, weight in self.criteria.data.items()}
