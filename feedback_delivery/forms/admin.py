"""Administration and moderation forms."""

from flask_wtf import FlaskForm
from wtforms import SelectField
from wtforms.validators import DataRequired, Length, Optional
from feedback_delivery.models import ROLES
from .fields import JSONIntegerField, JSONStringField, JSONTextAreaField


class RoleForm(FlaskForm):
    role = SelectField('Role', choices=[(r, r) for r in ROLES], validators=[
        DataRequired(message='Role is required')
    ])


class BlockForm(FlaskForm):
    """Blocking requires a reason shown to the user at login."""
    reason = JSONStringField('Reason', validators=[
        DataRequired(message='Block reason is required'),
        Length(max=255)
    ])


class DeleteReasonForm(FlaskForm):
    reason = JSONTextAreaField('Reason', validators=[
        DataRequired(message='Deletion reason is required'),
        Length(max=1000)
    ])


class ResolveReportForm(FlaskForm):
    status = SelectField('Status', choices=[('resolved', 'Resolved'), ('rejected', 'Rejected')],
                         default='resolved')
    notes = JSONTextAreaField('Notes', validators=[Optional(), Length(max=1000)])


class CategoryRenameForm(FlaskForm):
    """Rename a category across all restaurants."""
    old = JSONStringField('Current name', validators=[
        DataRequired(message='Current category name is required'),
        Length(max=100)
    ])
    new = JSONStringField('New name', validators=[
        DataRequired(message='New category name is required'),
        Length(max=100)
    ])


class AssignRestaurantForm(FlaskForm):
    restaurant_id = JSONIntegerField('Restaurant', validators=[Optional()])
