"""Validators for partial JSON updates."""

from wtforms.validators import StopValidation


class IfPresent:
    """Skip a field the request leaves out (or sends as null); reject one sent blank.

    Used instead of ``Optional`` on partial edits, where ``Optional`` would let
    a whitespace-only value through.
    """
    field_flags = {'optional': True}

    def __init__(self, message=None):
        self.message = message

    def __call__(self, form, field):
        if not field.raw_data or field.raw_data[0] is None:
            field.errors[:] = []
            raise StopValidation()
        if isinstance(field.data, str) and not field.data.strip():
            raise StopValidation(self.message or field.gettext('This field cannot be blank.'))
