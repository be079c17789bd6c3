"""Form fields for JSON request bodies."""

from wtforms import Field, IntegerField, StringField, TextAreaField, PasswordField


class JSONIntegerField(IntegerField):
    """Integer field that accepts JSON numbers and rejects booleans and fractions."""

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] is None or valuelist[0] == '':
            self.data = None
            return
        value = valuelist[0]
        if isinstance(value, bool):
            self.data = None
            raise ValueError(self.gettext('Not a valid integer value.'))
        if isinstance(value, float):
            if not value.is_integer():
                self.data = None
                raise ValueError(self.gettext('Not a valid integer value.'))
            value = int(value)
        super().process_formdata([value])


class StringOnlyMixin:
    """JSON bodies keep their types; text fields only take strings or null."""

    def process_formdata(self, valuelist):
        if valuelist and valuelist[0] is not None and not isinstance(valuelist[0], str):
            self.data = None
            raise ValueError(self.gettext('Not a valid string value.'))
        super().process_formdata(valuelist)


class JSONStringField(StringOnlyMixin, StringField):
    pass


class JSONTextAreaField(StringOnlyMixin, TextAreaField):
    pass


class JSONPasswordField(StringOnlyMixin, PasswordField):
    pass


class JSONObjectField(Field):
    """A JSON object, kept as a dict."""

    def process_formdata(self, valuelist):
        if not valuelist or valuelist[0] is None:
            self.data = None
            return
        if not isinstance(valuelist[0], dict):
            self.data = None
            raise ValueError(self.gettext('Must be a JSON object.'))
        self.data = valuelist[0]

    def _value(self):
        return ''
