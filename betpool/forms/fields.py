from wtforms import IntegerField

# Largest value of a 32-bit INTEGER column
MAX_ID = 2**31 - 1


class StrictIntegerField(IntegerField):
    """IntegerField for JSON payloads: rejects booleans and fractional numbers"""

    def process_data(self, value):
        if isinstance(value, bool) or (
            isinstance(value, float) and not value.is_integer()
        ):
            self.data = None
            raise ValueError(self.gettext("Not a valid integer value."))
        if isinstance(value, str) and not value.strip():
            self.data = None
            return
        super().process_data(value)


def first_error(form):
    """Return the first validation message of a (nested) form, or None"""

    def walk(errors):
        if isinstance(errors, dict):
            for value in errors.values():
                found = walk(value)
                if found:
                    return found
        elif isinstance(errors, (list, tuple)):
            for value in errors:
                found = walk(value)
                if found:
                    return found
        elif errors:
            return str(errors)
        return None

    return walk(form.errors)
