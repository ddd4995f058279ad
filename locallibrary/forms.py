from dateutil.parser import isoparse
from flask_wtf import FlaskForm
from markupsafe import escape
from wtforms import Field, SelectMultipleField, StringField, TextAreaField
from wtforms.validators import Length, Regexp, ValidationError
from wtforms.widgets import CheckboxInput, DateInput, ListWidget

from . import store

ALPHANUMERIC = r"^[A-Za-z0-9]+$"


# --- Filters / validators ---
def strip_whitespace(value):
    return value.strip() if isinstance(value, str) else value


def escape_html(value):
    # & < > " ' all become entities; comments and existing entities are escaped too.
    return str(escape(value))


def escape_each(values):
    return [escape_html(strip_whitespace(v)) for v in values or ()]


class Escape:
    """Replace HTML-unsafe characters in the field data with entities.

    Runs as part of the validator chain so that earlier rules (length) see
    the trimmed input and later rules (character class) see the escaped one.
    """
    field_flags = {}

    def __call__(self, form, field):
        if field.data:
            field.data = escape_html(field.data)


class IsoDateField(Field):
    """Optional ISO-8601 calendar date.

    Missing or blank input means "no value". Anything else must parse with
    ``dateutil.parser.isoparse``; a full timestamp is cut down to its date.
    """
    widget = DateInput()

    def __init__(self, label=None, validators=None, message="Not a valid date value.", **kwargs):
        super().__init__(label, validators, **kwargs)
        self.message = message

    def _value(self):
        if self.raw_data:
            return " ".join(self.raw_data)
        return self.data.isoformat() if self.data else ""

    def process_formdata(self, valuelist):
        raw = valuelist[0].strip() if valuelist else ""
        if not raw:
            self.data = None
            return
        try:
            self.data = isoparse(raw).date()
        except (ValueError, OverflowError):
            self.data = None
            raise ValueError(self.message)


class MultiCheckboxField(SelectMultipleField):
    widget = ListWidget(prefix_label=False)
    option_widget = CheckboxInput()


# --- Forms ---
class CatalogForm(FlaskForm):

    def error_list(self):
        """Failures as ``[{"field": ..., "msg": ...}]``, in field order."""
        return [
            {"field": name, "msg": msg}
            for name, messages in self.errors.items()
            for msg in messages
        ]


class AuthorForm(CatalogForm):
    first_name = StringField("First Name", default="", filters=[strip_whitespace], validators=[
        Length(min=1, message="First name must be specified."),
        Length(max=100, message="First name must be at most 100 characters."),
        Escape(),
        Regexp(ALPHANUMERIC, message="First name has non-alphanumeric characters."),
    ])
    family_name = StringField("Family Name", default="", filters=[strip_whitespace], validators=[
        Length(min=1, message="Family name must be specified."),
        Length(max=100, message="Family name must be at most 100 characters."),
        Escape(),
        Regexp(ALPHANUMERIC, message="Family name has non-alphanumeric characters."),
    ])
    date_of_birth = IsoDateField("Date of birth", message="Invalid date of birth")
    date_of_death = IsoDateField("Date of death", message="Invalid date of death")

    def fill(self, author):
        author.first_name = self.first_name.data
        author.family_name = self.family_name.data
        author.date_of_birth = self.date_of_birth.data
        author.date_of_death = self.date_of_death.data
        return author


class GenreForm(CatalogForm):
    name = StringField("Genre", default="", filters=[strip_whitespace], validators=[
        Length(min=3, message="Genre name must contain at least 3 characters"),
        Length(max=100, message="Genre name must be at most 100 characters."),
        Escape(),
    ])

    def fill(self, genre):
        genre.name = self.name.data
        return genre


class BookForm(CatalogForm):
    title = StringField("Title", default="", filters=[strip_whitespace], validators=[
        Length(min=1, message="Title must not be empty."),
        Length(max=250, message="Title must be at most 250 characters."),
        Escape(),
    ])
    author = StringField("Author", default="", filters=[strip_whitespace], validators=[
        Length(min=1, message="Author must not be empty."),
        Escape(),
    ])
    summary = TextAreaField("Summary", default="", filters=[strip_whitespace], validators=[
        Length(min=1, message="Summary must not be empty."),
        Escape(),
    ])
    isbn = StringField("ISBN", default="", filters=[strip_whitespace], validators=[
        Length(min=1, message="ISBN must not be empty"),
        Length(max=32, message="ISBN must be at most 32 characters."),
        Escape(),
    ])
    genre = MultiCheckboxField("Genre", choices=[], validate_choice=False, filters=[escape_each])

    def validate_author(self, field):
        if field.data and self.selected_author() is None:
            raise ValidationError("Author not found.")

    def selected_author(self):
        try:
            return store.get_author(int(self.author.data))
        except (TypeError, ValueError):
            return None

    def fill(self, book):
        book.title = self.title.data
        book.summary = self.summary.data
        book.isbn = self.isbn.data
        book.author = self.selected_author()
        book.genres = store.genres_by_ids(self.genre.data)
        return book
