from flask import url_for
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


book_genre = db.Table(
    'book_genre',
    db.Column('book_id', db.Integer, db.ForeignKey('books.id'), primary_key=True),
    db.Column('genre_id', db.Integer, db.ForeignKey('genres.id'), primary_key=True),
)


def format_date(value):
    """Render a date as ``Dec 16, 1775``; empty string for no date."""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


# --- Models ---
class Author(db.Model):
    __tablename__ = 'authors'
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    family_name = db.Column(db.String(100), nullable=False, index=True)
    date_of_birth = db.Column(db.Date)
    date_of_death = db.Column(db.Date)

    # No cascade: books keep pointing at their author, deletion is guarded in the views.
    books = db.relationship('Book', back_populates='author')

    @property
    def name(self):
        if self.first_name and self.family_name:
            return f"{self.family_name}, {self.first_name}"
        return ""

    @property
    def date_of_birth_formatted(self):
        return format_date(self.date_of_birth)

    @property
    def date_of_death_formatted(self):
        return format_date(self.date_of_death)

    @property
    def lifespan(self):
        return f"{self.date_of_birth_formatted} - {self.date_of_death_formatted}"

    @property
    def url(self):
        return url_for('catalog.author_detail', author_id=self.id)

    def __repr__(self):
        return f"Author(id={self.id}, name={self.name!r})"


class Genre(db.Model):
    __tablename__ = 'genres'
    id = db.Column(db.Integer, primary_key=True)
    # Case-insensitive uniqueness is checked on create only, not stored as a constraint.
    name = db.Column(db.String(100), nullable=False, index=True)

    books = db.relationship('Book', secondary=book_genre, back_populates='genres')

    @property
    def url(self):
        return url_for('catalog.genre_detail', genre_id=self.id)

    def __repr__(self):
        return f"Genre(id={self.id}, name={self.name!r})"


class Book(db.Model):
    __tablename__ = 'books'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(250), nullable=False, index=True)
    summary = db.Column(db.Text, nullable=False)
    isbn = db.Column(db.String(32), nullable=False)
    author_id = db.Column(db.Integer, db.ForeignKey('authors.id'), nullable=False, index=True)

    author = db.relationship('Author', back_populates='books')
    genres = db.relationship('Genre', secondary=book_genre, back_populates='books',
                             order_by='Genre.name')

    @property
    def url(self):
        return url_for('catalog.book_detail', book_id=self.id)

    def __repr__(self):
        return f"Book(id={self.id}, title={self.title!r})"
