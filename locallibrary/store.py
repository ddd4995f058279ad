"""Query and persistence helpers shared by the catalog views.

Every write commits its own unit of work. Nothing here spans several
statements in one transaction, so a check made by a caller (for example
"no book references this author") can be stale by the time the caller acts
on it.
"""
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from .models import db, Author, Book, Genre, book_genre


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


def save(obj):
    """Insert or update one entity."""
    db.session.add(obj)
    _commit()
    return obj


def _delete(model, ident):
    if ident is None:
        return False
    obj = db.session.get(model, ident)
    if obj is None:
        return False
    db.session.delete(obj)
    _commit()
    return True


# --- Authors ---
def list_authors():
    return db.session.scalars(
        db.select(Author).order_by(Author.family_name, Author.first_name)
    ).all()


def get_author(author_id):
    return db.session.get(Author, author_id)


def books_by_author(author_id):
    """Books written by the author, projected to ``id``, ``title`` and ``summary``."""
    return db.session.execute(
        db.select(Book.id, Book.title, Book.summary)
        .where(Book.author_id == author_id)
        .order_by(Book.title)
    ).all()


def delete_author(author_id):
    return _delete(Author, author_id)


# --- Genres ---
def list_genres():
    return db.session.scalars(db.select(Genre).order_by(Genre.name)).all()


def get_genre(genre_id):
    return db.session.get(Genre, genre_id)


def find_genre_by_name(name):
    """Case-insensitive lookup of a genre by its name.

    Names are compared with ``str.casefold`` in Python; SQLite's ``lower()``
    only folds ASCII letters.
    """
    wanted = name.casefold()
    for genre in db.session.scalars(db.select(Genre).order_by(Genre.id)):
        if genre.name.casefold() == wanted:
            return genre
    return None


def genres_by_ids(genre_ids):
    """Genres matching the given ids; ids that don't resolve are dropped."""
    ids = []
    for value in genre_ids or ():
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue
    if not ids:
        return []
    return db.session.scalars(
        db.select(Genre).where(Genre.id.in_(ids)).order_by(Genre.name)
    ).all()


def books_by_genre(genre_id):
    """Books filed under the genre, projected to ``id``, ``title`` and ``summary``."""
    return db.session.execute(
        db.select(Book.id, Book.title, Book.summary)
        .join(book_genre, book_genre.c.book_id == Book.id)
        .where(book_genre.c.genre_id == genre_id)
        .order_by(Book.title)
    ).all()


def delete_genre(genre_id):
    return _delete(Genre, genre_id)


# --- Books ---
def list_books():
    return db.session.scalars(
        db.select(Book).options(joinedload(Book.author)).order_by(Book.title)
    ).all()


def get_book(book_id):
    return db.session.get(Book, book_id)


def delete_book(book_id):
    return _delete(Book, book_id)


def counts():
    """Number of books, authors and genres in the catalog."""
    return {
        'book_count': db.session.scalar(db.select(func.count(Book.id))),
        'author_count': db.session.scalar(db.select(func.count(Author.id))),
        'genre_count': db.session.scalar(db.select(func.count(Genre.id))),
    }
