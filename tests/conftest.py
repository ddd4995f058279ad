from datetime import date

import pytest
from flask import template_rendered

from locallibrary import create_app
from locallibrary.models import db, Author, Book, Genre


@pytest.fixture()
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "WTF_CSRF_ENABLED": False,
        "FORCE_HTTPS": False,
    })
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def templates(app):
    """(template name, context) for every template rendered during the test."""
    recorded = []

    def record(sender, template, context, **extra):
        recorded.append((template.name, context))

    template_rendered.connect(record, app)
    yield recorded
    template_rendered.disconnect(record, app)


@pytest.fixture()
def make_author(app):
    def _make(first_name="Jane", family_name="Austen", date_of_birth=date(1775, 12, 16), date_of_death=None):
        with app.app_context():
            author = Author(first_name=first_name, family_name=family_name,
                            date_of_birth=date_of_birth, date_of_death=date_of_death)
            db.session.add(author)
            db.session.commit()
            return author.id
    return _make


@pytest.fixture()
def make_genre(app):
    def _make(name="Fiction"):
        with app.app_context():
            genre = Genre(name=name)
            db.session.add(genre)
            db.session.commit()
            return genre.id
    return _make


@pytest.fixture()
def make_book(app):
    def _make(author_id, genre_ids=(), title="Emma", summary="A novel.", isbn="9780141439587"):
        with app.app_context():
            book = Book(title=title, summary=summary, isbn=isbn, author_id=author_id,
                        genres=[db.session.get(Genre, g) for g in genre_ids])
            db.session.add(book)
            db.session.commit()
            return book.id
    return _make
