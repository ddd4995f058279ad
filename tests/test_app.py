import pytest
from sqlalchemy.exc import OperationalError

from locallibrary import create_app, store
from locallibrary.app import init_db_command
from locallibrary.models import db, Author, Book, Genre


def test_root_redirects_to_catalog_home(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/catalog/")


def test_home_shows_record_counts(client, make_author, make_genre, make_book, templates):
    make_book(make_author(), genre_ids=[make_genre()])
    make_genre("Poetry")
    assert client.get("/catalog/").status_code == 200
    name, context = templates[0]
    assert name == "index.html"
    assert context["title"] == "Local Library Home"
    assert (context["book_count"], context["author_count"], context["genre_count"]) == (1, 1, 2)


def test_unknown_route_uses_error_view(client, templates):
    assert client.get("/catalog/nowhere").status_code == 404
    assert templates[0][0] == "error.html"


def test_store_failure_renders_generic_error(client, monkeypatch, templates):
    def broken():
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(store, "list_authors", broken)
    resp = client.get("/catalog/authors")
    assert resp.status_code == 500
    name, context = templates[0]
    assert name == "error.html"
    assert context["status"] == 500


def test_config_defaults_and_overrides(monkeypatch):
    monkeypatch.setenv("LOCALLIBRARY_LOG_LEVEL", "debug")
    app = create_app({"SQLALCHEMY_DATABASE_URI": "sqlite://", "SECRET_KEY": "s3cret"})
    assert app.config["LOG_LEVEL"] == "DEBUG"
    assert app.config["SECRET_KEY"] == "s3cret"
    assert app.config["WTF_CSRF_ENABLED"] is True


@pytest.fixture()
def csrf_app():
    return create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite://"})


def test_post_without_csrf_token_is_rejected(csrf_app):
    resp = csrf_app.test_client().post("/catalog/genre/create", data={"name": "Fiction"})
    assert resp.status_code == 400
    with csrf_app.app_context():
        assert db.session.scalars(db.select(Genre)).all() == []


def test_init_db_seeds_once(app):
    runner = app.test_cli_runner()
    result = runner.invoke(init_db_command)
    assert "Initialized" in result.output
    result = runner.invoke(init_db_command)
    assert "already" in result.output
    with app.app_context():
        assert db.session.scalar(db.select(db.func.count(Author.id))) == 2
        assert db.session.scalar(db.select(db.func.count(Book.id))) == 2
