import os
from datetime import date

import click
from flask import Flask, redirect, render_template, request, url_for
from flask.cli import with_appcontext
from flask_talisman import Talisman
from flask_wtf import CSRFProtect
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from . import store
from .models import db, Author, Book, Genre
from .views import catalog

csrf = CSRFProtect()


def load_config(app, test_config=None):
    """Built-in defaults, then the environment, then ``test_config``."""
    app.config.from_mapping(
        SECRET_KEY=os.environ.get('LOCALLIBRARY_SECRET') or "dev-secret-change-me",
        # Relative SQLite paths resolve inside the instance folder.
        SQLALCHEMY_DATABASE_URI=os.environ.get('DATABASE_URL') or "sqlite:///locallibrary.db",
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        WTF_CSRF_ENABLED=True,
        LOG_LEVEL=os.environ.get('LOCALLIBRARY_LOG_LEVEL', "INFO").upper(),
        FORCE_HTTPS=os.environ.get('LOCALLIBRARY_FORCE_HTTPS', "").lower() in ("1", "true"),
    )
    if test_config is not None:
        app.config.update(test_config)


def register_error_handlers(app):

    @app.errorhandler(HTTPException)
    def http_error(e):
        # Not-Found (abort(404)), CSRF failures and the other HTTP errors share one view.
        return render_template('error.html', title=e.name, message=e.description,
                               status=e.code), e.code

    @app.errorhandler(SQLAlchemyError)
    def store_error(e):
        app.logger.error("Store failure on %s %s", request.method, request.path, exc_info=e)
        return render_template('error.html', title="Server Error",
                               message="The catalog could not be reached.", status=500), 500

    @app.errorhandler(500)
    def server_error(e):
        return render_template('error.html', title="Server Error",
                               message="Something went wrong.", status=500), 500


# --- CLI helper ---
@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create the tables and add sample data (for dev only)."""
    db.create_all()
    if store.counts()['author_count']:
        click.echo("DB already initialized.")
        return
    austen = Author(first_name="Jane", family_name="Austen", date_of_birth=date(1775, 12, 16),
                    date_of_death=date(1817, 7, 18))
    twain = Author(first_name="Mark", family_name="Twain", date_of_birth=date(1835, 11, 30),
                   date_of_death=date(1910, 4, 21))
    fiction = Genre(name="Fiction")
    satire = Genre(name="Satire")
    db.session.add_all([
        Book(title="Pride and Prejudice", summary="A classic novel.", isbn="9780141439518",
             author=austen, genres=[fiction]),
        Book(title="Adventures of Huckleberry Finn", summary="A classic American novel.",
             isbn="9780486280615", author=twain, genres=[fiction, satire]),
    ])
    db.session.commit()
    click.echo("Initialized DB with sample data.")


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)
    load_config(app, test_config)
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)
    csrf.init_app(app)
    # Security headers; HTTPS redirects only when asked for (the dev server is plain HTTP).
    Talisman(app, force_https=app.config['FORCE_HTTPS'],
             session_cookie_secure=app.config['FORCE_HTTPS'],
             content_security_policy={'default-src': ["'self'"]})

    app.register_blueprint(catalog)
    register_error_handlers(app)
    app.cli.add_command(init_db_command)

    @app.route('/')
    def home():
        return redirect(url_for('catalog.index'))

    with app.app_context():
        db.create_all()

    app.logger.debug("Catalog ready on %s", app.config['SQLALCHEMY_DATABASE_URI'])
    return app
