"""
Local Library catalog: Flask + SQLAlchemy web app for authors, genres and books.

Features:
- list / detail / create / update / delete HTML flows for every entity
- server-side validation and sanitization with Flask-WTF (trim, escape, ISO dates)
- delete guard: authors and genres referenced by a book cannot be removed
- case-insensitive duplicate check when creating a genre
- CSRF protection and security headers

Run:
    flask --app locallibrary init-db
    flask --app locallibrary run
"""
from .app import create_app

__all__ = ["create_app"]
