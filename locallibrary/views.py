from flask import Blueprint, abort, current_app, redirect, render_template, request, url_for

from . import store
from .forms import AuthorForm, BookForm, GenreForm
from .models import Author, Book, Genre

catalog = Blueprint('catalog', __name__, url_prefix='/catalog')


def _form_rejected(kind, form):
    current_app.logger.debug("%s form rejected: %s", kind, form.errors)


# --- Home ---
@catalog.route('/')
def index():
    return render_template('index.html', title="Local Library Home", **store.counts())


# --- Authors ---
@catalog.route('/author')
@catalog.route('/authors')
def author_list():
    return render_template('author_list.html', title="Author List", author_list=store.list_authors())


@catalog.route('/author/<int:author_id>')
def author_detail(author_id):
    author = store.get_author(author_id)
    if author is None:
        abort(404, description="Author not found")
    return render_template('author_detail.html', title="Author Detail", author=author,
                           author_books=store.books_by_author(author_id))


@catalog.route('/author/create', methods=['GET'])
def author_create_get():
    return render_template('author_form.html', title="Create Author", form=AuthorForm())


@catalog.route('/author/create', methods=['POST'])
def author_create_post():
    form = AuthorForm()
    if not form.validate():
        _form_rejected("Author", form)
        # Re-render with the sanitized values and every failure; nothing is saved.
        return render_template('author_form.html', title="Create Author", form=form,
                               errors=form.error_list())
    author = store.save(form.fill(Author()))
    current_app.logger.info("Created author %s (%s)", author.id, author.name)
    return redirect(author.url)


@catalog.route('/author/<int:author_id>/delete', methods=['GET'])
def author_delete_get(author_id):
    author = store.get_author(author_id)
    if author is None:
        return redirect(url_for('catalog.author_list'))
    return render_template('author_delete.html', title="Delete Author", author=author,
                           author_books=store.books_by_author(author_id))


@catalog.route('/author/<int:author_id>/delete', methods=['POST'])
def author_delete_post(author_id):
    author = store.get_author(author_id)
    author_books = store.books_by_author(author_id)
    target = request.form.get('authorid', type=int)
    if not author_books and target is not None and target != author_id:
        # The author named in the form is the one deleted, so it gets the same guard.
        author = store.get_author(target)
        author_books = store.books_by_author(target)
    if author_books:
        current_app.logger.info("Not deleting author %s: referenced by %d book(s)",
                                author_id, len(author_books))
        return render_template('author_delete.html', title="Delete Author", author=author,
                               author_books=author_books)
    # Check-then-act, not atomic: a book saved in between keeps a dangling author_id.
    if store.delete_author(target):
        current_app.logger.info("Deleted author %s", target)
    return redirect(url_for('catalog.author_list'))


@catalog.route('/author/<int:author_id>/update', methods=['GET'])
def author_update_get(author_id):
    author = store.get_author(author_id)
    if author is None:
        abort(404, description="Author not found")
    return render_template('author_form.html', title="Update Author", author=author,
                           form=AuthorForm(obj=author))


@catalog.route('/author/<int:author_id>/update', methods=['POST'])
def author_update_post(author_id):
    author = store.get_author(author_id)
    if author is None:
        abort(404, description="Author not found")
    form = AuthorForm()
    if not form.validate():
        _form_rejected("Author", form)
        return render_template('author_form.html', title="Update Author", author=author,
                               form=form, errors=form.error_list())
    store.save(form.fill(author))
    current_app.logger.info("Updated author %s", author_id)
    return redirect(author.url)


# --- Genres ---
@catalog.route('/genre')
@catalog.route('/genres')
def genre_list():
    return render_template('genre_list.html', title="Genre List", genre_list=store.list_genres())


@catalog.route('/genre/<int:genre_id>')
def genre_detail(genre_id):
    genre = store.get_genre(genre_id)
    if genre is None:
        abort(404, description="Genre not found")
    return render_template('genre_detail.html', title="Genre Detail", genre=genre,
                           genre_books=store.books_by_genre(genre_id))


@catalog.route('/genre/create', methods=['GET'])
def genre_create_get():
    return render_template('genre_form.html', title="Create Genre", form=GenreForm())


@catalog.route('/genre/create', methods=['POST'])
def genre_create_post():
    form = GenreForm()
    if not form.validate():
        _form_rejected("Genre", form)
        return render_template('genre_form.html', title="Create Genre", form=form,
                               errors=form.error_list())
    existing = store.find_genre_by_name(form.name.data)
    if existing is not None:
        current_app.logger.info("Genre %r already exists as %s", form.name.data, existing.id)
        return redirect(existing.url)
    genre = store.save(form.fill(Genre()))
    current_app.logger.info("Created genre %s (%s)", genre.id, genre.name)
    return redirect(genre.url)


@catalog.route('/genre/<int:genre_id>/delete', methods=['GET'])
def genre_delete_get(genre_id):
    genre = store.get_genre(genre_id)
    if genre is None:
        return redirect(url_for('catalog.genre_list'))
    return render_template('genre_delete.html', title="Delete Genre", genre=genre,
                           genre_books=store.books_by_genre(genre_id))


@catalog.route('/genre/<int:genre_id>/delete', methods=['POST'])
def genre_delete_post(genre_id):
    genre = store.get_genre(genre_id)
    genre_books = store.books_by_genre(genre_id)
    target = request.form.get('genreid', type=int)
    if not genre_books and target is not None and target != genre_id:
        genre = store.get_genre(target)
        genre_books = store.books_by_genre(target)
    if genre_books:
        current_app.logger.info("Not deleting genre %s: referenced by %d book(s)",
                                genre_id, len(genre_books))
        return render_template('genre_delete.html', title="Delete Genre", genre=genre,
                               genre_books=genre_books)
    # Same check-then-act window as for authors.
    if store.delete_genre(target):
        current_app.logger.info("Deleted genre %s", target)
    return redirect(url_for('catalog.genre_list'))


@catalog.route('/genre/<int:genre_id>/update', methods=['GET'])
def genre_update_get(genre_id):
    genre = store.get_genre(genre_id)
    if genre is None:
        abort(404, description="Genre not found")
    return render_template('genre_form.html', title="Update Genre", genre=genre,
                           form=GenreForm(obj=genre))


@catalog.route('/genre/<int:genre_id>/update', methods=['POST'])
def genre_update_post(genre_id):
    genre = store.get_genre(genre_id)
    if genre is None:
        abort(404, description="Genre not found")
    form = GenreForm()
    if not form.validate():
        _form_rejected("Genre", form)
        return render_template('genre_form.html', title="Update Genre", genre=genre,
                               form=form, errors=form.error_list())
    store.save(form.fill(genre))
    current_app.logger.info("Updated genre %s", genre_id)
    return redirect(genre.url)


# --- Books ---
def render_book_form(title, form, book=None, errors=None):
    """Book form needs the author and genre choice lists alongside the form."""
    return render_template('book_form.html', title=title, form=form, book=book, errors=errors,
                           authors=store.list_authors(), genres=store.list_genres())


@catalog.route('/book')
@catalog.route('/books')
def book_list():
    return render_template('book_list.html', title="Book List", book_list=store.list_books())


@catalog.route('/book/<int:book_id>')
def book_detail(book_id):
    book = store.get_book(book_id)
    if book is None:
        abort(404, description="Book not found")
    return render_template('book_detail.html', title=book.title, book=book)


@catalog.route('/book/create', methods=['GET'])
def book_create_get():
    return render_book_form("Create Book", BookForm())


@catalog.route('/book/create', methods=['POST'])
def book_create_post():
    form = BookForm()
    if not form.validate():
        _form_rejected("Book", form)
        return render_book_form("Create Book", form, errors=form.error_list())
    book = store.save(form.fill(Book()))
    current_app.logger.info("Created book %s (%s)", book.id, book.title)
    return redirect(book.url)


@catalog.route('/book/<int:book_id>/delete', methods=['GET'])
def book_delete_get(book_id):
    book = store.get_book(book_id)
    if book is None:
        return redirect(url_for('catalog.book_list'))
    return render_template('book_delete.html', title="Delete Book", book=book)


@catalog.route('/book/<int:book_id>/delete', methods=['POST'])
def book_delete_post(book_id):
    target = request.form.get('bookid', type=int)
    if store.delete_book(target):
        current_app.logger.info("Deleted book %s", target)
    return redirect(url_for('catalog.book_list'))


@catalog.route('/book/<int:book_id>/update', methods=['GET'])
def book_update_get(book_id):
    book = store.get_book(book_id)
    if book is None:
        abort(404, description="Book not found")
    form = BookForm(data={
        'title': book.title,
        'author': str(book.author_id),
        'summary': book.summary,
        'isbn': book.isbn,
        'genre': [str(g.id) for g in book.genres],
    })
    return render_book_form("Update Book", form, book=book)


@catalog.route('/book/<int:book_id>/update', methods=['POST'])
def book_update_post(book_id):
    book = store.get_book(book_id)
    if book is None:
        abort(404, description="Book not found")
    form = BookForm()
    if not form.validate():
        _form_rejected("Book", form)
        return render_book_form("Update Book", form, book=book, errors=form.error_list())
    store.save(form.fill(book))
    current_app.logger.info("Updated book %s", book_id)
    return redirect(book.url)
