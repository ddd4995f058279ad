from . import create_app

if __name__ == '__main__':
    # For production, use gunicorn or uwsgi. This is for local development.
    create_app().run(host="127.0.0.1", port=5000, debug=True)
