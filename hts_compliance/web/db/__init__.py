from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def init_db(app):
    """Bind the extension and make sure both record tables exist."""
    db.init_app(app)
    with app.app_context():
        # Importing registers the tables on db.metadata
        from . import models  # noqa: F401

        db.create_all()
