"""WSGI entry point for deployment."""
from hts_compliance.web import create_app

app = create_app()

if __name__ == "__main__":
    app.run()
