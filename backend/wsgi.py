# Overview: WSGI entry point; also the FLASK_APP target for the CLI.

from storefront import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5001)
