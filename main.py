# FILE: esg-sunshine-backend/main.py

import logging
from flask import Flask
from dotenv import load_dotenv
from pydantic import ValidationError
from logging_config import setup_logging

# --- SETUP & CONFIG ---
# Load environment variables for the Flask app process.
load_dotenv()
setup_logging()

app = Flask(__name__)
# Keep Traditional Chinese readable in JSON responses
app.json.ensure_ascii = False

# --- Import and Register Blueprints ---
from api.content import content_bp
from api.status import status_bp

app.register_blueprint(content_bp, url_prefix='/', strict_slashes=False)
app.register_blueprint(status_bp, url_prefix='/', strict_slashes=False)

# --- Global Error Handlers ---
from api.error_utils import create_error_response, not_found_error, validation_error

@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return validation_error(details=e.errors(include_url=False, include_context=False, include_input=False))

@app.errorhandler(404)
def resource_not_found(e):
    return not_found_error()

@app.errorhandler(500)
def internal_server_error(e):
    logging.critical(f"Unhandled exception: {e}", exc_info=True)
    return create_error_response("SERVER_ERROR")
