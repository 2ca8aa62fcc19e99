import logging
import datetime
import pytz
from flask import Blueprint, render_template_string
from google import genai

from dependencies import get_gemini_api_key, get_gemini_model, get_status_timezone

status_bp = Blueprint('status_bp', __name__)

# --- Helper Check Functions ---

def check_gemini_config():
    """Checks that a Gemini API key is present in the environment."""
    if not get_gemini_api_key():
        return {"status": "ERROR", "details": "No GEMINI_API_KEY (or API_KEY) environment variable found. AI features will return fallback content."}
    return {"status": "OK", "details": f"API key configured. Model: {get_gemini_model()}"}

def check_gemini_api():
    """Checks that the configured key can see the configured model."""
    api_key = get_gemini_api_key()
    if not api_key:
        return {"status": "ERROR", "details": "Skipped: no API key configured."}
    try:
        client = genai.Client(api_key=api_key)
        model = client.models.get(model=get_gemini_model())
        return {"status": "OK", "details": f"Successfully reached Gemini API. Model: {model.name}"}
    except Exception as e:
        logging.warning(f"Gemini status check failed: {e}")
        return {"status": "ERROR", "details": f"Gemini API key may be invalid or quota exceeded: {str(e)}"}

# --- HTML Template ---
STATUS_PAGE_TEMPLATE = """
<!DOCTYPE html>
<html lang="zh-Hant">
<head>
    <meta charset="UTF-8">
    <title>ESG Sunshine Backend Status</title>
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif; margin: 0; background-color: #f1f5f9; }
        .container { max-width: 800px; margin: 2rem auto; padding: 1rem; background: white; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        .status-table { width: 100%; border-collapse: collapse; margin-top: 1rem; }
        .status-table th, .status-table td { padding: 0.75rem; text-align: left; border-bottom: 1px solid #eee; }
        .status-badge { padding: 0.25rem 0.6rem; border-radius: 1rem; font-weight: 700; color: white; }
        .ok { background-color: #16a34a; }
        .error { background-color: #dc2626; }
    </style>
</head>
<body>
    <div class="container">
        <h1>ESG Sunshine Backend Status</h1>
        <p>Last checked: {{ timestamp }}</p>
        <table class="status-table">
            <thead>
                <tr><th>Service</th><th>Status</th><th>Details</th></tr>
            </thead>
            <tbody>
                {% for name, result in checks.items() %}
                <tr>
                    <td><strong>{{ name }}</strong></td>
                    <td><span class="status-badge {{ 'ok' if result.status == 'OK' else 'error' }}">{{ result.status }}</span></td>
                    <td>{{ result.details }}</td>
                </tr>
                {% endfor %}
            </tbody>
        </table>
    </div>
</body>
</html>
"""

# --- Main Endpoint ---
@status_bp.route('/status')
def system_status():
    all_checks = {
        "Gemini Configuration": check_gemini_config(),
        "Gemini AI API": check_gemini_api(),
    }
    timestamp = datetime.datetime.now(pytz.timezone(get_status_timezone())).strftime('%Y-%m-%d %H:%M:%S %Z')
    return render_template_string(STATUS_PAGE_TEMPLATE, checks=all_checks, timestamp=timestamp)
