"""
Compliance Desk Configuration

Environment variables and model settings for the Gemini classification gateway.
"""

import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Gemini API Configuration
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")

# Model Selection
# Flash preview keeps per-code latency low; override for experiments.
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-3-flash-preview")

# Thinking Mode Budget
# The gateway always runs with "off"; reasoning adds latency without
# improving list lookups.
THINKING_BUDGET = {
    "off": 0,
    "low": 1024,
    "medium": 8192,
}

# Deterministic decoding for every mode
TEMPERATURE = 0

# Outbound provider timeout
GATEWAY_TIMEOUT_SECONDS = int(os.environ.get("GATEWAY_TIMEOUT_SECONDS", "45"))

# CORS - single known frontend origin
ALLOWED_ORIGIN = os.environ.get("ALLOWED_ORIGIN", "https://teddacebpo-lab.github.io")

# Record mutations require this bearer token. Unset = mutations disabled.
ADMIN_API_TOKEN = os.environ.get("ADMIN_API_TOKEN")

# Record store
SQLALCHEMY_DATABASE_URI = os.environ.get(
    "SQLALCHEMY_DATABASE_URI", "sqlite:///hts_compliance.db"
)

# Request body cap (base64 PDFs travel inside the JSON body)
MAX_CONTENT_LENGTH_MB = int(os.environ.get("MAX_CONTENT_LENGTH_MB", "5"))

# Rolling query history
HISTORY_LIMIT = 5
