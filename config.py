"""
config.py — runtime settings, overridable via environment variables.
"""

import os

SECRET_KEY     = os.environ.get("SECRET_KEY", "legalease-dev-key")

# Simulated processing latency before results are shown (seconds, 0 = off)
ANALYSIS_DELAY = float(os.environ.get("ANALYSIS_DELAY", "0.4"))

# How many analyses are kept in memory for the export links
MAX_CACHE      = int(os.environ.get("MAX_CACHE", "50"))

MAX_UPLOAD_MB  = int(os.environ.get("MAX_UPLOAD_MB", "2"))

LOG_LEVEL      = os.environ.get("LOG_LEVEL", "INFO").upper()
DEBUG          = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
PORT           = int(os.environ.get("PORT", "5050"))
