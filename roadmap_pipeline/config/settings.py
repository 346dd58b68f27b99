"""
Configuration module for Roadmap Pipeline.

All values come from environment variables (a local .env file is loaded first).
Components receive this module as their ``config`` object and read values with
``getattr`` so tests can substitute a plain Mock.
"""
import os

# Load environment variables from .env file (if present)
# This must happen before any os.getenv() calls
from dotenv import load_dotenv
load_dotenv()

# --- URL Validation Configuration ---
URL_CACHE_TTL_SECONDS = int(os.getenv("URL_CACHE_TTL_SECONDS", str(24 * 60 * 60)))
URL_BATCH_SIZE = int(os.getenv("URL_BATCH_SIZE", "25"))
URL_PROBE_TIMEOUT = float(os.getenv("URL_PROBE_TIMEOUT", "10"))
URL_PROBE_RETRIES = int(os.getenv("URL_PROBE_RETRIES", "2"))
URL_RETRY_BACKOFF = float(os.getenv("URL_RETRY_BACKOFF", "0.5"))
URL_USER_AGENT = os.getenv(
    "URL_USER_AGENT",
    "Mozilla/5.0 (compatible; RoadmapPipeline/1.0; +https://github.com/roadmap-pipeline)"
)

# Optional JSON file with deny-lists (see validation/rules.py for the layout)
URL_RULES_PATH = os.getenv("URL_RULES_PATH")

# --- Storage Configuration ---
STORAGE_BATCH_SIZE = int(os.getenv("STORAGE_BATCH_SIZE", "10"))
RESOURCE_REVALIDATE_AFTER_DAYS = int(os.getenv("RESOURCE_REVALIDATE_AFTER_DAYS", "2"))
RESOURCE_REVALIDATE_LIMIT = int(os.getenv("RESOURCE_REVALIDATE_LIMIT", "1000"))

# --- Parser Configuration ---
SECTION_PROGRESSION = [
    name.strip()
    for name in os.getenv(
        "SECTION_PROGRESSION",
        "Getting Started,Core Concepts,Practical Applications,Advanced Topics"
    ).split(",")
    if name.strip()
]

# --- Model Configuration ---
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "google")
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.5-flash")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0"))

# --- API Keys (from environment variables) ---
YOUTUBE_API_KEY = os.getenv("YOUTUBE_API_KEY")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
