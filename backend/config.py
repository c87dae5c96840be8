"""Configuration management for FitCoach AI chat backend."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# API Keys
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")

# Provider selection: "gemini" or "groq"
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").lower()

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower()

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Chat client configuration
CHAT_API_URL = os.getenv("CHAT_API_URL", f"http://localhost:{PORT}/api/chat")
CHAT_CLIENT_TIMEOUT = float(os.getenv("CHAT_CLIENT_TIMEOUT", "120"))
REPORT_DIR = os.getenv("REPORT_DIR", ".")

# Model Configuration (priority order)
GEMINI_MODELS = ["gemini-3-flash-preview"]
GROQ_MODELS = ["llama-3.3-70b-versatile", "llama-3.1-8b-instant"]
MAX_OUTPUT_TOKENS = 2048
# Gemini thinking models count thinking tokens against the cap, so none is sent
GEMINI_MAX_OUTPUT_TOKENS = None

# Retry Configuration
MAX_ATTEMPTS_PER_MODEL = 3
RETRY_BASE_DELAY = 1.0  # seconds, doubled on every attempt

# Logging Configuration
if LOG_FORMAT == "json":
    from logger import setup_logging
    setup_logging(LOG_LEVEL)
else:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
