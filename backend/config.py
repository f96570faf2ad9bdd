import os
import logging
from dotenv import load_dotenv

# .env values never override variables already set in the environment
load_dotenv(override=False)

logger = logging.getLogger(__name__)

APP_ENV = os.getenv("APP_ENV", "development").lower()  # development, production, test
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

SQLALCHEMY_DATABASE_URL = os.getenv("SQLALCHEMY_DATABASE_URL", "sqlite:///./medidiet.db")
RUN_MIGRATIONS_ON_STARTUP = os.getenv("RUN_MIGRATIONS_ON_STARTUP", "false").lower() in ("1", "true", "yes")

_DEV_SECRET_KEY = "dev-secret-key-not-for-production-change-this"
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    if APP_ENV == "production":
        raise RuntimeError("SECRET_KEY is required in production")
    logger.warning("SECRET_KEY not set. Using default for development.")
    SECRET_KEY = _DEV_SECRET_KEY
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 90)))

# LLM Selection Configuration
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "gemini").lower()  # Options: gemini, openai, openrouter, ollama
LLM_API_KEY = os.getenv("LLM_API_KEY") or os.getenv("GEMINI_API_KEY")
LLM_MODEL = os.getenv("LLM_MODEL")  # Optional override
OLLAMA_URL = os.getenv("OLLAMA_URL", "http://localhost:11434")

PLAN_TIMEOUT_SECONDS = float(os.getenv("PLAN_TIMEOUT_SECONDS", "30"))
QA_TIMEOUT_SECONDS = float(os.getenv("QA_TIMEOUT_SECONDS", "60"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
