import logging
import os
import sys
from dataclasses import dataclass
from dotenv import load_dotenv


DEFAULT_OPENAI_ENDPOINT = "https://api.openai.com/v1"


@dataclass
class Settings:
	openai_endpoint: str = DEFAULT_OPENAI_ENDPOINT
	openai_api_key: str | None = None
	database_url: str | None = None
	log_level: str = "INFO"


def get_settings() -> Settings:
	# Load .env if present
	load_dotenv(override=False)
	return Settings(
		openai_endpoint=(os.getenv("OPENAI_ENDPOINT") or DEFAULT_OPENAI_ENDPOINT).rstrip("/"),
		openai_api_key=os.getenv("OPENAI_API_KEY"),
		database_url=os.getenv("SUPABASE_DB_URL") or os.getenv("DATABASE_URL"),
		log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
	)


def setup_logging(level: str = "INFO") -> logging.Logger:
	logger = logging.getLogger("spell_nodes")
	logger.setLevel(getattr(logging, level.upper(), logging.INFO))
	if not logger.handlers:
		sh = logging.StreamHandler(sys.stdout)
		sh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
		logger.addHandler(sh)
	return logger
