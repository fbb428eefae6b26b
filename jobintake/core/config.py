import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./jobintake.db")

# ✅ Security (admin tokens are issued by the auth service, we only verify them)
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

# ✅ OpenAI categorization fallback
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "30"))
AI_MAX_CONCURRENCY = int(os.getenv("AI_MAX_CONCURRENCY", "4"))

# ✅ Crawler
CRAWL_DELAY_MS = int(os.getenv("CRAWL_DELAY_MS", "1000"))
CRAWL_MAX_RETRIES = int(os.getenv("CRAWL_MAX_RETRIES", "3"))
CRAWL_TIMEOUT_SECONDS = float(os.getenv("CRAWL_TIMEOUT_SECONDS", "15"))
CRAWL_USER_AGENT = os.getenv("CRAWL_USER_AGENT", "Job4S-Crawler/1.0 (Educational Purpose)")
CRAWL_CHECKPOINT_PATH = os.getenv("CRAWL_CHECKPOINT_PATH", "data/viecoi-jobs-raw.json")
SITEMAP_URL = os.getenv("SITEMAP_URL", "https://viecoi.vn/sitemap.xml")
LOGO_CDN_BASE = os.getenv("LOGO_CDN_BASE", "https://cdn.viecoi.vn")

# ✅ Quick-post abuse limits (per client IP, fixed window)
QUICKPOST_RATE_LIMIT = int(os.getenv("QUICKPOST_RATE_LIMIT", "100"))
QUICKPOST_RATE_WINDOW_SECONDS = int(os.getenv("QUICKPOST_RATE_WINDOW_SECONDS", "3600"))
QUICKPOST_TTL_DAYS = int(os.getenv("QUICKPOST_TTL_DAYS", "30"))

# ✅ Email
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASS = os.getenv("SMTP_PASS")
EMAIL_FROM = os.getenv("EMAIL_FROM", '"Job4S" <noreply@job4s.com>')

# ✅ Service
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:8081,http://127.0.0.1:8081").split(",")
    if origin.strip()
]
