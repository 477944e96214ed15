import os
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    database_name: Optional[str]
    owner_email: str
    jwt_secret: str
    jwt_algorithm: str
    password_min_len: int
    bcrypt_rounds: int
    cors_origins: Tuple[str, ...]
    log_level: str
    port: int


def load_settings() -> Settings:
    origins = tuple(
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ) or ("*",)

    return Settings(
        database_url=(os.getenv("DATABASE_URL") or "").strip() or None,
        database_name=(os.getenv("DATABASE_NAME") or "").strip() or None,
        owner_email=(os.getenv("OWNER_EMAIL") or "owner@app.com").strip(),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        password_min_len=max(1, int(os.getenv("PASSWORD_MIN_LEN", "8"))),
        bcrypt_rounds=max(4, min(31, int(os.getenv("BCRYPT_ROUNDS", "12")))),
        cors_origins=origins,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", "8000")),
    )


settings = load_settings()


def get_settings() -> Settings:
    return settings
