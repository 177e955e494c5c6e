import os


class Settings:
    PROJECT_NAME: str = "javaquiz"
    DEBUG: bool = False
    LOG_DIR: str = "log"
    LOG_FILE: str = "javaquiz.log"
    LOG_TO_DB: bool = os.getenv("JAVAQUIZ_LOG_TO_DB", "1") == "1"
    DB_DIR: str = "db"
    DB_FILE: str = "javaquiz.db"
    REDIS_URL: str = os.getenv("JAVAQUIZ_REDIS_URL", "redis://localhost:6379/0")
    QUESTIONS_DIR: str = "questions"
    # "redis" or "file"
    PROGRESS_BACKEND: str = os.getenv("JAVAQUIZ_PROGRESS_BACKEND", "redis")
    PROGRESS_FILE: str = "db/progress.json"
    PROGRESS_KEY: str = "quiz_progress"
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120


settings = Settings()
