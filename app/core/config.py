import os

# Настройки среды
ENVIRONMENT = os.getenv("ENVIRONMENT", "production").lower()
DEBUG = ENVIRONMENT in ["development", "dev"]

# Настройки логирования
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json" if not DEBUG else "text")

# Настройки приложения
APP_NAME = os.getenv("APP_NAME", "Studio Operations API")
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

# Каталог абонементов (JSON файл). Пустое значение - встроенный каталог
PASS_CATALOG_PATH = os.getenv("PASS_CATALOG_PATH", "")

# Rate limiting
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "120/minute")

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]


# Валидация критичных настроек
def validate_config():
    """Валидация конфигурации при запуске"""
    errors = []

    if LOG_LEVEL.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        errors.append(f"LOG_LEVEL '{LOG_LEVEL}' is not a valid level")

    if LOG_FORMAT.lower() not in ["json", "text"]:
        errors.append("LOG_FORMAT must be 'json' or 'text'")

    if PASS_CATALOG_PATH and not os.path.isfile(PASS_CATALOG_PATH):
        errors.append(f"PASS_CATALOG_PATH '{PASS_CATALOG_PATH}' does not exist")

    if errors:
        raise ValueError(f"Configuration errors: {'; '.join(errors)}")
