# src/config/settings.py

"""Central configuration for the door_catalog engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the door_catalog engine."""

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    LOGS_DIR: Path = BASE_DIR / "logs"
    CACHE_PATH: Path = Path(
        os.getenv("CATALOG_CACHE_PATH", str(DATA_DIR / "catalog_cache.json"))
    )

    # --- Feed ---
    FEED_URL: str = os.getenv(
        "CATALOG_FEED_URL",
        "https://dveri-ekat.ru/marketplace/2629822.xls",
    )
    STORE_BASE_URL: str = os.getenv(
        "STORE_BASE_URL", "https://dveri-ekat.ru"
    )

    # --- HTTP ---
    REQUEST_DELAY: float = 2.0          # Back-off step between retries
    REQUEST_TIMEOUT: int = 60           # The feed is a few MB of XLS
    MAX_RETRIES: int = 3                # Retry count on transient failures
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "application/vnd.ms-excel,"
            "application/vnd.openxmlformats-officedocument"
            ".spreadsheetml.sheet,*/*;q=0.8"
        ),
        "Accept-Language": "ru-RU,ru;q=0.9,en;q=0.8",
    }

    # --- Cache & refresh ---
    CACHE_MAX_AGE: float = 7 * 24 * 3600.0     # Seconds before the cache is stale
    REFRESH_INTERVAL: float = 7 * 24 * 3600.0  # Weekly feed re-import
    HEALTH_SLOW_MS: float = 5000.0

    # --- Search ---
    SEARCH_DEFAULT_LIMIT: int = 7

    # --- Normalisation ---
    PRICE_ON_REQUEST: str = "по запросу"
    FEED_COLUMN_ALIASES: dict[str, list[str]] = {
        "id": ["ID товара", "Идентификатор товара", "ID", "id"],
        "title": [
            "Название товара или услуги",
            "Название товара",
            "Название",
            "Наименование",
            "title",
            "name",
        ],
        "price": ["Цена продажи", "Цена", "price"],
        "url": ["URL", "Ссылка на товар", "Ссылка", "url"],
        "description": [
            "Описание",
            "Дополнительное описание",
            "Краткое описание",
            "description",
        ],
        "category": ["Категория", "Размещение на сайте", "category"],
    }
    PROPERTY_PREFIXES: list[str] = ["Параметр:", "Характеристика:"]

    # --- Query vocabulary ---
    QUERY_ALIASES: dict[str, str] = {
        "пд": "profildoors",
        "профиль дорс": "profildoors",
        "профильдорс": "profildoors",
        "эль порта": "el'porta",
        "эльпорта": "el'porta",
        "инвиз": "invisible",
        "скрытые": "invisible",
        "скрытая": "invisible",
        "ульяновка": "ульяновские",
        "межкомнатка": "межкомнатная",
        "межкомнатки": "межкомнатные",
        "нерж": "нержавеющая",
        "терморазрыв": "терморазрывом",
    }
    BRAND_MARKERS: list[str] = [
        "фабрика",
        "фабрики",
        "фабрику",
        "фабрикой",
        "производитель",
        "производителя",
        "производители",
        "производителей",
        "бренд",
        "бренда",
        "бренды",
        "марка",
        "марки",
        "изготовитель",
        "изготовителя",
    ]
    QUERY_STOP_WORDS: list[str] = [
        "дверь",
        "двери",
        "дверей",
        "дверью",
        "какая",
        "какой",
        "какие",
        "какую",
        "кто",
        "чья",
        "чей",
        "чьи",
        "есть",
        "ли",
        "у",
        "вас",
        "мне",
        "нужна",
        "нужен",
        "нужны",
        "нужно",
        "хочу",
        "покажи",
        "покажите",
        "подбери",
        "подберите",
        "найди",
        "найдите",
        "купить",
        "цена",
        "цене",
        "цены",
        "стоимость",
        "пожалуйста",
        "наличии",
        "в",
        "во",
        "на",
        "для",
        "по",
        "с",
        "со",
        "от",
        "до",
    ]
    THOUSANDS_MARKERS: list[str] = ["тысяч", "тысячи", "тыс", "т.р", "тр", "k", "к"]
    CURRENCY_MARKERS: list[str] = ["рублей", "рубля", "руб", "р", "₽"]
    # Size units: a number followed by one of these is never a price
    MEASURE_MARKERS: list[str] = ["мм", "см", "м", "mm", "cm"]
