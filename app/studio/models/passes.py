"""Pass Catalog - static pass definitions (price and duration model)"""
import json
import logging
from enum import Enum
from typing import Dict, Iterable, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError

from app.core.exceptions import ConfigurationError, UnknownPassError

logger = logging.getLogger(__name__)


class DurationUnit(str, Enum):
    """Единица длительности абонемента"""
    day = "day"        # Фиксированное количество дней
    month = "month"    # Календарные месяцы


class PassDuration(BaseModel):
    """Duration model of a pass: Days(n) or Months(n)"""
    unit: DurationUnit
    value: int = Field(..., ge=1, description="Number of days or calendar months")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def days(cls, n: int) -> "PassDuration":
        return cls(unit=DurationUnit.day, value=n)

    @classmethod
    def months(cls, n: int) -> "PassDuration":
        return cls(unit=DurationUnit.month, value=n)

    def __str__(self):
        return f"{self.value} {self.unit.value}(s)"


class PassDefinition(BaseModel):
    """A purchasable pass"""
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    price: int = Field(..., ge=0, description="Price in whole currency units")
    duration: PassDuration

    model_config = ConfigDict(frozen=True)


DEFAULT_PASSES: List[PassDefinition] = [
    PassDefinition(id="one_day", name="One day", price=30000, duration=PassDuration.days(1)),
    PassDefinition(id="one_week", name="One week", price=50000, duration=PassDuration.days(7)),
    PassDefinition(id="monthly_2x", name="2x weekly / 1 month", price=150000, duration=PassDuration.months(1)),
    PassDefinition(id="quarterly_2x", name="2x weekly / 3 months", price=360000, duration=PassDuration.months(3)),
    PassDefinition(id="monthly_3x", name="3x weekly / 1 month", price=170000, duration=PassDuration.months(1)),
    PassDefinition(id="quarterly_3x", name="3x weekly / 3 months", price=390000, duration=PassDuration.months(3)),
    PassDefinition(id="monthly_5x", name="5x weekly / 1 month", price=200000, duration=PassDuration.months(1)),
    PassDefinition(id="quarterly_5x", name="5x weekly / 3 months", price=480000, duration=PassDuration.months(3)),
]


class PassCatalog:
    """
    Read-only lookup of pass definitions.

    Loaded once at startup; there are no mutation operations.
    """

    def __init__(self, passes: Iterable[PassDefinition]):
        self._passes: Dict[str, PassDefinition] = {}
        for definition in passes:
            if definition.id in self._passes:
                raise ConfigurationError(
                    "PASS_CATALOG", f"Duplicate pass id '{definition.id}' in catalog"
                )
            self._passes[definition.id] = definition

    def __contains__(self, pass_id: str) -> bool:
        return pass_id in self._passes

    def __len__(self) -> int:
        return len(self._passes)

    def get(self, pass_id: str) -> PassDefinition:
        try:
            return self._passes[pass_id]
        except KeyError:
            raise UnknownPassError(str(pass_id))

    def price_of(self, pass_id: str) -> int:
        return self.get(pass_id).price

    def duration_of(self, pass_id: str) -> PassDuration:
        return self.get(pass_id).duration

    def all(self) -> List[PassDefinition]:
        return list(self._passes.values())

    @classmethod
    def default(cls) -> "PassCatalog":
        return cls(DEFAULT_PASSES)

    @classmethod
    def from_file(cls, path: str) -> "PassCatalog":
        """Загрузка каталога из JSON файла (список определений абонементов)"""
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError("PASS_CATALOG_PATH", f"Cannot read pass catalog: {e}")

        if not isinstance(raw, list):
            raise ConfigurationError(
                "PASS_CATALOG_PATH", "Pass catalog must be a JSON list of passes"
            )

        try:
            passes = [PassDefinition.model_validate(item) for item in raw]
        except PydanticValidationError as e:
            raise ConfigurationError("PASS_CATALOG_PATH", f"Invalid pass definition: {e}")

        catalog = cls(passes)
        logger.info(f"Loaded {len(catalog)} passes from {path}")
        return catalog

    @classmethod
    def from_config(cls, path: str) -> "PassCatalog":
        if path:
            return cls.from_file(path)
        return cls.default()
