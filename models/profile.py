from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

import config


class ProfileNotConfiguredError(Exception):
    """Raised when a user has not filled in every field BMR needs."""


class ProfileValidationError(ValueError):
    """Raised when a profile field is outside the accepted range."""


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"


class UserProfile(BaseModel):
    """
    Demographic inputs for the Mifflin-St Jeor equation. Immutable for the
    duration of a calculation.
    """

    sex: Sex
    birth_date: date = Field(alias="birthDate")
    weight_kg: float = Field(alias="weightKg", gt=0)
    height_cm: float = Field(alias="heightCm", gt=0)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def age_on(self, reference_date: date) -> int:
        age = reference_date.year - self.birth_date.year
        if (reference_date.month, reference_date.day) < (
            self.birth_date.month,
            self.birth_date.day,
        ):
            age -= 1
        return age

    def validate_ranges(self, reference_date: date) -> None:
        age = self.age_on(reference_date)
        if not config.MIN_AGE_YEARS <= age <= config.MAX_AGE_YEARS:
            raise ProfileValidationError(
                f"Age must be between {config.MIN_AGE_YEARS} and {config.MAX_AGE_YEARS}"
            )
        if not config.MIN_WEIGHT_KG <= self.weight_kg <= config.MAX_WEIGHT_KG:
            raise ProfileValidationError(
                f"Weight must be between {config.MIN_WEIGHT_KG:.0f} and {config.MAX_WEIGHT_KG:.0f} kg"
            )
        if not config.MIN_HEIGHT_CM <= self.height_cm <= config.MAX_HEIGHT_CM:
            raise ProfileValidationError(
                f"Height must be between {config.MIN_HEIGHT_CM:.0f} and {config.MAX_HEIGHT_CM:.0f} cm"
            )


class UserProfileBase(BaseModel):
    """Profile as stored in Firestore, where any field may still be missing."""

    sex: Optional[Sex] = None
    birth_date: Optional[date] = Field(default=None, alias="birthDate")
    weight_kg: Optional[float] = Field(default=None, alias="weightKg", gt=0)
    height_cm: Optional[float] = Field(default=None, alias="heightCm", gt=0)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_profile(self) -> UserProfile:
        if None in (self.sex, self.birth_date, self.weight_kg, self.height_cm):
            raise ProfileNotConfiguredError(
                "User profile must be configured to calculate BMR"
            )
        return UserProfile(
            sex=self.sex,
            birth_date=self.birth_date,
            weight_kg=self.weight_kg,
            height_cm=self.height_cm,
        )
