from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from models.outcome import Success


class NutritionIntake(BaseModel):
    """Energy and macro totals of the completed meal logs in a window."""

    energy: float = Field(default=0.0, ge=0, description="kcal")
    protein: float = Field(default=0.0, ge=0, description="grams")
    carbohydrates: float = Field(default=0.0, ge=0, description="grams")
    fats: float = Field(default=0.0, ge=0, description="grams")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EnergyBalanceSummary(BaseModel):
    """
    Daily energy balance for the dashboard, stored in the 'energyBalance'
    collection. TDEE is rebuilt from its three components so it always agrees
    with what the dashboard shows for each of them.
    """

    date: date
    bmr_elapsed_kcal: float
    passive_kcal: float = Field(ge=0)
    active_kcal: float = Field(ge=0)
    calories_in_kcal: float = Field(default=0.0, ge=0)
    total_protein_g: float = Field(default=0.0, ge=0)
    total_carbs_g: float = Field(default=0.0, ge=0)
    total_fat_g: float = Field(default=0.0, ge=0)
    is_high_passive_anomaly: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @computed_field(alias="tdeeKcal")
    @property
    def tdee_kcal(self) -> float:
        return self.bmr_elapsed_kcal + self.passive_kcal + self.active_kcal

    @computed_field(alias="deficitSurplusKcal")
    @property
    def deficit_surplus_kcal(self) -> float:
        """Positive when burning more than consuming."""
        return self.tdee_kcal - self.calories_in_kcal

    @property
    def is_deficit(self) -> bool:
        return self.deficit_surplus_kcal > 0

    @property
    def formatted_deficit_surplus(self) -> str:
        value = self.deficit_surplus_kcal
        if value > 0:
            return f"-{int(value)} kcal deficit"
        if value < 0:
            return f"+{int(-value)} kcal surplus"
        return "0 kcal balanced"

    @classmethod
    def from_outcome(
        cls, day: date, outcome: Success, intake: Optional[NutritionIntake] = None
    ) -> "EnergyBalanceSummary":
        intake = intake or NutritionIntake()
        return cls(
            date=day,
            bmr_elapsed_kcal=outcome.bmr_elapsed_kcal,
            passive_kcal=outcome.passive_kcal,
            active_kcal=outcome.active_kcal,
            calories_in_kcal=intake.energy,
            total_protein_g=intake.protein,
            total_carbs_g=intake.carbohydrates,
            total_fat_g=intake.fats,
            is_high_passive_anomaly=outcome.is_high_passive_anomaly,
        )
