"""Static care database and default intervals.

Used by the fallback rules when a nurture has too little history to derive its
own interval, as the expected watering interval for known plant species, and by
the upcoming-task predictor.
"""

from dataclasses import dataclass

from bloomie.engine.schema import Nurture, NurtureType


@dataclass(frozen=True)
class PlantCare:
    name: str
    watering_days: int


@dataclass(frozen=True)
class PetCare:
    walk_minutes: int | None = None


PLANT_CARE: dict[str, PlantCare] = {
    "monstera": PlantCare("Monstera", 7),
    "succulent": PlantCare("Succulent", 14),
    "ficus": PlantCare("Ficus (Rubber Plant)", 7),
    "pothos": PlantCare("Pothos (Scindapsus)", 7),
    "orchid": PlantCare("Orchid", 10),
    "cactus": PlantCare("Cactus", 21),
    "peace-lily": PlantCare("Peace Lily (Spathiphyllum)", 5),
    "snake-plant": PlantCare("Snake Plant (Sansevieria)", 14),
}

PET_CARE: dict[str, PetCare] = {
    "dog": PetCare(walk_minutes=30),
    "cat": PetCare(),
    "bird": PetCare(),
    "rabbit": PetCare(),
    "fish": PetCare(),
}

DEFAULT_WATERING_DAYS = 7
DEFAULT_FEEDING_HOURS = {
    NurtureType.PET: 10.0,
    NurtureType.BABY: 3.0,
}
# Species with a daily walk entry are walked once a day
DAILY_WALK_DAYS = 1.0


def get_plant_care(species: str | None) -> PlantCare | None:
    """Look up a plant by species: exact key first, then partial match."""
    if not species:
        return None
    normalized = "-".join(species.lower().split())
    if normalized in PLANT_CARE:
        return PLANT_CARE[normalized]
    for key, care in PLANT_CARE.items():
        if key in normalized or normalized in key or normalized in care.name.lower():
            return care
    return None


def get_pet_care(species: str | None) -> PetCare | None:
    if not species:
        return None
    return PET_CARE.get(species.lower().strip())


def expected_watering_days(nurture: Nurture, observed_mean_days: float | None = None) -> float:
    """User override, then species table, then observed pattern, then default."""
    override = nurture.metadata.get("water_frequency")
    if override:
        return float(override)
    care = get_plant_care(nurture.metadata.get("species"))
    if care is not None:
        return float(care.watering_days)
    if observed_mean_days:
        return observed_mean_days
    return float(DEFAULT_WATERING_DAYS)


def expected_feeding_hours(nurture: Nurture, observed_mean_days: float | None = None) -> float | None:
    if observed_mean_days:
        return observed_mean_days * 24
    return DEFAULT_FEEDING_HOURS.get(nurture.type)


def expected_walk_days(nurture: Nurture, observed_mean_days: float | None = None) -> float | None:
    """Observed walk interval, or a daily default for walking species."""
    if nurture.type != NurtureType.PET:
        return None
    if observed_mean_days:
        return observed_mean_days
    care = get_pet_care(nurture.species)
    if care is not None and care.walk_minutes:
        return DAILY_WALK_DAYS
    return None
