from dataclasses import dataclass
from typing import Optional


@dataclass
class GadgetCardDto:
    id: str
    name: str
    category: str
    image: Optional[str]
    price_per_day: Optional[float]
    average_rating: float
    description: str
    popularity: int  # totalRentalCount
