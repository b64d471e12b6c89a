"""
Pricing Service - pay split and the randomized gig price stand-in

Pay split:
    worker_rate  = round_half_up(pay * 0.95)
    platform_fee = pay - worker_rate

The arithmetic is done on ``Decimal`` so that worker_rate + platform_fee
always equals pay exactly.

Price quote ("Grok" stand-in): the hourly rate is drawn uniformly from
[15, 25) and multiplied by the requested hours. There is no market data
behind it; ``rng`` is injectable so quotes are reproducible in tests.
"""

import math
import random
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union

from pydantic import BaseModel

from pulsehustle.errors import ValidationError

WORKER_SHARE = Decimal("0.95")
BASE_HOURLY_RATE = 15.0
MAX_HOURLY_RATE = 25.0

Number = Union[int, float, Decimal]


def round_half_up(value: Number) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def split_pay(pay: Number) -> Tuple[float, float]:
    """
    Split total pay into (worker_rate, platform_fee).

    >>> split_pay(600)
    (570.0, 30.0)
    """
    total = Decimal(str(pay))
    worker_rate = Decimal(round_half_up(total * WORKER_SHARE))
    return float(worker_rate), float(total - worker_rate)


class PriceQuote(BaseModel):
    total_price: float
    worker_price: float
    platform_fee: float
    hourly_rate: float
    hours: float


class PricingService:
    def __init__(self, operations, rng: Optional[random.Random] = None):
        self.operations = operations
        self.rng = rng or random.Random()

    def hourly_rate(self) -> float:
        rate = BASE_HOURLY_RATE + self.rng.random() * (MAX_HOURLY_RATE - BASE_HOURLY_RATE)
        return min(max(BASE_HOURLY_RATE, rate), MAX_HOURLY_RATE)

    async def calculate_price(self, hours: Number = 40) -> PriceQuote:
        if isinstance(hours, bool) or not isinstance(hours, (int, float, Decimal)) or not math.isfinite(hours) or hours <= 0:
            raise ValidationError("Hours must be a positive number")

        await self.operations.log("price_calculation", "gigs", {"hours": float(hours)})

        hourly_rate = self.hourly_rate()
        total_price = round_half_up(Decimal(str(hours)) * Decimal(str(hourly_rate)))
        worker_price, platform_fee = split_pay(total_price)

        return PriceQuote(
            total_price=total_price,
            worker_price=worker_price,
            platform_fee=platform_fee,
            hourly_rate=round(hourly_rate, 2),
            hours=hours,
        )
