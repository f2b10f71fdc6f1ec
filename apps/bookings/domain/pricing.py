"""
Booking Pricing

Stay length and price snapshot of a new reservation.

Prices in the catalog are monthly, per bed. Daily and custom stays are
charged at the monthly price divided by a fixed month length.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
import calendar

from apps.properties.domain.catalog import RoomTypeSpec
from shared.domain.exceptions import InvalidDateRange
from shared.domain.value_objects import Money

DEFAULT_DAYS_PER_MONTH = 30


class DurationType:
    MONTHLY = 'monthly'
    DAILY = 'daily'
    CUSTOM = 'custom'

    choices = [
        (MONTHLY, 'Monthly'),
        (DAILY, 'Daily'),
        (CUSTOM, 'Custom'),
    ]


@dataclass(frozen=True)
class DurationSpec:
    """How long the stay is, as requested by the tenant"""
    duration_type: str = DurationType.MONTHLY
    days: int | None = None
    months: int | None = None
    end_date: date | None = None


def add_months(value: date, months: int) -> date:
    """Same day N calendar months later, clamped to the end of shorter months"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def compute_move_out(move_in: date, duration: DurationSpec) -> date:
    """
    Move-out date of a stay

    An explicit end date wins; otherwise monthly stays add N calendar
    months, daily stays add N days and anything else lasts one month.

    Raises:
        InvalidDateRange: If move-out is not after move-in
    """
    if duration.end_date:
        move_out = duration.end_date
    elif duration.duration_type == DurationType.MONTHLY and duration.months:
        move_out = add_months(move_in, duration.months)
    elif duration.duration_type == DurationType.DAILY and duration.days:
        move_out = move_in + timedelta(days=duration.days)
    else:
        move_out = add_months(move_in, 1)

    if move_out <= move_in:
        raise InvalidDateRange(moveInDate=move_in.isoformat(), moveOutDate=move_out.isoformat())
    return move_out


@dataclass(frozen=True)
class PriceQuote:
    monthly_rent: Decimal
    total_rent: Decimal
    security_deposit: Decimal
    advance_amount: Decimal
    maintenance_fee: Decimal = field(default=Decimal('0.00'))

    @property
    def total_due(self) -> Decimal:
        return self.total_rent + self.security_deposit + self.maintenance_fee


def quote(
    room_type: RoomTypeSpec,
    bed_count: int,
    move_in: date,
    move_out: date,
    duration: DurationSpec,
    overrides: dict | None = None,
    days_per_month: int = DEFAULT_DAYS_PER_MONTH,
) -> PriceQuote:
    """
    Price snapshot for booking ``bed_count`` beds of ``room_type``

    - monthly rent: bed price times bed count
    - total rent: monthly rent times months for monthly stays, daily rate
      (monthly rent / days_per_month) times days otherwise
    - security deposit: bed deposit times bed count
    - advance: one bed's price

    Truthy ``advanceAmount`` / ``securityDeposit`` in ``overrides`` replace
    the computed values.
    """
    monthly = Money(room_type.price) * bed_count
    stay_days = (move_out - move_in).days

    if duration.duration_type == DurationType.MONTHLY:
        total = monthly * (duration.months or 1)
    elif duration.duration_type == DurationType.DAILY:
        total = monthly / days_per_month * (duration.days or stay_days)
    else:
        total = monthly / days_per_month * stay_days

    deposit = (Money(room_type.deposit) * bed_count).rounded()
    advance = Money(room_type.price).rounded()

    overrides = overrides or {}
    if overrides.get('advanceAmount'):
        advance = Money(overrides['advanceAmount']).rounded()
    if overrides.get('securityDeposit'):
        deposit = Money(overrides['securityDeposit']).rounded()

    return PriceQuote(
        monthly_rent=monthly.rounded(),
        total_rent=total.rounded(),
        security_deposit=deposit,
        advance_amount=advance,
    )
