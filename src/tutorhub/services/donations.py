"""Donor and donation ledger.

A donor is inactive when their last donation is more than 60 days old, or
when they have never donated. Exactly 60 days still counts as active.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy.exc import IntegrityError

from tutorhub.core.errors import Conflict, InvalidInput, NotFound

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

INACTIVE_AFTER = timedelta(days=60)
DEFAULT_CURRENCY = "TRY"


class DonorNotFoundError(NotFound):
    code = "donor_not_found"
    default_message = "Bağışçı bulunamadı"


class DonationNotFoundError(NotFound):
    code = "donation_not_found"
    default_message = "Bağış bulunamadı"


class DuplicateDonorEmailError(Conflict):
    code = "duplicate_donor_email"
    default_message = "Bu e-posta adresi zaten başka bir bağışçı tarafından kullanılıyor."


def is_inactive(
    last_donation_date: datetime | None,
    now: datetime,
    threshold: timedelta = INACTIVE_AFTER,
) -> bool:
    """True when there is no donation, or the last one is older than ``threshold``."""
    if last_donation_date is None:
        return True
    return now - last_donation_date > threshold


def clean_optional(value: str | None) -> str | None:
    """Trim a free-text contact field; blank becomes None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True, slots=True)
class DonationView:
    id: UUID
    donor_id: UUID
    amount: Decimal
    currency: str
    donation_date: datetime
    notes: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, donation: Any) -> DonationView:
        return cls(
            id=donation.id,
            donor_id=donation.donor_id,
            amount=donation.amount,
            currency=donation.currency,
            donation_date=donation.donation_date,
            notes=donation.notes,
            created_at=donation.created_at,
        )


@dataclass(frozen=True, slots=True)
class DonorView:
    id: UUID
    first_name: str
    last_name: str
    email: str | None
    phone: str | None
    address: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
    total_donated: Decimal
    last_donation_date: datetime | None
    donation_count: int
    is_inactive: bool
    donations: list[DonationView] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class DonationSummary:
    total_donated: Decimal
    donor_count: int
    inactive_count: int
    donation_count: int


def summarize_donor(
    donor: Any,
    now: datetime,
    *,
    with_donations: bool = False,
    threshold: timedelta = INACTIVE_AFTER,
) -> DonorView:
    """Build a donor view with derived totals from its loaded donations."""
    donations = sorted(donor.donations, key=lambda d: d.donation_date, reverse=True)
    last = donations[0].donation_date if donations else None
    return DonorView(
        id=donor.id,
        first_name=donor.first_name,
        last_name=donor.last_name,
        email=donor.email,
        phone=donor.phone,
        address=donor.address,
        notes=donor.notes,
        created_at=donor.created_at,
        updated_at=donor.updated_at,
        total_donated=sum((d.amount for d in donations), Decimal("0")),
        last_donation_date=last,
        donation_count=len(donations),
        is_inactive=is_inactive(last, now, threshold),
        donations=[DonationView.from_model(d) for d in donations] if with_donations else [],
    )


def donation_summary(donors: Iterable[DonorView]) -> DonationSummary:
    donors = list(donors)
    return DonationSummary(
        total_donated=sum((d.total_donated for d in donors), Decimal("0")),
        donor_count=len(donors),
        inactive_count=sum(1 for d in donors if d.is_inactive),
        donation_count=sum(d.donation_count for d in donors),
    )


class DonationService:
    """Donor CRUD and donation bookkeeping."""

    def __init__(self, session: AsyncSession, *, inactive_after: timedelta = INACTIVE_AFTER) -> None:
        self._session = session
        self._inactive_after = inactive_after

    async def _get_donor(self, donor_id: UUID) -> Any:
        from sqlalchemy import select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import Donor

        result = await self._session.execute(
            select(Donor).where(Donor.id == donor_id).options(selectinload(Donor.donations))
        )
        donor = result.scalar_one_or_none()
        if donor is None:
            raise DonorNotFoundError()
        return donor

    async def _ensure_email_free(self, email: str | None, exclude_id: UUID | None = None) -> None:
        from sqlalchemy import func, select

        from tutorhub.db.models import Donor

        if email is None:
            return
        query = select(Donor.id).where(func.lower(Donor.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Donor.id != exclude_id)
        if (await self._session.execute(query)).first() is not None:
            raise DuplicateDonorEmailError()

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as e:
            logger.warning("Donor email uniqueness violated on flush: %s", e)
            raise DuplicateDonorEmailError() from e

    async def list_donors(self, search: str | None = None, now: datetime | None = None) -> list[DonorView]:
        """Donors ordered by last name, optionally filtered by name or email."""
        from sqlalchemy import or_, select
        from sqlalchemy.orm import selectinload

        from tutorhub.db.models import Donor

        query = select(Donor).options(selectinload(Donor.donations)).order_by(Donor.last_name)
        term = (search or "").strip()
        if term:
            pattern = f"%{term}%"
            query = query.where(
                or_(
                    Donor.first_name.ilike(pattern),
                    Donor.last_name.ilike(pattern),
                    Donor.email.ilike(pattern),
                )
            )

        now = now or datetime.now(UTC)
        result = await self._session.execute(query)
        return [
            summarize_donor(d, now, threshold=self._inactive_after)
            for d in result.scalars().all()
        ]

    async def get_donor(self, donor_id: UUID, now: datetime | None = None) -> DonorView:
        donor = await self._get_donor(donor_id)
        return summarize_donor(
            donor, now or datetime.now(UTC), with_donations=True, threshold=self._inactive_after
        )

    async def create_donor(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str | None = None,
        phone: str | None = None,
        address: str | None = None,
        notes: str | None = None,
    ) -> DonorView:
        from tutorhub.db.models import Donor

        if not first_name.strip() or not last_name.strip():
            raise InvalidInput("Ad ve soyad gereklidir")

        email = clean_optional(email)
        await self._ensure_email_free(email)
        donor = Donor(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email,
            phone=clean_optional(phone),
            address=address,
            notes=notes,
            donations=[],
        )
        self._session.add(donor)
        await self._flush()
        logger.info("Donor created", extra={"donor_id": str(donor.id)})
        return summarize_donor(donor, datetime.now(UTC), threshold=self._inactive_after)

    async def update_donor(self, donor_id: UUID, **changes: Any) -> DonorView:
        """Update donor fields; keys not given are left unchanged."""
        donor = await self._get_donor(donor_id)

        if "email" in changes:
            changes["email"] = clean_optional(changes["email"])
            await self._ensure_email_free(changes["email"], exclude_id=donor_id)
        if "phone" in changes:
            changes["phone"] = clean_optional(changes["phone"])
        for name in ("first_name", "last_name"):
            if name in changes:
                if not (changes[name] or "").strip():
                    raise InvalidInput("Ad ve soyad gereklidir")
                changes[name] = changes[name].strip()

        for name in ("first_name", "last_name", "email", "phone", "address", "notes"):
            if name in changes:
                setattr(donor, name, changes[name])
        donor.updated_at = datetime.now(UTC)

        await self._flush()
        logger.info("Donor updated", extra={"donor_id": str(donor_id)})
        return summarize_donor(donor, datetime.now(UTC), threshold=self._inactive_after)

    async def delete_donor(self, donor_id: UUID) -> None:
        """Delete a donor and, by cascade, their donations."""
        donor = await self._get_donor(donor_id)
        await self._session.delete(donor)
        await self._session.flush()
        logger.info("Donor deleted", extra={"donor_id": str(donor_id)})

    async def add_donation(
        self,
        donor_id: UUID,
        *,
        amount: Decimal,
        donation_date: datetime,
        currency: str | None = None,
        notes: str | None = None,
    ) -> DonationView:
        from tutorhub.db.models import Donation

        if amount <= 0:
            raise InvalidInput("Bağış tutarı sıfırdan büyük olmalıdır")
        donor = await self._get_donor(donor_id)

        donation = Donation(
            donor_id=donor.id,
            amount=amount,
            currency=(currency or DEFAULT_CURRENCY).upper(),
            donation_date=donation_date,
            notes=notes,
        )
        donor.donations.append(donation)
        await self._session.flush()
        logger.info(
            "Donation recorded",
            extra={"donor_id": str(donor_id), "donation_id": str(donation.id)},
        )
        return DonationView.from_model(donation)

    async def delete_donation(self, donation_id: UUID) -> None:
        from tutorhub.db.models import Donation

        donation = await self._session.get(Donation, donation_id)
        if donation is None:
            raise DonationNotFoundError()
        await self._session.delete(donation)
        await self._session.flush()
        logger.info("Donation deleted", extra={"donation_id": str(donation_id)})

    async def get_donation_summary(self, now: datetime | None = None) -> DonationSummary:
        return donation_summary(await self.list_donors(now=now))
