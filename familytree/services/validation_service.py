"""Temporal rules between birth, relationship and life-event dates.

Every check raises ``DateOrderingError`` naming the offending field; nothing
here keeps state, so the create and update paths get identical answers.
"""
from datetime import date
from typing import Iterable, Optional, Protocol
from familytree.core.errors import DateOrderingError
from familytree.models.member_model import RelationshipKind, ValidationResult

MIN_MARRIAGE_YEARS = 7

class _Dated(Protocol):
    startDate: Optional[date]

class _Ranged(Protocol):
    startDate: Optional[date]
    endDate: Optional[date]

def add_years(value: date, years: int) -> date:
    """Shift the year component only; Feb 29 lands on Mar 1 in common years."""
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        return date(value.year + years, 3, 1)

def validate_relationship_dates(birth_date: Optional[date], relationship: RelationshipKind,
                                relationship_date: Optional[date]) -> None:
    if birth_date is None or relationship_date is None:
        return
    if relationship == RelationshipKind.PARENT:
        if relationship_date < birth_date:
            raise DateOrderingError("Relationship date must be on or after birth date", "relationshipDate")
    elif relationship == RelationshipKind.SPOUSE:
        if relationship_date < add_years(birth_date, MIN_MARRIAGE_YEARS):
            raise DateOrderingError(
                f"Relationship date must be at least {MIN_MARRIAGE_YEARS} years after birth date",
                "relationshipDate",
            )

def check_relationship_dates(birth_date: Optional[date], relationship: RelationshipKind,
                             relationship_date: Optional[date]) -> ValidationResult:
    try:
        validate_relationship_dates(birth_date, relationship, relationship_date)
    except DateOrderingError as e:
        return ValidationResult(ok=False, message=e.message, field=e.field)
    return ValidationResult(ok=True)

def validate_passing_date(birth_date: Optional[date], date_of_passing: date) -> None:
    if birth_date is not None and date_of_passing <= birth_date:
        raise DateOrderingError("Date of passing must be after the birth date", "dateOfPassing")

def validate_achievement_date(birth_date: Optional[date], achieve_date: Optional[date],
                              date_of_passing: Optional[date] = None) -> None:
    if achieve_date is None:
        return
    if birth_date is not None and achieve_date <= birth_date:
        raise DateOrderingError("Achievement date must be after the birth date", "achieveDate")
    if date_of_passing is not None and achieve_date >= date_of_passing:
        raise DateOrderingError("Achievement date must be before the date of passing", "achieveDate")

def validate_divorce_date(marriage_date: Optional[date], divorce_date: date) -> None:
    if marriage_date is not None and divorce_date <= marriage_date:
        raise DateOrderingError("Divorce date must be after the marriage date", "divorceDate")

def validate_burial_places(date_of_passing: date, places: Iterable[_Dated]) -> None:
    for index, place in enumerate(places):
        if place.startDate is not None and place.startDate < date_of_passing:
            raise DateOrderingError(
                "Burial start date must be on or after the date of passing",
                f"burialPlaces.{index}.startDate",
            )

def validate_birth_date(birth_date: date, parent_birth_date: Optional[date] = None,
                        today: Optional[date] = None) -> None:
    today = today or date.today()
    if birth_date > today:
        raise DateOrderingError("Birth date cannot be in the future", "birthDate")
    if parent_birth_date is not None and birth_date < parent_birth_date:
        raise DateOrderingError("Birth date must be after parent's birthday", "birthDate")

def validate_marriage_date(marriage_date: date, member1_birth: Optional[date],
                           member2_birth: Optional[date], today: Optional[date] = None) -> None:
    today = today or date.today()
    if marriage_date > today:
        raise DateOrderingError("Marriage date cannot be in the future", "marriageDate")
    for which, birth in (("first", member1_birth), ("second", member2_birth)):
        if birth is not None and marriage_date < add_years(birth, MIN_MARRIAGE_YEARS):
            raise DateOrderingError(
                f"Marriage date must be at least {MIN_MARRIAGE_YEARS} years after {which} member's birthday",
                "marriageDate",
            )

def validate_date_ranges(ranges: list[_Ranged], birth_date: Optional[date],
                         noun: str, field: str) -> None:
    """Sequential history (occupations, places of origin) starting after birth.

    ``noun`` is the singular display name, e.g. "occupation".
    """
    if any(r.startDate is None for r in ranges):
        raise DateOrderingError(f"Each {noun} must have a start date", field)
    if birth_date is not None and any(r.startDate < birth_date for r in ranges):
        raise DateOrderingError(f"{noun.capitalize()} start dates must be after birth date", field)
    for previous, current in zip(ranges, ranges[1:]):
        if previous.endDate is None:
            raise DateOrderingError(f"Previous {noun} must have an end date", field)
        if current.startDate <= previous.endDate:
            raise DateOrderingError(f"Start date must be after the end date of the previous {noun}", field)
