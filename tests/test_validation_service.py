"""Tests for the date ordering rules."""
from datetime import date

import pytest

from familytree.core.errors import DateOrderingError
from familytree.models.life_event_model import BurialPlaceIn
from familytree.models.member_model import DateRangeIn, RelationshipKind
from familytree.services.validation_service import (
    add_years, check_relationship_dates, validate_achievement_date, validate_birth_date,
    validate_burial_places, validate_date_ranges, validate_divorce_date, validate_marriage_date,
    validate_passing_date, validate_relationship_dates,
)

TODAY = date(2024, 6, 1)


class TestRelationshipDates:

    def test_spouse_needs_seven_years(self):
        """Marriage one day short of seven years after birth is rejected."""
        with pytest.raises(DateOrderingError) as exc:
            validate_relationship_dates(date(2000, 1, 1), RelationshipKind.SPOUSE, date(2006, 12, 31))
        assert exc.value.field == "relationshipDate"
        assert "7 years" in exc.value.message

    @pytest.mark.parametrize("when", [date(2007, 1, 1), date(2030, 5, 5)])
    def test_spouse_on_or_after_seven_years(self, when):
        validate_relationship_dates(date(2000, 1, 1), RelationshipKind.SPOUSE, when)

    def test_parent_before_birth_fails(self):
        with pytest.raises(DateOrderingError):
            validate_relationship_dates(date(2010, 6, 15), RelationshipKind.PARENT, date(2010, 6, 14))

    @pytest.mark.parametrize("when", [date(2010, 6, 15), date(2011, 1, 1)])
    def test_parent_on_or_after_birth(self, when):
        validate_relationship_dates(date(2010, 6, 15), RelationshipKind.PARENT, when)

    @pytest.mark.parametrize("birth, when", [(None, date(2000, 1, 1)), (date(2000, 1, 1), None)])
    def test_missing_dates_skip_the_check(self, birth, when):
        validate_relationship_dates(birth, RelationshipKind.SPOUSE, when)

    def test_no_relationship_is_never_checked(self):
        validate_relationship_dates(date(2000, 1, 1), RelationshipKind.NONE, date(1990, 1, 1))

    def test_check_returns_result(self):
        bad = check_relationship_dates(date(2000, 1, 1), RelationshipKind.SPOUSE, date(2001, 1, 1))
        assert not bad.ok
        assert bad.field == "relationshipDate"
        assert check_relationship_dates(date(2000, 1, 1), RelationshipKind.SPOUSE, date(2007, 1, 1)).ok


class TestAddYears:

    def test_plain_date(self):
        assert add_years(date(2000, 1, 1), 7) == date(2007, 1, 1)

    def test_leap_day_rolls_to_march(self):
        assert add_years(date(2000, 2, 29), 7) == date(2007, 3, 1)

    def test_leap_day_into_leap_year(self):
        assert add_years(date(2000, 2, 29), 4) == date(2004, 2, 29)

    def test_leap_day_birth_marriage(self):
        """Born Feb 29: the earliest marriage date is Mar 1 seven years on."""
        with pytest.raises(DateOrderingError):
            validate_relationship_dates(date(2000, 2, 29), RelationshipKind.SPOUSE, date(2007, 2, 28))
        validate_relationship_dates(date(2000, 2, 29), RelationshipKind.SPOUSE, date(2007, 3, 1))


class TestLifeEventDates:

    def test_passing_must_follow_birth(self):
        with pytest.raises(DateOrderingError) as exc:
            validate_passing_date(date(1950, 1, 1), date(1950, 1, 1))
        assert exc.value.field == "dateOfPassing"
        validate_passing_date(date(1950, 1, 1), date(1950, 1, 2))

    def test_achievement_between_birth_and_passing(self):
        birth, passing = date(1950, 1, 1), date(2000, 1, 1)
        validate_achievement_date(birth, date(1980, 1, 1), passing)
        with pytest.raises(DateOrderingError):
            validate_achievement_date(birth, birth, passing)
        with pytest.raises(DateOrderingError):
            validate_achievement_date(birth, passing, passing)

    def test_achievement_without_date(self):
        validate_achievement_date(date(1950, 1, 1), None, date(2000, 1, 1))

    def test_divorce_after_marriage(self):
        with pytest.raises(DateOrderingError) as exc:
            validate_divorce_date(date(2000, 1, 1), date(2000, 1, 1))
        assert exc.value.field == "divorceDate"
        validate_divorce_date(date(2000, 1, 1), date(2000, 1, 2))

    def test_burial_not_before_passing(self):
        passing = date(2000, 1, 10)
        places = [
            BurialPlaceIn(location="Hue", startDate=date(2000, 1, 10)),
            BurialPlaceIn(location="Hanoi", startDate=date(2000, 1, 9)),
        ]
        with pytest.raises(DateOrderingError) as exc:
            validate_burial_places(passing, places)
        assert exc.value.field == "burialPlaces.1.startDate"
        validate_burial_places(passing, places[:1])


class TestBirthAndMarriage:

    def test_birth_in_future(self):
        with pytest.raises(DateOrderingError) as exc:
            validate_birth_date(date(2024, 6, 2), today=TODAY)
        assert exc.value.field == "birthDate"

    def test_birth_before_parent(self):
        with pytest.raises(DateOrderingError):
            validate_birth_date(date(1960, 1, 1), parent_birth_date=date(1961, 1, 1), today=TODAY)
        validate_birth_date(date(1990, 1, 1), parent_birth_date=date(1961, 1, 1), today=TODAY)

    def test_marriage_in_future(self):
        with pytest.raises(DateOrderingError) as exc:
            validate_marriage_date(date(2025, 1, 1), date(1990, 1, 1), date(1990, 1, 1), today=TODAY)
        assert exc.value.field == "marriageDate"

    def test_marriage_checks_both_births(self):
        with pytest.raises(DateOrderingError) as exc:
            validate_marriage_date(date(2010, 1, 1), date(1990, 1, 1), date(2005, 1, 1), today=TODAY)
        assert "second member" in exc.value.message
        validate_marriage_date(date(2012, 1, 1), date(1990, 1, 1), date(2005, 1, 1), today=TODAY)


class TestDateRanges:

    def _ranges(self, *spans):
        return [DateRangeIn(label=f"job {i}", startDate=s, endDate=e) for i, (s, e) in enumerate(spans)]

    def test_sequential_history_passes(self):
        ranges = self._ranges((date(2000, 1, 1), date(2005, 1, 1)), (date(2005, 1, 2), None))
        validate_date_ranges(ranges, date(1980, 1, 1), "occupation", "occupations")

    def test_empty_history_passes(self):
        validate_date_ranges([], date(1980, 1, 1), "occupation", "occupations")

    def test_start_required(self):
        with pytest.raises(DateOrderingError, match="must have a start date"):
            validate_date_ranges(self._ranges((None, None)), None, "occupation", "occupations")

    def test_start_before_birth(self):
        with pytest.raises(DateOrderingError, match="after birth date") as exc:
            validate_date_ranges(self._ranges((date(1979, 1, 1), None)), date(1980, 1, 1),
                                 "place of origin", "placesOfOrigin")
        assert exc.value.field == "placesOfOrigin"

    def test_previous_needs_end(self):
        ranges = self._ranges((date(2000, 1, 1), None), (date(2005, 1, 1), None))
        with pytest.raises(DateOrderingError, match="must have an end date"):
            validate_date_ranges(ranges, None, "occupation", "occupations")

    def test_overlap_rejected(self):
        ranges = self._ranges((date(2000, 1, 1), date(2005, 1, 1)), (date(2005, 1, 1), None))
        with pytest.raises(DateOrderingError, match="previous occupation"):
            validate_date_ranges(ranges, None, "occupation", "occupations")
