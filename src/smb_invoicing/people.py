# SMB Invoicing - Invoicing & CRM client for SMBs
# Copyright (c) 2026 The SMB Invoicing authors
# Licensed under the MIT License. See LICENSE file for details.

"""
Contacts (persons) services.

This module sits between the API client and the CLI. It provides:

1) Listing & searching
   - fetch the people created by the current user (the API returns every
     person; the filtering on ``createdBy`` is done client-side),
   - resolve company names, with a placeholder for unknown companies,
   - case-insensitive search over first name, last name, company name,
     country, telephone and email.

2) Editing
   - partial updates through PersonChanges,
   - required-field validation (first name, last name, telephone, email),
   - phone-number validation for the person's country (phonenumbers),
   - email/telephone uniqueness among the user's contacts.

   The phone-number check runs only when the telephone or the country
   changed, and the uniqueness check only when the email or the telephone
   changed. The person being edited is excluded from the uniqueness check.

3) Deleting

Read failures are logged and return the previous (possibly empty) data.
Write failures (update, delete) propagate as ApiError.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import Optional

import phonenumbers
import pycountry

from .api import ApiClient, ApiError
from .io import Company, Person, company_from_api, person_from_api

logger = logging.getLogger(__name__)

MISSING_COMPANY = "-"


class ValidationError(ValueError):
    """A person cannot be saved as entered."""


@dataclass(frozen=True)
class PersonChanges:
    """
    Partial update of a person: None means "leave unchanged".

    ``country`` may be a country name or an ISO 3166 code; it is stored as
    the country name, like the API does.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company_id: Optional[str] = None
    country: Optional[str] = None
    telephone: Optional[str] = None
    email: Optional[str] = None


# ---------------------------------------------------------------------------
# Listing & searching
# ---------------------------------------------------------------------------


def fetch_people(
    client: ApiClient,
    user_id: Optional[str],
    previous: Sequence[Person] = (),
) -> list[Person]:
    """Return the people created by ``user_id``."""
    try:
        raw = client.list_people()
    except ApiError as exc:
        logger.error("Error fetching people: %s", exc)
        return list(previous)
    people = [person_from_api(r) for r in raw]
    return [p for p in people if p.created_by == user_id]


def fetch_companies(
    client: ApiClient,
    user_id: Optional[str] = None,
    previous: Sequence[Company] = (),
) -> list[Company]:
    """
    Return companies, restricted to those created by ``user_id`` when given.

    The contacts list resolves names against every company; the edit form
    only offers the user's own companies.
    """
    try:
        raw = client.list_companies()
    except ApiError as exc:
        logger.error("Error fetching companies: %s", exc)
        return list(previous)
    companies = [company_from_api(r) for r in raw]
    if user_id is None:
        return companies
    return [c for c in companies if c.created_by == user_id]


def company_name(companies: Sequence[Company], company_id: Optional[str]) -> str:
    company = next((c for c in companies if c.id == company_id), None)
    return company.name if company is not None else MISSING_COMPANY


def search_people(
    people: Sequence[Person],
    companies: Sequence[Company],
    query: str,
) -> list[Person]:
    """Case-insensitive substring search; an empty query keeps everyone."""
    needle = query.strip().lower()
    if not needle:
        return list(people)

    def _matches(person: Person) -> bool:
        haystack = (
            person.first_name,
            person.last_name,
            company_name(companies, person.company_id),
            person.country or "",
            person.telephone,
            person.email,
        )
        return any(needle in value.lower() for value in haystack)

    return [p for p in people if _matches(p)]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def country_name(country: str) -> str:
    """Return the canonical country name for a name or ISO code."""
    try:
        return pycountry.countries.lookup(country.strip()).name
    except LookupError as exc:
        raise ValidationError(f"Unknown country: {country!r}") from exc


def country_code(country: str) -> str:
    """Return the ISO 3166 alpha-2 code for a name or ISO code."""
    try:
        return pycountry.countries.lookup(country.strip()).alpha_2
    except LookupError as exc:
        raise ValidationError(f"Unknown country: {country!r}") from exc


def is_valid_phone_number(number: str, region: str) -> bool:
    try:
        parsed = phonenumbers.parse(number, region)
    except phonenumbers.NumberParseException as exc:
        logger.debug("Phone number validation error: %s", exc)
        return False
    return phonenumbers.is_valid_number(parsed)


def _check_required(person: Person) -> None:
    required = {
        "first name": person.first_name,
        "last name": person.last_name,
        "telephone": person.telephone,
        "email": person.email,
    }
    missing = [label for label, value in required.items() if not value.strip()]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}.")


def _check_uniqueness(client: ApiClient, person: Person, user_id: Optional[str]) -> None:
    try:
        raw = client.list_people(created_by=user_id)
    except ApiError as exc:
        logger.error("Error checking uniqueness: %s", exc)
        raise ValidationError("Error checking uniqueness. Please try again.") from exc

    others = [p for p in map(person_from_api, raw) if p.id != person.id]
    if any(p.email == person.email for p in others):
        raise ValidationError(
            "Email already exists among your contacts. Please use a different email."
        )
    if any(p.telephone == person.telephone for p in others):
        raise ValidationError(
            "Telephone number already exists among your contacts. "
            "Please use a different telephone number."
        )


def apply_changes(person: Person, changes: PersonChanges) -> Person:
    """Return ``person`` with every non-None field of ``changes`` applied."""
    updates = {
        name: value
        for name, value in vars(changes).items()
        if value is not None
    }
    if "country" in updates:
        updates["country"] = country_name(updates["country"]) if updates["country"] else None
    return replace(person, **updates)


def validate_person(
    client: ApiClient,
    original: Person,
    updated: Person,
    user_id: Optional[str],
) -> None:
    """
    Run every save-time check on ``updated``.

    Raises
    ------
    ValidationError
        On the first failing check.
    """
    _check_required(updated)

    phone_changed = updated.telephone != original.telephone
    country_changed = updated.country != original.country
    if updated.country and (phone_changed or country_changed):
        if not is_valid_phone_number(updated.telephone, country_code(updated.country)):
            raise ValidationError(
                f"Invalid phone number for {updated.country}. "
                "Please check the number format."
            )

    email_changed = updated.email != original.email
    if email_changed or phone_changed:
        _check_uniqueness(client, updated, user_id)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def edit_person(
    client: ApiClient,
    person: Person,
    changes: PersonChanges,
    user_id: Optional[str],
) -> Person:
    """Validate and save ``changes``; return the updated person."""
    updated = apply_changes(person, changes)
    validate_person(client, person, updated, user_id)
    client.update_person(person.id, updated.to_api_payload())
    logger.info("Person %s updated.", person.id)
    return updated


def delete_person(client: ApiClient, person_id: str) -> None:
    client.delete_person(person_id)
    logger.info("Person %s deleted.", person_id)
