"""Country facts lookup (restcountries.com)."""
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

REST_COUNTRIES_URL = "https://restcountries.com/v3.1"
REQUEST_TIMEOUT_SECONDS = 10.0


class CountryNotFoundError(Exception):
    """No country matches the requested name."""


class CountryLookupError(Exception):
    """The country database could not be reached."""


def format_population(population: int) -> str:
    """Spoken form of a population figure."""
    if population >= 1_000_000:
        return f"{population / 1_000_000:.1f} million"
    return f"{population:,}"


def describe_country(country: Dict[str, Any], fallback_name: str) -> str:
    """One spoken sentence summarizing a restcountries record."""
    name = (country.get("name") or {}).get("common") or fallback_name
    region = country.get("region") or "unknown region"
    capitals = country.get("capital") or []
    capital = capitals[0] if capitals else "no official capital"
    population = format_population(country.get("population") or 0)

    currency = "unknown currency"
    currencies = list((country.get("currencies") or {}).values())
    if currencies and currencies[0].get("name"):
        currency = currencies[0]["name"]

    return (
        f"{name} is a country in {region}. Its capital is {capital}. "
        f"The population is about {population}, and the official currency is the {currency}."
    )


class CountryInfoService:
    """Looks up country facts for the getCountryInfo tool."""

    def __init__(self, base_url: str = REST_COUNTRIES_URL, http_client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client

    async def describe(self, country_name: str) -> str:
        """Spoken description of ``country_name``."""
        client = self._http_client or httpx.AsyncClient(timeout=REQUEST_TIMEOUT_SECONDS)
        try:
            response = await client.get(f"{self.base_url}/name/{country_name}")
        except httpx.HTTPError as e:
            raise CountryLookupError(str(e)) from e
        finally:
            if client is not self._http_client:
                await client.aclose()

        if response.status_code == 404:
            raise CountryNotFoundError(country_name)
        if response.status_code >= 400:
            raise CountryLookupError(f"{response.status_code} {response.reason_phrase}")

        data = response.json()
        if not data:
            raise CountryNotFoundError(country_name)

        return describe_country(data[0], country_name)
