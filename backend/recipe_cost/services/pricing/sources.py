import math
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

import httpx

from recipe_cost.config import settings
from recipe_cost.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourcePrice:
    price: float
    unit: str
    currency: str = "EUR"
    in_stock: bool = True
    product_name: Optional[str] = None
    url: Optional[str] = None


class PriceSource(Protocol):
    source_id: str

    def fetch_price(self, search_term: str, country: str) -> Optional[SourcePrice]:
        """Live price for search_term, or None when the catalog has nothing usable."""
        ...


@dataclass(frozen=True)
class StoreDefinition:
    source_id: str
    name: str
    country: str
    base_url: str
    search_path: str
    description: str
    enabled: bool = True


STORE_DEFINITIONS: dict[str, StoreDefinition] = {
    "selver": StoreDefinition(
        source_id="selver",
        name="Selver",
        country="EE",
        base_url="https://www.selver.ee",
        search_path="/search",
        description="Estonia's largest supermarket chain",
    ),
    "rimi": StoreDefinition(
        source_id="rimi",
        name="Rimi",
        country="EE",
        base_url="https://www.rimi.ee",
        search_path="/epood/ee/otsing",
        description="Major Estonian grocery chain",
    ),
    "coop": StoreDefinition(
        source_id="coop",
        name="Coop",
        country="EE",
        base_url="https://ecoop.ee",
        search_path="/otsing",
        description="Estonian market leader, limited e-commerce catalog",
        enabled=False,
    ),
}


def _to_float(value: object) -> Optional[float]:
    """Finite float from a gateway price field; NaN, inf and unparseable values are None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.replace("€", "").replace(",", ".").strip()
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


class StoreCatalogSource:
    """
    One grocery store reached through the scraping gateway.

    The gateway answers GET {base_url}{search_path}?q=<term>&country=<cc> with
    {"products": [{"name", "price", "unit", "currency", "in_stock", "url"}, ...]}
    in relevance order.
    """

    def __init__(self, definition: StoreDefinition, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.definition = definition
        self.source_id = definition.source_id
        self._api_key = settings.store_gateway_api_key if api_key is None else api_key
        self._timeout = settings.source_fetch_timeout_s if timeout is None else timeout

    def _headers(self) -> dict:
        return {"X-API-Key": self._api_key} if self._api_key else {}

    def fetch_price(self, search_term: str, country: str) -> Optional[SourcePrice]:
        logger.info("store.search source=%s term=%s country=%s", self.source_id, search_term, country)
        resp = httpx.get(
            f"{self.definition.base_url}{self.definition.search_path}",
            headers=self._headers(),
            params={"q": search_term, "country": country},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        products = resp.json().get("products") or []
        for product in products:
            price = _to_float(product.get("price"))
            if price is None or price <= 0 or not product.get("in_stock", True) or not product.get("unit"):
                continue
            return SourcePrice(
                price=price,
                unit=str(product["unit"]),
                currency=product.get("currency") or "EUR",
                in_stock=True,
                product_name=product.get("name"),
                url=product.get("url"),
            )
        logger.info("store.search.no_match source=%s term=%s candidates=%s", self.source_id, search_term, len(products))
        return None


def build_price_sources(names: Optional[Iterable[str]] = None) -> list[StoreCatalogSource]:
    """Sources for the given store names, in order. Unknown names or an empty set raise ValueError."""
    requested = list(settings.price_sources if names is None else names)
    if not requested:
        raise ValueError("at least one price source must be configured")
    sources: list[StoreCatalogSource] = []
    for name in requested:
        definition = STORE_DEFINITIONS.get(name.strip().lower())
        if definition is None:
            raise ValueError(f"unknown price source {name!r}; known: {', '.join(sorted(STORE_DEFINITIONS))}")
        if not definition.enabled:
            logger.warning("price.source.disabled_but_requested source=%s", definition.source_id)
        if any(s.source_id == definition.source_id for s in sources):
            continue
        sources.append(StoreCatalogSource(definition))
    return sources
