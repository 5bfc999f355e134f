"""Event planner assistant: streamed advice with product recommendations."""

import json
import logging
import re
import time
from typing import Any, AsyncIterator
from uuid import UUID

import httpx
from cachetools import TTLCache

from yafoy.middleware.metrics import record_planner_stream
from yafoy.schemas.planner import EventContext, PlannerMessage
from yafoy.schemas.product import ProductSummary
from yafoy.services.completion_client import UPSTREAM_ERROR_MESSAGE, CompletionClient
from yafoy.services.product_service import ProductService
from yafoy.utils.sse import DONE_SENTINEL, format_sse, iter_sse_deltas

logger = logging.getLogger(__name__)

RECOMMENDATIONS_PATTERN = re.compile(r"\[RECOMMENDATIONS:\s*(\{.*?\})\]", re.DOTALL)

CATALOG_TTL = 60  # seconds
_catalog_cache: TTLCache = TTLCache(maxsize=1, ttl=CATALOG_TTL)


def extract_recommendations(text: str) -> list[str]:
    """Product ids from the last recommendation marker in ``text``.

    A malformed marker counts as no recommendations.
    """
    matches = RECOMMENDATIONS_PATTERN.findall(text)
    if not matches:
        return []

    try:
        payload = json.loads(matches[-1])
    except json.JSONDecodeError:
        logger.warning(f"Malformed recommendation marker: {matches[-1][:120]!r}")
        return []

    products = payload.get("products") if isinstance(payload, dict) else None
    if not isinstance(products, list):
        logger.warning("Recommendation marker without a products list")
        return []
    return [str(product_id) for product_id in products]


def strip_recommendations(text: str) -> str:
    """Remove recommendation markers from text meant for display."""
    return RECOMMENDATIONS_PATTERN.sub("", text).strip()


def _parse_ids(raw_ids: list[str]) -> list[UUID]:
    ids = []
    for raw in raw_ids:
        try:
            ids.append(UUID(raw))
        except ValueError:
            logger.info(f"Ignoring invalid recommended id {raw!r}")
    return ids


def build_system_prompt(event_context: EventContext | None, products: list[dict[str, Any]]) -> str:
    """French system prompt carrying the event context and the catalog."""
    if event_context:
        services = ", ".join(event_context.services_needed) or "Non spécifiés"
        context = (
            f"- Type d'événement: {event_context.event_type or 'Non spécifié'}\n"
            f"- Budget: {event_context.budget_min or 0} - "
            f"{event_context.budget_max or 'Non spécifié'} FCFA\n"
            f"- Nombre d'invités: {event_context.guest_count or 'Non spécifié'}\n"
            f"- Date: {event_context.event_date or 'Non spécifiée'}\n"
            f"- Lieu: {event_context.event_location or 'Non spécifié'}\n"
            f"- Services demandés: {services}"
        )
    else:
        context = "Aucun contexte fourni encore."

    if products:
        catalog = "\n".join(
            f"- {p['name']} ({p['category_name'] or 'Sans catégorie'})\n"
            f"  Prix: {p['price_per_day']} FCFA/jour\n"
            f"  Lieu: {p['location'] or 'Non spécifié'}\n"
            f"  {'✅ Vérifié' if p['is_verified'] else ''}\n"
            f"  ID: {p['product_id']}"
            for p in products
        )
    else:
        catalog = "Aucun produit disponible."

    return f"""Tu es YAFOY Assistant, un conseiller expert en organisation d'événements au Sénégal et en Afrique de l'Ouest.
Tu aides les organisateurs à planifier leurs cérémonies (mariages, baptêmes, anniversaires, etc.) en recommandant les meilleurs prestataires et équipements.

CONTEXTE DE L'ÉVÉNEMENT:
{context}

PRODUITS ET SERVICES DISPONIBLES:
{catalog}

INSTRUCTIONS:
1. Pose des questions pour comprendre les besoins (type d'événement, budget, nombre d'invités, date, lieu)
2. Recommande des prestataires et équipements adaptés au budget et au nombre d'invités
3. Suggère des combinaisons optimales de services
4. Donne des conseils pratiques pour l'organisation
5. Quand tu recommandes des produits, inclus leurs IDs dans ta réponse au format JSON comme ceci:
   [RECOMMENDATIONS: {{"products": ["id1", "id2"]}}]
6. Sois chaleureux, professionnel et culturellement adapté au contexte africain
7. Réponds en français

IMPORTANT: Toujours inclure les recommandations de produits en format JSON à la fin de ta réponse quand tu suggères des produits spécifiques."""


def _delta_frame(content: str) -> str:
    return format_sse(json.dumps({"choices": [{"delta": {"content": content}}]}, ensure_ascii=False))


class PlannerService:
    """Relays completion streams and resolves the recommended products."""

    def __init__(self, product_service: ProductService, completion_client: CompletionClient):
        self.product_service = product_service
        self.completion_client = completion_client

    async def get_catalog(self) -> list[dict[str, Any]]:
        """Active product catalog snapshot, cached in-process."""
        cached = _catalog_cache.get("catalog")
        if cached is not None:
            return cached

        products = await self.product_service.get_active_catalog()
        catalog = [
            {
                "product_id": str(p.product_id),
                "name": p.name,
                "category_name": p.category_name,
                "price_per_day": str(p.price_per_day),
                "location": p.location,
                "is_verified": p.is_verified,
            }
            for p in products
        ]
        _catalog_cache["catalog"] = catalog
        return catalog

    async def resolve_recommendations(self, text: str) -> list[ProductSummary]:
        """Active products recommended in ``text``, in recommendation order."""
        ids = _parse_ids(extract_recommendations(text))
        products = await self.product_service.get_active_by_ids(ids)
        return [ProductSummary.model_validate(p) for p in products]

    async def stream_reply(
        self,
        messages: list[PlannerMessage],
        event_context: EventContext | None = None,
    ) -> AsyncIterator[str]:
        """Open the upstream stream and return the SSE frames to relay.

        Refusals from the completion endpoint raise ``CompletionError`` here,
        before any frame is produced.
        """
        catalog = await self.get_catalog()
        payload = [{"role": "system", "content": build_system_prompt(event_context, catalog)}]
        payload.extend(m.model_dump() for m in messages)

        response = await self.completion_client.open_stream(payload)
        return self._relay(response)

    async def _relay(self, response: httpx.Response) -> AsyncIterator[str]:
        started = time.perf_counter()
        parts: list[str] = []
        outcome = "completed"
        try:
            async for delta in iter_sse_deltas(response.aiter_bytes()):
                parts.append(delta)
                yield _delta_frame(delta)
        except httpx.HTTPError as e:
            outcome = "upstream_error"
            logger.error(f"Completion stream interrupted: {e}")
            yield format_sse(json.dumps({"error": UPSTREAM_ERROR_MESSAGE}, ensure_ascii=False))
        finally:
            await response.aclose()

        recommendations = await self.resolve_recommendations("".join(parts))
        yield format_sse(
            json.dumps(
                {"recommendations": [r.model_dump(mode="json") for r in recommendations]},
                ensure_ascii=False,
            )
        )
        yield format_sse(DONE_SENTINEL)
        record_planner_stream(outcome, time.perf_counter() - started)
