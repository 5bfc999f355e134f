"""Tests for the event planner assistant.

Tests verify:
- Recommendation markers are extracted and stripped
- Malformed markers yield no recommendations
- The relayed stream ends with the recommendations frame and the sentinel
- Upstream refusals surface before any frame is produced
"""

import json
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import httpx
import pytest

from yafoy.schemas.planner import EventContext, PlannerMessage
from yafoy.services import planner_service
from yafoy.services.completion_client import CompletionClient, CompletionError
from yafoy.services.planner_service import (
    PlannerService,
    build_system_prompt,
    extract_recommendations,
    strip_recommendations,
)


def make_product(**overrides) -> SimpleNamespace:
    fields = {
        "product_id": uuid4(),
        "name": "Tente blanche 10x20",
        "category_name": "Tentes & Chapiteaux",
        "price_per_day": Decimal("75000.00"),
        "location": "Dakar",
        "images": [],
        "is_verified": True,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def sse_body(*contents: str) -> bytes:
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": c}}]}, ensure_ascii=False)
        for c in contents
    ]
    return ("\n".join(lines) + "\ndata: [DONE]\n").encode()


def parse_frames(frames: list[str]) -> list[str]:
    return [f.removeprefix("data: ").rstrip("\n") for f in frames]


@pytest.fixture(autouse=True)
def clear_catalog_cache():
    planner_service._catalog_cache.clear()
    yield
    planner_service._catalog_cache.clear()


class TestRecommendationMarker:
    """Test extraction and stripping of the recommendation marker."""

    def test_extract_ids(self):
        text = 'Voici mes conseils. [RECOMMENDATIONS: {"products": ["a", "b"]}]'
        assert extract_recommendations(text) == ["a", "b"]

    def test_last_marker_wins(self):
        text = (
            '[RECOMMENDATIONS: {"products": ["old"]}] puis '
            '[RECOMMENDATIONS: {"products": ["new"]}]'
        )
        assert extract_recommendations(text) == ["new"]

    def test_no_marker(self):
        assert extract_recommendations("Combien d'invités attendez-vous ?") == []

    def test_malformed_marker_is_empty(self):
        assert extract_recommendations('[RECOMMENDATIONS: {"products": ["a",}]') == []

    def test_marker_without_products_list(self):
        assert extract_recommendations('[RECOMMENDATIONS: {"items": ["a"]}]') == []

    def test_marker_spanning_lines(self):
        text = '[RECOMMENDATIONS: {\n  "products": ["a"]\n}]'
        assert extract_recommendations(text) == ["a"]

    def test_strip_for_display(self):
        text = 'Je recommande la tente.\n[RECOMMENDATIONS: {"products": ["a"]}]'
        assert strip_recommendations(text) == "Je recommande la tente."


class TestSystemPrompt:
    def test_context_and_catalog_included(self):
        product_id = uuid4()
        prompt = build_system_prompt(
            EventContext(event_type="Mariage", guest_count=200, services_needed=["Traiteur", "Son"]),
            [
                {
                    "product_id": str(product_id),
                    "name": "Sonorisation complète",
                    "category_name": None,
                    "price_per_day": "60000.00",
                    "location": "Thiès",
                    "is_verified": False,
                }
            ],
        )

        assert "Type d'événement: Mariage" in prompt
        assert "Nombre d'invités: 200" in prompt
        assert "Services demandés: Traiteur, Son" in prompt
        assert "Sonorisation complète (Sans catégorie)" in prompt
        assert f"ID: {product_id}" in prompt
        assert '[RECOMMENDATIONS: {"products": ["id1", "id2"]}]' in prompt

    def test_empty_context_and_catalog(self):
        prompt = build_system_prompt(None, [])

        assert "Aucun contexte fourni encore." in prompt
        assert "Aucun produit disponible." in prompt


class TestPlannerService:
    """Test stream relay against a mocked completion endpoint."""

    def make_service(self, handler, products=None) -> tuple[PlannerService, MagicMock]:
        product_service = MagicMock()
        product_service.get_active_catalog = AsyncMock(return_value=products or [])
        product_service.get_active_by_ids = AsyncMock(return_value=products or [])
        client = CompletionClient(
            api_url="https://completion.test/v1/chat/completions",
            api_key="test-key",
            model="test-model",
            transport=httpx.MockTransport(handler),
        )
        return PlannerService(product_service, client), product_service

    @pytest.mark.asyncio
    async def test_stream_relays_deltas_then_recommendations(self):
        product = make_product()
        marker = f'[RECOMMENDATIONS: {{"products": ["{product.product_id}", "not-a-uuid"]}}]'
        service, product_service = self.make_service(
            lambda request: httpx.Response(200, content=sse_body("Pour un mariage, ", marker)),
            products=[product],
        )

        stream = await service.stream_reply([PlannerMessage(role="user", content="Mariage de 200 invités")])
        frames = parse_frames([f async for f in stream])

        assert json.loads(frames[0])["choices"][0]["delta"]["content"] == "Pour un mariage, "
        assert json.loads(frames[1])["choices"][0]["delta"]["content"] == marker
        recommendations = json.loads(frames[2])["recommendations"]
        assert [r["product_id"] for r in recommendations] == [str(product.product_id)]
        assert frames[3] == "[DONE]"
        # Invalid ids are dropped before the lookup
        product_service.get_active_by_ids.assert_awaited_once_with([product.product_id])

    @pytest.mark.asyncio
    async def test_request_carries_system_prompt(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            captured["auth"] = request.headers["Authorization"]
            return httpx.Response(200, content=sse_body("ok"))

        service, _ = self.make_service(handler)
        stream = await service.stream_reply([PlannerMessage(role="user", content="Bonjour")])
        [f async for f in stream]

        body = captured["body"]
        assert captured["auth"] == "Bearer test-key"
        assert body["stream"] is True
        assert body["model"] == "test-model"
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][1] == {"role": "user", "content": "Bonjour"}

    @pytest.mark.asyncio
    async def test_no_marker_gives_empty_recommendations(self):
        service, _ = self.make_service(lambda request: httpx.Response(200, content=sse_body("Bonjour !")))

        stream = await service.stream_reply([PlannerMessage(role="user", content="Salut")])
        frames = parse_frames([f async for f in stream])

        assert json.loads(frames[-2]) == {"recommendations": []}
        assert frames[-1] == "[DONE]"

    @pytest.mark.asyncio
    async def test_rate_limit_raised_before_streaming(self):
        service, _ = self.make_service(lambda request: httpx.Response(429, json={"error": "slow down"}))

        with pytest.raises(CompletionError) as exc_info:
            await service.stream_reply([PlannerMessage(role="user", content="Salut")])

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_catalog_cached(self):
        service, product_service = self.make_service(lambda request: httpx.Response(200, content=sse_body("ok")))

        await service.get_catalog()
        await service.get_catalog()

        product_service.get_active_catalog.assert_awaited_once()
