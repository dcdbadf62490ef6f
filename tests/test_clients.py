"""Tests for client construction and the vision service."""
import pytest
from openai import AsyncOpenAI

from baby_face_predictor.data.enums import AiFeature
from baby_face_predictor.data.settings import HttpConfig, settings
from baby_face_predictor.services.clients import MockAIClient, get_ai_client, get_ai_client_and_model
from baby_face_predictor.services.features.vocabulary import parse_description
from baby_face_predictor.services.llm_invokers import VisionService
from baby_face_predictor.services.output_normalizer import normalize_to_url
from baby_face_predictor.services.utils.http_client import ProviderSession
from tests.conftest import PARENT1_IMAGE


class TestFactory:

    def test_mock_client(self):
        assert isinstance(get_ai_client("MOCK"), MockAIClient)

    def test_unknown_client(self):
        with pytest.raises(ValueError, match="Unknown client type"):
            get_ai_client("dall-e")

    def test_openai_requires_key(self, monkeypatch):
        monkeypatch.setattr(settings.api_urls, "openai_api_key", None)
        with pytest.raises(RuntimeError, match="OpenAI"):
            get_ai_client("openai")

    def test_client_and_model_per_feature(self, monkeypatch):
        monkeypatch.setattr(settings.vision, "client", "mock")
        monkeypatch.setattr(settings.generation, "client", "mock")

        vision_client, vision_model = get_ai_client_and_model(feature=AiFeature.VISION_ANALYSIS)
        generation_client, generation_model = get_ai_client_and_model(feature=AiFeature.IMAGE_GENERATION)

        assert isinstance(vision_client, MockAIClient)
        assert vision_model == settings.vision.model
        assert isinstance(generation_client, MockAIClient)
        assert generation_model is None


class TestVisionService:

    async def test_joins_streamed_tokens(self):
        """Should join llava's token list into one description."""
        service = VisionService(MockAIClient(delay_s=0), "yorickvp/llava-13b:v")
        text = await service.describe(PARENT1_IMAGE, "describe")

        parsed = parse_description(text)
        assert parsed["skin_tone"] == "medium"
        assert parsed["eye_color"] == "brown"
        assert parsed["hair_color"] == "dark brown"
        assert parsed["face_shape"] == "oval"

    async def test_openai_chat_client(self):
        """Should send the image as an image_url part to chat clients."""
        client = AsyncOpenAI(api_key="test")
        captured = {}

        class Message:
            content = "olive skin, green eyes"

        class Choice:
            message = Message()

        class Response:
            choices = [Choice()]

        async def create(**kwargs):
            captured.update(kwargs)
            return Response()

        client.chat.completions.create = create
        text = await VisionService(client, "gpt-4o-mini").describe(PARENT1_IMAGE, "describe")

        assert text == "olive skin, green eyes"
        content = captured["messages"][0]["content"]
        assert content[1] == {"type": "image_url", "image_url": {"url": PARENT1_IMAGE}}
        assert captured["model"] == "gpt-4o-mini"


async def test_mock_generation_output_normalizes():
    output = await MockAIClient(delay_s=0).run("stability-ai/sdxl:v", {"prompt": "a baby"})
    assert (await normalize_to_url(output)).startswith("https://")


class TestProviderSession:

    async def test_reuses_and_reopens(self):
        provider = ProviderSession(HttpConfig(user_agent="tests/1.0"))
        first = await provider.session()
        assert await provider.session() is first
        assert first.headers["User-Agent"] == "tests/1.0"

        await provider.close()
        assert not provider.is_open
        second = await provider.session()
        assert second is not first
        await provider.close()
