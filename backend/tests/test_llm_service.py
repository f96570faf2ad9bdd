import asyncio
import unittest
from types import SimpleNamespace

from app.exceptions import GenerationFailedError, GenerationTimeoutError
from app.services.llm_service import GenerationClient, GenerationSettings, get_llm


class FakeChatModel:

    def __init__(self, content=None, delay=0.0, error=None):
        self.content = content
        self.delay = delay
        self.error = error
        self.messages = None

    async def ainvoke(self, messages):
        self.messages = messages
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return SimpleNamespace(
            content=self.content,
            usage_metadata={"input_tokens": 12, "output_tokens": 34},
            response_metadata={},
        )


def make_settings(**overrides):
    return GenerationSettings(provider="gemini", model="gemini-2.5-flash", api_key="test-key", **overrides)


class TestGenerationClient(unittest.IsolatedAsyncioTestCase):

    async def test_returns_raw_text(self):
        llm = FakeChatModel(content='```json\n{"a": 1}\n```')
        text = await GenerationClient(make_settings(), llm=llm).generate("system", "user")

        self.assertEqual(text, '```json\n{"a": 1}\n```')
        self.assertEqual([m.content for m in llm.messages], ["system", "user"])

    async def test_joins_content_parts(self):
        llm = FakeChatModel(content=[{"type": "text", "text": '{"a": '}, {"type": "text", "text": "1}"}])
        text = await GenerationClient(make_settings(), llm=llm).generate("system", "user")
        self.assertEqual(text, '{"a": 1}')

    async def test_timeout(self):
        llm = FakeChatModel(content="{}", delay=1.0)
        client = GenerationClient(make_settings(timeout=0.05), llm=llm)
        with self.assertRaises(GenerationTimeoutError):
            await client.generate("system", "user")

    async def test_provider_error(self):
        llm = FakeChatModel(error=RuntimeError("API key not valid"))
        with self.assertRaises(GenerationFailedError) as ctx:
            await GenerationClient(make_settings(), llm=llm).generate("system", "user")
        self.assertIn("API key not valid", ctx.exception.message)

    async def test_empty_response(self):
        llm = FakeChatModel(content="   ")
        with self.assertRaises(GenerationFailedError):
            await GenerationClient(make_settings(), llm=llm).generate("system", "user")


class TestGenerationSettings(unittest.TestCase):

    def test_overrides(self):
        settings = make_settings(temperature=0.4, max_tokens=1024)
        self.assertEqual(settings.temperature, 0.4)
        self.assertEqual(settings.max_tokens, 1024)
        self.assertFalse(settings.json_mode)

    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            get_llm(GenerationSettings(provider="nope", model="x"))


if __name__ == '__main__':
    unittest.main()
