import json
import unittest

from app.exceptions import (
    GenerationTimeoutError, GenerationFailedError, NoJsonFoundError, IncompleteJsonError, SchemaViolationError
)
from app.schemas.diet_plan import DietProfileRequest, WeeklyPlan
from app.services.diet_service import DietPlanGenerator
from app.utils.llm_prompts.diet_prompts import DIET_SYSTEM_INSTRUCTION
from tests.helpers import FakeGenerationClient, VALID_PROFILE, make_plan, fenced


class TestDietPlanGenerator(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.profile = DietProfileRequest(**VALID_PROFILE)

    async def test_fenced_valid_response_takes_one_call(self):
        client = FakeGenerationClient(fenced(make_plan()))
        plan = await DietPlanGenerator(client).generate(self.profile)

        self.assertIsInstance(plan, WeeklyPlan)
        self.assertEqual(plan.calories_per_day, 1800)
        self.assertEqual(client.call_count, 1)
        system_prompt, user_prompt = client.calls[0]
        self.assertEqual(system_prompt, DIET_SYSTEM_INSTRUCTION)
        self.assertIn("Age 30", user_prompt)

    async def test_truncated_response_is_regenerated_once(self):
        truncated = json.dumps(make_plan())[:-40]
        client = FakeGenerationClient(truncated, json.dumps(make_plan()))
        plan = await DietPlanGenerator(client).generate(self.profile)

        self.assertEqual(plan.plan_type, "weekly")
        self.assertEqual(client.call_count, 2)
        # Same prompt both times
        self.assertEqual(client.calls[0], client.calls[1])

    async def test_truncated_twice_fails(self):
        truncated = json.dumps(make_plan())[:-40]
        client = FakeGenerationClient(truncated, truncated)
        with self.assertRaises(IncompleteJsonError):
            await DietPlanGenerator(client).generate(self.profile)
        self.assertEqual(client.call_count, 2)

    async def test_response_without_json_fails_after_retry(self):
        client = FakeGenerationClient("I cannot help with that.", "Still no plan, sorry.")
        with self.assertRaises(NoJsonFoundError):
            await DietPlanGenerator(client).generate(self.profile)
        self.assertEqual(client.call_count, 2)

    async def test_no_json_without_retry_takes_one_call(self):
        client = FakeGenerationClient("I cannot help with that.")
        with self.assertRaises(NoJsonFoundError):
            await DietPlanGenerator(client).request_json("prompt", allow_retry=False)
        self.assertEqual(client.call_count, 1)

    async def test_malformed_json_is_not_retried(self):
        client = FakeGenerationClient("{'plan_type': 'weekly'}")
        with self.assertRaises(IncompleteJsonError):
            await DietPlanGenerator(client).request_json("prompt")
        self.assertEqual(client.call_count, 1)

    async def test_incomplete_structure_is_retried(self):
        client = FakeGenerationClient('{"a": {"b": 1}', '{"a": {"b": 1}}')
        payload = await DietPlanGenerator(client).request_json("prompt")

        self.assertEqual(payload, {"a": {"b": 1}})
        self.assertEqual(client.call_count, 2)

    async def test_commentary_around_object_is_ignored(self):
        response = "Here is your weekly plan:\n" + json.dumps(make_plan()) + "\nStay healthy"
        # Does not end with '}' so the first attempt counts as truncated
        client = FakeGenerationClient(response, response)
        plan = await DietPlanGenerator(client).generate(self.profile)

        self.assertEqual(plan.veg_or_nonveg, "Vegetarian")
        self.assertEqual(client.call_count, 2)

    async def test_leading_commentary_only(self):
        client = FakeGenerationClient("Sure! " + json.dumps(make_plan()))
        plan = await DietPlanGenerator(client).generate(self.profile)
        self.assertTrue(plan.indian_foods_only)
        self.assertEqual(client.call_count, 1)

    async def test_infinity_calories_are_rejected(self):
        raw = json.dumps(make_plan(calories_per_day=float("inf")))
        self.assertIn("Infinity", raw)
        client = FakeGenerationClient(raw, fenced(make_plan()))
        with self.assertRaises(IncompleteJsonError):
            await DietPlanGenerator(client).generate(self.profile)
        self.assertEqual(client.call_count, 1)

    async def test_nan_constant_is_rejected(self):
        client = FakeGenerationClient('{"a": NaN}')
        with self.assertRaises(IncompleteJsonError):
            await DietPlanGenerator(client).request_json("prompt")

    async def test_timeout_propagates_without_retry(self):
        client = FakeGenerationClient(GenerationTimeoutError("timed out after 30s"), fenced(make_plan()))
        with self.assertRaises(GenerationTimeoutError):
            await DietPlanGenerator(client).generate(self.profile)
        self.assertEqual(client.call_count, 1)

    async def test_generation_failure_propagates(self):
        client = FakeGenerationClient(GenerationFailedError("empty response"))
        with self.assertRaises(GenerationFailedError):
            await DietPlanGenerator(client).generate(self.profile)

    async def test_schema_violation_is_not_retried(self):
        client = FakeGenerationClient(fenced(make_plan(calories_per_day="1800")), fenced(make_plan()))
        with self.assertRaises(SchemaViolationError) as ctx:
            await DietPlanGenerator(client).generate(self.profile)
        self.assertEqual(client.call_count, 1)
        self.assertTrue(any("calories_per_day" in err for err in ctx.exception.errors))

    async def test_invalid_format_signal(self):
        client = FakeGenerationClient('{"error":"INVALID_FORMAT"}')
        with self.assertRaises(SchemaViolationError):
            await DietPlanGenerator(client).generate(self.profile)


if __name__ == '__main__':
    unittest.main()
