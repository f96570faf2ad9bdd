import copy
import unittest

from app.exceptions import SchemaViolationError
from app.models.diet_plan import DietPlan, PLAN_SCHEMA_LEGACY, PLAN_SCHEMA_WEEKLY
from app.schemas.diet_plan import WeeklyPlan, LegacyPlan
from app.services.plan_validator import validate_weekly_plan, plan_type_of, load_stored_plan
from tests.helpers import make_plan

LEGACY_PLAN = {
    "daily_meals": {
        "early_morning": ["Warm water with lemon"],
        "breakfast": ["Poha"],
        "lunch": ["Dal, rice"],
        "snacks": ["Roasted chana"],
        "dinner": ["Roti, sabzi"],
    },
    "calories_per_day": 1600,
    "precautions": ["Limit sugar"],
    "disclaimer": "Consult your doctor.",
}


class TestValidateWeeklyPlan(unittest.TestCase):

    def assertViolation(self, payload, field):
        with self.assertRaises(SchemaViolationError) as ctx:
            validate_weekly_plan(payload)
        self.assertTrue(
            any(field in err for err in ctx.exception.errors),
            f"{field} not in {ctx.exception.errors}"
        )

    def test_valid_plan(self):
        plan = validate_weekly_plan(make_plan())
        self.assertIsInstance(plan, WeeklyPlan)
        self.assertEqual(plan.weekly_plan.day_7.dinner, ["Day 7 dinner dish"])

    def test_float_calories(self):
        self.assertEqual(validate_weekly_plan(make_plan(calories_per_day=1850.5)).calories_per_day, 1850.5)

    def test_missing_day(self):
        payload = make_plan()
        del payload["weekly_plan"]["day_4"]
        self.assertViolation(payload, "weekly_plan.day_4")

    def test_missing_meal_slot(self):
        payload = make_plan()
        del payload["weekly_plan"]["day_2"]["evening_snack"]
        self.assertViolation(payload, "weekly_plan.day_2.evening_snack")

    def test_string_calories(self):
        self.assertViolation(make_plan(calories_per_day="1800"), "calories_per_day")

    def test_non_positive_calories(self):
        self.assertViolation(make_plan(calories_per_day=0), "calories_per_day")

    def test_non_finite_calories(self):
        for value in (float("inf"), float("-inf"), float("nan")):
            self.assertViolation(make_plan(calories_per_day=value), "calories_per_day")

    def test_string_bool(self):
        self.assertViolation(make_plan(indian_foods_only="true"), "indian_foods_only")

    def test_non_string_meal_item(self):
        payload = make_plan()
        payload["weekly_plan"]["day_1"]["lunch"] = ["Dal", 2]
        self.assertViolation(payload, "weekly_plan.day_1.lunch.1")

    def test_empty_meal_list(self):
        payload = make_plan()
        payload["weekly_plan"]["day_3"]["breakfast"] = []
        self.assertViolation(payload, "weekly_plan.day_3.breakfast")

    def test_multi_line_meal_item(self):
        payload = make_plan()
        payload["weekly_plan"]["day_5"]["dinner"] = ["Roti\nSabzi"]
        self.assertViolation(payload, "weekly_plan.day_5.dinner.0")

    def test_blank_meal_item(self):
        payload = make_plan()
        payload["weekly_plan"]["day_5"]["dinner"] = ["   "]
        self.assertViolation(payload, "weekly_plan.day_5.dinner.0")

    def test_wrong_plan_type(self):
        self.assertViolation(make_plan(plan_type="daily"), "plan_type")

    def test_empty_precautions(self):
        self.assertViolation(make_plan(precautions=[]), "precautions")

    def test_invalid_format_signal(self):
        with self.assertRaises(SchemaViolationError):
            validate_weekly_plan({"error": "INVALID_FORMAT"})

    def test_not_an_object(self):
        with self.assertRaises(SchemaViolationError):
            validate_weekly_plan([make_plan()])

    def test_extra_keys_are_dropped(self):
        payload = make_plan(notes="extra")
        payload["weekly_plan"]["day_1"]["supper"] = ["Milk"]
        plan = validate_weekly_plan(payload)
        dumped = plan.model_dump(mode="json")
        self.assertNotIn("notes", dumped)
        self.assertNotIn("supper", dumped["weekly_plan"]["day_1"])

    def test_payload_is_not_modified(self):
        payload = make_plan()
        original = copy.deepcopy(payload)
        validate_weekly_plan(payload)
        self.assertEqual(payload, original)


class TestStoredPlanVariants(unittest.TestCase):

    def test_weekly(self):
        stored = DietPlan(plan_data=make_plan(), plan_schema_version=PLAN_SCHEMA_WEEKLY)
        self.assertEqual(plan_type_of(stored), "weekly")
        self.assertIsInstance(load_stored_plan(stored), WeeklyPlan)

    def test_legacy(self):
        stored = DietPlan(plan_data=LEGACY_PLAN, plan_schema_version=PLAN_SCHEMA_LEGACY)
        self.assertEqual(plan_type_of(stored), "legacy")
        loaded = load_stored_plan(stored)
        self.assertIsInstance(loaded, LegacyPlan)
        self.assertEqual(loaded.daily_meals.snacks, ["Roasted chana"])

    def test_weekly_data_with_legacy_tag_reads_as_legacy(self):
        stored = DietPlan(plan_data={"daily_meals": {}}, plan_schema_version=PLAN_SCHEMA_WEEKLY)
        self.assertEqual(plan_type_of(stored), "legacy")

    def test_legacy_without_meals(self):
        stored = DietPlan(plan_data={"calories_per_day": 1500}, plan_schema_version=PLAN_SCHEMA_LEGACY)
        loaded = load_stored_plan(stored)
        self.assertEqual(loaded.daily_meals.breakfast, [])


if __name__ == '__main__':
    unittest.main()
