import unittest
from datetime import date

from app.schemas.diet_plan import WeeklyPlan, LegacyPlan
from app.utils.pdf_generator import render_diet_plan_pdf
from tests.helpers import make_plan


class TestPdfGenerator(unittest.TestCase):

    def test_weekly_plan(self):
        plan = WeeklyPlan.model_validate(make_plan(precautions=["Avoid <fried> & salty food"]))
        pdf = render_diet_plan_pdf(plan, "Asha Rao", generated_on=date(2026, 1, 15))

        self.assertTrue(pdf.startswith(b"%PDF"))
        self.assertGreater(len(pdf), 1000)

    def test_legacy_plan(self):
        plan = LegacyPlan.model_validate({
            "daily_meals": {"breakfast": ["Poha"], "dinner": ["Roti & dal"]},
            "calories_per_day": 1600,
        })
        pdf = render_diet_plan_pdf(plan, "Ravi")
        self.assertTrue(pdf.startswith(b"%PDF"))


if __name__ == '__main__':
    unittest.main()
