from datetime import date
from io import BytesIO
from typing import Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, KeepTogether

from app.schemas.diet_plan import DAY_KEYS, MEAL_SLOTS, LEGACY_MEAL_SLOTS, WeeklyPlan, LegacyPlan

MEAL_LABELS = {
    "early_morning": "Early Morning",
    "breakfast": "Breakfast",
    "mid_morning": "Mid Morning",
    "lunch": "Lunch",
    "evening_snack": "Evening Snack",
    "snacks": "Snacks",
    "dinner": "Dinner",
}

FOOTER_TEXT = (
    "This meal plan is for informational purposes only. "
    "Please consult with a healthcare professional for personalized advice."
)


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("PlanTitle", parent=base["Title"], fontSize=22, alignment=TA_CENTER),
        "subtitle": ParagraphStyle("PlanSubtitle", parent=base["Normal"], fontSize=9, alignment=TA_CENTER),
        "section": ParagraphStyle("Section", parent=base["Heading2"], fontSize=13, spaceBefore=10),
        "day": ParagraphStyle("Day", parent=base["Heading3"], fontSize=12, spaceBefore=8),
        "meal": ParagraphStyle("Meal", parent=base["Normal"], fontName="Helvetica-Bold", fontSize=10),
        "item": ParagraphStyle("Item", parent=base["Normal"], fontSize=9, leftIndent=12),
        "body": ParagraphStyle("Body", parent=base["Normal"], fontSize=10),
        "disclaimer": ParagraphStyle("Disclaimer", parent=base["Normal"], fontSize=8, alignment=TA_JUSTIFY),
        "footer": ParagraphStyle("Footer", parent=base["Normal"], fontSize=7, alignment=TA_CENTER, textColor=colors.HexColor("#666666")),
    }


def _meal_block(label: str, items, styles: dict) -> list:
    block = [Paragraph(f"{label}:", styles["meal"])]
    block.extend(Paragraph(f"&bull; {escape(item)}", styles["item"]) for item in items)
    block.append(Spacer(1, 4))
    return block


def render_diet_plan_pdf(
    plan: Union[WeeklyPlan, LegacyPlan],
    user_name: str,
    generated_on: Optional[date] = None
) -> bytes:
    """
    Render a stored plan as PDF bytes.

    Section order: title, generation date, user summary, days 1-7 (or the
    legacy daily meals), precautions, disclaimer, footer.
    """
    styles = _styles()
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=0.7 * inch,
        rightMargin=0.7 * inch,
        topMargin=0.7 * inch,
        bottomMargin=0.7 * inch,
        title="MediDiet - Weekly Diet Plan",
        author="MediDiet",
    )
    elements = []

    # Title
    elements.append(Paragraph("MediDiet - Weekly Diet Plan", styles["title"]))
    elements.append(Paragraph(f"Generated on: {(generated_on or date.today()).strftime('%d %b %Y')}", styles["subtitle"]))
    elements.append(Spacer(1, 12))

    # User summary
    elements.append(Paragraph("Diet Plan Details", styles["section"]))
    elements.append(Paragraph(f"User: {escape(user_name)}", styles["body"]))
    if plan.calories_per_day is not None:
        elements.append(Paragraph(f"Calories per day: {plan.calories_per_day:g} kcal", styles["body"]))
    if plan.veg_or_nonveg:
        elements.append(Paragraph(f"Type: {escape(plan.veg_or_nonveg)}", styles["body"]))
    elements.append(Spacer(1, 8))

    if isinstance(plan, WeeklyPlan):
        for number, day_key in enumerate(DAY_KEYS, start=1):
            day = getattr(plan.weekly_plan, day_key)
            day_block = [Paragraph(f"DAY {number}", styles["day"])]
            for slot in MEAL_SLOTS:
                day_block.extend(_meal_block(MEAL_LABELS[slot], getattr(day, slot), styles))
            # Keep each day on one page
            elements.append(KeepTogether(day_block))
    else:
        elements.append(Paragraph("Daily Meals", styles["section"]))
        for slot in LEGACY_MEAL_SLOTS:
            items = getattr(plan.daily_meals, slot)
            if items:
                elements.extend(_meal_block(MEAL_LABELS[slot], items, styles))

    # Precautions
    elements.append(Paragraph("Precautions", styles["section"]))
    if plan.precautions:
        for precaution in plan.precautions:
            elements.append(Paragraph(f"&bull; {escape(precaution)}", styles["item"]))
    else:
        elements.append(Paragraph("No specific precautions.", styles["item"]))

    # Disclaimer
    elements.append(Paragraph("Disclaimer", styles["section"]))
    elements.append(Paragraph(escape(plan.disclaimer or "N/A"), styles["disclaimer"]))

    # Footer
    elements.append(Spacer(1, 16))
    elements.append(Paragraph(FOOTER_TEXT, styles["footer"]))

    doc.build(elements)
    return buffer.getvalue()
