# Import all models here
from app.models.user import User
from app.models.diet_plan import DietPlan
