from reelchef.models.recipe import Recipe
from reelchef.models.meal_plan import MealPlan
