from sqlalchemy import Column, String, Integer, Text

from reelchef.database import Base, BaseMixin, JSONType


class MealPlan(BaseMixin, Base):
    __tablename__ = "meal_plans"

    name = Column(String, nullable=False)
    description = Column(Text)
    duration = Column(Integer, nullable=False)
    # Serialized list of MealPlanDay objects, stored as an opaque blob
    days = Column(JSONType, nullable=False, default=list)
