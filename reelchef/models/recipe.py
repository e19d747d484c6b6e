from sqlalchemy import Column, String, Integer, Boolean, Text, Index

from reelchef.database import Base, BaseMixin, JSONType


class Recipe(BaseMixin, Base):
    __tablename__ = "recipes"

    url = Column(String, nullable=False)
    url_hash = Column(String, nullable=False, unique=True)
    platform = Column(String, nullable=False)
    title = Column(String)
    thumbnail_url = Column(String)
    servings = Column(Integer, default=4)
    ingredients = Column(JSONType, nullable=False, default=list)
    steps = Column(JSONType, nullable=False, default=list)
    nutrition = Column(JSONType)
    raw_transcript = Column(Text)
    cook_time_minutes = Column(Integer)
    difficulty = Column(String)
    is_vegetarian = Column(Boolean, default=False)
    is_vegan = Column(Boolean, default=False)
    is_gluten_free = Column(Boolean, default=False)
    category = Column(String, default="Main Course")

    __table_args__ = (
        Index("idx_recipes_platform", "platform"),
        Index("idx_recipes_cook_time", "cook_time_minutes"),
    )
