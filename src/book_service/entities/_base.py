from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


class Entity(BaseModel):
    """Base entity class with a store-assigned integer identifier."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = PydanticField(
        default=None,
        description="Unique identifier, assigned by the store on first save",
    )


class EntityTable(SQLModel, table=False):
    """Base table class with an autoincrementing integer primary key."""

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Unique identifier for the entity",
    )
