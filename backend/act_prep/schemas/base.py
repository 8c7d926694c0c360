from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CoreModel(BaseModel):
    """
    Immutable record shared by the scoring and analytics code.

    Attributes are snake_case in Python; serialized output uses the
    camelCase keys the dashboard reads.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )
