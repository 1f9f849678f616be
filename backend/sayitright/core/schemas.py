"""Base schema for camelCase JSON bodies"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both ``saveAsArchive`` and ``save_as_archive``"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
