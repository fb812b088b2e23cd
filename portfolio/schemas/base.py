from typing import Any, Type

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):  # type: ignore[misc]
    """
    Base for entity DTOs.

    Python attributes are snake_case, the wire format is camelCase
    (``imageUrl``, ``userFlow``). Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def to_field_names(
    model: Type[BaseModel], data: dict[str, Any]
) -> dict[str, Any]:
    """
    Rename aliased keys of ``data`` to ``model``'s attribute names.

    Unknown keys are kept as they are. Partial input must be renamed before
    it is merged over a record dumped by attribute name, so that each field
    has one spelling in the merged mapping.

    Example:
        >>> to_field_names(SkillInput, {"imageUrl": "a", "name": "b"})
        {'image_url': 'a', 'name': 'b'}
    """
    names = {
        field.alias: name
        for name, field in model.model_fields.items()
        if field.alias
    }
    return {names.get(key, key): value for key, value in data.items()}


class DeleteInput(BaseModel):  # type: ignore[misc]
    """Body of ``POST /<collection>/delete``."""

    id: str
