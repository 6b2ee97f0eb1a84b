"""Factory producing value-object kinds."""

from typing import Annotated, Any, Optional, Union

from flyweight_values.core.exceptions import SchemaDefinitionError
from flyweight_values.core.utils.logging import get_logger
from flyweight_values.domain.value_object import ValueObject, ValueObjectMeta
from flyweight_values.flyweight.cache import FlyweightCache
from flyweight_values.schema import Schema

logger = get_logger("flyweight_values.factory")


def value_object(
    type_tag: str,
    schema: Any,
    *,
    cache: Optional[FlyweightCache] = None,
) -> type[ValueObject]:
    """Create a value-object kind bound to a type tag and a schema.

    Every call returns a new class, so kinds are told apart by name even
    when their schemas are identical. Subclass the result to add methods.

    Args:
        type_tag: Non-empty name of the kind; partitions the cache.
        schema: A ``Schema`` or any pydantic annotation (``str``,
            ``list[int]``, a ``BaseModel``...).
        cache: Cache to resolve instances through. Defaults to the
            process-wide cache.

    Returns:
        The kind.

    Example:
        >>> class Street(value_object("Street", str)):
        ...     pass
        >>> Street("Main St").value
        'Main St'
    """
    if not isinstance(type_tag, str) or not type_tag.strip():
        raise SchemaDefinitionError(
            "type_tag must be a non-empty string",
            details={"type_tag": repr(type_tag)},
        )

    base_schema = schema if isinstance(schema, Schema) else Schema(schema)
    branded = base_schema.brand(type_tag)

    name = type_tag if type_tag.isidentifier() else "ValueObject"
    kind = ValueObjectMeta(
        name,
        (ValueObject,),
        {
            "__slots__": (),
            "__qualname__": name,
            "__module__": __name__,
            "_type_tag": type_tag,
            "_schema": branded,
            "_cache": cache,
        },
    )
    kind._kind = kind

    kind._flyweight().register(type_tag, kind)
    logger.debug("Value object kind defined", type_tag=type_tag, schema=repr(branded))
    return kind


def embed(source: Union[type[ValueObject], Schema]) -> Any:
    """Turn a kind or schema into an annotation usable inside other schemas.

    The annotation validates with the kind's schema only: instances and raw
    values are both accepted and the enclosing schema stores the plain value.
    Annotating with the kind itself instead builds (cached) instances.

    Example:
        >>> class Address(BaseModel):
        ...     street: embed(Street)
    """
    if isinstance(source, Schema):
        return Annotated[Any, source]
    if isinstance(source, type) and issubclass(source, ValueObject):
        return Annotated[Any, source._require_kind()._schema]
    raise SchemaDefinitionError(
        f"Cannot embed {source!r}; expected a value-object kind or a Schema"
    )
