"""In-process sorting for directory listings."""

from enum import Enum
from typing import Any, Callable, List, Optional, TypeVar, Union

from ....config.constants import SortOrder

T = TypeVar("T")


def sort_by_field(
    items: List[T],
    field_name: Union[str, Enum],
    order: Union[SortOrder, str] = SortOrder.ASC,
    key: Optional[Callable[[T], Any]] = None,
) -> List[T]:
    """Stable sort on an attribute; items whose value is None always go last."""
    attribute = field_name.value if isinstance(field_name, Enum) else field_name
    reverse = SortOrder(order) == SortOrder.DESC
    get_value = key or (lambda item: getattr(item, attribute))

    present = [item for item in items if get_value(item) is not None]
    missing = [item for item in items if get_value(item) is None]
    return sorted(present, key=get_value, reverse=reverse) + missing
