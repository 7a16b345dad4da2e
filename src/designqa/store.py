"""Holds the current difference list, the selection and review comments."""
from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, Iterator, List, Optional

from .core.types import Comment, DesignDifference

logger = logging.getLogger(__name__)


class DifferenceStore:
    """Id-indexed, insertion-ordered collection of :class:`DesignDifference`.

    Comments are append-only: the store offers no way to edit or delete them.
    At most one difference is selected at a time.
    """

    def __init__(self, differences: Iterable[DesignDifference] = ()) -> None:
        self._items: "OrderedDict[str, DesignDifference]" = OrderedDict()
        self._selected_id: Optional[str] = None
        self.set_differences(differences)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[DesignDifference]:
        return iter(self._items.values())

    def __contains__(self, difference_id: object) -> bool:
        return difference_id in self._items

    @property
    def differences(self) -> List[DesignDifference]:
        return list(self._items.values())

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected(self) -> Optional[DesignDifference]:
        if self._selected_id is None:
            return None
        return self._items.get(self._selected_id)

    def get(self, difference_id: str) -> Optional[DesignDifference]:
        return self._items.get(difference_id)

    def set_differences(self, differences: Iterable[DesignDifference]) -> None:
        """Replace the whole list; the old contents are never partially kept."""

        items: "OrderedDict[str, DesignDifference]" = OrderedDict()
        for difference in differences:
            if difference.id in items:
                raise ValueError(f"Duplicate difference id '{difference.id}'")
            items[difference.id] = difference
        self._items = items
        if self._selected_id not in items:
            self._selected_id = None

    def clear(self) -> None:
        self.set_differences(())

    def select_difference(self, difference_id: Optional[str]) -> Optional[DesignDifference]:
        """Toggle the selection and return the selected difference, if any."""

        if difference_id is None or difference_id == self._selected_id:
            self._selected_id = None
        elif difference_id in self._items:
            self._selected_id = difference_id
        else:
            logger.debug("Ignoring selection of unknown difference %s", difference_id)
        return self.selected

    def add_comment(self, difference_id: str, text: str) -> Optional[Comment]:
        """Append a timestamped comment; unknown ids and blank text are ignored."""

        difference = self._items.get(difference_id)
        if difference is None or not text or not text.strip():
            return None
        comment = Comment(
            id=uuid.uuid4().hex,
            text=text,
            timestamp=datetime.now().isoformat(timespec="seconds"),
        )
        difference.comments.append(comment)
        return comment

    def comments_by_difference(self) -> Dict[str, List[Comment]]:
        return {key: list(item.comments) for key, item in self._items.items() if item.comments}
