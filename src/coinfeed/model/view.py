"""
View state model.

Search, segment and sort settings chosen by the user. Derived, never
persisted; together with the current snapshot it fully determines the
displayed coin sequence.
"""

from pydantic import BaseModel, ConfigDict

from src.coinfeed.enums import Segment, SortDirection, SortField


class ViewState(BaseModel):
    """Filter and ordering applied to the coin list."""

    model_config = ConfigDict(frozen=True)

    search_text: str = ""
    segment: Segment = Segment.ALL
    sort_field: SortField = SortField.MARKET_CAP
    sort_direction: SortDirection = SortDirection.DESCENDING

    @property
    def is_default_ordering(self) -> bool:
        """Market cap descending with no search and no segment filter."""
        return (
            self.sort_field is SortField.MARKET_CAP
            and self.sort_direction is SortDirection.DESCENDING
            and not self.search_text.strip()
            and self.segment is Segment.ALL
        )

    def with_search_text(self, text: str) -> "ViewState":
        return self.model_copy(update={"search_text": text})

    def with_segment(self, segment: Segment) -> "ViewState":
        return self.model_copy(update={"segment": segment})

    def toggled(self, field: SortField) -> "ViewState":
        """
        Select a sort column.

        Selecting the active column reverses its direction; selecting a new
        column starts from that column's natural direction.
        """
        if field is self.sort_field:
            direction = self.sort_direction.reversed()
        else:
            direction = field.natural_direction
        return self.model_copy(
            update={"sort_field": field, "sort_direction": direction}
        )
