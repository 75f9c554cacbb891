from pydantic import ValidationError

from ..domain import GerritEvent, ParseError
from ..recovery import EventParser, RawRecord


class GerritJsonEventParser(EventParser):
    """Parses Gerrit stream-events JSON, as text or as an already decoded mapping."""

    def parse(self, record: RawRecord) -> GerritEvent:
        try:
            if isinstance(record, str):
                return GerritEvent.model_validate_json(record)
            return GerritEvent.model_validate(record)
        except ValidationError as e:
            raise ParseError(f"Invalid Gerrit event: {e}") from e
