import json
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stateflow.api.serializers import diagram_to_record, record_to_diagram
from stateflow.db.models import DiagramRecord
from stateflow.ir.diagram import Diagram
from stateflow.ir.errors import PersistenceError

logger = logging.getLogger(__name__)


class DiagramRepository:
    """
    Key-value store of diagrams keyed by id.

    The whole Diagram is kept as one JSON document; name and timestamps are
    duplicated into columns for listing.
    """

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[Diagram]:
        """Newest first."""
        try:
            rows = self.db.scalars(
                select(DiagramRecord).order_by(DiagramRecord.updated_at.desc())
            ).all()
        except SQLAlchemyError as e:
            logger.error("[DB] list failed: %s", e)
            raise PersistenceError("diagram store unavailable") from e
        return [self._to_diagram(row) for row in rows]

    def get(self, diagram_id: str) -> Optional[Diagram]:
        try:
            row = self.db.get(DiagramRecord, diagram_id)
        except SQLAlchemyError as e:
            logger.error("[DB] get %s failed: %s", diagram_id, e)
            raise PersistenceError("diagram store unavailable") from e
        return self._to_diagram(row) if row is not None else None

    def save(self, diagram: Diagram) -> None:
        """Insert or replace."""
        record = diagram_to_record(diagram)
        try:
            row = self.db.get(DiagramRecord, diagram.id)
            if row is None:
                row = DiagramRecord(id=diagram.id)
                self.db.add(row)
            row.name = diagram.name
            row.created_at = record["createdAt"]
            row.updated_at = record["updatedAt"]
            row.document = json.dumps(record, ensure_ascii=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("[DB] save %s failed: %s", diagram.id, e)
            raise PersistenceError(f"could not save diagram '{diagram.id}'") from e
        logger.debug("[DB] saved diagram %s", diagram.id)

    def delete(self, diagram_id: str) -> bool:
        try:
            row = self.db.get(DiagramRecord, diagram_id)
            if row is None:
                return False
            self.db.delete(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("[DB] delete %s failed: %s", diagram_id, e)
            raise PersistenceError(f"could not delete diagram '{diagram_id}'") from e
        return True

    @staticmethod
    def _to_diagram(row: DiagramRecord) -> Diagram:
        try:
            return record_to_diagram(json.loads(row.document))
        except ValueError as e:
            # JSONDecodeError and pydantic ValidationError
            logger.error("[DB] stored diagram %s is corrupted: %s", row.id, e)
            raise PersistenceError(f"stored diagram '{row.id}' is corrupted") from e
