"""Result models returned to the upload and query callers"""
from datetime import datetime
from decimal import Decimal
from typing import Dict, Optional
from pydantic import BaseModel, computed_field

class IngestionSummary(BaseModel):
    """
    Outcome of one ingestion pass.

    Attributes:
        valid_count: Rows that passed validation and were sent to storage
        invalid_count: Rows rejected by validation
        failed_count: Valid rows whose upsert failed
        stored_count: Valid rows whose upsert succeeded
    """
    valid_count: int = 0
    invalid_count: int = 0
    failed_count: int = 0
    stored_count: int = 0

    @computed_field
    @property
    def message(self) -> str:
        return (
            f"File uploaded. Valid trades processed: {self.valid_count}. "
            f"Invalid rows skipped: {self.invalid_count}."
        )

class BalanceResponse(BaseModel):
    """Net base-coin positions built from every trade strictly before the cutoff"""
    cutoff: datetime
    balances: Dict[str, Decimal] = {}
    message: Optional[str] = None
