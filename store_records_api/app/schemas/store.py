"""
Pydantic models for stores and their dependent record sets.

The remote tables are schema-less from this service's point of view:
a record is a mapping of column name to value and columns may be
added remotely at any time.  Each table therefore gets a model that
declares only the key columns this layer depends on and accepts any
other column as an extra field (``extra="allow"``), which is passed
through unchanged.

Key columns are fixed by the remote schema: every child table uses
``ID`` as its primary key and ``StoreID`` as the foreign key to the
``Stores`` table, whose own primary key is ``StoreID``.  Rows read
back from the store must carry their keys (``StoreRecord``,
``ChildRecord``); rows submitted by the form may omit them
(``StoreUpdate``, ``ChildRow``) since the save stamps them.
"""

from typing import Any, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field

KeyValue = Union[str, int]
Scalar = Union[str, int, float, bool]

STORE_TABLE = "Stores"
STORE_KEY = "StoreID"
STORE_NAME_COLUMN = "StoreName"
CHILD_KEY = "ID"

# Fixed processing order of the child tables.  The write path deletes
# and inserts in this order, and read failures are reported in it.
CHILD_TABLES: Tuple[str, ...] = (
    "OutsourcingCosts",
    "RecruitmentMedia",
    "OvertimeSubjects",
    "OrganizationCharts",
)

# Remote column name -> name used by the store list in the form.
STORE_LIST_COLUMNS: Dict[str, str] = {
    "StoreName": "storeName",
    "CompanyName": "companyName",
    "TeamName": "teamName",
    "Interviewer": "interviewer",
}


def lower_camel(name: str) -> str:
    """``OutsourcingCosts`` -> ``outsourcingCosts``."""
    return name[:1].lower() + name[1:]


class TableRecord(BaseModel):
    """Base for all table records; unknown columns are kept as extras."""

    model_config = ConfigDict(extra="allow")

    def to_row(self) -> Dict[str, Any]:
        """Return the record as a plain row, keeping only the columns that were set."""
        row = self.model_dump(exclude_unset=True)
        row.update(self.model_extra or {})
        return row


class StoreRecord(TableRecord):
    """Row of ``Stores`` as read back from the tabular store."""

    StoreID: KeyValue
    StoreName: Optional[Scalar] = None


class ChildRecord(TableRecord):
    """Child row as read back from the tabular store; both keys are required."""

    ID: KeyValue
    StoreID: KeyValue


class StoreUpdate(TableRecord):
    """Parent columns submitted by the form.

    The key is optional here because the save stamps the resolved
    ``StoreID`` over whatever was submitted.
    """

    StoreID: Optional[KeyValue] = None
    StoreName: Optional[Scalar] = None


class ChildRow(TableRecord):
    """Child row submitted by the form; keys are optional and stamped on save."""

    ID: Optional[KeyValue] = None
    StoreID: Optional[KeyValue] = None


class OutsourcingCost(ChildRecord):
    """Row of ``OutsourcingCosts``."""


class RecruitmentMedium(ChildRecord):
    """Row of ``RecruitmentMedia``."""


class OvertimeSubject(ChildRecord):
    """Row of ``OvertimeSubjects``."""


class OrganizationChart(ChildRecord):
    """Row of ``OrganizationCharts``."""


CHILD_MODELS: Dict[str, Type[ChildRecord]] = {
    "OutsourcingCosts": OutsourcingCost,
    "RecruitmentMedia": RecruitmentMedium,
    "OvertimeSubjects": OvertimeSubject,
    "OrganizationCharts": OrganizationChart,
}


class StoreSummary(BaseModel):
    """One entry of the store list shown by the form."""

    storeName: str = ""
    companyName: str = ""
    teamName: str = ""
    interviewer: str = ""


class AggregateDocument(BaseModel):
    """A store record together with its four child record sets.

    Serialised with the form's key names (``store``,
    ``outsourcingCosts``...).  Every child key is always present, empty
    when the store has no rows in that table.
    """

    model_config = ConfigDict(populate_by_name=True)

    store: StoreRecord
    outsourcing_costs: List[OutsourcingCost] = Field(default_factory=list, alias="outsourcingCosts")
    recruitment_media: List[RecruitmentMedium] = Field(default_factory=list, alias="recruitmentMedia")
    overtime_subjects: List[OvertimeSubject] = Field(default_factory=list, alias="overtimeSubjects")
    organization_charts: List[OrganizationChart] = Field(default_factory=list, alias="organizationCharts")

    def children(self, table: str) -> List[ChildRecord]:
        return getattr(self, _CHILD_FIELDS[table])


class StoreDataSave(BaseModel):
    """Edited document submitted by the form.

    ``store`` holds the parent columns to update and may be omitted.  A
    child key that is omitted counts as an empty set: after the save the
    store has no rows in that table.
    """

    model_config = ConfigDict(populate_by_name=True)

    store_name: str = Field("", alias="storeName")
    store: Optional[StoreUpdate] = None
    outsourcing_costs: List[ChildRow] = Field(default_factory=list, alias="outsourcingCosts")
    recruitment_media: List[ChildRow] = Field(default_factory=list, alias="recruitmentMedia")
    overtime_subjects: List[ChildRow] = Field(default_factory=list, alias="overtimeSubjects")
    organization_charts: List[ChildRow] = Field(default_factory=list, alias="organizationCharts")

    def children(self, table: str) -> List[ChildRow]:
        return getattr(self, _CHILD_FIELDS[table])


class SaveResult(BaseModel):
    """Response of a save: ``{"success": true}`` or ``{"success": false, "error": ...}``."""

    success: bool
    error: Optional[str] = None


_CHILD_FIELDS: Dict[str, str] = {
    "OutsourcingCosts": "outsourcing_costs",
    "RecruitmentMedia": "recruitment_media",
    "OvertimeSubjects": "overtime_subjects",
    "OrganizationCharts": "organization_charts",
}
