"""
Taggable business entities: patients, contact users and ancillary providers.

The models mirror the stored documents (camelCase keys, ``_id`` primary key).
The tagging core only relies on the Taggable capability; the remaining fields
are read by individual rules.
"""
from datetime import datetime
from typing import ClassVar, List, Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .tag import Tag


@runtime_checkable
class Taggable(Protocol):
    """Capability shared by every entity that carries a tag collection"""

    @property
    def entity_id(self) -> Optional[str]: ...

    @property
    def tags(self) -> List[Tag]: ...

    def with_tags(self, tags: Sequence[Tag]) -> "Taggable": ...


class DocumentModel(BaseModel):
    """Base for nested stored documents"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TaggableEntity(DocumentModel):
    """Base model implementing the Taggable capability"""

    kind: ClassVar[str] = "entity"

    id: str = Field(alias="_id")
    tags: List[Tag] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # ObjectId keys from the driver
        return value if isinstance(value, str) else str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _default_tags(cls, value):
        return [] if value is None else value

    @property
    def entity_id(self) -> Optional[str]:
        return self.id

    def with_tags(self, tags: Sequence[Tag]):
        """Return a copy carrying ``tags``; the receiver is left untouched"""
        return self.model_copy(update={"tags": list(tags)})

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="python")


class CareManagement(DocumentModel):
    care_management_type: Optional[str] = Field(default=None, alias="careManagementType")


class EpisodeDiagnosis(DocumentModel):
    id: Optional[str] = None
    start_of_care: Optional[str] = Field(default=None, alias="startOfCare")
    first_diagnosis: Optional[str] = Field(default=None, alias="firstDiagnosis")
    second_diagnosis: Optional[str] = Field(default=None, alias="secondDiagnosis")


class AgencyInfo(DocumentModel):
    filter_status: Optional[str] = Field(default=None, alias="filterStatus")
    patient_wav_id: Optional[str] = Field(default=None, alias="patientWAVId")
    patient_ehr_rec_id: Optional[str] = Field(default=None, alias="patientEHRRecId")
    patient_first_name: Optional[str] = Field(default=None, alias="patientFName")
    patient_middle_name: Optional[str] = Field(default=None, alias="patientMName")
    patient_last_name: Optional[str] = Field(default=None, alias="patientLName")
    dob: Optional[str] = None
    age: Optional[str] = None
    patient_sex: Optional[str] = Field(default=None, alias="patientSex")
    patient_status: Optional[str] = Field(default=None, alias="patientStatus")
    start_of_care: Optional[str] = Field(default=None, alias="startOfCare")
    care_management: Optional[List[CareManagement]] = Field(default=None, alias="careManagement")
    episode_diagnoses: Optional[List[EpisodeDiagnosis]] = Field(default=None, alias="episodeDiagnoses")


class AssociatedEntity(DocumentModel):
    id: str
    entity_type: str = Field(alias="entityType")
    name: str
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    entity_subtype: Optional[str] = Field(default=None, alias="entitySubtype")
    lifecycle_stage: Optional[str] = Field(default=None, alias="lifecycleStage")
    npi_number: Optional[str] = Field(default=None, alias="npiNumber")


class Patient(TaggableEntity):
    kind: ClassVar[str] = "patient"

    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    created_by: Optional[str] = Field(default=None, alias="createdBy")
    is_billable: Optional[bool] = Field(default=None, alias="isBillable")
    is_pg_billable: Optional[bool] = Field(default=None, alias="isPgBillable")
    is_eligible: Optional[bool] = Field(default=None, alias="isEligible")
    is_pg_eligible: Optional[bool] = Field(default=None, alias="isPgEligible")
    agency_info: AgencyInfo = Field(default_factory=AgencyInfo, alias="agencyInfo")


class ContactUser(TaggableEntity):
    kind: ClassVar[str] = "contact"

    contact_wav_id: str = Field(default="", alias="contactWavId")
    associated_entities: List[AssociatedEntity] = Field(default_factory=list, alias="associatedEntities")
    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    persona_type: Optional[str] = Field(default=None, alias="personaType")
    contact_lifecycle_stage: Optional[str] = Field(default=None, alias="contactLifecycleStage")
    state: Optional[str] = None
    city: Optional[str] = None
    email: str = ""
    phone_no: Optional[str] = Field(default=None, alias="phoneNo")
    contact_owner: Optional[str] = Field(default=None, alias="contactOwner")
    is_active: bool = Field(default=True, alias="isActive")


class AncillaryUser(TaggableEntity):
    kind: ClassVar[str] = "ancillary"

    entity_wav_id: str = Field(default="", alias="entityWavId")
    name: str = ""
    entity_type: str = Field(default="", alias="entityType")
    entity_subtype: Optional[str] = Field(default=None, alias="entitySubtype")
    lifecycle_stage: Optional[str] = Field(default=None, alias="lifecycleStage")
    entity_npi_number: Optional[str] = Field(default=None, alias="entityNpiNumber")
    clinical_services: Optional[str] = Field(default=None, alias="clinicalServices")
    services: Optional[str] = None
    services_array: Optional[List[str]] = Field(default=None, alias="servicesArray")
    address_type: Optional[str] = Field(default=None, alias="addressType")
    state: Optional[str] = None
    city: Optional[str] = None
    zipcode: Optional[str] = None
    lat: Optional[str] = None
    lon: Optional[str] = None
    email: Optional[str] = None
    phone_no: Optional[str] = Field(default=None, alias="phoneNo")
    associated_entities: List[AssociatedEntity] = Field(default_factory=list, alias="associatedEntities")
