"""
Shared fixtures for the record tagging tests
"""
import pytest

from record_tagging.domain.entities import AncillaryUser, ContactUser, Patient
from record_tagging.storage.collections import Collection
from record_tagging.storage.memory_store import InMemoryCatalogStore, InMemoryEntityStore
from record_tagging.tagging.registry import RuleRegistry
from record_tagging.tagging.service import TaggingService


def make_patient(patient_id: str = "p-1", **overrides) -> Patient:
    document = {
        "_id": patient_id,
        "createdBy": "intake@doctoralliance.com",
        "isBillable": True,
        "agencyInfo": {
            "patientWAVId": f"WAV-{patient_id}",
            "patientFName": "Maria",
            "patientLName": "Lopez",
            "dob": "1948-03-12",
            "patientStatus": "Active",
            "startOfCare": "2024-01-15",
            "careManagement": [{"careManagementType": "CCM"}],
            "episodeDiagnoses": [{"id": "d-1", "firstDiagnosis": "I10"}],
        },
    }
    document.update(overrides)
    return Patient.model_validate(document)


def make_contact(contact_id: str = "c-1", **overrides) -> ContactUser:
    document = {
        "_id": contact_id,
        "contactWavId": f"WAV-{contact_id}",
        "firstName": "James",
        "lastName": "Carter",
        "email": "james.carter@sunrisehh.com",
        "phoneNo": "(555) 201-4477",
        "state": "TX",
        "city": "Austin",
        "contactLifecycleStage": "Engaged",
        "contactOwner": "Jane.Doe@doctoralliance.com",
    }
    document.update(overrides)
    return ContactUser.model_validate(document)


def make_ancillary(ancillary_id: str = "a-1", **overrides) -> AncillaryUser:
    document = {
        "_id": ancillary_id,
        "entityWavId": f"WAV-{ancillary_id}",
        "name": "Sunrise Home Health",
        "entityType": "Agency",
        "entitySubtype": "Home Health Agency",
        "lifecycleStage": "Premium",
        "entityNpiNumber": "1234567893",
        "email": "info@sunrisehh.com",
        "phoneNo": "512-555-0199",
        "state": "TX",
        "city": "Austin",
        "zipcode": "73301",
    }
    document.update(overrides)
    return AncillaryUser.model_validate(document)


@pytest.fixture
def patient():
    """Patient with names, DOB, one care record and one diagnosis"""
    return make_patient()


@pytest.fixture
def contact():
    return make_contact()


@pytest.fixture
def ancillary():
    return make_ancillary()


@pytest.fixture
def placeholder_ancillary():
    """Home health agency whose only contact details are placeholders"""
    return AncillaryUser.model_validate({
        "_id": "a-placeholder",
        "name": "",
        "entitySubtype": "Home Health Agency",
        "email": "a@a.com",
        "phoneNo": "0000000000",
        "zipcode": "73301",
    })


@pytest.fixture
def service():
    return TaggingService(RuleRegistry.default(organization_domain="doctoralliance.com"))


@pytest.fixture
def entity_store():
    return InMemoryEntityStore()


@pytest.fixture
def catalog_store():
    return InMemoryCatalogStore()


@pytest.fixture
def populate(entity_store):
    """Insert entities into the in-memory store: ``await populate(Collection.PATIENTS, [...])``"""
    async def _populate(collection: Collection, entities):
        for entity in entities:
            await entity_store.insert(collection, entity)
        return entity_store
    return _populate
