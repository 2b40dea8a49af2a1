import pytest

from medledger.imaging import (
    ImagingError,
    ImagingErrorCode,
    ImagingRadiology,
)
from medledger.ledger import AuthorizationError, Ledger

PROVIDER = "provider-1"
PATIENT = "patient-1"
CENTER = "center-1"
RADIOLOGIST = "radiologist-1"
PEER = "radiologist-2"


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def imaging(ledger):
    return ImagingRadiology(ledger)


def _order(imaging, study_type="CT", body_part="Chest", contrast=False,
           indication="Test", priority="ROUTINE", provider=PROVIDER, patient=PATIENT):
    return imaging.order_imaging_study(
        provider, patient, study_type, body_part, contrast, indication, priority
    )


def _hash(byte):
    return bytes([byte]) * 32


def test_order_imaging_study(imaging):
    order_id = _order(imaging, "CT", "Chest", True, "Rule out pulmonary embolism", "URGENT")
    assert order_id == 1
    order = imaging.get_imaging_order(order_id)
    assert order.provider_id == PROVIDER
    assert order.patient_id == PATIENT
    assert order.study_type == "CT"
    assert order.contrast_required is True
    assert order.status == "ORDERED"


def test_multiple_imaging_orders(imaging):
    first = _order(imaging, "CT", "Abdomen", True, "Abdominal pain")
    second = _order(imaging, "XRAY", "Chest", False, "Cough")
    assert (first, second) == (1, 2)
    assert len(imaging.get_patient_orders(PATIENT)) == 2


def test_schedule_imaging(imaging, ledger):
    order_id = _order(imaging, "MRI", "Brain", True, "Headaches")
    scheduled_time = ledger.timestamp + 86400
    imaging.schedule_imaging(order_id, CENTER, scheduled_time, _hash(1))

    schedule = imaging.get_imaging_schedule(order_id)
    assert schedule.imaging_center == CENTER
    assert schedule.scheduled_time == scheduled_time
    assert imaging.get_imaging_order(order_id).status == "SCHEDULED"


def test_schedule_imaging_already_scheduled(imaging):
    order_id = _order(imaging, "XRAY", "Knee", False, "Pain")
    imaging.schedule_imaging(order_id, CENTER, 3600, _hash(1))
    with pytest.raises(ImagingError) as info:
        imaging.schedule_imaging(order_id, CENTER, 3600, _hash(1))
    assert info.value.code == ImagingErrorCode.ALREADY_SCHEDULED
    assert int(info.value.code) == 4


def test_schedule_unknown_order(imaging):
    with pytest.raises(ImagingError) as info:
        imaging.schedule_imaging(99, CENTER, 0, _hash(1))
    assert info.value.code == ImagingErrorCode.ORDER_NOT_FOUND


def test_upload_images(imaging, ledger):
    order_id = _order(imaging, "CT", "Chest", True, "Trauma", "STAT")
    imaging.schedule_imaging(order_id, CENTER, ledger.timestamp + 1800, _hash(1))
    imaging.upload_images(order_id, CENTER, _hash(42), 150, ledger.timestamp)

    images = imaging.get_dicom_images(order_id)
    assert images.dicom_hash == _hash(42)
    assert images.image_count == 150
    assert imaging.get_imaging_order(order_id).status == "IN_PROGRESS"


def test_upload_images_already_uploaded(imaging):
    order_id = _order(imaging, "XRAY", "Hand", False, "Fracture", "URGENT")
    imaging.upload_images(order_id, CENTER, _hash(10), 5, 0)
    with pytest.raises(ImagingError) as info:
        imaging.upload_images(order_id, CENTER, _hash(10), 5, 0)
    assert int(info.value.code) == 5


def test_submit_preliminary_report(imaging):
    order_id = _order(imaging, "CT", "Head", True, "Stroke workup", "STAT")
    imaging.upload_images(order_id, CENTER, _hash(20), 200, 0)
    imaging.submit_preliminary_report(order_id, RADIOLOGIST, _hash(30), True)

    report = imaging.get_preliminary_report(order_id)
    assert report.radiologist_id == RADIOLOGIST
    assert report.urgent_findings is True


def test_submit_preliminary_report_without_images(imaging):
    order_id = _order(imaging, "MRI", "Spine", False, "Back pain")
    with pytest.raises(ImagingError) as info:
        imaging.submit_preliminary_report(order_id, RADIOLOGIST, _hash(40), False)
    assert int(info.value.code) == 3
    assert imaging.get_preliminary_report(order_id) is None


def test_submit_preliminary_report_twice(imaging):
    order_id = _order(imaging)
    imaging.upload_images(order_id, CENTER, _hash(1), 1, 0)
    imaging.submit_preliminary_report(order_id, RADIOLOGIST, _hash(2), False)
    with pytest.raises(ImagingError) as info:
        imaging.submit_preliminary_report(order_id, RADIOLOGIST, _hash(2), False)
    assert info.value.code == ImagingErrorCode.PRELIMINARY_REPORT_EXISTS


def test_submit_final_report(imaging):
    order_id = _order(imaging, "MAMMO", "Bilateral", False, "Screening")
    imaging.upload_images(order_id, CENTER, _hash(50), 4, 0)
    impression = "No evidence of malignancy. BI-RADS 1."
    imaging.submit_final_report(order_id, RADIOLOGIST, _hash(60), impression)

    report = imaging.get_final_report(order_id)
    assert report.radiologist_id == RADIOLOGIST
    assert report.impression == impression
    assert imaging.get_imaging_order(order_id).status == "COMPLETED"


def test_submit_final_report_already_exists(imaging):
    order_id = _order(imaging, "ULTRASOUND", "Abdomen", False, "RUQ pain", "URGENT")
    imaging.upload_images(order_id, CENTER, _hash(70), 50, 0)
    imaging.submit_final_report(order_id, RADIOLOGIST, _hash(80), "Normal study")
    with pytest.raises(ImagingError) as info:
        imaging.submit_final_report(order_id, RADIOLOGIST, _hash(80), "Normal study")
    assert int(info.value.code) == 7


def test_submit_final_report_without_images(imaging):
    order_id = _order(imaging)
    with pytest.raises(ImagingError) as info:
        imaging.submit_final_report(order_id, RADIOLOGIST, _hash(1), "Normal")
    assert info.value.code == ImagingErrorCode.INVALID_STATUS
    assert imaging.get_imaging_order(order_id).status == "ORDERED"


def test_request_peer_review(imaging):
    order_id = _order(imaging, "PET", "Whole body", False, "Cancer staging")
    imaging.request_peer_review(order_id, RADIOLOGIST, PEER)
    review = imaging.get_peer_review(order_id)
    assert review.requesting_radiologist == RADIOLOGIST
    assert review.peer_radiologist == PEER
    assert review.status == "PENDING"


def test_request_peer_review_already_exists(imaging):
    order_id = _order(imaging, "CT", "Chest", True, "Complex case")
    imaging.request_peer_review(order_id, RADIOLOGIST, PEER)
    with pytest.raises(ImagingError) as info:
        imaging.request_peer_review(order_id, RADIOLOGIST, PEER)
    assert int(info.value.code) == 8


def test_get_patient_orders(imaging):
    first = _order(imaging, "XRAY", "Chest", False, "Cough")
    second = _order(imaging, "CT", "Abdomen", True, "Pain", "URGENT")
    assert imaging.get_patient_orders(PATIENT) == [first, second]


def test_get_provider_orders(imaging):
    first = _order(imaging, "MRI", "Brain", True, "Headache", patient="patient-a")
    second = _order(imaging, "XRAY", "Knee", False, "Injury", "URGENT", patient="patient-b")
    assert imaging.get_provider_orders(PROVIDER) == [first, second]


def test_unknown_lookups_are_empty(imaging):
    assert imaging.get_imaging_order(5) is None
    assert imaging.get_patient_orders("nobody") == []
    assert imaging.get_provider_orders("nobody") == []


def test_complete_imaging_workflow(imaging, ledger):
    order_id = _order(imaging, "CT", "Chest/Abdomen/Pelvis", True, "Cancer staging", "URGENT")
    assert imaging.get_imaging_order(order_id).status == "ORDERED"

    imaging.schedule_imaging(order_id, CENTER, ledger.timestamp + 7200, _hash(1))
    assert imaging.get_imaging_order(order_id).status == "SCHEDULED"

    imaging.upload_images(order_id, CENTER, _hash(2), 500, ledger.timestamp)
    assert imaging.get_imaging_order(order_id).status == "IN_PROGRESS"

    imaging.submit_preliminary_report(order_id, RADIOLOGIST, _hash(3), True)
    assert imaging.get_preliminary_report(order_id).urgent_findings is True

    imaging.request_peer_review(order_id, RADIOLOGIST, PEER)
    assert imaging.get_peer_review(order_id).status == "PENDING"

    imaging.submit_final_report(
        order_id, RADIOLOGIST, _hash(4),
        "Multiple pulmonary nodules. Recommend follow-up CT in 3 months.",
    )
    assert imaging.get_imaging_order(order_id).status == "COMPLETED"
    assert imaging.get_final_report(order_id).radiologist_id == RADIOLOGIST


@pytest.mark.parametrize("modality", ["XRAY", "CT", "MRI", "ULTRASOUND", "PET", "MAMMO"])
def test_multi_modality_support(imaging, modality):
    order_id = _order(imaging, modality, "Test body part", False, "Test indication")
    assert imaging.get_imaging_order(order_id).study_type == modality


@pytest.mark.parametrize("priority", ["STAT", "URGENT", "ROUTINE"])
def test_priority_levels(imaging, priority):
    order_id = _order(imaging, "XRAY", "Chest", False, "Test", priority)
    assert imaging.get_imaging_order(order_id).priority == priority


def test_urgent_findings_notification(imaging):
    order_id = _order(imaging, "CT", "Head", True, "Acute stroke", "STAT")
    imaging.upload_images(order_id, CENTER, _hash(100), 150, 0)
    imaging.submit_preliminary_report(order_id, RADIOLOGIST, _hash(101), True)
    assert imaging.get_preliminary_report(order_id).urgent_findings is True
    assert imaging.get_imaging_order(order_id).priority == "STAT"


def test_timestamps_come_from_ledger(ledger):
    ledger.advance(1000)
    imaging = ImagingRadiology(ledger)
    order_id = _order(imaging)
    ledger.advance(500)
    imaging.upload_images(order_id, CENTER, _hash(1), 1, 0)
    assert imaging.get_imaging_order(order_id).ordered_at == 1000
    assert imaging.get_dicom_images(order_id).uploaded_at == 1500


def test_order_requires_provider_authorization():
    ledger = Ledger(authorizer=lambda address: address != PROVIDER)
    imaging = ImagingRadiology(ledger)
    with pytest.raises(AuthorizationError):
        _order(imaging)
    assert imaging.get_provider_orders(PROVIDER) == []


def test_error_message_names_code():
    error = ImagingError(ImagingErrorCode.FINAL_REPORT_EXISTS)
    assert "FinalReportExists" in str(error)
    assert "#7" in str(error)