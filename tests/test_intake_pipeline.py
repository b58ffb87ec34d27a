"""End-to-end intake ordering and failure isolation, with fake external collaborators."""

import re

import pytest

from app.core.errors import DuplicateEmailError, DuplicateKeyError, UploadError, ValidationError
from app.models.registration import Registration
from app.services.intake_service import IntakePipeline
from app.services.registration_store import RegistrationStore
from tests.helpers import FakeImageStore, FakeMirror, jpeg_screenshot, valid_form


class CountingStore(RegistrationStore):
    def __init__(self, db, skip_precheck=False):
        super().__init__(db)
        self.skip_precheck = skip_precheck
        self.lookups = 0
        self.inserts = 0

    def find_by_email(self, email):
        self.lookups += 1
        if self.skip_precheck:
            return None
        return super().find_by_email(email)

    def insert(self, registration):
        self.inserts += 1
        return super().insert(registration)


def _ids(*pairs):
    it = iter(pairs)
    return lambda: next(it)


@pytest.fixture
def store(db_session):
    return CountingStore(db_session)


@pytest.fixture
def pipeline(store):
    return IntakePipeline(store, FakeImageStore(), FakeMirror())


def _count(db_session, email="jane@x.com"):
    return db_session.query(Registration).filter(Registration.email == email).count()


def test_successful_registration_persists_normalized_record(pipeline, db_session):
    form = valid_form(
        fullName="  Jane Doe ", email="Jane@X.com", gender="Female", college=" ABC ",
        ieeeMembershipId="IGNORED-123",
    )
    result = pipeline.register(form, jpeg_screenshot())

    assert re.match(r"^THM-[0-9a-f]{8}$", result.short_ticket_id)
    assert result.short_ticket_id == "THM-" + result.ticket_id[:8]
    assert result.email == "jane@x.com"

    saved = db_session.query(Registration).filter_by(ticket_id=result.ticket_id).one()
    assert saved.full_name == "Jane Doe"
    assert saved.gender == "female"
    assert saved.college == "ABC"
    assert saved.ieee_membership_id is None
    assert saved.status == "pending"
    assert saved.agree_to_terms is True
    assert saved.transaction_screenshot_url == "https://i.ibb.co/fake/1.jpg"
    assert saved.transaction_screenshot_delete_url == "https://ibb.co/fake/1/delete"

    assert pipeline.image_store.uploads[0][1].startswith(f"transaction_{result.short_ticket_id}_")
    assert pipeline.mirror.mirrored == [result.short_ticket_id]


def test_member_keeps_trimmed_membership_id(pipeline, db_session):
    form = valid_form(ieeeStatus="member", ticketType="ieee", ieeeMembershipId="  98765432 ")
    result = pipeline.register(form, jpeg_screenshot())
    saved = db_session.query(Registration).filter_by(ticket_id=result.ticket_id).one()
    assert saved.ieee_membership_id == "98765432"


def test_invalid_form_has_no_side_effects(pipeline, store):
    with pytest.raises(ValidationError) as exc:
        pipeline.register(valid_form(phone="+915876543210"), jpeg_screenshot())

    assert exc.value.errors == ["Phone number must be in format: +91XXXXXXXXXX"]
    assert store.lookups == 0
    assert store.inserts == 0
    assert pipeline.image_store.uploads == []
    assert pipeline.mirror.mirrored == []


def test_missing_screenshot_is_a_validation_error(pipeline):
    with pytest.raises(ValidationError) as exc:
        pipeline.register(valid_form(), None)
    assert exc.value.errors == ["Transaction screenshot is required"]
    assert pipeline.image_store.uploads == []


def test_second_submission_with_same_email_is_rejected_before_upload(pipeline, store, db_session):
    pipeline.register(valid_form(), jpeg_screenshot())

    with pytest.raises(DuplicateEmailError):
        pipeline.register(valid_form(email="JANE@x.com"), jpeg_screenshot())

    assert len(pipeline.image_store.uploads) == 1
    assert store.inserts == 1
    assert _count(db_session) == 1


def test_unique_index_catches_duplicate_the_precheck_missed(db_session):
    store = CountingStore(db_session, skip_precheck=True)
    pipeline = IntakePipeline(store, FakeImageStore(), FakeMirror())
    pipeline.register(valid_form(), jpeg_screenshot())

    with pytest.raises(DuplicateKeyError) as exc:
        pipeline.register(valid_form(), jpeg_screenshot())

    assert exc.value.field == "email"
    assert store.inserts == 2  # email collisions are never retried
    assert _count(db_session) == 1
    assert len(pipeline.mirror.mirrored) == 1


def test_upload_failure_persists_nothing(pipeline, store, db_session):
    pipeline.image_store.fail_with = "Failed to upload image to ImgBB: ImgBB 400: Invalid API v1 key."

    with pytest.raises(UploadError) as exc:
        pipeline.register(valid_form(), jpeg_screenshot())

    assert exc.value.status_code == 500
    assert store.inserts == 0
    assert _count(db_session) == 0
    assert pipeline.mirror.mirrored == []


def test_short_id_collision_regenerates_ids(store, db_session):
    first = ("aaaaaaaa-0000-4000-8000-000000000001", "THM-aaaaaaaa")
    clash = ("aaaaaaaa-0000-4000-8000-000000000002", "THM-aaaaaaaa")
    fresh = ("bbbbbbbb-0000-4000-8000-000000000003", "THM-bbbbbbbb")
    pipeline = IntakePipeline(store, FakeImageStore(), FakeMirror(), id_factory=_ids(first, clash, fresh))

    pipeline.register(valid_form(email="a@x.com"), jpeg_screenshot())
    result = pipeline.register(valid_form(email="b@x.com"), jpeg_screenshot())

    assert (result.ticket_id, result.short_ticket_id) == fresh
    assert store.inserts == 3
    # the image is uploaded once per submission, even when ids are regenerated
    assert len(pipeline.image_store.uploads) == 2


def test_id_collisions_give_up_after_max_attempts(store, db_session):
    taken = ("cccccccc-0000-4000-8000-000000000001", "THM-cccccccc")
    pipeline = IntakePipeline(
        store, FakeImageStore(), FakeMirror(), id_factory=lambda: taken, max_id_attempts=3
    )
    pipeline.register(valid_form(email="a@x.com"), jpeg_screenshot())

    with pytest.raises(DuplicateKeyError) as exc:
        pipeline.register(valid_form(email="b@x.com"), jpeg_screenshot())

    assert exc.value.field in ("ticket_id", "short_ticket_id")
    assert store.inserts == 4
    assert _count(db_session, "b@x.com") == 0


def test_mirror_failure_does_not_fail_registration(store, db_session):
    from app.services.sheet_mirror import SheetMirror

    def exploding_dispatch(row):
        raise RuntimeError("broker unavailable")

    pipeline = IntakePipeline(store, FakeImageStore(), SheetMirror(dispatch=exploding_dispatch))
    result = pipeline.register(valid_form(), jpeg_screenshot())
    assert result.email == "jane@x.com"
    assert _count(db_session) == 1


def test_lookup_by_either_id(pipeline):
    result = pipeline.register(valid_form(), jpeg_screenshot())
    by_full = pipeline.lookup(result.ticket_id)
    by_short = pipeline.lookup(result.short_ticket_id)
    assert by_full.id == by_short.id
    assert pipeline.lookup("THM-00000000") is None
