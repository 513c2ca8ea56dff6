from datetime import date, datetime

import pytest

from app.studio.crud.imports import export_records, import_batch
from app.studio.crud.memberships import create_membership
from app.studio.crud.students import create_student
from app.studio.schemas.imports import RECORD_FIELDS


def new_member(**overrides):
    record = {
        "student_id": "s-001",
        "student_name": "Kim Minji",
        "student_phone": "010-1234-5678",
        "student_registration_date": "2024-01-10",
        "membership_pass_id": "monthly_3x",
        "membership_start_date": "2024-03-01",
        "membership_end_date": "2024-04-05",
        "membership_price": "150,000",
        "membership_payment_method": "card",
    }
    record.update(overrides)
    return record


def test_partial_success_reports_bad_rows(store):
    records = [
        new_member(),
        new_member(student_id="s-002", membership_pass_id="platinum"),
        {"student_id": "s-003", "student_name": "   "},
        {"student_name": "No Membership", "student_phone": ""},
    ]

    result = import_batch(store, records)

    assert result.inserted_count == 2
    assert result.updated_count == 0
    assert [(d.row, d.error) for d in result.diagnostics] == [
        (2, "UNKNOWN_PASS"),
        (3, "VALIDATION_ERROR"),
    ]
    assert len(store.students) == 2
    assert len(store.memberships) == 1


def test_imported_end_date_and_price_are_kept(store):
    import_batch(store, [new_member()])

    membership = store.memberships_for("s-001")[0]
    assert membership.end_date == date(2024, 4, 5)
    assert membership.price == 150000
    assert membership.payment_date == date(2024, 3, 1)
    assert store.students["s-001"].registration_date == datetime(2024, 1, 10)


def test_price_falls_back_to_catalog(store):
    import_batch(store, [new_member(membership_price="")])

    assert store.memberships_for("s-001")[0].price == 170000


def test_existing_student_fields_are_replaced(store):
    student = create_student(store, "Old Name", "010-1111-2222", remarks="old note")
    registered = student.registration_date

    result = import_batch(store, [{"student_id": student.id, "student_name": "New Name"}])

    assert result.updated_count == 1
    updated = store.students[student.id]
    assert updated.name == "New Name"
    assert updated.phone == ""
    assert updated.remarks == ""
    assert updated.registration_date == registered


def test_membership_fields_merge_into_latest(store):
    student = create_student(store, "Kim Minji")
    membership = create_membership(store, student.id, "monthly_3x", "2024-03-01")

    result = import_batch(
        store,
        [{"student_id": student.id, "student_name": "Kim Minji", "membership_end_date": "2024-05-01"}],
    )

    assert result.updated_count == 1
    assert list(store.memberships) == [membership.id]
    merged = store.memberships[membership.id]
    assert merged.end_date == date(2024, 5, 1)
    assert merged.price == 170000
    assert merged.start_date == date(2024, 3, 1)


def test_new_membership_requires_dates(store):
    result = import_batch(store, [new_member(membership_end_date="")])

    assert result.inserted_count == 0
    assert result.diagnostics[0].row == 1
    assert result.diagnostics[0].details == {"fields": ["membership_end_date"]}
    assert store.students == {}


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"membership_start_date": "03/01/2024"}, "INVALID_DATE"),
        ({"membership_price": "free"}, "VALIDATION_ERROR"),
        ({"membership_payment_method": "voucher"}, "VALIDATION_ERROR"),
        ({"membership_cash_receipt_issued": "maybe"}, "VALIDATION_ERROR"),
        ({"membership_end_date": "2024-02-01"}, "VALIDATION_ERROR"),
        ({"membership_hold_start_date": "2024-03-10"}, "VALIDATION_ERROR"),
        (
            {"membership_hold_start_date": "2024-03-16", "membership_hold_end_date": "2024-03-10"},
            "VALIDATION_ERROR",
        ),
    ],
)
def test_invalid_records_are_rejected(store, overrides, error):
    result = import_batch(store, [new_member(**overrides)])

    assert [d.error for d in result.diagnostics] == [error]
    assert store.students == {}
    assert store.memberships == {}


def test_membership_of_another_student_is_rejected(store):
    owner = create_student(store, "Owner")
    taken = create_membership(store, owner.id, "one_day", "2024-03-01")

    result = import_batch(store, [new_member(membership_id=taken.id)])

    assert result.diagnostics[0].error == "VALIDATION_ERROR"
    assert "s-001" not in store.students


def test_card_payment_clears_receipt(store):
    import_batch(store, [new_member(membership_cash_receipt_issued="yes")])
    assert store.memberships_for("s-001")[0].cash_receipt_issued is False


def test_export_emits_one_row_per_membership(store):
    with_two = create_student(store, "Alpha")
    create_membership(store, with_two.id, "one_day", "2024-03-01")
    create_membership(store, with_two.id, "one_week", "2024-03-10")
    without = create_student(store, "Beta")

    records = export_records(store)

    assert len(records) == 3
    assert all(list(record) == RECORD_FIELDS for record in records)
    assert [r["membership_pass_id"] for r in records[:2]] == ["one_day", "one_week"]
    assert records[2]["student_id"] == without.id
    assert records[2]["membership_id"] == ""
    assert records[0]["membership_end_date"] == "2024-03-01"
    assert records[0]["membership_cash_receipt_issued"] == "false"


def test_exported_records_import_as_updates(store):
    student = create_student(store, "Alpha", "010-1234-5678")
    create_membership(store, student.id, "monthly_3x", "2024-03-01")

    result = import_batch(store, export_records(store))

    assert result.updated_count == 1
    assert result.diagnostics == []
    assert len(store.memberships) == 1


def test_bad_record_in_the_middle_does_not_stop_the_batch(store):
    records = [new_member(student_id=f"s-00{n}") for n in range(1, 6)]
    records[2]["membership_pass_id"] = "platinum"

    result = import_batch(store, records)

    assert result.inserted_count == 4
    assert [(d.row, d.error) for d in result.diagnostics] == [(3, "UNKNOWN_PASS")]
    assert sorted(store.students) == ["s-001", "s-002", "s-004", "s-005"]
    assert len(store.memberships) == 4


@pytest.mark.parametrize("price", ["nan", "inf", "-inf", "1e400", float("nan"), float("inf"), "12,000원"])
def test_unusable_price_is_reported_for_its_row(store, price):
    records = [
        new_member(student_id="s-001"),
        new_member(student_id="s-002", membership_price=price),
        new_member(student_id="s-003"),
    ]

    result = import_batch(store, records)

    assert result.inserted_count == 2
    assert [(d.row, d.error) for d in result.diagnostics] == [(2, "VALIDATION_ERROR")]
    assert "s-002" not in store.students


def test_imported_phone_is_kept_as_given(store):
    result = import_batch(store, [new_member(student_phone=" 1234 ")])

    assert result.inserted_count == 1
    assert result.diagnostics == []
    assert store.students["s-001"].phone == "1234"


def test_existing_student_keeps_unusual_phone(store):
    student = create_student(store, "Kim Minji", "010-1234-5678")

    result = import_batch(
        store, [{"student_id": student.id, "student_name": "Kim Minji", "student_phone": "ext. 12"}]
    )

    assert result.updated_count == 1
    assert result.diagnostics == []
    assert store.students[student.id].phone == "ext. 12"
