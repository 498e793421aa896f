"""
Unit Tests for HR Portal table records.

Tests alias handling, day counts and the wire representation.
"""

from datetime import date

import pytest


class TestInclusiveDayCount:
    """Tests for inclusive_day_count."""

    @pytest.mark.parametrize(
        "start, end, expected",
        [
            (date(2025, 1, 1), date(2025, 1, 1), 1),
            (date(2025, 1, 1), date(2025, 1, 3), 3),
            (date(2025, 2, 27), date(2025, 3, 2), 4),
        ],
    )
    def test_counts_both_ends(self, start, end, expected):
        from modules.hr_portal.models import inclusive_day_count

        assert inclusive_day_count(start, end) == expected


class TestLeaveRequestRecord:
    """Tests for LeaveRequestRecord."""

    def test_accepts_wire_columns(self):
        from modules.hr_portal.models import LeaveRequestRecord, LeaveStatus

        record = LeaveRequestRecord.model_validate({
            "id": 7,
            "employeeId": 3,
            "leaveType": "sick",
            "startDate": "2025-04-01",
            "endDate": "2025-04-02",
            "status": "approved",
        })

        assert record.employee_id == 3
        assert record.start_date == date(2025, 4, 1)
        assert record.status is LeaveStatus.APPROVED
        assert record.day_count == 2

    def test_accepts_snake_case(self):
        from modules.hr_portal.models import LeaveRequestRecord, LeaveStatus

        record = LeaveRequestRecord(
            employee_id=1,
            leave_type="vacation",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 1),
        )

        assert record.status is LeaveStatus.PENDING
        assert record.reason is None

    def test_employee_name_from_embed(self):
        from modules.hr_portal.models import LeaveRequestRecord

        record = LeaveRequestRecord.model_validate({
            "employeeId": 3,
            "leaveType": "vacation",
            "startDate": "2025-04-01",
            "endDate": "2025-04-01",
            "employees": {"firstName": "Jane", "lastName": "Doe"},
        })

        assert record.employee_name == "Jane Doe"

    def test_employee_name_empty_without_embed(self):
        from modules.hr_portal.models import LeaveRequestRecord

        record = LeaveRequestRecord.model_validate({
            "employeeId": 3,
            "leaveType": "vacation",
            "startDate": "2025-04-01",
            "endDate": "2025-04-01",
            "employees": None,
        })

        assert record.employee_name == ""

    def test_unknown_columns_ignored(self):
        from modules.hr_portal.models import LeaveRequestRecord

        record = LeaveRequestRecord.model_validate({
            "employeeId": 3,
            "leaveType": "vacation",
            "startDate": "2025-04-01",
            "endDate": "2025-04-01",
            "created_at": "2025-03-01T10:00:00Z",
        })

        assert "created_at" not in record.to_row()


class TestToRow:
    """Tests for the wire representation."""

    def test_balance_row_uses_camel_case(self):
        from modules.hr_portal.models import LeaveBalance

        balance = LeaveBalance(employee_id=4, leave_type="vacation", accrued_days=10, taken_days=3)

        assert balance.to_row() == {
            "employeeId": 4,
            "leaveType": "vacation",
            "accruedDays": 10,
            "takenDays": 3,
            "remainingDays": 0,
        }

    def test_employee_row_serialises_dates(self):
        from modules.hr_portal.models import EmployeeRecord

        employee = EmployeeRecord.model_validate({
            "id": 1,
            "user_id": "user-1",
            "firstName": "Jane",
            "hireDate": "2024-01-15",
        })

        row = employee.to_row()
        assert row["hireDate"] == "2024-01-15"
        assert row["firstName"] == "Jane"
        assert "lastName" not in row
        assert employee.full_name == "Jane"


class TestLeaveType:
    """Tests for LeaveType."""

    def test_values_and_labels(self):
        from modules.hr_portal.models import LeaveType

        assert [t.value for t in LeaveType] == ["vacation", "sick", "maternity", "paternity"]
        assert LeaveType.PATERNITY.label == "Paternity"
        assert str(LeaveType.SICK) == "sick"
