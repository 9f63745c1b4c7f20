import csv
import io
from datetime import date, datetime, timedelta

import pytest

from models import Picking, WorkType
from services import reports
from services.pickings import available_work_types

T0 = datetime(2024, 3, 5, 8, 0, 0)


def make_picking(id, worker_id=1, work_type="picking", start=T0, hours=None, subtask=None, quantity=None):
    end = start + timedelta(hours=hours) if hours is not None else None
    return Picking(
        id=id,
        worker_id=worker_id,
        work_type=work_type,
        start_timestamp=start,
        end_timestamp=end,
        subtask=subtask,
        subtask_quantity=quantity
    )


def test_closed_picking_counts_its_duration():
    picking = make_picking(1, hours=2.25)
    assert reports.picking_hours(picking) == pytest.approx(2.25)


def test_open_picking_counts_zero():
    assert reports.picking_hours(make_picking(1)) == 0.0


def test_hours_per_worker():
    pickings = [
        make_picking(1, worker_id=1, hours=1.5),
        make_picking(2, worker_id=1, hours=0.5),
        make_picking(3, worker_id=2, hours=3),
        make_picking(4, worker_id=3),
    ]
    totals = reports.hours_per_worker(pickings)
    assert totals == {1: pytest.approx(2.0), 2: pytest.approx(3.0), 3: 0.0}


def test_work_type_table_is_seeded_with_every_type():
    rows = [
        (make_picking(1, work_type="packing", hours=1), "Alice"),
        (make_picking(2, work_type="packing", hours=2), "Alice"),
        (make_picking(3, work_type="checking", hours=0.5), "Bob"),
    ]
    table = reports.hours_per_worker_and_work_type(rows)
    assert set(table) == {"Alice", "Bob"}
    for per_type in table.values():
        assert set(per_type) == {work_type.value for work_type in WorkType}
    assert table["Alice"]["packing"] == pytest.approx(3.0)
    assert table["Alice"]["picking"] == 0.0
    assert table["Bob"]["checking"] == pytest.approx(0.5)


def test_subtask_summary_skips_records_without_subtask():
    pickings = [
        make_picking(1, hours=1, subtask="label A", quantity=10),
        make_picking(2, hours=2, subtask="label A", quantity=5),
        make_picking(3, hours=1, subtask="bottle B", quantity=None),
        make_picking(4, hours=4),
    ]
    summary = reports.subtask_summary(pickings)
    assert summary == {
        "label A": {"quantity": 15, "hours": pytest.approx(3.0)},
        "bottle B": {"quantity": 0, "hours": pytest.approx(1.0)},
    }


def test_csv_has_header_plus_one_line_per_row():
    rows = [
        (make_picking(3, work_type="labelling", hours=1.239, subtask="label A", quantity=4), "Alice"),
        (make_picking(2, work_type="packing", hours=0.5), "Bob"),
        (make_picking(1, work_type="picking"), "Alice"),
    ]
    lines = reports.pickings_to_csv(rows).splitlines()
    assert len(lines) == len(rows) + 1
    parsed = list(csv.reader(io.StringIO("\n".join(lines))))
    assert parsed[0] == reports.CSV_HEADER
    assert parsed[1] == ["Alice", "labelling", "1.24", "label A", "4"]
    assert parsed[2] == ["Bob", "packing", "0.5", "", ""]
    assert parsed[3] == ["Alice", "picking", "0.0", "", ""]


def test_work_type_csv_has_a_column_per_work_type():
    table = {"Alice": dict(reports.empty_work_type_table(), packing=1.5)}
    lines = reports.work_type_table_to_csv(table).splitlines()
    assert lines[0].split(",")[0] == "worker"
    assert len(lines[0].split(",")) == len(WorkType) + 1
    assert lines[1].startswith("Alice,0.0,1.5")


@pytest.mark.parametrize("open_packing, available", [(0, True), (4, True), (5, False), (7, False)])
def test_packing_available_iff_below_capacity(open_packing, available):
    active = [make_picking(i, work_type="packing") for i in range(open_packing)]
    assert (WorkType.PACKING in available_work_types(active)) is available
    assert WorkType.PICKING in available_work_types(active)


def test_reconcile_uses_picking_hours_only():
    row = reports.DatasetRow(soft_one_id="1001", day=date(2024, 3, 5), orders=10, order_lines=50, units=100)
    day_pickings = [
        make_picking(1, work_type="picking", hours=2),
        make_picking(2, work_type="packing", hours=3),
    ]
    result = reports.reconcile_row(row, 1, day_pickings)
    assert result.time_spent == pytest.approx(2.0)
    assert result.order_lines_per_hour == pytest.approx(25.0)
    assert result.units_per_order_line == pytest.approx(0.5)


def test_reconcile_zero_denominators_give_none():
    row = reports.DatasetRow(soft_one_id="1001", day=date(2024, 3, 5), orders=1, order_lines=5, units=0)
    result = reports.reconcile_row(row, 1, [make_picking(1, work_type="packing", hours=1)])
    assert result.time_spent == 0
    assert result.order_lines_per_hour is None
    assert result.units_per_order_line is None
