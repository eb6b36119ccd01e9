from __future__ import annotations

from datetime import datetime, timedelta

from servicedesk.schemas import Ticket, TicketStatus

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


def build_demo_tickets(now: datetime) -> list[Ticket]:
    """Five sample tickets covering every status, timed relative to ``now``."""
    stamp = int(now.timestamp() * 1000)

    def ticket_id(n: int) -> str:
        return f"t-{stamp}-{n}"

    return [
        Ticket(
            id=ticket_id(1),
            name="Anh Minh",
            phone="0909123456",
            description="Máy lạnh không lạnh, chạy kêu to",
            address="Phòng 302, Tòa A",
            created_at=now - 2 * DAY,
            status=TicketStatus.COMPLETED,
            assigned_to="Quang",
            in_progress_at=now - 2 * DAY + HOUR,
            completed_at=now - 2 * DAY + 2 * HOUR,
            root_cause="Thiếu gas, lọc bẩn",
            actions_taken="Đổ gas R32, vệ sinh lọc, kiểm tra toàn bộ hệ thống",
            fee=450000,
        ),
        Ticket(
            id=ticket_id(2),
            name="Chị Hoa",
            phone="0912345678",
            description="Ống nước bị rò rỉ dưới bồn rửa",
            address="Nhà 15, Ngõ 123",
            created_at=now - DAY,
            status=TicketStatus.COMPLETED,
            assigned_to="Nhật",
            in_progress_at=now - DAY + HOUR / 2,
            completed_at=now - DAY + 3 * HOUR / 2,
            root_cause="Ống nối bị lỏng, ron cao su hư",
            actions_taken="Thay ron cao su mới, vặn chặt ống nối",
            fee=150000,
        ),
        Ticket(
            id=ticket_id(3),
            name="Anh Tuấn",
            phone="0923456789",
            description="Tivi không lên hình, có tiếng",
            address="Căn 506, Chung cư B",
            created_at=now - 6 * HOUR,
            status=TicketStatus.IN_PROGRESS,
            assigned_to="Hiếu",
            in_progress_at=now - 5 * HOUR,
        ),
        Ticket(
            id=ticket_id(4),
            name="Chị Lan",
            phone="0934567890",
            description="Máy giặt không vắt, chỉ giặt được",
            address="Số 8, Đường XYZ",
            created_at=now - 2 * HOUR,
        ),
        Ticket(
            id=ticket_id(5),
            name="Anh Dũng",
            phone="0945678901",
            description="Quạt trần quay chậm, rung lắc",
            address="Phòng 102",
            created_at=now - HOUR,
        ),
    ]


def needs_seeding(initialized: bool, ticket_count: int) -> bool:
    # an import may carry initialized=false alongside real tickets; never overwrite those
    return not initialized and ticket_count == 0
