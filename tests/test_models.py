# tests/test_models.py
from datetime import datetime, timedelta

import pytest

from models.tracker import ProjectMember, Ticket, TicketStatus

WHEN = datetime(2024, 6, 20, 12, 0)


class TestTicketStatus:
    """resolved_at follows the workflow status"""

    def test_resolving_stamps_resolved_at(self):
        ticket = Ticket(status=TicketStatus.OPEN)

        ticket.set_status(TicketStatus.RESOLVED, when=WHEN)

        assert ticket.status == TicketStatus.RESOLVED
        assert ticket.resolved_at == WHEN
        assert ticket.updated_at == WHEN

    def test_resolving_again_keeps_first_timestamp(self):
        ticket = Ticket(status=TicketStatus.OPEN)
        ticket.set_status(TicketStatus.RESOLVED, when=WHEN)

        ticket.set_status(TicketStatus.RESOLVED, when=WHEN + timedelta(days=1))

        assert ticket.resolved_at == WHEN

    def test_closing_keeps_resolved_at(self):
        ticket = Ticket(status=TicketStatus.OPEN)
        ticket.set_status(TicketStatus.RESOLVED, when=WHEN)

        ticket.set_status(TicketStatus.CLOSED, when=WHEN + timedelta(days=2))

        assert ticket.resolved_at == WHEN

    def test_reopening_clears_resolved_at(self):
        ticket = Ticket(status=TicketStatus.OPEN)
        ticket.set_status(TicketStatus.RESOLVED, when=WHEN)

        ticket.set_status(TicketStatus.IN_PROGRESS, when=WHEN + timedelta(days=1))

        assert ticket.resolved_at is None

    def test_closing_open_ticket_stamps_resolved_at(self):
        ticket = Ticket(status=TicketStatus.OPEN)

        ticket.set_status(TicketStatus.CLOSED, when=WHEN)

        assert ticket.status == TicketStatus.CLOSED
        assert ticket.resolved_at == WHEN

    @pytest.mark.parametrize("status", list(TicketStatus))
    def test_resolved_at_present_only_for_done_statuses(self, status):
        ticket = Ticket(status=TicketStatus.OPEN)

        ticket.set_status(status, when=WHEN)

        done = status in (TicketStatus.RESOLVED, TicketStatus.CLOSED)
        assert (ticket.resolved_at is not None) == done


def test_outsider_member_has_no_user():
    assert ProjectMember(name="Contractor", email="c@example.com").is_outsider
