"""Tests for delivery listing and detail lookups."""

import pytest

from deliverywatch.access import NotFound, Unauthorized
from deliverywatch.query import get_delivery, list_deliveries


class TestListDeliveries:
    """Test the listing view query."""

    def test_scoped_and_paged(self, temp_db_session, two_teams, delivery_factory):
        """Test the listing shows only visible deliveries, a page at a time."""
        for i in range(30):
            delivery_factory(two_teams['app1'], minutes=i)
        delivery_factory(two_teams['app2'])

        page = list_deliveries(temp_db_session, two_teams['team_admin_actor'], page=2)

        assert page.total == 30
        assert len(page.items) == 5
        assert page.offset == 25

    def test_search_overrides_status(self, temp_db_session, two_teams, delivery_factory):
        """Test the search box ignores the status filter."""
        delivery = delivery_factory(two_teams['app1'], to="find-me@example.com", status="bounced")
        delivery_factory(two_teams['app1'], to="other@example.com", status="sent")

        page = list_deliveries(
            temp_db_session,
            two_teams['team_admin_actor'],
            search="find-me@example.com",
            status="sent",
        )

        assert [d.id for d in page.items] == [delivery.id]

    def test_requires_actor(self, temp_db_session):
        """Test anonymous listing is rejected."""
        with pytest.raises(Unauthorized):
            list_deliveries(temp_db_session, None)


class TestGetDelivery:
    """Test the detail view lookup."""

    def test_found_with_log_lines(self, temp_db_session, two_teams, delivery_factory, log_line_factory):
        """Test a visible delivery is returned with its log lines in order."""
        delivery = delivery_factory(two_teams['app1'])
        later = log_line_factory(delivery, dsn="2.0.0", minutes=5)
        earlier = log_line_factory(delivery, dsn="4.2.0", minutes=1)
        temp_db_session.expire_all()

        found = get_delivery(temp_db_session, two_teams['app_admin_actor'], delivery.id)

        assert found.id == delivery.id
        assert [line.id for line in found.postfix_log_lines] == [earlier.id, later.id]
        assert found.address.text == "recipient@example.com"

    def test_out_of_scope_looks_missing(self, temp_db_session, two_teams, delivery_factory):
        """Test another app's delivery is indistinguishable from a missing one."""
        hidden = delivery_factory(two_teams['app2'])

        with pytest.raises(NotFound) as hidden_error:
            get_delivery(temp_db_session, two_teams['app_admin_actor'], hidden.id)
        with pytest.raises(NotFound) as missing_error:
            get_delivery(temp_db_session, two_teams['app_admin_actor'], 99999)

        assert hidden_error.value.to_dict() == missing_error.value.to_dict()

    def test_site_admin_sees_any(self, temp_db_session, two_teams, delivery_factory):
        """Test site admins can open any delivery."""
        delivery = delivery_factory(two_teams['app2'])

        assert get_delivery(temp_db_session, two_teams['site_admin_actor'], delivery.id).id == delivery.id


class TestLogLines:
    """Test postfix log line classification on the detail view."""

    @pytest.mark.parametrize("dsn, hard", [("5.1.1", True), ("4.2.0", False), ("2.0.0", False), (None, False)])
    def test_is_hard_bounce(self, two_teams, delivery_factory, log_line_factory, dsn, hard):
        """Test only permanent 5.x.x failures count as hard bounces."""
        line = log_line_factory(delivery_factory(two_teams['app1']), dsn=dsn)

        assert line.is_hard_bounce is hard
