"""Tests for idempotent database creation."""

import pytest

from tenantdb_api.workflow.exceptions import DatabaseProvisioningError
from tenantdb_api.workflow.exceptions import ItemTimeoutError
from tenantdb_api.workflow.orchestrator.deadline import Deadline


class TestEnsureExists:
    """Tests for DatabaseProvisioner.ensure_exists."""

    def test_creates_missing_database(self, provisioner, fake_sql_client, server_connection, recorded_sleeps):
        created = provisioner.ensure_exists(server_connection, "Acme")

        assert created is True
        assert "Acme" in fake_sql_client.databases
        assert fake_sql_client.create_count == 1
        assert recorded_sleeps.calls == [2.0]

    def test_second_call_is_a_no_op(self, provisioner, fake_sql_client, server_connection, recorded_sleeps):
        provisioner.ensure_exists(server_connection, "Acme")
        created = provisioner.ensure_exists(server_connection, "Acme")

        assert created is False
        assert fake_sql_client.create_count == 1
        creates = [sql for _, sql in fake_sql_client.statements if sql.startswith("CREATE DATABASE")]
        assert creates == ["CREATE DATABASE [Acme]"]
        assert recorded_sleeps.calls == [2.0]

    def test_connects_to_admin_catalog(self, provisioner, fake_sql_client, server_connection):
        provisioner.ensure_exists(server_connection.with_database("SomethingElse"), "Acme")

        assert {db for db, _ in fake_sql_client.statements} == {"master"}

    def test_existence_check_is_parameterized(self, provisioner, fake_sql_client, server_connection):
        provisioner.ensure_exists(server_connection, "Acme")

        lookup = fake_sql_client.statements[0][1]
        assert lookup == "SELECT DB_ID(?)"

    def test_connection_closed(self, provisioner, fake_sql_client, server_connection):
        provisioner.ensure_exists(server_connection, "Acme")

        assert fake_sql_client.connections
        assert fake_sql_client.all_closed

    @pytest.mark.parametrize("name", ["", "Acme]; DROP DATABASE master; --", "has space", "x" * 129])
    def test_rejects_unsanitized_names(self, provisioner, fake_sql_client, server_connection, name):
        with pytest.raises(DatabaseProvisioningError):
            provisioner.ensure_exists(server_connection, name)

        assert fake_sql_client.statements == []

    def test_connection_failure_wrapped(self, provisioner, fake_sql_client, server_connection):
        fake_sql_client.fail_connect = True

        with pytest.raises(DatabaseProvisioningError) as exc_info:
            provisioner.ensure_exists(server_connection, "Acme")

        assert "Acme" in str(exc_info.value)
        assert "Login timeout expired" in str(exc_info.value)

    def test_no_settle_delay_when_disabled(self, fake_sql_client, server_connection, recorded_sleeps):
        from tenantdb_api.workflow.orchestrator.database_provisioner import DatabaseProvisioner

        provisioner = DatabaseProvisioner(fake_sql_client, settle_seconds=0, sleep=recorded_sleeps)
        provisioner.ensure_exists(server_connection, "Acme")

        assert recorded_sleeps.calls == []

    def test_expired_deadline_touches_nothing(self, provisioner, fake_sql_client, server_connection, manual_clock):
        deadline = Deadline(5, clock=manual_clock)
        manual_clock.advance(5)

        with pytest.raises(ItemTimeoutError):
            provisioner.ensure_exists(server_connection, "Acme", deadline=deadline)

        assert fake_sql_client.connections == []
        assert "Acme" not in fake_sql_client.databases

    def test_deadline_bounds_queries_and_settle_delay(
        self, provisioner, fake_sql_client, server_connection, recorded_sleeps, manual_clock
    ):
        deadline = Deadline(5, clock=manual_clock)
        manual_clock.advance(3.5)

        provisioner.ensure_exists(server_connection, "Acme", deadline=deadline)

        assert fake_sql_client.query_timeouts == [2]
        assert recorded_sleeps.calls == [1.5]
