"""Tests for the shared probe data types."""

import dataclasses

import pytest

from probe_protocols import (
    ActionState,
    Credential,
    DatabaseRef,
    HealthResult,
    HealthState,
    SecretRef,
)


@pytest.fixture
def db() -> DatabaseRef:
    return DatabaseRef(
        name="es",
        namespace="demo",
        governing_service="es-pods",
        port=9200,
        scheme="https",
        auth_secret=SecretRef("demo", "es-auth"),
    )


class TestDatabaseRef:
    """Tests for address derivation from the naming convention."""

    def test_pod_host(self, db):
        """Pod hosts follow {pod}.{service}.{namespace}.svc."""
        assert db.pod_host("es-0") == "es-0.es-pods.demo.svc"

    def test_pod_host_custom_suffix(self, db):
        assert db.pod_host("es-1", "svc.cluster.local") == "es-1.es-pods.demo.svc.cluster.local"

    def test_service_host(self, db):
        assert db.service_host() == "es-pods.demo.svc"

    def test_url_for(self, db):
        """URLs combine scheme, host and port."""
        assert db.url_for(db.pod_host("es-0")) == "https://es-0.es-pods.demo.svc:9200"

    def test_replica_pods(self, db):
        assert db.replica_pods(3) == ["es-0", "es-1", "es-2"]

    def test_replica_pods_zero(self, db):
        assert db.replica_pods(0) == []

    def test_is_frozen(self, db):
        """A build input cannot be mutated."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            db.port = 9300


class TestSecretRef:
    def test_str_is_namespaced(self):
        assert str(SecretRef("demo", "es-auth")) == "demo/es-auth"

    def test_hashable(self):
        """SecretRefs are used as dict keys by secret stores."""
        assert {SecretRef("a", "b"): 1}[SecretRef("a", "b")] == 1


class TestCredential:
    def test_password_not_in_repr(self):
        """Passwords must never leak through repr()."""
        credential = Credential(username="elastic", password="s3cret")
        assert "s3cret" not in repr(credential)
        assert "elastic" in repr(credential)


class TestHealthResult:
    def test_ready_without_reasons_is_healthy(self):
        assert HealthResult(state=HealthState.READY).healthy

    def test_degraded_is_not_healthy(self):
        result = HealthResult(state=HealthState.DEGRADED, reasons={"x": "red,down"})
        assert not result.healthy

    def test_unreachable_constructor(self):
        result = HealthResult.unreachable("connection refused")
        assert result.state == HealthState.UNREACHABLE
        assert result.reasons == {"connection": "connection refused"}

    def test_reasons_not_shared(self):
        """Each result gets its own reasons dict."""
        a = HealthResult(state=HealthState.READY)
        b = HealthResult(state=HealthState.READY)
        a.reasons["x"] = "y"
        assert b.reasons == {}


class TestActionState:
    @pytest.mark.parametrize("state", [ActionState.COMPLETED, ActionState.FAILED])
    def test_terminal_states_are_finished(self, state):
        assert state.finished

    @pytest.mark.parametrize(
        "state",
        [ActionState.SUBMITTED, ActionState.RUNNING, ActionState.NOT_FOUND],
    )
    def test_other_states_are_not_finished(self, state):
        assert not state.finished

    def test_parses_solr_tokens(self):
        assert ActionState("notfound") == ActionState.NOT_FOUND
