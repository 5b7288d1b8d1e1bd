"""Tests for the scenario runner."""

import pytest
from delivery import demo
from delivery.acceptance import FakeAcceptanceGate
from delivery.config import DEFAULT_COURIERS, DEFAULT_RESTAURANTS, DeliverySettings
from delivery.errors import DeliveryError, ErrorKind
from delivery.order.order import OrderStatus
from delivery.registry import OrderRegistry
from delivery.service import DeliveryService


@pytest.fixture()
def demo_service():
    return DeliveryService.from_settings(DeliverySettings(acceptance_gate="fake"))


class TestRunScenarios:
    def test_every_scenario_ends_as_expected(self, demo_service):
        results = demo.run_scenarios(demo_service)
        assert [r["scenario"] for r in results] == list(demo.SCENARIOS)
        assert all(r["ok"] for r in results), results

    def test_outcomes(self, demo_service):
        results = {r["scenario"]: r for r in demo.run_scenarios(demo_service)}
        assert results["normal_flow"]["status"] == "Delivered"
        assert results["restaurant_busy"]["status"] == "Pending"
        assert results["restaurant_busy"]["error"] == "Restaurant_Busy"
        assert results["invalid_parameters"]["error"] == "Invalid_Argument"
        assert results["invalid_transition"]["error"] == "Invalid_Order_Status"
        assert results["courier_unavailable"]["status"] == "Ready"
        assert results["cancellation"]["status"] == "Cancelled"
        assert results["order_not_found"]["error"] == "Order_Not_Found"

    def test_selected_scenarios_only(self, demo_service):
        results = demo.run_scenarios(demo_service, ["cancellation"])
        assert len(results) == 1
        assert len(demo_service.registry) == 1

    def test_normal_flow_frees_courier(self, demo_service):
        demo.normal_flow(demo_service)
        assert demo_service.is_courier_available("D001")

    def test_gate_rejection_is_reported(self, demo_service):
        demo_service.gate.configure(should_reject=True)
        result = demo.normal_flow(demo_service)
        assert not result["ok"]
        assert result["error"] == "Restaurant_Busy"
        assert result["status"] == "Pending"


class TestMain:
    @pytest.fixture(autouse=True)
    def _quiet(self, monkeypatch):
        monkeypatch.setattr(demo, "configure_logging", lambda env=None: None)
        monkeypatch.setenv("DELIVERY_ACCEPTANCE_GATE", "fake")

    def test_all_scenarios_pass(self):
        assert demo.main([]) == 0

    def test_single_scenario(self):
        assert demo.main(["--scenario", "order_not_found"]) == 0

    def test_certain_failure_breaks_happy_path(self, monkeypatch):
        monkeypatch.setenv("DELIVERY_ACCEPTANCE_GATE", "random")
        assert demo.main(["--scenario", "normal_flow", "--failure-rate", "1.0", "--seed", "1"]) == 1

    def test_unknown_scenario(self):
        with pytest.raises(SystemExit):
            demo.main(["--scenario", "does_not_exist"])


class _BusyForAWhile(FakeAcceptanceGate):
    """Rejects the first ``busy_attempts`` acceptances, then lets them through."""

    def __init__(self, busy_attempts):
        super().__init__()
        self.busy_attempts = busy_attempts

    def should_reject(self, order_id, restaurant_id):
        super().should_reject(order_id, restaurant_id)
        return len(self.attempts) <= self.busy_attempts


class TestAcceptWithRetry:
    def _service(self, gate):
        return DeliveryService(OrderRegistry(restaurants=DEFAULT_RESTAURANTS, couriers=DEFAULT_COURIERS), gate=gate)

    def test_busy_restaurant_is_tried_again(self):
        gate = _BusyForAWhile(busy_attempts=3)
        service = self._service(gate)
        order = service.create_order("C001", "R001", "Tea", 10.0, "1 St")

        accepted = demo.accept_with_retry(service, order.order_id, "R001")
        assert accepted.status == OrderStatus.ACCEPTED.value
        assert len(gate.attempts) == 4

    def test_gives_up_after_the_last_attempt(self):
        gate = _BusyForAWhile(busy_attempts=100)
        service = self._service(gate)
        order = service.create_order("C001", "R001", "Tea", 10.0, "1 St")

        with pytest.raises(DeliveryError) as exc:
            demo.accept_with_retry(service, order.order_id, "R001", attempts=3)
        assert exc.value.kind == ErrorKind.RESTAURANT_BUSY
        assert len(gate.attempts) == 3
        assert service.get_order(order.order_id).status == OrderStatus.PENDING.value

    def test_closed_restaurant_is_not_tried_again(self):
        gate = _BusyForAWhile(busy_attempts=0)
        service = self._service(gate)
        order = service.create_order("C002", "R002", "Noodles", 120.0, "2 St")

        with pytest.raises(DeliveryError) as exc:
            demo.accept_with_retry(service, order.order_id, "R002")
        assert exc.value.kind == ErrorKind.RESTAURANT_BUSY
        assert gate.attempts == []

    def test_other_errors_are_not_retried(self):
        gate = _BusyForAWhile(busy_attempts=0)
        service = self._service(gate)
        order = service.create_order("C001", "R001", "Tea", 10.0, "1 St")

        with pytest.raises(DeliveryError) as exc:
            demo.accept_with_retry(service, order.order_id, "R003")
        assert exc.value.kind == ErrorKind.INVALID_ARGUMENT
        assert gate.attempts == []


class TestDefaultRandomGate:
    @pytest.fixture(autouse=True)
    def _quiet(self, monkeypatch):
        monkeypatch.setattr(demo, "configure_logging", lambda env=None: None)
        monkeypatch.setenv("DELIVERY_ACCEPTANCE_GATE", "random")

    @pytest.mark.parametrize("seed", range(20))
    def test_scenarios_pass_despite_transient_failures(self, seed):
        assert demo.main(["--seed", str(seed)]) == 0
