import unittest
from typing import Protocol
from unittest.mock import MagicMock

from bindkit import BasicChildContainer, BasicContainer, Dependency, resolve_as_map, resolve_in_order, variant_of


class Contains:  # noqa: PLW1641
    def __init__(self, substring):
        self.substring = substring

    def __repr__(self):
        return f"Contains({self.substring!r})"

    def __eq__(self, other):
        return isinstance(other, str) and self.substring in other


class PaymentClient(Protocol):
    def charge(self, order_id: str, amount_cents: int) -> None: ...


class InfoLogger(Protocol):
    def info(self, msg: object, *args: object) -> None: ...


class NullLogger:
    def info(self, msg: object, *args: object) -> None:
        pass


class StripeSdk:
    def pay(self, amount_usd: float, reference: str) -> bool:
        return True


class StripeAdapter:
    def __init__(self, sdk: StripeSdk, logger: InfoLogger, usd_per_cent: float = 0.01) -> None:
        self._logger = logger
        self._sdk = sdk
        self._usd_per_cent = usd_per_cent

    def charge(self, order_id: str, amount_cents: int) -> None:
        self._logger.info("adapting to stripe sdk api")
        amount_usd = amount_cents * self._usd_per_cent
        ok = self._sdk.pay(amount_usd, reference=order_id)
        if not ok:
            msg = "Stripe payment failed"
            raise RuntimeError(msg)


class RecordingPaymentClient:
    def __init__(self) -> None:
        self.charges: list[tuple[str, int]] = []

    def charge(self, order_id: str, amount_cents: int) -> None:
        self.charges.append((order_id, amount_cents))


class CheckoutService:
    def __init__(self, payments: PaymentClient, logger: InfoLogger) -> None:
        self._payments = payments
        self._logger = logger

    def checkout(self, order_id: str, amount_cents: int) -> None:
        self._logger.info("checkout %s", order_id)
        self._payments.charge(order_id, amount_cents)


def payments_plugin(container):
    container.bind_to("stripe_sdk", lambda _: StripeSdk(), "singleton")
    container.bind(
        "payments",
        lambda deps, ctx, meta: StripeAdapter(deps["stripe_sdk"], deps["logger"], meta["usd_per_cent"]),
        resolve_dependencies=resolve_as_map(["stripe_sdk", "logger"]),
        meta={"usd_per_cent": 0.0125},
    )


@variant_of(payments_plugin, "mock")
def payments_plugin_mock(container):
    container.bind("payments", lambda *_: RecordingPaymentClient())


def logging_plugin(container):
    container.bind("logger", lambda *_: NullLogger())


def checkout_plugin(container):
    container.bind(
        "checkout",
        lambda deps, ctx, meta: CheckoutService(*deps),
        resolve_dependencies=resolve_in_order(["payments", Dependency("logger")]),
        scope="transient",
    )


def setup_global_container(container: BasicContainer | None = None) -> BasicContainer:
    container = container if container is not None else BasicContainer()
    return container.use(logging_plugin, payments_plugin)


def setup_checkout_container(parent: BasicContainer) -> BasicChildContainer:
    return BasicChildContainer(parent).use(checkout_plugin)


class TestWiringAdapterThroughPlugins(unittest.TestCase):
    cont: BasicContainer

    def setUp(self):
        self.stripe_sdk = StripeSdk()
        self.stripe_sdk.pay = MagicMock(wraps=self.stripe_sdk.pay)
        self.logger = NullLogger()
        self.logger.info = MagicMock(wraps=self.logger.info)

        self.cont = setup_global_container()
        self.cont.bind_to("stripe_sdk", lambda _: self.stripe_sdk)
        self.cont.bind_to("logger", lambda _: self.logger)

    def test_adapter_calls_adaptee(self):
        client: PaymentClient = self.cont.get("payments")
        client.charge("order-123", 5000)

        assert self.stripe_sdk.pay.call_count == 1
        assert self.stripe_sdk.pay.call_args[0][0] == 0.0125 * 5000
        assert self.stripe_sdk.pay.call_args[1]["reference"] == "order-123"

        assert self.logger.info.call_args[0][0] == Contains("stripe sdk")

    def test_child_container_builds_service_from_parent_dependencies(self):
        checkout_container = setup_checkout_container(self.cont)

        checkout_container.get("checkout").checkout("order-9", 100)

        assert self.stripe_sdk.pay.call_count == 1
        assert self.logger.info.call_args_list[0][0] == ("checkout %s", "order-9")
        assert not self.cont.has("checkout")


class TestWiringWithMocks(unittest.TestCase):
    cont: BasicContainer

    def setUp(self):
        self.cont = setup_global_container(BasicContainer().use_mocks())

    def test_mock_variant_replaces_real_payments(self):
        payments = self.cont.get("payments")
        assert isinstance(payments, RecordingPaymentClient)

    def test_checkout_uses_mocked_payments_from_parent(self):
        checkout_container = setup_checkout_container(self.cont)

        checkout_container.get("checkout").checkout("order-1", 250)
        checkout_container.get("checkout").checkout("order-2", 500)

        assert self.cont.get("payments").charges == [("order-1", 250), ("order-2", 500)]
        assert checkout_container.get("checkout") is not checkout_container.get("checkout")
