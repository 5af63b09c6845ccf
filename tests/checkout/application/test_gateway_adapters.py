"""Tests for the gateway factory, FakeGateway and the Paystack adapter."""

import json

import httpx
import pytest
from checkout.errors import GatewayRejected, GatewayUnavailable
from checkout.gateway import get_gateway, reset_gateway, set_gateway
from checkout.gateway.fake_adapter import FakeGateway
from checkout.gateway.paystack_adapter import PaystackGateway
from checkout.gateway.port import InitializeResult, VerifyResult
from checkout.settings import CheckoutSettings, set_settings

REFERENCE = "mmart-1718000000000-9f86d081884c7d65"


def _paystack(handler, **kwargs):
    return PaystackGateway(
        secret_key="sk_test_123",
        retry_delay=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestGatewayFactory:
    def test_defaults_to_fake_gateway(self):
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)

    def test_paystack_selected_by_settings(self):
        reset_gateway()
        set_settings(CheckoutSettings(gateway="paystack", paystack_secret_key="sk_test_123"))
        assert isinstance(get_gateway(), PaystackGateway)

    def test_set_gateway_overrides(self):
        custom = FakeGateway(checkout_url="https://other.test")
        set_gateway(custom)
        assert get_gateway() is custom


class TestFakeGateway:
    def test_initialize_returns_session(self):
        gateway = FakeGateway()
        result = gateway.initialize("ada@example.com", 10_150, REFERENCE, "http://localhost/verify")

        assert isinstance(result, InitializeResult)
        assert result.reference == REFERENCE
        assert result.redirect_url.endswith(result.access_code)

    def test_verify_reports_initialized_amount(self):
        gateway = FakeGateway()
        gateway.initialize("ada@example.com", 10_150, REFERENCE, "http://localhost/verify")

        result = gateway.verify(REFERENCE)
        assert isinstance(result, VerifyResult)
        assert result.succeeded
        assert result.amount_minor_units == 10_150

    def test_verify_unknown_reference_is_rejected(self):
        with pytest.raises(GatewayRejected):
            FakeGateway().verify(REFERENCE)

    def test_invalid_failure_mode(self):
        with pytest.raises(ValueError):
            FakeGateway().configure(initialize_failure="sometimes")


class TestPaystackInitialize:
    def test_posts_amount_in_minor_units(self):
        captured = {}

        def handler(request):
            captured["request"] = request
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Authorization URL created",
                    "data": {
                        "authorization_url": "https://checkout.paystack.com/ac_abc",
                        "access_code": "ac_abc",
                        "reference": REFERENCE,
                    },
                },
            )

        result = _paystack(handler).initialize("ada@example.com", 10_150, REFERENCE, "http://localhost/verify")

        request = captured["request"]
        body = json.loads(request.content)
        assert request.method == "POST"
        assert request.url.path == "/transaction/initialize"
        assert request.headers["Authorization"] == "Bearer sk_test_123"
        assert body == {
            "email": "ada@example.com",
            "amount": 10_150,
            "reference": REFERENCE,
            "callback_url": "http://localhost/verify",
            "currency": "NGN",
        }
        assert result.redirect_url == "https://checkout.paystack.com/ac_abc"
        assert result.access_code == "ac_abc"

    def test_server_error_is_unavailable(self):
        gateway = _paystack(lambda request: httpx.Response(502, json={"message": "Bad gateway"}))
        with pytest.raises(GatewayUnavailable):
            gateway.initialize("ada@example.com", 100, REFERENCE, "http://localhost/verify")

    def test_rate_limit_is_unavailable(self):
        gateway = _paystack(lambda request: httpx.Response(429, json={"message": "Slow down"}))
        with pytest.raises(GatewayUnavailable):
            gateway.initialize("ada@example.com", 100, REFERENCE, "http://localhost/verify")

    def test_client_error_is_rejected(self):
        gateway = _paystack(lambda request: httpx.Response(400, json={"status": False, "message": "Invalid key"}))
        with pytest.raises(GatewayRejected) as exc:
            gateway.initialize("ada@example.com", 100, REFERENCE, "http://localhost/verify")
        assert "Invalid key" in exc.value.message

    def test_unsuccessful_body_is_rejected(self):
        gateway = _paystack(lambda request: httpx.Response(200, json={"status": False, "message": "Duplicate"}))
        with pytest.raises(GatewayRejected):
            gateway.initialize("ada@example.com", 100, REFERENCE, "http://localhost/verify")

    @pytest.mark.parametrize("payload", [["unexpected"], "unexpected", None, 42])
    def test_non_object_body_is_rejected(self, payload):
        gateway = _paystack(lambda request: httpx.Response(200, json=payload))
        with pytest.raises(GatewayRejected):
            gateway.initialize("ada@example.com", 100, REFERENCE, "http://localhost/verify")

    def test_non_object_error_body_keeps_status_classification(self):
        gateway = _paystack(lambda request: httpx.Response(503, json=["maintenance"]))
        with pytest.raises(GatewayUnavailable):
            gateway.initialize("ada@example.com", 100, REFERENCE, "http://localhost/verify")

    def test_timeout_is_unavailable_and_not_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(GatewayUnavailable):
            _paystack(handler).initialize("ada@example.com", 100, REFERENCE, "http://localhost/verify")
        assert len(attempts) == 1


class TestPaystackVerify:
    def test_reads_status_amount_and_message(self):
        def handler(request):
            assert request.method == "GET"
            assert request.url.path == f"/transaction/verify/{REFERENCE}"
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "message": "Verification successful",
                    "data": {
                        "status": "success",
                        "reference": REFERENCE,
                        "amount": 10_150,
                        "gateway_response": "Successful",
                    },
                },
            )

        result = _paystack(handler).verify(REFERENCE)

        assert result.provider_status == "success"
        assert result.succeeded
        assert result.amount_minor_units == 10_150
        assert result.gateway_message == "Successful"

    def test_transient_failures_are_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(
                200,
                json={"status": True, "data": {"status": "abandoned", "amount": 100, "gateway_response": "Abandoned"}},
            )

        result = _paystack(handler, verify_max_attempts=3).verify(REFERENCE)

        assert len(attempts) == 3
        assert result.failed

    def test_gives_up_after_max_attempts(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(503, json={"message": "Maintenance"})

        with pytest.raises(GatewayUnavailable):
            _paystack(handler, verify_max_attempts=2).verify(REFERENCE)
        assert len(attempts) == 2

    def test_not_found_is_rejected_without_retry(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(404, json={"status": False, "message": "Transaction reference not found"})

        with pytest.raises(GatewayRejected):
            _paystack(handler).verify(REFERENCE)
        assert len(attempts) == 1

    @pytest.mark.parametrize("amount", ["ten thousand", {"value": 100}, [100]])
    def test_unreadable_amount_is_rejected(self, amount):
        gateway = _paystack(
            lambda request: httpx.Response(
                200, json={"status": True, "data": {"status": "success", "amount": amount}}
            )
        )
        with pytest.raises(GatewayRejected):
            gateway.verify(REFERENCE)

    def test_numeric_string_amount_is_accepted(self):
        gateway = _paystack(
            lambda request: httpx.Response(
                200, json={"status": True, "data": {"status": "success", "amount": "10150"}}
            )
        )
        assert gateway.verify(REFERENCE).amount_minor_units == 10_150

    def test_non_object_body_is_rejected(self):
        gateway = _paystack(lambda request: httpx.Response(200, json=None))
        with pytest.raises(GatewayRejected):
            gateway.verify(REFERENCE)

    def test_secret_key_is_required(self):
        with pytest.raises(ValueError):
            PaystackGateway(secret_key="")
