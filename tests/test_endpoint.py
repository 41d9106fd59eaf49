"""Tests for the Endpoint model and its record / payload / JSON forms."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from config.constants import HTTPMethods
from exceptions.validation import EndpointValidationError
from monitoring.endpoint import Endpoint


class TestEndpointCreate:
    """Field validation in Endpoint.create()."""

    def test_valid_endpoint(self, make_endpoint) -> None:
        endpoint = make_endpoint("my-api", method="HEAD", status_online=204)
        assert endpoint.identifier == "my-api"
        assert endpoint.method is HTTPMethods.HEAD
        assert endpoint.status_online == 204
        assert endpoint.frequency == timedelta(seconds=60)

    @pytest.mark.parametrize("status", [100, 200, 999])
    def test_status_within_range(self, make_endpoint, status: int) -> None:
        assert make_endpoint(status_online=status).status_online == status

    @pytest.mark.parametrize("status", [50, 99, 1000])
    def test_status_out_of_range(self, make_endpoint, status: int) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            make_endpoint(status_online=status)
        assert exc_info.value.field == "status_online"

    @pytest.mark.parametrize("identifier", ["A-bad", "-bad", "x", "1abc", "my_api", "My-api", "api\n"])
    def test_bad_identifier(self, make_endpoint, identifier: str) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            make_endpoint(identifier, url="http://example.test/")
        assert exc_info.value.field == "identifier"

    def test_relative_url_rejected(self, make_endpoint) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            make_endpoint(url="/health")
        assert exc_info.value.field == "url"

    def test_method_must_be_get_or_head(self, make_endpoint) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            make_endpoint(method="POST")
        assert exc_info.value.field == "method"
        assert "POST" in exc_info.value.reason

    @pytest.mark.parametrize("frequency", ["abc", "0s", "-1s", 12])
    def test_bad_frequency(self, make_endpoint, frequency) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            make_endpoint(frequency=frequency)
        assert exc_info.value.field == "frequency"

    @pytest.mark.parametrize("frequency", ["500ns", "1500ns"])
    def test_sub_microsecond_frequency(self, make_endpoint, frequency: str) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            make_endpoint(frequency=frequency)
        assert exc_info.value.field == "frequency"
        assert "microsecond" in exc_info.value.reason

    def test_microsecond_frequency_is_kept(self, make_endpoint) -> None:
        endpoint = make_endpoint(frequency="1500µs")
        assert endpoint.frequency == timedelta(microseconds=1500)
        assert endpoint.to_payload()["frequency"] == "1.5ms"

    @pytest.mark.parametrize("fail_after", [0, True, 2.5])
    def test_fail_after_must_be_positive_integer(self, make_endpoint, fail_after) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            make_endpoint(fail_after=fail_after)
        assert exc_info.value.field == "fail_after"

    def test_first_invalid_field_is_reported(self) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            Endpoint.create("X", "/relative", "PUT", 5, "never", 0)
        assert exc_info.value.field == "identifier"
        assert str(exc_info.value).startswith("identifier: ")

    def test_endpoint_is_immutable(self, make_endpoint) -> None:
        endpoint = make_endpoint()
        with pytest.raises(ValidationError):
            endpoint.status_online = 500  # type: ignore[misc]


class TestEndpointDefault:
    def test_defaults(self) -> None:
        endpoint = Endpoint.default("frickelbude", "https://code.frickelbude.ch/api/v1/version")
        assert endpoint.method is HTTPMethods.GET
        assert endpoint.status_online == 200
        assert endpoint.frequency == timedelta(minutes=5)
        assert endpoint.fail_after == 3

    def test_default_still_validates(self) -> None:
        with pytest.raises(EndpointValidationError):
            Endpoint.default("Bad", "https://example.test/")


class TestEndpointForms:
    """Conversion between record, payload and JSON forms."""

    def test_to_record(self) -> None:
        endpoint = Endpoint.default("api", "https://example.test/health")
        assert endpoint.to_record() == [
            "api", "https://example.test/health", "GET", "200", "5m0s", "3",
        ]
        assert str(endpoint) == "api https://example.test/health GET 200 5m0s 3"

    def test_to_payload(self, make_endpoint) -> None:
        payload = make_endpoint(frequency="1.5s").to_payload()
        assert payload == {
            "identifier": "api",
            "url": "http://api.test/health",
            "method": "GET",
            "status_online": 200,
            "frequency": "1.5s",
            "fail_after": 3,
        }

    def test_record_round_trip(self, make_endpoint) -> None:
        endpoint = make_endpoint(method="HEAD", frequency="2h45m", fail_after=7)
        assert Endpoint.from_record(endpoint.to_record()) == endpoint

    def test_json_round_trip(self, make_endpoint) -> None:
        endpoint = make_endpoint(frequency="300ms")
        assert Endpoint.from_json(endpoint.to_json()) == endpoint
        assert Endpoint.from_payload(endpoint.to_payload()) == endpoint

    def test_from_payload_ignores_unknown_keys(self, make_endpoint) -> None:
        payload = make_endpoint().to_payload()
        payload["comment"] = "ignored"
        assert Endpoint.from_payload(payload).identifier == "api"

    def test_from_payload_missing_field(self) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            Endpoint.from_payload({"identifier": "api", "url": "http://api.test/"})
        assert exc_info.value.field == "method"
        assert exc_info.value.reason == "field is required"

    def test_from_record_too_short(self) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            Endpoint.from_record(["api", "http://api.test/", "GET"])
        assert exc_info.value.field == "record"

    @pytest.mark.parametrize("raw", ["{not json", "[]", json.dumps("api")])
    def test_from_json_rejects_non_objects(self, raw: str) -> None:
        with pytest.raises(EndpointValidationError) as exc_info:
            Endpoint.from_json(raw)
        assert exc_info.value.field == "payload"
