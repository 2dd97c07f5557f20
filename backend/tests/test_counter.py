"""Tests for the demo counter service and its endpoints."""
import pytest

from chat_relay.counter.service import CounterService, CounterUnderflowError


class TestCounterService:
    def test_starts_at_zero(self):
        assert CounterService().value == 0

    def test_increment_and_decrement(self):
        counter = CounterService()
        assert counter.increment() == 1
        assert counter.increment() == 2
        assert counter.decrement() == 1

    def test_decrement_at_zero_raises(self):
        with pytest.raises(CounterUnderflowError):
            CounterService().decrement()

    def test_negative_initial_rejected(self):
        with pytest.raises(ValueError):
            CounterService(initial=-1)


class TestCounterEndpoints:
    def test_inc_dec_and_read(self, api_client):
        assert api_client.post("/count/inc").text == "incremented"
        assert api_client.post("/count/inc").text == "incremented"
        assert api_client.post("/count/dec").text == "decremented"
        assert api_client.get("/count/").text == "1"

    def test_dec_below_zero_conflicts(self, api_client):
        response = api_client.post("/count/dec")
        assert response.status_code == 409
        assert api_client.get("/count/").text == "0"
