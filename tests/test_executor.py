import pytest
import requests

from chaintest import ExpectedResponse, HttpClient, Operation, StateStore, StepExecutor, TransportError, utils
from chaintest.errors import ScenarioDefinitionError

from conftest import FakeSession


def _executor(responses):
    session = FakeSession(responses)
    client = HttpClient("http://api.local/", api_key="snd_secret", publishable_key="pk_snd", session=session)
    return StepExecutor(client), session


def test_execute_merges_flags_and_writes_identifiers():
    executor, session = _executor([
        utils.make_response_json({"payment_id": "pay_1", "client_secret": "pay_1_secret", "status": "requires_payment_method"}),
    ])
    state = StateStore()
    expected = ExpectedResponse.from_fixture({"status": 200, "body": {"status": "requires_payment_method"}})

    outcome = executor.execute("create_payment", {"amount": 6500}, expected,
                               {"capture_method": "automatic"}, state)

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://api.local/payments"
    assert call["json"] == {"amount": 6500, "capture_method": "automatic"}
    assert call["headers"]["api-key"] == "snd_secret"
    assert outcome.ok
    assert state.get("payment_id") == "pay_1"
    assert state.get("client_secret") == "pay_1_secret"
    assert "mandate_id" not in state
    assert "mandate_id" in outcome.extraction.missing


def test_execute_substitutes_state_into_path_and_body():
    executor, session = _executor([utils.make_response_json({"status": "succeeded"})])
    state = StateStore({"payment_id": "pay_9", "client_secret": "pay_9_secret"})

    executor.execute("confirm_payment", {"client_secret": "$client_secret"},
                     ExpectedResponse.from_fixture({"status": 200}), {"confirm": True}, state)

    call = session.calls[0]
    assert call["url"] == "http://api.local/payments/pay_9/confirm"
    assert call["json"] == {"client_secret": "pay_9_secret", "confirm": True}
    assert call["headers"]["api-key"] == "pk_snd"


def test_get_operations_send_no_body():
    executor, session = _executor([utils.make_response_json({"payment_id": "pay_9"})])
    state = StateStore({"payment_id": "pay_9"})
    executor.execute("retrieve_payment", None, ExpectedResponse(), None, state)
    assert "json" not in session.calls[0]
    assert session.calls[0]["url"] == "http://api.local/payments/pay_9"


def test_assertion_failures_are_collected_not_raised():
    executor, _ = _executor([utils.make_response_json({"error": {"message": "nope"}}, status=422)])
    expected = ExpectedResponse.from_fixture({"status": 200, "body": {"status": "succeeded", "amount": 10}})
    outcome = executor.execute("create_payment", {}, expected, None, StateStore())
    assert not outcome.ok
    assert len(outcome.assertions) == 3
    assert all(not a.ok for a in outcome.assertions)


def test_transport_failure_raises_transport_error():
    executor, _ = _executor([requests.ConnectionError("connection refused")])
    with pytest.raises(TransportError) as exc:
        executor.execute("create_payment", {}, ExpectedResponse(), None, StateStore())
    assert exc.value.operation == "create_payment"


def test_unknown_operation_is_a_definition_error():
    executor, _ = _executor([])
    with pytest.raises(ScenarioDefinitionError):
        executor.execute("refund_everything", {}, ExpectedResponse(), None, StateStore())


def test_query_values_are_passed_as_params_and_encoded():
    executor, session = _executor([utils.make_response_json({"payment_methods": []})])
    state = StateStore({"client_secret": "pay_1&x=y"})

    outcome = executor.execute("list_payment_methods", None, ExpectedResponse(), None, state)

    call = session.calls[0]
    assert call["url"] == "http://api.local/account/payment_methods"
    assert call["params"] == {"client_secret": "pay_1&x=y"}
    assert call["headers"]["api-key"] == "pk_snd"
    assert outcome.request["params"] == {"client_secret": "pay_1&x=y"}
    prepared = requests.Request("GET", call["url"], params=call["params"]).prepare()
    assert prepared.url == "http://api.local/account/payment_methods?client_secret=pay_1%26x%3Dy"


def test_operations_from_scenario_files_accept_params():
    session = FakeSession([utils.make_response_json({"payment_id": "pay_2"})])
    op = Operation.from_dict("sync_again", {"path": "/payments/$payment_id", "params": {"force_sync": "true"}})
    client = HttpClient("http://api.local", api_key="snd_secret", session=session, operations={"sync_again": op})

    StepExecutor(client).execute("sync_again", None, ExpectedResponse(), None, StateStore({"payment_id": "pay_2"}))

    assert session.calls[0]["url"] == "http://api.local/payments/pay_2"
    assert session.calls[0]["params"] == {"force_sync": "true"}
    with pytest.raises(ScenarioDefinitionError, match="params"):
        Operation.from_dict("bad", {"path": "/x", "params": ["force_sync"]})
