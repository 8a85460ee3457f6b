import pytest

from chaintest import ExpectedResponse, GatePolicy, ScenarioDefinitionError, should_continue


def test_success_descriptor_continues():
    expected = ExpectedResponse.from_fixture({"status": 200, "body": {"status": "succeeded"}})
    assert should_continue(expected) is True


def test_expected_error_body_halts():
    expected = ExpectedResponse.from_fixture({"status": 400, "body": {"error_code": "card_declined"}})
    assert should_continue(expected) is False


def test_explicit_flag_wins_over_inference():
    halting = ExpectedResponse.from_fixture({"status": 200, "body": {"status": "processing"}, "trigger_skip": True})
    going_on = ExpectedResponse.from_fixture({"status": 400, "body": {"error": {"type": "x"}}, "trigger_skip": False})
    assert should_continue(halting) is False
    assert should_continue(going_on) is True


def test_inference_is_configurable():
    expected = ExpectedResponse.from_fixture({"body": {"error": "boom", "reason": "x"}})
    assert should_continue(expected, GatePolicy(infer_from_body=False)) is True
    assert should_continue(expected, GatePolicy.from_config({"error_keys": "reason"})) is False
    assert should_continue(expected, GatePolicy.from_config({"error_keys": ["unused"]})) is True


def test_missing_descriptor_halts():
    assert should_continue(None) is False


def test_string_flags_from_fixture_files_are_parsed():
    expected = ExpectedResponse.from_fixture({"status": "400", "body": {"error": "x"}, "trigger_skip": "false",
                                              "structural": "false"})
    assert expected.trigger_skip is False
    assert expected.structural is False
    assert expected.status == 400
    assert should_continue(expected) is True
    assert ExpectedResponse.from_fixture({"trigger_skip": "yes"}).trigger_skip is True


@pytest.mark.parametrize("status", ["abc", [200], {"code": 200}])
def test_non_integer_status_is_a_definition_error(status):
    with pytest.raises(ScenarioDefinitionError, match="status must be an integer"):
        ExpectedResponse.from_fixture({"status": status})
