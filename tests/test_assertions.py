from chaintest import ExpectedResponse, utils
from chaintest.assertions import check_json_assertion, check_response


def test_check_response_all_pass():
    resp = utils.make_response_json({"status": "succeeded", "amount": 6500, "data": {"id": 123}}, status=200)
    expected = ExpectedResponse.from_fixture({
        "status": 200,
        "body": {"status": "succeeded", "amount": 6500},
        "json_assertions": [{"path": "$.data.id", "expected_value": 123}],
    })
    results = check_response(resp, expected)
    assert [r.name for r in results] == ["status", "body.status", "body.amount", "jsonpath $.data.id"]
    assert all(r.ok for r in results)


def test_every_check_runs_after_a_failure():
    resp = utils.make_response_json({"status": "failed", "amount": 6500}, status=400)
    expected = ExpectedResponse.from_fixture({
        "status": 200,
        "body": {"status": "succeeded", "amount": 6500, "currency": "USD"},
    })
    results = check_response(resp, expected)
    assert [r.ok for r in results] == [False, False, True, False]
    assert "Status Code mismatch" in results[0].message
    assert "missing" in results[3].message


def test_non_json_body_fails_body_checks_only():
    resp = utils.make_response_text("<html>oops</html>", status=200, headers={"Content-Type": "text/html"})
    expected = ExpectedResponse.from_fixture({"status": 200, "body": {"status": "succeeded"}})
    results = check_response(resp, expected)
    assert results[0].ok is True
    assert results[1].ok is False
    assert "not a JSON object" in results[1].message


def test_json_assertion_variants():
    body = {"items": [1, 2, 3], "meta": {"k": "v"}, "nothing": None}
    assert check_json_assertion(body, {"path": "$.items", "contains": 2}).ok
    assert check_json_assertion(body, {"path": "$.meta", "contains": "k"}).ok
    assert not check_json_assertion(body, {"path": "$.items", "contains": 9}).ok
    assert check_json_assertion(body, {"path": "$.missing", "exists": False}).ok
    assert not check_json_assertion(body, {"path": "$.nothing", "not_null": True}).ok
    assert check_json_assertion(body, {"path": "$.meta.k"}).ok
    assert not check_json_assertion(body, {"path": "$.meta.z"}).ok
    assert not check_json_assertion(body, {}).ok
    assert not check_json_assertion(None, {"path": "$.items"}).ok
