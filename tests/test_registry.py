import os

import pytest

from chaintest import ConnectorProfileRegistry, ProfileLookupError

PROFILES = {
    "stripe": {
        "card_pm": {
            "PaymentIntent": {
                "Request": {"currency": "USD"},
                "Response": {"status": 200, "body": {"status": "requires_payment_method"}},
            },
            "Broken": {"Request": {}},
        }
    }
}


def test_resolve_returns_authored_pair():
    registry = ConnectorProfileRegistry.from_mapping(PROFILES)
    req, res = registry.resolve("stripe", "card_pm", "PaymentIntent")
    assert req == {"currency": "USD"}
    assert res == {"status": 200, "body": {"status": "requires_payment_method"}}


def test_resolve_returns_copies():
    registry = ConnectorProfileRegistry.from_mapping(PROFILES)
    req, _ = registry.resolve("stripe", "card_pm", "PaymentIntent")
    req["currency"] = "EUR"
    assert registry.resolve("stripe", "card_pm", "PaymentIntent")[0] == {"currency": "USD"}


@pytest.mark.parametrize("triple, fragment", [
    (("adyen", "card_pm", "PaymentIntent"), "Unknown connector 'adyen'"),
    (("stripe", "bank_redirect_pm", "PaymentIntent"), "no category 'bank_redirect_pm'"),
    (("stripe", "card_pm", "3DSManualCapture"), "no scenario '3DSManualCapture'"),
    (("stripe", "card_pm", "Broken"), "missing ['Response']"),
    ((None, "card_pm", "PaymentIntent"), "No connector selected"),
])
def test_resolve_unknown_raises_lookup_error(triple, fragment):
    registry = ConnectorProfileRegistry.from_mapping(PROFILES)
    for _ in range(2):
        with pytest.raises(LookupError) as exc:
            registry.resolve(*triple)
        assert isinstance(exc.value, ProfileLookupError)
        assert fragment in str(exc.value)


def test_from_directory_loads_yaml_and_json(data_dir):
    registry = ConnectorProfileRegistry.from_directory(os.path.join(data_dir, "connectors"))
    assert registry.connectors() == ["stripe", "wise"]
    _, res = registry.resolve("wise", "bank_transfer_pm", "AchPayout")
    assert res["fields"] == {"connector": "wise"}


def test_from_directory_missing_dir(tmp_path):
    with pytest.raises(ValueError):
        ConnectorProfileRegistry.from_directory(str(tmp_path / "nowhere"))
