"""
Unit tests for the ErthClient facade.
"""

import base64
import json
from unittest.mock import Mock

import pytest

from erth_sdk import ErthClient
from erth_sdk.core.cipher import MessageCipher
from erth_sdk.core import proto
from erth_sdk.events import EventType
from erth_sdk.models import ContractCall, EncryptedEnvelope, TxStatus


@pytest.fixture
def client(network_config, signer, mock_api):
    mock_api.get_tx.return_value = {
        "tx_response": {"code": 0, "txhash": "A" * 64, "height": "100", "raw_log": "[]"}
    }
    client = ErthClient(network_config, signer, api=mock_api)
    client.pipeline.cipher = Mock(wraps=client.cipher)
    yield client
    client.close()


def _encrypted_payloads(client):
    return [c.args[1] for c in client.pipeline.cipher.encrypt.call_args_list]


class TestClientConstruction:

    @pytest.mark.unit
    def test_from_config(self, tmp_path, signer):
        path = tmp_path / "network_config.json"
        path.write_text(json.dumps({"lcd_url": "https://lcd.file.test", "chain_id": "pulsar-3"}))

        client = ErthClient.from_config(str(path), signer)

        assert client.config.chain_id == "pulsar-3"
        assert client.api.base_url == "https://lcd.file.test"
        assert client.address == signer.address
        client.close()

    @pytest.mark.unit
    def test_address(self, client, signer):
        assert client.address.startswith("secret1")
        assert client.address == signer.address


class TestClientExecute:

    @pytest.mark.unit
    def test_execute_confirms(self, client, mock_api, contract_address):
        confirmed = []
        client.on(EventType.TX_CONFIRMED)(lambda e: confirmed.append(e.data["tx_hash"]))

        result = client.execute(contract_address, {"claim": {}}, code_hash="ab" * 32)

        assert result.status == TxStatus.CONFIRMED
        assert confirmed == ["A" * 64]
        assert _encrypted_payloads(client) == ['{"claim":{}}']
        mock_api.fetch_code_hash.assert_not_called()

    @pytest.mark.unit
    def test_execute_many_single_transaction(self, client, mock_api, contract_address, other_contract_address):
        client.execute_many([
            ContractCall(contract=contract_address, msg={"a": {}}),
            ContractCall(contract=other_contract_address, msg={"b": {}}, funds="10uscrt"),
        ])

        assert mock_api.broadcast.call_count == 1
        tx_bytes = mock_api.broadcast.call_args[0][0]
        body = proto.TxBody.FromString(proto.TxRaw.FromString(tx_bytes).body_bytes)
        assert len(body.messages) == 2

    @pytest.mark.unit
    def test_snip20_send(self, client, contract_address, other_contract_address):
        client.snip20_send(contract_address, other_contract_address, 500, msg={"stake": {}})

        payload = json.loads(_encrypted_payloads(client)[0])
        assert payload["send"]["recipient"] == other_contract_address
        assert payload["send"]["amount"] == "500"

    @pytest.mark.unit
    def test_submit_single_call(self, client, contract_address):
        handle = client.submit(ContractCall(contract=contract_address, msg={"a": {}}))

        assert handle.result(timeout=10).status == TxStatus.CONFIRMED
        assert handle.done()


class TestClientQuery:

    @pytest.mark.unit
    def test_snip20_balance_uses_own_address(self, client, mock_api, contract_address, test_seed):
        def query_contract(contract, envelope_bytes, cancel=None):
            nonce = EncryptedEnvelope.from_bytes(envelope_bytes).nonce
            answer = MessageCipher().encrypt(None, '{"balance":{"amount":"9"}}', test_seed, nonce=nonce)
            return base64.b64encode(answer.ciphertext).decode()

        mock_api.query_contract.side_effect = query_contract

        result = client.snip20_balance(contract_address, "vk", token_code_hash="ab" * 32)

        assert result == {"balance": {"amount": "9"}}
        assert json.loads(_encrypted_payloads(client)[0]) == {
            "balance": {"address": client.address, "key": "vk"}
        }

    @pytest.mark.unit
    def test_get_status(self, client):
        assert client.get_status("A" * 64) == TxStatus.CONFIRMED
