"""
Submission and confirmation: digest handling, Bet object linking and the
mapping of chain failures onto typed errors.
"""
import pytest

from betting.confirmer import TransactionConfirmer, find_bet_object_id, parse_abort_code
from betting.exceptions import (
    ConfirmationTimeoutError,
    OnChainExecutionError,
    StaleObjectError,
    SubmissionError,
    SubmissionOutcomeUnknownError,
)
from clients.sui import SuiRpcError, SuiTimeoutError, SuiTransportError
from clients.wallet import SignedTransaction
from conftest import created_bet_response


@pytest.fixture
def confirmer(chain, sui):
    return TransactionConfirmer(chain, sui, timeout=2, poll_interval=0)


def _failed(digest, error):
    return {"digest": digest, "effects": {"status": {"status": "failure", "error": error}}}


async def test_missing_digest_is_a_submission_error(confirmer):
    with pytest.raises(SubmissionError, match="no confirmation digest"):
        await confirmer.confirm({"effects": {"status": {"status": "success"}}})


async def test_created_bet_in_response_skips_the_wait(confirmer, sui):
    confirmed = await confirmer.confirm(created_bet_response("0xdigest", "0xbet1"))

    assert confirmed.digest == "0xdigest"
    assert confirmed.bet_object_id == "0xbet1"
    assert confirmed.linked
    assert sui.called("wait_for_transaction") == []


async def test_falls_back_to_indexed_transaction(confirmer, sui):
    sui.transactions["0xdigest"] = created_bet_response("0xdigest", "0xbet9")

    confirmed = await confirmer.confirm({"digest": "0xdigest", "effects": {"status": {"status": "success"}}})

    assert confirmed.bet_object_id == "0xbet9"
    assert len(sui.called("wait_for_transaction")) == 1


async def test_success_without_bet_object_is_unlinked(confirmer, sui):
    sui.transactions["0xdigest"] = created_bet_response("0xdigest", object_id=None)

    confirmed = await confirmer.confirm({"digest": "0xdigest"})

    assert confirmed.digest == "0xdigest"
    assert confirmed.bet_object_id is None
    assert not confirmed.linked


async def test_wait_timeout_keeps_digest(confirmer, sui):
    sui.wait_error = SuiTimeoutError("0xdigest", 2)

    with pytest.raises(ConfirmationTimeoutError) as exc:
        await confirmer.confirm({"digest": "0xdigest"})
    assert exc.value.digest == "0xdigest"


async def test_abort_code_maps_to_reason(confirmer):
    error = 'MoveAbort(MoveLocation { module: ModuleId { address: 0xpkg, name: Identifier("betting") } }, 8) in command 1'

    with pytest.raises(OnChainExecutionError) as exc:
        await confirmer.confirm(_failed("0xfail", error))

    assert exc.value.digest == "0xfail"
    assert exc.value.abort_code == 8
    assert exc.value.reason == "Bet amount exceeds maximum allowed. Please reduce your stake."
    assert exc.value.chain_error == error


async def test_stale_object_failure_is_retryable(confirmer):
    with pytest.raises(StaleObjectError) as exc:
        await confirmer.confirm(_failed("0xstale", "Object 0xcoinA is not available for consumption"))
    assert exc.value.retryable
    assert exc.value.digest == "0xstale"


async def test_submit_classifies_node_errors(confirmer, sui):
    signed = SignedTransaction(tx_bytes="AA==", signatures=["sig"])

    sui.execute_error = SuiRpcError("Transaction is rejected as invalid: ObjectVersionUnavailableForConsumption")
    with pytest.raises(StaleObjectError):
        await confirmer.submit(signed)

    sui.execute_error = SuiRpcError("HTTP error: connection refused")
    with pytest.raises(SubmissionError):
        await confirmer.submit(signed)


def test_abort_code_by_name_and_bet_object_lookup(chain):
    assert parse_abort_code("MoveAbort in betting::EPlatformPaused") == 7
    assert parse_abort_code("InsufficientGas") is None

    response = created_bet_response("0xd", "0xbet7")
    assert find_bet_object_id(response, chain.bet_object_type) == "0xbet7"
    assert find_bet_object_id({"digest": "0xd"}, chain.bet_object_type) is None


async def test_transport_failure_on_submit_leaves_outcome_unknown(confirmer, sui):
    sui.execute_error = SuiTransportError("sui_executeTransactionBlock failed: ReadTimeout")

    with pytest.raises(SubmissionOutcomeUnknownError, match="run reconcile") as exc:
        await confirmer.submit(SignedTransaction(tx_bytes="AA==", signatures=["sig"]))
    assert not exc.value.retryable


def test_bet_from_another_package_is_not_linked(chain):
    response = {
        "digest": "0xd",
        "objectChanges": [
            {"type": "created", "objectType": "0xother::betting::Bet", "objectId": "0xforeign"},
        ],
    }
    assert find_bet_object_id(response, chain.bet_object_type) is None
