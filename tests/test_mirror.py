"""
Mirror writes: idempotency by digest, chain verification and status rules.
"""
import pytest

from betting.exceptions import (
    BetValidationError,
    InvalidStatusTransitionError,
    MirrorMismatchError,
    MirrorWriteError,
)
from betting.mirror import BetMirrorWriter
from betting.onchain import BetChainReader
from betting.parlay import ParlayLeg
from conftest import WALLET, bet_object


@pytest.fixture
def writer(db, chain, sui):
    return BetMirrorWriter(db, reader=BetChainReader(chain, sui))


def _bet(**overrides):
    values = dict(
        wallet_address=WALLET,
        event_id="evt-42",
        market_id="winner",
        prediction="home",
        stake=2,
        odds=3.25,
        tx_hash="0xdigest",
        bet_object_id="0xbet1",
    )
    values.update(overrides)
    return values


async def test_confirmed_bet_is_mirrored_once(writer, sui, fake_supabase):
    sui.objects["0xbet1"] = bet_object("0xbet1", stake_mist=2_000_000_000, odds_bps=325)

    first = await writer.record_bet(**_bet())
    second = await writer.record_bet(**_bet())

    assert not first.duplicate
    assert second.duplicate
    assert second.row["id"] == first.row["id"]
    rows = fake_supabase.tables["bets"]
    assert len(rows) == 1
    assert rows[0]["status"] == "pending"
    assert rows[0]["wallet_address"] == WALLET.lower()
    assert rows[0]["bet_amount"] == 2.0
    assert rows[0]["odds"] == 3.25
    assert rows[0]["potential_payout"] == 6.5


async def test_concurrent_insert_for_same_digest_returns_existing(db, fake_supabase):
    writer = BetMirrorWriter(db)
    await writer.record_bet(**_bet(bet_object_id=None))

    # Pre-insert lookup misses, the unique index rejects the insert
    fake_supabase.skip_selects["bets"] = 1
    record = await writer.record_bet(**_bet(bet_object_id=None))

    assert record.duplicate
    assert len(fake_supabase.tables["bets"]) == 1


async def test_stake_mismatch_with_chain_rejected(writer, sui, fake_supabase):
    sui.objects["0xbet1"] = bet_object("0xbet1", stake_mist=1_000_000_000, odds_bps=325)

    with pytest.raises(MirrorMismatchError) as exc:
        await writer.record_bet(**_bet())

    assert exc.value.field == "stake"
    assert "bets" not in fake_supabase.tables


async def test_bettor_mismatch_with_chain_rejected(writer, sui):
    sui.objects["0xbet1"] = bet_object("0xbet1", stake_mist=2_000_000_000, odds_bps=325, bettor="0xother")

    with pytest.raises(MirrorMismatchError) as exc:
        await writer.record_bet(**_bet())
    assert exc.value.field == "bettor"


async def test_unreadable_chain_does_not_block_write(writer, fake_supabase):
    record = await writer.record_bet(**_bet(bet_object_id="0xmissing"))

    assert not record.duplicate
    assert fake_supabase.tables["bets"][0]["bet_object_id"] == "0xmissing"


@pytest.mark.parametrize("overrides", [
    {"tx_hash": ""},
    {"stake": 101},
    {"stake": 0},
    {"odds": 1.0},
    {"currency": "DOGE"},
])
async def test_server_side_validation(writer, overrides):
    with pytest.raises(BetValidationError):
        await writer.record_bet(**_bet(**overrides))


async def test_database_failure_is_a_mirror_write_error(db, fake_supabase):
    fake_supabase.fail_tables.add("bets")
    with pytest.raises(MirrorWriteError) as exc:
        await BetMirrorWriter(db).record_bet(**_bet())
    assert exc.value.tx_hash == "0xdigest"


async def test_status_moves_out_of_pending_once(db):
    record = await BetMirrorWriter(db).record_bet(**_bet())
    bet_id = record.row["id"]

    won = await db.update_bet_status(bet_id, "won", settled_at="2026-01-01T00:00:00+00:00")
    assert won["status"] == "won"
    assert won["settled_at"] == "2026-01-01T00:00:00+00:00"

    # same status again is a no-op, a different one is refused
    assert (await db.update_bet_status(bet_id, "won"))["status"] == "won"
    with pytest.raises(InvalidStatusTransitionError):
        await db.update_bet_status(bet_id, "lost")
    with pytest.raises(InvalidStatusTransitionError):
        await db.update_bet_status(bet_id, "settled")


async def test_parlay_mirrored_with_legs(db, fake_supabase):
    legs = [
        ParlayLeg("e1", "match_winner", "home", 1.8, event_name="A vs B"),
        ParlayLeg("e2", "match_winner", "draw", 2.1, event_name="C vs D"),
        ParlayLeg("e3", "match_winner", "away", 1.5, event_name="E vs F"),
    ]
    writer = BetMirrorWriter(db)

    record = await writer.record_parlay(WALLET, legs, stake=10, tx_hash="0xparlay")
    again = await writer.record_parlay(WALLET, legs, stake=10, tx_hash="0xparlay")

    assert record.row["total_odds"] == 5.67
    assert record.row["potential_payout"] == 56.7
    assert [leg["outcome_id"] for leg in record.row["legs"]] == ["home", "draw", "away"]
    assert all(leg["parlay_id"] == record.row["id"] for leg in record.row["legs"])
    assert again.duplicate
    assert len(fake_supabase.tables["parlays"]) == 1
    assert len(fake_supabase.tables["bet_legs"]) == 3


async def test_single_bet_odds_floored_to_basis_points(db):
    record = await BetMirrorWriter(db).record_bet(**_bet(odds=2.505))

    assert record.row["odds"] == 2.5
    assert record.row["potential_payout"] == 5.0


async def test_parlay_retry_restores_legs_lost_to_a_failed_write(db, fake_supabase):
    legs = [
        ParlayLeg("e1", "match_winner", "home", 1.8),
        ParlayLeg("e2", "match_winner", "away", 2.1),
    ]
    writer = BetMirrorWriter(db)

    fake_supabase.fail_tables.add("bet_legs")
    with pytest.raises(MirrorWriteError):
        await writer.record_parlay(WALLET, legs, stake=5, tx_hash="0xparlay")
    assert len(fake_supabase.tables["parlays"]) == 1

    fake_supabase.fail_tables.discard("bet_legs")
    record = await writer.record_parlay(WALLET, legs, stake=5, tx_hash="0xparlay")

    assert record.duplicate
    assert [leg["outcome_id"] for leg in record.row["legs"]] == ["home", "away"]
    assert len(fake_supabase.tables["bet_legs"]) == 2
    assert len(fake_supabase.tables["parlays"]) == 1
