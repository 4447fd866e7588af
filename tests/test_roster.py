import pytest

from api.models.updates import PlayerInput
from api.services.riot import RiotAccount, Summoner
from api.services.roster import display_name_from_riot_id, register_players

PUUID = "a" * 78


def test_display_name_drops_tag():
    assert display_name_from_riot_id("Faker#KR1") == "Faker"
    assert display_name_from_riot_id("NoTag") == "NoTag"
    assert display_name_from_riot_id("") == ""


def test_player_input_needs_exactly_one_identity():
    with pytest.raises(ValueError):
        PlayerInput(region="EUW")
    with pytest.raises(ValueError):
        PlayerInput(region="EUW", riot_id="Faker#KR1", summoner_name="Faker")
    with pytest.raises(ValueError):
        PlayerInput(region="EUW", riot_id="NoTagHere")
    assert PlayerInput(region="EUW", riot_id=" Faker#KR1 ").riot_id == "Faker#KR1"


async def test_riot_id_is_resolved_and_inserted(repo, riot):
    challenge = repo.add_challenge()
    riot.accounts[("Faker", "KR1")] = RiotAccount(puuid=PUUID, gameName="Faker", tagLine="KR1")
    riot.summoners[PUUID] = Summoner(puuid=PUUID, name="Faker", profileIconId=7)

    response = await register_players(
        repo, riot, challenge, [PlayerInput(region="KR", riot_id="Faker#KR1", team="T1")]
    )

    assert len(response.inserted) == 1
    assert response.skipped == [] and response.failed == []
    player = repo.players[0]
    assert (player.puuid, player.name, player.team, player.profile_icon_id) == (PUUID, "Faker#KR1", "T1", 7)
    assert response.inserted[0].id == player.id


async def test_unknown_identity_is_reported_as_failed(repo, riot):
    challenge = repo.add_challenge()

    response = await register_players(
        repo, riot, challenge,
        [
            PlayerInput(region="EUW", riot_id="Ghost#000"),
            PlayerInput(region="EUW", summoner_name="Nobody"),
        ],
    )

    assert [f.reason for f in response.failed] == ["Riot ID not found", "Summoner not found"]
    assert repo.players == []


async def test_riot_error_fails_only_that_entry(repo, riot):
    challenge = repo.add_challenge()
    riot.failing.add("Broken#EUW")
    riot.summoners[PUUID] = Summoner(puuid=PUUID, name="Fine")

    response = await register_players(
        repo, riot, challenge,
        [PlayerInput(region="EUW", riot_id="Broken#EUW"), PlayerInput(region="EUW", puuid=PUUID)],
    )

    assert len(response.failed) == 1
    assert "500" in response.failed[0].reason
    assert [p.name for p in repo.players] == ["Fine"]


async def test_existing_player_is_skipped(repo, riot):
    challenge = repo.add_challenge()
    existing = repo.add_player(challenge, "Fine", puuid=PUUID)

    response = await register_players(repo, riot, challenge, [PlayerInput(region="EUW", puuid=PUUID)])

    assert response.inserted == []
    assert response.skipped[0].reason == "duplicate"
    assert response.skipped[0].id == existing.id
    assert len(repo.players) == 1


async def test_deactivated_player_is_switched_back_on(repo, riot):
    challenge = repo.add_challenge()
    existing = repo.add_player(challenge, "Fine", puuid=PUUID, active=False)

    response = await register_players(repo, riot, challenge, [PlayerInput(region="EUW", puuid=PUUID)])

    assert response.inserted[0].reactivated is True
    assert response.inserted[0].id == existing.id
    assert repo.players[0].active is True
    assert len(repo.players) == 1


async def test_same_identity_twice_in_one_request(repo, riot):
    challenge = repo.add_challenge()

    response = await register_players(
        repo, riot, challenge,
        [PlayerInput(region="EUW", puuid=PUUID), PlayerInput(region="EUW", puuid=PUUID)],
    )

    assert len(response.inserted) == 1
    assert len(response.skipped) == 1
