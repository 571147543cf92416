"""
Shared fixtures: synthetic Motorsport Manager saves

The texts built here follow the layout of real saves (compact JSON, the
player team near the top, people in a big array with their contract
nested inside) but are small enough to reason about byte by byte.
"""

import json

import pytest

from mm_save_fixer.container import build_container

TEAM_ID = '7'
RIVAL_TEAM_ID = '8'

DEFAULT_DRIVERS = [
    ('Lewis', 'Hamilton', 0),
    ('Valtteri', 'Bottas', 1),
    ('George', 'Russell', -1),
]


def js(value) -> str:
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


def driver_json(person_id, first, last, car_id, team_id=TEAM_ID, layout=0) -> str:
    """
    One person object with a contract for team_id

    The layouts put the driver fields on different sides of the contract
    so both directions of the sibling scan are needed.
    """
    contract = f'"contract":{{"mEmployeerTeam":{{"$ref":"{team_id}"}},"mWage":1200,"mEnd":{{"y":2020}}}}'
    car = f'"mCarID":{car_id}'
    first_name = f'"mFirstName":{js(first)}'
    last_name = f'"mLastName":{js(last)}'
    stats = '"mStats":[1,2,{"note":"}]{["}]'

    if layout == 0:
        fields = [f'"$id":"{person_id}"', first_name, last_name, contract, car, stats]
    elif layout == 1:
        fields = [f'"$id":"{person_id}"', car, stats, contract, last_name, first_name]
    else:
        fields = [f'"$id":"{person_id}"', contract, stats, first_name, car, last_name]
    return '{' + ','.join(fields) + '}'


def build_data_text(drivers=None, team_id=TEAM_ID, extra_people=()) -> bytes:
    if drivers is None:
        drivers = DEFAULT_DRIVERS

    people = []
    for i, (first, last, car_id) in enumerate(drivers):
        people.append(driver_json(100 + i, first, last, car_id, team_id, layout=i % 3))

    # A mechanic: contract with the player team but no mCarID
    people.append(
        f'{{"$id":"200","mFirstName":"Pete","mLastName":"Bonnington",'
        f'"contract":{{"mWage":900,"mEmployeerTeam":{{"$ref":"{team_id}"}}}}}}'
    )
    # A rival driver
    people.append(driver_json(300, 'Max', 'Verstappen', 0, RIVAL_TEAM_ID))
    # A driver who used to race for the player team
    people.append(
        f'{{"$id":"301","mFirstName":"Sergio","mLastName":"Perez","mCarID":1,'
        f'"contract":{{"mEmployeerTeam":{{"$ref":"{RIVAL_TEAM_ID}"}}}},'
        f'"mPreviousContract":{{"mEmployeerTeam":{{"$ref":"{team_id}"}}}}}}'
    )
    people.extend(extra_people)

    text = (
        '{"mVersion":3,'
        f'"mPlayerTeam":{{"mName":"Team \\"Silver\\"","$id":"{team_id}","mDrivers":[{{"$ref":"100"}}]}},'
        '"mPeople":[' + ','.join(people) + '],'
        f'"mTeams":[{{"$id":"{RIVAL_TEAM_ID}","mName":"Rival {{Racing}}"}}]}}'
    )
    return text.encode('utf-8')


def build_info_text(save_name='Career Save') -> bytes:
    text = (
        '{"saveInfo":{"mGameVersion":"1.4","name":' + js(save_name) + ','
        '"mTeamName":"Team \\"Silver\\"","mDate":{"y":2017,"m":3}},"mScreenshot":"AAAA"}'
    )
    return text.encode('utf-8')


@pytest.fixture
def make_data():
    """Factory for data texts"""
    return build_data_text


@pytest.fixture
def make_info():
    """Factory for info texts"""
    return build_info_text


@pytest.fixture
def make_save():
    """Factory for complete save file images"""
    def _make_save(info=None, data=None):
        return build_container(
            build_info_text() if info is None else info,
            build_data_text() if data is None else data,
        )
    return _make_save


@pytest.fixture
def data_text():
    return build_data_text()


@pytest.fixture
def info_text():
    return build_info_text()


@pytest.fixture
def save_path(tmp_path, make_save):
    """A valid save file on disk"""
    path = tmp_path / "career.sav"
    path.write_bytes(make_save())
    return path
