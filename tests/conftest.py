from datetime import date

import pytest

from lockerscope.models.catalog import CatalogRecord
from lockerscope.services.catalog_database import get_catalog_index
from lockerscope.services.catalog_index import CatalogIndex
from lockerscope.services.exclusivity import ExclusiveAllowList, get_allow_list


@pytest.fixture(autouse=True)
def clear_cached_catalog():
    """Clear the cached catalog index and allow-list between tests.

    Tests point settings at temporary files; a cached index from an
    earlier test would otherwise leak into the next one.
    """
    get_catalog_index.cache_clear()
    get_allow_list.cache_clear()
    yield
    get_catalog_index.cache_clear()
    get_allow_list.cache_clear()


@pytest.fixture
def sample_records() -> list[CatalogRecord]:
    """Small catalog covering every resolution tier."""
    return [
        CatalogRecord(
            id="CID_013_Athena_Commando_F",
            category_code="AthenaCharacter",
            display_name="Recruit",
            image_refs=(("smallIcon", "https://img.test/cid_013/small.png"),),
        ),
        CatalogRecord(
            id="CID_028_Athena_Commando_F_Halloween",
            category_code="AthenaCharacter",
            display_name="Ghoul Trooper",
            rarity_code="epic",
            history_dates=(date(2017, 10, 26), date(2020, 10, 20)),
            image_refs=(("icon", "https://img.test/cid_028/icon.png"),),
        ),
        CatalogRecord(
            id="CID_400_Athena_Commando_F_Vintage",
            category_code="AthenaCharacter",
            display_name="Vintage",
            rarity_code="rare",
            history_dates=(date(2019, 5, 1),),
        ),
        CatalogRecord(
            id="CID_500_Athena_Commando_M_Legend",
            category_code="AthenaCharacter",
            display_name="Legend Skin",
            rarity_code="legendary",
            history_dates=(date(2021, 3, 1), date(2024, 1, 1)),
            image_refs=(("icon", "https://img.test/cid_500/icon.png"),),
        ),
        CatalogRecord(
            id="BID_004_BlackKnight",
            category_code="AthenaBackpack",
            display_name="Black Shield",
            rarity_code="legendary",
        ),
        CatalogRecord(
            id="BID-PetCarrier-Red-Dog",
            category_code="AthenaBackpack",
            display_name="Bonesy",
            rarity_code="epic",
        ),
        CatalogRecord(
            id="Umbrella_Default",
            category_code="AthenaGlider",
            display_name="The Umbrella",
            rarity_code="uncommon",
        ),
        CatalogRecord(
            id="Glider_Warthog",
            category_code="AthenaGlider",
            display_name="Warthog",
            rarity_code="rare",
        ),
        CatalogRecord(
            id="EID_Floss",
            category_code="AthenaDance",
            display_name="Floss",
            rarity_code="rare",
        ),
        CatalogRecord(
            id="Banner_001",
            category_code="BannerToken",
            display_name="Banner",
        ),
    ]


@pytest.fixture
def catalog_index(sample_records: list[CatalogRecord]) -> CatalogIndex:
    return CatalogIndex.build(sample_records)


@pytest.fixture
def allow_list() -> ExclusiveAllowList:
    """Allow-list with one id and one display name."""
    return ExclusiveAllowList.from_mapping(
        {
            "AthenaCharacter": {"ids": ["CID_013_Athena_Commando_F"], "names": []},
            "AthenaBackpack": {"ids": [], "names": ["Black Shield"]},
        }
    )


@pytest.fixture
def sample_catalog_payload() -> dict:
    """Catalog payload in the remote API envelope."""
    return {
        "status": 200,
        "data": [
            {
                "id": "CID_013_Athena_Commando_F",
                "name": "Recruit",
                "type": {"value": "outfit", "backendValue": "AthenaCharacter"},
                "images": {"smallIcon": "https://img.test/cid_013/small.png", "icon": None},
            },
            {
                "id": "CID_500_Athena_Commando_M_Legend",
                "name": "Legend Skin",
                "type": {"value": "outfit", "backendValue": "AthenaCharacter"},
                "rarity": {"value": "Legendary"},
                "shopHistory": ["2021-03-01T00:00:00Z", "2024-01-01T00:00:00Z"],
                "images": {
                    "icon": "https://img.test/cid_500/icon.png",
                    "lego": {"large": "https://img.test/cid_500/lego.png", "small": None},
                },
            },
            {
                "id": "Glider_Warthog",
                "name": "Warthog",
                "type": {"value": "glider", "backendValue": "AthenaGlider"},
                "rarity": {"value": "rare"},
            },
            {"name": "No id here"},
        ],
    }


@pytest.fixture
def sample_report_text() -> list[str]:
    """Two report pages with account details and item lines."""
    return [
        "Account Id: abc123\n"
        "Display Name: LockerFan\n"
        "Country: US\n"
        "AthenaCharacter: CID_013_Athena_Commando_F1\n"
        "AthenaCharacter: CID_028_Athena_Commando_F_Halloween [2017-11-02]\n"
        "AthenaCharacter: CID_500_Athena_Commando_M_Legend (2024-01-05)\n",
        "AthenaBackpack: BID_004_BlackKnight1\n"
        "AthenaDance: EID_Floss1\n"
        "AthenaDance: SPID_Spray1\n"
        "AthenaGlider: Umbrella_Season_31\n"
        "Communication Language: en\n",
    ]
