"""Tests for exclusivity classification and the curated allow-list."""

import json
from datetime import date
from pathlib import Path

import pytest

from lockerscope.config import settings
from lockerscope.models.catalog import CatalogRecord, Category
from lockerscope.services.exclusivity import (
    SEASONAL_WINDOW_END,
    SEASONAL_WINDOW_START,
    SHOP_ABSENCE_CUTOFF,
    ExclusiveAllowList,
    ExclusivityClassifier,
    get_allow_list,
    load_allow_list,
)

GHOUL_TOKEN = "CID-028-Athena-Commando-F-Halloween"


def _character(item_id: str, *dates: date, name: str | None = None) -> CatalogRecord:
    return CatalogRecord(
        id=item_id,
        category_code="AthenaCharacter",
        display_name=name,
        history_dates=tuple(dates),
    )


class TestExclusiveAllowList:
    def test_from_mapping_normalizes(self, allow_list: ExclusiveAllowList) -> None:
        """Ids are lower-cased, names normalized."""
        assert "cid_013_athena_commando_f" in allow_list.ids
        assert "blackshield" in allow_list.names

    def test_contains_token_forms(self, allow_list: ExclusiveAllowList) -> None:
        """Tokens match by id, hyphenated id, or normalized name."""
        assert allow_list.contains_token("CID_013_Athena_Commando_F")
        assert allow_list.contains_token("CID-013-Athena-Commando-F")
        assert allow_list.contains_token("Black Shield")
        assert not allow_list.contains_token("CID-014-Athena-Commando-M")

    def test_contains_record(self, allow_list: ExclusiveAllowList) -> None:
        """Records match by id or display name."""
        assert allow_list.contains_record(
            CatalogRecord(id="BID_999", category_code="AthenaBackpack", display_name="Black Shield")
        )
        assert not allow_list.contains_record(
            CatalogRecord(id="BID_999", category_code="AthenaBackpack")
        )

    def test_packaged_allow_list_loads(self) -> None:
        """The bundled data file loads and normalizes names."""
        allow_list = load_allow_list()
        assert "cid_095_athena_commando_m_founder" in allow_list
        assert "masterchief" in allow_list
        assert len(allow_list) > 50

    def test_custom_path_from_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """settings.allow_list_path overrides the packaged file."""
        path = tmp_path / "allow.json"
        path.write_text(json.dumps({"AthenaGlider": {"ids": ["Glider_X"]}}), encoding="utf-8")
        monkeypatch.setattr(settings, "allow_list_path", path)

        allow_list = get_allow_list()

        assert "glider_x" in allow_list
        assert len(allow_list) == 1

    def test_corrupted_file(self, tmp_path: Path) -> None:
        path = tmp_path / "allow.json"
        path.write_text("[", encoding="utf-8")
        with pytest.raises(ValueError, match="corrupted"):
            load_allow_list(path)


class TestSeasonalWindow:
    @pytest.mark.parametrize(
        "acquired",
        [SEASONAL_WINDOW_START, date(2017, 11, 2), SEASONAL_WINDOW_END],
    )
    def test_inside_window_is_exclusive(self, acquired: date) -> None:
        """Acquisition inside the window (inclusive) is exclusive."""
        classifier = ExclusivityClassifier(ExclusiveAllowList(), {GHOUL_TOKEN: acquired})
        assert classifier.classify(GHOUL_TOKEN, None, Category.CHARACTER)

    @pytest.mark.parametrize("acquired", [date(2017, 10, 25), date(2017, 12, 14), date(2020, 1, 1)])
    def test_outside_window_is_not(self, acquired: date) -> None:
        """Re-releases bought later are not exclusive."""
        classifier = ExclusivityClassifier(ExclusiveAllowList(), {GHOUL_TOKEN: acquired})
        assert not classifier.classify(GHOUL_TOKEN, None, Category.CHARACTER)

    def test_seasonal_rule_overrides_shop_absence(self) -> None:
        """Without a date the seasonal item is not exclusive, even if long out of the shop."""
        record = _character("CID_028_Athena_Commando_F_Halloween", date(2020, 10, 20))
        classifier = ExclusivityClassifier(ExclusiveAllowList())
        assert not classifier.classify(GHOUL_TOKEN, record, Category.CHARACTER)

    def test_family_marker_name(self) -> None:
        """Family names count as markers too."""
        classifier = ExclusivityClassifier(
            ExclusiveAllowList(), {"SkullTrooper-Style": date(2017, 11, 1)}
        )
        assert classifier.classify("SkullTrooper-Style", None, Category.CHARACTER)

    def test_dates_keyed_case_insensitively(self) -> None:
        classifier = ExclusivityClassifier(
            ExclusiveAllowList(), {GHOUL_TOKEN.lower(): date(2017, 11, 1)}
        )
        assert classifier.acquisition_date(GHOUL_TOKEN.upper()) == date(2017, 11, 1)
        assert classifier.classify(GHOUL_TOKEN, None, Category.CHARACTER)

    def test_marker_overrides_allow_list(self) -> None:
        """A listed seasonal character without a date is still not exclusive."""
        allow_list = ExclusiveAllowList(ids=frozenset({"cid_028_athena_commando_f_halloween"}))
        classifier = ExclusivityClassifier(allow_list)
        assert not classifier.classify(GHOUL_TOKEN, None, Category.CHARACTER)

    def test_window_only_applies_to_characters(self) -> None:
        """Other categories carrying a marker fall through to the allow-list."""
        listed = ExclusivityClassifier(
            ExclusiveAllowList(ids=frozenset({"cid_028_athena_commando_f_halloween"}))
        )
        assert listed.classify(GHOUL_TOKEN, None, Category.BACKPACK)

        dated = ExclusivityClassifier(ExclusiveAllowList(), {GHOUL_TOKEN: date(2017, 11, 1)})
        assert not dated.classify(GHOUL_TOKEN, None, Category.BACKPACK)


class TestShopAbsence:
    def test_last_seen_before_cutoff(self) -> None:
        """Long-absent characters are exclusive."""
        record = _character("CID_400", date(2019, 5, 1))
        classifier = ExclusivityClassifier(ExclusiveAllowList())
        assert classifier.classify("CID-400", record, Category.CHARACTER)

    def test_last_seen_on_cutoff(self) -> None:
        """The cutoff date itself counts."""
        record = _character("CID_400", SHOP_ABSENCE_CUTOFF)
        classifier = ExclusivityClassifier(ExclusiveAllowList())
        assert classifier.classify("CID-400", record, Category.CHARACTER)

    def test_recent_appearance_not_exclusive(self) -> None:
        """Only the latest appearance counts."""
        record = _character("CID_500", date(2019, 1, 1), date(2024, 1, 1))
        classifier = ExclusivityClassifier(ExclusiveAllowList())
        assert not classifier.classify("CID-500", record, Category.CHARACTER)

    def test_never_sold_falls_back_to_allow_list(self, allow_list: ExclusiveAllowList) -> None:
        """Items with no shop history need curation to be exclusive."""
        classifier = ExclusivityClassifier(allow_list)
        listed = _character("CID_013_Athena_Commando_F")
        unlisted = _character("CID_014_Athena_Commando_M")

        assert classifier.classify("CID-013-Athena-Commando-F", listed, Category.CHARACTER)
        assert not classifier.classify("CID-014-Athena-Commando-M", unlisted, Category.CHARACTER)

    def test_shop_rule_is_character_only(self) -> None:
        """An old backpack is not exclusive on shop history alone."""
        record = CatalogRecord(
            id="BID_1",
            category_code="AthenaBackpack",
            history_dates=(date(2018, 1, 1),),
        )
        classifier = ExclusivityClassifier(ExclusiveAllowList())
        assert not classifier.classify("BID-1", record, Category.BACKPACK)


class TestAllowListRule:
    def test_unresolved_token_in_allow_list(self, allow_list: ExclusiveAllowList) -> None:
        """Curated tokens are exclusive even when unresolved."""
        classifier = ExclusivityClassifier(allow_list)
        assert classifier.classify("CID_013_Athena_Commando_F", None, Category.CHARACTER)

    def test_record_name_in_allow_list(self, allow_list: ExclusiveAllowList) -> None:
        """A resolved record's display name can carry exclusivity."""
        record = CatalogRecord(
            id="BID_004_BlackKnight",
            category_code="AthenaBackpack",
            display_name="Black Shield",
        )
        classifier = ExclusivityClassifier(allow_list)
        assert classifier.classify("BID-004-BlackKnight", record, Category.BACKPACK)

    def test_not_listed(self, allow_list: ExclusiveAllowList) -> None:
        classifier = ExclusivityClassifier(allow_list)
        assert not classifier.classify("EID-Floss", None, Category.EMOTE)

    @pytest.mark.parametrize("token", ["", "   "])
    def test_empty_token_is_never_exclusive(
        self, allow_list: ExclusiveAllowList, token: str
    ) -> None:
        assert not ExclusivityClassifier(allow_list).classify(token, None, Category.CHARACTER)
