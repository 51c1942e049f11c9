from placesapi.core.normalize import city_key, compact_key, fold_name, normalize_email, normalize_user_name


def test_fold_name_strips_diacritics_and_case():
    assert fold_name("Zürich") == "zurich"
    assert fold_name("São Paulo") == "sao paulo"
    assert fold_name("") == ""
    assert fold_name(None) == ""


def test_compact_key_drops_whitespace():
    assert compact_key("North  Macedonia") == "northmacedonia"
    assert compact_key("Côte d'Ivoire") == "cote d'ivoire".replace(" ", "")


def test_city_key_collapses_whitespace():
    assert city_key("  New   York ") == "new york"
    assert city_key("Kraków") == city_key("krakow")


def test_account_normalization():
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"
    assert normalize_user_name("  Ana  María ") == "ana maria"
